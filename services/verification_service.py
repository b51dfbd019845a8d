"""
Email verification ledger.

Owns the lifecycle of one-time codes keyed by email address:

    NONE → PENDING → VERIFIED   (correct code, record deleted)
                   → EXPIRED    (validity window passed, record deleted)
                   → LOCKED     (attempt budget spent, record kept with cooldown)
    LOCKED → NONE  on the next issuance once the cooldown has passed

Every read-modify-write of one identity happens under that identity's store
lock; different identities never wait on each other. Expected outcomes
(expired, invalid code, lockout) are raised as typed AppError subclasses
carrying the data the client needs to render its state.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from config import VerificationSettings
from errors import (
    CodeExpiredError,
    InvalidCodeError,
    NotFoundError,
    RateLimitError,
    ServiceUnavailableError,
    TooManyAttemptsError,
)
from infrastructure.email.protocol import EmailProvider
from infrastructure.verification.protocol import VerificationStore
from repositories.user_repository import UserRepository
from schemas.models.verification import VerificationRecord
from shared.datetime_utils import hours_until, utc_now
from shared.generators import generate_otp_code
from shared.logging import get_logger, log_with_context
from shared.validators import normalize_email

log = get_logger(__name__)


@dataclass(frozen=True)
class IssueResult:
    already_verified: bool = False


@dataclass(frozen=True)
class VerificationStatus:
    is_verified: bool
    is_pending: bool
    attempts_left: int
    cooldown_until: Optional[datetime] = None


class EmailVerificationService:
    def __init__(
        self,
        store: VerificationStore,
        users: UserRepository,
        email_provider: EmailProvider,
        settings: Optional[VerificationSettings] = None,
        clock: Callable[[], datetime] = utc_now,
        code_generator: Callable[[int], str] = generate_otp_code,
    ) -> None:
        self._store = store
        self._users = users
        self._email = email_provider
        self._settings = settings or VerificationSettings()
        self._clock = clock
        self._generate_code = code_generator

    @property
    def max_attempts(self) -> int:
        return self._settings.max_attempts

    async def issue_code(
        self, identity: str, owner_id: str, display_name: Optional[str] = None
    ) -> IssueResult:
        """Create a fresh code for *identity* and email it.

        Raises NotFoundError for an unknown account, RateLimitError while a
        cooldown is active and ServiceUnavailableError when delivery fails.
        """
        identity = normalize_email(identity)
        user = await self._users.find_by_uid(owner_id)
        if user is None:
            raise NotFoundError("User not found")
        if user.email_verified:
            log.info("verification_skipped", owner_id=owner_id, reason="already_verified")
            return IssueResult(already_verified=True)

        async with self._store.lock(identity):
            now = self._clock()
            previous = await self._store.get(identity)
            if previous is not None and previous.in_cooldown(now):
                hours = hours_until(previous.cooldown_until, now)
                log.warning(
                    "verification_rate_limited",
                    identity=identity,
                    owner_id=owner_id,
                    cooldown_until=previous.cooldown_until.isoformat(),
                )
                raise RateLimitError(
                    f"Too many attempts. Try in {hours} hour{'s' if hours > 1 else ''}",
                    details={
                        "cooldown_until": previous.cooldown_until.isoformat(),
                        "hours_remaining": hours,
                    },
                )

            record = VerificationRecord(
                identity=identity,
                code=self._generate_code(self._settings.code_length),
                owner_id=owner_id,
                attempts=0,
                created_at=now,
                expires_at=now + timedelta(seconds=self._settings.code_ttl_seconds),
            )
            await self._store.set(record)

            try:
                sent = await self._email.send_verification_email(
                    identity, display_name, record.code
                )
            except Exception as e:
                log.error(
                    "verification_dispatch_error",
                    identity=identity,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                sent = False

            if not sent:
                # roll back so an undelivered code never counts as issued
                if previous is not None:
                    await self._store.set(previous)
                else:
                    await self._store.delete(identity)
                raise ServiceUnavailableError("Failed to send verification code")

        log.info(
            "verification_code_issued",
            identity=identity,
            owner_id=owner_id,
            expires_at=record.expires_at.isoformat(),
        )
        return IssueResult()

    async def verify_code(
        self, identity: str, submitted_code: str, owner_id: str
    ) -> None:
        """Check *submitted_code* against the pending record for *identity*.

        Returns normally on success; every failure is a typed AppError.
        """
        identity = normalize_email(identity)
        vlog = log_with_context(log, identity=identity, owner_id=owner_id)

        async with self._store.lock(identity):
            now = self._clock()
            record = await self._store.get(identity)
            if record is None:
                vlog.warning("verification_failed", reason="not_found")
                raise NotFoundError("No verification request found")

            if record.in_cooldown(now):
                vlog.warning("verification_failed", reason="cooldown_active")
                raise RateLimitError(
                    "Too many attempts. Try again later.",
                    details={
                        "cooldown_until": record.cooldown_until.isoformat(),
                        "attempts_left": 0,
                    },
                )

            if record.is_expired(now):
                await self._store.delete(identity)
                vlog.warning("verification_failed", reason="expired")
                raise CodeExpiredError("Code expired")

            record.attempts += 1

            if submitted_code != record.code:
                attempts_left = self.max_attempts - record.attempts
                if attempts_left <= 0:
                    record.cooldown_until = now + timedelta(
                        seconds=self._settings.cooldown_seconds
                    )
                    await self._store.set(record)
                    vlog.warning(
                        "verification_locked",
                        attempts=record.attempts,
                        cooldown_until=record.cooldown_until.isoformat(),
                    )
                    raise TooManyAttemptsError(
                        f"Too many attempts. Blocked for "
                        f"{hours_until(record.cooldown_until, now)} hours.",
                        details={
                            "cooldown_until": record.cooldown_until.isoformat(),
                            "attempts_left": 0,
                        },
                    )

                await self._store.set(record)
                vlog.warning(
                    "verification_failed",
                    reason="invalid_code",
                    attempts_left=attempts_left,
                )
                raise InvalidCodeError(
                    "Invalid code", details={"attempts_left": attempts_left}
                )

            if not await self._users.mark_email_verified(owner_id):
                vlog.warning("verification_owner_missing")
            await self._store.delete(identity)

        vlog.info("verification_succeeded")

    async def get_status(self, owner_id: str) -> VerificationStatus:
        user = await self._users.find_by_uid(owner_id)
        if user is None:
            raise NotFoundError("User not found")

        record = (
            await self._store.get(normalize_email(user.email)) if user.email else None
        )
        if record is None:
            return VerificationStatus(
                is_verified=user.email_verified,
                is_pending=False,
                attempts_left=self.max_attempts,
            )
        return VerificationStatus(
            is_verified=user.email_verified,
            is_pending=True,
            attempts_left=record.attempts_left(self.max_attempts),
            cooldown_until=record.cooldown_until,
        )

    async def sweep(self) -> int:
        """Delete expired records. Returns how many were removed.

        Works on a snapshot of identities and re-reads each one under its
        lock, so an entry removed meanwhile is simply skipped.
        """
        removed = 0
        for identity in await self._store.identities():
            async with self._store.lock(identity):
                now = self._clock()
                record = await self._store.get(identity)
                if record is None or not record.is_expired(now):
                    continue
                if self._settings.sweep_preserves_cooldown and record.in_cooldown(now):
                    continue
                await self._store.delete(identity)
                removed += 1

        if removed:
            log.info("verification_sweep_completed", removed=removed)
        return removed
