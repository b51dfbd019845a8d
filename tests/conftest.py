"""
Shared test doubles for the verification flow.

FakeClock     — controllable "now" injected into the service
FakeUsers     — in-memory stand-in for UserRepository
FakeEmail     — records sent codes, can be told to fail
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import pytest

from config import VerificationSettings
from infrastructure.verification.memory_store import InMemoryVerificationStore
from schemas.models.user import UserDoc
from services.verification_service import EmailVerificationService

START = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class FakeUsers:
    def __init__(self) -> None:
        self.users: dict[str, UserDoc] = {}
        self.verified_calls: list[str] = []

    def add(self, uid: str, email: str, verified: bool = False) -> UserDoc:
        user = UserDoc(uid=uid, email=email, emailVerified=verified)
        self.users[uid] = user
        return user

    async def find_by_uid(self, uid: str) -> Optional[UserDoc]:
        return self.users.get(uid)

    async def mark_email_verified(self, uid: str) -> bool:
        self.verified_calls.append(uid)
        user = self.users.get(uid)
        if user is None:
            return False
        user.email_verified = True
        return True


class FakeEmail:
    def __init__(self, result: bool = True) -> None:
        self.result = result
        self.sent: list[tuple[str, Optional[str], str]] = []

    async def send_verification_email(
        self, email: str, user_name: Optional[str], otp_code: str
    ) -> bool:
        self.sent.append((email, user_name, otp_code))
        return self.result


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def users():
    fake = FakeUsers()
    fake.add("u1", "a@x.com")
    return fake


@pytest.fixture
def mailer():
    return FakeEmail()


@pytest.fixture
def store():
    return InMemoryVerificationStore()


@pytest.fixture
def verification_settings(monkeypatch):
    for var in (
        "VERIFICATION_MAX_ATTEMPTS",
        "VERIFICATION_CODE_LENGTH",
        "VERIFICATION_CODE_TTL_SECONDS",
        "VERIFICATION_COOLDOWN_SECONDS",
        "VERIFICATION_SWEEP_INTERVAL_SECONDS",
        "VERIFICATION_SWEEP_PRESERVES_COOLDOWN",
    ):
        monkeypatch.delenv(var, raising=False)
    return VerificationSettings(_env_file=None)


@pytest.fixture
def service(store, users, mailer, clock, verification_settings):
    return EmailVerificationService(
        store=store,
        users=users,
        email_provider=mailer,
        settings=verification_settings,
        clock=clock,
        code_generator=lambda length: "042517",
    )
