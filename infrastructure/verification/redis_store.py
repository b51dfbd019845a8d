"""Redis-backed verification ledger.

Stores VerificationRecord as JSON (not pickle) so entries are debuggable.
Each key carries a TTL reaching the later of expires_at and cooldown_until,
so Redis drops dead entries on its own and cooldowns survive restarts.
Per-identity serialization uses a Redis lock, which also covers several
app processes sharing one Redis.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import timedelta
from typing import AsyncIterator, Optional

import redis.asyncio as aioredis
from pydantic import ValidationError as PydanticValidationError
from redis.exceptions import LockError, RedisError

from errors import ServiceUnavailableError
from schemas.models.verification import VerificationRecord
from shared.datetime_utils import utc_now
from shared.logging import get_logger

log = get_logger(__name__)

_KEY_PREFIX = "email_verification:"
_LOCK_PREFIX = "email_verification_lock:"


class RedisVerificationStore:
    def __init__(
        self,
        redis_client: aioredis.Redis,
        lock_timeout: float = 30.0,
        blocking_timeout: float = 10.0,
    ) -> None:
        self._redis = redis_client
        self._lock_timeout = lock_timeout
        self._blocking_timeout = blocking_timeout

    def _key(self, identity: str) -> str:
        return f"{_KEY_PREFIX}{identity}"

    def _ttl_ms(self, record: VerificationRecord) -> int:
        deadline = record.expires_at
        if record.cooldown_until is not None and record.cooldown_until > deadline:
            deadline = record.cooldown_until
        remaining = (deadline - utc_now()) / timedelta(milliseconds=1)
        return max(1000, int(remaining))

    async def get(self, identity: str) -> Optional[VerificationRecord]:
        try:
            raw = await self._redis.get(self._key(identity))
        except RedisError as e:
            log.error("verification_store_get_error", identity=identity, error=str(e))
            raise ServiceUnavailableError("Verification store unavailable") from e
        if raw is None:
            return None
        try:
            return VerificationRecord.model_validate_json(raw)
        except PydanticValidationError as e:
            # unreadable entry; drop it so the identity can be re-issued
            log.error(
                "verification_store_corrupt_record", identity=identity, error=str(e)
            )
            await self.delete(identity)
            return None

    async def set(self, record: VerificationRecord) -> None:
        try:
            await self._redis.set(
                self._key(record.identity),
                record.model_dump_json(),
                px=self._ttl_ms(record),
            )
        except RedisError as e:
            log.error(
                "verification_store_set_error", identity=record.identity, error=str(e)
            )
            raise ServiceUnavailableError("Verification store unavailable") from e

    async def delete(self, identity: str) -> None:
        try:
            await self._redis.delete(self._key(identity))
        except RedisError as e:
            log.error(
                "verification_store_delete_error", identity=identity, error=str(e)
            )
            raise ServiceUnavailableError("Verification store unavailable") from e

    async def identities(self) -> list[str]:
        try:
            return [
                key[len(_KEY_PREFIX):]
                async for key in self._redis.scan_iter(match=f"{_KEY_PREFIX}*")
            ]
        except RedisError as e:
            log.error("verification_store_scan_error", error=str(e))
            raise ServiceUnavailableError("Verification store unavailable") from e

    @asynccontextmanager
    async def lock(self, identity: str) -> AsyncIterator[None]:
        lock = self._redis.lock(
            f"{_LOCK_PREFIX}{identity}",
            timeout=self._lock_timeout,
            blocking_timeout=self._blocking_timeout,
        )
        try:
            acquired = await lock.acquire()
        except RedisError as e:
            log.error("verification_lock_error", identity=identity, error=str(e))
            raise ServiceUnavailableError("Verification store unavailable") from e
        if not acquired:
            log.warning("verification_lock_timeout", identity=identity)
            raise ServiceUnavailableError("Verification store busy, try again")
        try:
            yield
        finally:
            try:
                await lock.release()
            except LockError as e:
                # lock outlived its timeout; another holder may own it now
                log.warning(
                    "verification_lock_release_failed", identity=identity, error=str(e)
                )
