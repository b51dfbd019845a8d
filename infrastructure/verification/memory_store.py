"""In-process verification ledger backed by a dict.

Nothing survives a restart: pending codes and active cooldowns are forgotten.
Records are copied on the way in and out so a caller's in-flight changes only
land when it calls set().
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from schemas.models.verification import VerificationRecord


class _LockEntry:
    __slots__ = ("lock", "users")

    def __init__(self) -> None:
        self.lock = asyncio.Lock()
        self.users = 0


class InMemoryVerificationStore:
    def __init__(self) -> None:
        self._records: dict[str, VerificationRecord] = {}
        self._locks: dict[str, _LockEntry] = {}

    def __len__(self) -> int:
        return len(self._records)

    async def get(self, identity: str) -> Optional[VerificationRecord]:
        record = self._records.get(identity)
        return record.model_copy() if record is not None else None

    async def set(self, record: VerificationRecord) -> None:
        self._records[record.identity] = record.model_copy()

    async def delete(self, identity: str) -> None:
        self._records.pop(identity, None)

    async def identities(self) -> list[str]:
        return list(self._records)

    @asynccontextmanager
    async def lock(self, identity: str) -> AsyncIterator[None]:
        entry = self._locks.get(identity)
        if entry is None:
            entry = self._locks[identity] = _LockEntry()
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            # drop the lock once nobody holds or waits on it
            if entry.users == 0:
                self._locks.pop(identity, None)
