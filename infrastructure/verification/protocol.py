"""VerificationStore protocol — the ledger depends on this, not on a backend."""

from typing import AsyncContextManager, Optional, Protocol

from schemas.models.verification import VerificationRecord


class VerificationStore(Protocol):
    async def get(self, identity: str) -> Optional[VerificationRecord]: ...

    async def set(self, record: VerificationRecord) -> None: ...

    async def delete(self, identity: str) -> None: ...

    async def identities(self) -> list[str]:
        """Snapshot of the identities currently held."""
        ...

    def lock(self, identity: str) -> AsyncContextManager[None]:
        """Serialize mutations of one identity; other identities never wait."""
        ...
