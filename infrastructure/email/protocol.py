"""EmailProvider protocol — the ledger depends on this, not the concrete implementation."""

from typing import Optional, Protocol


class EmailProvider(Protocol):
    async def send_verification_email(
        self, email: str, user_name: Optional[str], otp_code: str
    ) -> bool:
        """Deliver *otp_code* to *email*. Returns False instead of raising."""
        ...
