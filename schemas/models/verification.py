"""
Verification record model.

One record per recipient identity (email address) lives in the verification
ledger. The plain code is kept because the ledger is the only holder of the
secret and compares it by exact string equality.

cooldown_until is None until the attempt budget is exhausted; from then on
the record blocks both re-issuance and verification until it passes.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class VerificationRecord(BaseModel):
    """A pending one-time code for a single identity."""

    model_config = ConfigDict(validate_assignment=True)

    identity: str
    code: str
    owner_id: str
    attempts: int = Field(default=0, ge=0)
    created_at: datetime
    expires_at: datetime
    cooldown_until: Optional[datetime] = None

    @model_validator(mode="after")
    def _expiry_after_creation(self) -> "VerificationRecord":
        if self.expires_at <= self.created_at:
            raise ValueError("expires_at must be after created_at")
        return self

    def is_expired(self, now: datetime) -> bool:
        return now > self.expires_at

    def in_cooldown(self, now: datetime) -> bool:
        return self.cooldown_until is not None and now < self.cooldown_until

    def attempts_left(self, max_attempts: int) -> int:
        return max(0, max_attempts - self.attempts)
