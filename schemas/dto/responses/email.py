"""
Response DTOs for email verification endpoints.

SendVerificationResponse   — POST /api/email/send-verification  (200)
VerifyCodeResponse         — POST /api/email/verify-code  (200)
VerificationStatusResponse — GET /api/email/verification-status/{user_id}  (200)
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class SendVerificationResponse(BaseModel):
    """Response body for POST /api/email/send-verification (200).

    ``is_verified`` is only present when the account was already verified
    (route handlers use exclude_none=True).
    """

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: str
    is_verified: Optional[bool] = None


class VerifyCodeResponse(BaseModel):
    """Response body for POST /api/email/verify-code (200)."""

    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: str


class VerificationStatusResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    is_verified: bool
    is_pending: bool
    attempts_left: int
    cooldown_until: Optional[datetime] = None
