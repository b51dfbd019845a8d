"""
Request DTOs for email verification endpoints.

SendVerificationRequest — POST /api/email/send-verification
VerifyCodeRequest       — POST /api/email/verify-code

Both accept the camelCase keys (``userId``, ``userName``) sent by the web
client as well as snake_case.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class SendVerificationRequest(BaseModel):
    """Request body for POST /api/email/send-verification."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    email: EmailStr
    user_id: str = Field(alias="userId", min_length=1)
    # cosmetic only, used to greet the recipient
    user_name: Optional[str] = Field(default=None, alias="userName")


class VerifyCodeRequest(BaseModel):
    """Request body for POST /api/email/verify-code.

    ``code`` is compared verbatim, so it is deliberately not stripped.
    """

    model_config = ConfigDict(populate_by_name=True)

    email: EmailStr
    code: str = Field(min_length=1)
    user_id: str = Field(alias="userId", min_length=1)
