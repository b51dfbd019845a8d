"""
Email verification endpoints.

POST /api/email/send-verification              — issue and email a code
POST /api/email/verify-code                    — check a submitted code
GET  /api/email/verification-status/{user_id}  — verification state for an account

Failures are raised by the service as AppError subclasses and rendered by
the global handler in errors.py.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from dependencies import get_verification_service
from schemas.dto.requests.email import SendVerificationRequest, VerifyCodeRequest
from schemas.dto.responses.common import ErrorResponse
from schemas.dto.responses.email import (
    SendVerificationResponse,
    VerificationStatusResponse,
    VerifyCodeResponse,
)
from services.verification_service import EmailVerificationService

router = APIRouter(prefix="/api/email", tags=["email-verification"])

_ERRORS = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    429: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


@router.post(
    "/send-verification",
    response_model=SendVerificationResponse,
    response_model_exclude_none=True,
    responses=_ERRORS,
)
async def send_verification(
    body: SendVerificationRequest,
    service: EmailVerificationService = Depends(get_verification_service),
) -> SendVerificationResponse:
    result = await service.issue_code(body.email, body.user_id, body.user_name)
    if result.already_verified:
        return SendVerificationResponse(
            success=True, message="Email already verified", is_verified=True
        )
    return SendVerificationResponse(success=True, message="Verification code sent")


@router.post("/verify-code", response_model=VerifyCodeResponse, responses=_ERRORS)
async def verify_code(
    body: VerifyCodeRequest,
    service: EmailVerificationService = Depends(get_verification_service),
) -> VerifyCodeResponse:
    await service.verify_code(body.email, body.code, body.user_id)
    return VerifyCodeResponse(success=True, message="Email verified")


@router.get(
    "/verification-status/{user_id}",
    response_model=VerificationStatusResponse,
    responses={404: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
)
async def verification_status(
    user_id: str,
    service: EmailVerificationService = Depends(get_verification_service),
) -> VerificationStatusResponse:
    status = await service.get_status(user_id)
    return VerificationStatusResponse(
        is_verified=status.is_verified,
        is_pending=status.is_pending,
        attempts_left=status.attempts_left,
        cooldown_until=status.cooldown_until,
    )
