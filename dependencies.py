"""
FastAPI dependency providers.

All injectable dependencies are defined here as plain functions used with
FastAPI's Depends() system. Instances live on app.state, created in the
lifespan of app.create_app().
"""

from __future__ import annotations

from fastapi import Request

from services.verification_service import EmailVerificationService


def get_verification_service(request: Request) -> EmailVerificationService:
    """Return the process-wide EmailVerificationService."""
    return request.app.state.verification_service
