"""
User document model.

Maps to the `users` MongoDB collection. The collection is owned by the
profile service and stores camelCase keys; only the fields the verification
flow reads are modelled here, everything else is ignored.
"""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from schemas.models.base import MongoBaseModel


class UserDoc(MongoBaseModel):
    """Document model for the `users` collection."""

    uid: str
    email: Optional[str] = None
    email_verified: bool = Field(default=False, alias="emailVerified")
    display_name: Optional[str] = Field(default=None, alias="displayName")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")
