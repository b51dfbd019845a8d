"""
Account store used by the verification flow.

Reads users by their external ``uid`` and flips ``emailVerified``. Driver
faults are logged and surfaced as ServiceUnavailableError so callers never
see pymongo internals.
"""

from __future__ import annotations

from typing import Optional

from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import PyMongoError

from errors import ServiceUnavailableError
from schemas.models.user import UserDoc
from shared.datetime_utils import utc_now
from shared.logging import get_logger

log = get_logger(__name__)


class UserRepository:
    def __init__(self, collection: AsyncCollection) -> None:
        self._col = collection

    async def find_by_uid(self, uid: str) -> Optional[UserDoc]:
        try:
            doc = await self._col.find_one({"uid": uid})
        except PyMongoError as e:
            log.error(
                "user_lookup_failed",
                owner_id=uid,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise ServiceUnavailableError("Account store unavailable") from e
        return UserDoc.from_mongo(doc)

    async def mark_email_verified(self, uid: str) -> bool:
        """Set emailVerified on the account. Returns False if no account matched."""
        try:
            result = await self._col.update_one(
                {"uid": uid},
                {
                    "$set": {
                        "emailVerified": True,
                        "updatedAt": utc_now().isoformat(),
                    }
                },
            )
        except PyMongoError as e:
            log.error(
                "user_mark_verified_failed",
                owner_id=uid,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise ServiceUnavailableError("Account store unavailable") from e
        return result.matched_count > 0
