"""
Base model for MongoDB document models.

The raw ``_id`` (a BSON ObjectId) is exposed as a plain string ``id`` so the
rest of the service never has to import bson types.
"""

from __future__ import annotations

from typing import Any, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, field_validator


class MongoBaseModel(BaseModel):
    """
    Base for all document models.

    from_mongo() — converts a raw pymongo dict → model instance (returns None
                   gracefully when passed None)
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = Field(default=None, alias="_id")

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_object_id(cls, v: Any) -> Any:
        if isinstance(v, ObjectId):
            return str(v)
        return v

    @classmethod
    def from_mongo(cls, data: Optional[dict]) -> Optional["MongoBaseModel"]:
        """Build a model instance from a raw MongoDB document dict.

        Returns None when data is None (e.g. find_one returns None).
        Missing optional fields are filled with their defaults.
        """
        if data is None:
            return None
        return cls.model_validate(data)
