"""
Combs of Honey — Honey Request/Response Schemas
================================================

What:  Pydantic models for the honey JSON shape.
How:   FastAPI validates request bodies against HoneyCreate and serializes
       HoneyResponse by alias (camelCase) on the way out.

JSON shape:
    {
        "combId": 1,
        "type": "acacia",
        "createdAt": "2024-01-15T12:00:00Z",
        "updatedAt": "2024-01-15T12:00:00Z",
        "deletedAt": null,
        "visits": 3
    }
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite returns naive datetimes; every stored timestamp is UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class HoneyCreate(BaseModel):
    """
    What:  Body of POST /combs/{comb_id}/honey.

    `comb_id` is accepted for compatibility with clients that echo a full
    honey record back, but the path parameter always wins. Timestamps and
    other unknown fields are ignored.
    """
    type: str = Field(min_length=1, max_length=255, description="Honey variant within the comb")
    visits: int = Field(default=0, ge=0, description="Initial visit count")
    comb_id: Optional[int] = Field(
        default=None,
        description="Ignored; replaced by the comb id from the path",
    )

    model_config = {
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


class HoneyResponse(BaseModel):
    """
    What:  A stored honey record.
    Who:   Returned by create/get/list honey endpoints and embedded in
           CombResponse.honey.
    """
    comb_id: int = Field(description="Parent comb id")
    type: str = Field(description="Honey variant within the comb")
    created_at: datetime = Field(description="Creation timestamp (ISO 8601)")
    updated_at: datetime = Field(description="Last update timestamp (ISO 8601)")
    deleted_at: Optional[datetime] = Field(
        default=None,
        description="Soft-delete timestamp (null when live)",
    )
    visits: int = Field(description="Number of times this record has been read")

    model_config = {
        "from_attributes": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
    }

    @field_validator("created_at", "updated_at", "deleted_at")
    @classmethod
    def timestamps_in_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)
