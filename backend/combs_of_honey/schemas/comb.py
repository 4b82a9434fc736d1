"""
Combs of Honey — Comb Response Schema
======================================

What:  Pydantic model for the comb JSON shape.
Who:   Returned by POST /combs, GET /combs and GET /combs/{comb_id}.

`honey` is never null in the JSON: an empty list stands in when the
children were not loaded.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from combs_of_honey.schemas.honey import HoneyResponse, as_utc


class CombResponse(BaseModel):
    id: int = Field(description="Comb identifier")
    created_at: datetime = Field(description="Creation timestamp (ISO 8601)")
    updated_at: datetime = Field(description="Last update timestamp (ISO 8601)")
    deleted_at: Optional[datetime] = Field(
        default=None,
        description="Soft-delete timestamp (null when live)",
    )
    honey: List[HoneyResponse] = Field(
        default_factory=list,
        description="Honey records of this comb (empty unless embedded)",
    )

    model_config = {
        "from_attributes": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
    }

    @field_validator("created_at", "updated_at", "deleted_at")
    @classmethod
    def timestamps_in_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)
