"""
Data models for geo lookup results.
"""

from pydantic import BaseModel, Field
from typing import Optional


class GeoLocation(BaseModel):
    """Best-effort location for an IP address. Any field may be missing."""

    country: Optional[str] = Field(None, description="Country name (or code, per provider)")
    region: Optional[str] = Field(None, description="Region / state")
    city: Optional[str] = Field(None, description="City")

    def is_empty(self) -> bool:
        return not (self.country or self.region or self.city)

    model_config = {
        "json_schema_extra": {
            "example": {"country": "Germany", "region": "Hesse", "city": "Frankfurt am Main"}
        }
    }
