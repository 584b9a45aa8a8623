from pydantic import BaseModel, Field, ConfigDict
from typing import Optional
from datetime import datetime


class LinkCreate(BaseModel):
    # Validated by the allocator so bad URLs come back as invalid_input
    target_url: str = Field(..., description="The original URL to be shortened")
    custom_alias: Optional[str] = Field(
        None, description="Optional user-chosen code ([A-Za-z0-9-_]+)"
    )


class LinkResponse(BaseModel):
    """Response for a created or looked-up short link."""
    code: str
    short_url: str
    analytics_url: str
    target_url: str
    is_custom_alias: bool
    created_at: datetime
    click_count: int

    model_config = ConfigDict(from_attributes=True)
