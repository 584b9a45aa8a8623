from pydantic import BaseModel, Field
from typing import Optional


class RequestContext(BaseModel):
    """
    Request metadata captured at redirect time.

    Copied out of the HTTP request so background work never touches the
    request object after the response is sent.
    """

    forwarded_for: Optional[str] = Field(None, description="Raw X-Forwarded-For header")
    client_host: Optional[str] = Field(None, description="Connection-level peer address")
    user_agent: Optional[str] = Field(None, description="User agent string")
    referrer: Optional[str] = Field(None, description="HTTP referer")

    model_config = {
        "json_schema_extra": {
            "example": {
                "forwarded_for": "203.0.113.7, 10.0.0.2",
                "client_host": "10.0.0.2",
                "user_agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) Chrome/120.0",
                "referrer": "https://twitter.com",
            }
        }
    }
