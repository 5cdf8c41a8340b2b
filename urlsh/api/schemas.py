"""
API Request and Response Schemas

This module defines all Pydantic models for API requests and responses.
Separated from endpoints to keep concerns separated and enable reuse.

Design Principles:
- Request models: Define input validation
- Response models: Define output structure
- method is submitted as text and parsed by the generator so unknown
  values surface as a 400 with the generator's message
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from urlsh.core.validators import MAX_SHORT_CODE_LENGTH
from urlsh.gen.shortener import Method

ALIAS_PATTERN = r'^[0-9A-Za-z_-]*$'


class ShortenRequest(BaseModel):
    """Request model for URL shortening endpoint."""
    url: str = Field(..., min_length=1, description="The long URL to shorten")
    method: str = Field(
        default=Method.RANDOM.value,
        description="Generation method: CUSTOM, RANDOM, HASH or SECURE"
    )
    custom_alias: Optional[str] = Field(
        default=None,
        max_length=MAX_SHORT_CODE_LENGTH,
        pattern=ALIAS_PATTERN,
        description="Short code to use with the CUSTOM method"
    )
    utm_source: Optional[str] = Field(default=None, max_length=255)
    utm_medium: Optional[str] = Field(default=None, max_length=255)
    utm_campaign: Optional[str] = Field(default=None, max_length=255)
    utm_term: Optional[str] = Field(default=None, max_length=255)
    utm_content: Optional[str] = Field(default=None, max_length=255)

    def utm_params(self) -> dict:
        return {
            "utm_source": self.utm_source,
            "utm_medium": self.utm_medium,
            "utm_campaign": self.utm_campaign,
            "utm_term": self.utm_term,
            "utm_content": self.utm_content,
        }


class ShortenResponse(BaseModel):
    """Response model for URL shortening endpoint."""
    short_code: str = Field(..., description="The generated short code")
    short_url: str = Field(..., description="The complete short URL")
    original_url: str = Field(..., description="The original long URL")
    method: Method
    expiration: Optional[datetime] = None


class StatsResponse(BaseModel):
    """Response model for statistics, find and increment endpoints."""
    iid: uuid.UUID
    original_url: str
    short_code: str
    short_url: str
    method: Method
    redirect_count: int
    created_at: datetime
    last_accessed: Optional[datetime] = None
    last_modified: datetime
    expiration: Optional[datetime] = None
    utm_source: Optional[str] = None
    utm_medium: Optional[str] = None
    utm_campaign: Optional[str] = None
    utm_term: Optional[str] = None
    utm_content: Optional[str] = None


class AccessLogResponse(BaseModel):
    """A single recorded access."""
    model_config = ConfigDict(from_attributes=True)

    iid: uuid.UUID
    accessed_at: datetime
    user_agent: Optional[str] = None
    ip_address: str


class TopUserAgentsResponse(BaseModel):
    short_code: str
    user_agents: List[str]


class UniqueIPsResponse(BaseModel):
    short_code: str
    ip_addresses: List[str]
