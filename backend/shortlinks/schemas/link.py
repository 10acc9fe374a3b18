from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class LinkCreate(BaseModel):
    """Schema for creating a new short link"""
    original_url: str = Field(..., description="Original URL to shorten", min_length=1, max_length=2048)
    custom_slug: Optional[str] = Field(None, description="Custom slug used as the short code")


class LinkResponse(BaseModel):
    """Schema for link response"""
    id: int
    original_url: str
    short_code: str
    short_url: str
    custom_slug: Optional[str] = None
    click_count: int
    created_at: datetime
    updated_at: datetime
    expires_at: Optional[datetime] = None


class ClickResponse(BaseModel):
    """A recorded visit"""
    timestamp: datetime
    ip: str
    user_agent: str
    referrer: str


class LinkDetail(LinkResponse):
    """Link with its most recent clicks, oldest first"""
    clicks: List[ClickResponse]


class LinkList(BaseModel):
    """One page of a user's links"""
    items: List[LinkResponse]
    page: int
    limit: int
    total: int
    pages: int
