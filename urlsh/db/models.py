"""
Database Models for URL Shortener Service

This module defines the SQLModel database schemas for:
- ShortURL: Stores the mapping between short codes and original URLs
- AccessLog: Stores individual redirects for analytics (user agent, IP)

Design Decisions:
- Separate AccessLog table so analytics grow independently of the mapping table
- Unique index on short_code: the database is the arbiter of code uniqueness
- redirect_count denormalized in ShortURL for quick stats without joins
- method stored as text; converted to the Method enum at the service boundary
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text, Uuid
from sqlmodel import Column, Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """SQLite hands back naive datetimes; treat them as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class ShortURL(SQLModel, table=True):
    """
    Main table storing URL shortening mappings.

    Fields:
    - id: Auto-incrementing primary key
    - iid: Public UUID of the mapping
    - original_url: The long URL that was shortened
    - short_code: Unique short code (custom alias, base62 or URL-safe base64)
    - short_url: Base URL joined with short_code at creation time
    - method: Generation method (CUSTOM, RANDOM, HASH, SECURE)
    - expiration: When the link stops redirecting (None: never)
    - redirect_count: Number of redirects served
    - created_at / last_accessed / last_modified: Bookkeeping timestamps
    - utm_*: Optional campaign parameters supplied at creation
    """
    __tablename__ = "short_urls"

    id: Optional[int] = Field(default=None, primary_key=True)
    iid: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(Uuid, nullable=False, unique=True)
    )
    original_url: str = Field(sa_column=Column(Text, nullable=False, index=True))
    short_code: str = Field(
        sa_column=Column(String(64), nullable=False, unique=True, index=True)
    )
    short_url: str = Field(sa_column=Column(Text, nullable=False, index=True))
    method: str = Field(sa_column=Column(String(16), nullable=False))
    expiration: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True)
    )
    redirect_count: int = Field(default=0, sa_column=Column(Integer, nullable=False, default=0))
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True)
    )
    last_accessed: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), nullable=True)
    )
    last_modified: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False)
    )

    utm_source: Optional[str] = Field(default=None, sa_column=Column(String(255), nullable=True))
    utm_medium: Optional[str] = Field(default=None, sa_column=Column(String(255), nullable=True))
    utm_campaign: Optional[str] = Field(default=None, sa_column=Column(String(255), nullable=True))
    utm_term: Optional[str] = Field(default=None, sa_column=Column(String(255), nullable=True))
    utm_content: Optional[str] = Field(default=None, sa_column=Column(String(255), nullable=True))

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        expiration = as_utc(self.expiration)
        if expiration is None:
            return False
        return expiration <= (now or utcnow())


class AccessLog(SQLModel, table=True):
    """
    One row per redirect served.

    Used for the last-accessed, top user agents and unique IP queries.
    """
    __tablename__ = "access_logs"

    id: Optional[int] = Field(default=None, primary_key=True)
    iid: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        sa_column=Column(Uuid, nullable=False, unique=True)
    )
    short_url_id: int = Field(
        sa_column=Column(
            Integer,
            ForeignKey("short_urls.id", ondelete="CASCADE"),
            nullable=False,
            index=True
        )
    )
    accessed_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True)
    )
    user_agent: Optional[str] = Field(
        default=None,
        sa_column=Column(String(500), nullable=True)
    )
    ip_address: str = Field(sa_column=Column(String(45), nullable=False))  # IPv6 max length
