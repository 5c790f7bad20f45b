"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class CreateLinkRequest(BaseModel):
    """Request to shorten a URL.

    Only shape is checked here; URL and alias rules are enforced by the
    service so every client gets the same error kinds.
    """

    url: str = Field(..., description="The URL to shorten")
    custom_alias: Optional[str] = Field(None, description="Optional custom short code")
    owner: Optional[str] = Field(None, description="Reference to the creating principal")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "url": "https://example.com/very/long/path/to/resource",
                    "custom_alias": None
                },
                {
                    "url": "https://github.com/user/repo",
                    "custom_alias": "myrepo"
                }
            ]
        }
    }


class RenameLinkRequest(BaseModel):
    """Request to change a link's short code."""

    short_code: str = Field(..., description="The new short code")


class LinkResponse(BaseModel):
    """A short link."""

    id: str = Field(..., description="Immutable link id")
    short_code: str = Field(..., description="The short code")
    short_url: str = Field(..., description="The complete short URL")
    original_url: str = Field(..., description="The destination URL")
    created_at: datetime = Field(..., description="Creation timestamp")
    owner: Optional[str] = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "id": "4f1c0a9b6e2d4c4f9a3b1e7d2c5a8f10",
                    "short_code": "abc123",
                    "short_url": "https://short.link/abc123",
                    "original_url": "https://example.com/very/long/path",
                    "created_at": "2025-06-20T10:30:00Z",
                    "owner": None
                }
            ]
        }
    }


class LinkListResponse(BaseModel):
    """A page of links."""

    count: int
    links: List[LinkResponse]


class DeleteLinkResponse(BaseModel):
    """Acknowledgement of a delete."""

    deleted: bool
    id: str
    short_code: str


class ResolveResponse(BaseModel):
    """Destination of a short code."""

    short_code: str
    original_url: str


class AliasAvailabilityResponse(BaseModel):
    """Whether a custom alias is free."""

    short_code: str
    available: bool


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(..., description="Overall status")
    database: str = Field(..., description="Database status")
    cache: str = Field(..., description="Cache status")
    timestamp: datetime = Field(..., description="Check timestamp")


class ErrorDetail(BaseModel):
    """Body of the ``detail`` field of error responses."""

    error: str = Field(..., description="Error kind, e.g. duplicate_alias")
    message: str = Field(..., description="Human-readable explanation")


class ErrorResponse(BaseModel):
    """Error response."""

    detail: ErrorDetail


class StatisticsResponse(BaseModel):
    """Statistics response."""

    total_links: int
    retired_codes: int
    database: str
    cache_enabled: bool
    custom_codes_enabled: bool
