"""Data models for the short link store."""

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Optional


def new_link_id() -> str:
    """Opaque identifier for a new link; uuid4 so ids are never reused."""
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class LinkRecord:
    """A short code to destination URL mapping.

    Records are immutable values. A rename produces a new record via
    ``with_short_code`` so a reader holding a record never sees it change.
    """

    short_code: str
    original_url: str
    id: str = field(default_factory=new_link_id)
    created_at: datetime = field(default_factory=utcnow)
    owner: Optional[str] = None

    def with_short_code(self, short_code: str) -> "LinkRecord":
        """Copy of this record under a new short code."""
        return replace(self, short_code=short_code)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "short_code": self.short_code,
            "original_url": self.original_url,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "owner": self.owner,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LinkRecord":
        """Create from dictionary (as produced by ``to_dict`` or a DB row)."""
        created_at = data["created_at"]
        if not isinstance(created_at, datetime):
            created_at = datetime.fromisoformat(created_at)
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return cls(
            id=data["id"],
            short_code=data["short_code"],
            original_url=data["original_url"],
            created_at=created_at,
            owner=data.get("owner"),
        )
