"""Abstract base class for short link store implementations."""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Optional, List, Dict, Any

from .models import LinkRecord, utcnow


class LinkStoreBase(ABC):
    """Abstract base class for the short code -> link mapping.

    The store is the only authority on short code uniqueness. Every
    check-then-act sequence (insert, rename, delete) must be atomic per
    short code; reads must never wait on writes to other codes.

    Deleted codes can be retired so an old short URL never starts pointing
    at an unrelated destination. ``retire_deleted_codes=False`` frees them
    immediately; ``retirement_seconds=None`` retires them forever.
    """

    def __init__(
        self,
        db_config: str,
        retire_deleted_codes: bool = True,
        retirement_seconds: Optional[int] = None,
    ):
        """Initialize store.

        Args:
            db_config: Store connection string
            retire_deleted_codes: Whether deleted codes are blocked from reuse
            retirement_seconds: How long a deleted code stays blocked (None = forever)
        """
        self.db_config = db_config
        self.retire_deleted_codes = retire_deleted_codes
        self.retirement_seconds = retirement_seconds

    def _retired_until(self) -> Optional[datetime]:
        """Expiry for a code retired now; None means permanent."""
        if self.retirement_seconds is None:
            return None
        return utcnow() + timedelta(seconds=self.retirement_seconds)

    @abstractmethod
    async def put(self, record: LinkRecord) -> LinkRecord:
        """Insert a new link.

        Raises:
            CodeConflictError: If record.short_code is live or retired
        """

    @abstractmethod
    async def get(self, short_code: str) -> Optional[LinkRecord]:
        """Look up the live link for a short code, or None."""

    @abstractmethod
    async def get_by_id(self, link_id: str) -> Optional[LinkRecord]:
        """Look up a live link by id, or None."""

    @abstractmethod
    async def remove(self, link_id: str) -> Optional[LinkRecord]:
        """Delete a link by id.

        Returns:
            The removed record, or None if no live link has that id
        """

    @abstractmethod
    async def rename(self, link_id: str, new_code: str) -> Optional[LinkRecord]:
        """Atomically move a link to a new short code.

        Renaming to the current code is a successful no-op.

        Returns:
            The updated record, or None if no live link has that id

        Raises:
            CodeConflictError: If new_code is held by another live link or retired
        """

    @abstractmethod
    async def list_links(
        self,
        owner: Optional[str] = None,
        limit: int = 100,
    ) -> List[LinkRecord]:
        """List live links, newest first, optionally filtered by owner."""

    @abstractmethod
    async def code_exists(self, short_code: str) -> bool:
        """True if the code is live or retired (i.e. cannot be allocated)."""

    @abstractmethod
    async def get_statistics(self) -> Dict[str, Any]:
        """Store statistics (total_links, retired_codes, database)."""

    @abstractmethod
    async def health_check(self) -> bool:
        """True if the store can serve requests."""

    @abstractmethod
    async def close(self) -> None:
        """Release store resources."""
