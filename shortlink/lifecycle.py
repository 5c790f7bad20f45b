"""Rename and delete of existing short links."""

import logging
from typing import Optional

from .common.validators import is_valid_short_code
from .database.base import LinkStoreBase
from .database.cache import RedisCache
from .database.models import LinkRecord
from .errors import CodeConflictError, DuplicateAliasError, InvalidAliasError, LinkNotFoundError


class LinkLifecycleManager:
    """Mutations of live links.

    When ``owner`` is given, links belonging to someone else are reported as
    not found rather than forbidden, so ids of other principals stay opaque.
    """

    def __init__(
        self,
        store: LinkStoreBase,
        cache: Optional[RedisCache] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.store = store
        self.cache = cache
        self.logger = logger or logging.getLogger(__name__)

    async def get(self, link_id: str, owner: Optional[str] = None) -> LinkRecord:
        """Live link by id.

        Raises:
            LinkNotFoundError: If the id is unknown, deleted, or owned by someone else
        """
        record = await self.store.get_by_id(link_id)
        if record is None or (owner is not None and record.owner != owner):
            raise LinkNotFoundError(f"Link '{link_id}' not found")
        return record

    async def rename(self, link_id: str, new_code: str, owner: Optional[str] = None) -> LinkRecord:
        """Give a live link a new short code.

        Renaming a link to its current code succeeds without changes.

        Raises:
            InvalidAliasError: If new_code is malformed or reserved
            DuplicateAliasError: If new_code belongs to another link or is retired
            LinkNotFoundError: If the link does not exist (for this owner)
        """
        is_valid, error = is_valid_short_code(new_code)
        if not is_valid:
            raise InvalidAliasError(f"Invalid short code: {error}")

        current = await self.get(link_id, owner)

        try:
            updated = await self.store.rename(link_id, new_code)
        except CodeConflictError:
            self.logger.info(f"Rename of {link_id} rejected, alias taken: {new_code}")
            raise DuplicateAliasError(new_code)

        if updated is None:
            # Deleted between the lookup and the rename
            raise LinkNotFoundError(f"Link '{link_id}' not found")

        if updated.short_code != current.short_code:
            if self.cache:
                await self.cache.delete(current.short_code)
            self.logger.info(f"Renamed link {link_id}: {current.short_code} -> {updated.short_code}")

        return updated

    async def delete(self, link_id: str, owner: Optional[str] = None) -> LinkRecord:
        """Delete a live link.

        Deleting the same id twice raises LinkNotFoundError the second time.

        Returns:
            The deleted record
        """
        if owner is not None:
            await self.get(link_id, owner)

        removed = await self.store.remove(link_id)
        if removed is None:
            raise LinkNotFoundError(f"Link '{link_id}' not found")

        if self.cache:
            await self.cache.delete(removed.short_code)

        self.logger.info(f"Deleted link {link_id} ({removed.short_code})")
        return removed
