"""Short code resolution (the redirect hot path)."""

import logging
from typing import Optional

from .common.validators import MAX_CODE_LENGTH
from .database.base import LinkStoreBase
from .database.cache import RedisCache
from .database.models import LinkRecord
from .errors import LinkNotFoundError
from .shortcode import ShortCodeGenerator


class LinkResolver:
    """Read-only lookups of short codes.

    Takes no locks. Rename and delete change the store before they drop the
    cache entry, and a cache fill re-reads the store after writing, so a
    released code is never left cached by a lookup that raced the change.
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

    async def resolve(self, short_code: str) -> str:
        """Destination URL for a short code.

        Raises:
            LinkNotFoundError: If no live link uses the code
        """
        # Anything that could never have been stored skips the store entirely
        if len(short_code) > MAX_CODE_LENGTH or not ShortCodeGenerator.is_valid_format(short_code):
            raise LinkNotFoundError(f"Short code '{short_code}' not found")

        if self.cache:
            cached_url = await self.cache.get(short_code)
            if cached_url:
                self.logger.debug(f"Cache hit for {short_code}")
                return cached_url

        record = await self.store.get(short_code)
        if record is None:
            self.logger.debug(f"Short code not found: {short_code}")
            raise LinkNotFoundError(f"Short code '{short_code}' not found")

        if self.cache:
            await self._fill_cache(record)

        self.logger.debug(f"Resolved {short_code} -> {record.original_url}")
        return record.original_url

    async def _fill_cache(self, record: LinkRecord) -> None:
        await self.cache.set(record.short_code, record.original_url)

        # A rename or delete may have run (and invalidated) since the read
        current = await self.store.get(record.short_code)
        if current is None or current.id != record.id:
            self.logger.debug(f"Dropped stale cache entry for {record.short_code}")
            await self.cache.delete(record.short_code)

    async def lookup(self, short_code: str) -> LinkRecord:
        """Full record for a short code, always read from the store."""
        record = await self.store.get(short_code)
        if record is None:
            raise LinkNotFoundError(f"Short code '{short_code}' not found")
        return record
