"""Business logic service for short links."""

import logging
from typing import Optional, Dict, Any, List

from .allocation import LinkAllocator
from .database.base import LinkStoreBase
from .database.cache import RedisCache
from .database.models import LinkRecord
from .lifecycle import LinkLifecycleManager
from .resolution import LinkResolver
from .shortcode import ShortCodeGenerator


class ShortLinkService:
    """Service layer tying allocation, resolution and lifecycle to one store."""

    def __init__(
        self,
        store: LinkStoreBase,
        cache: Optional[RedisCache] = None,
        short_code_generator: Optional[ShortCodeGenerator] = None,
        logger: Optional[logging.Logger] = None,
        enable_custom_codes: bool = True,
        max_collision_retries: int = 5,
    ):
        """Initialize short link service.

        Args:
            store: Link store instance
            cache: Optional Redis cache for resolution
            short_code_generator: Optional short code generator
            logger: Optional logger
            enable_custom_codes: Whether to allow custom short codes
            max_collision_retries: Maximum attempts for generated codes
        """
        self.store = store
        self.cache = cache
        self.logger = logger or logging.getLogger(__name__)
        self.enable_custom_codes = enable_custom_codes

        self.allocator = LinkAllocator(
            store,
            short_code_generator=short_code_generator,
            logger=self.logger,
            enable_custom_codes=enable_custom_codes,
            max_collision_retries=max_collision_retries,
        )
        self.resolver = LinkResolver(store, cache=cache, logger=self.logger)
        self.lifecycle = LinkLifecycleManager(store, cache=cache, logger=self.logger)

    async def create_link(
        self,
        original_url: str,
        custom_alias: Optional[str] = None,
        owner: Optional[str] = None,
    ) -> LinkRecord:
        """Create a new short link (see LinkAllocator.create)."""
        return await self.allocator.create(original_url, custom_alias=custom_alias, owner=owner)

    async def resolve(self, short_code: str) -> str:
        """Destination URL for a short code (see LinkResolver.resolve)."""
        return await self.resolver.resolve(short_code)

    async def get_link_by_code(self, short_code: str) -> LinkRecord:
        return await self.resolver.lookup(short_code)

    async def is_alias_available(self, short_code: str) -> bool:
        """Whether short_code is free for a custom alias (see LinkAllocator.is_available)."""
        return await self.allocator.is_available(short_code)

    async def get_link(self, link_id: str, owner: Optional[str] = None) -> LinkRecord:
        return await self.lifecycle.get(link_id, owner)

    async def list_links(self, owner: Optional[str] = None, limit: int = 100) -> List[LinkRecord]:
        """List live links, newest first.

        Args:
            owner: Only links created by this principal
            limit: Maximum number to return
        """
        return await self.store.list_links(owner=owner, limit=limit)

    async def rename_link(
        self,
        link_id: str,
        new_code: str,
        owner: Optional[str] = None,
    ) -> LinkRecord:
        """Change a link's short code (see LinkLifecycleManager.rename)."""
        return await self.lifecycle.rename(link_id, new_code, owner)

    async def delete_link(self, link_id: str, owner: Optional[str] = None) -> LinkRecord:
        """Delete a link (see LinkLifecycleManager.delete)."""
        return await self.lifecycle.delete(link_id, owner)

    async def get_statistics(self) -> Dict[str, Any]:
        """Get service statistics."""
        db_stats = await self.store.get_statistics()

        return {
            **db_stats,
            "cache_enabled": self.cache is not None and self.cache.enabled,
            "custom_codes_enabled": self.enable_custom_codes,
        }

    async def health_check(self) -> Dict[str, bool]:
        """Perform health check.

        Returns:
            Dictionary with database, cache and overall status
        """
        db_healthy = await self.store.health_check()
        cache_healthy = await self.cache.ping() if self.cache else True

        return {
            "database": db_healthy,
            "cache": cache_healthy,
            "overall": db_healthy and cache_healthy,
        }

    async def close(self) -> None:
        """Close store and cache connections."""
        await self.store.close()
        if self.cache:
            await self.cache.close()
