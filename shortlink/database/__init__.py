"""Storage layer for short links."""

import logging
from typing import Optional
from urllib.parse import urlparse

from .base import LinkStoreBase
from .cache import RedisCache
from .memory import MemoryLinkStore
from .models import LinkRecord
from .postgres import PostgresLinkStore


def create_store(
    db_url: str,
    retire_deleted_codes: bool = True,
    retirement_seconds: Optional[int] = None,
    create_tables: bool = False,
    logger: Optional[logging.Logger] = None,
) -> LinkStoreBase:
    """Build a store from its URL scheme (memory:// or postgresql://)."""
    scheme = urlparse(db_url).scheme

    if scheme == "memory":
        return MemoryLinkStore(
            db_config=db_url,
            retire_deleted_codes=retire_deleted_codes,
            retirement_seconds=retirement_seconds,
            logger=logger,
        )
    if scheme in ("postgres", "postgresql"):
        return PostgresLinkStore(
            db_config=db_url,
            retire_deleted_codes=retire_deleted_codes,
            retirement_seconds=retirement_seconds,
            create_tables=create_tables,
            logger=logger,
        )
    raise ValueError(f"Unsupported database URL scheme '{scheme}' (use memory:// or postgresql://)")


__all__ = [
    "LinkStoreBase",
    "MemoryLinkStore",
    "PostgresLinkStore",
    "RedisCache",
    "LinkRecord",
    "create_store",
]
