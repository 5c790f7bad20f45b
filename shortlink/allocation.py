"""Creation of new short links."""

import logging
from typing import Optional

from .common.validators import is_valid_url, is_valid_short_code
from .database.base import LinkStoreBase
from .database.models import LinkRecord
from .errors import (
    AllocationExhaustedError,
    CodeConflictError,
    DuplicateAliasError,
    InvalidAliasError,
    InvalidUrlError,
)
from .shortcode import ShortCodeGenerator


class LinkAllocator:
    """Allocates short codes and stores new links.

    A custom alias is a single attempt: if it is taken the caller gets
    DuplicateAliasError and decides what to do. Generated codes are retried
    up to ``max_collision_retries`` times.
    """

    def __init__(
        self,
        store: LinkStoreBase,
        short_code_generator: Optional[ShortCodeGenerator] = None,
        logger: Optional[logging.Logger] = None,
        enable_custom_codes: bool = True,
        max_collision_retries: int = 5,
    ):
        self.store = store
        self.generator = short_code_generator or ShortCodeGenerator()
        self.logger = logger or logging.getLogger(__name__)
        self.enable_custom_codes = enable_custom_codes
        self.max_collision_retries = max_collision_retries

    async def create(
        self,
        original_url: str,
        custom_alias: Optional[str] = None,
        owner: Optional[str] = None,
    ) -> LinkRecord:
        """Create a new short link.

        Args:
            original_url: Destination URL (http or https)
            custom_alias: Optional caller-chosen short code
            owner: Optional reference to the creating principal

        Returns:
            The stored LinkRecord with its assigned id and created_at

        Raises:
            InvalidUrlError: If original_url is not a valid absolute URL
            InvalidAliasError: If custom_alias is malformed or custom codes are disabled
            DuplicateAliasError: If custom_alias is already taken
            AllocationExhaustedError: If no generated code was free
        """
        is_valid, error = is_valid_url(original_url)
        if not is_valid:
            raise InvalidUrlError(f"Invalid URL: {error}")

        if custom_alias:
            record = await self._create_custom(original_url, custom_alias, owner)
        else:
            record = await self._create_generated(original_url, owner)

        self.logger.info(f"Created short URL: {record.short_code} -> {record.original_url}")
        return record

    async def _create_custom(
        self,
        original_url: str,
        custom_alias: str,
        owner: Optional[str],
    ) -> LinkRecord:
        self._check_alias(custom_alias)

        record = LinkRecord(short_code=custom_alias, original_url=original_url, owner=owner)
        try:
            return await self.store.put(record)
        except CodeConflictError:
            self.logger.info(f"Custom alias already taken: {custom_alias}")
            raise DuplicateAliasError(custom_alias)

    def _check_alias(self, alias: str) -> None:
        if not self.enable_custom_codes:
            raise InvalidAliasError("Custom short codes are not enabled")

        is_valid, error = is_valid_short_code(alias)
        if not is_valid:
            raise InvalidAliasError(f"Invalid short code: {error}")

    async def is_available(self, alias: str) -> bool:
        """Whether alias could be claimed as a custom code right now.

        The answer is advisory; a concurrent create can still take the
        alias first, in which case create raises DuplicateAliasError.

        Raises:
            InvalidAliasError: If alias is malformed or custom codes are disabled
        """
        self._check_alias(alias)
        return not await self.store.code_exists(alias)

    async def _create_generated(self, original_url: str, owner: Optional[str]) -> LinkRecord:
        for attempt in range(1, self.max_collision_retries + 1):
            code = self.generator.generate()

            # Rare, but a random code can spell a reserved word
            is_valid, _ = is_valid_short_code(code)
            if not is_valid:
                self.logger.debug(f"Discarded generated code {code!r} (attempt {attempt})")
                continue

            record = LinkRecord(short_code=code, original_url=original_url, owner=owner)
            try:
                stored = await self.store.put(record)
            except CodeConflictError:
                self.logger.debug(f"Collision on generated code {code} (attempt {attempt})")
                continue

            if attempt > 1:
                self.logger.debug(f"Generated code after {attempt} attempts: {code}")
            return stored

        self.logger.error(
            f"Unable to allocate a short code after {self.max_collision_retries} attempts"
        )
        raise AllocationExhaustedError(
            f"Unable to generate unique short code after {self.max_collision_retries} attempts"
        )
