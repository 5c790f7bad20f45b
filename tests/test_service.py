"""Tests for service layer."""

import asyncio

import pytest

from shortlink.database.memory import MemoryLinkStore
from shortlink.errors import (
    AllocationExhaustedError,
    DuplicateAliasError,
    InvalidAliasError,
    InvalidUrlError,
    LinkNotFoundError,
)
from shortlink.service import ShortLinkService
from shortlink.shortcode import ShortCodeGenerator


class ScriptedGenerator:
    """Generator returning a fixed list of codes, then repeating the last one."""

    def __init__(self, *codes):
        self.codes = list(codes)
        self.calls = 0

    def generate(self):
        self.calls += 1
        if len(self.codes) > 1:
            return self.codes.pop(0)
        return self.codes[0]


class SlowReadStore(MemoryLinkStore):
    """Store whose reads stall after fetching, so writers can run in between."""

    async def get(self, short_code):
        record = await super().get(short_code)
        await asyncio.sleep(0.05)
        return record


@pytest.mark.asyncio
class TestCreate:
    """Test link creation."""

    async def test_create_link(self, service, sample_urls):
        """Test creating short URL."""
        record = await service.create_link(sample_urls[0])

        assert record.original_url == sample_urls[0]
        assert len(record.short_code) == 6
        assert record.id
        assert record.created_at.tzinfo is not None

    async def test_create_with_custom_alias(self, service, sample_urls):
        """Test creating with custom code."""
        record = await service.create_link(sample_urls[0], custom_alias="abc123", owner="alice")

        assert record.short_code == "abc123"
        assert record.owner == "alice"

    async def test_duplicate_custom_alias(self, service, sample_urls):
        """Test duplicate custom code rejection."""
        await service.create_link("https://example.com/a", custom_alias="abc123")

        with pytest.raises(DuplicateAliasError) as exc_info:
            await service.create_link(sample_urls[1], custom_alias="abc123")

        assert exc_info.value.code == "duplicate_alias"
        assert await service.resolve("abc123") == "https://example.com/a"

    async def test_invalid_url(self, service):
        """Test invalid URL rejection."""
        with pytest.raises(InvalidUrlError, match="Invalid URL"):
            await service.create_link("not-a-url")

        assert (await service.get_statistics())["total_links"] == 0

    async def test_invalid_url_checked_before_alias(self, service):
        with pytest.raises(InvalidUrlError):
            await service.create_link("not-a-url", custom_alias="@@")

    async def test_invalid_alias(self, service, sample_urls):
        with pytest.raises(InvalidAliasError):
            await service.create_link(sample_urls[0], custom_alias="has space")

        with pytest.raises(InvalidAliasError, match="reserved"):
            await service.create_link(sample_urls[0], custom_alias="api")

    async def test_custom_codes_disabled(self, test_store, sample_urls):
        service = ShortLinkService(store=test_store, enable_custom_codes=False)

        with pytest.raises(InvalidAliasError, match="not enabled"):
            await service.create_link(sample_urls[0], custom_alias="abc123")

        # Still allowed without an alias
        await service.create_link(sample_urls[0])

    async def test_empty_alias_means_generated(self, service, sample_urls):
        record = await service.create_link(sample_urls[0], custom_alias="")
        assert len(record.short_code) == 6

    async def test_two_generated_links_are_distinct(self, service, sample_urls):
        first = await service.create_link(sample_urls[0])
        second = await service.create_link(sample_urls[1])

        assert first.short_code != second.short_code
        assert first.id != second.id
        assert await service.resolve(first.short_code) == sample_urls[0]
        assert await service.resolve(second.short_code) == sample_urls[1]

    async def test_same_url_twice_gets_two_links(self, service, sample_urls):
        first = await service.create_link(sample_urls[0])
        second = await service.create_link(sample_urls[0])

        assert first.short_code != second.short_code

    async def test_generated_collision_is_retried(self, test_store, sample_urls):
        taken = await ShortLinkService(test_store).create_link(sample_urls[0], custom_alias="taken1")
        generator = ScriptedGenerator(taken.short_code, "free01")
        service = ShortLinkService(test_store, short_code_generator=generator)

        record = await service.create_link(sample_urls[1])

        assert record.short_code == "free01"
        assert generator.calls == 2

    async def test_generated_reserved_word_is_skipped(self, test_store, sample_urls):
        generator = ScriptedGenerator("health", "good12")
        service = ShortLinkService(test_store, short_code_generator=generator)

        record = await service.create_link(sample_urls[0])

        assert record.short_code == "good12"

    async def test_allocation_exhausted(self, test_store, sample_urls):
        await ShortLinkService(test_store).create_link(sample_urls[0], custom_alias="fixed1")
        generator = ScriptedGenerator("fixed1")
        service = ShortLinkService(test_store, short_code_generator=generator, max_collision_retries=3)

        with pytest.raises(AllocationExhaustedError):
            await service.create_link(sample_urls[1])

        assert generator.calls == 3

    async def test_sequential_codes(self, test_store, sample_urls):
        generator = ShortCodeGenerator(strategy="sequential", sequence_start=0)
        service = ShortLinkService(test_store, short_code_generator=generator)

        first = await service.create_link(sample_urls[0])
        second = await service.create_link(sample_urls[1])

        assert (first.short_code, second.short_code) == ("aaaaaa", "aaaaab")


@pytest.mark.asyncio
class TestResolve:
    """Test resolution."""

    async def test_round_trip(self, service, sample_urls):
        for url in sample_urls:
            record = await service.create_link(url)
            assert await service.resolve(record.short_code) == url

    async def test_not_found(self, service):
        with pytest.raises(LinkNotFoundError):
            await service.resolve("doesnotexist")

    async def test_malformed_code_not_found(self, service):
        with pytest.raises(LinkNotFoundError):
            await service.resolve("no/such.code")

        with pytest.raises(LinkNotFoundError):
            await service.resolve("")

    async def test_cache_read_through(self, test_store, fake_cache, sample_urls):
        service = ShortLinkService(test_store, cache=fake_cache)
        record = await service.create_link(sample_urls[0])

        assert await service.resolve(record.short_code) == sample_urls[0]
        assert fake_cache.data[record.short_code] == sample_urls[0]

        # Served from cache even if the store were bypassed
        fake_cache.data[record.short_code] = "https://cached.example.com"
        assert await service.resolve(record.short_code) == "https://cached.example.com"

    async def test_lookup_by_code(self, service, sample_urls):
        record = await service.create_link(sample_urls[0], custom_alias="abc123")

        assert await service.get_link_by_code("abc123") == record
        with pytest.raises(LinkNotFoundError):
            await service.get_link_by_code("zzzz")

    async def test_alias_availability(self, service, sample_urls):
        assert await service.is_alias_available("abc123")

        record = await service.create_link(sample_urls[0], custom_alias="abc123")
        assert not await service.is_alias_available("abc123")

        await service.rename_link(record.id, "xyz789")
        assert await service.is_alias_available("abc123")
        assert not await service.is_alias_available("xyz789")

        with pytest.raises(InvalidAliasError):
            await service.is_alias_available("a b")


@pytest.mark.asyncio
class TestLifecycle:
    """Test rename and delete."""

    async def test_alias_scenario(self, service):
        first = await service.create_link("https://example.com/a", custom_alias="abc123")
        assert first.short_code == "abc123"

        with pytest.raises(DuplicateAliasError):
            await service.create_link("https://example.com/b", custom_alias="abc123")

        renamed = await service.rename_link(first.id, "xyz789")
        assert renamed.short_code == "xyz789"
        assert renamed.id == first.id
        assert renamed.original_url == "https://example.com/a"

        with pytest.raises(LinkNotFoundError):
            await service.resolve("abc123")
        assert await service.resolve("xyz789") == "https://example.com/a"

    async def test_rename_to_current_code(self, service, sample_urls):
        record = await service.create_link(sample_urls[0], custom_alias="abc123")

        assert await service.rename_link(record.id, "abc123") == record
        assert await service.resolve("abc123") == sample_urls[0]

    async def test_rename_conflict_is_duplicate_alias(self, service, sample_urls):
        first = await service.create_link(sample_urls[0], custom_alias="abc123")
        await service.create_link(sample_urls[1], custom_alias="xyz789")

        with pytest.raises(DuplicateAliasError) as exc_info:
            await service.rename_link(first.id, "xyz789")

        assert exc_info.value.short_code == "xyz789"
        assert await service.resolve("abc123") == sample_urls[0]
        assert await service.resolve("xyz789") == sample_urls[1]

    async def test_rename_invalid_alias(self, service, sample_urls):
        record = await service.create_link(sample_urls[0])

        with pytest.raises(InvalidAliasError):
            await service.rename_link(record.id, "a b")

    async def test_rename_unknown_id(self, service):
        with pytest.raises(LinkNotFoundError):
            await service.rename_link("unknown", "xyz789")

    async def test_delete_twice(self, service, sample_urls):
        record = await service.create_link(sample_urls[0])

        deleted = await service.delete_link(record.id)
        assert deleted.id == record.id

        with pytest.raises(LinkNotFoundError):
            await service.delete_link(record.id)
        with pytest.raises(LinkNotFoundError):
            await service.resolve(record.short_code)

    async def test_deleted_code_not_reusable(self, service, sample_urls):
        record = await service.create_link(sample_urls[0], custom_alias="abc123")
        await service.delete_link(record.id)

        with pytest.raises(DuplicateAliasError):
            await service.create_link(sample_urls[1], custom_alias="abc123")

    async def test_deleted_code_reusable_when_not_retired(self, logger, sample_urls):
        service = ShortLinkService(MemoryLinkStore(retire_deleted_codes=False), logger=logger)
        record = await service.create_link(sample_urls[0], custom_alias="abc123")
        await service.delete_link(record.id)

        again = await service.create_link(sample_urls[1], custom_alias="abc123")
        assert again.id != record.id
        assert await service.resolve("abc123") == sample_urls[1]

    async def test_owner_guard(self, service, sample_urls):
        record = await service.create_link(sample_urls[0], owner="alice")

        with pytest.raises(LinkNotFoundError):
            await service.rename_link(record.id, "xyz789", owner="bob")
        with pytest.raises(LinkNotFoundError):
            await service.delete_link(record.id, owner="bob")
        with pytest.raises(LinkNotFoundError):
            await service.get_link(record.id, owner="bob")

        assert (await service.rename_link(record.id, "xyz789", owner="alice")).short_code == "xyz789"
        await service.delete_link(record.id, owner="alice")

    async def test_cache_invalidated(self, test_store, fake_cache, sample_urls):
        service = ShortLinkService(test_store, cache=fake_cache)
        record = await service.create_link(sample_urls[0], custom_alias="abc123")
        await service.resolve("abc123")

        renamed = await service.rename_link(record.id, "xyz789")
        assert "abc123" not in fake_cache.data
        with pytest.raises(LinkNotFoundError):
            await service.resolve("abc123")

        await service.resolve("xyz789")
        await service.delete_link(renamed.id)
        assert fake_cache.deleted == ["abc123", "xyz789"]
        with pytest.raises(LinkNotFoundError):
            await service.resolve("xyz789")

    async def test_resolve_racing_rename_leaves_no_stale_cache(self, fake_cache, logger):
        """A lookup that read the old code before a rename must not re-cache it."""
        service = ShortLinkService(SlowReadStore(logger=logger), cache=fake_cache, logger=logger)
        record = await service.create_link("https://example.com/a", custom_alias="abc123")

        async def rename_later():
            await asyncio.sleep(0.01)
            return await service.rename_link(record.id, "xyz789")

        await asyncio.gather(service.resolve("abc123"), rename_later())

        assert "abc123" not in fake_cache.data
        with pytest.raises(LinkNotFoundError):
            await service.resolve("abc123")
        assert await service.resolve("xyz789") == "https://example.com/a"

    async def test_resolve_racing_delete_does_not_shadow_reused_code(self, fake_cache, logger):
        store = SlowReadStore(retire_deleted_codes=False, logger=logger)
        service = ShortLinkService(store, cache=fake_cache, logger=logger)
        record = await service.create_link("https://example.com/a", custom_alias="abc123")

        async def delete_later():
            await asyncio.sleep(0.01)
            return await service.delete_link(record.id)

        await asyncio.gather(service.resolve("abc123"), delete_later())
        await service.create_link("https://example.com/b", custom_alias="abc123")

        assert await service.resolve("abc123") == "https://example.com/b"

    async def test_list_links_by_owner(self, service, sample_urls):
        await service.create_link(sample_urls[0], owner="alice")
        await service.create_link(sample_urls[1], owner="bob")
        await service.create_link(sample_urls[2], owner="alice")

        alice = await service.list_links(owner="alice")
        assert sorted(r.original_url for r in alice) == sorted([sample_urls[0], sample_urls[2]])
        assert len(await service.list_links()) == 3


@pytest.mark.asyncio
class TestHealth:

    async def test_health_check(self, service):
        """Test health check."""
        health = await service.health_check()

        assert health == {"database": True, "cache": True, "overall": True}

    async def test_statistics(self, service, sample_urls):
        await service.create_link(sample_urls[0])

        stats = await service.get_statistics()

        assert stats["total_links"] == 1
        assert stats["cache_enabled"] is False
        assert stats["custom_codes_enabled"] is True
