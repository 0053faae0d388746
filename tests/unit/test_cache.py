"""Unit tests for the file-backed TTL cache and the cached fetcher."""

import json
from unittest.mock import AsyncMock, patch

import pytest

from recipe_explorer.cache import CachedFetcher, CacheStore
from recipe_explorer.config import CACHE_TTL_SECONDS


class FakeClock:
    """Controllable replacement for time.time."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache_path(tmp_path):
    return tmp_path / "data" / "cache.json"


@pytest.fixture
def store(cache_path, clock):
    return CacheStore(cache_path, clock=clock)


def read_document(path):
    return json.loads(path.read_text(encoding="utf-8"))


class TestCacheStoreInitialization:
    @pytest.mark.asyncio
    async def test_creates_directory_and_empty_document(self, store, cache_path):
        assert not cache_path.parent.exists()

        await store.ensure_initialized()

        assert read_document(cache_path) == {}

    @pytest.mark.asyncio
    async def test_is_idempotent(self, store, cache_path):
        await store.ensure_initialized()
        assert await store.put("k", [1, 2])

        await store.ensure_initialized()

        assert "k" in read_document(cache_path)

    @pytest.mark.asyncio
    async def test_never_raises_when_directory_cannot_be_created(self, tmp_path, clock):
        blocker = tmp_path / "not-a-dir"
        blocker.write_text("x")
        store = CacheStore(blocker / "cache.json", clock=clock)

        await store.ensure_initialized()

        assert not (blocker / "cache.json").exists()
        assert await store.get("anything") is None
        assert await store.put("anything", 1) is False


class TestCacheStoreReadWrite:
    @pytest.mark.asyncio
    async def test_unwritten_key_is_absent(self, store):
        assert await store.get("search_chicken") is None

        await store.ensure_initialized()
        assert await store.get("search_chicken") is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            [{"idMeal": "1", "strMeal": "Soup"}],
            {"idMeal": "52772", "strMeal": "Teriyaki Chicken"},
            [],
            "The request took too long",
        ],
    )
    async def test_put_then_get_returns_payload(self, store, payload):
        assert await store.put("key", payload) is True
        assert await store.get("key") == payload

    @pytest.mark.asyncio
    async def test_put_records_timestamp_and_payload(self, store, cache_path, clock):
        await store.put("recipe_1", {"idMeal": "1"})

        document = read_document(cache_path)
        assert document["recipe_1"] == {"timestamp": clock.now, "payload": {"idMeal": "1"}}

    @pytest.mark.asyncio
    async def test_put_overwrites_existing_key(self, store):
        await store.put("k", "old")
        await store.put("k", "new")

        assert await store.get("k") == "new"

    @pytest.mark.asyncio
    async def test_expired_entry_is_absent_but_kept_in_document(self, store, cache_path, clock):
        await store.put("search_pie", [{"idMeal": "1"}])

        clock.advance(CACHE_TTL_SECONDS)

        assert await store.get("search_pie") is None
        assert "search_pie" in read_document(cache_path)
        assert await store.get_stale("search_pie") == [{"idMeal": "1"}]

    @pytest.mark.asyncio
    async def test_entry_just_inside_ttl_is_fresh(self, store, clock):
        await store.put("k", 1)
        clock.advance(CACHE_TTL_SECONDS - 1)

        assert await store.get("k") == 1

    @pytest.mark.asyncio
    async def test_custom_ttl(self, cache_path, clock):
        store = CacheStore(cache_path, ttl=10, clock=clock)
        await store.put("k", 1)

        clock.advance(10)

        assert await store.get("k") is None

    @pytest.mark.asyncio
    async def test_corrupt_document_reads_as_empty(self, store, cache_path):
        cache_path.parent.mkdir(parents=True)
        cache_path.write_text("{not json", encoding="utf-8")

        assert await store.get("k") is None
        assert await store.get_stale("k") is None

    @pytest.mark.asyncio
    async def test_put_heals_corrupt_document(self, store, cache_path):
        cache_path.parent.mkdir(parents=True)
        cache_path.write_text("[1, 2, 3]", encoding="utf-8")

        assert await store.put("k", "v") is True
        assert await store.get("k") == "v"

    @pytest.mark.asyncio
    async def test_unserializable_payload_returns_false_and_keeps_file(self, store, cache_path):
        await store.put("good", 1)

        assert await store.put("bad", object()) is False

        assert read_document(cache_path)["good"]["payload"] == 1


class TestEvictExpired:
    @pytest.mark.asyncio
    async def test_removes_only_expired_entries(self, store, cache_path, clock):
        await store.put("old_1", 1)
        await store.put("old_2", 2)
        clock.advance(CACHE_TTL_SECONDS - 100)
        await store.put("fresh", 3)
        clock.advance(100)

        removed = await store.evict_expired()

        assert removed == 2
        assert set(read_document(cache_path)) == {"fresh"}
        assert await store.get("fresh") == 3

    @pytest.mark.asyncio
    async def test_second_call_returns_zero(self, store, clock):
        await store.put("old", 1)
        clock.advance(CACHE_TTL_SECONDS + 1)

        assert await store.evict_expired() == 1
        assert await store.evict_expired() == 0

    @pytest.mark.asyncio
    async def test_does_not_rewrite_when_nothing_expired(self, store):
        await store.put("fresh", 1)

        with patch.object(store, "_dump") as dump:
            assert await store.evict_expired() == 0

        dump.assert_not_called()

    @pytest.mark.asyncio
    async def test_counts_only_expired_entries_and_drops_malformed(self, store, cache_path, clock):
        await store.put("old", 1)
        clock.advance(CACHE_TTL_SECONDS)
        await store.put("fresh", 2)
        document = read_document(cache_path)
        document["broken"] = {"payload": "no timestamp"}
        document["null"] = None
        cache_path.write_text(json.dumps(document), encoding="utf-8")

        assert await store.evict_expired() == 1
        assert set(read_document(cache_path)) == {"fresh"}

    @pytest.mark.asyncio
    async def test_missing_or_corrupt_file_returns_zero(self, store, cache_path):
        assert await store.evict_expired() == 0

        cache_path.parent.mkdir(parents=True)
        cache_path.write_text("garbage", encoding="utf-8")
        assert await store.evict_expired() == 0


class TestCachedFetcher:
    @pytest.fixture
    def fetcher(self, store):
        return CachedFetcher(store)

    @pytest.mark.asyncio
    async def test_fresh_hit_never_invokes_operation(self, fetcher, store):
        await store.put("search_soup", [{"idMeal": "1"}])
        operation = AsyncMock(return_value=[{"idMeal": "2"}])

        result = await fetcher.get_or_fetch("search_soup", operation)

        assert result == [{"idMeal": "1"}]
        operation.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_miss_invokes_once_and_persists(self, fetcher):
        operation = AsyncMock(return_value=[{"idMeal": "7"}])

        first = await fetcher.get_or_fetch("search_pie", operation)
        second = await fetcher.get_or_fetch("search_pie", operation)

        assert first == second == [{"idMeal": "7"}]
        operation.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_empty_result_is_cached_as_is(self, fetcher, store):
        operation = AsyncMock(return_value=[])

        assert await fetcher.get_or_fetch("search_zzz", operation) == []
        assert await store.get("search_zzz") == []

        assert await fetcher.get_or_fetch("search_zzz", operation) == []
        operation.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_force_refresh_bypasses_fresh_entry(self, fetcher, store):
        await store.put("k", "cached")
        operation = AsyncMock(return_value="fresh")

        assert await fetcher.get_or_fetch("k", operation, force_refresh=True) == "fresh"
        assert await store.get("k") == "fresh"

    @pytest.mark.asyncio
    async def test_expired_entry_triggers_fetch(self, fetcher, store, clock):
        await store.put("k", "old")
        clock.advance(CACHE_TTL_SECONDS)
        operation = AsyncMock(return_value="new")

        assert await fetcher.get_or_fetch("k", operation) == "new"
        operation.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failure_falls_back_to_stale_entry(self, fetcher, store, clock):
        await store.put("recipe_1", {"idMeal": "1"})
        clock.advance(CACHE_TTL_SECONDS * 2)
        operation = AsyncMock(side_effect=ConnectionError("offline"))

        result = await fetcher.get_or_fetch("recipe_1", operation)

        assert result == {"idMeal": "1"}
        operation.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failure_without_cached_copy_propagates(self, fetcher):
        operation = AsyncMock(side_effect=ConnectionError("offline"))

        with pytest.raises(ConnectionError, match="offline"):
            await fetcher.get_or_fetch("recipe_404", operation)

    @pytest.mark.asyncio
    async def test_force_refresh_failure_skips_stale_fallback(self, fetcher, store, clock):
        await store.put("k", "old")
        clock.advance(CACHE_TTL_SECONDS)
        operation = AsyncMock(side_effect=TimeoutError("slow"))

        with pytest.raises(TimeoutError):
            await fetcher.get_or_fetch("k", operation, force_refresh=True)

    @pytest.mark.asyncio
    async def test_write_failure_still_returns_result(self, fetcher, store):
        store.put = AsyncMock(return_value=False)
        operation = AsyncMock(return_value=["x"])

        assert await fetcher.get_or_fetch("k", operation) == ["x"]
        store.put.assert_awaited_once_with("k", ["x"])
