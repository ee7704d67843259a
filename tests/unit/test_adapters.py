"""
Tests for the in-memory cache, clocks and in-memory entity store.
"""

from __future__ import annotations

import threading
from datetime import UTC, datetime, timedelta, timezone

from permastruct.adapters.clock import FixedClock, SystemClock
from permastruct.adapters.memory_cache import InMemoryCache
from permastruct.adapters.memory_store import InMemoryEntityStore
from permastruct.domain.entities import Post, Term
from permastruct.domain.queries import EntityQuery

BASE = datetime(2024, 6, 1, tzinfo=UTC)


class TestInMemoryCache:
    """Test bucketed cache behaviour."""

    def test_get_set(self) -> None:
        cache = InMemoryCache()
        assert cache.get("k") is None

        cache.set("k", 1)
        assert cache.get("k") == 1

    def test_empty_string_is_a_value(self) -> None:
        cache = InMemoryCache()
        cache.set("k", "", "counts")
        assert cache.get("k", "counts") == ""

    def test_buckets_are_separate(self) -> None:
        cache = InMemoryCache()
        cache.set("k", 1, "a")

        assert cache.get("k", "b") is None
        assert cache.size("a") == 1

    def test_delete_and_flush(self) -> None:
        cache = InMemoryCache()
        cache.set("k1", 1, "counts")
        cache.set("k2", 2, "counts")

        assert cache.delete("k1", "counts") is True
        assert cache.delete("k1", "counts") is False
        assert cache.flush_bucket("counts") == 1
        assert cache.size("counts") == 0

    def test_concurrent_writers(self) -> None:
        cache = InMemoryCache()

        def write(offset: int) -> None:
            for i in range(200):
                cache.set(f"{offset}-{i}", i, "counts")

        threads = [threading.Thread(target=write, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert cache.size("counts") == 1600


class TestClocks:
    """Test clock adapters."""

    def test_system_clock_is_utc(self) -> None:
        assert SystemClock().now_utc().tzinfo is UTC

    def test_fixed_clock(self) -> None:
        clock = FixedClock(datetime(2024, 1, 1, 12, tzinfo=timezone(timedelta(hours=2))))

        assert clock.now_utc() == datetime(2024, 1, 1, 10, tzinfo=UTC)
        clock.advance(60)
        assert clock.now_utc() == datetime(2024, 1, 1, 10, 1, tzinfo=UTC)

    def test_fixed_clock_naive_is_utc(self) -> None:
        assert FixedClock(datetime(2024, 1, 1)).now_utc() == datetime(2024, 1, 1, tzinfo=UTC)


class TestInMemoryEntityStore:
    """Test EntityQuery semantics."""

    def _store(self) -> InMemoryEntityStore:
        store = InMemoryEntityStore()
        store.add_term(Term(id=1, slug="a"))
        store.add_term(Term(id=2, slug="b"))
        store.add_term(Term(id=3, slug="t", taxonomy="post_tag"))
        for i in range(1, 6):
            store.add_post(Post(id=i, slug=f"p{i}", published_at=BASE + timedelta(days=i)))
        store.attach(1, 1)
        store.attach(2, 2, 3)
        store.attach(3, 1)
        return store

    def test_get_term_checks_taxonomy(self) -> None:
        store = self._store()

        assert store.get_term(3) is not None
        assert store.get_term(3, "post_tag") is not None
        assert store.get_term(3, "category") is None

    def test_terms_for_post(self) -> None:
        store = self._store()
        assert [t.id for t in store.get_terms_for_post(2, "category")] == [2]
        assert [t.id for t in store.get_terms_for_post(2, "post_tag")] == [3]

    def test_order_and_limit(self) -> None:
        store = self._store()

        asc = store.query_entities(EntityQuery(limit=None))
        desc = store.query_entities(EntityQuery(order="desc", limit=2))

        assert [p.id for p in asc] == [1, 2, 3, 4, 5]
        assert [p.id for p in desc] == [5, 4]

    def test_time_window_is_strict(self) -> None:
        store = self._store()
        query = EntityQuery(
            published_after=BASE + timedelta(days=2),
            published_before=BASE + timedelta(days=5),
            limit=None,
        )
        assert [p.id for p in store.query_entities(query)] == [3, 4]

    def test_taxonomy_include_and_exclude(self) -> None:
        store = self._store()

        in_category = EntityQuery(taxonomy="category", limit=None)
        only_a = EntityQuery(taxonomy="category", include_term_ids=(1,), limit=None)
        without_tag = EntityQuery(exclude_term_ids=(3,), limit=None)

        assert [p.id for p in store.query_entities(in_category)] == [1, 2, 3]
        assert [p.id for p in store.query_entities(only_a)] == [1, 3]
        assert [p.id for p in store.query_entities(without_tag)] == [1, 3, 4, 5]

    def test_owner_statuses(self) -> None:
        store = self._store()
        store.add_post(
            Post(id=9, slug="mine", status="private", author_id=4, published_at=BASE)
        )

        anonymous = EntityQuery(limit=None)
        owner = EntityQuery(owner_id=4, owner_statuses=("private",), limit=None)

        assert 9 not in [p.id for p in store.query_entities(anonymous)]
        assert [p.id for p in store.query_entities(owner)][0] == 9
