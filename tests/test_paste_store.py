from __future__ import annotations

import threading
import uuid
from concurrent.futures import ThreadPoolExecutor

import pytest

from pastebin_lite.domain.errors import ValidationError
from pastebin_lite.domain.projection import project
from pastebin_lite.repositories.paste_store import InMemoryPasteStore


T0 = 1_700_000_000_000


class FakeClock:
    """Settable clock returning epoch milliseconds."""

    def __init__(self, now: int) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(T0)


@pytest.fixture
def store(clock: FakeClock) -> InMemoryPasteStore:
    return InMemoryPasteStore(clock=clock)


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "kwargs",
    [
        {"content": ""},
        {"content": "   "},
        {"content": "x", "ttl_seconds": 0},
        {"content": "x", "ttl_seconds": -1},
        {"content": "x", "ttl_seconds": 1.5},
        {"content": "x", "max_views": 0},
        {"content": "x", "max_views": -1},
        {"content": "x", "max_views": 2.5},
    ],
)
def test_create_rejects_invalid_parameters(store: InMemoryPasteStore, kwargs) -> None:
    with pytest.raises(ValidationError):
        store.create(**kwargs)
    assert len(store) == 0


def test_create_minimal_paste(store: InMemoryPasteStore) -> None:
    paste = store.create("x")

    assert uuid.UUID(paste.id).version == 4
    assert paste.content == "x"
    assert paste.ttl_seconds is None
    assert paste.max_views is None
    assert paste.views == 0
    assert paste.created_at == T0


def test_create_uses_explicit_reference_time(store: InMemoryPasteStore) -> None:
    paste = store.create("x", now=T0 + 5)
    assert paste.created_at == T0 + 5


def test_create_generates_distinct_ids(store: InMemoryPasteStore) -> None:
    ids = {store.create("x").id for _ in range(200)}
    assert len(ids) == 200


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


def test_round_trip_returns_submitted_content(store: InMemoryPasteStore) -> None:
    created = store.create("  hello\nworld  ", ttl_seconds=60, max_views=3)

    fetched = store.get(created.id, consume_view=False)

    assert fetched is not None
    assert fetched.content == "  hello\nworld  "
    assert fetched.views == 0


def test_unknown_id_is_not_found(store: InMemoryPasteStore) -> None:
    assert store.get("does-not-exist", consume_view=True) is None


def test_view_exhaustion_boundary(store: InMemoryPasteStore) -> None:
    paste = store.create("limited", max_views=2)

    first = store.get(paste.id, consume_view=True)
    second = store.get(paste.id, consume_view=True)
    third = store.get(paste.id, consume_view=True)

    assert first is not None and project(first)["remaining_views"] == 1
    assert second is not None and project(second)["remaining_views"] == 0
    assert third is None


def test_time_expiry_boundary(store: InMemoryPasteStore) -> None:
    paste = store.create("ttl", ttl_seconds=10, now=T0)

    assert store.get(paste.id, consume_view=False, now=T0 + 9_999) is not None
    assert store.get(paste.id, consume_view=False, now=T0 + 10_000) is None


def test_expiry_uses_store_clock_when_no_time_given(
    store: InMemoryPasteStore,
    clock: FakeClock,
) -> None:
    paste = store.create("ttl", ttl_seconds=1)

    clock.now = T0 + 999
    assert store.get(paste.id) is not None

    clock.now = T0 + 1_000
    assert store.get(paste.id) is None


def test_expired_paste_is_removed_eagerly(store: InMemoryPasteStore) -> None:
    paste = store.create("ttl", ttl_seconds=10, now=T0)

    assert store.get(paste.id, now=T0 + 10_000) is None
    # Removed on detection: an earlier reference time cannot revive it.
    assert store.get(paste.id, now=T0) is None


def test_non_consuming_reads_do_not_spend_views(store: InMemoryPasteStore) -> None:
    paste = store.create("peek", max_views=1)

    for _ in range(5):
        previewed = store.get(paste.id, consume_view=False)
        assert previewed is not None
        assert project(previewed)["remaining_views"] == 1

    consumed = store.get(paste.id, consume_view=True)
    assert consumed is not None
    assert project(consumed)["remaining_views"] == 0

    assert store.get(paste.id, consume_view=True) is None
    assert store.get(paste.id, consume_view=False) is None


def test_unlimited_paste_counts_views(store: InMemoryPasteStore) -> None:
    paste = store.create("free")

    for expected in range(1, 4):
        fetched = store.get(paste.id, consume_view=True)
        assert fetched is not None
        assert fetched.views == expected
        assert project(fetched)["remaining_views"] is None


def test_returned_records_are_copies(store: InMemoryPasteStore) -> None:
    paste = store.create("copy", max_views=2)
    paste.views = 99

    fetched = store.get(paste.id)
    assert fetched is not None
    assert fetched.views == 0


# ---------------------------------------------------------------------------
# Concurrency
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("max_views, readers", [(1, 16), (5, 32)])
def test_concurrent_consuming_reads_respect_view_limit(
    store: InMemoryPasteStore,
    max_views: int,
    readers: int,
) -> None:
    paste = store.create("race", max_views=max_views)
    barrier = threading.Barrier(readers)

    def read(_: int):
        barrier.wait(timeout=10)
        return store.get(paste.id, consume_view=True)

    with ThreadPoolExecutor(max_workers=readers) as pool:
        results = list(pool.map(read, range(readers)))

    found = [result for result in results if result is not None]
    assert len(found) == max_views
    assert results.count(None) == readers - max_views
    assert sorted(result.views for result in found) == list(range(1, max_views + 1))
    assert all(project(result)["remaining_views"] >= 0 for result in found)


# ---------------------------------------------------------------------------
# Deletion and purge
# ---------------------------------------------------------------------------


def test_delete(store: InMemoryPasteStore) -> None:
    paste = store.create("gone")

    assert store.delete(paste.id) is True
    assert store.delete(paste.id) is False
    assert store.get(paste.id) is None


def test_purge_expired_removes_only_inaccessible_pastes(store: InMemoryPasteStore) -> None:
    expired = store.create("expired", ttl_seconds=1, now=T0)
    exhausted = store.create("exhausted", max_views=1, now=T0)
    alive = store.create("alive", ttl_seconds=3600, max_views=5, now=T0)
    store.get(exhausted.id, consume_view=True, now=T0)

    purged = store.purge_expired(now=T0 + 1_000)

    assert purged == 2
    assert len(store) == 1
    assert store.get(expired.id, now=T0) is None
    assert store.get(alive.id, now=T0 + 1_000) is not None
