"""
Concurrency Tests: Removal Protocol and Parallel Mutation

Tests:
    - In-flight listing is isolated from a concurrent removal
    - Bounded removal times out with the ring unchanged
    - Cancelled removal raises with the ring unchanged
    - Interrupted removal re-registers the bucket and propagates
    - Parallel adds/removes from many threads
    - Parallel listings against parallel removals
"""

import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from bucketring.core.errors import RemovalCancelledError
from bucketring.hashing.functions import sha1_hash
from bucketring.ring.query import owned_members
from bucketring.ring.registry import BucketInfo
from bucketring.ring.rwlock import ReadWriteLock
from bucketring.ring.sorted_map import ConcurrentSortedMap
from bucketring.tests.conftest import make_int_ring

JOIN_TIMEOUT_S = 5.0


def _wait_until(predicate, timeout: float = JOIN_TIMEOUT_S) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


@pytest.fixture
def populated_ring():
    """Buckets 5 and 10, members 1..10, identity hash."""
    ring = make_int_ring()
    ring.add_bucket(5)
    ring.add_bucket(10)
    for member in range(1, 11):
        ring.add_member(member)
    return ring


def _bucket_info(ring, bucket):
    return ring._registry.get(bucket)


class _GatedMap(ConcurrentSortedMap):
    """Member ring whose wraparound scan parks until released."""

    def __init__(self, items, started, release):
        super().__init__(items)
        self.started = started
        self.release = release

    def values_up_to(self, high):
        self.started.set()
        self.release.wait(JOIN_TIMEOUT_S)
        return super().values_up_to(high)


class _InterruptedLock(ReadWriteLock):
    """Lock whose writer wait is interrupted by Ctrl-C."""

    def acquire_write(self, timeout=None, cancel=None):
        raise KeyboardInterrupt


class TestReadRemoveIsolation:
    """An in-flight listing holds off removal of the same bucket."""

    def test_removal_waits_for_reader(self, populated_ring):
        """Removal hides the bucket at once but deletes positions only after readers finish."""
        ring = populated_ring
        info = _bucket_info(ring, 5)
        info.lock.acquire_read()

        remover = threading.Thread(target=ring.remove_bucket, args=(5,))
        try:
            remover.start()
            assert _wait_until(lambda: 5 not in ring)

            # New callers see the bucket as absent without blocking
            assert ring.members_of(5) == []
            assert 5 not in ring.all_buckets_to_members()

            # The in-flight reader still sees an intact ring
            remover.join(timeout=0.2)
            assert remover.is_alive()
            assert ring.position_count == 2
            assert owned_members(ring._bucket_ring, ring._member_ring, info.positions) == [
                1, 2, 3, 4, 5,
            ]
        finally:
            info.lock.release_read()

        remover.join(timeout=JOIN_TIMEOUT_S)
        assert not remover.is_alive()
        assert ring.position_count == 1
        assert ring.members_of(10) == list(range(1, 11))

    def test_listing_result_reflects_lock_time_state(self, populated_ring):
        """A listing that started before removal returns the pre-removal ownership."""
        ring = populated_ring
        info = _bucket_info(ring, 5)
        started = threading.Event()
        release = threading.Event()
        results = {}

        stored = ring._member_ring
        ring._member_ring = _GatedMap(
            zip(stored.keys(), stored.values()), started=started, release=release
        )

        reader = threading.Thread(target=lambda: results.setdefault("owned", ring.members_of(5)))
        remover = threading.Thread(target=ring.remove_bucket, args=(5,))

        reader.start()
        assert started.wait(JOIN_TIMEOUT_S)
        assert info.lock.readers == 1

        remover.start()
        assert _wait_until(lambda: 5 not in ring)
        remover.join(timeout=0.1)
        assert remover.is_alive()

        release.set()
        reader.join(timeout=JOIN_TIMEOUT_S)
        remover.join(timeout=JOIN_TIMEOUT_S)

        assert results["owned"] == [1, 2, 3, 4, 5]
        assert ring.members_of(10) == list(range(1, 11))

    def test_readers_share_the_lock(self, populated_ring):
        """Several listings of one bucket proceed together."""
        ring = populated_ring
        info = _bucket_info(ring, 5)
        info.lock.acquire_read()
        try:
            with ThreadPoolExecutor(max_workers=4) as pool:
                listings = list(pool.map(lambda _: ring.members_of(5), range(8)))
        finally:
            info.lock.release_read()

        assert listings == [[1, 2, 3, 4, 5]] * 8

    def test_other_buckets_not_blocked(self, populated_ring):
        """Removal of one bucket never blocks listings of another."""
        ring = populated_ring
        info = _bucket_info(ring, 5)
        info.lock.acquire_read()
        remover = threading.Thread(target=ring.remove_bucket, args=(5,))
        try:
            remover.start()
            assert _wait_until(lambda: 5 not in ring)

            assert ring.members_of(10) == [6, 7, 8, 9, 10]
        finally:
            info.lock.release_read()
            remover.join(timeout=JOIN_TIMEOUT_S)


class TestBoundedRemoval:
    """try_remove_bucket and cancellation leave the ring as it was."""

    def test_timeout_returns_false(self, populated_ring):
        ring = populated_ring
        info = _bucket_info(ring, 5)
        info.lock.acquire_read()
        try:
            assert ring.try_remove_bucket(5, timeout=0.05) is False
        finally:
            info.lock.release_read()

        assert 5 in ring
        assert ring.all_buckets() == [10, 5]
        assert ring.position_count == 2
        assert ring.members_of(5) == [1, 2, 3, 4, 5]

    def test_retry_after_timeout_succeeds(self, populated_ring):
        ring = populated_ring
        info = _bucket_info(ring, 5)
        info.lock.acquire_read()
        try:
            assert ring.try_remove_bucket(5, timeout=0.01) is False
        finally:
            info.lock.release_read()

        assert ring.try_remove_bucket(5, timeout=1.0) is True
        assert 5 not in ring
        assert ring.position_count == 1

    def test_zero_timeout_without_readers(self, populated_ring):
        assert populated_ring.try_remove_bucket(5, timeout=0) is True
        assert populated_ring.members_of(5) == []

    def test_cancelled_removal(self, populated_ring):
        ring = populated_ring
        info = _bucket_info(ring, 5)
        cancel = threading.Event()
        errors = []

        def remove():
            try:
                ring.remove_bucket(5, cancel=cancel)
            except RemovalCancelledError as e:
                errors.append(e)

        info.lock.acquire_read()
        remover = threading.Thread(target=remove)
        try:
            remover.start()
            assert _wait_until(lambda: 5 not in ring)
            cancel.set()
            remover.join(timeout=JOIN_TIMEOUT_S)
        finally:
            info.lock.release_read()

        assert not remover.is_alive()
        assert len(errors) == 1
        assert 5 in ring
        assert ring.position_count == 2
        assert ring.members_of(5) == [1, 2, 3, 4, 5]

    def test_cancel_event_ignored_when_uncontended(self, populated_ring):
        """An already-set event does not stop a removal that need not wait."""
        cancel = threading.Event()
        cancel.set()

        populated_ring.remove_bucket(5, cancel=cancel)

        assert 5 not in populated_ring

    def test_interrupted_wait_restores_bucket(self, populated_ring):
        ring = populated_ring
        old = ring._registry.pop(5)
        ring._registry.register(5, BucketInfo(positions=old.positions, lock=_InterruptedLock()))

        with pytest.raises(KeyboardInterrupt):
            ring.remove_bucket(5)

        assert 5 in ring
        assert ring.position_count == 2
        assert ring.members_of(5) == [1, 2, 3, 4, 5]


class TestParallelMutation:
    """Lock-free operations from many threads."""

    def test_parallel_adds(self):
        ring = make_int_ring(virtual_nodes=20, hash_function=sha1_hash)
        buckets = list(range(1000, 1032))
        members = list(range(1, 2001))

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(ring.add_bucket, buckets))
            list(pool.map(ring.add_member, members))

        assert sorted(ring.all_buckets()) == buckets
        assert ring.position_count == len(buckets) * 20
        owned = [m for listing in ring.all_buckets_to_members().values() for m in listing]
        assert sorted(owned) == members

    def test_listings_during_removals(self):
        """Listings racing removals never fail and never duplicate members."""
        ring = make_int_ring(virtual_nodes=10, hash_function=sha1_hash)
        buckets = list(range(1, 17))
        for bucket in buckets:
            ring.add_bucket(bucket)
        for member in range(1, 501):
            ring.add_member(member)

        def list_all(_):
            for bucket in buckets:
                owned = ring.members_of(bucket)
                assert len(owned) == len(set(owned))

        with ThreadPoolExecutor(max_workers=8) as pool:
            readers = [pool.submit(list_all, i) for i in range(6)]
            removers = [pool.submit(ring.remove_bucket, b) for b in buckets[::2]]
            for future in readers + removers:
                future.result(timeout=JOIN_TIMEOUT_S * 4)

        assert sorted(ring.all_buckets()) == buckets[1::2]
        assert ring.position_count == len(buckets[1::2]) * 10
        owned = [m for listing in ring.all_buckets_to_members().values() for m in listing]
        assert sorted(owned) == list(range(1, 501))
