"""Shared fixtures for ring tests."""

import logging

import pytest

from bucketring.hashing.converters import int_to_bytes
from bucketring.hashing.functions import identity_hash, sha1_hash
from bucketring.ring.hasher import ConsistentHasher


def make_int_ring(virtual_nodes: int = 1, hash_function=identity_hash) -> ConsistentHasher:
    """Integer buckets and members; identity hash keeps positions in numeric order."""
    return ConsistentHasher(virtual_nodes, int_to_bytes, int_to_bytes, hash_function)


@pytest.fixture
def int_ring() -> ConsistentHasher:
    return make_int_ring()


@pytest.fixture
def sha1_ring() -> ConsistentHasher:
    return make_int_ring(virtual_nodes=50, hash_function=sha1_hash)


@pytest.fixture
def restore_root_logger():
    """Undo setup_logging() on the root logger after the test."""
    root = logging.getLogger()
    saved_handlers = list(root.handlers)
    saved_level = root.level
    yield root
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)
