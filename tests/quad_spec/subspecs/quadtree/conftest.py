"""Shared fixtures for the quaternary tree tests."""

from __future__ import annotations

import hashlib
from typing import Callable

import pytest

from quad_spec.subspecs.quadtree import TEST_CONFIG, QuadTree

LeafFactory = Callable[..., list[bytes]]


def _make_leaves(count: int, *, seed: bytes = b"leaf") -> list[bytes]:
    return [
        hashlib.shake_256(seed + i.to_bytes(4, "big")).digest(TEST_CONFIG.LEAF_LENGTH)
        for i in range(count)
    ]


@pytest.fixture(scope="session")
def make_leaves() -> LeafFactory:
    """Factory for distinct, deterministic leaf payloads of the test leaf length."""
    return _make_leaves


@pytest.fixture
def leaves16() -> list[bytes]:
    """Sixteen leaves, L0..L15, for a depth-2 tree."""
    return _make_leaves(16)


@pytest.fixture
def tree16(leaves16: list[bytes]) -> QuadTree:
    """A depth-2 tree over `leaves16`."""
    return QuadTree.build(leaves16, config=TEST_CONFIG)
