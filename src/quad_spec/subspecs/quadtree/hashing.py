"""
Hash primitives for the quaternary Merkle tree.

Two shapes of input are hashed, both with SHA3-256:

- **Leaves**: `SHA3-256(LEAF_DOMAIN_TAG || leaf_bytes)`, where the leaf is an
  arbitrary-length opaque payload.
- **Nodes**: `SHA3-256(h0 || h1 || h2 || h3)`, the four child digests
  concatenated in ascending branch order.

The child order is a hard contract. Permuting any two children changes the
parent digest, which is what binds a proof to a leaf's position.
"""

from __future__ import annotations

import hashlib

from quad_spec.types import Bytes32

from .constants import BRANCHING_FACTOR, DIGEST_LENGTH, LEAF_DOMAIN_TAG

GROUP_LENGTH = BRANCHING_FACTOR * DIGEST_LENGTH
"""Byte length of one packed group of four sibling digests."""


def leaf_digest(data: bytes) -> Bytes32:
    """Hashes a raw leaf payload into its level-0 digest."""
    hasher = hashlib.sha3_256()
    hasher.update(LEAF_DOMAIN_TAG)
    hasher.update(data)
    return Bytes32(hasher.digest())


def node_digest(h0: bytes, h1: bytes, h2: bytes, h3: bytes) -> Bytes32:
    """
    Hashes four child digests into their parent.

    Args:
        h0: Digest of the child at branch 0.
        h1: Digest of the child at branch 1.
        h2: Digest of the child at branch 2.
        h3: Digest of the child at branch 3.

    Returns:
        The parent digest.

    Raises:
        ValueError: If any child is not exactly `DIGEST_LENGTH` bytes.
    """
    hasher = hashlib.sha3_256()
    for branch, child in enumerate((h0, h1, h2, h3)):
        if len(child) != DIGEST_LENGTH:
            raise ValueError(
                f"Child at branch {branch} must be {DIGEST_LENGTH} bytes, got {len(child)}"
            )
        hasher.update(child)
    return Bytes32(hasher.digest())


def node_digests(packed: bytes) -> bytes:
    """
    Hashes every consecutive group of four digests in a packed level.

    This operates on raw bytes so it can run in a worker process without
    shipping model objects across the process boundary.

    Args:
        packed: Concatenated digests; the length must be a multiple of `GROUP_LENGTH`.

    Returns:
        The concatenated parent digests, one per group, in order.
    """
    if len(packed) % GROUP_LENGTH != 0:
        raise ValueError(
            f"Packed level length {len(packed)} is not a multiple of {GROUP_LENGTH}"
        )
    view = memoryview(packed)
    return b"".join(
        hashlib.sha3_256(view[start : start + GROUP_LENGTH]).digest()
        for start in range(0, len(packed), GROUP_LENGTH)
    )
