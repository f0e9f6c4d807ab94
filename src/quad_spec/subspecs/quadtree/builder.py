"""
Construction of complete quaternary Merkle trees.

### Layout

A tree of depth `d` commits to exactly `4^d` leaves. Its digests are stored
level by level, leaves first:

    level d      :                         root
    level d-1    :           n0          n1          n2          n3
    ...
    level 0      :   l0 l1 l2 l3   l4 l5 l6 l7   ...

Level `l` holds `4^(d - l)` digests. The node at position `k` of level `l + 1`
is the digest of positions `4k .. 4k + 3` of level `l`, in that order.

### No padding

Leaf counts that are not a power of four are rejected rather than padded.
Any padding rule would let several leaf layouts share a root, weakening the
binding between a proof and the leaf's position.
"""

from __future__ import annotations

import logging
from concurrent.futures import ProcessPoolExecutor
from typing import Any, Sequence

from pydantic import field_validator, model_validator

from quad_spec.types import Bytes32, ConstructionError, StrictBaseModel

from .constants import BRANCHING_FACTOR, DIGEST_LENGTH, MAX_DEPTH, TARGET_CONFIG, QuadConfig
from .hashing import GROUP_LENGTH, leaf_digest, node_digest, node_digests

logger = logging.getLogger(__name__)

Level = tuple[Bytes32, ...]
"""One horizontal layer of digests."""


def tree_depth_for(leaf_count: int) -> int:
    """
    Returns `log4(leaf_count)`.

    Raises:
        ConstructionError: If `leaf_count` is not an exact power of four.
    """
    if leaf_count < 1:
        raise ConstructionError(leaf_count, "a tree needs at least one leaf")

    depth = 0
    remaining = leaf_count
    while remaining % BRANCHING_FACTOR == 0:
        remaining //= BRANCHING_FACTOR
        depth += 1

    if remaining != 1:
        raise ConstructionError(leaf_count, "leaf count must be an exact power of 4")
    if depth > MAX_DEPTH:
        raise ConstructionError(leaf_count, f"depth {depth} exceeds the maximum of {MAX_DEPTH}")
    return depth


def hash_leaves(leaves: Sequence[bytes], config: QuadConfig = TARGET_CONFIG) -> list[Bytes32]:
    """
    Computes the level-0 digests, preserving input order.

    Raises:
        ConstructionError: If a leaf is not `config.LEAF_LENGTH` bytes of data.
    """
    digests: list[Bytes32] = []
    for position, leaf in enumerate(leaves):
        if not isinstance(leaf, (bytes, bytearray)):
            raise ConstructionError(
                len(leaves), f"leaf {position} is {type(leaf).__name__}, not bytes"
            )
        if len(leaf) != config.LEAF_LENGTH:
            raise ConstructionError(
                len(leaves),
                f"leaf {position} is {len(leaf)} bytes, expected {config.LEAF_LENGTH}",
            )
        digests.append(leaf_digest(bytes(leaf)))
    return digests


def parent_level(
    children: Sequence[Bytes32],
    *,
    executor: ProcessPoolExecutor | None = None,
    chunks: int = 1,
) -> list[Bytes32]:
    """
    Computes the level above `children`.

    Each consecutive run of four children collapses into one parent. When an
    executor is supplied, the runs are split into `chunks` contiguous slices
    hashed in worker processes; the slices are re-joined in order, so the
    result is identical to the in-process computation.

    Args:
        children: A level whose length is a multiple of four.
        executor: Optional process pool for large levels.
        chunks: Number of slices to hand to the pool.

    Returns:
        The parent digests, one quarter as many as `children`.
    """
    if len(children) % BRANCHING_FACTOR != 0:
        raise ValueError(f"Level of {len(children)} nodes cannot be grouped by 4")

    group_count = len(children) // BRANCHING_FACTOR

    if executor is None or chunks <= 1:
        return [
            node_digest(*children[start : start + BRANCHING_FACTOR])
            for start in range(0, len(children), BRANCHING_FACTOR)
        ]

    # Split on group boundaries so no group straddles two workers.
    packed = b"".join(children)
    groups_per_chunk = -(-group_count // chunks)
    step = groups_per_chunk * GROUP_LENGTH
    slices = [packed[start : start + step] for start in range(0, len(packed), step)]

    # Waiting on every slice is the barrier between this level and the next.
    joined = b"".join(executor.map(node_digests, slices))
    return [
        Bytes32(joined[start : start + DIGEST_LENGTH])
        for start in range(0, len(joined), DIGEST_LENGTH)
    ]


class QuadTree(StrictBaseModel):
    """
    A complete quaternary Merkle tree with every level retained.

    The tree is ephemeral build state: it is built once, used to extract the
    proofs of interest, and can then be dropped. Nothing outlives it except the
    `MembershipProof` snapshots it produced.
    """

    depth: int
    """`log4` of the leaf count; `0` for a single-leaf tree."""

    levels: tuple[Level, ...]
    """
    Digest layers from the leaves (`levels[0]`) to the root (`levels[depth]`).

    Level `l` holds `4^(depth - l)` digests.
    """

    @field_validator("levels", mode="before")
    @classmethod
    def _coerce_levels(cls, v: Any) -> Any:
        """Store nested sequences as immutable tuples."""
        if isinstance(v, (list, tuple)):
            return tuple(tuple(level) for level in v)
        return v

    @model_validator(mode="after")
    def _check_level_sizes(self) -> QuadTree:
        """Every level must be exactly a quarter of the one below, ending at one root."""
        if len(self.levels) != self.depth + 1:
            raise ValueError(f"Expected {self.depth + 1} levels, got {len(self.levels)}")
        for level, layer in enumerate(self.levels):
            expected = BRANCHING_FACTOR ** (self.depth - level)
            if len(layer) != expected:
                raise ValueError(f"Level {level} holds {len(layer)} digests, expected {expected}")
        return self

    @classmethod
    def build(
        cls,
        leaves: Sequence[bytes],
        *,
        config: QuadConfig = TARGET_CONFIG,
        max_workers: int | None = None,
    ) -> QuadTree:
        """
        Builds a tree from raw leaf payloads.

        ### Construction Algorithm

        1.  **Depth**: `depth = log4(len(leaves))`; any other count is rejected.

        2.  **Leaves**: level 0 is the leaf digest of each payload, in input
            order. The leaf at position `i` has the base-4 path of `i`.

        3.  **Bottom-Up Iteration**: each level is grouped into runs of four
            and every run is hashed into its parent.

        4.  **Termination**: the level with a single digest holds the root.

        Args:
            leaves: The opaque leaf payloads, each `config.LEAF_LENGTH` bytes.
            config: The preset defining the leaf length and the parallel threshold.
            max_workers: When set, levels with at least
                `config.PARALLEL_MIN_GROUPS` groups are hashed across this many
                worker processes.

        Returns:
            The complete tree.

        Raises:
            ConstructionError: If the leaf count is not a power of four or a
                leaf has the wrong length. No partial tree is returned.
        """
        depth = tree_depth_for(len(leaves))
        current = hash_leaves(leaves, config)
        levels: list[Level] = [tuple(current)]

        logger.debug(
            "Building quaternary tree: depth=%d leaves=%d workers=%s",
            depth,
            len(leaves),
            max_workers,
        )

        executor: ProcessPoolExecutor | None = None
        try:
            for level in range(depth):
                group_count = len(current) // BRANCHING_FACTOR
                if max_workers and max_workers > 1 and group_count >= config.PARALLEL_MIN_GROUPS:
                    if executor is None:
                        executor = ProcessPoolExecutor(max_workers=max_workers)
                    logger.debug(
                        "Hashing level %d (%d groups) across %d workers",
                        level,
                        group_count,
                        max_workers,
                    )
                    current = parent_level(current, executor=executor, chunks=max_workers)
                else:
                    current = parent_level(current)
                levels.append(tuple(current))
        finally:
            if executor is not None:
                executor.shutdown()

        return cls(depth=depth, levels=tuple(levels))

    @property
    def leaf_count(self) -> int:
        """Number of leaves committed by the tree."""
        return BRANCHING_FACTOR**self.depth

    def root(self) -> Bytes32:
        """The single digest of the top level."""
        return self.levels[self.depth][0]

    def level(self, level: int) -> Level:
        """
        Returns the digests of one level.

        Raises:
            IndexError: If `level` is outside `[0, depth]`.
        """
        if not 0 <= level <= self.depth:
            raise IndexError(f"Level {level} is outside [0, {self.depth}]")
        return self.levels[level]
