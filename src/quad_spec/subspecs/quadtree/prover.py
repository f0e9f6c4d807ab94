"""
Membership proof generation.

### Sibling order

At every level the node on the path sits in a group of four. The proof keeps
the other three digests of that group, in ascending branch order with the
node's own branch skipped:

    group:     [ c0 | c1 | c2 | c3 ]      node at branch 2
    triple:    ( c0 ,  c1 ,       c3 )

Triples are appended while climbing, so `sibling_hashes[0]` is the leaf's own
group and the last triple is the root's children. The verifier consumes them
in that same leaf-to-root order, reading the path from its last digit back to
its first.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from quad_spec.types import Bytes32, IndexOutOfRangeError

from .builder import QuadTree, hash_leaves, parent_level, tree_depth_for
from .constants import BRANCHING_FACTOR, TARGET_CONFIG, QuadConfig
from .index import TreeIndex
from .proof import MembershipProof, SiblingTriple

logger = logging.getLogger(__name__)


def sibling_triple(level: Sequence[Bytes32], node_position: int) -> SiblingTriple:
    """
    Extracts the three siblings of a node within its group of four.

    Args:
        level: The digests of the node's level.
        node_position: The node's position within that level.

    Returns:
        The other members of the node's group, ascending, own branch skipped.
    """
    branch = node_position % BRANCHING_FACTOR
    group_start = node_position - branch
    a, b, c = (
        level[group_start + other] for other in range(BRANCHING_FACTOR) if other != branch
    )
    return (a, b, c)


def generate_proof(tree: QuadTree, position: int) -> MembershipProof:
    """
    Generates the membership proof for one leaf.

    ### Proof Generation Algorithm

    The algorithm climbs from the leaf to the root. At each level it records
    the sibling triple of the current node, then moves to the parent, whose
    position is the current position divided by four.

    Args:
        tree: The built tree.
        position: The leaf position in input order.

    Returns:
        The proof for that leaf.

    Raises:
        IndexOutOfRangeError: If `position` is outside `[0, leaf_count)`.
    """
    if not 0 <= position < tree.leaf_count:
        raise IndexOutOfRangeError(position, tree.leaf_count)

    siblings: list[SiblingTriple] = []
    current = position
    for level in range(tree.depth):
        siblings.append(sibling_triple(tree.levels[level], current))
        current //= BRANCHING_FACTOR

    proof = MembershipProof(
        leaf_index=TreeIndex.from_position(position, tree.depth),
        leaf_hash=tree.levels[0][position],
        sibling_hashes=tuple(siblings),
        root_hash=tree.root(),
    )
    logger.debug(
        "Generated proof for leaf %d: path=%s root=%s",
        position,
        [int(d) for d in proof.leaf_index.path],
        proof.root_hash.hex()[:16],
    )
    return proof


def stream_proofs(
    leaves: Sequence[bytes],
    positions: Iterable[int],
    *,
    config: QuadConfig = TARGET_CONFIG,
) -> dict[int, MembershipProof]:
    """
    Builds the tree level by level and returns proofs for a known set of leaves.

    Only the level being hashed and the sibling triples of the requested leaves
    are held in memory; each level is discarded once its parents exist. The
    proofs are identical to calling `generate_proof` on a fully built tree.

    Args:
        leaves: The opaque leaf payloads.
        positions: The leaf positions to prove. Duplicates are coalesced.
        config: The preset defining the leaf length.

    Returns:
        A mapping from each requested position to its proof.

    Raises:
        ConstructionError: If the leaves cannot form a tree.
        IndexOutOfRangeError: If a position is outside `[0, len(leaves))`.
            Raised before any hashing takes place.
    """
    depth = tree_depth_for(len(leaves))
    leaf_count = BRANCHING_FACTOR**depth

    targets = sorted(set(positions))
    for position in targets:
        if not 0 <= position < leaf_count:
            raise IndexOutOfRangeError(position, leaf_count)

    current = hash_leaves(leaves, config)
    leaf_hashes = {position: current[position] for position in targets}
    siblings: dict[int, list[SiblingTriple]] = {position: [] for position in targets}

    for level in range(depth):
        divisor = BRANCHING_FACTOR**level
        for position in targets:
            siblings[position].append(sibling_triple(current, position // divisor))
        current = parent_level(current)

    root = current[0]
    logger.debug(
        "Streamed %d proofs from %d leaves: root=%s", len(targets), leaf_count, root.hex()[:16]
    )

    return {
        position: MembershipProof(
            leaf_index=TreeIndex.from_position(position, depth),
            leaf_hash=leaf_hashes[position],
            sibling_hashes=tuple(siblings[position]),
            root_hash=root,
        )
        for position in targets
    }
