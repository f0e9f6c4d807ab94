"""
Membership proof verification.

Verification needs only the proof, never the tree. It runs as a small state
machine with one state per level:

1.  **Structure**: the path must have one in-range digit per level and there
    must be one sibling triple per level. Violations are rejected as
    malformed before any hashing.

2.  **Climb**: starting from the leaf digest, at step `l` the branch is
    `path[depth - 1 - l]`. The current digest is slotted back into that
    position among the step's three siblings and the four are hashed into
    the parent.

3.  **Compare**: the proof is accepted iff the final digest equals the claimed
    root (and the trusted root, when one is supplied).

The path is read last digit first while the triples are read first to last.
Both orders run leaf-to-root; inverting either one silently yields a wrong
root rather than an error, so the pairing is tested directly.
"""

from __future__ import annotations

import logging

from quad_spec.types import (
    Bytes32,
    LeafMismatchError,
    MalformedProofError,
    RootMismatchError,
)

from .constants import BRANCHING_FACTOR, SIBLINGS_PER_LEVEL
from .hashing import leaf_digest, node_digest
from .proof import MembershipProof, SiblingTriple

logger = logging.getLogger(__name__)


def check_structure(proof: MembershipProof) -> None:
    """
    Validates the structural invariants of a proof.

    Raises:
        MalformedProofError: If the path does not match the depth, a path digit
            is outside `[0, 4)`, or the number of sibling triples differs from
            the depth.
    """
    proof.leaf_index.validate_shape()

    if len(proof.sibling_hashes) != proof.depth:
        raise MalformedProofError(
            f"Proof has {len(proof.sibling_hashes)} sibling levels for depth {proof.depth}"
        )
    for level, triple in enumerate(proof.sibling_hashes):
        if len(triple) != SIBLINGS_PER_LEVEL:
            raise MalformedProofError(
                f"Sibling level {level} holds {len(triple)} digests, expected {SIBLINGS_PER_LEVEL}"
            )


def reinsert(current: Bytes32, branch: int, siblings: SiblingTriple) -> list[Bytes32]:
    """
    Rebuilds a group of four from a node and its three siblings.

    The siblings fill the positions other than `branch`, in ascending order.
    """
    remaining = iter(siblings)
    return [current if slot == branch else next(remaining) for slot in range(BRANCHING_FACTOR)]


def compute_root(proof: MembershipProof, *, leaf: bytes | None = None) -> Bytes32:
    """
    Recomputes the root digest implied by a proof.

    Args:
        proof: The proof to evaluate.
        leaf: Raw leaf bytes. When given, the climb starts from their digest,
            which must match `proof.leaf_hash`.

    Returns:
        The reconstructed root.

    Raises:
        MalformedProofError: If the proof is structurally invalid.
        LeafMismatchError: If `leaf` does not hash to `proof.leaf_hash`.
    """
    check_structure(proof)

    current = proof.leaf_hash
    if leaf is not None:
        current = leaf_digest(leaf)
        if current != proof.leaf_hash:
            raise LeafMismatchError(
                proof.leaf_hash.hex(), current.hex(), detail="leaf bytes do not match leaf_hash"
            )

    depth = proof.depth
    for level, siblings in enumerate(proof.sibling_hashes):
        branch = int(proof.leaf_index.path[depth - 1 - level])
        current = node_digest(*reinsert(current, branch, siblings))

    return current


def check_proof(
    proof: MembershipProof,
    *,
    expected_root: Bytes32 | None = None,
    leaf: bytes | None = None,
) -> None:
    """
    Verifies a proof, raising on rejection.

    Args:
        proof: The proof to check.
        expected_root: A trusted root. When given, the proof's claimed root
            must equal it as well as the reconstructed root.
        leaf: Raw leaf bytes to re-hash instead of trusting `leaf_hash`.

    Raises:
        MalformedProofError: If the proof is structurally invalid.
        LeafMismatchError: If `leaf` does not hash to `proof.leaf_hash`.
        RootMismatchError: If the reconstructed root differs from the claimed
            root, or the claimed root differs from `expected_root`.
    """
    check_structure(proof)

    if expected_root is not None and proof.root_hash != expected_root:
        raise RootMismatchError(
            expected_root.hex(), proof.root_hash.hex(), detail="claimed root is not trusted"
        )

    computed = compute_root(proof, leaf=leaf)
    if computed != proof.root_hash:
        raise RootMismatchError(proof.root_hash.hex(), computed.hex())


def verify_proof(
    proof: MembershipProof,
    *,
    expected_root: Bytes32 | None = None,
    leaf: bytes | None = None,
) -> bool:
    """
    Verifies a proof.

    Malformed proofs and root mismatches are both rejections, reported as
    `False` and logged at debug level with their reason.

    Returns:
        `True` if the proof is accepted, `False` otherwise.
    """
    try:
        check_proof(proof, expected_root=expected_root, leaf=leaf)
    except (MalformedProofError, RootMismatchError) as e:
        logger.debug("Rejected membership proof: %s", e)
        return False
    return True
