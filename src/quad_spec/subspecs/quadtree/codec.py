"""
Compact wire format for membership proofs.

Layout, in field order, with no length prefixes (every width follows from the
leading depth byte):

    depth          : u8
    path           : depth x u8             (each 0..3)
    leaf_hash      : 32 bytes
    sibling_hashes : depth x 3 x 32 bytes   (leaf-to-root, ascending branches)
    root_hash      : 32 bytes

A proof of depth `d` therefore occupies `1 + d + 64 + 96 * d` bytes. The
in-circuit verifier must rebuild the exact same intermediate digests, so field
order and widths are fixed.
"""

from __future__ import annotations

from quad_spec.types import Bytes32, ProofDecodeError, Uint8

from .constants import DIGEST_LENGTH, SIBLINGS_PER_LEVEL
from .index import TreeIndex
from .proof import MembershipProof, SiblingTriple

FORMAT_NAME = "wire"


def encoded_size(depth: int) -> int:
    """Byte size of an encoded proof of the given depth."""
    return 1 + depth + 2 * DIGEST_LENGTH + depth * SIBLINGS_PER_LEVEL * DIGEST_LENGTH


def encode_proof(proof: MembershipProof) -> bytes:
    """
    Serialize a proof to the compact wire format.

    Raises:
        ValueError: If the proof cannot be represented: the path length or the
            number of sibling levels differs from the depth. Such a proof has no
            wire encoding because the widths are implied by the depth.
    """
    depth = proof.depth
    if len(proof.leaf_index.path) != depth or len(proof.sibling_hashes) != depth:
        raise ValueError(
            f"Cannot encode proof with depth {depth}, {len(proof.leaf_index.path)} path digits "
            f"and {len(proof.sibling_hashes)} sibling levels"
        )

    parts = [
        Uint8(depth).encode_bytes(),
        bytes(int(digit) for digit in proof.leaf_index.path),
        bytes(proof.leaf_hash),
    ]
    parts.extend(bytes(digest) for triple in proof.sibling_hashes for digest in triple)
    parts.append(bytes(proof.root_hash))
    return b"".join(parts)


def decode_proof(data: bytes) -> MembershipProof:
    """
    Parse a proof from the compact wire format.

    Path digits are not range-checked here; that is the verifier's job, so a
    decoded proof with a digit of 4 or more is rejected as malformed there.

    Raises:
        ProofDecodeError: If the data is empty or its length does not match
            the size implied by the depth byte.
    """
    if len(data) == 0:
        raise ProofDecodeError(FORMAT_NAME, "empty input", offset=0)

    depth = data[0]
    expected = encoded_size(depth)
    if len(data) != expected:
        raise ProofDecodeError(
            FORMAT_NAME,
            f"depth {depth} requires {expected} bytes, got {len(data)}",
            offset=min(len(data), expected),
        )

    offset = 1
    path = tuple(Uint8(digit) for digit in data[offset : offset + depth])
    offset += depth

    leaf_hash = Bytes32(data[offset : offset + DIGEST_LENGTH])
    offset += DIGEST_LENGTH

    siblings: list[SiblingTriple] = []
    for _ in range(depth):
        a, b, c = (
            Bytes32(data[offset + i * DIGEST_LENGTH : offset + (i + 1) * DIGEST_LENGTH])
            for i in range(SIBLINGS_PER_LEVEL)
        )
        siblings.append((a, b, c))
        offset += SIBLINGS_PER_LEVEL * DIGEST_LENGTH

    root_hash = Bytes32(data[offset : offset + DIGEST_LENGTH])

    return MembershipProof(
        leaf_index=TreeIndex(depth=Uint8(depth), path=path),
        leaf_hash=leaf_hash,
        sibling_hashes=tuple(siblings),
        root_hash=root_hash,
    )
