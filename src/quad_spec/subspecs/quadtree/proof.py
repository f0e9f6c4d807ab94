"""
The membership proof container.

A `MembershipProof` is the unit exchanged across the system boundary: it is
serialized, handed to verifiers, and fed to the zero-knowledge guest program.
It is immutable once created.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from pydantic import field_validator

from quad_spec.types import Bytes32, StrictBaseModel

from .constants import DIGEST_LENGTH, SIBLINGS_PER_LEVEL
from .index import TreeIndex

if TYPE_CHECKING:
    from .bincode import IntEncoding

SiblingTriple = tuple[Bytes32, Bytes32, Bytes32]
"""The three digests of the branches not taken at one level, in ascending branch order."""


class MembershipProof(StrictBaseModel):
    """
    Evidence that a leaf digest is committed under a root digest.

    Container with fields:
    - leaf_index: TreeIndex (depth + base-4 path)
    - leaf_hash: Bytes32
    - sibling_hashes: one `SiblingTriple` per level, leaf-to-root
    - root_hash: Bytes32

    The invariant `len(sibling_hashes) == leaf_index.depth` is deliberately not
    enforced here: proofs arrive from untrusted sources, and the verifier is
    the place that rejects them as malformed.
    """

    leaf_index: TreeIndex
    """Position of the proven leaf. Hidden from the verifier inside the zkVM."""

    leaf_hash: Bytes32
    """Digest of the leaf's raw bytes."""

    sibling_hashes: tuple[SiblingTriple, ...]
    """
    Sibling digests, one triple per level.

    `sibling_hashes[0]` belongs to the leaf's own group and the last triple to
    the root's children. Within a triple, the digests follow ascending branch
    order with the taken branch skipped.
    """

    root_hash: Bytes32
    """The claimed root digest."""

    @field_validator("sibling_hashes", mode="before")
    @classmethod
    def _coerce_siblings(cls, v: Any) -> Any:
        """Accept nested lists and store them as immutable tuples."""
        if isinstance(v, list) or (
            isinstance(v, tuple) and any(isinstance(triple, list) for triple in v)
        ):
            return tuple(tuple(triple) for triple in v)
        return v

    @property
    def depth(self) -> int:
        """Depth of the tree the proof was generated from."""
        return int(self.leaf_index.depth)

    def sibling_payload_size(self) -> int:
        """Byte size of the sibling digests alone: `levels * 3 * 32`."""
        return len(self.sibling_hashes) * SIBLINGS_PER_LEVEL * DIGEST_LENGTH

    def size_bytes(self) -> int:
        """
        Byte size of the compact wire encoding.

        That is the depth byte, one byte per path digit, the leaf and root
        digests, and the sibling payload.
        """
        return 1 + len(self.leaf_index.path) + 2 * DIGEST_LENGTH + self.sibling_payload_size()

    def encode_bytes(self) -> bytes:
        """Serialize to the compact wire format."""
        from .codec import encode_proof

        return encode_proof(self)

    @classmethod
    def decode_bytes(cls, data: bytes) -> MembershipProof:
        """Parse the compact wire format."""
        from .codec import decode_proof

        return decode_proof(data)

    def to_bincode(self, encoding: IntEncoding | None = None) -> bytes:
        """Serialize to the bincode layout read by the zkVM guest."""
        from .bincode import IntEncoding, serialize_proof

        return serialize_proof(self, encoding or IntEncoding.FIXED)

    @classmethod
    def from_bincode(cls, data: bytes, encoding: IntEncoding | None = None) -> MembershipProof:
        """Parse the bincode layout read by the zkVM guest."""
        from .bincode import IntEncoding, deserialize_proof

        return deserialize_proof(data, encoding or IntEncoding.FIXED)

    def verify(self, expected_root: Bytes32 | None = None, leaf: bytes | None = None) -> bool:
        """
        Verify the proof.

        This is a convenience method that delegates to `verify_proof()`.

        Args:
            expected_root: A trusted root to compare against, in addition to
                the proof's own `root_hash`.
            leaf: The raw leaf bytes, re-hashed instead of trusting `leaf_hash`.

        Returns:
            `True` if the proof is accepted, `False` otherwise.
        """
        from .verifier import verify_proof

        return verify_proof(self, expected_root=expected_root, leaf=leaf)
