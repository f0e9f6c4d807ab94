"""
Contract of the zero-knowledge guest program.

The proving pipeline runs the verification algorithm inside a zkVM. Its
private input is a bincode-serialized `MembershipProof`; its public outputs
are the root digest and a validity flag, committed in that order. The leaf
position stays private: it is consumed by the verifier but never committed.

`execute_guest` evaluates that program natively, so the host can check that
an input will produce the public outputs it expects before paying for a proof.
"""

from __future__ import annotations

import logging

from quad_spec.types import Bytes32, MalformedProofError, RootMismatchError, StrictBaseModel

from .bincode import IntEncoding, deserialize_proof
from .verifier import check_proof

logger = logging.getLogger(__name__)


class GuestOutput(StrictBaseModel):
    """The public values committed by the guest program."""

    root_hash: Bytes32
    """The root the proof claims membership under."""

    is_valid: bool
    """Whether the proof reconstructed that root."""

    def commitment(self) -> bytes:
        """
        The committed public values, in commit order.

        `root_hash` is a fixed array (32 raw bytes) and `is_valid` a bincode
        bool (one byte, 0 or 1).
        """
        return bytes(self.root_hash) + (b"\x01" if self.is_valid else b"\x00")


def execute_guest(
    input_bytes: bytes,
    *,
    encoding: IntEncoding = IntEncoding.FIXED,
    require_valid: bool = False,
) -> GuestOutput:
    """
    Runs the guest's verification program on its serialized input.

    Args:
        input_bytes: The bincode-serialized proof.
        encoding: The integer encoding of the input's length prefixes.
        require_valid: Mirror the guest's abort on invalid proofs: instead of
            returning `is_valid=False`, re-raise the rejection.

    Returns:
        The public outputs.

    Raises:
        ProofDecodeError: If the input cannot be decoded; the guest cannot
            produce any output for it.
        MalformedProofError, RootMismatchError: If `require_valid` is set and
            the proof is rejected.
    """
    proof = deserialize_proof(input_bytes, encoding)

    try:
        check_proof(proof)
    except (MalformedProofError, RootMismatchError) as e:
        if require_valid:
            raise
        logger.debug("Guest rejected proof: %s", e)
        return GuestOutput(root_hash=proof.root_hash, is_valid=False)

    return GuestOutput(root_hash=proof.root_hash, is_valid=True)
