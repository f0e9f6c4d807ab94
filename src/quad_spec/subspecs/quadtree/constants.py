"""
Defines the protocol constants and configuration presets for the quaternary
Merkle tree spec.

The protocol constants (branching factor, digest width, leaf domain tag) are
part of the wire contract with the in-circuit verifier and never vary. The
configuration presets only tune local behavior: the size of the opaque leaf
payloads and when tree construction fans out to worker processes.
"""

from pydantic import BaseModel, ConfigDict
from typing_extensions import Final

from ...config import QUAD_ENV


class QuadConfig(BaseModel):
    """A model holding the configuration constants for a quaternary tree preset."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    LEAF_LENGTH: int
    """
    The exact length in bytes of every leaf payload.

    Leaves are opaque to the tree; the length is fixed per deployment rather
    than negotiated per call.
    """

    PARALLEL_MIN_GROUPS: int
    """
    Minimum number of 4-child groups a level must contain before its hashing is
    split across worker processes.

    Smaller levels are always hashed in-process.
    """


PROD_CONFIG: Final = QuadConfig(
    # ML-KEM-768 encapsulation key size.
    LEAF_LENGTH=1184,
    PARALLEL_MIN_GROUPS=4096,
)


TEST_CONFIG: Final = QuadConfig(
    LEAF_LENGTH=32,
    PARALLEL_MIN_GROUPS=4,
)


TARGET_CONFIG: Final = PROD_CONFIG if QUAD_ENV == "prod" else TEST_CONFIG
"""The preset selected by the `QUAD_ENV` environment flag."""


BRANCHING_FACTOR: Final = 4
"""Number of children under every internal node."""

SIBLINGS_PER_LEVEL: Final = BRANCHING_FACTOR - 1
"""Number of sibling digests a proof records per level."""

DIGEST_LENGTH: Final = 32
"""Output length in bytes of the hash primitive."""

MAX_DEPTH: Final = 255
"""Largest depth representable by the `u8` depth field of a serialized proof."""

LEAF_DOMAIN_TAG: Final = b"QUAD_LEAF:"
"""Prefix mixed into every leaf hash, separating leaf digests from node digests."""
