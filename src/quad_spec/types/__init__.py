"""Reusable type definitions for the quaternary tree specification."""

from .base import StrictBaseModel
from .byte_arrays import ZERO_HASH, BaseBytes, Bytes32
from .exceptions import (
    ConstructionError,
    IndexOutOfRangeError,
    LeafMismatchError,
    MalformedProofError,
    ProofDecodeError,
    QuadTreeError,
    RootMismatchError,
)
from .uint import BaseUint, Uint8, Uint64

__all__ = [
    # Core types
    "BaseBytes",
    "BaseUint",
    "Bytes32",
    "StrictBaseModel",
    "Uint8",
    "Uint64",
    "ZERO_HASH",
    # Exceptions
    "QuadTreeError",
    "ConstructionError",
    "IndexOutOfRangeError",
    "MalformedProofError",
    "ProofDecodeError",
    "RootMismatchError",
    "LeafMismatchError",
]
