"""Exception hierarchy for quaternary tree construction, proving and verification."""

from __future__ import annotations


class QuadTreeError(Exception):
    """
    Base exception for all quaternary tree errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r})"


class ConstructionError(QuadTreeError, ValueError):
    """
    Raised when a tree cannot be built from the supplied leaves.

    Construction aborts as a whole; no partial tree is ever returned.

    Attributes:
        leaf_count: The number of leaves that were supplied.
        detail: What was wrong with them.
    """

    def __init__(self, leaf_count: int, detail: str) -> None:
        self.leaf_count = leaf_count
        self.detail = detail
        super().__init__(f"Cannot build tree from {leaf_count} leaves: {detail}")


class IndexOutOfRangeError(QuadTreeError, IndexError):
    """
    Raised when a proof is requested for a leaf position the tree does not have.

    Attributes:
        position: The requested leaf position.
        leaf_count: The number of leaves in the tree.
    """

    def __init__(self, position: int, leaf_count: int) -> None:
        self.position = position
        self.leaf_count = leaf_count
        super().__init__(
            f"Leaf position {position} is out of range for a tree of {leaf_count} leaves "
            f"(valid range: [0, {leaf_count - 1}])"
        )


class MalformedProofError(QuadTreeError, ValueError):
    """
    Raised when a proof violates a structural invariant.

    Structural checks run before any hashing, so this error is always distinct
    from a cryptographic mismatch.
    """


class ProofDecodeError(MalformedProofError):
    """
    Raised when proof bytes cannot be decoded.

    Attributes:
        format_name: The encoding being decoded (e.g. "wire", "bincode").
        detail: Description of what went wrong.
        offset: The byte offset where the error occurred (if known).
    """

    def __init__(self, format_name: str, detail: str, *, offset: int | None = None) -> None:
        self.format_name = format_name
        self.detail = detail
        self.offset = offset

        msg = f"Failed to decode {format_name} proof: {detail}"
        if offset is not None:
            msg = f"{msg} (at byte offset {offset})"

        super().__init__(msg)


class RootMismatchError(QuadTreeError):
    """
    Raised when a structurally valid proof does not reconstruct the expected root.

    This is the ordinary "proof rejected" outcome for tampered or foreign proofs.

    Attributes:
        expected: Hex of the root the proof was checked against.
        actual: Hex of the root that was reconstructed.
    """

    def __init__(self, expected: str, actual: str, *, detail: str | None = None) -> None:
        self.expected = expected
        self.actual = actual

        msg = f"Root mismatch: expected {expected}, got {actual}"
        if detail:
            msg = f"{msg} ({detail})"

        super().__init__(msg)


class LeafMismatchError(RootMismatchError):
    """Raised when supplied leaf bytes do not hash to the proof's leaf digest."""
