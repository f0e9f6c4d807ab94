"""
Node positions in the quaternary tree.

A node is addressed by the branch choices taken from the root to reach it. For
a leaf in a tree of depth `d`, that is a fixed-width sequence of `d` base-4
digits, most significant first, which is exactly the base-4 representation of
the leaf's position in the input order:

    position 5 in a depth-2 tree  ->  5 = 1*4 + 1  ->  path (1, 1)

Deriving paths from positions, instead of storing free-form paths, gives a
bijection between leaf positions and indices: no two leaves share a path and
every path of the right width names exactly one leaf.
"""

from __future__ import annotations

from typing import Any

from pydantic import field_validator

from quad_spec.types import MalformedProofError, StrictBaseModel, Uint8

from .constants import BRANCHING_FACTOR, MAX_DEPTH


class TreeIndex(StrictBaseModel):
    """
    Position of a node, as a depth and the branch taken at each level.

    The model accepts any `u8` digits so that untrusted, decoded indices can be
    represented and then rejected by the verifier. Use `new` or
    `from_position` to build indices that are guaranteed well-formed.
    """

    depth: Uint8
    """Distance from the root; `0` denotes the root itself."""

    path: tuple[Uint8, ...]
    """
    Branch choices from the root downward.

    `path[0]` is taken at the root's children and `path[depth - 1]` at the
    node's immediate parent.
    """

    @field_validator("path", mode="before")
    @classmethod
    def _coerce_path(cls, v: Any) -> Any:
        """Accept any sequence of digits and store it as an immutable tuple."""
        if isinstance(v, (list, bytes, bytearray)):
            return tuple(v)
        return v

    @classmethod
    def new(cls, depth: int, path: tuple[int, ...] | list[int]) -> TreeIndex:
        """
        Builds a validated index.

        Raises:
            MalformedProofError: If the path length differs from `depth` or a
                digit is outside `[0, 4)`.
        """
        index = cls(depth=Uint8(depth), path=tuple(Uint8(d) for d in path))
        index.validate_shape()
        return index

    @classmethod
    def root(cls) -> TreeIndex:
        """Index of the root node."""
        return cls(depth=Uint8(0), path=())

    @classmethod
    def from_position(cls, position: int, depth: int) -> TreeIndex:
        """
        Encodes a leaf position as a fixed-width base-4 path.

        Args:
            position: Leaf position in input order, `0 <= position < 4**depth`.
            depth: Depth of the tree the leaf belongs to.

        Returns:
            The leaf's index, with the most significant digit first.

        Raises:
            ValueError: If the position does not fit in `depth` digits.
        """
        if not 0 <= depth <= MAX_DEPTH:
            raise ValueError(f"Depth {depth} is outside [0, {MAX_DEPTH}]")
        if not 0 <= position < BRANCHING_FACTOR**depth:
            raise ValueError(f"Position {position} does not fit in {depth} base-4 digits")

        digits = [0] * depth
        remaining = position
        for slot in range(depth - 1, -1, -1):
            remaining, digits[slot] = divmod(remaining, BRANCHING_FACTOR)

        return cls(depth=Uint8(depth), path=tuple(Uint8(d) for d in digits))

    @property
    def position(self) -> int:
        """
        Decodes the path back to a leaf position.

        Raises:
            MalformedProofError: If the index is not well-formed.
        """
        self.validate_shape()
        position = 0
        for digit in self.path:
            position = position * BRANCHING_FACTOR + int(digit)
        return position

    def child(self, branch: int) -> TreeIndex:
        """
        Returns the index of the child reached through `branch`.

        Raises:
            ValueError: If `branch` is not in `[0, 4)` or the child would be too deep.
        """
        if not 0 <= branch < BRANCHING_FACTOR:
            raise ValueError(f"Branch index must be in [0, {BRANCHING_FACTOR}), got {branch}")
        if int(self.depth) >= MAX_DEPTH:
            raise ValueError(f"Cannot descend below depth {MAX_DEPTH}")
        return type(self)(depth=Uint8(int(self.depth) + 1), path=self.path + (Uint8(branch),))

    def branch_at_depth(self, depth: int) -> Uint8 | None:
        """Returns the branch taken at `depth`, or `None` past the end of the path."""
        if 0 <= depth < len(self.path):
            return self.path[depth]
        return None

    def is_well_formed(self) -> bool:
        """Whether the path length matches the depth and every digit is a valid branch."""
        return len(self.path) == int(self.depth) and all(
            int(d) < BRANCHING_FACTOR for d in self.path
        )

    def validate_shape(self) -> None:
        """
        Checks the index invariants.

        Raises:
            MalformedProofError: If `len(path) != depth` or a digit is out of range.
        """
        if len(self.path) != int(self.depth):
            raise MalformedProofError(
                f"Path length {len(self.path)} does not match depth {int(self.depth)}"
            )
        for level, digit in enumerate(self.path):
            if int(digit) >= BRANCHING_FACTOR:
                raise MalformedProofError(
                    f"Path digit {int(digit)} at depth {level} is outside [0, {BRANCHING_FACTOR})"
                )
