"""Tests for tree index encoding and navigation."""

import pytest
from hypothesis import given
from hypothesis import strategies as st

from quad_spec.subspecs.quadtree.index import TreeIndex
from quad_spec.types import MalformedProofError, Uint8


def test_new_index() -> None:
    idx = TreeIndex.new(3, [0, 1, 2])
    assert idx.depth == 3
    assert idx.path == (0, 1, 2)
    assert all(isinstance(d, Uint8) for d in idx.path)


def test_root_and_child() -> None:
    root = TreeIndex.root()
    assert root.depth == 0
    assert root.path == ()

    child = root.child(2)
    assert child.depth == 1
    assert child.path == (2,)
    assert child.child(0).path == (2, 0)


@pytest.mark.parametrize("branch", [-1, 4, 7])
def test_child_rejects_invalid_branch(branch: int) -> None:
    with pytest.raises(ValueError, match="Branch index"):
        TreeIndex.root().child(branch)


def test_new_rejects_depth_mismatch() -> None:
    with pytest.raises(MalformedProofError, match="does not match depth"):
        TreeIndex.new(2, [0, 1, 2])


def test_new_rejects_out_of_range_digit() -> None:
    with pytest.raises(MalformedProofError, match="outside"):
        TreeIndex.new(2, [0, 4])


def test_model_can_hold_malformed_indices() -> None:
    """Decoded input is representable so that the verifier can reject it."""
    idx = TreeIndex(depth=Uint8(2), path=(Uint8(9),))
    assert not idx.is_well_formed()


def test_branch_at_depth() -> None:
    idx = TreeIndex.new(3, [3, 1, 2])
    assert idx.branch_at_depth(0) == 3
    assert idx.branch_at_depth(2) == 2
    assert idx.branch_at_depth(3) is None
    assert idx.branch_at_depth(-1) is None


@pytest.mark.parametrize(
    "position, depth, path",
    [
        (0, 0, ()),
        (5, 2, (1, 1)),
        (15, 2, (3, 3)),
        (6, 3, (0, 1, 2)),
        (63, 3, (3, 3, 3)),
        (1, 2, (0, 1)),
        (4, 2, (1, 0)),
    ],
)
def test_from_position_is_base4_most_significant_first(
    position: int, depth: int, path: tuple[int, ...]
) -> None:
    idx = TreeIndex.from_position(position, depth)
    assert idx.depth == depth
    assert idx.path == path
    assert idx.position == position


@pytest.mark.parametrize("position, depth", [(16, 2), (-1, 2), (1, 0)])
def test_from_position_rejects_positions_outside_the_tree(position: int, depth: int) -> None:
    with pytest.raises(ValueError, match="does not fit"):
        TreeIndex.from_position(position, depth)


def test_position_of_malformed_index_raises() -> None:
    with pytest.raises(MalformedProofError):
        _ = TreeIndex(depth=Uint8(1), path=(Uint8(4),)).position


@given(depth=st.integers(min_value=0, max_value=8), data=st.data())
def test_position_path_bijection(depth: int, data: st.DataObject) -> None:
    position = data.draw(st.integers(min_value=0, max_value=4**depth - 1))
    idx = TreeIndex.from_position(position, depth)
    assert len(idx.path) == depth
    assert idx.is_well_formed()
    assert idx.position == position


def test_all_paths_distinct_for_depth_2() -> None:
    paths = {TreeIndex.from_position(i, 2).path for i in range(16)}
    assert len(paths) == 16


def test_path_accepts_lists_and_is_frozen() -> None:
    idx = TreeIndex(depth=Uint8(2), path=[Uint8(1), Uint8(3)])
    assert isinstance(idx.path, tuple)
    with pytest.raises(Exception):
        idx.depth = Uint8(0)  # type: ignore[misc]
