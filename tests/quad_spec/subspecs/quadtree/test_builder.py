"""Tests for quaternary tree construction."""

import pytest

from quad_spec.subspecs.quadtree import TEST_CONFIG, QuadConfig, QuadTree
from quad_spec.subspecs.quadtree.builder import hash_leaves, parent_level, tree_depth_for
from quad_spec.subspecs.quadtree.hashing import leaf_digest, node_digest
from quad_spec.types import ConstructionError


@pytest.mark.parametrize("count, depth", [(1, 0), (4, 1), (16, 2), (64, 3), (4**10, 10)])
def test_depth_of_powers_of_four(count: int, depth: int) -> None:
    assert tree_depth_for(count) == depth


@pytest.mark.parametrize("count", [0, 2, 3, 5, 8, 12, 15, 17, 32, 48])
def test_rejects_counts_that_are_not_powers_of_four(count: int) -> None:
    with pytest.raises(ConstructionError) as exc_info:
        tree_depth_for(count)
    assert exc_info.value.leaf_count == count


def test_build_rejects_fifteen_leaves(make_leaves) -> None:
    with pytest.raises(ConstructionError, match="power of 4"):
        QuadTree.build(make_leaves(15), config=TEST_CONFIG)


def test_build_rejects_empty_input() -> None:
    with pytest.raises(ConstructionError, match="at least one leaf"):
        QuadTree.build([], config=TEST_CONFIG)


def test_construction_error_is_a_value_error(make_leaves) -> None:
    with pytest.raises(ValueError):
        QuadTree.build(make_leaves(3), config=TEST_CONFIG)


def test_build_rejects_wrong_leaf_length(make_leaves) -> None:
    leaves = make_leaves(4)
    leaves[2] = leaves[2] + b"\x00"
    with pytest.raises(ConstructionError, match="leaf 2 is 33 bytes, expected 32"):
        QuadTree.build(leaves, config=TEST_CONFIG)


def test_build_rejects_non_bytes_leaves(make_leaves) -> None:
    leaves: list = make_leaves(4)
    leaves[1] = "not bytes"
    with pytest.raises(ConstructionError, match="leaf 1 is str"):
        QuadTree.build(leaves, config=TEST_CONFIG)


def test_leaf_length_follows_the_config() -> None:
    config = QuadConfig(LEAF_LENGTH=5, PARALLEL_MIN_GROUPS=4)
    tree = QuadTree.build([b"abcde"] * 4, config=config)
    assert tree.level(0) == (leaf_digest(b"abcde"),) * 4


def test_single_leaf_tree(make_leaves) -> None:
    (leaf,) = make_leaves(1)
    tree = QuadTree.build([leaf], config=TEST_CONFIG)

    assert tree.depth == 0
    assert tree.leaf_count == 1
    assert tree.root() == leaf_digest(leaf)


def test_four_leaf_root(make_leaves) -> None:
    leaves = make_leaves(4)
    tree = QuadTree.build(leaves, config=TEST_CONFIG)

    assert tree.depth == 1
    assert tree.root() == node_digest(*(leaf_digest(leaf) for leaf in leaves))


def test_levels_shrink_by_four(tree16: QuadTree) -> None:
    assert tree16.depth == 2
    assert tree16.leaf_count == 16
    assert [len(tree16.level(level)) for level in range(3)] == [16, 4, 1]
    assert tree16.level(2) == (tree16.root(),)


def test_leaf_level_preserves_input_order(leaves16: list[bytes], tree16: QuadTree) -> None:
    assert tree16.level(0) == tuple(leaf_digest(leaf) for leaf in leaves16)


def test_parents_hash_consecutive_groups(tree16: QuadTree) -> None:
    leaves = tree16.level(0)
    for k, parent in enumerate(tree16.level(1)):
        assert parent == node_digest(*leaves[4 * k : 4 * k + 4])


@pytest.mark.parametrize("level", [-1, 3])
def test_level_out_of_range(tree16: QuadTree, level: int) -> None:
    with pytest.raises(IndexError):
        tree16.level(level)


def test_build_is_deterministic(leaves16: list[bytes], tree16: QuadTree) -> None:
    assert QuadTree.build(leaves16, config=TEST_CONFIG) == tree16


def test_reordering_leaves_changes_the_root(leaves16: list[bytes], tree16: QuadTree) -> None:
    swapped = list(leaves16)
    swapped[0], swapped[1] = swapped[1], swapped[0]
    assert QuadTree.build(swapped, config=TEST_CONFIG).root() != tree16.root()


def test_tree_model_checks_level_sizes(tree16: QuadTree) -> None:
    with pytest.raises(ValueError):
        QuadTree(depth=2, levels=tree16.levels[:2])
    with pytest.raises(ValueError):
        QuadTree(depth=2, levels=(tree16.levels[0][:8], tree16.levels[1], tree16.levels[2]))


def test_parent_level_rejects_ragged_levels(tree16: QuadTree) -> None:
    with pytest.raises(ValueError, match="cannot be grouped"):
        parent_level(tree16.level(0)[:6])


def test_hash_leaves_matches_leaf_digest(leaves16: list[bytes]) -> None:
    assert hash_leaves(leaves16, TEST_CONFIG) == [leaf_digest(leaf) for leaf in leaves16]


@pytest.mark.slow
@pytest.mark.parametrize("workers", [2, 3])
def test_parallel_build_matches_sequential(make_leaves, workers: int) -> None:
    """Levels above the threshold are hashed in worker processes with identical output."""
    leaves = make_leaves(256)
    sequential = QuadTree.build(leaves, config=TEST_CONFIG)
    parallel = QuadTree.build(leaves, config=TEST_CONFIG, max_workers=workers)

    assert parallel == sequential
    assert parallel.root() == sequential.root()


@pytest.mark.slow
def test_parallel_build_below_threshold_matches_sequential(make_leaves) -> None:
    leaves = make_leaves(64)
    config = QuadConfig(LEAF_LENGTH=TEST_CONFIG.LEAF_LENGTH, PARALLEL_MIN_GROUPS=1_000)
    assert QuadTree.build(leaves, config=config, max_workers=4) == QuadTree.build(
        leaves, config=config
    )
