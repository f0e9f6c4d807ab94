"""Tests for the configuration presets and protocol constants."""

import pytest
from pydantic import ValidationError

from quad_spec.config import QUAD_ENV
from quad_spec.subspecs.quadtree import PROD_CONFIG, TARGET_CONFIG, TEST_CONFIG, QuadConfig
from quad_spec.subspecs.quadtree.constants import (
    BRANCHING_FACTOR,
    DIGEST_LENGTH,
    MAX_DEPTH,
    SIBLINGS_PER_LEVEL,
)


def test_test_environment_is_selected() -> None:
    assert QUAD_ENV == "test"
    assert TARGET_CONFIG == TEST_CONFIG


def test_prod_leaves_are_mlkem_public_keys() -> None:
    assert PROD_CONFIG.LEAF_LENGTH == 1184


def test_protocol_constants() -> None:
    assert BRANCHING_FACTOR == 4
    assert SIBLINGS_PER_LEVEL == 3
    assert DIGEST_LENGTH == 32
    assert MAX_DEPTH == 255


def test_presets_are_frozen() -> None:
    with pytest.raises(ValidationError):
        TEST_CONFIG.LEAF_LENGTH = 64  # type: ignore[misc]


def test_presets_reject_unknown_fields() -> None:
    with pytest.raises(ValidationError):
        QuadConfig(LEAF_LENGTH=32, PARALLEL_MIN_GROUPS=4, FANOUT=8)  # type: ignore[call-arg]
