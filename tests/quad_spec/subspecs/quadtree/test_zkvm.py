"""Tests for the guest program's public outputs."""

import pytest

from quad_spec.subspecs.quadtree import (
    GuestOutput,
    IntEncoding,
    QuadTree,
    execute_guest,
    generate_proof,
)
from quad_spec.types import Bytes32, MalformedProofError, ProofDecodeError, RootMismatchError


def test_valid_proof_commits_root_and_true(tree16: QuadTree) -> None:
    proof = generate_proof(tree16, 5)
    output = execute_guest(proof.to_bincode())

    assert output == GuestOutput(root_hash=tree16.root(), is_valid=True)
    assert output.commitment() == bytes(tree16.root()) + b"\x01"


def test_leaf_position_is_not_committed(tree16: QuadTree) -> None:
    commitments = {
        execute_guest(generate_proof(tree16, position).to_bincode()).commitment()
        for position in range(16)
    }
    assert len(commitments) == 1


def test_varint_input(tree16: QuadTree) -> None:
    data = generate_proof(tree16, 9).to_bincode(IntEncoding.VARINT)
    assert execute_guest(data, encoding=IntEncoding.VARINT).is_valid


def test_invalid_proof_commits_claimed_root_and_false(tree16: QuadTree) -> None:
    proof = generate_proof(tree16, 5)
    tampered = proof.copy(leaf_hash=Bytes32.zero())

    output = execute_guest(tampered.to_bincode())

    assert output.root_hash == tree16.root()
    assert not output.is_valid
    assert output.commitment()[-1:] == b"\x00"


def test_require_valid_raises_on_mismatch(tree16: QuadTree) -> None:
    tampered = generate_proof(tree16, 5).copy(leaf_hash=Bytes32.zero())
    with pytest.raises(RootMismatchError):
        execute_guest(tampered.to_bincode(), require_valid=True)


def test_require_valid_raises_on_malformed(tree16: QuadTree) -> None:
    proof = generate_proof(tree16, 5)
    short = proof.copy(sibling_hashes=proof.sibling_hashes[:1])

    assert not execute_guest(short.to_bincode()).is_valid
    with pytest.raises(MalformedProofError):
        execute_guest(short.to_bincode(), require_valid=True)


@pytest.mark.parametrize("data", [b"", b"\x02", b"\x00" * 10, b"\xff" * 300])
def test_undecodable_input(data: bytes) -> None:
    with pytest.raises(ProofDecodeError):
        execute_guest(data)


def test_commitment_width() -> None:
    output = GuestOutput(root_hash=Bytes32.zero(), is_valid=False)
    assert output.commitment() == b"\x00" * 33
