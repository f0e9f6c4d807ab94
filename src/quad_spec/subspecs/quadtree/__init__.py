"""
This package provides a Python specification for quaternary (4-ary) Merkle
trees and their membership proofs.

It exposes the tree builder, the proof container, and the proving and
verification functions.
"""

from .bincode import IntEncoding
from .builder import QuadTree
from .constants import PROD_CONFIG, TARGET_CONFIG, TEST_CONFIG, QuadConfig
from .hashing import leaf_digest, node_digest
from .index import TreeIndex
from .proof import MembershipProof, SiblingTriple
from .prover import generate_proof, stream_proofs
from .verifier import check_proof, compute_root, verify_proof
from .zkvm import GuestOutput, execute_guest

__all__ = [
    "QuadTree",
    "TreeIndex",
    "MembershipProof",
    "SiblingTriple",
    "GuestOutput",
    "IntEncoding",
    "QuadConfig",
    "PROD_CONFIG",
    "TEST_CONFIG",
    "TARGET_CONFIG",
    "leaf_digest",
    "node_digest",
    "generate_proof",
    "stream_proofs",
    "check_proof",
    "compute_root",
    "verify_proof",
    "execute_guest",
]
