"""Python specification of quaternary Merkle trees with zkVM-ready membership proofs."""
