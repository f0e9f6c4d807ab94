"""Subspecifications of the quaternary tree protocol."""
