"""
Global configuration for the quaternary tree specification.

This module contains environment-specific settings that apply across all subspecs.
"""

import os

_SUPPORTED_QUAD_ENVS: list[str] = ["prod", "test"]

QUAD_ENV = os.environ.get("QUAD_ENV", "prod").lower()
"""The environment flag ('prod' or 'test'). Defaults to 'prod' for the specs."""

if QUAD_ENV not in _SUPPORTED_QUAD_ENVS:
    raise ValueError(
        f"Invalid QUAD_ENV environment variable: '{QUAD_ENV}'. "
        f"Supported values: {_SUPPORTED_QUAD_ENVS}"
    )
