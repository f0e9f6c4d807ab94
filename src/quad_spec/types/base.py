"""Reusable, strict base models for the specification."""

from typing import Any, Self

from pydantic import BaseModel, ConfigDict


class StrictBaseModel(BaseModel):
    """
    A strict, immutable pydantic base model.

    Every container in this package derives from this class:
    - unknown fields are rejected,
    - instances are frozen once validated,
    - no implicit type coercion happens on input.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        strict=True,
        validate_default=True,
        arbitrary_types_allowed=True,
    )

    def copy(self: Self, **kwargs: Any) -> Self:  # type: ignore[override]
        """Create a copy of the model with the updated fields that are validated."""
        return self.__class__(**(dict(self) | kwargs))
