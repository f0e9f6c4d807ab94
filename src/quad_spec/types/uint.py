"""Unsigned Integer Type Specification."""

from __future__ import annotations

from typing import Any, ClassVar, Literal, SupportsIndex, SupportsInt

from pydantic import GetCoreSchemaHandler, GetJsonSchemaHandler
from pydantic.json_schema import JsonSchemaValue
from pydantic_core import core_schema
from typing_extensions import Self


class BaseUint(int):
    """A base class for custom unsigned integer types that inherits from `int`."""

    BITS: ClassVar[int]
    """The number of bits in the integer (overridden by subclasses)."""

    def __new__(cls, value: SupportsInt) -> Self:
        """
        Create and validate a new Uint instance.

        Raises:
            OverflowError: If `value` is outside the allowed range [0, 2**BITS - 1].
        """
        if isinstance(value, bool):
            raise TypeError(f"{cls.__name__} cannot be built from a bool")
        int_value = int(value)
        if not (0 <= int_value < (2**cls.BITS)):
            raise OverflowError(f"{int_value} is out of range for {cls.__name__}")
        return super().__new__(cls, int_value)

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        """Hook into Pydantic's validation system."""

        def validate(value: Any) -> BaseUint:
            """Pydantic validation function that calls the class constructor."""
            try:
                return cls(value)
            except (OverflowError, TypeError) as e:
                raise ValueError(str(e)) from e

        return core_schema.json_or_python_schema(
            json_schema=core_schema.chain_schema(
                [
                    core_schema.int_schema(ge=0, lt=2**cls.BITS),
                    core_schema.no_info_plain_validator_function(validate),
                ]
            ),
            python_schema=core_schema.no_info_plain_validator_function(validate),
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda instance: int(instance)
            ),
        )

    @classmethod
    def __get_pydantic_json_schema__(
        cls, core_schema: core_schema.CoreSchema, handler: GetJsonSchemaHandler
    ) -> JsonSchemaValue:
        """Hook into Pydantic's JSON Schema generation system."""
        json_schema = handler(core_schema)
        json_schema.update(format=f"uint{cls.BITS}")
        return json_schema

    @classmethod
    def get_byte_length(cls) -> int:
        """Get the fixed byte length of this integer type."""
        return cls.BITS // 8

    def to_bytes(
        self,
        length: SupportsIndex | None = None,
        byteorder: Literal["little", "big"] = "little",
        *,
        signed: bool = False,
    ) -> bytes:
        """
        Return an array of bytes representing the integer.

        Defaults to little-endian and a fixed length based on `BITS`.
        """
        actual_length = self.get_byte_length() if length is None else length
        return super().to_bytes(length=actual_length, byteorder=byteorder, signed=signed)

    def encode_bytes(self) -> bytes:
        """Serialize to the fixed-width little-endian representation."""
        return self.to_bytes()

    @classmethod
    def decode_bytes(cls, data: bytes) -> Self:
        """
        Parse a fixed-width little-endian value.

        Raises:
            ValueError: If `data` is not exactly `BITS // 8` bytes long.
        """
        if len(data) != cls.get_byte_length():
            raise ValueError(
                f"{cls.__name__} expects exactly {cls.get_byte_length()} bytes, got {len(data)}"
            )
        return cls(int.from_bytes(data, "little"))

    def __repr__(self) -> str:
        """Return the official string representation of the object."""
        return f"{type(self).__name__}({int(self)})"

    def __str__(self) -> str:
        """Return the informal, user-friendly string representation."""
        return str(int(self))

    def __hash__(self) -> int:
        """Hash like the plain integer so lookups by `int` keep working."""
        return int.__hash__(self)


class Uint8(BaseUint):
    """A type representing an 8-bit unsigned integer (uint8)."""

    BITS = 8


class Uint64(BaseUint):
    """A type representing a 64-bit unsigned integer (uint64)."""

    BITS = 64
