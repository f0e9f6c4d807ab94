"""
Fixed-length byte types.

Digests flowing through the quaternary tree are always exactly 32 bytes.
`BaseBytes` enforces that length at construction, and plugs into pydantic so
that containers holding digests validate and serialize them consistently.
"""

from __future__ import annotations

from typing import Any, ClassVar, Iterable, SupportsIndex

from pydantic.annotated_handlers import GetCoreSchemaHandler
from pydantic_core import core_schema
from typing_extensions import Self


def _coerce_to_bytes(value: Any) -> bytes:
    """
    Coerce a variety of inputs to raw bytes.

    Accepts:
      - `bytes` / `bytearray` (returned as immutable `bytes`)
      - Iterables of integers in [0, 255]
      - Hex strings, with or without a '0x' prefix (e.g. "0xdeadbeef" or "deadbeef")

    Raises:
      ValueError / TypeError if conversion is not possible or out-of-range.
    """
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        return bytes.fromhex(value.removeprefix("0x"))
    if isinstance(value, Iterable):
        # bytes(bytearray(iterable)) enforces each element is an int in 0..255
        return bytes(bytearray(value))
    return bytes(value)


class BaseBytes(bytes):
    """
    A base class for fixed-length byte types that inherits from `bytes`.

    Subclasses set:
      - `LENGTH`: exact number of bytes the instance must contain.

    Instances are immutable byte objects with strict length checking.
    """

    LENGTH: ClassVar[int]
    """The exact number of bytes (overridden by subclasses)."""

    def __new__(cls, value: Any = b"") -> Self:
        """
        Create and validate a new instance.

        Args:
            value: Any value coercible to bytes (see `_coerce_to_bytes`).

        Raises:
            ValueError: If the resulting byte length differs from `LENGTH`.
        """
        if not hasattr(cls, "LENGTH"):
            raise TypeError(f"{cls.__name__} must define LENGTH")

        b = _coerce_to_bytes(value)
        if len(b) != cls.LENGTH:
            raise ValueError(f"{cls.__name__} expects exactly {cls.LENGTH} bytes, got {len(b)}")
        return super().__new__(cls, b)

    @classmethod
    def zero(cls) -> Self:
        """Create a new instance filled with zero bytes."""
        return cls(b"\x00" * cls.LENGTH)

    def flip_bit(self, byte_index: int, bit: int = 0) -> Self:
        """
        Return a copy with a single bit inverted.

        Used to model tampering: the result differs from `self` in exactly one bit.
        """
        mutable = bytearray(self)
        mutable[byte_index] ^= 1 << bit
        return type(self)(mutable)

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        """
        Hook into Pydantic's validation system.

        - Python input: an instance is accepted as-is, raw `bytes` of the exact
          length are wrapped, hex strings are decoded.
        - JSON input: a hex string (optionally `0x`-prefixed) is decoded.
        - JSON output: lowercase hex without prefix.
        """
        from_value = core_schema.no_info_plain_validator_function(cls)

        python_schema = core_schema.union_schema(
            [
                core_schema.is_instance_schema(cls),
                core_schema.chain_schema(
                    [
                        core_schema.bytes_schema(min_length=cls.LENGTH, max_length=cls.LENGTH),
                        from_value,
                    ]
                ),
                core_schema.chain_schema([core_schema.str_schema(), from_value]),
            ]
        )
        json_schema = core_schema.chain_schema([core_schema.str_schema(), from_value])

        return core_schema.json_or_python_schema(
            json_schema=json_schema,
            python_schema=python_schema,
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda x: x.hex(), when_used="json"
            ),
        )

    def __repr__(self) -> str:
        """Return a string representation of the bytes."""
        return f"{type(self).__name__}({self.hex()})"

    def __hash__(self) -> int:
        """Return the hash of the bytes."""
        return hash((type(self), bytes(self)))

    def hex(self, sep: str | bytes | None = None, bytes_per_sep: SupportsIndex = 1) -> str:
        """Return the hexadecimal string representation of the underlying bytes."""
        return bytes(self).hex() if sep is None else bytes(self).hex(sep, bytes_per_sep)


class Bytes32(BaseBytes):
    """Fixed-size byte array of exactly 32 bytes."""

    LENGTH = 32


ZERO_HASH: Bytes32 = Bytes32.zero()
"""The all-zero 32-byte digest."""
