"""
Bincode-compatible serialization of membership proofs.

This is the byte layout the zkVM guest reads its private input from. The
proof is serialized as a serde struct:

    leaf_index.depth : u8
    leaf_index.path  : Vec<u8>           -> length prefix || digits
    leaf_hash        : [u8; 32]          -> 32 raw bytes
    sibling_hashes   : Vec<[[u8; 32]; 3]> -> length prefix || 96 bytes per level
    root_hash        : [u8; 32]          -> 32 raw bytes

Fixed-size arrays carry no prefix. `u8` values are written as single bytes.
Only the `Vec` length prefixes depend on the integer encoding:

- `IntEncoding.FIXED`: little-endian u64 (bincode 1.x default, used by the host
  that writes `quad_proof.bin`).
- `IntEncoding.VARINT`: bincode 2.x standard configuration.

See: https://docs.rs/bincode/latest/bincode/index.html
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, List, Tuple, TypeVar

from quad_spec.types import Bytes32, ProofDecodeError, Uint8, Uint64

from .constants import DIGEST_LENGTH, SIBLINGS_PER_LEVEL
from .index import TreeIndex
from .proof import MembershipProof, SiblingTriple

T = TypeVar("T")
"""Generic type variable for vector items"""

FORMAT_NAME = "bincode"

# Bincode VarInt markers (little-endian)
#
# Values < 251 are stored directly as a single byte.
MARKER_U16 = 251
"""0xfb: followed by 2 bytes"""
MARKER_U32 = 252
"""0xfc: followed by 4 bytes"""
MARKER_U64 = 253
"""0xfd: followed by 8 bytes"""


class IntEncoding(Enum):
    """How bincode writes collection lengths."""

    FIXED = "fixed"
    """Little-endian u64, 8 bytes."""

    VARINT = "varint"
    """Bincode 2 variable-length integers."""


def encode_varint_u64(value: int) -> bytes:
    """
    Encode an unsigned 64-bit integer into Bincode's VarInt format.

    - 0..250     -> 1 byte  (the value itself)
    - 251..2^16  -> 3 bytes (0xfb + u16)
    - 2^16..2^32 -> 5 bytes (0xfc + u32)
    - 2^32..2^64 -> 9 bytes (0xfd + u64)

    Raises:
        ValueError: If value is negative or too large.
    """
    if value < 0:
        raise ValueError(f"VarInt cannot be negative: {value}")
    if value >= (1 << 64):
        raise ValueError(f"Value too large for u64: {value}")

    if value < MARKER_U16:
        return value.to_bytes(1, "little")
    if value < (1 << 16):
        return bytes([MARKER_U16]) + value.to_bytes(2, "little")
    if value < (1 << 32):
        return bytes([MARKER_U32]) + value.to_bytes(4, "little")
    return bytes([MARKER_U64]) + value.to_bytes(8, "little")


def decode_varint_u64(data: bytes, offset: int = 0) -> Tuple[int, int]:
    """
    Decode a bincode varint from bytes.

    Returns:
        A tuple of (decoded_value, bytes_consumed).

    Raises:
        ProofDecodeError: If data is too short or the marker is invalid.
    """
    if offset >= len(data):
        raise ProofDecodeError(FORMAT_NAME, "not enough data to read VarInt marker", offset=offset)

    marker = data[offset]

    # The byte IS the value (0-250)
    if marker < MARKER_U16:
        return marker, 1

    if marker == MARKER_U16:
        size = 2
    elif marker == MARKER_U32:
        size = 4
    elif marker == MARKER_U64:
        size = 8
    else:
        # Markers 254/255 are reserved/unused in standard bincode
        raise ProofDecodeError(FORMAT_NAME, f"invalid VarInt marker {marker}", offset=offset)

    payload_end = offset + 1 + size
    if payload_end > len(data):
        raise ProofDecodeError(
            FORMAT_NAME, f"need {size} bytes for VarInt payload", offset=offset + 1
        )

    value = int.from_bytes(data[offset + 1 : payload_end], "little")
    return value, 1 + size


def encode_length(length: int, encoding: IntEncoding) -> bytes:
    """Encode a collection length under the chosen integer encoding."""
    if encoding is IntEncoding.VARINT:
        return encode_varint_u64(length)
    return Uint64(length).encode_bytes()


def decode_length(data: bytes, offset: int, encoding: IntEncoding) -> Tuple[int, int]:
    """
    Decode a collection length under the chosen integer encoding.

    Returns:
        A tuple of (length, bytes_consumed).
    """
    if encoding is IntEncoding.VARINT:
        return decode_varint_u64(data, offset)

    size = Uint64.get_byte_length()
    if offset + size > len(data):
        raise ProofDecodeError(FORMAT_NAME, f"need {size} bytes for u64 length", offset=offset)
    return int(Uint64.decode_bytes(data[offset : offset + size])), size


def serialize_vec(
    items: List[T], item_serializer: Callable[[T], bytes], encoding: IntEncoding
) -> bytes:
    """
    Serialize a list into a Bincode vector (Vec<T>).

    Format: [Len] || [Item 0] || [Item 1] ... || [Item N]
    """
    length_bytes = encode_length(len(items), encoding)
    payload_bytes = b"".join(item_serializer(item) for item in items)
    return length_bytes + payload_bytes


def deserialize_vec(
    data: bytes,
    offset: int,
    item_deserializer: Callable[[bytes, int], Tuple[T, int]],
    encoding: IntEncoding,
) -> Tuple[List[T], int]:
    """
    Deserialize a Bincode vector (Vec<T>).

    Args:
        data: Raw byte source.
        offset: Start index.
        item_deserializer: Function(data, offset) -> (item, bytes_read).
        encoding: How the length prefix is encoded.

    Returns:
        (list_of_items, total_bytes_consumed)
    """
    count, consumed = decode_length(data, offset, encoding)
    current_offset = offset + consumed

    items = []
    for _ in range(count):
        item, item_bytes = item_deserializer(data, current_offset)
        items.append(item)
        current_offset += item_bytes

    return items, current_offset - offset


def _read_u8(data: bytes, offset: int) -> Tuple[Uint8, int]:
    """Read a single raw byte."""
    if offset >= len(data):
        raise ProofDecodeError(FORMAT_NAME, "unexpected end of input reading u8", offset=offset)
    return Uint8(data[offset]), 1


def _read_digest(data: bytes, offset: int) -> Tuple[Bytes32, int]:
    """Read a raw 32-byte array."""
    end = offset + DIGEST_LENGTH
    if end > len(data):
        raise ProofDecodeError(
            FORMAT_NAME, f"need {DIGEST_LENGTH} bytes for a digest", offset=offset
        )
    return Bytes32(data[offset:end]), DIGEST_LENGTH


def _read_triple(data: bytes, offset: int) -> Tuple[SiblingTriple, int]:
    """Read three consecutive digests."""
    a, _ = _read_digest(data, offset)
    b, _ = _read_digest(data, offset + DIGEST_LENGTH)
    c, _ = _read_digest(data, offset + 2 * DIGEST_LENGTH)
    return (a, b, c), SIBLINGS_PER_LEVEL * DIGEST_LENGTH


def serialize_proof(proof: MembershipProof, encoding: IntEncoding = IntEncoding.FIXED) -> bytes:
    """Serialize a proof to its bincode representation."""
    return b"".join(
        [
            Uint8(proof.depth).encode_bytes(),
            serialize_vec(list(proof.leaf_index.path), lambda d: bytes([int(d)]), encoding),
            bytes(proof.leaf_hash),
            serialize_vec(list(proof.sibling_hashes), lambda t: b"".join(t), encoding),
            bytes(proof.root_hash),
        ]
    )


def deserialize_proof(data: bytes, encoding: IntEncoding = IntEncoding.FIXED) -> MembershipProof:
    """
    Parse a proof from its bincode representation.

    The depth, path length and sibling count are read independently, exactly
    as the guest does, so a proof whose lengths disagree decodes successfully
    and is rejected by the verifier.

    Raises:
        ProofDecodeError: If the input is truncated or has trailing bytes.
    """
    offset = 0

    depth, consumed = _read_u8(data, offset)
    offset += consumed

    path, consumed = deserialize_vec(data, offset, _read_u8, encoding)
    offset += consumed

    leaf_hash, consumed = _read_digest(data, offset)
    offset += consumed

    siblings, consumed = deserialize_vec(data, offset, _read_triple, encoding)
    offset += consumed

    root_hash, consumed = _read_digest(data, offset)
    offset += consumed

    if offset != len(data):
        raise ProofDecodeError(
            FORMAT_NAME, f"{len(data) - offset} trailing bytes after proof", offset=offset
        )

    return MembershipProof(
        leaf_index=TreeIndex(depth=depth, path=tuple(path)),
        leaf_hash=leaf_hash,
        sibling_hashes=tuple(siblings),
        root_hash=root_hash,
    )
