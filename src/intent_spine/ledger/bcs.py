"""BCS wire encoding for pure call arguments.

Fixed-width little-endian integers, ULEB128 length prefixes, 32-byte
addresses, UTF-8 strings, and ``option<T>`` as a 0/1 tag followed by the
value. Only the shapes the staging calls need are covered; the decoders
exist for the few fields the simulated ledger has to read back
(resource names, amounts).
"""

from __future__ import annotations

import struct
from collections.abc import Callable, Iterable
from typing import Any

from intent_spine.ledger.types import ADDRESS_LENGTH, normalize_address

Encoder = Callable[[Any], bytes]

U8_MAX = 2**8 - 1
U64_MAX = 2**64 - 1
U128_MAX = 2**128 - 1


def uleb128(value: int) -> bytes:
    if value < 0:
        raise ValueError("ULEB128 length cannot be negative")
    out = bytearray()
    while True:
        byte = value & 0x7F
        value >>= 7
        if value:
            out.append(byte | 0x80)
        else:
            out.append(byte)
            return bytes(out)


def _check_range(value: int, maximum: int, kind: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{kind} expects int, got {type(value).__name__}")
    if not 0 <= value <= maximum:
        raise ValueError(f"{kind} out of range: {value}")
    return value


def u8(value: int) -> bytes:
    return struct.pack("<B", _check_range(value, U8_MAX, "u8"))


def u64(value: int) -> bytes:
    return struct.pack("<Q", _check_range(value, U64_MAX, "u64"))


def u128(value: int) -> bytes:
    return _check_range(value, U128_MAX, "u128").to_bytes(16, "little")


def boolean(value: bool) -> bytes:
    if not isinstance(value, bool):
        raise TypeError(f"bool expects bool, got {type(value).__name__}")
    return b"\x01" if value else b"\x00"


def byte_vector(value: bytes | bytearray | Iterable[int]) -> bytes:
    data = bytes(value)
    return uleb128(len(data)) + data


def string(value: str) -> bytes:
    if not isinstance(value, str):
        raise TypeError(f"string expects str, got {type(value).__name__}")
    return byte_vector(value.encode("utf-8"))


def address(value: str) -> bytes:
    return bytes.fromhex(normalize_address(value)[2:])


def vector(encoder: Encoder, items: Iterable[Any]) -> bytes:
    items = list(items)
    return uleb128(len(items)) + b"".join(encoder(item) for item in items)


def option(encoder: Encoder, value: Any) -> bytes:
    if value is None:
        return b"\x00"
    return b"\x01" + encoder(value)


# =============================================================================
# DECODING
# =============================================================================


class Reader:
    """Cursor over an encoded buffer."""

    def __init__(self, data: bytes):
        self._data = data
        self._pos = 0

    def take(self, n: int) -> bytes:
        if self._pos + n > len(self._data):
            raise ValueError("BCS buffer underrun")
        chunk = self._data[self._pos:self._pos + n]
        self._pos += n
        return chunk

    def uleb128(self) -> int:
        result = 0
        shift = 0
        while True:
            byte = self.take(1)[0]
            result |= (byte & 0x7F) << shift
            if not byte & 0x80:
                return result
            shift += 7

    def u8(self) -> int:
        return self.take(1)[0]

    def u64(self) -> int:
        return struct.unpack("<Q", self.take(8))[0]

    def u128(self) -> int:
        return int.from_bytes(self.take(16), "little")

    def boolean(self) -> bool:
        tag = self.u8()
        if tag not in (0, 1):
            raise ValueError(f"Invalid bool tag: {tag}")
        return tag == 1

    def string(self) -> str:
        return self.take(self.uleb128()).decode("utf-8")

    def address(self) -> str:
        return "0x" + self.take(ADDRESS_LENGTH).hex()

    def done(self) -> bool:
        return self._pos == len(self._data)


def decode_string(data: bytes) -> str:
    reader = Reader(data)
    value = reader.string()
    if not reader.done():
        raise ValueError("Trailing bytes after string")
    return value


def decode_u64(data: bytes) -> int:
    reader = Reader(data)
    value = reader.u64()
    if not reader.done():
        raise ValueError("Trailing bytes after u64")
    return value


def decode_option_u64(data: bytes) -> int | None:
    reader = Reader(data)
    value = reader.u64() if reader.boolean() else None
    if not reader.done():
        raise ValueError("Trailing bytes after option<u64>")
    return value
