# codec.py
# Numeric and string field readers for Milesight channel records.

from __future__ import annotations

import struct
from typing import Sequence


class TruncatedPayload(ValueError):
    """Raised when a slice holds fewer bytes than a reader needs."""

    def __init__(self, needed: int, got: int):
        super().__init__(f"Expected {needed} bytes, got {got}")
        self.needed = needed
        self.got = got


def _take(data: Sequence[int], n: int) -> bytes:
    if len(data) < n:
        raise TruncatedPayload(n, len(data))
    return bytes(data[:n])


def read_uint16_le(data: Sequence[int]) -> int:
    return struct.unpack("<H", _take(data, 2))[0]


def read_int16_le(data: Sequence[int]) -> int:
    return struct.unpack("<h", _take(data, 2))[0]


def read_uint16_be(data: Sequence[int]) -> int:
    return struct.unpack(">H", _take(data, 2))[0]


def bcd2_to_decimal(value: int) -> int:
    """Decode one packed-BCD byte. Malformed nibbles decode as 0."""
    lo = value & 0x0F
    if lo > 9 or value >= 0xA0:
        return 0
    return lo + 10 * (value >> 4)


def bcd22_to_version(value: int) -> float:
    # high byte is the major number, low byte the two fractional digits
    return bcd2_to_decimal((value >> 8) & 0xFF) + bcd2_to_decimal(value & 0xFF) / 100


def read_version(data: Sequence[int]) -> float:
    return bcd22_to_version(read_uint16_be(data))


def encode_hex(byte: int) -> str:
    return f"{byte & 0xFF:02x}"


def read_hex_bytes(data: Sequence[int], n: int | None = None) -> str:
    """Hyphen-joined lowercase hex of the first *n* bytes (all by default), used for serial numbers."""
    raw = _take(data, len(data) if n is None else n)
    return "-".join(encode_hex(b) for b in raw)
