"""Hex-encoded byte strings and fixed-size hashes as they appear in JSON-RPC."""

from __future__ import annotations

import re

_HEX_DIGITS = re.compile(r"[0-9a-fA-F]*")

_BYTES_FORMAT_ERROR = (
    "Invalid bytes format. Expected a 0x-prefixed hex string with even length"
)


class Bytes(bytes):
    """A byte string that is carried on the wire as a 0x-prefixed hex string."""

    __slots__ = ()

    @classmethod
    def from_json(cls, value):
        """Decode a 0x-prefixed, even-length hex string."""
        if not isinstance(value, str):
            raise ValueError(_BYTES_FORMAT_ERROR)
        if len(value) >= 2 and value.startswith("0x") and len(value) % 2 == 0:
            digits = value[2:]
            if not _HEX_DIGITS.fullmatch(digits):
                raise ValueError(f"Invalid hex: {digits!r}")
            return cls(bytes.fromhex(digits))
        raise ValueError(_BYTES_FORMAT_ERROR)

    def to_json(self):
        """Encode as a 0x-prefixed lowercase hex string."""
        return "0x" + self.hex()

    def __repr__(self):
        return f"Bytes({self.to_json()})"


def _parse_fixed(value, size, name):
    if isinstance(value, (bytes, bytearray, memoryview)):
        raw = bytes(value)
        if len(raw) != size:
            raise ValueError(f"Invalid {name}: expected {size} bytes, got {len(raw)}")
        return raw
    if not isinstance(value, str):
        raise ValueError(f"Invalid {name}: expected a hex string")
    digits = value[2:] if value.startswith("0x") else value
    if len(digits) != size * 2 or not _HEX_DIGITS.fullmatch(digits):
        raise ValueError(f"Invalid {name}: {value!r}")
    return bytes.fromhex(digits)


def parse_h160(value):
    """Parse a 20-byte value from hex text (0x prefix optional) or raw bytes."""
    return _parse_fixed(value, 20, "H160")


def parse_h256(value):
    """Parse a 32-byte value from hex text (0x prefix optional) or raw bytes."""
    return _parse_fixed(value, 32, "H256")


def format_hash(value):
    """Render a fixed-size hash as a full 0x-prefixed lowercase hex string."""
    return "0x" + bytes(value).hex()