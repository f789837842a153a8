"""The block selector parameter of the JSON-RPC API."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from frontier.bytes import parse_h256

U64_MAX = 2**64 - 1

_DECIMAL = re.compile(r"\+?[0-9]+")
_HEXADECIMAL = re.compile(r"\+?[0-9a-fA-F]+")


class BlockTag(Enum):
    """Named block positions."""

    LATEST = "latest"
    EARLIEST = "earliest"
    PENDING = "pending"


def _parse_u64(text, base):
    pattern = _HEXADECIMAL if base == 16 else _DECIMAL
    if not pattern.fullmatch(text):
        raise ValueError(f"Invalid block number: {text!r}")
    number = int(text, base)
    if number > U64_MAX:
        raise ValueError("Invalid block number: number too large to fit in target type")
    return number


def _short_hash(raw):
    return "0x" + raw[:2].hex() + "\u2026" + raw[-2:].hex()


@dataclass(frozen=True)
class BlockNumber:
    """A block given by number, by hash or by tag; the default is the latest block."""

    value: int | bytes | BlockTag = BlockTag.LATEST
    require_canonical: bool = False

    def __post_init__(self):
        value = self.value
        if isinstance(value, bool):
            raise TypeError("block number must be an int, a 32-byte hash or a BlockTag")
        if isinstance(value, int):
            if not 0 <= value <= U64_MAX:
                raise ValueError(f"block number out of range: {value}")
        elif isinstance(value, (bytes, bytearray)):
            object.__setattr__(self, "value", parse_h256(value))
        elif not isinstance(value, BlockTag):
            raise TypeError("block number must be an int, a 32-byte hash or a BlockTag")

    @property
    def number(self):
        """The block number, or None when the block is not selected by number."""
        return self.value if isinstance(self.value, int) else None

    @property
    def hash(self):
        """The block hash, or None when the block is not selected by hash."""
        return self.value if isinstance(self.value, bytes) else None

    @property
    def tag(self):
        """The block tag, or None when the block is not selected by tag."""
        return self.value if isinstance(self.value, BlockTag) else None

    def to_min_block_num(self):
        """The number usable as a lower bound, if the block is given by number."""
        return self.number

    @classmethod
    def from_json(cls, value):
        """Decode a tag, a decimal or 0x-hex string, an integer or an object."""
        if isinstance(value, bool):
            raise ValueError("Invalid block number: unexpected boolean")
        if isinstance(value, int):
            if not 0 <= value <= U64_MAX:
                raise ValueError(f"Invalid block number: {value}")
            return cls(value)
        if isinstance(value, str):
            return cls._from_str(value)
        if isinstance(value, dict):
            return cls._from_map(value)
        raise ValueError("expected a block number or 'latest', 'earliest' or 'pending'")

    @classmethod
    def _from_str(cls, text):
        try:
            return cls(BlockTag(text))
        except ValueError:
            pass
        if text.startswith("0x"):
            return cls(_parse_u64(text[2:], 16))
        try:
            return cls(_parse_u64(text, 10))
        except ValueError:
            raise ValueError(
                "Invalid block number: non-decimal or missing 0x prefix"
            ) from None

    @classmethod
    def _from_map(cls, mapping):
        require_canonical = False
        number = None
        block_hash = None
        for key, item in mapping.items():
            if key == "blockNumber":
                if not isinstance(item, str):
                    raise ValueError("Invalid block number: expected a string")
                if not item.startswith("0x"):
                    raise ValueError("Invalid block number: missing 0x prefix")
                number = _parse_u64(item[2:], 16)
                break
            if key == "blockHash":
                block_hash = parse_h256(item)
            elif key == "requireCanonical":
                if not isinstance(item, bool):
                    raise ValueError("requireCanonical must be a boolean")
                require_canonical = item
            else:
                raise ValueError(f"Unknown key: {key}")
        if number is not None:
            return cls(number)
        if block_hash is not None:
            return cls(block_hash, require_canonical)
        raise ValueError("Invalid input")

    def to_json(self):
        """Encode as the string form used on the wire."""
        value = self.value
        if isinstance(value, BlockTag):
            return value.value
        if isinstance(value, int):
            return hex(value)
        canonical = "true" if self.require_canonical else "false"
        return f"{{ 'hash': '{_short_hash(value)}', 'requireCanonical': '{canonical}'  }}"