"""Parsing of transaction and uncle index parameters."""

from __future__ import annotations

import re

USIZE_MAX = 2**64 - 1

_DECIMAL = re.compile(r"\+?[0-9]+")
_HEXADECIMAL = re.compile(r"\+?[0-9a-fA-F]+")


def parse_index(value):
    """Parse a hex-encoded (0x) or decimal string, or a non-negative integer."""
    if isinstance(value, bool):
        raise ValueError("Invalid index: expected a hex-encoded or decimal index")
    if isinstance(value, int):
        if not 0 <= value <= USIZE_MAX:
            raise ValueError(f"Invalid index: {value}")
        return value
    if isinstance(value, str):
        if value.startswith("0x"):
            digits, pattern, base = value[2:], _HEXADECIMAL, 16
        else:
            digits, pattern, base = value, _DECIMAL, 10
        if not pattern.fullmatch(digits):
            raise ValueError(f"Invalid index: {value!r}")
        index = int(digits, base)
        if index > USIZE_MAX:
            raise ValueError("Invalid index: number too large to fit in target type")
        return index
    raise ValueError("Invalid index: expected a hex-encoded or decimal index")