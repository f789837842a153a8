"""Result of a proof-of-work request."""

from __future__ import annotations

from dataclasses import dataclass

from frontier.bytes import format_hash, parse_h256


@dataclass
class Work:
    """Proof-of-work hash, seed hash and target, optionally with the block number."""

    pow_hash: bytes = bytes(32)
    seed_hash: bytes = bytes(32)
    target: bytes = bytes(32)
    number: int | None = None

    def __post_init__(self):
        self.pow_hash = parse_h256(self.pow_hash)
        self.seed_hash = parse_h256(self.seed_hash)
        self.target = parse_h256(self.target)

    def to_json(self):
        """Encode as a JSON array; the number is appended only when present."""
        encoded = [
            format_hash(self.pow_hash),
            format_hash(self.seed_hash),
            format_hash(self.target),
        ]
        if self.number is not None:
            encoded.append(hex(self.number))
        return encoded