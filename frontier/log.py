"""Event logs as returned by the JSON-RPC API."""

from __future__ import annotations

from dataclasses import dataclass

from frontier.bytes import Bytes, format_hash, parse_h160, parse_h256


def _optional_hash(value):
    return None if value is None else format_hash(value)


def _optional_quantity(value):
    return None if value is None else hex(value)


@dataclass(frozen=True)
class Log:
    """A log emitted by a transaction."""

    address: bytes
    topics: tuple = ()
    data: Bytes = Bytes()
    block_hash: bytes | None = None
    block_number: int | None = None
    transaction_hash: bytes | None = None
    transaction_index: int | None = None
    log_index: int | None = None
    transaction_log_index: int | None = None
    removed: bool = False

    def __post_init__(self):
        object.__setattr__(self, "address", parse_h160(self.address))
        object.__setattr__(self, "topics", tuple(parse_h256(t) for t in self.topics))
        object.__setattr__(self, "data", Bytes(self.data))
        for name in ("block_hash", "transaction_hash"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, parse_h256(value))

    def to_json(self):
        """Encode as a JSON-RPC log object."""
        return {
            "address": format_hash(self.address),
            "topics": [format_hash(topic) for topic in self.topics],
            "data": self.data.to_json(),
            "blockHash": _optional_hash(self.block_hash),
            "blockNumber": _optional_quantity(self.block_number),
            "transactionHash": _optional_hash(self.transaction_hash),
            "transactionIndex": _optional_quantity(self.transaction_index),
            "logIndex": _optional_quantity(self.log_index),
            "transactionLogIndex": _optional_quantity(self.transaction_log_index),
            "removed": self.removed,
        }