"""Transaction receipts as returned by the JSON-RPC API."""

from __future__ import annotations

from dataclasses import dataclass, field

from frontier.bytes import format_hash, parse_h160, parse_h256
from frontier.filter import Bloom


def _optional_hash(value):
    return None if value is None else format_hash(value)


def _optional_quantity(value):
    return None if value is None else hex(value)


@dataclass
class Receipt:
    """Receipt of an executed transaction; ``sender`` is the ``from`` address."""

    transaction_hash: bytes | None = None
    transaction_index: int | None = None
    block_hash: bytes | None = None
    sender: bytes | None = None
    to: bytes | None = None
    block_number: int | None = None
    cumulative_gas_used: int = 0
    gas_used: int | None = None
    contract_address: bytes | None = None
    logs: tuple = ()
    state_root: bytes | None = None
    logs_bloom: Bloom = field(default_factory=Bloom)
    status_code: int | None = None
    effective_gas_price: int = 0

    def __post_init__(self):
        for name in ("transaction_hash", "block_hash", "state_root"):
            value = getattr(self, name)
            if value is not None:
                setattr(self, name, parse_h256(value))
        for name in ("sender", "to", "contract_address"):
            value = getattr(self, name)
            if value is not None:
                setattr(self, name, parse_h160(value))
        self.logs = tuple(self.logs)
        if not isinstance(self.logs_bloom, Bloom):
            self.logs_bloom = Bloom(self.logs_bloom)

    def to_json(self):
        encoded = {
            "transactionHash": _optional_hash(self.transaction_hash),
            "transactionIndex": _optional_quantity(self.transaction_index),
            "blockHash": _optional_hash(self.block_hash),
            "from": _optional_hash(self.sender),
            "to": _optional_hash(self.to),
            "blockNumber": _optional_quantity(self.block_number),
            "cumulativeGasUsed": hex(self.cumulative_gas_used),
            "gasUsed": _optional_quantity(self.gas_used),
            "contractAddress": _optional_hash(self.contract_address),
            "logs": [log.to_json() for log in self.logs],
        }
        # Both fields are optional after EIP-98 and are left out when unknown.
        if self.state_root is not None:
            encoded["root"] = format_hash(self.state_root)
        encoded["logsBloom"] = format_hash(bytes(self.logs_bloom))
        if self.status_code is not None:
            encoded["status"] = hex(self.status_code)
        encoded["effectiveGasPrice"] = hex(self.effective_gas_price)
        return encoded