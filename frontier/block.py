"""Blocks and block headers as returned by the JSON-RPC API."""

from __future__ import annotations

from dataclasses import dataclass, field

from frontier.bytes import Bytes, format_hash, parse_h160, parse_h256
from frontier.filter import Bloom
from frontier.transaction import Transaction


def _optional_hash(value):
    return None if value is None else format_hash(value)


def _optional_quantity(value):
    return None if value is None else hex(value)


@dataclass
class Header:
    """A block header."""

    hash: bytes | None = None
    parent_hash: bytes = bytes(32)
    uncles_hash: bytes = bytes(32)
    author: bytes = bytes(20)
    miner: bytes = bytes(20)
    state_root: bytes = bytes(32)
    transactions_root: bytes = bytes(32)
    receipts_root: bytes = bytes(32)
    number: int | None = None
    gas_used: int = 0
    gas_limit: int = 0
    extra_data: Bytes = Bytes()
    logs_bloom: Bloom = field(default_factory=Bloom)
    timestamp: int = 0
    difficulty: int = 0
    nonce: bytes | None = None
    size: int | None = None

    def __post_init__(self):
        if self.hash is not None:
            self.hash = parse_h256(self.hash)
        for name in ("parent_hash", "uncles_hash", "state_root", "transactions_root",
                     "receipts_root"):
            setattr(self, name, parse_h256(getattr(self, name)))
        self.author = parse_h160(self.author)
        self.miner = parse_h160(self.miner)
        self.extra_data = Bytes(self.extra_data)
        if not isinstance(self.logs_bloom, Bloom):
            self.logs_bloom = Bloom(self.logs_bloom)
        if self.nonce is not None:
            nonce = bytes(self.nonce)
            if len(nonce) != 8:
                raise ValueError("nonce must be 8 bytes")
            self.nonce = nonce

    def to_json(self):
        return {
            "hash": _optional_hash(self.hash),
            "parentHash": format_hash(self.parent_hash),
            "sha3Uncles": format_hash(self.uncles_hash),
            "author": format_hash(self.author),
            "miner": format_hash(self.miner),
            "stateRoot": format_hash(self.state_root),
            "transactionsRoot": format_hash(self.transactions_root),
            "receiptsRoot": format_hash(self.receipts_root),
            "number": _optional_quantity(self.number),
            "gasUsed": hex(self.gas_used),
            "gasLimit": hex(self.gas_limit),
            "extraData": self.extra_data.to_json(),
            "logsBloom": format_hash(bytes(self.logs_bloom)),
            "timestamp": hex(self.timestamp),
            "difficulty": hex(self.difficulty),
            "nonce": _optional_hash(self.nonce),
            "size": _optional_quantity(self.size),
        }


@dataclass
class Block:
    """A block; ``transactions`` holds either only hashes or only full transactions."""

    header: Header = field(default_factory=Header)
    total_difficulty: int = 0
    uncles: tuple = ()
    transactions: tuple = ()
    size: int | None = None
    base_fee_per_gas: int | None = None

    def __post_init__(self):
        self.uncles = tuple(parse_h256(uncle) for uncle in self.uncles)
        transactions = tuple(self.transactions)
        if all(isinstance(item, Transaction) for item in transactions):
            self.transactions = transactions
        elif any(isinstance(item, Transaction) for item in transactions):
            raise ValueError("block transactions must be all hashes or all full transactions")
        else:
            self.transactions = tuple(parse_h256(item) for item in transactions)

    @property
    def full_transactions(self):
        """True when the block carries full transactions rather than hashes."""
        return any(isinstance(item, Transaction) for item in self.transactions)

    def to_json(self):
        encoded = self.header.to_json()
        encoded.update(
            {
                "totalDifficulty": hex(self.total_difficulty),
                "uncles": [format_hash(uncle) for uncle in self.uncles],
                "transactions": [
                    item.to_json() if isinstance(item, Transaction) else format_hash(item)
                    for item in self.transactions
                ],
                "size": _optional_quantity(self.size),
            }
        )
        if self.base_fee_per_gas is not None:
            encoded["baseFeePerGas"] = hex(self.base_fee_per_gas)
        return encoded


@dataclass
class Rich:
    """A value with engine-specific extra fields merged into its JSON object."""

    inner: object
    extra_info: dict = field(default_factory=dict)

    def __getattr__(self, name):
        if name in ("inner", "extra_info"):
            raise AttributeError(name)
        return getattr(self.inner, name)

    def to_json(self):
        encoded = self.inner.to_json()
        if not isinstance(encoded, dict) or not isinstance(self.extra_info, dict):
            raise ValueError("Unserializable structures: expected objects")
        merged = dict(encoded)
        merged.update(sorted(self.extra_info.items()))
        return merged