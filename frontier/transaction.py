"""Transactions as returned by the JSON-RPC API."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from frontier.bytes import Bytes, format_hash, parse_h160, parse_h256


def _optional_hash(value):
    return None if value is None else format_hash(value)


def _optional_quantity(value):
    return None if value is None else hex(value)


@dataclass
class Transaction:
    """A transaction with its signature fields; ``sender`` is the ``from`` address."""

    hash: bytes = bytes(32)
    nonce: int = 0
    block_hash: bytes | None = None
    block_number: int | None = None
    transaction_index: int | None = None
    sender: bytes = bytes(20)
    to: bytes | None = None
    value: int = 0
    gas_price: int | None = None
    max_fee_per_gas: int | None = None
    max_priority_fee_per_gas: int | None = None
    gas: int = 0
    input: Bytes = Bytes()
    creates: bytes | None = None
    raw: Bytes = Bytes()
    public_key: bytes | None = None
    chain_id: int | None = None
    standard_v: int = 0
    v: int = 0
    r: int = 0
    s: int = 0
    access_list: tuple | None = None
    transaction_type: int | None = None

    def __post_init__(self):
        self.hash = parse_h256(self.hash)
        self.sender = parse_h160(self.sender)
        if self.block_hash is not None:
            self.block_hash = parse_h256(self.block_hash)
        if self.to is not None:
            self.to = parse_h160(self.to)
        if self.creates is not None:
            self.creates = parse_h160(self.creates)
        if self.public_key is not None:
            public_key = bytes(self.public_key)
            if len(public_key) != 64:
                raise ValueError("public key must be 64 bytes")
            self.public_key = public_key
        self.input = Bytes(self.input)
        self.raw = Bytes(self.raw)
        if self.access_list is not None:
            self.access_list = tuple(self.access_list)

    def to_json(self):
        """Encode as a JSON-RPC transaction object."""
        encoded = {
            "hash": format_hash(self.hash),
            "nonce": hex(self.nonce),
            "blockHash": _optional_hash(self.block_hash),
            "blockNumber": _optional_quantity(self.block_number),
            "transactionIndex": _optional_quantity(self.transaction_index),
            "from": format_hash(self.sender),
            "to": _optional_hash(self.to),
            "value": hex(self.value),
        }
        for key, item in (
            ("gasPrice", self.gas_price),
            ("maxFeePerGas", self.max_fee_per_gas),
            ("maxPriorityFeePerGas", self.max_priority_fee_per_gas),
        ):
            if item is not None:
                encoded[key] = hex(item)
        encoded.update(
            {
                "gas": hex(self.gas),
                "input": self.input.to_json(),
                "creates": _optional_hash(self.creates),
                "raw": self.raw.to_json(),
                "publicKey": _optional_hash(self.public_key),
                "chainId": _optional_quantity(self.chain_id),
                "standardV": hex(self.standard_v),
                "v": hex(self.v),
                "r": hex(self.r),
                "s": hex(self.s),
            }
        )
        if self.access_list is not None:
            encoded["accessList"] = [item.to_json() for item in self.access_list]
        if self.transaction_type is not None:
            encoded["type"] = hex(self.transaction_type)
        return encoded


class TransactionStatusKind(Enum):
    """Where a locally submitted transaction stands."""

    PENDING = "pending"
    FUTURE = "future"
    MINED = "mined"
    CULLED = "culled"
    DROPPED = "dropped"
    REPLACED = "replaced"
    REJECTED = "rejected"
    INVALID = "invalid"
    CANCELED = "canceled"


_WITHOUT_TRANSACTION = {TransactionStatusKind.PENDING, TransactionStatusKind.FUTURE}


@dataclass
class LocalTransactionStatus:
    """Status of a local transaction, with the details its kind calls for.

    ``REPLACED`` carries the replacing ``gas_price`` and ``hash``; ``REJECTED``
    carries an ``error``. Every kind but ``PENDING`` and ``FUTURE`` carries the
    transaction.
    """

    kind: TransactionStatusKind
    transaction: Transaction | None = None
    gas_price: int | None = None
    hash: bytes | None = None
    error: str | None = None

    def __post_init__(self):
        kind = self.kind
        if kind in _WITHOUT_TRANSACTION:
            if self.transaction is not None:
                raise ValueError(f"a {kind.value} status carries no transaction")
        elif self.transaction is None:
            raise ValueError(f"a {kind.value} status needs a transaction")
        replaced = kind is TransactionStatusKind.REPLACED
        if replaced != (self.gas_price is not None and self.hash is not None):
            if replaced:
                raise ValueError("a replaced status needs a gas price and a hash")
        if not replaced and (self.gas_price is not None or self.hash is not None):
            raise ValueError("only a replaced status carries a gas price and a hash")
        rejected = kind is TransactionStatusKind.REJECTED
        if rejected and self.error is None:
            raise ValueError("a rejected status needs an error")
        if not rejected and self.error is not None:
            raise ValueError("only a rejected status carries an error")
        if self.hash is not None:
            self.hash = parse_h256(self.hash)

    def to_json(self):
        encoded = {"status": self.kind.value}
        if self.transaction is not None:
            encoded["transaction"] = self.transaction.to_json()
        if self.error is not None:
            encoded["error"] = self.error
        if self.kind is TransactionStatusKind.REPLACED:
            encoded["hash"] = format_hash(self.hash)
            encoded["gasPrice"] = hex(self.gas_price)
        return encoded


@dataclass
class RichRawTransaction:
    """Signed raw transaction bytes together with the decoded transaction."""

    raw: Bytes = Bytes()
    transaction: Transaction = None

    def __post_init__(self):
        self.raw = Bytes(self.raw)
        if self.transaction is None:
            self.transaction = Transaction()

    def to_json(self):
        return {"raw": self.raw.to_json(), "tx": self.transaction.to_json()}