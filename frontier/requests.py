"""Call and transaction requests received over JSON-RPC, and the messages built from them."""

from __future__ import annotations

import re
from dataclasses import dataclass

from frontier.bytes import Bytes, format_hash, parse_h160, parse_h256

_QUANTITY = re.compile(r"0x[0-9a-fA-F]{1,64}")


def _parse_quantity(value):
    if not isinstance(value, str) or not _QUANTITY.fullmatch(value):
        raise ValueError(f"Invalid quantity: {value!r}")
    return int(value[2:], 16)


def _optional_h160(value):
    return None if value is None else parse_h160(value)


def _optional_bytes(value):
    return None if value is None else Bytes(value)


@dataclass(frozen=True)
class AccessListItem:
    """An address and the storage keys of it that a transaction pre-pays to access."""

    address: bytes
    storage_keys: tuple = ()

    def __post_init__(self):
        object.__setattr__(self, "address", parse_h160(self.address))
        object.__setattr__(
            self, "storage_keys", tuple(parse_h256(key) for key in self.storage_keys)
        )

    @classmethod
    def from_json(cls, value):
        """Decode an object with ``address`` and ``storageKeys``."""
        if not isinstance(value, dict):
            raise ValueError("access list item must be an object")
        try:
            address = value["address"]
            keys = value["storageKeys"]
        except KeyError as missing:
            raise ValueError(f"missing field `{missing.args[0]}`") from None
        if not isinstance(keys, list):
            raise ValueError("storageKeys must be a list")
        return cls(parse_h160(address), tuple(parse_h256(key) for key in keys))

    def to_json(self):
        return {
            "address": format_hash(self.address),
            "storageKeys": [format_hash(key) for key in self.storage_keys],
        }


def _parse_access_list(value):
    if not isinstance(value, list):
        raise ValueError("accessList must be a list")
    return tuple(AccessListItem.from_json(item) for item in value)


def _access_list_to_json(items):
    return [item.to_json() for item in items]


# (json key, attribute, decoder, encoder)
_REQUEST_FIELDS = (
    ("from", "sender", parse_h160, format_hash),
    ("to", "to", parse_h160, format_hash),
    ("gasPrice", "gas_price", _parse_quantity, hex),
    ("maxFeePerGas", "max_fee_per_gas", _parse_quantity, hex),
    ("maxPriorityFeePerGas", "max_priority_fee_per_gas", _parse_quantity, hex),
    ("gas", "gas", _parse_quantity, hex),
    ("value", "value", _parse_quantity, hex),
    ("data", "data", Bytes.from_json, Bytes.to_json),
    ("nonce", "nonce", _parse_quantity, hex),
    ("accessList", "access_list", _parse_access_list, _access_list_to_json),
    ("type", "transaction_type", _parse_quantity, hex),
)
_REQUEST_KEYS = frozenset(key for key, *_ in _REQUEST_FIELDS)


def _decode_request(value):
    if not isinstance(value, dict):
        raise ValueError("request must be an object")
    unknown = set(value) - _REQUEST_KEYS
    if unknown:
        raise ValueError(f"unknown field `{sorted(unknown)[0]}`")
    return {
        attribute: None if value.get(key) is None else decode(value[key])
        for key, attribute, decode, _ in _REQUEST_FIELDS
    }


def _normalize_request(request):
    request.sender = _optional_h160(request.sender)
    request.to = _optional_h160(request.to)
    request.data = _optional_bytes(request.data)
    if request.access_list is not None:
        request.access_list = tuple(request.access_list)


@dataclass
class CallRequest:
    """Parameters of a contract call or gas estimate."""

    sender: bytes | None = None
    to: bytes | None = None
    gas_price: int | None = None
    max_fee_per_gas: int | None = None
    max_priority_fee_per_gas: int | None = None
    gas: int | None = None
    value: int | None = None
    data: Bytes | None = None
    nonce: int | None = None
    access_list: tuple | None = None
    transaction_type: int | None = None

    def __post_init__(self):
        _normalize_request(self)

    @classmethod
    def from_json(cls, value):
        """Decode a JSON call object; unknown fields are rejected."""
        return cls(**_decode_request(value))


@dataclass
class LegacyTransactionMessage:
    nonce: int
    gas_price: int
    gas_limit: int
    value: int
    input: bytes
    to: bytes | None
    chain_id: int | None = None


@dataclass
class EIP2930TransactionMessage:
    nonce: int
    gas_price: int
    gas_limit: int
    value: int
    input: bytes
    to: bytes | None
    chain_id: int
    access_list: tuple


@dataclass
class EIP1559TransactionMessage:
    nonce: int
    max_fee_per_gas: int
    max_priority_fee_per_gas: int
    gas_limit: int
    value: int
    input: bytes
    to: bytes | None
    chain_id: int
    access_list: tuple


@dataclass
class TransactionRequest:
    """A transaction to be signed and sent; ``to`` of None creates a contract."""

    sender: bytes | None = None
    to: bytes | None = None
    gas_price: int | None = None
    max_fee_per_gas: int | None = None
    max_priority_fee_per_gas: int | None = None
    gas: int | None = None
    value: int | None = None
    data: Bytes | None = None
    nonce: int | None = None
    access_list: tuple | None = None
    transaction_type: int | None = None

    def __post_init__(self):
        _normalize_request(self)

    @classmethod
    def from_json(cls, value):
        """Decode a JSON transaction object; unknown fields are rejected."""
        return cls(**_decode_request(value))

    def to_json(self):
        """Encode every field; absent ones become null."""
        encoded = {}
        for key, attribute, _, encode in _REQUEST_FIELDS:
            item = getattr(self, attribute)
            encoded[key] = None if item is None else encode(item)
        return encoded

    def to_message(self):
        """Pick the transaction kind from the fee fields, or None if they conflict."""
        gas_price = self.gas_price
        max_fee = self.max_fee_per_gas
        access_list = self.access_list
        common = {
            "nonce": 0,
            "gas_limit": self.gas or 0,
            "value": self.value or 0,
            "input": bytes(self.data or b""),
            "to": self.to,
        }
        if gas_price is not None and max_fee is None and access_list is None:
            return LegacyTransactionMessage(gas_price=gas_price, chain_id=None, **common)
        if max_fee is None and access_list is not None:
            return EIP2930TransactionMessage(
                gas_price=gas_price or 0, chain_id=0, access_list=access_list, **common
            )
        if gas_price is None:
            # Empty fee fields fall back to the canonical transaction schema.
            return EIP1559TransactionMessage(
                max_fee_per_gas=max_fee or 0,
                max_priority_fee_per_gas=self.max_priority_fee_per_gas or 0,
                chain_id=0,
                access_list=access_list or (),
                **common,
            )
        return None