"""Account information types returned by the JSON-RPC API."""

from __future__ import annotations

from dataclasses import dataclass, field

from frontier.bytes import Bytes, format_hash, parse_h160, parse_h256


@dataclass
class AccountInfo:
    """Account name."""

    name: str = ""

    def to_json(self):
        return {"name": self.name}


@dataclass
class StorageProof:
    """Proof for a single storage entry."""

    key: int = 0
    value: int = 0
    proof: list = field(default_factory=list)

    def to_json(self):
        return {
            "key": hex(self.key),
            "value": hex(self.value),
            "proof": [Bytes(item).to_json() for item in self.proof],
        }


@dataclass
class EthAccount:
    """Account state together with its proofs."""

    address: bytes = bytes(20)
    balance: int = 0
    nonce: int = 0
    code_hash: bytes = bytes(32)
    storage_hash: bytes = bytes(32)
    account_proof: list = field(default_factory=list)
    storage_proof: list = field(default_factory=list)

    def __post_init__(self):
        self.address = parse_h160(self.address)
        self.code_hash = parse_h256(self.code_hash)
        self.storage_hash = parse_h256(self.storage_hash)

    def to_json(self):
        return {
            "address": format_hash(self.address),
            "balance": hex(self.balance),
            "nonce": hex(self.nonce),
            "codeHash": format_hash(self.code_hash),
            "storageHash": format_hash(self.storage_hash),
            "accountProof": [Bytes(item).to_json() for item in self.account_proof],
            "storageProof": [proof.to_json() for proof in self.storage_proof],
        }


@dataclass
class ExtAccountInfo:
    """Extended account information; uuid is None for address book entries."""

    name: str = ""
    meta: str = ""
    uuid: str | None = None

    def to_json(self):
        encoded = {"name": self.name, "meta": self.meta}
        if self.uuid is not None:
            encoded["uuid"] = self.uuid
        return encoded


@dataclass
class RecoveredAccount:
    """Account recovered from a signature and whether it suits the current chain."""

    address: bytes
    public_key: bytes
    is_valid_for_current_chain: bool

    def __post_init__(self):
        self.address = parse_h160(self.address)
        public_key = bytes(self.public_key)
        if len(public_key) != 64:
            raise ValueError("public key must be 64 bytes")
        self.public_key = public_key

    def to_json(self):
        return {
            "address": format_hash(self.address),
            "publicKey": format_hash(self.public_key),
            "isValidForCurrentChain": self.is_valid_for_current_chain,
        }