import pytest

from frontier.bytes import Bytes, format_hash
from frontier.requests import AccessListItem
from frontier.transaction import (
    LocalTransactionStatus,
    RichRawTransaction,
    Transaction,
    TransactionStatusKind,
)

HASH = bytes(range(32))


def test_optional_fee_fields_are_omitted_when_absent():
    encoded = Transaction().to_json()
    for key in ("gasPrice", "maxFeePerGas", "maxPriorityFeePerGas", "accessList", "type"):
        assert key not in encoded
    assert encoded["blockHash"] is None
    assert encoded["chainId"] is None


def test_quantities_and_hashes_round_trip():
    tx = Transaction(
        hash=HASH, nonce=7, value=10**18, gas=21000, gas_price=5, chain_id=42, transaction_type=2
    )
    encoded = tx.to_json()
    assert encoded["hash"] == format_hash(HASH)
    assert int(encoded["nonce"], 16) == 7
    assert int(encoded["value"], 16) == 10**18
    assert int(encoded["gasPrice"], 16) == 5
    assert int(encoded["chainId"], 16) == 42
    assert int(encoded["type"], 16) == 2


def test_field_order_matches_wire_format():
    keys = list(Transaction().to_json())
    assert keys[:6] == ["hash", "nonce", "blockHash", "blockNumber", "transactionIndex", "from"]


def test_access_list_serialized():
    item = AccessListItem(address=bytes(20), storage_keys=(HASH,))
    encoded = Transaction(access_list=[item]).to_json()
    assert encoded["accessList"] == [item.to_json()]


def test_input_and_raw_are_hex():
    encoded = Transaction(input=b"\x01\x02", raw=b"\xff").to_json()
    assert encoded["input"] == Bytes(b"\x01\x02").to_json()
    assert Bytes.from_json(encoded["raw"]) == b"\xff"


def test_public_key_length_validated():
    with pytest.raises(ValueError):
        Transaction(public_key=bytes(10))


def test_pending_status():
    status = LocalTransactionStatus(TransactionStatusKind.PENDING)
    assert status.to_json() == {"status": "pending"}


def test_rejected_status_includes_error():
    tx = Transaction(nonce=1)
    status = LocalTransactionStatus(TransactionStatusKind.REJECTED, tx, error="too low")
    encoded = status.to_json()
    assert list(encoded) == ["status", "transaction", "error"]
    assert encoded["error"] == "too low"
    assert encoded["transaction"] == tx.to_json()


def test_replaced_status_field_order():
    status = LocalTransactionStatus(
        TransactionStatusKind.REPLACED, Transaction(), gas_price=9, hash=HASH
    )
    encoded = status.to_json()
    assert list(encoded) == ["status", "transaction", "hash", "gasPrice"]
    assert int(encoded["gasPrice"], 16) == 9
    assert encoded["hash"] == format_hash(HASH)


def test_mined_requires_transaction():
    with pytest.raises(ValueError):
        LocalTransactionStatus(TransactionStatusKind.MINED)


def test_pending_rejects_transaction():
    with pytest.raises(ValueError):
        LocalTransactionStatus(TransactionStatusKind.PENDING, Transaction())


def test_replaced_requires_details():
    with pytest.raises(ValueError):
        LocalTransactionStatus(TransactionStatusKind.REPLACED, Transaction())


def test_rich_raw_transaction():
    tx = Transaction(nonce=2)
    rich = RichRawTransaction(raw=b"\x01\x02", transaction=tx)
    assert rich.to_json() == {"raw": Bytes(b"\x01\x02").to_json(), "tx": tx.to_json()}