import pytest

from frontier.requests import (
    AccessListItem,
    CallRequest,
    EIP1559TransactionMessage,
    EIP2930TransactionMessage,
    LegacyTransactionMessage,
    TransactionRequest,
)

ADDRESS = bytes([0x11]) * 20
KEY = bytes(range(32))


def test_call_request_decodes_fields():
    request = CallRequest.from_json(
        {"from": "0x" + ADDRESS.hex(), "type": "0x2", "data": "0x0102", "gas": "0x5208"}
    )
    assert request.sender == ADDRESS
    assert request.transaction_type == 2
    assert request.data == b"\x01\x02"
    assert request.gas == 0x5208
    assert request.to is None


def test_call_request_rejects_unknown_fields():
    with pytest.raises(ValueError):
        CallRequest.from_json({"input": "0x"})


def test_quantity_must_be_hex():
    with pytest.raises(ValueError):
        CallRequest.from_json({"value": "10"})


def test_null_fields_are_absent():
    request = CallRequest.from_json({"to": None, "gasPrice": None})
    assert request == CallRequest()


def test_access_list_item_round_trip():
    item = AccessListItem(address=ADDRESS, storage_keys=(KEY,))
    assert AccessListItem.from_json(item.to_json()) == item


def test_access_list_item_missing_key():
    with pytest.raises(ValueError):
        AccessListItem.from_json({"address": "0x" + ADDRESS.hex()})


def test_transaction_request_round_trip():
    request = TransactionRequest(
        sender=ADDRESS,
        to=ADDRESS,
        gas_price=7,
        gas=21000,
        value=10**18,
        data=b"\xff",
        nonce=3,
        access_list=(AccessListItem(ADDRESS, (KEY,)),),
        transaction_type=1,
    )
    assert TransactionRequest.from_json(request.to_json()) == request


def test_transaction_request_serializes_absent_as_null():
    encoded = TransactionRequest().to_json()
    assert encoded["from"] is None
    assert encoded["type"] is None
    assert len(encoded) == 11


def test_legacy_message():
    message = TransactionRequest(gas_price=5, gas=100, to=ADDRESS, data=b"\x01").to_message()
    assert isinstance(message, LegacyTransactionMessage)
    assert message.gas_price == 5
    assert message.gas_limit == 100
    assert message.to == ADDRESS
    assert message.input == b"\x01"
    assert message.chain_id is None
    assert message.nonce == 0


def test_eip2930_message():
    items = (AccessListItem(ADDRESS),)
    message = TransactionRequest(gas_price=5, access_list=items).to_message()
    assert isinstance(message, EIP2930TransactionMessage)
    assert message.access_list == items
    assert message.to is None
    assert message.chain_id == 0


def test_eip1559_message_from_empty_request():
    message = TransactionRequest().to_message()
    assert isinstance(message, EIP1559TransactionMessage)
    assert message.max_fee_per_gas == 0
    assert message.access_list == ()


def test_eip1559_message_from_max_fee():
    message = TransactionRequest(max_fee_per_gas=9, max_priority_fee_per_gas=2).to_message()
    assert isinstance(message, EIP1559TransactionMessage)
    assert message.max_fee_per_gas == 9
    assert message.max_priority_fee_per_gas == 2


def test_conflicting_fee_fields_give_no_message():
    assert TransactionRequest(gas_price=1, max_fee_per_gas=2).to_message() is None