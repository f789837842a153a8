import pytest

from frontier.block_number import BlockNumber
from frontier.bytes import parse_h160
from frontier.pubsub import SubscriptionKind
from frontier.rpc_api import METHODS, RpcDispatcher, RpcError

ADDRESS = "0x" + "10" * 20


class FakeHandler:
    def __init__(self):
        self.calls = []

    def block_number(self):
        return 5

    def balance(self, address, number):
        self.calls.append((address, number))
        return 1000

    async def block_by_hash(self, hash, full):
        self.calls.append((hash, full))
        return None

    def version(self):
        return "42"

    def client_version(self):
        return "client/v1"

    def syncing(self):
        return None

    def is_mining(self):
        raise RuntimeError("boom")

    def uninstall_filter(self, index):
        return index == 3

    def subscribe(self, kind, params):
        self.calls.append((kind, params))
        return "sub-1"


def _request(method, params=None, request_id=1):
    request = {"jsonrpc": "2.0", "id": request_id, "method": method}
    if params is not None:
        request["params"] = params
    return request


def test_methods_lists_only_implemented():
    assert RpcDispatcher(FakeHandler()).methods() == sorted(
        [
            "eth_blockNumber",
            "eth_getBalance",
            "eth_getBlockByHash",
            "net_version",
            "web3_clientVersion",
            "eth_syncing",
            "eth_mining",
            "eth_uninstallFilter",
            "eth_subscribe",
        ]
    )


def test_listed_methods_are_unique_and_known():
    methods = RpcDispatcher(FakeHandler()).methods()
    assert len(methods) == len(set(methods))
    assert set(methods) <= {method.name for method in METHODS}


@pytest.mark.asyncio
async def test_block_number_is_hex_quantity():
    response = await RpcDispatcher(FakeHandler()).dispatch(_request("eth_blockNumber"))
    assert response["result"] == "0x5"
    assert response["id"] == 1


@pytest.mark.asyncio
async def test_optional_block_may_be_omitted():
    handler = FakeHandler()
    response = await RpcDispatcher(handler).dispatch(_request("eth_getBalance", [ADDRESS]))
    assert response["result"] == hex(1000)
    assert handler.calls == [(parse_h160(ADDRESS), None)]


@pytest.mark.asyncio
async def test_block_parameter_is_decoded():
    handler = FakeHandler()
    await RpcDispatcher(handler).dispatch(_request("eth_getBalance", [ADDRESS, "latest"]))
    assert handler.calls[0][1] == BlockNumber.from_json("latest")


@pytest.mark.asyncio
async def test_named_params():
    handler = FakeHandler()
    await RpcDispatcher(handler).dispatch(
        _request("eth_getBalance", {"address": ADDRESS, "number": "0x2"})
    )
    assert handler.calls[0][1] == BlockNumber(2)


@pytest.mark.asyncio
async def test_async_handler_method():
    handler = FakeHandler()
    block_hash = "0x" + "ab" * 32
    response = await RpcDispatcher(handler).dispatch(
        _request("eth_getBlockByHash", [block_hash, True])
    )
    assert response["result"] is None
    assert handler.calls == [(bytes.fromhex("ab" * 32), True)]


@pytest.mark.asyncio
async def test_not_syncing_returns_false():
    response = await RpcDispatcher(FakeHandler()).dispatch(_request("eth_syncing"))
    assert response["result"] is False


@pytest.mark.asyncio
async def test_index_parameter():
    dispatcher = RpcDispatcher(FakeHandler())
    assert (await dispatcher.dispatch(_request("eth_uninstallFilter", ["0x3"])))["result"] is True
    assert (await dispatcher.dispatch(_request("eth_uninstallFilter", [4])))["result"] is False


@pytest.mark.asyncio
async def test_subscribe_decodes_kind():
    handler = FakeHandler()
    response = await RpcDispatcher(handler).dispatch(_request("eth_subscribe", ["newHeads"]))
    assert response["result"] == "sub-1"
    assert handler.calls == [(SubscriptionKind.NEW_HEADS, None)]


@pytest.mark.asyncio
async def test_handler_failure_is_internal_error():
    response = await RpcDispatcher(FakeHandler()).dispatch(_request("eth_mining"))
    assert response["error"]["code"] == RpcError.INTERNAL_ERROR
    assert response["error"]["message"] == "boom"


@pytest.mark.asyncio
async def test_unknown_method():
    response = await RpcDispatcher(FakeHandler()).dispatch(_request("eth_nothing"))
    assert response["error"]["code"] == RpcError.METHOD_NOT_FOUND


@pytest.mark.asyncio
async def test_known_but_unimplemented_method():
    response = await RpcDispatcher(FakeHandler()).dispatch(_request("eth_gasPrice"))
    assert response["error"]["code"] == RpcError.METHOD_NOT_FOUND


@pytest.mark.asyncio
async def test_invalid_params():
    dispatcher = RpcDispatcher(FakeHandler())
    bad_address = await dispatcher.dispatch(_request("eth_getBalance", ["0x12"]))
    assert bad_address["error"]["code"] == RpcError.INVALID_PARAMS
    missing = await dispatcher.dispatch(_request("eth_getBalance", []))
    assert missing["error"]["code"] == RpcError.INVALID_PARAMS
    too_many = await dispatcher.dispatch(_request("eth_blockNumber", [1]))
    assert too_many["error"]["code"] == RpcError.INVALID_PARAMS


@pytest.mark.asyncio
async def test_invalid_request():
    dispatcher = RpcDispatcher(FakeHandler())
    response = await dispatcher.dispatch(["eth_blockNumber"])
    assert response["error"]["code"] == RpcError.INVALID_REQUEST
    assert response["id"] is None
    no_method = await dispatcher.dispatch({"id": 7})
    assert no_method["error"]["code"] == RpcError.INVALID_REQUEST
    assert no_method["id"] == 7