"""JSON-RPC method table and dispatcher for the eth, net, web3 and pub-sub APIs."""

from __future__ import annotations

import inspect
import re
from dataclasses import dataclass, field
from typing import Callable

from frontier.block_number import BlockNumber
from frontier.bytes import Bytes, format_hash, parse_h160, parse_h256
from frontier.filter import Filter
from frontier.index import parse_index
from frontier.pubsub import parse_kind, parse_params
from frontier.requests import CallRequest, TransactionRequest
from frontier.sync import peer_count_to_json, sync_status_to_json

_QUANTITY = re.compile(r"0x[0-9a-fA-F]{1,64}")
_H64 = re.compile(r"(0x)?[0-9a-fA-F]{16}")


class RpcError(Exception):
    """A JSON-RPC error with its code."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603

    def __init__(self, code, message):
        super().__init__(message)
        self.code = code
        self.message = message

    def to_json(self):
        return {"code": self.code, "message": self.message}


def _u256(value):
    if not isinstance(value, str) or not _QUANTITY.fullmatch(value):
        raise ValueError(f"Invalid quantity: {value!r}")
    return int(value[2:], 16)


def _h64(value):
    if not isinstance(value, str) or not _H64.fullmatch(value):
        raise ValueError(f"Invalid H64: {value!r}")
    return bytes.fromhex(value[2:] if value.startswith("0x") else value)


def _boolean(value):
    if not isinstance(value, bool):
        raise ValueError("expected a boolean")
    return value


def _float_list(value):
    if not isinstance(value, list):
        raise ValueError("expected a list of numbers")
    result = []
    for item in value:
        if isinstance(item, bool) or not isinstance(item, (int, float)):
            raise ValueError("expected a list of numbers")
        result.append(float(item))
    return result


def _subscription_id(value):
    if isinstance(value, bool) or not isinstance(value, (str, int)):
        raise ValueError("subscription id must be a string or a number")
    return value


def _identity(value):
    return value


def _to_json(value):
    return value.to_json()


def _optional(encode):
    return lambda value: None if value is None else encode(value)


def _each(encode):
    return lambda values: [encode(value) for value in values]


def _filter_changes(value):
    return value.to_json()


@dataclass(frozen=True)
class _Param:
    name: str
    decode: Callable
    optional: bool = False


@dataclass(frozen=True)
class RpcMethod:
    """One JSON-RPC method: its wire name, the handler attribute and codecs."""

    name: str
    attribute: str
    encode: Callable
    params: tuple = field(default_factory=tuple)

    def decode_params(self, raw):
        if raw is None:
            raw = []
        if isinstance(raw, dict):
            unknown = set(raw) - {param.name for param in self.params}
            if unknown:
                raise ValueError(f"unknown parameter `{sorted(unknown)[0]}`")
            values = [raw.get(param.name) for param in self.params]
        elif isinstance(raw, list):
            if len(raw) > len(self.params):
                raise ValueError(
                    f"expected at most {len(self.params)} parameters, got {len(raw)}"
                )
            values = raw + [None] * (len(self.params) - len(raw))
        else:
            raise ValueError("params must be a list or an object")
        decoded = []
        for param, value in zip(self.params, values):
            if value is None:
                if not param.optional:
                    raise ValueError(f"missing parameter `{param.name}`")
                decoded.append(None)
            else:
                decoded.append(param.decode(value))
        return decoded


def _method(name, attribute, encode, *params):
    return RpcMethod(name, attribute, encode, tuple(params))


_HASH = _Param("hash", parse_h256)
_FULL = _Param("full", _boolean)
_NUMBER = _Param("number", BlockNumber.from_json)
_OPT_NUMBER = _Param("number", BlockNumber.from_json, optional=True)
_INDEX = _Param("index", parse_index)
_ADDRESS = _Param("address", parse_h160)
_CALL = _Param("request", CallRequest.from_json)
_FILTER = _Param("filter", Filter.from_json)

_OPT_BLOCK = _optional(_to_json)
_OPT_QUANTITY = _optional(hex)

METHODS = (
    # Client
    _method("eth_protocolVersion", "protocol_version", _identity),
    _method("eth_syncing", "syncing", sync_status_to_json),
    _method("eth_coinbase", "author", format_hash),
    _method("eth_accounts", "accounts", _each(format_hash)),
    _method("eth_blockNumber", "block_number", hex),
    _method("eth_chainId", "chain_id", _OPT_QUANTITY),
    # Block
    _method("eth_getBlockByHash", "block_by_hash", _OPT_BLOCK, _HASH, _FULL),
    _method("eth_getBlockByNumber", "block_by_number", _OPT_BLOCK, _NUMBER, _FULL),
    _method("eth_getBlockTransactionCountByHash", "block_transaction_count_by_hash",
            _OPT_QUANTITY, _HASH),
    _method("eth_getBlockTransactionCountByNumber", "block_transaction_count_by_number",
            _OPT_QUANTITY, _NUMBER),
    _method("eth_getUncleCountByBlockHash", "block_uncles_count_by_hash", hex, _HASH),
    _method("eth_getUncleCountByBlockNumber", "block_uncles_count_by_number", hex, _NUMBER),
    _method("eth_getUncleByBlockHashAndIndex", "uncle_by_block_hash_and_index",
            _OPT_BLOCK, _HASH, _INDEX),
    _method("eth_getUncleByBlockNumberAndIndex", "uncle_by_block_number_and_index",
            _OPT_BLOCK, _NUMBER, _INDEX),
    # Transaction
    _method("eth_getTransactionByHash", "transaction_by_hash", _OPT_BLOCK, _HASH),
    _method("eth_getTransactionByBlockHashAndIndex", "transaction_by_block_hash_and_index",
            _OPT_BLOCK, _HASH, _INDEX),
    _method("eth_getTransactionByBlockNumberAndIndex",
            "transaction_by_block_number_and_index", _OPT_BLOCK, _NUMBER, _INDEX),
    _method("eth_getTransactionReceipt", "transaction_receipt", _OPT_BLOCK, _HASH),
    # State
    _method("eth_getBalance", "balance", hex, _ADDRESS, _OPT_NUMBER),
    _method("eth_getStorageAt", "storage_at", format_hash,
            _ADDRESS, _Param("index", _u256), _OPT_NUMBER),
    _method("eth_getTransactionCount", "transaction_count", hex, _ADDRESS, _OPT_NUMBER),
    _method("eth_getCode", "code_at", lambda value: Bytes(value).to_json(),
            _ADDRESS, _OPT_NUMBER),
    # Execute
    _method("eth_call", "call", lambda value: Bytes(value).to_json(), _CALL, _OPT_NUMBER),
    _method("eth_estimateGas", "estimate_gas", hex, _CALL, _OPT_NUMBER),
    # Fee
    _method("eth_gasPrice", "gas_price", hex),
    _method("eth_feeHistory", "fee_history", _to_json,
            _Param("block_count", _u256), _Param("newest_block", BlockNumber.from_json),
            _Param("reward_percentiles", _float_list, optional=True)),
    _method("eth_maxPriorityFeePerGas", "max_priority_fee_per_gas", hex),
    # Mining
    _method("eth_mining", "is_mining", _identity),
    _method("eth_hashrate", "hashrate", hex),
    _method("eth_getWork", "work", _to_json),
    _method("eth_submitHashrate", "submit_hashrate", _identity,
            _Param("hashrate", _u256), _Param("id", parse_h256)),
    _method("eth_submitWork", "submit_work", _identity,
            _Param("nonce", _h64), _Param("pow_hash", parse_h256),
            _Param("mix_digest", parse_h256)),
    # Submit
    _method("eth_sendTransaction", "send_transaction", format_hash,
            _Param("request", TransactionRequest.from_json)),
    _method("eth_sendRawTransaction", "send_raw_transaction", format_hash,
            _Param("bytes", Bytes.from_json)),
    # Filters
    _method("eth_newFilter", "new_filter", hex, _FILTER),
    _method("eth_newBlockFilter", "new_block_filter", hex),
    _method("eth_newPendingTransactionFilter", "new_pending_transaction_filter", hex),
    _method("eth_getFilterChanges", "filter_changes", _filter_changes, _INDEX),
    _method("eth_getFilterLogs", "filter_logs", _each(_to_json), _INDEX),
    _method("eth_uninstallFilter", "uninstall_filter", _identity, _INDEX),
    _method("eth_getLogs", "logs", _each(_to_json), _FILTER),
    # Net
    _method("net_version", "version", _identity),
    _method("net_peerCount", "peer_count", peer_count_to_json),
    _method("net_listening", "is_listening", _identity),
    # Web3
    _method("web3_clientVersion", "client_version", _identity),
    _method("web3_sha3", "sha3", format_hash, _Param("input", Bytes.from_json)),
    # Pub-sub
    _method("eth_subscribe", "subscribe", _identity,
            _Param("kind", parse_kind), _Param("params", parse_params, optional=True)),
    _method("eth_unsubscribe", "unsubscribe", _identity,
            _Param("subscription", _subscription_id)),
)

_BY_NAME = {method.name: method for method in METHODS}


class RpcDispatcher:
    """Routes JSON-RPC requests to the methods a handler object implements.

    Handler methods take decoded parameters and may be plain or async.
    """

    def __init__(self, handler):
        self.handler = handler

    def methods(self):
        """Wire names of the methods the handler implements, sorted."""
        return sorted(
            method.name for method in METHODS if callable(getattr(self.handler, method.attribute, None))
        )

    async def dispatch(self, request):
        """Answer one request object with a JSON-RPC response object."""
        request_id = request.get("id") if isinstance(request, dict) else None
        try:
            result = await self._call(request)
        except RpcError as error:
            return {"jsonrpc": "2.0", "id": request_id, "error": error.to_json()}
        return {"jsonrpc": "2.0", "id": request_id, "result": result}

    async def _call(self, request):
        if not isinstance(request, dict) or not isinstance(request.get("method"), str):
            raise RpcError(RpcError.INVALID_REQUEST, "Invalid request")
        name = request["method"]
        method = _BY_NAME.get(name)
        target = None if method is None else getattr(self.handler, method.attribute, None)
        if not callable(target):
            raise RpcError(RpcError.METHOD_NOT_FOUND, f"Method not found: {name}")
        try:
            arguments = method.decode_params(request.get("params"))
        except (ValueError, TypeError) as error:
            raise RpcError(RpcError.INVALID_PARAMS, f"Invalid params: {error}") from None
        try:
            result = target(*arguments)
            if inspect.isawaitable(result):
                result = await result
            return method.encode(result)
        except RpcError:
            raise
        except Exception as error:
            raise RpcError(RpcError.INTERNAL_ERROR, str(error)) from error