"""Operations, columns, static keys and value parsing for the database command."""

from __future__ import annotations

import json
import sys
from enum import Enum
from pathlib import Path

from frontier.bytes import format_hash, parse_h256
from frontier.db import (
    CURRENT_SYNCING_TIPS,
    PALLET_ETHEREUM_SCHEMA_CACHE,
    EthereumStorageSchema,
)

_DESERIALIZE_ERROR = "Failed to deserialize value data"


class CommandError(Exception):
    """The database command was given input it cannot act on, or was cancelled."""


class Operation(Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


class Column(Enum):
    META = "meta"
    BLOCK = "block"
    TRANSACTION = "transaction"


class MetaKey(Enum):
    """Static keys of the meta column."""

    TIPS = CURRENT_SYNCING_TIPS.decode()
    SCHEMA = PALLET_ETHEREUM_SCHEMA_CACHE.decode()

    @classmethod
    def parse(cls, text):
        """The static key named by ``text``."""
        for key in cls:
            if key.value == text:
                return key
        raise CommandError(f"`{json.dumps(text)}` is not a meta column static key")


_SCHEMA_NAMES = {schema.name.capitalize(): schema for schema in EthereumStorageSchema}


def _parse_hash(value):
    if not isinstance(value, str):
        raise ValueError("expected a hash string")
    return parse_h256(value)


def _parse_schema(value):
    if not isinstance(value, str) or value not in _SCHEMA_NAMES:
        raise ValueError(f"unknown storage schema: {value!r}")
    return _SCHEMA_NAMES[value]


def _interpret(data):
    # Tried in order: syncing tips, schema map, substrate block hash.
    if isinstance(data, list):
        return [_parse_hash(item) for item in data]
    if isinstance(data, dict):
        return {_parse_hash(key): _parse_schema(value) for key, value in data.items()}
    if isinstance(data, str):
        return _parse_hash(data)
    raise ValueError("unsupported value")


def parse_db_value(text):
    """Parse the first JSON value in ``text``.

    Returns a list of hashes (syncing tips), a dict of hash to storage schema
    (schema cache) or a single hash (a substrate block hash).
    """
    try:
        data, _ = json.JSONDecoder().raw_decode(text.lstrip())
        return _interpret(data)
    except ValueError:
        raise CommandError(_DESERIALIZE_ERROR) from None


def _parse_stream(stream):
    text = ""
    for line in iter(stream.readline, ""):
        text += line
        try:
            data, _ = json.JSONDecoder().raw_decode(text.lstrip())
        except json.JSONDecodeError:
            continue
        try:
            return _interpret(data)
        except ValueError:
            raise CommandError(_DESERIALIZE_ERROR) from None
    raise CommandError(_DESERIALIZE_ERROR)


def maybe_deserialize_value(operation, value, stdin=None):
    """The value a create or update writes, read from the file ``value`` or from stdin.

    Other operations take no value and return None without reading anything.
    """
    if operation not in (Operation.CREATE, Operation.UPDATE):
        return None
    if value is not None:
        try:
            text = Path(value).read_text(encoding="utf-8")
        except OSError as error:
            raise CommandError(str(error)) from error
        return parse_db_value(text)
    return _parse_stream(sys.stdin if stdin is None else stdin)


def _describe(value):
    if isinstance(value, Enum):
        return value.name.capitalize()
    if isinstance(value, (bytes, bytearray)):
        return format_hash(value)
    if isinstance(value, list):
        return "[" + ", ".join(_describe(item) for item in value) + "]"
    if isinstance(value, tuple):
        return "(" + ", ".join(_describe(item) for item in value) + ")"
    if isinstance(value, dict):
        pairs = (f"{_describe(k)}: {_describe(v)}" for k, v in value.items())
        return "{" + ", ".join(pairs) + "}"
    return repr(value)


def key_value_error(key, value):
    return CommandError(
        f"Key `{_describe(key)}` and Value `{_describe(value)}` "
        "are not compatible with this operation"
    )


def key_column_error(key, column):
    return CommandError(
        f"Key `{_describe(key)}` and Column `{_describe(column)}` "
        "are not compatible with this operation"
    )


def key_not_empty_error(key):
    return CommandError(f"Operation not allowed for non-empty Key `{_describe(key)}`")


def confirmation_prompt(operation, key, existing_value, new_value, stdin=None, stdout=None):
    """Show the pending change and raise unless the user types ``confirm``."""
    stdin = sys.stdin if stdin is None else stdin
    stdout = sys.stdout if stdout is None else stdout
    print(
        "\n---------------------------------------------\n"
        f"Operation: {_describe(operation)}\n"
        f"Key: {_describe(key)}\n"
        f"Existing value: {_describe(existing_value)}\n"
        f"New value: {_describe(new_value)}\n"
        "---------------------------------------------\n"
        "Type `confirm` and press [Enter] to confirm:",
        file=stdout,
    )
    stdout.flush()
    if stdin.readline().strip() != "confirm":
        raise CommandError("-- Cancel exit --")