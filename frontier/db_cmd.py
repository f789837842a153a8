"""Command to inspect and edit the frontier database."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, TextIO

from frontier.bytes import format_hash, parse_h256
from frontier.cli_values import (
    Column,
    CommandError,
    MetaKey,
    Operation,
    maybe_deserialize_value,
)
from frontier.db import Backend, DatabaseError, DatabaseSource, TransactionMetadata
from frontier.mapping_cmd import MappingCommand
from frontier.meta_cmd import MetaCommand


@dataclass
class FrontierDbCmd:
    """One create, read, update or delete on a column of the frontier database.

    ``value`` is a JSON file holding the value to write; without it the value
    is read from ``stdin``. ``confirm`` replaces the interactive confirmation.
    """

    operation: Operation
    column: Column
    key: str
    value: Path | None = None
    stdin: TextIO | None = None
    confirm: Callable | None = None

    def __post_init__(self):
        if isinstance(self.operation, str):
            self.operation = Operation(self.operation.lower())
        if isinstance(self.column, str):
            self.column = Column(self.column.lower())

    def _unexpected(self):
        return CommandError(f"Unexpected `{self.value}` value")

    def run(self, client, backend):
        """Run the command; a read returns what it found."""
        if self.column is Column.META:
            command = MetaCommand(self.operation, backend, self.confirm)
            key = MetaKey.parse(self.key)
            value = maybe_deserialize_value(self.operation, self.value, self.stdin)
            if value is not None and not isinstance(value, (list, dict)):
                raise self._unexpected()
            return command.query(key, value)
        command = MappingCommand(self.operation, client, backend)
        try:
            key = parse_h256(self.key)
        except ValueError:
            raise CommandError(f"Invalid H256 key: {self.key!r}") from None
        value = maybe_deserialize_value(self.operation, self.value, self.stdin)
        if value is not None and not isinstance(value, bytes):
            raise self._unexpected()
        return command.query(self.column, key, value)


def _to_jsonable(value):
    if isinstance(value, Enum):
        return value.name.capitalize()
    if isinstance(value, (bytes, bytearray)):
        return format_hash(value)
    if isinstance(value, TransactionMetadata):
        return {
            "blockHash": format_hash(value.block_hash),
            "ethereumBlockHash": format_hash(value.ethereum_block_hash),
            "ethereumIndex": value.ethereum_index,
        }
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(item) for item in value]
    return value


_SOURCES = {
    "rocksdb": lambda base: DatabaseSource.rocksdb(base / "db"),
    "paritydb": lambda base: DatabaseSource.paritydb(base / "paritydb"),
    "auto": lambda base: DatabaseSource.auto(base / "db", base / "paritydb"),
}


def build_parser():
    parser = argparse.ArgumentParser(
        prog="frontier-db", description="Interact with the Frontier backend database."
    )
    parser.add_argument(
        "operation", type=str.lower, choices=[item.value for item in Operation],
        help="operation to perform",
    )
    parser.add_argument(
        "column", type=str.lower, choices=[item.value for item in Column],
        help="column to query",
    )
    parser.add_argument("-k", "--key", required=True, help="key to read or write")
    parser.add_argument(
        "--value", type=Path, help="JSON file with the value to write (default: stdin)"
    )
    parser.add_argument(
        "--base-path", type=Path, required=True, help="directory of the node's databases"
    )
    parser.add_argument(
        "--database", choices=sorted(_SOURCES), default="auto", help="database kind"
    )
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    command = FrontierDbCmd(
        Operation(args.operation), Column(args.column), args.key, args.value
    )
    try:
        source = _SOURCES[args.database](args.base_path)
        with Backend.open(source, args.base_path) as backend:
            result = command.run(None, backend)
    except (CommandError, DatabaseError) as error:
        print(f"Error: {error}", file=sys.stderr)
        return 1
    if command.operation is Operation.READ:
        print(json.dumps(_to_jsonable(result)))
    return 0