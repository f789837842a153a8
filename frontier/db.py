"""Storage for the mapping between Ethereum and Substrate blocks, plus sync metadata.

Values are kept in SCALE encoding in a column-oriented key-value store
backed by an SQLite file inside the database directory.
"""

from __future__ import annotations

import sqlite3
import threading
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from pathlib import Path

from frontier.bytes import parse_h256

DB_HASH_LEN = 32
CURRENT_SYNCING_TIPS = b"CURRENT_SYNCING_TIPS"
PALLET_ETHEREUM_SCHEMA_CACHE = b":ethereum_schema_cache"
DATABASE_FILE_NAME = "frontier.sqlite3"

U32_MAX = 2**32 - 1

# SCALE encoding of the boolean ``true``.
_ENCODED_TRUE = b"\x01"


class DatabaseError(Exception):
    """The database could not be opened, read, written or decoded."""


class _Column(IntEnum):
    META = 0
    BLOCK_MAPPING = 1
    TRANSACTION_MAPPING = 2
    SYNCED_MAPPING = 3


NUM_COLUMNS = len(_Column)


class SourceKind(Enum):
    """Kind of database a node is configured with."""

    ROCKSDB = "rocksdb"
    PARITYDB = "paritydb"
    AUTO = "auto"
    CUSTOM = "custom"


def _optional_path(value):
    return None if value is None else Path(value)


@dataclass(frozen=True)
class DatabaseSource:
    """Where a database lives and which kind it is."""

    kind: SourceKind
    path: Path | None = None
    rocksdb_path: Path | None = None
    paritydb_path: Path | None = None
    cache_size: int = 0

    def __post_init__(self):
        object.__setattr__(self, "path", _optional_path(self.path))
        object.__setattr__(self, "rocksdb_path", _optional_path(self.rocksdb_path))
        object.__setattr__(self, "paritydb_path", _optional_path(self.paritydb_path))
        if self.kind in (SourceKind.ROCKSDB, SourceKind.PARITYDB) and self.path is None:
            raise ValueError(f"a {self.kind.value} source needs a path")
        if self.kind is SourceKind.AUTO and (
            self.rocksdb_path is None or self.paritydb_path is None
        ):
            raise ValueError("an auto source needs both a rocksdb and a paritydb path")

    @classmethod
    def rocksdb(cls, path, cache_size=0):
        return cls(SourceKind.ROCKSDB, path=path, cache_size=cache_size)

    @classmethod
    def paritydb(cls, path):
        return cls(SourceKind.PARITYDB, path=path)

    @classmethod
    def auto(cls, rocksdb_path, paritydb_path, cache_size=0):
        return cls(
            SourceKind.AUTO,
            rocksdb_path=rocksdb_path,
            paritydb_path=paritydb_path,
            cache_size=cache_size,
        )

    @classmethod
    def custom(cls):
        return cls(SourceKind.CUSTOM)


class EthereumStorageSchema(IntEnum):
    """Version of the storage layout the Ethereum pallet uses."""

    UNDEFINED = 0
    V1 = 1
    V2 = 2
    V3 = 3


# SCALE encoding helpers.


def _encode_compact(value):
    if value < 0:
        raise ValueError("compact integers must not be negative")
    if value < 1 << 6:
        return bytes([value << 2])
    if value < 1 << 14:
        return ((value << 2) | 1).to_bytes(2, "little")
    if value < 1 << 30:
        return ((value << 2) | 2).to_bytes(4, "little")
    raw = value.to_bytes((value.bit_length() + 7) // 8, "little")
    return bytes([((len(raw) - 4) << 2) | 3]) + raw


class _Reader:
    def __init__(self, data):
        self._data = bytes(data)
        self._offset = 0

    def take(self, size):
        end = self._offset + size
        if end > len(self._data):
            raise DatabaseError("Not enough data to fill buffer")
        chunk = self._data[self._offset:end]
        self._offset = end
        return chunk

    def compact(self):
        first = self.take(1)[0]
        mode = first & 3
        if mode == 0:
            return first >> 2
        if mode == 1:
            return int.from_bytes(bytes([first]) + self.take(1), "little") >> 2
        if mode == 2:
            return int.from_bytes(bytes([first]) + self.take(3), "little") >> 2
        return int.from_bytes(self.take((first >> 2) + 4), "little")

    def sequence(self, decode_item):
        return [decode_item(self) for _ in range(self.compact())]

    def hash(self):
        return self.take(DB_HASH_LEN)

    def boolean(self):
        value = self.take(1)[0]
        if value > 1:
            raise DatabaseError("Invalid boolean representation")
        return value == 1

    def u32(self):
        return int.from_bytes(self.take(4), "little")


def _encode_hashes(hashes):
    return _encode_compact(len(hashes)) + b"".join(hashes)


_SCHEMA_CACHE_KEY = _encode_compact(len(PALLET_ETHEREUM_SCHEMA_CACHE)) + PALLET_ETHEREUM_SCHEMA_CACHE


def _decode_schema_entry(reader):
    index = reader.take(1)[0]
    try:
        schema = EthereumStorageSchema(index)
    except ValueError:
        raise DatabaseError(f"Invalid storage schema index {index}") from None
    return schema, reader.hash()


@dataclass
class MappingCommitment:
    """The Ethereum block and transactions contained in one Substrate block."""

    block_hash: bytes
    ethereum_block_hash: bytes
    ethereum_transaction_hashes: list = field(default_factory=list)

    def __post_init__(self):
        self.block_hash = parse_h256(self.block_hash)
        self.ethereum_block_hash = parse_h256(self.ethereum_block_hash)
        self.ethereum_transaction_hashes = [
            parse_h256(item) for item in self.ethereum_transaction_hashes
        ]


@dataclass(frozen=True)
class TransactionMetadata:
    """Where an Ethereum transaction was included."""

    block_hash: bytes
    ethereum_block_hash: bytes
    ethereum_index: int

    def __post_init__(self):
        object.__setattr__(self, "block_hash", parse_h256(self.block_hash))
        object.__setattr__(self, "ethereum_block_hash", parse_h256(self.ethereum_block_hash))
        if not 0 <= self.ethereum_index <= U32_MAX:
            raise ValueError(f"ethereum index out of range: {self.ethereum_index}")

    def encode(self):
        return (
            self.block_hash
            + self.ethereum_block_hash
            + self.ethereum_index.to_bytes(4, "little")
        )

    @classmethod
    def _decode(cls, reader):
        return cls(reader.hash(), reader.hash(), reader.u32())


def _encode_metadata_list(items):
    return _encode_compact(len(items)) + b"".join(item.encode() for item in items)


class _Store:
    """Column-oriented key-value store in an SQLite file."""

    def __init__(self, directory, create):
        directory = Path(directory)
        file = directory / DATABASE_FILE_NAME
        if not create and not file.is_file():
            raise DatabaseError(f"No database found at {directory}")
        self.path = directory
        self._lock = threading.Lock()
        connection = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            connection = sqlite3.connect(str(file), check_same_thread=False)
            with connection:
                connection.execute(
                    "CREATE TABLE IF NOT EXISTS entries ("
                    "col INTEGER NOT NULL, key BLOB NOT NULL, value BLOB NOT NULL, "
                    "PRIMARY KEY (col, key))"
                )
        except (OSError, sqlite3.Error) as error:
            if connection is not None:
                connection.close()
            raise DatabaseError(str(error)) from error
        self._connection = connection

    @staticmethod
    def _check_column(column):
        if not 0 <= int(column) < NUM_COLUMNS:
            raise DatabaseError(f"Invalid column {column}")

    def get(self, column, key):
        self._check_column(column)
        try:
            with self._lock:
                row = self._connection.execute(
                    "SELECT value FROM entries WHERE col = ? AND key = ?",
                    (int(column), bytes(key)),
                ).fetchone()
        except sqlite3.Error as error:
            raise DatabaseError(str(error)) from error
        return None if row is None else bytes(row[0])

    def commit(self, changes):
        """Apply ``(column, key, value)`` changes atomically; a None value removes."""
        for column, _, _ in changes:
            self._check_column(column)
        try:
            with self._lock, self._connection:
                for column, key, value in changes:
                    if value is None:
                        self._connection.execute(
                            "DELETE FROM entries WHERE col = ? AND key = ?",
                            (int(column), bytes(key)),
                        )
                    else:
                        self._connection.execute(
                            "INSERT OR REPLACE INTO entries (col, key, value) VALUES (?, ?, ?)",
                            (int(column), bytes(key), bytes(value)),
                        )
        except sqlite3.Error as error:
            raise DatabaseError(str(error)) from error

    def close(self):
        with self._lock:
            self._connection.close()


def frontier_database_dir(db_config_dir, db_path):
    """The frontier database directory inside a node's database directory."""
    return Path(db_config_dir) / "frontier" / db_path


def open_database(source):
    """Open the store a source describes.

    An auto source uses an existing rocksdb-path database and otherwise opens
    or creates one at the paritydb path.
    """
    if source.kind in (SourceKind.ROCKSDB, SourceKind.PARITYDB):
        return _Store(source.path, create=True)
    if source.kind is SourceKind.AUTO:
        try:
            return _Store(source.rocksdb_path, create=False)
        except DatabaseError:
            return _Store(source.paritydb_path, create=True)
    raise DatabaseError("Missing feature flags `parity-db`")


def _decode(raw, decode):
    reader = _Reader(raw)
    return decode(reader)


class MetaDb:
    """Sync tips and the cached storage schema."""

    def __init__(self, store):
        self._store = store

    def current_syncing_tips(self):
        raw = self._store.get(_Column.META, CURRENT_SYNCING_TIPS)
        if raw is None:
            return []
        return _decode(raw, lambda reader: reader.sequence(_Reader.hash))

    def write_current_syncing_tips(self, tips):
        hashes = [parse_h256(tip) for tip in tips]
        self._store.commit([(_Column.META, CURRENT_SYNCING_TIPS, _encode_hashes(hashes))])

    def ethereum_schema(self):
        """The cached ``(schema, block hash)`` pairs, or None when never written."""
        raw = self._store.get(_Column.META, _SCHEMA_CACHE_KEY)
        if raw is None:
            return None
        return _decode(raw, lambda reader: reader.sequence(_decode_schema_entry))

    def write_ethereum_schema(self, new_cache):
        encoded = _encode_compact(len(new_cache)) + b"".join(
            bytes([int(EthereumStorageSchema(schema))]) + parse_h256(block_hash)
            for schema, block_hash in new_cache
        )
        self._store.commit([(_Column.META, _SCHEMA_CACHE_KEY, encoded)])


class MappingDb:
    """Mapping from Ethereum blocks and transactions to Substrate blocks."""

    def __init__(self, store):
        self._store = store
        self._write_lock = threading.Lock()

    def is_synced(self, block_hash):
        raw = self._store.get(_Column.SYNCED_MAPPING, parse_h256(block_hash))
        if raw is None:
            return False
        return _decode(raw, _Reader.boolean)

    def block_hash(self, ethereum_block_hash):
        """The Substrate block hash for an Ethereum block hash, or None."""
        raw = self._store.get(_Column.BLOCK_MAPPING, parse_h256(ethereum_block_hash))
        if raw is None:
            return None
        return _decode(raw, _Reader.hash)

    def transaction_metadata(self, ethereum_transaction_hash):
        raw = self._store.get(
            _Column.TRANSACTION_MAPPING, parse_h256(ethereum_transaction_hash)
        )
        if raw is None:
            return []
        return _decode(raw, lambda reader: reader.sequence(TransactionMetadata._decode))

    def write_none(self, block_hash):
        """Mark a block as synced without any Ethereum content."""
        key = parse_h256(block_hash)
        with self._write_lock:
            self._store.commit([(_Column.SYNCED_MAPPING, key, _ENCODED_TRUE)])

    def write_hashes(self, commitment):
        """Record a block's Ethereum hashes and mark the block as synced."""
        with self._write_lock:
            changes = [
                (
                    _Column.BLOCK_MAPPING,
                    commitment.ethereum_block_hash,
                    commitment.block_hash,
                )
            ]
            for index, transaction_hash in enumerate(commitment.ethereum_transaction_hashes):
                metadata = self.transaction_metadata(transaction_hash)
                metadata.append(
                    TransactionMetadata(
                        commitment.block_hash, commitment.ethereum_block_hash, index
                    )
                )
                changes.append(
                    (
                        _Column.TRANSACTION_MAPPING,
                        transaction_hash,
                        _encode_metadata_list(metadata),
                    )
                )
            changes.append((_Column.SYNCED_MAPPING, commitment.block_hash, _ENCODED_TRUE))
            self._store.commit(changes)


class Backend:
    """The frontier database with its meta and mapping views."""

    def __init__(self, source):
        self._store = open_database(source)
        self.meta = MetaDb(self._store)
        self.mapping = MappingDb(self._store)

    @classmethod
    def open(cls, database, db_config_dir):
        """Open the frontier database matching a node's database source."""
        if database.kind is SourceKind.ROCKSDB:
            source = DatabaseSource.rocksdb(frontier_database_dir(db_config_dir, "db"))
        elif database.kind is SourceKind.PARITYDB:
            source = DatabaseSource.paritydb(frontier_database_dir(db_config_dir, "paritydb"))
        elif database.kind is SourceKind.AUTO:
            source = DatabaseSource.auto(
                frontier_database_dir(db_config_dir, "db"),
                frontier_database_dir(db_config_dir, "paritydb"),
            )
        else:
            raise DatabaseError("Supported db sources: `rocksdb` | `paritydb` | `auto`")
        return cls(source)

    @property
    def path(self):
        """Directory of the opened database."""
        return self._store.path

    def close(self):
        self._store.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()