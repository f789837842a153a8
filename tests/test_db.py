import pytest

from frontier.db import (
    DATABASE_FILE_NAME,
    Backend,
    DatabaseError,
    DatabaseSource,
    EthereumStorageSchema,
    MappingCommitment,
    SourceKind,
    TransactionMetadata,
    frontier_database_dir,
)


def h(byte):
    return bytes([byte]) * 32


@pytest.fixture
def backend(tmp_path):
    db = Backend(DatabaseSource.rocksdb(tmp_path / "db"))
    yield db
    db.close()


def test_frontier_database_dir(tmp_path):
    assert frontier_database_dir(tmp_path, "db") == tmp_path / "frontier" / "db"


def test_syncing_tips_default_empty_and_round_trip(backend):
    assert backend.meta.current_syncing_tips() == []
    backend.meta.write_current_syncing_tips([bytes(32), h(7)])
    assert backend.meta.current_syncing_tips() == [bytes(32), h(7)]


def test_writing_empty_tips_clears_them(backend):
    backend.meta.write_current_syncing_tips([h(1)])
    backend.meta.write_current_syncing_tips([])
    assert backend.meta.current_syncing_tips() == []


def test_ethereum_schema_absent_then_round_trip(backend):
    assert backend.meta.ethereum_schema() is None
    backend.meta.write_ethereum_schema([(EthereumStorageSchema.V1, bytes(32))])
    assert backend.meta.ethereum_schema() == [(EthereumStorageSchema.V1, bytes(32))]


def test_ethereum_schema_overwrite_and_empty(backend):
    backend.meta.write_ethereum_schema([(EthereumStorageSchema.V2, bytes(32))])
    backend.meta.write_ethereum_schema([])
    assert backend.meta.ethereum_schema() == []


def test_write_none_marks_synced_only(backend):
    assert backend.mapping.is_synced(h(1)) is False
    backend.mapping.write_none(h(1))
    assert backend.mapping.is_synced(h(1)) is True
    assert backend.mapping.block_hash(h(1)) is None


def test_write_hashes_maps_block_and_transactions(backend):
    commitment = MappingCommitment(h(1), h(2), [h(3), h(4)])
    backend.mapping.write_hashes(commitment)
    assert backend.mapping.block_hash(h(2)) == h(1)
    assert backend.mapping.is_synced(h(1)) is True
    assert backend.mapping.transaction_metadata(h(3)) == [TransactionMetadata(h(1), h(2), 0)]
    assert backend.mapping.transaction_metadata(h(4)) == [TransactionMetadata(h(1), h(2), 1)]


def test_transaction_metadata_accumulates(backend):
    backend.mapping.write_hashes(MappingCommitment(h(1), h(2), [h(3)]))
    backend.mapping.write_hashes(MappingCommitment(h(5), h(2), [h(6), h(3)]))
    assert backend.mapping.block_hash(h(2)) == h(5)
    assert backend.mapping.transaction_metadata(h(3)) == [
        TransactionMetadata(h(1), h(2), 0),
        TransactionMetadata(h(5), h(2), 1),
    ]


def test_unknown_transaction_has_no_metadata(backend):
    assert backend.mapping.transaction_metadata(h(9)) == []


def test_data_persists_after_reopen(tmp_path):
    source = DatabaseSource.paritydb(tmp_path / "p")
    with Backend(source) as first:
        first.meta.write_current_syncing_tips([h(8)])
        first.mapping.write_hashes(MappingCommitment(h(1), h(2), []))
    with Backend(source) as second:
        assert second.meta.current_syncing_tips() == [h(8)]
        assert second.mapping.block_hash(h(2)) == h(1)


def test_open_places_rocksdb_inside_frontier_dir(tmp_path):
    with Backend.open(DatabaseSource.rocksdb(tmp_path / "elsewhere"), tmp_path) as db:
        assert db.path == tmp_path / "frontier" / "db"
    assert (tmp_path / "frontier" / "db" / DATABASE_FILE_NAME).is_file()


def test_open_places_paritydb_inside_frontier_dir(tmp_path):
    with Backend.open(DatabaseSource.paritydb(tmp_path / "x"), tmp_path) as db:
        assert db.path == tmp_path / "frontier" / "paritydb"


def test_open_rejects_custom_sources(tmp_path):
    with pytest.raises(DatabaseError, match="Supported db sources"):
        Backend.open(DatabaseSource.custom(), tmp_path)


def test_custom_source_cannot_be_opened(tmp_path):
    with pytest.raises(DatabaseError, match="Missing feature flags"):
        Backend(DatabaseSource.custom())


def test_auto_falls_back_to_paritydb(tmp_path):
    source = DatabaseSource.auto(tmp_path / "rocks", tmp_path / "parity")
    with Backend(source) as db:
        assert db.path == tmp_path / "parity"
    assert not (tmp_path / "rocks").exists()


def test_auto_prefers_existing_rocksdb(tmp_path):
    with Backend(DatabaseSource.rocksdb(tmp_path / "rocks")) as db:
        db.mapping.write_none(h(4))
    with Backend(DatabaseSource.auto(tmp_path / "rocks", tmp_path / "parity")) as db:
        assert db.path == tmp_path / "rocks"
        assert db.mapping.is_synced(h(4)) is True


def test_source_requires_paths():
    with pytest.raises(ValueError):
        DatabaseSource(SourceKind.ROCKSDB)
    with pytest.raises(ValueError):
        DatabaseSource(SourceKind.AUTO, rocksdb_path="a")


def test_invalid_hash_is_rejected(backend):
    with pytest.raises(ValueError):
        backend.mapping.write_none(b"short")


def test_transaction_index_must_fit_u32():
    with pytest.raises(ValueError):
        TransactionMetadata(h(1), h(2), -1)
    with pytest.raises(ValueError):
        TransactionMetadata(h(1), h(2), 2**32)


def test_closed_backend_raises(tmp_path):
    db = Backend(DatabaseSource.rocksdb(tmp_path / "db"))
    db.close()
    with pytest.raises(DatabaseError):
        db.meta.current_syncing_tips()