from types import SimpleNamespace

import pytest

from frontier.cli_values import Column, CommandError, Operation
from frontier.db import Backend, DatabaseSource, TransactionMetadata
from frontier.mapping_cmd import MappingCommand

ETH_BLOCK = bytes(32)
SUB_A = bytes([1]) * 32
SUB_B = bytes([2]) * 32
TX_1 = bytes(32)
TX_2 = bytes([0x22]) + bytes(31)


class FakeClient:
    def __init__(self, statuses):
        self._statuses = statuses

    def current_transaction_statuses(self, block_hash):
        hashes = self._statuses.get(block_hash)
        if hashes is None:
            return None
        return [SimpleNamespace(transaction_hash=item) for item in hashes]


@pytest.fixture
def backend(tmp_path):
    db = Backend(DatabaseSource.rocksdb(tmp_path / "db"))
    yield db
    db.close()


@pytest.fixture
def client():
    return FakeClient({SUB_A: [TX_1], SUB_B: [TX_1, TX_2]})


def test_create(backend, client):
    MappingCommand(Operation.CREATE, client, backend).query(Column.BLOCK, ETH_BLOCK, SUB_A)
    assert backend.mapping.block_hash(ETH_BLOCK) == SUB_A
    assert backend.mapping.transaction_metadata(TX_1) == [
        TransactionMetadata(SUB_A, ETH_BLOCK, 0)
    ]
    assert backend.mapping.is_synced(SUB_A)


def test_create_existing_fails(backend, client):
    command = MappingCommand(Operation.CREATE, client, backend)
    command.query(Column.BLOCK, ETH_BLOCK, SUB_A)
    with pytest.raises(CommandError, match="non-empty Key"):
        command.query(Column.BLOCK, ETH_BLOCK, SUB_B)
    assert backend.mapping.block_hash(ETH_BLOCK) == SUB_A


def test_create_without_statuses(backend):
    MappingCommand(Operation.CREATE, FakeClient({}), backend).query(
        Column.BLOCK, ETH_BLOCK, SUB_A
    )
    assert backend.mapping.block_hash(ETH_BLOCK) == SUB_A
    assert backend.mapping.transaction_metadata(TX_1) == []


def test_create_needs_a_client(backend):
    with pytest.raises(CommandError, match="runtime client"):
        MappingCommand(Operation.CREATE, None, backend).query(Column.BLOCK, ETH_BLOCK, SUB_A)
    assert backend.mapping.block_hash(ETH_BLOCK) is None


@pytest.mark.parametrize("operation", [Operation.CREATE, Operation.UPDATE])
def test_value_must_be_a_hash(backend, client, operation):
    with pytest.raises(CommandError, match="not compatible"):
        MappingCommand(operation, client, backend).query(Column.BLOCK, ETH_BLOCK, [SUB_A])


def test_update_absent_key_is_no_op(backend, client):
    MappingCommand(Operation.UPDATE, client, backend).query(Column.BLOCK, ETH_BLOCK, SUB_A)
    assert backend.mapping.block_hash(ETH_BLOCK) is None


def test_update_existing(backend, client):
    MappingCommand(Operation.CREATE, client, backend).query(Column.BLOCK, ETH_BLOCK, SUB_A)
    MappingCommand(Operation.UPDATE, client, backend).query(Column.BLOCK, ETH_BLOCK, SUB_B)
    assert backend.mapping.block_hash(ETH_BLOCK) == SUB_B
    assert backend.mapping.transaction_metadata(TX_2) == [
        TransactionMetadata(SUB_B, ETH_BLOCK, 1)
    ]


def test_read(backend, client):
    MappingCommand(Operation.CREATE, client, backend).query(Column.BLOCK, ETH_BLOCK, SUB_A)
    command = MappingCommand(Operation.READ, client, backend)
    assert command.query(Column.BLOCK, ETH_BLOCK, None) == SUB_A
    assert command.query(Column.TRANSACTION, TX_1, None) == [
        TransactionMetadata(SUB_A, ETH_BLOCK, 0)
    ]
    with pytest.raises(CommandError, match="Column"):
        command.query(Column.META, ETH_BLOCK, None)


def test_delete_not_supported(backend, client):
    with pytest.raises(CommandError, match="Delete operation is not supported"):
        MappingCommand(Operation.DELETE, client, backend).query(Column.BLOCK, ETH_BLOCK, None)