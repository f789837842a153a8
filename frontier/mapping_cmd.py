"""Queries against the block and transaction mapping columns.

Create and update read the Ethereum transactions of a Substrate block from
the runtime client, which must offer ``current_transaction_statuses(block_hash)``
returning statuses with a ``transaction_hash``, or None.
"""

from __future__ import annotations

from frontier.cli_values import (
    Column,
    CommandError,
    Operation,
    key_column_error,
    key_not_empty_error,
    key_value_error,
)
from frontier.db import MappingCommitment


class MappingCommand:
    """Runs one operation on the mapping columns."""

    def __init__(self, operation, client, backend):
        self.operation = operation
        self.client = client
        self.backend = backend

    def _transaction_hashes(self, block_hash):
        if self.client is None:
            raise CommandError("A runtime client is needed to read transaction statuses")
        try:
            statuses = self.client.current_transaction_statuses(block_hash)
        except Exception as error:
            raise CommandError(repr(error)) from error
        if statuses is None:
            return []
        return [status.transaction_hash for status in statuses]

    def _commit(self, ethereum_block_hash, substrate_block_hash):
        self.backend.mapping.write_hashes(
            MappingCommitment(
                block_hash=substrate_block_hash,
                ethereum_block_hash=ethereum_block_hash,
                ethereum_transaction_hashes=self._transaction_hashes(substrate_block_hash),
            )
        )

    def query(self, column, key, value):
        """Apply the operation for an Ethereum hash ``key``; a read returns the result."""
        mapping = self.backend.mapping
        operation = self.operation
        if operation is Operation.CREATE:
            if not isinstance(value, bytes):
                raise key_value_error(key, value)
            if mapping.block_hash(key) is not None:
                raise key_not_empty_error(key)
            self._commit(key, value)
            return None
        if operation is Operation.READ:
            if column is Column.BLOCK:
                return mapping.block_hash(key)
            if column is Column.TRANSACTION:
                return mapping.transaction_metadata(key)
            raise key_column_error(key, column)
        if operation is Operation.UPDATE:
            if not isinstance(value, bytes):
                raise key_value_error(key, value)
            if mapping.block_hash(key) is not None:
                self._commit(key, value)
            return None
        raise CommandError("Delete operation is not supported for non-static keys")