"""Queries against the static keys of the meta column."""

from __future__ import annotations

from frontier.cli_values import (
    MetaKey,
    Operation,
    confirmation_prompt,
    key_not_empty_error,
    key_value_error,
)


def _schema_entries(schema_map):
    return [(schema, block_hash) for block_hash, schema in schema_map.items()]


class MetaCommand:
    """Runs one operation on the meta column.

    ``confirm(operation, key, existing, new)`` is asked before overwriting or
    deleting; it raises to cancel. It defaults to an interactive prompt.
    """

    def __init__(self, operation, backend, confirm=None):
        self.operation = operation
        self.backend = backend
        self.confirm = confirmation_prompt if confirm is None else confirm

    def query(self, key, value):
        """Apply the operation; a read returns the stored value."""
        meta = self.backend.meta
        operation = self.operation
        tips = key is MetaKey.TIPS
        if operation is Operation.CREATE:
            if tips and isinstance(value, list):
                if meta.current_syncing_tips():
                    raise key_not_empty_error(key)
                meta.write_current_syncing_tips(value)
                return None
            if key is MetaKey.SCHEMA and isinstance(value, dict):
                if meta.ethereum_schema() is not None:
                    raise key_not_empty_error(key)
                meta.write_ethereum_schema(_schema_entries(value))
                return None
            raise key_value_error(key, value)
        if operation is Operation.READ:
            return meta.current_syncing_tips() if tips else meta.ethereum_schema()
        if operation is Operation.UPDATE:
            if tips and isinstance(value, list):
                self.confirm(operation, key, meta.current_syncing_tips(), value)
                meta.write_current_syncing_tips(value)
                return None
            if key is MetaKey.SCHEMA and isinstance(value, dict):
                new_value = _schema_entries(value)
                self.confirm(operation, key, meta.ethereum_schema(), new_value)
                meta.write_ethereum_schema(new_value)
                return None
            raise key_value_error(key, value)
        if tips:
            self.confirm(operation, key, meta.current_syncing_tips(), [])
            meta.write_current_syncing_tips([])
        else:
            self.confirm(operation, key, meta.ethereum_schema(), [])
            meta.write_ethereum_schema([])
        return None