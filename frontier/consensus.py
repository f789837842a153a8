"""Block import that insists on exactly one Ethereum block log per header."""

from __future__ import annotations

from contextlib import contextmanager

FRONTIER_ENGINE_ID = b"fron"


class ConsensusError(Exception):
    """A block was rejected during import."""


class MultipleRuntimeLogs(ConsensusError):
    def __init__(self, message="Multiple runtime Ethereum blocks, rejecting!"):
        super().__init__(message)


class NoRuntimeLog(ConsensusError):
    def __init__(self, message="Runtime Ethereum block not found, rejecting!"):
        super().__init__(message)


class RuntimeApiCallFailed(ConsensusError):
    def __init__(self, message="Cannot access the runtime at genesis, rejecting!"):
        super().__init__(message)


def find_log(logs):
    """Return the payload of the single Frontier digest item.

    ``logs`` is an iterable of ``(engine_id, payload)`` digest items; items from
    other engines are ignored.
    """
    found = [payload for engine_id, payload in logs if engine_id == FRONTIER_ENGINE_ID]
    if not found:
        raise NoRuntimeLog()
    if len(found) > 1:
        raise MultipleRuntimeLogs()
    return found[0]


def ensure_log(logs):
    """Raise unless the digest holds exactly one Frontier item."""
    find_log(logs)


@contextmanager
def _as_consensus_error():
    try:
        yield
    except ConsensusError:
        raise
    except Exception as exc:
        raise ConsensusError(str(exc)) from exc


class FrontierBlockImport:
    """Wraps another block importer and validates the Frontier log first."""

    def __init__(self, inner, client, backend):
        self.inner = inner
        self.client = client
        self.backend = backend

    async def check_block(self, block):
        with _as_consensus_error():
            return await self.inner.check_block(block)

    async def import_block(self, block, new_cache):
        # Mapping sync is left to a separate worker; only the log count is checked.
        ensure_log(block.header.digest)
        with _as_consensus_error():
            return await self.inner.import_block(block, new_cache)