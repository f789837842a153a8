"""Background syncing of the Ethereum-to-Substrate block mapping.

Collaborators are duck-typed:

- a header has ``hash``, ``number``, ``parent_hash`` and ``digest``; frontier
  log items in the digest carry ``block_hash`` and ``transaction_hashes``;
- the substrate backend has ``leaves()`` and ``header(block_hash)``;
- the client has ``has_ethereum_api(block_hash)``, ``current_block(block_hash)``
  returning the Ethereum block (with a ``hash``) or None, and ``best_number``.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from datetime import timedelta
from enum import Enum

from frontier.db import DatabaseError, MappingCommitment

logger = logging.getLogger("mapping-sync")


class SyncError(Exception):
    """A block could not be synced."""


class SyncStrategy(Enum):
    NORMAL = "normal"
    PARACHAIN = "parachain"


def _frontier_logs(header):
    return [
        item
        for item in header.digest
        if hasattr(item, "block_hash") and hasattr(item, "transaction_hashes")
    ]


def sync_block(backend, header):
    """Record the Ethereum hashes carried by a block's digest, or mark it empty."""
    logs = _frontier_logs(header)
    if len(logs) > 1:
        raise SyncError("Multiple logs found")
    if not logs:
        backend.mapping.write_none(header.hash)
        return
    (log,) = logs
    backend.mapping.write_hashes(
        MappingCommitment(
            block_hash=header.hash,
            ethereum_block_hash=log.block_hash,
            ethereum_transaction_hashes=list(log.transaction_hashes),
        )
    )


def sync_genesis_block(client, backend, header):
    """Map the genesis block to the runtime's Ethereum genesis block, if any."""
    try:
        has_api = client.has_ethereum_api(header.hash)
    except Exception as error:
        raise SyncError(repr(error)) from error
    if not has_api:
        backend.mapping.write_none(header.hash)
        return
    try:
        block = client.current_block(header.hash)
    except Exception as error:
        raise SyncError(repr(error)) from error
    if block is None:
        raise SyncError("Ethereum genesis block not found")
    backend.mapping.write_hashes(
        MappingCommitment(
            block_hash=header.hash,
            ethereum_block_hash=block.hash,
            ethereum_transaction_hashes=[],
        )
    )


def fetch_header(substrate_backend, frontier_backend, checking_tip, sync_from):
    """The header of an unsynced tip at or above ``sync_from``, else None."""
    if frontier_backend.mapping.is_synced(checking_tip):
        return None
    try:
        header = substrate_backend.header(checking_tip)
    except Exception as error:
        raise SyncError("Header not found") from error
    if header is None:
        raise SyncError("Header not found")
    if header.number >= sync_from:
        return header
    return None


def sync_one_block(client, substrate_backend, frontier_backend, sync_from, strategy):
    """Sync the next block walking back from the tips; True if one was synced."""
    tips = frontier_backend.meta.current_syncing_tips()
    if not tips:
        try:
            leaves = list(substrate_backend.leaves())
        except Exception as error:
            raise SyncError(repr(error)) from error
        if not leaves:
            return False
        tips.extend(leaves)

    operating_header = None
    while tips:
        header = fetch_header(substrate_backend, frontier_backend, tips.pop(), sync_from)
        if header is not None:
            operating_header = header
            break

    if operating_header is None:
        frontier_backend.meta.write_current_syncing_tips(tips)
        return False

    if operating_header.number == 0:
        sync_genesis_block(client, frontier_backend, operating_header)
        frontier_backend.meta.write_current_syncing_tips(tips)
        return True

    if strategy is SyncStrategy.PARACHAIN and operating_header.number > client.best_number:
        return False
    sync_block(frontier_backend, operating_header)
    tips.append(operating_header.parent_hash)
    frontier_backend.meta.write_current_syncing_tips(tips)
    return True


def sync_blocks(client, substrate_backend, frontier_backend, limit, sync_from, strategy):
    """Try up to ``limit`` times; stops and returns True after the first synced block."""
    for _ in range(limit):
        if sync_one_block(client, substrate_backend, frontier_backend, sync_from, strategy):
            return True
    return False


async def _next_notification(iterator):
    try:
        await anext(iterator)
    except StopAsyncIteration:
        return False
    return True


class MappingSyncWorker:
    """Async iterator that syncs a batch on each import notification or timeout.

    It yields None after every sync attempt and stops when the notification
    stream ends.
    """

    def __init__(self, import_notifications, timeout, client, substrate_backend,
                 frontier_backend, retry_times, sync_from, strategy):
        self._notifications = aiter(import_notifications)
        self.timeout = (
            timeout.total_seconds() if isinstance(timeout, timedelta) else float(timeout)
        )
        self.client = client
        self.substrate_backend = substrate_backend
        self.frontier_backend = frontier_backend
        self.retry_times = retry_times
        self.sync_from = sync_from
        self.strategy = strategy
        self.have_next = True
        self._pending = None
        self._deadline = None
        self._ended = False

    def __aiter__(self):
        return self

    async def __anext__(self):
        if self._ended:
            raise StopAsyncIteration
        loop = asyncio.get_running_loop()
        if self._deadline is None:
            self._deadline = loop.time() + self.timeout
        while True:
            fire = await self._drain_notifications()
            if self._ended:
                raise StopAsyncIteration
            if loop.time() >= self._deadline or self.have_next:
                fire = True
            if fire:
                break
            await asyncio.wait({self._pending}, timeout=max(0.0, self._deadline - loop.time()))
        self._deadline = None
        try:
            self.have_next = sync_blocks(
                self.client,
                self.substrate_backend,
                self.frontier_backend,
                self.retry_times,
                self.sync_from,
                self.strategy,
            )
        except (SyncError, DatabaseError) as error:
            self.have_next = False
            logger.debug("Syncing failed with error %r, retrying.", error)
        return None

    async def _drain_notifications(self):
        fired = False
        while True:
            if self._pending is None:
                self._pending = asyncio.ensure_future(_next_notification(self._notifications))
                await asyncio.sleep(0)
            if not self._pending.done():
                return fired
            received = self._pending.result()
            self._pending = None
            if not received:
                self._ended = True
                return fired
            fired = True

    async def aclose(self):
        """Stop waiting for notifications."""
        self._ended = True
        if self._pending is not None:
            self._pending.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._pending
            self._pending = None