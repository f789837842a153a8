"""Fee history results and the cache they are built from."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field


@dataclass
class FeeHistory:
    """Response of the fee history call.

    ``base_fee_per_gas`` includes the block after the newest one in the range.
    """

    oldest_block: int
    base_fee_per_gas: list = field(default_factory=list)
    gas_used_ratio: list = field(default_factory=list)
    reward: list | None = None

    def to_json(self):
        return {
            "oldestBlock": hex(self.oldest_block),
            "baseFeePerGas": [hex(fee) for fee in self.base_fee_per_gas],
            "gasUsedRatio": [float(ratio) for ratio in self.gas_used_ratio],
            "reward": None
            if self.reward is None
            else [[hex(value) for value in block] for block in self.reward],
        }


@dataclass
class FeeHistoryCacheItem:
    """Fee data recorded for one block."""

    base_fee: int
    gas_used_ratio: float
    rewards: list = field(default_factory=list)


class FeeHistoryCache:
    """Thread-safe map from block number to fee data, holding at most ``limit`` blocks.

    When full, the lowest block numbers are dropped first.
    """

    def __init__(self, limit):
        if limit < 0:
            raise ValueError("fee history cache limit must not be negative")
        self.limit = limit
        self._items = {}
        self._lock = threading.Lock()

    def insert(self, block_number, item):
        with self._lock:
            self._items[block_number] = item
            while len(self._items) > self.limit:
                del self._items[min(self._items)]

    def get(self, block_number):
        """The fee data of a block, or None when it is not cached."""
        with self._lock:
            return self._items.get(block_number)

    def block_numbers(self):
        """Cached block numbers in ascending order."""
        with self._lock:
            return sorted(self._items)

    def __len__(self):
        with self._lock:
            return len(self._items)

    def __contains__(self, block_number):
        with self._lock:
            return block_number in self._items