"""Subscription kinds, parameters and results of the publish-subscribe API."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from frontier.bytes import format_hash, parse_h256
from frontier.filter import Filter


class SubscriptionKind(Enum):
    """What a subscription delivers."""

    NEW_HEADS = "newHeads"
    LOGS = "logs"
    NEW_PENDING_TRANSACTIONS = "newPendingTransactions"
    SYNCING = "syncing"


@dataclass
class SyncStatusMetadata:
    """Detailed sync status sent to syncing subscribers."""

    syncing: bool
    starting_block: int
    current_block: int
    highest_block: int | None = None

    def to_json(self):
        encoded = {
            "syncing": self.syncing,
            "startingBlock": self.starting_block,
            "currentBlock": self.current_block,
        }
        if self.highest_block is not None:
            encoded["highestBlock"] = self.highest_block
        return encoded


def parse_kind(value):
    """Decode a subscription kind name."""
    try:
        return SubscriptionKind(value)
    except ValueError:
        raise ValueError(f"unknown subscription kind: {value!r}") from None


def parse_params(value):
    """Decode subscription parameters: None for none, otherwise a log Filter."""
    if value is None:
        return None
    try:
        return Filter.from_json(value)
    except (ValueError, TypeError) as error:
        raise ValueError(f"Invalid Pub-Sub parameters: {error}") from None


def result_to_json(result):
    """Encode a subscription item.

    Items are a rich header or a log (anything with ``to_json``), a 32-byte
    transaction hash, a plain sync flag or a SyncStatusMetadata.
    """
    if isinstance(result, bool):
        return result
    if hasattr(result, "to_json"):
        return result.to_json()
    if isinstance(result, (bytes, bytearray)):
        return format_hash(parse_h256(result))
    raise TypeError(f"cannot encode subscription result of type {type(result).__name__}")