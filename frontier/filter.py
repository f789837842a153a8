"""Log filters, bloom matching and the filter pool types of the JSON-RPC API."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from itertools import product

from Crypto.Hash import keccak

from frontier.block_number import BlockNumber, BlockTag
from frontier.bytes import format_hash, parse_h160, parse_h256

BLOOM_SIZE = 256


def _keccak256(data):
    return keccak.new(digest_bits=256, data=bytes(data)).digest()


class Bloom:
    """A 2048-bit Ethereum log bloom."""

    __slots__ = ("_bits",)

    def __init__(self, data=None):
        if data is None:
            self._bits = bytearray(BLOOM_SIZE)
        else:
            raw = bytearray(data)
            if len(raw) != BLOOM_SIZE:
                raise ValueError(f"bloom must be {BLOOM_SIZE} bytes, got {len(raw)}")
            self._bits = raw

    @classmethod
    def from_input(cls, data):
        """A bloom holding only the given raw input."""
        bloom = cls()
        bloom.accrue(data)
        return bloom

    def accrue(self, data):
        """Add raw input to the bloom."""
        digest = _keccak256(data)
        for i in (0, 2, 4):
            bit = ((digest[i] << 8) | digest[i + 1]) & 2047
            self._bits[BLOOM_SIZE - 1 - bit // 8] |= 1 << (bit % 8)

    def contains_bloom(self, other):
        """True when every bit set in ``other`` is also set here."""
        return all((mine & theirs) == theirs for mine, theirs in zip(self._bits, other._bits))

    def __bytes__(self):
        return bytes(self._bits)

    def __eq__(self, other):
        if not isinstance(other, Bloom):
            return NotImplemented
        return self._bits == other._bits

    def __hash__(self):
        return hash(bytes(self._bits))

    def __repr__(self):
        return f"Bloom(0x{self._bits.hex()})"


def parse_variadic(value, parse_item):
    """Decode ``null``, a single item or a list of items.

    Returns None for null, the parsed item for a single value and a tuple of
    parsed items for a list. A single item is tried before a list.
    """
    if value is None:
        return None
    try:
        return parse_item(value)
    except (ValueError, TypeError) as single_error:
        if not isinstance(value, list):
            raise ValueError(f"Invalid variadic value type: {single_error}") from None
    try:
        return tuple(parse_item(item) for item in value)
    except (ValueError, TypeError) as multiple_error:
        raise ValueError(f"Invalid variadic value type: {multiple_error}") from None


def _optional_h256(value):
    return None if value is None else parse_h256(value)


def _parse_topic_item(value):
    return parse_variadic(value, _optional_h256)


def _normalize_address(address):
    if address is None:
        return None
    if isinstance(address, (bytes, bytearray, str)):
        return parse_h160(address)
    return tuple(parse_h160(item) for item in address)


def _normalize_topic_item(item):
    if item is None:
        return None
    if isinstance(item, (bytes, bytearray, str)):
        return parse_h256(item)
    return tuple(_optional_h256(topic) for topic in item)


def _normalize_topics(topics):
    if topics is None:
        return None
    if isinstance(topics, (bytes, bytearray, str)):
        return parse_h256(topics)
    return tuple(_normalize_topic_item(item) for item in topics)


def _normalize_block(value):
    if value is None or isinstance(value, BlockNumber):
        return value
    return BlockNumber(value)


_FILTER_KEYS = {"fromBlock", "toBlock", "blockHash", "address", "topics"}


@dataclass(frozen=True)
class Filter:
    """A log filter.

    ``address`` is None, one address or a tuple of addresses. ``topics`` is
    None, one topic, or a tuple whose items are None (wildcard), a topic, or a
    tuple of alternatives (each a topic or None).
    """

    from_block: BlockNumber | None = None
    to_block: BlockNumber | None = None
    block_hash: bytes | None = None
    address: bytes | tuple | None = None
    topics: bytes | tuple | None = None

    def __post_init__(self):
        object.__setattr__(self, "from_block", _normalize_block(self.from_block))
        object.__setattr__(self, "to_block", _normalize_block(self.to_block))
        if self.block_hash is not None:
            object.__setattr__(self, "block_hash", parse_h256(self.block_hash))
        object.__setattr__(self, "address", _normalize_address(self.address))
        object.__setattr__(self, "topics", _normalize_topics(self.topics))

    @classmethod
    def from_json(cls, value):
        """Decode a JSON filter object; unknown fields are rejected."""
        if not isinstance(value, dict):
            raise ValueError("filter must be an object")
        unknown = set(value) - _FILTER_KEYS
        if unknown:
            raise ValueError(f"unknown field `{sorted(unknown)[0]}`")

        def block(key):
            item = value.get(key)
            return None if item is None else BlockNumber.from_json(item)

        block_hash = value.get("blockHash")
        return cls(
            from_block=block("fromBlock"),
            to_block=block("toBlock"),
            block_hash=None if block_hash is None else parse_h256(block_hash),
            address=parse_variadic(value.get("address"), parse_h160),
            topics=parse_variadic(value.get("topics"), _parse_topic_item),
        )


def _is_simple(item):
    return item is None or isinstance(item, bytes)


def _flatten(topics):
    """Expand conditional topic positions, e.g. ``[A,[B,C]]`` to ``[[A,B],[A,C]]``."""
    if topics is None:
        return []
    if isinstance(topics, bytes):
        return [topics]
    if all(_is_simple(item) for item in topics):
        return [tuple(topics)]
    choices = []
    for item in topics:
        if item is None:
            choices.append((None,))
        elif isinstance(item, bytes):
            choices.append((item,))
        else:
            choices.append(tuple(item))
    return [tuple(combination) for combination in product(*choices)]


def _bloom_or_wildcard(value):
    return None if value is None else Bloom.from_input(value)


class FilteredParams:
    """Matching helper for a filter; supports conditional topics and wildcards."""

    def __init__(self, filter=None):
        self.filter = filter
        self.flat_topics = _flatten(filter.topics) if filter is not None else []

    @staticmethod
    def addresses_bloom_filter(address):
        """Bloom inputs for an address selection; None entries are wildcards."""
        if address is None:
            return []
        if isinstance(address, bytes):
            return [Bloom.from_input(address)]
        if not address:
            return [None]
        return [Bloom.from_input(item) for item in address]

    @staticmethod
    def topics_bloom_filter(topics):
        """One list of bloom inputs per flattened topic combination."""
        output = []
        for flat in topics or ():
            if flat is None:
                output.append([None])
            elif isinstance(flat, bytes):
                output.append([Bloom.from_input(flat)])
            elif not flat:
                output.append([None])
            else:
                output.append([_bloom_or_wildcard(topic) for topic in flat])
        return output

    @staticmethod
    def topics_in_bloom(bloom, topic_bloom_filters):
        """True if any topic combination is fully contained in the bloom."""
        if not topic_bloom_filters:
            return True
        for subset in topic_bloom_filters:
            matches = False
            for element in subset:
                matches = element is None or bloom.contains_bloom(element)
                if not matches:
                    break
            if matches:
                return True
        return False

    @staticmethod
    def address_in_bloom(bloom, address_bloom_filter):
        """True if any of the addresses is contained in the bloom."""
        if not address_bloom_filter:
            return True
        return any(
            element is None or bloom.contains_bloom(element)
            for element in address_bloom_filter
        )

    def replace(self, log, topic):
        """Fill wildcard positions with the log's topics; None if nothing results."""
        if isinstance(topic, bytes):
            out = [topic]
        elif isinstance(topic, (tuple, list)):
            out = [
                value if value is not None else log.topics[position]
                for position, value in enumerate(topic)
            ]
        else:
            out = []
        return out or None

    def _require_filter(self):
        if self.filter is None:
            raise ValueError("no filter to match against")
        return self.filter

    def filter_block_range(self, block_number):
        filter_ = self._require_filter()
        matches = True
        if filter_.from_block is not None:
            start = filter_.from_block.number
            if start is not None and start > block_number:
                matches = False
        if filter_.to_block is not None:
            end = filter_.to_block.number
            if end is not None:
                if end < block_number:
                    matches = False
            elif filter_.to_block.tag is BlockTag.EARLIEST:
                matches = False
        return matches

    def filter_block_hash(self, block_hash):
        filter_ = self._require_filter()
        if filter_.block_hash is not None and filter_.block_hash != bytes(block_hash):
            return False
        return True

    def filter_address(self, log):
        address = self._require_filter().address
        if address is None:
            return True
        if isinstance(address, bytes):
            return log.address == address
        return log.address in address

    def filter_topics(self, log):
        matches = True
        for topic in self.flat_topics:
            if isinstance(topic, bytes):
                if log.topics[:1] != (topic,):
                    matches = False
            elif isinstance(topic, tuple):
                trimmed = list(topic)
                while trimmed and trimmed[-1] is None:
                    trimmed.pop()
                # Logs with fewer topics than the filter cannot match.
                if len(trimmed) > len(log.topics):
                    matches = False
                    break
                replaced = self.replace(log, tuple(trimmed))
                if replaced is not None:
                    matches = False
                    if tuple(log.topics[: len(replaced)]) == tuple(replaced):
                        matches = True
                        break
            else:
                matches = True
        return matches


@dataclass(frozen=True)
class FilterChanges:
    """Result of polling a filter: new logs, new hashes, or nothing."""

    logs: tuple | None = None
    hashes: tuple | None = None

    def __post_init__(self):
        if self.logs is not None and self.hashes is not None:
            raise ValueError("filter changes hold either logs or hashes, not both")
        if self.logs is not None:
            object.__setattr__(self, "logs", tuple(self.logs))
        if self.hashes is not None:
            object.__setattr__(self, "hashes", tuple(parse_h256(h) for h in self.hashes))

    @property
    def is_empty(self):
        return self.logs is None and self.hashes is None

    def to_json(self):
        if self.logs is not None:
            return [log.to_json() for log in self.logs]
        if self.hashes is not None:
            return [format_hash(h) for h in self.hashes]
        return []


class FilterKind(Enum):
    """What an installed filter watches."""

    BLOCK = "block"
    PENDING_TRANSACTION = "pending_transaction"
    LOG = "log"


@dataclass
class FilterPoolItem:
    """An installed filter with its polling state."""

    last_poll: BlockNumber
    filter_type: FilterKind
    at_block: int
    filter: Filter | None = None

    def __post_init__(self):
        if self.filter_type is FilterKind.LOG and self.filter is None:
            raise ValueError("a log filter needs a Filter")
        if self.filter_type is not FilterKind.LOG and self.filter is not None:
            raise ValueError("only log filters carry a Filter")