"""Node synchronisation and peer information returned by the JSON-RPC API."""

from __future__ import annotations

from dataclasses import dataclass, field

from frontier.bytes import format_hash

U32_MAX = 2**32 - 1


def _optional_quantity(value):
    return None if value is None else hex(value)


@dataclass
class SyncInfo:
    """Progress of a running sync."""

    starting_block: int = 0
    current_block: int = 0
    highest_block: int = 0
    warp_chunks_amount: int | None = None
    warp_chunks_processed: int | None = None

    def to_json(self):
        return {
            "startingBlock": hex(self.starting_block),
            "currentBlock": hex(self.current_block),
            "highestBlock": hex(self.highest_block),
            "warpChunksAmount": _optional_quantity(self.warp_chunks_amount),
            "warpChunksProcessed": _optional_quantity(self.warp_chunks_processed),
        }


@dataclass
class PeerNetworkInfo:
    """Endpoint addresses of a peer connection."""

    remote_address: str = ""
    local_address: str = ""

    def to_json(self):
        return {"remoteAddress": self.remote_address, "localAddress": self.local_address}


@dataclass
class EthProtocolInfo:
    """Ethereum protocol state negotiated with a peer."""

    version: int = 0
    difficulty: int | None = None
    head: str = ""

    def to_json(self):
        return {
            "version": self.version,
            "difficulty": _optional_quantity(self.difficulty),
            "head": self.head,
        }


@dataclass
class PipProtocolInfo:
    """PIP protocol state negotiated with a peer."""

    version: int = 0
    difficulty: int = 0
    head: str = ""

    def to_json(self):
        return {"version": self.version, "difficulty": hex(self.difficulty), "head": self.head}


@dataclass
class PeerProtocolsInfo:
    """Protocols spoken with a peer."""

    eth: EthProtocolInfo | None = None
    pip: PipProtocolInfo | None = None

    def to_json(self):
        return {
            "eth": None if self.eth is None else self.eth.to_json(),
            "pip": None if self.pip is None else self.pip.to_json(),
        }


@dataclass
class PeerInfo:
    """Connection information of one peer."""

    id: str | None = None
    name: str = ""
    caps: list = field(default_factory=list)
    network: PeerNetworkInfo = field(default_factory=PeerNetworkInfo)
    protocols: PeerProtocolsInfo = field(default_factory=PeerProtocolsInfo)

    def to_json(self):
        return {
            "id": self.id,
            "name": self.name,
            "caps": list(self.caps),
            "network": self.network.to_json(),
            "protocols": self.protocols.to_json(),
        }


@dataclass
class Peers:
    """Peer counts and details."""

    active: int = 0
    connected: int = 0
    max: int = 0
    peers: list = field(default_factory=list)

    def to_json(self):
        return {
            "active": self.active,
            "connected": self.connected,
            "max": self.max,
            "peers": [peer.to_json() for peer in self.peers],
        }


@dataclass
class TransactionStats:
    """Propagation statistics of a pending transaction.

    ``propagated_to`` maps 64-byte peer ids to the number of times the
    transaction was sent to them.
    """

    first_seen: int = 0
    propagated_to: dict = field(default_factory=dict)

    def __post_init__(self):
        normalized = {}
        for peer, count in self.propagated_to.items():
            peer_id = bytes(peer)
            if len(peer_id) != 64:
                raise ValueError("peer id must be 64 bytes")
            normalized[peer_id] = count
        self.propagated_to = normalized

    def to_json(self):
        return {
            "firstSeen": self.first_seen,
            "propagatedTo": {
                format_hash(peer): self.propagated_to[peer]
                for peer in sorted(self.propagated_to)
            },
        }


@dataclass
class ChainStatus:
    """The gap in the chain, as ``(first, last)``, if there is one."""

    block_gap: tuple | None = None

    def to_json(self):
        if self.block_gap is None:
            return {"blockGap": None}
        first, last = self.block_gap
        return {"blockGap": [hex(first), hex(last)]}


def sync_status_to_json(status):
    """Encode a sync status: ``False`` when not syncing (None), else the sync info."""
    if status is None:
        return False
    if isinstance(status, SyncInfo):
        return status.to_json()
    raise TypeError("sync status must be a SyncInfo or None")


def peer_count_to_json(count):
    """Encode a peer count given either as a 32-bit number or as text."""
    if isinstance(count, bool):
        raise TypeError("peer count must be an int or a str")
    if isinstance(count, int):
        if not 0 <= count <= U32_MAX:
            raise ValueError(f"peer count out of range: {count}")
        return count
    if isinstance(count, str):
        return count
    raise TypeError("peer count must be an int or a str")