# frontier

Building blocks for an Ethereum-compatible layer on a Substrate-style chain:

- **RPC types** with the JSON encoding Ethereum clients expect: `Bytes`,
  `BlockNumber`, `Log`, `Transaction`, `Block`, `Header`, `Rich`, `Receipt`,
  `Work`, `FeeHistory`, `CallRequest`, `TransactionRequest`, account, sync and
  pub-sub results (`frontier.bytes`, `frontier.block_number`, `frontier.log`,
  `frontier.transaction`, `frontier.block`, `frontier.receipt`,
  `frontier.work`, `frontier.fee`, `frontier.requests`, `frontier.account`,
  `frontier.sync`, `frontier.pubsub`).
- **Log filtering** (`frontier.filter`) with `Filter`, `FilteredParams` and a
  2048-bit `Bloom`, supporting wildcards and topic alternatives such as
  `[A, [B, C]]`.
- **A JSON-RPC dispatcher** (`frontier.rpc_api.RpcDispatcher`) that routes
  `eth_*`, `net_*`, `web3_*` and `eth_subscribe`/`eth_unsubscribe` requests to
  a handler object you provide.
- **Block import checks** (`frontier.consensus`): `FrontierBlockImport` wraps
  another importer and rejects headers that do not carry exactly one Frontier
  digest item.
- **A mapping database** (`frontier.db`: `Backend`, `MetaDb`, `MappingDb`)
  recording which chain block holds which Ethereum block and transactions.
- **Mapping sync** (`frontier.mapping_sync`: `sync_blocks`,
  `MappingSyncWorker`) that walks the chain back from its leaves and fills the
  mapping database.
- **The `frontier-db` command** to create, read, update and delete entries in
  the mapping database.

## Installation

```
pip install .
```

With the test dependencies:

```
pip install ".[test]"
```

## Parsing RPC parameters

```python
from frontier.bytes import Bytes
from frontier.block_number import BlockNumber
from frontier.index import parse_index

data = Bytes.from_json("0x0123")
assert data.to_json() == "0x0123"

assert BlockNumber.from_json("0x45").to_min_block_num() == 69
assert BlockNumber.from_json("42").to_min_block_num() == 42
assert BlockNumber.from_json("latest").to_min_block_num() is None

assert parse_index("0xa") == 10
assert parse_index(42) == 42
```

Malformed input, such as `"0x123"` for `Bytes` (odd length) or a block number
that is neither decimal nor `0x`-prefixed hex, raises `ValueError`.

## Matching logs against a filter

```python
from frontier.filter import Filter, FilteredParams

flt = Filter.from_json({
    "address": "0x1000000000000000000000000000000000000000",
    "topics": [
        "0x1000000000000000000000000000000000000000000000000000000000000000",
        None,
    ],
})
params = FilteredParams(flt)

address_blooms = FilteredParams.addresses_bloom_filter(flt.address)
topic_blooms = FilteredParams.topics_bloom_filter(params.flat_topics)
# Test a block's logs bloom before looking at its individual logs:
# FilteredParams.address_in_bloom(bloom, address_blooms)
# FilteredParams.topics_in_bloom(bloom, topic_blooms)
```

`filter_block_range`, `filter_block_hash`, `filter_address` and
`filter_topics` then decide whether a particular `Log` matches.

## Dispatching JSON-RPC requests

`RpcDispatcher(handler)` looks up each method by its wire name, decodes the
parameters (positional list or named object), calls the handler method of the
same purpose (for example `block_number` for `eth_blockNumber`, plain or
async) and encodes the result. `await dispatcher.dispatch(request)` returns a
response object holding either `result` or an `error` with a JSON-RPC code;
`dispatcher.methods()` lists the methods the handler implements.

## The mapping database

`Backend.open(database, db_config_dir)` opens the database under
`<db_config_dir>/frontier/`, choosing the directory from the kind of
`DatabaseSource` given (`rocksdb`, `paritydb` or `auto`);
`frontier_database_dir` computes that path. Data is stored in an SQLite file
in that directory, with values in SCALE encoding.

```python
backend.meta.current_syncing_tips()          # [] when nothing is stored
backend.meta.ethereum_schema()               # None when never written
backend.mapping.block_hash(ethereum_hash)     # None when unmapped
backend.mapping.transaction_metadata(tx_hash) # list of TransactionMetadata
backend.mapping.write_hashes(MappingCommitment(...))
backend.close()
```

`Backend` is also a context manager. Errors are raised as `DatabaseError`.

## Keeping the mapping in sync

`sync_blocks(client, substrate_backend, frontier_backend, limit, sync_from,
strategy)` makes up to `limit` attempts and returns `True` as soon as one
block has been synced. With `SyncStrategy.PARACHAIN`, blocks above the
client's `best_number` are left for later. `MappingSyncWorker` is an
asynchronous iterator that runs such a pass on each import notification,
after each timeout, or straight away while there is more work; it ends when
the notification stream ends. The client and chain backend are duck-typed;
the module docstring of `frontier.mapping_sync` lists what they must offer.

## Command line

```
frontier-db --help
```

`frontier-db OPERATION COLUMN --key KEY --base-path DIR [--value FILE]
[--database {auto,paritydb,rocksdb}]`

- `OPERATION` is `create`, `read`, `update` or `delete`; `COLUMN` is `meta`,
  `block` or `transaction`.
- Meta keys are `CURRENT_SYNCING_TIPS` and `:ethereum_schema_cache`; block and
  transaction keys are 32-byte hex hashes.
- For `create` and `update`, the JSON value is read from `--value` or, when it
  is omitted, from standard input.
- Updates and deletes in the meta column show the existing and the new value
  and ask for `confirm` before writing.
- A `read` prints its result as JSON. Errors are printed to standard error and
  the exit status is 1.

## What the package does not do

- There is no RPC server: `RpcDispatcher` answers request objects passed to
  it, but listening on HTTP or WebSocket, and delivering subscription items,
  is left to the caller. The handler that implements the `eth_*` methods is
  also yours to supply.
- There is no chain client. Block import, mapping sync and the mapping
  commands work with objects you provide; `frontier-db` runs without one, so
  `create` and `update` on the `block` and `transaction` columns fail there
  with "A runtime client is needed to read transaction statuses".
  `MappingCommand` can do them when given a client.

## Running the tests

```
pytest
```