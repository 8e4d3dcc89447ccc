# xline

Building blocks of a distributed, etcd-compatible key-value store: the
request and response messages, key ranges and the conflict rules between
proposed commands, validation of key-value requests, request builders, a
response-header generator, a lease service and small lock helpers. The
package has no dependencies outside the standard library.

## Modules

- `xline.rpc` — dataclasses for the messages: `PutRequest`/`PutResponse`,
  `RangeRequest`/`RangeResponse`, `DeleteRangeRequest`/`DeleteRangeResponse`,
  `TxnRequest`/`TxnResponse` with `Compare`, `RequestOp` and `ResponseOp`,
  `CompactionRequest`/`CompactionResponse`, `AuthRequest`/`AuthResponse`
  (the operation is an `AuthRequestKind`), the lease messages, `KeyValue`,
  `ResponseHeader` and `User` (with `has_role`). The enums `SortOrder`,
  `SortTarget`, `CompareResult`, `CompareTarget` and `RequestBackend`.
  `RequestWithToken` pairs a request with an optional token
  (`RequestWithToken.with_token(request, token)`). Helpers:
  `request_backend`, `is_kv_request`, `is_auth_read_request`,
  `update_revision`, `request_from_op` and `response_to_op`.
- `xline.command` — `KeyRange(start, end)`: an empty `end` selects one key,
  `b"\x00"` leaves a side open. It offers `is_conflicted`, `contains_key`
  (also `key in key_range`), `contains_range` and `KeyRange.get_prefix(key)`.
  `RangeType.get_range_type(key, range_end)` classifies a range. `Command`
  holds the key ranges, a `RequestWithToken` and a propose id; its
  `is_conflict` decides whether two proposals must be ordered: auth reads
  conflict only with auth writes, auth writes conflict with everything, and
  key-value requests conflict when their key ranges overlap.
  `CommandResponse` and `SyncResponse` carry results.
- `xline.kv_server` — `check_range_request`, `check_put_request`,
  `check_delete_range_request` and `check_txn_request` raise `RpcError` for
  requests that cannot be served; `check_intervals` finds puts and deletes
  that touch the same key inside a txn. Also `update_header_revision`
  (recursing into txn responses), `parse_response_op` and
  `command_from_request`, which builds the `Command` for a request.
- `xline.kv_types` — fluent builders `PutRequestBuilder`,
  `RangeRequestBuilder` and `DeleteRangeRequestBuilder`; keys may be given as
  `bytes` or `str`, and `build()` returns the request.
- `xline.header_gen` — `HeaderGenerator(cluster_id, member_id)` with
  `gen_header`, `gen_header_without_revision` (revision `-1`), `set_term`,
  `set_revision` and `revision`.
- `xline.lease_server` — `LeaseServer`, whose methods are coroutines.
- `xline.lockutils` — `Mutex` and `RwLock` for threads, `AsyncMutex` and
  `AsyncRwLock` for asyncio. `map_lock`, `map_read` and `map_write` call a
  function with a `Guard` while the lock is held and return its result; a
  read guard cannot change `guard.value`, and a guard cannot be used after
  the call returns.
- `xline.errors` — `RpcError` with a `StatusCode`, and the client errors
  `ClientError`, `EtcdError` and `ProposeError`.

## Install

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Examples

```python
from xline.command import KeyRange
from xline.kv_types import RangeRequestBuilder

req = RangeRequestBuilder(b"foo").with_prefix().with_limit(10).build()
print(req.range_end)  # b"fop"

a = KeyRange(b"a", b"c")
b = KeyRange(b"b", b"")
print(a.is_conflicted(b))  # True
```

Validating a txn before it is proposed:

```python
from xline.kv_server import check_txn_request
from xline.rpc import PutRequest, RequestOp, TxnRequest

txn = TxnRequest(
    success=[
        RequestOp(PutRequest(key=b"k", value=b"1")),
        RequestOp(PutRequest(key=b"k", value=b"2")),
    ]
)
check_txn_request(txn)  # raises RpcError: duplicate key given in txn request
```

Running a function under a lock:

```python
from xline.lockutils import Mutex

counter = Mutex(1)

def set_three(guard):
    guard.value = 3

counter.map_lock(set_three)
print(counter.map_lock(lambda guard: guard.value))  # 3
```

## What this package does not do

- It does not store keys: there is no key-value store or auth store, so no
  request is executed and no revision is produced by the package itself.
- It has no consensus layer and no client that sends requests; `Command`
  only describes a proposal and its conflicts.
- It does not listen on the network and has no command-line program.
- `LeaseServer` keeps no leases: `lease_grant` and `lease_revoke` return empty
  responses, `lease_keep_alive` answers each request with its id and a ttl
  of 1, and `lease_time_to_live` and `lease_leases` raise `RpcError` with
  `StatusCode.UNIMPLEMENTED`.
- `check_range_request` rejects serializable, keys-only and min/max
  mod/create revision reads, and `check_put_request` rejects leases, as
  unimplemented.