"""Validation and request handling helpers of the key-value service."""

from __future__ import annotations

from xline.command import Command, KeyRange
from xline.errors import RpcError
from xline.rpc import (
    DeleteRangeRequest,
    DeleteRangeResponse,
    KvResponse,
    PutRequest,
    PutResponse,
    RangeRequest,
    RangeResponse,
    RequestOp,
    RequestWithToken,
    ResponseOp,
    SortOrder,
    SortTarget,
    TxnRequest,
    TxnResponse,
)

DEFAULT_MAX_TXN_OPS = 128
"""Largest number of comparisons or operations allowed in one transaction."""

_DUPLICATE_KEY = "duplicate key given in txn request"


def _is_valid(enum_type: type, value: int) -> bool:
    try:
        enum_type(value)
    except ValueError:
        return False
    return True


def check_range_request(req: RangeRequest) -> None:
    """Raise :class:`RpcError` if ``req`` cannot be served."""
    if req.serializable:
        raise RpcError.unimplemented("serializable is unimplemented")
    if req.keys_only:
        raise RpcError.unimplemented("keys_only is unimplemented")
    if (
        req.min_mod_revision != 0
        or req.max_mod_revision != 0
        or req.min_create_revision != 0
        or req.max_create_revision != 0
    ):
        raise RpcError.unimplemented("min/max mod/create revision is unimplemented")
    if not req.key:
        raise RpcError.invalid_argument("key is not provided")
    if not _is_valid(SortOrder, req.sort_order) or not _is_valid(SortTarget, req.sort_target):
        raise RpcError.invalid_argument("invalid sort option")


def check_put_request(req: PutRequest) -> None:
    """Raise :class:`RpcError` if ``req`` cannot be served."""
    if req.lease != 0:
        raise RpcError.unimplemented("lease is unimplemented")
    if not req.key:
        raise RpcError.invalid_argument("key is not provided")
    if req.ignore_value and req.value:
        raise RpcError.invalid_argument("value is provided")
    if req.ignore_lease and req.lease != 0:
        raise RpcError.invalid_argument("lease is provided")


def check_delete_range_request(req: DeleteRangeRequest) -> None:
    """Raise :class:`RpcError` if ``req`` has no key."""
    if not req.key:
        raise RpcError.invalid_argument("key is not provided")


def check_txn_request(req: TxnRequest) -> None:
    """Raise :class:`RpcError` if ``req`` or any operation inside it is invalid."""
    op_count = max(len(req.compare), len(req.success), len(req.failure))
    if op_count > DEFAULT_MAX_TXN_OPS:
        raise RpcError.invalid_argument("too many operations in txn request")
    for cmp in req.compare:
        if not cmp.key:
            raise RpcError.invalid_argument("key is not provided")
    for op in (*req.success, *req.failure):
        request = op.request
        if request is None:
            raise RpcError.invalid_argument("key not found")
        if isinstance(request, RangeRequest):
            check_range_request(request)
        elif isinstance(request, PutRequest):
            check_put_request(request)
        elif isinstance(request, DeleteRangeRequest):
            check_delete_range_request(request)
        elif isinstance(request, TxnRequest):
            check_txn_request(request)
        else:
            raise RpcError.invalid_argument("unknown request in txn operation")
    check_intervals(req.success)
    check_intervals(req.failure)


def _deleted(key: bytes, dels: list[KeyRange]) -> bool:
    return any(rng.contains_key(key) for rng in dels)


def check_intervals(ops: list[RequestOp]) -> tuple[set[bytes], list[KeyRange]]:
    """Check that puts and deletes in ``ops`` do not overlap.

    Return the keys put and the ranges deleted, nested transactions included.
    """
    dels = [
        KeyRange(op.request.key, op.request.range_end)
        for op in ops
        if isinstance(op.request, DeleteRangeRequest)
    ]
    puts: set[bytes] = set()

    for op in ops:
        if not isinstance(op.request, TxnRequest):
            continue
        success_puts, success_dels = check_intervals(op.request.success)
        failure_puts, failure_dels = check_intervals(op.request.failure)

        for key in success_puts:
            if key in puts or _deleted(key, dels):
                raise RpcError.invalid_argument(_DUPLICATE_KEY)
            puts.add(key)

        for key in failure_puts:
            # A key already put is an overlap unless the success branch put it.
            if key in puts and key not in success_puts:
                raise RpcError.invalid_argument(_DUPLICATE_KEY)
            puts.add(key)
            if _deleted(key, dels):
                raise RpcError.invalid_argument(_DUPLICATE_KEY)

        dels.extend(success_dels)
        dels.extend(failure_dels)

    for op in ops:
        if not isinstance(op.request, PutRequest):
            continue
        key = op.request.key
        if key in puts or _deleted(key, dels):
            raise RpcError.invalid_argument(_DUPLICATE_KEY)
        puts.add(key)

    return puts, dels


def update_header_revision(response: KvResponse, revision: int) -> None:
    """Set ``revision`` in the header of ``response`` and of every nested response."""
    if not isinstance(response, (RangeResponse, PutResponse, DeleteRangeResponse, TxnResponse)):
        raise TypeError(f"unknown response type {type(response).__name__}")
    if response.header is not None:
        response.header.revision = revision
    if isinstance(response, TxnResponse):
        for op in response.responses:
            if op.response is not None:
                update_header_revision(op.response, revision)


def parse_response_op(op: ResponseOp) -> KvResponse:
    """Return the response held by ``op``."""
    if op.response is None:
        raise ValueError("Receive empty ResponseOp")
    return op.response


def command_from_request(propose_id: str, wrapper: RequestWithToken) -> Command:
    """Build the command proposing ``wrapper`` with the key ranges it touches."""
    request = wrapper.request
    if isinstance(request, (RangeRequest, DeleteRangeRequest)):
        keys = [KeyRange(request.key, request.range_end)]
    elif isinstance(request, PutRequest):
        keys = [KeyRange(request.key, b"")]
    elif isinstance(request, TxnRequest):
        keys = [KeyRange(cmp.key, cmp.range_end) for cmp in request.compare]
    else:
        raise TypeError("Other request should not be sent to this store")
    return Command(keys=keys, request=wrapper, id=propose_id)