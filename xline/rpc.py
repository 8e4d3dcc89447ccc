"""Request and response messages of the key-value, auth and lease services."""

from __future__ import annotations

import bisect
import enum
from dataclasses import dataclass, field
from typing import Any, Optional, Union


class SortOrder(enum.IntEnum):
    """Order in which a range result is sorted."""

    NONE = 0
    ASCEND = 1
    DESCEND = 2


class SortTarget(enum.IntEnum):
    """Field a range result is sorted by."""

    KEY = 0
    VERSION = 1
    CREATE = 2
    MOD = 3
    VALUE = 4


class CompareResult(enum.IntEnum):
    """Relation checked by a transaction comparison."""

    EQUAL = 0
    GREATER = 1
    LESS = 2
    NOT_EQUAL = 3


class CompareTarget(enum.IntEnum):
    """Key attribute checked by a transaction comparison."""

    VERSION = 0
    CREATE = 1
    MOD = 2
    VALUE = 3
    LEASE = 4


class RequestBackend(enum.Enum):
    """Store that serves a request."""

    KV = "kv"
    AUTH = "auth"


@dataclass
class ResponseHeader:
    """Header attached to every response."""

    cluster_id: int = 0
    member_id: int = 0
    revision: int = 0
    raft_term: int = 0


@dataclass
class KeyValue:
    """A stored key with its metadata."""

    key: bytes = b""
    create_revision: int = 0
    mod_revision: int = 0
    version: int = 0
    value: bytes = b""
    lease: int = 0


@dataclass
class PutRequest:
    """Store a value under a key."""

    key: bytes = b""
    value: bytes = b""
    lease: int = 0
    prev_kv: bool = False
    ignore_value: bool = False
    ignore_lease: bool = False


@dataclass
class PutResponse:
    """Result of a put."""

    header: Optional[ResponseHeader] = None
    prev_kv: Optional[KeyValue] = None


@dataclass
class RangeRequest:
    """Read the keys of a range."""

    key: bytes = b""
    range_end: bytes = b""
    limit: int = 0
    revision: int = 0
    sort_order: int = SortOrder.NONE
    sort_target: int = SortTarget.KEY
    serializable: bool = False
    keys_only: bool = False
    count_only: bool = False
    min_mod_revision: int = 0
    max_mod_revision: int = 0
    min_create_revision: int = 0
    max_create_revision: int = 0


@dataclass
class RangeResponse:
    """Result of a range read."""

    header: Optional[ResponseHeader] = None
    kvs: list[KeyValue] = field(default_factory=list)
    more: bool = False
    count: int = 0


@dataclass
class DeleteRangeRequest:
    """Delete the keys of a range."""

    key: bytes = b""
    range_end: bytes = b""
    prev_kv: bool = False


@dataclass
class DeleteRangeResponse:
    """Result of a range deletion."""

    header: Optional[ResponseHeader] = None
    deleted: int = 0
    prev_kvs: list[KeyValue] = field(default_factory=list)


@dataclass
class Compare:
    """Condition of a transaction.

    ``target_union`` holds the value compared against: a revision, version or
    lease as ``int``, or a value as ``bytes``.
    """

    result: int = CompareResult.EQUAL
    target: int = CompareTarget.VERSION
    key: bytes = b""
    range_end: bytes = b""
    target_union: Union[int, bytes, None] = None


KvRequest = Union[RangeRequest, PutRequest, DeleteRangeRequest, "TxnRequest"]
KvResponse = Union[RangeResponse, PutResponse, DeleteRangeResponse, "TxnResponse"]


@dataclass
class RequestOp:
    """One operation inside a transaction."""

    request: Optional[KvRequest] = None


@dataclass
class ResponseOp:
    """Result of one operation inside a transaction."""

    response: Optional[KvResponse] = None


@dataclass
class TxnRequest:
    """Conditional batch of operations."""

    compare: list[Compare] = field(default_factory=list)
    success: list[RequestOp] = field(default_factory=list)
    failure: list[RequestOp] = field(default_factory=list)


@dataclass
class TxnResponse:
    """Result of a transaction."""

    header: Optional[ResponseHeader] = None
    succeeded: bool = False
    responses: list[ResponseOp] = field(default_factory=list)


@dataclass
class CompactionRequest:
    """Compact the event history up to a revision."""

    revision: int = 0
    physical: bool = False


@dataclass
class CompactionResponse:
    """Result of a compaction."""

    header: Optional[ResponseHeader] = None


class AuthRequestKind(enum.Enum):
    """Operations of the auth service."""

    ENABLE = enum.auto()
    DISABLE = enum.auto()
    STATUS = enum.auto()
    ROLE_ADD = enum.auto()
    ROLE_DELETE = enum.auto()
    ROLE_GET = enum.auto()
    ROLE_GRANT_PERMISSION = enum.auto()
    ROLE_LIST = enum.auto()
    ROLE_REVOKE_PERMISSION = enum.auto()
    USER_ADD = enum.auto()
    USER_CHANGE_PASSWORD = enum.auto()
    USER_DELETE = enum.auto()
    USER_GET = enum.auto()
    USER_GRANT_ROLE = enum.auto()
    USER_LIST = enum.auto()
    USER_REVOKE_ROLE = enum.auto()
    AUTHENTICATE = enum.auto()


_AUTH_READ_KINDS = frozenset(
    {
        AuthRequestKind.STATUS,
        AuthRequestKind.ROLE_GET,
        AuthRequestKind.ROLE_LIST,
        AuthRequestKind.USER_GET,
        AuthRequestKind.USER_LIST,
    }
)


@dataclass
class AuthRequest:
    """Request to the auth service; ``params`` holds the operation's fields."""

    kind: AuthRequestKind
    params: dict[str, Any] = field(default_factory=dict)


@dataclass
class AuthResponse:
    """Response of the auth service; ``fields`` holds the operation's result."""

    kind: AuthRequestKind
    header: Optional[ResponseHeader] = None
    fields: dict[str, Any] = field(default_factory=dict)


@dataclass
class LeaseGrantRequest:
    """Create a lease."""

    ttl: int = 0
    id: int = 0


@dataclass
class LeaseGrantResponse:
    """Result of a lease grant."""

    header: Optional[ResponseHeader] = None
    id: int = 0
    ttl: int = 0
    error: str = ""


@dataclass
class LeaseRevokeRequest:
    """Revoke a lease."""

    id: int = 0


@dataclass
class LeaseRevokeResponse:
    """Result of a lease revocation."""

    header: Optional[ResponseHeader] = None


@dataclass
class LeaseKeepAliveRequest:
    """Refresh a lease."""

    id: int = 0


@dataclass
class LeaseKeepAliveResponse:
    """Result of a lease refresh."""

    header: Optional[ResponseHeader] = None
    id: int = 0
    ttl: int = 0


@dataclass
class User:
    """A user of the auth store; ``roles`` is kept sorted."""

    name: bytes = b""
    password: bytes = b""
    roles: list[str] = field(default_factory=list)

    def has_role(self, role: str) -> bool:
        """Return whether the user holds ``role``."""
        index = bisect.bisect_left(self.roles, role)
        return index < len(self.roles) and self.roles[index] == role


Request = Union[
    RangeRequest, PutRequest, DeleteRangeRequest, TxnRequest, CompactionRequest, AuthRequest
]
Response = Union[
    RangeResponse,
    PutResponse,
    DeleteRangeResponse,
    TxnResponse,
    CompactionResponse,
    AuthResponse,
]

_KV_REQUESTS = (RangeRequest, PutRequest, DeleteRangeRequest, TxnRequest, CompactionRequest)
_RESPONSES = (
    RangeResponse,
    PutResponse,
    DeleteRangeResponse,
    TxnResponse,
    CompactionResponse,
    AuthResponse,
)
_OP_REQUESTS = (RangeRequest, PutRequest, DeleteRangeRequest, TxnRequest)
_OP_RESPONSES = (RangeResponse, PutResponse, DeleteRangeResponse, TxnResponse)


@dataclass
class RequestWithToken:
    """A request together with the authentication token it was sent with."""

    request: Request
    token: Optional[str] = None

    @classmethod
    def with_token(cls, request: Request, token: str) -> "RequestWithToken":
        """Wrap ``request`` carrying ``token``."""
        return cls(request=request, token=token)


def request_backend(request: Request) -> RequestBackend:
    """Return the store that serves ``request``."""
    if isinstance(request, _KV_REQUESTS):
        return RequestBackend.KV
    if isinstance(request, AuthRequest):
        return RequestBackend.AUTH
    raise TypeError(f"unknown request type {type(request).__name__}")


def is_auth_read_request(request: Request) -> bool:
    """Return whether ``request`` only reads the auth store."""
    return isinstance(request, AuthRequest) and request.kind in _AUTH_READ_KINDS


def is_kv_request(request: Request) -> bool:
    """Return whether ``request`` is served by the key-value store."""
    return isinstance(request, _KV_REQUESTS)


def update_revision(response: Response, revision: int) -> None:
    """Set the revision in the header of ``response``, if it has one."""
    if not isinstance(response, _RESPONSES):
        raise TypeError(f"unknown response type {type(response).__name__}")
    if response.header is not None:
        response.header.revision = revision


def request_from_op(op: RequestOp) -> KvRequest:
    """Return the request held by a transaction operation."""
    if op.request is None:
        raise ValueError("request is not set")
    return op.request


def response_to_op(response: Response) -> ResponseOp:
    """Wrap a key-value response as a transaction operation result."""
    if not isinstance(response, _OP_RESPONSES):
        raise TypeError("wrong response type")
    return ResponseOp(response=response)