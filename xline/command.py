"""Commands proposed to the consensus layer and the key ranges they touch."""

from __future__ import annotations

import enum
import itertools
from dataclasses import dataclass, field
from typing import NamedTuple, Optional

from xline.rpc import (
    RequestBackend,
    RequestWithToken,
    Response,
    is_auth_read_request,
    is_kv_request,
    request_backend,
)

UNBOUNDED = b"\x00"
"""Range start and end that select every key."""

ONE_KEY = b""
"""Range end that selects a single key."""


class RangeType(enum.Enum):
    """Kind of key range described by a key and a range end."""

    ONE_KEY = enum.auto()
    ALL_KEYS = enum.auto()
    RANGE = enum.auto()

    @staticmethod
    def get_range_type(key: bytes, range_end: bytes) -> "RangeType":
        """Classify the range given by ``key`` and ``range_end``."""
        if key == ONE_KEY:
            return RangeType.ONE_KEY
        if key == UNBOUNDED and range_end == UNBOUNDED:
            return RangeType.ALL_KEYS
        return RangeType.RANGE


class _BoundKind(enum.Enum):
    INCLUDED = enum.auto()
    EXCLUDED = enum.auto()
    UNBOUNDED = enum.auto()


class _EndBound(NamedTuple):
    kind: _BoundKind
    key: bytes = b""


def _before_end(key: bytes, end: _EndBound) -> bool:
    """Return whether ``key`` lies on the inner side of ``end``."""
    if end.kind is _BoundKind.INCLUDED:
        return key <= end.key
    if end.kind is _BoundKind.EXCLUDED:
        return key < end.key
    return True


@dataclass(frozen=True)
class KeyRange:
    """A range of keys: a single key, a half-open interval or every key.

    An empty ``end`` selects just ``start``; ``b"\\x00"`` as ``start`` or
    ``end`` leaves that side of the range open.
    """

    start: bytes
    end: bytes = b""

    def __post_init__(self) -> None:
        object.__setattr__(self, "start", bytes(self.start))
        object.__setattr__(self, "end", bytes(self.end))

    def _start_bound(self) -> Optional[bytes]:
        """Return the inclusive start, or None when unbounded."""
        return None if self.start == UNBOUNDED else self.start

    def _end_bound(self) -> _EndBound:
        if self.end == UNBOUNDED:
            return _EndBound(_BoundKind.UNBOUNDED)
        if self.end == ONE_KEY:
            return _EndBound(_BoundKind.INCLUDED, self.start)
        return _EndBound(_BoundKind.EXCLUDED, self.end)

    def is_conflicted(self, other: "KeyRange") -> bool:
        """Return whether this range overlaps ``other``."""
        own_start = self._start_bound()
        other_start = other._start_bound()
        if own_start is None and other_start is None:
            return True
        if own_start is not None and other_start is not None:
            if own_start == other_start:
                return True
            self_first = own_start < other_start
        else:
            self_first = own_start is None

        if self_first:
            assert other_start is not None
            return _before_end(other_start, self._end_bound())
        assert own_start is not None
        return _before_end(own_start, other._end_bound())

    def is_conflict(self, other: "KeyRange") -> bool:
        """Same as :meth:`is_conflicted`."""
        return self.is_conflicted(other)

    def contains_key(self, key: bytes) -> bool:
        """Return whether ``key`` lies inside this range."""
        start = self._start_bound()
        if start is not None and key < start:
            return False
        return _before_end(key, self._end_bound())

    def __contains__(self, key: bytes) -> bool:
        return self.contains_key(key)

    def contains_range(self, other: "KeyRange") -> bool:
        """Return whether ``other`` lies entirely inside this range."""
        if not other.end:
            return self.contains_key(other.start)

        own_start = self._start_bound()
        other_start = other._start_bound()
        if own_start is None:
            starts_ok = True
        elif other_start is None:
            starts_ok = False
        else:
            starts_ok = own_start <= other_start

        own_end = self._end_bound()
        other_end = other._end_bound()
        if own_end.kind is _BoundKind.UNBOUNDED:
            ends_ok = True
        elif other_end.kind is _BoundKind.UNBOUNDED:
            ends_ok = False
        elif own_end.kind is _BoundKind.EXCLUDED and other_end.kind is _BoundKind.INCLUDED:
            ends_ok = own_end.key > other_end.key
        else:
            ends_ok = own_end.key >= other_end.key

        return starts_ok and ends_ok

    @staticmethod
    def get_prefix(key: bytes) -> bytes:
        """Return the range end that selects every key starting with ``key``."""
        for index in reversed(range(len(key))):
            if key[index] < 0xFF:
                return key[:index] + bytes([key[index] + 1])
        # No next prefix exists (e.g. b"\xff\xff"): select up to the end.
        return UNBOUNDED


@dataclass
class Command:
    """A request proposed to the consensus layer with the keys it touches."""

    keys: list[KeyRange]
    request: RequestWithToken
    id: str

    def is_conflict(self, other: "Command") -> bool:
        """Return whether this command must be ordered against ``other``."""
        if self.id == other.id:
            return True
        this_req = self.request.request
        other_req = other.request.request
        # Auth reads only conflict with auth writes.
        if (
            (is_auth_read_request(this_req) and is_auth_read_request(other_req))
            or (is_kv_request(this_req) and is_auth_read_request(other_req))
            or (is_auth_read_request(this_req) and is_kv_request(other_req))
        ):
            return False
        # An auth write invalidates every earlier token, so it conflicts with all.
        if (
            request_backend(this_req) is RequestBackend.AUTH
            or request_backend(other_req) is RequestBackend.AUTH
        ):
            return True
        return any(
            mine.is_conflicted(theirs)
            for mine, theirs in itertools.product(self.keys, other.keys)
        )

    def unpack(self) -> tuple[list[KeyRange], RequestWithToken, str]:
        """Return the keys, the request and the propose id."""
        return self.keys, self.request, self.id


@dataclass
class CommandResponse:
    """Result of executing a command."""

    response: Response

    def decode(self) -> Response:
        """Return the wrapped response."""
        return self.response


@dataclass
class SyncResponse:
    """Result of a command once it is synced: the revision it produced."""

    revision: int = field(default=0)