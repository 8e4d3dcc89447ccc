"""Builders for the key-value requests sent by the client."""

from __future__ import annotations

import dataclasses
from typing import Union

from xline.command import UNBOUNDED, KeyRange
from xline.rpc import (
    DeleteRangeRequest,
    PutRequest,
    RangeRequest,
    SortOrder,
    SortTarget,
)

KeyLike = Union[bytes, bytearray, memoryview, str]


def _to_bytes(data: KeyLike) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


def _prefix_range(key: bytes) -> tuple[bytes, bytes]:
    """Return the key and range end that select every key starting with ``key``."""
    if not key:
        return UNBOUNDED, UNBOUNDED
    return key, KeyRange.get_prefix(key)


def _from_key_range(key: bytes) -> tuple[bytes, bytes]:
    """Return the key and range end that select every key from ``key`` onwards."""
    return (key or UNBOUNDED), UNBOUNDED


class PutRequestBuilder:
    """Builds a :class:`PutRequest`; every ``with_*`` method returns the builder."""

    def __init__(self, key: KeyLike, value: KeyLike) -> None:
        self._request = PutRequest(key=_to_bytes(key), value=_to_bytes(value))

    def with_lease(self, lease: int) -> "PutRequestBuilder":
        """Attach the key to ``lease``."""
        self._request.lease = lease
        return self

    def with_prev_kv(self, prev_kv: bool) -> "PutRequestBuilder":
        """Ask for the previous key-value pair in the response."""
        self._request.prev_kv = prev_kv
        return self

    def with_ignore_value(self, ignore_value: bool) -> "PutRequestBuilder":
        """Keep the current value and update only the other fields."""
        self._request.ignore_value = ignore_value
        return self

    def with_ignore_lease(self, ignore_lease: bool) -> "PutRequestBuilder":
        """Keep the current lease of the key."""
        self._request.ignore_lease = ignore_lease
        return self

    def build(self) -> PutRequest:
        """Return the request built so far."""
        return dataclasses.replace(self._request)


class RangeRequestBuilder:
    """Builds a :class:`RangeRequest`; every ``with_*`` method returns the builder."""

    def __init__(self, key: KeyLike) -> None:
        self._request = RangeRequest(key=_to_bytes(key))

    def with_prefix(self) -> "RangeRequestBuilder":
        """Select every key that starts with the key; an empty key selects all keys."""
        self._request.key, self._request.range_end = _prefix_range(self._request.key)
        return self

    def with_from_key(self) -> "RangeRequestBuilder":
        """Select every key greater than or equal to the key."""
        self._request.key, self._request.range_end = _from_key_range(self._request.key)
        return self

    def with_range_end(self, range_end: KeyLike) -> "RangeRequestBuilder":
        """Select keys up to ``range_end``, exclusive."""
        self._request.range_end = _to_bytes(range_end)
        return self

    def with_limit(self, limit: int) -> "RangeRequestBuilder":
        """Return at most ``limit`` keys."""
        self._request.limit = limit
        return self

    def with_revision(self, revision: int) -> "RangeRequestBuilder":
        """Read the store as it was at ``revision``."""
        self._request.revision = revision
        return self

    def with_sort_order(self, sort_order: SortOrder) -> "RangeRequestBuilder":
        """Sort the result in ``sort_order``."""
        self._request.sort_order = int(sort_order)
        return self

    def with_sort_target(self, sort_target: SortTarget) -> "RangeRequestBuilder":
        """Sort the result by ``sort_target``."""
        self._request.sort_target = int(sort_target)
        return self

    def with_serializable(self, serializable: bool) -> "RangeRequestBuilder":
        """Allow a serializable (local) read."""
        self._request.serializable = serializable
        return self

    def with_keys_only(self, keys_only: bool) -> "RangeRequestBuilder":
        """Return keys without their values."""
        self._request.keys_only = keys_only
        return self

    def with_count_only(self, count_only: bool) -> "RangeRequestBuilder":
        """Return only the number of keys."""
        self._request.count_only = count_only
        return self

    def with_min_mod_revision(self, min_mod_revision: int) -> "RangeRequestBuilder":
        """Skip keys last modified before ``min_mod_revision``."""
        self._request.min_mod_revision = min_mod_revision
        return self

    def with_max_mod_revision(self, max_mod_revision: int) -> "RangeRequestBuilder":
        """Skip keys last modified after ``max_mod_revision``."""
        self._request.max_mod_revision = max_mod_revision
        return self

    def with_min_create_revision(self, min_create_revision: int) -> "RangeRequestBuilder":
        """Skip keys created before ``min_create_revision``."""
        self._request.min_create_revision = min_create_revision
        return self

    def with_max_create_revision(self, max_create_revision: int) -> "RangeRequestBuilder":
        """Skip keys created after ``max_create_revision``."""
        self._request.max_create_revision = max_create_revision
        return self

    def build(self) -> RangeRequest:
        """Return the request built so far."""
        return dataclasses.replace(self._request)


class DeleteRangeRequestBuilder:
    """Builds a :class:`DeleteRangeRequest`; every ``with_*`` method returns the builder."""

    def __init__(self, key: KeyLike) -> None:
        self._request = DeleteRangeRequest(key=_to_bytes(key))

    def with_prefix(self) -> "DeleteRangeRequestBuilder":
        """Delete every key that starts with the key; an empty key deletes all keys."""
        self._request.key, self._request.range_end = _prefix_range(self._request.key)
        return self

    def with_from_key(self) -> "DeleteRangeRequestBuilder":
        """Delete every key greater than or equal to the key."""
        self._request.key, self._request.range_end = _from_key_range(self._request.key)
        return self

    def with_range_end(self, range_end: KeyLike) -> "DeleteRangeRequestBuilder":
        """Delete keys up to ``range_end``, exclusive."""
        self._request.range_end = _to_bytes(range_end)
        return self

    def with_prev_kv(self, prev_kv: bool) -> "DeleteRangeRequestBuilder":
        """Ask for the deleted key-value pairs in the response."""
        self._request.prev_kv = prev_kv
        return self

    def build(self) -> DeleteRangeRequest:
        """Return the request built so far."""
        return dataclasses.replace(self._request)