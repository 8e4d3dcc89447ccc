import pytest

from xline.command import KeyRange
from xline.errors import RpcError, StatusCode
from xline.kv_server import check_range_request
from xline.kv_types import (
    DeleteRangeRequestBuilder,
    PutRequestBuilder,
    RangeRequestBuilder,
)
from xline.rpc import DeleteRangeRequest, PutRequest, SortOrder, SortTarget


def test_put_builder_defaults():
    req = PutRequestBuilder(b"foo", b"bar").build()
    assert req == PutRequest(key=b"foo", value=b"bar")


def test_put_builder_sets_every_field():
    req = (
        PutRequestBuilder("foo", "bar")
        .with_lease(7)
        .with_prev_kv(True)
        .with_ignore_value(True)
        .with_ignore_lease(True)
        .build()
    )
    assert req.key == b"foo"
    assert req.value == b"bar"
    assert req.lease == 7
    assert req.prev_kv is True
    assert req.ignore_value is True
    assert req.ignore_lease is True


def test_build_returns_independent_copy():
    builder = PutRequestBuilder(b"k", b"v")
    first = builder.build()
    first.value = b"changed"
    assert builder.build().value == b"v"


def test_range_prefix_uses_key_range_prefix():
    req = RangeRequestBuilder(b"foo").with_prefix().build()
    assert req.key == b"foo"
    assert req.range_end == KeyRange.get_prefix(b"foo")
    assert req.range_end == b"fop"


def test_range_prefix_of_all_ff_selects_to_end():
    req = RangeRequestBuilder(b"\xff\xff").with_prefix().build()
    assert req.key == b"\xff\xff"
    assert req.range_end == b"\x00"


def test_range_prefix_of_empty_key_selects_all():
    req = RangeRequestBuilder(b"").with_prefix().build()
    assert (req.key, req.range_end) == (b"\x00", b"\x00")


@pytest.mark.parametrize("key, expected_key", [(b"", b"\x00"), (b"abc", b"abc")])
def test_range_from_key(key, expected_key):
    req = RangeRequestBuilder(key).with_from_key().build()
    assert req.key == expected_key
    assert req.range_end == b"\x00"


def test_range_builder_sets_every_field():
    req = (
        RangeRequestBuilder(b"a")
        .with_range_end(b"z")
        .with_limit(10)
        .with_revision(3)
        .with_sort_order(SortOrder.DESCEND)
        .with_sort_target(SortTarget.MOD)
        .with_serializable(True)
        .with_keys_only(True)
        .with_count_only(True)
        .with_min_mod_revision(1)
        .with_max_mod_revision(2)
        .with_min_create_revision(4)
        .with_max_create_revision(5)
        .build()
    )
    assert req.range_end == b"z"
    assert req.limit == 10
    assert req.revision == 3
    assert req.sort_order == int(SortOrder.DESCEND)
    assert req.sort_target == int(SortTarget.MOD)
    assert req.serializable and req.keys_only and req.count_only
    assert (req.min_mod_revision, req.max_mod_revision) == (1, 2)
    assert (req.min_create_revision, req.max_create_revision) == (4, 5)


def test_range_builder_result_is_validated_by_server():
    check_range_request(RangeRequestBuilder(b"a").with_limit(1).build())
    with pytest.raises(RpcError) as info:
        check_range_request(RangeRequestBuilder(b"a").with_serializable(True).build())
    assert info.value.code is StatusCode.UNIMPLEMENTED


def test_delete_builder_defaults_and_prev_kv():
    assert DeleteRangeRequestBuilder(b"k").build() == DeleteRangeRequest(key=b"k")
    req = DeleteRangeRequestBuilder(b"k").with_range_end(b"l").with_prev_kv(True).build()
    assert req == DeleteRangeRequest(key=b"k", range_end=b"l", prev_kv=True)


def test_delete_prefix_and_from_key():
    req = DeleteRangeRequestBuilder(b"ab").with_prefix().build()
    assert req.range_end == KeyRange.get_prefix(b"ab")
    assert KeyRange(req.key, req.range_end).contains_key(b"abzz")
    assert not KeyRange(req.key, req.range_end).contains_key(b"b")
    empty = DeleteRangeRequestBuilder(b"").with_prefix().build()
    assert (empty.key, empty.range_end) == (b"\x00", b"\x00")
    from_key = DeleteRangeRequestBuilder(b"").with_from_key().build()
    assert (from_key.key, from_key.range_end) == (b"\x00", b"\x00")