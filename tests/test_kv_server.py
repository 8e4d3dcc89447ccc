import pytest

from xline.command import KeyRange
from xline.errors import RpcError, StatusCode
from xline.kv_server import (
    check_delete_range_request,
    check_intervals,
    check_put_request,
    check_range_request,
    check_txn_request,
    command_from_request,
    parse_response_op,
    update_header_revision,
)
from xline.rpc import (
    AuthRequest,
    AuthRequestKind,
    CompactionResponse,
    Compare,
    DeleteRangeRequest,
    PutRequest,
    PutResponse,
    RangeRequest,
    RangeResponse,
    RequestOp,
    RequestWithToken,
    ResponseHeader,
    ResponseOp,
    TxnRequest,
    TxnResponse,
)


def put_op(key):
    return RequestOp(request=PutRequest(key=key, value=b"bar"))


def del_op(key, range_end=b""):
    return RequestOp(request=DeleteRangeRequest(key=key, range_end=range_end))


def test_txn_check():
    txn_req = TxnRequest(
        compare=[],
        success=[
            del_op(b"foo1"),
            RequestOp(
                request=TxnRequest(
                    compare=[],
                    success=[put_op(b"foo")],
                    failure=[put_op(b"foo")],
                )
            ),
        ],
        failure=[],
    )
    check_txn_request(txn_req)
    puts, dels = check_intervals(txn_req.success)
    assert puts == {b"foo"}
    assert dels == [KeyRange(b"foo1", b"")]


def test_range_request_errors():
    with pytest.raises(RpcError) as exc:
        check_range_request(RangeRequest(key=b"a", serializable=True))
    assert exc.value.code is StatusCode.UNIMPLEMENTED
    with pytest.raises(RpcError) as exc:
        check_range_request(RangeRequest(key=b"a", keys_only=True))
    assert exc.value.message == "keys_only is unimplemented"
    with pytest.raises(RpcError) as exc:
        check_range_request(RangeRequest(key=b"a", min_mod_revision=1))
    assert exc.value.code is StatusCode.UNIMPLEMENTED
    with pytest.raises(RpcError) as exc:
        check_range_request(RangeRequest(key=b""))
    assert exc.value.code is StatusCode.INVALID_ARGUMENT
    assert exc.value.message == "key is not provided"
    with pytest.raises(RpcError) as exc:
        check_range_request(RangeRequest(key=b"a", sort_order=7))
    assert exc.value.message == "invalid sort option"
    with pytest.raises(RpcError):
        check_range_request(RangeRequest(key=b"a", sort_target=9))


def test_range_request_valid():
    assert check_range_request(RangeRequest(key=b"a", sort_order=2, sort_target=4)) is None


def test_put_request_errors():
    with pytest.raises(RpcError) as exc:
        check_put_request(PutRequest(key=b"a", lease=5))
    assert exc.value.code is StatusCode.UNIMPLEMENTED
    with pytest.raises(RpcError) as exc:
        check_put_request(PutRequest(key=b""))
    assert exc.value.message == "key is not provided"
    with pytest.raises(RpcError) as exc:
        check_put_request(PutRequest(key=b"a", value=b"v", ignore_value=True))
    assert exc.value.message == "value is provided"


def test_delete_range_request_error():
    with pytest.raises(RpcError) as exc:
        check_delete_range_request(DeleteRangeRequest(key=b""))
    assert exc.value.code is StatusCode.INVALID_ARGUMENT


def test_txn_too_many_ops():
    compares = [Compare(key=b"k") for _ in range(129)]
    with pytest.raises(RpcError) as exc:
        check_txn_request(TxnRequest(compare=compares))
    assert exc.value.message == "too many operations in txn request"
    assert check_txn_request(TxnRequest(compare=compares[:128])) is None


def test_txn_compare_without_key():
    with pytest.raises(RpcError) as exc:
        check_txn_request(TxnRequest(compare=[Compare(key=b"")]))
    assert exc.value.message == "key is not provided"


def test_txn_empty_op():
    with pytest.raises(RpcError) as exc:
        check_txn_request(TxnRequest(success=[RequestOp()]))
    assert exc.value.message == "key not found"


def test_txn_nested_invalid_put():
    with pytest.raises(RpcError) as exc:
        check_txn_request(TxnRequest(failure=[RequestOp(request=PutRequest(key=b""))]))
    assert exc.value.message == "key is not provided"


def test_duplicate_puts():
    with pytest.raises(RpcError) as exc:
        check_intervals([put_op(b"a"), put_op(b"a")])
    assert exc.value.message == "duplicate key given in txn request"


def test_put_inside_deleted_range():
    with pytest.raises(RpcError):
        check_intervals([del_op(b"a", b"c"), put_op(b"b")])
    puts, _ = check_intervals([del_op(b"a", b"c"), put_op(b"c")])
    assert puts == {b"c"}


def test_nested_put_conflicts_with_outer_put():
    nested = RequestOp(request=TxnRequest(success=[put_op(b"x")]))
    with pytest.raises(RpcError):
        check_intervals([nested, put_op(b"x")])


def test_nested_put_conflicts_with_outer_delete():
    nested = RequestOp(request=TxnRequest(failure=[put_op(b"x")]))
    with pytest.raises(RpcError):
        check_intervals([del_op(b"x"), nested])


def test_nested_dels_collected():
    nested = RequestOp(request=TxnRequest(success=[del_op(b"m")], failure=[del_op(b"n")]))
    puts, dels = check_intervals([nested, put_op(b"z")])
    assert puts == {b"z"}
    assert dels == [KeyRange(b"m"), KeyRange(b"n")]


def test_update_header_revision_recurses_into_txn():
    inner = RangeResponse(header=ResponseHeader(revision=1))
    put = PutResponse(header=None)
    txn = TxnResponse(
        header=ResponseHeader(revision=1),
        responses=[ResponseOp(response=inner), ResponseOp(response=put), ResponseOp()],
    )
    update_header_revision(txn, 42)
    assert txn.header.revision == 42
    assert inner.header.revision == 42
    assert put.header is None


def test_update_header_revision_rejects_other_response():
    with pytest.raises(TypeError):
        update_header_revision(CompactionResponse(), 3)


def test_parse_response_op():
    resp = PutResponse(header=ResponseHeader(revision=2))
    assert parse_response_op(ResponseOp(response=resp)) is resp
    with pytest.raises(ValueError):
        parse_response_op(ResponseOp())


def test_command_from_request_kinds():
    cmd = command_from_request("n-1", RequestWithToken(RangeRequest(key=b"a", range_end=b"c")))
    assert cmd.keys == [KeyRange(b"a", b"c")]
    assert cmd.id == "n-1"

    cmd = command_from_request("n-2", RequestWithToken(PutRequest(key=b"k", value=b"v")))
    assert cmd.keys == [KeyRange(b"k", b"")]

    cmd = command_from_request("n-3", RequestWithToken(DeleteRangeRequest(key=b"d")))
    assert cmd.keys == [KeyRange(b"d", b"")]

    txn = TxnRequest(compare=[Compare(key=b"x", range_end=b"y"), Compare(key=b"z")])
    wrapper = RequestWithToken.with_token(txn, "token")
    cmd = command_from_request("n-4", wrapper)
    assert cmd.keys == [KeyRange(b"x", b"y"), KeyRange(b"z", b"")]
    assert cmd.request.token == "token"


def test_command_from_request_rejects_auth():
    with pytest.raises(TypeError):
        command_from_request("n", RequestWithToken(AuthRequest(AuthRequestKind.STATUS)))