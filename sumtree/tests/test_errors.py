from __future__ import annotations

import pytest

from sumtree import errors as E


@pytest.mark.parametrize(
    "cls, code, base",
    [
        (E.InvalidLeafIndex, "invalid_leaf_index", IndexError),
        (E.InvalidTransferIndex, "invalid_transfer_index", IndexError),
        (E.NodeError, "invalid_node", ValueError),
        (E.EncodeError, "encode_error", ValueError),
        (E.DecodeError, "decode_error", ValueError),
        (E.MalformedProof, "malformed_proof", E.DecodeError),
        (E.ConfigError, "invalid_config", ValueError),
    ],
)
def test_codes_and_bases(cls, code, base):
    err = cls("boom")
    assert isinstance(err, E.SumTreeError)
    assert isinstance(err, base)
    assert err.code == code
    assert str(err) == f"{code}: boom"


def test_problem_rendering():
    err = E.InvalidLeafIndex("Invalid leaf index", data={"index": 7, "leaves": 4})
    p = err.to_problem()
    assert p["type"] == "urn:sumtree:invalid_leaf_index"
    assert p["title"] == "Invalid Leaf Index"
    assert p["detail"] == "Invalid leaf index"
    assert p["data"] == {"index": 7, "leaves": 4}


def test_code_override_and_empty_fields():
    err = E.SumTreeError(code="transaction_not_found")
    assert err.code == "transaction_not_found"
    assert str(err) == "transaction_not_found"
    p = err.to_problem()
    assert p["detail"] is None
    assert p["data"] is None


def test_data_is_copied():
    src = {"k": 1}
    err = E.SumTreeError("x", data=src)
    src["k"] = 2
    assert err.data == {"k": 1}
