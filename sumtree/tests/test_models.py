from __future__ import annotations

import pytest

from sumtree.constants import TRANSFER_BYTES
from sumtree.errors import DecodeError, EncodeError
from sumtree.models import (
    PLACEHOLDER_SIGNATURE,
    Signature,
    SignedTransaction,
    Transaction,
    Transfer,
    decode_any_transaction,
)
from sumtree.utils.hash import keccak256

from .txutils import ACCOUNTS, make_tx


# ---- signatures --------------------------------------------------------------

def test_placeholder_signature_fields():
    assert PLACEHOLDER_SIGNATURE.v == 27
    assert PLACEHOLDER_SIGNATURE.r.hex().startswith("d693b532")
    assert PLACEHOLDER_SIGNATURE.s.hex().endswith("a750b354")
    assert len(PLACEHOLDER_SIGNATURE.encode()) == 65


def test_signature_validation():
    with pytest.raises(EncodeError):
        Signature(v=27, r=b"\x00" * 31, s=b"\x00" * 32)
    with pytest.raises(EncodeError):
        Signature(v=256, r=b"\x00" * 32, s=b"\x00" * 32)
    with pytest.raises(DecodeError):
        Signature.decode(b"\x00" * 64)


def test_signature_dict_form():
    sig = Signature(v=28, r="0x" + "ab" * 32, s=b"\xcd" * 32)
    assert sig.r == b"\xab" * 32
    assert Signature.from_dict(sig.to_dict()) == sig


# ---- transfers ---------------------------------------------------------------

def test_transfer_layout():
    t = Transfer(ACCOUNTS[0], ACCOUNTS[1], 0x0102, 5, 0x0A0B)
    enc = t.encode()
    assert len(enc) == TRANSFER_BYTES == 68
    assert enc[:20] == bytes.fromhex(ACCOUNTS[0][2:])
    assert enc[20:40] == bytes.fromhex(ACCOUNTS[1][2:])
    assert enc[40:44] == b"\x00\x00\x01\x02"
    assert enc[44:56] == (5).to_bytes(12, "big")
    assert enc[56:68] == (0x0A0B).to_bytes(12, "big")
    assert Transfer.decode(enc) == t


def test_transfer_requires_nonempty_range():
    for start, end in ((5, 5), (6, 5)):
        with pytest.raises(EncodeError):
            Transfer(ACCOUNTS[0], ACCOUNTS[1], 0, start, end)


def test_transfer_rejects_bad_address():
    with pytest.raises(EncodeError):
        Transfer(b"\x01" * 19, ACCOUNTS[1], 0, 0, 1)


def test_transfer_fields_must_fit():
    with pytest.raises(EncodeError):
        Transfer(ACCOUNTS[0], ACCOUNTS[1], 0, 0, 1 << 96).encode()
    with pytest.raises(EncodeError):
        Transfer(ACCOUNTS[0], ACCOUNTS[1], 1 << 32, 0, 1).encode()


def test_transfer_decode_requires_exact_size():
    enc = make_tx(1, 2).transfers[0].encode()
    with pytest.raises(DecodeError):
        Transfer.decode(enc[:-1])
    with pytest.raises(DecodeError):
        Transfer.decode(enc + b"\x00")


# ---- transactions ------------------------------------------------------------

def test_transaction_layout():
    tx = make_tx(2, 3, block=0x01020304)
    enc = tx.encode()
    assert enc[:4] == b"\x01\x02\x03\x04"
    assert enc[4] == 1
    assert enc[5:] == tx.transfers[0].encode()
    assert tx.payload == enc
    assert Transaction.decode(enc) == tx
    assert Transaction.decode("0x" + enc.hex()) == tx


def test_transaction_needs_a_transfer():
    with pytest.raises(EncodeError):
        Transaction(block=1, transfers=()).encode()
    with pytest.raises(DecodeError):
        Transaction.decode(b"\x00\x00\x00\x01\x00")


def test_transaction_decode_is_strict():
    enc = make_tx(2, 3).encode()
    with pytest.raises(DecodeError):
        Transaction.decode(enc + b"\x00")
    with pytest.raises(DecodeError):
        Transaction.decode(enc[:-1])


def test_transaction_dict_form():
    tx = make_tx(10, 1 << 90, token=3, block=12)
    d = tx.to_dict()
    assert d["transfers"][0]["end"] == str(1 << 90)
    assert Transaction.from_dict(d) == tx


def test_signed_transaction_hashes_like_its_body(multi_tx):
    body = multi_tx.transaction
    assert isinstance(body, Transaction)
    assert multi_tx.payload == body.encode()
    assert keccak256(multi_tx.payload) == keccak256(body.payload)
    enc = multi_tx.encode()
    assert enc[: len(body.encode())] == body.encode()
    assert len(enc) == len(body.encode()) + 2 * 65
    assert SignedTransaction.decode(enc) == multi_tx


def test_signed_transaction_needs_one_signature_per_transfer(multi_tx):
    with pytest.raises(EncodeError):
        SignedTransaction(block=1, transfers=multi_tx.transfers, signatures=multi_tx.signatures[:1])
    with pytest.raises(DecodeError):
        SignedTransaction.decode(multi_tx.encode()[:-1])


def test_decode_either_record_form(multi_tx):
    body = multi_tx.transaction
    assert decode_any_transaction(body.encode()) == body
    assert isinstance(decode_any_transaction(body.encode()), Transaction)
    assert decode_any_transaction(multi_tx.encode()) == multi_tx
    assert decode_any_transaction("0x" + multi_tx.encode().hex()) == multi_tx
    # a partial signature block is neither form
    with pytest.raises(DecodeError):
        decode_any_transaction(multi_tx.encode()[:-1])
    with pytest.raises(DecodeError):
        decode_any_transaction(multi_tx.encode() + b"\x00")


def test_signed_transaction_dict_form(multi_tx):
    d = multi_tx.to_dict()
    assert len(d["signatures"]) == 2
    assert SignedTransaction.from_dict(d) == multi_tx
