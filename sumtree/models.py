"""
sumtree — Transfer / transaction records

Fixed-width binary records for the objects that become tree leaves. The tree
treats the encoding as an opaque, deterministic byte string: a leaf digest is
H(transaction.encode()).

Layouts (all integers big-endian unsigned)
------------------------------------------
    Signature         := v(1) || r(32) || s(32)                      65 bytes
    Transfer          := sender(20) || recipient(20) || token(4)
                         || start(12) || end(12)                      68 bytes
    Transaction       := block(4) || n(1) || n * Transfer
    SignedTransaction := Transaction || n * Signature

A signed transaction hashes to the same leaf as its unsigned body, so
signatures never change a leaf digest.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple, Union

from .constants import (
    ADDRESS_BYTES,
    BLOCK_BYTES,
    COIN_BYTES,
    COUNT_BYTES,
    MAX_COUNT,
    SIGNATURE_BYTES,
    TOKEN_BYTES,
    TRANSFER_BYTES,
)
from .errors import DecodeError, EncodeError
from .utils.bytes import Reader, bytes_to_hex, hex_to_bytes, uint_to_be

BytesOrHex = Union[bytes, bytearray, memoryview, str]


def _raw(value: BytesOrHex) -> bytes:
    if isinstance(value, str):
        return hex_to_bytes(value)
    return bytes(value)


def _fixed(value: BytesOrHex, width: int, *, field: str) -> bytes:
    b = _raw(value)
    if len(b) != width:
        raise EncodeError(f"{field} must be {width} bytes, got {len(b)}")
    return b


# --------------------------------------------------------------------------- #
# Signature
# --------------------------------------------------------------------------- #


@dataclass(frozen=True)
class Signature:
    """Recoverable ECDSA signature (v, r, s)."""

    v: int
    r: bytes
    s: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "r", _fixed(self.r, 32, field="Signature.r"))
        object.__setattr__(self, "s", _fixed(self.s, 32, field="Signature.s"))
        uint_to_be(self.v, 1, field="Signature.v")

    def encode(self) -> bytes:
        return uint_to_be(self.v, 1, field="Signature.v") + self.r + self.s

    @classmethod
    def decode(cls, data: BytesOrHex) -> "Signature":
        b = _raw(data)
        if len(b) != SIGNATURE_BYTES:
            raise DecodeError(f"signature must be {SIGNATURE_BYTES} bytes, got {len(b)}")
        return cls(v=b[0], r=b[1:33], s=b[33:65])

    def to_dict(self) -> Dict[str, Any]:
        return {"v": self.v, "r": bytes_to_hex(self.r), "s": bytes_to_hex(self.s)}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Signature":
        return cls(v=int(d["v"]), r=d["r"], s=d["s"])


# Fixed signature handed out for records that carry no signatures.
PLACEHOLDER_SIGNATURE = Signature.decode(
    "1b"
    "d693b532a80fed6392b428604171fb32fdbf953728a3a7ecc7d4062b1652c042"
    "24e9c602ac800b983b035700a14b23f78a253ab762deab5dc27e3555a750b354"
)


# --------------------------------------------------------------------------- #
# Transfer
# --------------------------------------------------------------------------- #


@dataclass(frozen=True)
class Transfer:
    """
    Ownership transfer of the coin range [start, end) of `token`.
    """

    sender: bytes
    recipient: bytes
    token: int
    start: int
    end: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "sender", _fixed(self.sender, ADDRESS_BYTES, field="Transfer.sender"))
        object.__setattr__(self, "recipient", _fixed(self.recipient, ADDRESS_BYTES, field="Transfer.recipient"))
        if int(self.start) >= int(self.end):
            raise EncodeError(
                "Transfer.start must be < Transfer.end",
                data={"start": int(self.start), "end": int(self.end)},
            )

    def encode(self) -> bytes:
        return (
            self.sender
            + self.recipient
            + uint_to_be(self.token, TOKEN_BYTES, field="Transfer.token")
            + uint_to_be(self.start, COIN_BYTES, field="Transfer.start")
            + uint_to_be(self.end, COIN_BYTES, field="Transfer.end")
        )

    @classmethod
    def read(cls, r: Reader) -> "Transfer":
        return cls(
            sender=r.take(ADDRESS_BYTES, field="sender"),
            recipient=r.take(ADDRESS_BYTES, field="recipient"),
            token=r.uint(TOKEN_BYTES, field="token"),
            start=r.uint(COIN_BYTES, field="start"),
            end=r.uint(COIN_BYTES, field="end"),
        )

    @classmethod
    def decode(cls, data: BytesOrHex) -> "Transfer":
        b = _raw(data)
        if len(b) != TRANSFER_BYTES:
            raise DecodeError(f"transfer must be {TRANSFER_BYTES} bytes, got {len(b)}")
        return cls.read(Reader(b))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sender": bytes_to_hex(self.sender),
            "recipient": bytes_to_hex(self.recipient),
            "token": self.token,
            "start": str(self.start),
            "end": str(self.end),
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Transfer":
        return cls(
            sender=d["sender"],
            recipient=d["recipient"],
            token=int(d["token"]),
            start=int(d["start"]),
            end=int(d["end"]),
        )


# --------------------------------------------------------------------------- #
# Transactions
# --------------------------------------------------------------------------- #


def _encode_body(block: int, transfers: Tuple[Transfer, ...]) -> bytes:
    if not transfers:
        raise EncodeError("transaction must contain at least one transfer")
    if len(transfers) > MAX_COUNT:
        raise EncodeError(f"transaction holds at most {MAX_COUNT} transfers")
    return (
        uint_to_be(block, BLOCK_BYTES, field="Transaction.block")
        + uint_to_be(len(transfers), COUNT_BYTES, field="transfer count")
        + b"".join(t.encode() for t in transfers)
    )


def _read_body(r: Reader) -> Tuple[int, Tuple[Transfer, ...]]:
    block = r.uint(BLOCK_BYTES, field="block")
    count = r.uint(COUNT_BYTES, field="transfer count")
    if count == 0:
        raise DecodeError("transaction must contain at least one transfer")
    return block, tuple(Transfer.read(r) for _ in range(count))


@dataclass(frozen=True)
class Transaction:
    """A block-scoped bundle of one or more transfers."""

    block: int
    transfers: Tuple[Transfer, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "transfers", tuple(self.transfers))

    def encode(self) -> bytes:
        return _encode_body(self.block, self.transfers)

    @property
    def payload(self) -> bytes:
        """Bytes hashed into the leaf digest."""
        return self.encode()

    @classmethod
    def decode(cls, data: BytesOrHex) -> "Transaction":
        r = Reader(_raw(data))
        block, transfers = _read_body(r)
        r.finish()
        return cls(block=block, transfers=transfers)

    def to_dict(self) -> Dict[str, Any]:
        return {"block": self.block, "transfers": [t.to_dict() for t in self.transfers]}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Transaction":
        return cls(
            block=int(d["block"]),
            transfers=tuple(Transfer.from_dict(t) for t in d["transfers"]),
        )


@dataclass(frozen=True)
class SignedTransaction:
    """A transaction with one signature per transfer, by that transfer's sender."""

    block: int
    transfers: Tuple[Transfer, ...]
    signatures: Tuple[Signature, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "transfers", tuple(self.transfers))
        object.__setattr__(self, "signatures", tuple(self.signatures))
        if len(self.signatures) != len(self.transfers):
            raise EncodeError(
                "one signature per transfer required",
                data={"transfers": len(self.transfers), "signatures": len(self.signatures)},
            )

    @property
    def transaction(self) -> Transaction:
        return Transaction(block=self.block, transfers=self.transfers)

    @property
    def payload(self) -> bytes:
        return self.transaction.encode()

    def encode(self) -> bytes:
        return _encode_body(self.block, self.transfers) + b"".join(
            s.encode() for s in self.signatures
        )

    @classmethod
    def decode(cls, data: BytesOrHex) -> "SignedTransaction":
        r = Reader(_raw(data))
        block, transfers = _read_body(r)
        sigs = tuple(
            Signature.decode(r.take(SIGNATURE_BYTES, field="signature"))
            for _ in transfers
        )
        r.finish()
        return cls(block=block, transfers=transfers, signatures=sigs)

    def to_dict(self) -> Dict[str, Any]:
        d = self.transaction.to_dict()
        d["signatures"] = [s.to_dict() for s in self.signatures]
        return d

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SignedTransaction":
        tx = Transaction.from_dict(d)
        return cls(
            block=tx.block,
            transfers=tx.transfers,
            signatures=tuple(Signature.from_dict(s) for s in d["signatures"]),
        )


AnyTransaction = Union[Transaction, SignedTransaction]


def decode_any_transaction(data: BytesOrHex) -> AnyTransaction:
    """
    Decode either record form. A body with nothing after it is a
    Transaction; a body followed by one signature per transfer is a
    SignedTransaction. Anything else raises DecodeError.
    """
    r = Reader(_raw(data))
    block, transfers = _read_body(r)
    if not r.remaining:
        return Transaction(block=block, transfers=transfers)
    sigs = tuple(
        Signature.decode(r.take(SIGNATURE_BYTES, field="signature"))
        for _ in transfers
    )
    r.finish()
    return SignedTransaction(block=block, transfers=transfers, signatures=sigs)


__all__ = [
    "Signature",
    "PLACEHOLDER_SIGNATURE",
    "Transfer",
    "Transaction",
    "SignedTransaction",
    "AnyTransaction",
    "decode_any_transaction",
]
