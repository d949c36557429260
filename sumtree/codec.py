"""
sumtree — Proof codec
=====================

Canonical binary encoding of proofs. An independent verifier (e.g. a Solidity
contract) parses exactly these bytes, so field order and widths are fixed.

Format (all integers big-endian unsigned)
-----------------------------------------
    sibling          := digest(32) || sum(16)                              48 bytes
    transfer_proof   := parsed_sum(16) || leaf_index(16) || signature(65)
                        || n(1) || n * sibling
    transaction_proof:= m(1) || m * transfer_proof

`n` is the tree depth for the proven leaf; `m` the number of transfers in
the proven transaction.

API
---
    encode_inclusion_proof(nodes) -> bytes          # n * sibling, no count
    decode_inclusion_proof(buf) -> tuple[Node, ...]
    encode_transfer_proof(proof) -> bytes
    decode_transfer_proof(buf) -> TransferProof      # strict: one whole proof
    encode_transaction_proof(proof) -> bytes
    decode_transaction_proof(buf) -> TransactionProof

Malformed input raises `MalformedProof`; values that do not fit their field
raise `EncodeError`.
"""

from __future__ import annotations

from typing import Iterable, Tuple, Union

from .constants import COUNT_BYTES, MAX_COUNT, NODE_BYTES, SIGNATURE_BYTES, SUM_BYTES
from .errors import EncodeError, MalformedProof
from .models import Signature
from .node import Node
from .proofs import TransactionProof, TransferProof
from .utils.bytes import Reader, hex_to_bytes, uint_to_be

BytesOrHex = Union[bytes, bytearray, memoryview, str]


def _raw(data: BytesOrHex) -> bytes:
    if isinstance(data, str):
        return hex_to_bytes(data)
    return bytes(data)


def _count(n: int, *, what: str) -> bytes:
    if n > MAX_COUNT:
        raise EncodeError(f"too many {what}: {n} > {MAX_COUNT}")
    return uint_to_be(n, COUNT_BYTES, field=f"{what} count")


# --------------------------------------------------------------------------- #
# Inclusion proof (sibling list)
# --------------------------------------------------------------------------- #


def encode_inclusion_proof(nodes: Iterable[Node]) -> bytes:
    return b"".join(n.encode() for n in nodes)


def decode_inclusion_proof(buf: BytesOrHex) -> Tuple[Node, ...]:
    b = _raw(buf)
    if len(b) % NODE_BYTES != 0:
        raise MalformedProof(
            f"inclusion proof length {len(b)} is not a multiple of {NODE_BYTES}",
            data={"size": len(b)},
        )
    return tuple(Node.decode(b[i : i + NODE_BYTES]) for i in range(0, len(b), NODE_BYTES))


# --------------------------------------------------------------------------- #
# Transfer proof
# --------------------------------------------------------------------------- #


def encode_transfer_proof(proof: TransferProof) -> bytes:
    return (
        uint_to_be(proof.parsed_sum, SUM_BYTES, field="parsed_sum")
        + uint_to_be(proof.leaf_index, SUM_BYTES, field="leaf_index")
        + proof.signature.encode()
        + _count(len(proof.inclusion_proof), what="siblings")
        + encode_inclusion_proof(proof.inclusion_proof)
    )


def _read_transfer_proof(r: Reader) -> TransferProof:
    parsed_sum = r.uint(SUM_BYTES, field="parsed_sum")
    leaf_index = r.uint(SUM_BYTES, field="leaf_index")
    signature = Signature.decode(r.take(SIGNATURE_BYTES, field="signature"))
    n = r.uint(COUNT_BYTES, field="sibling count")
    siblings = tuple(Node.decode(r.take(NODE_BYTES, field="sibling")) for _ in range(n))
    return TransferProof(
        parsed_sum=parsed_sum,
        leaf_index=leaf_index,
        inclusion_proof=siblings,
        signature=signature,
    )


def decode_transfer_proof(buf: BytesOrHex) -> TransferProof:
    r = Reader(_raw(buf), error=MalformedProof)
    proof = _read_transfer_proof(r)
    r.finish()
    return proof


# --------------------------------------------------------------------------- #
# Transaction proof
# --------------------------------------------------------------------------- #


def encode_transaction_proof(proof: TransactionProof) -> bytes:
    return _count(len(proof.transfer_proofs), what="transfer proofs") + b"".join(
        encode_transfer_proof(p) for p in proof.transfer_proofs
    )


def decode_transaction_proof(buf: BytesOrHex) -> TransactionProof:
    r = Reader(_raw(buf), error=MalformedProof)
    m = r.uint(COUNT_BYTES, field="transfer proof count")
    proofs = tuple(_read_transfer_proof(r) for _ in range(m))
    r.finish()
    return TransactionProof(proofs)


__all__ = [
    "encode_inclusion_proof",
    "decode_inclusion_proof",
    "encode_transfer_proof",
    "decode_transfer_proof",
    "encode_transaction_proof",
    "decode_transaction_proof",
]
