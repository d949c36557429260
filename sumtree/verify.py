"""
sumtree — Proof verification

Verifies transfer and transaction proofs against an expected root. The
verifier never sees the tree: it rebuilds the root from the transaction, the
leaf sum and the sibling path.

Algorithm (one transfer)
------------------------
1. Read `leaf_index` as a bit path, least-significant bit first, one bit per
   sibling. Bit 0 → the running node is the left child; bit 1 → right child.
2. The sender's signature over H(transaction payload) must pass the
   configured signature checker.
3. Start from Node(H(transaction payload), parsed_sum). The payload is
   hashed once and reused for the signature check and the walk.
4. Combine with each sibling in order. Sums of siblings to the left
   accumulate into `left_sum`, sums to the right into `right_sum`.
5. The recomputed root sum must equal the size of the coin space:
   MAX_COIN_ID - MIN_COIN_ID, or MAX_COIN_ID for a single-leaf tree (no
   siblings). Digests do not commit to sums, so this pins every sibling sum
   the walk adds up.
6. The leaf owns the coin span
       [MIN_COIN_ID + left_sum, MIN_COIN_ID + root_sum - right_sum)
   and the transfer must lie inside it.
7. The recomputed digest must equal the expected root.

Return value & errors
---------------------
`check_*` functions return True/False; a proof that does not match is an
ordinary outcome. Structurally invalid inputs raise instead: malformed
bytes, a leaf index that does not fit the sibling path, a bad transfer index
or a root that is not 32 bytes.
"""

from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass
from typing import Callable, Optional, Union

from .codec import decode_transaction_proof, decode_transfer_proof
from .config import SumTreeConfig, get_config
from .constants import DIGEST_BYTES
from .errors import InvalidTransferIndex, MalformedProof
from .models import AnyTransaction, Signature, Transfer, decode_any_transaction
from .node import Node, combine
from .proofs import TransactionProof, TransferProof
from .utils.bytes import hex_to_bytes

log = logging.getLogger(__name__)

BytesOrHex = Union[bytes, bytearray, memoryview, str]
RootLike = Union[BytesOrHex, Node]

#: (transaction_digest, signature, transfer) -> bool
SignatureChecker = Callable[[bytes, Signature, Transfer], bool]


def accept_any_signature(transaction_digest: bytes, signature: Signature, transfer: Transfer) -> bool:
    """Signature checker that accepts everything."""
    return True


# --------------------------------------------------------------------------- #
# Input coercion
# --------------------------------------------------------------------------- #


def _as_transaction(tx: Union[AnyTransaction, BytesOrHex]) -> AnyTransaction:
    if isinstance(tx, (bytes, bytearray, memoryview, str)):
        return decode_any_transaction(tx)
    return tx


def _as_transfer_proof(p: Union[TransferProof, BytesOrHex]) -> TransferProof:
    if isinstance(p, (bytes, bytearray, memoryview, str)):
        return decode_transfer_proof(p)
    return p


def _as_transaction_proof(p: Union[TransactionProof, BytesOrHex]) -> TransactionProof:
    if isinstance(p, (bytes, bytearray, memoryview, str)):
        return decode_transaction_proof(p)
    return p


def _root_digest(root: RootLike) -> bytes:
    if isinstance(root, Node):
        return root.digest
    b = hex_to_bytes(root) if isinstance(root, str) else bytes(root)
    if len(b) != DIGEST_BYTES:
        raise MalformedProof(f"root must be {DIGEST_BYTES} bytes, got {len(b)}")
    return b


def _transfer_at(tx: AnyTransaction, transfer_index: int) -> Transfer:
    n = len(tx.transfers)
    if not 0 <= transfer_index < n:
        raise InvalidTransferIndex(
            f"transfer index {transfer_index} out of range for {n} transfers",
            data={"transfer_index": transfer_index, "transfers": n},
        )
    return tx.transfers[transfer_index]


# --------------------------------------------------------------------------- #
# Root reconstruction
# --------------------------------------------------------------------------- #


@dataclass(frozen=True)
class ProofBounds:
    """
    Result of walking a transfer proof.

      • root        : recomputed root node
      • left_sum    : total sum of siblings left of the path
      • right_sum   : total sum of siblings right of the path
      • min_coin_id : origin of the coin space the sums are measured from
      • lower/upper : coin span [lower, upper) owned by the proven leaf
    """

    root: Node
    left_sum: int
    right_sum: int
    min_coin_id: int = 0

    @property
    def lower(self) -> int:
        return self.min_coin_id + self.left_sum

    @property
    def upper(self) -> int:
        return self.min_coin_id + self.root.sum - self.right_sum

    def covers(self, start: int, end: int) -> bool:
        return start >= self.lower and end <= self.upper


def expected_root_sum(cfg: SumTreeConfig, depth: int) -> int:
    """
    Root sum of any honestly built tree: the single leaf of a depth-0 tree
    claims MAX_COIN_ID, otherwise the leaf sums tile [min, max].
    """
    if depth == 0:
        return cfg.max_coin_id
    return cfg.max_coin_id - cfg.min_coin_id


def _walk(tx_digest: bytes, proof: TransferProof, cfg: SumTreeConfig) -> ProofBounds:
    hash_fn = cfg.hash_fn
    siblings = proof.inclusion_proof
    index = int(proof.leaf_index)
    if index < 0 or index.bit_length() > len(siblings):
        raise MalformedProof(
            f"leaf index {index} does not fit a path of {len(siblings)} siblings",
            data={"leaf_index": index, "depth": len(siblings)},
        )

    computed = Node(tx_digest, proof.parsed_sum)
    left_sum = 0
    right_sum = 0
    for level, sibling in enumerate(siblings):
        if (index >> level) & 1:
            computed = combine(sibling, computed, hash_fn=hash_fn)
            left_sum += sibling.sum
        else:
            computed = combine(computed, sibling, hash_fn=hash_fn)
            right_sum += sibling.sum
    return ProofBounds(
        root=computed,
        left_sum=left_sum,
        right_sum=right_sum,
        min_coin_id=cfg.min_coin_id,
    )


def proof_bounds(
    transaction: Union[AnyTransaction, BytesOrHex],
    transfer_proof: Union[TransferProof, BytesOrHex],
    *,
    config: Optional[SumTreeConfig] = None,
) -> ProofBounds:
    """
    Recompute the root and the coin span owned by the proven leaf.

    Raises:
        MalformedProof if leaf_index does not fit the sibling path
    """
    cfg = config or get_config()
    tx = _as_transaction(transaction)
    proof = _as_transfer_proof(transfer_proof)
    return _walk(cfg.hash_fn(tx.payload), proof, cfg)


# --------------------------------------------------------------------------- #
# Checks
# --------------------------------------------------------------------------- #


def check_transfer_proof(
    transaction: Union[AnyTransaction, BytesOrHex],
    transfer_index: int,
    transfer_proof: Union[TransferProof, BytesOrHex],
    root: RootLike,
    *,
    signature_checker: Optional[SignatureChecker] = None,
    config: Optional[SumTreeConfig] = None,
) -> bool:
    """
    Check that transfer `transfer_index` of `transaction` is included under
    `root` according to `transfer_proof`.
    """
    cfg = config or get_config()
    tx = _as_transaction(transaction)
    proof = _as_transfer_proof(transfer_proof)
    transfer = _transfer_at(tx, transfer_index)
    expected = _root_digest(root)

    tx_digest = cfg.hash_fn(tx.payload)
    checker = signature_checker or accept_any_signature
    if not checker(tx_digest, proof.signature, transfer):
        log.debug("transfer proof rejected: signature check failed (transfer=%d)", transfer_index)
        return False

    bounds = _walk(tx_digest, proof, cfg)
    total = expected_root_sum(cfg, len(proof.inclusion_proof))
    valid_total = bounds.root.sum == total
    valid_sum = valid_total and bounds.covers(transfer.start, transfer.end)
    valid_root = hmac.compare_digest(bounds.root.digest, expected)
    if not valid_total:
        log.debug(
            "transfer proof rejected: root sum %d does not match coin space %d",
            bounds.root.sum, total,
        )
    elif not valid_sum:
        log.debug(
            "transfer proof rejected: range [%d, %d) outside [%d, %d)",
            transfer.start, transfer.end, bounds.lower, bounds.upper,
        )
    if not valid_root:
        log.debug("transfer proof rejected: root mismatch (leaf=%d)", proof.leaf_index)
    return valid_sum and valid_root


def check_transaction_proof(
    transaction: Union[AnyTransaction, BytesOrHex],
    transaction_proof: Union[TransactionProof, BytesOrHex],
    root: RootLike,
    *,
    signature_checker: Optional[SignatureChecker] = None,
    config: Optional[SumTreeConfig] = None,
) -> bool:
    """
    Check every transfer proof of `transaction_proof`; the k-th proof is
    checked against the k-th transfer.
    """
    tx = _as_transaction(transaction)
    proof = _as_transaction_proof(transaction_proof)
    if len(proof.transfer_proofs) != len(tx.transfers):
        log.debug(
            "transaction proof rejected: %d proofs for %d transfers",
            len(proof.transfer_proofs), len(tx.transfers),
        )
        return False
    return all(
        check_transfer_proof(
            tx, k, p, root, signature_checker=signature_checker, config=config
        )
        for k, p in enumerate(proof.transfer_proofs)
    )


__all__ = [
    "SignatureChecker",
    "accept_any_signature",
    "ProofBounds",
    "expected_root_sum",
    "proof_bounds",
    "check_transfer_proof",
    "check_transaction_proof",
]
