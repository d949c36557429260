"""
sumtree — Transfer & transaction proofs (builders)

What's here
-----------
• TransferProof:    inclusion proof for one transfer (one leaf)
• TransactionProof: one TransferProof per transfer of a transaction, in
                    transfer order

A TransferProof carries everything a verifier needs except the transaction
itself and the expected root:

    parsed_sum       sum of the leaf node (the verifier cannot derive it)
    leaf_index       position of the leaf in tree order; its bits give the
                     left/right choice at each level, least-significant first
    signature        the transfer sender's signature over the transaction
    inclusion_proof  sibling nodes, bottom → top

Verification lives in `sumtree.verify`; the binary layout in
`sumtree.codec`.

Typical usage
-------------
    from sumtree.plasma import build_plasma_tree
    from sumtree.proofs import get_transaction_proof

    tree = build_plasma_tree(txs)
    proof = get_transaction_proof(tree, txs[3])
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

from .errors import SumTreeError
from .models import PLACEHOLDER_SIGNATURE, Signature
from .node import Node
from .tree import SumTree

log = logging.getLogger(__name__)


# --------------------------------------------------------------------------- #
# Data structures
# --------------------------------------------------------------------------- #


@dataclass(frozen=True)
class TransferProof:
    parsed_sum: int
    leaf_index: int
    inclusion_proof: Tuple[Node, ...]
    signature: Signature = PLACEHOLDER_SIGNATURE

    def __post_init__(self) -> None:
        object.__setattr__(self, "inclusion_proof", tuple(self.inclusion_proof))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "parsedSum": str(self.parsed_sum),
            "leafIndex": str(self.leaf_index),
            "signature": self.signature.to_dict(),
            "inclusionProof": [n.to_dict() for n in self.inclusion_proof],
        }

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "TransferProof":
        return cls(
            parsed_sum=int(d["parsedSum"]),
            leaf_index=int(d["leafIndex"]),
            inclusion_proof=tuple(Node.from_dict(n) for n in d["inclusionProof"]),
            signature=Signature.from_dict(d["signature"]),
        )


@dataclass(frozen=True)
class TransactionProof:
    transfer_proofs: Tuple[TransferProof, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "transfer_proofs", tuple(self.transfer_proofs))

    def __len__(self) -> int:
        return len(self.transfer_proofs)

    def to_dict(self) -> Dict[str, Any]:
        return {"transferProofs": [p.to_dict() for p in self.transfer_proofs]}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "TransactionProof":
        return cls(tuple(TransferProof.from_dict(p) for p in d["transferProofs"]))


# --------------------------------------------------------------------------- #
# Builders
# --------------------------------------------------------------------------- #


def _signature_for(tree: SumTree, leaf_index: int) -> Signature:
    leaf = tree.parsed_leaves[leaf_index]
    source = tree.leaves[leaf.source_index]
    sigs: Sequence[Signature] = getattr(source, "signatures", ())
    if leaf.transfer_index < len(sigs):
        return sigs[leaf.transfer_index]
    return PLACEHOLDER_SIGNATURE


def get_inclusion_proof(tree: SumTree, index: int) -> List[Node]:
    """Sibling path for the leaf at `index` (see SumTree.inclusion_proof)."""
    return tree.inclusion_proof(index)


def get_transfer_proof(tree: SumTree, leaf_index: int) -> TransferProof:
    """
    Build the TransferProof for the leaf at `leaf_index`.

    Raises:
        InvalidLeafIndex if the index is out of range
    """
    branch = tree.inclusion_proof(leaf_index)
    proof = TransferProof(
        parsed_sum=tree.levels[0][leaf_index].sum,
        leaf_index=leaf_index,
        inclusion_proof=tuple(branch),
        signature=_signature_for(tree, leaf_index),
    )
    log.debug("transfer proof leaf=%d depth=%d", leaf_index, len(branch))
    return proof


def find_transaction_leaves(tree: SumTree, transaction: Any) -> List[int]:
    """
    Leaf indices contributed by `transaction`, ordered by transfer index.

    The transaction is located among `tree.leaves` by identity first and by
    equality otherwise; only the first matching record is used.
    """
    sources = tree.leaves
    src = next((i for i, s in enumerate(sources) if s is transaction), None)
    if src is None:
        src = next((i for i, s in enumerate(sources) if s == transaction), None)
    if src is None:
        return []
    found = [
        (leaf.transfer_index, idx)
        for idx, leaf in enumerate(tree.parsed_leaves)
        if leaf.source_index == src
    ]
    return [idx for _, idx in sorted(found)]


def get_transaction_proof(tree: SumTree, transaction: Any) -> TransactionProof:
    """
    Build a TransactionProof with one TransferProof per transfer.

    Raises:
        SumTreeError (code "transaction_not_found") if the transaction did not
        contribute any leaf to the tree
    """
    indices = find_transaction_leaves(tree, transaction)
    if not indices:
        raise SumTreeError(
            "transaction is not part of this tree",
            code="transaction_not_found",
        )
    return TransactionProof(tuple(get_transfer_proof(tree, i) for i in indices))


__all__ = [
    "TransferProof",
    "TransactionProof",
    "get_inclusion_proof",
    "get_transfer_proof",
    "find_transaction_leaves",
    "get_transaction_proof",
]
