"""
sumtree — Plasma leaf parser

Turns transactions into sum tree leaves, one leaf per transfer, sorted by
the transfer's `start` (stable: equal starts keep input order).

Sum rule
--------
A leaf's sum is the span from its own start up to the next leaf's start.
The two boundary leaves extend to the edges of the coin space instead:

    n == 1          sum = MAX_COIN_ID
    first leaf      sum = leaves[1].start - MIN_COIN_ID
    interior leaf i sum = leaves[i+1].start - leaves[i].start
    last leaf       sum = MAX_COIN_ID - leaves[n-1].start

Because the sums tile the whole coin space, a verifier that walks an
inclusion proof learns the exact span a leaf owns (the sum of the left
siblings up to the sum of everything but the right siblings). Any range
inside a gap between transfers is then provably absent without the tree
needing explicit "empty" leaves.

The leaf digest is H(payload) of the owning transaction, where the payload
is the unsigned transaction encoding (see `sumtree.models`).

Overlap and duplicates are not checked; callers must provide
non-overlapping transfers.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, NamedTuple, Optional, Sequence

from .config import SumTreeConfig, get_config
from .node import make_leaf
from .tree import ParsedLeaf, SumTree
from .utils.hash import HashFn

log = logging.getLogger(__name__)


class _Entry(NamedTuple):
    start: int
    end: int
    payload: bytes
    source_index: int
    transfer_index: int


@dataclass(frozen=True)
class PlasmaLeafParser:
    """
    Leaf parser applying the boundary-sum rule over [min_coin_id, max_coin_id].
    """

    min_coin_id: int
    max_coin_id: int

    @classmethod
    def from_config(cls, cfg: Optional[SumTreeConfig] = None) -> "PlasmaLeafParser":
        cfg = cfg or get_config()
        return cls(min_coin_id=cfg.min_coin_id, max_coin_id=cfg.max_coin_id)

    def entries(self, transactions: Sequence[Any]) -> List[_Entry]:
        """Flatten transactions into transfers, sorted by start."""
        out: List[_Entry] = []
        for src_i, tx in enumerate(transactions):
            payload = tx.payload
            for tr_i, tr in enumerate(tx.transfers):
                out.append(_Entry(int(tr.start), int(tr.end), payload, src_i, tr_i))
        out.sort(key=lambda e: e.start)
        return out

    def sums(self, entries: Sequence[_Entry]) -> List[int]:
        n = len(entries)
        if n == 0:
            return []
        if n == 1:
            return [self.max_coin_id]
        sums = [entries[1].start - self.min_coin_id]
        for i in range(1, n - 1):
            sums.append(entries[i + 1].start - entries[i].start)
        sums.append(self.max_coin_id - entries[n - 1].start)
        return sums

    def __call__(self, transactions: Sequence[Any], hash_fn: HashFn) -> List[ParsedLeaf]:
        entries = self.entries(transactions)
        leaves = [
            ParsedLeaf(
                node=make_leaf(e.payload, s, hash_fn=hash_fn),
                source_index=e.source_index,
                transfer_index=e.transfer_index,
            )
            for e, s in zip(entries, self.sums(entries))
        ]
        log.debug("parsed %d plasma leaves from %d transactions", len(leaves), len(transactions))
        return leaves


def build_plasma_tree(
    transactions: Optional[Sequence[Any]] = None,
    *,
    config: Optional[SumTreeConfig] = None,
) -> SumTree:
    """Build a sum tree over `transactions` using the Plasma leaf parser."""
    cfg = config or get_config()
    return SumTree(transactions, parser=PlasmaLeafParser.from_config(cfg), config=cfg)


__all__ = [
    "PlasmaLeafParser",
    "build_plasma_tree",
]
