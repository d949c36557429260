"""
sumtree — Generic Merkle sum tree engine

The engine builds every level of a Merkle sum tree once, at construction,
from an ordered list of source records. It knows nothing about Plasma: the
mapping from source records to leaf nodes is a pluggable *leaf parser*.

Leaf parsers
------------
A leaf parser is any callable

    parser(records: Sequence[Any], hash_fn: HashFn) -> Sequence[ParsedLeaf]

returning leaves in tree order. `parse_sum_leaves` (below) handles plain
`(data, sum)` records; `sumtree.plasma.PlasmaLeafParser` implements the
boundary-sum rule for coin-range transfers.

Levels
------
    levels[0]   leaf nodes
    levels[k]   ceil(len(levels[k-1]) / 2) parents, odd levels padded with
                EMPTY_NODE on the right
    levels[-1]  [root]

An empty tree has `levels == ((),)` and no root. Trees are frozen; build a
new one for a different leaf set.

Typical usage
-------------
    t = SumTree([SumLeaf(b"a", 3), SumLeaf(b"b", 5)])
    root = t.root()
    path = t.inclusion_proof(1)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, NamedTuple, Optional, Sequence, Tuple

from .config import SumTreeConfig, get_config
from .errors import InvalidLeafIndex
from .node import EMPTY_NODE, Node, combine, make_leaf
from .utils.hash import HashFn

log = logging.getLogger(__name__)


# --------------------------------------------------------------------------- #
# Leaves
# --------------------------------------------------------------------------- #


@dataclass(frozen=True)
class ParsedLeaf:
    """
    A leaf node plus where it came from.

      • source_index   : position of the owning record in `SumTree.leaves`
      • transfer_index : position of the entry inside that record (0 for
                         records that yield a single leaf)
    """

    node: Node
    source_index: int
    transfer_index: int = 0


LeafParser = Callable[[Sequence[Any], HashFn], Sequence[ParsedLeaf]]


class SumLeaf(NamedTuple):
    """Plain record for the generic parser: data is hashed, sum is taken as is."""

    data: bytes
    sum: int


def parse_sum_leaves(records: Sequence[Any], hash_fn: HashFn) -> List[ParsedLeaf]:
    """Generic parser: one leaf per `(data, sum)` record, in input order."""
    return [
        ParsedLeaf(node=make_leaf(bytes(data), int(s), hash_fn=hash_fn), source_index=i)
        for i, (data, s) in enumerate(records)
    ]


# --------------------------------------------------------------------------- #
# Level generation
# --------------------------------------------------------------------------- #


def build_levels(leaves: Sequence[Node], *, hash_fn: HashFn) -> List[List[Node]]:
    """
    Compute all levels bottom-up. Each pass halves the level (rounding up), so
    the loop ends at a single node.
    """
    cur: List[Node] = list(leaves)
    levels: List[List[Node]] = [cur]
    while len(cur) > 1:
        nxt: List[Node] = []
        n = len(cur)
        for i in range(0, n, 2):
            right = cur[i + 1] if i + 1 < n else EMPTY_NODE
            nxt.append(combine(cur[i], right, hash_fn=hash_fn))
        levels.append(nxt)
        cur = nxt
    return levels


# --------------------------------------------------------------------------- #
# Tree
# --------------------------------------------------------------------------- #


class SumTree:
    """
    Immutable Merkle sum tree.

    Parameters
    ----------
    leaves : sequence of source records (None or empty → empty tree)
    parser : leaf parser turning records into ordered ParsedLeaf entries
    config : coordinate bounds and hash; defaults to `get_config()`
    """

    def __init__(
        self,
        leaves: Optional[Sequence[Any]] = None,
        *,
        parser: LeafParser = parse_sum_leaves,
        config: Optional[SumTreeConfig] = None,
    ) -> None:
        self._config = config or get_config()
        self._hash_fn = self._config.hash_fn
        self._leaves: Tuple[Any, ...] = tuple(leaves or ())
        parsed = parser(self._leaves, self._hash_fn) if self._leaves else []
        self._parsed: Tuple[ParsedLeaf, ...] = tuple(parsed)
        levels = build_levels([p.node for p in self._parsed], hash_fn=self._hash_fn)
        self._levels: Tuple[Tuple[Node, ...], ...] = tuple(tuple(lv) for lv in levels)
        log.debug("built sum tree leaves=%d height=%d", len(self._parsed), len(self._levels))

    # ------------------------------------------------------------------ #
    # Accessors
    # ------------------------------------------------------------------ #

    @property
    def config(self) -> SumTreeConfig:
        return self._config

    @property
    def hash_fn(self) -> HashFn:
        return self._hash_fn

    @property
    def leaves(self) -> Tuple[Any, ...]:
        """Source records, in the order given at construction."""
        return self._leaves

    @property
    def parsed_leaves(self) -> Tuple[ParsedLeaf, ...]:
        """Parsed leaves in tree order (aligned with levels[0])."""
        return self._parsed

    @property
    def levels(self) -> Tuple[Tuple[Node, ...], ...]:
        return self._levels

    @property
    def leaf_count(self) -> int:
        return len(self._levels[0])

    @property
    def depth(self) -> int:
        """Number of siblings in every inclusion proof."""
        return len(self._levels) - 1

    def __len__(self) -> int:
        return self.leaf_count

    def root(self) -> Optional[Node]:
        """The root node, or None for an empty tree."""
        top = self._levels[-1]
        return top[0] if top else None

    # ------------------------------------------------------------------ #
    # Proof paths
    # ------------------------------------------------------------------ #

    def check_index(self, index: int) -> int:
        """Validate a leaf index, raising InvalidLeafIndex when out of range."""
        n = self.leaf_count
        if not isinstance(index, int) or isinstance(index, bool) or index < 0 or index >= n:
            raise InvalidLeafIndex(
                f"Invalid leaf index {index!r}, tree has {n} leaves",
                data={"index": index, "leaves": n},
            )
        return index

    def inclusion_proof(self, index: int) -> List[Node]:
        """
        Sibling nodes from the leaf's direct sibling up to the root's child
        level. Missing siblings (odd levels) are EMPTY_NODE.
        """
        pos = self.check_index(index)
        branch: List[Node] = []
        for level in self._levels[:-1]:
            sib = pos ^ 1
            branch.append(level[sib] if sib < len(level) else EMPTY_NODE)
            pos //= 2
        return branch


__all__ = [
    "ParsedLeaf",
    "LeafParser",
    "SumLeaf",
    "parse_sum_leaves",
    "build_levels",
    "SumTree",
]
