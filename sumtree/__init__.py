"""
sumtree — Plasma Merkle sum tree

A Merkle sum tree whose leaves are coin-range transfers. The root commits to
a set of non-overlapping ranges; per-transfer proofs show that a range is
included, and the sums along a proof bound the span a leaf owns, which makes
ranges in the gaps provably absent.

  • node.py      : Node (digest, sum), EMPTY_NODE, parent combination
  • tree.py      : Generic engine (levels, root, inclusion paths) with a
                   pluggable leaf parser
  • plasma.py    : Plasma leaf parser (boundary sum rule)
  • proofs.py    : TransferProof / TransactionProof builders
  • verify.py    : Proof verification (range + root + signature hook)
  • codec.py     : Proof wire format
  • models.py    : Transfer / Signature / Transaction records
  • config.py    : Coin bounds and hash selection (env driven)

Typical usage
-------------
    from sumtree import plasma, proofs, verify

    tree = plasma.build_plasma_tree(transactions)
    proof = proofs.get_transaction_proof(tree, transactions[0])
    ok = verify.check_transaction_proof(transactions[0], proof, tree.root())

Submodules load lazily to keep `import sumtree` cheap.
"""

from __future__ import annotations

from importlib import import_module
from typing import Any

from .version import __version__

_SUBMODULES = (
    "codec",
    "config",
    "constants",
    "errors",
    "models",
    "node",
    "plasma",
    "proofs",
    "tree",
    "utils",
    "verify",
)


def __getattr__(name: str) -> Any:
    """
    Lazily resolve well-known submodules, e.g. `sumtree.tree`.
    """
    if name in _SUBMODULES:
        return import_module(f"{__name__}.{name}")
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + list(_SUBMODULES))


__all__ = ["__version__", *_SUBMODULES]
