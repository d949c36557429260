"""
sumtree — Node structure and parent combination

Every tree position stores a `Node`: a 32-byte digest and a non-negative
integer sum.

Combination rule
----------------
    parent.digest = H( left.digest || right.digest )
    parent.sum    = left.sum + right.sum

where H is the configured tree hash (Keccak-256 by default, see
`sumtree.utils.hash`).

Padding
-------
A level with an odd node count is right-padded with `EMPTY_NODE`
(digest = 0x00 * 32, sum = 0). It is an ordinary value: it is hashed like
any other sibling and contributes 0 to every ancestor sum.

Wire form
---------
    node := digest(32) || sum(16, big-endian)

Sums are unbounded Python ints in memory; the 128-bit limit applies when a
node is serialized.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .constants import DIGEST_BYTES, EMPTY_DIGEST, NODE_BYTES, SUM_BYTES
from .errors import MalformedProof, NodeError
from .utils.bytes import be_to_uint, bytes_to_hex, hex_to_bytes, uint_to_be
from .utils.hash import HashFn, keccak256


# --------------------------------------------------------------------------- #
# Node type
# --------------------------------------------------------------------------- #


@dataclass(frozen=True)
class Node:
    """
    Sum tree node.

    Attributes:
        digest: 32-byte hash (or the all-zero digest of EMPTY_NODE)
        sum:    non-negative integer
    """

    digest: bytes
    sum: int

    def __post_init__(self) -> None:  # type: ignore[override]
        d = self.digest
        if not isinstance(d, (bytes, bytearray, memoryview)):
            raise NodeError("Node.digest must be bytes-like")
        if len(d) != DIGEST_BYTES:
            raise NodeError(f"Node.digest must be {DIGEST_BYTES} bytes, got {len(d)}")
        if not isinstance(d, bytes):
            object.__setattr__(self, "digest", bytes(d))
        if int(self.sum) < 0:
            raise NodeError(f"Node.sum must be non-negative, got {self.sum}")
        object.__setattr__(self, "sum", int(self.sum))

    @property
    def is_empty(self) -> bool:
        return self.sum == 0 and self.digest == EMPTY_DIGEST

    def encode(self) -> bytes:
        """Serialize as digest(32) || sum(16)."""
        return self.digest + uint_to_be(self.sum, SUM_BYTES, field="Node.sum")

    @classmethod
    def decode(cls, data: bytes) -> "Node":
        """Parse a 48-byte node record. Raises MalformedProof on size mismatch."""
        b = bytes(data)
        if len(b) != NODE_BYTES:
            raise MalformedProof(
                f"node record must be {NODE_BYTES} bytes, got {len(b)}",
                data={"size": len(b)},
            )
        return cls(digest=b[:DIGEST_BYTES], sum=be_to_uint(b[DIGEST_BYTES:]))

    def to_dict(self) -> Dict[str, Any]:
        return {"digest": bytes_to_hex(self.digest), "sum": str(self.sum)}

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Node":
        return cls(digest=hex_to_bytes(d["digest"]), sum=int(d["sum"]))

    def __repr__(self) -> str:  # compact debug view
        return f"Node(digest={bytes_to_hex(self.digest)[:10]}…, sum={self.sum})"


EMPTY_NODE = Node(digest=EMPTY_DIGEST, sum=0)


# --------------------------------------------------------------------------- #
# Constructors
# --------------------------------------------------------------------------- #


def make_leaf(payload: bytes, leaf_sum: int, *, hash_fn: HashFn = keccak256) -> Node:
    """Leaf node: digest = H(payload)."""
    return Node(digest=hash_fn(payload), sum=leaf_sum)


def combine(left: Node, right: Optional[Node] = None, *, hash_fn: HashFn = keccak256) -> Node:
    """
    Parent of `left` and `right`. A missing right child is EMPTY_NODE.
    """
    if right is None:
        right = EMPTY_NODE
    return Node(digest=hash_fn(left.digest + right.digest), sum=left.sum + right.sum)


__all__ = [
    "Node",
    "EMPTY_NODE",
    "make_leaf",
    "combine",
]
