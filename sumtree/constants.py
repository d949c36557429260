"""
sumtree constants.

Fixed widths of the proof wire format and the default bounds of the coin
coordinate space. Runtime overrides of the bounds live in `sumtree.config`;
the widths are part of the wire format and never change.
"""

from __future__ import annotations

# ------------------------------ wire widths ---------------------------------

#: Digest width of every node (bytes).
DIGEST_BYTES: int = 32
#: Width of a serialized sum, parsed sum or leaf index (bytes).
SUM_BYTES: int = 16
#: One serialized node / proof sibling: digest || sum.
NODE_BYTES: int = DIGEST_BYTES + SUM_BYTES
#: Signature record: v(1) || r(32) || s(32).
SIGNATURE_BYTES: int = 65
#: Width of the element count preceding variable-length sequences.
COUNT_BYTES: int = 1
#: Largest element count a sequence may carry.
MAX_COUNT: int = (1 << (8 * COUNT_BYTES)) - 1

# ------------------------------ record widths -------------------------------

ADDRESS_BYTES: int = 20
TOKEN_BYTES: int = 4
COIN_BYTES: int = 12
BLOCK_BYTES: int = 4
#: sender || recipient || token || start || end
TRANSFER_BYTES: int = 2 * ADDRESS_BYTES + TOKEN_BYTES + 2 * COIN_BYTES

# ------------------------------ coin space ----------------------------------

#: Lowest addressable coin id.
MIN_COIN_ID: int = 0
#: Highest addressable coin id (largest value that fits SUM_BYTES).
MAX_COIN_ID: int = (1 << (8 * SUM_BYTES)) - 1

# ------------------------------ sentinels -----------------------------------

#: Digest of the empty padding node.
EMPTY_DIGEST: bytes = bytes(DIGEST_BYTES)


__all__ = [
    "DIGEST_BYTES",
    "SUM_BYTES",
    "NODE_BYTES",
    "SIGNATURE_BYTES",
    "COUNT_BYTES",
    "MAX_COUNT",
    "ADDRESS_BYTES",
    "TOKEN_BYTES",
    "COIN_BYTES",
    "BLOCK_BYTES",
    "TRANSFER_BYTES",
    "MIN_COIN_ID",
    "MAX_COIN_ID",
    "EMPTY_DIGEST",
]
