"""
sumtree utilities — Hashing helpers

This module provides:

  • Keccak-256 (pycryptodome), the hash an EVM contract computes with
    `keccak256(...)`. This is the default tree hash.
  • SHA3-256 (stdlib `hashlib`), selectable through configuration for
    deployments whose verifier uses the standardized SHA-3.
  • `get_hasher(name)` to resolve a configured algorithm name.

The tree hash is applied to the raw encoded payload for leaves and to
`left.digest || right.digest` for parents. It must match the on-chain
verifier bit for bit; pick the algorithm once per deployment.

All functions return raw 32-byte digests. `*_hex` variants return lowercase
"0x" hex.
"""

from __future__ import annotations

from hashlib import sha3_256 as _sha3_256
from typing import Callable, Dict, Union

from Crypto.Hash import keccak as _keccak

from ..errors import ConfigError

BytesLike = Union[bytes, bytearray, memoryview]
HashFn = Callable[[bytes], bytes]

# ------------------------------ Basic wrappers -------------------------------


def keccak256(data: BytesLike) -> bytes:
    """Return Keccak-256(bytes(data))."""
    h = _keccak.new(digest_bits=256)
    h.update(_b(data))
    return h.digest()


def keccak256_hex(data: BytesLike) -> str:
    """Return '0x' + lowercase hex of Keccak-256(bytes(data))."""
    return "0x" + keccak256(data).hex()


def sha3_256(data: BytesLike) -> bytes:
    """Return SHA3-256(bytes(data))."""
    return _sha3_256(_b(data)).digest()


def sha3_256_hex(data: BytesLike) -> str:
    """Return '0x' + lowercase hex of SHA3-256(bytes(data))."""
    return "0x" + _sha3_256(_b(data)).hexdigest()


# ------------------------------ Registry -------------------------------------

HASHERS: Dict[str, HashFn] = {
    "keccak256": keccak256,
    "sha3_256": sha3_256,
}

DEFAULT_HASH = "keccak256"


def get_hasher(name: str = DEFAULT_HASH) -> HashFn:
    """
    Resolve a hash algorithm by name ("keccak256" or "sha3_256").

    Raises:
        ConfigError for unknown names.
    """
    key = (name or DEFAULT_HASH).strip().lower().replace("-", "_")
    if key == "keccak_256":
        key = "keccak256"
    try:
        return HASHERS[key]
    except KeyError:
        raise ConfigError(
            f"unsupported hash algorithm {name!r}",
            data={"supported": sorted(HASHERS)},
        ) from None


# ------------------------------- Misc helpers --------------------------------


def _b(x: BytesLike) -> bytes:
    """Coerce common byte-likes (bytes/bytearray/memoryview) to `bytes`."""
    if isinstance(x, bytes):
        return x
    if isinstance(x, bytearray):
        return bytes(x)
    if isinstance(x, memoryview):
        return x.tobytes()
    raise TypeError(f"expected bytes-like input, got {type(x).__name__}")


__all__ = [
    "HashFn",
    "keccak256",
    "keccak256_hex",
    "sha3_256",
    "sha3_256_hex",
    "HASHERS",
    "DEFAULT_HASH",
    "get_hasher",
]
