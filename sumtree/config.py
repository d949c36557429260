"""
sumtree configuration.

The generating side (operator building block trees) and the verifying side
(clients, watchers, the on-chain contract) must agree on:
- the coin coordinate space bounds (MIN_COIN_ID / MAX_COIN_ID)
- the tree hash algorithm

All fields have defaults matching `sumtree.constants` and can be overridden
via environment variables. Nothing here imports heavy dependencies.

Environment variables (all optional):

  SUMTREE_MIN_COIN_ID=0
  SUMTREE_MAX_COIN_ID=0xffffffffffffffffffffffffffffffff
  SUMTREE_HASH=keccak256                # or sha3_256

"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass
from functools import lru_cache
from typing import Dict, List

from .constants import MAX_COIN_ID, MIN_COIN_ID, SUM_BYTES
from .errors import ConfigError
from .utils.hash import DEFAULT_HASH, HashFn, get_hasher


# ------------------------------- helpers ------------------------------------


def _getenv(key: str, default: str | None = None) -> str | None:
    v = os.environ.get(key)
    return v if v is not None and v.strip() != "" else default


def _getenv_int(key: str, default: int) -> int:
    v = _getenv(key)
    if v is None:
        return default
    vv = v.strip().lower().replace("_", "")
    base = 16 if vv.startswith("0x") else 10
    try:
        return int(vv, base)
    except ValueError as e:
        raise ConfigError(f"Invalid int for {key}: {v!r}") from e


# ------------------------------- config -------------------------------------


@dataclass(frozen=True)
class SumTreeConfig:
    """
    Coordinate-space bounds and hash algorithm.

    - min_coin_id / max_coin_id: bounds used by the boundary-leaf sum rule
    - hash_name: "keccak256" (EVM compatible) or "sha3_256"
    """
    min_coin_id: int = MIN_COIN_ID
    max_coin_id: int = MAX_COIN_ID
    hash_name: str = DEFAULT_HASH

    def validate(self) -> None:
        limit = (1 << (8 * SUM_BYTES)) - 1
        if not (0 <= self.min_coin_id < self.max_coin_id <= limit):
            raise ConfigError(
                "Require 0 <= min_coin_id < max_coin_id <= 2**128 - 1",
                data={"min_coin_id": self.min_coin_id, "max_coin_id": self.max_coin_id},
            )
        get_hasher(self.hash_name)

    @property
    def hash_fn(self) -> HashFn:
        return get_hasher(self.hash_name)

    def to_dict(self) -> Dict[str, object]:
        return asdict(self)


# ------------------------------- loader -------------------------------------


def _load_from_env() -> SumTreeConfig:
    cfg = SumTreeConfig(
        min_coin_id=_getenv_int("SUMTREE_MIN_COIN_ID", MIN_COIN_ID),
        max_coin_id=_getenv_int("SUMTREE_MAX_COIN_ID", MAX_COIN_ID),
        hash_name=_getenv("SUMTREE_HASH", DEFAULT_HASH) or DEFAULT_HASH,
    )
    cfg.validate()
    return cfg


@lru_cache(maxsize=1)
def get_config() -> SumTreeConfig:
    """
    Load and validate configuration (cached). Clear the cache in tests
    via `get_config.cache_clear()` to observe env changes.
    """
    return _load_from_env()


def format_config(cfg: SumTreeConfig | None = None) -> str:
    cfg = cfg or get_config()
    lines: List[str] = [
        f"min_coin_id: {cfg.min_coin_id}",
        f"max_coin_id: {hex(cfg.max_coin_id)}",
        f"hash_name: {cfg.hash_name}",
    ]
    return "\n".join(lines)


__all__ = [
    "SumTreeConfig",
    "get_config",
    "format_config",
]
