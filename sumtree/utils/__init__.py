"""
sumtree utilities package

Small, reusable helpers used across the package:

  - sumtree.utils.bytes : hex and fixed-width integer helpers, buffer reader
  - sumtree.utils.hash  : Keccak-256 / SHA3-256 wrappers and hasher lookup

Submodules load lazily so importing `sumtree.utils` is cheap:

    from sumtree import utils
    h = utils.hash.keccak256(b"...")
"""
from __future__ import annotations

from importlib import import_module
from typing import Any

_SUBMODULES = ("bytes", "hash")


def __getattr__(name: str) -> Any:
    """Lazily import and return one of the known utility submodules."""
    if name in _SUBMODULES:
        return import_module(f"{__name__}.{name}")
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


def __dir__() -> list[str]:
    return sorted(list(globals().keys()) + list(_SUBMODULES))


__all__ = list(_SUBMODULES)
