"""
sumtree errors.

Typed exception hierarchy with structured metadata so a calling layer (an
RPC handler, a watcher service) can map failures without parsing messages.

Usage:

    from sumtree.errors import InvalidLeafIndex

    raise InvalidLeafIndex("Invalid leaf index", data={"index": 7, "leaves": 4})

All errors expose:
- .code   : stable machine-readable code (snake_case)
- .data   : optional structured payload (dict-like)
- .to_problem() : RFC 7807-compatible dict for JSON responses

Proof *verification* failures are not errors: the verifier returns False.
Only structurally invalid input (bad indices, malformed bytes) raises.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping, Optional


class SumTreeError(Exception):
    """
    Base class for sum tree errors.

    Subclasses set `default_code`.
    """
    default_code = "sumtree_error"

    def __init__(
        self,
        message: str = "",
        *,
        code: Optional[str] = None,
        data: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.data: Dict[str, Any] = dict(data) if data else {}

    def __str__(self) -> str:  # pragma: no cover - trivial
        if self.message:
            return f"{self.code}: {self.message}"
        return self.code

    def to_problem(self) -> Dict[str, Any]:
        """
        Render as an RFC 7807 "problem detail" object.
        """
        return {
            "type": f"urn:sumtree:{self.code}",
            "title": self.code.replace("_", " ").title(),
            "detail": self.message or None,
            "data": self.data or None,
        }


class InvalidLeafIndex(SumTreeError, IndexError):
    """
    A proof was requested for a leaf index outside [0, leaf_count).
    """
    default_code = "invalid_leaf_index"


class InvalidTransferIndex(SumTreeError, IndexError):
    """
    A transfer index does not address a transfer of the given transaction.
    """
    default_code = "invalid_transfer_index"


class NodeError(SumTreeError, ValueError):
    """
    Malformed node input (digest size, negative sum).
    """
    default_code = "invalid_node"


class EncodeError(SumTreeError, ValueError):
    """
    A value does not fit its fixed-width wire field.
    """
    default_code = "encode_error"


class DecodeError(SumTreeError, ValueError):
    """
    Bytes do not form a valid record (wrong length, trailing data).
    """
    default_code = "decode_error"


class MalformedProof(DecodeError):
    """
    Proof bytes or fields are structurally invalid (sibling size, leaf index
    that does not fit the sibling path).
    """
    default_code = "malformed_proof"


class ConfigError(SumTreeError, ValueError):
    """
    Configuration values are missing or inconsistent.
    """
    default_code = "invalid_config"


__all__ = [
    "SumTreeError",
    "InvalidLeafIndex",
    "InvalidTransferIndex",
    "NodeError",
    "EncodeError",
    "DecodeError",
    "MalformedProof",
    "ConfigError",
]
