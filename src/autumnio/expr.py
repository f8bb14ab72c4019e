"""Parsing of ``${key}`` / ``${key:default}`` placeholder expressions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .errors import InvalidExpressionError

PREFIX = "${"
SUFFIX = "}"
SEPARATOR = ":"


@dataclass(frozen=True)
class PropertyExpr:
    key: str
    default_value: Optional[str] = None


def is_placeholder(text: str) -> bool:
    return len(text) >= len(PREFIX) + len(SUFFIX) and text.startswith(PREFIX) and text.endswith(SUFFIX)


def parse_property_expr(text: str) -> Optional[PropertyExpr]:
    """Parse ``text`` as a placeholder, or return None if it is not one.

    The first ``:`` splits the key from the default; the default keeps any
    further ``:`` verbatim. An empty key raises InvalidExpressionError.
    """
    if not is_placeholder(text):
        return None
    inner = text[len(PREFIX):-len(SUFFIX)]
    key, sep, default = inner.partition(SEPARATOR)
    if not key:
        raise InvalidExpressionError(text)
    return PropertyExpr(key, default if sep else None)
