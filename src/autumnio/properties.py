from __future__ import annotations

import logging
import os
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .converters import Converter, build_registry, convert
from .errors import PropertyCycleError, PropertyDepthError, PropertyNotFoundError
from .expr import PropertyExpr, parse_property_expr

log = logging.getLogger(__name__)

_Chain = Tuple[str, ...]

# placeholder expansions allowed within one lookup
MAX_DEPTH = 64


class PropertyResolver:
    """Read-only view over environment variables merged with explicit settings.

    Lookups expand ``${key}`` and ``${key:default}`` placeholders, both in the
    queried key and in stored values, and can convert the result to a typed
    value. The store and the converter registry are fixed once the constructor
    returns, so one instance can be shared between threads.
    """

    def __init__(
        self,
        settings: Optional[Mapping[str, str]] = None,
        environ: Optional[Mapping[str, str]] = None,
        converters: Optional[Mapping[Any, Converter]] = None,
    ) -> None:
        props: Dict[str, str] = dict(os.environ if environ is None else environ)
        # explicit settings win over the environment
        props.update(settings or {})
        self._properties: Mapping[str, str] = MappingProxyType(props)
        self._converters = build_registry(converters)

        if log.isEnabledFor(logging.DEBUG):
            for key in sorted(props):
                log.debug("PropertyResolver: %s = %s", key, props[key])

    @property
    def properties(self) -> Mapping[str, str]:
        return self._properties

    def keys(self) -> List[str]:
        return sorted(self._properties)

    def contains_property(self, key: str) -> bool:
        return key in self._properties

    def get_property(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """Resolve ``key``; fall back to ``default`` (itself expanded) if absent."""
        if default is None:
            return self._get(key, ())
        return self._get_or_default(key, default, ())

    def get_typed_property(self, key: str, value_type: Any, default: Any = None) -> Any:
        """Resolve ``key`` and convert it; ``default`` is returned unconverted."""
        value = self._get(key, ())
        if value is None:
            return default
        return self.convert(value_type, value)

    def get_required_property(self, key: str) -> str:
        return self._require(key, ())

    def convert(self, value_type: Any, value: str) -> Any:
        return convert(self._converters, value_type, value)

    def _get(self, key: str, chain: _Chain, depth: int = 0) -> Optional[str]:
        expr = parse_property_expr(key)
        if expr is not None:
            return self._resolve_expr(expr, chain, depth)

        if key in chain:
            raise PropertyCycleError(chain + (key,))
        value = self._properties.get(key)
        if value is None:
            return None
        return self._parse_value(value, chain + (key,), depth)

    def _get_or_default(self, key: str, default: str, chain: _Chain, depth: int = 0) -> str:
        value = self._get(key, chain, depth)
        if value is None:
            return self._parse_value(default, chain, depth)
        return value

    def _require(self, key: str, chain: _Chain, depth: int = 0) -> str:
        value = self._get(key, chain, depth)
        if value is None:
            raise PropertyNotFoundError(key)
        return value

    def _parse_value(self, value: str, chain: _Chain, depth: int) -> str:
        expr = parse_property_expr(value)
        if expr is None:
            return value
        return self._resolve_expr(expr, chain, depth)

    def _resolve_expr(self, expr: PropertyExpr, chain: _Chain, depth: int) -> str:
        if depth >= MAX_DEPTH:
            raise PropertyDepthError(expr.key, MAX_DEPTH)
        if expr.default_value is not None:
            return self._get_or_default(expr.key, expr.default_value, chain, depth + 1)
        return self._require(expr.key, chain, depth + 1)
