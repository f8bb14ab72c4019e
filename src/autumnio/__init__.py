"""Core library for autumn-io.

Resource discovery under a namespace (directories and zip archives) and
placeholder-aware property resolution, used by the CLI and by containers
that build components from scanned resources.
"""

from .converters import ValueType
from .properties import PropertyResolver
from .resource import Resource
from .scanner import ResourceScanner, module_name

__all__ = [
    "PropertyResolver",
    "Resource",
    "ResourceScanner",
    "ValueType",
    "module_name",
]
