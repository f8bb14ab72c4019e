"""Error types and user-facing error formatting for autumnio."""

from __future__ import annotations

from typing import Any


class AutumnError(Exception):
    """Base class for every error raised by autumnio."""


class ResourceError(AutumnError):
    pass


class ResourceIOError(ResourceError):
    """Enumerating mounts, opening an archive or reading a file failed."""


class ResourceNotFoundError(ResourceIOError):
    def __init__(self, path: str) -> None:
        super().__init__(f"Resource not found on search path: {path}")
        self.path = path


class MalformedLocationError(ResourceError):
    def __init__(self, location: str, reason: str = "unsupported location") -> None:
        super().__init__(f"Malformed resource location '{location}': {reason}")
        self.location = location


class PropertyError(AutumnError):
    pass


class InvalidExpressionError(PropertyError, ValueError):
    def __init__(self, expression: str) -> None:
        super().__init__(f"Invalid key in placeholder expression: {expression}")
        self.expression = expression


class PropertyNotFoundError(PropertyError, LookupError):
    def __init__(self, key: str) -> None:
        super().__init__(f"Property '{key}' not found.")
        self.key = key


class UnsupportedTypeError(PropertyError, TypeError):
    def __init__(self, value_type: Any) -> None:
        name = getattr(value_type, "__name__", None) or str(value_type)
        super().__init__(f"Unsupported value type: {name}")
        self.value_type = value_type


class ConversionError(PropertyError, ValueError):
    def __init__(self, value: str, value_type: Any, reason: str) -> None:
        super().__init__(f"Cannot convert '{value}' to {value_type}: {reason}")
        self.value = value
        self.value_type = value_type


class PropertyCycleError(PropertyError):
    def __init__(self, chain: tuple[str, ...]) -> None:
        super().__init__("Placeholder cycle detected: " + " -> ".join(chain))
        self.chain = chain


class PropertyDepthError(PropertyError):
    def __init__(self, key: str, limit: int) -> None:
        super().__init__(f"Placeholder expansion of '{key}' exceeded {limit} levels")
        self.key = key
        self.limit = limit


def format_error_message(operation: str, error: Exception, context: dict[str, Any] | None = None) -> str:
    """Format a user-friendly error message based on the exception type and context."""
    error_str = str(error)
    context = context or {}

    if isinstance(error, ResourceNotFoundError):
        return (
            f"Resource '{error.path}' was not found in any search-path entry. "
            f"Original error: {error_str}"
        )

    if isinstance(error, MalformedLocationError):
        return (
            f"Mount location '{error.location}' could not be parsed. "
            f"Only directory and zip archive mounts are supported. "
            f"Original error: {error_str}"
        )

    if isinstance(error, ResourceIOError):
        namespace = context.get("namespace", "namespace")
        cause = error.__cause__
        detail = f" ({cause})" if cause is not None else ""
        return f"I/O failure while scanning {namespace}{detail}. Original error: {error_str}"

    if isinstance(error, PropertyNotFoundError):
        return (
            f"Property '{error.key}' is not defined in the environment or settings. "
            f"Original error: {error_str}"
        )

    if isinstance(error, PropertyCycleError):
        return (
            f"Property placeholders reference each other in a loop. "
            f"Original error: {error_str}"
        )

    if isinstance(error, PropertyDepthError):
        return (
            f"Property placeholders for '{error.key}' are nested too deeply. "
            f"Original error: {error_str}"
        )

    if isinstance(error, (InvalidExpressionError, UnsupportedTypeError, ConversionError)):
        key = context.get("key", "property")
        return f"Cannot read {key}. Original error: {error_str}"

    # Generic error with helpful context
    return f"Failed to {operation}: {error_str}"


def suggest_troubleshooting_steps(operation: str, error: Exception) -> list[str]:
    """Suggest troubleshooting steps based on the operation and error."""
    suggestions = []

    if isinstance(error, ResourceNotFoundError):
        suggestions.extend([
            "Check the resource path spelling (use '/' separators)",
            "Add the directory or archive holding it with --path",
            "List what is visible with: autumnctl resources scan <namespace>",
        ])

    elif isinstance(error, ResourceIOError):
        suggestions.extend([
            "Verify every --path entry is readable",
            "Check that archives on the search path are valid zip files",
        ])

    elif isinstance(error, PropertyNotFoundError):
        suggestions.extend([
            "Define the key in your settings file or with --set key=value",
            "Use a default in the placeholder: ${key:default}",
            "List known keys with: autumnctl props list",
        ])

    elif isinstance(error, PropertyDepthError):
        suggestions.extend([
            "Shorten the chain of ${...} references between keys",
        ])

    elif isinstance(error, PropertyCycleError):
        suggestions.extend([
            "Break the loop by giving one of the keys a literal value",
        ])

    elif isinstance(error, (UnsupportedTypeError, ConversionError)):
        suggestions.extend([
            "Check the --type tag against: autumnctl props get --help",
            "Make sure the value uses its ISO-8601 or plain decimal form",
        ])

    if not suggestions:
        suggestions.extend([
            "Check the logs with -v/--verbose flag for more details",
            "Verify your settings file is correct",
        ])

    return suggestions


def format_config_error(error: Exception) -> str:
    """Format configuration-related error messages."""
    error_str = str(error)

    if "path not found" in error_str.lower():
        return (
            f"Settings file not found: {error_str}\n"
            "  • Fix AUTUMN_CONFIG, or\n"
            "  • Unset it to fall back to ~/.config/autumn/settings.yaml"
        )

    return f"Configuration error: {error_str}"
