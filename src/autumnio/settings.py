from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

import yaml


class ConfigError(RuntimeError):
    pass


def _stringify(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ",".join(_stringify(v) for v in value)
    return str(value)


def flatten(data: Dict[str, Any], prefix: str = "") -> Dict[str, str]:
    """Flatten nested mappings into dotted keys: ``{app: {title: x}}`` -> ``app.title``."""
    out: Dict[str, str] = {}
    for k, v in data.items():
        key = f"{prefix}.{k}" if prefix else str(k)
        if isinstance(v, dict):
            out.update(flatten(v, key))
        else:
            out[key] = _stringify(v)
    return out


def resolve_settings_path() -> Optional[Path]:
    # Highest priority: explicit override
    override = os.environ.get("AUTUMN_CONFIG")
    if override:
        p = Path(override).expanduser()
        if p.is_file():
            return p
        raise ConfigError(f"AUTUMN_CONFIG path not found: {p}")

    # XDG base dirs
    xdg_home = Path(os.environ.get("XDG_CONFIG_HOME", "~/.config")).expanduser()
    candidates = [xdg_home / "autumn" / "settings.yaml"]

    xdg_dirs = os.environ.get("XDG_CONFIG_DIRS", "/etc/xdg")
    for d in xdg_dirs.split(":"):
        if d:
            candidates.append(Path(d) / "autumn" / "settings.yaml")

    for c in candidates:
        if c.is_file():
            return c

    # settings are optional; the environment alone is a valid store
    return None


def load_settings(path: Optional[Path] = None) -> Dict[str, str]:
    """Load explicit settings as a flat ``{dotted.key: str}`` mapping.

    Placeholders are kept verbatim; the resolver expands them on lookup.
    """
    cfg_path = path or resolve_settings_path()
    if cfg_path is None:
        return {}
    try:
        data = yaml.safe_load(cfg_path.read_text()) or {}
    except OSError as e:
        raise ConfigError(str(e)) from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {cfg_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Settings file must contain a mapping at the top level: {cfg_path}")
    return flatten(data)


def settings_from_pairs(pairs: Iterable[str]) -> Dict[str, str]:
    """Parse ``key=value`` strings, as given to ``--set``."""
    out: Dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ConfigError(f"Expected key=value, got: {pair!r}")
        out[key] = value
    return out
