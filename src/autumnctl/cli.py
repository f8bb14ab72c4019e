from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import click
from tabulate import tabulate

from autumnio import classpath
from autumnio.converters import ValueType
from autumnio.errors import (
    AutumnError,
    format_config_error,
    format_error_message,
    suggest_troubleshooting_steps,
)
from autumnio.properties import PropertyResolver
from autumnio.scanner import ResourceScanner, module_name
from autumnio.settings import ConfigError, load_settings, settings_from_pairs


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--json-output",
    "json_output",
    is_flag=True,
    help="Output JSON instead of tables (pretty-printed)",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Enable verbose logging to stderr (what the CLI is doing)",
)
@click.pass_context
def cli(ctx: click.Context, json_output: bool, verbose: bool) -> None:
    """autumn-io CLI.

    Scan namespaces for resources across directories and zip archives, and
    query placeholder-aware properties built from the environment and a
    settings file. JSON output is always pretty-printed.
    """
    ctx.ensure_object(dict)
    ctx.obj["json"] = json_output
    ctx.obj["verbose"] = verbose

    # Configure logging once per process
    level = logging.INFO if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )


def _fail(ctx: click.Context, operation: str, e: Exception, context: Dict[str, Any]) -> None:
    click.echo(format_error_message(operation, e, context), err=True)
    if ctx.obj.get("verbose"):
        suggestions = suggest_troubleshooting_steps(operation, e)
        if suggestions:
            click.echo("\nTroubleshooting suggestions:", err=True)
            for suggestion in suggestions[:3]:  # Show top 3 suggestions
                click.echo(f"  • {suggestion}", err=True)
    raise SystemExit(2)


path_option = click.option(
    "--path",
    "paths",
    multiple=True,
    type=click.Path(),
    help="Directory or zip archive to search (repeatable); defaults to sys.path",
)


# RESOURCES commands


@cli.group()
@click.pass_context
def resources(ctx: click.Context) -> None:  # noqa: D401
    """Resource discovery commands."""
    pass


@resources.command("mounts")
@click.argument("namespace")
@path_option
@click.pass_context
def resources_mounts(ctx: click.Context, namespace: str, paths: Tuple[str, ...]) -> None:
    """List every location that mounts NAMESPACE."""
    log = logging.getLogger("autumnctl.resources")
    scanner = ResourceScanner(namespace, paths or None)
    try:
        log.info("Resolving mounts for '%s'", namespace)
        mounts = scanner.mounts()
    except AutumnError as e:
        _fail(ctx, "list mounts", e, {"namespace": namespace})

    if ctx.obj.get("json"):
        click.echo(json.dumps({"namespace": namespace, "mounts": mounts}, indent=2, sort_keys=True))
        return

    if not mounts:
        click.echo("No mounts found")
        return

    click.echo(tabulate([[m] for m in mounts], headers=["MOUNT"]))


@resources.command("scan")
@click.argument("namespace")
@path_option
@click.option("--suffix", help="Only list resources whose name ends with this suffix")
@click.option("--modules", is_flag=True, help="List Python module names instead of files")
@click.pass_context
def resources_scan(
    ctx: click.Context,
    namespace: str,
    paths: Tuple[str, ...],
    suffix: Optional[str],
    modules: bool,
) -> None:
    """Scan NAMESPACE (e.g. com.example.pkg) for resources."""
    log = logging.getLogger("autumnctl.resources")
    scanner = ResourceScanner(namespace, paths or None)

    def mapper(res):
        if suffix and not res.name.endswith(suffix):
            return None
        if modules:
            return module_name(res)
        return res

    try:
        log.info("Scanning namespace '%s'", namespace)
        found = scanner.scan(mapper)
        log.info("Found %d resources", len(found))
    except AutumnError as e:
        _fail(ctx, "scan resources", e, {"namespace": namespace})

    if ctx.obj.get("json"):
        if modules:
            out = {"namespace": namespace, "modules": found}
        else:
            out = {
                "namespace": namespace,
                "resources": [{"name": r.name, "location": r.location} for r in found],
            }
        click.echo(json.dumps(out, indent=2, sort_keys=True))
        return

    if not found:
        click.echo("No resources found")
        return

    if modules:
        click.echo(tabulate([[m] for m in found], headers=["MODULE"]))
    else:
        rows = [[r.name, r.location] for r in found]
        log.info("Rendering %d resources", len(rows))
        click.echo(tabulate(rows, headers=["NAME", "LOCATION"]))


@resources.command("cat")
@click.argument("resource_path")
@path_option
@click.pass_context
def resources_cat(ctx: click.Context, resource_path: str, paths: Tuple[str, ...]) -> None:
    """Print the text of RESOURCE_PATH (e.g. com/example/app.yaml)."""
    try:
        text = classpath.read_text(resource_path, search_path=paths or None)
    except AutumnError as e:
        _fail(ctx, "read resource", e, {"path": resource_path})

    if ctx.obj.get("json"):
        click.echo(json.dumps({"path": resource_path, "content": text}, indent=2, sort_keys=True))
        return
    click.echo(text, nl=False)


# PROPS commands


settings_option = click.option(
    "--settings",
    "settings_file",
    type=click.Path(dir_okay=False, path_type=Path),
    help="YAML settings file; defaults to AUTUMN_CONFIG or the XDG location",
)
set_option = click.option(
    "--set",
    "pairs",
    multiple=True,
    help="Explicit setting as key=value (repeatable); wins over the settings file",
)


def _load_resolver(settings_file: Optional[Path], pairs: Tuple[str, ...], no_env: bool = False) -> PropertyResolver:
    log = logging.getLogger("autumnctl.props")
    log.info("Loading settings...")
    settings = load_settings(settings_file)
    settings.update(settings_from_pairs(pairs))
    log.info("Loaded %d settings", len(settings))
    return PropertyResolver(settings, environ={} if no_env else None)


@cli.group()
@click.pass_context
def props(ctx: click.Context) -> None:  # noqa: D401
    """Property resolution commands."""
    pass


@props.command("get")
@click.argument("key")
@click.option(
    "--type",
    "value_type",
    type=click.Choice([t.value for t in ValueType]),
    help="Convert the value to this type",
)
@click.option("--default", "default", help="Fallback when KEY is not defined (placeholders allowed)")
@settings_option
@set_option
@click.pass_context
def props_get(
    ctx: click.Context,
    key: str,
    value_type: Optional[str],
    default: Optional[str],
    settings_file: Optional[Path],
    pairs: Tuple[str, ...],
) -> None:
    """Resolve KEY, which may itself be a ${key:default} placeholder."""
    try:
        resolver = _load_resolver(settings_file, pairs)
    except ConfigError as e:
        click.echo(format_config_error(e), err=True)
        raise SystemExit(2)

    try:
        value: Any = resolver.get_property(key, default)
        if value is None:
            click.echo(f"Property not found: {key}", err=True)
            raise SystemExit(1)
        if value_type:
            value = resolver.convert(ValueType(value_type), value)
    except AutumnError as e:
        _fail(ctx, "resolve property", e, {"key": key})

    if ctx.obj.get("json"):
        click.echo(json.dumps({"key": key, "value": value}, indent=2, sort_keys=True, default=str))
        return
    click.echo(str(value))


@props.command("list")
@settings_option
@set_option
@click.option("--no-env", is_flag=True, help="Leave environment variables out of the store")
@click.pass_context
def props_list(
    ctx: click.Context,
    settings_file: Optional[Path],
    pairs: Tuple[str, ...],
    no_env: bool,
) -> None:
    """List raw (unexpanded) properties."""
    try:
        resolver = _load_resolver(settings_file, pairs, no_env)
    except ConfigError as e:
        click.echo(format_config_error(e), err=True)
        raise SystemExit(2)

    if ctx.obj.get("json"):
        click.echo(json.dumps({"properties": dict(resolver.properties)}, indent=2, sort_keys=True))
        return

    rows = [[k, resolver.properties[k]] for k in resolver.keys()]
    click.echo(tabulate(rows, headers=["KEY", "VALUE"]))


def main() -> None:  # entry point
    cli(standalone_mode=True)


if __name__ == "__main__":  # pragma: no cover
    main()
