"""Typer-based CLI for jsonvisit.

stdout carries JSON output only. Logging goes to files
(~/.jsonvisit/logs/jsonvisit.log); user-facing errors print to stderr.
"""

import asyncio
import json
import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import typer

from jsonvisit import __version__
from jsonvisit.config import VisitorConfig
from jsonvisit.errors import JsonVisitError, WorkspaceNotFoundError
from jsonvisit.workspace.discovery import WORKSPACE_FILE_NAME, locate_workspace
from jsonvisit.workspace.orchestrator import Orchestrator, TargetSpec, parse_target
from jsonvisit.workspace.placeholders import resolve_placeholders

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_WORKSPACE_NOT_FOUND = 3

LOG_FILE_NAME = "jsonvisit.log"
LOG_MAX_BYTES = 10 * 1024 * 1024
LOG_BACKUP_COUNT = 3
FILE_LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

app = typer.Typer(
    name="jsonvisit",
    help="Resolve workspace targets and JSON placeholders",
    add_completion=False,
)


def resolve_log_level(log_level_flag: str | None) -> str:
    """Resolve log level from CLI flag, env var, or default.

    Priority: CLI flag > JSONVISIT_LOG_LEVEL env var > "info" default.
    """
    if log_level_flag:
        return log_level_flag
    return os.getenv("JSONVISIT_LOG_LEVEL", "info")


def setup_logging(log_dir: Path, log_level: str, verbose: bool = False) -> None:
    """Route records to a rotating jsonvisit.log, echoing to stderr on demand.

    Args:
        log_dir: Directory for log files (created if missing)
        log_level: Logging level (info, debug, warning, error, critical)
        verbose: Also echo log records to stderr at the same level
    """
    level = log_level.upper()
    log_dir = log_dir.expanduser()
    log_dir.mkdir(parents=True, exist_ok=True)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    # Repeated calls replace the handlers instead of stacking them.
    root_logger.handlers.clear()

    file_handler = RotatingFileHandler(
        log_dir / LOG_FILE_NAME,
        maxBytes=LOG_MAX_BYTES,
        backupCount=LOG_BACKUP_COUNT,
    )
    file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT))
    root_logger.addHandler(file_handler)

    # Resolved JSON owns stdout; echoed records go to stderr.
    echo_handler = logging.StreamHandler(sys.stderr)
    echo_handler.setLevel(level if verbose else logging.CRITICAL)
    echo_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    root_logger.addHandler(echo_handler)


def parse_override_value(raw: str) -> Any:
    """Parse an override as JSON, falling back to the raw string.

    >>> parse_override_value("3")
    3
    >>> parse_override_value("dist/app")
    'dist/app'
    """
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def parse_overrides(args: list[str]) -> dict[str, Any]:
    """Turn leftover ``--key value`` arguments into target option overrides.

    Supports ``--key value``, ``--key=value``, bare ``--flag`` (True) and
    ``--no-flag`` (False).

    >>> parse_overrides(["--watch", "--port", "4200", "--base=/app", "--no-cache"])
    {'watch': True, 'port': 4200, 'base': '/app', 'cache': False}
    """
    overrides: dict[str, Any] = {}
    index = 0
    while index < len(args):
        arg = args[index]
        index += 1
        if not arg.startswith("--") or arg == "--":
            raise typer.BadParameter(f"Unexpected argument {arg!r}")
        name = arg[2:]
        if "=" in name:
            name, raw = name.split("=", 1)
            overrides[name] = parse_override_value(raw)
        elif index < len(args) and not args[index].startswith("--"):
            overrides[name] = parse_override_value(args[index])
            index += 1
        elif name.startswith("no-"):
            overrides[name[3:]] = False
        else:
            overrides[name] = True
    return overrides


def parse_variables(pairs: list[str]) -> dict[str, Any]:
    """Parse ``name=value`` pairs for the resolve command.

    >>> parse_variables(["env=prod", "replicas=2"])
    {'env': 'prod', 'replicas': 2}
    """
    variables: dict[str, Any] = {}
    for pair in pairs:
        name, sep, raw = pair.partition("=")
        if not sep or not name:
            raise typer.BadParameter(f"Expected name=value, got {pair!r}")
        variables[name] = parse_override_value(raw)
    return variables


async def run_target(
    workspace_path: Path,
    spec: TargetSpec,
    config: VisitorConfig | None = None,
) -> list[dict[str, Any]]:
    """Resolve a target through the orchestrator and collect its events.

    Args:
        workspace_path: Path to the workspace descriptor
        spec: Target to run
        config: Visitor configuration for placeholder resolution
    """
    logger = logging.getLogger(__name__)
    orchestrator = Orchestrator.from_file(workspace_path, config=config)
    builder_config = await orchestrator.get_target_configuration(spec)
    logger.info(f"Builder: {builder_config.builder}")
    return [event async for event in orchestrator.run(builder_config)]


def _fail(message: str, code: int = EXIT_FAILURE) -> typer.Exit:
    logging.getLogger(__name__).error(message)
    typer.secho(message, fg=typer.colors.RED, err=True)
    return typer.Exit(code)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        help="Print version and exit",
    ),
) -> None:
    """Resolve workspace targets and JSON placeholders."""
    # Version info goes to stderr, stdout is for JSON
    if version:
        typer.echo(f"jsonvisit {__version__}", err=True)
        raise typer.Exit(0)

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


@app.command(
    context_settings={"allow_extra_args": True, "ignore_unknown_options": True},
)
def run(
    ctx: typer.Context,
    target: str | None = typer.Argument(
        None,
        help="Target as [project][:target][:configuration]",
    ),
    cwd: Path = typer.Option(
        Path("."),
        "--cwd",
        help="Directory to start searching for the workspace descriptor",
    ),
    log_dir: Path = typer.Option(
        Path("~/.jsonvisit/logs"),
        "--log-dir",
        help="Directory for log files",
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        help="Logging level (overrides JSONVISIT_LOG_LEVEL env var)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Echo log messages to stderr",
    ),
) -> None:
    """Run a project target.

    The workspace descriptor (.workspace.json) is looked up from --cwd and
    its parent directories. Any additional --option is passed to the target,
    overriding its configured options.
    """
    setup_logging(log_dir, resolve_log_level(log_level), verbose)

    try:
        spec = parse_target(target, parse_overrides(list(ctx.args)))
    except (JsonVisitError, typer.BadParameter) as exc:
        raise _fail(str(exc)) from exc

    try:
        workspace_path = locate_workspace(cwd.resolve(), WORKSPACE_FILE_NAME)
    except WorkspaceNotFoundError as exc:
        raise _fail(str(exc), EXIT_WORKSPACE_NOT_FOUND) from exc

    try:
        events = asyncio.run(run_target(workspace_path, spec))
    except JsonVisitError as exc:
        raise _fail(str(exc)) from exc

    for event in events:
        typer.echo(json.dumps(event, indent=2))


@app.command()
def resolve(
    file: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        help="JSON document to resolve",
    ),
    var: list[str] = typer.Option(
        [],
        "--var",
        help="Variable as name=value (repeatable)",
    ),
    max_depth: int | None = typer.Option(
        None,
        "--max-depth",
        help="Maximum nesting depth to descend into",
    ),
    log_dir: Path = typer.Option(
        Path("~/.jsonvisit/logs"),
        "--log-dir",
        help="Directory for log files",
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        help="Logging level (overrides JSONVISIT_LOG_LEVEL env var)",
    ),
) -> None:
    """Expand ${...} placeholders in a JSON document and print the result."""
    setup_logging(log_dir, resolve_log_level(log_level))

    try:
        document = json.loads(file.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise _fail(f"Cannot parse {file}: {exc}") from exc

    try:
        variables = parse_variables(var)
    except typer.BadParameter as exc:
        raise _fail(str(exc)) from exc
    config = VisitorConfig(max_depth=max_depth)
    try:
        result = asyncio.run(resolve_placeholders(document, variables, config=config))
    except JsonVisitError as exc:
        raise _fail(str(exc)) from exc

    typer.echo(json.dumps(result, indent=2))
