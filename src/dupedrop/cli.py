"""Command line interface for dupedrop."""

from __future__ import annotations

import asyncio
import difflib
import logging
from pathlib import Path
from typing import Any

import click
import yaml
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, TaskProgressColumn, TextColumn
from rich.syntax import Syntax
from rich.table import Table

from dupedrop.config import ConfigError, ConfigManager
from dupedrop.ingestion import (
    UNREADABLE_FINGERPRINT,
    DirectoryScanner,
    FileRecord,
    IngestionError,
    IngestionPipeline,
)
from dupedrop.reporting import SessionSummary, format_file_size
from dupedrop.session import DedupSession, SessionError

console = Console()
LOGGER = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    """Route log records through rich at the configured level."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _handle_cli_error(message: str, *, code: str, json_output: bool) -> None:
    """Emit an error as JSON or as a click exception.

    Raises:
        SystemExit: In JSON mode, after printing the error payload.
        click.ClickException: Otherwise.
    """
    if json_output:
        console.print_json(data={"error": {"code": code, "message": message}})
        raise SystemExit(1)
    raise click.ClickException(message)


def _emit_message(message: Any, *, mode: str, quiet: bool, summary_only: bool) -> None:
    if quiet and mode != "error":
        return
    if summary_only and mode not in {"summary", "warning", "error"}:
        return
    console.print(message)


def _status(record: FileRecord) -> str:
    if record.fingerprint == UNREADABLE_FINGERPRINT:
        return "[red]unreadable[/red]"
    if record.is_duplicate:
        return "[yellow]duplicate[/yellow]"
    return "[green]unique[/green]"


def _records_table(title: str, records: list[FileRecord]) -> Table:
    table = Table(title=title)
    table.add_column("Path")
    table.add_column("Type")
    table.add_column("Size", justify="right")
    table.add_column("Status")
    table.add_column("Fingerprint")
    for record in records:
        table.add_row(
            record.path,
            record.media_type or "unknown",
            format_file_size(record.size),
            _status(record),
            record.fingerprint[:12],
        )
    return table


def _record_payload(record: FileRecord) -> dict[str, Any]:
    payload = record.model_dump(mode="json", exclude={"preview"})
    payload["preview"] = record.preview.kind if record.preview else None
    return payload


def _format_summary_line(summary: SessionSummary) -> str:
    return (
        f"[green]scan summary: kept={summary.kept_count}, "
        f"duplicates={summary.duplicate_count}, removed={summary.removed_count}, "
        f"reclaimed={summary.reclaimed}.[/green]"
    )


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="dupedrop")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """dupedrop finds duplicate files by content and lets you review removals."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@cli.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True, path_type=Path))
@click.option(
    "--recursive/--no-recursive",
    default=None,
    help="Walk selected folders recursively (default from config).",
)
@click.option("--hidden", is_flag=True, help="Include hidden files and folders.")
@click.option("--commit", is_flag=True, help="Move every duplicate to the removed list.")
@click.option(
    "--share",
    "share_paths",
    multiple=True,
    metavar="PATH",
    help="Create a share link for the scanned file at PATH (repeatable).",
)
@click.option("--json", "json_output", is_flag=True, help="Emit results as JSON.")
@click.option("--summary", "summary_mode", is_flag=True, help="Only emit summary lines.")
@click.option("--quiet", is_flag=True, help="Suppress non-error output.")
@click.pass_context
def scan(
    ctx: click.Context,
    paths: tuple[Path, ...],
    recursive: bool | None,
    hidden: bool,
    commit: bool,
    share_paths: tuple[str, ...],
    json_output: bool,
    summary_mode: bool,
    quiet: bool,
) -> None:
    """Fingerprint PATHS and report which files are duplicates.

    Nothing on disk is modified; --commit only updates the in-memory session.
    """
    overrides: dict[str, Any] = {}
    if recursive is not None:
        overrides["ingestion.recurse_directories"] = recursive
    if hidden:
        overrides["ingestion.include_hidden_files"] = True
    if ctx.obj.get("verbose"):
        overrides["logging.level"] = "DEBUG"

    try:
        config = ConfigManager().load(cli_overrides=overrides)
    except ConfigError as exc:
        _handle_cli_error(str(exc), code="config_error", json_output=json_output)
        return

    _configure_logging(config.logging.level)
    quiet = quiet or config.cli.quiet_default
    summary_only = summary_mode or config.cli.summary_default

    scanner = DirectoryScanner(
        recursive=config.ingestion.recurse_directories,
        include_hidden=config.ingestion.include_hidden_files,
    )
    handles = scanner.scan_all(paths)
    session = DedupSession(IngestionPipeline.from_config(config))

    try:
        if json_output or quiet:
            asyncio.run(session.ingest(handles))
        else:
            with Progress(
                TextColumn("Scanning files"),
                BarColumn(),
                TaskProgressColumn(),
                console=console,
                transient=True,
            ) as bar:
                task_id = bar.add_task("scan", total=100)
                asyncio.run(
                    session.ingest(handles, progress=lambda pct: bar.update(task_id, completed=pct))
                )
        links = [session.share(path, config.sharing.base_url) for path in share_paths]
        if commit:
            session.commit_duplicates()
    except IngestionError as exc:
        _handle_cli_error(str(exc), code="ingestion_error", json_output=json_output)
        return
    except SessionError as exc:
        _handle_cli_error(str(exc), code="session_error", json_output=json_output)
        return

    summary = session.summary()
    if json_output:
        console.print_json(
            data={
                "files": [_record_payload(record) for record in session.kept],
                "removed": [_record_payload(record) for record in session.removed],
                "summary": summary.model_dump(mode="json"),
            }
        )
        return

    _emit_message(
        _records_table("Files", session.kept), mode="detail", quiet=quiet, summary_only=summary_only
    )
    if session.removed:
        _emit_message(
            _records_table("Removed", session.removed),
            mode="detail",
            quiet=quiet,
            summary_only=summary_only,
        )
    for path, link in zip(share_paths, links):
        _emit_message(
            f"Shared {path}: {link.share_url}",
            mode="detail",
            quiet=quiet,
            summary_only=summary_only,
        )
    _emit_message(_format_summary_line(summary), mode="summary", quiet=quiet, summary_only=summary_only)


@cli.group()
def config() -> None:
    """Manage dupedrop configuration."""


@config.command("view")
@click.option("--no-env", is_flag=True, help="Ignore environment overrides when displaying output.")
def config_view(no_env: bool) -> None:
    """Display the effective configuration after applying precedence rules."""
    try:
        effective = ConfigManager().load(include_env=not no_env, ensure_file=True)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    yaml_text = yaml.safe_dump(effective.model_dump(mode="python"), sort_keys=False)
    console.print(Syntax(yaml_text, "yaml", word_wrap=True))


@config.command("set")
@click.argument("key")
@click.option("--value", required=True, help="Value to assign to KEY.")
def config_set(key: str, value: str) -> None:
    """Persist a configuration value expressed as a dotted KEY."""
    manager = ConfigManager()
    manager.ensure_exists()
    before = manager.read_text().splitlines()

    try:
        parsed_value = yaml.safe_load(value)
    except yaml.YAMLError as exc:
        raise click.ClickException(f"Unable to parse value: {exc}") from exc

    try:
        manager.set_value(key, parsed_value)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    after = manager.read_text().splitlines()
    diff = [
        line
        for line in difflib.unified_diff(
            before, after, fromfile="config.yaml (before)", tofile="config.yaml (after)", lineterm=""
        )
        if not line.startswith(("-# Last updated", "+# Last updated"))
    ]
    console.print(Syntax("\n".join(diff), "diff", word_wrap=False))
    console.print(f"[green]Updated {key}.[/green]")


__all__ = ["cli"]
