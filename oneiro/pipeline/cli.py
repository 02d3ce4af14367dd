#!/usr/bin/env python3
"""
cli.py
-------------------
Command-line interface for dream journal extraction.

Commands:
    scrape       Extract dream entries and metrics from notes and folders
    inspect      Show the callout tree of one note
    init-config  Write the default settings file

Usage:
    # Extract from a folder, skipping templates, and save JSON
    oneiro scrape Journals/ -x Templates --json dreams.json

    # Per-file progress
    oneiro -v scrape Journals/2025/

    # Debug a note's structure
    oneiro inspect Journals/2025/2025-06.md

    # Start a settings file
    oneiro init-config -o oneiro.yaml
"""
from __future__ import annotations

import click
from pathlib import Path
from typing import Optional, Tuple

from oneiro.core.cli_decorators import oneiro_cli_group
from oneiro.core.cli_options import (
    exclude_option,
    force_option,
    max_files_option,
    settings_option,
)
from oneiro.core.diagnostics import DiagnosticSink
from oneiro.core.logging_manager import OneiroLogger, handle_cli_error
from oneiro.core.paths import SETTINGS_PATH
from oneiro.dataclasses.raw_callout import RawCallout
from oneiro.parsers.cleaner import ParagraphMode
from oneiro.parsers.scanner import CalloutScanner, iter_callouts
from oneiro.utils.fs import read_note

from .assembler import ExtractionResult, ProgressEvent, run_extraction
from .configs.settings import EngineSettings, dump_settings, load_settings
from .export_json import export_json


def _load(settings_file: Optional[str]) -> EngineSettings:
    """Explicit settings file, else the default file if present, else defaults."""
    if settings_file:
        return load_settings(Path(settings_file))
    if SETTINGS_PATH.is_file():
        return load_settings(SETTINGS_PATH)
    return EngineSettings()


@oneiro_cli_group("oneiro")
def cli(ctx: click.Context) -> None:
    """oneiro - Dream journal entry and metrics extraction"""
    pass


@cli.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(exists=True))
@settings_option
@exclude_option
@max_files_option
@click.option(
    "--paragraphs",
    is_flag=True,
    help="Keep paragraph breaks in cleaned content instead of joining them",
)
@click.option(
    "--json",
    "json_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write entries, aggregate and diagnostics to this JSON file",
)
@click.pass_context
def scrape(
    ctx: click.Context,
    paths: Tuple[str, ...],
    settings_file: Optional[str],
    exclude: Tuple[str, ...],
    max_files: Optional[int],
    paragraphs: bool,
    json_path: Optional[str],
) -> None:
    """
    Extract dream entries and metrics from journal notes.

    PATHS may be notes or folders; folders are searched recursively for
    markdown files. Finding no data is reported with guidance, not as an
    error.
    """
    logger: OneiroLogger = ctx.obj["logger"]
    verbose: bool = ctx.obj["verbose"]

    def report(event: ProgressEvent) -> None:
        click.echo(
            f"  [{event.files_processed}/{event.total_files}] {event.current_file} "
            f"({event.entries_found} entries, {event.callouts_found} callouts so far)"
        )

    try:
        settings = _load(settings_file)
        settings = settings.with_overrides(
            exclude=tuple(settings.exclude) + exclude if exclude else None,
            max_files=max_files,
            paragraph_mode=ParagraphMode.PARAGRAPHS if paragraphs else None,
        )

        click.echo(f"🌙 Scraping {len(paths)} path(s)...")
        result = run_extraction(
            [Path(p) for p in paths],
            settings,
            progress=report if verbose else None,
            logger=logger,
        )
        _print_result(result)

        if json_path:
            written = export_json(result, Path(json_path), logger=logger)
            click.echo(f"\n💾 JSON written to {written}")

    except Exception as e:
        handle_cli_error(ctx, e, "scrape", {"paths": list(paths)})


def _print_result(result: ExtractionResult) -> None:
    stats = result.stats
    click.echo("\n✅ Extraction complete:")
    click.echo(f"  Files processed: {stats.files_processed}")
    click.echo(f"  Journal entries: {stats.journals_found}")
    click.echo(f"  Dream diaries: {stats.diaries_found}")
    click.echo(f"  Metrics callouts: {stats.metrics_found}")
    click.echo(f"  Entries: {stats.entries_found}")
    if stats.errors > 0:
        click.echo(f"  ⚠️  Errors: {stats.errors}")
    click.echo(f"  Duration: {stats.duration():.2f}s")

    if not result.outcome.has_data:
        click.echo(f"\n⚠️  {result.guidance}")

    summaries = result.aggregate.summary()
    if summaries:
        click.echo("\n📊 Metrics:")
        for name, summary in summaries.items():
            click.echo(
                f"  {name}: mean {summary.mean:.2f} "
                f"(min {summary.minimum:g}, max {summary.maximum:g}, n={summary.count})"
            )

    if result.diagnostics:
        click.echo("\n🔎 Diagnostics:")
        counts = DiagnosticSink(list(result.diagnostics)).counts_by_kind()
        for kind, count in sorted(counts.items()):
            click.echo(f"  {kind}: {count}")


@cli.command()
@click.argument("note", type=click.Path(exists=True, dir_okay=False))
@settings_option
@click.pass_context
def inspect(ctx: click.Context, note: str, settings_file: Optional[str]) -> None:
    """Print the callout tree of NOTE and any structural warnings."""
    try:
        settings = _load(settings_file)
        roles = {
            settings.journal_callout: "journal",
            settings.diary_callout: "diary",
            settings.metrics_callout: "metrics",
        }

        sink = DiagnosticSink()
        roots = CalloutScanner(sink).scan(read_note(Path(note)), note)

        click.echo(f"📄 {note}")
        if not roots:
            click.echo("  (no callouts)")
        for callout, _ in iter_callouts(roots):
            click.echo(_describe(callout, roles.get(callout.callout_type)))

        if len(sink):
            click.echo("\n⚠️  Warnings:")
            for diagnostic in sink:
                click.echo(f"  line {diagnostic.line}: {diagnostic.message}")

    except Exception as e:
        handle_cli_error(ctx, e, "inspect", {"note": note})


def _describe(callout: RawCallout, role: Optional[str]) -> str:
    indent = "  " * callout.depth
    tag = callout.callout_type
    if callout.metadata_tag:
        tag += f"|{callout.metadata_tag}"
    line = f"{indent}[!{tag}] lines {callout.start_line + 1}-{callout.end_line + 1}"
    if role:
        line += f" ({role})"
    if callout.title_text:
        line += f": {callout.title_text}"
    return line


@cli.command("init-config")
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False),
    default=str(SETTINGS_PATH),
    help="Where to write the settings file",
)
@force_option
@click.pass_context
def init_config(ctx: click.Context, output: str, force: bool) -> None:
    """Write the default settings as YAML."""
    path = Path(output)
    if path.exists() and not force:
        click.echo(f"⚠️  {path} already exists (use --force to overwrite)", err=True)
        ctx.exit(1)

    try:
        dump_settings(EngineSettings(), path)
        ctx.obj["logger"].log_operation("settings_written", {"path": str(path)})
        click.echo(f"✅ Default settings written to {path}")
    except Exception as e:
        handle_cli_error(ctx, e, "init-config", {"output": output})


if __name__ == "__main__":
    cli(obj={})
