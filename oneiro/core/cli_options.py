#!/usr/bin/env python3
"""
cli_options.py
-------------------
Reusable Click options for oneiro commands.

Usage:
    from oneiro.core.cli_options import settings_option, exclude_option

    @cli.command()
    @settings_option
    @exclude_option
    def scrape(settings_file, exclude):
        pass
"""
import click
from oneiro.core.paths import LOG_DIR


# ═══════════════════════════════════════════════════════════════════════════
# LOGGING OPTIONS
# ═══════════════════════════════════════════════════════════════════════════

verbose_option = click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Enable verbose logging with per-file progress"
)

log_dir_option = click.option(
    "--log-dir",
    type=click.Path(),
    default=str(LOG_DIR),
    help="Directory for log files"
)


# ═══════════════════════════════════════════════════════════════════════════
# SETTINGS & SELECTION OPTIONS
# ═══════════════════════════════════════════════════════════════════════════

settings_option = click.option(
    "-c", "--config", "settings_file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="YAML settings file (callout names, metric definitions)"
)

exclude_option = click.option(
    "-x", "--exclude",
    multiple=True,
    help="Glob of notes or folders to skip, relative to each folder (repeatable)"
)

max_files_option = click.option(
    "--max-files",
    type=click.IntRange(min=1),
    default=None,
    help="Process at most this many files per folder"
)

force_option = click.option(
    "-f", "--force",
    is_flag=True,
    help="Force overwrite existing files"
)
