#!/usr/bin/env python3
"""
cli.py
------
Shared CLI helpers and run statistics for oneiro commands.

Functions:
    setup_logger: Initialize an OneiroLogger for a CLI component

Classes:
    OperationStats: Files processed, errors and elapsed time
    ScrapeStats: Adds callout and entry counters for extraction runs

Usage:
    from oneiro.core.cli import setup_logger, ScrapeStats

    logger = setup_logger(log_dir, "scrape")
    stats = ScrapeStats()
    stats.files_processed += 1
    print(stats.summary())
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

# --- Local imports ---
from oneiro.core.logging_manager import OneiroLogger


# ═══════════════════════════════════════════════════════════════════════════
# LOGGER SETUP
# ═══════════════════════════════════════════════════════════════════════════

def setup_logger(log_dir: Path, component_name: str) -> OneiroLogger:
    """
    Create an OneiroLogger writing under ``log_dir/operations``.

    Args:
        log_dir: Base log directory (typically paths.LOG_DIR)
        component_name: Component identifier (e.g. 'scrape', 'inspect')

    Returns:
        Configured OneiroLogger instance
    """
    operations_log_dir = Path(log_dir) / "operations"
    operations_log_dir.mkdir(parents=True, exist_ok=True)
    return OneiroLogger(operations_log_dir, component_name=component_name)


# ═══════════════════════════════════════════════════════════════════════════
# STATISTICS CLASSES
# ═══════════════════════════════════════════════════════════════════════════

@dataclass
class OperationStats:
    """
    Base statistics for a CLI operation.

    Attributes:
        files_processed: Number of files handled (read or failed)
        errors: Number of files or entries that had to be skipped
        start_time: Operation start timestamp
    """
    files_processed: int = 0
    errors: int = 0
    start_time: datetime = field(default_factory=datetime.now)
    _finished_at: Optional[datetime] = field(default=None, init=False, repr=False)

    def __post_init__(self) -> None:
        if self.files_processed < 0:
            raise ValueError(f"files_processed must be non-negative, got {self.files_processed}")
        if self.errors < 0:
            raise ValueError(f"errors must be non-negative, got {self.errors}")

    def finish(self) -> None:
        """Freeze the elapsed time."""
        if self._finished_at is None:
            self._finished_at = datetime.now()

    def duration(self) -> float:
        """Elapsed seconds, frozen once finish() was called."""
        end = self._finished_at or datetime.now()
        return (end - self.start_time).total_seconds()

    def summary(self) -> str:
        return (
            f"{self.files_processed} files processed, "
            f"{self.errors} errors, "
            f"{self.duration():.2f}s"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "files_processed": self.files_processed,
            "errors": self.errors,
            "duration": self.duration(),
        }


@dataclass
class ScrapeStats(OperationStats):
    """
    Statistics for an extraction run.

    Attributes:
        journals_found: Journal-entry callouts seen
        diaries_found: Dream-diary callouts nested under a journal entry
        metrics_found: Metrics callouts nested under such a diary
        entries_found: Dream entries assembled
    """
    journals_found: int = 0
    diaries_found: int = 0
    metrics_found: int = 0
    entries_found: int = 0

    @property
    def callouts_found(self) -> int:
        return self.journals_found + self.diaries_found + self.metrics_found

    def summary(self) -> str:
        parts = [
            f"{self.files_processed} files processed",
            f"{self.journals_found} journal entries",
            f"{self.diaries_found} dream diaries",
            f"{self.metrics_found} metrics callouts",
            f"{self.entries_found} entries",
            f"{self.errors} errors",
            f"{self.duration():.2f}s",
        ]
        return ", ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d.update({
            "journals_found": self.journals_found,
            "diaries_found": self.diaries_found,
            "metrics_found": self.metrics_found,
            "callouts_found": self.callouts_found,
            "entries_found": self.entries_found,
        })
        return d
