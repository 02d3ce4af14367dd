#!/usr/bin/env python3
"""
diagnostics.py
--------------
Structured diagnostics for extraction runs.

Every recoverable problem found in journal content (malformed nesting,
unresolvable dates, missing metrics boundaries, unreadable files) is
recorded here as a Diagnostic instead of being written to a log. Tests
assert on diagnostic kinds and counts; operators can still see them in
the logs because a sink may mirror each record into an OneiroLogger.

A sink is passed explicitly into each component call. ``safe_sink(None)``
returns a NullSink so components never need ``if sink:`` checks.

Usage:
    from oneiro.core.diagnostics import DiagnosticKind, DiagnosticSink

    sink = DiagnosticSink()
    sink.record(DiagnosticKind.DATE_UNRESOLVED, "2025.md", "No date found")
    sink.count(DiagnosticKind.DATE_UNRESOLVED)  # 1
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional

# --- Local imports ---
from oneiro.core.logging_manager import OneiroLogger, safe_logger


class DiagnosticKind(str, Enum):
    """Closed set of diagnostic kinds an extraction run can record."""

    STRUCTURAL_WARNING = "structural_warning"
    ORPHAN_CALLOUT = "orphan_callout"
    FRONTMATTER_INVALID = "frontmatter_invalid"
    DATE_INVALID = "date_invalid"
    DATE_UNRESOLVED = "date_unresolved"
    CONTENT_BOUNDARY_MISSING = "content_boundary_missing"
    METRIC_MALFORMED = "metric_malformed"
    METRIC_OUT_OF_RANGE = "metric_out_of_range"
    FILE_READ_FAILED = "file_read_failed"
    FILE_PARSE_FAILED = "file_parse_failed"
    ENTRY_FAILED = "entry_failed"

    @property
    def severity(self) -> str:
        """'error' when data was lost (file or entry skipped), else 'warning'."""
        if self in (
            DiagnosticKind.FILE_READ_FAILED,
            DiagnosticKind.FILE_PARSE_FAILED,
            DiagnosticKind.ENTRY_FAILED,
        ):
            return "error"
        return "warning"


@dataclass(frozen=True)
class Diagnostic:
    """
    One recorded problem.

    Attributes:
        source: File path, or ``path#anchor`` for entry-level problems
        kind: What went wrong
        message: Human-readable description
        line: 1-based line number in the source file, when known
    """

    source: str
    kind: DiagnosticKind
    message: str
    line: Optional[int] = None

    @property
    def severity(self) -> str:
        return self.kind.severity

    def to_dict(self) -> Dict[str, object]:
        return {
            "source": self.source,
            "kind": self.kind.value,
            "severity": self.severity,
            "message": self.message,
            "line": self.line,
        }


@dataclass
class DiagnosticSink:
    """
    Collects diagnostics for one extraction run (or one file).

    Attributes:
        diagnostics: Recorded diagnostics in recording order
        logger: Optional logger each diagnostic is mirrored into
    """

    diagnostics: List[Diagnostic] = field(default_factory=list)
    logger: Optional[OneiroLogger] = field(default=None, repr=False)

    def record(
        self,
        kind: DiagnosticKind,
        source: str,
        message: str,
        line: Optional[int] = None,
    ) -> Diagnostic:
        """Create, store and return a diagnostic."""
        diagnostic = Diagnostic(source=source, kind=kind, message=message, line=line)
        self.add(diagnostic)
        return diagnostic

    def add(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)
        safe_logger(self.logger).log_diagnostic(diagnostic)

    def extend(self, diagnostics: Iterable[Diagnostic]) -> None:
        for diagnostic in diagnostics:
            self.add(diagnostic)

    def count(self, kind: Optional[DiagnosticKind] = None) -> int:
        """Number of diagnostics, optionally of a single kind."""
        if kind is None:
            return len(self.diagnostics)
        return sum(1 for d in self.diagnostics if d.kind is kind)

    def of_kind(self, kind: DiagnosticKind) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.kind is kind]

    def counts_by_kind(self) -> Dict[str, int]:
        return dict(Counter(d.kind.value for d in self.diagnostics))

    @property
    def has_errors(self) -> bool:
        return any(d.severity == "error" for d in self.diagnostics)

    def __len__(self) -> int:
        return len(self.diagnostics)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.diagnostics)


class NullSink(DiagnosticSink):
    """Sink that discards everything it is given."""

    def add(self, diagnostic: Diagnostic) -> None:
        pass


def safe_sink(sink: Optional[DiagnosticSink]) -> DiagnosticSink:
    """Return the provided sink, or a fresh NullSink if None."""
    return sink if sink is not None else NullSink()
