#!/usr/bin/env python3
"""
dates.py
-------------------
Date resolution for journal entries.

An entry's date is taken from the first strategy that succeeds, in this
fixed order:

1. Block reference ``^YYYYMMDD`` on the journal header or either of the
   next two lines
2. Long-form date in the header, ``Sunday, June 15th, 2025``
3. Front matter ``created``, then ``modified`` (``YYYYMMDD`` or ISO)
4. A four-digit year in the file path (year-only date)
5. Today, flagged low-confidence

Each strategy is a standalone function returning a ResolvedDate or None.
A token that is present but not a real calendar date fails its strategy
and records DATE_INVALID; values are never combined across strategies.
Month names are matched against a fixed English table, so results do not
depend on the process locale.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import logging
import re
from datetime import date
from typing import Dict, Mapping, Optional, Sequence

# --- Local imports ---
from oneiro.core.diagnostics import DiagnosticKind, DiagnosticSink, safe_sink
from oneiro.core.exceptions import DateResolutionError
from oneiro.dataclasses.dream_entry import DateStrategy, ResolvedDate


logger = logging.getLogger(__name__)


# ----- Constants -----
MONTH_NAMES = (
    "january",
    "february",
    "march",
    "april",
    "may",
    "june",
    "july",
    "august",
    "september",
    "october",
    "november",
    "december",
)

MONTH_LOOKUP: Dict[str, int] = {name: i for i, name in enumerate(MONTH_NAMES, 1)}
MONTH_LOOKUP.update({name[:3]: i for i, name in enumerate(MONTH_NAMES, 1)})
MONTH_LOOKUP["sept"] = 9

FRONTMATTER_DATE_FIELDS = ("created", "modified")

MIN_PATH_YEAR = 1900
MAX_PATH_YEAR = 2100

BLOCK_REFERENCE_PATTERN = re.compile(r"\^(\d{8})(?!\d)")
LONG_DATE_PATTERN = re.compile(
    r"(?:\b(?:mon|tue|wed|thu|fri|sat|sun)[a-z]*\.?,?\s+)?"
    r"\b(?P<month>[a-z]{3,9})\.?\s+"
    r"(?P<day>\d{1,2})(?:st|nd|rd|th)?,?\s+"
    r"(?P<year>\d{4})\b",
    re.IGNORECASE,
)
COMPACT_DATE_PATTERN = re.compile(r"^\s*(\d{4})(\d{2})(\d{2})\s*$")
ISO_DATE_PATTERN = re.compile(r"^\s*(\d{4})-(\d{2})-(\d{2})(?:[T ].*)?$")
YEAR_PATTERN = re.compile(r"(?<!\d)(\d{4})(?!\d)")


def make_date(year: int, month: int, day: int) -> date:
    """
    Build a calendar date, rejecting impossible ones.

    Raises:
        DateResolutionError: If the values are not a real date
    """
    try:
        return date(year, month, day)
    except ValueError as e:
        raise DateResolutionError(f"{year:04d}-{month:02d}-{day:02d} is not a valid date") from e


def _invalid(sink: DiagnosticSink, source: str, message: str) -> None:
    sink.record(DiagnosticKind.DATE_INVALID, source, message)


# ----- Strategies -----
def from_block_reference(
    lines: Sequence[str],
    sink: Optional[DiagnosticSink] = None,
    source: str = "",
) -> Optional[ResolvedDate]:
    """
    Find a ``^YYYYMMDD`` block reference in the first three context lines.

    Args:
        lines: Header line followed by the first body lines
        sink: Receives DATE_INVALID for impossible dates
        source: Note path for diagnostics

    Examples:
        >>> from_block_reference(["> [!journal-entry] ^20250615"]).iso
        '2025-06-15'
    """
    sink = safe_sink(sink)
    for line in lines[:3]:
        for match in BLOCK_REFERENCE_PATTERN.finditer(line):
            token = match.group(1)
            try:
                value = make_date(int(token[:4]), int(token[4:6]), int(token[6:]))
            except DateResolutionError as e:
                _invalid(sink, source, f"Block reference ^{token}: {e}")
                continue
            return ResolvedDate.from_date(value, DateStrategy.BLOCK_REFERENCE)
    return None


def from_long_date(
    header: str,
    sink: Optional[DiagnosticSink] = None,
    source: str = "",
) -> Optional[ResolvedDate]:
    """
    Parse a long-form date such as ``Sunday, June 15th, 2025``.

    The weekday is optional and not checked against the date; month names
    may be full or abbreviated.
    """
    sink = safe_sink(sink)
    for match in LONG_DATE_PATTERN.finditer(header):
        month = MONTH_LOOKUP.get(match.group("month").lower())
        if month is None:
            continue
        try:
            value = make_date(int(match.group("year")), month, int(match.group("day")))
        except DateResolutionError as e:
            _invalid(sink, source, f"Header date {match.group(0)!r}: {e}")
            continue
        return ResolvedDate.from_date(value, DateStrategy.EXPLICIT_HEADER_DATE)
    return None


def parse_frontmatter_date(value: str) -> Optional[date]:
    """
    Parse a ``YYYYMMDD`` (or ISO ``YYYY-MM-DD``) front matter value.

    Returns:
        The date, or None when the value has neither shape

    Raises:
        DateResolutionError: If the value has the shape but is not a real date
    """
    match = COMPACT_DATE_PATTERN.match(value) or ISO_DATE_PATTERN.match(value)
    if not match:
        return None
    year, month, day = (int(part) for part in match.groups()[:3])
    return make_date(year, month, day)


def from_frontmatter(
    frontmatter: Optional[Mapping[str, str]],
    sink: Optional[DiagnosticSink] = None,
    source: str = "",
) -> Optional[ResolvedDate]:
    """Use front matter ``created``, falling back to ``modified``."""
    if not frontmatter:
        return None

    sink = safe_sink(sink)
    for key in FRONTMATTER_DATE_FIELDS:
        value = frontmatter.get(key)
        if not value:
            continue
        try:
            parsed = parse_frontmatter_date(str(value))
        except DateResolutionError as e:
            _invalid(sink, source, f"Front matter {key}: {e}")
            continue
        if parsed is not None:
            return ResolvedDate.from_date(parsed, DateStrategy.FRONTMATTER_FIELD)
    return None


def from_path(path: str) -> Optional[ResolvedDate]:
    """
    Infer a year-only date from the first plausible year in a path.

    Examples:
        >>> from_path("Journals/2024/June.md").iso
        '2024'
        >>> from_path("Journals/notes.md") is None
        True
    """
    for match in YEAR_PATTERN.finditer(str(path)):
        year = int(match.group(1))
        if MIN_PATH_YEAR <= year <= MAX_PATH_YEAR:
            return ResolvedDate(year, None, None, DateStrategy.PATH_INFERENCE)
    return None


def fallback_today(today: Optional[date] = None) -> ResolvedDate:
    """Today's date, tagged as a low-confidence fallback."""
    return ResolvedDate.from_date(today or date.today(), DateStrategy.FALLBACK_TODAY)


# ----- Resolver -----
class DateResolver:
    """
    Runs the strategies in priority order for one note.

    Attributes:
        sink: Diagnostic sink for DATE_INVALID / DATE_UNRESOLVED
        source: Note path used in diagnostics
        today: Date used by the fallback (defaults to the real today)
    """

    def __init__(
        self,
        sink: Optional[DiagnosticSink] = None,
        source: str = "",
        today: Optional[date] = None,
    ) -> None:
        self.sink = safe_sink(sink)
        self.source = source
        self.today = today

    def resolve(
        self,
        context_lines: Sequence[str],
        frontmatter: Optional[Mapping[str, str]] = None,
        path: Optional[str] = None,
        line: Optional[int] = None,
    ) -> ResolvedDate:
        """
        Resolve exactly one date for a callout.

        Args:
            context_lines: Header line, then up to two body lines
            frontmatter: The note's flat front matter
            path: Note path for year inference (defaults to ``source``)
            line: 1-based header line, for the unresolved diagnostic

        Returns:
            The first strategy's result, or today's date as a fallback
        """
        header = context_lines[0] if context_lines else ""
        path = self.source if path is None else path

        resolved = (
            from_block_reference(context_lines, self.sink, self.source)
            or from_long_date(header, self.sink, self.source)
            or from_frontmatter(frontmatter, self.sink, self.source)
            or from_path(path)
        )
        if resolved is not None:
            logger.debug(f"Resolved {resolved.iso} via {resolved.strategy.value}")
            return resolved

        self.sink.record(
            DiagnosticKind.DATE_UNRESOLVED,
            self.source,
            "No block reference, header date, front matter date or path year; using today",
            line=line,
        )
        return fallback_today(self.today)
