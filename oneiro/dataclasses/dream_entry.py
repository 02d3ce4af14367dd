#!/usr/bin/env python3
"""
dream_entry.py
-------------------

Value types produced by extraction:

- DateStrategy: closed set of date resolution strategies, in priority order
- ResolvedDate: a calendar date (possibly year-only) tagged with its strategy
- MetricValue: one declared metric, numeric or non-numeric
- DreamEntry: one assembled dream, immutable once built

Entries are frozen and own copies of their metrics, so no state is shared
between entries or between the entries and the run that produced them.
"""
# ---- Annotations ----
from __future__ import annotations

# ---- Standard library imports ----
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple, Union


Number = Union[int, float]


class DateStrategy(str, Enum):
    """How a ResolvedDate was obtained, highest priority first."""

    BLOCK_REFERENCE = "block_reference"
    EXPLICIT_HEADER_DATE = "explicit_header_date"
    FRONTMATTER_FIELD = "frontmatter_field"
    PATH_INFERENCE = "path_inference"
    FALLBACK_TODAY = "fallback_today"

    @property
    def priority(self) -> int:
        return list(DateStrategy).index(self)

    @property
    def low_confidence(self) -> bool:
        return self in (DateStrategy.PATH_INFERENCE, DateStrategy.FALLBACK_TODAY)


@dataclass(frozen=True)
class ResolvedDate:
    """
    A resolved entry date.

    Path inference yields a year-only date (month and day are None); every
    other strategy yields a full calendar date.

    Attributes:
        year: Four-digit year
        month: 1-12, or None for a year-only date
        day: 1-31, or None for a year-only date
        strategy: Strategy that produced this date
    """

    year: int
    month: Optional[int]
    day: Optional[int]
    strategy: DateStrategy

    @classmethod
    def from_date(cls, value: date, strategy: DateStrategy) -> ResolvedDate:
        return cls(value.year, value.month, value.day, strategy)

    @property
    def is_partial(self) -> bool:
        return self.month is None or self.day is None

    @property
    def low_confidence(self) -> bool:
        return self.strategy.low_confidence

    @property
    def iso(self) -> str:
        """``YYYY-MM-DD``, or ``YYYY`` for a year-only date."""
        if self.is_partial:
            return f"{self.year:04d}"
        return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"

    def as_date(self) -> Optional[date]:
        if self.is_partial:
            return None
        return date(self.year, self.month, self.day)  # type: ignore[arg-type]

    @property
    def sort_key(self) -> Tuple[int, int, int]:
        """Year-only dates sort before every full date of the same year."""
        return (self.year, self.month or 0, self.day or 0)

    def __str__(self) -> str:
        return self.iso


@dataclass(frozen=True)
class MetricValue:
    """
    One metric as declared in a metrics callout.

    Attributes:
        name: Display name (the configured definition's name when matched)
        raw: Value text as written
        numeric: Parsed number, or None for placeholders such as ``—``
        configured: Whether the name matched a configured definition
    """

    name: str
    raw: str
    numeric: Optional[Number] = None
    configured: bool = False

    @property
    def is_numeric(self) -> bool:
        return self.numeric is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "raw": self.raw,
            "numeric": self.numeric,
            "configured": self.configured,
        }


@dataclass(frozen=True)
class DreamEntry:
    """
    One dream extracted from a dream-diary callout.

    Attributes:
        date: Resolved entry date
        title: Dream title from the diary header
        content: Cleaned narrative text
        source_file: Path of the note the entry came from
        source_anchor: Diary block id, journal block id, or ``line-<n>``
        metrics: Declared metrics keyed by display name (read-only)
        word_count: Words in the cleaned content
        callout_metadata: Parsed ``|metadata`` of the diary callout
    """

    date: ResolvedDate
    title: str
    content: str
    source_file: str
    source_anchor: str
    metrics: Mapping[str, MetricValue] = field(default_factory=dict)
    word_count: int = 0
    callout_metadata: Mapping[str, Union[str, bool]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "metrics", MappingProxyType(dict(self.metrics)))
        object.__setattr__(
            self, "callout_metadata", MappingProxyType(dict(self.callout_metadata))
        )

    @property
    def reference(self) -> str:
        """``path#anchor`` link back to the source callout."""
        return f"{self.source_file}#{self.source_anchor}"

    def metric(self, name: str) -> Optional[MetricValue]:
        """Look up a metric by name, case-insensitively."""
        wanted = name.casefold()
        for key, value in self.metrics.items():
            if key.casefold() == wanted:
                return value
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.iso,
            "date_strategy": self.date.strategy.value,
            "low_confidence_date": self.date.low_confidence,
            "title": self.title,
            "content": self.content,
            "source_file": self.source_file,
            "source_anchor": self.source_anchor,
            "word_count": self.word_count,
            "metrics": {key: value.to_dict() for key, value in self.metrics.items()},
            "callout_metadata": dict(self.callout_metadata),
        }

    def __repr__(self) -> str:
        return f"<DreamEntry(date={self.date.iso}, title={self.title!r}, anchor={self.source_anchor!r})>"
