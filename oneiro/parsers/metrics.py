#!/usr/bin/env python3
"""
metrics.py
-------------------
Metric extraction from metrics callouts.

A metrics callout holds ``Name: value`` pairs separated by commas or line
breaks:

    >>> [!dream-metrics]
    >>> Words: 343, Sensory Detail: 3, emotional recall: 3
    >>> Lost Segments: —

Names are matched case-insensitively against the configured definitions and
reported under the definition's display name. Values that are plain base-10
numbers become numeric; anything else (such as the ``—`` placeholder) is
kept as a non-numeric value, as are all values of text metrics. Names with
no definition are kept as declared but are not configured, so they stay out
of run statistics.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import logging
import re
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

# --- Local imports ---
from oneiro.core.diagnostics import DiagnosticKind, DiagnosticSink, safe_sink
from oneiro.core.exceptions import MetricParseError
from oneiro.dataclasses.dream_entry import MetricValue, Number
from oneiro.dataclasses.raw_callout import RawCallout
from oneiro.parsers.cleaner import BLOCK_REF
from oneiro.parsers.scanner import strip_quote_markers
from oneiro.pipeline.configs.settings import MetricDefinition, normalize_metric_name


logger = logging.getLogger(__name__)


NUMBER_PATTERN = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)$")


def parse_metric_value(raw: str) -> Optional[Number]:
    """
    Parse a metric value as a base-10 integer or decimal.

    Examples:
        >>> parse_metric_value("3")
        3
        >>> parse_metric_value("2.5")
        2.5
        >>> parse_metric_value("—") is None
        True
    """
    value = raw.strip()
    if not NUMBER_PATTERN.match(value):
        return None
    if "." in value:
        return float(value)
    return int(value)


def split_segment(segment: str) -> Tuple[str, str]:
    """
    Split one ``Name: value`` segment on its first colon.

    Raises:
        MetricParseError: If there is no colon, or the name or value is empty
    """
    if ":" not in segment:
        raise MetricParseError(f"Metric segment has no ':' separator: {segment!r}")
    name, value = segment.split(":", 1)
    name = " ".join(name.split())
    value = value.strip()
    if not name:
        raise MetricParseError(f"Metric segment has an empty name: {segment!r}")
    if not value:
        raise MetricParseError(f"Metric '{name}' has no value")
    return name, value


def metrics_text_from_lines(lines: Iterable[str]) -> str:
    """
    Metrics text from raw callout lines: quote markers, callout tags and
    block references removed, one line per source line.
    """
    cleaned: List[str] = []
    for line in lines:
        text = strip_quote_markers(line).strip()
        text = re.sub(r"^\[![^\]]*\][+-]?", "", text)
        text = BLOCK_REF.sub("", text).strip()
        if text:
            cleaned.append(text)
    return "\n".join(cleaned)


def metrics_text_from_callout(callout: RawCallout) -> str:
    """Metrics text of a callout: its header text followed by its body."""
    return metrics_text_from_lines([callout.title_text, *callout.body_lines])


class MetricExtractor:
    """
    Parses metrics text against a set of metric definitions.

    Attributes:
        definitions: Configured definitions, in configuration order
    """

    def __init__(self, definitions: Sequence[MetricDefinition] = ()) -> None:
        self.definitions = tuple(definitions)
        self._by_key: Dict[str, MetricDefinition] = {d.key: d for d in self.definitions}

    @property
    def aggregated_names(self) -> Set[str]:
        """Display names of enabled numeric definitions."""
        return {d.name for d in self.definitions if d.enabled and not d.is_text}

    def lookup(self, name: str) -> Optional[MetricDefinition]:
        return self._by_key.get(normalize_metric_name(name))

    def extract(
        self,
        text: str,
        sink: Optional[DiagnosticSink] = None,
        source: str = "",
        line: Optional[int] = None,
    ) -> Dict[str, MetricValue]:
        """
        Parse metrics text into a name → MetricValue mapping.

        Malformed segments and duplicate names record METRIC_MALFORMED and
        are skipped (the first occurrence of a name wins). Numeric values
        outside a definition's range are kept and record
        METRIC_OUT_OF_RANGE. Values of text definitions are never numeric.

        Args:
            text: Metrics text, pairs separated by commas or newlines
            sink: Diagnostic sink
            source: Entry reference for diagnostics
            line: 1-based line of the metrics callout

        Returns:
            Metrics keyed by display name, in text order
        """
        sink = safe_sink(sink)
        metrics: Dict[str, MetricValue] = {}

        for segment in (s.strip() for row in text.splitlines() for s in row.split(",")):
            if not segment:
                continue

            try:
                name, raw = split_segment(segment)
            except MetricParseError as e:
                sink.record(DiagnosticKind.METRIC_MALFORMED, source, str(e), line=line)
                continue

            definition = self.lookup(name)
            display = definition.name if definition else name
            if display in metrics:
                sink.record(
                    DiagnosticKind.METRIC_MALFORMED,
                    source,
                    f"Duplicate metric '{display}' ignored (value {raw!r})",
                    line=line,
                )
                continue

            # Text metrics keep the value as written, even when it looks numeric
            numeric = None if definition and definition.is_text else parse_metric_value(raw)
            if definition and numeric is not None and not definition.in_range(numeric):
                sink.record(
                    DiagnosticKind.METRIC_OUT_OF_RANGE,
                    source,
                    f"Metric '{display}' value {raw} outside "
                    f"[{definition.min_value}, {definition.max_value}]",
                    line=line,
                )

            metrics[display] = MetricValue(
                name=display,
                raw=raw,
                numeric=numeric,
                configured=definition is not None,
            )

        logger.debug(f"Extracted {len(metrics)} metrics for {source or '<text>'}")
        return metrics
