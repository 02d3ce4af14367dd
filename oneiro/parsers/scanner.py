#!/usr/bin/env python3
"""
scanner.py
-------------------
Line-oriented callout scanner.

Turns a note's text into a tree of RawCallout nodes. The scan is a small
state machine over lines with an explicit stack of open callouts:

- A quote line whose content starts with ``[!type]`` opens a callout. Its
  depth is the number of ``>`` markers on the line, whitespace between
  markers ignored (``>> >``, ``> > >`` and ``>>>`` are all depth 3).
- Opening at depth d closes every open callout at depth >= d. What
  remains on top of the stack becomes the parent.
- Any other quote line belongs to the callouts still open at or above its
  own depth; callouts deeper than the line are closed.
- Blank lines are held by the open callouts. A non-quote, non-blank line
  closes everything.

Malformed input never stops the scan. A callout that skips quote levels is
attached to the nearest open parent at parent depth + 1, and a line that
looks like a tag but is not one is kept as ordinary text. Both record a
STRUCTURAL_WARNING.

Usage:
    from oneiro.parsers.scanner import scan_callouts

    roots = scan_callouts(text, source="Journal/2025-06.md", sink=sink)
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import logging
import re
from dataclasses import dataclass
from typing import Iterable, Iterator, List, NamedTuple, Optional, Tuple

# --- Local imports ---
from oneiro.core.diagnostics import DiagnosticKind, DiagnosticSink, safe_sink
from oneiro.core.exceptions import CalloutScanError
from oneiro.dataclasses.raw_callout import RawCallout


logger = logging.getLogger(__name__)


# ----- Patterns -----
QUOTE_PREFIX = re.compile(r"^[ \t]*((?:>[ \t]*)+)")
CALLOUT_OPENER = re.compile(
    r"^\[!(?P<type>[A-Za-z0-9_][A-Za-z0-9_-]*)"
    r"(?:\|(?P<meta>[^\]]*))?\]"
    r"[+-]?[ \t]*(?P<title>.*?)[ \t]*$"
)
TAG_LIKE = re.compile(r"^\[!")


class CalloutOpener(NamedTuple):
    """Parsed pieces of a callout header line."""

    depth: int
    callout_type: str
    metadata_tag: Optional[str]
    title_text: str


def count_quote_markers(line: str) -> int:
    """
    Number of ``>`` markers leading a line, whitespace between them ignored.

    Examples:
        >>> count_quote_markers(">> > [!dream-metrics]")
        3
        >>> count_quote_markers("plain text")
        0
    """
    match = QUOTE_PREFIX.match(line)
    return match.group(1).count(">") if match else 0


def strip_quote_markers(line: str) -> str:
    """Remove the leading quote-marker run from a line."""
    return QUOTE_PREFIX.sub("", line, count=1)


def _match_opener(line: str) -> Tuple[int, Optional[re.Match]]:
    depth = count_quote_markers(line)
    if depth == 0:
        return 0, None
    return depth, CALLOUT_OPENER.match(strip_quote_markers(line))


def parse_callout_opener(line: str) -> CalloutOpener:
    """
    Parse a single callout header line.

    Raises:
        CalloutScanError: If the line is not a callout opener

    Examples:
        >>> parse_callout_opener("> > [!Dream-Diary|lucid] Flying ^d1")
        CalloutOpener(depth=2, callout_type='dream-diary', metadata_tag='lucid', title_text='Flying ^d1')
    """
    depth, match = _match_opener(line)
    if match is None:
        raise CalloutScanError(f"Not a callout opener: {line!r}")
    return CalloutOpener(
        depth=depth,
        callout_type=match.group("type").lower(),
        metadata_tag=match.group("meta"),
        title_text=match.group("title"),
    )


@dataclass
class _OpenCallout:
    """Stack frame: arena index plus the raw marker depth it opened at."""

    index: int
    raw_depth: int


class CalloutScanner:
    """
    Stateful scanner for one note at a time.

    Nodes are allocated in an arena list and referenced by index from the
    stack of open callouts; the arena is reset on every ``scan`` call.
    """

    def __init__(self, sink: Optional[DiagnosticSink] = None) -> None:
        self.sink = safe_sink(sink)
        self._arena: List[RawCallout] = []
        self._stack: List[_OpenCallout] = []
        self._roots: List[int] = []
        self._source = ""

    # ---- Public ----
    def scan(self, text: str, source: str = "") -> List[RawCallout]:
        """
        Scan a note and return its top-level callouts in source order.

        Args:
            text: Full note text
            source: Note path, used in diagnostics

        Returns:
            Top-level RawCallout trees (possibly empty)
        """
        self._arena = []
        self._stack = []
        self._roots = []
        self._source = source

        for line_no, line in enumerate(text.splitlines()):
            self._feed(line_no, line)
        self._close_to(0)

        logger.debug(f"Scanned {len(self._arena)} callouts in {source or '<text>'}")
        return [self._arena[i] for i in self._roots]

    # ---- State transitions ----
    def _feed(self, line_no: int, line: str) -> None:
        if not line.strip():
            self._append(line_no, line, blank=True)
            return

        depth, opener = _match_opener(line)
        if depth == 0:
            self._close_to(0)
            return

        if opener is not None:
            self._open(line_no, line, depth, opener)
            return

        if TAG_LIKE.match(strip_quote_markers(line)):
            self._warn(line_no, f"Malformed callout tag treated as text: {line.strip()!r}")

        self._close_deeper_than(depth)
        self._append(line_no, line)

    def _open(self, line_no: int, line: str, raw_depth: int, opener: re.Match) -> None:
        # Same or shallower opener closes its predecessors first
        self._close_deeper_than(raw_depth - 1)

        if self._stack:
            parent_frame = self._stack[-1]
            parent = self._arena[parent_frame.index]
            if raw_depth > parent_frame.raw_depth + 1:
                self._warn(
                    line_no,
                    f"Callout [!{opener.group('type').lower()}] skips quote levels "
                    f"({parent_frame.raw_depth} -> {raw_depth}); nested at depth {parent.depth + 1}",
                )
            depth = parent.depth + 1
        else:
            parent = None
            if raw_depth > 1:
                self._warn(
                    line_no,
                    f"Callout [!{opener.group('type').lower()}] opens at quote depth "
                    f"{raw_depth} without an enclosing callout; treated as top-level",
                )
            depth = 1

        # Header line belongs to enclosing callouts' bodies
        self._append(line_no, line)

        node = RawCallout(
            depth=depth,
            callout_type=opener.group("type").lower(),
            metadata_tag=opener.group("meta"),
            header_line=line,
            title_text=opener.group("title"),
            start_line=line_no,
            end_line=line_no,
        )
        self._arena.append(node)
        index = len(self._arena) - 1

        if parent is None:
            self._roots.append(index)
        else:
            parent.children.append(node)
        self._stack.append(_OpenCallout(index=index, raw_depth=raw_depth))

    def _append(self, line_no: int, line: str, blank: bool = False) -> None:
        for frame in self._stack:
            node = self._arena[frame.index]
            node.body_lines.append(line)
            if not blank:
                node.end_line = line_no

    def _close_deeper_than(self, raw_depth: int) -> None:
        while self._stack and self._stack[-1].raw_depth > raw_depth:
            self._close_top()

    def _close_to(self, size: int) -> None:
        while len(self._stack) > size:
            self._close_top()

    def _close_top(self) -> None:
        node = self._arena[self._stack.pop().index]
        # Drop held blank lines past the last content line
        del node.body_lines[node.end_line - node.start_line :]

    def _warn(self, line_no: int, message: str) -> None:
        self.sink.record(
            DiagnosticKind.STRUCTURAL_WARNING, self._source, message, line=line_no + 1
        )


# ----- Convenience -----
def scan_callouts(
    text: str, source: str = "", sink: Optional[DiagnosticSink] = None
) -> List[RawCallout]:
    """Scan text with a fresh CalloutScanner."""
    return CalloutScanner(sink).scan(text, source)


def iter_callouts(
    roots: Iterable[RawCallout],
) -> Iterator[Tuple[RawCallout, Tuple[RawCallout, ...]]]:
    """
    Walk callout trees depth-first.

    Yields:
        (callout, ancestors) pairs; ancestors run from the root down to
        the callout's parent.
    """
    stack: List[Tuple[RawCallout, Tuple[RawCallout, ...]]] = [
        (root, ()) for root in reversed(list(roots))
    ]
    while stack:
        node, ancestors = stack.pop()
        yield node, ancestors
        for child in reversed(node.children):
            stack.append((child, ancestors + (node,)))
