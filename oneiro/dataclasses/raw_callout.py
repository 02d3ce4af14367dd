#!/usr/bin/env python3
"""
raw_callout.py
-------------------

Defines the RawCallout dataclass: one node of the callout tree produced by
the scanner for a single journal note.

A callout is a block quote opened by a ``[!type]`` tag:

    > [!journal-entry] Sunday, June 15th, 2025 ^20250615
    >> [!dream-diary|mood=calm] Flying [[Dreams/Flying|over the sea]]
    >> We were gliding above the harbour...
    >>> [!dream-metrics]
    >>> Sensory Detail: 4, Emotional Recall: 3

Each RawCallout keeps:
- its normalized nesting depth and lower-cased type
- the raw ``|metadata`` suffix and the header text after the tag
- every raw source line after its header (nested callouts included)
- its child callouts, in source order
- its 0-based line span in the source file

Nodes live only for one scan; downstream extraction consumes them and
discards the tree.
"""
# ---- Annotations ----
from __future__ import annotations

# ---- Standard library imports ----
import re
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Union


# ----- Constants -----
BLOCK_ID_PATTERN = re.compile(r"(?:^|\s)\^([A-Za-z0-9][A-Za-z0-9-]*)\s*$")
"""Trailing Obsidian block reference (``^id``) on a header line."""


# ----- Dataclass -----
@dataclass
class RawCallout:
    """
    A callout block located by the scanner.

    Attributes:
        depth (int): Nesting depth, 1 for a top-level callout. Always the
            parent's depth + 1, even when the source skipped quote levels.
        callout_type (str): Lower-cased type from ``[!type]``.
        metadata_tag (Optional[str]): Raw text after ``|`` in the tag, if any.
        header_line (str): The full source line that opened the callout.
        title_text (str): Header text following the ``[!type]`` tag.
        body_lines (List[str]): Raw lines after the header up to the end of
            the callout, quote markers intact, nested callouts included.
        children (List[RawCallout]): Directly nested callouts.
        start_line (int): 0-based index of the header line.
        end_line (int): 0-based index of the last non-blank line.
    """

    # ---- Attributes ----
    depth: int
    callout_type: str
    metadata_tag: Optional[str] = None
    header_line: str = ""
    title_text: str = ""
    body_lines: List[str] = field(default_factory=list)
    children: List[RawCallout] = field(default_factory=list)
    start_line: int = 0
    end_line: int = 0

    # ---- Properties ----
    @property
    def line_number(self) -> int:
        """1-based line number of the header, for diagnostics."""
        return self.start_line + 1

    @property
    def block_id(self) -> Optional[str]:
        """Trailing ``^id`` block reference on the header, if present."""
        match = BLOCK_ID_PATTERN.search(self.title_text)
        return match.group(1) if match else None

    @property
    def metadata(self) -> Dict[str, Union[str, bool]]:
        """
        Parsed ``|metadata`` suffix.

        Tokens are separated by commas or whitespace; ``key=value`` tokens
        become string entries, bare tokens map to True.

        Examples:
            >>> RawCallout(1, "dream-diary", metadata_tag="mood=calm, lucid").metadata
            {'mood': 'calm', 'lucid': True}
        """
        if not self.metadata_tag:
            return {}

        parsed: Dict[str, Union[str, bool]] = {}
        for token in re.split(r"[,\s]+", self.metadata_tag.strip()):
            if not token:
                continue
            if "=" in token:
                key, value = token.split("=", 1)
                if key.strip():
                    parsed[key.strip().lower()] = value.strip()
            else:
                parsed[token.lower()] = True
        return parsed

    # ---- Tree navigation ----
    def walk(self) -> Iterator[RawCallout]:
        """Yield this callout and every nested callout, depth-first."""
        yield self
        for child in self.children:
            yield from child.walk()

    def find_first(self, callout_type: str) -> Optional[RawCallout]:
        """First nested callout (excluding self) of the given type."""
        for child in self.children:
            for node in child.walk():
                if node.callout_type == callout_type:
                    return node
        return None

    def __repr__(self) -> str:
        return (
            f"<RawCallout(type={self.callout_type!r}, depth={self.depth}, "
            f"lines={self.start_line + 1}-{self.end_line + 1}, "
            f"children={len(self.children)})>"
        )
