#!/usr/bin/env python3
"""
cleaner.py
-------------------
Narrative content cleaning for dream-diary bodies.

Stages run in a fixed order; later stages assume earlier ones have already
removed block markers:

    1. truncate at the metrics callout
    2. drop callout directive lines (still quote-marked) and block references
    3. strip quote markers
    4. drop image/file embeds
    5. wiki-links to display text
    6. markdown links to text, image links dropped
    7. code, emphasis, headings, comments and HTML tags
    8. horizontal rules
    9. whitespace and paragraph collapsing

Stages 2, 3, 7 (fences and headings) and 8 work on lines and run once. The
inline stages then repeat until the text stops changing, since markup split
across lines only matches once the lines are joined. Cleaning is idempotent:
cleaning already-clean text returns it unchanged.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import re
from enum import Enum
from typing import Callable, List, Optional, Tuple

# --- Local imports ---
from oneiro.core.diagnostics import DiagnosticKind, DiagnosticSink


# ----- Constants -----
DEFAULT_TITLE = "Untitled Dream"

MEDIA_EXTENSIONS = (
    "png|jpe?g|gif|webp|svg|bmp|tiff?|heic|avif"
    "|mp4|mov|webm|mkv|mp3|wav|m4a|ogg|flac|pdf"
)

QUOTE_PREFIX = re.compile(r"^[ \t]*(?:>[ \t]*)+", re.MULTILINE)
CALLOUT_LINE = re.compile(r"^[ \t]*(?:>[ \t]*)+\[![^\]\n]*\][+-]?[^\n]*$", re.MULTILINE)
BLOCK_REF = re.compile(r"(?:^|[ \t]+)\^[A-Za-z0-9][A-Za-z0-9-]*[ \t]*$", re.MULTILINE)

EMBED = re.compile(r"!\[\[[^\]\n]*\]\]")
MEDIA_LINK = re.compile(
    r"\[\[[^\]\n|]*\.(?:%s)(?:\|[^\]\n]*)?\]\]" % MEDIA_EXTENSIONS, re.IGNORECASE
)
BARE_MEDIA = re.compile(
    r"(?<![\w/.-])[\w./-]+\.(?:%s)(?:\|\d+(?:x\d+)?)?(?![\w])" % MEDIA_EXTENSIONS,
    re.IGNORECASE,
)
WIKI_LINK = re.compile(r"\[\[([^\]\n|]*)(?:\|([^\]\n]*))?\]\]")

IMAGE_LINK = re.compile(r"!\[[^\]\n]*\]\([^)\n]*\)")
MARKDOWN_LINK = re.compile(r"\[([^\]\n]*)\]\([^)\n]*\)")

CODE_FENCE = re.compile(r"^[ \t]*(?:```|~~~)[^\n]*$", re.MULTILINE)
INLINE_CODE = re.compile(r"`+([^`\n]*)`+")
HEADING = re.compile(r"^[ \t]*#{1,6}[ \t]+", re.MULTILINE)
BOLD = re.compile(r"(\*\*|__)(?=\S)(.+?)(?<=\S)\1")
ITALIC_STAR = re.compile(r"(?<!\*)\*(?=[^\s*])([^*\n]+?)(?<=[^\s*])\*(?!\*)")
ITALIC_UNDERSCORE = re.compile(r"(?<![\w_])_(?=[^\s_])([^_\n]+?)(?<=[^\s_])_(?![\w_])")
STRIKE = re.compile(r"~~(?=\S)(.+?)(?<=\S)~~")
HIGHLIGHT = re.compile(r"==(?=\S)(.+?)(?<=\S)==")
HTML_COMMENT = re.compile(r"<!--.*?-->", re.DOTALL)
OBSIDIAN_COMMENT = re.compile(r"%%.*?%%", re.DOTALL)
HTML_TAG = re.compile(r"</?(?!br\b)[A-Za-z][\w-]*(?:\s[^<>]*)?/?>", re.IGNORECASE)

HORIZONTAL_RULE = re.compile(r"^[ \t]*(?:-{3,}|\*{3,}|_{3,})[ \t]*$", re.MULTILINE)
PARAGRAPH_BREAK = re.compile(r"\n[ \t]*\n")
WHITESPACE = re.compile(r"\s+")


class ParagraphMode(str, Enum):
    """How paragraph breaks survive cleaning."""

    JOINED = "joined"
    PARAGRAPHS = "paragraphs"

    @property
    def separator(self) -> str:
        return " " if self is ParagraphMode.JOINED else "\n\n"


# ----- Stages -----
def truncate_at_metrics(text: str, metrics_callout: str) -> Tuple[str, bool]:
    """
    Cut text at the first line carrying the metrics callout tag.

    Returns:
        (text, found) where found tells whether the boundary was present
    """
    # The type name must end at "]" or "|", so "[!dream-metrics-extra]" is not
    # the boundary
    marker = re.compile(r"\[!%s(?=[\]|])" % re.escape(metrics_callout), re.IGNORECASE)
    lines = text.split("\n")
    for i, line in enumerate(lines):
        if marker.search(line):
            return "\n".join(lines[:i]), True
    return text, False


def strip_quotes(text: str) -> str:
    return QUOTE_PREFIX.sub("", text)


def remove_directives(text: str) -> str:
    """
    Drop nested callout header lines and trailing ``^id`` references.

    Callout headers only exist inside quotes, so only quote-marked lines
    are dropped; narrative text that merely starts with ``[!`` is kept.
    """
    text = CALLOUT_LINE.sub("", text)
    return BLOCK_REF.sub("", text)


def remove_embeds(text: str) -> str:
    """Drop ``![[...]]`` embeds, links to media files and bare media names."""
    text = EMBED.sub("", text)
    text = MEDIA_LINK.sub("", text)
    return BARE_MEDIA.sub("", text)


def _wiki_display(match: re.Match) -> str:
    alias = match.group(2)
    if alias is not None and alias.strip():
        return alias.strip()
    target = match.group(1)
    # Anchors (#heading, ^block) are not display text
    return re.split(r"[#^]", target, maxsplit=1)[0].strip()


def convert_wiki_links(text: str) -> str:
    """
    Replace wiki-links by their display text.

    Examples:
        >>> convert_wiki_links("see [[Some Note|alias text]] and [[Other#Part]]")
        'see alias text and Other'
    """
    return WIKI_LINK.sub(_wiki_display, text)


def convert_markdown_links(text: str) -> str:
    text = IMAGE_LINK.sub("", text)
    return MARKDOWN_LINK.sub(r"\1", text)


def strip_block_markup(text: str) -> str:
    """Remove code fence lines and heading markers."""
    text = CODE_FENCE.sub("", text)
    return HEADING.sub("", text)


def strip_inline_markup(text: str) -> str:
    """Remove comments, inline code and emphasis markers, and HTML tags."""
    text = HTML_COMMENT.sub("", text)
    text = OBSIDIAN_COMMENT.sub("", text)
    text = INLINE_CODE.sub(r"\1", text)
    text = BOLD.sub(r"\2", text)
    text = ITALIC_STAR.sub(r"\1", text)
    text = ITALIC_UNDERSCORE.sub(r"\1", text)
    text = STRIKE.sub(r"\1", text)
    text = HIGHLIGHT.sub(r"\1", text)
    return HTML_TAG.sub("", text)


def strip_markup(text: str) -> str:
    """Remove code, emphasis, heading markers, comments and HTML tags."""
    return strip_inline_markup(strip_block_markup(text))


def remove_horizontal_rules(text: str) -> str:
    return HORIZONTAL_RULE.sub("", text)


def collapse_whitespace(text: str, mode: ParagraphMode = ParagraphMode.JOINED) -> str:
    """
    Join lines within paragraphs and paragraphs with the mode's separator.

    Examples:
        >>> collapse_whitespace("a\\n b\\n\\n\\n c", ParagraphMode.PARAGRAPHS)
        'a b\\n\\nc'
    """
    paragraphs = [WHITESPACE.sub(" ", block).strip() for block in PARAGRAPH_BREAK.split(text)]
    return mode.separator.join(p for p in paragraphs if p)


# ----- Cleaner -----
class ContentCleaner:
    """
    Cleans dream-diary bodies into narrative text.

    Attributes:
        metrics_callout: Callout type whose first occurrence ends the narrative
        paragraph_mode: Whether paragraphs are joined or kept apart
    """

    def __init__(
        self,
        metrics_callout: str = "dream-metrics",
        paragraph_mode: ParagraphMode = ParagraphMode.JOINED,
    ) -> None:
        self.metrics_callout = metrics_callout
        self.paragraph_mode = ParagraphMode(paragraph_mode)
        self._line_stages: List[Callable[[str], str]] = [
            remove_directives,
            strip_quotes,
            strip_block_markup,
            remove_horizontal_rules,
        ]
        self._inline_stages: List[Callable[[str], str]] = [
            remove_embeds,
            convert_wiki_links,
            convert_markdown_links,
            strip_inline_markup,
        ]

    def clean(
        self,
        text: str,
        sink: Optional[DiagnosticSink] = None,
        source: str = "",
        line: Optional[int] = None,
    ) -> str:
        """
        Clean a body, truncated at the metrics callout.

        Args:
            text: Raw body text (quote markers may be present)
            sink: When given, receives CONTENT_BOUNDARY_MISSING if the
                metrics callout is absent; the full body is kept then
            source: Note path or entry reference for diagnostics
            line: 1-based line of the body's callout, for diagnostics

        Returns:
            Cleaned narrative text
        """
        text, found = truncate_at_metrics(text.replace("\r\n", "\n"), self.metrics_callout)
        if not found and sink is not None:
            sink.record(
                DiagnosticKind.CONTENT_BOUNDARY_MISSING,
                source,
                f"No [!{self.metrics_callout}] callout; whole body kept as content",
                line=line,
            )

        # Line-anchored stages see the original lines exactly once; once
        # joined, inline text starting with "[!" or "#" is narrative
        for stage in self._line_stages:
            text = stage(text)

        # Inline stages run to a fixed point; markup split across lines can
        # only match once the lines are joined
        previous = None
        while text != previous:
            previous = text
            for stage in self._inline_stages:
                text = stage(text)
            text = collapse_whitespace(text, self.paragraph_mode)
        return text


def clean_content(
    text: str,
    metrics_callout: str = "dream-metrics",
    paragraph_mode: ParagraphMode = ParagraphMode.JOINED,
) -> str:
    """Clean text with a one-off ContentCleaner."""
    return ContentCleaner(metrics_callout, paragraph_mode).clean(text)


def extract_title(header_text: str) -> str:
    """
    Title of a dream from its diary header text.

    Text before the first wiki-link wins; otherwise the first wiki-link's
    display text; otherwise ``Untitled Dream``.

    Examples:
        >>> extract_title("Flying [[Dreams/Flying|over the sea]] ^d1")
        'Flying'
        >>> extract_title("[[Dreams/Flying|over the sea]]")
        'over the sea'
        >>> extract_title("")
        'Untitled Dream'
    """
    header = BLOCK_REF.sub("", header_text).strip()
    before, _, _ = header.partition("[[")
    title = collapse_whitespace(strip_markup(before)).strip(" -–—:|")
    if title:
        return title

    match = WIKI_LINK.search(header)
    if match:
        display = _wiki_display(match)
        if display:
            return display
    return DEFAULT_TITLE
