#!/usr/bin/env python3
"""
md.py
-------------------
Markdown utilities: YAML front matter splitting and flattening.

The engine consumes front matter as a flat key → string mapping (only
``created`` and ``modified`` matter for date resolution), so nested YAML
values are stringified rather than interpreted.
"""
from __future__ import annotations

# --- Standard library imports ---
from datetime import date, datetime
from typing import Any, Dict, List, Tuple

# --- Third party imports ---
import yaml

# --- Local imports ---
from oneiro.core.exceptions import FrontmatterError


# ----- YAML Frontmatter Parsing -----
def split_frontmatter(content: str) -> Tuple[str, List[str]]:
    """
    Split markdown content into YAML frontmatter and body.

    Expected format:
        ---
        yaml: content
        ---

        Body content here...

    Args:
        content: Full markdown file content

    Returns:
        Tuple of (frontmatter_text, body_lines). frontmatter_text is empty
        when the file has no (closed) frontmatter block.

    Examples:
        >>> fm, body = split_frontmatter("---\\ncreated: 20250615\\n---\\n\\nBody")
        >>> fm
        'created: 20250615'
        >>> body
        ['Body']
    """
    lines = content.splitlines()

    if not lines or lines[0].strip() != "---":
        return "", lines

    frontmatter_end = None
    for i, line in enumerate(lines[1:], 1):
        if line.strip() == "---":
            frontmatter_end = i
            break

    if frontmatter_end is None:
        return "", lines

    frontmatter_lines = lines[1:frontmatter_end]
    body_lines = lines[frontmatter_end + 1 :]

    while body_lines and body_lines[0].strip() == "":
        body_lines.pop(0)

    return "\n".join(frontmatter_lines), body_lines


def _flatten_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return ", ".join(_flatten_value(v) for v in value)
    return str(value)


def parse_frontmatter(content: str) -> Dict[str, str]:
    """
    Parse a note's YAML front matter into a flat key → string mapping.

    Keys are lower-cased. Scalar values are stringified (so an unquoted
    ``created: 20250615`` becomes ``"20250615"``); lists are joined with
    ", "; nested mappings are kept as their string form.

    Args:
        content: Full markdown file content

    Returns:
        Mapping of front matter keys to strings (empty without front matter)

    Raises:
        FrontmatterError: If the YAML is malformed or not a mapping
    """
    frontmatter, _ = split_frontmatter(content)
    if not frontmatter.strip():
        return {}

    try:
        data = yaml.safe_load(frontmatter)
    except yaml.YAMLError as e:
        raise FrontmatterError(f"Cannot parse YAML front matter: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise FrontmatterError(
            f"Front matter must be a mapping, got {type(data).__name__}"
        )

    return {str(key).strip().lower(): _flatten_value(value) for key, value in data.items()}
