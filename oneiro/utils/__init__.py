"""
Utilities package for oneiro.

- md: YAML front matter splitting and flattening
- fs: Note selection and normalized reading
- txt: Word counts for cleaned content

Import commonly-used utilities directly from this package:
    from oneiro.utils import parse_frontmatter, read_note, word_count
"""

from .md import (
    split_frontmatter,
    parse_frontmatter,
)

from .fs import (
    find_journal_files,
    is_excluded,
    normalize_text,
    read_note,
)

from .txt import (
    word_count,
)

__all__ = [
    # Markdown/YAML
    "split_frontmatter",
    "parse_frontmatter",
    # Filesystem
    "find_journal_files",
    "is_excluded",
    "normalize_text",
    "read_note",
    # Text
    "word_count",
]
