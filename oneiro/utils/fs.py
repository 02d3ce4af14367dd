#!/usr/bin/env python3
"""
fs.py
-------------------
Note storage helpers: selecting journal files and reading their text.

Functions:
    find_journal_files: Recursively select markdown notes under a folder
    is_excluded: Check a note path against exclusion globs
    read_note: Read a note as normalized UTF-8 text

Usage:
    from oneiro.utils.fs import find_journal_files, read_note

    files = find_journal_files(Path("Journals"), exclude=["Templates/**"])
    text = read_note(files[0])
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import fnmatch
from pathlib import Path, PurePosixPath
from typing import Iterable, List, Optional

# --- Third party imports ---
from ftfy import fix_text  # type: ignore

# --- Local imports ---
from oneiro.core.exceptions import NoteReadError


def is_excluded(relative_path: str, patterns: Iterable[str]) -> bool:
    """
    Check whether a note (path relative to the selected folder) is excluded.

    A pattern matches the note itself, or any of its parent folders, so
    ``Templates`` excludes everything below ``Templates/``.

    Examples:
        >>> is_excluded("Templates/dream.md", ["Templates"])
        True
        >>> is_excluded("2025/06.md", ["*.canvas"])
        False
    """
    path = PurePosixPath(relative_path)
    candidates = [str(path)] + [str(parent) for parent in path.parents if str(parent) != "."]
    for pattern in patterns:
        pattern = pattern.strip().strip("/")
        if not pattern:
            continue
        if any(fnmatch.fnmatch(candidate, pattern) for candidate in candidates):
            return True
    return False


def find_journal_files(
    directory: Path,
    exclude: Optional[Iterable[str]] = None,
    max_files: Optional[int] = None,
    pattern: str = "**/*.md",
) -> List[Path]:
    """
    Find markdown notes under a folder, sorted by path.

    Args:
        directory: Folder to search recursively
        exclude: Glob patterns (relative to directory) of notes/folders to skip
        max_files: Optional cap on the number of files returned
        pattern: Glob used to find candidate files

    Returns:
        Sorted list of note paths (empty if directory does not exist)
    """
    directory = Path(directory)
    if not directory.is_dir():
        return []

    patterns = list(exclude or [])
    files = [
        path
        for path in sorted(directory.glob(pattern))
        if path.is_file()
        and not is_excluded(path.relative_to(directory).as_posix(), patterns)
    ]

    if max_files is not None:
        files = files[:max_files]
    return files


def normalize_text(text: str) -> str:
    """
    Normalize note text: fix mojibake, drop NUL bytes, use LF line endings.
    """
    text = fix_text(text)
    return text.replace("\x00", "").replace("\r\n", "\n").replace("\r", "\n")


def read_note(path: str | Path) -> str:
    """
    Read a journal note as normalized UTF-8 text.

    Raises:
        NoteReadError: If the file cannot be read or decoded
    """
    note_path = Path(path)
    try:
        raw = note_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise NoteReadError(f"Cannot read note {note_path}: {e}") from e
    return normalize_text(raw)
