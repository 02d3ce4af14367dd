"""
txt.py
-------------------
Text metrics for cleaned dream content.
"""

from __future__ import annotations

# --- Third-party library imports ---
from textstat import lexicon_count  # type: ignore


# ----- Word-count -----
def word_count(text: str) -> int:
    """
    input: text, cleaned narrative content
    output: number of words, punctuation ignored
    process: textstat lexicon count; empty or whitespace-only text is 0
    """
    if not text or not text.strip():
        return 0
    return int(lexicon_count(text, removepunct=True))

