"""
Parsers for journal note text.

Modules:
    scanner: Callout tree scanning
    dates: Entry date resolution
    cleaner: Narrative content cleaning and title extraction
    metrics: Metrics callout parsing (import from oneiro.parsers.metrics)
"""

from .cleaner import ContentCleaner, ParagraphMode, clean_content, extract_title
from .dates import DateResolver
from .scanner import CalloutScanner, iter_callouts, scan_callouts

__all__ = [
    "CalloutScanner",
    "ContentCleaner",
    "DateResolver",
    "ParagraphMode",
    "clean_content",
    "extract_title",
    "iter_callouts",
    "scan_callouts",
]
