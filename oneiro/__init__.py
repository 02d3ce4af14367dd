"""
oneiro
------
Dream journal entry parsing and metrics extraction.

Scans journal notes for nested callout blocks, resolves each entry's date,
cleans narrative content and extracts named metrics per dream entry.

Subpackages:
    core: Exceptions, logging, diagnostics, paths and CLI helpers
    utils: Markdown, filesystem and text utilities
    dataclasses: RawCallout, ResolvedDate, MetricValue, DreamEntry
    parsers: Callout scanner, date resolver, content cleaner, metric extractor
    pipeline: Entry assembler, settings, JSON export and CLI
"""

__version__ = "0.4.0"
