#!/usr/bin/env python3
"""
exceptions.py
--------------------
Custom exception classes for the oneiro project.

This module defines a hierarchy of exceptions used throughout the project
to handle specific error conditions in different subsystems.

Exception Hierarchy:
    Exception (built-in)
    └── OneiroError - Base for all project errors
        ├── ConfigError - Invalid settings file or values
        ├── NoteReadError - A journal note could not be read
        ├── FrontmatterError - YAML front matter cannot be parsed
        ├── CalloutScanError - Callout structure cannot be scanned
        ├── DateResolutionError - A date token is present but invalid
        ├── MetricParseError - A metrics segment cannot be parsed
        ├── EntryAssemblyError - A dream entry cannot be assembled
        └── ExportError - Extraction results cannot be exported

Inside an extraction run none of these abort the run: they are caught at
the file or entry boundary and recorded as diagnostics. Only the settings
loader and the exporter let them reach the caller.

Usage:
    from oneiro.core.exceptions import ConfigError, NoteReadError

    try:
        settings = load_settings(path)
    except ConfigError as e:
        logger.log_error(e)
"""


class OneiroError(Exception):
    """
    Base exception for all oneiro errors.

    Catch this to handle any project error, or catch specific
    subclasses for more granular error handling.
    """

    pass


class ConfigError(OneiroError):
    """
    Exception for invalid engine settings.

    Raised when a settings file or mapping cannot be turned into
    EngineSettings:
    - YAML syntax errors in the settings file
    - Wrong value types (e.g. metrics not a list)
    - Metric definitions with min_value greater than max_value
    - Empty callout names

    Examples:
        >>> raise ConfigError("metrics must be a list, got str")
        >>> raise ConfigError("Metric 'Lucidity': min_value 5 > max_value 1")
    """

    pass


class NoteReadError(OneiroError):
    """
    Exception for journal note read failures.

    Raised when the note storage collaborator cannot deliver a file's text:
    - File not found or not a regular file
    - Permission issues
    - Undecodable bytes

    Examples:
        >>> raise NoteReadError("Cannot read note: Journal/2025.md")
    """

    pass


class FrontmatterError(OneiroError):
    """
    Exception for malformed YAML front matter.

    Examples:
        >>> raise FrontmatterError("Cannot parse YAML front matter: mapping values are not allowed here")
        >>> raise FrontmatterError("Front matter must be a mapping, got list")
    """

    pass


class CalloutScanError(OneiroError):
    """
    Exception for callout structure failures.

    The scanner itself degrades malformed lines to ordinary paragraphs;
    this is raised only by helpers asked to parse a single opener line
    that is not one.

    Examples:
        >>> raise CalloutScanError("Not a callout opener: '> plain quote'")
    """

    pass


class DateResolutionError(OneiroError):
    """
    Exception for date tokens that are present but not a calendar date.

    Examples:
        >>> raise DateResolutionError("Block reference ^20251340 is not a valid date")
        >>> raise DateResolutionError("February 30, 2024 is not a valid date")
    """

    pass


class MetricParseError(OneiroError):
    """
    Exception for metrics segments that cannot be split into name and value.

    Examples:
        >>> raise MetricParseError("Metric segment has no ':' separator: 'Lucid'")
        >>> raise MetricParseError("Metric segment has an empty name: ': 3'")
    """

    pass


class EntryAssemblyError(OneiroError):
    """
    Exception for dream entries that cannot be assembled.

    Examples:
        >>> raise EntryAssemblyError("Dream-diary callout at line 12 has no header")
    """

    pass


class ExportError(OneiroError):
    """
    Exception for export failures.

    Examples:
        >>> raise ExportError("Cannot write JSON export: permission denied")
    """

    pass
