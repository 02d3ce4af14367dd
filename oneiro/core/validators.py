#!/usr/bin/env python3
"""
validators.py
--------------------
Value normalization for settings loaded from YAML.

Settings files are hand-edited, so the same value can arrive as a bool,
an int or a string ("yes", "5", "5.0"). These helpers coerce such values
and raise ConfigError when they cannot.
"""
from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from .exceptions import ConfigError


class DataValidator:
    """Centralized coercion helpers for settings values."""

    @staticmethod
    def validate_required_fields(
        data: Dict[str, Any], required_fields: List[str]
    ) -> None:
        """
        Validate that required fields are present and non-empty.

        Raises:
            ConfigError: If a field is missing or empty
        """
        for field in required_fields:
            if field not in data or data[field] in (None, ""):
                raise ConfigError(f"Required field '{field}' missing or empty")

    @staticmethod
    def normalize_callout_name(value: Any) -> str:
        """
        Normalize a callout type name: lower-case, whitespace runs to hyphens.

        Examples:
            >>> DataValidator.normalize_callout_name("Dream Diary")
            'dream-diary'
            >>> DataValidator.normalize_callout_name("  journal-entry ")
            'journal-entry'

        Raises:
            ConfigError: If the value is empty or not a string
        """
        if not isinstance(value, str) or not value.strip():
            raise ConfigError(f"Callout name must be a non-empty string, got {value!r}")
        return re.sub(r"\s+", "-", value.strip().lower())

    @staticmethod
    def normalize_bool(value: Any) -> Optional[bool]:
        """
        Convert various inputs to boolean.

        Raises:
            ConfigError: If conversion fails
        """
        if isinstance(value, bool):
            return value
        elif isinstance(value, (int, float)):
            if value == 0:
                return False
            elif value == 1:
                return True
            raise ConfigError(f"Cannot convert numeric '{value}' to boolean")
        elif isinstance(value, str):
            if value.lower() in ("true", "1", "yes", "on"):
                return True
            elif value.lower() in ("false", "0", "no", "off"):
                return False
            raise ConfigError(f"Cannot convert '{value}' to boolean")
        elif value is not None:
            return bool(value)
        return None

    @staticmethod
    def normalize_float(value: Any) -> Optional[float]:
        """
        Convert value to float.

        Raises:
            ConfigError: If the value is not numeric
        """
        if value is None:
            return None
        if isinstance(value, bool):
            raise ConfigError(f"Expected a number, got boolean {value}")
        try:
            return float(value)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Expected a number, got {value!r}") from e

    @staticmethod
    def normalize_int(value: Any) -> Optional[int]:
        """
        Convert value to a non-negative integer.

        Raises:
            ConfigError: If the value is not a whole non-negative number
        """
        if value is None:
            return None
        number = DataValidator.normalize_float(value)
        if number is None or number != int(number) or number < 0:
            raise ConfigError(f"Expected a non-negative integer, got {value!r}")
        return int(number)
