#!/usr/bin/env python3
"""
settings.py
-----------------

Engine settings: callout type names, metric definitions and note selection.

Settings are plain dataclasses. They can be loaded from and saved to a YAML
file; the engine itself never persists them.

Example file:

    journal_callout: journal-entry
    diary_callout: dream-diary
    metrics_callout: dream-metrics
    paragraph_mode: joined
    exclude:
      - Templates
    metrics:
      - name: Sensory Detail
        min_value: 1
        max_value: 5
      - name: Lost Segments
        min_value: 0
        max_value: 5
        enabled: false
      - name: Dream Theme
        type: text
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

# --- Third party imports ---
import yaml

# --- Local imports ---
from oneiro.core.exceptions import ConfigError
from oneiro.core.validators import DataValidator
from oneiro.parsers.cleaner import ParagraphMode


logger = logging.getLogger(__name__)


WORD_COUNT_METRIC = "Word Count"
"""Aggregate key for the computed word count; no definition may use it."""


class MetricType(str, Enum):
    """Kind of value a metric holds."""

    NUMBER = "number"
    TEXT = "text"


@dataclass(frozen=True)
class MetricDefinition:
    """
    A configured metric.

    Attributes:
        name: Display name; matched case-insensitively against metrics text
        min_value: Lowest expected value (inclusive), if bounded
        max_value: Highest expected value (inclusive), if bounded
        enabled: Whether values are aggregated into run statistics
        description: Optional explanation shown to users
        metric_type: NUMBER metrics are parsed and range-checked; TEXT
            metrics keep their value as written and are never aggregated
    """

    name: str
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    enabled: bool = True
    description: Optional[str] = None
    metric_type: MetricType = MetricType.NUMBER

    def __post_init__(self) -> None:
        if not self.name or not self.name.strip():
            raise ConfigError("Metric name cannot be empty")
        if self.key == normalize_metric_name(WORD_COUNT_METRIC):
            raise ConfigError(
                f"Metric name '{self.name}' is reserved for the computed word count"
            )
        try:
            object.__setattr__(self, "metric_type", MetricType(self.metric_type))
        except ValueError as e:
            raise ConfigError(
                f"Metric '{self.name}': type must be one of "
                f"{[kind.value for kind in MetricType]}, got {self.metric_type!r}"
            ) from e
        if (
            self.min_value is not None
            and self.max_value is not None
            and self.min_value > self.max_value
        ):
            raise ConfigError(
                f"Metric '{self.name}': min_value {self.min_value} > max_value {self.max_value}"
            )

    @property
    def key(self) -> str:
        """Case-folded, whitespace-normalized name used for matching."""
        return normalize_metric_name(self.name)

    @property
    def is_text(self) -> bool:
        return self.metric_type is MetricType.TEXT

    def in_range(self, value: float) -> bool:
        if self.min_value is not None and value < self.min_value:
            return False
        if self.max_value is not None and value > self.max_value:
            return False
        return True

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> MetricDefinition:
        """
        Build a definition from a YAML mapping.

        Raises:
            ConfigError: If name is missing or values have the wrong type
        """
        if not isinstance(data, Mapping):
            raise ConfigError(f"Metric definition must be a mapping, got {type(data).__name__}")
        DataValidator.validate_required_fields(dict(data), ["name"])

        enabled = DataValidator.normalize_bool(data.get("enabled", True))
        description = data.get("description")
        metric_type = data.get("type")
        return cls(
            name=str(data["name"]).strip(),
            min_value=DataValidator.normalize_float(data.get("min_value")),
            max_value=DataValidator.normalize_float(data.get("max_value")),
            enabled=True if enabled is None else enabled,
            description=str(description) if description is not None else None,
            metric_type=(
                str(metric_type).strip().lower() if metric_type is not None else MetricType.NUMBER
            ),
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"name": self.name}
        if self.min_value is not None:
            data["min_value"] = _plain_number(self.min_value)
        if self.max_value is not None:
            data["max_value"] = _plain_number(self.max_value)
        data["enabled"] = self.enabled
        if self.description:
            data["description"] = self.description
        if self.is_text:
            data["type"] = self.metric_type.value
        return data


def _plain_number(value: float) -> Any:
    return int(value) if float(value).is_integer() else value


def normalize_metric_name(name: str) -> str:
    """
    Matching key for a metric name.

    Examples:
        >>> normalize_metric_name("  sensory   DETAIL ")
        'sensory detail'
    """
    return " ".join(name.split()).casefold()


DEFAULT_METRICS: Tuple[MetricDefinition, ...] = (
    MetricDefinition("Words", 0, 1000, description="Number of words in the dream entry"),
    MetricDefinition("Reading Time", 0, 60, description="Estimated reading time in minutes"),
    MetricDefinition(
        "Sensory Detail", 1, 5, description="Level of sensory information recalled from the dream"
    ),
    MetricDefinition(
        "Emotional Recall", 1, 5, description="Level of emotional detail recalled from the dream"
    ),
    MetricDefinition(
        "Lost Segments",
        0,
        5,
        description="Number of dream segments that feel missing or incomplete",
    ),
    MetricDefinition(
        "Descriptiveness", 1, 5, description="Level of detail in the dream description"
    ),
    MetricDefinition(
        "Confidence Score",
        1,
        5,
        description="Confidence level in the completeness of dream recall",
    ),
    MetricDefinition(
        "Characters Role",
        1,
        5,
        description="Significance of familiar characters in the dream narrative",
    ),
    MetricDefinition(
        "Characters Count",
        0,
        20,
        enabled=False,
        description="Total number of characters in the dream",
    ),
    MetricDefinition(
        "Familiar Count",
        0,
        10,
        enabled=False,
        description="Number of familiar characters in the dream",
    ),
    MetricDefinition(
        "Unfamiliar Count",
        0,
        10,
        enabled=False,
        description="Number of unfamiliar characters in the dream",
    ),
    MetricDefinition(
        "Characters List",
        enabled=False,
        description="List of characters that appeared in the dream",
        metric_type=MetricType.TEXT,
    ),
    MetricDefinition(
        "Dream Theme",
        enabled=False,
        description="Main themes or motifs in the dream",
        metric_type=MetricType.TEXT,
    ),
    MetricDefinition(
        "Lucidity Level",
        1,
        5,
        enabled=False,
        description="Degree of awareness that you were dreaming while in the dream",
    ),
    MetricDefinition(
        "Dream Coherence",
        1,
        5,
        enabled=False,
        description="How logical and consistent the dream narrative was",
    ),
    MetricDefinition(
        "Setting Familiarity",
        1,
        5,
        enabled=False,
        description="How familiar the dream locations were compared to waking life",
    ),
    MetricDefinition(
        "Ease of Recall",
        1,
        5,
        enabled=False,
        description="How easily you could remember the dream upon waking",
    ),
    MetricDefinition(
        "Recall Stability",
        1,
        5,
        enabled=False,
        description="How well your memory of the dream held up after waking",
    ),
)

SETTINGS_KEYS = (
    "journal_callout",
    "diary_callout",
    "metrics_callout",
    "metrics",
    "paragraph_mode",
    "exclude",
    "max_files",
)


@dataclass(frozen=True)
class EngineSettings:
    """
    Everything the extraction engine is configured with.

    Attributes:
        journal_callout: Callout type enclosing a day's journal entry
        diary_callout: Callout type holding one dream
        metrics_callout: Callout type holding ``Name: value`` metrics
        metrics: Configured metric definitions
        paragraph_mode: How cleaned content keeps paragraph breaks
        exclude: Glob patterns of notes or folders to skip
        max_files: Cap on notes selected from a folder
    """

    journal_callout: str = "journal-entry"
    diary_callout: str = "dream-diary"
    metrics_callout: str = "dream-metrics"
    metrics: Tuple[MetricDefinition, ...] = DEFAULT_METRICS
    paragraph_mode: ParagraphMode = ParagraphMode.JOINED
    exclude: Tuple[str, ...] = ()
    max_files: Optional[int] = None

    def __post_init__(self) -> None:
        for attr in ("journal_callout", "diary_callout", "metrics_callout"):
            object.__setattr__(
                self, attr, DataValidator.normalize_callout_name(getattr(self, attr))
            )
        object.__setattr__(self, "metrics", tuple(self.metrics))
        object.__setattr__(self, "exclude", tuple(self.exclude))
        try:
            object.__setattr__(self, "paragraph_mode", ParagraphMode(self.paragraph_mode))
        except ValueError as e:
            raise ConfigError(
                f"paragraph_mode must be one of "
                f"{[mode.value for mode in ParagraphMode]}, got {self.paragraph_mode!r}"
            ) from e

        keys = [definition.key for definition in self.metrics]
        duplicates = sorted({key for key in keys if keys.count(key) > 1})
        if duplicates:
            raise ConfigError(f"Duplicate metric definitions: {', '.join(duplicates)}")

    def with_overrides(self, **changes: Any) -> EngineSettings:
        """Copy with some fields replaced, ignoring None values."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    def definition(self, name: str) -> Optional[MetricDefinition]:
        key = normalize_metric_name(name)
        for definition in self.metrics:
            if definition.key == key:
                return definition
        return None

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> EngineSettings:
        """
        Build settings from a mapping, using defaults for missing keys.

        Raises:
            ConfigError: If a value has the wrong type
        """
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise ConfigError(f"Settings must be a mapping, got {type(data).__name__}")

        unknown = sorted(set(data) - set(SETTINGS_KEYS))
        if unknown:
            logger.warning(f"Ignoring unknown settings keys: {', '.join(map(str, unknown))}")

        kwargs: Dict[str, Any] = {}
        for attr in ("journal_callout", "diary_callout", "metrics_callout"):
            if data.get(attr) is not None:
                kwargs[attr] = data[attr]

        if data.get("metrics") is not None:
            metrics = data["metrics"]
            if not isinstance(metrics, list):
                raise ConfigError(f"metrics must be a list, got {type(metrics).__name__}")
            kwargs["metrics"] = tuple(MetricDefinition.from_dict(m) for m in metrics)

        if data.get("paragraph_mode") is not None:
            kwargs["paragraph_mode"] = str(data["paragraph_mode"]).strip().lower()

        if data.get("exclude") is not None:
            exclude = data["exclude"]
            if isinstance(exclude, str):
                exclude = [exclude]
            if not isinstance(exclude, list):
                raise ConfigError(f"exclude must be a list, got {type(exclude).__name__}")
            kwargs["exclude"] = tuple(str(pattern) for pattern in exclude)

        if data.get("max_files") is not None:
            max_files = DataValidator.normalize_int(data["max_files"])
            if not max_files:
                raise ConfigError("max_files must be at least 1")
            kwargs["max_files"] = max_files

        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "journal_callout": self.journal_callout,
            "diary_callout": self.diary_callout,
            "metrics_callout": self.metrics_callout,
            "paragraph_mode": self.paragraph_mode.value,
            "exclude": list(self.exclude),
            "metrics": [definition.to_dict() for definition in self.metrics],
        }
        if self.max_files is not None:
            data["max_files"] = self.max_files
        return data


def load_settings(path: Optional[Path] = None) -> EngineSettings:
    """
    Load settings from a YAML file.

    Args:
        path: Settings file; None returns the defaults

    Raises:
        ConfigError: If the file cannot be read or parsed, or holds bad values
    """
    if path is None:
        return EngineSettings()

    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read settings file {path}: {e}") from e

    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in settings file {path}: {e}") from e

    return EngineSettings.from_dict(data)


def dump_settings(settings: EngineSettings, path: Optional[Path] = None) -> str:
    """
    Serialize settings to YAML, optionally writing them to a file.

    Returns:
        The YAML text
    """
    text = yaml.safe_dump(
        settings.to_dict(), sort_keys=False, allow_unicode=True, default_flow_style=False
    )
    if path is not None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return text
