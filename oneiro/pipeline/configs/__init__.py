#!/usr/bin/env python3
"""
Pipeline configuration modules.

- settings: Engine settings, metric definitions and their YAML storage
"""

from oneiro.pipeline.configs.settings import (
    DEFAULT_METRICS,
    WORD_COUNT_METRIC,
    EngineSettings,
    MetricDefinition,
    MetricType,
    dump_settings,
    load_settings,
    normalize_metric_name,
)

__all__ = [
    "DEFAULT_METRICS",
    "EngineSettings",
    "MetricDefinition",
    "MetricType",
    "WORD_COUNT_METRIC",
    "dump_settings",
    "load_settings",
    "normalize_metric_name",
]
