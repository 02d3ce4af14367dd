"""
dataclasses package
-------------------
Dataclass definitions for scanned callouts and extracted dream entries.

- RawCallout: One node of a note's callout tree
- ResolvedDate / DateStrategy: Entry dates tagged with how they were found
- MetricValue: A declared metric, numeric or placeholder
- DreamEntry: One assembled dream
"""
from oneiro.dataclasses.dream_entry import (
    DateStrategy,
    DreamEntry,
    MetricValue,
    ResolvedDate,
)
from oneiro.dataclasses.raw_callout import RawCallout

__all__ = ["DateStrategy", "DreamEntry", "MetricValue", "RawCallout", "ResolvedDate"]
