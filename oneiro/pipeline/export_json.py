#!/usr/bin/env python3
"""
export_json.py
--------------
Export extraction results to JSON for rendering and aggregation tools.

The export is machine-focused: one document holding every entry, the raw
metric aggregate, per-metric summary statistics, diagnostics, run
statistics and the run outcome.

Document layout:
    {
      "generated_at": "2025-06-16T08:00:00",
      "outcome": "ok",
      "guidance": "...",
      "stats": {...},
      "entries": [{"date": "2025-06-15", "title": "...", "metrics": {...}}],
      "aggregate": {"Sensory Detail": [4, 3], "Word Count": [120, 88]},
      "summary": {"Sensory Detail": {"count": 2, "mean": 3.5, ...}},
      "diagnostics": [{"source": "...", "kind": "date_unresolved", ...}]
    }

Usage:
    from oneiro.pipeline.export_json import export_json

    export_json(result, Path("dreams.json"))
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

# --- Local imports ---
from oneiro.core.exceptions import ExportError
from oneiro.core.logging_manager import OneiroLogger, safe_logger
from oneiro.pipeline.assembler import ExtractionResult


def result_to_dict(result: ExtractionResult) -> Dict[str, Any]:
    """Convert an ExtractionResult into JSON-serializable data."""
    return {
        "generated_at": datetime.now().isoformat(timespec="seconds"),
        "outcome": result.outcome.value,
        "guidance": result.guidance,
        "stats": result.stats.to_dict(),
        "settings": result.settings.to_dict(),
        "entries": [entry.to_dict() for entry in result.entries],
        "aggregate": result.aggregate.to_dict(),
        "summary": {
            name: summary.to_dict() for name, summary in result.aggregate.summary().items()
        },
        "diagnostics": [diagnostic.to_dict() for diagnostic in result.diagnostics],
    }


def export_json(
    result: ExtractionResult,
    output_path: Path,
    logger: Optional[OneiroLogger] = None,
    indent: int = 2,
) -> Path:
    """
    Write an ExtractionResult to a JSON file.

    Args:
        result: Result of an extraction run
        output_path: Destination file (parent folders are created)
        logger: Optional logger
        indent: JSON indentation

    Returns:
        The written path

    Raises:
        ExportError: If the file cannot be written
    """
    output_path = Path(output_path)
    data = result_to_dict(result)

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=indent, ensure_ascii=False)
            f.write("\n")
    except OSError as e:
        raise ExportError(f"Cannot write JSON export {output_path}: {e}") from e

    safe_logger(logger).log_operation(
        "json_exported",
        {"path": str(output_path), "entries": len(result.entries)},
    )
    return output_path
