#!/usr/bin/env python3
"""
paths.py
-------------------
Path constants for the oneiro project.

    ROOT/
    ├── oneiro/        # Package source
    ├── logs/          # Operation logs (created on demand)
    └── oneiro.yaml    # Default settings file (optional)

Every path can be overridden from the CLI; these are only defaults.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import os
from pathlib import Path


def _get_project_root() -> Path:
    """
    Determine the project root directory.

    Assumes this file is at ROOT/oneiro/core/paths.py.

    Raises:
        RuntimeError: If the package directory cannot be found above this file
    """
    current_file = Path(__file__).resolve()
    root = current_file.parent.parent.parent

    if not (root / "oneiro").is_dir():
        raise RuntimeError(
            f"Cannot determine project root. "
            f"Expected {root / 'oneiro'} to exist. "
            f"Current file: {current_file}"
        )
    return root


# ----- Project directory -----
ROOT: Path = _get_project_root()
PACKAGE_DIR = ROOT / "oneiro"

# ---- Logs ----
LOG_DIR = Path(os.environ.get("ONEIRO_LOG_DIR", str(ROOT / "logs")))

# ---- Settings ----
SETTINGS_PATH = Path(os.environ.get("ONEIRO_SETTINGS", str(ROOT / "oneiro.yaml")))
