from __future__ import annotations

import os
from pathlib import Path

# ---------------------------------------------------------------------------
# Project paths
# ---------------------------------------------------------------------------

# Root of the project (repo root)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Directory holding the StatsWales exports (areas.csv, popu1009.json, ...).
# Override with STATSWALES_DATASETS_DIR when the files live elsewhere.
DATASETS_DIR = Path(
    os.getenv("STATSWALES_DATASETS_DIR", "").strip() or (PROJECT_ROOT / "datasets")
)

# ---------------------------------------------------------------------------
# App identity
# ---------------------------------------------------------------------------

APP_NAME = "StatsWales Explorer"
APP_VERSION = "0.1.0"

# ---------------------------------------------------------------------------
# Logging
#
# Entry points (CLI and Streamlit page) call logging.basicConfig with this
# level; library modules only ever create module loggers.
# ---------------------------------------------------------------------------

LOG_LEVEL = os.getenv("STATSWALES_LOG_LEVEL", "WARNING").strip().upper() or "WARNING"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
