# utils/config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from schemaflow.utils.logger import env_level

DEFAULT_STORE_PATH = "~/.schemaflow/store.json"

# Key under which user-authored schemas are persisted in the store
CUSTOM_SCHEMAS_KEY = "customNodeSchemas"


@dataclass(frozen=True)
class Settings:
    """Runtime settings resolved from the environment."""
    store_path: Path
    log_dir: Optional[Path]
    log_level: int


def load_settings(store_path: Optional[str | Path] = None) -> Settings:
    """
    Resolve settings from environment variables:
      - SCHEMAFLOW_STORE:   JSON key-value store file (custom schemas live here)
      - SCHEMAFLOW_LOG_DIR: optional directory for the rotating log file
      - LOG_LEVEL:          logging level name

    An explicit `store_path` (e.g. a CLI option) wins over the environment.
    """
    store = store_path or os.getenv("SCHEMAFLOW_STORE") or DEFAULT_STORE_PATH
    log_dir = os.getenv("SCHEMAFLOW_LOG_DIR")
    return Settings(
        store_path=Path(store).expanduser(),
        log_dir=Path(log_dir).expanduser() if log_dir else None,
        log_level=env_level(),
    )
