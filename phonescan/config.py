"""
phonescan/config.py
JSON config with defaults. Persists to phonescan_config.json.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "phonescan_config.json"

DEFAULT_CONFIG = {
    "adb_path": "adb",
    "adb_timeout": 30,
    "data_dir": "data",
    "timeline_start": "2024-01-01 00:00:00",
    "correlation_top_n": 10,
    "api_host": "127.0.0.1",
    "api_port": 3000,
}


def _config_path(project_root: Optional[Path] = None) -> Path:
    root = project_root or Path.cwd()
    return root / CONFIG_FILENAME


def load_config(project_root: Optional[Path] = None) -> Dict[str, Any]:
    """Load config from phonescan_config.json. Returns defaults if missing."""
    path = _config_path(project_root)
    if path.exists():
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return {**DEFAULT_CONFIG, **data}
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Config load failed: {e}")
    return dict(DEFAULT_CONFIG)


def save_config(config: Dict[str, Any], project_root: Optional[Path] = None) -> Path:
    """Persist config to phonescan_config.json."""
    path = _config_path(project_root)
    path.write_text(json.dumps(config, indent=2), encoding="utf-8")
    return path


def timeline_start(config: Dict[str, Any]) -> datetime:
    """Configured timeline lower bound; falls back to the default on a bad value."""
    raw = config.get("timeline_start") or DEFAULT_CONFIG["timeline_start"]
    try:
        return datetime.strptime(raw, "%Y-%m-%d %H:%M:%S")
    except ValueError:
        logger.warning(f"Invalid timeline_start {raw!r}, using default")
        return datetime.strptime(DEFAULT_CONFIG["timeline_start"], "%Y-%m-%d %H:%M:%S")
