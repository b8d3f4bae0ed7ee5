"""App configuration: data directory and settings.

DATA_DIR (environment or .env in the repo root) picks the data directory;
the bundled presets are used when unset. Settings are defaults merged with
an optional config.json in that directory. Unknown keys are ignored.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

ROOT = Path(__file__).parent.parent
DEFAULT_DATA_DIR = ROOT / "presets"

load_dotenv(ROOT / ".env")

logger = logging.getLogger(__name__)

_CONFIG_DEFAULTS: dict[str, Any] = {
    "default_script": "trouble-brewing",
    "default_players": 10,
    "log_level": "WARNING",
}


def data_dir() -> Path:
    """Data directory from DATA_DIR, or the bundled presets."""
    return Path(os.getenv("DATA_DIR") or DEFAULT_DATA_DIR)


def _config_path(base: Path) -> Path:
    return base / "config.json"


def get_config(base: Path | None = None) -> dict[str, Any]:
    """Read config, returning defaults merged with stored values."""
    config = dict(_CONFIG_DEFAULTS)
    path = _config_path(base or data_dir())
    if path.is_file():
        try:
            stored = json.loads(path.read_text())
        except json.JSONDecodeError as e:
            logger.warning(f"Ignoring {path}: {e}")
            return config
        for key in _CONFIG_DEFAULTS:
            if key in stored:
                config[key] = stored[key]
    return config
