import json
import logging
from typing import Dict
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULTS = {"games_directory": "", "platform": None}

def load_settings(settings_file: Path) -> Dict:
    default = dict(DEFAULTS)
    try:
        if settings_file.exists():
            data = json.loads(settings_file.read_text("utf-8"))
            default.update({k: data.get(k, default[k]) for k in default})
    except (OSError, ValueError) as e:
        logger.warning("settings unreadable, using defaults: %s", e)
    return default

def save_settings(settings_file: Path, settings: dict) -> None:
    settings_file.parent.mkdir(parents=True, exist_ok=True)
    settings_file.write_text(json.dumps(settings, indent=2), encoding="utf-8")
