import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

def default_log_dir() -> Path:
    return Path(os.environ.get("LOG_DIR") or Path.home() / ".gamelauncher" / "logs")

def configure_logging(level: Optional[str] = None, log_dir: Optional[Path] = None) -> None:
    """Console + rotating files (combined.log, error.log). Call once from the entry point."""
    level = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
    log_dir = Path(log_dir) if log_dir else default_log_dir()
    fmt = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    root = logging.getLogger()
    root.setLevel(level)

    console = logging.StreamHandler()
    console.setFormatter(fmt)
    root.addHandler(console)

    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        root.warning("file logging disabled, cannot create %s: %s", log_dir, e)
        return

    combined = RotatingFileHandler(log_dir / "combined.log", maxBytes=10 * 1024 * 1024,
                                   backupCount=5, encoding="utf-8")
    combined.setFormatter(fmt)
    root.addHandler(combined)

    errors = RotatingFileHandler(log_dir / "error.log", maxBytes=5 * 1024 * 1024,
                                 backupCount=5, encoding="utf-8")
    errors.setLevel(logging.ERROR)
    errors.setFormatter(fmt)
    root.addHandler(errors)
