import os
import logging
from pathlib import Path
from flask import Flask

from .library import GameLibrary
from .prober import InstallationProber
from .settings import load_settings
from .supervisor import ProcessSupervisor, SPLASH_ENV
from .routes import bp as routes_bp
from .utils import host_platform, normalize_platform

logger = logging.getLogger(__name__)

# Bind only localhost unless overridden
BIND = os.environ.get("BIND", "127.0.0.1")
PORT = int(os.environ.get("PORT", "5000"))
HOME = os.environ.get("GAMELAUNCHER_HOME", str(Path.home() / ".gamelauncher"))

def ensure_root(data_dir: str) -> None:
    try:
        os.makedirs(data_dir, exist_ok=True)
    except OSError as e:
        raise SystemExit(f"cannot create data directory {data_dir}: {e}")

def create_app(data_dir: str, **overrides) -> Flask:
    app = Flask(__name__)
    app.config["DATA_DIR"] = data_dir
    app.config["APP_TITLE"] = "Game Launcher"
    app.config["LIBRARY_FILE"] = os.path.join(data_dir, "library.json")
    app.config["SETTINGS_FILE"] = os.path.join(data_dir, "settings.json")
    app.config["IGNORE_FILE"] = ".launcherignore"
    app.config["SPLASH_ENV"] = SPLASH_ENV
    app.config.update(overrides)

    settings = load_settings(Path(app.config["SETTINGS_FILE"]))
    platform = app.config.get("PLATFORM") or settings.get("platform")
    try:
        platform = normalize_platform(platform)
    except ValueError as e:
        logger.warning("%s in settings, using %s", e, host_platform())
        platform = host_platform()

    app.extensions["library"] = GameLibrary(Path(app.config["LIBRARY_FILE"]))
    app.extensions["supervisor"] = app.config.get("SUPERVISOR") or ProcessSupervisor(
        platform=platform, splash_env=app.config["SPLASH_ENV"])
    app.extensions["prober"] = InstallationProber(platform, ignore_file=app.config["IGNORE_FILE"])

    app.register_blueprint(routes_bp)
    return app
