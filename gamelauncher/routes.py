from __future__ import annotations
from pathlib import Path
from flask import Blueprint, current_app, request, jsonify

from .errors import (
    LauncherError, AlreadyRunning, GameNotFound, InvalidInput, NoInstallPath,
    NotInstalled, PathNotFound, ResolutionFailed, SecurityViolation, SpawnFailed,
)
from .library import check_user_path
from .settings import load_settings

bp = Blueprint("gamelauncher", __name__, url_prefix="/api")

# most specific first
_STATUS = (
    (GameNotFound, 404),
    (PathNotFound, 404),
    (AlreadyRunning, 409),
    (NotInstalled, 409),
    (NoInstallPath, 409),
    (InvalidInput, 400),
    (SecurityViolation, 403),
    (ResolutionFailed, 422),
    (SpawnFailed, 500),
)

def _ext():
    e = current_app.extensions
    return e["library"], e["supervisor"], e["prober"]

def _status_for(err: LauncherError) -> int:
    for cls, status in _STATUS:
        if isinstance(err, cls):
            return status
    return 500

@bp.errorhandler(LauncherError)
def launcher_error(err: LauncherError):
    body = {"ok": False, "error": err.kind, "message": str(err)}
    if isinstance(err, SecurityViolation):
        body["reason"] = err.reason
    return jsonify(body), _status_for(err)

@bp.get("/games")
def list_games():
    library, supervisor, _ = _ext()
    running = supervisor.list_running()
    return jsonify({
        "games": [dict(g.to_dict(), running=g.id in running) for g in library.all()],
    })

@bp.post("/games/<game_id>/launch")
def launch(game_id):
    library, supervisor, _ = _ext()
    game = library.require(game_id)
    supervisor.launch(game)
    library.record_launch(game.id)
    return jsonify({"ok": True, "message": "Launched."})

@bp.post("/games/<game_id>/stop")
def stop(game_id):
    _, supervisor, _ = _ext()
    supervisor.stop(game_id)
    return jsonify({"ok": True})

@bp.get("/games/<game_id>/running")
def is_running(game_id):
    _, supervisor, _ = _ext()
    return jsonify({"running": supervisor.is_running(game_id)})

@bp.get("/running")
def running():
    _, supervisor, _ = _ext()
    return jsonify({"running": sorted(supervisor.list_running())})

@bp.get("/games/<game_id>/verify")
def verify(game_id):
    library, supervisor, _ = _ext()
    game = library.require(game_id)
    return jsonify({"verified": supervisor.verify_installation(game)})

@bp.post("/games/<game_id>/open-folder")
def open_folder(game_id):
    library, supervisor, _ = _ext()
    game = library.require(game_id)
    supervisor.open_install_folder(game)
    return jsonify({"ok": True})

@bp.post("/games/<game_id>/executable")
def set_executable(game_id):
    library, _, _ = _ext()
    data = request.get_json(silent=True) or {}
    game = library.set_executable(game_id, data.get("path", ""))
    return jsonify({"ok": True, "game": game.to_dict()})

@bp.post("/detect")
def detect():
    _, _, prober = _ext()
    data = request.get_json(silent=True) or {}
    path = data.get("path")
    if not path:
        path = load_settings(Path(current_app.config["SETTINGS_FILE"]))["games_directory"]
    path = check_user_path(path)
    found = prober.detect_installed_games(path)
    return jsonify({"games": [str(p) for p in found]})
