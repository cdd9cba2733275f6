# gamelauncher/library.py
from __future__ import annotations

import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from .errors import GameNotFound, InvalidInput
from .models import GameRecord
from .validation import has_dangerous_chars

logger = logging.getLogger(__name__)

def check_user_path(path: str) -> str:
    """Reject traversal segments and shell metacharacters in a user-supplied path."""
    p = (path or "").strip()
    if not p:
        raise InvalidInput("path is required")
    norm = p.replace("\\", "/")
    if "../" in norm or norm == ".." or norm.endswith("/..") or has_dangerous_chars(p):
        raise InvalidInput("path contains dangerous characters")
    return p


class GameLibrary:
    """
    Minimal JSON-file library: {"games": [GameRecord, ...]}.
    The launcher core only reads records; writes happen here.
    """

    def __init__(self, library_file: Path):
        self.library_file = Path(library_file)
        self._lock = threading.Lock()
        self._games: Dict[str, GameRecord] = self._load()

    def _load(self) -> Dict[str, GameRecord]:
        if not self.library_file.exists():
            return {}
        try:
            data = json.loads(self.library_file.read_text("utf-8"))
        except (OSError, ValueError) as e:
            logger.error("library file unreadable, starting empty: %s (%s)", self.library_file, e)
            return {}
        if not isinstance(data, dict) or not isinstance(data.get("games", []), list):
            logger.error("library file malformed, starting empty: %s", self.library_file)
            return {}
        games: Dict[str, GameRecord] = {}
        for item in data.get("games", []):
            if not isinstance(item, dict) or "id" not in item:
                logger.warning("skipping library entry without id: %r", item)
                continue
            try:
                g = GameRecord.from_dict(item)
            except (TypeError, ValueError) as e:
                logger.warning("skipping bad library entry %r: %s", item.get("id"), e)
                continue
            games[g.id] = g
        return games

    def _save(self) -> None:
        payload = {"games": [g.to_dict() for g in self._games.values()]}
        self.library_file.parent.mkdir(parents=True, exist_ok=True)
        self.library_file.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def all(self) -> List[GameRecord]:
        with self._lock:
            return list(self._games.values())

    def get(self, game_id) -> Optional[GameRecord]:
        with self._lock:
            return self._games.get(str(game_id))

    def require(self, game_id) -> GameRecord:
        g = self.get(game_id)
        if g is None:
            raise GameNotFound(f"game not found: {game_id}")
        return g

    def add(self, game: GameRecord) -> GameRecord:
        with self._lock:
            self._games[game.id] = game
            self._save()
        return game

    def set_executable(self, game_id, relpath: str) -> GameRecord:
        relpath = check_user_path(relpath)
        with self._lock:
            g = self._games.get(str(game_id))
            if g is None:
                raise GameNotFound(f"game not found: {game_id}")
            g.executable = relpath
            self._save()
        logger.info("executable for %s set to %s", game_id, relpath)
        return g

    def record_launch(self, game_id) -> None:
        with self._lock:
            g = self._games.get(str(game_id))
            if g is None:
                return
            g.last_played = datetime.now(timezone.utc).isoformat()
            g.play_time = (g.play_time or 0) + 1
            self._save()
