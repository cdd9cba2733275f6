# gamelauncher/supervisor.py
from __future__ import annotations

import os
import logging
import subprocess
import threading
from pathlib import Path
from typing import Callable, Dict, Optional, Set, Tuple, Union

from .errors import (
    AlreadyRunning,
    LauncherError,
    NoInstallPath,
    NotInstalled,
    PathNotFound,
    SpawnFailed,
)
from .models import GameRecord
from .resolver import ExecutableResolver
from .validation import PathValidator
from .utils import is_windows, open_in_file_manager

logger = logging.getLogger(__name__)

# Ren'Py honours this; harmless for everything else.
SPLASH_ENV: Tuple[str, str] = ("RENPY_SKIP_SPLASHSCREEN", "1")

ExitListener = Callable[[str, Optional[int]], None]

# ──────────────────────────────────────────────────────────────────────────────
# Small helpers
# ──────────────────────────────────────────────────────────────────────────────

class _Pending:
    """Placeholder that holds a game's slot while its launch is in flight."""
    __slots__ = ()

def _detach_kwargs() -> dict:
    # The child must outlive us: own session on POSIX, own process group on Windows.
    if is_windows():
        flags = getattr(subprocess, "DETACHED_PROCESS", 0) | getattr(subprocess, "CREATE_NEW_PROCESS_GROUP", 0)
        return {"creationflags": flags}
    return {"start_new_session": True}

def _child_env(splash_env: Tuple[str, str]) -> Dict[str, str]:
    env = os.environ.copy()
    key, value = splash_env
    env[key] = value
    return env

# ──────────────────────────────────────────────────────────────────────────────
# Supervisor
# ──────────────────────────────────────────────────────────────────────────────

class ProcessSupervisor:
    """
    Launch, stop and track running games. One instance owns the tracked table;
    hand the instance around instead of sharing module state.

    A game is tracked from the moment its launch reserves the slot until the
    child exits, errors, or stop() is called. Exit is observed by a daemon
    thread blocked in Popen.wait(); launch() itself never waits.
    """

    def __init__(
        self,
        resolver: Optional[ExecutableResolver] = None,
        validator: Optional[PathValidator] = None,
        *,
        platform: Optional[str] = None,
        opener: Callable[[Path], None] = open_in_file_manager,
        on_exit: Optional[ExitListener] = None,
        splash_env: Tuple[str, str] = SPLASH_ENV,
    ):
        self.resolver = resolver or ExecutableResolver(platform)
        self.validator = validator or PathValidator()
        self.opener = opener
        self.on_exit = on_exit
        self.splash_env = splash_env
        self._lock = threading.Lock()
        self._running: Dict[str, Union[_Pending, subprocess.Popen]] = {}

    # --- queries ---

    def is_running(self, game_id) -> bool:
        with self._lock:
            return str(game_id) in self._running

    def list_running(self) -> Set[str]:
        with self._lock:
            return set(self._running)

    # --- launch ---

    def launch(self, game: GameRecord) -> None:
        if not game.install_path:
            raise NotInstalled(f"{game.name or game.id} is not installed")

        gid = str(game.id)
        token = _Pending()
        with self._lock:
            if gid in self._running:
                raise AlreadyRunning(f"{game.name or gid} is already running")
            self._running[gid] = token

        try:
            exe = self.resolver.resolve(game)
            # always re-validated here, whatever produced the path
            exe = self.validator.validate(exe, game.install_path)
            logger.info("Launching game: %s from %s", game.name or gid, exe)
            proc = self._spawn(exe, game.install_path)
        except Exception as e:
            self._forget(gid, token)
            logger.error("Failed to launch game %s: %s", game.name or gid, e)
            raise

        with self._lock:
            cancelled = self._running.get(gid) is not token
            if not cancelled:
                self._running[gid] = proc

        if cancelled:
            logger.warning("stop() arrived while %s was launching; terminating pid %s", gid, proc.pid)
            self._terminate(gid, proc)
            self._reap(gid, proc)
            return

        self._watch(game, proc)

    def _spawn(self, exe: Path, cwd: str) -> subprocess.Popen:
        try:
            return subprocess.Popen(
                [str(exe)],
                cwd=cwd,
                shell=False,
                env=_child_env(self.splash_env),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                close_fds=True,
                **_detach_kwargs(),
            )
        except (OSError, ValueError) as e:
            raise SpawnFailed(f"could not start {exe}: {e}") from e

    def _watch(self, game: GameRecord, proc: subprocess.Popen) -> None:
        gid = str(game.id)
        label = game.name or gid

        def _wait():
            code: Optional[int] = None
            try:
                code = proc.wait()
            except Exception as e:
                logger.error("Game %s error: %s", label, e)
            else:
                logger.info("Game %s exited with code %s", label, code)
            finally:
                self._forget(gid, proc)
                if self.on_exit is not None:
                    self.on_exit(gid, code)

        threading.Thread(target=_wait, name=f"watch-{gid}", daemon=True).start()

    @staticmethod
    def _reap(gid: str, proc: subprocess.Popen) -> None:
        # untracked child: collect its exit status so it does not linger as a zombie
        def _wait():
            try:
                code = proc.wait()
            except Exception as e:
                logger.error("reaping cancelled launch %s failed: %s", gid, e)
            else:
                logger.info("cancelled launch %s exited with code %s", gid, code)

        threading.Thread(target=_wait, name=f"reap-{gid}", daemon=True).start()

    def _forget(self, gid: str, entry) -> None:
        # only drop the entry we own; a relaunch may already have replaced it
        with self._lock:
            if self._running.get(gid) is entry:
                del self._running[gid]

    # --- stop ---

    def stop(self, game_id) -> None:
        gid = str(game_id)
        with self._lock:
            entry = self._running.pop(gid, None)
        if entry is None:
            return
        if isinstance(entry, _Pending):
            logger.info("Stop requested for %s before its process started", gid)
            return
        self._terminate(gid, entry)

    @staticmethod
    def _terminate(gid: str, proc: subprocess.Popen) -> None:
        try:
            proc.terminate()
            logger.info("Stopped game with ID: %s", gid)
        except OSError as e:
            logger.error("Failed to stop game %s: %s", gid, e)

    # --- installation helpers ---

    def verify_installation(self, game: GameRecord) -> bool:
        try:
            exe = self.resolver.resolve(game)
        except (LauncherError, OSError) as e:
            logger.info("verification failed for %s: %s", game.name or game.id, e)
            return False
        return exe.exists()

    def open_install_folder(self, game: GameRecord) -> None:
        if not game.install_path:
            raise NoInstallPath(f"{game.name or game.id} has no install path")
        folder = Path(game.install_path)
        if not folder.is_dir():
            raise PathNotFound(f"install path not found: {folder}")
        self.opener(folder)
