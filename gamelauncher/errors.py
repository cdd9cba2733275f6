# gamelauncher/errors.py
from __future__ import annotations

from typing import Optional


class LauncherError(Exception):
    """Base class. `kind` is stable and safe to hand to a UI or an API client."""
    kind = "launcher_error"


class NotInstalled(LauncherError):
    kind = "not_installed"


class AlreadyRunning(LauncherError):
    kind = "already_running"


class ResolutionFailed(LauncherError):
    kind = "resolution_failed"


class InvalidInstall(ResolutionFailed):
    kind = "invalid_install"


class NotFound(ResolutionFailed):
    kind = "not_found"


class SecurityViolation(LauncherError):
    kind = "security_violation"

    ESCAPE = "escape"
    DANGEROUS_CHARACTERS = "dangerous_characters"
    MISSING = "missing"
    NOT_A_FILE = "not_a_file"

    def __init__(self, reason: str, message: Optional[str] = None):
        super().__init__(message or reason)
        self.reason = reason


class SpawnFailed(LauncherError):
    kind = "spawn_failed"


class ScanFailure(LauncherError):
    kind = "scan_failure"


class NoInstallPath(LauncherError):
    kind = "no_install_path"


class PathNotFound(LauncherError):
    kind = "path_not_found"


class GameNotFound(LauncherError):
    kind = "game_not_found"


class InvalidInput(LauncherError):
    kind = "invalid_input"
