# gamelauncher/validation.py
from __future__ import annotations

import os
import logging
from pathlib import Path
from typing import Union

from .errors import SecurityViolation

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

DANGEROUS_CHARS = frozenset(";&|`$(){}[]<>")

def normalize(p: PathLike) -> str:
    """Absolute, with . / .. / duplicate separators collapsed. Symlinks are not followed."""
    return os.path.normpath(os.path.abspath(os.fspath(p)))

def is_within(candidate: str, root: str) -> bool:
    c = os.path.normcase(candidate)
    r = os.path.normcase(root)
    if c == r:
        return False
    try:
        return os.path.commonpath([c, r]) == r
    except ValueError:
        # different drives on Windows
        return False

def has_dangerous_chars(s: str) -> bool:
    return any(ch in DANGEROUS_CHARS for ch in s)


class PathValidator:
    """Last gate before a spawn. Checks run in order and stop at the first failure."""

    def validate(self, candidate: PathLike, install_root: PathLike) -> Path:
        raw = os.fspath(candidate)
        cand = normalize(raw)
        root = normalize(install_root)

        if not is_within(cand, root):
            self._reject(SecurityViolation.ESCAPE, f"escapes install directory: {raw}")

        if has_dangerous_chars(raw) or has_dangerous_chars(cand):
            self._reject(SecurityViolation.DANGEROUS_CHARACTERS, f"dangerous characters in path: {raw}")

        if not os.path.exists(cand):
            self._reject(SecurityViolation.MISSING, f"does not exist: {cand}")
        # isfile() follows links, so a symlink to a directory fails here
        if not os.path.isfile(cand):
            self._reject(SecurityViolation.NOT_A_FILE, f"not a regular file: {cand}")

        return Path(cand)

    @staticmethod
    def _reject(reason: str, message: str) -> None:
        logger.warning("rejected launch path (%s): %s", reason, message)
        raise SecurityViolation(reason, message)
