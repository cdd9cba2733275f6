import logging
from pathlib import Path
from typing import List, Optional

from .errors import ScanFailure
from .utils import WINDOWS, normalize_platform, load_ignore_patterns, is_dir_ignored

logger = logging.getLogger(__name__)

def unix_signature(names: List[str]) -> bool:
    for n in names:
        low = n.lower()
        if low.endswith(".sh") or "renpy" in low or low == "game.py":
            return True
    return False

def windows_signature(names: List[str]) -> bool:
    return any(n.lower().endswith((".exe", ".bat")) for n in names)

def top_level_files(folder: Path) -> List[str]:
    return [p.name for p in folder.iterdir() if p.is_file()]


class InstallationProber:
    """Bulk scan for folders that look like game installs.

    Coarser than ExecutableResolver on purpose: names only, no content reads.
    """

    def __init__(self, platform: Optional[str] = None, ignore_file: str = ".launcherignore"):
        self.platform = normalize_platform(platform)
        self.ignore_file = ignore_file

    def looks_installed(self, names: List[str]) -> bool:
        if self.platform == WINDOWS:
            return windows_signature(names)
        return unix_signature(names)

    def list_subdirs(self, root: Path) -> List[Path]:
        try:
            return sorted((p for p in root.iterdir() if p.is_dir()), key=lambda p: p.name.lower())
        except OSError as e:
            raise ScanFailure(f"cannot list {root}: {e}") from e

    def detect_installed_games(self, root_dir) -> List[Path]:
        root = Path(root_dir)
        try:
            subdirs = self.list_subdirs(root)
        except ScanFailure as e:
            # lenient: a bulk UI scan answers "nothing found" instead of failing
            logger.error("Failed to detect installed games: %s", e)
            return []

        try:
            patterns = load_ignore_patterns(root, self.ignore_file)
        except OSError as e:
            logger.warning("ignore file unreadable in %s: %s", root, e)
            patterns = []

        found: List[Path] = []
        for d in subdirs:
            if is_dir_ignored(root, d, patterns):
                continue
            try:
                names = top_level_files(d)
            except OSError as e:
                logger.warning("skipping %s: %s", d, e)
                continue
            if self.looks_installed(names):
                found.append(d)

        logger.info("detected %d install(s) under %s", len(found), root)
        return found
