# gamelauncher/resolver.py
from __future__ import annotations

import os
import logging
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Union

from .errors import InvalidInstall, NotFound
from .models import ExecutableCandidate, GameRecord, LiteralName, TemplatedName
from .utils import UNIX, WINDOWS, normalize_platform, slugify

logger = logging.getLogger(__name__)

NameEntry = Union[LiteralName, TemplatedName]

# ──────────────────────────────────────────────────────────────────────────────
# Heuristic tables
# ──────────────────────────────────────────────────────────────────────────────

WINDOWS_NAMES: Sequence[NameEntry] = (
    LiteralName("game.exe"),
    LiteralName("start.exe"),
    LiteralName("launcher.exe"),
    LiteralName("run.bat"),
    TemplatedName("{slug}.exe"),
    LiteralName("renpy.exe"),
    LiteralName("lib/windows-x86_64/renpy.exe"),
    LiteralName("lib/windows-i686/renpy.exe"),
)

UNIX_NAMES: Sequence[NameEntry] = (
    LiteralName("game.sh"),
    LiteralName("start.sh"),
    LiteralName("run.sh"),
    LiteralName("launcher.sh"),
    TemplatedName("{slug}.sh"),
    TemplatedName("{slug}"),
    LiteralName("renpy.sh"),
    LiteralName("lib/linux-x86_64/renpy"),
    LiteralName("lib/linux-i686/renpy"),
)

WINDOWS_EXTS = {".exe", ".bat", ".cmd"}

SNIFF_BYTES = 4096
SNIFF_MARKERS = ("python", "renpy")

def _unix_name_matches(name: str) -> bool:
    low = name.lower()
    return (
        low.endswith(".sh")
        or "." not in name
        or "linux" in low
        or low.endswith(".py")
    )

def sniff_script(path: Path) -> bool:
    """Cheap content test: shebang first, then engine/interpreter mentions.

    Unreadable files count as no match.
    """
    try:
        with open(path, "rb") as f:
            head = f.read(SNIFF_BYTES)
    except OSError as e:
        logger.debug("sniff failed for %s: %s", path, e)
        return False
    text = head.decode("utf-8", errors="ignore")
    if text.startswith("#!"):
        return True
    low = text.lower()
    return any(m in low for m in SNIFF_MARKERS)

def _priority_rules(platform: str) -> List[Callable[[str], bool]]:
    native = ".exe" if platform == WINDOWS else ".sh"
    return [
        lambda n: "start" in n,
        lambda n: "launcher" in n,
        lambda n: "game" in n,
        lambda n: "run" in n,
        lambda n: n.endswith(native),
        lambda n: "." not in n,
    ]

def rank_candidates(candidates: List[ExecutableCandidate], platform: str) -> List[ExecutableCandidate]:
    """Highest priority first; ties fall back to discovery order."""
    rules = _priority_rules(platform)

    def key(c: ExecutableCandidate):
        name = c.path.name.lower()
        return tuple(0 if rule(name) else 1 for rule in rules) + (c.order,)

    return sorted(candidates, key=key)

def make_executable(path: Path) -> None:
    try:
        os.chmod(path, 0o755)
    except OSError as e:
        logger.warning("could not mark %s executable: %s", path, e)

# ──────────────────────────────────────────────────────────────────────────────
# Resolver
# ──────────────────────────────────────────────────────────────────────────────

class ExecutableResolver:
    """Map a GameRecord to one launchable file inside its install directory."""

    def __init__(self, platform: Optional[str] = None):
        self.platform = normalize_platform(platform)

    def resolve(self, game: GameRecord) -> Path:
        if not game.install_path:
            raise InvalidInstall(f"{game.name or game.id}: no install path")
        root = Path(os.path.abspath(game.install_path))
        if not root.is_dir():
            raise InvalidInstall(f"{game.name or game.id}: install path does not exist: {root}")

        hinted = self._from_hint(game, root)
        if hinted is not None:
            return hinted

        ranked = rank_candidates(self.candidates(game, root), self.platform)
        if not ranked:
            raise NotFound(f"{game.name or game.id}: no executable found in {root}")

        chosen = ranked[0].path
        if self.platform == UNIX:
            make_executable(chosen)
        logger.debug("resolved %s -> %s (%d candidates)", game.id, chosen, len(ranked))
        return chosen

    def _from_hint(self, game: GameRecord, root: Path) -> Optional[Path]:
        if not game.executable:
            return None
        # basename only: a hint can never point outside the install directory
        base = Path(game.executable.replace("\\", "/")).name
        if not base or base in (".", ".."):
            return None
        p = root / base
        if not p.is_file():
            logger.info("executable hint %r not usable in %s, searching", game.executable, root)
            return None
        if self.platform == UNIX:
            make_executable(p)
        return p

    def candidates(self, game: GameRecord, root: Path) -> List[ExecutableCandidate]:
        """Well-known names first, then the directory scan, de-duplicated by path."""
        found: Dict[str, ExecutableCandidate] = {}

        def add(p: Path) -> None:
            key = os.path.normcase(str(p))
            if key not in found:
                found[key] = ExecutableCandidate(path=p, order=len(found))

        for p in self._well_known(game, root):
            add(p)
        for p in self._scan(root):
            add(p)
        return list(found.values())

    def _well_known(self, game: GameRecord, root: Path) -> List[Path]:
        table = WINDOWS_NAMES if self.platform == WINDOWS else UNIX_NAMES
        slug = slugify(game.name) or slugify(root.name)
        hits: List[Path] = []
        for entry in table:
            name = entry.render(slug)
            if not name:
                continue
            p = root / name
            try:
                if p.is_file():
                    hits.append(p)
            except OSError:
                continue
        return hits

    def _scan(self, root: Path) -> List[Path]:
        hits: List[Path] = []
        try:
            entries = sorted(root.iterdir(), key=lambda e: e.name)
        except OSError as e:
            logger.warning("cannot list %s: %s", root, e)
            return hits

        for e in entries:
            # FIFOs, sockets and device nodes would block or mislead the sniff
            try:
                if not e.is_file():
                    continue
            except OSError:
                continue
            if self.platform == WINDOWS:
                if e.suffix.lower() in WINDOWS_EXTS:
                    hits.append(e)
            elif _unix_name_matches(e.name) and sniff_script(e):
                hits.append(e)
        return hits
