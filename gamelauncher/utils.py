import os
import re
import sys
import fnmatch
import subprocess
from pathlib import Path
from typing import Optional, List

WINDOWS = "windows"
UNIX = "unix"

def is_windows() -> bool:
    return os.name == "nt"

def host_platform() -> str:
    return WINDOWS if is_windows() else UNIX

def normalize_platform(value: Optional[str]) -> str:
    if not value:
        return host_platform()
    if not isinstance(value, str):
        raise ValueError(f"unknown platform: {value!r}")
    v = value.strip().lower()
    if v in ("windows", "win", "win32", "nt"):
        return WINDOWS
    if v in ("unix", "linux", "posix", "darwin", "mac", "macos"):
        return UNIX
    raise ValueError(f"unknown platform: {value!r}")

def slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]", "", (name or "").lower())

def open_in_file_manager(path: Path) -> None:
    """Reveal a directory in the desktop file manager. Never goes through a shell."""
    target = str(path)
    if is_windows():
        os.startfile(target)  # type: ignore[attr-defined]
    elif sys.platform == "darwin":
        subprocess.Popen(["open", target],
                         stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
    else:
        subprocess.Popen(["xdg-open", target],
                         stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)

# --- ignore patterns (gitignore-ish) ---

def load_ignore_patterns(root: Path, ignore_filename: str) -> List[str]:
    p = root / ignore_filename
    if not p.is_file():
        return []
    raw = p.read_text(encoding="utf-8", errors="ignore").splitlines()
    patterns = []
    for line in raw:
        s = line.strip()
        if not s or s.startswith("#"):
            continue
        patterns.append(s.replace("\\", "/"))
    return patterns

def _pattern_hits(rel: str, pat: str) -> bool:
    if pat.endswith("/"):
        pat = pat[:-1]
        return rel == pat or rel.startswith(pat + "/")
    return rel == pat or rel.startswith(pat + "/") or fnmatch.fnmatch(rel, pat)

def is_ignored(rel: str, patterns: List[str]) -> bool:
    """gitignore-ish: 'Dir/' prefixes, fnmatch globs, '!' re-includes; last hit wins."""
    rel = rel.replace("\\", "/").lstrip("/")
    ignored = False
    for raw in patterns:
        negate = raw.startswith("!")
        pat = (raw[1:] if negate else raw).lstrip("/")
        if _pattern_hits(rel, pat):
            ignored = not negate
    return ignored

def is_dir_ignored(root: Path, dir_path: Path, patterns: List[str]) -> bool:
    if not patterns:
        return False
    return is_ignored(dir_path.relative_to(root).as_posix(), patterns)
