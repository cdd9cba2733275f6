import os
import stat
from itertools import permutations
from pathlib import Path

import pytest

from gamelauncher.errors import InvalidInstall, NotFound, ResolutionFailed
from gamelauncher.models import ExecutableCandidate, GameRecord, LiteralName, TemplatedName
from gamelauncher.resolver import ExecutableResolver, rank_candidates, sniff_script

SHEBANG = b"#!/bin/sh\necho hi\n"


def _touch(p: Path, data: bytes = b""):
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_bytes(data or b"stub")


def _game(folder: Path, name="Zzz", executable=None) -> GameRecord:
    return GameRecord(id="g1", name=name, install_path=str(folder), executable=executable, installed=True)


def test_single_shell_script_is_resolved(tmp_path):
    _touch(tmp_path / "game.sh", SHEBANG)
    exe = ExecutableResolver("unix").resolve(_game(tmp_path))
    assert exe == tmp_path / "game.sh"
    assert exe.is_absolute()
    if os.name != "nt":
        assert os.stat(exe).st_mode & stat.S_IXUSR


def test_ranking_ignores_input_order():
    names = ["play", "run.sh", "start.sh"]
    for order in permutations(names):
        cands = [ExecutableCandidate(Path("/g") / n, i) for i, n in enumerate(order)]
        ranked = [c.path.name for c in rank_candidates(cands, "unix")]
        assert ranked == ["start.sh", "run.sh", "play"]


def test_ranking_ties_keep_discovery_order():
    cands = [ExecutableCandidate(Path("/g") / n, i) for i, n in enumerate(["b.sh", "a.sh"])]
    assert [c.path.name for c in rank_candidates(cands, "unix")] == ["b.sh", "a.sh"]


def test_scan_ranks_start_over_run(tmp_path):
    _touch(tmp_path / "foo.txt", SHEBANG)
    _touch(tmp_path / "run.sh", SHEBANG)
    _touch(tmp_path / "start.sh", SHEBANG)
    _touch(tmp_path / "play", SHEBANG)
    assert ExecutableResolver("unix").resolve(_game(tmp_path)).name == "start.sh"


def test_no_extension_data_file_is_not_a_candidate(tmp_path):
    _touch(tmp_path / "LICENSE", b"MIT License\n")
    _touch(tmp_path / "readme.txt", b"hello")
    with pytest.raises(NotFound):
        ExecutableResolver("unix").resolve(_game(tmp_path))


def test_content_sniff_accepts_engine_markers(tmp_path):
    _touch(tmp_path / "Game-linux.x86_64", b"\x7fELF ... renpy bootstrap")
    assert ExecutableResolver("unix").resolve(_game(tmp_path)).name == "Game-linux.x86_64"


def test_subdirectories_are_skipped(tmp_path):
    (tmp_path / "start").mkdir()
    _touch(tmp_path / "other.sh", SHEBANG)
    assert ExecutableResolver("unix").resolve(_game(tmp_path)).name == "other.sh"


def test_hint_is_reduced_to_basename(tmp_path):
    _touch(tmp_path / "tool.sh", b"x")
    _touch(tmp_path / "start.sh", SHEBANG)
    exe = ExecutableResolver("unix").resolve(_game(tmp_path, executable="../../bin/tool.sh"))
    assert exe == tmp_path / "tool.sh"


def test_escaping_hint_falls_back_to_search(tmp_path):
    _touch(tmp_path / "game.sh", SHEBANG)
    exe = ExecutableResolver("unix").resolve(_game(tmp_path, executable="../../etc/passwd"))
    assert exe == tmp_path / "game.sh"


def test_templated_slug_name(tmp_path):
    _touch(tmp_path / "mygame.sh", b"data")
    exe = ExecutableResolver("unix").resolve(_game(tmp_path, name="My Game!"))
    assert exe.name == "mygame.sh"


def test_engine_sub_path(tmp_path):
    _touch(tmp_path / "lib" / "linux-x86_64" / "renpy", b"binary")
    exe = ExecutableResolver("unix").resolve(_game(tmp_path))
    assert exe == tmp_path / "lib" / "linux-x86_64" / "renpy"


def test_windows_probe(tmp_path):
    _touch(tmp_path / "game.exe")
    _touch(tmp_path / "launcher.exe")
    _touch(tmp_path / "notes.txt")
    assert ExecutableResolver("windows").resolve(_game(tmp_path)).name == "launcher.exe"


def test_windows_scan_accepts_cmd(tmp_path):
    _touch(tmp_path / "Play.CMD")
    _touch(tmp_path / "data.pak")
    assert ExecutableResolver("windows").resolve(_game(tmp_path)).name == "Play.CMD"


def test_missing_install_path(tmp_path):
    r = ExecutableResolver("unix")
    with pytest.raises(InvalidInstall):
        r.resolve(GameRecord(id="g", name="x"))
    with pytest.raises(ResolutionFailed):
        r.resolve(_game(tmp_path / "nope"))


def test_sniff_unreadable_is_no_match(tmp_path):
    assert sniff_script(tmp_path / "missing.sh") is False


def test_name_entries():
    assert LiteralName("game.sh").render("") == "game.sh"
    assert TemplatedName("{slug}.sh").render("foo") == "foo.sh"
    assert TemplatedName("{slug}.sh").render("") is None


@pytest.mark.skipif(not hasattr(os, "mkfifo"), reason="needs named pipes")
def test_fifo_is_never_opened(tmp_path):
    import threading

    _touch(tmp_path / "start.sh", SHEBANG)
    os.mkfifo(tmp_path / "pipe")
    os.mkfifo(tmp_path / "zzz")  # also shadows the {slug} name
    result = {}

    def go():
        result["exe"] = ExecutableResolver("unix").resolve(_game(tmp_path))

    t = threading.Thread(target=go, daemon=True)
    t.start()
    t.join(2)
    assert not t.is_alive(), "resolve() blocked on a named pipe"
    assert result["exe"] == tmp_path / "start.sh"


@pytest.mark.skipif(os.name == "nt", reason="POSIX mode bits")
def test_hint_is_marked_executable(tmp_path):
    _touch(tmp_path / "play.bin", b"\x7fELF")
    os.chmod(tmp_path / "play.bin", 0o644)
    exe = ExecutableResolver("unix").resolve(_game(tmp_path, executable="play.bin"))
    assert stat.S_IMODE(os.stat(exe).st_mode) == 0o755


def test_windows_templated_slug(tmp_path):
    _touch(tmp_path / "setup.exe")  # scanned first by name, but the slug probe wins the tie
    _touch(tmp_path / "spacequest2.exe")
    exe = ExecutableResolver("windows").resolve(_game(tmp_path, name="Space Quest 2"))
    assert exe.name == "spacequest2.exe"


def test_windows_engine_sub_path(tmp_path):
    _touch(tmp_path / "lib" / "windows-x86_64" / "renpy.exe")
    _touch(tmp_path / "notes.txt")
    exe = ExecutableResolver("windows").resolve(_game(tmp_path))
    assert exe == tmp_path / "lib" / "windows-x86_64" / "renpy.exe"
