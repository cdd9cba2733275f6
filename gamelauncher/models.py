from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional


@dataclass
class GameRecord:
    id: str
    name: str
    install_path: Optional[str] = None     # absolute directory
    executable: Optional[str] = None       # relative to install_path
    installed: bool = False
    last_played: Optional[str] = None      # owned by the library
    play_time: int = 0

    @classmethod
    def from_dict(cls, data: dict) -> "GameRecord":
        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            install_path=data.get("install_path") or None,
            executable=data.get("executable") or None,
            installed=bool(data.get("installed", False)),
            last_played=data.get("last_played"),
            play_time=int(data.get("play_time") or 0),
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass(frozen=True)
class LiteralName:
    name: str

    def render(self, slug: str) -> Optional[str]:
        return self.name


@dataclass(frozen=True)
class TemplatedName:
    template: str    # "{slug}.sh"

    def render(self, slug: str) -> Optional[str]:
        if not slug:
            return None
        return self.template.format(slug=slug)


@dataclass
class ExecutableCandidate:
    path: Path
    order: int = field(default=0)   # discovery index; keeps ties stable
