from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path


def _resolve_root() -> Path:
    env_root = os.getenv("OLLAMA_BATCH_ROOT")
    if env_root:
        return Path(env_root).expanduser().resolve()
    return Path(__file__).resolve().parents[1]


@dataclass(frozen=True)
class Paths:
    root: Path = _resolve_root()

    @property
    def data_dir(self) -> Path:
        return self.root / "data"

    @property
    def logs_dir(self) -> Path:
        return self.root / "logs"

    @property
    def config_dir(self) -> Path:
        return self.root / "config"

    def resolve(self, path: str | Path) -> Path:
        """Relative paths are taken from the project root."""
        path = Path(path).expanduser()
        if path.is_absolute():
            return path
        return self.root / path


PATHS = Paths()
