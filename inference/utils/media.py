from __future__ import annotations

import base64
import json
import logging
from pathlib import Path
from typing import Any, Iterable, Optional


logger = logging.getLogger(__name__)


def ensure_parent(path: str | Path) -> None:
    Path(path).parent.mkdir(parents=True, exist_ok=True)


def has_extension(path: str | Path, extensions: Iterable[str]) -> bool:
    return Path(path).suffix.lower() in {ext.lower() for ext in extensions}


def encode_image_base64(image_path: str | Path) -> Optional[str]:
    try:
        with open(image_path, "rb") as image_file:
            return base64.b64encode(image_file.read()).decode("utf-8")
    except OSError as exc:
        logger.error("Failed to read image %s: %s", image_path, exc)
        return None


def write_json(path: str | Path, payload: Any) -> Path:
    """Overwrite ``path`` with pretty-printed JSON."""
    path = Path(path)
    ensure_parent(path)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)
    return path
