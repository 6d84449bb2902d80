from __future__ import annotations

import os
from copy import deepcopy
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

from .paths import PATHS


ENV_VARS = {
    "data_path": "DATA_PATH",
    "inference_base_url": "CHAT_API_OLLAMA_URL",
    "text_model": "CHAT_API_OLLAMA_MODEL_TEXT",
    "vision_model": "CHAT_API_OLLAMA_MODEL_VISION",
    "output_file_name": "OUTPUT_FILE_NAME",
}


class ConfigurationError(ValueError):
    """Missing or invalid settings, files or directories. Fatal for a run."""


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def _default_config() -> Dict[str, Any]:
    return {
        "api": {
            "ollama": {"base_url": ""},
        },
        "runtime": {
            "data_path": "",
            "request_timeout": None,
        },
        "models": {
            "text": "",
            "vision": "",
        },
        "prompts": {
            "sentiment": (
                "Analyze the sentiment of this text and respond with only one word "
                '(positive/negative/neutral): "{text}"'
            ),
            "vision": "Identifica qué tipo de animal aparece en la imagen",
        },
        "pipelines": {
            "sentiment": {
                "dataset_dir": "steamreviews",
                "games_file": "games.csv",
                "reviews_file": "reviews.csv",
                "output_file": "output.json",
                "max_games": 2,
                "max_reviews_per_game": 2,
            },
            "vision": {
                "image_dir": "imatges/animals",
                "extensions": [".jpg", ".jpeg", ".png", ".gif"],
                "output_path": "",
                "max_categories": 1,
            },
        },
    }


class Config:
    def __init__(self, data: Dict[str, Any]) -> None:
        self._data = data

    @property
    def data(self) -> Dict[str, Any]:
        return self._data

    def get(self, path: str, default: Any = None) -> Any:
        cur: Any = self._data
        for part in path.split("."):
            if not isinstance(cur, dict) or part not in cur:
                return default
            cur = cur[part]
        return cur

    def api(self, name: str) -> Dict[str, Any]:
        return deepcopy(self._data.get("api", {}).get(name, {}))

    def runtime(self, key: str, default: Any = None) -> Any:
        return self._data.get("runtime", {}).get(key, default)

    def model(self, name: str) -> str:
        return self._data.get("models", {}).get(name) or ""

    def prompt(self, name: str, default: str = "") -> str:
        return self._data.get("prompts", {}).get(name, default)

    def pipeline(self, path: str, default: Any = None) -> Any:
        return self.get(f"pipelines.{path}", default)


def _apply_env_overrides(config: Dict[str, Any]) -> None:
    data_path = os.getenv(ENV_VARS["data_path"])
    base_url = os.getenv(ENV_VARS["inference_base_url"])
    text_model = os.getenv(ENV_VARS["text_model"])
    vision_model = os.getenv(ENV_VARS["vision_model"])
    output_file = os.getenv(ENV_VARS["output_file_name"])
    if data_path:
        config.setdefault("runtime", {})["data_path"] = data_path
    if base_url:
        config.setdefault("api", {}).setdefault("ollama", {})["base_url"] = base_url
    if text_model:
        config.setdefault("models", {})["text"] = text_model
    if vision_model:
        config.setdefault("models", {})["vision"] = vision_model
    if output_file:
        config.setdefault("pipelines", {}).setdefault("sentiment", {})["output_file"] = output_file


def load_config() -> Config:
    load_dotenv(PATHS.config_dir / ".env")
    load_dotenv(PATHS.root / ".env")

    config = _default_config()
    config_path = PATHS.config_dir / "config.yaml"
    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            file_config = yaml.safe_load(f) or {}
        config = _deep_merge(config, file_config)

    _apply_env_overrides(config)
    return Config(config)


@dataclass(frozen=True)
class RunSettings:
    """Settings shared by both pipelines, validated before a run starts."""

    data_path: Optional[Path]
    inference_base_url: str
    text_model: str
    vision_model: str
    output_file_name: str = "output.json"

    @classmethod
    def from_config(cls, config: Config) -> "RunSettings":
        data_path = str(config.runtime("data_path", "") or "").strip()
        return cls(
            data_path=PATHS.resolve(data_path) if data_path else None,
            inference_base_url=str(config.api("ollama").get("base_url") or "").strip().rstrip("/"),
            text_model=config.model("text").strip(),
            vision_model=config.model("vision").strip(),
            output_file_name=config.pipeline("sentiment.output_file") or "output.json",
        )

    def require(self, *fields: str) -> "RunSettings":
        missing = [ENV_VARS[name] for name in fields if not getattr(self, name)]
        if missing:
            raise ConfigurationError(
                "Missing required environment variables: " + ", ".join(missing) + ". Check your .env file."
            )
        return self


CONFIG = load_config()
