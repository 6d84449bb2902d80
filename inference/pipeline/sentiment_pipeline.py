from __future__ import annotations

import csv
import logging
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from config.paths import PATHS
from config.settings import CONFIG, Config, ConfigurationError, RunSettings
from .base import BasePipeline
from .model_client import ModelClient
from .types import InferenceRequest, InferenceResult, ReviewRecord, RunOutcome

SENTIMENTS = ("positive", "negative", "neutral")
ERROR_CATEGORY = "error"

GAME_COLUMNS = ("appid", "name")
REVIEW_COLUMNS = ("app_id", "content")


@dataclass(frozen=True)
class SentimentConfig:
    games_path: Path
    reviews_path: Path
    output_path: Path
    log_dir: Path
    base_url: str
    model: str
    prompt_template: str
    max_games: Optional[int] = 2
    max_reviews_per_game: Optional[int] = 2
    request_timeout: Optional[float] = None


def load_table(path: Path, required: Sequence[str]) -> List[Dict[str, str]]:
    """Rows of a CSV file with a header row. A file without any header yields no rows."""
    with open(path, "r", encoding="utf-8-sig", newline="") as f:
        reader = csv.DictReader(f)
        if reader.fieldnames is None:
            return []
        missing = [column for column in required if column not in reader.fieldnames]
        if missing:
            raise ConfigurationError(f"{path} is missing columns: {', '.join(missing)}")
        return list(reader)


def _limit(items: list, limit: Optional[int]) -> list:
    return items if limit is None else items[:limit]


def select_reviews(
    games: List[Dict[str, str]],
    reviews: List[Dict[str, str]],
    max_games: Optional[int] = 2,
    max_reviews_per_game: Optional[int] = 2,
) -> List[Tuple[Dict[str, str], List[ReviewRecord]]]:
    selected = []
    for index, game in enumerate(_limit(games, max_games)):
        matching = [review for review in reviews if review["app_id"] == game["appid"]]
        records = [
            ReviewRecord(
                appid=game["appid"],
                game_name=game["name"],
                content=review["content"],
                game_index=index,
            )
            for review in _limit(matching, max_reviews_per_game)
        ]
        selected.append((game, records))
    return selected


def classify_sentiment(text: Optional[str]) -> str:
    label = (text or "").strip().lower()
    return label if label in SENTIMENTS else ERROR_CATEGORY


def _empty_stats() -> Dict[str, int]:
    stats = {label: 0 for label in SENTIMENTS}
    stats[ERROR_CATEGORY] = 0
    return stats


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class SentimentPipeline(BasePipeline[ReviewRecord]):
    """Game reviews -> one-word sentiment per review -> counts per game."""

    name = "sentiment"

    def __init__(self, client: ModelClient, config: SentimentConfig) -> None:
        self.config = config
        self._games: List[Dict[str, str]] = []
        super().__init__(client, config.log_dir)

    @property
    def output_path(self) -> Path:
        return self.config.output_path

    def load_records(self) -> List[ReviewRecord]:
        for path in (self.config.games_path, self.config.reviews_path):
            if not path.is_file():
                raise ConfigurationError(f"CSV file not found: {path}")

        games = load_table(self.config.games_path, GAME_COLUMNS)
        reviews = load_table(self.config.reviews_path, REVIEW_COLUMNS)
        self.logger.info("Read %s games and %s reviews", len(games), len(reviews))

        selected = select_reviews(
            games,
            reviews,
            max_games=self.config.max_games,
            max_reviews_per_game=self.config.max_reviews_per_game,
        )
        self._games = [game for game, _ in selected]
        return [record for _, records in selected for record in records]

    def build_request(self, record: ReviewRecord) -> InferenceRequest:
        return InferenceRequest(
            model=self.config.model,
            prompt=self.config.prompt_template.format(text=record.content),
            metadata={"appid": record.appid, "game": record.game_name},
        )

    def new_report(self) -> Dict[str, Any]:
        juegos = [
            {"appid": game["appid"], "nombre": game["name"], "estadisticas": _empty_stats()}
            for game in self._games
        ]
        return {"fechaEjecucion": _timestamp(), "juegos": juegos}

    def record_result(self, report: Dict[str, Any], record: ReviewRecord, result: InferenceResult) -> Optional[str]:
        entry = report["juegos"][record.game_index]
        label = classify_sentiment(result.text)
        entry["estadisticas"][label] += 1
        if not result.ok:
            return result.error
        if label == ERROR_CATEGORY:
            return f"Unrecognised sentiment: {result.text!r}"
        return None

    def describe(self, record: ReviewRecord) -> str:
        return f"appid={record.appid}"


def default_sentiment_config(config: Optional[Config] = None) -> SentimentConfig:
    config = config or CONFIG
    settings = RunSettings.from_config(config).require("data_path", "inference_base_url", "text_model")

    dataset_dir = settings.data_path / config.pipeline("sentiment.dataset_dir", "steamreviews")
    return SentimentConfig(
        games_path=dataset_dir / config.pipeline("sentiment.games_file", "games.csv"),
        reviews_path=dataset_dir / config.pipeline("sentiment.reviews_file", "reviews.csv"),
        output_path=settings.data_path / settings.output_file_name,
        log_dir=PATHS.logs_dir,
        base_url=settings.inference_base_url,
        model=settings.text_model,
        prompt_template=config.prompt("sentiment"),
        max_games=config.pipeline("sentiment.max_games", 2),
        max_reviews_per_game=config.pipeline("sentiment.max_reviews_per_game", 2),
        request_timeout=config.runtime("request_timeout"),
    )


def run_sentiment(
    client: Optional[ModelClient] = None,
    config: Optional[Config] = None,
    **overrides: Any,
) -> RunOutcome:
    logger = logging.getLogger(__name__)
    try:
        pipeline_config = default_sentiment_config(config)
        if overrides:
            pipeline_config = replace(pipeline_config, **overrides)
        if client is None:
            from inference.utils.ollama_http_client import OllamaHttpClient

            client = OllamaHttpClient(pipeline_config.base_url, timeout=pipeline_config.request_timeout)
        return SentimentPipeline(client, pipeline_config).run()
    except ConfigurationError as exc:
        logger.error("Configuration error: %s", exc)
        return RunOutcome.configuration_error(str(exc))
