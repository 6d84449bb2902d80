from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from config.paths import PATHS
from config.settings import CONFIG, Config, ConfigurationError, RunSettings
from inference.utils.media import encode_image_base64, has_extension
from .base import BasePipeline
from .model_client import ModelClient
from .types import ImageRecord, InferenceRequest, InferenceResult, RunOutcome

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif")


@dataclass(frozen=True)
class VisionConfig:
    image_dir: Path
    output_path: Path
    log_dir: Path
    base_url: str
    model: str
    prompt: str
    extensions: Tuple[str, ...] = IMAGE_EXTENSIONS
    max_categories: Optional[int] = 1
    request_timeout: Optional[float] = None


class VisionPipeline(BasePipeline[ImageRecord]):
    """Category folders of images -> one model description per image."""

    name = "vision"

    def __init__(self, client: ModelClient, config: VisionConfig) -> None:
        self.config = config
        super().__init__(client, config.log_dir)

    @property
    def output_path(self) -> Path:
        return self.config.output_path

    def _category_dirs(self) -> List[Path]:
        categories = []
        for entry in sorted(self.config.image_dir.iterdir()):
            if not entry.is_dir():
                self.logger.info("Skipping entry that is not a folder: %s", entry)
                continue
            if self.config.max_categories is not None and len(categories) >= self.config.max_categories:
                self.logger.info("Stopping after %s category folder(s)", len(categories))
                break
            categories.append(entry)
        return categories

    def load_records(self) -> List[ImageRecord]:
        if not self.config.image_dir.is_dir():
            raise ConfigurationError(f"Image folder not found: {self.config.image_dir}")

        records = []
        for category_dir in self._category_dirs():
            for entry in sorted(category_dir.iterdir()):
                if not entry.is_file() or not has_extension(entry, self.config.extensions):
                    self.logger.info("Skipping unsupported file: %s", entry)
                    continue
                records.append(ImageRecord(path=entry, category=category_dir.name))
        return records

    def build_request(self, record: ImageRecord) -> Optional[InferenceRequest]:
        image_b64 = encode_image_base64(record.path)
        if image_b64 is None:
            return None
        self.logger.info("Processing image %s (%s base64 chars)", record.path, len(image_b64))
        return InferenceRequest(
            model=self.config.model,
            prompt=self.config.prompt,
            images=[image_b64],
            metadata={"file": record.file_name, "category": record.category},
        )

    def unbuildable_error(self, record: ImageRecord) -> str:
        return f"Could not read image {record.path}"

    def new_report(self) -> Dict[str, Any]:
        return {"analisis": []}

    def record_result(self, report: Dict[str, Any], record: ImageRecord, result: InferenceResult) -> Optional[str]:
        entry: Dict[str, Any] = {"nombreArchivo": record.file_name, "resultadoOllama": result.text}
        if not result.ok:
            entry["error"] = result.error
        report["analisis"].append(entry)
        return None if result.ok else result.error

    def describe(self, record: ImageRecord) -> str:
        return f"{record.category}/{record.file_name}"


def default_vision_config(config: Optional[Config] = None) -> VisionConfig:
    config = config or CONFIG
    settings = RunSettings.from_config(config).require("data_path", "inference_base_url", "vision_model")

    output_path = config.pipeline("vision.output_path", "")
    extensions = config.pipeline("vision.extensions") or IMAGE_EXTENSIONS
    return VisionConfig(
        image_dir=settings.data_path / config.pipeline("vision.image_dir", "imatges/animals"),
        output_path=PATHS.resolve(output_path) if output_path else PATHS.data_dir / "exercici3_resposta.json",
        log_dir=PATHS.logs_dir,
        base_url=settings.inference_base_url,
        model=settings.vision_model,
        prompt=config.prompt("vision"),
        extensions=tuple(extensions),
        max_categories=config.pipeline("vision.max_categories", 1),
        request_timeout=config.runtime("request_timeout"),
    )


def run_vision(
    client: Optional[ModelClient] = None,
    config: Optional[Config] = None,
    **overrides: Any,
) -> RunOutcome:
    logger = logging.getLogger(__name__)
    try:
        pipeline_config = default_vision_config(config)
        if overrides:
            pipeline_config = replace(pipeline_config, **overrides)
        if client is None:
            from inference.utils.ollama_http_client import OllamaHttpClient

            client = OllamaHttpClient(pipeline_config.base_url, timeout=pipeline_config.request_timeout)
        return VisionPipeline(client, pipeline_config).run()
    except ConfigurationError as exc:
        logger.error("Configuration error: %s", exc)
        return RunOutcome.configuration_error(str(exc))
