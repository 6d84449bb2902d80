from __future__ import annotations

import json
import logging
from typing import Optional

import requests

from inference.pipeline.types import InferenceRequest, InferenceResult


class OllamaHttpClient:
    """Single-attempt client for the Ollama /generate endpoint."""

    def __init__(self, base_url: str, timeout: Optional[float] = None) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.logger = logging.getLogger("inference.utils.ollama_http_client")

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/generate"

    def _extract_text(self, data: object) -> str:
        if not isinstance(data, dict):
            raise ValueError("Response body is not a JSON object")
        text = data.get("response")
        if not isinstance(text, str) or not text:
            raise ValueError("Response has no 'response' text field")
        return text

    def predict(self, request: InferenceRequest) -> InferenceResult:
        self.logger.info("Calling Ollama %s (model=%s, %s)", self.endpoint, request.model, request.metadata)
        data = None
        try:
            response = requests.post(self.endpoint, json=request.payload(), timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
            self.logger.info("Ollama response: %s", json.dumps(data, ensure_ascii=False, indent=2))
            return InferenceResult(text=self._extract_text(data), raw_response=data)
        except (requests.RequestException, ValueError) as exc:
            self.logger.error(
                "Ollama request failed: %s (url=%s, model=%s, prompt_length=%s, image_length=%s, %s)",
                exc,
                self.endpoint,
                request.model,
                len(request.prompt),
                sum(len(image) for image in request.images or []),
                request.metadata,
            )
            raw = data if isinstance(data, dict) else None
            return InferenceResult.failure(f"{type(exc).__name__}: {exc}", raw_response=raw)
