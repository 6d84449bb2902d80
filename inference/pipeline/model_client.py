from __future__ import annotations

from typing import Protocol

from .types import InferenceRequest, InferenceResult


class ModelClient(Protocol):
    """Inference backend used by the pipelines."""

    def predict(self, request: InferenceRequest) -> InferenceResult:
        ...
