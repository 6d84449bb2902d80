from .types import (
    ImageRecord,
    InferenceRequest,
    InferenceResult,
    ItemFailure,
    ReviewRecord,
    RunOutcome,
    RunStatus,
)
from .base import BasePipeline
from .model_client import ModelClient
from .sentiment_pipeline import SentimentPipeline, SentimentConfig, run_sentiment, default_sentiment_config
from .vision_pipeline import VisionPipeline, VisionConfig, run_vision, default_vision_config

__all__ = [
    "ImageRecord",
    "InferenceRequest",
    "InferenceResult",
    "ItemFailure",
    "ReviewRecord",
    "RunOutcome",
    "RunStatus",
    "BasePipeline",
    "ModelClient",
    "SentimentPipeline",
    "SentimentConfig",
    "run_sentiment",
    "default_sentiment_config",
    "VisionPipeline",
    "VisionConfig",
    "run_vision",
    "default_vision_config",
]
