from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class ReviewRecord:
    """One review joined to its game; game_index is the position of the game row in the sample."""

    appid: str
    game_name: str
    content: str
    game_index: int = 0


@dataclass(frozen=True)
class ImageRecord:
    """One image file; the category is the name of its parent folder."""

    path: Path
    category: str

    @property
    def file_name(self) -> str:
        return self.path.name


@dataclass(frozen=True)
class InferenceRequest:
    """Body of a single /generate call."""

    model: str
    prompt: str
    images: Optional[List[str]] = None
    stream: bool = False
    metadata: Dict[str, Any] = field(default_factory=dict)

    def payload(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"model": self.model, "prompt": self.prompt}
        if self.images:
            body["images"] = list(self.images)
        body["stream"] = self.stream
        return body


@dataclass(frozen=True)
class InferenceResult:
    """Response text, or no text plus an error description."""

    text: Optional[str]
    error: Optional[str] = None
    raw_response: Optional[Dict[str, Any]] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.text is not None

    @classmethod
    def failure(cls, error: str, raw_response: Optional[Dict[str, Any]] = None) -> "InferenceResult":
        return cls(text=None, error=error, raw_response=raw_response)


class RunStatus(str, Enum):
    SUCCESS = "success"
    PARTIAL_FAILURE = "partial_failure"
    CONFIGURATION_ERROR = "configuration_error"


_EXIT_CODES = {
    RunStatus.SUCCESS: 0,
    RunStatus.CONFIGURATION_ERROR: 1,
    RunStatus.PARTIAL_FAILURE: 2,
}


@dataclass(frozen=True)
class ItemFailure:
    item: str
    error: str


@dataclass(frozen=True)
class RunOutcome:
    """What a pipeline run produced; the caller turns it into an exit status."""

    status: RunStatus
    output_path: Optional[Path] = None
    processed: int = 0
    failures: List[ItemFailure] = field(default_factory=list)
    message: str = ""

    @property
    def exit_code(self) -> int:
        return _EXIT_CODES[self.status]

    @classmethod
    def configuration_error(cls, message: str) -> "RunOutcome":
        return cls(status=RunStatus.CONFIGURATION_ERROR, message=message)

    @classmethod
    def from_run(cls, output_path: Path, processed: int, failures: List[ItemFailure]) -> "RunOutcome":
        status = RunStatus.PARTIAL_FAILURE if failures else RunStatus.SUCCESS
        message = f"{len(failures)} of {processed} items failed" if failures else f"{processed} items processed"
        return cls(
            status=status,
            output_path=output_path,
            processed=processed,
            failures=list(failures),
            message=message,
        )
