import csv
import sys
from pathlib import Path
from typing import List, Optional

import pytest


# Make `config` and `inference` importable without installing the project.
PROJECT_ROOT = Path(__file__).resolve().parents[1]

if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from inference.pipeline.types import InferenceRequest, InferenceResult  # noqa: E402


class FakeClient:
    """Deterministic stand-in for the Ollama client. Records every request."""

    def __init__(self, replies: Optional[List[Optional[str]]] = None, default: Optional[str] = "positive") -> None:
        self.replies = list(replies or [])
        self.default = default
        self.requests: List[InferenceRequest] = []

    def predict(self, request: InferenceRequest) -> InferenceResult:
        self.requests.append(request)
        reply = self.replies.pop(0) if self.replies else self.default
        if reply is None:
            return InferenceResult.failure("HTTPError: 500 Server Error")
        return InferenceResult(text=reply, raw_response={"response": reply})


@pytest.fixture
def fake_client():
    return FakeClient()


def write_csv(path: Path, header: List[str], rows: List[List[str]]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        writer.writerows(rows)
    return path
