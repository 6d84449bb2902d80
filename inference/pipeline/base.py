from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Generic, List, Optional, TypeVar

from inference.utils.media import write_json
from .model_client import ModelClient
from .types import InferenceRequest, InferenceResult, ItemFailure, RunOutcome

R = TypeVar("R")


class BasePipeline(ABC, Generic[R]):
    """Enumerate records, call the model once per record, fold the results and write JSON.

    Records are processed strictly one after another. Every record yields exactly
    one InferenceResult, either from the client or a failure when no request
    could be built.
    """

    name = "pipeline"

    def __init__(self, client: ModelClient, log_dir: Path) -> None:
        self.client = client
        self.log_dir = log_dir
        self.logger = self._setup_logger()

    def _setup_logger(self) -> logging.Logger:
        pipeline_log_dir = self.log_dir / self.name
        pipeline_log_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = pipeline_log_dir / f"{self.name}_{timestamp}.log"

        logger = logging.getLogger(f"inference.pipeline.{self.name}")
        logger.setLevel(logging.INFO)
        for handler in list(logger.handlers):
            handler.close()
            logger.removeHandler(handler)

        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

        return logger

    @property
    @abstractmethod
    def output_path(self) -> Path:
        """Where the report is written."""

    @abstractmethod
    def load_records(self) -> List[R]:
        """Enumerate input records. Raises ConfigurationError when inputs are missing."""

    @abstractmethod
    def build_request(self, record: R) -> Optional[InferenceRequest]:
        """Request for one record, or None when no payload can be built."""

    @abstractmethod
    def new_report(self) -> Dict[str, Any]:
        ...

    @abstractmethod
    def record_result(self, report: Dict[str, Any], record: R, result: InferenceResult) -> Optional[str]:
        """Fold one result into the report. Returns an error description for failed items."""

    @abstractmethod
    def describe(self, record: R) -> str:
        ...

    def unbuildable_error(self, record: R) -> str:
        return f"No request could be built for {self.describe(record)}"

    def process(self, record: R) -> InferenceResult:
        request = self.build_request(record)
        if request is None:
            return InferenceResult.failure(self.unbuildable_error(record))
        return self.client.predict(request)

    def run(self) -> RunOutcome:
        records = self.load_records()
        self.logger.info("Loaded %s records", len(records))

        report = self.new_report()
        failures: List[ItemFailure] = []
        for record in records:
            result = self.process(record)
            error = self.record_result(report, record, result)
            if error:
                failures.append(ItemFailure(item=self.describe(record), error=error))
                self.logger.error("[%s] %s", self.describe(record), error)
            else:
                self.logger.info("[%s] %s", self.describe(record), result.text)

        output_path = write_json(self.output_path, report)
        self.logger.info("Results saved: %s", output_path)

        outcome = RunOutcome.from_run(output_path, len(records), failures)
        self.logger.info("Run finished: %s (%s)", outcome.status.value, outcome.message)
        return outcome
