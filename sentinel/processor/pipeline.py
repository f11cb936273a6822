from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path

from sentinel.api.schemas import ProcessResponse
from sentinel.engine.models import Evidence
from sentinel.lifecycle.models import FileRecord, ProcessingMode


@dataclass(slots=True)
class ProcessingContext:
    file_id: str
    mode: ProcessingMode
    payload: str | None = None
    record: FileRecord | None = None
    output_path: Path | None = None
    response: ProcessResponse | None = None
    evidence: Evidence | None = None
    error_message: str = ""


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: ProcessingContext) -> ProcessingContext:
        raise NotImplementedError
