from sentinel.config.settings import Settings
from sentinel.database.repositories.base import BaseFileRepository
from sentinel.engine_client.base import BaseEngineClient
from sentinel.lifecycle.storage import ArtifactStore
from sentinel.logging.logger import Log
from sentinel.processor.pipeline import PipelineStep, ProcessingContext
from sentinel.processor.steps import (
    DiscardArtifactsStep,
    LoadRecordStep,
    PersistResultStep,
    ResolveRequestStep,
    RunEngineStep,
)


class Processor:
    """Runs the processing steps in order; on any failure runs the failure step and re-raises.

    Pipeline: load record -> resolve request -> run engine -> persist.
    """

    def __init__(self, steps: list[PipelineStep], failed_step: PipelineStep) -> None:
        self._steps = steps
        self._failed_step = failed_step

    def process(self, context: ProcessingContext) -> ProcessingContext:
        Log.info(f"Processing file {context.file_id} ({context.mode.value})")
        try:
            for step in self._steps:
                context = step.run(context)
        except Exception as exc:
            context.error_message = str(exc)
            self._failed_step.run(context)
            raise
        return context


def build_processor(
    settings: Settings,
    repository: BaseFileRepository,
    store: ArtifactStore,
    engine_client: BaseEngineClient,
) -> Processor:
    """Build a Processor wired to the given collaborators."""
    steps: list[PipelineStep] = [
        LoadRecordStep(repository),
        ResolveRequestStep(store, default_payload=settings.default_watermark_text),
        RunEngineStep(engine_client),
        PersistResultStep(repository, store),
    ]
    return Processor(steps=steps, failed_step=DiscardArtifactsStep(store))
