from __future__ import annotations

"""
Exceptions raised by the pipeline stages. Every one is terminal for the run.
"""


class PipelineError(Exception):
    """Base error carrying the stage that failed and the offending input details."""

    stage = "pipeline"

    def __init__(self, message: str, stage: str | None = None, **context):
        super().__init__(message)
        if stage is not None:
            self.stage = stage
        self.message = message
        self.context = context

    def __str__(self) -> str:
        if not self.context:
            return f"[{self.stage}] {self.message}"
        details = ", ".join(f"{key}={value!r}" for key, value in self.context.items())
        return f"[{self.stage}] {self.message} ({details})"


class SchemaError(PipelineError):
    stage = "load"


class MissingValuesError(PipelineError):
    stage = "load"


class EmptyDataset(PipelineError):
    stage = "split"


class InvalidProportion(PipelineError):
    stage = "split"


class UnstratifiableDataset(PipelineError):
    stage = "split"


class SingularDesign(PipelineError):
    stage = "fit"


class NonConvergence(PipelineError):
    stage = "fit"


class EmptyTestSet(PipelineError):
    stage = "evaluate"
