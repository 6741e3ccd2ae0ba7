from typing import Optional


class ForecastServiceError(RuntimeError):
    """Base error for forecast and suggestion failures."""


class ModelOutputError(ForecastServiceError):
    """Raised when parsed model output is missing required structure."""


class RetriesExhaustedError(ForecastServiceError):
    """Raised when every attempt against the model has failed."""

    def __init__(self, attempts: int, last_error: Optional[str]):
        self.attempts = attempts
        self.last_error = last_error or "unknown error"
        super().__init__(
            f"Failed to get a valid model response after {attempts} attempts: {self.last_error}"
        )


class PipelineError(ForecastServiceError):
    """Raised when a pipeline stage fails and the request cannot complete."""

    def __init__(self, stage: str, message: str):
        self.stage = stage
        super().__init__(f"{stage}: {message}")
