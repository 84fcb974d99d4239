class OrchestratorError(Exception):
    """Base exception for upload-job orchestration."""


class InvalidTransitionError(OrchestratorError):
    """Raised when a trigger is fired from a stage that does not allow it."""


class MissingOcrTextError(OrchestratorError):
    """Raised when AI extraction is requested before any OCR text exists."""


class StageFailedError(OrchestratorError):
    """Raised when a network-bound stage fails; the job moves to Errored."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        payload: object | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload
