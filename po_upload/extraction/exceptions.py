class ExtractionError(Exception):
    """Raised when purchase-order extraction fails."""


class ExtractionValidationError(ExtractionError):
    """Raised when the model output cannot be shaped into a purchase order."""


class ExtractionNetworkError(ExtractionError):
    """Raised when the AI provider cannot be reached."""


class ExtractionNotConfiguredError(ExtractionError):
    """Raised when the configured provider has no API key."""


class ExtractionUpstreamError(ExtractionError):
    """Raised when the AI provider answers with an error status."""

    def __init__(self, message: str, *, status_code: int, payload: object) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload
