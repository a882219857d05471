"""
Custom exceptions for the timeline browser.

Fetch-path errors are captured by the pagination engine and surfaced
through its state rather than raised to the rendering layer.
"""


class TimelineError(Exception):
    """Base exception for all timeline errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class FetchFailedError(TimelineError):
    """Raised when the event source fails to answer a query."""

    def __init__(self, operation: str, cause: Exception | None = None):
        details = {"operation": operation}
        if cause:
            details["cause"] = str(cause)
        message = f"Fetch failed during {operation}"
        if cause:
            message += f": {cause}"
        super().__init__(message, details)
        self.operation = operation
        self.cause = cause


class InvalidResponseShapeError(TimelineError):
    """Raised when the event source returns malformed data."""

    def __init__(self, reason: str, payload_keys: list[str] | None = None):
        details: dict = {"reason": reason}
        if payload_keys is not None:
            details["payload_keys"] = payload_keys
        super().__init__(f"Invalid response shape: {reason}", details)
        self.reason = reason
        self.payload_keys = payload_keys


class StaleRequestError(TimelineError):
    """Raised when a resolved fetch belongs to a superseded range or zoom.

    Never reaches the UI: the engine catches it and drops the response.
    """

    def __init__(self, token: int, current_token: int):
        super().__init__(
            f"Stale response for request {token} (current {current_token})",
            {"token": token, "current_token": current_token},
        )
        self.token = token
        self.current_token = current_token


class ValidationError(TimelineError):
    """Raised when configuration or arguments fail validation."""

    def __init__(self, field: str, reason: str, value: str | None = None):
        details = {"field": field, "reason": reason}
        if value is not None:
            details["value"] = value
        super().__init__(f"Validation failed for {field}: {reason}", details)
        self.field = field
        self.reason = reason
        self.value = value


class SourceNotInitializedError(TimelineError):
    """Raised when an event source is queried before initialize()."""

    def __init__(self, source: str):
        super().__init__(f"Event source not initialized: {source}", {"source": source})
        self.source = source
