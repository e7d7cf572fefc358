"""Exception classes raised inside the engine.

None of these cross the engine boundary: loads report them as
``LoadResult.error`` and dispatches record them on the history entry.
"""

INVALID_JSON_BODY = "Invalid JSON in request body"


class StudioError(Exception):
    """Base engine error."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(detail)


class LoadFailure(StudioError):
    """The document or runtime configuration could not be fetched or parsed."""


class InvalidRequestBody(StudioError):
    """User-supplied body text is not valid JSON."""

    def __init__(self, detail: str = INVALID_JSON_BODY) -> None:
        super().__init__(detail)


class DispatchFailure(StudioError):
    """Transport error while sending a test request."""
