class TimelineError(Exception):
    """Base class for timeline aggregation errors."""


class TransportFailure(TimelineError):
    """The feed could not be fetched. State is untouched, so the load can be retried."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
