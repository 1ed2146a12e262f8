"""
Error types and helpers for consistent error message extraction.
"""


class CaptureViewerError(Exception):
    """Base class for errors raised by the capture viewer."""


class CollectorError(CaptureViewerError):
    """The collection endpoint could not supply a usable record list."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.status = status


def get_error_message(error: BaseException | object) -> str:
    """
    Safely extract an error message from an unknown error type.
    """
    if isinstance(error, Exception):
        return str(error) or type(error).__name__
    return "Unknown error"
