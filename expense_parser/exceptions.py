"""
Error taxonomy for the expense extraction pipeline.

Remote errors are always absorbed by the pipeline (local fallback);
only NoTextFoundError and malformed input reach the caller.
"""


class ExpenseParserError(Exception):
    """Base class for pipeline errors."""


class NoTextFoundError(ExpenseParserError):
    """Observation carried no usable text."""

    def __init__(self, message: str = "No text found"):
        super().__init__(message)


class RemoteParseError(ExpenseParserError):
    """Remote structured parse failed; caller should fall back."""


class RemoteTimeoutError(RemoteParseError):
    pass


class RemoteUnavailableError(RemoteParseError):
    """Connection refused, DNS failure or non-2xx status."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class RemoteResponseError(RemoteParseError):
    """Reply arrived but could not be turned into an expense."""
