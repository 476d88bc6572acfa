"""Custom exceptions for hubgate."""


class HubgateError(Exception):
    """Base class for hubgate exceptions."""

    def __init__(self, message: str = "hubgate error"):
        self.message = message
        super().__init__(message)


class MaxRetriesExceededError(HubgateError):
    """Raised when an execute() call runs out of attempts without an outcome.

    Transport failures on the final attempt propagate unchanged instead;
    this error only covers a loop that ended without either returning a
    response or re-raising.
    """

    def __init__(self, attempts: int, detail: str | None = None):
        self.attempts = attempts
        message = detail or f"Max retries exceeded after {attempts} attempt(s)"
        super().__init__(message)
