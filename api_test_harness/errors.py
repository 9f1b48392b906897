"""Exceptions raised by the API test harness."""


class HarnessError(Exception):
    """Base class for harness errors."""


class RequestConstructionError(HarnessError):
    """Raised when an HTTP request cannot be built from a test spec."""


class SessionClosedError(HarnessError):
    """Raised when a test is run on a session that was already closed."""
