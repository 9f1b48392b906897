"""Models for test execution results."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Literal

ErrorKind = Literal["serialization", "request", "transport", "status"]

BODY_EXCERPT_LIMIT = 200


@dataclass(frozen=True, kw_only=True)
class ApiResponse:
    """Snapshot of a completed HTTP response."""

    method: str
    url: str
    status: int
    reason: str | None = None
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = b""

    def text(self, encoding: str = "utf-8") -> str:
        """Decode the body, replacing undecodable bytes."""
        return self.body.decode(encoding, errors="replace")

    def __str__(self) -> str:
        status_line = f"{self.status} {self.reason or ''}".rstrip()
        excerpt = self.text()
        if len(excerpt) > BODY_EXCERPT_LIMIT:
            excerpt = excerpt[:BODY_EXCERPT_LIMIT] + "..."
        if not excerpt:
            return f"{self.method} {self.url} -> {status_line}"
        return f"{self.method} {self.url} -> {status_line}: {excerpt}"


@dataclass(frozen=True, kw_only=True)
class TestResult:
    """Outcome of a single API test.

    ``error`` holds a message for serialization, request and transport
    failures, or the full response when the status code did not match.
    ``duration`` is None when the request was never sent.
    """

    __test__ = False

    sequence: int
    passed: bool
    description: str
    error: str | ApiResponse | None = None
    error_kind: ErrorKind | None = None
    duration: float | None = None
