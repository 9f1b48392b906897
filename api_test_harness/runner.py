"""Execution of API test requests against a test session."""

import json
import logging
import re
import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

import aiohttp
from yarl import URL

from api_test_harness.errors import RequestConstructionError, SessionClosedError
from api_test_harness.models.request import TestRequestSpec
from api_test_harness.models.result import ApiResponse, ErrorKind
from api_test_harness.session import ApiTestSession

log = logging.getLogger(__name__)

HTTP_TOKEN = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")
CONTROL_CHARACTERS = re.compile(r"[\x00-\x1f\x7f]")
# horizontal tab is allowed in header values
HEADER_CONTROL_CHARACTERS = re.compile(r"[\x00-\x08\x0a-\x1f\x7f]")


@dataclass(frozen=True, kw_only=True)
class PreparedRequest:
    """Validated request, ready to be sent."""

    method: str
    url: URL
    headers: Mapping[str, str] = field(default_factory=dict)
    data: bytes | None = None


def serialize_body(body: Any) -> bytes:
    """Serialize a structured value as a JSON payload.

    Raises:
        TypeError: If the value contains objects JSON cannot represent
        ValueError: If the value contains a circular reference, NaN or infinity

    """
    return json.dumps(body, allow_nan=False).encode("utf-8")


def build_request(
    method: str,
    url: str,
    *,
    data: bytes | None = None,
    content_type: str | None = None,
    bearer_token: str | None = None,
) -> PreparedRequest:
    """Build a request with its optional headers.

    Raises:
        RequestConstructionError: If the method is not a valid HTTP token, the
            URL is not an absolute URL, or a header value contains control
            characters

    """
    if not HTTP_TOKEN.fullmatch(method):
        raise RequestConstructionError(f"invalid method {method!r}")

    if CONTROL_CHARACTERS.search(url):
        raise RequestConstructionError(f"invalid control character in URL {url!r}")

    try:
        parsed = URL(url)
    except ValueError as e:
        raise RequestConstructionError(f"invalid URL {url!r}: {e}") from e

    if not parsed.is_absolute() or not parsed.host:
        raise RequestConstructionError(f"URL {url!r} is not absolute")

    optional_headers = {"Content-Type": content_type, "Authorization": bearer_token}
    for name, value in optional_headers.items():
        if value is not None and HEADER_CONTROL_CHARACTERS.search(value):
            raise RequestConstructionError(
                f"invalid control character in {name} header {value!r}"
            )

    headers: dict[str, str] = {}
    if content_type is not None:
        headers["Content-Type"] = content_type
    if bearer_token is not None:
        headers["Authorization"] = f"Bearer {bearer_token}"

    return PreparedRequest(method=method, url=parsed, headers=headers, data=data)


async def read_response(
    request: PreparedRequest, response: aiohttp.ClientResponse
) -> ApiResponse:
    """Capture status, headers, and body of a response."""
    return ApiResponse(
        method=request.method,
        url=str(response.url),
        status=response.status,
        reason=response.reason,
        headers=dict(response.headers),
        body=await response.read(),
    )


@dataclass(frozen=True, kw_only=True)
class ApiTestRunner:
    """Runs test requests one at a time and records them in a session."""

    session: ApiTestSession

    async def run(self, spec: TestRequestSpec) -> None:
        """Send the request described by spec and record exactly one result.

        Serialization, request construction, transport, and status code
        failures are recorded as failed results and never raised.

        Raises:
            SessionClosedError: If the session was already closed

        """
        session = self.session
        if session.closed:
            raise SessionClosedError(
                f"Cannot run {spec.description!r}: session is closed"
            )

        url = f"{session.base_url}{spec.path}{spec.path_param or ''}"

        data = None
        if spec.body is not None:
            try:
                data = serialize_body(spec.body)
            except (TypeError, ValueError) as e:
                self._record_failure(spec, str(e), "serialization")
                return

        try:
            request = build_request(
                spec.method,
                url,
                data=data,
                content_type=spec.content_type,
                bearer_token=spec.bearer_token,
            )
        except RequestConstructionError as e:
            self._record_failure(spec, str(e), "request")
            return

        if session.config.log_requests:
            log.info("%s %s", request.method, request.url)

        duration: float | None = None
        start = time.perf_counter()
        try:
            async with session.client.request(
                request.method,
                request.url,
                data=request.data,
                headers=request.headers,
                skip_auto_headers=(
                    () if spec.content_type is not None else ("Content-Type",)
                ),
            ) as response:
                duration = time.perf_counter() - start
                api_response = await read_response(request, response)
        except (aiohttp.ClientError, TimeoutError) as e:
            if duration is None:
                duration = time.perf_counter() - start
            self._record_failure(
                spec, str(e) or type(e).__name__, "transport", duration=duration
            )
            return

        if api_response.status != spec.expected_status:
            log.warning(
                "Unexpected status for %r: expected=%d actual=%d",
                spec.description,
                spec.expected_status,
                api_response.status,
            )
            session.record(
                spec.description,
                passed=False,
                error=api_response,
                error_kind="status",
                duration=duration,
            )
            return

        session.record(spec.description, passed=True, duration=duration)

    async def run_all(self, specs: Iterable[TestRequestSpec]) -> None:
        """Run each spec in order, waiting for one to finish before the next."""
        for spec in specs:
            await self.run(spec)

    def _record_failure(
        self,
        spec: TestRequestSpec,
        message: str,
        error_kind: ErrorKind,
        *,
        duration: float | None = None,
    ) -> None:
        log.warning("Test %r failed (%s): %s", spec.description, error_kind, message)
        self.session.record(
            spec.description,
            passed=False,
            error=message,
            error_kind=error_kind,
            duration=duration,
        )
