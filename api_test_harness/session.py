"""State of a single API test run."""

import logging
from collections.abc import AsyncGenerator, Mapping
from contextlib import asynccontextmanager
from types import MappingProxyType

import aiohttp

from api_test_harness.config import HarnessConfig
from api_test_harness.models.result import ApiResponse, ErrorKind, TestResult
from api_test_harness.server import EphemeralServer, RouteTable

log = logging.getLogger(__name__)


class ApiTestSession:
    """Counters, ordered results, and the resources of one test run.

    A session owns an ephemeral test server and the client transport used to
    reach it. Results are append-only and numbered from 1 in the order they
    were recorded.
    """

    def __init__(
        self,
        *,
        server: EphemeralServer,
        client: aiohttp.ClientSession,
        config: HarnessConfig,
    ) -> None:
        self.server = server
        self.client = client
        self.config = config
        self._passed = 0
        self._failed = 0
        self._results: dict[int, TestResult] = {}
        self._closed = False

    @classmethod
    async def create(cls, config: HarnessConfig | None = None) -> "ApiTestSession":
        """Start a test server on a free local port and open a session on it.

        Raises:
            OSError: If the server cannot bind to a local port

        """
        config = config or HarnessConfig()
        server = EphemeralServer(host=config.host)
        await server.start()

        client = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=config.request_timeout)
        )
        log.info("Opened test session on %s", server.base_url)
        return cls(server=server, client=client, config=config)

    @classmethod
    @asynccontextmanager
    async def open(
        cls, config: HarnessConfig | None = None
    ) -> AsyncGenerator["ApiTestSession", None]:
        """Create a session that is closed when the context exits."""
        session = await cls.create(config)
        try:
            yield session
        finally:
            await session.close()

    @property
    def routes(self) -> RouteTable:
        """Routing table of the test server."""
        return self.server.routes

    @property
    def base_url(self) -> str:
        """Root URL of the test server."""
        return self.server.base_url

    @property
    def total(self) -> int:
        return self._passed + self._failed

    @property
    def passed(self) -> int:
        return self._passed

    @property
    def failed(self) -> int:
        return self._failed

    @property
    def results(self) -> Mapping[int, TestResult]:
        """Read-only view of the results keyed by sequence number."""
        return MappingProxyType(self._results)

    @property
    def closed(self) -> bool:
        return self._closed

    def record(
        self,
        description: str,
        *,
        passed: bool,
        error: str | ApiResponse | None = None,
        error_kind: ErrorKind | None = None,
        duration: float | None = None,
    ) -> TestResult:
        """Append a result under the next sequence number and update counters."""
        if passed:
            self._passed += 1
        else:
            self._failed += 1

        result = TestResult(
            sequence=self.total,
            passed=passed,
            description=description,
            error=error,
            error_kind=error_kind,
            duration=duration,
        )
        self._results[result.sequence] = result
        return result

    async def close(self) -> None:
        """Release the client transport and the test server.

        Only the first call has an effect.
        """
        if self._closed:
            log.debug("Test session already closed")
            return
        self._closed = True

        try:
            await self.client.close()
        finally:
            await self.server.close()
        log.info(
            "Closed test session: %d passed, %d failed", self._passed, self._failed
        )
