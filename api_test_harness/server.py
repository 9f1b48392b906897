"""In-process HTTP server with a mutable routing table."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeAlias

from aiohttp import web
from aiohttp.test_utils import TestServer
from yarl import URL

log = logging.getLogger(__name__)

Handler: TypeAlias = Callable[[web.Request], Awaitable[web.StreamResponse]]


@dataclass(frozen=True, kw_only=True)
class Route:
    """A registered handler and the requests it accepts."""

    pattern: str
    handler: Handler
    method: str | None = None

    def matches_path(self, path: str) -> bool:
        """Check if the path is served by this route."""
        if self.pattern.endswith("/"):
            return path.startswith(self.pattern)
        return path == self.pattern


class RouteTable:
    """Mutable table of URL patterns and their handlers.

    Patterns ending with ``/`` match every path below them, other patterns
    match the path exactly. When several patterns match, the longest one
    wins. A route without a method accepts any method not claimed by a
    method-specific route on the same pattern.

    The table can be changed at any time, including while the server runs.
    """

    def __init__(self) -> None:
        self._routes: dict[tuple[str | None, str], Route] = {}

    def __len__(self) -> int:
        return len(self._routes)

    def add(self, pattern: str, handler: Handler, *, method: str | None = None) -> None:
        """Register a handler for a pattern.

        Raises:
            ValueError: If the pattern is not absolute or is already registered
                for the same method

        """
        if not pattern.startswith("/"):
            raise ValueError(f"Route pattern must start with '/': {pattern!r}")

        route_method = method.upper() if method else None
        key = (route_method, pattern)
        if key in self._routes:
            raise ValueError(
                f"Route already registered: {route_method or '*'} {pattern}"
            )

        self._routes[key] = Route(pattern=pattern, handler=handler, method=route_method)
        log.debug("Registered route %s %s", route_method or "*", pattern)

    def route(
        self, pattern: str, *, method: str | None = None
    ) -> Callable[[Handler], Handler]:
        """Register the decorated handler for a pattern."""

        def decorator(handler: Handler) -> Handler:
            self.add(pattern, handler, method=method)
            return handler

        return decorator

    def resolve(self, method: str, path: str) -> Handler:
        """Find the handler serving a request.

        Raises:
            web.HTTPNotFound: If no pattern matches the path
            web.HTTPMethodNotAllowed: If the path matches but not the method

        """
        candidates = [r for r in self._routes.values() if r.matches_path(path)]
        if not candidates:
            raise web.HTTPNotFound()

        longest = max(len(r.pattern) for r in candidates)
        best = [r for r in candidates if len(r.pattern) == longest]
        method = method.upper()

        for route in best:
            if route.method == method:
                return route.handler
        for route in best:
            if route.method is None:
                return route.handler

        allowed = sorted(r.method for r in best if r.method is not None)
        raise web.HTTPMethodNotAllowed(method, allowed)


class EphemeralServer:
    """aiohttp server bound to a free local port.

    Every request goes through a single catch-all route that looks the
    handler up in the routing table, so routes may be added after start.
    """

    def __init__(
        self, routes: RouteTable | None = None, *, host: str = "127.0.0.1"
    ) -> None:
        self.routes = routes if routes is not None else RouteTable()
        app = web.Application()
        app.router.add_route("*", "/{tail:.*}", self._dispatch)
        self._server = TestServer(app, host=host)
        self._closed = False

    async def _dispatch(self, request: web.Request) -> web.StreamResponse:
        log.debug("Test server received %s %s", request.method, request.path)
        handler = self.routes.resolve(request.method, request.path)
        return await handler(request)

    @property
    def port(self) -> int:
        """Port the server listens on."""
        if self._server.port is None:
            raise RuntimeError("Test server is not started")
        return self._server.port

    @property
    def base_url(self) -> str:
        """Root URL of the server, without a trailing slash."""
        port = self.port
        return str(
            URL.build(scheme=self._server.scheme, host=self._server.host, port=port)
        )

    @property
    def closed(self) -> bool:
        """Whether the server was shut down."""
        return self._closed

    async def start(self) -> None:
        """Bind to a free port and start serving.

        Raises:
            OSError: If no local port can be bound

        """
        await self._server.start_server()
        log.info("Test server listening on %s", self.base_url)

    async def close(self) -> None:
        """Shut the server down. Calling it again has no effect."""
        if self._closed:
            log.debug("Test server already closed")
            return
        self._closed = True
        await self._server.close()
        log.info("Test server stopped")
