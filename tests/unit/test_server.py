"""Tests for the routing table and the ephemeral server."""

import pytest
from aiohttp import web

from api_test_harness.server import EphemeralServer, RouteTable


async def ok_handler(request: web.Request) -> web.Response:
    """Return 200."""
    return web.Response(text="ok")  # pragma: no cover


async def other_handler(request: web.Request) -> web.Response:
    """Return 201."""
    return web.Response(status=201)  # pragma: no cover


@pytest.fixture
def routes() -> RouteTable:
    """Create an empty routing table."""
    return RouteTable()


class TestRouteTable:
    """Tests for RouteTable."""

    def test_starts_empty(self, routes: RouteTable) -> None:
        """A new table has no routes and resolves nothing."""
        assert len(routes) == 0
        with pytest.raises(web.HTTPNotFound):
            routes.resolve("GET", "/")

    def test_exact_pattern_matches_only_that_path(self, routes: RouteTable) -> None:
        """Patterns without a trailing slash match exactly."""
        routes.add("/ping", ok_handler)

        assert routes.resolve("GET", "/ping") is ok_handler
        with pytest.raises(web.HTTPNotFound):
            routes.resolve("GET", "/ping/extra")

    def test_subtree_pattern_matches_descendants(self, routes: RouteTable) -> None:
        """Patterns ending with a slash match every path below them."""
        routes.add("/users/", ok_handler)

        assert routes.resolve("GET", "/users/") is ok_handler
        assert routes.resolve("GET", "/users/42") is ok_handler

    def test_longest_pattern_wins(self, routes: RouteTable) -> None:
        """The most specific pattern takes precedence."""
        routes.add("/", ok_handler)
        routes.add("/users/", other_handler)

        assert routes.resolve("GET", "/users/42") is other_handler
        assert routes.resolve("GET", "/health") is ok_handler

    def test_method_specific_route_takes_precedence(self, routes: RouteTable) -> None:
        """A route for the request method beats a route for any method."""
        routes.add("/items", ok_handler)
        routes.add("/items", other_handler, method="post")

        assert routes.resolve("POST", "/items") is other_handler
        assert routes.resolve("GET", "/items") is ok_handler

    def test_method_not_allowed(self, routes: RouteTable) -> None:
        """A matching path with no route for the method is rejected with 405."""
        routes.add("/items", ok_handler, method="GET")
        routes.add("/items", other_handler, method="POST")

        with pytest.raises(web.HTTPMethodNotAllowed) as exc_info:
            routes.resolve("DELETE", "/items")

        assert exc_info.value.allowed_methods == {"GET", "POST"}

    def test_rejects_duplicate_route(self, routes: RouteTable) -> None:
        """Registering the same method and pattern twice is an error."""
        routes.add("/ping", ok_handler, method="GET")

        with pytest.raises(ValueError, match="already registered"):
            routes.add("/ping", other_handler, method="get")

    def test_rejects_relative_pattern(self, routes: RouteTable) -> None:
        """Patterns must start with a slash."""
        with pytest.raises(ValueError, match="must start with"):
            routes.add("ping", ok_handler)

    def test_route_decorator_registers_handler(self, routes: RouteTable) -> None:
        """The decorator form registers and returns the handler."""

        @routes.route("/decorated", method="PUT")
        async def handler(request: web.Request) -> web.Response:
            return web.Response()  # pragma: no cover

        assert routes.resolve("PUT", "/decorated") is handler


class TestEphemeralServer:
    """Tests for EphemeralServer."""

    async def test_binds_to_free_port(self) -> None:
        """The server listens on an OS-assigned local port."""
        server = EphemeralServer()
        await server.start()
        try:
            assert server.port > 0
            assert server.base_url == f"http://127.0.0.1:{server.port}"
        finally:
            await server.close()

    async def test_close_is_idempotent(self) -> None:
        """Closing twice has no further effect."""
        server = EphemeralServer()
        await server.start()

        await server.close()
        await server.close()

        assert server.closed

    def test_port_unavailable_before_start(self) -> None:
        """Port is unknown until the server started."""
        server = EphemeralServer()

        with pytest.raises(RuntimeError, match="not started"):
            _ = server.port

    def test_uses_given_routing_table(self, routes: RouteTable) -> None:
        """A table passed in is the one the server dispatches through."""
        server = EphemeralServer(routes)

        assert server.routes is routes
