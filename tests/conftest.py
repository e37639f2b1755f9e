"""Shared fixtures: an in-process API server recording every request."""

from collections.abc import AsyncGenerator, Awaitable, Callable
from dataclasses import dataclass, field

import pytest
from aiohttp import web

from octoclient.config import Configuration
from octoclient.connection import Connection

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


@dataclass
class RecordedRequest:
    """Request as seen by the fake API server."""

    method: str
    path_qs: str
    headers: dict[str, str]
    body: str


@dataclass
class FakeAPI:
    """Running fake API server."""

    base_url: str = ""
    requests: list[RecordedRequest] = field(default_factory=list)

    @web.middleware
    async def record(self, request: web.Request, handler: Handler) -> web.StreamResponse:
        """Record the request before dispatching it."""
        self.requests.append(
            RecordedRequest(request.method, request.path_qs, dict(request.headers), await request.text())
        )
        return await handler(request)


@pytest.fixture
def start_api(aiohttp_server) -> Callable[[dict[tuple[str, str], Handler]], Awaitable[FakeAPI]]:  # noqa: ANN001
    """Start a fake API server with the given (method, path) routes."""

    async def start(routes: dict[tuple[str, str], Handler]) -> FakeAPI:
        api = FakeAPI()
        app = web.Application(middlewares=[api.record])
        for (method, path), handler in routes.items():
            app.router.add_route(method, path, handler)
        server = await aiohttp_server(app)
        api.base_url = f"http://{server.host}:{server.port}"
        return api

    return start


@pytest.fixture
async def connect() -> AsyncGenerator[Callable[[Configuration], Awaitable[Connection]], None]:
    """Open connections that are closed after the test."""
    connections: list[Connection] = []

    async def _connect(config: Configuration) -> Connection:
        connection = await Connection.connect(config)
        connections.append(connection)
        return connection

    yield _connect

    for connection in connections:
        await connection.close()
