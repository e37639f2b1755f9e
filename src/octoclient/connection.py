"""Persistent HTTP connection to the API server.

Provides `get`/`post`/`patch` taking care of API details internally: auth,
media types, redirects and multi-page responses. Higher level API wrappers
are built on top of it and never talk to the transport directly.
"""

from __future__ import annotations

import asyncio
import logging
import re
from types import TracebackType
from typing import Any

import aiohttp

from octoclient.config import Configuration
from octoclient.errors import (
    ConnectionFailed,
    InvalidBaseURL,
    NotConnectedError,
    RequestFailed,
    UnsupportedProtocol,
)
from octoclient.executor import RequestExecutor
from octoclient.media import MediaType
from octoclient.pagination import PageAggregator

logger = logging.getLogger(__name__)

_BASE_URL_RE = re.compile(r"^(\w*)://([^/]+)$")

DEFAULT_PORTS = {
    "http": (80, False),
    "https": (443, True),
}

# POST and PATCH follow a redirect once, a second one is an error
MAX_BODY_REDIRECTS = 1


def resolve_base_url(base_url: str) -> tuple[str, int, bool]:
    """Split a base URL into host, port and TLS flag."""
    match = _BASE_URL_RE.match(base_url)
    if not match:
        raise InvalidBaseURL(base_url)

    scheme, address = match.groups()
    if scheme not in DEFAULT_PORTS:
        raise UnsupportedProtocol(scheme)
    port, tls = DEFAULT_PORTS[scheme]

    host, sep, explicit_port = address.rpartition(":")
    if sep and explicit_port.isdigit() and (not host.startswith("[") or host.endswith("]")):
        return host, int(explicit_port), tls
    return address, port, tls


class Connection:
    """Connection to the API server.

    Must be connected (see `connect`) before requests can be sent. A single
    connection handles one request at a time; use separate connections for
    parallel requests.
    """

    def __init__(self, config: Configuration) -> None:
        """Initialize the connection without opening it."""
        self.config = config
        self.host, self.port, self.tls = resolve_base_url(config.base_url)

        self._session: aiohttp.ClientSession | None = None
        self._executor: RequestExecutor | None = None
        self._aggregator: PageAggregator | None = None
        self._lock = asyncio.Lock()

    @classmethod
    async def connect(cls, config: Configuration) -> Connection:
        """Create a connection and open it."""
        connection = cls(config)
        await connection.open()
        return connection

    @property
    def connected(self) -> bool:
        """Whether the transport is open."""
        return self._session is not None and not self._session.closed

    async def open(self) -> None:
        """Open the persistent transport to the configured server."""
        if self.connected:
            return

        logger.debug("Connecting to API server %s:%d (tls=%s)", self.host, self.port, self.tls)
        try:
            # One pooled connection keeps it persistent and serializes requests
            connector = aiohttp.TCPConnector(limit=1)
            self._session = aiohttp.ClientSession(connector=connector)
        except (aiohttp.ClientError, OSError) as e:
            msg = f"Failed to connect to {self.host}:{self.port}"
            raise ConnectionFailed(msg, details={"host": self.host, "port": self.port}) from e

        self._executor = RequestExecutor(self._session, self.config)
        self._aggregator = PageAggregator(
            self._executor,
            max_redirects=self.config.max_redirects,
            max_pages=self.config.max_pages,
        )
        logger.debug("Connected.")

    async def close(self) -> None:
        """Close the transport."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None
        self._executor = None
        self._aggregator = None

    async def __aenter__(self) -> Connection:
        """Open the connection when entering the context."""
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Close the connection when leaving the context."""
        await self.close()

    def url(self, path: str) -> str:
        """Absolute URL for a path relative to the base URL."""
        return self.config.base_url + path

    def _require_connected(self) -> None:
        if not self.connected or self._executor is None:
            msg = "Connection is not open, call connect() first"
            raise NotConnectedError(msg)

    async def get(self, path: str, media_type: MediaType | str | None = None) -> Any:  # noqa: ANN401
        """Send GET request to the API server.

        If the response spans several pages, all of them are fetched and their
        elements concatenated into one list.
        """
        self._require_connected()
        media_type = MediaType.coerce(media_type)
        logger.debug("GET %s", path)

        async with self._lock:
            return await self._aggregator.get(self.url(path), media_type)

    async def post(self, path: str, body: Any, media_type: MediaType | str | None = None) -> Any:  # noqa: ANN401
        """Send POST request to the API server."""
        return await self._send_with_body("POST", path, body, media_type)

    async def patch(self, path: str, body: Any, media_type: MediaType | str | None = None) -> Any:  # noqa: ANN401
        """Send PATCH request to the API server."""
        return await self._send_with_body("PATCH", path, body, media_type)

    async def _send_with_body(
        self,
        method: str,
        path: str,
        body: Any,  # noqa: ANN401
        media_type: MediaType | str | None,
    ) -> Any:  # noqa: ANN401
        self._require_connected()
        media_type = MediaType.coerce(media_type)
        logger.debug("%s %s", method, path)

        url = self.url(path)
        redirects = 0
        async with self._lock:
            while True:
                response = await self._executor.execute(method, url, media_type, body)
                if not response.is_redirect:
                    return response.body

                redirects += 1
                if redirects > MAX_BODY_REDIRECTS:
                    msg = f"Too many redirects for {method} {path}"
                    raise RequestFailed(msg, status_code=response.status, response_data={"url": url})
                url = response.location
