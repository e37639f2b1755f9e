"""Single request execution and response status classification."""

from __future__ import annotations

import codecs
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urljoin, urlsplit

import aiohttp
from fastapi import status

from octoclient.config import Configuration, resolve_auth_header
from octoclient.errors import ConnectionFailed, RequestFailed, ResourceNotFound
from octoclient.media import MediaType

logger = logging.getLogger(__name__)

METHODS_WITH_BODY = ("POST", "PATCH")
DEFAULT_PORTS = {"http": 80, "https": 443}
DEFAULT_CHARSET = "utf-8"


def url_origin(url: str) -> tuple[str, str, int | None]:
    """Scheme, host and effective port of an absolute URL."""
    parts = urlsplit(url)
    scheme = parts.scheme.lower()
    try:
        port = parts.port
    except ValueError:
        # Out of range port, never equal to the configured origin
        port = -1
    return scheme, (parts.hostname or "").lower(), port or DEFAULT_PORTS.get(scheme)


@dataclass
class RawResponse:
    """Outcome of one HTTP exchange.

    `location` is set for redirects, in which case `body` is not read.
    """

    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: Any = None
    location: str | None = None

    @property
    def is_redirect(self) -> bool:
        """Whether the caller should re-issue the request at `location`."""
        return self.location is not None


class RequestExecutor:
    """Sends requests over a session and classifies the responses."""

    def __init__(self, session: aiohttp.ClientSession | None, config: Configuration) -> None:
        """Initialize the executor."""
        self.session = session
        self.config = config
        self.base_origin = url_origin(config.base_url)

    def prepare_headers(self, media_type: MediaType, url: str) -> dict[str, str]:
        """Build auth and `Accept` headers shared by all request kinds.

        Credentials are only sent to the configured API server, never to a
        host reached through a redirect or page link.
        """
        headers = {"Accept": media_type.render()}
        auth = resolve_auth_header(self.config)
        if auth is None:
            return headers
        if url_origin(url) != self.base_origin:
            logger.debug("Not sending credentials to foreign origin: %s", url)
            return headers
        name, value = auth
        headers[name] = value
        return headers

    async def execute(
        self,
        method: str,
        url: str,
        media_type: MediaType,
        body: Any = None,  # noqa: ANN401
    ) -> RawResponse:
        """Send one request and return the classified response."""
        logger.debug("Making %s request to: %s", method, url)

        if self.config.dry_run:
            return RawResponse(status.HTTP_200_OK, body={})

        kwargs: dict[str, Any] = {}
        if method in METHODS_WITH_BODY:
            kwargs["json"] = body

        try:
            async with self.session.request(
                method,
                url,
                headers=self.prepare_headers(media_type, url),
                allow_redirects=False,
                **kwargs,
            ) as response:
                location = await self._handle_response_status(response, url)
                if location is not None:
                    return RawResponse(response.status, response.headers, location=location)

                data = await response.read()
                return RawResponse(
                    response.status,
                    response.headers,
                    body=self._decode_body(response.status, data, _charset(response), media_type),
                )
        except aiohttp.ClientError as e:
            logger.exception("Network request failed")
            msg = f"{method} {url} failed: {e!s}"
            raise ConnectionFailed(msg, details={"url": url}) from e

    async def _handle_response_status(self, response: aiohttp.ClientResponse, url: str) -> str | None:
        """Ensure the response succeeded.

        Returns the absolute redirect URL for 302 responses, None otherwise.
        """
        if response.status == status.HTTP_404_NOT_FOUND:
            logger.debug("Resource not found: %s", url)
            raise ResourceNotFound(url)

        if response.status == status.HTTP_302_FOUND:
            location = response.headers.get("Location")
            if not location:
                msg = "Redirect response without Location header"
                raise RequestFailed(msg, status_code=response.status)
            logger.debug("Redirected from %s to %s", url, location)
            return urljoin(url, location)

        if not status.HTTP_200_OK <= response.status < status.HTTP_300_MULTIPLE_CHOICES:
            error_data = await self._parse_error_response(response)
            logger.error("API error: %s %s", response.status, error_data)
            msg = f"Expected status code 2xx, got {response.status}"
            raise RequestFailed(msg, status_code=response.status, response_data=error_data)

        return None

    async def _parse_error_response(self, response: aiohttp.ClientResponse) -> Any:  # noqa: ANN401
        """Parse error response, falling back to the raw text."""
        text = (await response.read()).decode(_charset(response), errors="replace")
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            return {"message": text or "Unknown error"}

    def _decode_body(self, status_code: int, data: bytes, charset: str, media_type: MediaType) -> Any:  # noqa: ANN401
        # Non-JSON media types (raw, sha, html ...) are opaque text, binary content included
        if not media_type.is_json:
            return data.decode(charset, errors="replace")
        try:
            text = data.decode(charset)
        except UnicodeDecodeError as e:
            msg = f"Response body is not valid {charset}"
            raise RequestFailed(msg, status_code=status_code, response_data=repr(data[:200])) from e
        if not text.strip():
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            msg = "Bad JSON in response"
            raise RequestFailed(msg, status_code=status_code, response_data=text) from e


def _charset(response: aiohttp.ClientResponse) -> str:
    """Declared response charset, UTF-8 when missing or unknown."""
    charset = response.charset or DEFAULT_CHARSET
    try:
        codecs.lookup(charset)
    except LookupError:
        return DEFAULT_CHARSET
    return charset
