"""Aggregation of multi-page GET responses.

Long lists are split by the server into pages. Each page but the last one
carries a `Link` header with a `rel="next"` relation pointing to the
following page.
"""

from __future__ import annotations

import logging
import re
from typing import Any
from urllib.parse import urljoin

from octoclient.errors import RequestFailed
from octoclient.executor import RequestExecutor
from octoclient.media import MediaType

logger = logging.getLogger(__name__)

_NEXT_LINK_RE = re.compile(r'<([^>]+)>;\s*rel="next"')


def parse_next_link(link_header: str | None) -> str | None:
    """Return the URL of the `rel="next"` relation of a `Link` header."""
    if not link_header:
        return None
    for link in link_header.split(","):
        match = _NEXT_LINK_RE.search(link)
        if match:
            return match.group(1)
    return None


class PageAggregator:
    """Follows redirects and next-page links for GET requests."""

    def __init__(self, executor: RequestExecutor, max_redirects: int, max_pages: int) -> None:
        """Initialize the aggregator."""
        self.executor = executor
        self.max_redirects = max_redirects
        self.max_pages = max_pages

    async def get(self, url: str, media_type: MediaType) -> Any:  # noqa: ANN401
        """Fetch `url` and every following page, concatenating array bodies."""
        result: list[Any] = []
        pages = 0
        redirects = 0

        while True:
            response = await self.executor.execute("GET", url, media_type)

            if response.is_redirect:
                redirects += 1
                if redirects > self.max_redirects:
                    msg = f"Exceeded maximum of {self.max_redirects} redirects"
                    raise RequestFailed(msg, status_code=response.status, response_data={"url": url})
                url = response.location
                continue
            redirects = 0

            if not media_type.is_json or not isinstance(response.body, list):
                return response.body

            pages += 1
            result.extend(response.body)

            next_url = parse_next_link(response.headers.get("Link"))
            if next_url is None:
                break
            if pages >= self.max_pages:
                msg = f"Exceeded maximum of {self.max_pages} pages"
                raise RequestFailed(msg, status_code=response.status, response_data={"url": next_url})

            # Relative links are resolved against the page that carried them
            url = urljoin(url, next_url)
            logger.debug("Fetching next page: %s", url)

        return result
