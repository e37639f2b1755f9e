"""Media types used in the `Accept` header of API requests.

See https://developer.github.com/v3/media for the grammar. A media type is
either plain (`application/<format>`) or vendor specific
(`application/vnd.github[.<version>][.<param>][+<format>]`).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar

from octoclient.errors import MalformedMediaType

_PLAIN_RE = re.compile(r"^application/([^.+]+)$")
_VENDOR_RE = re.compile(r"^application/vnd\.github(\.([^+.]+))?(\.([^+]+))?(\+(.+))?$")


class MediaFormat(str, Enum):
    """Commonly used response formats."""

    JSON = "json"
    XML = "xml"


class ProtocolVersion(str, Enum):
    """Known API versions."""

    V3 = "v3"
    JEAN_GREY_PREVIEW = "jean-grey-preview"


@dataclass(frozen=True)
class MediaType:
    """Media type split into its components.

    `github_marker` selects the vendor grammar; when false only `format` is
    rendered. Empty components are left out of the rendered string together
    with their separator.
    """

    github_marker: bool = True
    version: str = ProtocolVersion.V3.value
    param: str = ""
    format: str = MediaFormat.JSON.value

    DEFAULT: ClassVar[MediaType]
    JEAN_GREY_PREVIEW: ClassVar[MediaType]

    def __post_init__(self) -> None:
        # Every constructed media type renders to a string `parse` accepts
        rendered = self.render()
        if not (_PLAIN_RE.match(rendered) or _VENDOR_RE.match(rendered)):
            raise MalformedMediaType(rendered)

    @classmethod
    def of(cls, format: str, param: str = "") -> MediaType:  # noqa: A002
        """Build a v3 vendor media type from format and custom param."""
        return cls(True, ProtocolVersion.V3.value, param, format)

    @classmethod
    def parse(cls, media_type: str) -> MediaType:
        """Parse an `Accept` header value."""
        match = _PLAIN_RE.match(media_type)
        if match:
            return cls(False, "", "", match.group(1))

        match = _VENDOR_RE.match(media_type)
        if not match:
            raise MalformedMediaType(media_type)
        return cls(
            True,
            match.group(2) or "",
            match.group(4) or "",
            match.group(6) or "",
        )

    @classmethod
    def coerce(cls, value: MediaType | str | None) -> MediaType:
        """Turn an optional string or media type into a media type."""
        if isinstance(value, MediaType):
            return value
        if not value:
            return cls.DEFAULT
        return cls.parse(value)

    @property
    def is_json(self) -> bool:
        """Whether responses for this media type are JSON documents."""
        return self.format == MediaFormat.JSON.value

    def render(self) -> str:
        """Render as a string usable for the `Accept` header."""
        if not self.github_marker:
            return f"application/{self.format}"

        rendered = "application/vnd.github"
        if self.version:
            rendered += f".{self.version}"
        if self.param:
            rendered += f".{self.param}"
        if self.format:
            rendered += f"+{self.format}"
        return rendered

    def __str__(self) -> str:
        return self.render()


MediaType.DEFAULT = MediaType()
# v3 with the v4 "node_id" attribute added
MediaType.JEAN_GREY_PREVIEW = MediaType(
    True, ProtocolVersion.JEAN_GREY_PREVIEW.value, "", MediaFormat.JSON.value
)
