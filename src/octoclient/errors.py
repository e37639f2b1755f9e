"""Error types raised by the API connection core."""

from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Machine readable error codes."""

    INVALID_BASE_URL = "invalid_base_url"
    UNSUPPORTED_PROTOCOL = "unsupported_protocol"
    CONNECTION_FAILED = "connection_failed"
    MALFORMED_MEDIA_TYPE = "malformed_media_type"
    RESOURCE_NOT_FOUND = "resource_not_found"
    REQUEST_FAILED = "request_failed"
    CONFIGURATION_ERROR = "configuration_error"
    PAYLOAD_TYPE_ERROR = "payload_type_error"
    API_ERROR = "api_error"


class OctoClientError(Exception):
    """Base exception for all client errors."""

    error_code = ErrorCode.REQUEST_FAILED

    def __init__(
        self,
        message: str,
        error_code: ErrorCode | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the error."""
        super().__init__(message)
        self.message = message
        if error_code is not None:
            self.error_code = error_code
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Serializable representation of the error."""
        return {
            "error_code": self.error_code.value,
            "message": self.message,
            "details": self.details,
        }


class InvalidBaseURL(OctoClientError):
    """Configured base URL is not of the form scheme://host[:port]."""

    error_code = ErrorCode.INVALID_BASE_URL

    def __init__(self, base_url: str) -> None:
        """Initialize the error."""
        super().__init__(
            f"Malformed API base URL in configuration: {base_url}",
            details={"base_url": base_url},
        )


class UnsupportedProtocol(OctoClientError):
    """Base URL scheme is neither http nor https."""

    error_code = ErrorCode.UNSUPPORTED_PROTOCOL

    def __init__(self, scheme: str) -> None:
        """Initialize the error."""
        super().__init__(f"Protocol not supported: {scheme}", details={"scheme": scheme})
        self.scheme = scheme


class ConnectionFailed(OctoClientError):
    """Transport could not be established or a request could not be sent."""

    error_code = ErrorCode.CONNECTION_FAILED


class MalformedMediaType(OctoClientError, ValueError):
    """Media type string matches neither the plain nor the vendor grammar."""

    error_code = ErrorCode.MALFORMED_MEDIA_TYPE

    def __init__(self, media_type: str) -> None:
        """Initialize the error."""
        super().__init__(f"Malformed media type: {media_type!r}", details={"media_type": media_type})
        self.media_type = media_type


class ResourceNotFound(OctoClientError):
    """Server answered 404 Not Found."""

    error_code = ErrorCode.RESOURCE_NOT_FOUND

    def __init__(self, url: str) -> None:
        """Initialize the error."""
        super().__init__(f"Requested non-existent API URL: {url}", details={"url": url})
        self.url = url


class RequestFailed(OctoClientError):
    """Server answered with an unexpected status code."""

    error_code = ErrorCode.REQUEST_FAILED

    def __init__(self, message: str, status_code: int, response_data: Any = None) -> None:  # noqa: ANN401
        """Initialize the error."""
        super().__init__(
            message,
            details={"status_code": status_code, "response_data": response_data},
        )
        self.status_code = status_code
        self.response_data = response_data


class ConfigurationError(OctoClientError):
    """Configuration source could not be loaded."""

    error_code = ErrorCode.CONFIGURATION_ERROR


class PayloadTypeError(OctoClientError, TypeError):
    """JSON value does not have the expected type."""

    error_code = ErrorCode.PAYLOAD_TYPE_ERROR


class APIError(OctoClientError):
    """Higher level API misuse, for example malformed arguments."""

    error_code = ErrorCode.API_ERROR


class EntityNotFound(APIError):
    """Requested API entity (issue, repository, ...) does not exist."""


class NotConnectedError(RuntimeError):
    """Connection used before `connect` succeeded or after `close`."""
