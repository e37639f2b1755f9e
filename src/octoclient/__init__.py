"""Connection core for the GitHub v3 style REST API."""

from octoclient.config import Configuration, load_configuration, resolve_auth_header
from octoclient.connection import Connection
from octoclient.errors import (
    APIError,
    ConfigurationError,
    ConnectionFailed,
    EntityNotFound,
    ErrorCode,
    InvalidBaseURL,
    MalformedMediaType,
    NotConnectedError,
    OctoClientError,
    PayloadTypeError,
    RequestFailed,
    ResourceNotFound,
    UnsupportedProtocol,
)
from octoclient.media import MediaFormat, MediaType, ProtocolVersion

__all__ = [
    "APIError",
    "ConfigurationError",
    "Configuration",
    "Connection",
    "ConnectionFailed",
    "EntityNotFound",
    "ErrorCode",
    "InvalidBaseURL",
    "MalformedMediaType",
    "MediaFormat",
    "MediaType",
    "NotConnectedError",
    "OctoClientError",
    "PayloadTypeError",
    "ProtocolVersion",
    "RequestFailed",
    "ResourceNotFound",
    "UnsupportedProtocol",
    "load_configuration",
    "resolve_auth_header",
]
