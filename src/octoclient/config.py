"""Connection configuration and authentication mode."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any

import aiohttp
import yaml

from octoclient.errors import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.github.com"
BEARER_PREFIX = "bearer "
ENV_PREFIX = "OCTOCLIENT_"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Configuration:
    """Settings required to interact with the API server.

    Username/password take precedence over the token when both are set.
    """

    # Prepended to all request paths, scheme://host[:port] without trailing slash
    base_url: str = DEFAULT_BASE_URL
    username: str = ""
    password: str = ""
    token: str = ""
    # Synthesize empty responses instead of sending requests
    dry_run: bool = False
    max_redirects: int = 10
    max_pages: int = 1000


def resolve_auth_header(config: Configuration) -> tuple[str, str] | None:
    """Return the `Authorization` header for the configured credential mode."""
    if config.username:
        try:
            return "Authorization", aiohttp.encode_basic_auth(config.username, config.password)
        except ValueError as e:
            msg = f"Invalid username for basic auth: {e}"
            raise ConfigurationError(msg, details={"field": "username"}) from e

    if config.token:
        token = config.token
        if token.lower().startswith(BEARER_PREFIX):
            token = token[len(BEARER_PREFIX):]
        return "Authorization", BEARER_PREFIX + token

    return None


def _to_bool(name: str, value: Any) -> bool:  # noqa: ANN401
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    msg = f"Invalid boolean value for '{name}': {value!r}"
    raise ConfigurationError(msg, details={"field": name})


def _to_int(name: str, value: Any) -> int:  # noqa: ANN401
    if isinstance(value, bool):
        msg = f"Invalid integer value for '{name}': {value!r}"
        raise ConfigurationError(msg, details={"field": name})
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        msg = f"Invalid integer value for '{name}': {value!r}"
        raise ConfigurationError(msg, details={"field": name}) from e


def _convert(name: str, value: Any) -> Any:  # noqa: ANN401
    """Convert a raw setting to the type of the matching field."""
    if name == "dry_run":
        return _to_bool(name, value)
    if name in ("max_redirects", "max_pages"):
        return _to_int(name, value)
    if value is None:
        return ""
    return str(value)


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with path.open(encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        msg = f"Cannot read configuration file {path}: {e}"
        raise ConfigurationError(msg, details={"path": str(path)}) from e
    except yaml.YAMLError as e:
        msg = f"Invalid YAML in configuration file {path}"
        raise ConfigurationError(msg, details={"path": str(path)}) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        msg = f"Configuration file {path} must contain a mapping"
        raise ConfigurationError(msg, details={"path": str(path)})
    return data


def load_configuration(
    path: str | Path | None = None,
    environ: Mapping[str, str] | None = None,
) -> Configuration:
    """Load configuration from an optional YAML file and the environment.

    Environment variables (`OCTOCLIENT_BASE_URL`, `OCTOCLIENT_TOKEN`, ...)
    override values read from the file.
    """
    environ = os.environ if environ is None else environ
    known = {f.name for f in fields(Configuration)}
    values: dict[str, Any] = {}

    if path is not None:
        data = _read_yaml(Path(path))
        unknown = sorted(set(data) - known)
        if unknown:
            msg = f"Unknown configuration keys: {', '.join(unknown)}"
            raise ConfigurationError(msg, details={"keys": unknown})
        values.update(data)
        logger.debug("Loaded configuration file %s", path)

    for name in known:
        env_name = ENV_PREFIX + name.upper()
        if env_name in environ:
            values[name] = environ[env_name]

    return Configuration(**{name: _convert(name, value) for name, value in values.items()})
