"""Helpers shared by wrappers on top of API entities (issue, repository ...).

Response payloads are plain JSON values. Wrappers narrow them explicitly
with the `expect_*` functions, which raise `PayloadTypeError` on mismatch.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from octoclient.errors import APIError, PayloadTypeError

if TYPE_CHECKING:
    from octoclient.connection import Connection

JSONValue = dict[str, Any] | list[Any] | str | int | float | bool | None

_REPO_RE = re.compile(r"^[^/]+/[^/]+$")


def _type_name(value: JSONValue) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, dict):
        return "object"
    if isinstance(value, list):
        return "array"
    if isinstance(value, str):
        return "string"
    return "number"


def _mismatch(expected: str, value: JSONValue, what: str) -> PayloadTypeError:
    msg = f"Expected {what} to be {expected}, got {_type_name(value)}"
    return PayloadTypeError(msg, details={"expected": expected, "actual": _type_name(value)})


def expect_object(value: JSONValue, what: str = "value") -> dict[str, Any]:
    """Narrow a JSON value to an object."""
    if not isinstance(value, dict):
        raise _mismatch("object", value, what)
    return value


def expect_array(value: JSONValue, what: str = "value") -> list[Any]:
    """Narrow a JSON value to an array."""
    if not isinstance(value, list):
        raise _mismatch("array", value, what)
    return value


def expect_str(value: JSONValue, what: str = "value") -> str:
    """Narrow a JSON value to a string."""
    if not isinstance(value, str):
        raise _mismatch("string", value, what)
    return value


def expect_int(value: JSONValue, what: str = "value") -> int:
    """Narrow a JSON value to an integer."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise _mismatch("integer", value, what)
    return value


def expect_bool(value: JSONValue, what: str = "value") -> bool:
    """Narrow a JSON value to a boolean."""
    if not isinstance(value, bool):
        raise _mismatch("bool", value, what)
    return value


def validate_repo_string(repo: str) -> None:
    """Ensure a repository string has owner/name format."""
    if not _REPO_RE.match(repo):
        msg = f"Malformed repository string: {repo!r}"
        raise APIError(msg, details={"repo": repo})


@dataclass(frozen=True)
class Entity:
    """Connection and JSON payload of one API entity.

    Wrapper types embed it instead of inheriting from it.
    """

    connection: Connection
    json: dict[str, Any]

    def field(self, key: str) -> JSONValue:
        """Return a field of the payload."""
        if key not in self.json:
            msg = f"Missing field '{key}' in payload"
            raise PayloadTypeError(msg, details={"field": key})
        return self.json[key]

    def str_field(self, key: str) -> str:
        """Return a string field of the payload."""
        return expect_str(self.field(key), f"field '{key}'")

    def int_field(self, key: str) -> int:
        """Return an integer field of the payload."""
        return expect_int(self.field(key), f"field '{key}'")
