"""OAuth authorization helpers."""

import logging

from octoclient.config import DEFAULT_BASE_URL, Configuration
from octoclient.connection import Connection
from octoclient.entity import Entity, expect_object

logger = logging.getLogger(__name__)


async def create_oauth_token(
    username: str,
    password: str,
    scopes: list[str],
    note: str,
    base_url: str = DEFAULT_BASE_URL,
) -> str:
    """Create an OAuth token with the given scopes and note.

    Authenticates with username and password and returns the token code.
    """
    config = Configuration(base_url=base_url, username=username, password=password)
    async with Connection(config) as connection:
        logger.info("Creating OAuth token for %s", username)
        response = await connection.post(
            "/authorizations",
            {"scopes": list(scopes), "note": note},
        )
        entity = Entity(connection, expect_object(response, "authorization"))
        return entity.str_field("token")
