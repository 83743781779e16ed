"""Remote kill switch read from a Firebase Realtime Database REST endpoint."""

import json
from urllib.parse import urlparse

import structlog

from ..errors import CheckpointUnavailableError
from .http import HttpTransportError, JsonHttpClient

logger = structlog.get_logger(__name__)


def is_absolute_url(value: object) -> bool:
    if not isinstance(value, str) or not value:
        return False
    parsed = urlparse(value)
    return bool(parsed.scheme and parsed.netloc)


class RealtimeDatabaseCheckpoint:
    """Passes when the node at ``path`` holds a non-empty, absolute URL string."""

    def __init__(self, database_url: str, path: str, client: JsonHttpClient):
        self.url = f"{database_url.rstrip('/')}/{path.strip('/')}.json"
        self.client = client

    async def check(self) -> bool:
        try:
            response = await self.client.get(self.url)
        except HttpTransportError as e:
            raise CheckpointUnavailableError(str(e), source=self.url) from e

        if not response.ok:
            raise CheckpointUnavailableError(
                f"Checkpoint read failed with HTTP {response.status}",
                source=self.url
            )

        try:
            value = response.json()
        except json.JSONDecodeError as e:
            raise CheckpointUnavailableError("Checkpoint value is not JSON", source=self.url) from e

        passed = is_absolute_url(value)
        logger.debug("Checkpoint read", source=self.url, passed=passed)
        return passed
