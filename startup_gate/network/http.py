"""Minimal JSON-over-HTTP helper built on urllib."""

import asyncio
import json
import socket
from dataclasses import dataclass
from typing import Any, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

import structlog

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class HttpResponse:
    """Status code and raw body of a completed request."""
    status: int
    body: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def json(self) -> Any:
        return json.loads(self.body)


class HttpTransportError(Exception):
    """The request never produced an HTTP response."""


class JsonHttpClient:
    """Blocking urllib calls, offloaded to a worker thread for asyncio callers."""

    def __init__(self, timeout_seconds: float = 30.0, user_agent: str = "startup-gate/0.1"):
        self.timeout_seconds = timeout_seconds
        self.user_agent = user_agent

    async def get(self, url: str) -> HttpResponse:
        return await asyncio.to_thread(self._send, url, "GET", None)

    async def post_json(self, url: str, payload: dict[str, Any]) -> HttpResponse:
        data = json.dumps(payload).encode('utf-8')
        return await asyncio.to_thread(self._send, url, "POST", data)

    def _send(self, url: str, method: str, data: Optional[bytes]) -> HttpResponse:
        headers = {
            'Accept': 'application/json',
            'User-Agent': self.user_agent
        }
        if data is not None:
            headers['Content-Type'] = 'application/json'
            headers['Content-Length'] = str(len(data))

        req = Request(url, data=data, headers=headers, method=method)

        try:
            with urlopen(req, timeout=self.timeout_seconds) as response:
                status = response.getcode()
                body = response.read().decode('utf-8')

        except HTTPError as e:
            body = e.read().decode('utf-8', errors='replace') if e.fp else ""
            logger.warning("HTTP error response", url=url, method=method, status=e.code)
            return HttpResponse(status=e.code, body=body)

        except (OSError, URLError, socket.timeout) as e:
            logger.warning("HTTP transport error", url=url, method=method, error=str(e))
            raise HttpTransportError(f"Network error: {e}") from e

        logger.debug("HTTP response", url=url, method=method, status=status)
        return HttpResponse(status=status, body=body)
