"""Attribution lookup and destination resolution over HTTP."""

import json
from typing import Any, Callable, Optional
from urllib.parse import urlencode

import structlog

from ..config.defaults import EndpointParams, PlatformParams
from ..contracts import AttributionRecord
from ..errors import AttributionFetchError, DestinationResolutionError, MalformedResponseError
from .http import HttpTransportError, JsonHttpClient

logger = structlog.get_logger(__name__)


class RemoteNetworkFacade:
    """Talks to the attribution service and the destination resolver."""

    def __init__(
        self,
        endpoints: EndpointParams,
        platform: PlatformParams,
        client: JsonHttpClient,
        device_id_provider: Callable[[], str],
        push_token_provider: Optional[Callable[[], Optional[str]]] = None
    ):
        self.logger = logger
        self.endpoints = endpoints
        self.platform = platform
        self.client = client
        self.device_id_provider = device_id_provider
        self.push_token_provider = push_token_provider

    def build_attribution_url(self, device_id: str) -> str:
        base = self.endpoints.attribution_base_url
        if not base.endswith("/"):
            base += "/"
        query = urlencode({"devkey": self.platform.dev_key, "device_id": device_id})
        return f"{base}{self.platform.store_id}?{query}"

    def build_payload(self, attribution: AttributionRecord) -> dict[str, Any]:
        """Attribution plus platform metadata for the resolver."""
        payload = dict(attribution)
        payload["os"] = self.platform.os_name
        payload["af_id"] = self.device_id_provider()
        payload["bundle_id"] = self.platform.bundle_id
        payload["firebase_project_id"] = self.platform.firebase_project_id or None
        payload["store_id"] = self.platform.store_id
        payload["push_token"] = self.push_token_provider() if self.push_token_provider else None
        payload["locale"] = self.platform.locale
        return payload

    async def fetch_attribution(self, device_id: str) -> AttributionRecord:
        """
        Look up install attribution for a device.

        Raises:
            AttributionFetchError: Transport failure, non-2xx status or a
                body that is not a JSON object
        """
        url = self.build_attribution_url(device_id)

        try:
            response = await self.client.get(url)
        except HttpTransportError as e:
            raise AttributionFetchError(str(e), url=url) from e

        if not response.ok:
            raise AttributionFetchError(
                f"Attribution lookup failed with HTTP {response.status}",
                url=url,
                status_code=response.status
            )

        try:
            data = response.json()
        except json.JSONDecodeError as e:
            raise AttributionFetchError("Attribution response is not JSON", url=url) from e

        if not isinstance(data, dict):
            raise AttributionFetchError("Attribution response is not an object", url=url)

        self.logger.info("Attribution fetched", device_id=device_id, keys=sorted(data))
        return data

    async def resolve_destination(self, attribution: AttributionRecord) -> str:
        """
        Ask the resolver for the destination matching this attribution.

        Raises:
            DestinationResolutionError: Transport failure
            MalformedResponseError: Missing ``ok``/``url`` or ``ok`` false
        """
        url = self.endpoints.resolver_url
        payload = self.build_payload(attribution)

        try:
            response = await self.client.post_json(url, payload)
        except HttpTransportError as e:
            raise DestinationResolutionError(str(e), url=url) from e

        try:
            data = response.json()
        except json.JSONDecodeError as e:
            raise MalformedResponseError(
                "Resolver response is not JSON",
                url=url,
                status_code=response.status,
                raw_data=response.body[:200]
            ) from e

        if not isinstance(data, dict) or data.get("ok") is not True:
            raise MalformedResponseError(
                "Resolver did not report success",
                url=url,
                status_code=response.status,
                raw_data=response.body[:200]
            )

        destination = data.get("url")
        if not isinstance(destination, str) or not destination:
            raise MalformedResponseError(
                "Resolver response has no destination",
                url=url,
                status_code=response.status,
                raw_data=response.body[:200]
            )

        self.logger.info("Destination resolved", destination=destination)
        return destination
