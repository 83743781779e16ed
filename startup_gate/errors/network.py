"""
Network error classifications for attribution and destination calls.
"""

from typing import Optional

from .gating import GateError


class NetworkFacadeError(GateError):
    """Base class for remote attribution/destination failures."""

    def __init__(self, message: str, url: Optional[str] = None,
                 status_code: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.url = url
        self.status_code = status_code


class AttributionFetchError(NetworkFacadeError):
    """Attribution lookup by device identifier failed."""


class DestinationResolutionError(NetworkFacadeError):
    """The destination resolver could not be reached or returned an error."""


class MalformedResponseError(DestinationResolutionError):
    """A response arrived but lacked the expected fields."""

    def __init__(self, message: str, raw_data: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.raw_data = raw_data
