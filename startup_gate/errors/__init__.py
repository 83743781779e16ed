"""
Error classification for the startup gate.

Every failure the startup sequence can hit is represented here. The
orchestrator catches all of them and turns them into state machine
triggers; none reach the presentation layer.
"""

from .gating import (
    GateError,
    CheckpointError,
    CheckpointUnavailableError,
    ValidationDeniedError,
    PermissionRequestError,
)
from .network import (
    NetworkFacadeError,
    AttributionFetchError,
    DestinationResolutionError,
    MalformedResponseError,
)
from .system_failures import (
    SystemFailureError,
    PersistenceError,
    ConfigurationError,
)

__all__ = [
    # Gating
    "GateError",
    "CheckpointError",
    "CheckpointUnavailableError",
    "ValidationDeniedError",
    "PermissionRequestError",
    # Network
    "NetworkFacadeError",
    "AttributionFetchError",
    "DestinationResolutionError",
    "MalformedResponseError",
    # System failures
    "SystemFailureError",
    "PersistenceError",
    "ConfigurationError",
]
