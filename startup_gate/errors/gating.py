"""
Gating error classifications.

These cover the remote kill-switch check and the notification permission
prompt. All of them degrade to a modeled outcome (check failed, permission
denied) rather than stopping the app.
"""

from typing import Optional, Dict, Any


class GateError(Exception):
    """Base class for startup gate failures that are handled gracefully."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = True


class CheckpointError(GateError):
    """The remote kill-switch check did not produce a usable answer."""


class CheckpointUnavailableError(CheckpointError):
    """The kill-switch source could not be reached or read."""

    def __init__(self, message: str, source: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.source = source


class ValidationDeniedError(CheckpointError):
    """The kill-switch check answered and the answer was "disabled"."""


class PermissionRequestError(GateError):
    """The platform failed to answer a notification permission request."""
