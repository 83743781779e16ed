"""
Remote collaborators: attribution lookup, destination resolution and the
kill-switch checkpoint.
"""
from .checkpoint import RealtimeDatabaseCheckpoint
from .remote import RemoteNetworkFacade

__all__ = ["RealtimeDatabaseCheckpoint", "RemoteNetworkFacade"]
