"""
Event consolidation module.

Attribution SDK callbacks arrive on the AttributionChannel, the
EventConsolidator merges conversion and deeplink payloads, and results are
fanned out on the EventBus.
"""
from .bus import EventBus, Topic
from .channel import AttributionChannel
from .consolidator import EventConsolidator

__all__ = ["AttributionChannel", "EventBus", "EventConsolidator", "Topic"]
