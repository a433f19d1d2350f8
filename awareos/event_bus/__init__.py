"""EventBus module."""

from .event_bus import EventBus, Handler, IEventBus, Unsubscribe

__all__ = ["EventBus", "Handler", "IEventBus", "Unsubscribe"]
