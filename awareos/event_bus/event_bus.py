"""EventBus implementation for pub/sub messaging."""

from typing import Any, Callable, Protocol

from ..logging_config import get_logger
from ..models import WILDCARD

logger = get_logger(__name__)


# Topic handlers receive (payload); wildcard handlers receive (topic, payload)
Handler = Callable[..., Any]
Unsubscribe = Callable[[], None]


class _Subscription:
    """One registration of a handler; compared by identity."""

    __slots__ = ("handler",)

    def __init__(self, handler: Handler):
        self.handler = handler


class IEventBus(Protocol):
    """In-process synchronous pub/sub between app modules and the orchestrator."""

    def on(self, topic: str, handler: Handler) -> Unsubscribe:
        """Subscribe a handler to a topic ("*" for all topics)."""
        ...

    def once(self, topic: str, handler: Handler) -> Unsubscribe:
        """Subscribe a handler that is removed after its first call."""
        ...

    def emit(self, topic: str, payload: dict | None = None) -> None:
        """Deliver payload to topic handlers, then to wildcard handlers."""
        ...


class EventBus:
    """Synchronous in-memory pub/sub event bus.

    Delivery happens inside the emit() call, in registration order. A handler
    that raises is logged and skipped; the remaining handlers still run and
    nothing propagates to the emitter.
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, list[_Subscription]] = {}

    def on(self, topic: str, handler: Handler) -> Unsubscribe:
        """Subscribe a handler to a topic. Returns an unsubscribe callable."""
        subscription = _Subscription(handler)
        self._subscribers.setdefault(topic, []).append(subscription)

        def unsubscribe() -> None:
            subscriptions = self._subscribers.get(topic)
            if subscriptions and subscription in subscriptions:
                subscriptions.remove(subscription)

        return unsubscribe

    def once(self, topic: str, handler: Handler) -> Unsubscribe:
        """Subscribe a handler that unsubscribes itself after the first call."""

        def wrapper(*args: Any) -> Any:
            unsubscribe()
            return handler(*args)

        unsubscribe = self.on(topic, wrapper)
        return unsubscribe

    def emit(self, topic: str, payload: dict | None = None) -> None:
        """Publish an event to topic subscribers, then wildcard subscribers."""
        logger.debug("Event emitted: %s", topic, extra={"topic": topic})

        # Snapshot so (un)subscribing during delivery affects only later emits
        handlers = list(self._subscribers.get(topic, [])) if topic != WILDCARD else []
        wildcard = list(self._subscribers.get(WILDCARD, []))

        for subscription in handlers:
            self._invoke(topic, subscription.handler, payload)

        for subscription in wildcard:
            self._invoke(topic, subscription.handler, topic, payload)

    def listener_count(self, topic: str | None = None) -> int:
        """Number of handlers for a topic, or across all topics."""
        if topic is not None:
            return len(self._subscribers.get(topic, []))
        return sum(len(handlers) for handlers in self._subscribers.values())

    def _invoke(self, topic: str, handler: Handler, *args: Any) -> None:
        try:
            handler(*args)
        except Exception:
            logger.exception(
                "Error in handler %r for topic %s",
                handler,
                topic,
                extra={"topic": topic},
            )
