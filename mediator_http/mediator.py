"""Publish/subscribe mediator that carries request lifecycle events."""

from collections import defaultdict
from collections.abc import Callable
from typing import Any, Protocol

Handler = Callable[[Any], None]


class Publisher(Protocol):
    """Anything HttpHelper can publish lifecycle events to."""

    def publish(self, topic: str, payload: Any) -> None: ...


class Mediator:
    """Small in-process event bus keyed by topic name.

    Handlers run synchronously, in subscription order, on the publishing
    thread. Subscribe before issuing a request or early events are missed.
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, list[Handler]] = defaultdict(list)

    def subscribe(self, topic: str, handler: Handler) -> None:
        self._subscribers[topic].append(handler)

    def unsubscribe(self, topic: str, handler: Handler) -> bool:
        """Remove a handler from a topic.

        Returns:
            True if the handler was subscribed, False otherwise.
        """
        handlers = self._subscribers.get(topic)
        if not handlers or handler not in handlers:
            return False
        handlers.remove(handler)
        if not handlers:
            del self._subscribers[topic]
        return True

    def publish(self, topic: str, payload: Any = None) -> None:
        for handler in list(self._subscribers.get(topic, [])):
            handler(payload)
