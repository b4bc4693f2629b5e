import threading
from typing import Type, Callable, List, Dict, Any
from mjo.domain.events import Event

class EventBus:
    """A simple synchronous event bus for decoupled communication.

    Callbacks run on the publishing thread, in subscription order. Subscribing
    to a base event class also delivers its subclasses.
    """

    def __init__(self):
        self._subscribers: Dict[Type[Event], List[Callable[[Any], None]]] = {}
        self._lock = threading.Lock()

    def subscribe(self, event_type: Type[Event], callback: Callable[[Any], None]):
        """Subscribes a callback to a specific event type."""
        with self._lock:
            self._subscribers.setdefault(event_type, []).append(callback)

    def unsubscribe(self, event_type: Type[Event], callback: Callable[[Any], None]) -> bool:
        with self._lock:
            callbacks = self._subscribers.get(event_type, [])
            if callback in callbacks:
                callbacks.remove(callback)
                return True
            return False

    def publish(self, event: Event):
        """Publishes an event to all interested subscribers."""
        with self._lock:
            callbacks = [
                callback
                for event_type in type(event).__mro__
                for callback in self._subscribers.get(event_type, ())
            ]
        for callback in callbacks:
            callback(event)
