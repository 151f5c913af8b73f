"""Event system for formstate.

A form publishes every change to its status, and every registry and
submission milestone, as a FormEvent on its EventEmitter. This is the
subscription interface UI layers use to re-render: there is no global store.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional
import json
import logging

from formstate.types import FieldName, FormEventType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FormEvent:
    """A single change notification.

    Attributes:
        type: Event type from FormEventType
        ts: UTC timestamp when the event occurred
        key: For ``state.changed``, the FormStatus attribute that changed
        field_name: Field the event relates to, if any
        value: New value (status attribute value, field value, errors...)
        previous: Previous value, for ``state.changed``

    Examples:
        >>> from datetime import datetime, timezone
        >>> event = FormEvent(
        ...     type=FormEventType.STATE_CHANGED,
        ...     ts=datetime.now(timezone.utc),
        ...     key="is_dirty",
        ...     value=True,
        ...     previous=False,
        ... )
        >>> event.key
        'is_dirty'
    """
    type: FormEventType
    ts: datetime
    key: Optional[str] = None
    field_name: Optional[FieldName] = None
    value: Any = None
    previous: Any = None

    def __post_init__(self):
        if isinstance(self.type, str) and not isinstance(self.type, FormEventType):
            object.__setattr__(self, "type", FormEventType(self.type))

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization.

        Values that are not JSON-friendly are rendered with ``repr``.
        """
        result: Dict[str, Any] = {
            "type": self.type.value,
            "ts": self.ts.isoformat(),
        }
        if self.key is not None:
            result["key"] = self.key
        if self.field_name is not None:
            result["field"] = str(self.field_name)
        if self.value is not None:
            result["value"] = _plain(self.value)
        if self.previous is not None:
            result["previous"] = _plain(self.previous)
        return result

    def to_jsonl(self) -> str:
        """Convert event to a single-line JSON string."""
        return json.dumps(self.to_dict(), separators=(',', ':'), default=repr)


def _plain(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        return sorted(str(v) for v in value)
    if isinstance(value, dict):
        return {str(k): _plain(v) for k, v in value.items()}
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return value


EventListener = Callable[[FormEvent], None]
"""Listeners are called synchronously, in subscription order."""

Unsubscribe = Callable[[], None]


class EventEmitter:
    """Observer registry dispatching FormEvents.

    Listeners subscribe to one event type, or to every type with
    ``on_any``. Both return a callable that removes the subscription;
    calling it twice is harmless. A listener that raises is logged and
    the remaining listeners still run.

    Examples:
        >>> emitter = EventEmitter()
        >>> seen = []
        >>> unsubscribe = emitter.on(FormEventType.FIELD_REGISTERED, seen.append)
        >>> unsubscribe()
    """

    def __init__(self):
        # None holds the wildcard listeners
        self._listeners: Dict[Optional[FormEventType], List[EventListener]] = {}

    def on(self, event_type: FormEventType, listener: EventListener) -> Unsubscribe:
        """Subscribe to a specific event type."""
        return self._add(FormEventType(event_type), listener)

    def on_any(self, listener: EventListener) -> Unsubscribe:
        """Subscribe to all event types."""
        return self._add(None, listener)

    def emit(self, event: FormEvent) -> None:
        """Dispatch an event: type-specific listeners first, then wildcard ones."""
        listeners = self._listeners.get(event.type, []) + self._listeners.get(None, [])
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception("Listener %r failed on %s", listener, event.type.value)

    def _add(self, key: Optional[FormEventType], listener: EventListener) -> Unsubscribe:
        bucket = self._listeners.setdefault(key, [])
        bucket.append(listener)

        subscribed = True

        def unsubscribe() -> None:
            nonlocal subscribed
            if subscribed:
                bucket.remove(listener)
                subscribed = False

        return unsubscribe


__all__ = [
    "FormEvent",
    "EventListener",
    "EventEmitter",
    "Unsubscribe",
]
