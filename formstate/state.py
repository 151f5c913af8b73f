"""Form status aggregation.

FormStore owns the single FormStatus record of a form. Every other component
writes through it, and every effective change is published as a
``state.changed`` event so a UI layer can observe individual keys.
"""

from dataclasses import dataclass, field, fields, replace
from datetime import datetime, timezone
from typing import Any, Dict, FrozenSet, Optional, Set

from formstate.errors import FieldError
from formstate.events import EventEmitter, EventListener, FormEvent, Unsubscribe
from formstate.types import FieldName, FormEventType


@dataclass
class FormStatus:
    """Aggregate status of a form.

    Attributes:
        is_dirty: True iff any field differs from its default
        dirty_fields: Names of fields currently dirty
        errors: Field name -> FieldError, absent when the field passed
        is_validating: A validation is in progress
        is_submitting: A submit handler has been created and not yet settled
        is_submitted: A submit handler has run to completion at least once
        is_submit_successful: The last completed submit called on_submit
        submit_count: Number of submit handlers created; never decreases
        is_valid: ``errors`` was empty after the most recent validation
    """
    is_dirty: bool = False
    dirty_fields: Set[FieldName] = field(default_factory=set)
    errors: Dict[FieldName, FieldError] = field(default_factory=dict)
    is_validating: bool = False
    is_submitting: bool = False
    is_submitted: bool = False
    is_submit_successful: bool = False
    submit_count: int = 0
    is_valid: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {
            "isDirty": self.is_dirty,
            "dirtyFields": {str(name): True for name in self.dirty_fields},
            "errors": {str(name): err.to_dict() for name, err in self.errors.items()},
            "isValidating": self.is_validating,
            "isSubmitting": self.is_submitting,
            "isSubmitted": self.is_submitted,
            "isSubmitSuccessful": self.is_submit_successful,
            "submitCount": self.submit_count,
            "isValid": self.is_valid,
        }


FLAG_KEYS = frozenset(
    f.name for f in fields(FormStatus) if f.name not in ("dirty_fields", "errors", "submit_count")
)


class FormStore:
    """Shared mutable status of one form.

    Reads return copies, so callers cannot bypass event emission by mutating
    what they were given.

    Examples:
        >>> store = FormStore()
        >>> changes = []
        >>> _ = store.watch("is_dirty", lambda e: changes.append(e.value))
        >>> store.set("is_dirty", True)
        >>> store.set("is_dirty", True)
        >>> changes
        [True]
    """

    def __init__(self, emitter: Optional[EventEmitter] = None):
        self._status = FormStatus()
        self.emitter = emitter if emitter is not None else EventEmitter()

    # Reads

    @property
    def is_dirty(self) -> bool:
        return self._status.is_dirty

    @property
    def dirty_fields(self) -> FrozenSet[FieldName]:
        return frozenset(self._status.dirty_fields)

    @property
    def errors(self) -> Dict[FieldName, FieldError]:
        return dict(self._status.errors)

    @property
    def is_validating(self) -> bool:
        return self._status.is_validating

    @property
    def is_submitting(self) -> bool:
        return self._status.is_submitting

    @property
    def is_submitted(self) -> bool:
        return self._status.is_submitted

    @property
    def is_submit_successful(self) -> bool:
        return self._status.is_submit_successful

    @property
    def submit_count(self) -> int:
        return self._status.submit_count

    @property
    def is_valid(self) -> bool:
        return self._status.is_valid

    @property
    def has_errors(self) -> bool:
        return bool(self._status.errors)

    def get_error(self, name: FieldName) -> Optional[FieldError]:
        return self._status.errors.get(name)

    def is_field_dirty(self, name: FieldName) -> bool:
        return name in self._status.dirty_fields

    def snapshot(self) -> FormStatus:
        """Return an independent copy of the current status."""
        return replace(
            self._status,
            dirty_fields=set(self._status.dirty_fields),
            errors=dict(self._status.errors),
        )

    # Writes

    def set(self, key: str, value: bool) -> None:
        """Set a boolean flag, emitting an event if it changed.

        Raises:
            KeyError: If ``key`` is not a boolean flag of FormStatus
        """
        if key not in FLAG_KEYS:
            raise KeyError(f"'{key}' is not a settable form status flag")
        previous = getattr(self._status, key)
        if previous == value:
            return
        setattr(self._status, key, value)
        self._changed(key, value, previous)

    def increment_submit_count(self) -> int:
        previous = self._status.submit_count
        self._status.submit_count = previous + 1
        self._changed("submit_count", self._status.submit_count, previous)
        return self._status.submit_count

    def set_error(self, name: FieldName, error: FieldError) -> None:
        previous = self._status.errors.get(name)
        if previous == error:
            return
        self._status.errors[name] = error
        self._changed("errors", error, previous, field_name=name)

    def clear_error(self, name: FieldName) -> None:
        previous = self._status.errors.pop(name, None)
        if previous is not None:
            self._changed("errors", None, previous, field_name=name)

    def mark_field_dirty(self, name: FieldName) -> None:
        if name in self._status.dirty_fields:
            return
        self._status.dirty_fields.add(name)
        self._changed("dirty_fields", True, False, field_name=name)

    def clear_field_dirty(self, name: FieldName) -> None:
        if name not in self._status.dirty_fields:
            return
        self._status.dirty_fields.discard(name)
        self._changed("dirty_fields", False, True, field_name=name)

    # Observation

    def emit(self, event_type: FormEventType, **kwargs: Any) -> None:
        self.emitter.emit(FormEvent(type=event_type, ts=datetime.now(timezone.utc), **kwargs))

    def subscribe(self, listener: EventListener) -> Unsubscribe:
        """Listen to every status change. Returns a callable that unsubscribes."""
        return self.emitter.on(FormEventType.STATE_CHANGED, listener)

    def watch(self, key: str, listener: EventListener) -> Unsubscribe:
        """Listen to changes of a single FormStatus attribute."""
        def _filtered(event: FormEvent) -> None:
            if event.key == key:
                listener(event)

        return self.subscribe(_filtered)

    def _changed(self, key: str, value: Any, previous: Any, field_name: Optional[FieldName] = None) -> None:
        self.emit(
            FormEventType.STATE_CHANGED,
            key=key,
            field_name=field_name,
            value=value,
            previous=previous,
        )

    def __repr__(self) -> str:
        return f"FormStore({self._status!r})"


__all__ = [
    "FormStatus",
    "FormStore",
    "FLAG_KEYS",
]
