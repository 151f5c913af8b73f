"""Field registry for formstate.

The registry owns the name -> Field mapping and hands out binding
descriptors, the handlers a UI adapter wires to an input. Removal is lazy:
``unregister`` only marks names, and ``cleanup_pending_unregisters`` purges
them at the start of the next validation, so validations already in flight
never find their field yanked away.

Usage:
    >>> from formstate.config import FormOptions
    >>> from formstate.dirty import DirtyTracker
    >>> from formstate.state import FormStore
    >>> store = FormStore()
    >>> options = FormOptions()
    >>> registry = FieldRegistry(store, options, DirtyTracker(store, options))
    >>> binding = registry.register("email", {"required": True, "value": "a@b.c"})
    >>> binding.model_value
    'a@b.c'
    >>> registry.get("email").rule
    {'required': True}
"""

import logging
from collections import abc
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional, Set, Union

from formstate.config import FormOptions
from formstate.dirty import DirtyTracker, extract_value, is_input_event
from formstate.elements import ElementSlot, resolve_element
from formstate.state import FormStore
from formstate.types import Field, FieldName, FormEventType, TriggerEvent
from formstate.validation import check_rule_options

logger = logging.getLogger(__name__)


TriggerCallback = Callable[[TriggerEvent, FieldName], Awaitable[None]]


class BindingDescriptor:
    """What a UI adapter binds to one input.

    Attributes:
        name: Field name
        ref: Slot the adapter assigns its element handle to
    """

    def __init__(self, registry: "FieldRegistry", name: FieldName):
        self._registry = registry
        self.name = name
        self.ref = ElementSlot(lambda handle: registry.attach_element(name, handle))

    @property
    def model_value(self) -> Any:
        """Current value of the field, or None once it has been removed."""
        field = self._registry.get(self.name)
        return field.input_value if field is not None else None

    async def on_blur(self, event: Any = None) -> None:
        await self._registry.dispatch(TriggerEvent.BLUR, self.name)

    async def on_update_model_value(self, new_value: Any) -> None:
        """Value committed by a UI component (model update)."""
        if not self._registry.is_active(self.name):
            return
        self._registry.assign(self.name, new_value, self.ref.value)
        await self._registry.dispatch(TriggerEvent.VALUE_COMMIT, self.name)

    async def on_input(self, event: Any) -> None:
        """Raw input: a native input event, or a bare value from a component.

        Bare values only update dirty state; components commit their value
        through ``on_update_model_value``.
        """
        if not self._registry.is_active(self.name):
            return
        self._registry.dirty_tracker.mark_dirty(self.name, event)
        if not is_input_event(event):
            return
        self._registry.assign(self.name, extract_value(event), self.ref.value)
        await self._registry.dispatch(TriggerEvent.INPUT, self.name)

    def __repr__(self) -> str:
        return f"BindingDescriptor(name={self.name!r})"


class FieldRegistry:
    """Owns the fields of one form and their lazy removal."""

    def __init__(self, store: FormStore, options: FormOptions, dirty_tracker: DirtyTracker):
        self._store = store
        self._options = options
        self.dirty_tracker = dirty_tracker
        self._fields: Dict[FieldName, Field] = {}
        self._pending_unregister: Set[FieldName] = set()
        self.on_trigger: Optional[TriggerCallback] = None

    @property
    def fields(self) -> Mapping[FieldName, Field]:
        """Read-only view of the registered fields, in registration order."""
        return MappingProxyType(self._fields)

    @property
    def pending_unregister(self) -> frozenset:
        return frozenset(self._pending_unregister)

    def get(self, name: FieldName) -> Optional[Field]:
        return self._fields.get(name)

    def __contains__(self, name: FieldName) -> bool:
        return name in self._fields

    def __len__(self) -> int:
        return len(self._fields)

    def names(self) -> List[FieldName]:
        return list(self._fields)

    def is_active(self, name: FieldName) -> bool:
        """Registered and not marked for removal."""
        return name in self._fields and name not in self._pending_unregister

    def values(self) -> Dict[FieldName, Any]:
        """Plain snapshot of every field's current value."""
        return {name: field.input_value for name, field in self._fields.items()}

    def register(self, name: FieldName, options: Optional[Dict[str, Any]] = None) -> BindingDescriptor:
        """Register a field, or rebind an existing one.

        A rebind fills in rule keys the field does not have yet and only
        replaces the value when ``value`` is passed. Registering a name that
        is pending removal cancels the removal.

        Raises:
            FormConfigError: If ``options`` contains unknown or malformed rules
        """
        rules = dict(options or {})
        check_rule_options(name, rules)

        has_value = "value" in rules
        value = rules.pop("value", None)
        self._pending_unregister.discard(name)

        field = self._fields.get(name)
        if field is None:
            field = Field(
                name=name,
                input_value=value if has_value else self._options.get_default(name),
                rule=rules,
            )
            self._fields[name] = field
            logger.debug("Registered field %r with rules %s", name, list(rules))
            self._store.emit(FormEventType.FIELD_REGISTERED, field_name=name, value=field.input_value)
        else:
            for key, rule in rules.items():
                field.rule.setdefault(key, rule)
            if has_value:
                field.input_value = value
            logger.debug("Rebound field %r", name)

        return BindingDescriptor(self, name)

    def unregister(self, names: Union[FieldName, Iterable[FieldName]]) -> None:
        """Mark field(s) for removal at the next validation."""
        if isinstance(names, (str, bytes)) or not isinstance(names, abc.Iterable):
            names = [names]
        for name in names:
            self._pending_unregister.add(name)
            logger.debug("Field %r marked for removal", name)
            self._store.emit(FormEventType.FIELD_UNREGISTERED, field_name=name)

    def cleanup_pending_unregisters(self) -> None:
        """Purge every pending field's errors, record and dirty state."""
        if not self._pending_unregister:
            return
        for name in list(self._pending_unregister):
            self._store.clear_error(name)
            removed = self._fields.pop(name, None)
            self._store.clear_field_dirty(name)
            if removed is not None:
                logger.debug("Removed field %r", name)
                self._store.emit(FormEventType.FIELD_REMOVED, field_name=name)
        self._pending_unregister.clear()
        if not self._store.dirty_fields:
            self._store.set("is_dirty", False)

    def assign(self, name: FieldName, value: Any, handle: Any = None) -> None:
        """Store a new value, refreshing the element from the bound handle."""
        field = self._fields.get(name)
        if field is None:
            return
        field.input_value = value
        if handle is not None:
            self.attach_element(name, handle)

    def attach_element(self, name: FieldName, handle: Any) -> None:
        field = self._fields.get(name)
        if field is None:
            return
        el = resolve_element(handle)
        if el is not None:
            field.ref = el

    async def dispatch(self, trigger: TriggerEvent, name: FieldName) -> None:
        if not self.is_active(name):
            logger.debug("Ignoring %s for inactive field %r", trigger.value, name)
            return
        if self.on_trigger is not None:
            await self.on_trigger(trigger, name)


__all__ = [
    "BindingDescriptor",
    "FieldRegistry",
]
