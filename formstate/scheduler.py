"""Validation scheduling for formstate.

The scheduler decides which UI events validate a field, runs the rule
evaluator and writes results into the form status. The active policy is the
form's ``mode`` until it has been submitted once, then ``re_validate_mode``.

Trigger table (see VALIDATION_TRIGGERS):
- onBlur: blur validates the field
- onChange: input and value-commit validate the field
- onSubmit, all: nothing validates until the submission pipeline runs

Usage:
    >>> import asyncio
    >>> from formstate.form import create_form
    >>> form = create_form({"mode": "onChange"})
    >>> _ = form.register("username", {"minLength": 6, "value": "ab"})
    >>> asyncio.run(form.scheduler.validate_one("username"))
    >>> form.form_state.get_error("username").type
    'minLength'
"""

import logging
from typing import Dict, FrozenSet

from formstate.config import FormOptions
from formstate.errors import FieldError
from formstate.registry import FieldRegistry
from formstate.state import FormStore
from formstate.types import FieldName, FormEventType, TriggerEvent, ValidationMode
from formstate.validation import validate_field

logger = logging.getLogger(__name__)


# Maps each validation mode to the UI events that validate a field under it
VALIDATION_TRIGGERS: Dict[ValidationMode, FrozenSet[TriggerEvent]] = {
    ValidationMode.ON_BLUR: frozenset({TriggerEvent.BLUR}),
    ValidationMode.ON_CHANGE: frozenset({TriggerEvent.INPUT, TriggerEvent.VALUE_COMMIT}),
    ValidationMode.ON_SUBMIT: frozenset(),
    ValidationMode.ALL: frozenset(),
}


class ValidationScheduler:
    """Runs field validation at the moments the form's policies allow.

    Attributes:
        registry: The form's field registry
        store: The form's status store
        options: The form's options
    """

    def __init__(self, registry: FieldRegistry, store: FormStore, options: FormOptions):
        self.registry = registry
        self.store = store
        self.options = options

    @property
    def active_mode(self) -> ValidationMode:
        """``re_validate_mode`` once the form has been submitted, else ``mode``."""
        if self.store.is_submitted:
            return self.options.re_validate_mode
        return self.options.mode

    def should_validate(self, trigger: TriggerEvent) -> bool:
        return trigger in VALIDATION_TRIGGERS[self.active_mode]

    async def handle(self, trigger: TriggerEvent, name: FieldName) -> None:
        """Entry point for binding handlers."""
        if self.should_validate(trigger):
            await self.on_field_changed(name)

    async def validate_one(self, name: FieldName, is_part_of_batch: bool = False) -> None:
        """Validate a single field and record the outcome in ``errors``.

        Pending removals are purged first. Unknown fields are ignored, and a
        result is dropped if its field was removed or replaced meanwhile.
        """
        self.registry.cleanup_pending_unregisters()
        field = self.registry.get(name)
        if field is None:
            logger.debug("Skipping validation of unknown field %r", name)
            return

        if not is_part_of_batch:
            self.store.set("is_validating", True)
        result = await validate_field(
            field,
            self.options.display_all_errors,
            self.options.focus_on_error(),
        )
        if not is_part_of_batch:
            self.store.set("is_validating", False)

        if self.registry.get(name) is not field:
            logger.debug("Dropping stale validation result for field %r", name)
            return

        if result:
            self.store.set_error(name, FieldError(name=name, types=result, ref=field.ref))
        else:
            self.store.clear_error(name)
        self.store.emit(FormEventType.FIELD_VALIDATED, field_name=name, value=result)

    async def validate_all(self) -> None:
        """Validate every field in registration order, then recompute ``is_valid``.

        ``is_validating`` is raised and lowered around each field rather than
        once around the whole pass.
        """
        self.registry.cleanup_pending_unregisters()
        for name in self.registry.names():
            self.store.set("is_validating", True)
            await self.validate_one(name, is_part_of_batch=True)
            self.store.set("is_validating", False)
        self.store.set("is_valid", not self.store.has_errors)
        logger.debug("Validated %d fields, %d with errors", len(self.registry), len(self.store.errors))

    async def on_field_changed(self, name: FieldName) -> None:
        await self.validate_one(name)
        self.store.set("is_valid", not self.store.has_errors)


__all__ = [
    "VALIDATION_TRIGGERS",
    "ValidationScheduler",
]
