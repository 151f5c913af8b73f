"""Form handle: the public entry point of formstate.

``create_form`` wires a FormStore, DirtyTracker, FieldRegistry,
ValidationScheduler and SubmissionPipeline together for one form. Nothing is
shared between forms.

Usage:
    >>> import asyncio
    >>> form = create_form({"mode": "onChange"})
    >>> username = form.register("username", {"required": True, "minLength": 6})
    >>> received = []
    >>> submit = form.handle_submit(lambda values, event: received.append(values))
    >>> asyncio.run(submit())
    >>> form.form_state.get_error("username").type
    'required'
    >>> form.form_state.submit_count
    1
"""

import logging
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Union

from formstate.config import FormOptions
from formstate.dirty import DirtyTracker
from formstate.events import EventEmitter
from formstate.registry import BindingDescriptor, FieldRegistry
from formstate.scheduler import ValidationScheduler
from formstate.state import FormStore
from formstate.submission import (
    ErrorHandler,
    SubmissionPipeline,
    SubmitCallable,
    SubmitHandler,
    create_error_handler,
    create_submit_handler,
)
from formstate.types import Field, FieldName

logger = logging.getLogger(__name__)


class Form:
    """A form instance.

    Attributes:
        options: The form's validated options
        form_state: Status store, observable per key
        registry: Field registry
        scheduler: Validation scheduler
        pipeline: Submission pipeline
    """

    def __init__(self, options: Optional[FormOptions] = None, emitter: Optional[EventEmitter] = None):
        self.options = options if options is not None else FormOptions()
        self.form_state = FormStore(emitter)
        self.registry = FieldRegistry(
            self.form_state,
            self.options,
            DirtyTracker(self.form_state, self.options),
        )
        self.scheduler = ValidationScheduler(self.registry, self.form_state, self.options)
        self.registry.on_trigger = self.scheduler.handle
        self.pipeline = SubmissionPipeline(self.registry, self.scheduler, self.form_state)

    @property
    def fields(self) -> Mapping[FieldName, Field]:
        return self.registry.fields

    @property
    def emitter(self) -> EventEmitter:
        return self.form_state.emitter

    def register(self, name: FieldName, rule_options: Optional[Dict[str, Any]] = None) -> BindingDescriptor:
        return self.registry.register(name, rule_options)

    def unregister(self, names: Union[FieldName, Iterable[FieldName]]) -> None:
        self.registry.unregister(names)

    def use_register(
        self,
        name: FieldName,
        rule_options: Optional[Dict[str, Any]] = None,
    ) -> Callable[[], BindingDescriptor]:
        """Deferred registration.

        The returned factory registers on each call, seeding ``value`` only on
        the first, so re-rendering does not reset what the user typed.
        """
        options = dict(rule_options or {})

        def factory() -> BindingDescriptor:
            binding = self.registry.register(name, options)
            options.pop("value", None)
            return binding

        return factory

    def handle_submit(self, on_submit: SubmitHandler, on_error: Optional[ErrorHandler] = None) -> SubmitCallable:
        return self.pipeline.handle_submit(on_submit, on_error)

    def create_submit_handler(self, fn: SubmitHandler) -> SubmitHandler:
        return create_submit_handler(fn)

    def create_error_handler(self, fn: ErrorHandler) -> ErrorHandler:
        return create_error_handler(fn)

    async def trigger(self, name: Optional[FieldName] = None) -> bool:
        """Validate one field, or all of them, regardless of mode.

        Returns:
            Whether the validated field (or the whole form) has no errors;
            False for a name that is not registered or is pending removal
        """
        if name is None:
            await self.scheduler.validate_all()
            return self.form_state.is_valid
        if not self.registry.is_active(name):
            logger.debug("Ignoring trigger for inactive field %r", name)
            return False
        await self.scheduler.on_field_changed(name)
        return self.form_state.get_error(name) is None


def create_form(
    options: Optional[Union[Dict[str, Any], FormOptions]] = None,
    emitter: Optional[EventEmitter] = None,
    **kwargs: Any,
) -> Form:
    """Create a form.

    Args:
        options: camelCase option dict or a FormOptions instance
        emitter: Event emitter to publish on; a new one by default
        **kwargs: snake_case options, used when ``options`` is not given

    Raises:
        FormConfigError: If the options are unknown or malformed
    """
    if options is not None and kwargs:
        raise TypeError("Pass options either positionally or as keywords, not both")
    if isinstance(options, FormOptions):
        resolved = options
    elif options is not None:
        resolved = FormOptions.from_dict(options)
    else:
        resolved = FormOptions.from_keywords(**kwargs)

    logger.debug(
        "Created form mode=%s re_validate_mode=%s criteria_mode=%s",
        resolved.mode.value,
        resolved.re_validate_mode.value,
        resolved.criteria_mode.value,
    )
    return Form(resolved, emitter)


__all__ = [
    "Form",
    "create_form",
]
