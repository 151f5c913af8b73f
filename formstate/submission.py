"""Submission pipeline for formstate.

``handle_submit`` builds the coroutine a UI binds to its submit event. Each
run validates every field, then calls either the error handler or the submit
handler and settles the submission flags.

Creating a handler marks the form as submitting and counts one submission;
running it does not count again. Exceptions raised by either callback
propagate to the caller and leave ``is_submitting`` set.
"""

import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from formstate.errors import FieldError
from formstate.registry import FieldRegistry
from formstate.scheduler import ValidationScheduler
from formstate.state import FormStore
from formstate.types import FieldName, FormEventType

logger = logging.getLogger(__name__)


SubmitHandler = Callable[[Dict[FieldName, Any], Any], Any]
ErrorHandler = Callable[[Dict[FieldName, FieldError], Any], Any]
SubmitCallable = Callable[..., Awaitable[None]]


async def _call(callback: Callable[..., Any], *args: Any) -> Any:
    result = callback(*args)
    if inspect.isawaitable(result):
        result = await result
    return result


class SubmissionPipeline:
    """Validates the whole form and routes to the success or error handler."""

    def __init__(self, registry: FieldRegistry, scheduler: ValidationScheduler, store: FormStore):
        self.registry = registry
        self.scheduler = scheduler
        self.store = store

    def handle_submit(
        self,
        on_submit: SubmitHandler,
        on_error: Optional[ErrorHandler] = None,
    ) -> SubmitCallable:
        """Build a submit coroutine function.

        Args:
            on_submit: Called with ``{name: value}`` and the event when every
                field passes
            on_error: Called with the errors mapping and the event otherwise

        Returns:
            ``async submit(event=None)``
        """
        self.store.set("is_submitting", True)
        count = self.store.increment_submit_count()
        self.store.emit(FormEventType.SUBMIT_STARTED, value=count)

        async def submit(event: Any = None) -> None:
            await self.scheduler.validate_all()

            if self.store.has_errors:
                errors = self.store.errors
                logger.debug("Submit blocked by errors on %s", list(errors))
                if on_error is not None:
                    await _call(on_error, errors, event)
                self.store.set("is_submitting", False)
                self.store.set("is_submitted", True)
                self.store.set("is_submit_successful", False)
                self.store.emit(FormEventType.SUBMIT_FAILED, value=errors)
                return

            values = self.registry.values()
            await _call(on_submit, values, event)
            self.store.set("is_submitting", False)
            self.store.set("is_submitted", True)
            self.store.set("is_submit_successful", True)
            logger.debug("Submitted %d fields", len(values))
            self.store.emit(FormEventType.SUBMIT_SUCCEEDED, value=values)

        return submit


def create_submit_handler(fn: SubmitHandler) -> SubmitHandler:
    """Return ``fn`` unchanged; pins the submit handler signature."""
    return fn


def create_error_handler(fn: ErrorHandler) -> ErrorHandler:
    """Return ``fn`` unchanged; pins the error handler signature."""
    return fn


__all__ = [
    "SubmissionPipeline",
    "SubmitHandler",
    "ErrorHandler",
    "create_submit_handler",
    "create_error_handler",
]
