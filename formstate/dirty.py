"""Dirty tracking: compares input values against configured defaults."""

import logging
from typing import Any

from formstate.config import FormOptions
from formstate.state import FormStore
from formstate.types import FieldName

logger = logging.getLogger(__name__)


def is_input_event(raw_input: Any) -> bool:
    """True for event objects carrying the value in ``event.target.value``."""
    return hasattr(raw_input, "target")


def extract_value(raw_input: Any) -> Any:
    """Value carried by a raw input: the input itself or ``event.target.value``."""
    if is_input_event(raw_input):
        return getattr(raw_input.target, "value", None)
    return raw_input


class DirtyTracker:
    """Maintains ``dirty_fields`` and ``is_dirty`` on a FormStore."""

    def __init__(self, store: FormStore, options: FormOptions):
        self._store = store
        self._options = options

    def mark_dirty(self, name: FieldName, raw_input: Any) -> None:
        value = extract_value(raw_input)
        default = self._options.get_default(name)

        if value == default:
            self._store.clear_field_dirty(name)
            if not self._store.dirty_fields:
                self._store.set("is_dirty", False)
        else:
            self._store.mark_field_dirty(name)
            self._store.set("is_dirty", True)

        logger.debug("Field %r dirty=%s", name, self._store.is_field_dirty(name))


__all__ = [
    "DirtyTracker",
    "extract_value",
    "is_input_event",
]
