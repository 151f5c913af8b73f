"""Element resolution for UI adapters.

A UI layer may bind a field to a raw input element, to a component that wraps
one, or to a reference object holding one. ``resolve_element`` unwraps these
variants to the interactive element the form focuses on error. The form never
reads element state beyond that.
"""

from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from typing_extensions import Protocol, runtime_checkable


INTERACTIVE_TAGS = frozenset({"INPUT", "SELECT", "TEXTAREA"})
INTERACTIVE_SELECTOR = "input, select, textarea"


@runtime_checkable
class RawElement(Protocol):
    """Anything that looks like a DOM element."""

    tag_name: str

    def query_selector_all(self, selector: str) -> List[Any]:
        ...


@dataclass(frozen=True)
class ComponentWrapper:
    """A UI component whose root element is ``el``."""
    el: Any


@dataclass(frozen=True)
class RefWrapper:
    """A reference object whose element lives in ``ref.value``."""
    ref: Any


def is_element(candidate: Any) -> bool:
    """Return True if ``candidate`` satisfies the RawElement protocol."""
    return candidate is not None and isinstance(candidate, RawElement)


def _unwrap(handle: Any) -> Optional[Any]:
    if isinstance(handle, ElementSlot):
        handle = handle.value

    if is_element(handle):
        return handle

    # Explicit wrappers first, then the same shapes duck-typed
    if isinstance(handle, ComponentWrapper):
        return handle.el if is_element(handle.el) else None
    if isinstance(handle, RefWrapper):
        inner = getattr(handle.ref, "value", None)
        return inner if is_element(inner) else None

    el = getattr(handle, "el", None)
    if is_element(el):
        return el
    inner = getattr(getattr(handle, "ref", None), "value", None)
    if is_element(inner):
        return inner
    return None


def resolve_element(handle: Any) -> Optional[Any]:
    """Resolve a bound handle to its interactive element.

    Returns the element itself when it is an input, select or textarea;
    otherwise the first interactive descendant; None when nothing matches.

    Examples:
        >>> resolve_element(None) is None
        True
    """
    el = _unwrap(handle)
    if el is None:
        return None

    if str(el.tag_name).upper() in INTERACTIVE_TAGS:
        return el

    descendants = el.query_selector_all(INTERACTIVE_SELECTOR)
    return descendants[0] if descendants else None


def focus_element(el: Any) -> bool:
    """Focus ``el`` if it supports it. Returns whether focus was requested."""
    focus = getattr(el, "focus", None)
    if callable(focus):
        focus()
        return True
    return False


SlotListener = Callable[[Any], None]


class ElementSlot:
    """Assignable slot a UI adapter binds its element handle to.

    Assigning a non-empty handle notifies the listener, which lets the
    registry store the resolved element on the field.
    """

    def __init__(self, listener: Optional[SlotListener] = None):
        self._value: Any = None
        self._listener = listener

    @property
    def value(self) -> Any:
        return self._value

    @value.setter
    def value(self, handle: Any) -> None:
        self._value = handle
        if handle is not None and self._listener is not None:
            self._listener(handle)

    def __repr__(self) -> str:
        return f"ElementSlot({self._value!r})"


__all__ = [
    "RawElement",
    "ComponentWrapper",
    "RefWrapper",
    "ElementSlot",
    "is_element",
    "resolve_element",
    "focus_element",
]
