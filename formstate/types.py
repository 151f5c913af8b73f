"""Core type definitions for formstate.

This module defines the fundamental types used throughout the form engine:
- ValidationMode: Timing policies deciding which UI events trigger validation
- CriteriaMode: Whether a field reports its first failing rule or all of them
- TriggerEvent: UI events the validation scheduler reacts to
- RuleKind: Supported declarative validation rules
- FormEventType: Event types published on a form's event emitter
- RuleOptions: Typed shape of the options accepted by ``register``
- Field: The record kept for every registered input
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Hashable, Optional, Union

from typing_extensions import TypedDict


FieldName = Hashable


class ValidationMode(str, Enum):
    """Validation timing policy.

    ``ON_SUBMIT`` and ``ALL`` leave validation to the submission pipeline.
    """
    ON_SUBMIT = "onSubmit"
    ON_BLUR = "onBlur"
    ON_CHANGE = "onChange"
    ALL = "all"


class CriteriaMode(str, Enum):
    """How many failing rules are reported per field."""
    FIRST_ERROR = "firstError"
    ALL = "all"


class TriggerEvent(str, Enum):
    """UI events bound through a field's binding descriptor."""
    BLUR = "blur"
    INPUT = "input"
    VALUE_COMMIT = "value_commit"


class RuleKind(str, Enum):
    """Supported rule kinds, in evaluation order."""
    REQUIRED = "required"
    MIN_LENGTH = "minLength"
    MAX_LENGTH = "maxLength"
    PATTERN = "pattern"
    VALIDATE = "validate"


class FormEventType(str, Enum):
    """Events emitted by a form's store and pipeline."""
    STATE_CHANGED = "state.changed"
    FIELD_REGISTERED = "field.registered"
    FIELD_UNREGISTERED = "field.unregistered"
    FIELD_REMOVED = "field.removed"
    FIELD_VALIDATED = "field.validated"
    SUBMIT_STARTED = "submit.started"
    SUBMIT_SUCCEEDED = "submit.succeeded"
    SUBMIT_FAILED = "submit.failed"


class RuleValue(TypedDict, total=False):
    """Long form of a rule: a constraint plus an optional message."""
    value: Any
    message: str


Predicate = Callable[[Any], Any]


class RuleOptions(TypedDict, total=False):
    """Options recognised by ``register``.

    Every rule takes either its bare constraint or a ``RuleValue``.
    ``value`` seeds the field and is never stored with the rules.
    """
    required: Union[bool, str, RuleValue]
    minLength: Union[int, RuleValue]
    maxLength: Union[int, RuleValue]
    pattern: Any
    validate: Union[Predicate, Dict[str, Predicate]]
    value: Any


@dataclass
class Field:
    """One registered input.

    Attributes:
        name: Unique key within the form
        input_value: Current value of the input
        rule: Rule options attached at registration (never contains ``value``)
        ref: Resolved element, used only to focus the input on error

    Examples:
        >>> f = Field(name="email", rule={"required": True})
        >>> f.input_value
        ''
    """
    name: FieldName
    input_value: Any = ""
    rule: Dict[str, Any] = field(default_factory=dict)
    ref: Optional[Any] = field(default=None, repr=False)


__all__ = [
    "FieldName",
    "ValidationMode",
    "CriteriaMode",
    "TriggerEvent",
    "RuleKind",
    "FormEventType",
    "RuleValue",
    "Predicate",
    "RuleOptions",
    "Field",
]
