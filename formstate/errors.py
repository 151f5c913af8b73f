"""Error descriptors and exceptions for formstate.

Rule failures are never raised: they are collected per field into a
FieldError and stored in the form's ``errors`` mapping. Exceptions are only
used for configuration mistakes, which are programming errors and surface at
``create_form`` or ``register`` time.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from formstate.types import FieldName


@dataclass(frozen=True)
class FieldError:
    """Validation errors for a single field.

    ``types`` maps each failing rule name to its message, in evaluation order.
    Under the ``firstError`` criteria mode it holds exactly one entry.

    Attributes:
        name: The field the errors belong to
        types: Failing rule name -> message
        ref: Resolved element of the field, if any

    Examples:
        >>> err = FieldError(name="username", types={"minLength": "Too short"})
        >>> err.type
        'minLength'
        >>> err.message
        'Too short'
    """
    name: FieldName
    types: Dict[str, str]
    ref: Optional[Any] = field(default=None, compare=False, repr=False)

    @property
    def type(self) -> str:
        """Name of the first failing rule."""
        return next(iter(self.types))

    @property
    def message(self) -> str:
        """Message of the first failing rule."""
        return self.types[self.type]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {
            "type": self.type,
            "message": self.message,
            "types": dict(self.types),
        }

    @classmethod
    def from_dict(cls, name: FieldName, data: Dict[str, Any]) -> "FieldError":
        """Create FieldError from dict."""
        types = data.get("types") or {data["type"]: data["message"]}
        return cls(name=name, types=dict(types))


class FormConfigError(ValueError):
    """Raised when form options or rule options are malformed.

    Attributes:
        problems: One human-readable line per offending option
    """

    def __init__(self, message: str, problems: Optional[List[str]] = None):
        self.problems = problems or []
        super().__init__(message)


__all__ = [
    "FieldError",
    "FormConfigError",
]
