"""Form configuration.

FormOptions holds the options passed to ``create_form``. Options arrive as a
camelCase dict (the shape UI layers pass around) or as snake_case keywords,
and are checked against ``FORM_OPTIONS_SCHEMA`` before use.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Union

from formstate.errors import FormConfigError
from formstate.types import CriteriaMode, FieldName, ValidationMode
from formstate.validation import check_form_options


FocusSetting = Union[bool, Callable[[], bool]]

_KEYWORD_TO_OPTION = {
    "mode": "mode",
    "re_validate_mode": "reValidateMode",
    "criteria_mode": "criteriaMode",
    "default_values": "defaultValues",
    "should_focus_error": "shouldFocusError",
}


@dataclass(frozen=True)
class FormOptions:
    """Options controlling validation timing, reporting and defaults.

    Attributes:
        mode: Validation timing before the first submit
        re_validate_mode: Validation timing once the form has been submitted
        criteria_mode: Report the first failing rule or all of them
        default_values: Field name -> default value, used for dirty tracking
        should_focus_error: Focus the failing input; a callable is read lazily

    Examples:
        >>> opts = FormOptions.from_dict({"mode": "onChange"})
        >>> opts.mode
        <ValidationMode.ON_CHANGE: 'onChange'>
        >>> opts.criteria_mode
        <CriteriaMode.FIRST_ERROR: 'firstError'>
    """
    mode: ValidationMode = ValidationMode.ON_SUBMIT
    re_validate_mode: ValidationMode = ValidationMode.ON_CHANGE
    criteria_mode: CriteriaMode = CriteriaMode.FIRST_ERROR
    default_values: Dict[FieldName, Any] = field(default_factory=dict)
    should_focus_error: FocusSetting = True

    @property
    def display_all_errors(self) -> bool:
        return self.criteria_mode == CriteriaMode.ALL

    def focus_on_error(self) -> bool:
        """Current value of ``should_focus_error``."""
        setting = self.should_focus_error
        if callable(setting):
            return bool(setting())
        return bool(setting)

    def get_default(self, name: FieldName) -> Any:
        """Default value of a field, or an empty string when none is set."""
        value = self.default_values.get(name)
        return "" if value is None else value

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        return {
            "mode": self.mode.value,
            "reValidateMode": self.re_validate_mode.value,
            "criteriaMode": self.criteria_mode.value,
            "defaultValues": dict(self.default_values),
            "shouldFocusError": self.should_focus_error,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]] = None) -> "FormOptions":
        """Create FormOptions from a camelCase dict.

        Raises:
            FormConfigError: If any option is unknown or malformed
        """
        data = dict(data or {})
        check_form_options(data)

        focus = data.get("shouldFocusError", True)
        if not isinstance(focus, bool) and not callable(focus):
            raise FormConfigError(
                "Invalid form options: shouldFocusError must be a bool or a callable",
                ["shouldFocusError: must be a bool or a callable"],
            )

        return cls(
            mode=ValidationMode(data.get("mode", ValidationMode.ON_SUBMIT.value)),
            re_validate_mode=ValidationMode(
                data.get("reValidateMode", ValidationMode.ON_CHANGE.value)
            ),
            criteria_mode=CriteriaMode(
                data.get("criteriaMode", CriteriaMode.FIRST_ERROR.value)
            ),
            default_values=dict(data.get("defaultValues") or {}),
            should_focus_error=focus,
        )

    @classmethod
    def from_keywords(cls, **kwargs: Any) -> "FormOptions":
        """Create FormOptions from snake_case keywords."""
        data = {}
        for key, value in kwargs.items():
            if key not in _KEYWORD_TO_OPTION:
                raise FormConfigError(
                    f"Invalid form options: unknown option '{key}'",
                    [f"{key}: unknown option"],
                )
            data[_KEYWORD_TO_OPTION[key]] = value
        return cls.from_dict(data)


__all__ = [
    "FormOptions",
    "FocusSetting",
]
