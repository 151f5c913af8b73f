"""Rule evaluation and option schemas for formstate.

This module provides:
- validate_field: the rule evaluator run by the validation scheduler
- FORM_OPTIONS_SCHEMA / RULE_OPTIONS_SCHEMA: JSON Schemas (Draft 7) used to
  reject malformed configuration before a form or field is created

Rules are evaluated in a fixed order (required, minLength, maxLength, pattern,
validate). Custom predicates may be plain callables or coroutine functions.
"""

import inspect
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from jsonschema import Draft7Validator

from formstate.elements import focus_element
from formstate.errors import FormConfigError
from formstate.types import CriteriaMode, Field, RuleKind, ValidationMode

logger = logging.getLogger(__name__)


DEFAULT_MESSAGES: Dict[RuleKind, str] = {
    RuleKind.REQUIRED: "This field is required",
    RuleKind.MIN_LENGTH: "Must be at least {value} characters",
    RuleKind.MAX_LENGTH: "Must be at most {value} characters",
    RuleKind.PATTERN: "Does not match the required pattern",
    RuleKind.VALIDATE: "Invalid value",
}


_MODES = [m.value for m in ValidationMode]

_LENGTH_RULE = {
    "anyOf": [
        {"type": "integer", "minimum": 0},
        {
            "type": "object",
            "properties": {
                "value": {"type": "integer", "minimum": 0},
                "message": {"type": "string"},
            },
            "required": ["value"],
            "additionalProperties": False,
        },
    ]
}

FORM_OPTIONS_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "mode": {"enum": _MODES},
        "reValidateMode": {"enum": _MODES},
        "criteriaMode": {"enum": [c.value for c in CriteriaMode]},
        "defaultValues": {"type": "object"},
        # bool or a zero-argument callable; checked in FormOptions
        "shouldFocusError": {},
    },
    "additionalProperties": False,
}

# pattern and validate may hold compiled regexes and callables, which JSON
# Schema cannot describe; _check_rule_objects covers them.
RULE_OPTIONS_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "required": {
            "anyOf": [
                {"type": "boolean"},
                {"type": "string"},
                {
                    "type": "object",
                    "properties": {
                        "value": {"type": "boolean"},
                        "message": {"type": "string"},
                    },
                    "required": ["value"],
                    "additionalProperties": False,
                },
            ]
        },
        "minLength": _LENGTH_RULE,
        "maxLength": _LENGTH_RULE,
        "pattern": {},
        "validate": {},
        "value": {},
    },
    "additionalProperties": False,
}

Draft7Validator.check_schema(FORM_OPTIONS_SCHEMA)
Draft7Validator.check_schema(RULE_OPTIONS_SCHEMA)

_form_options_validator = Draft7Validator(FORM_OPTIONS_SCHEMA)
_rule_options_validator = Draft7Validator(RULE_OPTIONS_SCHEMA)


def _collect_problems(validator: Draft7Validator, data: Any) -> List[str]:
    problems = []
    for error in sorted(validator.iter_errors(data), key=lambda e: list(map(str, e.path))):
        path = ".".join(str(p) for p in error.path) or "<options>"
        problems.append(f"{path}: {error.message}")
    return problems


def check_form_options(data: Dict[str, Any]) -> None:
    """Validate raw (camelCase) form options.

    Raises:
        FormConfigError: If any option is unknown or malformed
    """
    problems = _collect_problems(_form_options_validator, data)
    if problems:
        raise FormConfigError(f"Invalid form options: {'; '.join(problems)}", problems)


_RULE_NAMES = frozenset(kind.value for kind in RuleKind)


def _check_rule_objects(options: Dict[str, Any]) -> List[str]:
    problems = []

    if "pattern" in options:
        pattern, _ = split_rule(options["pattern"])
        if not isinstance(pattern, (str, re.Pattern)):
            problems.append("pattern: must be a string or compiled regular expression")
        elif isinstance(pattern, str):
            try:
                re.compile(pattern)
            except re.error as exc:
                problems.append(f"pattern: {exc}")

    if "validate" in options:
        validate = options["validate"]
        if isinstance(validate, dict):
            for name, predicate in validate.items():
                if name in _RULE_NAMES:
                    problems.append(f"validate.{name}: clashes with the built-in {name!r} rule")
                elif not callable(predicate):
                    problems.append(f"validate.{name}: must be callable")
        elif not callable(validate):
            problems.append("validate: must be callable or a mapping of callables")

    return problems


def check_rule_options(name: Any, options: Dict[str, Any]) -> None:
    """Validate the options passed to ``register``.

    Raises:
        FormConfigError: If any rule is unknown or malformed
    """
    problems = _collect_problems(_rule_options_validator, options)
    if isinstance(options, dict):
        problems.extend(_check_rule_objects(options))
    if problems:
        raise FormConfigError(
            f"Invalid rule options for field '{name}': {'; '.join(problems)}",
            problems,
        )


def split_rule(rule: Any) -> Tuple[Any, Optional[str]]:
    """Split a rule into (constraint, message).

    Examples:
        >>> split_rule(6)
        (6, None)
        >>> split_rule({"value": 6, "message": "Too short"})
        (6, 'Too short')
    """
    if isinstance(rule, dict) and "value" in rule:
        return rule["value"], rule.get("message")
    return rule, None


def is_empty(value: Any) -> bool:
    """Return True for values that fail a ``required`` rule."""
    if value is None or value is False:
        return True
    if isinstance(value, (str, list, tuple, dict, set, frozenset)):
        return len(value) == 0
    return False


def _length(value: Any) -> int:
    try:
        return len(value)
    except TypeError:
        return len(str(value))


def _message(kind: RuleKind, message: Optional[str], value: Any = None) -> str:
    if message:
        return message
    return DEFAULT_MESSAGES[kind].format(value=value)


def _check_required(rule: Any, value: Any) -> Optional[str]:
    if isinstance(rule, str):
        enabled, message = bool(rule), rule
    else:
        enabled, message = split_rule(rule)
    if enabled and is_empty(value):
        return _message(RuleKind.REQUIRED, message)
    return None


def _check_min_length(rule: Any, value: Any) -> Optional[str]:
    limit, message = split_rule(rule)
    if not is_empty(value) and _length(value) < limit:
        return _message(RuleKind.MIN_LENGTH, message, limit)
    return None


def _check_max_length(rule: Any, value: Any) -> Optional[str]:
    limit, message = split_rule(rule)
    if not is_empty(value) and _length(value) > limit:
        return _message(RuleKind.MAX_LENGTH, message, limit)
    return None


def _check_pattern(rule: Any, value: Any) -> Optional[str]:
    pattern, message = split_rule(rule)
    if is_empty(value):
        return None
    if re.search(pattern, str(value)) is None:
        return _message(RuleKind.PATTERN, message)
    return None


async def _run_predicate(predicate: Any, value: Any) -> Optional[str]:
    result = predicate(value)
    if inspect.isawaitable(result):
        result = await result

    if isinstance(result, str):
        return result or DEFAULT_MESSAGES[RuleKind.VALIDATE]
    if result is False:
        return DEFAULT_MESSAGES[RuleKind.VALIDATE]
    return None


_SYNC_CHECKS = (
    (RuleKind.REQUIRED, _check_required),
    (RuleKind.MIN_LENGTH, _check_min_length),
    (RuleKind.MAX_LENGTH, _check_max_length),
    (RuleKind.PATTERN, _check_pattern),
)


async def validate_field(
    field: Field,
    display_all_errors: bool,
    focus_on_error: bool,
) -> Dict[str, str]:
    """Evaluate a field's rules against its current value.

    Args:
        field: The field to evaluate
        display_all_errors: Collect every failing rule instead of stopping at
            the first one
        focus_on_error: Focus the field's element when any rule fails

    Returns:
        Mapping of failing rule name to message; empty when every rule passes

    Examples:
        >>> import asyncio
        >>> f = Field(name="username", input_value="ab", rule={"minLength": 6})
        >>> asyncio.run(validate_field(f, False, False))
        {'minLength': 'Must be at least 6 characters'}
    """
    rules = field.rule
    value = field.input_value
    result: Dict[str, str] = {}

    for kind, check in _SYNC_CHECKS:
        if kind.value not in rules:
            continue
        message = check(rules[kind.value], value)
        if message is not None:
            result[kind.value] = message
            if not display_all_errors:
                break

    if (display_all_errors or not result) and RuleKind.VALIDATE.value in rules:
        validate = rules[RuleKind.VALIDATE.value]
        predicates = validate if isinstance(validate, dict) else {RuleKind.VALIDATE.value: validate}
        for predicate_name, predicate in predicates.items():
            message = await _run_predicate(predicate, value)
            if message is not None:
                result[predicate_name] = message
                if not display_all_errors:
                    break

    if result:
        logger.debug("Field %r failed rules %s", field.name, list(result))
        if focus_on_error and field.ref is not None:
            focus_element(field.ref)

    return result


__all__ = [
    "DEFAULT_MESSAGES",
    "FORM_OPTIONS_SCHEMA",
    "RULE_OPTIONS_SCHEMA",
    "check_form_options",
    "check_rule_options",
    "split_rule",
    "is_empty",
    "validate_field",
]
