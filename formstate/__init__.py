"""formstate: a framework-independent form-state engine.

formstate provides:
- A field registry with lazy, race-tolerant unregistration
- Declarative per-field rules (required, minLength, maxLength, pattern, validate)
- Validation timing policies (onSubmit, onBlur, onChange, all)
- Dirty tracking against configured default values
- A submission pipeline with success and error handlers
- An observable status store for UI layers to subscribe to

Basic usage:
    >>> import asyncio
    >>> from formstate import create_form
    >>> form = create_form({"mode": "onChange", "defaultValues": {"name": ""}})
    >>> binding = form.register("name", {"required": "Name is required"})
    >>> asyncio.run(binding.on_update_model_value(""))
    >>> form.form_state.get_error("name").message
    'Name is required'
"""

__version__ = "0.1.0"
__author__ = "formstate contributors"

# Version info
VERSION = (0, 1, 0)

# Core exports
from formstate.config import FormOptions
from formstate.errors import FieldError, FormConfigError
from formstate.form import Form, create_form
from formstate.types import CriteriaMode, ValidationMode

# Package metadata
__all__ = [
    "__version__",
    "VERSION",
    "create_form",
    "Form",
    "FormOptions",
    "FieldError",
    "FormConfigError",
    "CriteriaMode",
    "ValidationMode",
]
