"""formstate: form state & validation engine.

formstate provides:
- Schema-driven validation with per-field and whole-form results
- Debounced re-validation while the user types, immediate validation on blur
- Dirty/touched tracking and an immutable state snapshot for rendering
- A submit lifecycle guarding against concurrent submissions
- An auto-save side channel that never races with submission
- Focus-on-error recovery and accessibility attributes for bound inputs

Basic usage:
    >>> from formstate import create_form
    >>> schema = {
    ...     "type": "object",
    ...     "properties": {"name": {"type": "string", "minLength": 1}},
    ...     "required": ["name"]
    ... }
    >>> form = create_form(schema=schema, initial_data={"name": ""})
    >>> form.update_field("name", "Jo")
    >>> form.form_state.is_dirty
    True
"""

__version__ = "0.1.0"
__author__ = "formstate Team"

# Version info
VERSION = (0, 1, 0)

# Core exports
from formstate.config import AutoSaveOptions, FormOptions
from formstate.controller import FormController, create_form
from formstate.state import FormState
from formstate.validation import JsonSchema, ValidationResult, validate, validate_field

# Package metadata
__all__ = [
    "__version__",
    "VERSION",
    "AutoSaveOptions",
    "FormOptions",
    "FormController",
    "FormState",
    "JsonSchema",
    "ValidationResult",
    "create_form",
    "validate",
    "validate_field",
]
