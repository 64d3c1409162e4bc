"""Field binding adapter.

Turns a field name into the value, event handlers and accessibility
attributes a visual input needs. All logic is delegated to the controller;
this layer only translates UI events into controller calls.

Handlers accept either a plain value / element or a UI event exposing
``.target`` (checkbox targets contribute ``.checked`` instead of ``.value``).
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional

if TYPE_CHECKING:
    from formstate.controller import FormController


@dataclass(frozen=True)
class FieldOptions:
    """Per-field overrides of the form's validation triggers.

    Attributes:
        validate_on_change: Re-validate a touched field after each change
            (defaults to the form's validate_on_change)
        validate_on_blur: Validate the field when it loses focus
            (defaults to the form's validate_on_blur)
        transform: Applied to the raw input before it is stored
        format: Applied to the stored value before it is displayed
    """
    validate_on_change: Optional[bool] = None
    validate_on_blur: Optional[bool] = None
    transform: Optional[Callable[[Any], Any]] = None
    format: Optional[Callable[[Any], str]] = None


@dataclass(frozen=True)
class FieldProps:
    """Everything an input needs to render and report back."""
    name: str
    id: str
    value: Any
    error: Optional[str]
    touched: bool
    aria_invalid: bool
    aria_describedby: Optional[str]
    on_change: Callable[[Any], None]
    on_blur: Callable[[Any], None]
    on_focus: Callable[[Any], None]

    def to_attrs(self) -> Dict[str, Any]:
        """Attribute dict using DOM attribute names."""
        attrs: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "value": self.value,
            "aria-invalid": self.aria_invalid,
        }
        if self.aria_describedby is not None:
            attrs["aria-describedby"] = self.aria_describedby
        return attrs


def field_id(field: str) -> str:
    return f"field-{field}"


def error_id(field: str) -> str:
    """ID of the element that displays ``field``'s error message."""
    return f"{field_id(field)}-error"


def extract_value(event: Any) -> Any:
    target = getattr(event, "target", None)
    if target is None:
        return event
    if getattr(target, "type", None) == "checkbox":
        return target.checked
    return target.value


def extract_element(event: Any) -> Any:
    target = getattr(event, "target", None)
    if target is not None:
        return target
    return event if callable(getattr(event, "focus", None)) else None


def bind_field(
    controller: "FormController",
    field: str,
    options: Optional[FieldOptions] = None,
) -> FieldProps:
    """Build FieldProps for ``field`` from the controller's current state."""
    options = options or FieldOptions()
    form_options = controller.options
    validate_on_change = (
        form_options.validate_on_change
        if options.validate_on_change is None
        else options.validate_on_change
    )
    validate_on_blur = (
        form_options.validate_on_blur
        if options.validate_on_blur is None
        else options.validate_on_blur
    )

    value = controller.get_field_value(field)
    error = controller.get_field_error(field)
    touched = controller.is_field_touched(field)

    def on_change(event: Any) -> None:
        new_value = extract_value(event)
        if options.transform is not None:
            new_value = options.transform(new_value)
        controller.update_field(field, new_value)
        if validate_on_change and controller.is_field_touched(field):
            controller.request_field_validation(field)

    def on_blur(event: Any) -> None:
        controller.set_touched(field, True)
        # Blur validates immediately; it never waits on the debounce timer.
        if validate_on_blur:
            controller.validate_field(field)
        element = extract_element(event)
        if element is not None:
            controller.register_field(field, element)

    def on_focus(event: Any) -> None:
        element = extract_element(event)
        if element is not None:
            controller.register_field(field, element)

    return FieldProps(
        name=field,
        id=field_id(field),
        value=options.format(value) if options.format is not None else ("" if value is None else value),
        error=error,
        touched=touched,
        aria_invalid=error is not None,
        aria_describedby=error_id(field) if error is not None else None,
        on_change=on_change,
        on_blur=on_blur,
        on_focus=on_focus,
    )


__all__ = [
    "FieldOptions",
    "FieldProps",
    "bind_field",
    "error_id",
    "extract_element",
    "extract_value",
    "field_id",
]
