"""Configuration structs for a form controller.

FormOptions is a fixed, explicit set of recognised options. It validates
itself on construction, and ``FormOptions.from_dict`` accepts the camelCase
option names used by UI code (``validateOnChange``, ``debounceMs``, ...).
"""

from dataclasses import dataclass, field, fields, replace
from typing import Any, Awaitable, Callable, Dict, Mapping, Optional, Union

from formstate.validation import SchemaLike, as_schema

DEFAULT_DEBOUNCE_MS = 300
DEFAULT_AUTO_SAVE_INTERVAL_MS = 2000

SubmitHandler = Callable[..., Union[None, Awaitable[None]]]
AutoSaveHandler = Callable[[Dict[str, Any]], Union[None, Awaitable[None]]]
ValidationChangeHandler = Callable[[bool, Dict[str, str]], None]


@dataclass(frozen=True)
class AutoSaveOptions:
    """Auto-save side channel settings.

    Attributes:
        enabled: Whether the auto-save timer is armed at all
        on_auto_save: Callback receiving the current data when the timer fires
        interval_ms: Quiet period before an auto-save fires
    """
    enabled: bool = False
    on_auto_save: Optional[AutoSaveHandler] = None
    interval_ms: float = DEFAULT_AUTO_SAVE_INTERVAL_MS

    def __post_init__(self):
        if self.interval_ms <= 0:
            raise ValueError(f"auto-save interval_ms must be > 0, got {self.interval_ms}")
        if self.enabled and self.on_auto_save is None:
            raise ValueError("auto-save is enabled but no on_auto_save callback was given")

    @property
    def active(self) -> bool:
        return self.enabled and self.on_auto_save is not None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AutoSaveOptions":
        """Create AutoSaveOptions from ``{enabled, onAutoSave, interval}``."""
        interval = data.get("interval")
        return cls(
            enabled=bool(data.get("enabled", False)),
            on_auto_save=data.get("onAutoSave", data.get("on_auto_save")),
            interval_ms=DEFAULT_AUTO_SAVE_INTERVAL_MS if interval is None else interval,
        )


@dataclass(frozen=True)
class FormOptions:
    """Options recognised by FormController.

    Attributes:
        schema: Validation schema (Schema object or JSON Schema mapping)
        initial_data: Starting field values; also the first dirty baseline
        on_submit: Default submit handler, called with (data, actions)
        on_validation_change: Called with (is_valid, errors) after every
            whole-form validation pass
        validate_on_change: Re-validate the form when typing settles
        validate_on_blur: Validate a field immediately when it loses focus
        debounce_ms: Quiet period before change-validation runs
        auto_save: Auto-save side channel settings
        reset_on_submit: Reset to the initial data after a successful submit
        focus_on_error: Focus the first invalid field after a rejected submit

    Examples:
        >>> options = FormOptions.from_dict({"debounceMs": 500, "resetOnSubmit": True})
        >>> options.debounce_ms, options.reset_on_submit
        (500, True)
    """
    schema: Optional[SchemaLike] = None
    initial_data: Dict[str, Any] = field(default_factory=dict)
    on_submit: Optional[SubmitHandler] = None
    on_validation_change: Optional[ValidationChangeHandler] = None
    validate_on_change: bool = True
    validate_on_blur: bool = True
    debounce_ms: float = DEFAULT_DEBOUNCE_MS
    auto_save: AutoSaveOptions = field(default_factory=AutoSaveOptions)
    reset_on_submit: bool = False
    focus_on_error: bool = True

    def __post_init__(self):
        if self.debounce_ms < 0:
            raise ValueError(f"debounce_ms must be >= 0, got {self.debounce_ms}")
        if self.initial_data is None:
            object.__setattr__(self, "initial_data", {})
        elif not isinstance(self.initial_data, Mapping):
            raise ValueError(
                f"initial_data must be a mapping, got {type(self.initial_data).__name__}"
            )
        if isinstance(self.auto_save, Mapping):
            object.__setattr__(self, "auto_save", AutoSaveOptions.from_dict(self.auto_save))
        if isinstance(self.schema, Mapping):
            object.__setattr__(self, "schema", as_schema(self.schema))

    def with_overrides(self, **overrides: Any) -> "FormOptions":
        """Copy with some options replaced."""
        return replace(self, **overrides)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FormOptions":
        """Create FormOptions from camelCase (or snake_case) option names.

        Raises:
            ValueError: If an option name is not recognised
        """
        known = {f.name for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            name = _CAMEL_TO_SNAKE.get(key, key)
            if name not in known:
                raise ValueError(f"Unknown form option: {key!r}")
            kwargs[name] = value
        return cls(**kwargs)


_CAMEL_TO_SNAKE = {
    "initialData": "initial_data",
    "onSubmit": "on_submit",
    "onValidationChange": "on_validation_change",
    "validateOnChange": "validate_on_change",
    "validateOnBlur": "validate_on_blur",
    "debounceMs": "debounce_ms",
    "autoSave": "auto_save",
    "resetOnSubmit": "reset_on_submit",
    "focusOnError": "focus_on_error",
}


__all__ = [
    "DEFAULT_DEBOUNCE_MS",
    "DEFAULT_AUTO_SAVE_INTERVAL_MS",
    "AutoSaveOptions",
    "FormOptions",
    "SubmitHandler",
    "AutoSaveHandler",
    "ValidationChangeHandler",
]
