"""Schema validation adapter for formstate.

This module normalizes the outcome of a declarative schema into a uniform
result, at both whole-form and single-field granularity:

- ``validate(schema, data)`` runs the schema over the complete candidate
  object and returns a ValidationResult holding every violation grouped by
  field path, plus the first message per field for display.
- ``validate_field(schema, field_name, value, rest)`` substitutes ``value``
  into ``rest`` and runs the same whole-object rules, so cross-field rules
  see the other fields' current values.

Any object implementing the Schema protocol can be plugged in. JsonSchema is
the bundled implementation; it wraps the jsonschema library and translates
its errors into FieldError records with specific codes and messages.
Plain dict JSON Schemas are accepted wherever a schema is expected.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from jsonschema import Draft7Validator, ValidationError, validators
from typing_extensions import Protocol, runtime_checkable

from formstate.errors import FieldError
from formstate.types import FORM_ERROR_KEY, FieldErrorCode

logger = logging.getLogger(__name__)

FIELDS_MATCH = "fieldsMatch"
ERROR_MESSAGES = "errorMessages"

GENERIC_FORM_ERROR = "Validation failed"
GENERIC_FIELD_ERROR = "Validation error"


@dataclass(frozen=True)
class ValidationResult:
    """Result of validating form data against a schema.

    Attributes:
        success: Whether the data passed all validation checks
        data: The validated data (only set on success)
        errors: Every message per field path, in violation order
        field_errors: The first message per field path, for display
        details: Every violation as a FieldError

    Examples:
        >>> schema = JsonSchema({'type': 'object', 'required': ['name']})
        >>> result = schema.validate({})
        >>> result.success
        False
        >>> result.field_errors['name']
        "Field 'name' is required but was not provided"
    """
    success: bool
    data: Optional[Dict[str, Any]] = None
    errors: Dict[str, List[str]] = field(default_factory=dict)
    field_errors: Dict[str, str] = field(default_factory=dict)
    details: List[FieldError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return self.success

    @property
    def missing_fields(self) -> List[str]:
        """Paths of required fields that were not provided."""
        return [d.path for d in self.details if d.code == FieldErrorCode.REQUIRED]

    @property
    def invalid_fields(self) -> List[str]:
        """Paths of provided fields that failed a rule."""
        return [d.path for d in self.details if d.code != FieldErrorCode.REQUIRED]

    def errors_for(self, field_name: str) -> List[str]:
        """Every message attributed to ``field_name`` or a path nested under it."""
        prefix = f"{field_name}."
        return [
            d.message
            for d in self.details
            if (d.path or FORM_ERROR_KEY) == field_name or d.path.startswith(prefix)
        ]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dict for serialization."""
        result: Dict[str, Any] = {"success": self.success}
        if self.success:
            result["data"] = self.data
        else:
            result["errors"] = {path: list(messages) for path, messages in self.errors.items()}
            result["fieldErrors"] = dict(self.field_errors)
            result["details"] = [d.to_dict() for d in self.details]
        return result

    @classmethod
    def ok(cls, data: Dict[str, Any]) -> "ValidationResult":
        return cls(success=True, data=data)

    @classmethod
    def from_details(cls, details: Iterable[FieldError]) -> "ValidationResult":
        """Group violations by path; the first message per path wins for display."""
        details = list(details)
        errors: Dict[str, List[str]] = {}
        field_errors: Dict[str, str] = {}
        for detail in details:
            key = detail.path or FORM_ERROR_KEY
            errors.setdefault(key, []).append(detail.message)
            field_errors.setdefault(key, detail.message)
        return cls(
            success=not details,
            errors=errors,
            field_errors=field_errors,
            details=details,
        )

    @classmethod
    def internal_error(cls, message: str = GENERIC_FORM_ERROR) -> "ValidationResult":
        """Failed result standing in for an exception raised by the schema."""
        return cls.from_details(
            [FieldError(path=FORM_ERROR_KEY, code=FieldErrorCode.INTERNAL, message=message)]
        )


@dataclass(frozen=True)
class FieldValidationResult:
    """Outcome of validating a single field."""
    is_valid: bool
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"isValid": self.is_valid}
        if self.error is not None:
            result["error"] = self.error
        return result


@runtime_checkable
class Schema(Protocol):
    """Contract every pluggable schema satisfies."""

    def validate(self, data: Mapping[str, Any]) -> ValidationResult:
        ...

    def validate_field(
        self,
        field_name: str,
        value: Any,
        data: Optional[Mapping[str, Any]] = None,
    ) -> FieldValidationResult:
        ...


SchemaLike = Union[Schema, Mapping[str, Any]]


def build_candidate(
    field_name: str,
    value: Any,
    data: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Copy ``data`` with ``value`` substituted for ``field_name``."""
    candidate = dict(data or {})
    candidate[field_name] = value
    return candidate


def field_result(result: ValidationResult, field_name: str) -> FieldValidationResult:
    """Reduce a whole-object result to the verdict for one field.

    Violations on unrelated fields do not make ``field_name`` invalid.
    """
    if result.success:
        return FieldValidationResult(is_valid=True)
    messages = result.errors_for(field_name)
    if messages:
        return FieldValidationResult(is_valid=False, error=messages[0])
    return FieldValidationResult(is_valid=True)


def _fields_match(validator, rules, instance, schema):
    """``fieldsMatch`` keyword: each rule's field must equal its ``equals`` field."""
    if not validator.is_type(instance, "object"):
        return
    for rule in rules:
        field_name = rule["field"]
        other = rule["equals"]
        if instance.get(field_name) != instance.get(other):
            yield ValidationError(
                rule.get("message", f"Field '{field_name}' must match '{other}'"),
                path=(field_name,),
            )


FormSchemaValidator = validators.extend(Draft7Validator, {FIELDS_MATCH: _fields_match})


class JsonSchema:
    """JSON Schema backed implementation of the Schema protocol.

    Wraps a Draft 7 validator (with format checking enabled and the
    ``fieldsMatch`` cross-field keyword added) and translates its errors
    into FieldError records. Messages can be overridden per keyword with an
    ``errorMessages`` mapping on any subschema.

    Attributes:
        schema: The JSON Schema definition to validate against
        validator: The underlying jsonschema validator instance

    Examples:
        >>> schema = JsonSchema({
        ...     'type': 'object',
        ...     'properties': {
        ...         'password': {'type': 'string'},
        ...         'confirmPassword': {'type': 'string'}
        ...     },
        ...     'fieldsMatch': [{'field': 'confirmPassword', 'equals': 'password',
        ...                      'message': 'Passwords do not match'}]
        ... })
        >>> schema.validate_field('confirmPassword', '', {'password': 'abc'}).error
        'Passwords do not match'
    """

    def __init__(self, schema: Mapping[str, Any]) -> None:
        """Initialize with a JSON Schema.

        Raises:
            jsonschema.SchemaError: If the provided schema is invalid
        """
        self.schema = dict(schema)
        FormSchemaValidator.check_schema(self.schema)
        self.validator = FormSchemaValidator(
            self.schema, format_checker=Draft7Validator.FORMAT_CHECKER
        )

    @property
    def fields(self) -> List[str]:
        """Top-level property names, in declaration order."""
        return list(self.schema.get("properties", {}))

    def validate(self, data: Optional[Mapping[str, Any]]) -> ValidationResult:
        candidate = {} if data is None else dict(data)
        details = [self._translate_error(e) for e in self.validator.iter_errors(candidate)]
        if not details:
            return ValidationResult.ok(dict(candidate))
        return ValidationResult.from_details(details)

    def validate_field(
        self,
        field_name: str,
        value: Any,
        data: Optional[Mapping[str, Any]] = None,
    ) -> FieldValidationResult:
        result = self.validate(build_candidate(field_name, value, data))
        return field_result(result, field_name)

    def __repr__(self) -> str:
        return f"JsonSchema(fields={self.fields!r})"

    def _translate_error(self, error: ValidationError) -> FieldError:
        """Translate a jsonschema ValidationError to a FieldError.

        Error mapping:
            - 'required' property errors -> REQUIRED
            - 'type' errors -> INVALID_TYPE
            - 'format' and 'pattern' errors -> INVALID_FORMAT
            - 'enum', 'const' and numeric bounds -> INVALID_VALUE
            - 'minLength' / 'minItems' errors -> TOO_SHORT
            - 'maxLength' / 'maxItems' errors -> TOO_LONG
            - 'fieldsMatch' errors -> MISMATCH
            - Other constraint errors -> CUSTOM
        """
        path = ".".join(str(p) for p in error.path)

        if error.validator == "required":
            missing_prop = self._missing_property(error)
            full_path = f"{path}.{missing_prop}" if path else missing_prop
            return FieldError(
                path=full_path,
                code=FieldErrorCode.REQUIRED,
                message=self._custom_message(error, missing_prop)
                or f"Field '{full_path}' is required but was not provided",
                expected="required field",
            )

        if error.validator == FIELDS_MATCH:
            return FieldError(
                path=path,
                code=FieldErrorCode.MISMATCH,
                message=error.message,
                received=error.instance.get(path) if isinstance(error.instance, dict) else None,
            )

        custom = self._custom_message(error)

        if error.validator == "type":
            expected_type = error.validator_value
            received_type = type(error.instance).__name__
            return FieldError(
                path=path,
                code=FieldErrorCode.INVALID_TYPE,
                message=custom
                or f"Field '{path}' has invalid type. Expected {expected_type}, got {received_type}",
                expected=expected_type,
                received=received_type,
            )

        if error.validator == "format":
            return FieldError(
                path=path,
                code=FieldErrorCode.INVALID_FORMAT,
                message=custom
                or f"Field '{path}' has invalid format. Expected format: {error.validator_value}",
                expected=error.validator_value,
                received=error.instance,
            )

        if error.validator == "pattern":
            return FieldError(
                path=path,
                code=FieldErrorCode.INVALID_FORMAT,
                message=custom
                or f"Field '{path}' does not match required pattern: {error.validator_value}",
                expected=f"pattern: {error.validator_value}",
                received=error.instance,
            )

        if error.validator in ("enum", "const"):
            return FieldError(
                path=path,
                code=FieldErrorCode.INVALID_VALUE,
                message=custom
                or f"Field '{path}' has invalid value. Must be one of: {error.validator_value}",
                expected=error.validator_value,
                received=error.instance,
            )

        if error.validator in ("minLength", "minItems"):
            unit = "characters" if error.validator == "minLength" else "items"
            actual = len(error.instance) if error.instance else 0
            return FieldError(
                path=path,
                code=FieldErrorCode.TOO_SHORT,
                message=custom
                or f"Field '{path}' is too short. Minimum length: {error.validator_value}, got: {actual}",
                expected=f"minimum {error.validator_value} {unit}",
                received=f"{actual} {unit}",
            )

        if error.validator in ("maxLength", "maxItems"):
            unit = "characters" if error.validator == "maxLength" else "items"
            actual = len(error.instance) if error.instance else 0
            return FieldError(
                path=path,
                code=FieldErrorCode.TOO_LONG,
                message=custom
                or f"Field '{path}' is too long. Maximum length: {error.validator_value}, got: {actual}",
                expected=f"maximum {error.validator_value} {unit}",
                received=f"{actual} {unit}",
            )

        if error.validator in ("minimum", "maximum", "exclusiveMinimum", "exclusiveMaximum"):
            return FieldError(
                path=path,
                code=FieldErrorCode.INVALID_VALUE,
                message=custom
                or f"Field '{path}' violates {error.validator} constraint: {error.validator_value}",
                expected=f"{error.validator}: {error.validator_value}",
                received=error.instance,
            )

        return FieldError(
            path=path,
            code=FieldErrorCode.CUSTOM,
            message=custom or f"Field '{path}' validation failed: {error.message}",
            expected=error.validator_value,
            received=error.instance,
        )

    @staticmethod
    def _missing_property(error: ValidationError) -> str:
        # jsonschema reports one error per missing property: "'name' is a required property"
        for prop in error.validator_value:
            if error.message == f"{prop!r} is a required property":
                return prop
        return error.message.split("'")[1] if "'" in error.message else "field"

    @staticmethod
    def _custom_message(error: ValidationError, missing_prop: Optional[str] = None) -> Optional[str]:
        """Look up an ``errorMessages`` override for this violation."""
        subschema = error.schema if isinstance(error.schema, dict) else {}
        keyword = error.validator
        if missing_prop is not None:
            subschema = subschema.get("properties", {}).get(missing_prop, {})
            if not isinstance(subschema, dict):
                return None
        messages = subschema.get(ERROR_MESSAGES)
        if isinstance(messages, str):
            return messages
        if isinstance(messages, dict):
            return messages.get(keyword)
        return None


def as_schema(schema: SchemaLike) -> Schema:
    """Wrap a plain JSON Schema mapping; pass Schema objects through."""
    if isinstance(schema, Mapping):
        return JsonSchema(schema)
    return schema


def validate(schema: SchemaLike, data: Optional[Mapping[str, Any]]) -> ValidationResult:
    """Validate a complete candidate object.

    Never raises for a well-formed schema: an exception from the schema is
    logged and reported as a single generic error under the "form" key.

    Examples:
        >>> schema = {'type': 'object', 'properties': {'email': {'type': 'string'}}, 'required': ['email']}
        >>> validate(schema, {'email': 'test@example.com'}).success
        True
        >>> validate(schema, None).field_errors
        {'email': "Field 'email' is required but was not provided"}
    """
    resolved = as_schema(schema)
    candidate = {} if data is None else data
    try:
        return resolved.validate(candidate)
    except Exception:
        logger.exception("Schema %r raised while validating form data", resolved)
        return ValidationResult.internal_error()


def validate_field(
    schema: SchemaLike,
    field_name: str,
    value: Any,
    rest: Optional[Mapping[str, Any]] = None,
) -> FieldValidationResult:
    """Validate one field in the context of the rest of the form data."""
    resolved = as_schema(schema)
    try:
        return resolved.validate_field(field_name, value, rest)
    except Exception:
        logger.exception("Schema %r raised while validating field %r", resolved, field_name)
        return FieldValidationResult(is_valid=False, error=GENERIC_FIELD_ERROR)


__all__ = [
    "FORM_ERROR_KEY",
    "ValidationResult",
    "FieldValidationResult",
    "Schema",
    "SchemaLike",
    "JsonSchema",
    "as_schema",
    "build_candidate",
    "field_result",
    "validate",
    "validate_field",
]
