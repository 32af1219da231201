"""Exception hierarchy for structmap.

Errors fall into two categories so callers can map them differently:

- ``StructInputError`` and its subclasses mean the *input* was bad
  (missing field, wrong type, failed rule, unknown key, malformed JSON).
  These are safe to show to a client.
- ``SchemaError`` means the *struct declaration* is bad (unresolvable type
  hint, a rule that is not a rule). That is an internal failure.
"""

from typing import Any, Dict, Optional


class StructError(Exception):
    """Base class for every error raised by structmap."""

    code: str = "STRUCT_ERROR"
    public: bool = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def details(self) -> Dict[str, Any]:
        return {}

    def to_dict(self) -> Dict[str, Any]:
        """Return a plain representation suitable for an error response."""
        return {"code": self.code, "message": self.message, **self.details()}


class StructInputError(StructError):
    """The raw input could not be turned into a struct."""

    code = "INVALID_INPUT"
    public = True


class FieldNotFoundError(StructInputError):
    """A required field is absent under both its name and its alias."""

    code = "FIELD_NOT_FOUND"

    def __init__(self, field_name: str, alias: Optional[str] = None) -> None:
        message = f"Missing required field: {field_name}"
        if alias:
            message += f" (alias: {alias})"
        super().__init__(message)
        self.field_name = field_name
        self.alias = alias

    def details(self) -> Dict[str, Any]:
        return {"field": self.field_name, "alias": self.alias}


class ValidationError(StructInputError):
    """A value failed a null check, type coercion, or validation rule."""

    code = "VALIDATION_FAILED"

    def __init__(
        self,
        message: str,
        field_name: str,
        value: Any,
        index: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.field_name = field_name
        self.value = value
        # Position of the offending element for array fields.
        self.index = index

    def details(self) -> Dict[str, Any]:
        details: Dict[str, Any] = {"field": self.field_name}
        if self.index is not None:
            details["index"] = self.index
        return details


class UnknownFieldError(StructInputError):
    """Strict mode found an input key that no field claims."""

    code = "UNKNOWN_FIELD"

    def __init__(self, key: str) -> None:
        super().__init__(f"Unknown field: {key}")
        self.key = key

    def details(self) -> Dict[str, Any]:
        return {"field": self.key}


class MalformedTextError(StructInputError):
    """Text could not be decoded, or did not decode to an object/array."""

    code = "MALFORMED_TEXT"


class SchemaError(StructError):
    """A struct declaration cannot be resolved."""

    code = "SCHEMA_ERROR"
