"""Validation rules applied to coerced field values."""

import re
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Iterable, Optional, Union

from .errors import SchemaError, ValidationError

if TYPE_CHECKING:
    from .schema import FieldDescriptor


# --- Outcome ---
class ValidationResult:
    """Outcome of a single rule: valid, or invalid with a message."""

    __slots__ = ("is_valid", "error_message")

    def __init__(self, is_valid: bool, error_message: Optional[str] = None) -> None:
        self.is_valid = is_valid
        self.error_message = error_message

    @classmethod
    def valid(cls) -> "ValidationResult":
        return cls(True)

    @classmethod
    def invalid(cls, message: str) -> "ValidationResult":
        return cls(False, message)

    def __bool__(self) -> bool:
        return self.is_valid

    def __repr__(self) -> str:
        if self.is_valid:
            return "ValidationResult.valid()"
        return f"ValidationResult.invalid({self.error_message!r})"


# --- Rule Contract ---
class ValidationRule(ABC):
    """A pure predicate over one value.

    Rules receive the value *after* type coercion and must not have side
    effects. Parameterized rules take their parameters in ``__init__``.
    """

    @abstractmethod
    def validate(self, value: Any) -> ValidationResult:
        """Return ``ValidationResult.valid()`` or ``ValidationResult.invalid(msg)``."""

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


# --- Built-in Rules ---
# Local part and dotted domain with a 2+ letter TLD.
_EMAIL_RE = re.compile(
    r"^[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+"
    r"@[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
    r"(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)*"
    r"\.[A-Za-z]{2,}$"
)


class EmailRule(ValidationRule):
    def validate(self, value: Any) -> ValidationResult:
        if not isinstance(value, str):
            return ValidationResult.invalid("Email must be a string")
        local, _, _ = value.partition("@")
        if (
            not _EMAIL_RE.match(value)
            or local.startswith(".")
            or local.endswith(".")
            or ".." in value
        ):
            return ValidationResult.invalid("Invalid email format")
        return ValidationResult.valid()


class RangeRule(ValidationRule):
    """Accept numbers (or numeric strings) within ``[min_value, max_value]``."""

    __slots__ = ("min_value", "max_value")

    def __init__(
        self, min_value: Union[int, float], max_value: Union[int, float]
    ) -> None:
        self.min_value = min_value
        self.max_value = max_value

    def validate(self, value: Any) -> ValidationResult:
        number = _as_number(value)
        if number is None:
            return ValidationResult.invalid("Value must be numeric")
        if number < self.min_value or number > self.max_value:
            return ValidationResult.invalid(
                f"Value must be between {self.min_value} and {self.max_value}"
            )
        return ValidationResult.valid()

    def __repr__(self) -> str:
        return f"RangeRule({self.min_value}, {self.max_value})"


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


class RequiredRule(ValidationRule):
    """Reject ``None`` and the empty string."""

    def validate(self, value: Any) -> ValidationResult:
        if value is None or value == "":
            return ValidationResult.invalid("Field is required")
        return ValidationResult.valid()


class LegacyValidatorRule(ValidationRule):
    """Adapt a class with a static ``validate(value)`` into a rule.

    The wrapped ``validate`` returns ``True`` when the value is acceptable
    and an error string otherwise; any other return value is reported as a
    generic failure.
    """

    __slots__ = ("validator_class",)

    def __init__(self, validator_class: type) -> None:
        if not callable(getattr(validator_class, "validate", None)):
            raise SchemaError(
                f"Validator {getattr(validator_class, '__name__', validator_class)!s} "
                "must have a static validate() method"
            )
        self.validator_class = validator_class

    def validate(self, value: Any) -> ValidationResult:
        result = self.validator_class.validate(value)
        if result is True:
            return ValidationResult.valid()
        message = result if isinstance(result, str) else "Validation failed"
        return ValidationResult.invalid(message)

    def __repr__(self) -> str:
        return f"LegacyValidatorRule({self.validator_class.__name__})"


# --- Field-level Runner ---
class FieldValidator:
    """Runs a field's rules against one value; the first failure raises."""

    def validate_field(
        self,
        field: "FieldDescriptor",
        value: Any,
        index: Optional[int] = None,
    ) -> None:
        self.apply_rules(value, field.validation_rules, field.name, index)

    def apply_rules(
        self,
        value: Any,
        rules: Iterable[ValidationRule],
        field_name: str,
        index: Optional[int] = None,
    ) -> None:
        for rule in rules:
            result = rule.validate(value)
            if not result.is_valid:
                raise ValidationError(
                    result.error_message
                    or f"Validation failed for field {field_name}",
                    field_name,
                    value,
                    index=index,
                )
