"""
Contains the outcomes of a validation process and functionality to analyze them
"""
import itertools
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, Union

from .errors import AggregateValidationError, ValidationError
from .types import UNDEFINED


def _now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SuccessResult:
    """
    The outcome of a successful single value validation. `duration` is given in seconds.
    """

    value: Any = UNDEFINED
    context: Any = None
    data: Any = None
    validated_at: datetime = field(default_factory=_now)
    duration: float = 0.0

    @property
    def success(self) -> bool:
        return True

    @property
    def error(self) -> None:
        return None


@dataclass
class FailureResult:
    """
    The outcome of a failed single value validation. It carries exactly one error.
    """

    error: ValidationError
    value: Any = UNDEFINED
    context: Any = None
    data: Any = None
    failed_at: datetime = field(default_factory=_now)
    duration: float = 0.0

    @property
    def success(self) -> bool:
        return False

    @property
    def message(self) -> str:
        return self.error.message


ValidationResult = Union[SuccessResult, FailureResult]


def _extract_property_name(validation_error: ValidationError) -> str:
    return validation_error.property_name


def _extract_rule_name(validation_error: ValidationError) -> str:
    return validation_error.rule_name or ""


# pylint: disable=too-many-instance-attributes
class TargetValidationResult:
    """
    `Validator.validate_target` will return an instance of this class. Besides the plain errors it provides
    properties for further analysis. Note that these values are calculated only if you use them.
    """

    def __init__(
        self,
        data: Any,
        errors: list[ValidationError],
        message: Optional[str] = None,
        context: Any = None,
        duration: float = 0.0,
    ):
        self.data = data
        self.errors = errors
        self.message = message
        self.context = context
        self.duration = duration
        timestamp = _now()
        self.validated_at: Optional[datetime] = None if errors else timestamp
        self.failed_at: Optional[datetime] = timestamp if errors else None

        self._errors_per_field: Optional[dict[str, list[ValidationError]]] = None
        self._all_errors: Optional[list[ValidationError]] = None
        self._num_errors_per_rule: Optional[dict[str, int]] = None

    @property
    def success(self) -> bool:
        """True if no field failed"""
        return len(self.errors) == 0

    @property
    def status(self) -> str:
        return "success" if self.success else "error"

    @property
    def failure_count(self) -> int:
        """Number of failed fields (equivalent to `len(self.errors)`)"""
        return len(self.errors)

    @property
    def all_errors(self) -> list[ValidationError]:
        """
        The errors sorted by their property name to enable grouping by it using itertools.
        `errors` itself has no defined order since the fields are validated concurrently.
        """
        if self._all_errors is None:
            self._all_errors = sorted(self.errors, key=_extract_property_name)
        return self._all_errors

    @property
    def failed_fields(self) -> list[str]:
        """The property names (paths for nested fields) of all failed fields, sorted"""
        return list(self.errors_per_field.keys())

    @property
    def errors_per_field(self) -> dict[str, list[ValidationError]]:
        """Maps the property names onto their errors"""
        if self._errors_per_field is None:
            self._errors_per_field = {
                key: list(values_iter)
                for key, values_iter in itertools.groupby(self.all_errors, key=_extract_property_name)
            }
        return self._errors_per_field

    @property
    def num_errors_per_rule(self) -> dict[str, int]:
        """Maps the rule names onto the number of fields in which they failed"""
        if self._num_errors_per_rule is None:
            self._num_errors_per_rule = {
                key: sum(1 for _ in values_iter)
                for key, values_iter in itertools.groupby(
                    sorted(self.errors, key=_extract_rule_name), key=_extract_rule_name
                )
            }
        return self._num_errors_per_rule

    def raise_for_errors(self) -> None:
        """Raises an `AggregateValidationError` containing all errors if the validation failed"""
        if not self.success:
            raise AggregateValidationError(self.message or "Validation failed", self.all_errors)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output"""
        return {
            "success": self.success,
            "status": self.status,
            "message": self.message,
            "failureCount": self.failure_count,
            "duration": self.duration,
            "errors": [error.to_dict() for error in self.all_errors],
        }

    def __repr__(self):
        return f"TargetValidationResult(success={self.success}, failure_count={self.failure_count})"
