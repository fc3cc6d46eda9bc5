"""
Contains the error types of the validation framework.
`ValidationError` is a plain data record describing a failed rule. The exception classes are raised only for
programming errors (invalid rule specifications, writes to a frozen registry) or on explicit request
(`TargetValidationResult.raise_for_errors`).
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


class ErrorSeverity(str, Enum):
    """
    The severity of a validation error.
    """

    ERROR = "error"


# pylint: disable=too-many-instance-attributes
@dataclass
class ValidationError:
    """
    Describes exactly one failed rule. `message` is the final, field attributed message
    (e.g. `[Email]: Must be a valid email address`) while `rule_message` holds what the rule itself reported.
    """

    message: str
    rule_message: str
    rule_name: Optional[str] = None
    raw_rule_name: Optional[str] = None
    params: tuple[Any, ...] = ()
    field_name: str = ""
    property_name: str = ""
    translated_property_name: str = ""
    value: Any = None
    severity: ErrorSeverity = ErrorSeverity.ERROR
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __str__(self):
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON friendly dictionary"""
        return {
            "message": self.message,
            "ruleMessage": self.rule_message,
            "ruleName": self.rule_name,
            "rawRuleName": self.raw_rule_name,
            "params": list(self.params),
            "fieldName": self.field_name,
            "propertyName": self.property_name,
            "translatedPropertyName": self.translated_property_name,
            "value": repr(self.value),
            "severity": self.severity.value,
            "timestamp": self.timestamp.isoformat(),
        }


class RVFrameworkError(Exception):
    """
    Base class of every exception raised by this package.
    """


class RuleParseError(RVFrameworkError, ValueError):
    """
    Raised if a rule specification cannot be turned into an executable rule.
    """

    def __init__(self, message: str, spec: Any = None):
        super().__init__(message)
        self.spec = spec


class UnknownRuleError(RuleParseError):
    """
    Raised if a rule specification names a rule which is not registered.
    """

    def __init__(self, rule_name: str, spec: Any = None):
        super().__init__(f"Unknown rule '{rule_name}' in rule specification {spec!r}", spec=spec)
        self.rule_name = rule_name


class RegistryFrozenError(RVFrameworkError, RuntimeError):
    """
    Raised if someone tries to register a rule on a frozen registry.
    """


class RuleFailure(RVFrameworkError):
    """
    A rule function may raise this exception (or a `ValueError`) instead of returning a message. The message of the
    exception becomes the failure message.
    """


class AggregateValidationError(RVFrameworkError):
    """
    Contains every error of a failed target validation.
    """

    def __init__(self, message: str, errors: list[ValidationError]):
        super().__init__(message)
        self.errors = errors

    def __str__(self):
        details = "\n".join(f"  - {error.message}" for error in self.errors)
        return f"{self.args[0]}\n{details}" if details else self.args[0]
