"""
This package enables you to validate values and records using declarative rule lists. Rules are looked up by name
in a registry, can be combined using OneOf, AllOf and ArrayOf and may be synchronous or asynchronous.
"""

from . import rules
from .analysis import FailureResult, SuccessResult, TargetValidationResult, ValidationResult
from .combinators import AllOf, ArrayOf, MultiRule, OneOf, all_of, array_of, one_of
from .config import ValidatorSettings, get_settings
from .context import ValidationContext
from .errors import (
    AggregateValidationError,
    ErrorSeverity,
    RegistryFrozenError,
    RuleFailure,
    RuleParseError,
    RVFrameworkError,
    UnknownRuleError,
    ValidationError,
)
from .execution import Validator, validate, validate_target
from .i18n import DefaultTranslator
from .parser import SanitizedRule, parse_rule, parse_rules
from .registry import RuleRegistry, default_registry, register_rule
from .target import TargetShape, ValidateNested, validate_nested
from .types import UNDEFINED, Translator
