"""
Contains the TargetShape, i.e. the table which maps the fields of a record onto their rule lists, and the
orchestration of target validation: every field is validated concurrently and every failure is reported.
"""
import asyncio
import dataclasses
import itertools
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterator, Mapping, Optional, Union

from frozendict import frozendict

from .analysis import TargetValidationResult
from .errors import ValidationError
from .registry import default_registry
from .skip import should_skip
from .types import ErrorMessageBuilder, RawRuleSpec
from .utils.query_object import is_record, optional_field

if TYPE_CHECKING:
    from .context import ValidationContext
    from .execution import Validator

_logger = logging.getLogger(__name__)

NESTED_RULE_NAME = "ValidateNested"


@dataclass(frozen=True)
class FieldRules:
    """
    The rules of one field. `label` is the name shown to users, `nested` the shape of the field's value if it is a
    record itself.
    """

    name: str
    rules: tuple[RawRuleSpec, ...] = ()
    label: Optional[str] = None
    nested: Optional["TargetShape"] = None

    def split_nested(self) -> tuple[list[RawRuleSpec], Optional["TargetShape"]]:
        """
        Separates `ValidateNested` rules from the other rules. Returns the other rules and the nested shape (if any).
        """
        nested = self.nested
        rules: list[RawRuleSpec] = []
        for rule in self.rules:
            if isinstance(rule, ValidateNested):
                nested = rule.shape
            else:
                rules.append(rule)
        return rules, nested


class TargetShape:
    """
    A read only descriptor table mapping field names onto their rules. It is built once per record type, either by
    explicit calls of `field`, from a mapping or by reflection over a dataclass:
    ```
    address = TargetShape("Address").field("city", ["Required", "String"], label="City")
    user = (
        TargetShape("User")
        .field("email", ["Required", "Email"])
        .field("address", ["Required"], nested=address)
    )
    ```
    """

    def __init__(self, name: str = "", error_message_builder: Optional[ErrorMessageBuilder] = None):
        self.name = name
        self.error_message_builder = error_message_builder
        self._fields: frozendict[str, FieldRules] = frozendict()

    def field(
        self,
        name: str,
        rules: Union[RawRuleSpec, list[RawRuleSpec], tuple[RawRuleSpec, ...]] = (),
        *,
        label: Optional[str] = None,
        nested: Union["TargetShape", type, None] = None,
    ) -> "TargetShape":
        """
        Adds `rules` to the field `name`. Rules of repeated calls for the same field are appended in call order.
        Returns the shape itself to allow chaining.
        """
        if not isinstance(name, str) or not name:
            raise ValueError("Field name must be a non-empty string")
        if not isinstance(rules, (list, tuple)):
            rules = [rules]
        nested_shape = TargetShape.coerce(nested) if nested is not None else None
        existing = self._fields.get(name)
        if existing is not None:
            field_rules = FieldRules(
                name=name,
                rules=existing.rules + tuple(rules),
                label=label or existing.label,
                nested=nested_shape or existing.nested,
            )
        else:
            field_rules = FieldRules(name=name, rules=tuple(rules), label=label, nested=nested_shape)
        self._fields = self._fields.set(name, field_rules)
        return self

    @property
    def fields(self) -> frozendict[str, FieldRules]:
        return self._fields

    def rules_of(self, name: str) -> tuple[RawRuleSpec, ...]:
        """The rules of field `name` (empty if the field is unknown)"""
        field_rules = self._fields.get(name)
        return field_rules.rules if field_rules is not None else ()

    def __iter__(self) -> Iterator[FieldRules]:
        return iter(self._fields.values())

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def __eq__(self, other):
        return isinstance(other, TargetShape) and self.name == other.name and self._fields == other._fields

    def __ne__(self, other):
        return not self == other

    def __hash__(self):
        return hash(self.name) + hash(tuple(self._fields.keys()))

    def __str__(self):
        return f"TargetShape({self.name or 'anonymous'}, {list(self._fields.keys())})"

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any], name: str = "") -> "TargetShape":
        """
        Builds a shape from `{field name: rules}`.
        """
        shape = cls(name)
        for field_name, rules in mapping.items():
            shape.field(field_name, rules)
        return shape

    @classmethod
    def from_dataclass(cls, dataclass_type: type) -> "TargetShape":
        """
        Builds a shape by reflection over the fields of a dataclass. The rules, the label and the nested shape are
        taken from the field metadata:
        ```
        @dataclass
        class User:
            email: str = field(metadata={"rules": ["Required", "Email"], "label": "E-Mail"})
            address: Address = field(metadata={"rules": ["Required"], "nested": Address})
        ```
        Fields without `rules` metadata are not part of the shape.
        """
        if not dataclasses.is_dataclass(dataclass_type):
            raise TypeError(f"{dataclass_type!r} is not a dataclass")
        shape = cls(getattr(dataclass_type, "__name__", ""))
        for data_field in dataclasses.fields(dataclass_type):
            metadata = data_field.metadata
            if "rules" not in metadata and "nested" not in metadata:
                continue
            shape.field(
                data_field.name,
                list(metadata.get("rules", ())),
                label=metadata.get("label"),
                nested=metadata.get("nested"),
            )
        return shape

    @classmethod
    def coerce(cls, shape: Any) -> "TargetShape":
        """
        Accepts a TargetShape, a mapping of field names onto rules or a dataclass type.
        """
        if isinstance(shape, TargetShape):
            return shape
        if isinstance(shape, Mapping):
            return cls.from_mapping(shape)
        if isinstance(shape, type) and dataclasses.is_dataclass(shape):
            return cls.from_dataclass(shape)
        raise TypeError(f"Cannot use {shape!r} as target shape")


def _received_type(value: Any) -> str:
    return "null" if value is None else type(value).__name__


class ValidateNested:
    """
    A rule validating its value as a record of the given shape. Used inside a target the nested errors are flattened
    into the parent's errors; used on a single value the nested messages are joined into one failure message.
    """

    rule_name = NESTED_RULE_NAME

    def __init__(self, shape: Any):
        self.shape = TargetShape.coerce(shape)

    async def __call__(self, ctx: "ValidationContext") -> Union[bool, str]:
        if not is_record(ctx.value):
            return ctx.translate("validator.validateNestedInvalidType", received_type=_received_type(ctx.value))
        assert ctx.validator is not None
        result = await ctx.validator.validate_target(self.shape, ctx.value, context=ctx.context)
        if result.success:
            return True
        separator = ctx.validator.settings.message_separator
        return ctx.translate(
            "validator.validateNested", errors=separator.join(error.message for error in result.all_errors)
        )

    def __repr__(self):
        return f"ValidateNested({self.shape})"


def validate_nested(shape: Any) -> ValidateNested:
    """Creates a rule validating the value against `shape`"""
    return ValidateNested(shape)


async def _validate_nested_by_name(ctx: "ValidationContext") -> Union[bool, str]:
    if not ctx.params:
        return ctx.translate("validator.invalidRule")
    return await ValidateNested(ctx.params[0])(ctx)


default_registry.register(NESTED_RULE_NAME, _validate_nested_by_name)


# pylint: disable=too-many-arguments
async def _validate_field(
    validator: "Validator",
    field_rules: FieldRules,
    record: Any,
    context: Any,
    build_message: ErrorMessageBuilder,
    path: str,
    label_path: str,
) -> list[ValidationError]:
    value = optional_field(record, field_rules.name)
    property_name = f"{path}.{field_rules.name}" if path else field_rules.name
    label = validator.translate_property_name(field_rules.name, field_rules.label)
    full_label = f"{label_path}.{label}" if label_path else label
    rules, nested = field_rules.split_nested()
    result = await validator.validate(
        value,
        rules,
        field_name=field_rules.name,
        property_name=property_name,
        translated_property_name=full_label,
        context=context,
        data=record,
    )
    if not result.success:
        error = result.error
        error.message = build_message(full_label, error.rule_message, error)
        return [error]
    if nested is None or should_skip(value, rules):
        return []
    if not is_record(value):
        rule_message = validator.translator.translate(
            "validator.validateNestedInvalidType", {"field": full_label, "received_type": _received_type(value)}
        )
        error = ValidationError(
            message="",
            rule_message=rule_message,
            rule_name=NESTED_RULE_NAME,
            raw_rule_name=NESTED_RULE_NAME,
            field_name=field_rules.name,
            property_name=property_name,
            translated_property_name=full_label,
            value=value,
        )
        error.message = build_message(full_label, rule_message, error)
        return [error]
    return await _collect_errors(validator, nested, value, context, build_message, property_name, full_label)


# pylint: disable=too-many-arguments
async def _collect_errors(
    validator: "Validator",
    shape: TargetShape,
    record: Any,
    context: Any,
    build_message: ErrorMessageBuilder,
    path: str = "",
    label_path: str = "",
) -> list[ValidationError]:
    field_errors = await asyncio.gather(
        *(
            _validate_field(validator, field_rules, record, context, build_message, path, label_path)
            for field_rules in shape
        )
    )
    return list(itertools.chain.from_iterable(field_errors))


def _default_message_builder(validator: "Validator") -> ErrorMessageBuilder:
    def build_message(label: str, message: str, _error: Any) -> str:
        return validator.format_message(label, message)

    return build_message


async def run_target_validation(
    validator: "Validator",
    shape: Any,
    record: Any,
    *,
    context: Any = None,
    error_message_builder: Optional[ErrorMessageBuilder] = None,
) -> TargetValidationResult:
    """
    Validates all fields of `record` concurrently. Fields never short-circuit each other: every failing field
    contributes exactly one error.
    """
    start = time.perf_counter()
    target_shape = TargetShape.coerce(shape)
    build_message = (
        error_message_builder or target_shape.error_message_builder or _default_message_builder(validator)
    )
    errors = await _collect_errors(validator, target_shape, record, context, build_message)
    duration = time.perf_counter() - start
    if not errors:
        _logger.debug("Validation of %s succeeded", target_shape)
        return TargetValidationResult(data=record, errors=[], context=context, duration=duration)
    message = validator.translator.translate("validator.failedForNFields", {"count": len(errors)})
    _logger.info("Validation of %s failed for %d field(s)", target_shape, len(errors))
    return TargetValidationResult(data=record, errors=errors, message=message, context=context, duration=duration)
