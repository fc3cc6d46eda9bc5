"""
Contains the Validator which executes rules against values and records.
"""
import asyncio
import inspect
import logging
import time
from dataclasses import replace
from typing import Any, Iterable, Mapping, Optional

from .analysis import FailureResult, SuccessResult, TargetValidationResult, ValidationResult
from .config import ValidatorSettings, get_settings
from .context import ValidationContext
from .errors import RuleFailure, RuleParseError, ValidationError
from .i18n import default_translator, interpolate
from .parser import SanitizedRule, inline_rule_name, parse_rules
from .registry import RuleRegistry, default_registry
from .skip import should_skip
from .target import run_target_validation
from .types import UNDEFINED, ErrorMessageBuilder, RawRuleSpec, Translator

_logger = logging.getLogger(__name__)


def _describe_spec(raw: Any) -> str:
    if isinstance(raw, str):
        return raw
    if isinstance(raw, Mapping):
        return str(dict(raw))
    if callable(raw):
        return inline_rule_name(raw)
    return repr(raw)


class Validator:
    """
    The Validator runs rule lists against single values (`validate`) and field rule maps against whole records
    (`validate_target`). The registry, the translator and the settings are injected; by default the process wide
    registry, the default translator and the cached settings are used.
    """

    def __init__(
        self,
        registry: Optional[RuleRegistry] = None,
        translator: Optional[Translator] = None,
        settings: Optional[ValidatorSettings] = None,
    ):
        self.registry: RuleRegistry = registry if registry is not None else default_registry
        self.translator: Translator = translator if translator is not None else default_translator
        self.settings: ValidatorSettings = settings if settings is not None else get_settings()

    def format_message(self, label: str, message: str) -> str:
        """
        Attributes `message` to the field `label`, e.g. `[Email]: Must be a valid email address`.
        Without label the message is returned unchanged.
        """
        if not label:
            return message
        return interpolate(self.settings.error_message_format, {"field": label, "message": message})

    def translate_property_name(self, field_name: str, translated_property_name: Optional[str] = None) -> str:
        """
        Returns the name under which a field is shown to users. An explicitly given name wins, then a translation
        stored under `fields.<field_name>`, then the field name itself.
        """
        if translated_property_name:
            return translated_property_name
        if not field_name:
            return ""
        return self.translator.translate(f"fields.{field_name}", {"field": field_name}, default=field_name)

    # pylint: disable=too-many-arguments
    def build_context(
        self,
        value: Any = UNDEFINED,
        *,
        field_name: str = "",
        property_name: str = "",
        translated_property_name: str = "",
        context: Any = None,
        data: Any = None,
    ) -> ValidationContext:
        field_name = field_name or property_name
        return ValidationContext(
            value=value,
            field_name=field_name,
            property_name=property_name or field_name,
            translated_property_name=self.translate_property_name(field_name, translated_property_name),
            context=context,
            data=data,
            translator=self.translator,
            validator=self,
        )

    def _build_error(self, ctx: ValidationContext, rule_message: str) -> ValidationError:
        label = ctx.label
        return ValidationError(
            message=self.format_message(label, rule_message),
            rule_message=rule_message,
            rule_name=ctx.rule_name,
            raw_rule_name=ctx.raw_rule_name,
            params=ctx.params,
            field_name=ctx.field_name,
            property_name=ctx.property_name,
            translated_property_name=label,
            value=ctx.value,
        )

    @staticmethod
    def _success(ctx: ValidationContext, start: float) -> SuccessResult:
        return SuccessResult(
            value=ctx.value, context=ctx.context, data=ctx.data, duration=time.perf_counter() - start
        )

    def _failure(self, ctx: ValidationContext, rule_message: str, start: float) -> FailureResult:
        return FailureResult(
            error=self._build_error(ctx, rule_message),
            value=ctx.value,
            context=ctx.context,
            data=ctx.data,
            duration=time.perf_counter() - start,
        )

    async def _invoke(self, rule: SanitizedRule, ctx: ValidationContext) -> Any:
        """
        Calls the rule function and awaits the result if necessary. Failures raised by the rule are returned.
        """
        timeout = self.settings.rule_timeout
        try:
            result = rule.function(ctx)
            if inspect.isawaitable(result):
                if timeout is not None:
                    result = await asyncio.wait_for(result, timeout)
                else:
                    result = await result
        except asyncio.TimeoutError:
            _logger.warning("Rule '%s' timed out after %s seconds", rule.rule_name, timeout)
            return ctx.translate("validator.timeout", timeout=timeout)
        except RuleParseError:
            raise
        except (RuleFailure, ValueError) as error:
            return error
        return result

    def _normalize(self, result: Any, ctx: ValidationContext) -> Optional[str]:
        """
        Returns None if `result` signals success, the failure message otherwise.
        """
        if result is True or result is None:
            return None
        if result is False:
            return ctx.translate("validator.invalid")
        if isinstance(result, str):
            return result if result.strip() else ctx.translate("validator.invalid")
        if isinstance(result, BaseException):
            return str(result) or ctx.translate("validator.invalid")
        raise TypeError(
            f"Rule '{ctx.rule_name}' returned {type(result).__name__}; expected bool, str, None or an exception"
        )

    async def execute(self, rule: SanitizedRule, ctx: ValidationContext) -> ValidationResult:
        """
        Executes one sanitized rule. The rule function is not invoked if the skip markers of `ctx.rules` exempt the
        value.
        """
        start = time.perf_counter()
        if should_skip(ctx.value, ctx.rules):
            _logger.debug("Skipping rule '%s' for %r", rule.rule_name, ctx.value)
            return self._success(ctx, start)
        rule_ctx = ctx.for_rule(rule)
        _logger.debug("Executing rule '%s' on field '%s'", rule.raw_rule_name, rule_ctx.field_name)
        message = self._normalize(await self._invoke(rule, rule_ctx), rule_ctx)
        if message is None:
            return self._success(rule_ctx, start)
        return self._failure(rule_ctx, message, start)

    def invalid_rules_message(self, invalid: list[tuple[Any, RuleParseError]], ctx: ValidationContext) -> str:
        """
        Returns the failure message for rule specifications which could not be parsed. Raises the first parse error
        instead if `settings.raise_on_invalid_rule` is set.
        """
        if self.settings.raise_on_invalid_rule:
            raise invalid[0][1]
        return self.settings.message_separator.join(
            ctx.translate("validator.invalidRule", rule=_describe_spec(raw)) for raw, _ in invalid
        )

    async def run_rules(
        self, rules: Iterable[RawRuleSpec] | RawRuleSpec | None, ctx: ValidationContext
    ) -> ValidationResult:
        """
        Runs `rules` against `ctx.value` in declaration order. The first failing rule stops the evaluation.
        """
        start = time.perf_counter()
        sanitized, invalid = parse_rules(rules, self.registry)
        if invalid:
            return self._failure(ctx, self.invalid_rules_message(invalid, ctx), start)
        ctx = replace(ctx, rules=tuple(sanitized))
        if not sanitized or should_skip(ctx.value, sanitized):
            return self._success(ctx, start)
        for rule in sanitized:
            result = await self.execute(rule, ctx)
            if not result.success:
                return replace(result, duration=time.perf_counter() - start)
        return self._success(ctx, start)

    # pylint: disable=too-many-arguments
    async def validate(
        self,
        value: Any = UNDEFINED,
        rules: Iterable[RawRuleSpec] | RawRuleSpec | None = None,
        *,
        field_name: str = "",
        property_name: str = "",
        translated_property_name: str = "",
        context: Any = None,
        data: Any = None,
    ) -> ValidationResult:
        """
        Validates a single value against a list of rule specifications. Returns a `SuccessResult` or a
        `FailureResult` carrying exactly one error.
        """
        ctx = self.build_context(
            value,
            field_name=field_name,
            property_name=property_name,
            translated_property_name=translated_property_name,
            context=context,
            data=data,
        )
        return await self.run_rules(rules, ctx)

    async def validate_target(
        self,
        shape: Any,
        record: Any,
        *,
        context: Any = None,
        error_message_builder: Optional[ErrorMessageBuilder] = None,
    ) -> TargetValidationResult:
        """
        Validates every field of `record` concurrently against the rules of `shape` (a `TargetShape` or a mapping of
        field names onto rule lists). Every failing field is reported.
        """
        return await run_target_validation(
            self, shape, record, context=context, error_message_builder=error_message_builder
        )

    def validate_sync(self, value: Any = UNDEFINED, rules: Any = None, **options: Any) -> ValidationResult:
        """Runs `validate` in a new event loop. Must not be called from a running event loop."""
        return asyncio.run(self.validate(value, rules, **options))

    def validate_target_sync(self, shape: Any, record: Any, **options: Any) -> TargetValidationResult:
        """Runs `validate_target` in a new event loop. Must not be called from a running event loop."""
        return asyncio.run(self.validate_target(shape, record, **options))

    @staticmethod
    def is_success(result: Any) -> bool:
        return isinstance(result, (SuccessResult, TargetValidationResult)) and result.success

    @staticmethod
    def is_failure(result: Any) -> bool:
        return isinstance(result, (FailureResult, TargetValidationResult)) and not result.success


async def validate(
    value: Any = UNDEFINED,
    rules: Iterable[RawRuleSpec] | RawRuleSpec | None = None,
    *,
    registry: Optional[RuleRegistry] = None,
    translator: Optional[Translator] = None,
    settings: Optional[ValidatorSettings] = None,
    **options: Any,
) -> ValidationResult:
    """
    Validates `value` against `rules` using a `Validator` built from the given (or default) collaborators.
    """
    return await Validator(registry, translator, settings).validate(value, rules, **options)


async def validate_target(
    shape: Any,
    record: Any,
    *,
    registry: Optional[RuleRegistry] = None,
    translator: Optional[Translator] = None,
    settings: Optional[ValidatorSettings] = None,
    **options: Any,
) -> TargetValidationResult:
    """
    Validates all fields of `record` against `shape` using a `Validator` built from the given (or default)
    collaborators.
    """
    return await Validator(registry, translator, settings).validate_target(shape, record, **options)
