"""
Contains the multi rules OneOf, AllOf and ArrayOf. They are rules themselves and can be used (and nested) anywhere a
rule is accepted: as objects (`one_of("Email", "Url")`), by name with bracket parameters (`"OneOf[Email,Url]"`) or
as mapping (`{"OneOf": ["Email", "Url"]}`).
"""
import asyncio
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Sequence, Union

from .parser import parse_rules
from .registry import default_registry
from .types import RawRuleSpec

if TYPE_CHECKING:
    from .analysis import ValidationResult
    from .context import ValidationContext
    from .errors import RuleParseError
    from .registry import RuleRegistry


def _nested_children(function: Any, params: tuple[Any, ...]) -> tuple[Any, ...]:
    if isinstance(function, MultiRule):
        return function.rules or params
    if getattr(function, "multi_rule_type", None) is not None:
        return params
    return ()


def collect_invalid(children: Sequence[RawRuleSpec], registry: "RuleRegistry") -> list[tuple[Any, "RuleParseError"]]:
    """
    Parses `children` and, recursively, the children of nested multi rules. Returns every specification which could
    not be parsed.
    """
    sanitized, invalid = parse_rules(list(children), registry)
    for rule in sanitized:
        nested = _nested_children(rule.function, rule.params)
        if nested:
            invalid.extend(collect_invalid(nested, registry))
    return invalid


class MultiRule(ABC):
    """
    Base class of the rules which evaluate child rules. Every child is evaluated as its own rule list on the value,
    so skip markers are only effective for the child they are part of.
    All children are parsed before any of them runs: a single invalid child makes the multi rule fail.
    """

    rule_name: str = ""

    def __init__(self, *rules: RawRuleSpec):
        self.rules: tuple[RawRuleSpec, ...] = rules

    async def __call__(self, ctx: "ValidationContext") -> Union[bool, str]:
        assert ctx.validator is not None, "Multi rules must be executed by a Validator"
        children = tuple(self.rules) or tuple(ctx.params)
        invalid = collect_invalid(children, ctx.validator.registry)
        if invalid:
            return ctx.validator.invalid_rules_message(invalid, ctx)
        return await self.evaluate(ctx, children)

    @abstractmethod
    async def evaluate(self, ctx: "ValidationContext", children: Sequence[RawRuleSpec]) -> Union[bool, str]:
        """
        Evaluates `children` on `ctx.value`. Returns True or a failure message.
        """

    @staticmethod
    async def _run_children(ctx: "ValidationContext", children: Sequence[RawRuleSpec]) -> list["ValidationResult"]:
        assert ctx.validator is not None, "Multi rules must be executed by a Validator"
        return await asyncio.gather(*(ctx.validator.run_rules([child], ctx) for child in children))

    def __repr__(self):
        return f"{self.rule_name}({', '.join(repr(rule) for rule in self.rules)})"


class OneOf(MultiRule):
    """
    Succeeds if at least one child succeeds. Otherwise all child messages are joined into one message.
    """

    rule_name = "OneOf"

    async def evaluate(self, ctx: "ValidationContext", children: Sequence[RawRuleSpec]) -> Union[bool, str]:
        if not children:
            return True
        results = await self._run_children(ctx, children)
        if any(result.success for result in results):
            return True
        assert ctx.validator is not None
        messages = [result.error.rule_message for result in results if result.error is not None]
        return ctx.translate("validator.oneOf", errors=ctx.validator.settings.message_separator.join(messages))


class AllOf(MultiRule):
    """
    Succeeds if every child succeeds. Otherwise the message of the first failing child (in declaration order) is
    reported.
    """

    rule_name = "AllOf"

    async def evaluate(self, ctx: "ValidationContext", children: Sequence[RawRuleSpec]) -> Union[bool, str]:
        if not children:
            return True
        results = await self._run_children(ctx, children)
        for result in results:
            if result.error is not None:
                return ctx.translate("validator.allOf", errors=result.error.rule_message)
        return True


class ArrayOf(MultiRule):
    """
    Requires the value to be an array (list or tuple) and applies AllOf(children) to every element. The error of the
    failing element with the lowest index is reported.
    """

    rule_name = "ArrayOf"

    async def evaluate(self, ctx: "ValidationContext", children: Sequence[RawRuleSpec]) -> Union[bool, str]:
        if not isinstance(ctx.value, (list, tuple)):
            return ctx.translate("validator.array")
        if not children or len(ctx.value) == 0:
            return True
        assert ctx.validator is not None
        validator = ctx.validator
        element_rule = AllOf(*children)
        results = await asyncio.gather(
            *(validator.run_rules([element_rule], ctx.with_value(item)) for item in ctx.value)
        )
        for index, result in enumerate(results):
            if result.error is not None:
                return ctx.translate("validator.arrayOf", index=index, errors=result.error.rule_message)
        return True


def one_of(*rules: RawRuleSpec) -> OneOf:
    """Creates a rule which succeeds if any of `rules` succeeds"""
    return OneOf(*rules)


def all_of(*rules: RawRuleSpec) -> AllOf:
    """Creates a rule which succeeds if all of `rules` succeed"""
    return AllOf(*rules)


def array_of(*rules: RawRuleSpec) -> ArrayOf:
    """Creates a rule which applies all of `rules` to every element of an array"""
    return ArrayOf(*rules)


def _by_name(multi_rule_type: type[MultiRule]) -> Any:
    async def multi_rule(ctx: "ValidationContext") -> Union[bool, str]:
        return await multi_rule_type()(ctx)

    multi_rule.__name__ = multi_rule_type.rule_name
    multi_rule.multi_rule_type = multi_rule_type  # type: ignore[attr-defined]
    return multi_rule


for _multi_rule_type in (OneOf, AllOf, ArrayOf):
    default_registry.register(_multi_rule_type.rule_name, _by_name(_multi_rule_type))
