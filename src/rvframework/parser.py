"""
Contains the parser which turns the caller facing rule specifications into executable `SanitizedRule`s.
Four shapes are supported:
    - a bare name: `"Email"`
    - a name with bracket encoded parameters: `"MinLength[5]"`, `"NumberBetween[0,100]"`
    - a mapping with exactly one key: `{"MinLength": [5]}`
    - a callable which is used as rule function directly
"""
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping, Union

from .errors import RuleParseError, UnknownRuleError
from .registry import RuleRegistry
from .types import RawRuleSpec, RuleFunction

_logger = logging.getLogger(__name__)

_NAME_PATTERN = re.compile(r"^\s*([A-Za-z_][\w.]*)\s*(?:\[(.*)\])?\s*$", re.DOTALL)
_INT_PATTERN = re.compile(r"^[+-]?\d+$")
_FLOAT_PATTERN = re.compile(r"^[+-]?(?:\d+\.\d*|\.\d+|\d+)(?:[eE][+-]?\d+)?$")

INLINE_RULE_NAME = "InlineRule"


@dataclass(frozen=True)
class NameSpec:
    """A bare rule name, e.g. `"Email"`"""

    name: str


@dataclass(frozen=True)
class BracketSpec:
    """A rule name with bracket encoded parameters, e.g. `"MinLength[5]"`. `params_text` is the bracket content."""

    name: str
    params_text: str


@dataclass(frozen=True)
class MappingSpec:
    """A rule name mapped onto its parameters, e.g. `{"MinLength": [5]}`"""

    name: str
    params: tuple[Any, ...]


@dataclass(frozen=True)
class FunctionSpec:
    """An inline rule function"""

    function: Callable[..., Any]


RuleSpec = Union[NameSpec, BracketSpec, MappingSpec, FunctionSpec]


@dataclass(frozen=True)
class SanitizedRule:
    """
    The parsed and resolved form of a rule specification.
    `raw_rule_name` is the specification as the caller wrote it (for bracketed strings incl. the parameters).
    """

    rule_name: str
    raw_rule_name: str
    params: tuple[Any, ...]
    function: RuleFunction

    def __str__(self):
        return self.raw_rule_name


def _coerce_token(token: str) -> Any:
    if _INT_PATTERN.match(token):
        return int(token)
    if _FLOAT_PATTERN.match(token):
        return float(token)
    return token


def split_params(params_text: str, spec: Any = None) -> tuple[Any, ...]:
    """
    Splits the content of a bracket on its top level commas. Commas inside nested brackets do not split.
    Purely numeric tokens are converted into numbers.
    """
    if not params_text.strip():
        return ()
    tokens: list[str] = []
    depth = 0
    current: list[str] = []
    for char in params_text:
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
            if depth < 0:
                raise RuleParseError(f"Unbalanced brackets in rule specification {spec!r}", spec=spec)
        if char == "," and depth == 0:
            tokens.append("".join(current))
            current = []
        else:
            current.append(char)
    if depth != 0:
        raise RuleParseError(f"Unbalanced brackets in rule specification {spec!r}", spec=spec)
    tokens.append("".join(current))
    return tuple(_coerce_token(token.strip()) for token in tokens)


def _classify_string(raw: str) -> RuleSpec:
    if raw.count("[") != raw.count("]"):
        raise RuleParseError(f"Unbalanced brackets in rule specification {raw!r}", spec=raw)
    match = _NAME_PATTERN.match(raw)
    if match is None:
        raise RuleParseError(f"Malformed rule specification {raw!r}", spec=raw)
    name, params_text = match.groups()
    if params_text is None:
        return NameSpec(name)
    return BracketSpec(name, params_text)


def _classify_mapping(raw: Mapping[str, Any]) -> MappingSpec:
    if len(raw) != 1:
        raise RuleParseError(
            f"A rule mapping must contain exactly one rule name, got {len(raw)} in {dict(raw)!r}", spec=raw
        )
    ((name, params),) = raw.items()
    if not isinstance(name, str) or not name.strip():
        raise RuleParseError(f"Rule name must be a non-empty string in {dict(raw)!r}", spec=raw)
    if not isinstance(params, (list, tuple)):
        raise RuleParseError(
            f"The parameters of rule '{name}' must be given as list, got {type(params).__name__}", spec=raw
        )
    return MappingSpec(name.strip(), tuple(params))


def classify(raw: RawRuleSpec) -> RuleSpec:
    """
    Determines which of the supported shapes `raw` has. This is a pure function and does not resolve rule names.
    """
    if isinstance(raw, (NameSpec, BracketSpec, MappingSpec, FunctionSpec)):
        return raw
    if isinstance(raw, str):
        return _classify_string(raw)
    if isinstance(raw, Mapping):
        return _classify_mapping(raw)
    if callable(raw):
        return FunctionSpec(raw)
    raise RuleParseError(f"Unsupported rule specification {raw!r} of type {type(raw).__name__}", spec=raw)


def inline_rule_name(function: Callable[..., Any]) -> str:
    """
    Returns the synthetic rule name of an inline rule function. Rule objects may define a `rule_name` attribute.
    """
    name = getattr(function, "rule_name", None) or getattr(function, "__name__", None) or type(function).__name__
    if name == "<lambda>":
        return INLINE_RULE_NAME
    return name


def parse_rule(raw: RawRuleSpec, registry: RuleRegistry) -> SanitizedRule:
    """
    Parses one rule specification and resolves it using `registry`.
    Raises a `RuleParseError` (or its subclass `UnknownRuleError`) if this is not possible.
    """
    spec = classify(raw)
    if isinstance(spec, FunctionSpec):
        name = inline_rule_name(spec.function)
        return SanitizedRule(rule_name=name, raw_rule_name=name, params=(), function=spec.function)
    try:
        function = registry.lookup(spec.name)
    except UnknownRuleError as error:
        raise UnknownRuleError(spec.name, spec=raw) from error
    raw_rule_name = raw.strip() if isinstance(raw, str) else spec.name
    if isinstance(spec, NameSpec):
        return SanitizedRule(rule_name=spec.name, raw_rule_name=raw_rule_name, params=(), function=function)
    if isinstance(spec, BracketSpec):
        params = split_params(spec.params_text, spec=raw)
        return SanitizedRule(rule_name=spec.name, raw_rule_name=raw_rule_name, params=params, function=function)
    return SanitizedRule(rule_name=spec.name, raw_rule_name=spec.name, params=spec.params, function=function)


def parse_rules(
    raw_rules: Iterable[RawRuleSpec] | RawRuleSpec | None, registry: RuleRegistry
) -> tuple[list[SanitizedRule], list[tuple[Any, RuleParseError]]]:
    """
    Parses a list of rule specifications. Returns the sanitized rules in declaration order and a list of the
    specifications which could not be parsed (together with the respective error).
    A single specification is treated as a list with one element.
    """
    if raw_rules is None:
        return [], []
    if isinstance(raw_rules, (str, Mapping)) or callable(raw_rules):
        raw_rules = [raw_rules]
    sanitized: list[SanitizedRule] = []
    invalid: list[tuple[Any, RuleParseError]] = []
    for raw in raw_rules:
        try:
            sanitized.append(parse_rule(raw, registry))
        except RuleParseError as error:
            _logger.warning("Invalid rule specification %r: %s", raw, error)
            invalid.append((raw, error))
    return sanitized, invalid
