"""
Contains the handling of the skip markers `Empty`, `Nullable` and `Optional`. These rules never fail. If one of them
is part of a rule list and its condition is met by the value, the remaining rules of the list are not evaluated.
"""
from typing import Any, Callable, Iterable

from frozendict import frozendict

from .parser import SanitizedRule
from .types import UNDEFINED

EMPTY = "Empty"
NULLABLE = "Nullable"
OPTIONAL = "Optional"

SKIP_CONDITIONS: frozendict[str, Callable[[Any], bool]] = frozendict(
    {
        EMPTY: lambda value: isinstance(value, str) and value == "",
        NULLABLE: lambda value: value is None or value is UNDEFINED,
        OPTIONAL: lambda value: value is UNDEFINED,
    }
)


def _marker_name(rule: Any) -> Any:
    if isinstance(rule, SanitizedRule):
        return rule.rule_name
    if isinstance(rule, str):
        return rule.strip()
    return None


def is_skip_marker(rule: Any) -> bool:
    """True if `rule` (a name or a sanitized rule) is one of the skip markers"""
    return _marker_name(rule) in SKIP_CONDITIONS


def should_skip(value: Any, rules: Iterable[Any]) -> bool:
    """
    Returns True if `rules` contain a skip marker whose condition is met by `value`.
    `rules` may consist of rule names or sanitized rules; anything else is ignored.
    """
    if not (value is None or value is UNDEFINED or (isinstance(value, str) and value == "")):
        return False
    for rule in rules:
        condition = SKIP_CONDITIONS.get(_marker_name(rule))
        if condition is not None and condition(value):
            return True
    return False


def always_pass(_ctx) -> bool:
    """The rule function of the skip markers; their effect lies in `should_skip`"""
    return True
