"""
Contains the ValidationContext which is passed to every rule function.
"""
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, Optional

from .types import UNDEFINED, Translator

if TYPE_CHECKING:
    from .execution import Validator
    from .parser import SanitizedRule


# pylint: disable=too-many-instance-attributes
@dataclass(frozen=True)
class ValidationContext:
    """
    Everything a rule function gets to know about the current validation.
    `context` is arbitrary data of the caller, `data` is the whole record during target validation.
    `rules` are all sanitized rules of the current rule list and `validator` is the running `Validator`, which is what
    combinators use to evaluate their children.
    """

    value: Any = UNDEFINED
    params: tuple[Any, ...] = ()
    field_name: str = ""
    property_name: str = ""
    translated_property_name: str = ""
    context: Any = None
    data: Any = None
    translator: Optional[Translator] = None
    rule_name: Optional[str] = None
    raw_rule_name: Optional[str] = None
    rules: tuple["SanitizedRule", ...] = field(default=(), repr=False)
    validator: Optional["Validator"] = field(default=None, repr=False, compare=False)

    @property
    def label(self) -> str:
        """The name under which the field is shown to users"""
        return self.translated_property_name or self.property_name or self.field_name

    def for_rule(self, rule: "SanitizedRule") -> "ValidationContext":
        """Returns a copy of this context describing the invocation of `rule`"""
        return replace(self, params=rule.params, rule_name=rule.rule_name, raw_rule_name=rule.raw_rule_name)

    def with_value(self, value: Any) -> "ValidationContext":
        """Returns a copy of this context for another value (e.g. an element of an array)"""
        return replace(self, value=value)

    def translate(self, key: str, **data: Any) -> str:
        """
        Shortcut for rule functions: translates `key`, interpolating the field label, the value, the parameters and
        the rule name as well as `data`.
        """
        assert self.translator is not None, "A validation context always carries a translator"
        interpolation = {
            "field": self.label,
            "value": self.value,
            "params": list(self.params),
            "rule": self.rule_name,
        }
        interpolation.update(data)
        return self.translator.translate(key, interpolation)
