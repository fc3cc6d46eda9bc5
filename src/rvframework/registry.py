"""
Contains the rule registry which maps rule names onto rule functions.
"""
import logging
from typing import Callable, Optional, TypeVar

from frozendict import frozendict

from .errors import RegistryFrozenError, UnknownRuleError
from .types import RuleFunction

_logger = logging.getLogger(__name__)

RuleFunctionT = TypeVar("RuleFunctionT", bound=Callable)


class RuleRegistry:
    """
    A table of named rule functions. The table itself is an immutable `frozendict` which gets swapped on every write,
    i.e. readers always see a consistent snapshot. Registering a name twice overwrites the previous function.
    """

    def __init__(self, rules: Optional[dict[str, RuleFunction]] = None):
        self._rules: frozendict[str, RuleFunction] = frozendict()
        self._frozen = False
        for name, function in (rules or {}).items():
            self.register(name, function)

    def register(self, name: str, function: RuleFunction) -> None:
        """
        Stores `function` under `name`. The last registration of a name wins.
        """
        if not isinstance(name, str) or not name.strip():
            raise ValueError("Rule name must be a non-empty string")
        if not callable(function):
            raise TypeError(f"Rule handler of '{name}' must be callable, got {type(function).__name__}")
        if self._frozen:
            raise RegistryFrozenError(f"Cannot register rule '{name}': the registry is frozen")
        name = name.strip()
        if name in self._rules:
            _logger.debug("Overwriting rule '%s'", name)
        else:
            _logger.debug("Registering rule '%s'", name)
        self._rules = self._rules.set(name, function)

    def rule(self, name: str) -> Callable[[RuleFunctionT], RuleFunctionT]:
        """
        Decorator version of `register`:
        ```
        @registry.rule("Even")
        def even(ctx):
            return ctx.value % 2 == 0 or "Must be even"
        ```
        """

        def decorator(function: RuleFunctionT) -> RuleFunctionT:
            self.register(name, function)
            return function

        return decorator

    def lookup(self, name: str) -> RuleFunction:
        """
        Returns the function registered under `name` or raises an `UnknownRuleError`.
        """
        try:
            return self._rules[name]
        except (KeyError, TypeError) as error:
            raise UnknownRuleError(str(name), spec=name) from error

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name in self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def names(self) -> list[str]:
        """A snapshot of all registered rule names"""
        return list(self._rules.keys())

    def snapshot(self) -> frozendict[str, RuleFunction]:
        """The current (immutable) rule table"""
        return self._rules

    @property
    def frozen(self) -> bool:
        """True if no more rules can be registered"""
        return self._frozen

    def freeze(self) -> "RuleRegistry":
        """
        Makes this registry read only. Returns the registry itself to allow chaining.
        """
        self._frozen = True
        return self

    def copy(self) -> "RuleRegistry":
        """
        Returns an independent, unfrozen registry with the same rules. Useful for isolated customization in tests.
        """
        duplicate = RuleRegistry()
        duplicate._rules = self._rules  # pylint: disable=protected-access
        return duplicate

    def __repr__(self):
        return f"RuleRegistry({len(self._rules)} rules{', frozen' if self._frozen else ''})"


default_registry = RuleRegistry()


def register_rule(name: str, function: RuleFunction) -> None:
    """
    Registers a rule in the default registry.
    """
    default_registry.register(name, function)
