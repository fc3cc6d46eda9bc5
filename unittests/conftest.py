from typing import Any, Callable

import pytest

from rvframework import RuleRegistry, Validator, ValidatorSettings, default_registry


@pytest.fixture
def registry() -> RuleRegistry:
    """An isolated copy of the default registry; registrations in a test do not leak into others"""
    return default_registry.copy()


@pytest.fixture
def settings() -> ValidatorSettings:
    return ValidatorSettings()


@pytest.fixture
def validator(registry: RuleRegistry, settings: ValidatorSettings) -> Validator:
    return Validator(registry=registry, settings=settings)


class CallLog:
    """Records which instrumented rules got invoked (in invocation order)"""

    def __init__(self):
        self.calls: list[str] = []

    def rule(self, name: str, result: Any = True) -> Callable:
        def instrumented_rule(ctx):
            self.calls.append(name)
            return result

        instrumented_rule.__name__ = name
        return instrumented_rule


@pytest.fixture
def call_log() -> CallLog:
    return CallLog()
