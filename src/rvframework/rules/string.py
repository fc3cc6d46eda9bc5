"""
Contains the length rules `MinLength[n]` and `MaxLength[n]` for strings.
"""
from typing import Any, Optional, Union

from rvframework.registry import default_registry


def _length_param(params: tuple[Any, ...]) -> Optional[int]:
    if not params:
        return None
    length = params[0]
    if isinstance(length, bool):
        return None
    if isinstance(length, str) and length.strip().isdigit():
        length = int(length)
    if isinstance(length, float) and length.is_integer():
        length = int(length)
    if not isinstance(length, int) or length < 0:
        return None
    return length


@default_registry.rule("MinLength")
def min_length(ctx) -> Union[bool, str]:
    length = _length_param(ctx.params)
    if length is None:
        return ctx.translate("validator.invalidRuleParams")
    if isinstance(ctx.value, str) and len(ctx.value) >= length:
        return True
    return ctx.translate("validator.minLength", min_length=length)


@default_registry.rule("MaxLength")
def max_length(ctx) -> Union[bool, str]:
    length = _length_param(ctx.params)
    if length is None:
        return ctx.translate("validator.invalidRuleParams")
    if isinstance(ctx.value, str) and len(ctx.value) <= length:
        return True
    return ctx.translate("validator.maxLength", max_length=length)
