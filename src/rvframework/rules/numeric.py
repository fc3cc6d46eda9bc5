"""
Contains the range rule `NumberBetween[min,max]`.
"""
import math
from decimal import Decimal, InvalidOperation
from typing import Any, Optional, Union

from rvframework.registry import default_registry


def to_number(value: Any) -> Optional[float]:
    """
    Converts ints, floats, Decimals and numeric strings into a float. Returns None for everything else (incl. bool
    and NaN).
    """
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    elif isinstance(value, str) and value.strip():
        try:
            number = float(Decimal(value.strip()))
        except InvalidOperation:
            return None
    else:
        return None
    return None if math.isnan(number) else number


@default_registry.rule("NumberBetween")
def number_between(ctx) -> Union[bool, str]:
    """
    Both bounds are inclusive.
    """
    if len(ctx.params) < 2:
        return ctx.translate("validator.invalidRuleParams")
    minimum, maximum = to_number(ctx.params[0]), to_number(ctx.params[1])
    if minimum is None or maximum is None or minimum > maximum:
        return ctx.translate("validator.invalidRuleParams")
    number = to_number(ctx.value)
    if number is not None and minimum <= number <= maximum:
        return True
    return ctx.translate("validator.numberBetween", min=ctx.params[0], max=ctx.params[1])
