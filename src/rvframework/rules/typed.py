"""
Contains rules which check the type of the value: `String`, `Number`, `Boolean`, `Array` and `Object`.
"""
from collections.abc import Mapping
from typing import Any, Callable, Union

from typeguard import TypeCheckError, check_type

from rvframework.registry import default_registry
from rvframework.utils.query_object import is_record


def _type_rule(expected_type: Any, message_key: str) -> Callable:
    def type_rule(ctx) -> Union[bool, str]:
        try:
            check_type(ctx.value, expected_type)
        except TypeCheckError:
            return ctx.translate(message_key)
        return True

    return type_rule


def _number(ctx) -> Union[bool, str]:
    # bool is a subclass of int but not a number in the sense of this rule
    if isinstance(ctx.value, bool):
        return ctx.translate("validator.number")
    return _type_rule(Union[int, float], "validator.number")(ctx)


def _object(ctx) -> Union[bool, str]:
    if isinstance(ctx.value, Mapping) or is_record(ctx.value):
        return True
    return ctx.translate("validator.object")


default_registry.register("String", _type_rule(str, "validator.string"))
default_registry.register("Number", _number)
default_registry.register("Boolean", _type_rule(bool, "validator.boolean"))
default_registry.register("Array", _type_rule(Union[list, tuple], "validator.array"))
default_registry.register("Object", _object)
