"""
Contains utility functions to look up (possibly nested) fields of the validated records. A record may be a mapping
or any object with attributes (e.g. a dataclass instance).
"""
from collections.abc import Mapping, Sequence
from typing import Any, Optional, TypeVar, overload

from typeguard import TypeCheckError, check_type

from rvframework.types import UNDEFINED

AttrT = TypeVar("AttrT")


def is_record(value: Any) -> bool:
    """
    True if `value` can be validated as a target, i.e. it is a mapping or an object with attributes.
    """
    if isinstance(value, Mapping):
        return True
    if value is None or value is UNDEFINED or isinstance(value, (str, bytes, int, float, complex, Sequence, set)):
        return False
    if isinstance(value, type) or callable(value):
        return False
    return hasattr(value, "__dict__") or hasattr(value, "__slots__")


def _get_item(obj: Any, name: str) -> Any:
    if isinstance(obj, Mapping):
        return obj[name]
    if isinstance(obj, Sequence) and not isinstance(obj, (str, bytes)) and name.lstrip("-").isdigit():
        return obj[int(name)]
    return getattr(obj, name)


@overload
def required_field(
    obj: Any, attribute_path: str, attribute_type: type[AttrT], param_base_path: Optional[str] = None
) -> AttrT:
    ...


@overload
def required_field(obj: Any, attribute_path: str, attribute_type: Any, param_base_path: Optional[str] = None) -> Any:
    ...


def required_field(obj: Any, attribute_path: str, attribute_type: Any, param_base_path: Optional[str] = None) -> Any:
    """
    Tries to query the `obj` with the provided `attribute_path` (dot separated). If it is not existent,
    an AttributeError will be raised.
    If the field is found, the type will be checked and a TypeCheckError will be raised if the type doesn't match the
    value.
    """
    if isinstance(obj, Mapping) and attribute_path in obj:
        current_obj: Any = obj[attribute_path]
    else:
        current_obj = obj
        splitted_path = attribute_path.split(".")
        for index, attr_name in enumerate(splitted_path):
            try:
                current_obj = _get_item(current_obj, attr_name)
            except (AttributeError, KeyError, IndexError) as error:
                current_path = ".".join(splitted_path[0 : index + 1])
                if param_base_path is not None:
                    current_path = f"{param_base_path}.{current_path}"
                raise AttributeError(f"{current_path}: Not found") from error
    try:
        check_type(current_obj, attribute_type)
    except TypeCheckError as error:
        current_path = attribute_path
        if param_base_path is not None:
            current_path = f"{param_base_path}.{attribute_path}"
        raise TypeCheckError(f"{current_path}: {error}") from error
    return current_obj


def optional_field(obj: Any, attribute_path: str, attribute_type: Any = Any) -> Any:
    """
    Like `required_field` but returns `UNDEFINED` if the field does not exist.
    """
    try:
        return required_field(obj, attribute_path, attribute_type)
    except AttributeError:
        return UNDEFINED
