"""
Contains the types used in the validation framework
"""
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Mapping, Optional, Protocol, TypeAlias, Union

if TYPE_CHECKING:
    from .context import ValidationContext


class _Undefined:
    """
    The type of the `UNDEFINED` sentinel. It marks a value which is absent, e.g. a field which does not exist in the
    validated record. It is distinct from `None` which is an explicitly provided null value.
    """

    _instance: Optional["_Undefined"] = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "UNDEFINED"

    def __bool__(self):
        return False

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self

    def __reduce__(self):
        return (_Undefined, ())


UNDEFINED: Any = _Undefined()


class Translator(Protocol):
    """
    A protocol for the translation collaborator. The framework uses it to resolve default messages and to localize
    property names. Missing keys must not raise: return `default` if it is given, otherwise some readable text.
    """

    def translate(self, key: str, data: Optional[Mapping[str, Any]] = None, default: Optional[str] = None) -> str:
        ...


RuleReturn: TypeAlias = Union[bool, str, None, Exception]
SyncRuleFunction: TypeAlias = Callable[["ValidationContext"], RuleReturn]
AsyncRuleFunction: TypeAlias = Callable[["ValidationContext"], Awaitable[RuleReturn]]
RuleFunction: TypeAlias = SyncRuleFunction | AsyncRuleFunction
RawRuleSpec: TypeAlias = Union[str, Mapping[str, Any], Callable[..., Any]]
ErrorMessageBuilder: TypeAlias = Callable[[str, str, Any], str]
