"""
Contains the default translator. Any object implementing the `rvframework.types.Translator` protocol can replace it.
"""
import logging
from typing import Any, Mapping, Optional

from frozendict import frozendict

_logger = logging.getLogger(__name__)

DEFAULT_MESSAGES: frozendict[str, str] = frozendict(
    {
        "validator.invalid": "Invalid value",
        "validator.invalidRule": "Invalid rule: {rule}",
        "validator.invalidRuleParams": "Invalid parameters {params} for rule {rule}",
        "validator.timeout": "Rule {rule} did not complete within {timeout} seconds",
        "validator.required": "This field is required",
        "validator.string": "Must be a string",
        "validator.number": "Must be a number",
        "validator.boolean": "Must be a boolean",
        "validator.array": "Must be an array",
        "validator.object": "Must be an object",
        "validator.minLength": "Must contain at least {min_length} characters",
        "validator.maxLength": "Must contain at most {max_length} characters",
        "validator.numberBetween": "Must be a number between {min} and {max}",
        "validator.email": "Must be a valid email address",
        "validator.oneOf": "None of the rules matched: {errors}",
        "validator.allOf": "{errors}",
        "validator.arrayOf": "#{index}: {errors}",
        "validator.validateNested": "Nested validation failed: {errors}",
        "validator.validateNestedInvalidType": "Must be an object, but received {received_type}",
        "validator.failedForNFields": "Validation failed for {count} field(s)",
    }
)


class _KeepMissing(dict):
    """Leaves unknown placeholders untouched instead of raising a KeyError"""

    def __missing__(self, key):
        return "{" + key + "}"


def interpolate(template: str, data: Optional[Mapping[str, Any]] = None) -> str:
    """
    Replaces `{name}` placeholders in `template` by the values in `data`.
    """
    try:
        return template.format_map(_KeepMissing(data or {}))
    except (ValueError, IndexError, AttributeError):
        _logger.debug("Could not interpolate template %r", template)
        return template


def _readable(key: str) -> str:
    last = key.rsplit(".", 1)[-1]
    words: list[str] = []
    for char in last:
        if char.isupper() and words:
            words.append(" ")
        words.append(char.lower())
    return "".join(words).replace("_", " ").strip()


class DefaultTranslator:
    """
    A simple dictionary based translator. Messages are `str.format` templates. Pass `messages` to add or override
    entries of `DEFAULT_MESSAGES`.
    """

    def __init__(self, messages: Optional[Mapping[str, str]] = None):
        self.messages: frozendict[str, str] = frozendict({**DEFAULT_MESSAGES, **(messages or {})})

    def has(self, key: str) -> bool:
        """True if there is a message for `key`"""
        return key in self.messages

    def translate(self, key: str, data: Optional[Mapping[str, Any]] = None, default: Optional[str] = None) -> str:
        """
        Returns the interpolated message stored under `key`. If there is none, `default` is returned. Without
        default a readable fallback is built from the key and the field name.
        """
        template = self.messages.get(key)
        if template is None:
            if default is not None:
                return interpolate(default, data)
            field_name = (data or {}).get("field")
            if field_name:
                return f"{_readable(key)}: {field_name}"
            return _readable(key)
        return interpolate(template, data)


default_translator = DefaultTranslator()
