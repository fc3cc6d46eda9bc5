"""
Contains format rules.
"""
import re
from typing import Union

from rvframework.registry import default_registry

_EMAIL_PATTERN = re.compile(
    r"^[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+@[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
    r"(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)+$"
)


@default_registry.rule("Email")
def email(ctx) -> Union[bool, str]:
    value = ctx.value
    if isinstance(value, str) and len(value) <= 254 and _EMAIL_PATTERN.match(value) and ".." not in value:
        return True
    return ctx.translate("validator.email")
