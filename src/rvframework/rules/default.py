"""
Contains the presence rule `Required` and the skip markers `Empty`, `Nullable` and `Optional`.
"""
from rvframework.registry import default_registry
from rvframework.skip import EMPTY, NULLABLE, OPTIONAL, always_pass
from rvframework.types import UNDEFINED


@default_registry.rule("Required")
def required(ctx):
    """
    Fails for absent values, None and the empty string. Empty collections, 0 and False are present values.
    """
    value = ctx.value
    if value is UNDEFINED or value is None or (isinstance(value, str) and value == ""):
        return ctx.translate("validator.required")
    return True


for _marker in (EMPTY, NULLABLE, OPTIONAL):
    default_registry.register(_marker, always_pass)
