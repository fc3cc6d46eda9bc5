"""
Contains the settings of the validation framework. All values can be set using environment variables with the prefix
`RVFRAMEWORK_`, e.g. `RVFRAMEWORK_RULE_TIMEOUT=2.5`. No `.env` file is read unless one is passed as `_env_file`.
"""
from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ValidatorSettings(BaseSettings):
    """
    Settings of a `Validator`
    """

    model_config = SettingsConfigDict(env_prefix="RVFRAMEWORK_", extra="ignore")

    # Joins the child messages of a failed OneOf and the nested messages of ValidateNested
    message_separator: str = "; "
    # If True, invalid rule specifications raise a RuleParseError instead of producing a failed result
    raise_on_invalid_rule: bool = False
    # Maximum number of seconds a single rule invocation may take; None disables the limit
    rule_timeout: Optional[float] = None
    # Format of field attributed messages
    error_message_format: str = "[{field}]: {message}"

    @field_validator("rule_timeout")
    @classmethod
    def _check_rule_timeout(cls, value: Optional[float]) -> Optional[float]:
        if value is not None and value <= 0:
            raise ValueError("rule_timeout must be greater than zero")
        return value


@lru_cache
def get_settings() -> ValidatorSettings:
    return ValidatorSettings()
