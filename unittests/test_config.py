import pytest
from pydantic import ValidationError as PydanticValidationError

from rvframework import Validator, ValidatorSettings, get_settings


class TestValidatorSettings:
    def test_defaults(self, monkeypatch):
        for name in ("MESSAGE_SEPARATOR", "RAISE_ON_INVALID_RULE", "RULE_TIMEOUT", "ERROR_MESSAGE_FORMAT"):
            monkeypatch.delenv(f"RVFRAMEWORK_{name}", raising=False)
        settings = ValidatorSettings()
        assert settings.message_separator == "; "
        assert settings.raise_on_invalid_rule is False
        assert settings.rule_timeout is None
        assert settings.error_message_format == "[{field}]: {message}"

    def test_environment_variables(self, monkeypatch):
        monkeypatch.setenv("RVFRAMEWORK_RULE_TIMEOUT", "2.5")
        monkeypatch.setenv("RVFRAMEWORK_RAISE_ON_INVALID_RULE", "true")
        monkeypatch.setenv("RVFRAMEWORK_MESSAGE_SEPARATOR", " / ")
        settings = ValidatorSettings()
        assert settings.rule_timeout == 2.5
        assert settings.raise_on_invalid_rule is True
        assert settings.message_separator == " / "

    def test_env_file_of_the_working_directory_is_ignored(self, monkeypatch, tmp_path):
        monkeypatch.delenv("RVFRAMEWORK_MESSAGE_SEPARATOR", raising=False)
        (tmp_path / ".env").write_text("RVFRAMEWORK_MESSAGE_SEPARATOR=' | '\n", encoding="utf-8")
        monkeypatch.chdir(tmp_path)
        assert ValidatorSettings().message_separator == "; "

    def test_env_file_chosen_by_the_caller(self, monkeypatch, tmp_path):
        monkeypatch.delenv("RVFRAMEWORK_MESSAGE_SEPARATOR", raising=False)
        env_file = tmp_path / "validation.env"
        env_file.write_text("RVFRAMEWORK_MESSAGE_SEPARATOR=' | '\n", encoding="utf-8")
        assert ValidatorSettings(_env_file=env_file).message_separator == " | "

    @pytest.mark.parametrize("timeout", [0, -1])
    def test_rule_timeout_must_be_positive(self, timeout):
        with pytest.raises(PydanticValidationError):
            ValidatorSettings(rule_timeout=timeout)

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    def test_validator_uses_the_cached_settings_by_default(self, registry):
        assert Validator(registry=registry).settings is get_settings()

    async def test_separator_is_used_for_invalid_rules(self, registry):
        validator = Validator(registry=registry, settings=ValidatorSettings(message_separator=" & "))
        result = await validator.validate("x", ["Nope", "AlsoNope"])
        assert result.error.rule_message == "Invalid rule: Nope & Invalid rule: AlsoNope"
