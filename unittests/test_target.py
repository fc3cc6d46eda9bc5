import asyncio
from dataclasses import dataclass, field
from typing import Optional

import pytest

from rvframework import (
    UNDEFINED,
    AggregateValidationError,
    DefaultTranslator,
    TargetShape,
    TargetValidationResult,
    ValidateNested,
    Validator,
    ValidatorSettings,
    array_of,
    validate_nested,
    validate_target,
)


@pytest.fixture
def address_shape() -> TargetShape:
    return TargetShape("Address").field("city", ["Required", "String"], label="City").field("zip", ["Required"])


@pytest.fixture
def user_shape(address_shape: TargetShape) -> TargetShape:
    return (
        TargetShape("User")
        .field("email", ["Required", "Email"])
        .field("name", ["Required"])
        .field("address", ["Required"], label="Address", nested=address_shape)
    )


class TestValidateTarget:
    async def test_only_the_failing_field_is_reported(self, validator: Validator):
        shape = {"email": ["Required", "Email"], "name": ["Required"]}
        result = await validator.validate_target(shape, {"email": "bad", "name": "ok"})
        assert isinstance(result, TargetValidationResult)
        assert not result.success
        assert result.status == "error"
        assert result.failure_count == 1
        (error,) = result.errors
        assert error.message == "[email]: Must be a valid email address"
        assert error.field_name == "email"
        assert error.rule_name == "Email"
        assert result.message == "Validation failed for 1 field(s)"
        assert result.failed_at is not None and result.validated_at is None

    async def test_success(self, validator: Validator):
        record = {"email": "a@b.de", "name": "Jane"}
        result = await validator.validate_target({"email": ["Required", "Email"], "name": ["Required"]}, record)
        assert result.success
        assert result.status == "success"
        assert result.errors == []
        assert result.message is None
        assert result.data is record
        assert result.validated_at is not None and result.failed_at is None
        assert result.duration >= 0

    async def test_fields_do_not_short_circuit_each_other(self, validator: Validator):
        shape = {"a": ["Required"], "b": ["Required"], "c": ["Required"]}
        result = await validator.validate_target(shape, {"b": "present"})
        assert result.failure_count == 2
        assert result.failed_fields == ["a", "c"]
        assert result.message == "Validation failed for 2 field(s)"

    async def test_absent_fields_are_undefined(self, validator: Validator):
        seen = []

        def spy(ctx):
            seen.append(ctx.value)
            return True

        await validator.validate_target({"missing": [spy]}, {})
        assert seen == [UNDEFINED]

    async def test_optional_absent_field(self, validator: Validator):
        result = await validator.validate_target({"nickname": ["Optional", "MinLength[3]"]}, {})
        assert result.success

    async def test_fields_are_validated_concurrently(self, validator: Validator):
        first_started = asyncio.Event()

        async def first(ctx):
            first_started.set()
            return True

        async def second(ctx):
            await asyncio.wait_for(first_started.wait(), timeout=1)
            return True

        result = await validator.validate_target({"b": [second], "a": [first]}, {"a": 1, "b": 2})
        assert result.success

    async def test_record_and_context_are_passed_to_rules(self, validator: Validator):
        def password_confirmed(ctx):
            return ctx.value == ctx.data["password"] or "Passwords do not match"

        record = {"password": "secret", "confirmation": "other"}
        result = await validator.validate_target(
            {"confirmation": [password_confirmed]}, record, context={"locale": "de"}
        )
        (error,) = result.errors
        assert error.message == "[confirmation]: Passwords do not match"

    async def test_object_records(self, validator: Validator):
        @dataclass
        class Login:
            email: str
            password: Optional[str] = None

        result = await validator.validate_target({"email": ["Email"], "password": ["Required"]}, Login("a@b.de"))
        assert result.failed_fields == ["password"]

    async def test_dotted_field_names(self, validator: Validator):
        result = await validator.validate_target({"address.city": ["Required"]}, {"address": {"city": ""}})
        (error,) = result.errors
        assert error.property_name == "address.city"
        assert error.message == "[address.city]: This field is required"

    async def test_labels_from_translator(self, registry):
        validator = Validator(registry=registry, translator=DefaultTranslator({"fields.email": "E-Mail"}))
        result = await validator.validate_target({"email": ["Email"]}, {"email": "x"})
        assert result.errors[0].message == "[E-Mail]: Must be a valid email address"

    async def test_custom_message_builder(self, validator: Validator):
        def build_message(label, message, error):
            return f"{label} ({error.rule_name}): {message}"

        result = await validator.validate_target(
            {"email": ["Email"]}, {"email": "x"}, error_message_builder=build_message
        )
        assert result.errors[0].message == "email (Email): Must be a valid email address"

    async def test_message_builder_of_the_shape(self, validator: Validator):
        shape = TargetShape("Login", error_message_builder=lambda label, message, error: f"{label}: {message}")
        shape.field("email", ["Email"])
        result = await validator.validate_target(shape, {"email": "x"})
        assert result.errors[0].message == "email: Must be a valid email address"

    async def test_custom_error_message_format(self, registry):
        validator = Validator(registry=registry, settings=ValidatorSettings(error_message_format="{field} - {message}"))
        result = await validator.validate_target({"email": ["Email"]}, {"email": "x"})
        assert result.errors[0].message == "email - Must be a valid email address"

    async def test_module_level_validate_target(self, registry):
        result = await validate_target({"name": ["Required"]}, {"name": None}, registry=registry)
        assert result.failed_fields == ["name"]

    def test_validate_target_sync(self, validator: Validator):
        assert validator.validate_target_sync({"name": ["Required"]}, {"name": "x"}).success


class TestNestedTargets:
    async def test_nested_errors_are_flattened(self, validator: Validator, user_shape: TargetShape):
        record = {"email": "a@b.de", "name": "Jane", "address": {"city": "", "zip": None}}
        result = await validator.validate_target(user_shape, record)
        assert result.failure_count == 2
        assert result.failed_fields == ["address.city", "address.zip"]
        city_error = result.errors_per_field["address.city"][0]
        assert city_error.message == "[Address.City]: This field is required"
        assert city_error.translated_property_name == "Address.City"
        assert city_error.field_name == "city"
        assert result.errors_per_field["address.zip"][0].message == "[Address.zip]: This field is required"

    async def test_own_rules_of_the_nested_field_come_first(self, validator: Validator, user_shape: TargetShape):
        result = await validator.validate_target(user_shape, {"email": "a@b.de", "name": "Jane"})
        (error,) = result.errors
        assert error.property_name == "address"
        assert error.message == "[Address]: This field is required"

    async def test_nested_value_must_be_a_record(self, validator: Validator, user_shape: TargetShape):
        result = await validator.validate_target(user_shape, {"email": "a@b.de", "name": "Jane", "address": "Berlin"})
        (error,) = result.errors
        assert error.rule_name == "ValidateNested"
        assert error.message == "[Address]: Must be an object, but received str"

    async def test_skipped_nested_field(self, validator: Validator, address_shape: TargetShape):
        shape = TargetShape().field("address", ["Nullable"], nested=address_shape)
        assert (await validator.validate_target(shape, {"address": None})).success

    async def test_validate_nested_in_rule_list(self, validator: Validator, address_shape: TargetShape):
        shape = TargetShape().field("address", ["Required", validate_nested(address_shape)])
        result = await validator.validate_target(shape, {"address": {"city": "Berlin", "zip": ""}})
        assert result.failed_fields == ["address.zip"]

    async def test_validate_nested_on_a_single_value(self, validator: Validator, address_shape: TargetShape):
        result = await validator.validate({"city": "", "zip": "10115"}, [validate_nested(address_shape)])
        assert result.error.rule_message == "Nested validation failed: [City]: This field is required"

    async def test_validate_nested_by_name(self, validator: Validator, address_shape: TargetShape):
        rule = {"ValidateNested": [address_shape]}
        assert (await validator.validate({"city": "Berlin", "zip": "10115"}, [rule])).success
        result = await validator.validate(42, [rule])
        assert result.error.rule_message == "Must be an object, but received int"

    async def test_array_of_nested_records(self, validator: Validator, address_shape: TargetShape):
        shape = TargetShape().field("addresses", ["Array", array_of(validate_nested(address_shape))])
        record = {"addresses": [{"city": "Berlin", "zip": "10115"}, {"city": "Hamburg"}]}
        result = await validator.validate_target(shape, record)
        (error,) = result.errors
        assert error.message == "[addresses]: #1: Nested validation failed: [zip]: This field is required"


class TestTargetShape:
    def test_repeated_field_calls_append_rules(self):
        shape = TargetShape().field("email", "Required").field("email", ["Email"], label="E-Mail")
        assert shape.rules_of("email") == ("Required", "Email")
        assert shape.fields["email"].label == "E-Mail"
        assert len(shape) == 1
        assert "email" in shape

    def test_unknown_field_has_no_rules(self):
        assert TargetShape().rules_of("anything") == ()

    def test_equality(self):
        assert TargetShape.from_mapping({"a": ["Required"]}) == TargetShape().field("a", ["Required"])
        assert TargetShape.from_mapping({"a": ["Required"]}) != TargetShape().field("a", ["Email"])

    @pytest.mark.parametrize("name", ["", None])
    def test_invalid_field_names(self, name):
        with pytest.raises(ValueError):
            TargetShape().field(name, ["Required"])  # type: ignore[arg-type]

    def test_coerce(self):
        shape = TargetShape("X")
        assert TargetShape.coerce(shape) is shape
        assert "a" in TargetShape.coerce({"a": ["Required"]})
        with pytest.raises(TypeError):
            TargetShape.coerce(["Required"])

    def test_from_dataclass(self):
        @dataclass
        class Address:
            city: str = field(metadata={"rules": ["Required"], "label": "City"})
            note: str = ""

        @dataclass
        class User:
            email: str = field(metadata={"rules": ["Required", "Email"], "label": "E-Mail"})
            address: Optional[Address] = field(default=None, metadata={"rules": ["Required"], "nested": Address})

        shape = TargetShape.from_dataclass(User)
        assert shape.name == "User"
        assert shape.rules_of("email") == ("Required", "Email")
        assert shape.fields["email"].label == "E-Mail"
        assert shape.fields["address"].nested == TargetShape.from_dataclass(Address)
        assert "note" not in TargetShape.from_dataclass(Address)

    async def test_dataclass_as_shape(self, validator: Validator):
        @dataclass
        class Address:
            city: str = field(metadata={"rules": ["Required"], "label": "City"})

        @dataclass
        class User:
            email: str = field(metadata={"rules": ["Required", "Email"], "label": "E-Mail"})
            address: Optional[Address] = field(default=None, metadata={"rules": ["Required"], "nested": Address})

        result = await validator.validate_target(User, User(email="x", address=Address(city="")))
        assert sorted(error.message for error in result.errors) == [
            "[E-Mail]: Must be a valid email address",
            "[address.City]: This field is required",
        ]

    def test_from_dataclass_requires_a_dataclass(self):
        with pytest.raises(TypeError):
            TargetShape.from_dataclass(dict)

    def test_validate_nested_coerces_its_shape(self):
        assert ValidateNested({"a": ["Required"]}).shape == TargetShape.from_mapping({"a": ["Required"]})


class TestTargetValidationResult:
    @pytest.fixture
    async def failed_result(self, validator: Validator) -> TargetValidationResult:
        shape = {"email": ["Required", "Email"], "name": ["Required"], "nickname": ["Required"], "age": ["Number"]}
        return await validator.validate_target(shape, {"email": "x", "age": "old"})

    async def test_all_errors_are_sorted_by_property_name(self, failed_result: TargetValidationResult):
        assert [error.property_name for error in failed_result.all_errors] == ["age", "email", "name", "nickname"]

    async def test_num_errors_per_rule(self, failed_result: TargetValidationResult):
        assert failed_result.num_errors_per_rule == {"Email": 1, "Number": 1, "Required": 2}

    async def test_raise_for_errors(self, failed_result: TargetValidationResult):
        with pytest.raises(AggregateValidationError) as error_info:
            failed_result.raise_for_errors()
        assert len(error_info.value.errors) == 4
        assert "Validation failed for 4 field(s)" in str(error_info.value)
        assert "[email]: Must be a valid email address" in str(error_info.value)

    async def test_to_dict(self, failed_result: TargetValidationResult):
        as_dict = failed_result.to_dict()
        assert as_dict["success"] is False
        assert as_dict["failureCount"] == 4
        assert as_dict["errors"][0]["propertyName"] == "age"

    async def test_raise_for_errors_on_success(self, validator: Validator):
        result = await validator.validate_target({"a": ["Required"]}, {"a": 1})
        result.raise_for_errors()
        assert Validator.is_success(result)
