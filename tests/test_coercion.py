"""Tests for type coercion: scalars, enums, temporals, nested structs, unions."""

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from enum import Enum, IntEnum
from typing import Annotated, Any, Dict, List, Optional, Union

import pytest

from structmap import (
    ConstructionConfig,
    Field,
    FieldNotFoundError,
    SchemaError,
    Struct,
    ValidationError,
)
from structmap.coercion import coerce, coerce_single, debug_type
from structmap.schema import EnumType, NestedType, ScalarType, TemporalType, UnionType


class UserType(Enum):
    ADMIN = "admin"
    GUEST = "guest"


class Priority(IntEnum):
    LOW = 1
    HIGH = 2


class Marker(Enum):
    ON = object()
    OFF = object()


class Address(Struct):
    city: Annotated[str, Field()]
    zip_code: Annotated[str, Field(alias="zip")]


class Logger:
    def __init__(self, name="default"):
        self.name = name


@dataclass
class Point:
    x: int
    y: int = 0

    def __post_init__(self):
        if not isinstance(self.x, int):
            raise ValueError("x must be int")


class DictContainer:
    """Minimal service container keyed by type."""

    def __init__(self, services):
        self.services = services
        self.lookups = []

    def has(self, key):
        return key in self.services

    def get(self, key):
        self.lookups.append(key)
        return self.services[key]


class TestScalars:
    @pytest.mark.parametrize(
        "kind,value",
        [("string", "x"), ("int", 1), ("float", 1.5), ("bool", True)],
    )
    def test_exact_type_accepted(self, kind, value):
        assert coerce(ScalarType(kind), value, "f") == value

    @pytest.mark.parametrize(
        "kind,value,actual",
        [
            ("float", 1, "int"),
            ("int", "1", "string"),
            ("int", True, "bool"),
            ("int", 1.0, "float"),
            ("bool", 1, "int"),
            ("string", b"x", "bytes"),
        ],
    )
    def test_no_implicit_widening(self, kind, value, actual):
        with pytest.raises(ValidationError) as exc_info:
            coerce(ScalarType(kind), value, "f")
        assert str(exc_info.value) == f"Field f must be of type {kind}, got {actual}"
        assert exc_info.value.field_name == "f"
        assert exc_info.value.value == value

    def test_mixed_accepts_anything(self):
        marker = object()
        assert coerce(ScalarType("mixed"), marker, "f") is marker

    def test_any_hint_is_mixed(self):
        class Loose(Struct):
            payload: Annotated[Any, Field()]

        assert Loose({"payload": {"a": [1]}}).payload == {"a": [1]}

    def test_debug_type(self):
        assert debug_type(None) == "null"
        assert debug_type("x") == "string"
        assert debug_type([]) == "list"


class TestEnums:
    def test_member_passes_unchanged(self):
        assert coerce(EnumType(UserType), UserType.ADMIN, "role") is UserType.ADMIN

    def test_lookup_by_string_value(self):
        assert coerce(EnumType(UserType), "guest", "role") is UserType.GUEST

    def test_lookup_by_int_value(self):
        assert coerce(EnumType(Priority), 2, "priority") is Priority.HIGH

    def test_unknown_value(self):
        with pytest.raises(ValidationError, match="Invalid value 'owner' for enum UserType"):
            coerce(EnumType(UserType), "owner", "role")

    def test_wrong_raw_type(self):
        with pytest.raises(ValidationError, match="Field role must be instance of enum UserType"):
            coerce(EnumType(UserType), 1.5, "role")

    def test_bool_is_not_a_lookup_key(self):
        with pytest.raises(ValidationError, match="must be instance of enum Priority"):
            coerce(EnumType(Priority), True, "priority")

    def test_enum_without_scalar_values_requires_member(self):
        assert EnumType(Marker).value_backed is False
        assert coerce(EnumType(Marker), Marker.ON, "m") is Marker.ON
        with pytest.raises(ValidationError, match="must be instance of enum Marker"):
            coerce(EnumType(Marker), "ON", "m")

    def test_enum_field_round_trip(self):
        class Member(Struct):
            role: Annotated[UserType, Field()]

        member = Member({"role": "admin"})
        assert member.role is UserType.ADMIN
        assert member.to_dict() == {"role": UserType.ADMIN}
        assert Member.from_dict(member.to_dict()) == member


class TestTemporals:
    def test_instance_passes_unchanged(self):
        now = datetime(2024, 1, 2, 3, 4, 5)
        assert coerce(TemporalType(datetime), now, "at") is now

    def test_string_parsed(self):
        parsed = coerce(TemporalType(datetime), "2024-01-02T03:04:05+00:00", "at")
        assert parsed == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

    def test_date_and_time(self):
        assert coerce(TemporalType(date), "2024-02-29", "d") == date(2024, 2, 29)
        assert coerce(TemporalType(time), "12:30", "t") == time(12, 30)

    def test_utc_designator(self):
        utc = timezone.utc
        assert coerce(TemporalType(datetime), "2024-01-02T03:04:05Z", "at") == datetime(
            2024, 1, 2, 3, 4, 5, tzinfo=utc
        )
        assert coerce(TemporalType(time), "12:30:00Z", "t") == time(12, 30, tzinfo=utc)

    def test_invalid_string(self):
        with pytest.raises(ValidationError, match="Field at: invalid datetime string: ") as exc_info:
            coerce(TemporalType(datetime), "yesterday-ish", "at")
        assert exc_info.value.value == "yesterday-ish"

    def test_wrong_type(self):
        with pytest.raises(ValidationError, match="Field at must be datetime or string"):
            coerce(TemporalType(datetime), 1700000000, "at")


class TestNested:
    def test_mapping_constructed_recursively(self):
        address = coerce(NestedType(Address), {"city": "Paris", "zip": "75001"}, "address")
        assert isinstance(address, Address)
        assert address.zip_code == "75001"

    def test_existing_instance_passes_unchanged(self):
        address = Address({"city": "Paris", "zip": "75001"})
        assert coerce(NestedType(Address), address, "address") is address

    def test_nested_errors_propagate_unchanged(self):
        with pytest.raises(FieldNotFoundError) as exc_info:
            coerce(NestedType(Address), {"city": "Paris"}, "address")
        assert exc_info.value.field_name == "zip_code"

    def test_wrong_raw_type(self):
        with pytest.raises(ValidationError, match="Field address must be instance of Address or mapping"):
            coerce(NestedType(Address), "Paris", "address")

    def test_non_struct_class_built_from_keywords(self):
        built = coerce(NestedType(Logger), {"name": "app"}, "logger")
        assert isinstance(built, Logger)
        assert built.name == "app"

        with pytest.raises(ValidationError, match="could not build Logger"):
            coerce(NestedType(Logger), {"level": "debug"}, "logger")

    def test_constructor_value_error_becomes_validation_error(self):
        with pytest.raises(ValidationError, match="could not build Point: x must be int") as exc_info:
            coerce(NestedType(Point), {"x": "nope"}, "where")
        assert exc_info.value.field_name == "where"

    def test_container_service_returned(self):
        service = Logger("from-container")
        container = DictContainer({Logger: service})
        config = ConstructionConfig(container=container)

        assert coerce(NestedType(Logger), {"name": "ignored"}, "logger", config) is service
        assert container.lookups == [Logger]

    def test_container_struct_service_still_constructs(self):
        cached = Address({"city": "Cached", "zip": "0"})
        config = ConstructionConfig(container=DictContainer({Address: cached}))

        built = coerce(NestedType(Address), {"city": "Fresh", "zip": "1"}, "address", config)
        assert built is not cached
        assert built.city == "Fresh"

    def test_container_passed_through_struct_constructor(self):
        class Service(Struct):
            logger: Annotated[Logger, Field()]

        service = Logger("shared")
        built = Service({"logger": {}}, container=DictContainer({Logger: service}))
        assert built.logger is service

    def test_dict_hint_accepts_dict_instances(self):
        class Envelope(Struct):
            meta: Annotated[Dict[str, Any], Field()]

        assert Envelope({"meta": {"k": 1}}).meta == {"k": 1}
        with pytest.raises(ValidationError):
            Envelope({"meta": [1]})

    def test_deeply_nested_graph(self):
        class Company(Struct):
            name: Annotated[str, Field()]
            offices: Annotated[List[Address], Field()]
            hq: Annotated[Optional[Address], Field()]

        company = Company(
            {
                "name": "ACME",
                "offices": [{"city": "A", "zip": "1"}, {"city": "B", "zip": "2"}],
                "hq": None,
            }
        )
        assert [o.city for o in company.offices] == ["A", "B"]
        assert company.hq is None


class TestUnions:
    def test_first_match_wins(self):
        spec = UnionType((ScalarType("mixed"), ScalarType("int")))
        assert coerce(spec, 5, "v") == 5

    def test_order_decides_enum_vs_string(self):
        class First(Struct):
            value: Annotated[Union[UserType, str], Field()]

        class Second(Struct):
            value: Annotated[Union[str, UserType], Field()]

        assert First({"value": "admin"}).value is UserType.ADMIN
        assert Second({"value": "admin"}).value == "admin"

    def test_union_falls_through_to_later_member(self):
        spec = UnionType((ScalarType("int"), ScalarType("string")))
        assert coerce(spec, "x", "v") == "x"

    def test_union_with_nested_struct_tries_next_member(self):
        class Holder(Struct):
            value: Annotated[Union[Address, Dict[str, Any]], Field()]

        holder = Holder({"value": {"city": "Paris"}})
        assert holder.value == {"city": "Paris"}

    def test_union_with_rejecting_class_tries_next_member(self):
        class Shape(Struct):
            where: Annotated[Union[Point, str], Field()]

        assert Shape({"where": {"x": 1, "y": 2}}).where == Point(1, 2)
        assert Shape({"where": "origin"}).where == "origin"
        with pytest.raises(ValidationError, match=r"Field where must be one of: Point\|string"):
            Shape({"where": {"x": "nope"}})

    def test_single_member_result_not_raised(self):
        result = coerce_single(ScalarType("int"), "x", "v")
        assert result.ok is False
        assert "must be of type int" in result.message

    def test_optional_union(self):
        class Maybe(Struct):
            value: Annotated[Optional[Union[int, str]], Field()]

        assert Maybe({}).value is None
        assert Maybe({"value": "s"}).value == "s"

    def test_pipe_syntax(self):
        class Piped(Struct):
            value: Annotated[int | str | None, Field()]

        descriptor = Piped.get_field_metadata("value")
        assert descriptor.nullable is True
        assert descriptor.type_name == "int|string"

    def test_unsupported_spec(self):
        with pytest.raises(SchemaError):
            coerce_single("not-a-spec", 1, "v")
