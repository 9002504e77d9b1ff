"""Tests for C# identifier mapping."""

from __future__ import annotations

import pytest

from glue_gen.ir import FunctionInfo, ModuleInfo, PropertyInfo, PropertyKind, ClassInfo
from glue_gen.modules import ModuleRegistry, PackagingResolver
from glue_gen.names import NameMapper, as_camel_case, escape_keyword, strip_bool_prefix


@pytest.fixture
def names(tmp_path) -> NameMapper:
    return NameMapper(ModuleRegistry(PackagingResolver(str(tmp_path), str(tmp_path))))


@pytest.mark.parametrize(
    ("name", "expected"),
    [("bHidden", "Hidden"), ("bool", "bool"), ("b", "b"), ("Hidden", "Hidden")],
)
def test_strip_bool_prefix(name: str, expected: str) -> None:
    assert strip_bool_prefix(name) == expected


def test_escape_keyword_and_camel_case() -> None:
    assert escape_keyword("event") == "@event"
    assert escape_keyword("Event") == "Event"
    assert as_camel_case("WorldContextObject") == "worldContextObject"


def test_qualified_name_uses_module_namespace(names: NameMapper) -> None:
    actor = ClassInfo(name="Actor", module=ModuleInfo(name="Engine"))

    assert names.get_namespace(actor) == "UnrealSharp.Engine"
    assert names.get_qualified_name(actor) == "UnrealSharp.Engine.Actor"


def test_bool_properties_lose_their_prefix(names: NameMapper) -> None:
    hidden = PropertyInfo(name="bHidden", kind=PropertyKind.BOOL)
    count = PropertyInfo(name="bCount", kind=PropertyKind.INT32)

    assert names.map_property_name(hidden) == "Hidden"
    assert names.map_property_name(count) == "bCount"


def test_member_named_like_its_owner_gets_a_suffix(names: NameMapper) -> None:
    prop = PropertyInfo(name="Light", kind=PropertyKind.OBJECT)
    function = FunctionInfo(name="Light")

    assert names.map_property_name(prop, "Light") == "Light_"
    assert names.map_property_name(prop, "PointLight") == "Light"
    assert names.map_function_name(function, "Light") == "Light_"


def test_parameter_names(names: NameMapper) -> None:
    assert names.map_parameter_name(PropertyInfo(name="bHidden", kind=PropertyKind.BOOL)) == "hidden"
    assert names.map_parameter_name(PropertyInfo(name="Object", kind=PropertyKind.OBJECT)) == "@object"
    assert names.map_parameter_name(PropertyInfo(name="NewLocation", kind=PropertyKind.STRUCT)) == "newLocation"
