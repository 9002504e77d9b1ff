"""Tests for filter policy lists."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from glue_gen.errors import ConfigError
from glue_gen.filters import FilterPolicy
from glue_gen.ir import FunctionInfo, PropertyInfo, PropertyKind


def _function(name: str, category: str = "") -> FunctionInfo:
    metadata = {"Category": category} if category else {}
    return FunctionInfo(name=name, metadata=metadata, owner="KismetMathLibrary")


def test_blacklisted_function_is_rejected_unless_whitelisted() -> None:
    policy = FilterPolicy()
    policy.blacklist.add_function("Actor", "K2_DestroyActor")
    function = FunctionInfo(name="K2_DestroyActor")

    assert not policy.allows_function("Actor", function)

    policy.whitelist.add_function("Actor", "K2_DestroyActor")
    assert policy.allows_function("Actor", function)


def test_blacklisted_category_rejects_every_function_in_it() -> None:
    policy = FilterPolicy()
    policy.blacklist.add_function_category("KismetMathLibrary", "Math|Vector4")

    assert not policy.allows_function("KismetMathLibrary", _function("Dot4", "Math|Vector4"))
    assert policy.allows_function("KismetMathLibrary", _function("Dot", "Math|Vector"))
    assert policy.allows_function("KismetMathLibrary", _function("Abs"))


def test_property_whitelist_overrides_blacklist() -> None:
    policy = FilterPolicy()
    hidden = PropertyInfo(name="bHidden", kind=PropertyKind.BOOL)
    policy.blacklist.add_property("Actor", "bHidden")

    assert not policy.allows_property("Actor", hidden)

    policy.whitelist.add_property("Actor", "bHidden")
    assert policy.allows_property("Actor", hidden)
    assert policy.forces_property("Actor", hidden)


def test_whitelisted_struct_forces_all_of_its_properties() -> None:
    policy = FilterPolicy()
    policy.whitelist.add_struct("HitResult")

    assert policy.forces_property("HitResult", PropertyInfo(name="Time", kind=PropertyKind.FLOAT))
    assert not policy.forces_property("Vector", PropertyInfo(name="X", kind=PropertyKind.DOUBLE))


def test_enum_policy() -> None:
    policy = FilterPolicy()
    policy.blacklist.add_enum("EInternal")
    assert not policy.allows_enum("EInternal")

    policy.whitelist.add_enum("EInternal")
    assert policy.allows_enum("EInternal")


def test_update_reads_all_lists() -> None:
    policy = FilterPolicy()
    policy.update({
        "blacklist": {"classes": ["AnimationBlueprintLibrary"],
                      "function_categories": [["KismetMathLibrary", "Math|Vector4"]]},
        "greylist": {"properties": [["Actor", "RootComponent"]]},
        "internal_whitelist": {"functions": [["Actor", "UserConstructionScript"]]},
    })

    assert not policy.allows_class("AnimationBlueprintLibrary")
    assert policy.greylist.has_property("Actor", "RootComponent")
    assert policy.internal_whitelist.has_function("Actor", "UserConstructionScript")
    assert len(policy.blacklist) == 2
    assert len(policy.whitelist) == 0


@pytest.mark.parametrize(
    "data",
    [
        {"denylist": {}},
        {"blacklist": ["Actor"]},
        {"blacklist": {"classes": "Actor"}},
        {"blacklist": {"functions": [["Actor"]]}},
        {"blacklist": {"properties": [["Actor", 3]]}},
    ],
)
def test_update_rejects_malformed_lists(data: dict) -> None:
    with pytest.raises(ConfigError):
        FilterPolicy().update(data)


def test_load_reads_a_policy_file(tmp_path: Path) -> None:
    path = tmp_path / "policy.json"
    path.write_text(json.dumps({"whitelist": {"classes": ["SpringArmComponent"]}}), encoding="utf-8")

    policy = FilterPolicy.load(str(path))

    assert policy.whitelist.has_class("SpringArmComponent")


def test_load_reports_missing_files(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        FilterPolicy.load(str(tmp_path / "missing.json"))
