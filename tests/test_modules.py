"""Tests for module packaging resolution and the module registry."""

from __future__ import annotations

import logging
import os

import pytest

from glue_gen.errors import ModuleResolutionError
from glue_gen.ir import ModuleInfo
from glue_gen.modules import ModuleRegistry, PackagingResolver

SCRIPTS = os.path.join("Plugins", "UnrealSharp", "Generated")
PROJECT = "MyProject"
USER_CONTENT = os.path.join(PROJECT, "Script", "obj", "Generated")


def _resolver(host: str = "engine") -> PackagingResolver:
    return PackagingResolver(SCRIPTS, PROJECT, host_plugin_type=host)


def test_project_host_keeps_everything_in_scripts_dir() -> None:
    module = ModuleInfo(name="MyGame", plugin_type="other", is_game_module=True)

    assert _resolver("project").resolve(module) == SCRIPTS


@pytest.mark.parametrize(
    ("module", "expected"),
    [
        (ModuleInfo(name="Engine", plugin_type="engine"), SCRIPTS),
        (ModuleInfo(name="Datasmith", plugin_type="enterprise"), SCRIPTS),
        (ModuleInfo(name="MyPlugin", plugin_type="other"), USER_CONTENT),
        (ModuleInfo(name="MyGame", is_game_module=True), USER_CONTENT),
        (ModuleInfo(name="Core"), SCRIPTS),
        (ModuleInfo(name="Unloaded", is_loaded=False, is_game_module=True), SCRIPTS),
    ],
)
def test_engine_host_classifies_modules(module: ModuleInfo, expected: str) -> None:
    assert _resolver().resolve(module) == expected


def test_registry_memoizes_modules(caplog, monkeypatch) -> None:
    registry = ModuleRegistry(_resolver())
    monkeypatch.setattr(logging.getLogger("glue_gen"), "propagate", True)

    with caplog.at_level(logging.INFO, logger="glue_gen"):
        first = registry.find_or_register(ModuleInfo(name="Engine", plugin_type="engine"))
        second = registry.find_or_register("Engine")

    assert first is second
    assert first.namespace == "UnrealSharp.Engine"
    assert first.module_filename == "EngineModule"
    assert "Engine" in registry
    assert len(registry) == 1
    assert sum("Engine =>" in record.getMessage() for record in caplog.records) == 1


def test_empty_directory_is_a_resolver_contract_breach() -> None:
    registry = ModuleRegistry(PackagingResolver("", PROJECT, host_plugin_type="project"))

    with pytest.raises(ModuleResolutionError):
        registry.find_or_register("Engine")
    assert "Engine" not in registry


def test_namespace_lookup_does_not_register() -> None:
    registry = ModuleRegistry(_resolver())

    assert registry.namespace_of("Engine") == "UnrealSharp.Engine"
    assert "Engine" not in registry

    registry.find_or_register(ModuleInfo(name="Engine", plugin_type="other"))

    assert registry.namespace_of("Engine") == "UnrealSharp.Engine"
    assert len(registry) == 1
