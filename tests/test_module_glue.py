"""Tests for the per-module extension surface."""

from __future__ import annotations

from pathlib import Path

from glue_gen import Generator
from tests._fixtures.graph_builder import GraphBuilder, func, param, ret


def _library(builder: GraphBuilder, *functions: dict) -> None:
    builder.cls("BlueprintFunctionLibrary", flags=("abstract",))
    builder.cls("Actor")
    builder.cls("ActorLibrary", module="Gameplay", parent="BlueprintFunctionLibrary", flags=(),
                functions=list(functions))


def test_script_method_extends_the_declared_type(generator: Generator, graph_builder: GraphBuilder,
                                                 output_dir: Path) -> None:
    _library(graph_builder, func(
        "GetLabel",
        [param("Target", "object", "Actor"), param("bFull", "bool"), ret("string")],
        flags=("static", "blueprint_callable"),
        metadata={"ScriptMethod": ""},
    ))

    generator.start(graph_builder.build())
    text = (output_dir / "GameplayModule.cs").read_text(encoding="utf-8")

    assert text.startswith("// This file is automatically generated\n")
    assert "namespace UnrealSharp.Gameplay;" in text
    assert "public static partial class GameplayExtensions" in text
    assert "public static string GetLabel(this UnrealSharp.Engine.Actor self, bool full)" in text
    assert "return UnrealSharp.Gameplay.ActorLibrary.GetLabel(self, full);" in text


def test_world_receiver_falls_back_to_the_engine_namespace(generator: Generator, graph_builder: GraphBuilder,
                                                           output_dir: Path) -> None:
    _library(graph_builder, func(
        "Spawn",
        [param("WorldContext", "object", "Object")],
        flags=("static", "blueprint_callable"),
    ))

    generator.start(graph_builder.build())
    text = (output_dir / "GameplayModule.cs").read_text(encoding="utf-8")

    assert "public static void Spawn(this UnrealSharp.Engine.World self)" in text
    assert "UnrealSharp.Gameplay.ActorLibrary.Spawn(self);" in text


def test_methods_accumulate_across_module_loads(generator: Generator, graph_builder: GraphBuilder,
                                                output_dir: Path) -> None:
    _library(graph_builder, func(
        "Spawn",
        [param("WorldContext", "object", "Object")],
        flags=("static", "blueprint_callable"),
    ))
    generator.start(graph_builder.build())

    update = GraphBuilder()
    update.cls("MoreActorLibrary", module="Gameplay", parent="BlueprintFunctionLibrary", flags=(), functions=[
        func("Despawn", [param("WorldContextObject", "object", "Object")], flags=("static", "blueprint_callable")),
    ])
    generator.on_module_loaded(update.data())
    text = (output_dir / "GameplayModule.cs").read_text(encoding="utf-8")

    assert "Spawn(this UnrealSharp.Engine.World self)" in text
    assert "Despawn(this UnrealSharp.Engine.World self)" in text


def test_world_fallback_leaves_the_engine_module_unresolved(tmp_path: Path, output_dir: Path) -> None:
    generator = Generator(scripts_dir=str(output_dir), project_dir=str(tmp_path / "Project"),
                          host_plugin_type="engine")
    builder = GraphBuilder()
    builder.module("CoreUObject", plugin_type="engine")
    builder.module("Gameplay", plugin_type="engine")
    builder.cls("Object", module="CoreUObject", parent=None, flags=())
    builder.cls("BlueprintFunctionLibrary", module="CoreUObject", flags=("abstract",))
    builder.cls("WorldLibrary", module="Gameplay", parent="BlueprintFunctionLibrary", flags=(), functions=[
        func("Spawn", [param("WorldContext", "object", "Object")], flags=("static", "blueprint_callable")),
    ])
    generator.start(builder.build())

    assert "Engine" not in generator.modules
    assert "Spawn(this UnrealSharp.Engine.World self)" in (output_dir / "GameplayModule.cs").read_text(encoding="utf-8")

    update = GraphBuilder()
    update.module("Engine", plugin_type="other")
    update.cls("Actor", module="Engine")
    generator.on_module_loaded(update.data())

    user_content = tmp_path / "Project" / "Script" / "obj" / "Generated"
    assert (user_content / "Actor.generated.cs").exists()
    assert not (output_dir / "Actor.generated.cs").exists()
