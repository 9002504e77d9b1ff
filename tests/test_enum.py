"""Tests for enum generation."""

from __future__ import annotations

from glue_gen import Generator
from glue_gen.codegen import CodeGen
from tests._fixtures.graph_builder import GraphBuilder


def test_skipped_entries_and_sentinel_keep_native_ordinals(generator: Generator, graph_builder: GraphBuilder) -> None:
    graph_builder.enum("EFoo", ["EFoo::A", "EFoo::B", "EFoo::C", "EFoo::MAX"])
    enum = graph_builder.build().find("EFoo")
    generator.policy.blacklist.add_enum_entry("EFoo", "EFoo::B")

    assert generator.enum_gen.collect_values(enum) == [("A", 0), ("C", 2)]


def test_max_suffix_only_counts_on_the_last_entry(generator: Generator, graph_builder: GraphBuilder) -> None:
    graph_builder.enum("ESize", ["TEXMAX", "Small", "ESize_MAX"])
    enum = graph_builder.build().find("ESize")

    assert generator.enum_gen.collect_values(enum) == [("TEXMAX", 0), ("Small", 1)]


def test_enum_declaration(generator: Generator, graph_builder: GraphBuilder) -> None:
    graph_builder.enum("ECollisionChannel", ["ECC_WorldStatic", "ECC_Pawn"], underlying="int32")
    enum = graph_builder.build().find("ECollisionChannel")

    gen = CodeGen()
    generator.enum_gen.generate(enum, gen)
    text = gen.output()

    assert "namespace UnrealSharp.Engine;" in text
    assert "[UEnum]" in text
    assert "public enum ECollisionChannel : int" in text
    assert "    ECC_WorldStatic=0," in text
    assert "    ECC_Pawn=1," in text


def test_unknown_storage_defaults_to_byte(generator: Generator, graph_builder: GraphBuilder) -> None:
    graph_builder.enum("EOdd", ["A"], underlying="bits")
    gen = CodeGen()
    generator.enum_gen.generate(graph_builder.build().find("EOdd"), gen)

    assert "public enum EOdd : byte" in gen.output()
