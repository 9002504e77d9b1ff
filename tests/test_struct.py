"""Tests for struct generation and marshalling code."""

from __future__ import annotations

from glue_gen import Generator
from glue_gen.codegen import CodeGen
from tests._fixtures.graph_builder import GraphBuilder, prop


def _generate(generator: Generator, struct) -> tuple[bool, str]:
    gen = CodeGen()
    properties = generator.get_exported_properties(struct)
    blittable = generator.struct_gen.generate(struct, properties, gen)
    return blittable, gen.output()


def test_blittable_struct_has_direct_layout_only(generator: Generator, graph_builder: GraphBuilder) -> None:
    graph_builder.struct("Vector", properties=[prop("X", "double"), prop("Y", "double")])

    blittable, text = _generate(generator, graph_builder.build().find("Vector"))

    assert blittable
    assert "[UStruct(IsBlittable = true)]" in text
    assert "[StructLayout(LayoutKind.Sequential)]" in text
    assert "public partial struct Vector" in text
    assert "public double X;" in text
    assert "_Offset" not in text
    assert "static Vector()" not in text
    assert "VectorMarshaler" not in text


def test_non_blittable_field_adds_marshalling(generator: Generator, graph_builder: GraphBuilder) -> None:
    graph_builder.struct("Vector", properties=[prop("X", "double"), prop("Label", "string")])

    blittable, text = _generate(generator, graph_builder.build().find("Vector"))

    assert not blittable
    assert "[UStruct]" in text
    assert "static readonly int X_Offset;" in text
    assert "public static readonly int NativeDataSize;" in text
    assert 'IntPtr NativeClassPtr = UCoreUObjectExporter.CallGetNativeStructFromName("Vector");' in text
    assert 'X_Offset = FPropertyExporter.CallGetPropertyOffsetFromName(NativeClassPtr, "X");' in text
    assert "NativeDataSize = UScriptStructExporter.CallGetNativeStructSize(NativeClassPtr);" in text
    assert "public Vector(IntPtr InNativeStruct)" in text
    assert "Label = StringMarshaller.FromNative(IntPtr.Add(InNativeStruct, Label_Offset), 0, null);" in text
    assert "public void ToNative(IntPtr Buffer)" in text
    assert "StringMarshaller.ToNative(IntPtr.Add(Buffer, Label_Offset), 0, null, Label);" in text
    assert "public static class VectorMarshaler" in text
    assert "return Vector.NativeDataSize;" in text


def test_managed_name_collision_keeps_first_static_lookup(generator: Generator, graph_builder: GraphBuilder) -> None:
    graph_builder.struct("Flags", properties=[prop("bHidden", "bool"), prop("Hidden", "int32")])

    _, text = _generate(generator, graph_builder.build().find("Flags"))

    assert text.count('CallGetPropertyOffsetFromName(NativeClassPtr, "') == 1
    assert 'bHidden_Offset = FPropertyExporter.CallGetPropertyOffsetFromName(NativeClassPtr, "bHidden");' in text
    assert text.count("public bool Hidden;") == 1
    assert "public int Hidden;" not in text
    # Both properties are still marshalled
    assert "Hidden = BoolMarshaller.FromNative(IntPtr.Add(InNativeStruct, bHidden_Offset), 0, null);" in text
    assert "Hidden = BlittableMarshaller<int>.FromNative(IntPtr.Add(InNativeStruct, Hidden_Offset), 0, null);" in text
    assert "BoolMarshaller.ToNative(IntPtr.Add(Buffer, bHidden_Offset), 0, null, Hidden);" in text
    assert "BlittableMarshaller<int>.ToNative(IntPtr.Add(Buffer, Hidden_Offset), 0, null, Hidden);" in text


def test_static_array_field_is_copied_element_wise(generator: Generator, graph_builder: GraphBuilder) -> None:
    graph_builder.struct("Matrix", properties=[prop("M", "float", array_dim=4)])

    blittable, text = _generate(generator, graph_builder.build().find("Matrix"))

    assert not blittable
    assert "const int M_Length = 4;" in text
    assert "public float[] M;" in text
    assert "M = new float[M_Length];" in text
    assert "for (int i = 0; i < M_Length; ++i)" in text


def test_class_without_members_gets_no_static_constructor(generator: Generator, graph_builder: GraphBuilder) -> None:
    graph_builder.cls("Marker")
    marker = graph_builder.build().find("Marker")

    gen = CodeGen()
    generator.struct_gen.export_static_constructor(gen, marker, [], [], [])

    assert gen.is_empty()
