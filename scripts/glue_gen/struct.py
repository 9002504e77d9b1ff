"""
Struct binding generation module

Generates mirror structs, static constructors that cache native offsets,
native buffer marshalling and array element marshallers.
"""

from typing import TYPE_CHECKING

from .codegen import CodeGen
from .ir import ClassInfo, STATIC
from .logging import get_logger
from .translators import CORE_UOBJECT_CALLBACKS, SCRIPT_STRUCT_CALLBACKS

if TYPE_CHECKING:
    from .filters import FilterPolicy
    from .func import FuncGenerator
    from .ir import StructInfo, PropertyInfo, FunctionInfo
    from .names import NameMapper
    from .translators import TranslatorRegistry

logger = get_logger('struct')


class StructGenerator:
    """Generates struct bindings and the static construction shared with classes"""

    def __init__(self, translators: 'TranslatorRegistry', names: 'NameMapper',
                 policy: 'FilterPolicy', func_gen: 'FuncGenerator'):
        self.translators = translators
        self.names = names
        self.policy = policy
        self.func_gen = func_gen

    def generate(self, struct: 'StructInfo', properties: list['PropertyInfo'], gen: CodeGen) -> bool:
        """Generate all bindings for a struct, returning its blittability"""
        gen.script_skeleton(self.names.get_namespace(struct))

        is_blittable = self.translators.is_struct_blittable(struct)
        if is_blittable:
            gen.line('[UStruct(IsBlittable = true)]')
            gen.line('[StructLayout(LayoutKind.Sequential)]')
        else:
            gen.line('[UStruct]')
        gen.declare_type('struct', self.names.get_struct_script_name(struct))

        self.export_struct_properties(gen, struct, properties, suppress_offsets=is_blittable)

        if not is_blittable:
            gen.line()
            self.export_static_constructor(gen, struct, properties, [], [])

            gen.line()
            self.export_mirror_struct_marshalling(gen, struct, properties)

        gen.close_brace()

        if not is_blittable:
            # Custom marshaller for arrays of this struct
            self.export_struct_marshaller(gen, struct)

        return is_blittable

    def export_struct_properties(self, gen: CodeGen, struct: 'StructInfo',
                                 properties: list['PropertyInfo'], suppress_offsets: bool):
        struct_name = self.names.get_struct_script_name(struct)
        declared: set[str] = set()
        for prop in properties:
            translator = self.translators.find(prop)
            managed_name = self.names.map_property_name(prop, struct_name)
            if not suppress_offsets:
                translator.export_property_fields(gen, prop, readonly=True)
            if managed_name in declared:
                logger.warning('%s.%s maps to the already declared field %s; skipping it',
                               struct.name, prop.name, managed_name)
                continue
            declared.add(managed_name)
            translator.export_mirror_property(
                gen, prop, managed_name, self.policy.relaxes_property(struct, prop), suppress_offsets=True)

    def export_static_constructor(self, gen: CodeGen, struct: 'StructInfo',
                                  properties: list['PropertyInfo'],
                                  functions: list['FunctionInfo'],
                                  overridable_functions: list['FunctionInfo']):
        """Cache the native type handle, property offsets and function handles"""
        is_class = isinstance(struct, ClassInfo)

        if is_class and not properties and not functions and not overridable_functions:
            return

        has_static_functions = any(f.has_flag(STATIC) for f in functions)
        if has_static_functions:
            # Static functions are invoked through the class default object
            gen.line('static readonly IntPtr NativeClassPtr;')

        if not is_class:
            gen.line('public static readonly int NativeDataSize;')

        type_name = self.names.get_type_script_name(struct)
        with gen.block(f'static {type_name}()'):
            declaration = '' if has_static_functions else 'IntPtr '
            lookup = 'Class' if is_class else 'Struct'
            gen.line(f'{declaration}NativeClassPtr = {CORE_UOBJECT_CALLBACKS}.CallGetNative{lookup}FromName("{struct.name}");')
            gen.line()

            self.export_properties_static_construction(gen, struct, properties)

            if is_class:
                gen.line()
                for func in functions:
                    self.func_gen.export_static_construction(gen, func)

                gen.line()
                for func in overridable_functions:
                    self.func_gen.export_overridable_static_construction(gen, func)
                gen.line()
            else:
                gen.line()
                gen.line(f'NativeDataSize = {SCRIPT_STRUCT_CALLBACKS}.CallGetNativeStructSize(NativeClassPtr);')

    def export_properties_static_construction(self, gen: CodeGen, struct: 'StructInfo',
                                              properties: list['PropertyInfo']):
        """One offset lookup per managed name; later duplicates are skipped"""
        owner_name = self.names.get_type_script_name(struct)
        exported: set[str] = set()
        for prop in properties:
            managed_name = self.names.map_property_name(prop, owner_name)
            if managed_name in exported:
                continue
            exported.add(managed_name)
            self.translators.find(prop).export_property_static_construction(gen, prop, prop.name)

    def export_mirror_struct_marshalling(self, gen: CodeGen, struct: 'StructInfo',
                                         properties: list['PropertyInfo']):
        struct_name = self.names.get_struct_script_name(struct)

        gen.line()
        gen.line('// Construct by marshalling from a native buffer.')
        with gen.block(f'public {struct_name}(IntPtr InNativeStruct)'):
            gen.begin_unsafe_block()
            for prop in properties:
                managed_name = self.names.map_property_name(prop, struct_name)
                self.translators.find(prop).export_marshal_from_native_buffer(
                    gen, prop, 'null', prop.name, f'{managed_name} =',
                    'InNativeStruct', f'{prop.name}_Offset')
            gen.end_unsafe_block()

        gen.line()
        gen.line('// Marshal into a preallocated native buffer.')
        with gen.block('public void ToNative(IntPtr Buffer)'):
            gen.begin_unsafe_block()
            for prop in properties:
                managed_name = self.names.map_property_name(prop, struct_name)
                self.translators.find(prop).export_marshal_to_native_buffer(
                    gen, prop, 'null', prop.name, 'Buffer', f'{prop.name}_Offset', managed_name)
            gen.end_unsafe_block()

    def export_struct_marshaller(self, gen: CodeGen, struct: 'StructInfo'):
        struct_name = self.names.get_struct_script_name(struct)

        gen.line()
        with gen.block(f'public static class {struct_name}Marshaler'):
            with gen.block(f'public static {struct_name} FromNative(IntPtr nativeBuffer, int arrayIndex, '
                           'UnrealSharpObject owner)'):
                gen.line(f'return new {struct_name}(nativeBuffer + arrayIndex * GetNativeDataSize());')

            gen.line()
            with gen.block(f'public static void ToNative(IntPtr nativeBuffer, int arrayIndex, '
                           f'UnrealSharpObject owner, {struct_name} obj)'):
                gen.line('obj.ToNative(nativeBuffer + arrayIndex * GetNativeDataSize());')

            gen.line()
            with gen.block('public static int GetNativeDataSize()'):
                gen.line(f'return {struct_name}.NativeDataSize;')
