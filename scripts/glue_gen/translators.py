"""
Property translation module

One translator per native property kind. Each translator answers capability
queries (can it be a property, a struct field, a parameter...) and emits the
C# declarations, static construction and native buffer marshalling for the
properties of its kind.
"""

from abc import ABC, abstractmethod
from typing import Callable, TYPE_CHECKING

from .errors import GlueGenError
from .ir import (
    PropertyKind, ClassInfo, StructInfo, EnumInfo,
    PROTECTED, BLUEPRINT_READ_ONLY,
)

if TYPE_CHECKING:
    from .codegen import CodeGen
    from .filters import FilterPolicy
    from .ir import PropertyInfo
    from .names import NameMapper

# Native interop entry points called from generated code
CORE_UOBJECT_CALLBACKS = 'UCoreUObjectExporter'
CLASS_CALLBACKS = 'UClassExporter'
FUNCTION_CALLBACKS = 'UFunctionExporter'
PROPERTY_CALLBACKS = 'FPropertyExporter'
SCRIPT_STRUCT_CALLBACKS = 'UScriptStructExporter'

# C# types of numeric kinds
PRIMITIVE_TYPES = {
    PropertyKind.INT8: 'sbyte',
    PropertyKind.INT16: 'short',
    PropertyKind.INT32: 'int',
    PropertyKind.INT64: 'long',
    PropertyKind.UINT8: 'byte',
    PropertyKind.UINT16: 'ushort',
    PropertyKind.UINT32: 'uint',
    PropertyKind.UINT64: 'ulong',
    PropertyKind.FLOAT: 'float',
    PropertyKind.DOUBLE: 'double',
}

CONTAINER_KINDS = {PropertyKind.ARRAY, PropertyKind.SET, PropertyKind.MAP}


class PropertyTranslator(ABC):
    """Base class for per-kind property translators"""

    supported_as_property = True
    supported_as_struct_property = True
    supported_as_parameter = True
    supported_as_return_value = True
    supported_as_overridable_parameter = True
    supported_as_overridable_return_value = True
    supported_in_static_array = False
    supported_as_inner = True

    def __init__(self, registry: 'TranslatorRegistry'):
        self.registry = registry

    @property
    def names(self) -> 'NameMapper':
        return self.registry.names

    def can_handle(self, prop: 'PropertyInfo') -> bool:
        """Check kind-specific constraints on a concrete property"""
        return True

    def is_blittable(self, prop: 'PropertyInfo') -> bool:
        return False

    @abstractmethod
    def managed_type(self, prop: 'PropertyInfo') -> str:
        """C# type of the property"""

    @abstractmethod
    def marshaller(self, prop: 'PropertyInfo', native_name: str = '') -> str:
        """C# marshaller exposing FromNative / ToNative for the property"""

    def default_value(self, prop: 'PropertyInfo') -> str:
        return 'default'

    def export_property_static_construction(self, gen: 'CodeGen', prop: 'PropertyInfo',
                                            native_name: str):
        gen.line(f'{native_name}_Offset = {PROPERTY_CALLBACKS}.CallGetPropertyOffsetFromName('
                 f'NativeClassPtr, "{native_name}");')

    def export_parameter_static_construction(self, gen: 'CodeGen', native_method_name: str,
                                             param: 'PropertyInfo'):
        gen.line(f'{native_method_name}_{param.name}_Offset = {PROPERTY_CALLBACKS}.CallGetPropertyOffsetFromName('
                 f'{native_method_name}_NativeFunction, "{param.name}");')

    def export_parameter_fields(self, gen: 'CodeGen', native_method_name: str,
                                param: 'PropertyInfo'):
        gen.line(f'static int {native_method_name}_{param.name}_Offset;')

    def export_marshal_from_native_buffer(self, gen: 'CodeGen', prop: 'PropertyInfo',
                                          owner: str, native_name: str, assignment: str,
                                          source_buffer: str, offset: str):
        """Read a value at source_buffer + offset and assign it"""
        marshaller = self.marshaller(prop, native_name)
        if prop.array_dim > 1:
            target = assignment.rstrip(' =')
            gen.line(f'{target} = new {self.managed_type(prop)}[{native_name}_Length];')
            with gen.block(f'for (int i = 0; i < {native_name}_Length; ++i)'):
                gen.line(f'{target}[i] = {marshaller}.FromNative(IntPtr.Add({source_buffer}, {offset}), i, {owner});')
            return
        gen.line(f'{assignment} {marshaller}.FromNative(IntPtr.Add({source_buffer}, {offset}), 0, {owner});')

    def export_marshal_to_native_buffer(self, gen: 'CodeGen', prop: 'PropertyInfo',
                                        owner: str, native_name: str, dest_buffer: str,
                                        offset: str, source: str):
        """Write source into dest_buffer + offset"""
        marshaller = self.marshaller(prop, native_name)
        if prop.array_dim > 1:
            with gen.block(f'for (int i = 0; i < {native_name}_Length; ++i)'):
                gen.line(f'{marshaller}.ToNative(IntPtr.Add({dest_buffer}, {offset}), i, {owner}, {source}[i]);')
            return
        gen.line(f'{marshaller}.ToNative(IntPtr.Add({dest_buffer}, {offset}), 0, {owner}, {source});')

    def export_property_fields(self, gen: 'CodeGen', prop: 'PropertyInfo', readonly: bool = False):
        """Declare the native offset (and length) fields of a property"""
        modifier = 'static readonly' if readonly else 'static'
        gen.line(f'{modifier} int {prop.name}_Offset;')
        if prop.array_dim > 1:
            gen.line(f'const int {prop.name}_Length = {prop.array_dim};')

    def export_wrapper_property(self, gen: 'CodeGen', prop: 'PropertyInfo', managed_name: str,
                                greylisted: bool, whitelisted: bool):
        """Emit a class property that reads and writes the native object"""
        native_name = prop.name
        access = 'protected' if prop.has_flag(PROTECTED) and not greylisted else 'public'
        managed_type = self.managed_type(prop)
        marshaller = self.marshaller(prop, native_name)

        gen.line()
        self.export_property_fields(gen, prop)

        if prop.array_dim > 1:
            fixed_type = f'FixedSizeArrayReadWrite<{managed_type}>'
            with gen.block(f'{access} {fixed_type} {managed_name}'):
                with gen.block('get'):
                    gen.line('CheckObjectForValidity();')
                    gen.line(f'return new {fixed_type}(this, IntPtr.Add(NativeObject, {native_name}_Offset), '
                             f'{native_name}_Length, {marshaller}.ToNative, {marshaller}.FromNative);')
            return

        with gen.block(f'{access} {managed_type} {managed_name}'):
            with gen.block('get'):
                gen.line('CheckObjectForValidity();')
                gen.line(f'return {marshaller}.FromNative(IntPtr.Add(NativeObject, {native_name}_Offset), 0, this);')
            if whitelisted or not prop.has_flag(BLUEPRINT_READ_ONLY):
                with gen.block('set'):
                    gen.line('CheckObjectForValidity();')
                    gen.line(f'{marshaller}.ToNative(IntPtr.Add(NativeObject, {native_name}_Offset), 0, this, value);')

    def export_mirror_property(self, gen: 'CodeGen', prop: 'PropertyInfo', managed_name: str,
                               greylisted: bool, suppress_offsets: bool):
        """Emit a struct field mirroring the native field"""
        if not suppress_offsets:
            self.export_property_fields(gen, prop, readonly=True)
        access = 'protected' if prop.has_flag(PROTECTED) and not greylisted else 'public'
        managed_type = self.managed_type(prop)
        if prop.array_dim > 1:
            managed_type += '[]'
        gen.line(f'{access} {managed_type} {managed_name};')


class PrimitiveTranslator(PropertyTranslator):
    """Integer and floating point kinds"""

    supported_in_static_array = True

    def is_blittable(self, prop: 'PropertyInfo') -> bool:
        return True

    def managed_type(self, prop: 'PropertyInfo') -> str:
        return PRIMITIVE_TYPES[prop.kind]

    def marshaller(self, prop: 'PropertyInfo', native_name: str = '') -> str:
        return f'BlittableMarshaller<{self.managed_type(prop)}>'


class BoolTranslator(PropertyTranslator):

    supported_in_static_array = True

    def managed_type(self, prop: 'PropertyInfo') -> str:
        return 'bool'

    def marshaller(self, prop: 'PropertyInfo', native_name: str = '') -> str:
        return 'BoolMarshaller'

    def default_value(self, prop: 'PropertyInfo') -> str:
        return 'false'


class EnumTranslator(PropertyTranslator):

    supported_in_static_array = True

    def can_handle(self, prop: 'PropertyInfo') -> bool:
        return isinstance(prop.ref, EnumInfo) and self.registry.policy.allows_enum(prop.ref)

    def is_blittable(self, prop: 'PropertyInfo') -> bool:
        return True

    def managed_type(self, prop: 'PropertyInfo') -> str:
        return self.names.get_qualified_name(prop.ref)

    def marshaller(self, prop: 'PropertyInfo', native_name: str = '') -> str:
        return f'EnumMarshaller<{self.managed_type(prop)}>'


class NameTranslator(PropertyTranslator):

    supported_in_static_array = True

    def is_blittable(self, prop: 'PropertyInfo') -> bool:
        return True

    def managed_type(self, prop: 'PropertyInfo') -> str:
        return 'Name'

    def marshaller(self, prop: 'PropertyInfo', native_name: str = '') -> str:
        return 'BlittableMarshaller<Name>'


class StringTranslator(PropertyTranslator):

    def managed_type(self, prop: 'PropertyInfo') -> str:
        return 'string'

    def marshaller(self, prop: 'PropertyInfo', native_name: str = '') -> str:
        return 'StringMarshaller'

    def default_value(self, prop: 'PropertyInfo') -> str:
        return 'string.Empty'


class TextTranslator(PropertyTranslator):

    supported_as_overridable_parameter = False
    supported_as_overridable_return_value = False

    def managed_type(self, prop: 'PropertyInfo') -> str:
        return 'Text'

    def marshaller(self, prop: 'PropertyInfo', native_name: str = '') -> str:
        return 'TextMarshaller'


class ObjectTranslator(PropertyTranslator):
    """Object, class, soft and weak object references"""

    WRAPPERS = {
        PropertyKind.OBJECT: ('{}', 'ObjectMarshaller<{}>'),
        PropertyKind.CLASS: ('SubclassOf<{}>', 'SubclassOfMarshaller<{}>'),
        PropertyKind.SOFT_OBJECT: ('TSoftObjectPtr<{}>', 'SoftObjectMarshaller<{}>'),
        PropertyKind.WEAK_OBJECT: ('TWeakObjectPtr<{}>', 'WeakObjectMarshaller<{}>'),
    }

    def __init__(self, registry: 'TranslatorRegistry', kind: PropertyKind):
        super().__init__(registry)
        self.kind = kind
        # Only hard references can live in fixed-size native arrays
        self.supported_in_static_array = kind == PropertyKind.OBJECT

    def can_handle(self, prop: 'PropertyInfo') -> bool:
        return isinstance(prop.ref, ClassInfo) and self.registry.policy.allows_class(prop.ref)

    def managed_type(self, prop: 'PropertyInfo') -> str:
        return self.WRAPPERS[self.kind][0].format(self.names.get_qualified_name(prop.ref))

    def marshaller(self, prop: 'PropertyInfo', native_name: str = '') -> str:
        return self.WRAPPERS[self.kind][1].format(self.names.get_qualified_name(prop.ref))

    def default_value(self, prop: 'PropertyInfo') -> str:
        return 'null' if self.kind == PropertyKind.OBJECT else 'default'


class StructTranslator(PropertyTranslator):
    """Structs passed by value"""

    supported_in_static_array = True

    def can_handle(self, prop: 'PropertyInfo') -> bool:
        ref = prop.ref
        return (isinstance(ref, StructInfo) and not isinstance(ref, ClassInfo)
                and self.registry.policy.allows_struct(ref))

    def is_blittable(self, prop: 'PropertyInfo') -> bool:
        return self.registry.is_struct_blittable(prop.ref)

    def managed_type(self, prop: 'PropertyInfo') -> str:
        return self.names.get_qualified_name(prop.ref)

    def marshaller(self, prop: 'PropertyInfo', native_name: str = '') -> str:
        if self.is_blittable(prop):
            return f'BlittableMarshaller<{self.managed_type(prop)}>'
        return f'{self.managed_type(prop)}Marshaler'


class ContainerTranslator(PropertyTranslator):
    """Arrays, sets and maps backed by a native container"""

    supported_as_inner = False
    TYPES = {
        PropertyKind.ARRAY: ('System.Collections.Generic.IList<{}>', 'ArrayMarshaller<{}>'),
        PropertyKind.SET: ('System.Collections.Generic.ISet<{}>', 'SetMarshaller<{}>'),
        PropertyKind.MAP: ('System.Collections.Generic.IDictionary<{}>', 'MapMarshaller<{}>'),
    }

    def __init__(self, registry: 'TranslatorRegistry', kind: PropertyKind):
        super().__init__(registry)
        self.kind = kind
        if kind != PropertyKind.ARRAY:
            self.supported_as_struct_property = False
            self.supported_as_overridable_parameter = False
        self.supported_as_overridable_return_value = False

    def _elements(self, prop: 'PropertyInfo') -> list['PropertyInfo']:
        if self.kind == PropertyKind.MAP:
            return [prop.inner, prop.value]
        return [prop.inner]

    def can_handle(self, prop: 'PropertyInfo') -> bool:
        for element in self._elements(prop):
            if element is None or element.kind in CONTAINER_KINDS:
                return False
            translator = self.registry.find(element)
            if not translator.supported_as_inner or not translator.can_handle(element):
                return False
        return True

    def _element_types(self, prop: 'PropertyInfo') -> str:
        return ', '.join(self.registry.find(e).managed_type(e) for e in self._elements(prop))

    def managed_type(self, prop: 'PropertyInfo') -> str:
        return self.TYPES[self.kind][0].format(self._element_types(prop))

    def marshaller(self, prop: 'PropertyInfo', native_name: str = '') -> str:
        handle = f'{native_name or prop.name}_NativeProperty'
        args = [handle]
        for element in self._elements(prop):
            element_marshaller = self.registry.find(element).marshaller(element)
            args.append(f'{element_marshaller}.ToNative')
            args.append(f'{element_marshaller}.FromNative')
        return f"new {self.TYPES[self.kind][1].format(self._element_types(prop))}({', '.join(args)})"

    def export_property_fields(self, gen: 'CodeGen', prop: 'PropertyInfo', readonly: bool = False):
        super().export_property_fields(gen, prop, readonly)
        modifier = 'static readonly' if readonly else 'static'
        gen.line(f'{modifier} IntPtr {prop.name}_NativeProperty;')

    def export_property_static_construction(self, gen: 'CodeGen', prop: 'PropertyInfo',
                                            native_name: str):
        super().export_property_static_construction(gen, prop, native_name)
        gen.line(f'{native_name}_NativeProperty = {PROPERTY_CALLBACKS}.CallGetNativePropertyFromName('
                 f'NativeClassPtr, "{native_name}");')

    def export_parameter_fields(self, gen: 'CodeGen', native_method_name: str,
                                param: 'PropertyInfo'):
        super().export_parameter_fields(gen, native_method_name, param)
        gen.line(f'static IntPtr {native_method_name}_{param.name}_NativeProperty;')

    def export_parameter_static_construction(self, gen: 'CodeGen', native_method_name: str,
                                             param: 'PropertyInfo'):
        super().export_parameter_static_construction(gen, native_method_name, param)
        gen.line(f'{native_method_name}_{param.name}_NativeProperty = {PROPERTY_CALLBACKS}.CallGetNativePropertyFromName('
                 f'{native_method_name}_NativeFunction, "{param.name}");')


class InterfaceTranslator(PropertyTranslator):

    supported_as_struct_property = False

    def can_handle(self, prop: 'PropertyInfo') -> bool:
        return isinstance(prop.ref, ClassInfo)

    def managed_type(self, prop: 'PropertyInfo') -> str:
        return self.names.get_qualified_name(prop.ref)

    def marshaller(self, prop: 'PropertyInfo', native_name: str = '') -> str:
        return f'ScriptInterfaceMarshaller<{self.managed_type(prop)}>'

    def default_value(self, prop: 'PropertyInfo') -> str:
        return 'null'


class DelegateTranslator(PropertyTranslator):
    """Single-cast delegates are parameters only; multicast ones class properties only"""

    supported_as_struct_property = False
    supported_as_return_value = False
    supported_as_overridable_parameter = False
    supported_as_overridable_return_value = False
    supported_as_inner = False

    def __init__(self, registry: 'TranslatorRegistry', kind: PropertyKind):
        super().__init__(registry)
        self.kind = kind
        self.supported_as_property = kind == PropertyKind.MULTICAST_DELEGATE
        self.supported_as_parameter = kind == PropertyKind.DELEGATE

    def can_handle(self, prop: 'PropertyInfo') -> bool:
        return bool(prop.ref_name)

    def managed_type(self, prop: 'PropertyInfo') -> str:
        return prop.ref_name

    def marshaller(self, prop: 'PropertyInfo', native_name: str = '') -> str:
        if self.kind == PropertyKind.MULTICAST_DELEGATE:
            return f'MulticastDelegateMarshaller<{prop.ref_name}>'
        return f'DelegateMarshaller<{prop.ref_name}>'

    def default_value(self, prop: 'PropertyInfo') -> str:
        return 'null'


class TranslatorRegistry:
    """Capability-indexed set of translators, one per property kind"""

    def __init__(self, names: 'NameMapper', policy: 'FilterPolicy',
                 exported_properties: Callable[[StructInfo], list['PropertyInfo']]):
        self.names = names
        self.policy = policy
        self.exported_properties = exported_properties
        self._blittable: dict[StructInfo, bool] = {}

        self._translators: dict[PropertyKind, PropertyTranslator] = {
            PropertyKind.BOOL: BoolTranslator(self),
            PropertyKind.ENUM: EnumTranslator(self),
            PropertyKind.NAME: NameTranslator(self),
            PropertyKind.STRING: StringTranslator(self),
            PropertyKind.TEXT: TextTranslator(self),
            PropertyKind.STRUCT: StructTranslator(self),
            PropertyKind.INTERFACE: InterfaceTranslator(self),
        }
        primitive = PrimitiveTranslator(self)
        for kind in PRIMITIVE_TYPES:
            self._translators[kind] = primitive
        for kind in ObjectTranslator.WRAPPERS:
            self._translators[kind] = ObjectTranslator(self, kind)
        for kind in ContainerTranslator.TYPES:
            self._translators[kind] = ContainerTranslator(self, kind)
        for kind in (PropertyKind.DELEGATE, PropertyKind.MULTICAST_DELEGATE):
            self._translators[kind] = DelegateTranslator(self, kind)

        missing = set(PropertyKind) - set(self._translators)
        if missing:
            raise GlueGenError(f"no translator for kinds: {', '.join(sorted(k.value for k in missing))}")

    def find(self, prop: 'PropertyInfo') -> PropertyTranslator:
        return self._translators[prop.kind]

    def is_property_blittable(self, prop: 'PropertyInfo') -> bool:
        return prop.array_dim == 1 and self.find(prop).is_blittable(prop)

    def is_struct_blittable(self, struct: StructInfo) -> bool:
        """A struct is blittable iff all of its exported properties are"""
        cached = self._blittable.get(struct)
        if cached is not None:
            return cached

        # Structs that (indirectly) contain themselves are not blittable
        self._blittable[struct] = False
        result = all(self.is_property_blittable(p) for p in self.exported_properties(struct))
        self._blittable[struct] = result
        return result
