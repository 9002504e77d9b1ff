"""
Name mapping module

Maps native type, property and function identifiers to C# identifiers and
namespaces.
"""

from typing import TYPE_CHECKING

from .ir import PropertyKind

if TYPE_CHECKING:
    from .ir import TypeInfo, PropertyInfo, FunctionInfo
    from .modules import ModuleRegistry

# Base class of every generated class without a native super class
UNREAL_SHARP_OBJECT = 'UnrealSharp.UnrealSharpObject'

# C# reserved keywords
CS_KEYWORDS = {
    'abstract', 'as', 'base', 'bool', 'break', 'byte', 'case', 'catch', 'char',
    'checked', 'class', 'const', 'continue', 'decimal', 'default', 'delegate',
    'do', 'double', 'else', 'enum', 'event', 'explicit', 'extern', 'false',
    'finally', 'fixed', 'float', 'for', 'foreach', 'goto', 'if', 'implicit',
    'in', 'int', 'interface', 'internal', 'is', 'lock', 'long', 'namespace',
    'new', 'null', 'object', 'operator', 'out', 'override', 'params', 'private',
    'protected', 'public', 'readonly', 'ref', 'return', 'sbyte', 'sealed',
    'short', 'sizeof', 'stackalloc', 'static', 'string', 'struct', 'switch',
    'this', 'throw', 'true', 'try', 'typeof', 'uint', 'ulong', 'unchecked',
    'unsafe', 'ushort', 'using', 'virtual', 'void', 'volatile', 'while',
}


def escape_keyword(name: str) -> str:
    """Prefix C# keywords with @ so they can be used as identifiers"""
    return '@' + name if name in CS_KEYWORDS else name


def strip_bool_prefix(name: str) -> str:
    """Strip the native 'b' prefix from boolean names

    Examples:
        bHidden -> Hidden
        bool -> bool
    """
    if len(name) > 1 and name[0] == 'b' and name[1].isupper():
        return name[1:]
    return name


def as_camel_case(name: str) -> str:
    """Lower the first character

    Examples:
        WorldContextObject -> worldContextObject
        X -> x
    """
    return name[:1].lower() + name[1:]


class NameMapper:
    """Maps native identifiers to C# identifiers"""

    def __init__(self, modules: 'ModuleRegistry'):
        self.modules = modules

    def get_type_script_name(self, type_info: 'TypeInfo') -> str:
        return escape_keyword(type_info.name)

    def get_script_class_name(self, cls: 'TypeInfo') -> str:
        return self.get_type_script_name(cls)

    def get_struct_script_name(self, struct: 'TypeInfo') -> str:
        return self.get_type_script_name(struct)

    def get_namespace(self, type_info: 'TypeInfo') -> str:
        return self.modules.find_or_register(type_info.module).namespace

    def get_qualified_name(self, type_info: 'TypeInfo') -> str:
        """Namespace-prefixed name of a type

        Example:
            Actor (module Engine) -> UnrealSharp.Engine.Actor
        """
        return f'{self.get_namespace(type_info)}.{self.get_type_script_name(type_info)}'

    def map_property_name(self, prop: 'PropertyInfo', owner_script_name: str = '') -> str:
        """Managed name of a property or struct field

        Members cannot share their enclosing type's name in C#, so such
        names get a trailing underscore.
        """
        name = prop.name
        if prop.kind == PropertyKind.BOOL:
            name = strip_bool_prefix(name)
        if owner_script_name and name == owner_script_name:
            name += '_'
        return escape_keyword(name)

    def map_function_name(self, func: 'FunctionInfo', owner_script_name: str = '') -> str:
        name = func.name
        if owner_script_name and name == owner_script_name:
            name += '_'
        return escape_keyword(name)

    def map_parameter_name(self, param: 'PropertyInfo') -> str:
        name = param.name
        if param.kind == PropertyKind.BOOL:
            name = strip_bool_prefix(name)
        return escape_keyword(as_camel_case(name))
