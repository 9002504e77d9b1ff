"""
glue_gen - C# glue generation framework for a native reflection graph

This framework turns the classes, structs, enums and interfaces of a native
type graph into UnrealSharp-style C# bindings. It is designed to be
configured by host-specific hooks that adjust the filter policy.
"""

from .ir import (
    TypeGraph, TypeInfo, StructInfo, ClassInfo, InterfaceInfo, EnumInfo,
    PropertyInfo, FunctionInfo, ModuleInfo, PropertyKind,
)
from .errors import GlueGenError, ConfigError, GraphError, ModuleResolutionError
from .codegen import CodeGen
from .filters import NameList, FilterPolicy
from .names import NameMapper
from .modules import GlueModule, PackagingResolver, ModuleRegistry
from .translators import PropertyTranslator, TranslatorRegistry
from .extension import ExtensionMethod, ExtensionMethodResolver
from .struct import StructGenerator
from .func import FuncGenerator
from .enum import EnumGenerator
from .module_glue import ModuleGlueGenerator
from .persistence import GeneratedFileManager
from .config import GeneratorConfig, load_config
from .generator import Generator

__all__ = [
    'TypeGraph', 'TypeInfo', 'StructInfo', 'ClassInfo', 'InterfaceInfo', 'EnumInfo',
    'PropertyInfo', 'FunctionInfo', 'ModuleInfo', 'PropertyKind',
    'GlueGenError', 'ConfigError', 'GraphError', 'ModuleResolutionError',
    'CodeGen',
    'NameList', 'FilterPolicy',
    'NameMapper',
    'GlueModule', 'PackagingResolver', 'ModuleRegistry',
    'PropertyTranslator', 'TranslatorRegistry',
    'ExtensionMethod', 'ExtensionMethodResolver',
    'StructGenerator',
    'FuncGenerator',
    'EnumGenerator',
    'ModuleGlueGenerator',
    'GeneratedFileManager',
    'GeneratorConfig', 'load_config',
    'Generator',
]
