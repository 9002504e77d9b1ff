"""
Main generator module

Orchestrates all components to generate C# glue for a native type graph.
"""

import os
from collections import Counter
from typing import Iterable, Optional, TYPE_CHECKING

from .codegen import CodeGen
from .enum import EnumGenerator
from .extension import ExtensionMethod, ExtensionMethodResolver
from .filters import FilterPolicy
from .func import FuncGenerator
from .ir import (
    ModuleInfo, TypeGraph, TypeInfo, StructInfo, ClassInfo, InterfaceInfo, EnumInfo,
    PropertyInfo, FunctionInfo, PropertyKind,
    ABSTRACT, DEPRECATED, TRANSIENT, COMPILED_FROM_BLUEPRINT, NEWER_VERSION_EXISTS,
    DEFAULT_OBJECT, TRANSIENT_PACKAGE, BLUEPRINT_TYPE, BLUEPRINTABLE,
    GENERATED_BY_BLUEPRINT, CANNOT_IMPLEMENT_INTERFACE,
    BLUEPRINT_VISIBLE, STATIC, BLUEPRINT_EVENT, BLUEPRINT_CALLABLE,
    MD_LATENT, MD_INTERNAL_USE_ONLY,
)
from .logging import get_logger
from .module_glue import ModuleGlueGenerator
from .modules import GlueModule, ModuleRegistry, PackagingResolver, PLUGIN_PROJECT
from .names import NameMapper, UNREAL_SHARP_OBJECT
from .persistence import GeneratedFileManager
from .struct import StructGenerator
from .translators import TranslatorRegistry

if TYPE_CHECKING:
    from .config import GeneratorConfig

logger = get_logger('generator')

GENERATED_BANNER = '// This file is automatically generated'

# Names marking trashed / reinstanced intermediates of a blueprint recompile
SKIP_NAME_PATTERNS = ('TRASH_', 'REINST_')

# Well-known native classes
OBJECT_CLASS_NAME = 'Object'
INTERFACE_CLASS_NAME = 'Interface'
SUBSYSTEM_CLASS_NAME = 'Subsystem'
FUNCTION_LIBRARY_CLASS_NAME = 'BlueprintFunctionLibrary'

# Diagnostics categories of rejected members
UNHANDLED_CATEGORIES = (
    'properties',
    'parameters',
    'return_values',
    'overridable_parameters',
    'overridable_return_values',
)


class Generator:
    """Main glue generator

    Owns the session state: the filter policy, the exported type set, the
    module registry and the extension methods collected so far. All of it
    accumulates across triggers.
    """

    def __init__(self, scripts_dir: str, project_dir: str = '',
                 host_plugin_type: Optional[str] = PLUGIN_PROJECT,
                 generated_user_content: str = 'Script/obj/Generated',
                 file_extension: str = '.cs',
                 policy: Optional[FilterPolicy] = None):
        self.policy = policy if policy is not None else FilterPolicy()
        self.modules = ModuleRegistry(PackagingResolver(
            scripts_dir, project_dir, host_plugin_type, generated_user_content))
        self.names = NameMapper(self.modules)
        self.translators = TranslatorRegistry(self.names, self.policy, self.get_exported_properties)
        self.func_gen = FuncGenerator(self.translators, self.names)
        self.struct_gen = StructGenerator(self.translators, self.names, self.policy, self.func_gen)
        self.enum_gen = EnumGenerator(self.policy, self.names)
        self.module_gen = ModuleGlueGenerator(self.names, self.func_gen, self.find_type, self.find_module)
        self.extension_resolver = ExtensionMethodResolver()
        self.files = GeneratedFileManager()
        self.file_extension = file_extension

        self.graph: Optional[TypeGraph] = None
        self.exported_types: set[TypeInfo] = set()
        self.extension_methods: dict[str, list[ExtensionMethod]] = {}
        self.unhandled: dict[str, Counter] = {c: Counter() for c in UNHANDLED_CATEGORIES}
        self.skipped: Counter = Counter()
        self._exported_properties: dict[StructInfo, list[PropertyInfo]] = {}

    @classmethod
    def from_config(cls, config: 'GeneratorConfig') -> 'Generator':
        policy = FilterPolicy.load(config.policy_path) if config.policy_path else None
        return cls(
            scripts_dir=config.output_dir,
            project_dir=config.project_dir,
            host_plugin_type=config.host_plugin_type,
            generated_user_content=config.generated_user_content,
            file_extension=config.file_extension,
            policy=policy,
        )

    # ==========================================================================
    # Configuration
    # ==========================================================================

    def ignore(self, *class_names: str):
        """Never export these classes"""
        for name in class_names:
            self.policy.blacklist.add_class(name)

    def ignore_struct(self, *struct_names: str):
        for name in struct_names:
            self.policy.blacklist.add_struct(name)

    def ignore_function(self, owner: str, *function_names: str):
        for name in function_names:
            self.policy.blacklist.add_function(owner, name)

    def ignore_category(self, owner: str, *categories: str):
        """Drop every function of owner declared under one of categories"""
        for category in categories:
            self.policy.blacklist.add_function_category(owner, category)

    def force_export(self, *class_names: str):
        """Export these classes even if they are not blueprintable"""
        for name in class_names:
            self.policy.whitelist.add_class(name)

    def allow_internal(self, owner: str, *function_names: str):
        """Export these latent or internal-only functions anyway"""
        for name in function_names:
            self.policy.internal_whitelist.add_function(owner, name)

    def relax_property(self, owner: str, *property_names: str):
        """Expose these protected properties publicly"""
        for name in property_names:
            self.policy.greylist.add_property(owner, name)

    # ==========================================================================
    # Triggers
    # ==========================================================================

    def start(self, graph: TypeGraph):
        """Generate glue for every type of an initial scan"""
        logger.info('=== Generating C# glue:')
        self.graph = graph

        forced = []
        for name in (INTERFACE_CLASS_NAME, OBJECT_CLASS_NAME):
            type_info = graph.find(name)
            if type_info is not None:
                forced.append(type_info)

        self.generate_glue_for_types(graph.types, forced)

    def on_module_loaded(self, data: dict) -> list[TypeInfo]:
        """Merge a newly loaded module's declarations and generate their glue"""
        if self.graph is None:
            self.graph = TypeGraph(modules={}, types=[])
        new_types = self.graph.merge(data)
        logger.info('=== Module loaded: %d new types', len(new_types))
        self.generate_glue_for_types(new_types)
        return new_types

    def generate_glue_for_types(self, types: Iterable[TypeInfo],
                                forced: Iterable[TypeInfo] = ()):
        """Export a batch of types and commit their files"""
        try:
            for type_info in forced:
                self.generate_glue_for_type(type_info, force_export=True)
            for type_info in types:
                self.generate_glue_for_type(type_info)
            self.save_module_glue()
        except Exception:
            self.files.discard_temp_files()
            raise

        committed = self.files.rename_temp_files()
        logger.info('  %d files updated', committed)
        self.log_diagnostics()

    def find_type(self, name: str) -> Optional[TypeInfo]:
        if self.graph is None:
            return None
        return self.graph.find(name)

    def find_module(self, name: str) -> Optional[ModuleInfo]:
        if self.graph is None:
            return None
        return self.graph.modules.get(name)

    # ==========================================================================
    # Type dispatch
    # ==========================================================================

    @staticmethod
    def should_skip(type_info: TypeInfo) -> bool:
        """Check for scratch, default object and stale intermediate types"""
        if type_info.has_flag(TRANSIENT_PACKAGE) or type_info.has_flag(DEFAULT_OBJECT):
            return True
        # Blueprint skeleton classes
        if type_info.has_flag(TRANSIENT) and type_info.has_flag(COMPILED_FROM_BLUEPRINT):
            return True
        if type_info.has_flag(NEWER_VERSION_EXISTS):
            return True
        return any(pattern in type_info.name for pattern in SKIP_NAME_PATTERNS)

    @staticmethod
    def is_interface(cls: ClassInfo) -> bool:
        if isinstance(cls, InterfaceInfo):
            return True
        return cls.is_child_of(INTERFACE_CLASS_NAME)

    def generate_glue_for_type(self, type_info: TypeInfo, force_export: bool = False):
        if type_info in self.exported_types:
            return

        if self.should_skip(type_info):
            self.skipped[type(type_info).__name__] += 1
            logger.debug('  skipped %s', type_info.name)
            return

        if isinstance(type_info, ClassInfo):
            self.modules.find_or_register(type_info.module)
            if self.is_interface(type_info):
                self.export_interface(type_info)
            elif force_export or self.should_export_class(type_info):
                self.export_class(type_info)
        elif isinstance(type_info, StructInfo):
            if force_export or self.should_export_struct(type_info):
                self.export_struct(type_info)
        elif isinstance(type_info, EnumInfo):
            if force_export or self.should_export_enum(type_info):
                self.export_enum(type_info)

    def should_export_class(self, cls: ClassInfo) -> bool:
        return self.policy.allows_class(cls) and self.can_derive_from_native_class(cls)

    def can_derive_from_native_class(self, cls: ClassInfo) -> bool:
        if any(sup.name == SUBSYSTEM_CLASS_NAME for sup in cls.ancestors()):
            return True

        creatable = not (cls.has_flag(DEPRECATED) or cls.has_flag(NEWER_VERSION_EXISTS)
                         or cls.has_flag(GENERATED_BY_BLUEPRINT))
        valid = (cls.has_flag(BLUEPRINTABLE) or self.policy.whitelist.has_class(cls)
                 or cls.is_child_of(FUNCTION_LIBRARY_CLASS_NAME))
        return creatable and valid

    def should_export_struct(self, struct: StructInfo) -> bool:
        if not self.policy.allows_struct(struct):
            return False
        return struct.has_flag(BLUEPRINT_TYPE) or self.policy.whitelist.has_struct(struct)

    def should_export_enum(self, enum: EnumInfo) -> bool:
        return self.policy.allows_enum(enum)

    # ==========================================================================
    # Member gates
    # ==========================================================================

    def can_export_property_shared(self, prop: PropertyInfo) -> bool:
        if not prop.has_flag(BLUEPRINT_VISIBLE) or prop.has_flag(DEPRECATED):
            return False
        return prop.array_dim == 1 or self.translators.find(prop).supported_in_static_array

    def can_export_property(self, owner: StructInfo, prop: PropertyInfo) -> bool:
        if not self.policy.allows_property(owner, prop):
            return False
        if not (self.can_export_property_shared(prop) or self.policy.forces_property(owner, prop)):
            return False

        translator = self.translators.find(prop)
        if isinstance(owner, ClassInfo):
            supported = translator.supported_as_property
        else:
            supported = translator.supported_as_struct_property
        if prop.array_dim > 1 and not translator.supported_in_static_array:
            supported = False

        if not supported or not translator.can_handle(prop):
            self.unhandled['properties'][prop.kind.value] += 1
            return False
        return True

    def _can_export_as(self, param: PropertyInfo, capability: str, category: str) -> bool:
        translator = self.translators.find(param)
        if param.array_dim == 1 and getattr(translator, capability) and translator.can_handle(param):
            return True
        self.unhandled[category][param.kind.value] += 1
        return False

    def can_export_parameter(self, param: PropertyInfo) -> bool:
        return self._can_export_as(param, 'supported_as_parameter', 'parameters')

    def can_export_return_value(self, param: PropertyInfo) -> bool:
        return self._can_export_as(param, 'supported_as_return_value', 'return_values')

    def can_export_overridable_parameter(self, param: PropertyInfo) -> bool:
        return self._can_export_as(param, 'supported_as_overridable_parameter', 'overridable_parameters')

    def can_export_overridable_return_value(self, param: PropertyInfo) -> bool:
        return self._can_export_as(param, 'supported_as_overridable_return_value', 'overridable_return_values')

    def can_export_function_parameters(self, func: FunctionInfo) -> bool:
        overridable = func.has_flag(BLUEPRINT_EVENT)
        for param in func.params:
            if param.is_return:
                ok = (self.can_export_overridable_return_value(param) if overridable
                      else self.can_export_return_value(param))
            else:
                ok = (self.can_export_overridable_parameter(param) if overridable
                      else self.can_export_parameter(param))
            if not ok:
                return False
        return True

    def can_export_function(self, owner: ClassInfo, func: FunctionInfo) -> bool:
        if not self.policy.allows_function(owner, func):
            return False
        if not (func.has_flag(BLUEPRINT_CALLABLE) or func.has_flag(BLUEPRINT_EVENT)):
            return False
        if func.has_metadata(MD_LATENT) or func.has_metadata(MD_INTERNAL_USE_ONLY):
            if not self.policy.allows_internal_function(owner, func):
                return False
        return self.can_export_function_parameters(func)

    def get_exported_properties(self, struct: StructInfo) -> list[PropertyInfo]:
        """Properties of struct that pass both gates, in declaration order"""
        properties = self._exported_properties.get(struct)
        if properties is None:
            properties = [p for p in struct.properties if self.can_export_property(struct, p)]
            self._exported_properties[struct] = properties
        return properties

    def get_implemented_interfaces(self, cls: ClassInfo) -> list[ClassInfo]:
        return [i for i in cls.interfaces if not i.has_flag(CANNOT_IMPLEMENT_INTERFACE)]

    def get_exported_functions(self, cls: ClassInfo) -> tuple[list[FunctionInfo], list[FunctionInfo]]:
        """Split exportable functions into regular and overridable ones

        Events of implemented interfaces are added to the overridable set
        unless the class declares an event of the same name.
        """
        functions, overridables = [], []
        for func in cls.functions:
            if not self.can_export_function(cls, func):
                continue
            if func.has_flag(BLUEPRINT_EVENT):
                overridables.append(func)
            else:
                functions.append(func)

        for interface in self.get_implemented_interfaces(cls):
            for func in interface.functions:
                if not func.has_flag(BLUEPRINT_EVENT):
                    continue
                if any(f.name == func.name for f in overridables):
                    continue
                if self.can_export_function(interface, func):
                    overridables.append(func)

        return functions, overridables

    # ==========================================================================
    # Export
    # ==========================================================================

    def get_super_class_name(self, cls: ClassInfo) -> str:
        if cls.super_class is None:
            return UNREAL_SHARP_OBJECT
        return self.names.get_qualified_name(cls.super_class)

    def export_property_dependencies(self, prop: PropertyInfo):
        """Export structs and enums a property stores by value"""
        if prop.kind in (PropertyKind.STRUCT, PropertyKind.ENUM) and prop.ref is not None:
            self.generate_glue_for_type(prop.ref, force_export=True)
        for element in (prop.inner, prop.value):
            if element is not None:
                self.export_property_dependencies(element)

    def export_interface(self, interface: ClassInfo):
        if interface in self.exported_types:
            logger.warning('%s has already been exported', interface.name)
            return
        self.exported_types.add(interface)

        name = self.names.get_type_script_name(interface)
        gen = CodeGen()
        gen.line(GENERATED_BANNER)
        gen.script_skeleton(self.names.get_namespace(interface))
        gen.line('[UInterface]')
        gen.declare_type('interface', name)

        for func in interface.functions:
            if func.has_flag(BLUEPRINT_EVENT) and self.can_export_function(interface, func):
                self.func_gen.export_interface_function(gen, func, name)

        gen.close_brace()
        self.save_type_glue(interface, gen.output())

    def export_class(self, cls: ClassInfo):
        if cls in self.exported_types:
            logger.warning('%s has already been exported', cls.name)
            return
        self.exported_types.add(cls)

        gen = CodeGen()
        gen.line(GENERATED_BANNER)

        if cls.super_class is not None:
            self.generate_glue_for_type(cls.super_class, force_export=True)

        namespace = self.names.get_namespace(cls)
        interfaces = self.get_implemented_interfaces(cls)
        usings = []
        for interface in interfaces:
            self.generate_glue_for_type(interface, force_export=True)
            interface_namespace = self.names.get_namespace(interface)
            if interface_namespace != namespace and interface_namespace not in usings:
                usings.append(interface_namespace)
        for using in usings:
            gen.declare_directive(using)

        name = self.names.get_script_class_name(cls)
        gen.script_skeleton(namespace)
        gen.line('[UClass]')
        gen.declare_type(
            'class', name, self.get_super_class_name(cls),
            is_abstract=cls.has_flag(ABSTRACT),
            interfaces=[self.names.get_qualified_name(i) for i in interfaces],
        )

        properties = self.get_exported_properties(cls)
        functions, overridables = self.get_exported_functions(cls)
        for prop in properties:
            self.export_property_dependencies(prop)
        for func in functions + overridables:
            for param in func.params:
                self.export_property_dependencies(param)

        self.struct_gen.export_static_constructor(gen, cls, properties, functions, overridables)

        gen.line()
        with gen.block(f'protected {name}(IntPtr nativeObject) : base(nativeObject)'):
            pass

        self.export_class_properties(gen, cls, properties)

        is_library = cls.is_child_of(FUNCTION_LIBRARY_CLASS_NAME)
        for func in functions:
            self.func_gen.export_function(gen, func, name)
            if is_library and func.has_flag(STATIC):
                self.add_extension_method(cls, func)

        for func in overridables:
            self.func_gen.export_overridable_function(gen, func, name)

        gen.close_brace()
        self.save_type_glue(cls, gen.output())

    def export_class_properties(self, gen: CodeGen, cls: ClassInfo, properties: list[PropertyInfo]):
        class_name = self.names.get_script_class_name(cls)
        declared: set[str] = set()
        for prop in properties:
            managed_name = self.names.map_property_name(prop, class_name)
            if managed_name in declared:
                logger.warning('%s.%s maps to the already declared property %s; skipping it',
                               cls.name, prop.name, managed_name)
                continue
            declared.add(managed_name)
            self.translators.find(prop).export_wrapper_property(
                gen, prop, managed_name,
                greylisted=self.policy.relaxes_property(cls, prop),
                whitelisted=self.policy.forces_property(cls, prop))

    def add_extension_method(self, library: ClassInfo, func: FunctionInfo):
        method = self.extension_resolver.resolve(func, library)
        if method is None:
            return
        self.extension_methods.setdefault(library.module.name, []).append(method)
        logger.debug('    extension %s.%s on %s', library.name, func.name,
                     method.override_class_name or method.self_parameter.name)

    def export_struct(self, struct: StructInfo):
        if struct in self.exported_types:
            logger.warning('%s has already been exported', struct.name)
            return
        self.exported_types.add(struct)

        properties = self.get_exported_properties(struct)
        for prop in properties:
            self.export_property_dependencies(prop)

        gen = CodeGen()
        gen.line(GENERATED_BANNER)
        self.struct_gen.generate(struct, properties, gen)
        self.save_type_glue(struct, gen.output())

    def export_enum(self, enum: EnumInfo):
        if enum in self.exported_types:
            logger.warning('%s has already been exported', enum.name)
            return
        self.exported_types.add(enum)

        gen = CodeGen()
        gen.line(GENERATED_BANNER)
        self.enum_gen.generate(enum, gen)
        self.save_type_glue(enum, gen.output())

    # ==========================================================================
    # Output
    # ==========================================================================

    def save_type_glue(self, type_info: TypeInfo, text: str) -> bool:
        module = self.modules.find_or_register(type_info.module)
        return self.save_glue(module, f'{type_info.name}.generated{self.file_extension}', text)

    def save_module_glue(self):
        """Write the extension surface of every module that has one"""
        for module_name, methods in self.extension_methods.items():
            module = self.modules.find_or_register(module_name)
            text = self.module_gen.generate(module, methods)
            self.save_glue(module, f'{module.module_filename}{self.file_extension}', text)

    def save_glue(self, module: GlueModule, filename: str, text: str) -> bool:
        """Stage a unit under the module directory, returning False if it was abandoned"""
        if not self.files.ensure_directory(module.directory):
            return False
        path = os.path.join(module.directory, filename)
        if self.files.save_file_if_changed(path, text):
            logger.debug('    %s', path)
        return True

    def log_diagnostics(self):
        for category, counter in self.unhandled.items():
            for kind, count in sorted(counter.items()):
                logger.debug('  unhandled %s: %s x%d', category, kind, count)
        for variant, count in sorted(self.skipped.items()):
            logger.debug('  skipped %s: %d', variant, count)
