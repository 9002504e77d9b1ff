"""
IR (Intermediate Representation) module

Reads and represents the native reflection graph (classes, structs, enums,
interfaces and their members) exported by the host as JSON.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional
import json

from .errors import GraphError


class PropertyKind(Enum):
    """Closed set of native property data kinds"""
    BOOL = 'bool'
    INT8 = 'int8'
    INT16 = 'int16'
    INT32 = 'int32'
    INT64 = 'int64'
    UINT8 = 'uint8'
    UINT16 = 'uint16'
    UINT32 = 'uint32'
    UINT64 = 'uint64'
    FLOAT = 'float'
    DOUBLE = 'double'
    ENUM = 'enum'
    NAME = 'name'
    STRING = 'string'
    TEXT = 'text'
    OBJECT = 'object'
    CLASS = 'class'
    SOFT_OBJECT = 'soft_object'
    WEAK_OBJECT = 'weak_object'
    STRUCT = 'struct'
    ARRAY = 'array'
    SET = 'set'
    MAP = 'map'
    INTERFACE = 'interface'
    DELEGATE = 'delegate'
    MULTICAST_DELEGATE = 'multicast_delegate'


# Type flags
ABSTRACT = 'abstract'
DEPRECATED = 'deprecated'
TRANSIENT = 'transient'
COMPILED_FROM_BLUEPRINT = 'compiled_from_blueprint'
NEWER_VERSION_EXISTS = 'newer_version_exists'
DEFAULT_OBJECT = 'default_object'
TRANSIENT_PACKAGE = 'transient_package'
BLUEPRINT_TYPE = 'blueprint_type'
BLUEPRINTABLE = 'blueprintable'
GENERATED_BY_BLUEPRINT = 'generated_by_blueprint'
CANNOT_IMPLEMENT_INTERFACE = 'cannot_implement_interface_in_blueprint'

# Property flags
BLUEPRINT_VISIBLE = 'blueprint_visible'
BLUEPRINT_READ_ONLY = 'blueprint_read_only'
PROTECTED = 'protected'
RETURN_PARM = 'return'
OUT_PARM = 'out'
REF_PARM = 'ref_param'

# Function flags
STATIC = 'static'
BLUEPRINT_EVENT = 'blueprint_event'
BLUEPRINT_CALLABLE = 'blueprint_callable'

# Function metadata keys
MD_LATENT = 'Latent'
MD_INTERNAL_USE_ONLY = 'BlueprintInternalUseOnly'
MD_CATEGORY = 'Category'


@dataclass(eq=False)
class ModuleInfo:
    """Native module (deployment unit) information"""
    name: str
    plugin_type: Optional[str] = None  # 'project', 'engine', 'enterprise', 'other'
    is_loaded: bool = True
    is_game_module: bool = False


@dataclass(eq=False)
class PropertyInfo:
    """Property, struct field or function parameter information"""
    name: str
    kind: PropertyKind
    array_dim: int = 1
    ref_name: str = ''  # Referenced type name (struct, enum, object class...)
    ref: Optional['TypeInfo'] = None
    inner: Optional['PropertyInfo'] = None  # Container element / map key
    value: Optional['PropertyInfo'] = None  # Map value
    flags: frozenset[str] = frozenset()
    metadata: dict[str, str] = field(default_factory=dict)
    owner: str = ''

    def has_flag(self, flag: str) -> bool:
        return flag in self.flags

    @property
    def is_return(self) -> bool:
        return RETURN_PARM in self.flags


@dataclass(eq=False)
class FunctionInfo:
    """Function declaration information"""
    name: str
    params: list[PropertyInfo] = field(default_factory=list)
    flags: frozenset[str] = frozenset()
    metadata: dict[str, str] = field(default_factory=dict)
    owner: str = ''

    def has_flag(self, flag: str) -> bool:
        return flag in self.flags

    def has_metadata(self, key: str) -> bool:
        return key in self.metadata

    @property
    def return_param(self) -> Optional[PropertyInfo]:
        for param in self.params:
            if param.is_return:
                return param
        return None

    @property
    def arguments(self) -> list[PropertyInfo]:
        """Parameters excluding the return value, in declaration order"""
        return [p for p in self.params if not p.is_return]

    @property
    def num_params(self) -> int:
        """Parameter count including the return value"""
        return len(self.params)

    @property
    def category(self) -> str:
        return self.metadata.get(MD_CATEGORY, '')

    def find_param(self, name: str) -> Optional[PropertyInfo]:
        for param in self.params:
            if param.name == name:
                return param
        return None


@dataclass(eq=False)
class TypeInfo:
    """Base for every native type node"""
    name: str
    module: ModuleInfo
    flags: frozenset[str] = frozenset()

    def has_flag(self, flag: str) -> bool:
        return flag in self.flags


@dataclass(eq=False)
class StructInfo(TypeInfo):
    """Script struct information"""
    properties: list[PropertyInfo] = field(default_factory=list)


@dataclass(eq=False)
class ClassInfo(StructInfo):
    """Class information"""
    super_class: Optional['ClassInfo'] = None
    interfaces: list['ClassInfo'] = field(default_factory=list)
    functions: list[FunctionInfo] = field(default_factory=list)
    super_name: str = ''
    interface_names: list[str] = field(default_factory=list)

    def ancestors(self):
        """Yield super classes, nearest first"""
        cls = self.super_class
        seen = set()
        while cls is not None and id(cls) not in seen:
            seen.add(id(cls))
            yield cls
            cls = cls.super_class

    def is_child_of(self, name: str) -> bool:
        """Check if the class is, or derives from, the class called name"""
        if self.name == name:
            return True
        return any(cls.name == name for cls in self.ancestors())

    def find_function(self, name: str) -> Optional[FunctionInfo]:
        for func in self.functions:
            if func.name == name:
                return func
        return None


@dataclass(eq=False)
class InterfaceInfo(ClassInfo):
    """Interface information"""
    pass


@dataclass(eq=False)
class EnumInfo(TypeInfo):
    """Enum type information"""
    entries: list[str] = field(default_factory=list)
    underlying: str = 'uint8'


_TYPE_KINDS = {
    'class': ClassInfo,
    'interface': InterfaceInfo,
    'struct': StructInfo,
    'enum': EnumInfo,
}


@dataclass
class TypeGraph:
    """Intermediate representation of the native reflection graph"""
    modules: dict[str, ModuleInfo]
    types: list[TypeInfo]

    @staticmethod
    def read_document(json_path: str) -> dict:
        """Read a raw graph document"""
        try:
            with open(json_path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except (OSError, ValueError) as exc:
            raise GraphError(f'Failed to read type graph {json_path}: {exc}') from exc

    @classmethod
    def load(cls, json_path: str) -> 'TypeGraph':
        """Load a graph from a JSON file"""
        return cls.from_dict(cls.read_document(json_path))

    @classmethod
    def from_dict(cls, data: dict, known: Optional['TypeGraph'] = None) -> 'TypeGraph':
        """Create a graph from a dictionary

        References are linked by name against the new types first and then
        against the types of a previously loaded graph, if given.
        """
        if not isinstance(data, dict):
            raise GraphError('type graph must be a mapping')

        modules: dict[str, ModuleInfo] = dict(known.modules) if known else {}
        for mod in data.get('modules', []):
            name = mod['name']
            modules[name] = ModuleInfo(
                name=name,
                plugin_type=mod.get('plugin_type'),
                is_loaded=mod.get('is_loaded', True),
                is_game_module=mod.get('is_game_module', False),
            )

        types = []
        for decl in data.get('types', []):
            types.append(cls._parse_type(decl, modules))

        graph = cls(modules=modules, types=types)
        index = known.index() if known else {}
        index.update(graph.index())
        for type_info in types:
            cls._link(type_info, index)
        return graph

    @classmethod
    def _parse_type(cls, decl: dict, modules: dict[str, ModuleInfo]) -> TypeInfo:
        """Parse a single type declaration"""
        kind = decl.get('kind')
        type_cls = _TYPE_KINDS.get(kind)
        if type_cls is None:
            raise GraphError(f"unknown type kind {kind!r} for {decl.get('name')!r}")
        if 'name' not in decl or 'module' not in decl:
            raise GraphError(f'type declaration is missing name or module: {decl!r}')

        module_name = decl['module']
        module = modules.get(module_name)
        if module is None:
            module = modules[module_name] = ModuleInfo(name=module_name)

        name = decl['name']
        flags = frozenset(decl.get('flags', []))

        if type_cls is EnumInfo:
            return EnumInfo(
                name=name,
                module=module,
                flags=flags,
                entries=list(decl.get('entries', [])),
                underlying=decl.get('underlying', 'uint8'),
            )

        properties = [cls._parse_property(p, name) for p in decl.get('properties', [])]
        if type_cls is StructInfo:
            return StructInfo(name=name, module=module, flags=flags, properties=properties)

        functions = [cls._parse_function(f, name) for f in decl.get('functions', [])]
        return type_cls(
            name=name,
            module=module,
            flags=flags,
            properties=properties,
            functions=functions,
            super_name=decl.get('super') or '',
            interface_names=list(decl.get('interfaces', [])),
        )

    @classmethod
    def _parse_property(cls, decl: dict, owner: str) -> PropertyInfo:
        """Parse property declaration"""
        try:
            kind = PropertyKind(decl['kind'])
        except (KeyError, ValueError) as exc:
            raise GraphError(f"bad property kind in {owner}.{decl.get('name')}") from exc
        inner = decl.get('inner')
        value = decl.get('value')
        return PropertyInfo(
            name=decl['name'],
            kind=kind,
            array_dim=int(decl.get('array_dim', 1)),
            ref_name=decl.get('type', ''),
            inner=cls._parse_property(inner, owner) if inner else None,
            value=cls._parse_property(value, owner) if value else None,
            flags=frozenset(decl.get('flags', [])),
            metadata=dict(decl.get('metadata', {})),
            owner=owner,
        )

    @classmethod
    def _parse_function(cls, decl: dict, owner: str) -> FunctionInfo:
        """Parse function declaration"""
        params = [cls._parse_property(p, owner) for p in decl.get('params', [])]
        return FunctionInfo(
            name=decl['name'],
            params=params,
            flags=frozenset(decl.get('flags', [])),
            metadata=dict(decl.get('metadata', {})),
            owner=owner,
        )

    @classmethod
    def _link(cls, type_info: TypeInfo, index: dict[str, TypeInfo]):
        """Resolve name references into object links"""
        if isinstance(type_info, ClassInfo):
            sup = index.get(type_info.super_name)
            type_info.super_class = sup if isinstance(sup, ClassInfo) else None
            type_info.interfaces = [index[n] for n in type_info.interface_names
                                    if isinstance(index.get(n), ClassInfo)]
            for func in type_info.functions:
                for param in func.params:
                    cls._link_property(param, index)
        if isinstance(type_info, StructInfo):
            for prop in type_info.properties:
                cls._link_property(prop, index)

    @classmethod
    def _link_property(cls, prop: PropertyInfo, index: dict[str, TypeInfo]):
        if prop.ref_name:
            prop.ref = index.get(prop.ref_name)
        if prop.inner is not None:
            cls._link_property(prop.inner, index)
        if prop.value is not None:
            cls._link_property(prop.value, index)

    def index(self) -> dict[str, TypeInfo]:
        """Map type names to type nodes (later revisions win)"""
        return {t.name: t for t in self.types}

    def find(self, name: str) -> Optional[TypeInfo]:
        """Get the newest type called name"""
        for type_info in reversed(self.types):
            if type_info.name == name:
                return type_info
        return None

    def types_in_module(self, module_name: str) -> list[TypeInfo]:
        """Return the types owned by a module"""
        return [t for t in self.types if t.module.name == module_name]

    def merge(self, data: dict) -> list[TypeInfo]:
        """Add a newly loaded module's declarations, returning the new types"""
        update = TypeGraph.from_dict(data, known=self)
        self.modules.update(update.modules)
        self.types.extend(update.types)
        return update.types
