"""
Filter policy module

Exclude (blacklist), force-include (whitelist) and relaxed-visibility
(greylist) name lists consulted while deciding what gets exported.
"""

import json
from typing import Union, TYPE_CHECKING

from .errors import ConfigError

if TYPE_CHECKING:
    from .ir import TypeInfo, PropertyInfo, FunctionInfo, EnumInfo

TypeRef = Union[str, 'TypeInfo']


def _name(value) -> str:
    return value if isinstance(value, str) else value.name


class NameList:
    """A set of type, member and (type, member) names"""

    def __init__(self):
        self.classes: set[str] = set()
        self.structs: set[str] = set()
        self.enums: set[str] = set()
        self.enum_entries: set[tuple[str, str]] = set()
        self.functions: set[tuple[str, str]] = set()
        self.properties: set[tuple[str, str]] = set()
        self.function_categories: set[tuple[str, str]] = set()

    def add_class(self, name: TypeRef):
        self.classes.add(_name(name))

    def add_struct(self, name: TypeRef):
        self.structs.add(_name(name))

    def add_enum(self, name: TypeRef):
        self.enums.add(_name(name))

    def add_enum_entry(self, enum: TypeRef, entry: str):
        self.enum_entries.add((_name(enum), entry))

    def add_function(self, owner: TypeRef, function: str):
        self.functions.add((_name(owner), function))

    def add_property(self, owner: TypeRef, prop: str):
        self.properties.add((_name(owner), prop))

    def add_function_category(self, owner: TypeRef, category: str):
        """Add every function of owner declared under category"""
        self.function_categories.add((_name(owner), category))

    def has_class(self, cls: TypeRef) -> bool:
        return _name(cls) in self.classes

    def has_struct(self, struct: TypeRef) -> bool:
        return _name(struct) in self.structs

    def has_enum(self, enum: TypeRef) -> bool:
        return _name(enum) in self.enums

    def has_enum_entry(self, enum: TypeRef, entry: str) -> bool:
        return (_name(enum), entry) in self.enum_entries

    def has_function(self, owner: TypeRef, function: Union[str, 'FunctionInfo']) -> bool:
        return (_name(owner), _name(function)) in self.functions

    def has_property(self, owner: TypeRef, prop: Union[str, 'PropertyInfo']) -> bool:
        return (_name(owner), _name(prop)) in self.properties

    def has_function_category(self, owner: TypeRef, category: str) -> bool:
        return bool(category) and (_name(owner), category) in self.function_categories

    def update(self, data: dict):
        """Add entries from a mapping as found in a policy file

        Example:
            {"classes": ["AnimationBlueprintLibrary"],
             "functions": [["Actor", "UserConstructionScript"]],
             "function_categories": [["KismetMathLibrary", "Math|Vector4"]]}
        """
        if not isinstance(data, dict):
            raise ConfigError('name list must be a mapping')
        self.classes.update(_as_names(data, 'classes'))
        self.structs.update(_as_names(data, 'structs'))
        self.enums.update(_as_names(data, 'enums'))
        self.enum_entries.update(_as_pairs(data, 'enum_entries'))
        self.functions.update(_as_pairs(data, 'functions'))
        self.properties.update(_as_pairs(data, 'properties'))
        self.function_categories.update(_as_pairs(data, 'function_categories'))

    def __len__(self) -> int:
        return (len(self.classes) + len(self.structs) + len(self.enums)
                + len(self.enum_entries) + len(self.functions)
                + len(self.properties) + len(self.function_categories))


def _as_names(data: dict, key: str) -> list[str]:
    values = data.get(key, [])
    if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
        raise ConfigError(f'{key} must be a list of names')
    return values


def _as_pairs(data: dict, key: str) -> list[tuple[str, str]]:
    values = data.get(key, [])
    if not isinstance(values, list):
        raise ConfigError(f'{key} must be a list of [type, member] pairs')
    pairs = []
    for value in values:
        if (not isinstance(value, (list, tuple)) or len(value) != 2
                or not all(isinstance(v, str) for v in value)):
            raise ConfigError(f'{key} must be a list of [type, member] pairs')
        pairs.append((value[0], value[1]))
    return pairs


class FilterPolicy:
    """Inclusion policy for one generation session"""

    LISTS = ('blacklist', 'whitelist', 'greylist', 'internal_whitelist')

    def __init__(self):
        self.blacklist = NameList()
        self.whitelist = NameList()
        self.greylist = NameList()
        # Latent / internal-only functions that must still be exported
        self.internal_whitelist = NameList()

    @classmethod
    def load(cls, path: str) -> 'FilterPolicy':
        """Load a policy from a JSON file"""
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            raise ConfigError(f'Failed to read policy {path}: {exc}') from exc
        policy = cls()
        policy.update(data)
        return policy

    def update(self, data: dict):
        if not isinstance(data, dict):
            raise ConfigError('policy must contain a mapping at the root')
        unknown = set(data) - set(self.LISTS)
        if unknown:
            raise ConfigError(f"unknown policy lists: {', '.join(sorted(unknown))}")
        for key in self.LISTS:
            if key in data:
                getattr(self, key).update(data[key])

    def allows_class(self, cls: TypeRef) -> bool:
        return not self.blacklist.has_class(cls)

    def allows_struct(self, struct: TypeRef) -> bool:
        return not self.blacklist.has_struct(struct)

    def allows_enum(self, enum: TypeRef) -> bool:
        return self.whitelist.has_enum(enum) or not self.blacklist.has_enum(enum)

    def allows_enum_entry(self, enum: 'EnumInfo', entry: str) -> bool:
        return self.whitelist.has_enum_entry(enum, entry) or not self.blacklist.has_enum_entry(enum, entry)

    def allows_property(self, owner: TypeRef, prop: 'PropertyInfo') -> bool:
        return self.whitelist.has_property(owner, prop) or not self.blacklist.has_property(owner, prop)

    def forces_property(self, owner: TypeRef, prop: 'PropertyInfo') -> bool:
        """Whitelisted properties and every property of a whitelisted struct"""
        return self.whitelist.has_property(owner, prop) or self.whitelist.has_struct(owner)

    def relaxes_property(self, owner: TypeRef, prop: 'PropertyInfo') -> bool:
        return self.greylist.has_property(owner, prop)

    def allows_function(self, owner: TypeRef, function: 'FunctionInfo') -> bool:
        if self.blacklist.has_function(owner, function) and not self.whitelist.has_function(owner, function):
            return False
        return not self.blacklist.has_function_category(owner, function.category)

    def allows_internal_function(self, owner: TypeRef, function: 'FunctionInfo') -> bool:
        return self.internal_whitelist.has_function(owner, function)
