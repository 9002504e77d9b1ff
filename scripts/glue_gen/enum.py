"""
Enum binding generation module

Generates C# enum declarations that keep the native ordinals.
"""

from typing import TYPE_CHECKING

from .codegen import CodeGen

if TYPE_CHECKING:
    from .filters import FilterPolicy
    from .ir import EnumInfo
    from .names import NameMapper

# C# underlying types of native enum storage kinds
UNDERLYING_TYPES = {
    'int8': 'sbyte',
    'int16': 'short',
    'int32': 'int',
    'int64': 'long',
    'uint8': 'byte',
    'uint16': 'ushort',
    'uint32': 'uint',
    'uint64': 'ulong',
}

# Suffix of the trailing sentinel entry the native side appends
MAX_SUFFIX = 'MAX'


class EnumGenerator:
    """Generates enum declarations"""

    def __init__(self, policy: 'FilterPolicy', names: 'NameMapper'):
        self.policy = policy
        self.names = names

    def collect_values(self, enum: 'EnumInfo') -> list[tuple[str, int]]:
        """Return the (name, ordinal) pairs to export

        Rejected entries still use up their ordinal. A trailing MAX
        sentinel is dropped.
        """
        values = []
        count = len(enum.entries)
        for i, qualified_name in enumerate(enum.entries):
            if not self.policy.allows_enum_entry(enum, qualified_name):
                continue

            raw_name = self._get_short_name(qualified_name)
            if i == count - 1 and raw_name.endswith(MAX_SUFFIX):
                continue

            values.append((raw_name, i))
        return values

    def generate(self, enum: 'EnumInfo', gen: CodeGen):
        """Generate the enum declaration"""
        gen.script_skeleton(self.names.get_namespace(enum))
        gen.line('[UEnum]')
        underlying = UNDERLYING_TYPES.get(enum.underlying, 'byte')
        gen.declare_type('enum', self.names.get_type_script_name(enum), underlying, is_partial=False)

        for name, ordinal in self.collect_values(enum):
            gen.line(f'{name}={ordinal},')

        gen.close_brace()

    @staticmethod
    def _get_short_name(item_name: str) -> str:
        """Strip the enum qualifier from an entry name

        Examples:
            ECollisionChannel::ECC_Pawn -> ECC_Pawn
            ECC_Pawn -> ECC_Pawn
        """
        colon = item_name.find('::')
        if colon != -1:
            return item_name[colon + 2:]
        return item_name
