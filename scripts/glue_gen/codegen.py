"""
Code generation utilities

Provides an indented line builder for generating C# glue code.
"""

from typing import Optional

# Namespaces every generated unit imports
DEFAULT_USINGS = (
    'System',
    'UnrealSharp',
    'System.Runtime.InteropServices',
    'UnrealSharp.Attributes',
    'UnrealSharp.Interop',
)


class CodeGen:
    """Code generation helper with indentation support"""

    def __init__(self):
        self._lines: list[str] = []
        self._indent: int = 0
        self._indent_str: str = '    '  # 4 spaces

    def line(self, text: str = ''):
        """Add a line with current indentation"""
        if text:
            self._lines.append(self._indent_str * self._indent + text)
        else:
            self._lines.append('')

    def indent(self):
        """Increase indentation"""
        self._indent += 1

    def dedent(self):
        """Decrease indentation"""
        if self._indent > 0:
            self._indent -= 1

    def open_brace(self):
        self.line('{')
        self.indent()

    def close_brace(self, suffix: str = ''):
        self.dedent()
        self.line('}' + suffix)

    def block(self, header: str, footer: str = '}'):
        """Context manager for brace-delimited code blocks"""
        return _BlockContext(self, header, footer)

    def begin_unsafe_block(self):
        self.line('unsafe')
        self.open_brace()

    def end_unsafe_block(self):
        self.close_brace()

    def declare_directive(self, namespace: str):
        """Add a using directive"""
        self.line(f'using {namespace};')

    def script_skeleton(self, namespace: str):
        """Add the standard using directives and the file-scoped namespace"""
        for using in DEFAULT_USINGS:
            self.declare_directive(using)
        self.line()
        self.line(f'namespace {namespace};')
        self.line()

    def declare_type(self, type_kind: str, name: str, base: str = '',
                     is_abstract: bool = False, is_partial: bool = True,
                     interfaces: Optional[list[str]] = None):
        """Declare a type and open its body

        Examples:
            declare_type('class', 'Actor', 'UnrealSharp.CoreUObject.Object')
              -> public partial class Actor : UnrealSharp.CoreUObject.Object
        """
        modifiers = ['public']
        if is_abstract:
            modifiers.append('abstract')
        if is_partial:
            modifiers.append('partial')

        bases = [base] if base else []
        bases.extend(interfaces or [])
        header = f"{' '.join(modifiers)} {type_kind} {name}"
        if bases:
            header += ' : ' + ', '.join(bases)

        self.line(header)
        self.open_brace()

    def is_empty(self) -> bool:
        return not self._lines

    def output(self) -> str:
        """Get generated code as string"""
        return '\n'.join(self._lines) + '\n'


class _BlockContext:
    """Context manager for indented code blocks"""

    def __init__(self, gen: CodeGen, header: str, footer: str):
        self._gen = gen
        self._header = header
        self._footer = footer

    def __enter__(self):
        self._gen.line(self._header)
        self._gen.open_brace()
        return self

    def __exit__(self, *args):
        self._gen.dedent()
        self._gen.line(self._footer)
