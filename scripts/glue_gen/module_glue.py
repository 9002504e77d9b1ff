"""
Module glue generation

Generates the per-module unit that exposes inferred extension methods as
instance-style calls on their receivers.
"""

from typing import Callable, Optional, TYPE_CHECKING

from .codegen import CodeGen

if TYPE_CHECKING:
    from .extension import ExtensionMethod
    from .func import FuncGenerator
    from .ir import ModuleInfo, TypeInfo
    from .modules import GlueModule
    from .names import NameMapper

# Module owning the world class when the graph does not contain it
WORLD_MODULE_NAME = 'Engine'

RECEIVER_NAME = 'self'


class ModuleGlueGenerator:
    """Generates {Module}Module units"""

    def __init__(self, names: 'NameMapper', func_gen: 'FuncGenerator',
                 find_type: Callable[[str], Optional['TypeInfo']],
                 find_module: Callable[[str], Optional['ModuleInfo']]):
        self.names = names
        self.func_gen = func_gen
        self.find_type = find_type
        self.find_module = find_module

    def receiver_type(self, method: 'ExtensionMethod') -> str:
        """C# type extended by the method"""
        if method.override_class_name:
            world = self.find_type(method.override_class_name)
            if world is not None:
                return self.names.get_qualified_name(world)
            module = self.find_module(WORLD_MODULE_NAME)
            if module is not None:
                namespace = self.names.modules.find_or_register(module).namespace
            else:
                namespace = self.names.modules.namespace_of(WORLD_MODULE_NAME)
            return f'{namespace}.{method.override_class_name}'
        param = method.self_parameter
        return self.func_gen.translators.find(param).managed_type(param)

    def generate(self, module: 'GlueModule', methods: list['ExtensionMethod']) -> str:
        gen = CodeGen()
        gen.line('// This file is automatically generated')
        gen.script_skeleton(module.namespace)
        gen.line('public static partial class {}Extensions'.format(module.name))
        gen.open_brace()

        for i, method in enumerate(methods):
            if i:
                gen.line()
            self._gen_method(gen, method)

        gen.close_brace()
        return gen.output()

    def _gen_method(self, gen: CodeGen, method: 'ExtensionMethod'):
        func = method.function
        library_name = self.names.get_script_class_name(method.library) if method.library else ''
        managed_name = self.names.map_function_name(func, library_name)
        params = [f'this {self.receiver_type(method)} {RECEIVER_NAME}']
        rest = self.func_gen.parameter_list(method.other_parameters)
        if rest:
            params.append(rest)

        args = []
        for param in func.arguments:
            if param is method.self_parameter:
                args.append(RECEIVER_NAME)
            else:
                args.append(self.func_gen.argument_list([param]))

        call = f"{self.names.get_qualified_name(method.library)}.{managed_name}({', '.join(args)});"
        with gen.block(f"public static {self.func_gen.return_type(func)} {managed_name}({', '.join(params)})"):
            if func.return_param is not None:
                gen.line(f'return {call}')
            else:
                gen.line(call)
