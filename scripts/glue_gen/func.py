"""
Function binding generation module

Generates wrapper methods, overridable stubs and interface signatures for
native functions, and the static lookups they depend on.
"""

from typing import TYPE_CHECKING

from .codegen import CodeGen
from .ir import STATIC, OUT_PARM, REF_PARM
from .translators import CLASS_CALLBACKS, FUNCTION_CALLBACKS

if TYPE_CHECKING:
    from .ir import FunctionInfo, PropertyInfo
    from .names import NameMapper
    from .translators import TranslatorRegistry


class FuncGenerator:
    """Generates function wrapper bindings"""

    def __init__(self, translators: 'TranslatorRegistry', names: 'NameMapper'):
        self.translators = translators
        self.names = names

    def return_type(self, func: 'FunctionInfo') -> str:
        ret = func.return_param
        if ret is None:
            return 'void'
        return self.translators.find(ret).managed_type(ret)

    def _param_modifier(self, param: 'PropertyInfo') -> str:
        if param.has_flag(OUT_PARM):
            return 'ref ' if param.has_flag(REF_PARM) else 'out '
        return ''

    def parameter_list(self, params: list['PropertyInfo']) -> str:
        """Declared C# parameters

        Example:
            (Target: object, bHidden: bool) -> 'UnrealSharp.Engine.Actor target, bool hidden'
        """
        decls = []
        for param in params:
            managed_type = self.translators.find(param).managed_type(param)
            decls.append(f'{self._param_modifier(param)}{managed_type} {self.names.map_parameter_name(param)}')
        return ', '.join(decls)

    def argument_list(self, params: list['PropertyInfo']) -> str:
        return ', '.join(f'{self._param_modifier(p)}{self.names.map_parameter_name(p)}' for p in params)

    def export_static_construction(self, gen: CodeGen, func: 'FunctionInfo'):
        """Look up the native function, its parameter block size and parameter offsets"""
        native_name = func.name
        gen.line(f'{native_name}_NativeFunction = {CLASS_CALLBACKS}.CallGetNativeFunctionFromClassAndName('
                 f'NativeClassPtr, "{native_name}");')

        if func.num_params > 0:
            gen.line(f'{native_name}_ParamsSize = {FUNCTION_CALLBACKS}.CallGetNativeFunctionParamsSize('
                     f'{native_name}_NativeFunction);')

        for param in func.params:
            self.translators.find(param).export_parameter_static_construction(gen, native_name, param)

    def export_overridable_static_construction(self, gen: CodeGen, func: 'FunctionInfo'):
        """Same as export_static_construction, skipped for parameterless events"""
        if func.num_params == 0:
            return

        native_name = func.name
        gen.line(f'IntPtr {native_name}_NativeFunction = {CLASS_CALLBACKS}.CallGetNativeFunctionFromClassAndName('
                 f'NativeClassPtr, "{native_name}");')
        gen.line(f'{native_name}_ParamsSize = {FUNCTION_CALLBACKS}.CallGetNativeFunctionParamsSize('
                 f'{native_name}_NativeFunction);')
        for param in func.params:
            self.translators.find(param).export_parameter_static_construction(gen, native_name, param)
        gen.line()

    def _export_parameter_fields(self, gen: CodeGen, func: 'FunctionInfo'):
        if func.num_params > 0:
            gen.line(f'static int {func.name}_ParamsSize;')
        for param in func.params:
            self.translators.find(param).export_parameter_fields(gen, func.name, param)

    def export_function(self, gen: CodeGen, func: 'FunctionInfo', owner_script_name: str):
        """Generate a wrapper that invokes the native function"""
        native_name = func.name
        is_static = func.has_flag(STATIC)
        managed_name = self.names.map_function_name(func, owner_script_name)
        owner = 'null' if is_static else 'this'

        gen.line()
        gen.line(f'static IntPtr {native_name}_NativeFunction;')
        self._export_parameter_fields(gen, func)

        modifiers = 'public static' if is_static else 'public'
        header = f'{modifiers} {self.return_type(func)} {managed_name}({self.parameter_list(func.arguments)})'
        invoke = ('InvokeNativeStaticFunction(NativeClassPtr, ' if is_static
                  else 'InvokeNativeFunction(NativeObject, ')

        with gen.block(header):
            if func.num_params == 0:
                gen.line(f'{invoke}{native_name}_NativeFunction, IntPtr.Zero);')
                return

            gen.begin_unsafe_block()
            gen.line(f'byte* ParamsBufferAllocation = stackalloc byte[{native_name}_ParamsSize];')
            gen.line('IntPtr ParamsBuffer = (IntPtr) ParamsBufferAllocation;')
            gen.line(f'{FUNCTION_CALLBACKS}.CallInitializeFunctionParams({native_name}_NativeFunction, ParamsBuffer);')
            gen.line()

            for param in func.arguments:
                if param.has_flag(OUT_PARM) and not param.has_flag(REF_PARM):
                    continue
                self.translators.find(param).export_marshal_to_native_buffer(
                    gen, param, owner, f'{native_name}_{param.name}', 'ParamsBuffer',
                    f'{native_name}_{param.name}_Offset', self.names.map_parameter_name(param))

            gen.line()
            gen.line(f'{invoke}{native_name}_NativeFunction, ParamsBuffer);')
            gen.line()

            for param in func.arguments:
                if not param.has_flag(OUT_PARM):
                    continue
                self.translators.find(param).export_marshal_from_native_buffer(
                    gen, param, owner, f'{native_name}_{param.name}',
                    f'{self.names.map_parameter_name(param)} =', 'ParamsBuffer',
                    f'{native_name}_{param.name}_Offset')

            ret = func.return_param
            if ret is not None:
                self.translators.find(ret).export_marshal_from_native_buffer(
                    gen, ret, owner, f'{native_name}_{ret.name}', 'return', 'ParamsBuffer',
                    f'{native_name}_{ret.name}_Offset')
            gen.end_unsafe_block()

    def export_overridable_function(self, gen: CodeGen, func: 'FunctionInfo', owner_script_name: str):
        """Generate a virtual implementation stub and the invoker native code calls"""
        native_name = func.name
        managed_name = self.names.map_function_name(func, owner_script_name)
        return_type = self.return_type(func)
        ret = func.return_param

        gen.line()
        if func.num_params > 0:
            self._export_parameter_fields(gen, func)

        gen.line('[UFunction(FunctionFlags.BlueprintEvent)]')
        header = f'protected virtual {return_type} {managed_name}_Implementation({self.parameter_list(func.arguments)})'
        with gen.block(header):
            for param in func.arguments:
                if param.has_flag(OUT_PARM) and not param.has_flag(REF_PARM):
                    translator = self.translators.find(param)
                    gen.line(f'{self.names.map_parameter_name(param)} = {translator.default_value(param)};')
            if ret is not None:
                gen.line(f'return {self.translators.find(ret).default_value(ret)};')

        gen.line()
        with gen.block(f'void Invoke_{native_name}(IntPtr buffer, IntPtr returnBuffer)'):
            gen.begin_unsafe_block()
            for param in func.arguments:
                translator = self.translators.find(param)
                param_name = self.names.map_parameter_name(param)
                if param.has_flag(OUT_PARM) and not param.has_flag(REF_PARM):
                    gen.line(f'{translator.managed_type(param)} {param_name};')
                    continue
                translator.export_marshal_from_native_buffer(
                    gen, param, 'null', f'{native_name}_{param.name}',
                    f'{translator.managed_type(param)} {param_name} =', 'buffer',
                    f'{native_name}_{param.name}_Offset')

            call = f'{managed_name}_Implementation({self.argument_list(func.arguments)});'
            if ret is not None:
                gen.line(f'{return_type} returnValue = {call}')
            else:
                gen.line(call)

            for param in func.arguments:
                if not param.has_flag(OUT_PARM):
                    continue
                self.translators.find(param).export_marshal_to_native_buffer(
                    gen, param, 'null', f'{native_name}_{param.name}', 'buffer',
                    f'{native_name}_{param.name}_Offset', self.names.map_parameter_name(param))

            if ret is not None:
                self.translators.find(ret).export_marshal_to_native_buffer(
                    gen, ret, 'null', f'{native_name}_{ret.name}', 'returnBuffer', '0', 'returnValue')
            gen.end_unsafe_block()

    def export_interface_function(self, gen: CodeGen, func: 'FunctionInfo', owner_script_name: str):
        managed_name = self.names.map_function_name(func, owner_script_name)
        gen.line(f'{self.return_type(func)} {managed_name}({self.parameter_list(func.arguments)});')
