"""
Module registry

Resolves, once per session, the C# namespace and output directory of every
native module that owns an exported type.
"""

import os
from dataclasses import dataclass
from typing import Optional, Union

from .errors import ModuleResolutionError
from .ir import ModuleInfo
from .logging import get_logger

logger = get_logger('modules')

# Root namespace of all generated code
ROOT_NAMESPACE = 'UnrealSharp'

# Plugin types
PLUGIN_PROJECT = 'project'
PLUGIN_ENGINE = 'engine'
PLUGIN_ENTERPRISE = 'enterprise'


@dataclass(frozen=True)
class GlueModule:
    """Output side of a native module"""
    name: str
    namespace: str
    directory: str

    @property
    def module_filename(self) -> str:
        return f'{self.name}Module'


class PackagingResolver:
    """Decides where a module's generated glue lives

    Engine-side modules share the generated scripts directory, while modules
    owned by the consuming project go under the project's generated user
    content directory.
    """

    def __init__(self, scripts_dir: str, project_dir: str,
                 host_plugin_type: Optional[str] = PLUGIN_PROJECT,
                 generated_user_content: str = 'Script/obj/Generated'):
        self.scripts_dir = scripts_dir
        self.project_dir = project_dir
        self.host_plugin_type = host_plugin_type
        self.generated_user_content = generated_user_content

    @property
    def user_content_dir(self) -> str:
        return os.path.join(self.project_dir, self.generated_user_content)

    def resolve(self, module: ModuleInfo) -> str:
        # A project plugin keeps everything next to itself
        if self.host_plugin_type == PLUGIN_PROJECT:
            return self.scripts_dir

        if module.plugin_type is not None:
            if module.plugin_type in (PLUGIN_ENGINE, PLUGIN_ENTERPRISE):
                return self.scripts_dir
            return self.user_content_dir

        if module.is_loaded:
            return self.user_content_dir if module.is_game_module else self.scripts_dir

        # Unloaded modules cannot be classified
        return self.scripts_dir


class ModuleRegistry:
    """Lazily registers output modules, memoized for the session"""

    def __init__(self, resolver: PackagingResolver):
        self.resolver = resolver
        self._modules: dict[str, GlueModule] = {}

    def find_or_register(self, module: Union[ModuleInfo, str]) -> GlueModule:
        """Get or create the output module for a native module"""
        if isinstance(module, str):
            module = ModuleInfo(name=module)

        glue_module = self._modules.get(module.name)
        if glue_module is None:
            directory = self.resolver.resolve(module)
            if not directory:
                raise ModuleResolutionError(
                    f'Generating the directory location for module {module.name} failed')
            glue_module = GlueModule(
                name=module.name,
                namespace=f'{ROOT_NAMESPACE}.{module.name}',
                directory=directory,
            )
            self._modules[module.name] = glue_module
            logger.info('  %s => %s', module.name, directory)
        return glue_module

    def namespace_of(self, name: str) -> str:
        """Namespace of a module, without registering it"""
        glue_module = self._modules.get(name)
        if glue_module is not None:
            return glue_module.namespace
        return f'{ROOT_NAMESPACE}.{name}'

    def __contains__(self, name: str) -> bool:
        return name in self._modules

    def __len__(self) -> int:
        return len(self._modules)
