"""
Extension method inference

Decides whether a static function of a function library should also be
exposed as an instance-style call on one of its parameters.
"""

from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .ir import ClassInfo, FunctionInfo, PropertyInfo

# Canonical metadata for extension methods
MD_SCRIPT_METHOD = 'ScriptMethod'
MD_DEFAULT_TO_SELF = 'DefaultToSelf'
MD_WORLD_CONTEXT = 'WorldContext'

# Conventional names of unannotated world context parameters
WORLD_CONTEXT_NAMES = ('WorldContext', 'WorldContextObject')

# Receiver type of world context extension methods
WORLD_CLASS_NAME = 'World'


@dataclass
class ExtensionMethod:
    """A library function exposed on a receiver"""
    function: 'FunctionInfo'
    self_parameter: 'PropertyInfo'
    library: Optional['ClassInfo'] = None
    override_class_name: Optional[str] = None

    @property
    def is_world_context(self) -> bool:
        return self.override_class_name is not None

    @property
    def other_parameters(self) -> list['PropertyInfo']:
        return [p for p in self.function.arguments if p is not self.self_parameter]


class ExtensionMethodResolver:
    """Finds the receiver of extension-method candidates

    Precedence: ScriptMethod marker (first parameter), then the DefaultToSelf
    hint, then the WorldContext hint, then a parameter named like a world
    context.
    """

    def __init__(self, world_class_name: str = WORLD_CLASS_NAME):
        self.world_class_name = world_class_name

    def resolve(self, function: 'FunctionInfo',
                library: Optional['ClassInfo'] = None) -> Optional[ExtensionMethod]:
        """Return the extension method for function, or None"""
        self_param: Optional['PropertyInfo'] = None
        is_world_context = False
        arguments = function.arguments

        if function.has_metadata(MD_SCRIPT_METHOD) and arguments:
            self_param = arguments[0]

        if self_param is None and function.has_metadata(MD_DEFAULT_TO_SELF):
            self_param = function.find_param(function.metadata[MD_DEFAULT_TO_SELF])

        if function.has_metadata(MD_WORLD_CONTEXT):
            world_context_name = function.metadata[MD_WORLD_CONTEXT]
            if self_param is not None:
                is_world_context = self_param.name == world_context_name
            else:
                self_param = function.find_param(world_context_name)
                is_world_context = self_param is not None

        if self_param is None:
            for param in arguments:
                if param.name in WORLD_CONTEXT_NAMES:
                    self_param = param
                    is_world_context = True
                    break

        if self_param is None or self_param.is_return:
            return None

        # Some world context parameters are not annotated
        if not is_world_context:
            is_world_context = self_param.name in WORLD_CONTEXT_NAMES

        return ExtensionMethod(
            function=function,
            self_parameter=self_param,
            library=library,
            override_class_name=self.world_class_name if is_world_context else None,
        )
