"""
Error types

Policy rejection and malformed intermediate types are not errors; these
cover broken inputs and resolver contract breaches only.
"""


class GlueGenError(RuntimeError):
    """Base class for glue generator failures"""


class ConfigError(GlueGenError):
    """Raised when a configuration or policy file cannot be parsed"""


class GraphError(GlueGenError):
    """Raised when a type graph document is malformed"""


class ModuleResolutionError(GlueGenError):
    """Raised when a module resolves to no destination directory"""
