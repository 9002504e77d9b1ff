"""
Unreal binding configuration

Configures the glue generator with engine-specific policy:
- Function libraries and structs the managed runtime replaces
- Components exported even though they are not blueprintable
- Internal hooks managed classes must be able to override
"""

from glue_gen import Generator


def configure(gen: Generator):
    """Configure generator with Unreal-specific settings"""

    # Global ignores
    gen.ignore('AnimationBlueprintLibrary')
    gen.ignore_struct('SolverIterations')

    # Vector4 math is provided by the managed math library
    gen.ignore_category('KismetMathLibrary', 'Math|Vector4')

    # === forced exports ===
    gen.force_export(
        'SpringArmComponent',
        'FloatingPawnMovement',
    )

    # === internal functions ===
    gen.allow_internal('Actor', 'UserConstructionScript')
