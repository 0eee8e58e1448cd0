from ._errors import (
    CheckpointError,
    ModuleIndexError,
    ParameterIndexError,
    UnknownModuleTypeError,
)
from ._module import IModule
from ._parameter import IParameter
from ._tensor import ITensor

__all__ = [
    "CheckpointError",
    "IModule",
    "IParameter",
    "ITensor",
    "ModuleIndexError",
    "ParameterIndexError",
    "UnknownModuleTypeError",
]
