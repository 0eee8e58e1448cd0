"""
nncore: the module abstraction of a small neural-network library.

A `Module` owns an ordered list of parameter tensors, a train/eval mode that
is mirrored onto every parameter's gradient-tracking flag, an abstract
forward computation, and a persisted state (parameters and mode) that the
JSON checkpoint codec saves and restores.
"""

from .domain import (
    CheckpointError,
    IModule,
    IParameter,
    ITensor,
    ModuleIndexError,
    ParameterIndexError,
    UnknownModuleTypeError,
)
from .infrastructure import (
    Container,
    Context,
    Identity,
    Linear,
    Module,
    Parameter,
    ReLU,
    Sequential,
    Tanh,
    Tensor,
)
from .infrastructure.module import load_module, register_module, save_module

__version__ = "1.0.0"

__all__ = [
    "CheckpointError",
    "Container",
    "Context",
    "IModule",
    "IParameter",
    "ITensor",
    "Identity",
    "Linear",
    "Module",
    "ModuleIndexError",
    "Parameter",
    "ParameterIndexError",
    "ReLU",
    "Sequential",
    "Tanh",
    "Tensor",
    "UnknownModuleTypeError",
    "load_module",
    "register_module",
    "save_module",
]
