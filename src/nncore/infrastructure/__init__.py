from ._module import Module
from ._parameter import Parameter
from .containers import Container, Sequential
from .layers import Identity, Linear, ReLU, Tanh
from .tensor import Context, Tensor

__all__ = [
    "Container",
    "Context",
    "Identity",
    "Linear",
    "Module",
    "Parameter",
    "ReLU",
    "Sequential",
    "Tanh",
    "Tensor",
]
