from ._tensor import Tensor
from ._tensor_context import Context

__all__ = ["Context", "Tensor"]
