"""
Concrete trainable parameter implementation.

This module defines `Parameter`, the infrastructure-level implementation of
the domain contract `IParameter`. A `Parameter` is a `Tensor` meant to be
owned by a module and optimized by training algorithms.

Design notes
------------
- `Parameter` subclasses `Tensor` to reuse storage and operations.
- The gradient buffer is populated by the autograd engine and cleared by
  `zero_grad()`; neither touches the parameter's values.
- The `requires_grad` flag is driven by the owning module's train/eval mode.
"""

from __future__ import annotations

from typing import Any, Optional

import numpy as np

from ..domain._parameter import IParameter
from .tensor._tensor import Tensor


class Parameter(Tensor, IParameter):
    """
    Trainable tensor.

    Parameters
    ----------
    data : array-like
        Initial values, copied into float32 storage.
    requires_grad : bool, optional
        Whether this parameter should accumulate gradients. Defaults to True.

    Notes
    -----
    Identity semantics are inherited from `Tensor`: two parameters with equal
    values are still different parameters.
    """

    def __init__(self, data: Any, *, requires_grad: bool = True, **kwargs) -> None:
        super().__init__(data, requires_grad=requires_grad, **kwargs)

    @classmethod
    def zeros(cls, shape: tuple[int, ...], *, requires_grad: bool = True) -> "Parameter":
        return cls(np.zeros(shape, dtype=np.float32), requires_grad=requires_grad)

    def set_grad(self, grad: Optional[Tensor]) -> None:
        """
        Overwrite the stored gradient (used by autograd), or clear it with None.
        """
        self._grad = grad

    def accumulate_grad(self, grad: Tensor) -> None:
        """
        Accumulate an incoming gradient into this parameter.

        Notes
        -----
        - If `requires_grad` is False, the gradient is ignored.
        - If no gradient is stored yet, a detached copy is stored.
        - Otherwise the contribution is summed in place.
        """
        if not self._requires_grad:
            return
        self._accumulate_grad_(grad.to_numpy())

    def __repr__(self) -> str:
        return (
            f"Parameter(shape={self.shape}, dtype={self.dtype}, "
            f"requires_grad={self._requires_grad})"
        )
