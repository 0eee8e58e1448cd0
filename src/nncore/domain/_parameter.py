"""
Trainable parameter interface definitions.

A parameter is a differentiable tensor owned (by reference) by a module and
updated by an external optimizer. Ownership is shared: the module, the
autograd graph and any optimizer may all hold the same parameter object.
"""

from __future__ import annotations

from typing import Optional, Protocol, runtime_checkable

from ._tensor import ITensor


@runtime_checkable
class IParameter(ITensor, Protocol):
    """
    Domain-level interface for trainable parameters.

    Extends `ITensor` with the gradient hooks used by autograd engines and
    optimizers.

    Notes
    -----
    - `requires_grad` is driven by the owning module's train/eval mode.
    - `accumulate_grad` must be a no-op while `requires_grad` is False.
    """

    def set_grad(self, grad: Optional[ITensor]) -> None:
        """
        Overwrite the stored gradient, or clear it with None.
        """
        ...

    def accumulate_grad(self, grad: ITensor) -> None:
        """
        Add an incoming gradient contribution to the stored gradient.
        """
        ...
