"""
Module (layer) interface definitions.

This module defines the domain-level interface for differentiable computation
units using structural subtyping via `typing.Protocol`.

Any object that implements the required methods is considered a valid module,
which lets containers drive children they did not construct (recursive
train/eval/zero_grad/parameters) without depending on a concrete base class.
"""

from __future__ import annotations

from typing import Any, Protocol, Sequence, runtime_checkable

from ._tensor import ITensor


@runtime_checkable
class IModule(Protocol):
    """
    Domain-level module interface.

    A module owns an ordered list of parameters, a train/eval mode that is
    mirrored onto every parameter's gradient-tracking flag, and a forward
    computation.

    Notes
    -----
    - The parameter order is the positional addressing scheme used by
      `param`, `set_params` and serialization.
    - Safe to use with `isinstance` checks due to `@runtime_checkable`.
    """

    @property
    def training(self) -> bool:
        """
        Return True in training mode, False in evaluation mode.
        """
        ...

    def parameters(self) -> Sequence[ITensor]:
        """
        Return a copy of the module's ordered parameter list.
        """
        ...

    def param(self, position: int) -> ITensor:
        """
        Return the parameter at a zero-based position.
        """
        ...

    def set_params(self, new_param: ITensor, position: int) -> None:
        """
        Replace the parameter at a zero-based position.
        """
        ...

    def train(self) -> Any:
        """
        Switch to training mode, enabling gradient tracking on all parameters.
        """
        ...

    def eval(self) -> Any:
        """
        Switch to evaluation mode, disabling gradient tracking on all
        parameters.
        """
        ...

    def zero_grad(self) -> None:
        """
        Clear the gradient buffer of every parameter.
        """
        ...

    def forward(self, x: ITensor) -> ITensor:
        """
        Execute the forward computation of the module.
        """
        ...

    def pretty_string(self) -> str:
        """
        Return a short human-readable description of the module.
        """
        ...
