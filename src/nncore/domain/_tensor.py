"""
Tensor interface definitions.

This module defines the domain-level contract a differentiable tensor must
satisfy to back a module parameter. The module core never performs numeric
work itself; it only needs to toggle gradient tracking, clear gradient
buffers, and move values in and out for persistence.

Notes
-----
The protocol is structural (`typing.Protocol`), so any automatic
differentiation engine whose tensor type exposes these members can be used
with `Module`, independent of inheritance.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, runtime_checkable


@runtime_checkable
class ITensor(Protocol):
    """
    Differentiable tensor interface.

    An `ITensor` is a multi-dimensional array that participates in automatic
    differentiation. Operations on tensors that require gradients record graph
    edges as a side effect; this is entirely the engine's concern.
    """

    @property
    def shape(self) -> tuple[int, ...]:
        """
        Return the shape of the tensor.

        Returns
        -------
        tuple[int, ...]
            The tensor's shape.
        """
        ...

    @property
    def requires_grad(self) -> bool:
        """
        Indicate whether operations on this tensor record gradient history.

        Returns
        -------
        bool
            True if gradient tracking is enabled, False otherwise.
        """
        ...

    @requires_grad.setter
    def requires_grad(self, value: bool) -> None:
        """
        Enable or disable gradient tracking for this tensor.
        """
        ...

    @property
    def grad(self) -> Optional["ITensor"]:
        """
        Return the accumulated gradient, or None if absent or cleared.
        """
        ...

    def zero_grad(self) -> None:
        """
        Clear the accumulated gradient buffer without touching the value or
        the tracking flag.
        """
        ...

    def backward(self, grad_out: Optional["ITensor"] = None) -> None:
        """
        Backpropagate from this tensor through the recorded graph.
        """
        ...

    def to_numpy(self) -> Any:
        """
        Return a host copy of the tensor's values.
        """
        ...

    def copy_from_numpy(self, arr: Any) -> None:
        """
        Overwrite the tensor's values in place from a host array of the same
        shape.
        """
        ...
