"""
Linear (fully-connected) layer implementation.

Performs an affine projection of 2D, batch-major inputs:

    y = x @ W^T + b

Shape conventions
-----------------
- x : (batch, in_features)
- W : (out_features, in_features)   parameter position 0
- b : (1, out_features)             parameter position 1 (omitted if bias=False)
- y : (batch, out_features)

`forward()` reads the weights positionally from the parameter list, so a
parameter replaced through `set_params` is used by the very next call.
Gradients flow through the tensor operations' recorded contexts.
"""

from __future__ import annotations

from typing import Any, Dict

import numpy as np

from ..module._serialization_core import register_module
from .._module import Module
from .._parameter import Parameter
from ..tensor._tensor import Tensor


@register_module()
class Linear(Module):
    """
    Fully-connected layer.

    Parameters
    ----------
    in_features : int
        Size of each input sample.
    out_features : int
        Size of each output sample.
    bias : bool, optional
        Whether to learn an additive bias. Defaults to True.
    """

    def __init__(self, in_features: int, out_features: int, bias: bool = True) -> None:
        if int(in_features) <= 0 or int(out_features) <= 0:
            raise ValueError(
                f"in_features and out_features must be positive, got "
                f"{in_features} and {out_features}"
            )
        self.in_features = int(in_features)
        self.out_features = int(out_features)
        self.use_bias = bool(bias)
        super().__init__(self._reset_parameters())

    def _reset_parameters(self) -> list[Parameter]:
        """
        Xavier/Glorot-uniform weights and zero bias.
        """
        limit = np.sqrt(6.0 / (self.in_features + self.out_features))
        w = np.random.uniform(
            -limit, limit, size=(self.out_features, self.in_features)
        ).astype(np.float32)
        params = [Parameter(w)]
        if self.use_bias:
            params.append(Parameter.zeros((1, self.out_features)))
        return params

    def forward(self, x: Tensor) -> Tensor:
        """
        Raises
        ------
        ValueError
            If `x` is not 2D or its feature dimension is not `in_features`.
        """
        if len(x.shape) != 2 or x.shape[1] != self.in_features:
            raise ValueError(
                f"Linear expects input of shape (batch, {self.in_features}), "
                f"got {x.shape}"
            )
        out = x @ self._params[0].T
        if self.use_bias:
            out = out + self._params[1]
        return out

    def pretty_string(self) -> str:
        suffix = "(with bias)" if self.use_bias else "(without bias)"
        return f"Linear ({self.in_features}->{self.out_features}) {suffix}"

    def get_config(self) -> Dict[str, Any]:
        return {
            "in_features": self.in_features,
            "out_features": self.out_features,
            "bias": self.use_bias,
        }

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "Linear":
        return cls(
            in_features=int(cfg["in_features"]),
            out_features=int(cfg["out_features"]),
            bias=bool(cfg.get("bias", True)),
        )
