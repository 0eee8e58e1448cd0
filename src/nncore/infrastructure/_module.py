"""
Infrastructure module base class.

This module provides the abstract `Module` implementation that satisfies the
domain-level `IModule` protocol. Every concrete layer and container derives
from it. It owns:

- an ordered list of parameters, addressed positionally
- a train/eval flag that is propagated onto every parameter's
  `requires_grad` whenever the mode is switched
- `__call__` forwarding to `forward` for ergonomic invocation
- the persisted-state descriptor and JSON (de)serialization hooks

Concurrency
-----------
A module carries no locks. Each instance is meant to be driven by one logical
thread at a time; multi-threaded training setups must synchronize externally
or use per-thread replicas.
"""

from __future__ import annotations

import logging
import numbers
from abc import abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from ..domain._errors import CheckpointError, ParameterIndexError
from ..domain._module import IModule
from ..domain._tensor import ITensor
from ._parameter import Parameter

logger = logging.getLogger(__name__)


class Module(IModule):
    """
    Abstract base class for differentiable computation units.

    Subclasses build their parameter tensors and hand them to
    ``Module.__init__`` in the order they want them addressed, then implement
    `forward` (reading parameters through `self._params`) and
    `pretty_string`. A subclass missing either abstract method cannot be
    instantiated.

    Parameters
    ----------
    params : Optional[Iterable[ITensor]]
        Initial parameters. If omitted the module starts with none. The
        sequence itself is copied; the tensors are shared with the caller.

    Attributes
    ----------
    _params : List[ITensor]
        Ordered parameters. The order is fixed once constructed; only
        `set_params` replaces an entry.
    _train : bool
        True in training mode (the initial state), False in evaluation mode.

    Notes
    -----
    - `train()`/`eval()` are not merely recorded: every parameter's
      `requires_grad` is set to match the new mode.
    - `PERSISTED_STATE` lists the fields the checkpoint codec saves and
      restores, in order.
    """

    PERSISTED_STATE: Tuple[str, ...] = ("params", "train")

    def __init__(self, params: Optional[Iterable[ITensor]] = None) -> None:
        self._params: List[ITensor] = list(params) if params is not None else []
        self._train: bool = True

    # ------------------------------------------------------------------
    # Parameter access
    # ------------------------------------------------------------------
    def parameters(self) -> List[ITensor]:
        """
        Return a copy of the ordered parameter list.

        Mutating the returned list does not affect the module. The tensors
        in it are the module's own (shared) parameter objects.
        """
        return list(self._params)

    def num_parameters(self) -> int:
        return len(self._params)

    def _check_position(self, position: int) -> int:
        """
        Validate a parameter position against ``[0, len(self._params))``.

        Raises
        ------
        TypeError
            If `position` is not an integer (bools are rejected).
        ParameterIndexError
            If `position` is negative or past the end.
        """
        if isinstance(position, bool) or not isinstance(position, numbers.Integral):
            raise TypeError(
                f"parameter position must be an int, got {type(position).__name__}"
            )
        position = int(position)
        if position < 0 or position >= len(self._params):
            raise ParameterIndexError(position, len(self._params))
        return position

    def param(self, position: int) -> ITensor:
        """
        Return the parameter at a zero-based position.

        Raises
        ------
        ParameterIndexError
            If `position` is outside ``[0, num_parameters())``.
        """
        return self._params[self._check_position(position)]

    def set_params(self, new_param: ITensor, position: int) -> None:
        """
        Replace the parameter at a zero-based position.

        The replacement keeps its own `requires_grad` flag; it is brought in
        line with the module's mode by the next `train()`/`eval()` call.

        Raises
        ------
        ParameterIndexError
            If `position` is outside ``[0, num_parameters())``. The parameter
            list is left unchanged.
        """
        position = self._check_position(position)
        self._params[position] = new_param
        logger.debug("%s: replaced parameter %d", type(self).__name__, position)

    # ------------------------------------------------------------------
    # Mode and gradients
    # ------------------------------------------------------------------
    @property
    def training(self) -> bool:
        """
        Return True in training mode, False in evaluation mode.
        """
        return self._train

    def _set_mode(self, train: bool) -> None:
        self._train = bool(train)
        for p in self._params:
            p.requires_grad = self._train
        logger.debug(
            "%s: %s mode (%d parameter(s))",
            type(self).__name__,
            "train" if self._train else "eval",
            len(self._params),
        )

    def train(self) -> "Module":
        """
        Switch to training mode and enable gradient tracking on every
        parameter. Idempotent.
        """
        self._set_mode(True)
        return self

    def eval(self) -> "Module":
        """
        Switch to evaluation mode and disable gradient tracking on every
        parameter. Idempotent.
        """
        self._set_mode(False)
        return self

    def zero_grad(self) -> None:
        """
        Clear the gradient buffer of every parameter.

        Values, `requires_grad` flags and the parameter list are untouched.
        """
        for p in self._params:
            p.zero_grad()

    # ------------------------------------------------------------------
    # Forward contract
    # ------------------------------------------------------------------
    @abstractmethod
    def forward(self, x: ITensor) -> ITensor:
        """
        Execute the forward computation of the module.

        Implementations combine `x` with `self._params` through tensor
        operations so the resulting tensor can be backpropagated to the
        parameters.
        """
        raise NotImplementedError

    def __call__(self, x: ITensor) -> ITensor:
        """
        Call the module as a function, delegating to `forward`.
        """
        return self.forward(x)

    @abstractmethod
    def pretty_string(self) -> str:
        """
        Return a short, non-empty, human-readable description of the module.
        """
        raise NotImplementedError

    def __repr__(self) -> str:
        return self.pretty_string()

    # ------------------------------------------------------------------
    # Persisted state
    # ------------------------------------------------------------------
    def state(self) -> Dict[str, Any]:
        """
        Return the persisted state, keyed and ordered by `PERSISTED_STATE`.
        """
        return {"params": self.parameters(), "train": self._train}

    def load_state_(self, params: Sequence[Any], train: bool) -> None:
        """
        Restore persisted state.

        Arrays are applied positionally. An array matching the existing
        parameter's shape and dtype is copied into it, so parameter identity
        is preserved. Any other array (a parameter that was replaced through
        `set_params` before saving) is installed as a new `Parameter` of the
        saved shape and dtype through `set_params`, which containers forward
        to the owning child. The mode is then applied through
        `train()`/`eval()`.

        Raises
        ------
        CheckpointError
            If the number of arrays does not match the number of parameters.
            Nothing is modified in that case.
        """
        arrays = [np.asarray(a) for a in params]
        if len(arrays) != len(self._params):
            raise CheckpointError(
                f"{type(self).__name__} has {len(self._params)} parameter(s), "
                f"checkpoint has {len(arrays)}"
            )

        copies: List[Tuple[ITensor, np.ndarray]] = []
        replacements: List[Tuple[int, Parameter]] = []
        for i, (p, arr) in enumerate(zip(self._params, arrays)):
            same_shape = tuple(arr.shape) == tuple(p.shape)
            same_dtype = getattr(p, "dtype", arr.dtype) == arr.dtype
            if same_shape and same_dtype:
                copies.append((p, arr))
            else:
                replacements.append(
                    (i, Parameter(arr, dtype=arr.dtype, requires_grad=p.requires_grad))
                )

        for p, arr in copies:
            p.copy_from_numpy(arr)
        for i, new_param in replacements:
            self.set_params(new_param, i)

        if train:
            self.train()
        else:
            self.eval()

    # ------------------------------------------------------------------
    # Serialization hooks (opt-in contract)
    # ------------------------------------------------------------------
    def get_config(self) -> Dict[str, Any]:
        """
        Return a JSON-serializable constructor configuration for this module.

        Subclasses that participate in JSON checkpoints MUST override this.

        Raises
        ------
        NotImplementedError
            If the module does not support JSON serialization.
        """
        raise NotImplementedError(
            f"{self.__class__.__name__} does not implement get_config(). "
            "This module cannot be serialized to JSON."
        )

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "Module":
        """
        Reconstruct a module from a configuration produced by `get_config`.

        Raises
        ------
        NotImplementedError
            If the module does not support JSON deserialization.
        """
        raise NotImplementedError(
            f"{cls.__name__} does not implement from_config(). "
            "This module cannot be deserialized from JSON."
        )

    def save_json(self, path: str | Path) -> None:
        """
        Save architecture and persisted state into a single JSON checkpoint.
        """
        from .module._checkpoint import save_module

        save_module(self, path)

    @classmethod
    def load_json(cls, path: str | Path) -> "Module":
        """
        Load a module from a checkpoint created by `save_json()`.

        Raises
        ------
        TypeError
            If the checkpoint holds a module that is not an instance of `cls`.
        """
        from .module._checkpoint import load_module

        module = load_module(path)
        if not isinstance(module, cls):
            raise TypeError(
                f"Loaded object is {type(module).__name__}, expected {cls.__name__}."
            )
        return module
