"""
Container base module.

A `Container` aggregates child modules. Each child's parameters are appended
to the container's own parameter list when the child is added, so a container
can be addressed, switched and serialized exactly like a leaf module while the
children keep their own per-module contracts.
"""

from __future__ import annotations

import logging
import numbers
from typing import Dict, List, Tuple

from ...domain._errors import ModuleIndexError
from ...domain._tensor import ITensor
from .._module import Module

logger = logging.getLogger(__name__)


class Container(Module):
    """
    Abstract module holding an ordered list of child modules.

    Attributes
    ----------
    _modules : List[Module]
        Children in insertion order.
    _child_param_idx : Dict[int, Tuple[int, int]]
        Maps a position in the container's parameter list to
        ``(child_index, position_in_child)``.

    Notes
    -----
    - The aggregated parameter list is built when a child is added. Replacing
      a parameter directly on a child afterwards is not reflected in the
      container; replace it through the container instead.
    - `forward` stays abstract; see `Sequential` for a concrete container.
    """

    def __init__(self) -> None:
        super().__init__()
        self._modules: List[Module] = []
        self._child_param_idx: Dict[int, Tuple[int, int]] = {}

    def add(self, module: Module) -> "Container":
        """
        Append a child module and its parameters.

        Raises
        ------
        TypeError
            If `module` is not a `Module`.
        """
        if not isinstance(module, Module):
            raise TypeError(
                f"{type(self).__name__}.add expects a Module, got: {type(module)}"
            )

        child_index = len(self._modules)
        self._modules.append(module)
        for local_pos, p in enumerate(module.parameters()):
            self._child_param_idx[len(self._params)] = (child_index, local_pos)
            self._params.append(p)
        logger.debug(
            "%s: added child %d (%s)", type(self).__name__, child_index, type(module).__name__
        )
        return self

    def modules(self) -> List[Module]:
        """
        Return a copy of the ordered child module list.
        """
        return list(self._modules)

    def module(self, position: int) -> Module:
        """
        Return the child module at a zero-based position.

        Raises
        ------
        ModuleIndexError
            If `position` is outside ``[0, len(modules()))``.
        """
        if isinstance(position, bool) or not isinstance(position, numbers.Integral):
            raise TypeError(
                f"module position must be an int, got {type(position).__name__}"
            )
        position = int(position)
        if position < 0 or position >= len(self._modules):
            raise ModuleIndexError(position, len(self._modules))
        return self._modules[position]

    def set_params(self, new_param: ITensor, position: int) -> None:
        """
        Replace a parameter on the container and on the child that owns it.
        """
        position = self._check_position(position)
        owner = self._child_param_idx.get(position)
        if owner is not None:
            child_index, local_pos = owner
            self._modules[child_index].set_params(new_param, local_pos)
        super().set_params(new_param, position)

    def train(self) -> "Container":
        super().train()
        for m in self._modules:
            m.train()
        return self

    def eval(self) -> "Container":
        super().eval()
        for m in self._modules:
            m.eval()
        return self

    def zero_grad(self) -> None:
        super().zero_grad()
        for m in self._modules:
            m.zero_grad()

    def pretty_string(self) -> str:
        lines = [f"{type(self).__name__} ({len(self._modules)} module(s))"]
        for i, m in enumerate(self._modules):
            lines.append(f"\t({i}): {m.pretty_string()}")
        return "\n".join(lines)
