"""
Sequential container module.

`Sequential` applies its children in order:

    y = M_n(...M_2(M_1(x)))

It supports deterministic ordering, indexing/iteration, and JSON
serialization: children are written to the checkpoint architecture tree and
re-added in order on load, which rebuilds the aggregated parameter list in
the same positional order.
"""

from typing import Any, Iterator

from ..module._serialization_core import register_module
from .._module import Module
from ._container import Container


@register_module()
class Sequential(Container):
    """
    Container that chains its children.

    Parameters
    ----------
    *modules : Module
        Zero or more child modules, added in order. An empty `Sequential` is
        the identity.
    """

    def __init__(self, *modules: Module) -> None:
        super().__init__()
        for m in modules:
            self.add(m)

    def forward(self, x):
        out = x
        for m in self._modules:
            out = m(out)
        return out

    def __len__(self) -> int:
        return len(self._modules)

    def __iter__(self) -> Iterator[Module]:
        return iter(list(self._modules))

    def __getitem__(self, idx: int) -> Module:
        return self.module(idx)

    def pretty_string(self) -> str:
        """
        Render the chain and one line per child, e.g.::

            Sequential [input -> (0) -> (1) -> output]
                (0): Linear (4->3) (with bias)
                (1): Tanh
        """
        chain = " -> ".join(
            ["input"] + [f"({i})" for i in range(len(self._modules))] + ["output"]
        )
        lines = [f"Sequential [{chain}]"]
        for i, m in enumerate(self._modules):
            lines.append(f"\t({i}): {m.pretty_string()}")
        return "\n".join(lines)

    def get_config(self) -> dict[str, Any]:
        # Children are stored in the architecture tree, not in the config.
        return {}

    @classmethod
    def from_config(cls, cfg: dict[str, Any]) -> "Sequential":
        _ = cfg
        return cls()
