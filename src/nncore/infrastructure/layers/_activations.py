"""
Parameter-free modules.

These hold no parameters, so train/eval only flips the module flag and
`zero_grad` is a no-op. They exist so containers can interleave
nonlinearities with trainable layers.
"""

from __future__ import annotations

from typing import Any, Dict

from ..module._serialization_core import register_module
from .._module import Module


class _StatelessModule(Module):
    """
    Shared config hooks for modules constructed without arguments.
    """

    def get_config(self) -> Dict[str, Any]:
        return {}

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "_StatelessModule":
        _ = cfg
        return cls()

    def pretty_string(self) -> str:
        return type(self).__name__


@register_module()
class Identity(_StatelessModule):
    def forward(self, x):
        return x


@register_module()
class Tanh(_StatelessModule):
    def forward(self, x):
        return x.tanh()


@register_module()
class ReLU(_StatelessModule):
    def forward(self, x):
        return x.relu()
