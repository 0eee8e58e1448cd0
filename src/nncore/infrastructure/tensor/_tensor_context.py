from typing import Any, Callable, Optional, Sequence
from dataclasses import dataclass, field

from ...domain._tensor import ITensor


@dataclass
class Context:
    """
    Graph edge attached to a Tensor produced by an operation.

    Attributes
    ----------
    parents : Sequence[ITensor]
        The input tensors (including parameters) used to compute the output.
        Gradients are produced for these parents during the backward pass.
    backward_fn : Callable[[ITensor], Sequence[Optional[ITensor]]]
        Maps the gradient w.r.t. the output to gradients w.r.t. each entry of
        `parents`, in the same order. Entries are None for parents that do
        not require gradients.
    saved_meta : dict[str, Any]
        Non-tensor metadata needed by `backward_fn` (shapes, op name).

    Notes
    -----
    A context holds strong references to its parents. A parameter that has
    been replaced on its module therefore stays alive for as long as any
    recorded graph still refers to it.
    """

    parents: Sequence["ITensor"]
    backward_fn: Callable[["ITensor"], Sequence[Optional["ITensor"]]]
    saved_meta: dict[str, Any] = field(default_factory=dict)
