"""
NumPy-backed reference tensor with reverse-mode autograd.

This is the differentiable tensor collaborator used by nncore modules. It
wraps a float32 NumPy array and records a `Context` on the output of every
operation whose inputs require gradients, so that `backward()` can traverse
from an output back to the parameters that produced it.

Only the small set of operations needed by the bundled layers is provided:
``+``, ``-``, ``*``, unary ``-``, ``@``, ``.T``, ``sum``, ``mean``, ``tanh``
and ``relu``. Binary elementwise ops broadcast NumPy-style; their backward
pass reduces gradients back to each operand's shape.
"""

from __future__ import annotations

from typing import Any, Optional, Union

import numpy as np

from ._tensor_context import Context

Number = Union[int, float]


def _sum_to_shape(arr: np.ndarray, shape: tuple[int, ...]) -> np.ndarray:
    """
    Reduce a broadcast gradient back to `shape` by summing expanded axes.
    """
    while arr.ndim > len(shape):
        arr = arr.sum(axis=0)
    for axis, dim in enumerate(shape):
        if dim == 1 and arr.shape[axis] != 1:
            arr = arr.sum(axis=axis, keepdims=True)
    return arr.reshape(shape)


class Tensor:
    """
    Differentiable NumPy tensor.

    Parameters
    ----------
    data : array-like
        Initial values. Always copied into a new array.
    requires_grad : bool, optional
        Whether operations involving this tensor record gradient history.
        Defaults to False.
    dtype : numpy dtype, optional
        Storage dtype. Defaults to float32.

    Notes
    -----
    - Equality and hashing are identity-based, so tensors can be compared
      with ``is``/``==`` and used as dict keys the way parameter lists need.
    - Gradients are accumulated only on leaf tensors (no `Context`) that
      require gradients.
    """

    def __init__(
        self,
        data: Any,
        *,
        requires_grad: bool = False,
        dtype: Any = np.float32,
        ctx: Optional[Context] = None,
    ) -> None:
        self._data: np.ndarray = np.array(data, dtype=dtype)
        self._requires_grad: bool = bool(requires_grad)
        self._grad: Optional[Tensor] = None
        self._ctx: Optional[Context] = ctx

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------
    @classmethod
    def zeros(cls, shape: tuple[int, ...], *, requires_grad: bool = False) -> "Tensor":
        return cls(np.zeros(shape, dtype=np.float32), requires_grad=requires_grad)

    @classmethod
    def ones(cls, shape: tuple[int, ...], *, requires_grad: bool = False) -> "Tensor":
        return cls(np.ones(shape, dtype=np.float32), requires_grad=requires_grad)

    @classmethod
    def full(
        cls, shape: tuple[int, ...], value: float, *, requires_grad: bool = False
    ) -> "Tensor":
        return cls(np.full(shape, value, dtype=np.float32), requires_grad=requires_grad)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------
    @property
    def shape(self) -> tuple[int, ...]:
        """
        Return the tensor shape.
        """
        return tuple(self._data.shape)

    @property
    def dtype(self) -> np.dtype:
        return self._data.dtype

    @property
    def data(self) -> np.ndarray:
        """
        Return the underlying NumPy storage (not a copy).
        """
        return self._data

    @property
    def requires_grad(self) -> bool:
        """
        Indicate whether this tensor records gradient history.
        """
        return self._requires_grad

    @requires_grad.setter
    def requires_grad(self, value: bool) -> None:
        self._requires_grad = bool(value)

    @property
    def grad(self) -> Optional["Tensor"]:
        """
        Return the accumulated gradient, or None if not computed or cleared.
        """
        return self._grad

    @property
    def is_leaf(self) -> bool:
        return self._ctx is None

    def zero_grad(self) -> None:
        """
        Clear the stored gradient.

        The tensor's values and `requires_grad` flag are left untouched.
        """
        self._grad = None

    def _set_ctx(self, ctx: Optional[Context]) -> None:
        self._ctx = ctx

    def _get_ctx(self) -> Optional[Context]:
        return self._ctx

    # ------------------------------------------------------------------
    # Host interop
    # ------------------------------------------------------------------
    def to_numpy(self) -> np.ndarray:
        """
        Return a copy of the tensor's values.
        """
        return self._data.copy()

    def copy_from_numpy(self, arr: Any) -> None:
        """
        Overwrite values in place from an array of identical shape.

        Raises
        ------
        ValueError
            If `arr` does not have this tensor's shape.
        """
        arr = np.asarray(arr)
        if tuple(arr.shape) != self.shape:
            raise ValueError(
                f"copy_from_numpy shape mismatch: tensor {self.shape} vs array {arr.shape}"
            )
        self._data[...] = arr

    def fill(self, value: float) -> None:
        self._data.fill(value)

    def item(self) -> float:
        if self._data.size != 1:
            raise ValueError(f"item() requires a single-element tensor, got {self.shape}")
        return float(self._data.reshape(-1)[0])

    def detach(self) -> "Tensor":
        """
        Return a copy that has no graph history and does not track gradients.
        """
        return Tensor(self._data, requires_grad=False, dtype=self._data.dtype)

    def __repr__(self) -> str:
        return (
            f"Tensor(shape={self.shape}, dtype={self._data.dtype}, "
            f"requires_grad={self._requires_grad})"
        )

    # ------------------------------------------------------------------
    # Graph helpers
    # ------------------------------------------------------------------
    @staticmethod
    def _result_requires_grad(*parents: "Tensor") -> bool:
        return any(p.requires_grad for p in parents)

    def _as_tensor_like(self, x: Union["Tensor", Number]) -> "Tensor":
        if isinstance(x, Tensor):
            return x
        if isinstance(x, (int, float, np.number)):
            return Tensor(np.asarray(x), dtype=self._data.dtype)
        raise TypeError(f"Unsupported operand type: {type(x)!r}")

    @staticmethod
    def _make_output(
        values: np.ndarray,
        parents: tuple["Tensor", ...],
        backward_fn,
        op: str,
    ) -> "Tensor":
        req = Tensor._result_requires_grad(*parents)
        out = Tensor(values, requires_grad=req)
        if req:
            out._set_ctx(
                Context(parents=parents, backward_fn=backward_fn, saved_meta={"op": op})
            )
        return out

    # ------------------------------------------------------------------
    # Elementwise arithmetic
    # ------------------------------------------------------------------
    def __add__(self, other: Union["Tensor", Number]) -> "Tensor":
        a, b = self, self._as_tensor_like(other)

        def backward_fn(grad_out: "Tensor"):
            g = grad_out.data
            return (
                Tensor(_sum_to_shape(g, a.shape)) if a.requires_grad else None,
                Tensor(_sum_to_shape(g, b.shape)) if b.requires_grad else None,
            )

        return self._make_output(a.data + b.data, (a, b), backward_fn, "add")

    def __radd__(self, other: Number) -> "Tensor":
        return self.__add__(other)

    def __sub__(self, other: Union["Tensor", Number]) -> "Tensor":
        a, b = self, self._as_tensor_like(other)

        def backward_fn(grad_out: "Tensor"):
            g = grad_out.data
            return (
                Tensor(_sum_to_shape(g, a.shape)) if a.requires_grad else None,
                Tensor(_sum_to_shape(-g, b.shape)) if b.requires_grad else None,
            )

        return self._make_output(a.data - b.data, (a, b), backward_fn, "sub")

    def __rsub__(self, other: Number) -> "Tensor":
        return self._as_tensor_like(other).__sub__(self)

    def __mul__(self, other: Union["Tensor", Number]) -> "Tensor":
        a, b = self, self._as_tensor_like(other)

        def backward_fn(grad_out: "Tensor"):
            g = grad_out.data
            return (
                Tensor(_sum_to_shape(g * b.data, a.shape)) if a.requires_grad else None,
                Tensor(_sum_to_shape(g * a.data, b.shape)) if b.requires_grad else None,
            )

        return self._make_output(a.data * b.data, (a, b), backward_fn, "mul")

    def __rmul__(self, other: Number) -> "Tensor":
        return self.__mul__(other)

    def __neg__(self) -> "Tensor":
        a = self

        def backward_fn(grad_out: "Tensor"):
            return (Tensor(-grad_out.data),)

        return self._make_output(-a.data, (a,), backward_fn, "neg")

    # ------------------------------------------------------------------
    # Linear algebra
    # ------------------------------------------------------------------
    def matmul(self, other: "Tensor") -> "Tensor":
        """
        2D matrix multiplication: ``out = self @ other``.

        Backward
        --------
        - dL/dA = dL/dout @ B^T
        - dL/dB = A^T @ dL/dout
        """
        if not isinstance(other, Tensor):
            raise TypeError(f"matmul expects Tensor, got {type(other)!r}")
        if len(self.shape) != 2 or len(other.shape) != 2:
            raise ValueError(
                f"matmul requires 2D tensors, got {self.shape} and {other.shape}"
            )
        if self.shape[1] != other.shape[0]:
            raise ValueError(
                f"matmul shape mismatch: {self.shape} @ {other.shape} "
                f"(inner dims {self.shape[1]} vs {other.shape[0]})"
            )

        a, b = self, other

        def backward_fn(grad_out: "Tensor"):
            g = grad_out.data
            return (
                Tensor(g @ b.data.T) if a.requires_grad else None,
                Tensor(a.data.T @ g) if b.requires_grad else None,
            )

        return self._make_output(a.data @ b.data, (a, b), backward_fn, "matmul")

    def __matmul__(self, other: "Tensor") -> "Tensor":
        return self.matmul(other)

    def transpose(self) -> "Tensor":
        if len(self.shape) != 2:
            raise ValueError(f"transpose requires a 2D tensor, got {self.shape}")
        a = self

        def backward_fn(grad_out: "Tensor"):
            return (Tensor(grad_out.data.T),)

        return self._make_output(a.data.T, (a,), backward_fn, "transpose")

    @property
    def T(self) -> "Tensor":
        return self.transpose()

    # ------------------------------------------------------------------
    # Reductions and activations
    # ------------------------------------------------------------------
    def sum(self) -> "Tensor":
        a = self

        def backward_fn(grad_out: "Tensor"):
            return (Tensor(np.broadcast_to(grad_out.data, a.shape)),)

        return self._make_output(np.asarray(a.data.sum()), (a,), backward_fn, "sum")

    def mean(self) -> "Tensor":
        a = self
        n = max(a.data.size, 1)

        def backward_fn(grad_out: "Tensor"):
            return (Tensor(np.broadcast_to(grad_out.data / n, a.shape)),)

        return self._make_output(np.asarray(a.data.mean()), (a,), backward_fn, "mean")

    def tanh(self) -> "Tensor":
        a = self
        y = np.tanh(a.data)

        def backward_fn(grad_out: "Tensor"):
            return (Tensor(grad_out.data * (1.0 - y * y)),)

        return self._make_output(y, (a,), backward_fn, "tanh")

    def relu(self) -> "Tensor":
        a = self
        mask = a.data > 0

        def backward_fn(grad_out: "Tensor"):
            return (Tensor(grad_out.data * mask),)

        return self._make_output(a.data * mask, (a,), backward_fn, "relu")

    # ------------------------------------------------------------------
    # Autograd
    # ------------------------------------------------------------------
    def _accumulate_grad_(self, g: np.ndarray) -> None:
        """
        Add `g` into `self.grad` without creating graph history.
        """
        g = np.asarray(g, dtype=self._data.dtype)
        if self._grad is None:
            self._grad = Tensor(g, dtype=self._data.dtype)
            return
        if self._grad.shape != tuple(g.shape):
            raise ValueError(f"Grad shape mismatch: {self._grad.shape} vs {g.shape}")
        self._grad._data[...] = self._grad._data + g

    def backward(self, grad_out: Optional["Tensor"] = None) -> None:
        """
        Backpropagate gradients from this tensor through the recorded graph.

        Parameters
        ----------
        grad_out : Optional[Tensor], optional
            Gradient w.r.t. this tensor. If omitted, this tensor must hold a
            single element and the seed gradient is 1.0.

        Raises
        ------
        ValueError
            If `grad_out` is omitted for a multi-element tensor, or its shape
            does not match.
        """
        if grad_out is None:
            if self._data.size != 1:
                raise ValueError(
                    "grad_out must be provided for non-scalar tensors. "
                    f"Got shape={self.shape}."
                )
            seed = np.ones(self.shape, dtype=self._data.dtype)
        else:
            if not isinstance(grad_out, Tensor):
                raise TypeError(f"grad_out must be a Tensor, got {type(grad_out)!r}")
            if grad_out.shape != self.shape:
                raise ValueError(
                    f"grad_out shape mismatch: expected {self.shape}, got {grad_out.shape}"
                )
            seed = grad_out.data

        # Post-order: every node lands after all of its parents.
        topo: list[Tensor] = []
        visited: set[int] = set()
        stack: list[tuple[Tensor, bool]] = [(self, False)]
        while stack:
            t, expanded = stack.pop()
            if expanded:
                topo.append(t)
                continue
            if id(t) in visited:
                continue
            visited.add(id(t))
            stack.append((t, True))
            ctx = t._get_ctx()
            if ctx is not None:
                for p in ctx.parents:
                    if id(p) not in visited:
                        stack.append((p, False))

        grads: dict[int, np.ndarray] = {id(self): seed}

        for t in reversed(topo):
            g = grads.pop(id(t), None)
            if g is None:
                continue

            ctx = t._get_ctx()
            if ctx is None:
                if t.requires_grad:
                    t._accumulate_grad_(g)
                continue

            parent_grads = ctx.backward_fn(Tensor(g, dtype=t.dtype))
            for p, pg in zip(ctx.parents, parent_grads):
                if pg is None or not p.requires_grad:
                    continue
                arr = pg.data
                if id(p) in grads:
                    grads[id(p)] = grads[id(p)] + arr
                else:
                    grads[id(p)] = arr
