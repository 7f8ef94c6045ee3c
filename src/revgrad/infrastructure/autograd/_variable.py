"""
Graph variables and the reverse-mode backward algorithm.

A `Variable` wraps one ``float64`` `Tensor` (its *data*), an optional
gradient that is itself a `Variable`, and a link to the `Function` that
created it. Because gradients are variables, running backward with
``create_graph=True`` records a graph over the gradients, which can be
differentiated again.

Backward algorithm
------------------
1. Seed ``self.grad`` with ones when it is unset.
2. Keep a heap of pending functions keyed by ``-generation``; identity
   deduplication ensures each function is processed once.
3. Pop the highest-generation function, collect its output gradients, and run
   its backward with ``Config.enable_backprop == create_graph``.
4. Store or accumulate (with the differentiable ``add``) each input gradient
   and push the input's creator.
5. Unless ``retain_grad`` is set, drop the gradients of the processed
   function's outputs, except the root's.

Processing functions in non-increasing generation order guarantees that a
variable's gradient is complete before its creator runs, even when the
variable fans out to several consumers.
"""

from __future__ import annotations

import heapq
import itertools
from typing import TYPE_CHECKING, Any, Optional, Sequence, Tuple

import numpy as np

from ...domain._errors import StateError
from ..tensor import Tensor
from ._config import using_config

if TYPE_CHECKING:  # pragma: no cover
    from ._function import Function


class Variable:
    """
    Node of the computation graph holding data and gradient.

    Parameters
    ----------
    data : Tensor or array-like
        Value of the variable. Tensors are adopted (converted to ``float64``
        when needed); other inputs are copied into a new Tensor.
    name : str, optional
        Label used in graph dumps.

    Attributes
    ----------
    data : Tensor
        The value, always ``float64``.
    grad : Variable or None
        Accumulated gradient, same shape as `data`.
    creator : Function or None
        Function that produced this variable, or None for leaves.
    generation : int
        ``creator.generation + 1`` for produced variables, 0 for leaves.
    """

    __array_priority__ = 200

    def __init__(self, data: Any, name: Optional[str] = None) -> None:
        if isinstance(data, Variable):
            raise TypeError("Variable data must be a Tensor or array-like, not a Variable")

        if isinstance(data, Tensor):
            tensor = data if data.dtype == np.float64 else data.astype(np.float64)
        else:
            tensor = Tensor.from_numpy(np.asarray(data, dtype=np.float64))

        self.data: Tensor = tensor
        self.name = name
        self.grad: Optional["Variable"] = None
        self.creator: Optional["Function"] = None
        self.generation = 0
        self._unchained = False

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------
    @classmethod
    def new(cls, *values: float) -> "Variable":
        """
        Build a 1-D variable from scalar values, e.g. ``Variable.new(1, 2)``.
        """
        return cls(Tensor((len(values),), [float(v) for v in values]))

    @classmethod
    def new_of(cls, *rows: Sequence[float]) -> "Variable":
        """
        Build a 2-D variable from rows of equal length.
        """
        return cls(Tensor.from_numpy(np.asarray(rows, dtype=np.float64).reshape(len(rows), -1)))

    @classmethod
    def from_tensor(cls, tensor: Tensor) -> "Variable":
        """
        Adopt an existing tensor as the variable's data.
        """
        return cls(tensor)

    @classmethod
    def const(cls, c: float) -> "Variable":
        """
        Build a scalar (shape ``()``) variable.
        """
        return cls(Tensor.scalar(float(c)))

    # ------------------------------------------------------------------
    # Shape accessors
    # ------------------------------------------------------------------
    @property
    def shape(self) -> Tuple[int, ...]:
        return self.data.shape

    @property
    def ndim(self) -> int:
        return self.data.ndim

    def num_dims(self) -> int:
        return self.data.ndim

    @property
    def size(self) -> int:
        return self.data.size

    @property
    def dtype(self) -> np.dtype:
        return self.data.dtype

    def at(self, *coord: int) -> float:
        return self.data.at(*coord)

    def item(self) -> float:
        return self.data.item()

    def __len__(self) -> int:
        return len(self.data)

    # ------------------------------------------------------------------
    # Graph bookkeeping
    # ------------------------------------------------------------------
    def set_creator(self, func: "Function") -> None:
        """
        Record `func` as the creator and update the generation.
        """
        self.creator = func
        self.generation = func.generation + 1

    def cleargrad(self) -> None:
        """
        Reset the gradient slot.
        """
        self.grad = None

    def unchain(self) -> None:
        """
        Drop the creator link, turning this variable into a leaf.
        """
        self.creator = None

    def unchain_backward(self) -> None:
        """
        Cut the graph behind this variable.

        Every variable reachable through creator links loses its creator,
        which frees the graph tail for truncated backpropagation through
        time. This variable keeps its own creator but can no longer be the
        target of `backward`.
        """
        if self.creator is not None:
            stack = [self.creator]
            seen = {id(self.creator)}
            while stack:
                f = stack.pop()
                for x in f.inputs:
                    if x.creator is None:
                        continue
                    if id(x.creator) not in seen:
                        seen.add(id(x.creator))
                        stack.append(x.creator)
                    x.unchain()

        self._unchained = True

    # ------------------------------------------------------------------
    # Backward
    # ------------------------------------------------------------------
    def backward(self, retain_grad: bool = False, create_graph: bool = False) -> None:
        """
        Accumulate gradients of this variable into every ancestor.

        Parameters
        ----------
        retain_grad : bool, optional
            Keep the gradients of intermediate variables. Defaults to False,
            in which case only leaves (and this variable) keep theirs.
        create_graph : bool, optional
            Record a graph while computing gradients, enabling higher-order
            derivatives. Defaults to False.

        Raises
        ------
        StateError
            If `unchain_backward` was called on this variable.
        """
        if self._unchained:
            raise StateError(
                "backward() called on a variable whose graph was cut by unchain_backward()"
            )

        if self.grad is None:
            self.grad = Variable(Tensor.one_like(self.data))

        if self.creator is None:
            return

        heap: list = []
        seen = set()
        counter = itertools.count()

        def push(f: "Function") -> None:
            if id(f) in seen:
                return
            seen.add(id(f))
            heapq.heappush(heap, (-f.generation, next(counter), f))

        push(self.creator)
        while heap:
            _, _, f = heapq.heappop(heap)
            outputs = f.output_variables()
            gys = [y.grad if y is not None else None for y in outputs]

            with using_config("enable_backprop", create_graph):
                gxs = f.backward(*gys)

                for x, gx in zip(f.inputs, gxs):
                    if gx is None:
                        continue
                    if x.grad is None:
                        x.grad = gx
                    else:
                        x.grad = x.grad + gx

                    if x.creator is not None:
                        push(x.creator)

            if not retain_grad:
                for y in outputs:
                    if y is not None and y is not self:
                        y.grad = None

    # ------------------------------------------------------------------
    # Operator protocol and op shortcuts
    # ------------------------------------------------------------------
    def __add__(self, other):
        from ..functions import add

        return add(self, other)

    def __radd__(self, other):
        from ..functions import add

        return add(other, self)

    def __sub__(self, other):
        from ..functions import sub

        return sub(self, other)

    def __rsub__(self, other):
        from ..functions import sub

        return sub(other, self)

    def __mul__(self, other):
        from ..functions import mul

        return mul(self, other)

    def __rmul__(self, other):
        from ..functions import mul

        return mul(other, self)

    def __truediv__(self, other):
        from ..functions import div

        return div(self, other)

    def __rtruediv__(self, other):
        from ..functions import div

        return div(other, self)

    def __neg__(self):
        from ..functions import neg

        return neg(self)

    def __pow__(self, p):
        from ..functions import pow

        return pow(self, p)

    def __matmul__(self, other):
        from ..functions import matmul

        return matmul(self, other)

    def __rmatmul__(self, other):
        from ..functions import matmul

        return matmul(other, self)

    def reshape(self, *shape) -> "Variable":
        """
        Differentiable reshape; returns a new variable with the same data.
        """
        from ..functions import reshape

        if len(shape) == 1 and isinstance(shape[0], (tuple, list)):
            shape = tuple(shape[0])
        return reshape(self, shape)

    def transpose(self, *axes) -> "Variable":
        from ..functions import transpose

        if len(axes) == 1 and isinstance(axes[0], (tuple, list)):
            axes = tuple(axes[0])
        return transpose(self, axes or None)

    @property
    def T(self) -> "Variable":
        return self.transpose()

    def sum(self, axes=None, keepdims: bool = False) -> "Variable":
        from ..functions import sum

        return sum(self, axes, keepdims)

    def __repr__(self) -> str:
        if self.data.ndim == 0:
            return f"variable({self.data.item()})"
        return f"variable({self.data.to_numpy().tolist()})"


def as_variable(obj: Any) -> Variable:
    """
    Return `obj` as a Variable, wrapping tensors, arrays, and numbers.
    """
    if isinstance(obj, Variable):
        return obj
    return Variable(obj)
