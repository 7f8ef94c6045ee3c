"""
Loss functions and evaluation metrics.

- ``mean_squared_error(x0, x1)``: ``sum((x0 - x1)**2) / N`` where ``N`` is the
  leading dimension (not the element count).
- ``softmax_cross_entropy(x, t)``: mean negative log-likelihood of integer
  labels `t` under ``softmax(x)`` along axis 1, computed with a stable
  log-sum-exp.
- ``accuracy(y, t)``: fraction of rows whose argmax matches the label; not
  differentiable.
"""

from __future__ import annotations

from typing import Any, List, Optional

import numpy as np

from ...domain._errors import ShapeError
from ...domain._function import Forwarder
from ..autograd._function import Function
from ..autograd._variable import Variable
from ..tensor import Tensor
from ._activations import softmax
from ._arithmetic import mul, neg, sub
from ._shape import broadcast_to, sum_to


def _leading_dim(shape) -> int:
    return shape[0] if len(shape) > 0 else 1


class MeanSquaredError(Forwarder):
    """
    Squared error summed and divided by the leading dimension.

    Backward:

        dx0 = 2 / N * gy * (x0 - x1)
        dx1 = -dx0
    """

    def forward(self, x0: Variable, x1: Variable) -> List[Variable]:
        self.x0, self.x1 = x0, x1
        diff = x0.data.sub(x1.data)
        self.n = _leading_dim(diff.shape)
        return [Variable(diff.mul(diff).sum().mul_c(1.0 / self.n))]

    def backward(self, gy: Variable) -> List[Variable]:
        diff = sub(self.x0, self.x1)
        gx0 = mul(mul(broadcast_to(gy, diff.shape), diff), 2.0 / self.n)
        return [sum_to(gx0, self.x0.shape), sum_to(neg(gx0), self.x1.shape)]


class SoftmaxCrossEntropy(Forwarder):
    """
    Fused softmax and cross-entropy over ``(N, C)`` logits.

    Backward:

        dx = (softmax(x) - onehot(t, C)) * gy / N

    The labels receive no gradient.
    """

    def forward(self, x: Variable, t: Variable) -> List[Variable]:
        if x.ndim != 2:
            raise ShapeError(
                f"softmax_cross_entropy expects (N, C) logits, got {x.shape}",
                shapes=(x.shape,),
            )

        n, c = x.shape
        labels = [int(v) for v in t.data.to_numpy().reshape(-1)]
        if len(labels) != n:
            raise ShapeError(
                f"{len(labels)} labels for {n} rows", shapes=(x.shape, t.shape)
            )

        self.x = x
        self.onehot = Tensor.onehot(labels, c)

        m = x.data.max(1, keepdims=True)
        log_z = x.data.sub(m).exp().sum(1, keepdims=True).log().add(m)
        log_p = x.data.sub(log_z)
        picked = log_p.mul(self.onehot).sum()
        return [Variable(picked.mul_c(-1.0 / n))]

    def backward(self, gy: Variable) -> List[Optional[Variable]]:
        n = self.x.shape[0]
        y = softmax(self.x, 1)
        gx = mul(sub(y, Variable(self.onehot)), mul(gy, 1.0 / n))
        return [gx, None]


class Accuracy(Forwarder):
    """
    Fraction of rows of `y` whose argmax equals the label in `t`.

    Comparison uses ``is_close`` because labels are stored as floats. The
    operation is not differentiable; its backward yields no gradients.
    """

    def forward(self, y: Variable, t: Variable) -> List[Variable]:
        pred = y.data.argmax(1).astype(np.float64)
        labels = t.data.reshape(pred.shape)
        hits = pred.is_close(labels)
        return [Variable(hits.mean())]

    def backward(self, gy: Variable) -> List[Optional[Variable]]:
        return [None, None]


def mean_squared_error(x0: Any, x1: Any) -> Variable:
    """
    Differentiable squared error divided by the leading dimension.
    """
    return Function(MeanSquaredError()).apply_first(x0, x1)


def softmax_cross_entropy(x: Any, t: Any) -> Variable:
    """
    Differentiable mean cross-entropy of labels `t` under ``softmax(x)``.

    Parameters
    ----------
    x : Variable
        Logits of shape ``(N, C)``.
    t : Variable or array-like
        ``N`` integer class labels.
    """
    return Function(SoftmaxCrossEntropy()).apply_first(x, t)


def accuracy(y: Any, t: Any) -> Variable:
    """
    Scalar accuracy of the row-wise argmax of `y` against labels `t`.
    """
    return Function(Accuracy()).apply_first(y, t)


def argmax(x: Any, axis: int = 1) -> Variable:
    """
    Indices of the maxima along `axis` as a (non-differentiable) variable.
    """
    from ..autograd._variable import as_variable

    return Variable(as_variable(x).data.argmax(axis))
