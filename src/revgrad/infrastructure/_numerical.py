"""
Central finite-difference derivatives.

These helpers evaluate functions with graph recording disabled and are used
to cross-check analytic gradients.

- `numerical_diff` perturbs every element of a single input at once, which
  gives the elementwise derivative of elementwise functions.
- `numerical_grad` perturbs one element at a time and returns the gradient
  of ``sum(f(*xs))`` with respect to every input.
"""

from __future__ import annotations

from typing import Callable, List

import numpy as np

from .autograd._config import no_grad
from .autograd._variable import Variable, as_variable
from .tensor import Tensor


def _total(y: Variable) -> float:
    return float(np.sum(y.data.to_numpy()))


def numerical_diff(f: Callable[..., Variable], x, h: float = 1e-4) -> Variable:
    """
    Elementwise central difference ``(f(x + h) - f(x - h)) / 2h``.

    Parameters
    ----------
    f : Callable[[Variable], Variable]
        An elementwise function.
    x : Variable or array-like
        Point of evaluation.
    h : float, optional
        Step size. Defaults to 1e-4.

    Returns
    -------
    Variable
        Derivative values shaped like ``f(x)``.
    """
    x = as_variable(x)
    with no_grad():
        y0 = f(Variable(x.data.add_c(h)))
        y1 = f(Variable(x.data.add_c(-h)))
    return Variable(y0.data.sub(y1.data).mul_c(1.0 / (2.0 * h)))


def numerical_grad(f: Callable[..., Variable], *xs, h: float = 1e-4) -> List[Variable]:
    """
    Per-element central-difference gradient of ``sum(f(*xs))``.

    Parameters
    ----------
    f : Callable[..., Variable]
        Function of one or more variables.
    *xs : Variable or array-like
        Points of evaluation.
    h : float, optional
        Step size. Defaults to 1e-4.

    Returns
    -------
    list[Variable]
        One gradient per input, shaped like that input.
    """
    bases = [as_variable(x).data.to_numpy() for x in xs]
    grads = []
    with no_grad():
        for k, base in enumerate(bases):
            grad = np.zeros_like(base)
            it = np.nditer(base, flags=["multi_index"])
            while not it.finished:
                idx = it.multi_index

                plus = [b.copy() for b in bases]
                plus[k][idx] += h
                minus = [b.copy() for b in bases]
                minus[k][idx] -= h

                fp = _total(f(*[Variable(Tensor.from_numpy(a)) for a in plus]))
                fm = _total(f(*[Variable(Tensor.from_numpy(a)) for a in minus]))
                grad[idx] = (fp - fm) / (2.0 * h)
                it.iternext()
            grads.append(Variable(Tensor.from_numpy(grad)))
    return grads
