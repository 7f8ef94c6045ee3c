"""
Higher-order differentiation demo.

Computes the n-th derivative of a unary function at a point by repeatedly
differentiating the previous gradient, then prints the graph of the final
gradient in DOT format:

    revgrad-diff --func tanh --order 2 --x 1.0 | dot -Tpng -o tanh.png
"""

from __future__ import annotations

import argparse
import sys
from typing import Callable, Dict, Optional, Sequence

from ..domain._errors import ConfigurationError
from ..infrastructure import functions as F
from ..infrastructure.autograd import Variable
from ..infrastructure.graph import get_dot_graph

FUNCS: Dict[str, Callable[[Variable], Variable]] = {
    "sin": F.sin,
    "cos": F.cos,
    "tanh": F.tanh,
    "exp": F.exp,
    "log": F.log,
    "pow": lambda x: F.pow(x, 3.0),
    "square": F.square,
    "neg": F.neg,
}


def differentiate(func: str, x0: float, order: int) -> Variable:
    """
    Return the `order`-th derivative of `func` at `x0`, with its graph.

    Parameters
    ----------
    func : str
        Key of `FUNCS`. ``pow`` is ``x ** 3``.
    x0 : float
        Point of evaluation.
    order : int
        Derivative order, at least 1.

    Raises
    ------
    ConfigurationError
        If `order < 1` or `func` is unknown.
    """
    if order < 1:
        raise ConfigurationError(f"order must be >= 1, got {order}")
    if func not in FUNCS:
        raise ConfigurationError(f"unknown function {func!r}; choose from {', '.join(FUNCS)}")

    x = Variable.new(x0)
    x.name = "x"

    y = FUNCS[func](x)
    y.name = "y"
    y.backward(create_graph=True)
    y.grad.name = "gy"

    for _ in range(order - 1):
        gx = x.grad
        x.cleargrad()
        gx.backward(create_graph=True)

    gx = x.grad
    gx.name = f"gx{order}"
    return gx


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="revgrad-diff",
        description="Print the graph of the n-th derivative of a unary function.",
    )
    ap.add_argument("--func", choices=sorted(FUNCS), default="tanh")
    ap.add_argument("--order", type=int, default=1)
    ap.add_argument("--x", type=float, default=1.0)
    ap.add_argument("--verbose", action="store_true", help="include values in node labels")
    return ap


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        gx = differentiate(args.func, args.x, args.order)
    except ConfigurationError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    print(get_dot_graph(gx, verbose=args.verbose))
    return 0


if __name__ == "__main__":
    sys.exit(main())
