"""
LSTM sequence-fitting demo.

Trains an `LSTMModel` to predict the next sample of a noisy sine curve using
truncated backpropagation through time, then feeds it a cosine curve under
``no_grad()`` and prints the predictions as ``x,y`` CSV lines on stdout.
Progress is logged to stderr.

    revgrad-lstm --epoch 100 --hidden-size 100 --bptt-length 30 > pred.csv
"""

from __future__ import annotations

import argparse
import logging
import math
import sys
import time
from typing import Iterator, List, Optional, Sequence, Tuple

import numpy as np

from ..domain._errors import ConfigurationError
from ..domain._random import IRandomSource
from ..infrastructure import functions as F
from ..infrastructure._random import RandomSource
from ..infrastructure.autograd import Variable, no_grad
from ..infrastructure.models import LSTMModel
from ..infrastructure.optimizers import SGD

logger = logging.getLogger(__name__)


def pi_range(c: float, n: int) -> np.ndarray:
    """
    `n` evenly spaced points covering ``[0, c * pi]``.
    """
    return np.linspace(0.0, c * math.pi, n)


def noisy_curve(n: int, noise: float, src: IRandomSource) -> Tuple[np.ndarray, np.ndarray]:
    """
    Sample ``sin`` over ``[0, 2 pi]`` with uniform noise in ``[-noise, noise)``.

    Returns
    -------
    tuple[np.ndarray, np.ndarray]
        ``(data, label)`` where ``label[k]`` is the sample following
        ``data[k]``; both have ``n - 1`` elements.
    """
    y = np.sin(pi_range(2.0, n)) + src.uniform((n,)) * (2.0 * noise) - noise
    return y[:-1], y[1:]


def batches(data: np.ndarray, label: np.ndarray, batch_size: int) -> Iterator[Tuple[Variable, Variable]]:
    """
    Yield consecutive ``(batch_size, 1)`` column batches of data and labels.

    A batch is yielded only while a further full batch would still start
    inside the sequence, so the tail of the sequence is not visited.
    """
    n = len(data)
    k = 0
    while (k + 1) * batch_size < n:
        begin, end = k * batch_size, (k + 1) * batch_size
        yield (
            Variable(data[begin:end].reshape(-1, 1)),
            Variable(label[begin:end].reshape(-1, 1)),
        )
        k += 1


def train(
    model: LSTMModel,
    data: np.ndarray,
    label: np.ndarray,
    *,
    epochs: int,
    batch_size: int,
    bptt_length: int,
    lr: float,
) -> List[float]:
    """
    Fit `model` with SGD and truncated BPTT; return the per-epoch mean loss.
    """
    optimizer = SGD(model, lr=lr)
    history = []
    for epoch in range(epochs):
        model.reset_state()

        loss, count = Variable.const(0.0), 0
        for x, t in batches(data, label, batch_size):
            y = model(x)
            loss = loss + F.mean_squared_error(y, t)

            count += 1
            if count % bptt_length == 0 or count == len(data):
                model.clear_grads()
                loss.backward()
                loss.unchain_backward()
                optimizer.step()

        avg = loss.item() / max(count, 1)
        history.append(avg)
        logger.info("%3d: %f", epoch, avg)

    return history


def predict(model: LSTMModel, xs: np.ndarray) -> np.ndarray:
    """
    Run `model` over `xs` one sample at a time from a fresh state.
    """
    ys = np.zeros_like(xs)
    with no_grad():
        model.reset_state()
        for k, x in enumerate(xs):
            ys[k] = model(Variable.new(float(x))).at(0, 0)
    return ys


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="revgrad-lstm",
        description="Fit an LSTM to a noisy sine curve and predict a cosine curve.",
    )
    ap.add_argument("--n", type=int, default=1000, help="number of curve samples")
    ap.add_argument("--epoch", type=int, default=100)
    ap.add_argument("--batch-size", type=int, default=30)
    ap.add_argument("--hidden-size", type=int, default=100)
    ap.add_argument("--bptt-length", type=int, default=30)
    ap.add_argument("--learning-rate", type=float, default=0.01)
    ap.add_argument("--noise", type=float, default=0.05)
    ap.add_argument("--seed", type=int, default=None)
    ap.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    return ap


def _validate(args: argparse.Namespace) -> None:
    for name in ("epoch", "batch_size", "hidden_size", "bptt_length"):
        if getattr(args, name) < 1:
            raise ConfigurationError(f"--{name.replace('_', '-')} must be >= 1")
    if args.n < 2:
        raise ConfigurationError("--n must be >= 2")
    if args.learning_rate <= 0.0:
        raise ConfigurationError("--learning-rate must be > 0")
    if args.noise < 0.0:
        raise ConfigurationError("--noise must be >= 0")


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        _validate(args)
    except ConfigurationError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    rng = RandomSource(args.seed)
    data, label = noisy_curve(args.n, args.noise, rng)
    model = LSTMModel(args.hidden_size, 1, rng=rng)

    start = time.perf_counter()
    train(
        model,
        data,
        label,
        epochs=args.epoch,
        batch_size=args.batch_size,
        bptt_length=args.bptt_length,
        lr=args.learning_rate,
    )
    logger.info("elapsed=%.3fs", time.perf_counter() - start)

    xs = pi_range(4.0, len(data))
    ys = predict(model, np.cos(xs))
    for x, y in zip(xs, ys):
        print(f"{x:f},{y:f}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
