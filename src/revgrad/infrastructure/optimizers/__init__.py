from ._adam import Adam, AdamW
from ._base import Optimizer
from ._hooks import ClipGrad, WeightDecay
from ._sgd import SGD, Momentum

__all__ = [
    Adam.__name__,
    AdamW.__name__,
    ClipGrad.__name__,
    Momentum.__name__,
    Optimizer.__name__,
    SGD.__name__,
    WeightDecay.__name__,
]
