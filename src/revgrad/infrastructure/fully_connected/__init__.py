from ._linear import Linear

__all__ = [
    Linear.__name__,
]
