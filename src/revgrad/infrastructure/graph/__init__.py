from ._dot import dot_func, dot_var, get_dot_graph

__all__ = [
    dot_func.__name__,
    dot_var.__name__,
    get_dot_graph.__name__,
]
