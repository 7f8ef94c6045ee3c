"""
Graphviz DOT rendering of computation graphs.

The printer walks creator links backwards from a variable and emits one node
per variable and function, plus edges ``input -> function`` and
``function -> output``. Node identifiers are Python object ids, which are
stable for the lifetime of the graph.

Example output::

    digraph g {
    140 [label="y", color=orange, style=filled]
    141 [label="Square", color=lightblue, style=filled, shape=box]
    142 -> 141
    141 -> 140
    142 [label="x", color=orange, style=filled]
    }
"""

from __future__ import annotations

from typing import List

from ..autograd._function import Function
from ..autograd._variable import Variable


def _var_label(v: Variable, verbose: bool) -> str:
    name = v.name if v.name is not None else ""
    if not verbose:
        return name
    if v.data.ndim == 0:
        data = repr(v.data.item())
    else:
        data = str(v.data.to_numpy().tolist())
    return f"{name}({data})" if name else data


def dot_var(v: Variable, verbose: bool = False) -> str:
    """
    Render one variable node.

    Parameters
    ----------
    v : Variable
        Variable to render.
    verbose : bool, optional
        Append the variable's data to its name. Defaults to False.
    """
    return f'{id(v)} [label="{_var_label(v, verbose)}", color=orange, style=filled]'


def dot_func(f: Function) -> str:
    """
    Render one function node together with its input and output edges.
    """
    lines = [f'{id(f)} [label="{f.name}", color=lightblue, style=filled, shape=box]']
    for x in f.inputs:
        lines.append(f"{id(x)} -> {id(f)}")
    for y in f.output_variables():
        if y is not None:
            lines.append(f"{id(f)} -> {id(y)}")
    return "\n".join(lines)


def get_dot_graph(output: Variable, verbose: bool = False) -> str:
    """
    Render the graph that produced `output` as DOT text.

    Traversal is depth-first from ``output.creator``; every function and
    variable is emitted once.

    Parameters
    ----------
    output : Variable
        Root of the rendering.
    verbose : bool, optional
        Include variable data in labels. Defaults to False.

    Returns
    -------
    str
        A complete ``digraph g { ... }`` document.
    """
    lines: List[str] = [dot_var(output, verbose)]
    seen_funcs = set()
    seen_vars = {id(output)}
    stack: List[Function] = []

    if output.creator is not None:
        stack.append(output.creator)
        seen_funcs.add(id(output.creator))

    while stack:
        f = stack.pop()
        lines.append(dot_func(f))
        for x in f.inputs:
            if id(x) not in seen_vars:
                seen_vars.add(id(x))
                lines.append(dot_var(x, verbose))
            if x.creator is not None and id(x.creator) not in seen_funcs:
                seen_funcs.add(id(x.creator))
                stack.append(x.creator)

    return "digraph g {\n" + "\n".join(lines) + "\n}"
