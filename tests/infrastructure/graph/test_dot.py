import unittest

from revgrad.infrastructure import functions as F
from revgrad.infrastructure.autograd import Variable
from revgrad.infrastructure.graph import dot_func, dot_var, get_dot_graph


class TestDotNodes(unittest.TestCase):
    def test_variable_node(self) -> None:
        x = Variable.new(1.0, 2.0)
        x.name = "x"
        self.assertEqual(dot_var(x), f'{id(x)} [label="x", color=orange, style=filled]')
        self.assertEqual(
            dot_var(x, verbose=True),
            f'{id(x)} [label="x([1.0, 2.0])", color=orange, style=filled]',
        )

    def test_unnamed_scalar_verbose(self) -> None:
        c = Variable.const(2.5)
        self.assertIn('label="2.5"', dot_var(c, verbose=True))
        self.assertIn('label=""', dot_var(c))

    def test_function_node_and_edges(self) -> None:
        a, b = Variable.new(1.0), Variable.new(2.0)
        y = F.add(a, b)
        f = y.creator
        lines = dot_func(f).splitlines()
        self.assertEqual(lines[0], f'{id(f)} [label="Add", color=lightblue, style=filled, shape=box]')
        self.assertEqual(lines[1:], [f"{id(a)} -> {id(f)}", f"{id(b)} -> {id(f)}", f"{id(f)} -> {id(y)}"])


class TestDotGraph(unittest.TestCase):
    def test_graph_lists_every_node_once(self) -> None:
        x = Variable.new(0.5)
        x.name = "x"
        a = F.square(x)
        y = F.add(a, a)
        y.name = "y"
        dot = get_dot_graph(y)

        lines = dot.splitlines()
        self.assertEqual(lines[0], "digraph g {")
        self.assertEqual(lines[-1], "}")
        self.assertEqual(lines[1], dot_var(y))
        self.assertEqual(dot.count('label="Square"'), 1)
        self.assertEqual(dot.count('label="Add"'), 1)
        self.assertEqual(dot.count(f'{id(x)} [label="x"'), 1)
        self.assertEqual(dot.count(f"{id(a)} -> {id(a.creator)}"), 0)
        self.assertEqual(dot.count(f"{id(a)} -> {id(y.creator)}"), 2)

    def test_leaf_graph(self) -> None:
        x = Variable.new(1.0)
        self.assertEqual(get_dot_graph(x), "digraph g {\n" + dot_var(x) + "\n}")


if __name__ == "__main__":
    unittest.main()
