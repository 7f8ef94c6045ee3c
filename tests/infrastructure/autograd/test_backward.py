import gc
import unittest
import numpy as np

from revgrad.domain import ConfigurationError, Forwarder, ShapeError, StateError
from revgrad.infrastructure import functions as F
from revgrad.infrastructure.autograd import (
    Config,
    Function,
    Variable,
    as_variable,
    no_grad,
    test_mode,
    using_config,
)
from revgrad.infrastructure.tensor import Tensor


class _BadShapeGrad(Forwarder):
    def forward(self, x):
        return [Variable(x.data.copy())]

    def backward(self, gy):
        return [Variable(Tensor.ones((7,)))]


class _TooManyGrads(Forwarder):
    def forward(self, x):
        return [Variable(x.data.copy())]

    def backward(self, gy):
        return [gy, gy]


class TestVariableBasics(unittest.TestCase):
    def test_data_is_always_float64(self) -> None:
        v = Variable(Tensor.new((2,), [1, 2]))
        self.assertEqual(v.dtype, np.float64)
        self.assertEqual(Variable([[1, 2]]).shape, (1, 2))

    def test_variable_of_variable_is_rejected(self) -> None:
        with self.assertRaises(TypeError):
            Variable(Variable.new(1.0))

    def test_constructors(self) -> None:
        self.assertEqual(Variable.new(1, 2, 3).shape, (3,))
        self.assertEqual(Variable.new_of([1, 2], [3, 4]).shape, (2, 2))
        self.assertEqual(Variable.const(2.0).shape, ())
        self.assertEqual(repr(Variable.new(1.0, 2.0)), "variable([1.0, 2.0])")
        self.assertEqual(repr(Variable.const(2.0)), "variable(2.0)")

    def test_as_variable_passthrough_and_wrap(self) -> None:
        v = Variable.new(1.0)
        self.assertIs(as_variable(v), v)
        self.assertEqual(as_variable(3.0).shape, ())

    def test_leaf_backward_seeds_ones(self) -> None:
        v = Variable.new(1.0, 2.0)
        v.backward()
        np.testing.assert_array_equal(v.grad.data.to_numpy(), [1.0, 1.0])


class TestBackwardAlgorithm(unittest.TestCase):
    def test_generation_tracks_depth(self) -> None:
        x = Variable.new(1.0)
        a = F.square(x)
        b = F.exp(a)
        self.assertEqual(x.generation, 0)
        self.assertEqual(a.generation, 1)
        self.assertEqual(b.generation, 2)
        self.assertEqual(b.creator.generation, 1)

    def test_fan_out_accumulates_before_creator_runs(self) -> None:
        # y = a^2 + a^2 with a = x^2, dy/dx = 8 x^3
        x = Variable.new(2.0)
        a = F.square(x)
        y = F.add(F.square(a), F.square(a))
        y.backward()
        self.assertAlmostEqual(x.grad.item(), 64.0)

    def test_same_input_twice_accumulates(self) -> None:
        x = Variable.new(3.0)
        y = F.add(x, x)
        y.backward()
        self.assertEqual(x.grad.item(), 2.0)

    def test_intermediate_grads_are_dropped_unless_retained(self) -> None:
        x = Variable.new(1.0)
        a = F.square(x)
        y = F.exp(a)
        y.backward()
        self.assertIsNone(a.grad)
        self.assertIsNotNone(y.grad)

        x.cleargrad()
        a = F.square(x)
        y = F.exp(a)
        y.backward(retain_grad=True)
        self.assertIsNotNone(a.grad)

    def test_repeated_backward_accumulates_into_leaves(self) -> None:
        x = Variable.new(3.0)
        y = F.mul(x, 2.0)
        y.backward()
        y.backward()
        self.assertEqual(x.grad.item(), 4.0)

    def test_outputs_are_weakly_referenced(self) -> None:
        x = Variable.new(1.0)
        y = F.square(x)
        f = y.creator
        del y
        gc.collect()
        self.assertEqual(f.output_variables(), [None])

    def test_double_backward_with_create_graph(self) -> None:
        # y = x^4, y' = 4x^3, y'' = 12x^2
        x = Variable.new(2.0)
        y = F.pow(x, 4)
        y.backward(create_graph=True)
        gx = x.grad
        self.assertAlmostEqual(gx.item(), 32.0)
        self.assertIsNotNone(gx.creator)

        x.cleargrad()
        gx.backward()
        self.assertAlmostEqual(x.grad.item(), 48.0)

    def test_gradients_have_no_creator_without_create_graph(self) -> None:
        x = Variable.new(2.0)
        F.square(x).backward()
        self.assertIsNone(x.grad.creator)


class TestUnchain(unittest.TestCase):
    def test_unchain_backward_cuts_ancestors(self) -> None:
        x = Variable.new(1.0)
        a = F.square(x)
        b = F.exp(a)
        y = F.sin(b)
        y.unchain_backward()
        self.assertIsNone(a.creator)
        self.assertIsNone(b.creator)
        self.assertIsNotNone(y.creator)

    def test_backward_after_unchain_backward_raises(self) -> None:
        x = Variable.new(1.0)
        y = F.square(F.square(x))
        y.unchain_backward()
        with self.assertRaises(StateError):
            y.backward()

    def test_unchain_makes_leaf(self) -> None:
        x = Variable.new(1.0)
        y = F.square(x)
        y.unchain()
        self.assertIsNone(y.creator)


class TestFunctionNode(unittest.TestCase):
    def test_requires_forwarder(self) -> None:
        with self.assertRaises(TypeError):
            Function(object())

    def test_records_inputs_and_generation(self) -> None:
        x = Variable.new(1.0)
        f = Function(F.Exp())
        y = f.apply_first(x)
        self.assertEqual(f.inputs, [x])
        self.assertIs(y.creator, f)
        self.assertEqual(f.name, "Exp")
        self.assertEqual(repr(f), "Exp(generation=0)")

    def test_wrong_gradient_shape_raises(self) -> None:
        x = Variable.new(1.0, 2.0)
        y = Function(_BadShapeGrad()).apply_first(x)
        with self.assertRaises(ShapeError):
            y.backward()

    def test_wrong_gradient_count_raises(self) -> None:
        x = Variable.new(1.0)
        y = Function(_TooManyGrads()).apply_first(x)
        with self.assertRaises(ShapeError):
            y.backward()


class TestConfigScopes(unittest.TestCase):
    def tearDown(self) -> None:
        Config.enable_backprop = True
        Config.train = True

    def test_no_grad_records_nothing(self) -> None:
        x = Variable.new(2.0)
        with no_grad():
            y = F.square(x)
        self.assertIsNone(y.creator)
        self.assertTrue(Config.enable_backprop)

    def test_test_mode_toggles_train(self) -> None:
        with test_mode():
            self.assertFalse(Config.train)
        self.assertTrue(Config.train)

    def test_end_is_idempotent(self) -> None:
        outer = using_config("enable_backprop", False)
        inner = using_config("enable_backprop", True)
        inner.end()
        inner.end()
        self.assertFalse(Config.enable_backprop)
        outer.end()
        self.assertTrue(Config.enable_backprop)

    def test_scope_restores_on_exception(self) -> None:
        with self.assertRaises(RuntimeError):
            with no_grad():
                raise RuntimeError("boom")
        self.assertTrue(Config.enable_backprop)

    def test_unknown_flag(self) -> None:
        with self.assertRaises(ConfigurationError):
            using_config("verbose", True)


if __name__ == "__main__":
    unittest.main()
