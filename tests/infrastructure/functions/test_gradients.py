import unittest
import numpy as np

from revgrad.infrastructure import functions as F
from revgrad.infrastructure._numerical import numerical_diff, numerical_grad
from revgrad.infrastructure._random import RandomSource
from revgrad.infrastructure.autograd import Variable


def var_from_np(arr) -> Variable:
    return Variable(np.asarray(arr, dtype=np.float64))


def randn(*shape, seed: int = 0) -> Variable:
    return var_from_np(np.random.default_rng(seed).standard_normal(shape))


def analytic_grads(f, *xs):
    for x in xs:
        x.cleargrad()
    y = F.sum(f(*xs))
    y.backward()
    return [x.grad.data.to_numpy() for x in xs]


def assert_grad_matches(tc: unittest.TestCase, f, *xs, atol=1e-4, rtol=1e-3):
    got = analytic_grads(f, *xs)
    want = [g.data.to_numpy() for g in numerical_grad(f, *xs)]
    tc.assertEqual(len(got), len(want))
    for g, w in zip(got, want):
        np.testing.assert_allclose(g, w, atol=atol, rtol=rtol)


def randn_np(*shape, seed: int = 0) -> np.ndarray:
    return np.random.default_rng(seed).standard_normal(shape)


def grads_or_zeros(xs):
    return [
        np.zeros(x.shape) if x.grad is None else x.grad.data.to_numpy() for x in xs
    ]


def weighted_first_grad(f, arrays, weights) -> float:
    xs = [var_from_np(a) for a in arrays]
    F.sum(f(*xs)).backward()
    return sum(float(np.sum(g * w)) for g, w in zip(grads_or_zeros(xs), weights))


def second_order_grads(f, arrays, weights):
    """
    Gradient of ``sum_k <dL/dx_k, w_k>`` via ``backward(create_graph=True)``.
    """
    xs = [var_from_np(a) for a in arrays]
    F.sum(f(*xs)).backward(create_graph=True)
    gxs = [x.grad for x in xs]
    for x in xs:
        x.cleargrad()

    z = None
    for g, w in zip(gxs, weights):
        term = F.sum(F.mul(g, var_from_np(w)))
        z = term if z is None else F.add(z, term)
    z.backward()
    return grads_or_zeros(xs)


def numerical_second_order_grads(f, arrays, weights, h: float = 1e-4):
    out = []
    for k, base in enumerate(arrays):
        grad = np.zeros_like(base)
        for idx in np.ndindex(base.shape):
            plus = [a.copy() for a in arrays]
            plus[k][idx] += h
            minus = [a.copy() for a in arrays]
            minus[k][idx] -= h
            fp = weighted_first_grad(f, plus, weights)
            fm = weighted_first_grad(f, minus, weights)
            grad[idx] = (fp - fm) / (2.0 * h)
        out.append(grad)
    return out


def assert_second_order_matches(tc: unittest.TestCase, f, *arrays, atol=1e-4, rtol=1e-3):
    arrays = [np.asarray(a, dtype=np.float64) for a in arrays]
    weights = [randn_np(*a.shape, seed=100 + k) for k, a in enumerate(arrays)]
    got = second_order_grads(f, arrays, weights)
    want = numerical_second_order_grads(f, arrays, weights)
    for g, w in zip(got, want):
        np.testing.assert_allclose(g, w, atol=atol, rtol=rtol)


class TestArithmeticGradients(unittest.TestCase):
    def test_add_sub_mul_with_broadcast(self) -> None:
        a, b = randn(3, 4, seed=1), randn(4, seed=2)
        assert_grad_matches(self, F.add, a, b)
        assert_grad_matches(self, F.sub, a, b)
        assert_grad_matches(self, F.mul, a, b)

    def test_commutative_ops_ignore_operand_order(self) -> None:
        a, b = randn(3, 4, seed=30), randn(4, seed=31)
        for f in (F.add, F.mul):
            with self.subTest(f=f.__name__):
                ga, gb = analytic_grads(f, a, b)
                gb_swapped, ga_swapped = analytic_grads(f, b, a)
                np.testing.assert_allclose(ga, ga_swapped)
                np.testing.assert_allclose(gb, gb_swapped)
                self.assertEqual(gb.shape, (4,))

    def test_div(self) -> None:
        a = randn(2, 3, seed=3)
        b = var_from_np(np.abs(randn(2, 1, seed=4).data.to_numpy()) + 1.0)
        assert_grad_matches(self, F.div, a, b)

    def test_neg_square_pow(self) -> None:
        x = randn(5, seed=5)
        assert_grad_matches(self, F.neg, x)
        assert_grad_matches(self, F.square, x)
        assert_grad_matches(self, lambda v: F.pow(v, 3), x)

    def test_operator_sugar_matches_functions(self) -> None:
        x = var_from_np([2.0])
        y = (x * 3 - 1) / 2 + x ** 2
        y.backward()
        self.assertAlmostEqual(y.item(), 6.5)
        self.assertAlmostEqual(x.grad.item(), 1.5 + 4.0)

    def test_reverse_operators(self) -> None:
        x = var_from_np([4.0])
        y = 10.0 / x
        self.assertAlmostEqual(y.item(), 2.5)
        self.assertAlmostEqual((1.0 - x).item(), -3.0)
        self.assertAlmostEqual((2.0 * x).item(), 8.0)
        self.assertAlmostEqual((-x).item(), -4.0)


class TestElementwiseGradients(unittest.TestCase):
    def test_transcendentals(self) -> None:
        x = randn(3, 2, seed=6)
        for f in (F.exp, F.sin, F.cos, F.tanh, F.sigmoid):
            with self.subTest(f=f.__name__):
                assert_grad_matches(self, f, x)

    def test_log_on_positive_input(self) -> None:
        x = var_from_np([0.5, 1.0, 3.0])
        assert_grad_matches(self, F.log, x)

    def test_relu_away_from_zero(self) -> None:
        x = var_from_np([-2.0, -0.3, 0.4, 1.5])
        assert_grad_matches(self, F.relu, x)

    def test_clip_passes_gradient_inside_range(self) -> None:
        x = var_from_np([-2.0, 0.0, 0.5, 2.0])
        y = F.clip(x, -1.0, 1.0)
        np.testing.assert_allclose(y.data.to_numpy(), [-1.0, 0.0, 0.5, 1.0])
        F.sum(y).backward()
        np.testing.assert_allclose(x.grad.data.to_numpy(), [0.0, 1.0, 1.0, 0.0])

    def test_numerical_diff_of_elementwise_function(self) -> None:
        x = var_from_np([0.1, 0.7])
        d = numerical_diff(F.sin, x)
        np.testing.assert_allclose(d.data.to_numpy(), np.cos([0.1, 0.7]), atol=1e-6)


class TestReductionGradients(unittest.TestCase):
    def test_sum_mean_variance(self) -> None:
        x = randn(2, 3, 4, seed=7)
        for axes in (None, 1, (0, 2)):
            for keepdims in (False, True):
                with self.subTest(axes=axes, keepdims=keepdims):
                    assert_grad_matches(self, lambda v: F.sum(v, axes, keepdims), x)
                    assert_grad_matches(self, lambda v: F.mean(v, axes, keepdims), x)
                    assert_grad_matches(self, lambda v: F.variance(v, axes, keepdims), x)

    def test_max_min_without_ties(self) -> None:
        x = randn(3, 4, seed=8)
        assert_grad_matches(self, lambda v: F.max(v, 1), x)
        assert_grad_matches(self, lambda v: F.min(v, 0, True), x)

    def test_max_ties_share_gradient(self) -> None:
        x = var_from_np([[1.0, 3.0, 3.0]])
        y = F.max(x, 1)
        self.assertEqual(y.shape, (1,))
        y.backward()
        np.testing.assert_allclose(x.grad.data.to_numpy(), [[0.0, 1.0, 1.0]])

    def test_global_max_is_scalar(self) -> None:
        x = var_from_np([[1.0, 5.0], [2.0, 4.0]])
        y = F.max(x)
        self.assertEqual(y.shape, ())
        self.assertEqual(y.item(), 5.0)


class TestShapeGradients(unittest.TestCase):
    def test_reshape_transpose(self) -> None:
        x = randn(2, 3, seed=9)
        assert_grad_matches(self, lambda v: F.mul(F.reshape(v, (3, 2)), var_from_np([1.0, 2.0])), x)
        assert_grad_matches(self, lambda v: F.mul(F.transpose(v), var_from_np([[1.0], [2.0], [3.0]])), x)

    def test_reshape_same_shape_records_new_variable(self) -> None:
        x = randn(2, 3)
        y = F.reshape(x, (2, 3))
        self.assertIsNot(y, x)
        self.assertIsNotNone(y.creator)
        np.testing.assert_array_equal(y.data.to_numpy(), x.data.to_numpy())
        self.assertIsNot(x.reshape(2, 3), x)

        y.backward()
        np.testing.assert_allclose(x.grad.data.to_numpy(), np.ones((2, 3)))

    def test_broadcast_and_sum_to_same_shape_return_input(self) -> None:
        x = randn(2, 3)
        self.assertIs(F.broadcast_to(x, (2, 3)), x)
        self.assertIs(F.sum_to(x, (2, 3)), x)

    def test_variable_shape_sugar(self) -> None:
        x = randn(2, 3)
        self.assertEqual(x.reshape(3, 2).shape, (3, 2))
        self.assertEqual(x.reshape((6,)).shape, (6,))
        self.assertEqual(x.T.shape, (3, 2))
        self.assertEqual(x.transpose(1, 0).shape, (3, 2))
        self.assertEqual(x.sum(0).shape, (3,))

    def test_broadcast_to_and_sum_to(self) -> None:
        x = randn(1, 3, seed=10)
        w = randn(4, 3, seed=11)
        assert_grad_matches(self, lambda v: F.mul(F.broadcast_to(v, (4, 3)), w), x)
        y = randn(4, 3, seed=12)
        assert_grad_matches(self, lambda v: F.sum_to(v, (3,)), y)

    def test_concat_and_split(self) -> None:
        a, b = randn(2, 2, seed=13), randn(2, 3, seed=14)
        w = randn(2, 5, seed=15)
        assert_grad_matches(self, lambda p, q: F.mul(F.concat([p, q], axis=1), w), a, b)

        x = randn(6, seed=16)
        parts = F.split(x, [2, 4])
        self.assertEqual([p.shape for p in parts], [(2,), (4,)])
        assert_grad_matches(self, lambda v: F.mul(F.split(v, 3)[1], var_from_np([2.0, 3.0])), x)

    def test_split_unused_piece_gets_zero_gradient(self) -> None:
        x = var_from_np([1.0, 2.0, 3.0, 4.0])
        first, _ = F.split(x, 2)
        F.sum(first).backward()
        np.testing.assert_allclose(x.grad.data.to_numpy(), [1.0, 1.0, 0.0, 0.0])

    def test_get_item_keeps_axis_and_scatters_back(self) -> None:
        x = var_from_np(np.arange(12.0).reshape(3, 4))
        y = F.get_item(x, [2, 0, 2], axis=0)
        self.assertEqual(y.shape, (3, 4))
        F.sum(y).backward()
        np.testing.assert_allclose(x.grad.data.to_numpy()[:, 0], [1.0, 0.0, 2.0])

        x.cleargrad()
        col = F.get_item(x, 1, axis=1)
        self.assertEqual(col.shape, (3, 1))
        assert_grad_matches(self, lambda v: F.square(F.get_item(v, [1, 3], axis=1)), x)

    def test_get_item_is_twice_differentiable(self) -> None:
        x = var_from_np([1.0, 2.0, 3.0])
        y = F.sum(F.pow(F.get_item(x, [1]), 3))
        y.backward(create_graph=True)
        gx = x.grad
        x.cleargrad()
        F.sum(gx).backward()
        np.testing.assert_allclose(x.grad.data.to_numpy(), [0.0, 12.0, 0.0])


class TestMatmulGradients(unittest.TestCase):
    def test_matmul_and_batched_broadcast(self) -> None:
        assert_grad_matches(self, F.matmul, randn(2, 3, seed=17), randn(3, 4, seed=18))
        assert_grad_matches(self, F.matmul, randn(5, 2, 3, seed=19), randn(3, 2, seed=20))

    def test_linear_with_and_without_bias(self) -> None:
        x, w, b = randn(4, 3, seed=21), randn(3, 2, seed=22), randn(2, seed=23)
        assert_grad_matches(self, F.linear, x, w, b)
        assert_grad_matches(self, F.linear, x, w)
        np.testing.assert_allclose(
            F.linear(x, w, b).data.to_numpy(),
            x.data.to_numpy() @ w.data.to_numpy() + b.data.to_numpy(),
        )

    def test_matmul_operator(self) -> None:
        x, w = randn(2, 3), randn(3, 1)
        self.assertEqual((x @ w).shape, (2, 1))


class TestActivationsAndLosses(unittest.TestCase):
    def test_softmax_rows_sum_to_one(self) -> None:
        x = var_from_np([[1000.0, 1000.0], [0.0, np.log(3.0)]])
        y = F.softmax(x)
        np.testing.assert_allclose(y.data.to_numpy(), [[0.5, 0.5], [0.25, 0.75]])
        assert_grad_matches(self, lambda v: F.mul(F.softmax(v), var_from_np([1.0, 2.0])), randn(3, 2, seed=24))

    def test_sigmoid_is_stable_for_large_inputs(self) -> None:
        y = F.sigmoid(var_from_np([-1000.0, 0.0, 1000.0]))
        np.testing.assert_allclose(y.data.to_numpy(), [0.0, 0.5, 1.0])

    def test_mean_squared_error_divides_by_leading_dim(self) -> None:
        a = var_from_np([[1.0, 2.0], [3.0, 4.0]])
        b = var_from_np([[0.0, 0.0], [0.0, 0.0]])
        self.assertAlmostEqual(F.mean_squared_error(a, b).item(), 15.0)
        assert_grad_matches(self, F.mean_squared_error, randn(3, 2, seed=25), randn(3, 2, seed=26))

    def test_softmax_cross_entropy_gradient(self) -> None:
        x = randn(4, 3, seed=27)
        t = np.array([0, 2, 1, 2])
        assert_grad_matches(self, lambda v: F.softmax_cross_entropy(v, t), x)

    def test_softmax_cross_entropy_label_count(self) -> None:
        from revgrad.domain import ShapeError

        with self.assertRaises(ShapeError):
            F.softmax_cross_entropy(randn(3, 2), np.array([0, 1]))

    def test_accuracy_and_argmax(self) -> None:
        y = var_from_np([[0.1, 0.9], [0.8, 0.2], [0.3, 0.7]])
        t = var_from_np([1.0, 1.0, 1.0])
        self.assertAlmostEqual(F.accuracy(y, t).item(), 2.0 / 3.0)
        np.testing.assert_array_equal(F.argmax(y).data.to_numpy(), [1.0, 0.0, 1.0])


class TestSecondOrderGradients(unittest.TestCase):
    def test_ops_reusing_cached_outputs(self) -> None:
        x = randn_np(3, 4, seed=40)
        w = var_from_np(randn_np(4, seed=41))
        cases = {
            "exp": F.exp,
            "tanh": F.tanh,
            "sigmoid": F.sigmoid,
            "sin": F.sin,
            "cos": F.cos,
            "softmax": lambda v: F.mul(F.softmax(v), w),
        }
        for name, f in cases.items():
            with self.subTest(op=name):
                assert_second_order_matches(self, f, x)

    def test_div(self) -> None:
        a = randn_np(2, 3, seed=42)
        b = np.abs(randn_np(2, 1, seed=43)) + 1.0
        assert_second_order_matches(self, F.div, a, b)

    def test_matmul(self) -> None:
        assert_second_order_matches(
            self,
            lambda a, b: F.tanh(F.matmul(a, b)),
            randn_np(2, 3, seed=44),
            randn_np(3, 2, seed=45),
        )
        assert_second_order_matches(self, F.matmul, randn_np(2, 3, seed=46), randn_np(3, 4, seed=47))

    def test_reductions(self) -> None:
        x = randn_np(3, 4, seed=48)
        assert_second_order_matches(self, lambda v: F.square(F.variance(v, 1)), x)
        assert_second_order_matches(self, lambda v: F.variance(v), x)
        assert_second_order_matches(self, lambda v: F.max(F.pow(v, 3), 1), x)
        assert_second_order_matches(self, lambda v: F.square(F.mean(v, 0)), x)

    def test_losses(self) -> None:
        a, b = randn_np(3, 2, seed=49), randn_np(3, 2, seed=50)
        assert_second_order_matches(self, F.mean_squared_error, a, b)
        assert_second_order_matches(self, lambda p, q: F.mean_squared_error(F.tanh(p), q), a, b)

        t = np.array([0, 2, 1, 2])
        x = randn_np(4, 3, seed=51)
        assert_second_order_matches(self, lambda v: F.softmax_cross_entropy(v, t), x)

    def test_concat_and_split(self) -> None:
        a, b = randn_np(2, 2, seed=52), randn_np(2, 3, seed=53)
        assert_second_order_matches(self, lambda p, q: F.pow(F.concat([p, q], axis=1), 3), a, b)

        x = randn_np(6, seed=54)
        assert_second_order_matches(self, lambda v: F.exp(F.split(v, 3)[1]), x)
        assert_second_order_matches(
            self, lambda v: F.mul(*F.split(v, [3, 3])), x
        )

    def test_pow_and_get_item(self) -> None:
        x = randn_np(4, seed=55)
        assert_second_order_matches(self, lambda v: F.pow(v, 4), x)
        assert_second_order_matches(self, lambda v: F.pow(F.get_item(v, [1, 1, 3]), 3), x)


class TestDropout(unittest.TestCase):
    def test_train_mode_masks_and_rescales(self) -> None:
        x = var_from_np(np.ones((50, 50)))
        y = F.dropout(x, 0.5, RandomSource(0))
        values = np.unique(y.data.to_numpy())
        self.assertTrue(set(values.tolist()) <= {0.0, 2.0})
        F.sum(y).backward()
        np.testing.assert_allclose(x.grad.data.to_numpy(), y.data.to_numpy())

    def test_test_mode_is_identity(self) -> None:
        from revgrad.infrastructure.autograd import test_mode

        x = randn(3, 3)
        with test_mode():
            y = F.dropout(x, 0.9)
        np.testing.assert_allclose(y.data.to_numpy(), x.data.to_numpy())

    def test_invalid_ratio(self) -> None:
        from revgrad.domain import ConfigurationError

        with self.assertRaises(ConfigurationError):
            F.dropout(randn(2), 1.0)


if __name__ == "__main__":
    unittest.main()
