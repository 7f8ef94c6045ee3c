import unittest
import numpy as np

from revgrad import F, LSTM, Variable, no_grad
from revgrad.infrastructure._random import RandomSource


class TestEndToEnd(unittest.TestCase):
    def test_chain_rule_on_unary_composition(self) -> None:
        x = Variable.new(0.5)
        y = F.square(F.exp(F.square(x)))
        y.backward()
        self.assertAlmostEqual(x.grad.at(0), 3.297442541400256, places=12)

    def test_division_backward(self) -> None:
        a, b = Variable.new(10.0), Variable.new(2.0)
        y = F.div(a, b)
        y.backward()
        self.assertEqual(y.item(), 5.0)
        self.assertAlmostEqual(a.grad.item(), 0.5)
        self.assertAlmostEqual(b.grad.item(), -2.5)

    def test_matmul_shapes(self) -> None:
        x = Variable.new_of([1, 2, 3], [4, 5, 6])
        w = Variable.new_of([1, 2, 3, 4], [5, 6, 7, 8], [9, 10, 11, 12])
        y = F.matmul(x, w)
        y.backward()
        self.assertEqual(x.grad.shape, (2, 3))
        self.assertEqual(w.grad.shape, (3, 4))
        np.testing.assert_allclose(y.data.to_numpy()[0], [38, 44, 50, 56])

    def test_softmax_cross_entropy(self) -> None:
        x = Variable.new_of(
            [0.1, 0.05, 0.6, 0.0, 0.05, 0.1, 0.0, 0.1, 0.0, 0.0],
            [0.1, 0.05, 0.1, 0.0, 0.05, 0.1, 0.0, 0.6, 0.0, 0.0],
        )
        t = np.array([2, 2])
        loss = F.softmax_cross_entropy(x, t)
        loss.backward()
        self.assertAlmostEqual(loss.item(), 2.069494302297095, places=10)
        self.assertAlmostEqual(x.grad.at(0, 2), -0.41894615, places=7)
        self.assertAlmostEqual(x.grad.at(1, 2), -0.45083835, places=7)
        np.testing.assert_allclose(x.grad.data.to_numpy().sum(axis=1), [0.0, 0.0], atol=1e-12)

    def test_lstm_one_step_vs_two_steps(self) -> None:
        lstm = LSTM(3, rng=RandomSource(0))
        x = Variable.new(1)
        recurrent = [getattr(lstm, f"h2{g}") for g in "fiou"]

        lstm(x).backward()
        lstm(x).backward()
        self.assertTrue(all(layer.w.grad is not None for layer in recurrent))

        lstm.clear_grads()
        lstm.reset_state()
        lstm(x).backward()
        self.assertTrue(all(layer.w.grad is None for layer in recurrent))

    def test_scoped_no_grad(self) -> None:
        x = Variable.new(3.0)
        with no_grad():
            y = F.square(x)
            y.backward()
        self.assertIsNone(x.grad)

        y = F.square(x)
        y.backward()
        self.assertEqual(x.grad.item(), 6.0)


if __name__ == "__main__":
    unittest.main()
