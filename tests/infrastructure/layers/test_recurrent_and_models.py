import unittest
import numpy as np

from revgrad.domain import ConfigurationError, StateError
from revgrad.infrastructure import functions as F
from revgrad.infrastructure._random import RandomSource
from revgrad.infrastructure.autograd import Config, Variable
from revgrad.infrastructure.models import LSTMModel, MLP
from revgrad.infrastructure.recurrent import LSTM, RNN


def recurrent_grads(layer, prefix: str = "h2"):
    return {
        name: p.grad
        for name, p in layer.parameters().items()
        if name.startswith(prefix)
    }


class TestRNN(unittest.TestCase):
    def test_state_carries_across_calls(self) -> None:
        rnn = RNN(4, rng=RandomSource(0))
        with self.assertRaises(StateError):
            _ = rnn.state

        h1 = rnn(Variable.new(0.5))
        self.assertEqual(h1.shape, (1, 4))
        self.assertIs(rnn.state, h1)

        h2 = rnn(Variable.new(0.5))
        self.assertFalse(np.allclose(h1.data.to_numpy(), h2.data.to_numpy()))

    def test_reset_state_restarts_sequence(self) -> None:
        rnn = RNN(3, rng=RandomSource(0))
        first = rnn(Variable.new(1.0)).data.to_numpy()
        rnn(Variable.new(1.0))
        rnn.reset_state()
        again = rnn(Variable.new(1.0)).data.to_numpy()
        np.testing.assert_allclose(first, again)

    def test_recurrent_weight_gets_gradient_only_from_second_step(self) -> None:
        rnn = RNN(2, rng=RandomSource(0))
        rnn(Variable.new(1.0)).backward()
        self.assertIsNone(rnn.h2h.w.grad)
        rnn.clear_grads()
        F.sum(rnn(Variable.new(1.0))).backward()
        self.assertIsNotNone(rnn.h2h.w.grad)

    def test_invalid_hidden_size(self) -> None:
        with self.assertRaises(ConfigurationError):
            RNN(0)


class TestLSTM(unittest.TestCase):
    def test_parameter_names(self) -> None:
        lstm = LSTM(3, in_size=2, rng=RandomSource(0))
        names = list(lstm.parameters())
        self.assertEqual(names, sorted(names))
        self.assertEqual(len(names), 12)
        self.assertIn("h2f.w", names)
        self.assertNotIn("h2f.b", names)

    def test_state_pair(self) -> None:
        lstm = LSTM(3, rng=RandomSource(0))
        with self.assertRaises(StateError):
            _ = lstm.state
        h = lstm(Variable.new(1.0))
        state_h, state_c = lstm.state
        self.assertIs(state_h, h)
        self.assertEqual(state_c.shape, (1, 3))
        lstm.reset_state()
        with self.assertRaises(StateError):
            _ = lstm.state

    def test_second_step_reaches_recurrent_weights(self) -> None:
        lstm = LSTM(3, rng=RandomSource(0))
        x = Variable.new(1)

        lstm(x).backward()
        self.assertTrue(all(g is None for g in recurrent_grads(lstm).values()))

        lstm(x).backward()
        self.assertTrue(all(g is not None for g in recurrent_grads(lstm).values()))

        lstm.clear_grads()
        lstm.reset_state()
        lstm(x).backward()
        self.assertTrue(all(g is None for g in recurrent_grads(lstm).values()))

    def test_hidden_state_is_bounded(self) -> None:
        lstm = LSTM(5, rng=RandomSource(1))
        for _ in range(10):
            h = lstm(Variable.new(100.0))
        self.assertTrue(np.all(np.abs(h.data.to_numpy()) <= 1.0))


class TestModels(unittest.TestCase):
    def tearDown(self) -> None:
        Config.enable_backprop = True
        Config.train = True

    def test_mlp_layers_and_output_shape(self) -> None:
        model = MLP([10, 3], rng=RandomSource(0))
        y = model(Variable(np.ones((5, 2))))
        self.assertEqual(y.shape, (5, 3))
        self.assertEqual(list(model.parameters()), ["l0.b", "l0.w", "l1.b", "l1.w"])

    def test_mlp_requires_a_layer(self) -> None:
        with self.assertRaises(ConfigurationError):
            MLP([])

    def test_mlp_custom_activation(self) -> None:
        model = MLP([4, 1], activation=F.relu, rng=RandomSource(0))
        self.assertIs(model.activation, F.relu)
        self.assertEqual(model(Variable(np.ones((2, 3)))).shape, (2, 1))

    def test_mlp_fits_simple_regression(self) -> None:
        from revgrad.infrastructure.optimizers import SGD

        rng = np.random.default_rng(0)
        x = rng.random((100, 1))
        t = np.sin(2 * np.pi * x) + rng.random((100, 1))
        model = MLP([10, 1], rng=RandomSource(0))
        opt = SGD(model, lr=0.2)

        losses = []
        for _ in range(200):
            loss = F.mean_squared_error(model(Variable(x)), Variable(t))
            model.clear_grads()
            loss.backward()
            opt.step()
            losses.append(loss.item())
        self.assertLess(losses[-1], losses[0])

    def test_predict_records_no_graph(self) -> None:
        model = MLP([3, 1], rng=RandomSource(0))
        y = model.predict(Variable(np.ones((2, 2))))
        self.assertIsNone(y.creator)
        self.assertTrue(Config.enable_backprop)
        self.assertTrue(Config.train)

    def test_plot_returns_dot_text(self) -> None:
        model = MLP([3, 1], rng=RandomSource(0))
        dot = model.plot(Variable(np.ones((2, 2))))
        self.assertTrue(dot.startswith("digraph g {"))
        self.assertIn("Linear", dot)
        self.assertIn("Sigmoid", dot)

    def test_lstm_model(self) -> None:
        model = LSTMModel(4, 1, rng=RandomSource(0))
        y = model(Variable(np.zeros((3, 1))))
        self.assertEqual(y.shape, (3, 1))
        self.assertIn("lstm.x2f.w", model.parameters())
        self.assertIn("fc.w", model.parameters())
        model.reset_state()
        with self.assertRaises(StateError):
            _ = model.lstm.state


if __name__ == "__main__":
    unittest.main()
