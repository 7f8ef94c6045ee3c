import contextlib
import io
import math
import unittest

from revgrad.cli._differentiate import differentiate
from revgrad.cli._differentiate import main as diff_main
from revgrad.cli._lstm_demo import batches, noisy_curve
from revgrad.cli._lstm_demo import main as lstm_main
from revgrad.domain import ConfigurationError
from revgrad.infrastructure._random import RandomSource


def run_main(main, argv):
    out, err = io.StringIO(), io.StringIO()
    with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
        code = main(argv)
    return code, out.getvalue(), err.getvalue()


class TestDifferentiate(unittest.TestCase):
    def test_tanh_derivatives(self) -> None:
        t = math.tanh(1.0)
        self.assertAlmostEqual(differentiate("tanh", 1.0, 1).item(), 1 - t * t)
        self.assertAlmostEqual(differentiate("tanh", 1.0, 2).item(), -2 * t * (1 - t * t))

    def test_pow_is_cube(self) -> None:
        self.assertAlmostEqual(differentiate("pow", 2.0, 1).item(), 12.0)
        self.assertAlmostEqual(differentiate("pow", 2.0, 2).item(), 12.0)
        self.assertAlmostEqual(differentiate("pow", 2.0, 3).item(), 6.0)

    def test_result_is_named_by_order(self) -> None:
        self.assertEqual(differentiate("sin", 0.3, 3).name, "gx3")

    def test_invalid_arguments(self) -> None:
        with self.assertRaises(ConfigurationError):
            differentiate("sin", 0.0, 0)
        with self.assertRaises(ConfigurationError):
            differentiate("erf", 0.0, 1)


class TestDiffMain(unittest.TestCase):
    def test_prints_dot_graph(self) -> None:
        code, out, _ = run_main(diff_main, ["--func", "sin", "--order", "2", "--x", "0.5"])
        self.assertEqual(code, 0)
        self.assertTrue(out.startswith("digraph g {"))
        self.assertIn('label="gx2"', out)
        self.assertIn('label="x"', out)

    def test_verbose_labels_include_values(self) -> None:
        code, out, _ = run_main(diff_main, ["--func", "square", "--x", "3", "--verbose"])
        self.assertEqual(code, 0)
        self.assertIn('label="gx1([6.0])"', out)

    def test_order_below_one_exits_with_2(self) -> None:
        code, out, err = run_main(diff_main, ["--order", "0"])
        self.assertEqual(code, 2)
        self.assertEqual(out, "")
        self.assertIn("error:", err)


class TestLSTMDemo(unittest.TestCase):
    def test_noisy_curve_pairs_next_sample(self) -> None:
        data, label = noisy_curve(10, 0.0, RandomSource(0))
        self.assertEqual(len(data), 9)
        self.assertAlmostEqual(label[0], data[1])

    def test_batches_skip_the_tail(self) -> None:
        data, label = noisy_curve(20, 0.05, RandomSource(0))
        shapes = [(x.shape, t.shape) for x, t in batches(data, label, 4)]
        self.assertEqual(len(shapes), 4)
        self.assertEqual(shapes[0], ((4, 1), (4, 1)))

    def test_main_prints_csv(self) -> None:
        argv = [
            "--n", "20", "--epoch", "1", "--batch-size", "2", "--hidden-size", "3",
            "--bptt-length", "2", "--seed", "0", "--log-level", "WARNING",
        ]
        code, out, _ = run_main(lstm_main, argv)
        self.assertEqual(code, 0)
        rows = out.strip().splitlines()
        self.assertEqual(len(rows), 19)
        x, y = rows[0].split(",")
        self.assertEqual(float(x), 0.0)
        float(y)

    def test_main_rejects_bad_config(self) -> None:
        code, out, err = run_main(lstm_main, ["--epoch", "0", "--log-level", "WARNING"])
        self.assertEqual(code, 2)
        self.assertIn("--epoch", err)


if __name__ == "__main__":
    unittest.main()
