import numpy as np
import pytest

from mentornets.core.activations import Activation

SMOOTH = [
    Activation.IDENTITY,
    Activation.LOGISTIC,
    Activation.TANH,
    Activation.ARCTAN,
    Activation.SOFTSIGN,
    Activation.SOFTPLUS,
]


@pytest.mark.parametrize("activation", SMOOTH)
def test_output_based_derivative_matches_finite_difference(activation):
    x = np.linspace(-2.0, 2.0, 9)
    h = 1e-5
    numeric = (activation.apply(x + h) - activation.apply(x - h)) / (2 * h)
    analytic = activation.derivative(activation.apply(x))
    np.testing.assert_allclose(analytic, numeric, rtol=1e-4, atol=1e-6)


def test_known_values():
    x = np.array([-1.0, 0.0, 2.0], dtype=np.float32)
    np.testing.assert_allclose(Activation.LOGISTIC.apply(np.zeros(1)), [0.5])
    np.testing.assert_array_equal(Activation.RELU.apply(x), [0.0, 0.0, 2.0])
    np.testing.assert_array_equal(Activation.BINARY_STEP.apply(x), [0.0, 1.0, 1.0])
    np.testing.assert_array_equal(Activation.RELU.derivative(np.array([0.0, 3.0])), [0.0, 1.0])
    np.testing.assert_array_equal(Activation.IDENTITY.derivative(x), [1.0, 1.0, 1.0])


def test_logistic_is_stable_for_large_inputs():
    out = Activation.LOGISTIC.apply(np.array([-1000.0, 1000.0]))
    assert np.all(np.isfinite(out))
    np.testing.assert_allclose(out, [0.0, 1.0])


def test_identity_returns_a_copy():
    x = np.array([1.0, 2.0])
    y = Activation.IDENTITY.apply(x)
    y[0] = 5.0
    assert x[0] == 1.0


@pytest.mark.parametrize(
    "name,expected",
    [
        ("tanh", Activation.TANH),
        ("Sigmoid", Activation.LOGISTIC),
        ("linear", Activation.IDENTITY),
        ("binary-step", Activation.BINARY_STEP),
        (Activation.RELU, Activation.RELU),
    ],
)
def test_from_name(name, expected):
    assert Activation.from_name(name) is expected


def test_unknown_name_lists_available():
    with pytest.raises(ValueError, match="Available activations"):
        Activation.from_name("swish")
