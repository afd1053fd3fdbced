"""
test_activations.py
~~~~~~~~~~~~~~~~~~~

Unit tests for the activation registry and the dot-product kernel.
"""

import numpy as np
import pytest

from nrx_runtime.activations import (
    ACTIVATIONS,
    available_activations,
    get_activation,
    softmax,
)
from nrx_runtime.errors import ShapeMismatchError, UnknownActivationError
from nrx_runtime.kernels import as_numeric_array, compute_forward


@pytest.mark.unit
class TestActivationRegistry:
    """Test activation lookup and the forward functions."""

    def test_required_activations_registered(self):
        """Test that every required activation is available."""
        assert available_activations() == [
            'linear', 'relu', 'sigmoid', 'softmax', 'tanh'
        ]

    def test_lookup_is_case_insensitive(self):
        """Test that names resolve regardless of case."""
        assert get_activation('ReLU') is ACTIVATIONS['relu']
        assert get_activation('SOFTMAX').name == 'softmax'

    def test_unknown_activation_raises(self):
        """Test that an unregistered name raises UnknownActivationError."""
        with pytest.raises(UnknownActivationError) as exc_info:
            get_activation('swish')
        assert exc_info.value.name == 'swish'
        assert 'swish' in str(exc_info.value)

    def test_elementwise_values(self):
        """Test relu, sigmoid, tanh and linear on known inputs."""
        z = np.array([-2.0, 0.0, 3.0])
        assert np.array_equal(get_activation('relu')(z), [0.0, 0.0, 3.0])
        assert np.allclose(
            get_activation('sigmoid')(z), 1 / (1 + np.exp(-z))
        )
        assert np.allclose(get_activation('tanh')(z), np.tanh(z))
        assert np.array_equal(get_activation('linear')(z), z)

    def test_sigmoid_does_not_overflow(self):
        """Test that sigmoid saturates cleanly for extreme inputs."""
        with np.errstate(over='raise'):
            out = get_activation('sigmoid')(np.array([-1000.0, 1000.0]))
        assert np.allclose(out, [0.0, 1.0])

    def test_only_softmax_is_vectorwise(self):
        """Test that softmax is the only whole-vector activation."""
        assert [a.name for a in ACTIVATIONS.values() if a.vectorwise] == [
            'softmax'
        ]

    def test_derivatives(self):
        """Test the derivatives kept for training."""
        z = np.array([-1.0, 0.5])
        assert np.array_equal(ACTIVATIONS['relu'].derivative(z), [0.0, 1.0])
        s = 1 / (1 + np.exp(-z))
        assert np.allclose(ACTIVATIONS['sigmoid'].derivative(z), s * (1 - s))
        assert np.allclose(
            ACTIVATIONS['tanh'].derivative(z), 1 - np.tanh(z) ** 2
        )
        assert np.array_equal(ACTIVATIONS['linear'].derivative(z), [1.0, 1.0])


@pytest.mark.unit
class TestSoftmax:
    """Test the numerically stabilized softmax."""

    @pytest.mark.parametrize('logits', [
        [1.0, 2.0, 3.0],
        [0.0],
        [-50.0, 0.0, 50.0, 12.5],
        [1000.0, 1001.0, 999.0],
    ])
    def test_sums_to_one(self, logits):
        """Test that outputs sum to 1 for finite inputs."""
        out = softmax(np.array(logits))
        assert abs(out.sum() - 1.0) < 1e-9
        assert np.all(out >= 0)

    def test_shift_invariant(self):
        """Test that adding a constant to every logit changes nothing."""
        logits = np.array([0.3, -1.2, 2.5])
        assert np.allclose(softmax(logits), softmax(logits + 500.0))
        assert np.allclose(softmax(logits), softmax(logits - 500.0))

    def test_large_logits_do_not_overflow(self):
        """Test that very large logits give finite probabilities."""
        with np.errstate(over='raise'):
            out = softmax(np.array([1e4, 1e4 - 1.0]))
        assert np.all(np.isfinite(out))
        assert out[0] > out[1]


@pytest.mark.unit
class TestDotProductKernel:
    """Test the per-layer dot product."""

    def test_known_values(self):
        """Test z = biases + inputs @ weights on a small example."""
        weights = np.array([[1.0, 0.0], [0.0, 1.0], [1.0, 1.0]])
        z = compute_forward(np.array([1.0, 2.0, 3.0]), weights,
                            np.array([0.5, -0.5]))
        assert np.array_equal(z, [4.5, 4.5])

    def test_zero_input_returns_biases(self):
        """Test that a zero input vector yields exactly the biases."""
        rng = np.random.default_rng(1)
        weights = rng.normal(size=(6, 4))
        biases = rng.normal(size=4)
        z = compute_forward(np.zeros(6), weights, biases)
        assert np.array_equal(z, biases)

    def test_input_length_mismatch(self):
        """Test that a wrong input length raises ShapeMismatchError."""
        with pytest.raises(ShapeMismatchError) as exc_info:
            compute_forward(np.zeros(2), np.zeros((3, 2)), np.zeros(2))
        assert exc_info.value.actual == 2
        assert exc_info.value.expected == 3

    def test_bias_length_mismatch(self):
        """Test that a wrong bias length raises ShapeMismatchError."""
        with pytest.raises(ShapeMismatchError):
            compute_forward(np.zeros(3), np.zeros((3, 2)), np.zeros(3))

    def test_weights_must_be_matrix(self):
        """Test that 1-D weights are rejected."""
        with pytest.raises(ShapeMismatchError):
            compute_forward(np.zeros(3), np.zeros(3), np.zeros(1))


@pytest.mark.unit
class TestNumericArrays:
    """Test conversion of nested values to float arrays."""

    def test_numbers_converted(self):
        """Test that integers and floats become a float array."""
        array = as_numeric_array([[1, 2.5], [3, 4]])
        assert array.dtype == float
        assert array.tolist() == [[1.0, 2.5], [3.0, 4.0]]

    def test_empty_list(self):
        """Test that an empty list is an empty float array."""
        assert as_numeric_array([]).size == 0

    @pytest.mark.parametrize('value', [
        ['1', '2'],
        [True, False],
        [1, True],
        [1, None],
        [[1, 2], [3]],
    ])
    def test_rejected_values(self, value):
        """Test that text, booleans, None and ragged lists are refused."""
        with pytest.raises(ValueError):
            as_numeric_array(value)
