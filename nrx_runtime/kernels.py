"""
kernels.py
~~~~~~~~~~

Dot-product kernel for fully connected layers.
"""

import numpy as np

from .errors import ShapeMismatchError


def compute_forward(
    inputs: np.ndarray,
    weights: np.ndarray,
    biases: np.ndarray
) -> np.ndarray:
    """
    Compute the pre-activation value of every neuron in one layer.

    ``z[j] = biases[j] + sum_i inputs[i] * weights[i][j]``

    The weight matrix is indexed input-feature-major, output-neuron-minor,
    i.e. it has shape ``(fan_in, fan_out)``.

    Args:
        inputs: Input vector of length ``fan_in``
        weights: Weight matrix of shape ``(fan_in, fan_out)``
        biases: Bias vector of length ``fan_out``

    Returns:
        np.ndarray: Pre-activation vector of length ``fan_out``

    Raises:
        ShapeMismatchError: If the three shapes do not agree
    """
    inputs = np.asarray(inputs, dtype=float)
    weights = np.asarray(weights, dtype=float)
    biases = np.asarray(biases, dtype=float)

    if weights.ndim != 2:
        raise ShapeMismatchError(
            f"Weight matrix must be 2-dimensional, got shape {weights.shape}"
        )
    fan_in, fan_out = weights.shape

    if inputs.ndim != 1 or inputs.shape[0] != fan_in:
        raise ShapeMismatchError(
            f"Input length {inputs.size} does not match "
            f"weight rows {fan_in}",
            actual=int(inputs.size),
            expected=fan_in
        )
    if biases.ndim != 1 or biases.shape[0] != fan_out:
        raise ShapeMismatchError(
            f"Bias length {biases.size} does not match "
            f"weight columns {fan_out}",
            actual=int(biases.size),
            expected=fan_out
        )

    return biases + inputs @ weights


def as_numeric_array(value) -> np.ndarray:
    """
    Convert nested numbers into a float array.

    Booleans, strings, ``None`` and ragged nesting are refused rather than
    coerced.

    Raises:
        ValueError: If ``value`` is not a rectangular array of numbers
    """
    if isinstance(value, np.ndarray):
        array = value
    else:
        try:
            array = np.array(value)
        except ValueError as e:
            raise ValueError(f"not a rectangular array ({e})") from None
        # np.array([1, True]) is an integer array
        if array.dtype.kind in 'iu' and any(
            isinstance(item, bool)
            for item in np.array(value, dtype=object).ravel()
        ):
            raise ValueError("booleans are not numbers")

    if array.dtype.kind not in 'iuf':
        raise ValueError(f"expected numbers, got {array.dtype} values")
    return array.astype(float)
