"""
activations.py
~~~~~~~~~~~~~~

Registry of activation functions.

Each entry pairs a forward function with its derivative. Derivatives are
kept for a training path and are not used during inference. Softmax acts
on the whole pre-activation vector of a layer; every other activation is
applied element-wise.
"""

from typing import Callable, Dict, NamedTuple

import numpy as np

from .errors import UnknownActivationError

ArrayFunction = Callable[[np.ndarray], np.ndarray]


class Activation(NamedTuple):
    """A resolved activation: name, forward function and derivative."""

    name: str
    forward: ArrayFunction
    derivative: ArrayFunction
    vectorwise: bool = False

    def __call__(self, z: np.ndarray) -> np.ndarray:
        return self.forward(z)


def relu(z: np.ndarray) -> np.ndarray:
    return np.maximum(z, 0.0)


def sigmoid(z: np.ndarray) -> np.ndarray:
    # exp(-log(1 + e^-z)) never overflows for large |z|
    return np.exp(-np.logaddexp(0.0, -z))


def tanh(z: np.ndarray) -> np.ndarray:
    return np.tanh(z)


def linear(z: np.ndarray) -> np.ndarray:
    return np.asarray(z, dtype=float)


def softmax(logits: np.ndarray) -> np.ndarray:
    """
    Numerically stable softmax over a whole vector.

    The maximum logit is subtracted before exponentiating, so large logits
    cannot overflow and the result is unchanged by adding a constant to
    every logit.

    Args:
        logits: 1-D array of pre-activation values

    Returns:
        Array of the same shape whose entries sum to 1
    """
    logits = np.asarray(logits, dtype=float)
    if logits.size == 0:
        return logits.copy()
    exps = np.exp(logits - np.max(logits))
    return exps / np.sum(exps)


def relu_prime(z: np.ndarray) -> np.ndarray:
    return (np.asarray(z) > 0).astype(float)


def sigmoid_prime(z: np.ndarray) -> np.ndarray:
    s = sigmoid(z)
    return s * (1.0 - s)


def tanh_prime(z: np.ndarray) -> np.ndarray:
    return 1.0 - np.tanh(z) ** 2


def linear_prime(z: np.ndarray) -> np.ndarray:
    return np.ones_like(z, dtype=float)


def softmax_prime(z: np.ndarray) -> np.ndarray:
    # Paired with categorical cross-entropy the gradient collapses to
    # (output - target), so the layer derivative is taken as 1.
    return np.ones_like(z, dtype=float)


ACTIVATIONS: Dict[str, Activation] = {
    'relu': Activation('relu', relu, relu_prime),
    'sigmoid': Activation('sigmoid', sigmoid, sigmoid_prime),
    'tanh': Activation('tanh', tanh, tanh_prime),
    'linear': Activation('linear', linear, linear_prime),
    'softmax': Activation('softmax', softmax, softmax_prime, vectorwise=True),
}


def get_activation(name: str) -> Activation:
    """
    Resolve an activation by name (case-insensitive).

    Args:
        name: Activation name such as ``"ReLU"`` or ``"softmax"``

    Returns:
        Activation: The registered entry

    Raises:
        UnknownActivationError: If the name is not registered
    """
    if not isinstance(name, str):
        raise UnknownActivationError(str(name))
    try:
        return ACTIVATIONS[name.strip().lower()]
    except KeyError:
        raise UnknownActivationError(name) from None


def available_activations() -> list:
    """Names of all registered activations."""
    return sorted(ACTIVATIONS)
