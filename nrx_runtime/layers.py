"""
layers.py
~~~~~~~~~

Layer descriptors reconstructed from a model container.

The set of layer kinds is closed: :class:`InputLayer`, :class:`DenseLayer`
and :class:`FlattenLayer`. Only dense layers compute anything; the other two
are structural markers. Each kind records the ``layer_name`` tag it is
serialized under.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple, Union

import numpy as np

from .activations import Activation, get_activation
from .errors import ShapeMismatchError
from .kernels import compute_forward

INPUT_LAYER = 'input_layer'
CONNECTED_LAYER = 'connected_layer'
FLATTEN_LAYER = 'flatten_layer'


@dataclass(frozen=True)
class InputLayer:
    """Declares the length of the input vector. Carries no parameters."""

    feature_count: int
    input_shape: Optional[Tuple[int, ...]] = None

    layer_name = INPUT_LAYER

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            'layer_name': self.layer_name,
            'layer_size': self.feature_count
        }
        if self.input_shape is not None:
            data['input_shape'] = list(self.input_shape)
        return data


@dataclass(frozen=True)
class DenseLayer:
    """Fully connected layer with a resolved activation."""

    activation: Activation
    neuron_count: int

    layer_name = CONNECTED_LAYER

    @property
    def activation_name(self) -> str:
        return self.activation.name

    def feedforward(
        self,
        inputs: np.ndarray,
        weights: np.ndarray,
        biases: np.ndarray
    ) -> Tuple[np.ndarray, np.ndarray]:
        """
        Run the layer on one input vector.

        Args:
            inputs: Output of the previous layer
            weights: Weight matrix of shape ``(fan_in, neuron_count)``
            biases: Bias vector of length ``neuron_count``

        Returns:
            tuple: ``(outputs, z)`` where ``z`` is the pre-activation vector
        """
        z = compute_forward(inputs, weights, biases)
        if z.shape[0] != self.neuron_count:
            raise ShapeMismatchError(
                f"Layer has {self.neuron_count} neurons but parameters "
                f"produce {z.shape[0]} outputs",
                actual=int(z.shape[0]),
                expected=self.neuron_count
            )
        # Element-wise activations are vectorized over z; softmax needs
        # the whole vector by definition.
        outputs = self.activation.forward(z)
        return outputs, z

    def to_dict(self) -> Dict[str, Any]:
        return {
            'layer_name': self.layer_name,
            'activation_function_name': self.activation.name,
            'layer_size': self.neuron_count
        }


@dataclass(frozen=True)
class FlattenLayer:
    """Identity reshape marker. Carries no parameters."""

    layer_name = FLATTEN_LAYER

    def to_dict(self) -> Dict[str, Any]:
        return {'layer_name': self.layer_name}


Layer = Union[InputLayer, DenseLayer, FlattenLayer]


def connected_layer(activation_name: str, layer_size: int) -> DenseLayer:
    """Build a dense layer, resolving the activation name once."""
    return DenseLayer(get_activation(activation_name), layer_size)


def output_width(layer: Layer, width_in: int) -> int:
    """
    Length of the vector a layer produces from an input of ``width_in``.

    Args:
        layer: Any layer descriptor
        width_in: Length of the incoming vector

    Returns:
        int: Output length
    """
    if isinstance(layer, DenseLayer):
        return layer.neuron_count
    if isinstance(layer, FlattenLayer):
        return width_in
    if isinstance(layer, InputLayer):
        return layer.feature_count
    raise TypeError(f"Not a layer descriptor: {layer!r}")


def activation_name(layer: Layer) -> Optional[str]:
    """Activation name of a dense layer, ``None`` for structural layers."""
    if isinstance(layer, DenseLayer):
        return layer.activation.name
    return None
