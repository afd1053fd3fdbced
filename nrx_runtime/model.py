"""
model.py
~~~~~~~~

The in-memory form of a loaded model.

A :class:`Model` is built once by the codec from a parsed container and is
never modified afterwards: its weight and bias arrays are flagged read-only.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from .layers import InputLayer, Layer, activation_name, output_width


@dataclass(frozen=True)
class ModelMetadata:
    """Training provenance stored with the model. Not used for inference."""

    task: str
    loss_function: str
    epoch: int
    batch_size: int
    optimizer: str
    learning_rate: float


@dataclass(frozen=True)
class LayerSummary:
    """One row of an architecture summary."""

    name: str
    output_width: int
    activation: Optional[str]
    parameter_count: int


@dataclass(frozen=True)
class ModelSummary:
    """Architecture and parameter count of a loaded model."""

    input_size: int
    output_size: int
    layer_count: int
    layers: Tuple[LayerSummary, ...]
    total_parameters: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            'input_size': self.input_size,
            'output_size': self.output_size,
            'layer_count': self.layer_count,
            'layers': [
                {
                    'name': layer.name,
                    'output_width': layer.output_width,
                    'activation': layer.activation,
                    'parameter_count': layer.parameter_count
                }
                for layer in self.layers
            ],
            'total_parameters': self.total_parameters
        }


@dataclass(frozen=True)
class Model:
    """
    A validated model.

    ``layers``, ``weights`` and ``biases`` are aligned by position and never
    contain the input layer, which is kept in ``input_layer`` when the
    container declares one.
    """

    metadata: ModelMetadata
    input_size: int
    output_size: int
    layers: Tuple[Layer, ...]
    weights: Tuple[np.ndarray, ...]
    biases: Tuple[np.ndarray, ...]
    input_layer: Optional[InputLayer] = None
    num_layers: int = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, 'num_layers', len(self.layers))

    @property
    def parameter_count(self) -> int:
        """Total number of learnable weights and biases."""
        return int(
            sum(w.size for w in self.weights) +
            sum(b.size for b in self.biases)
        )

    def describe(self) -> ModelSummary:
        """Summarize the architecture."""
        rows: List[LayerSummary] = []
        width = self.input_size
        for layer, w, b in zip(self.layers, self.weights, self.biases):
            width = output_width(layer, width)
            rows.append(LayerSummary(
                name=layer.layer_name,
                output_width=width,
                activation=activation_name(layer),
                parameter_count=int(w.size + b.size)
            ))
        return ModelSummary(
            input_size=self.input_size,
            output_size=self.output_size,
            layer_count=self.num_layers,
            layers=tuple(rows),
            total_parameters=self.parameter_count
        )
