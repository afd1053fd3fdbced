"""
runtime.py
~~~~~~~~~~

Inference runtime for NRX models.

A :class:`Runtime` holds at most one loaded model. Loading replaces the
model only once the new container has been fully decoded and validated, so
a failed load leaves the previous model in place.

The loaded model is immutable, so concurrent ``predict`` calls are safe.
Replacing the model while a prediction is running must be serialized by the
caller.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from . import codec
from .errors import (
    EmptyInputError,
    InvalidFormatError,
    InvalidInputError,
    NotLoadedError,
    NRXError,
    ShapeMismatchError,
)
from .kernels import as_numeric_array
from .layers import DenseLayer, FlattenLayer
from .model import Model, ModelSummary

# Configure module logger
logger = logging.getLogger(__name__)

MODEL_EXTENSION = '.nrx'


@dataclass(frozen=True)
class ForwardTrace:
    """Everything a forward pass over one sample produces."""

    predictions: np.ndarray
    activations: List[np.ndarray]
    zs: List[np.ndarray]


class Runtime:
    """
    Loads NRX models and runs predictions with them.

    Example:
        >>> runtime = Runtime()
        >>> runtime.load_file('models/iris.nrx')
        >>> runtime.predict([[5.1, 3.5, 1.4, 0.2]])
    """

    def __init__(self, max_workers: Optional[int] = None):
        """
        Args:
            max_workers: Size of the thread pool used to run the samples of
                a batch in parallel. ``None`` or ``1`` runs them in order on
                the calling thread.
        """
        if max_workers is not None and max_workers < 1:
            raise ValueError(
                f"max_workers must be a positive integer, got {max_workers}"
            )
        self.max_workers = max_workers
        self._model: Optional[Model] = None

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    @property
    def is_loaded(self) -> bool:
        return self._model is not None

    @property
    def model(self) -> Model:
        """The loaded model."""
        if self._model is None:
            raise NotLoadedError("No model loaded")
        return self._model

    def load(self, data: bytes) -> Model:
        """
        Load a model from container bytes.

        Args:
            data: Raw ``.nrx`` container bytes

        Returns:
            Model: The loaded model

        Raises:
            NRXError: The specific decoding error; the previously loaded
                model (if any) is kept
        """
        try:
            model = codec.decode_model(data)
        except NRXError as e:
            logger.warning(f"Failed to load model: {type(e).__name__}: {e}")
            raise

        self._model = model
        logger.info(
            f"Model loaded: input_size={model.input_size}, "
            f"output_size={model.output_size}, layers={model.num_layers}, "
            f"parameters={model.parameter_count}"
        )
        return model

    def load_file(self, path: str) -> Model:
        """
        Load a model from a ``.nrx`` file.

        Args:
            path: Path to the model file

        Returns:
            Model: The loaded model

        Raises:
            InvalidFormatError: If the file does not have the ``.nrx``
                extension
            ModelIOError: If the file cannot be read
            NRXError: Any decoding error
        """
        if os.path.splitext(path)[1] != MODEL_EXTENSION:
            logger.warning(f"Refusing to load '{path}': not a .nrx file")
            raise InvalidFormatError(
                f"Invalid file type '{path}'. "
                f"Only {MODEL_EXTENSION} model files are supported."
            )

        try:
            model = codec.read_model(path)
        except NRXError as e:
            logger.warning(
                f"Failed to load model '{path}': {type(e).__name__}: {e}"
            )
            raise

        self._model = model
        logger.info(f"Model '{path}' successfully loaded")
        return model

    def unload(self) -> None:
        """Drop the loaded model."""
        self._model = None

    # ------------------------------------------------------------------
    # Inference
    # ------------------------------------------------------------------

    def predict(self, batch: Sequence[Sequence[float]]) -> np.ndarray:
        """
        Run forward propagation over a batch of samples.

        Args:
            batch: Sequence of input vectors, each of length ``input_size``

        Returns:
            np.ndarray: Array of shape ``(len(batch), output_size)``

        Raises:
            NotLoadedError: If no model is loaded
            EmptyInputError: If the batch is empty
            ShapeMismatchError: If any sample has the wrong length
            InvalidInputError: If a sample holds non-numeric or non-finite
                values
        """
        model = self.model
        samples = self._check_batch(batch, model.input_size)

        if self.max_workers and self.max_workers > 1 and len(samples) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                outputs = list(executor.map(
                    lambda x: _feedforward(model, x).predictions, samples
                ))
        else:
            outputs = [_feedforward(model, x).predictions for x in samples]

        logger.debug(f"Predicted {len(outputs)} sample(s)")
        return np.vstack(outputs)

    def forward(self, sample: Sequence[float]) -> ForwardTrace:
        """
        Run one sample and keep every intermediate value.

        Args:
            sample: Input vector of length ``input_size``

        Returns:
            ForwardTrace: Final predictions, the output of every layer
            (starting with the input itself) and the pre-activation values
        """
        model = self.model
        (x,) = self._check_batch([sample], model.input_size)
        return _feedforward(model, x)

    @staticmethod
    def _check_batch(batch, input_size: int) -> List[np.ndarray]:
        if batch is None or len(batch) == 0:
            raise EmptyInputError("No inputs provided")

        samples = []
        for index, sample in enumerate(batch):
            try:
                x = as_numeric_array(sample)
            except ValueError as e:
                logger.warning(f"Invalid values in sample {index}: {e}")
                raise InvalidInputError(
                    f"Sample {index} must contain only numbers: {e}"
                ) from e
            if x.ndim != 1 or x.shape[0] != input_size:
                logger.warning(
                    f"Shape mismatch in sample {index}: "
                    f"length {x.size}, expecting {input_size}"
                )
                raise ShapeMismatchError(
                    f"Shape mismatch in sample {index} | "
                    f"Input shape length: {x.size} | Expecting {input_size}",
                    actual=int(x.size),
                    expected=input_size
                )
            if not np.all(np.isfinite(x)):
                logger.warning(f"Non-finite values in sample {index}")
                raise InvalidInputError(
                    f"Sample {index} contains NaN or infinite values"
                )
            samples.append(x)
        return samples

    # ------------------------------------------------------------------
    # Description
    # ------------------------------------------------------------------

    def describe(self) -> ModelSummary:
        """
        Summarize the loaded model's architecture.

        Raises:
            NotLoadedError: If no model is loaded
        """
        return self.model.describe()

    def model_summary(self) -> str:
        """
        Render the architecture as a fixed-width table and log it.

        Raises:
            NotLoadedError: If no model is loaded
        """
        text = format_summary(self.describe())
        logger.info(f"Model summary:\n{text}")
        return text


def _feedforward(model: Model, x: np.ndarray) -> ForwardTrace:
    current = x
    activations = [x]
    zs = []

    for layer, weights, biases in zip(model.layers, model.weights,
                                      model.biases):
        if isinstance(layer, DenseLayer):
            current, z = layer.feedforward(current, weights, biases)
        elif isinstance(layer, FlattenLayer):
            current = z = np.ravel(current)
        else:
            raise TypeError(f"Cannot execute layer {layer!r}")
        zs.append(z)
        activations.append(current)

    return ForwardTrace(predictions=current, activations=activations, zs=zs)


_DISPLAY_NAMES = {
    'connected_layer': 'Connected Layer',
    'flatten_layer': 'Flatten Layer',
}

_RULE = '=' * 63
_LINE = '_' * 63


def format_summary(summary: ModelSummary) -> str:
    """Format a :class:`ModelSummary` as a text table."""
    lines = [
        _LINE,
        'Model Summary'.center(63),
        _LINE,
        f"Input size: {summary.input_size}",
        f"Number of layers: {summary.layer_count}",
        '-' * 63,
        f"{'Layer (type)':<26}{'Output Shape':<22}{'Activation':<15}",
        _RULE,
    ]
    for layer in summary.layers:
        name = _DISPLAY_NAMES.get(layer.name, layer.name)
        shape = f"(None, {layer.output_width})"
        lines.append(f"{name:<26}{shape:<22}{layer.activation or 'None':<15}")
    lines += [
        _RULE,
        f"Total layers: {summary.layer_count}",
        f"Total Learnable parameters: {summary.total_parameters}",
        _RULE,
    ]
    return '\n'.join(line.rstrip() for line in lines)
