"""
codec.py
~~~~~~~~

Reader and writer for the NRX2 model container.

Layout of a container::

    offset 0   4 bytes   ASCII magic "NRX2"
    offset 4   1 byte    format version (2)
    offset 5   rest      zlib-compressed UTF-8 JSON payload

Decoding is a sequence of checks that stops at the first failure: magic,
version, decompression, payload keys, layer reconstruction and finally the
shape cross-validation of layers against weights and biases. A model is
only returned once every check has passed.
"""

import json
import logging
import math
import os
import zlib
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from .errors import (
    CorruptPayloadError,
    InvalidFormatError,
    MalformedMetadataError,
    ModelIOError,
    ShapeMismatchError,
    UnknownLayerTypeError,
    UnsupportedVersionError,
)
from .kernels import as_numeric_array
from .layers import (
    CONNECTED_LAYER,
    FLATTEN_LAYER,
    INPUT_LAYER,
    DenseLayer,
    FlattenLayer,
    InputLayer,
    Layer,
    connected_layer,
)
from .model import Model, ModelMetadata

# Configure module logger
logger = logging.getLogger(__name__)

MAGIC = b'NRX2'
VERSION = 2
HEADER_SIZE = len(MAGIC) + 1

REQUIRED_KEYS = (
    'task', 'loss_function', 'epoch', 'batch_size', 'optimizer',
    'learning_rate', 'input_size', 'output_size', 'num_layers',
    'weights', 'biases', 'layers'
)


class NetworkEncoder(json.JSONEncoder):
    """Custom JSON encoder that handles numpy arrays and scalars."""

    def default(self, obj: Any) -> Any:
        """
        Convert numpy values to plain Python for JSON serialization.

        Args:
            obj: Object to serialize

        Returns:
            JSON-serializable representation
        """
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        if isinstance(obj, np.generic):
            return obj.item()
        return super().default(obj)


# ============================================================================
# DECODING
# ============================================================================

def read_model(path: str) -> Model:
    """
    Read and decode a container file.

    Args:
        path: Path to the ``.nrx`` file

    Returns:
        Model: The decoded model

    Raises:
        ModelIOError: If the file cannot be read
        NRXError: Any decoding error from :func:`decode_model`
    """
    try:
        with open(path, 'rb') as f:
            data = f.read()
    except OSError as e:
        raise ModelIOError(f"Cannot read model file '{path}': {e}") from e

    logger.debug(f"Read {len(data)} bytes from '{path}'")
    return decode_model(data)


def decode_model(data: bytes) -> Model:
    """
    Decode a container held in memory.

    Args:
        data: Raw container bytes

    Returns:
        Model: The decoded, validated model

    Raises:
        InvalidFormatError: Bad magic bytes
        UnsupportedVersionError: Version byte other than 2
        CorruptPayloadError: Payload does not decompress
        MalformedMetadataError: Payload is not a valid model description
        UnknownLayerTypeError: Unknown ``layer_name`` tag
        UnknownActivationError: Unknown activation name
        ShapeMismatchError: Layers, weights and biases do not line up
    """
    payload = decode_payload(data)
    metadata = _parse_metadata(payload)
    weights = _parse_arrays(payload['weights'], 'weights')
    biases = _parse_arrays(payload['biases'], 'biases')
    input_layer, layers = _build_layers(payload['layers'])

    _validate_shapes(
        payload['input_size'],
        payload['output_size'],
        payload['num_layers'],
        input_layer,
        layers,
        weights,
        biases
    )

    model = Model(
        metadata=metadata,
        input_size=payload['input_size'],
        output_size=payload['output_size'],
        layers=tuple(layers),
        weights=tuple(weights),
        biases=tuple(biases),
        input_layer=input_layer
    )
    logger.debug(
        f"Decoded model: input_size={model.input_size}, "
        f"layers={model.num_layers}, parameters={model.parameter_count}"
    )
    return model


def decode_payload(data: bytes) -> Dict[str, Any]:
    """
    Check the header, decompress and parse the JSON payload.

    Only the presence and types of the top-level keys are checked here.

    Args:
        data: Raw container bytes

    Returns:
        dict: The decoded payload
    """
    data = bytes(data)
    if len(data) < HEADER_SIZE or data[:len(MAGIC)] != MAGIC:
        raise InvalidFormatError("Invalid file format. Not a valid NRX model.")

    version = data[len(MAGIC)]
    if version != VERSION:
        raise UnsupportedVersionError(version, VERSION)

    decompressor = zlib.decompressobj()
    try:
        raw = decompressor.decompress(data[HEADER_SIZE:])
    except zlib.error as e:
        raise CorruptPayloadError(f"Cannot decompress model payload: {e}") from e
    if not decompressor.eof:
        raise CorruptPayloadError("Model payload is truncated")
    if decompressor.unused_data:
        raise CorruptPayloadError(
            f"{len(decompressor.unused_data)} unexpected byte(s) "
            f"after the model payload"
        )

    try:
        payload = json.loads(raw.decode('utf-8'))
    except UnicodeDecodeError as e:
        raise MalformedMetadataError(f"Payload is not UTF-8 text: {e}") from e
    except json.JSONDecodeError as e:
        raise MalformedMetadataError(f"Payload is not valid JSON: {e}") from e

    if not isinstance(payload, dict):
        raise MalformedMetadataError(
            f"Payload must be a JSON object, got {type(payload).__name__}"
        )

    _check_keys(payload)
    return payload


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, (int, float))
        and not isinstance(value, bool)
        and math.isfinite(value)
    )


_KEY_TYPES = {
    'task': (lambda v: isinstance(v, str), 'a string'),
    'loss_function': (lambda v: isinstance(v, str), 'a string'),
    'epoch': (_is_int, 'an integer'),
    'batch_size': (_is_int, 'an integer'),
    'optimizer': (lambda v: isinstance(v, str), 'a string'),
    'learning_rate': (_is_number, 'a number'),
    'input_size': (lambda v: _is_int(v) and v > 0, 'a positive integer'),
    'output_size': (lambda v: _is_int(v) and v > 0, 'a positive integer'),
    'num_layers': (lambda v: _is_int(v) and v >= 0, 'a non-negative integer'),
    'weights': (lambda v: isinstance(v, list), 'an array'),
    'biases': (lambda v: isinstance(v, list), 'an array'),
    'layers': (lambda v: isinstance(v, list), 'an array'),
}


def _check_keys(payload: Dict[str, Any]) -> None:
    for key in REQUIRED_KEYS:
        if key not in payload:
            raise MalformedMetadataError(f"Missing required key '{key}'", key)
        check, expected = _KEY_TYPES[key]
        if not check(payload[key]):
            raise MalformedMetadataError(
                f"Key '{key}' must be {expected}, "
                f"got {type(payload[key]).__name__} {payload[key]!r:.40}",
                key
            )


def _parse_metadata(payload: Dict[str, Any]) -> ModelMetadata:
    return ModelMetadata(
        task=payload['task'],
        loss_function=payload['loss_function'],
        epoch=payload['epoch'],
        batch_size=payload['batch_size'],
        optimizer=payload['optimizer'],
        learning_rate=float(payload['learning_rate'])
    )


def _build_layers(
    entries: List[Any]
) -> Tuple[Optional[InputLayer], List[Layer]]:
    """
    Rebuild layer descriptors from their serialized entries.

    The input layer is split off from the parameter-bearing layers so the
    latter line up with ``weights`` and ``biases`` by position.
    """
    input_layer: Optional[InputLayer] = None
    layers: List[Layer] = []

    for index, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise MalformedMetadataError(
                f"Layer {index} must be an object, got {entry!r}", 'layers'
            )
        tag = entry.get('layer_name')
        if not isinstance(tag, str):
            raise MalformedMetadataError(
                f"Layer {index} has no 'layer_name' string", 'layers'
            )

        if tag == CONNECTED_LAYER:
            activation = entry.get('activation_function_name')
            if not isinstance(activation, str) or not activation:
                raise MalformedMetadataError(
                    f"Layer {index} needs an 'activation_function_name'",
                    'layers'
                )
            layers.append(
                connected_layer(activation, _layer_size(entry, index))
            )
        elif tag == INPUT_LAYER:
            if index != 0:
                raise MalformedMetadataError(
                    f"Input layer found at position {index}; "
                    f"it may only be the first layer",
                    'layers'
                )
            feature_count = _layer_size(entry, index)
            input_layer = InputLayer(
                feature_count=feature_count,
                input_shape=_input_shape(entry, index, feature_count)
            )
        elif tag == FLATTEN_LAYER:
            layers.append(FlattenLayer())
        else:
            raise UnknownLayerTypeError(tag)

    return input_layer, layers


def _layer_size(entry: Dict[str, Any], index: int) -> int:
    size = entry.get('layer_size')
    if not _is_int(size) or size <= 0:
        raise MalformedMetadataError(
            f"Layer {index} needs a positive integer 'layer_size', "
            f"got {size!r}",
            'layers'
        )
    return size


def _input_shape(
    entry: Dict[str, Any],
    index: int,
    layer_size: int
) -> Optional[Tuple[int, ...]]:
    shape = entry.get('input_shape')
    if shape is None:
        return None
    if not isinstance(shape, list) or not all(
        _is_int(dim) and dim > 0 for dim in shape
    ):
        raise MalformedMetadataError(
            f"Layer {index} has an invalid 'input_shape': {shape!r}",
            'layers'
        )
    if math.prod(shape) != layer_size:
        raise MalformedMetadataError(
            f"Layer {index} has 'input_shape' {shape!r} holding "
            f"{math.prod(shape)} values but 'layer_size' {layer_size}",
            'layers'
        )
    return tuple(shape)


def _parse_arrays(values: List[Any], key: str) -> List[np.ndarray]:
    """Convert nested lists into read-only float arrays."""
    arrays = []
    for index, value in enumerate(values):
        if not isinstance(value, list):
            raise MalformedMetadataError(
                f"'{key}[{index}]' must be an array", key
            )
        try:
            array = as_numeric_array(value)
        except ValueError as e:
            raise MalformedMetadataError(
                f"'{key}[{index}]' is not a rectangular array of "
                f"numbers: {e}",
                key
            ) from e
        if array.size and not np.all(np.isfinite(array)):
            raise MalformedMetadataError(
                f"'{key}[{index}]' contains non-finite values", key
            )
        array.setflags(write=False)
        arrays.append(array)
    return arrays


def _validate_shapes(
    input_size: int,
    output_size: int,
    num_layers: int,
    input_layer: Optional[InputLayer],
    layers: List[Layer],
    weights: List[np.ndarray],
    biases: List[np.ndarray]
) -> None:
    """Check that layers, weights and biases describe one consistent graph."""
    if input_layer is not None and input_layer.feature_count != input_size:
        raise ShapeMismatchError(
            f"Input layer declares {input_layer.feature_count} features "
            f"but input_size is {input_size}",
            actual=input_layer.feature_count,
            expected=input_size
        )

    if not (len(layers) == len(weights) == len(biases)):
        raise ShapeMismatchError(
            f"Found {len(layers)} parameter-bearing layers, "
            f"{len(weights)} weight matrices and {len(biases)} bias vectors"
        )
    if num_layers != len(layers):
        raise ShapeMismatchError(
            f"num_layers is {num_layers} but the model has "
            f"{len(layers)} parameter-bearing layers",
            actual=len(layers),
            expected=num_layers
        )
    if not layers:
        raise ShapeMismatchError("Model has no parameter-bearing layers")

    width = input_size
    for index, (layer, w, b) in enumerate(zip(layers, weights, biases)):
        if isinstance(layer, DenseLayer):
            expected = (width, layer.neuron_count)
            if w.ndim != 2 or w.shape != expected:
                raise ShapeMismatchError(
                    f"Layer {index}: weights have shape {w.shape}, "
                    f"expected {expected}"
                )
            if b.ndim != 1 or b.shape[0] != layer.neuron_count:
                raise ShapeMismatchError(
                    f"Layer {index}: biases have shape {b.shape}, "
                    f"expected ({layer.neuron_count},)",
                    actual=int(b.size),
                    expected=layer.neuron_count
                )
            width = layer.neuron_count
        elif isinstance(layer, FlattenLayer):
            if w.size or b.size:
                raise ShapeMismatchError(
                    f"Layer {index}: flatten layer must not carry "
                    f"parameters, got weights {w.shape} and biases {b.shape}"
                )
        else:
            raise TypeError(f"Unexpected layer in model: {layer!r}")

    if width != output_size:
        raise ShapeMismatchError(
            f"Last layer produces {width} outputs but output_size "
            f"is {output_size}",
            actual=width,
            expected=output_size
        )


# ============================================================================
# ENCODING
# ============================================================================

def model_to_payload(model: Model) -> Dict[str, Any]:
    """
    Build the JSON payload describing a model.

    Args:
        model: A decoded model

    Returns:
        dict: Payload with every required key
    """
    layers = [layer.to_dict() for layer in model.layers]
    if model.input_layer is not None:
        layers.insert(0, model.input_layer.to_dict())

    meta = model.metadata
    return {
        'task': meta.task,
        'loss_function': meta.loss_function,
        'epoch': meta.epoch,
        'batch_size': meta.batch_size,
        'optimizer': meta.optimizer,
        'learning_rate': meta.learning_rate,
        'input_size': model.input_size,
        'output_size': model.output_size,
        'num_layers': model.num_layers,
        'weights': list(model.weights),
        'biases': list(model.biases),
        'layers': layers
    }


def encode_payload(payload: Dict[str, Any], level: int = 9) -> bytes:
    """
    Wrap a payload dictionary into container bytes.

    The payload is not validated; use :func:`decode_model` on the result to
    check it.

    Args:
        payload: JSON-serializable model description (numpy arrays allowed)
        level: zlib compression level

    Returns:
        bytes: Container bytes
    """
    text = json.dumps(payload, cls=NetworkEncoder)
    return MAGIC + bytes([VERSION]) + zlib.compress(text.encode('utf-8'), level)


def encode_model(model: Model) -> bytes:
    """Serialize a model back into container bytes."""
    return encode_payload(model_to_payload(model))


def write_model(model: Model, path: str) -> None:
    """
    Write a model to a container file, creating parent directories.

    Args:
        model: Model to write
        path: Destination file path

    Raises:
        ModelIOError: If the file cannot be written
    """
    data = encode_model(model)
    try:
        directory = os.path.dirname(path)
        if directory and not os.path.exists(directory):
            os.makedirs(directory)
        with open(path, 'wb') as f:
            f.write(data)
    except OSError as e:
        raise ModelIOError(f"Cannot write model file '{path}': {e}") from e

    logger.info(
        f"Saved model to '{path}' ({len(data)} bytes, "
        f"{model.parameter_count} parameters)"
    )
