"""
nrx_runtime package
~~~~~~~~~~~~~~~~~~~

Inference runtime for NRX neural network model containers.
Contains the container codec, layer reconstruction, the forward-propagation
runtime, and the data utilities used to prepare inputs and score outputs.
"""

from .codec import decode_model, encode_model, encode_payload, read_model, write_model
from .csv_data import CsvDataHandler
from .errors import (
    CorruptPayloadError,
    EmptyInputError,
    InvalidFormatError,
    InvalidInputError,
    MalformedMetadataError,
    ModelIOError,
    NotLoadedError,
    NRXError,
    ShapeMismatchError,
    UnknownActivationError,
    UnknownLayerTypeError,
    UnsupportedVersionError,
)
from .label_encoder import binary_encode, integer_encode, one_hot_encode
from .metrics import classification_report, regression_report
from .model import Model, ModelMetadata, ModelSummary
from .normalizer import MinMaxScaler
from .runtime import Runtime
from .split import split_dataset

__version__ = "1.0.0"

__all__ = [
    'Runtime',
    'Model',
    'ModelMetadata',
    'ModelSummary',
    'decode_model',
    'encode_model',
    'encode_payload',
    'read_model',
    'write_model',
    'CsvDataHandler',
    'MinMaxScaler',
    'one_hot_encode',
    'integer_encode',
    'binary_encode',
    'split_dataset',
    'regression_report',
    'classification_report',
    'NRXError',
    'ModelIOError',
    'InvalidFormatError',
    'UnsupportedVersionError',
    'CorruptPayloadError',
    'MalformedMetadataError',
    'UnknownLayerTypeError',
    'UnknownActivationError',
    'ShapeMismatchError',
    'EmptyInputError',
    'InvalidInputError',
    'NotLoadedError',
]
