"""
errors.py
~~~~~~~~~

Exception types raised by the NRX runtime.

Every failure while loading a container or running a prediction is raised
as a subclass of :class:`NRXError`, so callers can catch the whole family
or a single kind. Each subclass also derives from the closest builtin
exception (``ValueError``, ``OSError``, ...) for code that already catches
those.
"""

from typing import Optional


class NRXError(Exception):
    """Base class for all runtime errors."""


class ModelIOError(NRXError, OSError):
    """The model file could not be read."""


class InvalidFormatError(NRXError, ValueError):
    """The data is not an NRX container (bad magic bytes or file type)."""


class UnsupportedVersionError(NRXError, ValueError):
    """The container version byte is not supported."""

    def __init__(self, version: int, supported: int):
        self.version = version
        self.supported = supported
        super().__init__(
            f"Unsupported NRX version: {version} (expected {supported})"
        )


class CorruptPayloadError(NRXError, ValueError):
    """The compressed payload could not be decompressed."""


class MalformedMetadataError(NRXError, ValueError):
    """The decoded payload is missing a key or has a key of the wrong type."""

    def __init__(self, message: str, key: Optional[str] = None):
        self.key = key
        super().__init__(message)


class UnknownLayerTypeError(NRXError, LookupError):
    """A layer entry carries a ``layer_name`` tag the runtime cannot build."""

    def __init__(self, tag: str):
        self.tag = tag
        super().__init__(f"Unknown layer type '{tag}' found in model")


class UnknownActivationError(NRXError, LookupError):
    """An activation function name is not registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Activation function '{name}' not found")


class ShapeMismatchError(NRXError, ValueError):
    """Dimensions of inputs, weights, biases or layers do not agree."""

    def __init__(
        self,
        message: str,
        actual: Optional[int] = None,
        expected: Optional[int] = None
    ):
        self.actual = actual
        self.expected = expected
        super().__init__(message)


class EmptyInputError(NRXError, ValueError):
    """``predict`` was called without any samples."""


class InvalidInputError(NRXError, ValueError):
    """A sample holds something other than finite numbers."""


class NotLoadedError(NRXError, RuntimeError):
    """An operation needs a loaded model but none is present."""
