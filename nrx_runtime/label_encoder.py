"""
label_encoder.py
~~~~~~~~~~~~~~~~

Encoders that turn a column of class labels into numeric targets.

All encoders take a column as produced by
:meth:`~nrx_runtime.csv_data.CsvDataHandler.extract_column`: a list of
single-element rows. Classes are numbered in the order they first appear.
"""

from typing import Any, Dict, List, Sequence

import numpy as np


def _labels(data: Sequence[Sequence[Any]]) -> List[Any]:
    if data is None or len(data) == 0:
        raise ValueError("No data is provided")
    labels = []
    for i, row in enumerate(data):
        if isinstance(row, str) or len(row) != 1:
            raise ValueError(
                f"Row at index {i} must contain exactly one element"
            )
        labels.append(row[0])
    return labels


def label_map(labels: Sequence[Any]) -> Dict[Any, int]:
    """Map each distinct label to its first-seen index."""
    mapping: Dict[Any, int] = {}
    for label in labels:
        if label not in mapping:
            mapping[label] = len(mapping)
    return mapping


def one_hot_encode(data: Sequence[Sequence[Any]]) -> np.ndarray:
    """
    One-hot encode a label column.

    Returns:
        np.ndarray: Shape ``(n_samples, n_classes)``
    """
    labels = _labels(data)
    mapping = label_map(labels)
    encoded = np.zeros((len(labels), len(mapping)))
    encoded[np.arange(len(labels)), [mapping[label] for label in labels]] = 1.0
    return encoded


def integer_encode(data: Sequence[Sequence[Any]]) -> np.ndarray:
    """
    Replace each label by its class index.

    Returns:
        np.ndarray: Integer array of shape ``(n_samples, 1)``
    """
    labels = _labels(data)
    mapping = label_map(labels)
    return np.array([[mapping[label]] for label in labels], dtype=int)


def binary_encode(data: Sequence[Sequence[Any]]) -> np.ndarray:
    """
    Encode a two-class column as 0/1.

    String labels are compared case-insensitively. The first label seen
    becomes 0.

    Returns:
        np.ndarray: Integer array of shape ``(n_samples, 1)``

    Raises:
        ValueError: If the column does not hold exactly two classes
    """
    labels = [
        label.lower() if isinstance(label, str) else label
        for label in _labels(data)
    ]
    mapping = label_map(labels)
    if len(mapping) != 2:
        raise ValueError(
            f"There must be exactly two classes for binary labeling, "
            f"found {len(mapping)}"
        )
    return np.array([[mapping[label]] for label in labels], dtype=int)
