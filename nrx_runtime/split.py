"""
split.py
~~~~~~~~

Random train/test split.
"""

from typing import NamedTuple, Optional

import numpy as np


class DatasetSplit(NamedTuple):
    x_train: np.ndarray
    y_train: np.ndarray
    x_test: np.ndarray
    y_test: np.ndarray


def split_dataset(x, y, split_ratio: float, seed: Optional[int] = None) -> DatasetSplit:
    """
    Shuffle samples and split them into a training and a test set.

    Args:
        x: Features, one row per sample
        y: Targets, one row per sample
        split_ratio: Fraction of samples put in the test set (0 to 1)
        seed: Seed for the shuffle, for reproducible splits

    Returns:
        DatasetSplit: ``(x_train, y_train, x_test, y_test)``; the test set
        holds ``floor(n * split_ratio)`` samples

    Raises:
        ValueError: If ``x`` and ``y`` differ in length or the ratio is out
            of range
    """
    x = np.asarray(x)
    y = np.asarray(y)
    if len(x) != len(y):
        raise ValueError(
            f"X and Y must have the same number of samples, "
            f"got {len(x)} and {len(y)}"
        )
    if not 0.0 <= split_ratio <= 1.0:
        raise ValueError(f"split_ratio must be between 0 and 1, got {split_ratio}")

    rng = np.random.default_rng(seed)
    indices = rng.permutation(len(x))
    test_size = int(np.floor(len(x) * split_ratio))
    test_idx, train_idx = indices[:test_size], indices[test_size:]

    return DatasetSplit(x[train_idx], y[train_idx], x[test_idx], y[test_idx])
