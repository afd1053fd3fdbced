"""
normalizer.py
~~~~~~~~~~~~~

Min-max feature scaling.
"""

from typing import Dict, Optional

import numpy as np


class MinMaxScaler:
    """
    Scale each feature column into ``[0, 1]``.

    Columns whose minimum equals their maximum are mapped to 0.
    One-dimensional data is treated as a single feature.
    """

    def __init__(self):
        self.min_vals: Optional[np.ndarray] = None
        self.max_vals: Optional[np.ndarray] = None

    def fit(self, data) -> 'MinMaxScaler':
        """
        Record the per-column minimum and maximum.

        Args:
            data: 2-D samples x features, or a 1-D sequence of values

        Returns:
            MinMaxScaler: self

        Raises:
            ValueError: If the data is empty
        """
        array = np.asarray(data, dtype=float)
        if array.size == 0:
            raise ValueError("Input data for scaler cannot be empty.")

        if array.ndim == 1:
            self.min_vals = np.array([array.min()])
            self.max_vals = np.array([array.max()])
        else:
            self.min_vals = array.min(axis=0)
            self.max_vals = array.max(axis=0)
        return self

    def _check_fitted(self) -> None:
        if self.min_vals is None or self.max_vals is None:
            raise ValueError("Scaler has not been fitted yet. Call fit() first.")

    def transform(self, data) -> np.ndarray:
        """Scale data with the fitted minimum and maximum."""
        self._check_fitted()
        array = np.asarray(data, dtype=float)
        span = self.max_vals - self.min_vals
        safe_span = np.where(span == 0, 1.0, span)
        scaled = np.where(span == 0, 0.0, (array - self.min_vals) / safe_span)
        return scaled.reshape(array.shape)

    def fit_transform(self, data) -> np.ndarray:
        return self.fit(data).transform(data)

    def inverse_transform(self, data) -> np.ndarray:
        """Map scaled values back to the original range."""
        self._check_fitted()
        array = np.asarray(data, dtype=float)
        restored = array * (self.max_vals - self.min_vals) + self.min_vals
        return restored.reshape(array.shape)

    def get_min_max(self) -> Dict[str, np.ndarray]:
        self._check_fitted()
        return {'min': self.min_vals, 'max': self.max_vals}
