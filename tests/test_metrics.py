"""
test_metrics.py
~~~~~~~~~~~~~~~

Unit tests for regression and classification metrics.
"""

import math

import numpy as np
import pytest

from nrx_runtime.metrics import (
    classification_report,
    mae,
    mse,
    r2,
    regression_report,
    rmse,
)


@pytest.mark.unit
class TestRegressionMetrics:
    """Test the regression metrics on known values."""

    PREDICTIONS = [[1.0], [2.0], [3.0], [4.0]]
    ACTUALS = [[1.0], [3.0], [2.0], [6.0]]

    def test_mse(self):
        """Test mean squared error."""
        # errors 0, 1, 1, 2 -> squares 0, 1, 1, 4
        assert mse(self.PREDICTIONS, self.ACTUALS) == pytest.approx(1.5)

    def test_mae(self):
        """Test mean absolute error."""
        assert mae(self.PREDICTIONS, self.ACTUALS) == pytest.approx(1.0)

    def test_rmse(self):
        """Test that RMSE is the square root of MSE."""
        assert rmse(self.PREDICTIONS, self.ACTUALS) == pytest.approx(
            math.sqrt(1.5)
        )

    def test_r2(self):
        """Test the coefficient of determination."""
        # mean 3, ss_tot = 4 + 0 + 1 + 9 = 14, ss_res = 6
        assert r2(self.PREDICTIONS, self.ACTUALS) == pytest.approx(1 - 6 / 14)

    def test_perfect_fit(self):
        """Test that identical values give zero error and R2 of 1."""
        report = regression_report(self.ACTUALS, self.ACTUALS)
        assert report.mse == 0.0
        assert report.mae == 0.0
        assert report.r2 == 1.0

    def test_r2_constant_actuals(self):
        """Test R2 when the actual values do not vary."""
        assert r2([[2.0], [2.0]], [[2.0], [2.0]]) == 1.0
        assert math.isnan(r2([[1.0], [3.0]], [[2.0], [2.0]]))

    def test_report_format(self):
        """Test the text rendering of the report."""
        text = regression_report(self.PREDICTIONS, self.ACTUALS).format()
        assert 'MSE:  1.500000' in text
        assert 'MAE:  1.000000' in text

    def test_shape_mismatch(self):
        """Test that predictions and actuals must have the same shape."""
        with pytest.raises(ValueError):
            mse([[1.0, 2.0]], [[1.0]])

    def test_empty(self):
        """Test that empty input is rejected."""
        with pytest.raises(ValueError):
            regression_report([], [])

    def test_non_finite(self):
        """Test that NaN values are rejected by the report."""
        with pytest.raises(ValueError):
            regression_report([[float('nan')]], [[1.0]])


@pytest.mark.unit
class TestClassificationReport:
    """Test classifier evaluation for each target encoding."""

    def test_binary(self):
        """Test thresholding at 0.5 and the per-class counts."""
        predictions = [[0.9], [0.2], [0.6], [0.4]]
        actuals = [[1], [0], [0], [1]]

        report = classification_report(predictions, actuals, 'binary')

        assert report.correct == 2
        assert report.misclassified == 2
        assert report.accuracy == pytest.approx(0.5)
        assert [c.support for c in report.classes] == [2, 2]
        assert report.classes[1].precision == pytest.approx(0.5)
        assert report.classes[1].recall == pytest.approx(0.5)

    def test_binary_threshold_is_inclusive(self):
        """Test that an output of exactly 0.5 counts as class 1."""
        report = classification_report([[0.5]], [[1]], 'binary')
        assert report.accuracy == 1.0
        assert len(report.classes) == 2

    def test_categorical(self):
        """Test arg-max predictions against one-hot targets."""
        predictions = np.array([
            [0.8, 0.1, 0.1],
            [0.1, 0.7, 0.2],
            [0.3, 0.3, 0.4],
            [0.6, 0.3, 0.1],
        ])
        actuals = np.array([
            [1, 0, 0],
            [0, 1, 0],
            [0, 0, 1],
            [0, 1, 0],
        ])

        report = classification_report(
            predictions, actuals, 'Categorical',
            labels=['setosa', 'versicolor', 'virginica']
        )

        assert report.correct == 3
        assert report.accuracy == pytest.approx(0.75)
        setosa, versicolor, virginica = report.classes
        assert setosa.label == 'setosa'
        assert setosa.precision == pytest.approx(0.5)
        assert setosa.recall == pytest.approx(1.0)
        assert versicolor.recall == pytest.approx(0.5)
        assert virginica.f1 == pytest.approx(1.0)
        assert report.misclassified_examples == [
            "Predicted: 0 | Actual: 1 | "
            "Predicted Class: setosa | Actual Class: versicolor"
        ]

    def test_sparse_categorical(self):
        """Test arg-max predictions against integer targets."""
        predictions = [[0.1, 0.9], [0.8, 0.2], [0.4, 0.6]]
        actuals = [[1], [0], [0]]

        report = classification_report(
            predictions, actuals, 'sparse_categorical'
        )

        assert report.correct == 2
        assert report.total_support == 3

    def test_averages(self):
        """Test macro and weighted averages."""
        predictions = [[0.9, 0.1], [0.9, 0.1], [0.9, 0.1], [0.1, 0.9]]
        actuals = [[0], [0], [1], [1]]

        report = classification_report(
            predictions, actuals, 'sparse_categorical'
        )

        # class 0: p=2/3 r=1, class 1: p=1 r=1/2
        assert report.macro_precision == pytest.approx((2 / 3 + 1) / 2)
        assert report.macro_recall == pytest.approx(0.75)
        assert report.weighted_recall == pytest.approx(0.75)

    def test_class_never_predicted(self):
        """Test that a class with no predictions has zero precision."""
        report = classification_report(
            [[0.9, 0.1], [0.8, 0.2]], [[0], [1]], 'sparse_categorical'
        )
        assert report.classes[1].precision == 0.0
        assert report.classes[1].f1 == 0.0

    def test_report_format(self):
        """Test the text rendering of the report."""
        report = classification_report(
            [[0.9], [0.1]], [[1], [0]], 'binary', labels=['no', 'yes']
        )
        text = report.format()
        assert 'Accuracy: 100.00%' in text
        assert 'Classification Report' in text
        assert 'macro avg' in text
        assert 'Misclassified Examples' not in text

    def test_unknown_type(self):
        """Test that an unknown classification type is rejected."""
        with pytest.raises(ValueError):
            classification_report([[1.0]], [[1]], 'multilabel')

    def test_length_mismatch(self):
        """Test that predictions and actuals must have the same length."""
        with pytest.raises(ValueError):
            classification_report([[1.0], [0.0]], [[1]], 'binary')

    def test_too_few_labels(self):
        """Test that fewer labels than classes is rejected."""
        with pytest.raises(ValueError):
            classification_report(
                [[0.1, 0.2, 0.7]], [[2]], 'sparse_categorical',
                labels=['a', 'b']
            )
