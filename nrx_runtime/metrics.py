"""
metrics.py
~~~~~~~~~~

Evaluation metrics for predictions produced by the runtime.

Regression: MSE, MAE, RMSE and R². Classification: accuracy plus
per-class precision, recall, F1 and support, with macro and weighted
averages, for binary, categorical (one-hot) and sparse categorical
(integer) targets.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

import numpy as np

# Configure module logger
logger = logging.getLogger(__name__)

CLASSIFICATION_TYPES = ('binary', 'categorical', 'sparse_categorical')


def _pair(predictions, actuals) -> Tuple[np.ndarray, np.ndarray]:
    p = np.asarray(predictions, dtype=float)
    a = np.asarray(actuals, dtype=float)
    if p.shape != a.shape:
        raise ValueError(
            f"Shape mismatch: predictions {p.shape} vs actuals {a.shape}"
        )
    if p.size == 0:
        raise ValueError("No predictions or actuals provided.")
    return p, a


# ============================================================================
# REGRESSION
# ============================================================================

def mse(predictions, actuals) -> float:
    """Mean squared error over all outputs."""
    p, a = _pair(predictions, actuals)
    return float(np.mean((p - a) ** 2))


def mae(predictions, actuals) -> float:
    """Mean absolute error over all outputs."""
    p, a = _pair(predictions, actuals)
    return float(np.mean(np.abs(p - a)))


def rmse(predictions, actuals) -> float:
    """Root mean squared error."""
    return float(np.sqrt(mse(predictions, actuals)))


def r2(predictions, actuals) -> float:
    """
    Coefficient of determination over all outputs.

    When the actual values are constant, returns 1.0 for a perfect fit and
    NaN otherwise.
    """
    p, a = _pair(predictions, actuals)
    ss_res = float(np.sum((a - p) ** 2))
    ss_tot = float(np.sum((a - a.mean()) ** 2))
    if ss_tot == 0:
        return 1.0 if ss_res == 0 else float('nan')
    return 1.0 - ss_res / ss_tot


@dataclass(frozen=True)
class RegressionReport:
    mse: float
    mae: float
    rmse: float
    r2: float

    def format(self) -> str:
        return '\n'.join([
            '======= Evaluation Metrics =======',
            f"MSE:  {self.mse:.6f}",
            f"MAE:  {self.mae:.6f}",
            f"R2:   {self.r2:.6f}",
            f"RMSE: {self.rmse:.6f}",
        ])


def regression_report(predictions, actuals) -> RegressionReport:
    """
    Compute every regression metric.

    Args:
        predictions: Output of ``Runtime.predict``, one row per sample
        actuals: Targets with the same shape

    Raises:
        ValueError: On empty input, mismatched shapes or non-finite values
    """
    p, a = _pair(predictions, actuals)
    if not (np.all(np.isfinite(p)) and np.all(np.isfinite(a))):
        raise ValueError("Non-numeric or non-finite values detected.")

    report = RegressionReport(
        mse=mse(p, a), mae=mae(p, a), rmse=rmse(p, a), r2=r2(p, a)
    )
    logger.debug(f"Regression report over {len(p)} sample(s): {report}")
    return report


# ============================================================================
# CLASSIFICATION
# ============================================================================

@dataclass(frozen=True)
class ClassMetrics:
    label: Any
    precision: float
    recall: float
    f1: float
    support: int


@dataclass(frozen=True)
class ClassificationReport:
    accuracy: float
    correct: int
    misclassified: int
    classes: List[ClassMetrics]
    macro_precision: float
    macro_recall: float
    macro_f1: float
    weighted_precision: float
    weighted_recall: float
    weighted_f1: float
    misclassified_examples: List[str] = field(default_factory=list)

    @property
    def total_support(self) -> int:
        return sum(c.support for c in self.classes)

    def format(self) -> str:
        lines = [
            f"Accuracy: {self.accuracy * 100:.2f}%",
            f"Correct: {self.correct}",
            f"Misclassified: {self.misclassified}",
        ]
        if self.misclassified_examples:
            lines.append('')
            lines.append('Misclassified Examples:')
            lines.extend(self.misclassified_examples)

        lines += [
            '',
            '======= Classification Report =======',
            f"{'':<16}{'precision':>10}{'recall':>10}{'f1-score':>10}"
            f"{'support':>10}",
        ]
        for c in self.classes:
            lines.append(
                f"{str(c.label):<16}{c.precision:>10.2f}{c.recall:>10.2f}"
                f"{c.f1:>10.2f}{c.support:>10}"
            )
        total = self.total_support
        lines += [
            '',
            f"{'accuracy':<16}{'':>10}{'':>10}{self.accuracy:>10.2f}"
            f"{total:>10}",
            f"{'macro avg':<16}{self.macro_precision:>10.2f}"
            f"{self.macro_recall:>10.2f}{self.macro_f1:>10.2f}{total:>10}",
            f"{'weighted avg':<16}{self.weighted_precision:>10.2f}"
            f"{self.weighted_recall:>10.2f}{self.weighted_f1:>10.2f}"
            f"{total:>10}",
        ]
        return '\n'.join(lines)


def _class_indices(
    predictions: np.ndarray,
    actuals: np.ndarray,
    classification_type: str
) -> Tuple[np.ndarray, np.ndarray]:
    if classification_type == 'binary':
        true = actuals.reshape(len(actuals), -1)[:, 0].astype(int)
        pred = (predictions.reshape(len(predictions), -1)[:, 0] >= 0.5)
        return true, pred.astype(int)

    pred = np.argmax(predictions.reshape(len(predictions), -1), axis=1)
    if classification_type == 'categorical':
        true = np.argmax(actuals.reshape(len(actuals), -1), axis=1)
    else:
        true = actuals.reshape(len(actuals), -1)[:, 0].astype(int)
    return true, pred


def classification_report(
    predictions,
    actuals,
    classification_type: str,
    labels: Optional[Sequence[Any]] = None
) -> ClassificationReport:
    """
    Evaluate classifier outputs.

    Args:
        predictions: Model outputs, one row per sample. Binary outputs are
            thresholded at 0.5; otherwise the arg-max is taken.
        actuals: Targets: 0/1 rows for ``binary``, one-hot rows for
            ``categorical``, integer class rows for ``sparse_categorical``
        classification_type: One of ``binary``, ``categorical``,
            ``sparse_categorical`` (case-insensitive)
        labels: Optional display names indexed by class

    Raises:
        ValueError: On empty or mismatched input or an unknown type
    """
    if not classification_type:
        raise ValueError("Classification type is not provided.")
    kind = classification_type.lower()
    if kind not in CLASSIFICATION_TYPES:
        raise ValueError(f"Unknown classification type: {classification_type}")

    p = np.asarray(predictions, dtype=float)
    a = np.asarray(actuals, dtype=float)
    if len(p) == 0 or len(a) == 0:
        raise ValueError("No predictions or actuals provided.")
    if len(p) != len(a):
        raise ValueError(
            f"Mismatch: {len(p)} predictions vs {len(a)} actuals."
        )

    true, pred = _class_indices(p, a, kind)
    n_classes = int(max(true.max(), pred.max())) + 1
    if kind == 'binary':
        n_classes = max(n_classes, 2)
    names = list(labels) if labels else list(range(n_classes))
    if len(names) > n_classes:
        n_classes = len(names)
    elif len(names) < n_classes:
        raise ValueError(
            f"{len(names)} label(s) given for {n_classes} classes"
        )

    correct = int(np.sum(true == pred))
    misclassified_examples = [
        f"Predicted: {pred[i]} | Actual: {true[i]} | "
        f"Predicted Class: {names[pred[i]]} | Actual Class: {names[true[i]]}"
        for i in np.flatnonzero(true != pred)
    ]

    per_class = []
    for k in range(n_classes):
        tp = int(np.sum((pred == k) & (true == k)))
        fp = int(np.sum((pred == k) & (true != k)))
        fn = int(np.sum((pred != k) & (true == k)))
        precision = tp / (tp + fp) if tp + fp else 0.0
        recall = tp / (tp + fn) if tp + fn else 0.0
        f1 = (
            2 * precision * recall / (precision + recall)
            if precision + recall else 0.0
        )
        per_class.append(ClassMetrics(
            label=names[k],
            precision=precision,
            recall=recall,
            f1=f1,
            support=int(np.sum(true == k))
        ))

    supports = np.array([c.support for c in per_class], dtype=float)
    total = supports.sum()

    def macro(attr: str) -> float:
        return float(np.mean([getattr(c, attr) for c in per_class]))

    def weighted(attr: str) -> float:
        values = np.array([getattr(c, attr) for c in per_class])
        return float(np.sum(values * supports) / total)

    report = ClassificationReport(
        accuracy=correct / len(true),
        correct=correct,
        misclassified=len(true) - correct,
        classes=per_class,
        macro_precision=macro('precision'),
        macro_recall=macro('recall'),
        macro_f1=macro('f1'),
        weighted_precision=weighted('precision'),
        weighted_recall=weighted('recall'),
        weighted_f1=weighted('f1'),
        misclassified_examples=misclassified_examples
    )
    logger.debug(
        f"Classification report: accuracy={report.accuracy:.4f} "
        f"over {len(true)} sample(s)"
    )
    return report
