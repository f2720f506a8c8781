from __future__ import annotations

"""
Evaluation of a fitted model on the held-out split: confusion matrix with
the derived rates, Cohen's kappa and the accuracy tests of a standard
confusion-matrix report.

The positive class is explicit. It defaults to label 0 (no disease), which
is the reference class of the notebook analysis this reproduces; with it, sensitivity is the
share of disease-free patients the model recognises as such. Passing
``positive_label=1`` swaps sensitivity and specificity.
"""

import logging
from dataclasses import dataclass, field

import numpy as np
import pandas as pd
from scipy import stats
from sklearn import metrics

from .constants import POSITIVE_LABEL, THRESHOLD
from .errors import EmptyTestSet

logger = logging.getLogger(__name__)


def _ratio(num: float, den: float) -> float:
    return num / den if den else float("nan")


@dataclass(frozen=True)
class ConfusionMatrix:
    """Counts relative to ``positive_label``; every rate is derived on access."""

    tp: int
    fp: int
    fn: int
    tn: int
    positive_label: int = POSITIVE_LABEL

    @property
    def negative_label(self) -> int:
        return 1 - self.positive_label

    @property
    def total(self) -> int:
        return self.tp + self.fp + self.fn + self.tn

    @property
    def accuracy(self) -> float:
        return _ratio(self.tp + self.tn, self.total)

    @property
    def sensitivity(self) -> float:
        return _ratio(self.tp, self.tp + self.fn)

    @property
    def specificity(self) -> float:
        return _ratio(self.tn, self.tn + self.fp)

    @property
    def precision(self) -> float:
        return _ratio(self.tp, self.tp + self.fp)

    @property
    def npv(self) -> float:
        return _ratio(self.tn, self.tn + self.fn)

    @property
    def prevalence(self) -> float:
        return _ratio(self.tp + self.fn, self.total)

    @property
    def detection_rate(self) -> float:
        return _ratio(self.tp, self.total)

    @property
    def detection_prevalence(self) -> float:
        return _ratio(self.tp + self.fp, self.total)

    @property
    def balanced_accuracy(self) -> float:
        return (self.sensitivity + self.specificity) / 2.0

    @property
    def f1(self) -> float:
        return _ratio(2 * self.tp, 2 * self.tp + self.fp + self.fn)

    @property
    def kappa(self) -> float:
        n = self.total
        if not n:
            return float("nan")
        observed = self.accuracy
        expected = (
            (self.tp + self.fp) * (self.tp + self.fn) + (self.fn + self.tn) * (self.fp + self.tn)
        ) / (n * n)
        return _ratio(observed - expected, 1.0 - expected)

    @property
    def no_information_rate(self) -> float:
        return _ratio(max(self.tp + self.fn, self.fp + self.tn), self.total)

    def accuracy_ci(self, level: float = 0.95) -> tuple[float, float]:
        """Exact (Clopper-Pearson) interval for accuracy."""
        n, k = self.total, self.tp + self.tn
        alpha = 1.0 - level
        lower = 0.0 if k == 0 else float(stats.beta.ppf(alpha / 2, k, n - k + 1))
        upper = 1.0 if k == n else float(stats.beta.ppf(1 - alpha / 2, k + 1, n - k))
        return lower, upper

    def accuracy_pvalue(self) -> float:
        """One-sided binomial test that accuracy exceeds the no-information rate."""
        k = self.tp + self.tn
        return float(stats.binom.sf(k - 1, self.total, self.no_information_rate))

    def mcnemar_pvalue(self) -> float:
        """McNemar's chi-squared test on the off-diagonal counts, continuity corrected
        when the off-diagonals differ."""
        off = self.fp + self.fn
        if off == 0:
            return float("nan")
        if self.fp == self.fn:
            return 1.0
        statistic = (abs(self.fp - self.fn) - 1) ** 2 / off
        return float(stats.chi2.sf(statistic, df=1))

    def as_table(self) -> pd.DataFrame:
        """2x2 table, rows = prediction, columns = reference."""
        pos, neg = self.positive_label, self.negative_label
        return pd.DataFrame(
            [[self.tp, self.fp], [self.fn, self.tn]],
            index=pd.Index([pos, neg], name="Prediction"),
            columns=pd.Index([pos, neg], name="Reference"),
        )

    def to_dict(self) -> dict:
        ci_low, ci_high = self.accuracy_ci()
        return {
            "accuracy": self.accuracy,
            "accuracy_ci_low": ci_low,
            "accuracy_ci_high": ci_high,
            "no_information_rate": self.no_information_rate,
            "accuracy_pvalue": self.accuracy_pvalue(),
            "kappa": self.kappa,
            "mcnemar_pvalue": self.mcnemar_pvalue(),
            "sensitivity": self.sensitivity,
            "specificity": self.specificity,
            "precision": self.precision,
            "npv": self.npv,
            "f1": self.f1,
            "prevalence": self.prevalence,
            "detection_rate": self.detection_rate,
            "detection_prevalence": self.detection_prevalence,
            "balanced_accuracy": self.balanced_accuracy,
        }


@dataclass
class EvaluationReport:
    confusion: ConfusionMatrix
    probabilities: np.ndarray
    predictions: np.ndarray
    threshold: float = THRESHOLD
    statistics: dict = field(default_factory=dict)


def build_confusion_matrix(y_true, y_pred, positive_label: int = POSITIVE_LABEL) -> ConfusionMatrix:
    """Tally predicted vs. actual 0/1 labels relative to ``positive_label``."""
    if positive_label not in (0, 1):
        raise ValueError(f"positive_label must be 0 or 1, got {positive_label!r}")
    y_true = np.asarray(y_true).astype(int).ravel()
    y_pred = np.asarray(y_pred).astype(int).ravel()
    if y_true.size == 0:
        raise EmptyTestSet("no records to evaluate", num_records=0)
    if y_true.shape != y_pred.shape:
        raise ValueError(f"{y_true.size} labels but {y_pred.size} predictions")

    negative_label = 1 - positive_label
    # rows = actual, columns = predicted, positive class first
    (tp, fn), (fp, tn) = metrics.confusion_matrix(
        y_true, y_pred, labels=[positive_label, negative_label]
    )
    return ConfusionMatrix(
        tp=int(tp), fp=int(fp), fn=int(fn), tn=int(tn), positive_label=positive_label
    )


def evaluate_model(
    model,
    X_test,
    y_test,
    threshold: float = THRESHOLD,
    positive_label: int = POSITIVE_LABEL,
) -> EvaluationReport:
    """
    Score the test split: label 1 when P(y=1) > threshold, then build the
    confusion matrix and its statistics.
    """
    if len(y_test) == 0:
        raise EmptyTestSet("no records to evaluate", num_records=0)

    probs = model.predict_proba(X_test)
    preds = (probs > threshold).astype(int)
    cm = build_confusion_matrix(y_test, preds, positive_label=positive_label)

    stats_dict = cm.to_dict()
    logger.info(
        "Evaluated %d records: accuracy=%.4f kappa=%.4f", cm.total, cm.accuracy, cm.kappa
    )
    return EvaluationReport(
        confusion=cm,
        probabilities=probs,
        predictions=preds,
        threshold=threshold,
        statistics=stats_dict,
    )


def majority_baseline(y_train, y_test, positive_label: int = POSITIVE_LABEL) -> ConfusionMatrix:
    """
    Predicts the majority training label for every test record.
    """
    majority = int(np.mean(np.asarray(y_train)) > 0.5)
    preds = np.full(len(y_test), majority, dtype=int)
    return build_confusion_matrix(y_test, preds, positive_label=positive_label)


def format_report(report: EvaluationReport) -> str:
    """Text rendering of the confusion matrix and its statistics."""
    cm = report.confusion
    s = report.statistics
    lines = [
        "Confusion Matrix and Statistics",
        "",
        cm.as_table().to_string(),
        "",
        f"               Accuracy : {s['accuracy']:.4f}",
        f"                 95% CI : ({s['accuracy_ci_low']:.4f}, {s['accuracy_ci_high']:.4f})",
        f"    No Information Rate : {s['no_information_rate']:.4f}",
        f"    P-Value [Acc > NIR] : {s['accuracy_pvalue']:.4g}",
        "",
        f"                  Kappa : {s['kappa']:.4f}",
        "",
        f" Mcnemar's Test P-Value : {s['mcnemar_pvalue']:.4g}",
        "",
        f"            Sensitivity : {s['sensitivity']:.4f}",
        f"            Specificity : {s['specificity']:.4f}",
        f"         Pos Pred Value : {s['precision']:.4f}",
        f"         Neg Pred Value : {s['npv']:.4f}",
        f"                     F1 : {s['f1']:.4f}",
        f"             Prevalence : {s['prevalence']:.4f}",
        f"         Detection Rate : {s['detection_rate']:.4f}",
        f"   Detection Prevalence : {s['detection_prevalence']:.4f}",
        f"      Balanced Accuracy : {s['balanced_accuracy']:.4f}",
        "",
        f"       'Positive' Class : {cm.positive_label}",
        f"              Threshold : {report.threshold}",
    ]
    return "\n".join(lines)
