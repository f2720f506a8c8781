from __future__ import annotations

"""
Descriptive charts for the heart dataset and diagnostic plots for the fitted
model. Every function saves a PNG, closes its figure and returns the path.
"""

import logging
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from sklearn.metrics import ConfusionMatrixDisplay, auc, roc_curve

from .constants import COLUMN_LABELS, TARGET_COLUMN
from .metrics import ConfusionMatrix

logger = logging.getLogger(__name__)

OUTCOME_NAMES = {0: "No disease", 1: "Disease"}


def _save(fig, filename: Path) -> Path:
    filename = Path(filename)
    filename.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(filename)
    plt.close(fig)
    logger.info("Saved %s", filename)
    return filename


def plot_target_distribution(df: pd.DataFrame, filename: Path) -> Path:
    counts = df[TARGET_COLUMN].value_counts().reindex([0, 1], fill_value=0)
    fig, ax = plt.subplots(figsize=(6, 5))
    ax.bar([OUTCOME_NAMES[k] for k in counts.index], counts.values, color=["tab:blue", "tab:red"])
    ax.set_ylabel("Patients")
    ax.set_title("Heart disease distribution")
    ax.grid(axis="y", linestyle="--", alpha=0.7)
    return _save(fig, filename)


def plot_age_histogram(df: pd.DataFrame, filename: Path, bins: int = 20) -> Path:
    fig, ax = plt.subplots(figsize=(8, 6))
    ax.hist(df["age"], bins=bins, color="darkorange", edgecolor="black")
    ax.set_xlabel(COLUMN_LABELS["age"])
    ax.set_ylabel("Patients")
    ax.set_title("Age distribution")
    ax.grid(axis="y", linestyle="--", alpha=0.7)
    return _save(fig, filename)


def plot_chest_pain_distribution(df: pd.DataFrame, filename: Path) -> Path:
    counts = df["cp"].value_counts().sort_index()
    fig, ax = plt.subplots(figsize=(8, 6))
    ax.bar([str(k) for k in counts.index], counts.values, color="tab:green")
    ax.set_xlabel(COLUMN_LABELS["cp"])
    ax.set_ylabel("Patients")
    ax.set_title("Chest pain type distribution")
    ax.grid(axis="y", linestyle="--", alpha=0.7)
    return _save(fig, filename)


def plot_target_by_sex(df: pd.DataFrame, filename: Path) -> Path:
    """Grouped bars: patients per outcome within each sex."""
    table = pd.crosstab(df["sex"], df[TARGET_COLUMN]).reindex(columns=[0, 1], fill_value=0)
    x = np.arange(len(table.index))
    width = 0.35

    fig, ax = plt.subplots(figsize=(8, 6))
    ax.bar(x - width / 2, table[0].values, width, label=OUTCOME_NAMES[0])
    ax.bar(x + width / 2, table[1].values, width, label=OUTCOME_NAMES[1])
    ax.set_xticks(x)
    ax.set_xticklabels(["Female" if s == 0 else "Male" for s in table.index])
    ax.set_ylabel("Patients")
    ax.set_title("Heart disease by sex")
    ax.legend()
    ax.grid(axis="y", linestyle="--", alpha=0.7)
    return _save(fig, filename)


def plot_confusion_matrix(cm: ConfusionMatrix, filename: Path) -> Path:
    # ConfusionMatrixDisplay wants rows = actual, columns = predicted
    matrix = np.array([[cm.tp, cm.fn], [cm.fp, cm.tn]])
    disp = ConfusionMatrixDisplay(
        confusion_matrix=matrix, display_labels=[cm.positive_label, cm.negative_label]
    )
    fig, ax = plt.subplots(figsize=(6, 5))
    disp.plot(ax=ax, cmap="Blues", values_format="d", colorbar=False)
    ax.set_title(f"Confusion matrix (positive class = {cm.positive_label})")
    return _save(fig, filename)


def plot_roc_curve(y_test, y_probs, filename: Path) -> Path:
    """ROC for P(disease); y_probs are probabilities of label 1."""
    fpr, tpr, _ = roc_curve(y_test, y_probs)
    roc_auc = auc(fpr, tpr)

    fig, ax = plt.subplots(figsize=(8, 6))
    ax.plot(fpr, tpr, color="darkorange", lw=2, label=f"ROC curve (area = {roc_auc:.3f})")
    ax.plot([0, 1], [0, 1], color="navy", lw=2, linestyle="--")
    ax.set_xlim([0.0, 1.0])
    ax.set_ylim([0.0, 1.05])
    ax.set_xlabel("False Positive Rate")
    ax.set_ylabel("True Positive Rate")
    ax.set_title("ROC curve: heart disease")
    ax.legend(loc="lower right")
    ax.grid(True)
    return _save(fig, filename)


def generate_eda_plots(df: pd.DataFrame, out_dir: Path) -> list[Path]:
    """The four descriptive charts of the exploratory report."""
    out_dir = Path(out_dir)
    return [
        plot_target_distribution(df, out_dir / "target_distribution.png"),
        plot_age_histogram(df, out_dir / "age_histogram.png"),
        plot_chest_pain_distribution(df, out_dir / "chest_pain_distribution.png"),
        plot_target_by_sex(df, out_dir / "target_by_sex.png"),
    ]
