import numpy as np

from heart_glm.metrics import ConfusionMatrix
from heart_glm.plots import generate_eda_plots, plot_confusion_matrix, plot_roc_curve


def test_eda_plots_are_written(tmp_path, heart_df):
    paths = generate_eda_plots(heart_df, tmp_path / "plots")

    assert [p.name for p in paths] == [
        "target_distribution.png",
        "age_histogram.png",
        "chest_pain_distribution.png",
        "target_by_sex.png",
    ]
    for path in paths:
        assert path.exists() and path.stat().st_size > 0


def test_model_plots_are_written(tmp_path):
    cm_path = plot_confusion_matrix(ConfusionMatrix(tp=33, fp=4, fn=10, tn=43), tmp_path / "cm.png")
    roc_path = plot_roc_curve(
        np.array([0, 0, 1, 1, 0, 1]), np.array([0.1, 0.4, 0.35, 0.8, 0.2, 0.9]), tmp_path / "roc.png"
    )
    assert cm_path.exists()
    assert roc_path.exists()
