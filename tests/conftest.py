import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest
from scipy.special import expit

from heart_glm.constants import SCHEMA_COLUMNS


def make_heart_frame(n: int = 300, seed: int = 0) -> pd.DataFrame:
    """Synthetic records with the heart schema and a noisy logistic outcome."""
    rng = np.random.default_rng(seed)
    df = pd.DataFrame(
        {
            "age": rng.integers(29, 78, n),
            "sex": rng.integers(0, 2, n),
            "cp": rng.integers(0, 4, n),
            "trestbps": rng.integers(94, 201, n),
            "chol": rng.integers(126, 565, n),
            "fbs": rng.integers(0, 2, n),
            "restecg": rng.integers(0, 3, n),
            "thalach": rng.integers(71, 203, n),
            "exang": rng.integers(0, 2, n),
            "oldpeak": np.round(rng.uniform(0.0, 6.2, n), 1),
            "slope": rng.integers(0, 3, n),
            "ca": rng.integers(0, 5, n),
            "thal": rng.integers(0, 4, n),
        }
    )
    eta = (
        0.5
        - 0.03 * (df["age"] - 54)
        - 0.8 * df["sex"]
        + 0.6 * df["cp"]
        + 0.02 * (df["thalach"] - 150)
        - 0.9 * df["exang"]
        - 0.5 * df["oldpeak"]
        - 0.5 * df["ca"]
    )
    df["target"] = rng.binomial(1, expit(eta.to_numpy()))
    return df[SCHEMA_COLUMNS]


@pytest.fixture
def heart_df():
    return make_heart_frame()


@pytest.fixture
def heart_csv(tmp_path, heart_df):
    path = tmp_path / "heart.csv"
    heart_df.to_csv(path, index=False)
    return path
