import numpy as np
import pandas as pd
import pytest

from heart_glm.constants import FEATURE_COLUMNS, TARGET_COLUMN
from heart_glm.errors import NonConvergence, SingularDesign
from heart_glm.logreg import INTERCEPT_NAME, LogisticRegressionIRLS


def binary_predictor_data():
    # x=0: 5 of 20 positive, x=1: 21 of 30 positive
    x = np.array([0] * 20 + [1] * 30)
    y = np.array([1] * 5 + [0] * 15 + [1] * 21 + [0] * 9)
    return pd.DataFrame({"exang": x}), pd.Series(y)


def test_single_binary_predictor_matches_closed_form():
    X, y = binary_predictor_data()
    model = LogisticRegressionIRLS().fit(X, y)

    assert model.intercept_ == pytest.approx(np.log(5 / 15), abs=1e-6)
    assert model.coef_[0] == pytest.approx(np.log(21 / 9) - np.log(5 / 15), abs=1e-6)
    # Wald standard errors of a 2x2 table
    assert model.bse_[0] == pytest.approx(np.sqrt(1 / 5 + 1 / 15), abs=1e-6)
    assert model.bse_[1] == pytest.approx(np.sqrt(1 / 5 + 1 / 15 + 1 / 21 + 1 / 9), abs=1e-6)
    assert model.n_iter_ < 25


def test_deviance_and_aic():
    X, y = binary_predictor_data()
    model = LogisticRegressionIRLS().fit(X, y)
    stats = model.fit_statistics()

    p = 26 / 50
    null_dev = -2 * (26 * np.log(p) + 24 * np.log(1 - p))
    assert stats["null_deviance"] == pytest.approx(null_dev, rel=1e-9)
    assert stats["aic"] == pytest.approx(stats["residual_deviance"] + 2 * 2)
    assert stats["df_null"] == 49
    assert stats["df_resid"] == 48
    assert stats["residual_deviance"] < stats["null_deviance"]


def test_summary_table_layout(heart_df):
    model = LogisticRegressionIRLS().fit(heart_df[FEATURE_COLUMNS], heart_df[TARGET_COLUMN])
    table = model.summary()

    assert list(table.index) == [INTERCEPT_NAME] + FEATURE_COLUMNS
    assert list(table.columns) == ["estimate", "std_error", "z_value", "p_value"]
    assert (table["std_error"] > 0).all()
    assert table["p_value"].between(0, 1).all()
    np.testing.assert_allclose(table["z_value"], table["estimate"] / table["std_error"])
    assert len(model.deviance_residual_summary()) == 5


def test_fit_is_deterministic(heart_df):
    X, y = heart_df[FEATURE_COLUMNS], heart_df[TARGET_COLUMN]
    first = LogisticRegressionIRLS().fit(X, y)
    second = LogisticRegressionIRLS().fit(X, y)
    np.testing.assert_allclose(first.weights_, second.weights_, atol=1e-6)


def test_probabilities_stay_in_unit_interval(heart_df):
    model = LogisticRegressionIRLS().fit(heart_df[FEATURE_COLUMNS], heart_df[TARGET_COLUMN])
    extreme = np.vstack(
        [
            np.full(len(FEATURE_COLUMNS), 1e6),
            np.full(len(FEATURE_COLUMNS), -1e6),
            np.zeros(len(FEATURE_COLUMNS)),
        ]
    )
    probs = model.predict_proba(extreme)
    assert np.all((probs >= 0) & (probs <= 1))
    assert set(model.predict(extreme)) <= {0, 1}


def test_perfectly_separable_data_does_not_converge():
    X = pd.DataFrame({"oldpeak": np.arange(10, dtype=float)})
    y = (X["oldpeak"] >= 5).astype(int)
    with pytest.raises(NonConvergence) as exc:
        LogisticRegressionIRLS().fit(X, y)
    assert exc.value.stage == "fit"


def test_collinear_attributes_are_singular(heart_df):
    X = heart_df[["age", "chol"]].assign(age_twice=heart_df["age"] * 2)
    with pytest.raises(SingularDesign) as exc:
        LogisticRegressionIRLS().fit(X, heart_df[TARGET_COLUMN])
    assert exc.value.context["rank"] == 3


def test_constant_attribute_is_collinear_with_intercept(heart_df):
    X = heart_df[["age"]].assign(fbs=1)
    with pytest.raises(SingularDesign):
        LogisticRegressionIRLS().fit(X, heart_df[TARGET_COLUMN])


def test_iteration_cap_raises(heart_df):
    with pytest.raises(NonConvergence) as exc:
        LogisticRegressionIRLS(max_iter=1).fit(heart_df[FEATURE_COLUMNS], heart_df[TARGET_COLUMN])
    assert exc.value.context["max_iter"] == 1


def test_single_class_labels_are_rejected():
    X = pd.DataFrame({"age": [40.0, 50.0, 60.0]})
    with pytest.raises(ValueError):
        LogisticRegressionIRLS().fit(X, [1, 1, 1])


def test_predict_before_fit():
    with pytest.raises(RuntimeError):
        LogisticRegressionIRLS().predict_proba(np.zeros((2, 3)))
