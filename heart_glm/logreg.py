from __future__ import annotations

"""
Unpenalised binomial GLM with logit link fitted by iteratively reweighted
least squares, plus the Wald/deviance diagnostics of a standard GLM summary.
"""

import logging

import numpy as np
import pandas as pd
from scipy import stats
from scipy.special import expit, xlogy

from .constants import MAX_ITER, THRESHOLD, TOL
from .errors import NonConvergence, SingularDesign

logger = logging.getLogger(__name__)

INTERCEPT_NAME = "(Intercept)"


def _log_likelihood(y: np.ndarray, mu: np.ndarray) -> float:
    # xlogy keeps 0 * log(0) at 0 for fitted probabilities of exactly 0 or 1
    return float(np.sum(xlogy(y, mu) + xlogy(1.0 - y, 1.0 - mu)))


class LogisticRegressionIRLS:
    """
    Logistic regression estimated by Newton-Raphson / IRLS on the raw
    attribute values (no scaling, coefficients stay in original units).

    Iteration stops once every coefficient moves by less than ``tol``. Hitting
    ``max_iter`` first raises NonConvergence, which is also what perfectly
    separable training data ends in.
    """

    def __init__(self, max_iter: int = MAX_ITER, tol: float = TOL, verbose: bool = False):
        self.max_iter = max_iter
        self.tol = tol
        self.verbose = verbose
        self.weights_: np.ndarray | None = None
        self.feature_names_: list[str] | None = None
        self.n_iter_: int = 0

    @staticmethod
    def _add_bias(X: np.ndarray) -> np.ndarray:
        return np.hstack([np.ones((X.shape[0], 1)), X])

    def _design(self, X) -> np.ndarray:
        X_arr = np.asarray(X, dtype=np.float64)
        if X_arr.ndim == 1:
            X_arr = X_arr.reshape(-1, 1)
        return self._add_bias(X_arr)

    def fit(self, X, y):
        """Estimate coefficients by maximum likelihood."""
        if self.max_iter < 1 or not self.tol > 0:
            raise ValueError("max_iter must be >= 1 and tol must be positive")
        self.feature_names_ = None
        if isinstance(X, pd.DataFrame):
            self.feature_names_ = [str(c) for c in X.columns]
        X_bias = self._design(X)
        y_arr = np.asarray(y, dtype=np.float64).ravel()
        n_obs, n_params = X_bias.shape

        if self.feature_names_ is None or len(self.feature_names_) != n_params - 1:
            self.feature_names_ = [f"x{i}" for i in range(1, n_params)]
        if len(y_arr) != n_obs:
            raise ValueError(f"X has {n_obs} rows but y has {len(y_arr)} labels")
        if not np.all(np.isin(y_arr, (0.0, 1.0))):
            raise ValueError("labels must be coded 0/1")
        if np.unique(y_arr).size < 2:
            raise ValueError("both outcome classes must be present in the training data")
        if not np.all(np.isfinite(X_bias)):
            raise ValueError("attribute values must be finite")

        rank = int(np.linalg.matrix_rank(X_bias))
        if rank < n_params:
            raise SingularDesign(
                "design matrix is rank deficient (perfectly collinear attributes)",
                n_params=n_params,
                rank=rank,
                features=self.feature_names_,
            )

        beta = np.zeros(n_params)
        converged = False
        for step in range(1, self.max_iter + 1):
            mu = expit(X_bias @ beta)
            w = mu * (1.0 - mu)
            info = X_bias.T @ (X_bias * w[:, None])
            score = X_bias.T @ (y_arr - mu)
            try:
                delta = np.linalg.solve(info, score)
            except np.linalg.LinAlgError as exc:
                # full rank was checked above, so the weights have collapsed
                raise NonConvergence(
                    "information matrix became singular; fitted probabilities "
                    "reached 0 or 1 (classes look perfectly separable)",
                    iterations=step,
                ) from exc

            beta = beta + delta
            self.n_iter_ = step
            if not np.all(np.isfinite(beta)):
                raise NonConvergence("coefficients diverged to non-finite values", iterations=step)

            change = float(np.max(np.abs(delta)))
            if self.verbose:
                logger.debug(
                    "[IRLS] step=%d, loglik=%.6f, max_change=%.3e",
                    step,
                    _log_likelihood(y_arr, expit(X_bias @ beta)),
                    change,
                )
            if change < self.tol:
                converged = True
                break

        if not converged:
            raise NonConvergence(
                "iteration cap reached before coefficients settled",
                max_iter=self.max_iter,
                tol=self.tol,
                last_change=change,
            )

        self.weights_ = beta
        self.intercept_ = float(beta[0])
        self.coef_ = beta[1:]
        self._compute_diagnostics(X_bias, y_arr)
        logger.info("IRLS converged after %d iterations", self.n_iter_)
        return self

    def _compute_diagnostics(self, X_bias: np.ndarray, y_arr: np.ndarray):
        n_obs, n_params = X_bias.shape
        mu = expit(X_bias @ self.weights_)
        w = mu * (1.0 - mu)
        info = X_bias.T @ (X_bias * w[:, None])
        try:
            self.cov_params_ = np.linalg.inv(info)
        except np.linalg.LinAlgError as exc:
            raise NonConvergence(
                "information matrix is singular at the solution", iterations=self.n_iter_
            ) from exc

        self.bse_ = np.sqrt(np.diag(self.cov_params_))
        self.zvalues_ = self.weights_ / self.bse_
        self.pvalues_ = 2.0 * stats.norm.sf(np.abs(self.zvalues_))

        self.llf_ = _log_likelihood(y_arr, mu)
        p_null = float(np.mean(y_arr))
        self.llnull_ = _log_likelihood(y_arr, np.full_like(y_arr, p_null))
        self.deviance_ = -2.0 * self.llf_
        self.null_deviance_ = -2.0 * self.llnull_
        self.df_resid_ = n_obs - n_params
        self.df_null_ = n_obs - 1
        self.aic_ = 2.0 * n_params - 2.0 * self.llf_

        # signed deviance residuals
        unit_dev = -2.0 * (xlogy(y_arr, mu) + xlogy(1.0 - y_arr, 1.0 - mu))
        self.deviance_residuals_ = np.sign(y_arr - mu) * np.sqrt(np.maximum(unit_dev, 0.0))

    def _check_fitted(self):
        if self.weights_ is None:
            raise RuntimeError("Model is not fitted.")

    def decision_function(self, X) -> np.ndarray:
        """Linear predictor (log-odds of label 1)."""
        self._check_fitted()
        return self._design(X) @ self.weights_

    def predict_proba(self, X) -> np.ndarray:
        """Return P(y=1) for each row in X."""
        return expit(self.decision_function(X))

    def predict(self, X, threshold: float = THRESHOLD) -> np.ndarray:
        """Label 1 where P(y=1) is strictly above the threshold."""
        return (self.predict_proba(X) > threshold).astype(int)

    def summary(self) -> pd.DataFrame:
        """Coefficient table: estimate, standard error, z value and Pr(>|z|)."""
        self._check_fitted()
        return pd.DataFrame(
            {
                "estimate": self.weights_,
                "std_error": self.bse_,
                "z_value": self.zvalues_,
                "p_value": self.pvalues_,
            },
            index=[INTERCEPT_NAME] + list(self.feature_names_),
        )

    def fit_statistics(self) -> dict:
        self._check_fitted()
        return {
            "null_deviance": self.null_deviance_,
            "df_null": self.df_null_,
            "residual_deviance": self.deviance_,
            "df_resid": self.df_resid_,
            "log_likelihood": self.llf_,
            "aic": self.aic_,
            "n_iter": self.n_iter_,
        }

    def deviance_residual_summary(self) -> pd.Series:
        self._check_fitted()
        q = np.quantile(self.deviance_residuals_, [0.0, 0.25, 0.5, 0.75, 1.0])
        return pd.Series(q, index=["Min", "1Q", "Median", "3Q", "Max"])
