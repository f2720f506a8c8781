from __future__ import annotations

"""
CLI entrypoint for the heart-disease logistic regression: load and check the
table, draw the descriptive charts, split, fit by IRLS and evaluate.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

import pandas as pd

from heart_glm import (
    FEATURE_COLUMNS,
    LogisticRegressionIRLS,
    PipelineError,
    describe_dataset,
    evaluate_model,
    format_report,
    load_heart_dataset,
    make_train_test_split,
    missing_value_report,
    split_features_target,
)
from heart_glm import constants
from heart_glm.metrics import majority_baseline
from heart_glm.plots import generate_eda_plots, plot_confusion_matrix, plot_roc_curve

logger = logging.getLogger("heart_glm.main")


def describe_features(meta: dict, missing: pd.Series):
    """Print the missing-value check and class balance."""
    print(f"Records: {meta['num_records']}, attributes: {meta['feature_count']}")
    print(f"Missing values in total: {int(missing.sum())}")
    print(f"Label counts: {meta['label_counts']}")
    print(f"Disease rate (target == 1): {meta['positive_rate']:.3f}")


def print_coefficients(model: LogisticRegressionIRLS):
    """GLM-style coefficient table followed by deviance and AIC."""
    fit_stats = model.fit_statistics()
    print("Deviance residuals:")
    print(model.deviance_residual_summary().to_frame().T.to_string(index=False, float_format="%.4f"))
    print("\nCoefficients:")
    print(model.summary().to_string(float_format=lambda v: f"{v:.6g}"))
    print(
        f"\n    Null deviance: {fit_stats['null_deviance']:.2f}  on {fit_stats['df_null']}  degrees of freedom"
    )
    print(
        f"Residual deviance: {fit_stats['residual_deviance']:.2f}  on {fit_stats['df_resid']}  degrees of freedom"
    )
    print(f"AIC: {fit_stats['aic']:.2f}")
    print(f"\nNumber of Fisher Scoring iterations: {fit_stats['n_iter']}")


def parse_features(value: str | None) -> list[str]:
    if not value:
        return list(FEATURE_COLUMNS)
    features = [f.strip() for f in value.split(",") if f.strip()]
    unknown = [f for f in features if f not in FEATURE_COLUMNS]
    if unknown:
        raise argparse.ArgumentTypeError(f"Unknown feature(s): {', '.join(unknown)}")
    return features


def build_arg_parser():
    """CLI parser with knobs for the split, the IRLS fit and the evaluation."""
    parser = argparse.ArgumentParser(
        description="Fit a logistic regression predicting heart disease and evaluate it."
    )
    parser.add_argument("--csv-path", type=Path, default=Path("data/heart.csv"))
    parser.add_argument(
        "--train-size", type=float, default=constants.TRAIN_SIZE, help="Share of records used for fitting."
    )
    parser.add_argument(
        "--random-state",
        type=int,
        default=constants.RANDOM_STATE,
        help="Seed for the stratified split.",
    )
    parser.add_argument("--max-iter", type=int, default=constants.MAX_ITER, help="IRLS iteration cap.")
    parser.add_argument(
        "--tol", type=float, default=constants.TOL, help="Stop once no coefficient moves more than this."
    )
    parser.add_argument(
        "--threshold",
        type=float,
        default=constants.THRESHOLD,
        help="Predict disease when P(target=1) is above this.",
    )
    parser.add_argument(
        "--positive-label",
        type=int,
        choices=[0, 1],
        default=constants.POSITIVE_LABEL,
        help="Label treated as the positive class for sensitivity/specificity.",
    )
    parser.add_argument(
        "--features",
        type=parse_features,
        default=None,
        help="Comma-separated subset of attributes to model (default: all 13).",
    )
    parser.add_argument("--plots-dir", type=Path, default=Path("plots"))
    parser.add_argument("--no-plots", action="store_true", help="Skip writing chart PNGs.")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
    )
    return parser


def run_pipeline(
    df: pd.DataFrame,
    features: Sequence[str] = FEATURE_COLUMNS,
    train_size: float = constants.TRAIN_SIZE,
    random_state: int | None = constants.RANDOM_STATE,
    max_iter: int = constants.MAX_ITER,
    tol: float = constants.TOL,
    threshold: float = constants.THRESHOLD,
    positive_label: int = constants.POSITIVE_LABEL,
):
    """Split -> fit -> evaluate with every setting passed explicitly."""
    train_df, test_df = make_train_test_split(df, train_size=train_size, random_state=random_state)
    X_train, y_train = split_features_target(train_df, features)
    X_test, y_test = split_features_target(test_df, features)

    model = LogisticRegressionIRLS(
        max_iter=max_iter, tol=tol, verbose=logger.isEnabledFor(logging.DEBUG)
    )
    model.fit(X_train, y_train)

    report = evaluate_model(
        model, X_test, y_test, threshold=threshold, positive_label=positive_label
    )
    split_meta = {
        "train_size": len(train_df),
        "test_size": len(test_df),
        "train_positive_rate": float(y_train.mean()),
        "test_positive_rate": float(y_test.mean()),
        "baseline": majority_baseline(y_train, y_test, positive_label=positive_label),
        "y_test": y_test,
    }
    return model, report, split_meta


def main(args: argparse.Namespace | None = None) -> int:
    args = args or build_arg_parser().parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    features = args.features or list(FEATURE_COLUMNS)

    try:
        df = load_heart_dataset(args.csv_path)
        describe_features(describe_dataset(df), missing_value_report(df))

        if not args.no_plots:
            generate_eda_plots(df, args.plots_dir)

        model, report, split_meta = run_pipeline(
            df,
            features=features,
            train_size=args.train_size,
            random_state=args.random_state,
            max_iter=args.max_iter,
            tol=args.tol,
            threshold=args.threshold,
            positive_label=args.positive_label,
        )
    except PipelineError as exc:
        logger.error("Pipeline aborted: %s", exc)
        return 1

    print(f"\nTrain size: {split_meta['train_size']}, Test size: {split_meta['test_size']}")
    print(
        f"Disease rate train/test: {split_meta['train_positive_rate']:.3f} / {split_meta['test_positive_rate']:.3f}"
    )
    print()
    print_coefficients(model)
    print()
    print(format_report(report))
    print(f"\nMajority baseline accuracy: {split_meta['baseline'].accuracy:.4f}")

    if not args.no_plots:
        plot_confusion_matrix(report.confusion, args.plots_dir / "confusion_matrix.png")
        plot_roc_curve(split_meta["y_test"], report.probabilities, args.plots_dir / "roc_curve.png")
    return 0


if __name__ == "__main__":
    sys.exit(main())
