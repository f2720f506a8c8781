"""
Logistic-regression analysis of the 14-column heart-disease table.

This package contains data loading and the stratified split, an IRLS
logistic regression with GLM diagnostics, and evaluation/plotting helpers
used by main.py.
"""

from .constants import FEATURE_COLUMNS, POSITIVE_LABEL, SCHEMA_COLUMNS, TARGET_COLUMN
from .data_prep import (
    describe_dataset,
    load_heart_dataset,
    make_train_test_split,
    missing_value_report,
    split_features_target,
    validate_dataset,
)
from .errors import (
    EmptyDataset,
    EmptyTestSet,
    InvalidProportion,
    MissingValuesError,
    NonConvergence,
    PipelineError,
    SchemaError,
    SingularDesign,
    UnstratifiableDataset,
)
from .logreg import LogisticRegressionIRLS
from .metrics import (
    ConfusionMatrix,
    EvaluationReport,
    build_confusion_matrix,
    evaluate_model,
    format_report,
)

__all__ = [
    "FEATURE_COLUMNS",
    "POSITIVE_LABEL",
    "SCHEMA_COLUMNS",
    "TARGET_COLUMN",
    "describe_dataset",
    "load_heart_dataset",
    "make_train_test_split",
    "missing_value_report",
    "split_features_target",
    "validate_dataset",
    "EmptyDataset",
    "EmptyTestSet",
    "InvalidProportion",
    "MissingValuesError",
    "NonConvergence",
    "PipelineError",
    "SchemaError",
    "SingularDesign",
    "UnstratifiableDataset",
    "LogisticRegressionIRLS",
    "ConfusionMatrix",
    "EvaluationReport",
    "build_confusion_matrix",
    "evaluate_model",
    "format_report",
]
