from __future__ import annotations

"""
Loading, validation, and the stratified train/test split for the heart dataset.
"""

import logging
import math
from pathlib import Path
from typing import Sequence

import numpy as np
import pandas as pd
from sklearn.model_selection import train_test_split

from .constants import RANDOM_STATE, SCHEMA_COLUMNS, TARGET_COLUMN, TRAIN_SIZE
from .errors import (
    EmptyDataset,
    InvalidProportion,
    MissingValuesError,
    SchemaError,
    UnstratifiableDataset,
)

logger = logging.getLogger(__name__)


def _clean_name(name: str) -> str:
    """Strip stray BOM/whitespace that some exports leave in headers."""
    return str(name).replace("\ufeff", "").strip()


def missing_value_report(df: pd.DataFrame) -> pd.Series:
    """Null count per column."""
    return df.isnull().sum()


def validate_dataset(
    df: pd.DataFrame,
    columns: Sequence[str] = SCHEMA_COLUMNS,
    target: str = TARGET_COLUMN,
) -> pd.DataFrame:
    """
    Check a raw frame against the fixed schema and return it in canonical
    column order with numeric dtypes. Nothing is imputed: any null rejects
    the whole table.
    """
    df = df.rename(columns=_clean_name)

    missing_cols = [c for c in columns if c not in df.columns]
    extra_cols = [c for c in df.columns if c not in columns]
    if missing_cols or extra_cols:
        raise SchemaError(
            "columns do not match the expected schema",
            missing=missing_cols,
            unexpected=extra_cols,
        )

    if df.empty:
        raise EmptyDataset("dataset has no records", stage="load")

    df = df[list(columns)].copy()

    nulls = missing_value_report(df)
    if nulls.any():
        raise MissingValuesError(
            "dataset contains missing values",
            null_counts={col: int(n) for col, n in nulls.items() if n},
        )

    bad_cols = []
    for col in columns:
        converted = pd.to_numeric(df[col], errors="coerce")
        if converted.isnull().any():
            bad_cols.append(col)
        else:
            df[col] = converted
    if bad_cols:
        raise SchemaError("non-numeric values in numeric columns", columns=bad_cols)

    infinite_cols = [col for col in columns if not np.isfinite(df[col]).all()]
    if infinite_cols:
        raise SchemaError("non-finite values in numeric columns", columns=infinite_cols)

    labels = set(df[target].unique().tolist())
    if not labels <= {0, 1}:
        raise SchemaError(
            "target must be binary (0/1)", column=target, values=sorted(labels)
        )
    df[target] = df[target].astype(int)

    return df


def load_heart_dataset(csv_path: Path, columns: Sequence[str] = SCHEMA_COLUMNS) -> pd.DataFrame:
    """Read the heart CSV and validate it (see validate_dataset)."""
    logger.info("Loading dataset from %s", csv_path)
    df = pd.read_csv(csv_path, encoding="utf-8-sig")
    df = validate_dataset(df, columns=columns)
    logger.info("Loaded %d records with %d columns", len(df), df.shape[1])
    return df


def describe_dataset(df: pd.DataFrame, target: str = TARGET_COLUMN) -> dict:
    """Row count, class balance and label counts."""
    counts = df[target].value_counts().sort_index()
    return {
        "num_records": len(df),
        "feature_count": df.shape[1] - 1,
        "positive_rate": float(df[target].mean()) if len(df) else float("nan"),
        "label_counts": {int(k): int(v) for k, v in counts.items()},
    }


def split_features_target(
    df: pd.DataFrame, features: Sequence[str], target: str = TARGET_COLUMN
) -> tuple[pd.DataFrame, pd.Series]:
    return df[list(features)], df[target]


def make_train_test_split(
    df: pd.DataFrame,
    train_size: float = TRAIN_SIZE,
    random_state: int | None = RANDOM_STATE,
    target: str = TARGET_COLUMN,
) -> tuple[pd.DataFrame, pd.DataFrame]:
    """
    Stratified split by the outcome label. The train side gets
    floor(train_size * n) records; index labels are kept so that membership
    of every record can be traced back.
    """
    if train_size is None or math.isnan(train_size) or not 0.0 < train_size < 1.0:
        raise InvalidProportion(
            "train proportion must lie strictly between 0 and 1", train_size=train_size
        )
    if len(df) == 0:
        raise EmptyDataset("cannot split an empty dataset", num_records=0)

    y = df[target]
    label_counts = y.value_counts()
    n_train = int(math.floor(train_size * len(df)))
    n_test = len(df) - n_train
    n_classes = len(label_counts)
    if n_classes < 2:
        raise UnstratifiableDataset(
            "both outcome labels must be present",
            label_counts={int(k): int(v) for k, v in label_counts.items()},
        )
    if label_counts.min() < 2 or n_train < n_classes or n_test < n_classes:
        raise UnstratifiableDataset(
            "each label needs at least two records and a place on both sides",
            label_counts={int(k): int(v) for k, v in label_counts.items()},
            n_train=n_train,
            n_test=n_test,
        )

    train_idx, test_idx = train_test_split(
        df.index,
        train_size=n_train,
        test_size=n_test,
        random_state=random_state,
        stratify=y,
    )
    train_df, test_df = df.loc[train_idx], df.loc[test_idx]
    logger.info(
        "Split %d records into %d train / %d test (seed=%s)",
        len(df),
        len(train_df),
        len(test_df),
        random_state,
    )
    return train_df, test_df
