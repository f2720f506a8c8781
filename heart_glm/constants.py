from __future__ import annotations

"""
Column schema and run defaults for the heart-disease GLM experiment.
"""

FEATURE_COLUMNS = [
    "age",
    "sex",
    "cp",
    "trestbps",
    "chol",
    "fbs",
    "restecg",
    "thalach",
    "exang",
    "oldpeak",
    "slope",
    "ca",
    "thal",
]
TARGET_COLUMN = "target"
SCHEMA_COLUMNS = FEATURE_COLUMNS + [TARGET_COLUMN]

COLUMN_LABELS = {
    "age": "Age (years)",
    "sex": "Sex (1 = male)",
    "cp": "Chest pain type",
    "trestbps": "Resting blood pressure",
    "chol": "Serum cholesterol",
    "fbs": "Fasting blood sugar > 120",
    "restecg": "Resting ECG result",
    "thalach": "Max heart rate achieved",
    "exang": "Exercise-induced angina",
    "oldpeak": "ST depression (oldpeak)",
    "slope": "Slope of peak ST segment",
    "ca": "Major vessels (ca)",
    "thal": "Thalassemia code",
    "target": "Heart disease (1 = present)",
}

TRAIN_SIZE = 0.7
RANDOM_STATE = 42

# IRLS controls; 25 iterations mirrors the usual GLM default
MAX_ITER = 25
TOL = 1e-8

THRESHOLD = 0.5
# Label 0 (no disease) is the positive class for sensitivity/specificity
POSITIVE_LABEL = 0
