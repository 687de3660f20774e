"""Shared constants for the diabetes EDA pipeline."""

import numpy as np

# Required columns in the raw CSV (exact, case-sensitive names)
REQUIRED_COLUMNS = [
    "Pregnancies",
    "Glucose",
    "BloodPressure",
    "SkinThickness",
    "BMI",
    "DiabetesPedigreeFunction",
    "Age",
    "Outcome",
]

# Optional raw column; its presence is recorded as a schema capability
INSULIN_COLUMN = "Insulin"

# Target column name
TARGET_COLUMN = "Outcome"

# Derived columns
INSULIN_KNOWN_COLUMN = "InsulinKnown"
AGE_GROUP_COLUMN = "AgeGroup"

# Zero means "missing" here; records with a zero in any of these are dropped
SENTINEL_ZERO_COLUMNS = [
    "Glucose",
    "BloodPressure",
    "BMI",
]

# Zero means "missing" here; zeros are replaced with the raw column mean
MEAN_IMPUTE_COLUMNS = [
    "SkinThickness",
]

# Column set of a cleaned record, in output order
CLEAN_COLUMNS = [
    "Pregnancies",
    "Glucose",
    "BloodPressure",
    "SkinThickness",
    "BMI",
    "DiabetesPedigreeFunction",
    "Age",
    INSULIN_KNOWN_COLUMN,
    TARGET_COLUMN,
]

# Numeric features shown in distribution plots and outcome comparisons
FEATURE_COLUMNS = [
    "Pregnancies",
    "Glucose",
    "BloodPressure",
    "SkinThickness",
    "BMI",
    "DiabetesPedigreeFunction",
    "Age",
]

# Half-open, lower-inclusive age bins: [20,30) [30,40) ... [70,inf)
AGE_BINS = [20, 30, 40, 50, 60, 70, np.inf]
AGE_LABELS = ["20-29", "30-39", "40-49", "50-59", "60-69", "70+"]

OUTCOME_LABELS = {0: "No Diabetes", 1: "Diabetes"}
