"""Descriptive statistics over cleaned diabetes records."""

import logging
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd

from src.config.constants import TARGET_COLUMN
from src.data.exceptions import InvalidSchemaError, MissingColumnError

logger = logging.getLogger(__name__)

SUMMARY_STATS = ["mean", "median", "std", "min", "max", "count"]


def _require_columns(df: pd.DataFrame, columns: Sequence[str]) -> None:
    missing = [col for col in columns if col not in df.columns]
    if missing:
        raise MissingColumnError(missing)


def _group_keys(groups: pd.Series) -> list:
    """Category order for categoricals, ascending natural order otherwise."""
    if isinstance(groups.dtype, pd.CategoricalDtype):
        return list(groups.cat.categories)
    return sorted(groups.dropna().unique().tolist())


def summarize_by(
    df: pd.DataFrame,
    group_column: str,
    value_column: str,
    keys: Optional[Sequence] = None,
) -> pd.DataFrame:
    """Compute per-group descriptive statistics for one numeric field.

    Missing values in ``value_column`` are ignored; ``count`` is the number of
    non-missing values. Standard deviation is the sample (n-1) estimate.
    Groups with no eligible values get count 0 and NaN for every other
    statistic. Records with a missing group label are left out.

    Args:
        df: Input dataframe (left unchanged)
        group_column: Grouping key column (e.g. AgeGroup, Outcome)
        value_column: Numeric column to summarize
        keys: Fixed key order; unobserved keys still get a row. Defaults to
            category order for categorical columns, otherwise sorted keys.

    Returns:
        DataFrame indexed by group key with columns mean, median, std, min,
        max, count
    """
    _require_columns(df, [group_column, value_column])

    values = df[value_column]
    if not pd.api.types.is_numeric_dtype(values) or pd.api.types.is_bool_dtype(values):
        raise InvalidSchemaError([f"Column '{value_column}' is not numeric"])

    groups = df[group_column]
    if keys is None:
        keys = _group_keys(groups)

    table = (
        values.astype("float64")
        .groupby(groups, observed=True, sort=True)
        .agg(SUMMARY_STATS)
        .reindex(list(keys))
    )
    table.index.name = group_column
    table["count"] = table["count"].fillna(0).astype(int)

    empty = [key for key, count in table["count"].items() if count == 0]
    if empty:
        logger.info(f"No '{value_column}' values for {group_column} group(s) {empty}")

    return table[SUMMARY_STATS]


def summarize_fields(
    df: pd.DataFrame,
    group_column: str,
    value_columns: Sequence[str],
    keys: Optional[Sequence] = None,
) -> pd.DataFrame:
    """Stack ``summarize_by`` tables for several fields.

    Returns:
        DataFrame with a (field, group key) MultiIndex
    """
    tables = {col: summarize_by(df, group_column, col, keys=keys) for col in value_columns}
    if not tables:
        return pd.DataFrame(columns=SUMMARY_STATS)
    return pd.concat(tables, names=["field", group_column])


def describe_dataset(df: pd.DataFrame) -> pd.DataFrame:
    """Overall statistical summary of the numeric columns.

    Adds skewness, kurtosis and zero counts to ``describe()``.
    """
    numeric = df.select_dtypes(include="number")
    summary_stats = numeric.describe().T

    summary_stats["skewness"] = numeric.skew()
    summary_stats["kurtosis"] = numeric.kurtosis()

    summary_stats["zeros"] = (numeric == 0).sum()
    summary_stats["zeros_pct"] = (numeric == 0).mean() * 100

    return summary_stats


def missing_value_summary(df: pd.DataFrame, columns: Optional[List[str]] = None) -> pd.DataFrame:
    """Explicit nulls and sentinel zeros per column.

    Args:
        df: Raw or cleaned dataframe
        columns: Columns where a zero stands for a missing measurement

    Returns:
        DataFrame indexed by column with null and zero counts
    """
    columns = columns or []
    null_counts = df.isnull().sum()
    zero_counts = (df == 0).sum()

    summary = pd.DataFrame(
        {
            "nulls": null_counts,
            "zeros": zero_counts,
        }
    )
    summary["zeros_pct"] = np.nan
    for col in columns:
        if col in df.columns and len(df) > 0:
            summary.loc[col, "zeros_pct"] = (df[col] == 0).mean() * 100

    return summary


def outcome_rate_by(df: pd.DataFrame, group_column: str) -> pd.DataFrame:
    """Diabetes rate and sample size per group."""
    _require_columns(df, [group_column, TARGET_COLUMN])

    groups = df[group_column]
    rates = (
        df[TARGET_COLUMN]
        .astype("float64")
        .groupby(groups, observed=True, sort=True)
        .agg(["mean", "count"])
        .reindex(_group_keys(groups))
    )
    rates.index.name = group_column
    rates.columns = ["diabetes_rate", "sample_size"]
    rates["sample_size"] = rates["sample_size"].fillna(0).astype(int)
    return rates


def compare_by_outcome(df: pd.DataFrame, features: Sequence[str]) -> pd.DataFrame:
    """Compare feature means between outcome classes.

    Returns:
        DataFrame indexed by feature, sorted by relative difference (descending)
    """
    _require_columns(df, list(features) + [TARGET_COLUMN])

    comparison = pd.DataFrame(
        index=pd.Index(list(features), name="feature"),
        columns=["no_diabetes_mean", "diabetes_mean", "difference", "difference_pct"],
        dtype="float64",
    )

    for feature in features:
        no_diabetes = df.loc[df[TARGET_COLUMN] == 0, feature].astype("float64").mean()
        has_diabetes = df.loc[df[TARGET_COLUMN] == 1, feature].astype("float64").mean()

        comparison.loc[feature, "no_diabetes_mean"] = no_diabetes
        comparison.loc[feature, "diabetes_mean"] = has_diabetes
        comparison.loc[feature, "difference"] = has_diabetes - no_diabetes
        if no_diabetes:
            comparison.loc[feature, "difference_pct"] = (has_diabetes - no_diabetes) / no_diabetes * 100

    return comparison.sort_values("difference_pct", ascending=False)


def correlation_matrix(df: pd.DataFrame, columns: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """Pearson correlation over a numeric projection of the dataset.

    Builds its own projection, so the input dataframe is never modified.
    """
    if columns is None:
        projection = df.select_dtypes(include="number")
    else:
        _require_columns(df, columns)
        projection = df[list(columns)]

    projection = projection.astype("float64")
    # Constant or all-missing columns have no defined correlation
    projection = projection.loc[:, projection.nunique() > 1]

    return projection.corr()
