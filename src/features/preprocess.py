"""Cleaning stage for the diabetes EDA pipeline."""

import logging

import pandas as pd
from sklearn.base import BaseEstimator, TransformerMixin
from sklearn.pipeline import Pipeline

from src.config.constants import (
    CLEAN_COLUMNS,
    INSULIN_COLUMN,
    INSULIN_KNOWN_COLUMN,
    MEAN_IMPUTE_COLUMNS,
    SENTINEL_ZERO_COLUMNS,
)
from src.data.exceptions import InvalidSchemaError, MissingColumnError
from src.data.validate_input import DiabetesDataValidator

logger = logging.getLogger(__name__)


class ZeroImputer(BaseEstimator, TransformerMixin):
    """Replace zero values with a column statistic learned at fit time."""

    def __init__(self, columns_to_impute=None, strategy="mean", ignore_zeros=False):
        """Initialize imputer.

        Args:
            columns_to_impute: List of column names to impute zeros
            strategy: "mean" or "median"
            ignore_zeros: Compute the statistic over non-zero values only.
                By default zeros take part, so the statistic is that of the
                column exactly as passed to ``fit``.
        """
        self.columns_to_impute = columns_to_impute
        self.strategy = strategy
        self.ignore_zeros = ignore_zeros

    def fit(self, X, y=None):
        """Fit imputer by calculating the fill statistic per column.

        Args:
            X: Input dataframe
            y: Target (unused)

        Returns:
            self
        """
        if self.strategy not in ("mean", "median"):
            raise ValueError(f"Unknown strategy: {self.strategy!r}")

        columns = self.columns_to_impute or []
        missing = [col for col in columns if col not in X.columns]
        if missing:
            raise MissingColumnError(missing)

        self.statistics_ = {}
        for col in columns:
            values = X[col]
            if self.ignore_zeros:
                values = values[values != 0]
            # NaN over zero rows; an empty column has no zeros to replace
            self.statistics_[col] = getattr(values, self.strategy)()

        return self

    def transform(self, X):
        """Transform by replacing zeros with the fitted statistic.

        Args:
            X: Input dataframe

        Returns:
            New dataframe with zeros replaced

        Raises:
            InvalidSchemaError: zeros are present but the fitted statistic is
                zero or missing, so no zero could be replaced
        """
        X_df = X.copy()

        for col, value in self.statistics_.items():
            zero_mask = X_df[col] == 0
            if not zero_mask.any():
                continue
            if pd.isna(value) or value == 0:
                raise InvalidSchemaError(
                    [f"Column '{col}' has no non-zero values to impute its zeros from"]
                )
            X_df[col] = X_df[col].astype(float)
            X_df.loc[zero_mask, col] = value
            logger.info(f"Imputed {int(zero_mask.sum())} zero(s) in '{col}' with {value:.4f}")

        return X_df


class SentinelZeroFilter(BaseEstimator, TransformerMixin):
    """Drop records holding a zero in any column where zero means "missing"."""

    def __init__(self, columns=None):
        self.columns = columns

    def fit(self, X, y=None):
        return self

    def transform(self, X):
        """Return the records with no sentinel zero, keeping the original index."""
        columns = self.columns if self.columns is not None else SENTINEL_ZERO_COLUMNS
        missing = [col for col in columns if col not in X.columns]
        if missing:
            raise MissingColumnError(missing)

        has_sentinel = (X[columns] == 0).any(axis=1)
        if has_sentinel.any():
            logger.info(f"Dropped {int(has_sentinel.sum())} record(s) with zero in {columns}")

        return X.loc[~has_sentinel].copy()


class InsulinKnownFlagger(BaseEstimator, TransformerMixin):
    """Derive the insulin-known flag.

    1 where Insulin is present and non-zero, 0 where it is zero. The flag is
    missing for every record when the source has no Insulin column, and for
    individual records whose Insulin value is missing.
    """

    def __init__(self, has_insulin=True):
        self.has_insulin = has_insulin

    def fit(self, X, y=None):
        return self

    def transform(self, X):
        X_df = X.copy()

        if not self.has_insulin:
            X_df[INSULIN_KNOWN_COLUMN] = pd.Series(pd.NA, index=X_df.index, dtype="Int64")
            return X_df

        if INSULIN_COLUMN not in X_df.columns:
            raise MissingColumnError([INSULIN_COLUMN])

        insulin = X_df[INSULIN_COLUMN]
        X_df[INSULIN_KNOWN_COLUMN] = (insulin != 0).astype("Int64").mask(insulin.isna())
        return X_df


class ColumnProjector(BaseEstimator, TransformerMixin):
    """Project records down to a fixed, ordered column set."""

    def __init__(self, columns=None):
        self.columns = columns

    def fit(self, X, y=None):
        return self

    def transform(self, X):
        columns = self.columns if self.columns is not None else CLEAN_COLUMNS
        missing = [col for col in columns if col not in X.columns]
        if missing:
            raise MissingColumnError(missing)
        return X[columns].copy()


def create_cleaning_pipeline(has_insulin=True, impute_columns=None, sentinel_columns=None):
    """Create the cleaning pipeline.

    The imputer runs first so the fill mean is taken over the raw column,
    before any record is dropped for a sentinel zero.

    Args:
        has_insulin: Whether the source provides an Insulin column
        impute_columns: Columns where zeros are replaced with the mean
        sentinel_columns: Columns where a zero drops the record

    Returns:
        sklearn Pipeline
    """
    if impute_columns is None:
        impute_columns = MEAN_IMPUTE_COLUMNS
    if sentinel_columns is None:
        sentinel_columns = SENTINEL_ZERO_COLUMNS

    pipeline = Pipeline(
        [
            ("zero_imputer", ZeroImputer(columns_to_impute=impute_columns, strategy="mean")),
            ("sentinel_filter", SentinelZeroFilter(columns=sentinel_columns)),
            ("insulin_flag", InsulinKnownFlagger(has_insulin=has_insulin)),
            ("projector", ColumnProjector(columns=CLEAN_COLUMNS)),
        ]
    )

    return pipeline


def clean_dataset(df, capabilities=None):
    """Run the cleaning stage on a validated dataframe.

    Args:
        df: Validated raw dataframe (left unchanged)
        capabilities: SchemaCapabilities from validation; detected from the
            columns when omitted

    Returns:
        Cleaned dataframe with the original row index
    """
    if capabilities is None:
        capabilities = DiabetesDataValidator().capabilities(df)

    pipeline = create_cleaning_pipeline(has_insulin=capabilities.has_insulin)
    cleaned = pipeline.fit_transform(df)

    logger.info(f"Cleaning kept {len(cleaned)} of {len(df)} records")
    return cleaned


def impute_fill_values(df):
    """Return the fill value the cleaning stage would use for each imputed column."""
    imputer = ZeroImputer(columns_to_impute=MEAN_IMPUTE_COLUMNS, strategy="mean").fit(df)
    return {col: float(value) for col, value in imputer.statistics_.items()}
