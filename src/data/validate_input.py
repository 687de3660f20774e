"""Data validation module for the diabetes EDA pipeline."""

import logging
from pathlib import Path
from typing import Dict, List, NamedTuple, Tuple

import pandas as pd
import pandera as pa
from pandera import Column, DataFrameSchema

from src.config.constants import INSULIN_COLUMN, REQUIRED_COLUMNS, TARGET_COLUMN
from src.data.exceptions import InvalidSchemaError, MissingColumnError

logger = logging.getLogger(__name__)


class SchemaCapabilities(NamedTuple):
    """Optional fields detected in the input schema."""

    has_insulin: bool


class DiabetesDataValidator:
    """Validates raw diabetes data before cleaning."""

    REQUIRED_COLUMNS = REQUIRED_COLUMNS
    INTEGER_COLUMNS = ["Pregnancies", "Age", TARGET_COLUMN]

    def __init__(self):
        """Initialize validator with schema."""
        self.schema = DataFrameSchema(
            {
                "Pregnancies": Column(int, checks=[pa.Check.ge(0)], nullable=False, coerce=True),
                "Glucose": Column(float, checks=[pa.Check.ge(0)], nullable=False, coerce=True),
                "BloodPressure": Column(float, checks=[pa.Check.ge(0)], nullable=False, coerce=True),
                "SkinThickness": Column(float, checks=[pa.Check.ge(0)], nullable=False, coerce=True),
                "BMI": Column(float, checks=[pa.Check.ge(0)], nullable=False, coerce=True),
                "DiabetesPedigreeFunction": Column(
                    float, checks=[pa.Check.ge(0)], nullable=False, coerce=True
                ),
                "Age": Column(
                    int, checks=[pa.Check.ge(0), pa.Check.le(120)], nullable=False, coerce=True
                ),
                TARGET_COLUMN: Column(int, checks=[pa.Check.isin([0, 1])], nullable=False, coerce=True),
            },
            strict=False,
        )
        self.insulin_column = Column(
            float, checks=[pa.Check.ge(0)], nullable=True, coerce=True, name=INSULIN_COLUMN
        )

    def capabilities(self, df: pd.DataFrame) -> SchemaCapabilities:
        """Detect which optional fields the input provides."""
        return SchemaCapabilities(has_insulin=INSULIN_COLUMN in df.columns)

    def _checked_columns(self, df: pd.DataFrame) -> List[str]:
        columns = list(self.REQUIRED_COLUMNS)
        if self.capabilities(df).has_insulin:
            columns.append(INSULIN_COLUMN)
        return columns

    def _schema_for(self, df: pd.DataFrame) -> DataFrameSchema:
        if self.capabilities(df).has_insulin:
            return self.schema.add_columns({INSULIN_COLUMN: self.insulin_column})
        return self.schema

    def _non_numeric_columns(self, df: pd.DataFrame) -> List[str]:
        """Columns holding values that are not numbers (all-null columns pass)."""
        bad = []
        for col in self._checked_columns(df):
            values = df[col].dropna()
            if values.empty:
                continue
            if not pd.api.types.is_numeric_dtype(values) or pd.api.types.is_bool_dtype(values):
                bad.append(col)
        return bad

    def _fractional_columns(self, df: pd.DataFrame) -> List[str]:
        """Integer-typed columns holding values with a fractional part."""
        bad = []
        for col in self.INTEGER_COLUMNS:
            values = df[col].dropna()
            if (values % 1 != 0).any():
                bad.append(col)
        return bad

    def validate_schema(self, df: pd.DataFrame) -> Tuple[bool, List[str]]:
        """Validate dataframe schema against required columns and data types.

        Checks for:
        - Missing required columns
        - Non-numeric values in numeric columns
        - Fractional values in integer columns (Pregnancies, Age, Outcome)
        - Value constraints (non-negative values, age <= 120, binary outcome)

        Args:
            df: Input dataframe

        Returns:
            Tuple of (is_valid, error_messages) where error_messages is a list
            of validation error descriptions if validation fails
        """
        errors = []

        missing_cols = set(self.REQUIRED_COLUMNS) - set(df.columns)
        if missing_cols:
            errors.append(f"Missing required columns: {sorted(missing_cols)}")
            return False, errors

        non_numeric = self._non_numeric_columns(df)
        if non_numeric:
            errors.extend(f"Column '{col}' is not numeric" for col in non_numeric)
            return False, errors

        # Coercion to int would truncate these silently
        fractional = self._fractional_columns(df)
        if fractional:
            errors.extend(f"Column '{col}' has non-integer values" for col in fractional)
            return False, errors

        try:
            self._schema_for(df).validate(df[self._checked_columns(df)], lazy=True)
            return True, []
        except pa.errors.SchemaErrors as e:
            for _, row in e.failure_cases.iterrows():
                errors.append(
                    f"Column '{row['column']}' failed check '{row['check']}' "
                    f"at index {row['index']}"
                )
            return False, errors

    def validate(self, df: pd.DataFrame) -> Tuple[pd.DataFrame, SchemaCapabilities]:
        """Validate and coerce a raw dataframe, raising on the first problem found.

        Args:
            df: Raw input dataframe (left unchanged)

        Returns:
            Tuple of (coerced copy, detected capabilities)

        Raises:
            MissingColumnError: a required column is absent
            InvalidSchemaError: a column is non-numeric or violates a value check
        """
        missing_cols = set(self.REQUIRED_COLUMNS) - set(df.columns)
        if missing_cols:
            raise MissingColumnError(list(missing_cols))

        is_valid, errors = self.validate_schema(df)
        if not is_valid:
            raise InvalidSchemaError(errors)

        capabilities = self.capabilities(df)
        validated = self._schema_for(df).validate(df.copy())
        if not capabilities.has_insulin:
            logger.info(f"No '{INSULIN_COLUMN}' column in input; insulin-known flag will be missing")

        return validated, capabilities

    def detect_outliers(self, df: pd.DataFrame) -> Dict[str, List[int]]:
        """Detect outliers using z-score method.

        Args:
            df: Input dataframe

        Returns:
            Dictionary mapping column names to list of outlier indices
        """
        outliers = {}
        z_threshold = 3.0

        for col in self.REQUIRED_COLUMNS:
            if col == TARGET_COLUMN:
                continue
            if col in df.columns and len(df) > 3:
                mean = df[col].mean()
                std = df[col].std()
                if std > 0:
                    z_scores = ((df[col] - mean) / std).abs()
                    outlier_indices = df[z_scores > z_threshold].index.tolist()
                    if outlier_indices:
                        outliers[col] = outlier_indices

        return outliers


def load_dataset(file_path: Path) -> Tuple[pd.DataFrame, SchemaCapabilities]:
    """Read a raw CSV file and validate it.

    Args:
        file_path: Path to input CSV file

    Returns:
        Tuple of (validated dataframe, detected capabilities)
    """
    df = pd.read_csv(file_path)
    logger.info(f"Loaded {len(df)} records from {file_path}")

    validator = DiabetesDataValidator()
    validated, capabilities = validator.validate(df)

    outliers = validator.detect_outliers(validated)
    if outliers:
        counts = {col: len(idx) for col, idx in outliers.items()}
        logger.warning(f"Outliers detected (|z| > 3): {counts}")

    return validated, capabilities
