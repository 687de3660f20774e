"""Tests for data validation."""

import pandas as pd
import pytest

from src.data.exceptions import InvalidSchemaError, MissingColumnError
from src.data.validate_input import DiabetesDataValidator, load_dataset


def _valid_frame():
    return pd.DataFrame({
        "Pregnancies": [1, 2],
        "Glucose": [100, 120],
        "BloodPressure": [70, 80],
        "SkinThickness": [20, 0],
        "Insulin": [80, 0],
        "BMI": [25.0, 30.0],
        "DiabetesPedigreeFunction": [0.5, 0.6],
        "Age": [35, 45],
        "Outcome": [0, 1],
    })


class TestDiabetesDataValidator:
    """Test data validation."""

    def test_valid_data_passes(self):
        """Test that valid data passes validation."""
        validator = DiabetesDataValidator()
        is_valid, errors = validator.validate_schema(_valid_frame())

        assert is_valid, f"Validation failed with errors: {errors}"
        assert len(errors) == 0

    def test_insulin_capability_detected(self):
        """Test that the optional Insulin column is reported as a capability."""
        validator = DiabetesDataValidator()

        assert validator.capabilities(_valid_frame()).has_insulin
        assert not validator.capabilities(_valid_frame().drop(columns=["Insulin"])).has_insulin

    def test_insulin_is_optional(self):
        """Test that data without Insulin passes validation."""
        df = _valid_frame().drop(columns=["Insulin"])

        validated, capabilities = DiabetesDataValidator().validate(df)

        assert not capabilities.has_insulin
        assert len(validated) == 2

    def test_validate_coerces_types(self):
        """Test that integer measurements are coerced to float."""
        validated, _ = DiabetesDataValidator().validate(_valid_frame())

        assert validated["Glucose"].dtype == "float64"
        assert validated["Insulin"].dtype == "float64"
        assert validated["Outcome"].dtype == "int64"

    def test_validate_leaves_input_unchanged(self):
        df = _valid_frame()
        original = df.copy()

        DiabetesDataValidator().validate(df)

        pd.testing.assert_frame_equal(df, original)

    def test_missing_columns_rejected(self):
        """Test that missing required columns are rejected."""
        df = pd.DataFrame({
            "Pregnancies": [1, 2],
            "Glucose": [100, 120],
        })

        validator = DiabetesDataValidator()
        is_valid, errors = validator.validate_schema(df)

        assert not is_valid
        assert len(errors) > 0
        assert "Missing required columns" in errors[0]

    def test_missing_columns_raise(self):
        """Test that validate raises MissingColumnError naming the columns."""
        df = _valid_frame().drop(columns=["BMI", "Outcome"])

        with pytest.raises(MissingColumnError) as exc_info:
            DiabetesDataValidator().validate(df)

        assert exc_info.value.columns == ["BMI", "Outcome"]

    def test_column_names_are_case_sensitive(self):
        """Test that a lowercase column name does not satisfy the schema."""
        df = _valid_frame().rename(columns={"Glucose": "glucose"})

        with pytest.raises(MissingColumnError):
            DiabetesDataValidator().validate(df)

    def test_non_numeric_column_rejected(self):
        """Test that text in a numeric column raises InvalidSchemaError."""
        df = _valid_frame()
        df["Glucose"] = ["high", "120"]

        with pytest.raises(InvalidSchemaError) as exc_info:
            DiabetesDataValidator().validate(df)

        assert "Column 'Glucose' is not numeric" in exc_info.value.errors

    def test_fractional_outcome_rejected(self):
        """Test that a fractional outcome is rejected instead of truncated to 0."""
        df = _valid_frame()
        df["Outcome"] = [0.0, 0.7]

        with pytest.raises(InvalidSchemaError) as exc_info:
            DiabetesDataValidator().validate(df)

        assert "Column 'Outcome' has non-integer values" in exc_info.value.errors

    def test_fractional_age_rejected(self):
        """Test that a fractional age is rejected."""
        df = _valid_frame()
        df["Age"] = [35.5, 45.0]

        is_valid, errors = DiabetesDataValidator().validate_schema(df)

        assert not is_valid
        assert errors == ["Column 'Age' has non-integer values"]

    def test_whole_float_values_accepted(self):
        """Test that whole numbers stored as floats still pass and become ints."""
        df = _valid_frame()
        df["Pregnancies"] = [1.0, 2.0]

        validated, _ = DiabetesDataValidator().validate(df)

        assert validated["Pregnancies"].tolist() == [1, 2]

    def test_negative_values_rejected(self):
        """Test that negative values are rejected."""
        df = _valid_frame()
        df["Pregnancies"] = [1, -1]

        validator = DiabetesDataValidator()
        is_valid, errors = validator.validate_schema(df)

        assert not is_valid
        with pytest.raises(InvalidSchemaError):
            validator.validate(df)

    def test_age_validation(self):
        """Test age validation (must be <= 120)."""
        df = _valid_frame()
        df["Age"] = [35, 150]

        validator = DiabetesDataValidator()
        is_valid, errors = validator.validate_schema(df)

        assert not is_valid

    def test_outcome_must_be_binary(self):
        """Test that an outcome outside {0, 1} is rejected."""
        df = _valid_frame()
        df["Outcome"] = [0, 2]

        is_valid, _ = DiabetesDataValidator().validate_schema(df)

        assert not is_valid

    def test_error_serializes(self):
        """Test that schema errors carry their details."""
        error = InvalidSchemaError(["Column 'Age' is not numeric"])

        payload = error.to_dict()

        assert payload["error"] == "InvalidSchemaError"
        assert payload["details"]["errors"] == ["Column 'Age' is not numeric"]

    def test_outlier_detection(self):
        """Test outlier detection returns dictionary."""
        df = pd.DataFrame({
            "Pregnancies": [1, 2, 3, 2, 1],
            "Glucose": [100.0, 110.0, 120.0, 105.0, 115.0],
            "BloodPressure": [70.0, 75.0, 80.0, 72.0, 78.0],
            "SkinThickness": [20.0, 25.0, 30.0, 22.0, 28.0],
            "BMI": [25.0, 27.0, 29.0, 26.0, 28.0],
            "DiabetesPedigreeFunction": [0.5, 0.6, 0.7, 0.55, 0.65],
            "Age": [35, 40, 45, 38, 42],
            "Outcome": [0, 1, 0, 1, 0],
        })

        validator = DiabetesDataValidator()
        outliers = validator.detect_outliers(df)

        assert outliers == {}


class TestLoadDataset:
    """Test CSV loading."""

    def test_loads_and_validates(self, tmp_path):
        path = tmp_path / "diabetes.csv"
        _valid_frame().to_csv(path, index=False)

        df, capabilities = load_dataset(path)

        assert len(df) == 2
        assert capabilities.has_insulin

    def test_header_only_file_yields_empty_dataset(self, tmp_path):
        """Test that a CSV with no records loads as an empty dataset."""
        path = tmp_path / "empty.csv"
        _valid_frame().iloc[0:0].to_csv(path, index=False)

        df, capabilities = load_dataset(path)

        assert df.empty
        assert capabilities.has_insulin

    def test_invalid_file_raises(self, tmp_path):
        path = tmp_path / "bad.csv"
        _valid_frame().drop(columns=["Age"]).to_csv(path, index=False)

        with pytest.raises(MissingColumnError):
            load_dataset(path)
