"""Tests for grouped aggregation and descriptive statistics."""

import numpy as np
import pandas as pd
import pytest

from src.analysis.summary import (
    SUMMARY_STATS,
    compare_by_outcome,
    correlation_matrix,
    describe_dataset,
    missing_value_summary,
    outcome_rate_by,
    summarize_by,
    summarize_fields,
)
from src.config.constants import AGE_LABELS
from src.data.exceptions import InvalidSchemaError, MissingColumnError
from src.features.grouping import assign_age_groups


def _grouped_frame():
    df = pd.DataFrame({
        "Age": [25, 27, 35, 72],
        "Glucose": [100.0, 120.0, 140.0, 160.0],
        "BMI": [22.0, 24.0, np.nan, 30.0],
        "Outcome": [0, 0, 1, 1],
    })
    return assign_age_groups(df)


class TestSummarizeBy:
    """Test grouped aggregation stage."""

    def test_statistics_per_age_group(self):
        """Test mean, median, sample std, min, max and count."""
        table = summarize_by(_grouped_frame(), "AgeGroup", "Glucose")

        row = table.loc["20-29"]
        assert row["mean"] == 110.0
        assert row["median"] == 110.0
        assert row["std"] == pytest.approx(np.std([100.0, 120.0], ddof=1))
        assert row["min"] == 100.0
        assert row["max"] == 120.0
        assert row["count"] == 2

    def test_column_order(self):
        table = summarize_by(_grouped_frame(), "AgeGroup", "Glucose")

        assert table.columns.tolist() == SUMMARY_STATS

    def test_age_group_order_is_category_order(self):
        """Test that every age label is present in fixed order."""
        table = summarize_by(_grouped_frame(), "AgeGroup", "Glucose")

        assert [str(key) for key in table.index] == AGE_LABELS

    def test_empty_group_yields_nan(self):
        """Test count 0 and NaN statistics for a group with no records."""
        table = summarize_by(_grouped_frame(), "AgeGroup", "Glucose")

        row = table.loc["40-49"]
        assert row["count"] == 0
        for stat in ["mean", "median", "std", "min", "max"]:
            assert np.isnan(row[stat])

    def test_single_record_group_has_nan_std(self):
        table = summarize_by(_grouped_frame(), "AgeGroup", "Glucose")

        assert table.loc["30-39", "count"] == 1
        assert np.isnan(table.loc["30-39", "std"])

    def test_missing_values_ignored(self):
        """Test that missing values do not count toward any statistic."""
        table = summarize_by(_grouped_frame(), "Outcome", "BMI")

        assert table.loc[1, "count"] == 1
        assert table.loc[1, "mean"] == 30.0

    def test_natural_sort_without_keys(self):
        df = pd.DataFrame({"Outcome": [1, 0, 1], "Glucose": [150.0, 90.0, 170.0]})

        table = summarize_by(df, "Outcome", "Glucose")

        assert table.index.tolist() == [0, 1]

    def test_fixed_keys_add_unobserved_groups(self):
        """Test that requested keys appear even when absent from the data."""
        df = pd.DataFrame({"Outcome": [0, 0], "Glucose": [90.0, 110.0]})

        table = summarize_by(df, "Outcome", "Glucose", keys=[0, 1])

        assert table.index.tolist() == [0, 1]
        assert table.loc[1, "count"] == 0
        assert np.isnan(table.loc[1, "mean"])

    def test_empty_dataset(self):
        """Test aggregation over a dataset with zero rows."""
        df = assign_age_groups(pd.DataFrame({
            "Age": pd.Series([], dtype="float64"),
            "Glucose": pd.Series([], dtype="float64"),
        }))

        table = summarize_by(df, "AgeGroup", "Glucose")

        assert len(table) == len(AGE_LABELS)
        assert (table["count"] == 0).all()
        assert table["mean"].isna().all()

    def test_unclassified_records_excluded(self):
        df = assign_age_groups(pd.DataFrame({"Age": [18, 25], "Glucose": [90.0, 110.0]}))

        table = summarize_by(df, "AgeGroup", "Glucose")

        assert table["count"].sum() == 1

    def test_repeated_calls_identical(self):
        """Test that aggregation is repeatable and leaves its input unchanged."""
        df = _grouped_frame()
        original = df.copy()

        first = summarize_by(df, "AgeGroup", "Glucose")
        second = summarize_by(df, "AgeGroup", "Glucose")

        pd.testing.assert_frame_equal(first, second)
        pd.testing.assert_frame_equal(df, original)

    def test_missing_column(self):
        with pytest.raises(MissingColumnError):
            summarize_by(_grouped_frame(), "AgeGroup", "Insulin")

    def test_non_numeric_field(self):
        df = pd.DataFrame({"Outcome": [0, 1], "Name": ["a", "b"]})

        with pytest.raises(InvalidSchemaError):
            summarize_by(df, "Outcome", "Name")


class TestSummarizeFields:
    """Test stacked summary tables."""

    def test_multi_field_table(self):
        table = summarize_fields(_grouped_frame(), "Outcome", ["Glucose", "BMI"], keys=[0, 1])

        assert table.index.names == ["field", "Outcome"]
        assert table.loc[("Glucose", 0), "mean"] == 110.0
        assert table.loc[("BMI", 1), "count"] == 1


class TestDescriptiveTables:
    """Test companion descriptive tables."""

    def test_describe_dataset(self):
        summary = describe_dataset(_grouped_frame())

        assert "AgeGroup" not in summary.index
        for col in ["mean", "std", "skewness", "kurtosis", "zeros", "zeros_pct"]:
            assert col in summary.columns
        assert summary.loc["Outcome", "zeros"] == 2

    def test_missing_value_summary(self):
        df = pd.DataFrame({"Glucose": [0.0, 120.0, np.nan, 0.0], "Outcome": [0, 1, 0, 1]})

        summary = missing_value_summary(df, ["Glucose"])

        assert summary.loc["Glucose", "nulls"] == 1
        assert summary.loc["Glucose", "zeros"] == 2
        assert summary.loc["Glucose", "zeros_pct"] == 50.0
        assert np.isnan(summary.loc["Outcome", "zeros_pct"])

    def test_outcome_rate_by_age_group(self):
        rates = outcome_rate_by(_grouped_frame(), "AgeGroup")

        assert rates.loc["20-29", "diabetes_rate"] == 0.0
        assert rates.loc["70+", "diabetes_rate"] == 1.0
        assert rates.loc["40-49", "sample_size"] == 0

    def test_compare_by_outcome(self):
        comparison = compare_by_outcome(_grouped_frame(), ["Glucose", "Age"])

        assert comparison.loc["Glucose", "no_diabetes_mean"] == 110.0
        assert comparison.loc["Glucose", "diabetes_mean"] == 150.0
        assert comparison.loc["Glucose", "difference"] == 40.0
        # Age: 26 vs 53.5 is the larger relative gap
        assert comparison.index[0] == "Age"


class TestCorrelationMatrix:
    """Test the correlation-only projection."""

    def test_excludes_categorical_and_constant_columns(self):
        df = _grouped_frame()
        df["Constant"] = 1.0

        corr = correlation_matrix(df)

        assert "AgeGroup" not in corr.columns
        assert "Constant" not in corr.columns
        assert corr.loc["Glucose", "Glucose"] == pytest.approx(1.0)

    def test_input_not_mutated(self):
        df = _grouped_frame()
        original = df.copy()

        correlation_matrix(df, ["Glucose", "Age"])

        pd.testing.assert_frame_equal(df, original)
