"""Static charts for the diabetes EDA report."""

import logging
from pathlib import Path
from typing import Sequence

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from src.config.constants import AGE_GROUP_COLUMN, OUTCOME_LABELS, TARGET_COLUMN

logger = logging.getLogger(__name__)

sns.set_palette("husl")


def _grid(n_panels: int, n_cols: int = 2, panel_size=(7, 4)):
    n_rows = max(1, int(np.ceil(n_panels / n_cols)))
    fig, axes = plt.subplots(
        n_rows, n_cols, figsize=(panel_size[0] * n_cols, panel_size[1] * n_rows)
    )
    axes = np.atleast_1d(axes).flatten()
    for ax in axes[n_panels:]:
        ax.axis("off")
    return fig, axes


def _save(fig, output_path: Path, dpi: int) -> Path:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.tight_layout()
    fig.savefig(output_path, dpi=dpi, bbox_inches="tight")
    plt.close(fig)
    logger.info(f"Plot saved to: {output_path}")
    return output_path


def outcome_counts(df: pd.DataFrame) -> pd.Series:
    """Record count per observed outcome, indexed by its display label."""
    counts = df[TARGET_COLUMN].value_counts().sort_index()
    counts.index = [OUTCOME_LABELS.get(key, str(key)) for key in counts.index]
    return counts


def plot_outcome_pie(df: pd.DataFrame, output_path: Path, dpi: int = 150) -> Path:
    """Pie chart of the outcome class balance.

    Args:
        df: Cleaned dataframe
        output_path: Path to save plot
        dpi: Output resolution

    Returns:
        Path of the saved plot
    """
    counts = outcome_counts(df)

    fig, ax = plt.subplots(figsize=(6, 6))
    if counts.sum() > 0:
        ax.pie(counts.values, labels=counts.index.tolist(), autopct="%1.1f%%", startangle=90)
    else:
        ax.text(0.5, 0.5, "No records", ha="center", va="center")
    ax.set_title("Diabetes Outcome Distribution", fontsize=14, fontweight="bold")
    ax.axis("equal")

    return _save(fig, output_path, dpi)


def plot_histograms(
    df: pd.DataFrame, columns: Sequence[str], output_path: Path, dpi: int = 150
) -> Path:
    """Histogram per feature with mean and median markers."""
    fig, axes = _grid(len(columns))

    for ax, feature in zip(axes, columns):
        data = df[feature].dropna().astype("float64")
        ax.hist(data, bins=30, alpha=0.7, edgecolor="black")
        ax.set_xlabel(feature)
        ax.set_ylabel("Frequency")
        ax.set_title(f"{feature} Distribution")

        if not data.empty:
            mean_val = data.mean()
            median_val = data.median()
            ax.axvline(mean_val, color="red", linestyle="--", linewidth=2, label=f"Mean: {mean_val:.1f}")
            ax.axvline(
                median_val, color="green", linestyle="--", linewidth=2, label=f"Median: {median_val:.1f}"
            )
            ax.legend()

    return _save(fig, output_path, dpi)


def plot_correlation_heatmap(corr: pd.DataFrame, output_path: Path, dpi: int = 150) -> Path:
    """Annotated heatmap of a correlation matrix."""
    fig, ax = plt.subplots(figsize=(10, 8))
    if not corr.empty:
        sns.heatmap(
            corr,
            annot=True,
            fmt=".2f",
            cmap="coolwarm",
            center=0,
            square=True,
            linewidths=1,
            ax=ax,
            vmin=-1,
            vmax=1,
        )
    ax.set_title("Feature Correlation Matrix", fontsize=14, fontweight="bold")

    return _save(fig, output_path, dpi)


def plot_boxplots_by_outcome(
    df: pd.DataFrame, columns: Sequence[str], output_path: Path, dpi: int = 150
) -> Path:
    """Box plot per feature, split by diabetes status."""
    fig, axes = _grid(len(columns))
    plot_df = df.assign(**{"Status": df[TARGET_COLUMN].map(OUTCOME_LABELS)})
    order = [label for label in OUTCOME_LABELS.values() if label in set(plot_df["Status"])]

    for ax, feature in zip(axes, columns):
        if order:
            sns.boxplot(data=plot_df, x="Status", y=feature, order=order, ax=ax)
        ax.set_xlabel("Outcome")
        ax.set_ylabel(feature)
        ax.set_title(f"{feature} by Diabetes Status")

    return _save(fig, output_path, dpi)


def plot_density_by_outcome(
    df: pd.DataFrame, columns: Sequence[str], output_path: Path, dpi: int = 150
) -> Path:
    """Kernel density estimate per feature, one curve per outcome class."""
    fig, axes = _grid(len(columns))

    for ax, feature in zip(axes, columns):
        for outcome, label in OUTCOME_LABELS.items():
            data = df.loc[df[TARGET_COLUMN] == outcome, feature].dropna().astype("float64")
            # KDE needs at least two distinct values
            if data.nunique() > 1:
                sns.kdeplot(x=data, ax=ax, fill=True, alpha=0.3, label=label, warn_singular=False)
        ax.set_xlabel(feature)
        ax.set_ylabel("Density")
        ax.set_title(f"{feature} Density by Diabetes Status")
        if ax.get_legend_handles_labels()[0]:
            ax.legend()

    return _save(fig, output_path, dpi)


def plot_outcome_rate_by_age_group(
    rates: pd.DataFrame, overall_rate: float, output_path: Path, dpi: int = 150
) -> Path:
    """Bar chart of diabetes rate per age group.

    Args:
        rates: Output of ``outcome_rate_by(df, "AgeGroup")``
        overall_rate: Diabetes rate over the whole cleaned dataset
        output_path: Path to save plot
        dpi: Output resolution
    """
    percentages = rates["diabetes_rate"].fillna(0) * 100

    fig, ax = plt.subplots(figsize=(8, 5))
    ax.bar(range(len(percentages)), percentages.values, color="skyblue", edgecolor="black")
    ax.set_xticks(range(len(percentages)))
    ax.set_xticklabels([str(label) for label in percentages.index])
    ax.set_ylabel("Diabetes Rate (%)")
    ax.set_xlabel(AGE_GROUP_COLUMN)
    ax.set_title("Diabetes Rate by Age Group")
    if not np.isnan(overall_rate):
        ax.axhline(y=overall_rate * 100, color="red", linestyle="--", label="Overall Rate")
        ax.legend()

    return _save(fig, output_path, dpi)
