"""EDA report for the Pima Indians diabetes dataset."""

import argparse
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

import pandas as pd

from src.analysis.summary import (
    compare_by_outcome,
    correlation_matrix,
    describe_dataset,
    missing_value_summary,
    outcome_rate_by,
    summarize_fields,
)
from src.config.constants import (
    AGE_GROUP_COLUMN,
    FEATURE_COLUMNS,
    INSULIN_COLUMN,
    MEAN_IMPUTE_COLUMNS,
    SENTINEL_ZERO_COLUMNS,
    TARGET_COLUMN,
)
from src.config.settings import load_config
from src.data.exceptions import DiabetesDataError
from src.data.validate_input import SchemaCapabilities, load_dataset
from src.features.grouping import (
    apply_recode_rules,
    assign_age_groups,
    count_recoded,
    recode_rules_from_config,
    subset_by_age_group,
)
from src.features.preprocess import clean_dataset, impute_fill_values
from src.visualization import plots

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

SENIOR_AGE_GROUP = "70+"


def run_analysis(raw_df: pd.DataFrame, capabilities: SchemaCapabilities, config: dict) -> dict:
    """Run the cleaning, grouping and summary stages in memory.

    Every stage returns a new dataframe, so the entries of the result are
    independent views of the same cleaned data.

    Args:
        raw_df: Validated raw dataframe
        capabilities: Optional fields detected at validation time
        config: Report configuration

    Returns:
        Dictionary of dataframes and summary tables
    """
    sentinel_like = SENTINEL_ZERO_COLUMNS + MEAN_IMPUTE_COLUMNS
    if capabilities.has_insulin:
        sentinel_like = sentinel_like + [INSULIN_COLUMN]

    cleaned = clean_dataset(raw_df, capabilities)
    grouped = assign_age_groups(cleaned)
    rules = recode_rules_from_config(config)
    patched = apply_recode_rules(grouped, rules)

    fields = config["analysis"]["summary_fields"]
    outcome_keys = config["analysis"].get("outcome_keys")

    return {
        "raw_missing": missing_value_summary(raw_df, sentinel_like),
        "fill_values": impute_fill_values(raw_df),
        "cleaned": patched,
        "seniors": subset_by_age_group(patched, [SENIOR_AGE_GROUP]),
        "recoded_values": count_recoded(grouped, patched, rules),
        "overview": describe_dataset(patched),
        "age_group_summary": summarize_fields(patched, AGE_GROUP_COLUMN, fields),
        "outcome_summary": summarize_fields(patched, TARGET_COLUMN, fields, keys=outcome_keys),
        "age_group_rates": outcome_rate_by(patched, AGE_GROUP_COLUMN),
        "outcome_comparison": compare_by_outcome(patched, FEATURE_COLUMNS),
        "correlation": correlation_matrix(patched),
    }


def generate_plots(results: dict, output_dir: Path, dpi: int = 150) -> list:
    """Render every report chart into ``output_dir``.

    Returns:
        List of saved plot paths
    """
    cleaned = results["cleaned"]
    overall_rate = float(cleaned[TARGET_COLUMN].mean()) if len(cleaned) else float("nan")

    return [
        plots.plot_outcome_pie(cleaned, output_dir / "outcome_pie.png", dpi),
        plots.plot_histograms(cleaned, FEATURE_COLUMNS, output_dir / "histograms.png", dpi),
        plots.plot_correlation_heatmap(results["correlation"], output_dir / "correlation_heatmap.png", dpi),
        plots.plot_boxplots_by_outcome(cleaned, FEATURE_COLUMNS, output_dir / "boxplots_by_outcome.png", dpi),
        plots.plot_density_by_outcome(cleaned, FEATURE_COLUMNS, output_dir / "density_by_outcome.png", dpi),
        plots.plot_outcome_rate_by_age_group(
            results["age_group_rates"], overall_rate, output_dir / "age_group_rates.png", dpi
        ),
    ]


def generate_eda_report(input_path: Path, output_dir: Path, config: dict) -> dict:
    """Generate the EDA report artifacts.

    Args:
        input_path: Path to the raw CSV file
        output_dir: Directory to save tables, plots and the JSON summary
        config: Report configuration

    Returns:
        Report summary dictionary
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    raw_df, capabilities = load_dataset(input_path)
    results = run_analysis(raw_df, capabilities, config)
    cleaned = results["cleaned"]

    tables = {
        "cleaned.csv": (cleaned, False),
        "missing_values.csv": (results["raw_missing"], True),
        "overview.csv": (results["overview"], True),
        "age_group_summary.csv": (results["age_group_summary"], True),
        "outcome_summary.csv": (results["outcome_summary"], True),
        "age_group_rates.csv": (results["age_group_rates"], True),
        "outcome_comparison.csv": (results["outcome_comparison"], True),
        "correlation.csv": (results["correlation"], True),
    }
    artifacts = []
    for filename, (table, keep_index) in tables.items():
        table.to_csv(output_dir / filename, index=keep_index)
        artifacts.append(filename)
    logger.info(f"Tables saved to: {output_dir}")

    if config["output"].get("save_plots", True):
        plot_paths = generate_plots(results, output_dir, config["output"].get("dpi", 150))
        artifacts.extend(path.name for path in plot_paths)

    summary = {
        "input_file": str(input_path),
        "raw_records": len(raw_df),
        "cleaned_records": len(cleaned),
        "dropped_records": len(raw_df) - len(cleaned),
        "has_insulin": capabilities.has_insulin,
        # NaN (no rows to average) is not valid JSON
        "fill_values": {
            col: None if pd.isna(value) else value for col, value in results["fill_values"].items()
        },
        "senior_records": len(results["seniors"]),
        "recoded_values": results["recoded_values"],
        "positive_rate": float(cleaned[TARGET_COLUMN].mean()) if len(cleaned) else None,
        "artifacts": artifacts,
        "generated_at": datetime.now().isoformat(),
    }

    with open(output_dir / "eda_summary.json", "w") as f:
        json.dump(summary, f, indent=2, allow_nan=False)

    logger.info(f"EDA report complete. Results saved to: {output_dir}")
    return summary


def main(argv: Optional[list] = None) -> int:
    """CLI entry point for the EDA report."""
    parser = argparse.ArgumentParser(description="Exploratory data analysis of diabetes data")
    parser.add_argument("--input", type=Path, default=None, help="Input CSV file")
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("configs/eda_config.yaml"),
        help="Report config",
    )
    parser.add_argument("--output-dir", type=Path, default=None, help="Output directory")
    args = parser.parse_args(argv)

    if args.config.exists():
        config = load_config(args.config)
    else:
        logger.warning(f"Config not found: {args.config}. Using defaults.")
        config = load_config()

    log_level = config.get("logging", {}).get("log_level", "INFO")
    logging.getLogger().setLevel(getattr(logging, log_level.upper(), logging.INFO))

    input_path = args.input or Path(config["data"]["raw_path"])
    output_dir = args.output_dir or Path(config["output"]["report_dir"])

    logger.info(f"Processing: {input_path}")
    try:
        summary = generate_eda_report(input_path, output_dir, config)
    except DiabetesDataError as e:
        logger.error(f"Input rejected: {e.message}")
        for detail in e.details.get("errors", []):
            logger.error(f"  {detail}")
        return 1

    logger.info(
        f"Records: {summary['raw_records']} raw, {summary['cleaned_records']} cleaned "
        f"({summary['dropped_records']} dropped)"
    )
    return 0


if __name__ == "__main__":
    exit(main())
