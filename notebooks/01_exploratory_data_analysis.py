"""Exploratory Data Analysis for Pima Indians Diabetes Dataset.

This marimo notebook renders the EDA report from the cleaning pipeline:
- Missing data (sentinel zeros) and the cleaning rules applied
- Feature distributions and outcome balance
- Descriptive statistics by age group and by outcome
- Correlations between the cleaned features
"""

import marimo

__generated_with = "0.17.7"
app = marimo.App()


@app.cell
def _():
    import marimo as mo
    import matplotlib.pyplot as plt
    from pathlib import Path

    from src.config.settings import load_config
    from src.data.validate_input import load_dataset
    from src.reports.eda_report import generate_plots, run_analysis

    # Set plotting style
    plt.style.use('seaborn-v0_8-darkgrid')

    mo.md(
        """
        # Exploratory Data Analysis: Pima Indians Diabetes Dataset

        **Objective**: Describe data quality, cleaning decisions and how the clinical
        measurements differ across age groups and diabetes outcome.
        """
    )
    return Path, generate_plots, load_config, load_dataset, mo, run_analysis


@app.cell
def _(Path, load_config, load_dataset, run_analysis):
    # Load data - use robust path resolution
    project_dir = Path(__file__).parent.parent
    config = load_config(project_dir / "configs" / "eda_config.yaml")
    raw_df, capabilities = load_dataset(project_dir / config["data"]["raw_path"])

    results = run_analysis(raw_df, capabilities, config)
    cleaned = results["cleaned"]
    return capabilities, cleaned, config, project_dir, raw_df, results


@app.cell
def _(capabilities, cleaned, mo, raw_df, results):
    _fill = results["fill_values"]["SkinThickness"]
    mo.md(f"""
    ## 1. Data Cleaning

    **Raw records**: {len(raw_df)}
    **Cleaned records**: {len(cleaned)} ({len(raw_df) - len(cleaned)} dropped)
    **Insulin column present**: {capabilities.has_insulin}

    - Records with a zero Glucose, BloodPressure or BMI are dropped (zero means "not measured").
    - Zero SkinThickness is replaced by the raw column mean ({_fill:.2f} mm).
    - Insulin is reduced to an `InsulinKnown` flag (1 = measured, 0 = zero in source).

    {results["raw_missing"].to_markdown()}
    """)
    return


@app.cell
def _(mo, results):
    mo.md(f"""
    ## 2. Statistical Summary

    {results["overview"].round(2).to_markdown()}
    """)
    return


@app.cell
def _(mo, results):
    mo.md(f"""
    ## 3. Grouped Statistics

    ### By Age Group
    {results["age_group_summary"].round(2).to_markdown()}

    ### By Outcome
    {results["outcome_summary"].round(2).to_markdown()}

    ### Diabetes Rate by Age Group
    {results["age_group_rates"].round(3).to_markdown()}
    """)
    return


@app.cell
def _(config, generate_plots, mo, project_dir, results):
    # Same charts as the CLI report, saved under the report directory
    _plot_dir = project_dir / config["output"]["report_dir"]
    _plot_paths = generate_plots(results, _plot_dir, config["output"].get("dpi", 150))

    mo.vstack(
        [mo.md("## 4. Charts")]
        + [mo.image(src=str(_path)) for _path in _plot_paths]
    )
    return


@app.cell
def _(mo, results):
    _comparison = results["outcome_comparison"]
    mo.md(f"""
    ## 5. Key Discriminators

    {_comparison.round(2).to_markdown()}

    **{_comparison.index[0]}** shows the largest relative difference between
    diabetic and non-diabetic patients.

    **Records aged 70+**: {len(results["seniors"])}
    **Values recoded**: {results["recoded_values"]}
    """)
    return


if __name__ == "__main__":
    app.run()
