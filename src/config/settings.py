"""Report configuration loading."""

import copy
from pathlib import Path
from typing import Optional

import yaml

DEFAULT_CONFIG = {
    "data": {
        "raw_path": "data/raw/diabetes.csv",
    },
    "output": {
        "report_dir": "reports/eda",
        "save_plots": True,
        "dpi": 150,
    },
    "analysis": {
        "summary_fields": ["Glucose", "BloodPressure", "BMI", "SkinThickness"],
        "outcome_keys": [0, 1],
    },
    "recode": [
        {"column": "InsulinKnown", "from": 3, "to": 0, "age_group": "70+"},
    ],
    "logging": {
        "log_level": "INFO",
    },
}


def _merge(base: dict, override: dict) -> dict:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: Optional[Path] = None) -> dict:
    """Load report configuration.

    Values from the YAML file override ``DEFAULT_CONFIG`` key by key; lists
    (such as ``recode``) are replaced wholesale.

    Args:
        config_path: Path to a YAML config file, or None for defaults only

    Returns:
        Configuration dictionary
    """
    if config_path is None:
        return copy.deepcopy(DEFAULT_CONFIG)

    with open(config_path, "r") as f:
        user_config = yaml.safe_load(f) or {}

    return _merge(DEFAULT_CONFIG, user_config)
