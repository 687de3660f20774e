"""Age grouping and value recoding for cleaned diabetes records."""

import logging
from typing import Iterable, List, NamedTuple, Optional

import pandas as pd

from src.config.constants import AGE_BINS, AGE_GROUP_COLUMN, AGE_LABELS
from src.data.exceptions import MissingColumnError

logger = logging.getLogger(__name__)


class RecodeRule(NamedTuple):
    """Remap ``from_value`` to ``to_value`` in ``column``.

    When ``age_group`` is set, only records in that age group are touched.
    """

    column: str
    from_value: object
    to_value: object
    age_group: Optional[str] = None


def assign_age_groups(df: pd.DataFrame, age_column: str = "Age") -> pd.DataFrame:
    """Add an ordered ``AgeGroup`` column using half-open decade bins.

    Ages outside every bin (below 20, or missing) get a missing label.

    Args:
        df: Cleaned dataframe (left unchanged)
        age_column: Column holding age in years

    Returns:
        New dataframe with the AgeGroup column
    """
    if age_column not in df.columns:
        raise MissingColumnError([age_column])

    grouped = df.copy()
    grouped[AGE_GROUP_COLUMN] = pd.cut(
        grouped[age_column],
        bins=AGE_BINS,
        labels=AGE_LABELS,
        right=False,
        ordered=True,
    )

    unclassified = grouped[AGE_GROUP_COLUMN].isna() & grouped[age_column].notna()
    if unclassified.any():
        logger.warning(
            f"{int(unclassified.sum())} record(s) younger than {AGE_BINS[0]} have no age group"
        )

    return grouped


def subset_by_age_group(df: pd.DataFrame, labels: Iterable[str]) -> pd.DataFrame:
    """Return a copy holding only the records in the given age groups."""
    if AGE_GROUP_COLUMN not in df.columns:
        raise MissingColumnError([AGE_GROUP_COLUMN])

    labels = list(labels)
    unknown = set(labels) - set(AGE_LABELS)
    if unknown:
        raise ValueError(f"Unknown age group label(s): {sorted(unknown)}")

    return df.loc[df[AGE_GROUP_COLUMN].isin(labels)].copy()


def recode_value(df, column, from_value, to_value, mask=None):
    """Remap one value to another in a single column.

    Args:
        df: Input dataframe (left unchanged)
        column: Column to patch
        from_value: Value to replace
        to_value: Replacement value
        mask: Optional boolean Series; only rows where it is True are patched

    Returns:
        New dataframe; every other value is unchanged
    """
    if column not in df.columns:
        raise MissingColumnError([column])

    recoded = df.copy()
    matches = (recoded[column] == from_value).fillna(False).astype(bool)
    if mask is not None:
        matches &= mask.reindex(recoded.index, fill_value=False).astype(bool)

    if matches.any():
        recoded.loc[matches, column] = to_value
        logger.info(f"Recoded {int(matches.sum())} value(s) {from_value!r} -> {to_value!r} in '{column}'")

    return recoded


def apply_recode_rules(df: pd.DataFrame, rules: List[RecodeRule]) -> pd.DataFrame:
    """Apply recode rules in order, returning a new dataframe."""
    recoded = df
    for rule in rules:
        mask = None
        if rule.age_group is not None:
            if AGE_GROUP_COLUMN not in recoded.columns:
                raise MissingColumnError([AGE_GROUP_COLUMN])
            mask = recoded[AGE_GROUP_COLUMN] == rule.age_group
        recoded = recode_value(recoded, rule.column, rule.from_value, rule.to_value, mask=mask)

    if recoded is df:
        recoded = df.copy()
    return recoded


def count_recoded(before: pd.DataFrame, after: pd.DataFrame, rules: List[RecodeRule]) -> dict:
    """Number of values each recoded column changed between two versions of a frame."""
    counts = {}
    for column in dict.fromkeys(rule.column for rule in rules):
        old, new = before[column], after[column]
        changed = old.ne(new).fillna(False).astype(bool) & ~(old.isna() & new.isna())
        counts[column] = int(changed.sum())
    return counts


def recode_rules_from_config(config: dict) -> List[RecodeRule]:
    """Build recode rules from the ``recode`` section of the report config."""
    rules = []
    for entry in config.get("recode", []) or []:
        rules.append(
            RecodeRule(
                column=entry["column"],
                from_value=entry["from"],
                to_value=entry["to"],
                age_group=entry.get("age_group"),
            )
        )
    return rules
