"""Tabular summaries of the cleaned dataset (no plotting)."""

import pandas as pd

from .schema import FLAG_COLS, NUMERIC_COLS, TARGET_COL


def summary_statistics(df: pd.DataFrame, target_col: str = TARGET_COL) -> pd.DataFrame:
    """describe() of the numeric fields, plus their mean within each outcome class."""
    numeric = [col for col in NUMERIC_COLS if col in df.columns]
    summary = df[numeric].describe().T
    by_class = df.groupby(target_col)[numeric].mean().T
    by_class.columns = [f"mean_{target_col}={c}" for c in by_class.columns]
    return summary.join(by_class)


def correlation_matrix(df: pd.DataFrame, target_col: str = TARGET_COL) -> pd.DataFrame:
    """Pearson correlation over numeric fields, flags and the outcome."""
    cols = [col for col in NUMERIC_COLS + FLAG_COLS + [target_col] if col in df.columns]
    return df[cols].astype(float).corr()


def outcome_rates(df: pd.DataFrame, column: str, target_col: str = TARGET_COL) -> pd.DataFrame:
    """Row count and outcome rate for each level of a column."""
    grouped = df.groupby(column, observed=True)[target_col]
    return pd.DataFrame({"count": grouped.size(), "rate": grouped.mean()}).sort_values("rate", ascending=False)
