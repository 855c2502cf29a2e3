from dataclasses import dataclass

import pandas as pd
from sklearn.model_selection import train_test_split

from .errors import DataError
from .schema import TARGET_COL
from .utils.logger import get_logger


@dataclass(frozen=True)
class Split:
    """Disjoint train/test partition of one dataset."""
    train: pd.DataFrame
    test: pd.DataFrame


class Splitter:
    """Stratified train/test partition on the outcome column."""

    def __init__(
        self,
        train_fraction: float = 0.7,
        stratify_col: str = TARGET_COL,
        random_state: int | None = 42,
    ):
        if not 0.0 < train_fraction < 1.0:
            raise ValueError(f"train_fraction must be in (0, 1), got {train_fraction}")
        self.train_fraction = train_fraction
        self.stratify_col = stratify_col
        self.random_state = random_state
        self.logger = get_logger(self.__class__.__name__)

    def split(self, df: pd.DataFrame) -> Split:
        if self.stratify_col not in df.columns:
            raise DataError(f"Stratification column '{self.stratify_col}' not in dataset")

        train_df, test_df = train_test_split(
            df,
            train_size=self.train_fraction,
            stratify=df[self.stratify_col],
            random_state=self.random_state,
        )

        self.logger.info(
            f"Split {len(df):,} rows into train={len(train_df):,} / test={len(test_df):,} "
            f"(positive rate train={train_df[self.stratify_col].mean():.3f}, "
            f"test={test_df[self.stratify_col].mean():.3f})"
        )
        return Split(train=train_df, test=test_df)
