from typing import Sequence

import numpy as np
import pandas as pd

from .errors import DataError
from .schema import (
    CATEGORICAL_COLS,
    FLAG_COLS,
    ID_COL,
    MISSING_MARKER,
    NUMERIC_COLS,
    RETAINED_GENDERS,
    TARGET_COL,
    UNKNOWN_SMOKING,
)
from .utils.logger import get_logger


class Cleaner:
    """Drops unusable patient records and coerces column types.

    A record is dropped when its BMI is unreported, its smoking status is
    unknown, or its gender is outside the retained categories. The id
    column is removed from the result.
    """

    def __init__(
        self,
        retained_genders: Sequence[str] = RETAINED_GENDERS,
        unknown_smoking: str = UNKNOWN_SMOKING,
    ):
        self.retained_genders = list(retained_genders)
        self.unknown_smoking = unknown_smoking
        self.logger = get_logger(self.__class__.__name__)

    def clean(self, df: pd.DataFrame) -> pd.DataFrame:
        missing = [col for col in NUMERIC_COLS + FLAG_COLS + CATEGORICAL_COLS + [TARGET_COL] if col not in df.columns]
        if missing:
            raise DataError(f"Dataset is missing required columns: {missing}")

        out = df.copy()
        n_start = len(out)

        # "N/A" survives as a string when the frame was not read through DataLoader
        bmi = out["bmi"].replace(MISSING_MARKER, np.nan)
        keep_bmi = bmi.notna()
        keep_smoking = out["smoking_status"].notna() & (out["smoking_status"] != self.unknown_smoking)
        keep_gender = out["gender"].isin(self.retained_genders)

        self.logger.info(
            f"Dropping rows: bmi missing={int((~keep_bmi).sum())}, "
            f"smoking unknown={int((~keep_smoking).sum())}, "
            f"gender outside {self.retained_genders}={int((~keep_gender).sum())}"
        )

        out["bmi"] = bmi
        out = out[keep_bmi & keep_smoking & keep_gender]

        if out.empty:
            raise DataError(f"No rows left after cleaning ({n_start} rows in input)")

        if ID_COL in out.columns:
            out = out.drop(columns=[ID_COL])

        try:
            for col in NUMERIC_COLS:
                out[col] = pd.to_numeric(out[col]).astype("float64")
            for col in FLAG_COLS + [TARGET_COL]:
                out[col] = pd.to_numeric(out[col]).astype("int64")
        except (ValueError, TypeError) as exc:
            raise DataError(f"Could not coerce numeric columns: {exc}") from exc

        for col in CATEGORICAL_COLS:
            out[col] = out[col].astype("category").cat.remove_unused_categories()

        out = out.reset_index(drop=True)
        self.logger.info(f"Cleaned dataset: {len(out):,} of {n_start:,} rows kept")
        return out
