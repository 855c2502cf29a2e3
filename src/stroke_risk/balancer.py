from typing import Dict

import numpy as np
import pandas as pd
from imblearn.over_sampling import SMOTE

from .errors import DataError, InsufficientSamplesError
from .schema import TARGET_COL
from .utils.logger import get_logger


class Balancer:
    """
    Raises the minority class to the majority count with SMOTE.

    Categorical columns are mapped to integer codes for the neighbour search
    and interpolation, then rounded back to valid categories. Integer columns
    (0/1 flags) are rounded the same way, so the output keeps the input's
    columns and dtypes.

    Example:
        balancer = Balancer(k_neighbors=5, random_state=42)
        balanced_df = balancer.balance(clean_df)
    """

    def __init__(
        self,
        target_col: str = TARGET_COL,
        k_neighbors: int = 5,
        random_state: int | None = 42,
    ):
        self.target_col = target_col
        self.k_neighbors = k_neighbors
        self.random_state = random_state
        self.logger = get_logger(self.__class__.__name__)

    @staticmethod
    def _encode(X: pd.DataFrame) -> tuple[pd.DataFrame, Dict[str, pd.Index]]:
        encoded = X.copy()
        categories: Dict[str, pd.Index] = {}
        for col in X.columns:
            if not pd.api.types.is_numeric_dtype(X[col]):
                cat = X[col].astype("category")
                categories[col] = cat.cat.categories
                encoded[col] = cat.cat.codes.astype("float64")
        return encoded.astype("float64"), categories

    @staticmethod
    def _decode(
        X_res: pd.DataFrame,
        X_orig: pd.DataFrame,
        categories: Dict[str, pd.Index],
    ) -> pd.DataFrame:
        out = X_res.copy()
        for col in X_orig.columns:
            if col in categories:
                cats = categories[col]
                codes = np.clip(np.rint(X_res[col].to_numpy()), 0, len(cats) - 1).astype(int)
                out[col] = pd.Categorical.from_codes(codes, categories=cats)
            elif pd.api.types.is_integer_dtype(X_orig[col]):
                lo, hi = X_orig[col].min(), X_orig[col].max()
                out[col] = np.clip(np.rint(X_res[col].to_numpy()), lo, hi).astype(X_orig[col].dtype)
            else:
                out[col] = X_res[col].astype(X_orig[col].dtype)
        return out

    def balance(self, df: pd.DataFrame) -> pd.DataFrame:
        if self.target_col not in df.columns:
            raise DataError(f"Target column '{self.target_col}' not in dataset")

        y = df[self.target_col].to_numpy()
        X = df.drop(columns=[self.target_col])

        counts = pd.Series(y).value_counts()
        if len(counts) < 2:
            raise InsufficientSamplesError("Only one class present; nothing to oversample.")

        n_min = int(counts.min())
        # SMOTE needs k_neighbors + 1 minority rows to build a neighbourhood
        if n_min <= self.k_neighbors:
            raise InsufficientSamplesError(
                f"Minority class has {n_min} rows; SMOTE with k_neighbors={self.k_neighbors} "
                f"needs at least {self.k_neighbors + 1}."
            )

        if X.isna().any().any():
            raise DataError("Cannot oversample a dataset with missing feature values.")

        if counts.nunique() == 1:
            self.logger.info("Classes already balanced; skipping SMOTE.")
            return df.reset_index(drop=True)

        self.logger.info(
            f"Applying SMOTE (k_neighbors={self.k_neighbors}): "
            f"class counts before {counts.sort_index().to_dict()}"
        )

        X_enc, categories = self._encode(X)
        sm = SMOTE(k_neighbors=self.k_neighbors, random_state=self.random_state)
        X_res, y_res = sm.fit_resample(X_enc.to_numpy(), y)

        out = self._decode(pd.DataFrame(X_res, columns=X.columns), X, categories)
        out[self.target_col] = np.asarray(y_res).astype(df[self.target_col].dtype)
        out = out[df.columns]

        self.logger.info(
            f"Balanced dataset: {len(out):,} rows, "
            f"class counts after {out[self.target_col].value_counts().sort_index().to_dict()}"
        )
        return out
