from __future__ import annotations

from typing import Optional

import pandas as pd
from sklearn.compose import ColumnTransformer
from sklearn.impute import SimpleImputer
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import OneHotEncoder, StandardScaler

from .schema import CATEGORICAL_COLS, FLAG_COLS, NUMERIC_COLS


class Preprocessor:
    """Encodes the schema's continuous, flag and categorical columns for a classifier.

    Column groups come from the dataset schema, so every CV fold sees the same
    layout whatever values the fold happens to contain. Columns of the frame
    outside the schema are dropped.
    """

    def __init__(self, use_scaler: bool = False):
        # logistic models need standardized inputs, tree ensembles do not
        self.use_scaler = use_scaler
        self.transformer: Optional[ColumnTransformer] = None

    def build(self, X: pd.DataFrame) -> ColumnTransformer:
        """Build (but do not fit) the transformer for the schema columns present in X."""
        continuous_cols = [col for col in NUMERIC_COLS if col in X.columns]
        flag_cols = [col for col in FLAG_COLS if col in X.columns]
        categorical_cols = [col for col in CATEGORICAL_COLS if col in X.columns]

        num_steps = [("imputer", SimpleImputer(strategy="median"))]
        if self.use_scaler:
            num_steps.append(("scaler", StandardScaler()))

        self.transformer = ColumnTransformer(
            transformers=[
                ("num", Pipeline(steps=num_steps), continuous_cols),
                ("bin", SimpleImputer(strategy="most_frequent"), flag_cols),
                (
                    "cat",
                    Pipeline(
                        steps=[
                            ("imputer", SimpleImputer(strategy="most_frequent")),
                            ("encoder", OneHotEncoder(handle_unknown="ignore", sparse_output=False)),
                        ]
                    ),
                    categorical_cols,
                ),
            ],
            remainder="drop",
        )
        return self.transformer
