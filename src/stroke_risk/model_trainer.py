import os
import warnings
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

import joblib
import numpy as np
import pandas as pd
from lightgbm import LGBMClassifier
from sklearn.exceptions import ConvergenceWarning
from sklearn.linear_model import LogisticRegression
from sklearn.metrics import roc_auc_score
from sklearn.model_selection import ParameterGrid, StratifiedKFold
from sklearn.pipeline import Pipeline

from .errors import ConvergenceError, InsufficientSamplesError, SchemaMismatchError
from .preprocessor import Preprocessor
from .schema import FEATURE_COLS, REDUCED_FEATURE_COLS, TARGET_COL
from .utils.logger import get_logger


class ModelFamily(str, Enum):
    LOGISTIC = "logistic"
    LOGISTIC_REDUCED = "logistic_reduced"
    GRADIENT_BOOSTING = "gradient_boosting"

    @property
    def features(self) -> list[str]:
        if self is ModelFamily.LOGISTIC_REDUCED:
            return list(REDUCED_FEATURE_COLS)
        return list(FEATURE_COLS)

    @property
    def default_n_splits(self) -> int:
        return 5 if self is ModelFamily.GRADIENT_BOOSTING else 10


# config name -> LGBMClassifier argument
GB_PARAM_ALIASES = {"gamma": "min_split_gain"}


def _missing_columns(df: pd.DataFrame, columns) -> list[str]:
    return [col for col in columns if col not in df.columns]


@dataclass(frozen=True, eq=False)
class FittedModel:
    """A trained preprocessing + classifier pipeline bound to its feature list."""
    family: ModelFamily
    features: tuple[str, ...]
    pipeline: Pipeline
    params: dict[str, Any] = field(default_factory=dict)
    cv_scores: tuple[float, ...] = ()

    @property
    def classes_(self) -> np.ndarray:
        return self.pipeline.classes_

    @property
    def cv_mean(self) -> float:
        return float(np.mean(self.cv_scores)) if self.cv_scores else float("nan")

    def _select(self, df: pd.DataFrame) -> pd.DataFrame:
        missing = _missing_columns(df, self.features)
        if missing:
            raise SchemaMismatchError(
                f"{self.family.value} model expects columns missing from the dataset: {missing}"
            )
        return df[list(self.features)]

    def predict(self, df: pd.DataFrame) -> np.ndarray:
        return self.pipeline.predict(self._select(df))

    def predict_proba(self, df: pd.DataFrame) -> np.ndarray:
        return self.pipeline.predict_proba(self._select(df))

    def feature_importance(self) -> pd.Series:
        """Rank encoded features by |coefficient| (logistic) or split gain (trees)."""
        names = self.pipeline.named_steps["preprocess"].get_feature_names_out()
        estimator = self.pipeline.named_steps["model"]
        if isinstance(estimator, LogisticRegression):
            values = np.abs(estimator.coef_[0])
        else:
            values = np.asarray(estimator.feature_importances_, dtype=float)
        return pd.Series(values, index=names, name="importance").sort_values(ascending=False)

    def save(self, path: str) -> None:
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        joblib.dump(self, path)

    @classmethod
    def load(cls, path: str) -> "FittedModel":
        model = joblib.load(path)
        if not isinstance(model, cls):
            raise TypeError(f"{path} does not contain a {cls.__name__}")
        return model


class ModelTrainer:
    """
    Fits one model family with stratified k-fold cross-validation.

    Preprocessing is fit inside each training fold, then applied to the
    validation fold. When a param_grid is given, the combination with the
    best mean CV ROC-AUC is used for the final fit on the whole training set.
    """

    def __init__(
        self,
        family: ModelFamily | str,
        params: Optional[dict[str, Any]] = None,
        param_grid: Optional[dict[str, list]] = None,
        n_splits: Optional[int] = None,
        random_state: Optional[int] = 42,
        target_col: str = TARGET_COL,
    ):
        self.family = ModelFamily(family)
        self.params = dict(params or {})
        self.param_grid = param_grid
        self.n_splits = n_splits or self.family.default_n_splits
        self.random_state = random_state
        self.target_col = target_col
        self.logger = get_logger(self.__class__.__name__)

    @property
    def is_logistic(self) -> bool:
        return self.family is not ModelFamily.GRADIENT_BOOSTING

    def _build_estimator(self, params: dict[str, Any]):
        params = dict(params)
        if self.is_logistic:
            params.setdefault("max_iter", 1000)
            params.setdefault("random_state", self.random_state)
            return LogisticRegression(**params)

        params = {GB_PARAM_ALIASES.get(k, k): v for k, v in params.items()}
        if params.get("subsample", 1.0) < 1.0:
            params.setdefault("subsample_freq", 1)
        params.setdefault("random_state", self.random_state)
        params.setdefault("importance_type", "gain")
        params.setdefault("deterministic", True)
        params.setdefault("force_row_wise", True)
        params.setdefault("verbosity", -1)
        return LGBMClassifier(**params)

    def _build_pipeline(self, X: pd.DataFrame, params: dict[str, Any]) -> Pipeline:
        transformer = Preprocessor(use_scaler=self.is_logistic).build(X)
        return Pipeline(steps=[("preprocess", transformer), ("model", self._build_estimator(params))])

    def _fit_pipeline(self, pipeline: Pipeline, X: pd.DataFrame, y: np.ndarray) -> Pipeline:
        with warnings.catch_warnings():
            warnings.filterwarnings("ignore", category=UserWarning, module="lightgbm")
            warnings.simplefilter("error", ConvergenceWarning)
            try:
                pipeline.fit(X, y)
            except ConvergenceWarning as exc:
                raise ConvergenceError(f"{self.family.value} solver did not converge: {exc}") from exc
        return pipeline

    def _effective_splits(self, y: np.ndarray) -> int:
        n_min = int(pd.Series(y).value_counts().min())
        if n_min < 2:
            raise InsufficientSamplesError(
                f"Cross-validation needs at least 2 rows per class, minority has {n_min}"
            )
        if n_min < self.n_splits:
            self.logger.warning(
                f"Minority class has {n_min} rows; reducing CV folds from {self.n_splits} to {n_min}"
            )
            return n_min
        return self.n_splits

    def cross_validate(
        self,
        X_df: pd.DataFrame,
        y: np.ndarray,
        params: Optional[dict[str, Any]] = None,
    ) -> list[float]:
        """Stratified CV; returns the ROC-AUC of each validation fold."""
        params = self.params if params is None else params
        y = np.asarray(y).astype(int)
        n_splits = self._effective_splits(y)

        skf = StratifiedKFold(n_splits=n_splits, shuffle=True, random_state=self.random_state)
        fold_aucs: list[float] = []

        for fold, (train_idx, val_idx) in enumerate(skf.split(X_df, y), start=1):
            X_train_df = X_df.iloc[train_idx]
            X_val_df = X_df.iloc[val_idx]

            pipeline = self._fit_pipeline(self._build_pipeline(X_train_df, params), X_train_df, y[train_idx])
            val_proba = pipeline.predict_proba(X_val_df)[:, 1]

            auc = roc_auc_score(y[val_idx], val_proba)
            fold_aucs.append(float(auc))
            self.logger.debug(f"Fold {fold}/{n_splits} ROC-AUC: {auc:.4f}")

        self.logger.info(
            f"{self.family.value}: {n_splits}-fold CV ROC-AUC "
            f"{np.mean(fold_aucs):.4f} +/- {np.std(fold_aucs):.4f}"
        )
        return fold_aucs

    def _select_params(self, X_df: pd.DataFrame, y: np.ndarray) -> tuple[dict[str, Any], list[float]]:
        if not self.param_grid:
            return self.params, self.cross_validate(X_df, y)

        best_params: dict[str, Any] = {}
        best_scores: list[float] = []
        best_mean = -np.inf
        for candidate in ParameterGrid(self.param_grid):
            params = dict(self.params)
            params.update(candidate)
            scores = self.cross_validate(X_df, y, params=params)
            if np.mean(scores) > best_mean:
                best_mean = float(np.mean(scores))
                best_params, best_scores = params, scores

        self.logger.info(f"{self.family.value}: selected {best_params} (CV ROC-AUC {best_mean:.4f})")
        return best_params, best_scores

    def fit(self, train_df: pd.DataFrame) -> FittedModel:
        """Cross-validate, then fit the final pipeline on the full training set."""
        features = self.family.features
        missing = _missing_columns(train_df, features + [self.target_col])
        if missing:
            raise SchemaMismatchError(f"Training data is missing columns: {missing}")

        X_df = train_df[features].reset_index(drop=True)
        y = train_df[self.target_col].astype(int).to_numpy()

        params, cv_scores = self._select_params(X_df, y)
        pipeline = self._fit_pipeline(self._build_pipeline(X_df, params), X_df, y)

        self.logger.info(f"Fitted {self.family.value} on {len(X_df):,} rows, {len(features)} features")
        return FittedModel(
            family=self.family,
            features=tuple(features),
            pipeline=pipeline,
            params=dict(params),
            cv_scores=tuple(cv_scores),
        )
