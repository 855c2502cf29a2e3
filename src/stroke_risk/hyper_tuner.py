import logging
from typing import Any

import numpy as np
import optuna
import pandas as pd

from .model_trainer import ModelFamily, ModelTrainer
from .utils.logger import get_logger


class HyperTuner:
    """Optuna tuning for the gradient-boosted ensemble using ModelTrainer's CV."""

    def __init__(
        self,
        n_trials: int = 30,
        n_splits: int = 5,
        random_state: int = 42,
    ):
        self.n_trials = n_trials
        self.n_splits = n_splits
        self.random_state = random_state
        self.logger = get_logger(self.__class__.__name__)
        self.best_params_: dict[str, Any] | None = None
        self.best_value_: float | None = None

    def _suggest_params(self, trial: optuna.Trial) -> dict[str, Any]:
        """Search space over the seven tree-ensemble knobs."""
        return {
            "n_estimators": trial.suggest_int("n_estimators", 50, 300, step=50),
            "max_depth": trial.suggest_int("max_depth", 2, 8),
            "learning_rate": trial.suggest_float("learning_rate", 0.01, 0.4, log=True),
            "gamma": trial.suggest_float("gamma", 0.0, 1.0),
            "colsample_bytree": trial.suggest_float("colsample_bytree", 0.5, 1.0),
            "min_child_weight": trial.suggest_float("min_child_weight", 1e-3, 10.0, log=True),
            "subsample": trial.suggest_float("subsample", 0.5, 1.0),
        }

    def tune(
        self,
        X_df: pd.DataFrame,
        y: np.ndarray,
        base_params: dict[str, Any],
    ) -> dict[str, Any]:
        """
        Run Optuna optimization and return best tuned parameters (subset).
        Each trial is scored by the mean CV ROC-AUC of ModelTrainer.cross_validate.
        """
        self.logger.info(
            f"Starting Optuna tuning ({self.n_trials} trials, {self.n_splits}-fold CV)"
        )

        sampler = optuna.samplers.TPESampler(seed=self.random_state)
        study = optuna.create_study(direction="maximize", sampler=sampler)
        optuna.logging.set_verbosity(optuna.logging.WARNING)

        y = np.asarray(y).astype(int)
        trainer = ModelTrainer(
            family=ModelFamily.GRADIENT_BOOSTING,
            params=base_params,
            n_splits=self.n_splits,
            random_state=self.random_state,
        )
        # reduce log noise during tuning
        previous_level = trainer.logger.level
        trainer.logger.setLevel(logging.WARNING)

        def objective(trial: optuna.Trial) -> float:
            params = dict(base_params)
            params.update(self._suggest_params(trial))
            return float(np.mean(trainer.cross_validate(X_df, y, params=params)))

        try:
            study.optimize(objective, n_trials=self.n_trials)
        finally:
            trainer.logger.setLevel(previous_level)

        self.best_params_ = study.best_params
        self.best_value_ = float(study.best_value)

        self.logger.info(f"Best CV ROC-AUC: {self.best_value_:.4f}")
        self.logger.info(f"Best parameters: {self.best_params_}")

        return dict(self.best_params_)
