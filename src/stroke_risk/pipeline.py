import os
import warnings
from textwrap import indent
from typing import Dict

from .balancer import Balancer
from .cleaner import Cleaner
from .config import Config
from .data_loader import DataLoader
from .evaluator import EvaluationReport, Evaluator
from .explorer import correlation_matrix, outcome_rates, summary_statistics
from .hyper_tuner import HyperTuner
from .model_trainer import ModelFamily, ModelTrainer
from .schema import CATEGORICAL_COLS, RETAINED_GENDERS, TARGET_COL, UNKNOWN_SMOKING
from .splitter import Splitter
from .utils.logger import get_logger


class PipelineRunner:
    """End-to-end stroke prediction pipeline.

    Steps:
      1. Load the CSV dataset
      2. Clean it (drop unusable rows, coerce types, drop id)
      3. Log summary statistics and correlations
      4. Balance classes with SMOTE
      5. Stratified train/test split
      6. Train each enabled model family with k-fold CV (optionally Optuna-tuned)
      7. Evaluate every model on the held-out split and save metrics"""

    def __init__(self, config_path: str):
        self.config = Config.from_yaml(config_path)
        self.logger = get_logger(self.__class__.__name__)
        warnings.filterwarnings(
            "ignore",
            message="X does not have valid feature names",
            category=UserWarning,
            module="sklearn",
        )

    def _log_exploration(self, df) -> None:
        target_col = self.config.data.get("target_col", TARGET_COL)
        self.logger.info(
            "Summary statistics:\n" + indent(summary_statistics(df, target_col).round(3).to_string(), " " * 4)
        )
        corr = correlation_matrix(df, target_col)
        self.logger.info("Correlation matrix:\n" + indent(corr.round(3).to_string(), " " * 4))
        for col in CATEGORICAL_COLS:
            rates = outcome_rates(df, col, target_col)
            self.logger.info(f"Outcome rate by {col}:\n" + indent(rates.round(4).to_string(), " " * 4))

    def _train(self, family: ModelFamily, model_cfg: dict, train_df, target_col: str):
        cfg = self.config
        params = dict(model_cfg.get("params") or {})
        n_splits = model_cfg.get("n_splits")

        if family is ModelFamily.GRADIENT_BOOSTING and model_cfg.get("tune", False):
            tuner = HyperTuner(
                n_trials=model_cfg.get("n_trials", 30),
                n_splits=n_splits or family.default_n_splits,
                random_state=cfg.random_state,
            )
            best_params = tuner.tune(
                X_df=train_df[family.features].reset_index(drop=True),
                y=train_df[target_col].to_numpy(),
                base_params=params,
            )
            params.update(best_params)
            self.logger.info("Model parameters updated with tuned values")

        trainer = ModelTrainer(
            family=family,
            params=params,
            param_grid=model_cfg.get("param_grid"),
            n_splits=n_splits,
            random_state=cfg.random_state,
            target_col=target_col,
        )
        return trainer.fit(train_df)

    def run(self) -> Dict[str, EvaluationReport]:
        cfg = self.config
        target_col = cfg.data.get("target_col", TARGET_COL)
        self.logger.info("Starting stroke prediction pipeline")

        df = DataLoader(cfg.data["path"], cfg.data.get("sample_size"), cfg.random_state).load()

        df = Cleaner(
            retained_genders=cfg.cleaning.get("retained_genders", RETAINED_GENDERS),
            unknown_smoking=cfg.cleaning.get("unknown_smoking", UNKNOWN_SMOKING),
        ).clean(df)
        self.logger.info(f"Positive rate after cleaning: {df[target_col].mean():.4f}")
        self._log_exploration(df)

        if cfg.balancing.get("enabled", True):
            df = Balancer(
                target_col=target_col,
                k_neighbors=cfg.balancing.get("k_neighbors", 5),
                random_state=cfg.random_state,
            ).balance(df)
        else:
            self.logger.info("Class balancing disabled")

        split = Splitter(
            train_fraction=cfg.split.get("train_fraction", 0.7),
            stratify_col=target_col,
            random_state=cfg.random_state,
        ).split(df)

        evaluator = Evaluator(
            positive_label=cfg.validation.get("positive_label", 1),
            threshold=cfg.validation.get("threshold", 0.5),
            target_col=target_col,
        )

        reports: Dict[str, EvaluationReport] = {}
        for family in ModelFamily:
            model_cfg = cfg.models.get(family.value)
            if not model_cfg or not model_cfg.get("enabled", True):
                continue

            model = self._train(family, model_cfg, split.train, target_col)
            self.logger.info(f"{family.value} CV ROC-AUC (mean over folds): {model.cv_mean:.4f}")

            importance = model.feature_importance().head(10)
            self.logger.info(
                f"{family.value} variable importance:\n"
                + indent(importance.round(4).to_string(), " " * 4)
            )

            if cfg.output.get("save_models", False):
                path = os.path.join(cfg.output.get("model_dir", "artifacts/models"), f"{family.value}.joblib")
                model.save(path)
                self.logger.info(f"Saved model: {path}")

            report = evaluator.evaluate(model, split.test, model_name=family.value)
            self.logger.info(
                f"{family.value} confusion matrix:\n" + indent(report.confusion.as_frame().to_string(), " " * 4)
            )
            reports[family.value] = report

        metrics_path = cfg.output.get("metrics_path")
        if metrics_path:
            evaluator.save_metrics(reports, metrics_path)

        self.logger.info("Pipeline finished")
        return reports
