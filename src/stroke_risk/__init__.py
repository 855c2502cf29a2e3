"""
Stroke Risk — Modular Machine Learning Pipeline

This package provides an end-to-end implementation for stroke
prediction on tabular patient records: cleaning, SMOTE class
balancing, stratified splitting, logistic regression and LightGBM
training with cross-validation, and held-out evaluation.

Modules:
    config        — Load YAML configuration safely.
    errors        — Pipeline exception types.
    schema        — Dataset column layout.
    data_loader   — Read and optionally sample CSV data.
    cleaner       — Drop unusable rows and coerce column types.
    balancer      — SMOTE oversampling of the minority class.
    splitter      — Stratified train/test split.
    preprocessor  — Impute, encode, and scale features.
    model_trainer — Fit model families with cross-validation.
    hyper_tuner   — Tune the tree ensemble with Optuna.
    evaluator     — Confusion matrix, metrics and ROC/AUC.
    explorer      — Summary tables and correlations.
    pipeline      — Orchestrates all components.
    utils.logger  — Unified timestamped console logger.
"""

from .config import Config
from .errors import (
    ConvergenceError,
    DataError,
    InsufficientSamplesError,
    SchemaMismatchError,
    StrokeRiskError,
)
from .data_loader import DataLoader
from .cleaner import Cleaner
from .balancer import Balancer
from .splitter import Split, Splitter
from .preprocessor import Preprocessor
from .model_trainer import FittedModel, ModelFamily, ModelTrainer
from .evaluator import ConfusionMatrix, EvaluationReport, Evaluator, RocCurve
from .hyper_tuner import HyperTuner
from .pipeline import PipelineRunner

__all__ = [
    "Config",
    "StrokeRiskError",
    "DataError",
    "InsufficientSamplesError",
    "ConvergenceError",
    "SchemaMismatchError",
    "DataLoader",
    "Cleaner",
    "Balancer",
    "Split",
    "Splitter",
    "Preprocessor",
    "ModelFamily",
    "ModelTrainer",
    "FittedModel",
    "Evaluator",
    "ConfusionMatrix",
    "RocCurve",
    "EvaluationReport",
    "HyperTuner",
    "PipelineRunner",
]
