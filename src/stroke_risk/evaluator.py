import json
import os
from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

import numpy as np
import pandas as pd
from sklearn.metrics import (
    accuracy_score,
    balanced_accuracy_score,
    cohen_kappa_score,
    confusion_matrix,
    precision_score,
    recall_score,
    roc_auc_score,
    roc_curve,
)

from .errors import SchemaMismatchError
from .schema import TARGET_COL
from .utils.logger import get_logger


@dataclass(frozen=True)
class ConfusionMatrix:
    """Counts of predicted vs. actual labels relative to one positive label."""
    tp: int
    fp: int
    fn: int
    tn: int
    positive_label: Any
    negative_label: Any

    @property
    def total(self) -> int:
        return self.tp + self.fp + self.fn + self.tn

    def as_frame(self) -> pd.DataFrame:
        """Predicted label (rows) x actual label (columns)."""
        labels = [self.positive_label, self.negative_label]
        return pd.DataFrame(
            [[self.tp, self.fp], [self.fn, self.tn]],
            index=pd.Index(labels, name="predicted"),
            columns=pd.Index(labels, name="actual"),
        )


@dataclass(frozen=True)
class RocCurve:
    """ROC points ordered by decreasing threshold, so fpr is non-decreasing."""
    fpr: tuple[float, ...]
    tpr: tuple[float, ...]
    thresholds: tuple[float, ...]
    auc: float


@dataclass(frozen=True)
class EvaluationReport:
    model_name: str
    confusion: ConfusionMatrix
    accuracy: float
    balanced_accuracy: float
    sensitivity: float
    specificity: float
    precision: float
    negative_predictive_value: float
    kappa: float
    prevalence: float
    threshold: float
    roc: Optional[RocCurve] = None

    def metrics(self) -> Dict[str, float]:
        metrics = {
            "Accuracy": self.accuracy,
            "Balanced_Accuracy": self.balanced_accuracy,
            "Sensitivity": self.sensitivity,
            "Specificity": self.specificity,
            "Precision": self.precision,
            "NPV": self.negative_predictive_value,
            "Kappa": self.kappa,
            "Prevalence": self.prevalence,
        }
        if self.roc is not None:
            metrics["ROC_AUC"] = self.roc.auc
        return metrics

    def to_dict(self) -> Dict[str, Any]:
        confusion = asdict(self.confusion)
        confusion = {k: (v.item() if isinstance(v, np.generic) else v) for k, v in confusion.items()}
        out: Dict[str, Any] = {
            "model": self.model_name,
            "threshold": self.threshold,
            "confusion_matrix": confusion,
            "metrics": self.metrics(),
        }
        if self.roc is not None:
            out["roc_curve"] = {"fpr": list(self.roc.fpr), "tpr": list(self.roc.tpr)}
        return out


class Evaluator:
    """Score a fitted model on held-out data: confusion matrix, derived metrics, ROC/AUC."""

    def __init__(
        self,
        positive_label: Any = 1,
        threshold: float = 0.5,
        target_col: str = TARGET_COL,
        verbose: bool = True,
    ):
        self.positive_label = positive_label
        self.threshold = threshold
        self.target_col = target_col
        self.verbose = verbose
        self.logger = get_logger(self.__class__.__name__)

    def _negative_label(self, classes: np.ndarray) -> Any:
        others = [c for c in classes if c != self.positive_label]
        if len(others) != 1 or len(classes) != 2:
            raise SchemaMismatchError(
                f"Expected a binary model containing positive label {self.positive_label!r}, "
                f"got classes {list(classes)}"
            )
        return others[0]

    def evaluate(self, model, test_df: pd.DataFrame, model_name: Optional[str] = None) -> EvaluationReport:
        """Compute the confusion matrix, metrics and (when available) ROC curve."""
        if self.target_col not in test_df.columns:
            raise SchemaMismatchError(f"Evaluation data has no '{self.target_col}' column")

        name = model_name or getattr(getattr(model, "family", None), "value", type(model).__name__)
        y_true = test_df[self.target_col].to_numpy()
        classes = np.asarray(model.classes_)
        negative_label = self._negative_label(classes)

        unexpected = set(np.unique(y_true)) - set(classes.tolist())
        if unexpected:
            raise SchemaMismatchError(
                f"Evaluation labels {sorted(unexpected)} are not among the model classes {classes.tolist()}"
            )

        roc: Optional[RocCurve] = None
        if hasattr(model, "predict_proba"):
            pos_idx = int(np.flatnonzero(classes == self.positive_label)[0])
            y_score = np.asarray(model.predict_proba(test_df))[:, pos_idx]
            y_pred = np.where(y_score >= self.threshold, self.positive_label, negative_label)
            roc = self._roc(y_true, y_score)
        else:
            y_pred = np.asarray(model.predict(test_df))

        labels = [self.positive_label, negative_label]
        # sklearn: rows are actual, columns predicted
        (tp, fn), (fp, tn) = confusion_matrix(y_true, y_pred, labels=labels)
        cm = ConfusionMatrix(
            tp=int(tp), fp=int(fp), fn=int(fn), tn=int(tn),
            positive_label=self.positive_label,
            negative_label=negative_label,
        )

        report = EvaluationReport(
            model_name=name,
            confusion=cm,
            accuracy=float(accuracy_score(y_true, y_pred)),
            balanced_accuracy=float(balanced_accuracy_score(y_true, y_pred)),
            sensitivity=float(recall_score(y_true, y_pred, pos_label=self.positive_label, zero_division=0)),
            specificity=float(recall_score(y_true, y_pred, pos_label=negative_label, zero_division=0)),
            precision=float(precision_score(y_true, y_pred, pos_label=self.positive_label, zero_division=0)),
            negative_predictive_value=float(precision_score(y_true, y_pred, pos_label=negative_label, zero_division=0)),
            kappa=float(cohen_kappa_score(y_true, y_pred)),
            prevalence=float(np.mean(y_true == self.positive_label)),
            threshold=float(self.threshold),
            roc=roc,
        )

        if self.verbose:
            metrics_str = ", ".join(f"{k}={v:.4f}" for k, v in report.metrics().items())
            self.logger.info(f"{name}: {metrics_str}")

        return report

    def save_metrics(self, reports: Dict[str, EvaluationReport], metrics_path: str) -> None:
        """Write every report to one JSON file keyed by model name."""
        os.makedirs(os.path.dirname(metrics_path) or ".", exist_ok=True)
        with open(metrics_path, "w") as f:
            json.dump({name: r.to_dict() for name, r in reports.items()}, f, indent=4)

        if self.verbose:
            self.logger.info(f"Saved metrics: {metrics_path}")

    def _roc(self, y_true: np.ndarray, y_score: np.ndarray) -> Optional[RocCurve]:
        if len(np.unique(y_true)) < 2:
            self.logger.warning("Only one class in evaluation data; ROC curve undefined")
            return None
        fpr, tpr, thresholds = roc_curve(y_true, y_score, pos_label=self.positive_label)
        auc = roc_auc_score(y_true == self.positive_label, y_score)
        return RocCurve(
            fpr=tuple(float(v) for v in fpr),
            tpr=tuple(float(v) for v in tpr),
            thresholds=tuple(float(v) for v in thresholds),
            auc=float(auc),
        )
