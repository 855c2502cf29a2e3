import dataclasses
import json

import numpy as np
import pandas as pd
import pytest

from stroke_risk.errors import SchemaMismatchError
from stroke_risk.evaluator import Evaluator
from stroke_risk.model_trainer import ModelFamily, ModelTrainer


class _FixedScoreModel:
    """Returns the 'score' column as the positive-class probability."""
    classes_ = np.array([0, 1])

    def predict_proba(self, df):
        s = df["score"].to_numpy()
        return np.column_stack([1 - s, s])

    def predict(self, df):
        return (df["score"].to_numpy() >= 0.5).astype(int)


class _LabelOnlyModel:
    classes_ = np.array([0, 1])

    def predict(self, df):
        return (df["score"].to_numpy() >= 0.5).astype(int)


def _test_frame():
    return pd.DataFrame(
        {
            "score": [0.9, 0.8, 0.3, 0.6, 0.2, 0.1, 0.4, 0.05],
            "stroke": [1, 1, 1, 0, 0, 0, 0, 0],
        }
    )


def test_confusion_matrix_and_metrics():
    report = Evaluator(positive_label=1).evaluate(_FixedScoreModel(), _test_frame(), model_name="fixed")
    cm = report.confusion

    assert (cm.tp, cm.fn, cm.fp, cm.tn) == (2, 1, 1, 4)
    assert cm.total == 8
    assert report.accuracy == pytest.approx((cm.tp + cm.tn) / cm.total)
    assert report.sensitivity == pytest.approx(2 / 3)
    assert report.specificity == pytest.approx(4 / 5)
    assert report.balanced_accuracy == pytest.approx((2 / 3 + 4 / 5) / 2)
    assert report.precision == pytest.approx(2 / 3)
    assert report.negative_predictive_value == pytest.approx(4 / 5)
    assert report.prevalence == pytest.approx(3 / 8)


def test_positive_label_selects_the_reference_class():
    report = Evaluator(positive_label=0).evaluate(_FixedScoreModel(), _test_frame())
    cm = report.confusion

    assert (cm.tp, cm.fn, cm.fp, cm.tn) == (4, 1, 1, 2)
    assert report.sensitivity == pytest.approx(4 / 5)
    assert report.specificity == pytest.approx(2 / 3)


def test_confusion_frame_is_predicted_by_actual():
    report = Evaluator().evaluate(_FixedScoreModel(), _test_frame())
    frame = report.confusion.as_frame()

    assert frame.index.name == "predicted"
    assert frame.columns.name == "actual"
    assert frame.loc[1, 0] == report.confusion.fp
    assert frame.to_numpy().sum() == 8


def test_roc_curve_is_monotone_and_auc_matches_pair_count():
    report = Evaluator().evaluate(_FixedScoreModel(), _test_frame())
    roc = report.roc

    assert roc is not None
    assert np.all(np.diff(roc.fpr) >= 0)
    assert np.all(np.diff(roc.tpr) >= 0)
    assert np.all(np.diff(roc.thresholds) <= 0)
    assert roc.fpr[-1] == 1.0 and roc.tpr[-1] == 1.0
    # 13 of 15 (positive, negative) pairs are ranked correctly
    assert roc.auc == pytest.approx(13 / 15)


def test_label_only_model_has_no_roc():
    report = Evaluator().evaluate(_LabelOnlyModel(), _test_frame())
    assert report.roc is None
    assert "ROC_AUC" not in report.metrics()
    assert report.confusion.total == 8


def test_report_is_immutable():
    report = Evaluator().evaluate(_FixedScoreModel(), _test_frame())
    with pytest.raises(dataclasses.FrozenInstanceError):
        report.accuracy = 1.0


def test_metrics_are_written_to_json(tmp_path):
    path = tmp_path / "out" / "metrics.json"
    evaluator = Evaluator()
    report = evaluator.evaluate(_FixedScoreModel(), _test_frame(), model_name="fixed")
    evaluator.save_metrics({"fixed": report}, str(path))

    saved = json.loads(path.read_text())
    assert saved["fixed"]["model"] == "fixed"
    assert saved["fixed"]["confusion_matrix"]["tp"] == 2
    assert saved["fixed"]["metrics"]["ROC_AUC"] == pytest.approx(13 / 15)


def test_label_outside_model_classes_raises():
    frame = pd.DataFrame({"score": [0.9, 0.2, 0.6], "stroke": [1, 0, 2]})
    with pytest.raises(SchemaMismatchError, match="2"):
        Evaluator().evaluate(_FixedScoreModel(), frame)


def test_missing_target_raises():
    with pytest.raises(SchemaMismatchError):
        Evaluator().evaluate(_FixedScoreModel(), _test_frame().drop(columns=["stroke"]))


def test_fitted_model_on_held_out_data(clean_df):
    train, test = clean_df.iloc[:250], clean_df.iloc[250:]
    model = ModelTrainer(ModelFamily.LOGISTIC_REDUCED, n_splits=3, random_state=0).fit(train)
    report = Evaluator().evaluate(model, test)

    assert report.model_name == "logistic_reduced"
    assert report.confusion.total == len(test)


def test_fitted_model_missing_feature_raises(clean_df):
    model = ModelTrainer(ModelFamily.LOGISTIC_REDUCED, n_splits=3, random_state=0).fit(clean_df)
    with pytest.raises(SchemaMismatchError):
        Evaluator().evaluate(model, clean_df.drop(columns=["age"]))
