from stroke_risk.balancer import Balancer
from stroke_risk.hyper_tuner import HyperTuner
from stroke_risk.model_trainer import ModelFamily

TREE_KNOBS = {
    "n_estimators",
    "max_depth",
    "learning_rate",
    "gamma",
    "colsample_bytree",
    "min_child_weight",
    "subsample",
}


def test_tuner_returns_tree_ensemble_parameters(clean_df):
    df = Balancer(random_state=0).balance(clean_df)
    X_df = df[ModelFamily.GRADIENT_BOOSTING.features]

    tuner = HyperTuner(n_trials=2, n_splits=2, random_state=0)
    best = tuner.tune(X_df, df["stroke"].to_numpy(), base_params={"n_estimators": 20})

    assert set(best) == TREE_KNOBS
    assert 0.0 <= tuner.best_value_ <= 1.0
