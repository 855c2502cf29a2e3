import numpy as np
import pandas as pd
import pytest

from stroke_risk.cleaner import Cleaner


def _make_raw_stroke_frame(n: int = 400, seed: int = 0) -> pd.DataFrame:
    """Synthetic records in the raw CSV layout, including the placeholder values."""
    rng = np.random.default_rng(seed)

    age = rng.uniform(1, 85, n).round(1)
    glucose = rng.normal(105, 40, n).clip(55, 270).round(2)
    hypertension = (rng.random(n) < 0.05 + 0.003 * age).astype(int)
    heart_disease = (rng.random(n) < 0.02 + 0.002 * age).astype(int)

    logit = -7.0 + 0.07 * age + 0.008 * glucose + 0.6 * hypertension + 0.6 * heart_disease
    stroke = (rng.random(n) < 1 / (1 + np.exp(-logit))).astype(int)

    bmi = rng.normal(29, 7, n).clip(12, 60).round(1).astype(object)
    bmi[rng.random(n) < 0.05] = "N/A"

    gender = rng.choice(["Male", "Female"], n).astype(object)
    gender[0] = "Other"

    return pd.DataFrame(
        {
            "id": np.arange(1000, 1000 + n),
            "gender": gender,
            "age": age,
            "hypertension": hypertension,
            "heart_disease": heart_disease,
            "ever_married": rng.choice(["Yes", "No"], n),
            "work_type": rng.choice(["Private", "Self-employed", "Govt_job", "children"], n),
            "Residence_type": rng.choice(["Urban", "Rural"], n),
            "avg_glucose_level": glucose,
            "bmi": bmi,
            "smoking_status": rng.choice(
                ["never smoked", "formerly smoked", "smokes", "Unknown"], n, p=[0.4, 0.2, 0.15, 0.25]
            ),
            "stroke": stroke,
        }
    )


@pytest.fixture
def make_raw_stroke_frame():
    """Builder for raw frames of a chosen size and seed."""
    return _make_raw_stroke_frame


@pytest.fixture
def raw_df():
    return _make_raw_stroke_frame()


@pytest.fixture
def clean_df(raw_df):
    return Cleaner().clean(raw_df)
