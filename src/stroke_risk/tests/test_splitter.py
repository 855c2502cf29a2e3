import numpy as np
import pandas as pd
import pytest

from stroke_risk.splitter import Splitter


def _twenty_rows() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "age": np.linspace(20, 80, 20),
            "stroke": [1, 1] + [0] * 18,
        }
    )


def test_splitter_partitions_rows(clean_df):
    split = Splitter(train_fraction=0.7, random_state=42).split(clean_df)

    assert len(split.train) + len(split.test) == len(clean_df)
    assert set(split.train.index).isdisjoint(split.test.index)
    assert set(split.train.index) | set(split.test.index) == set(clean_df.index)


def test_splitter_preserves_class_proportions(clean_df):
    split = Splitter(train_fraction=0.7, random_state=42).split(clean_df)

    rate = clean_df["stroke"].mean()
    assert abs(split.train["stroke"].mean() - rate) < 0.02
    assert abs(split.test["stroke"].mean() - rate) < 0.02


def test_splitter_twenty_row_scenario():
    split = Splitter(train_fraction=0.7, random_state=0).split(_twenty_rows())

    assert 13 <= len(split.train) <= 15
    assert len(split.train) + len(split.test) == 20
    # both positives cannot land on the same side with stratification
    assert split.train["stroke"].sum() >= 1
    assert split.test["stroke"].sum() >= 1


def test_splitter_is_deterministic_with_seed(clean_df):
    a = Splitter(random_state=11).split(clean_df)
    b = Splitter(random_state=11).split(clean_df)
    pd.testing.assert_frame_equal(a.train, b.train)
    pd.testing.assert_frame_equal(a.test, b.test)


@pytest.mark.parametrize("fraction", [0.0, 1.0, 1.5, -0.2])
def test_splitter_rejects_bad_fraction(fraction):
    with pytest.raises(ValueError):
        Splitter(train_fraction=fraction)
