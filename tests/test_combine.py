import numpy as np
import pandas as pd
import pytest

from synthcohort import DegenerateDistribution, InvalidConfiguration, LinearCombiner, LinearStage, rescale


def make_data(n=200, seed=0):
    rng = np.random.default_rng(seed)
    return pd.DataFrame({
        "x": rng.normal(size=n),
        "z": rng.normal(size=n),
        "base": rng.normal(10, 2, size=n),
    })


class TestRescale:
    def test_maps_extremes_onto_interval(self):
        values, transform = rescale([2.0, 4.0, 3.0, 6.0], (0, 100))
        assert values.tolist() == [0.0, 50.0, 25.0, 100.0]
        assert transform.score_min == 2.0
        assert transform.score_max == 6.0
        assert transform.factor == 25.0

    def test_preserves_order(self):
        raw = np.random.default_rng(1).normal(size=500)
        values, _ = rescale(raw, (130, 170))
        assert np.array_equal(np.argsort(raw, kind="stable"), np.argsort(values, kind="stable"))
        assert values.min() == 130.0
        assert values.max() == 170.0

    def test_zero_variance_raises(self):
        with pytest.raises(DegenerateDistribution, match="zero variance"):
            rescale([3.0, 3.0, 3.0], (0, 1))

    def test_single_value_raises(self):
        with pytest.raises(DegenerateDistribution):
            rescale([42.0], (0, 1))

    def test_nan_raises(self):
        with pytest.raises(DegenerateDistribution, match="NaN"):
            rescale([1.0, np.nan], (0, 1))


class TestLinearCombiner:
    def test_score_is_linear_combination_plus_baseline(self):
        df = make_data()
        stage = LinearStage("y", {"x": 2.0, "z": -1.0}, noise_sd=0.0, interval=(0, 1), baseline="base")
        score = LinearCombiner(stage).score(df, np.random.default_rng(0))
        expected = 2.0 * df["x"] - 1.0 * df["z"] + df["base"]
        assert np.allclose(score, expected.to_numpy())

    def test_rescaled_and_rounded_to_integers(self):
        df = make_data()
        stage = LinearStage("y", {"x": 5.0}, noise_sd=1.0, interval=(130, 170), decimals=0)
        combined = LinearCombiner(stage).apply(df, np.random.default_rng(0))
        assert combined.values.dtype.kind == "i"
        assert combined.values.min() == 130
        assert combined.values.max() == 170

    def test_rounded_to_decimals(self):
        df = make_data()
        stage = LinearStage("y", {"x": 5.0}, noise_sd=1.0, interval=(0, 100), decimals=1)
        values = LinearCombiner(stage).apply(df, np.random.default_rng(0)).values
        assert np.allclose(values * 10, np.round(values * 10))

    def test_realised_slope_is_coefficient_times_factor(self):
        """Without noise the rescaled column is an exact linear map of the predictor."""
        df = make_data()
        stage = LinearStage("y", {"x": 4.0}, noise_sd=0.0, interval=(0, 100))
        combined = LinearCombiner(stage).apply(df, np.random.default_rng(0))
        slope = np.polyfit(df["x"], combined.values, 1)[0]
        assert slope == pytest.approx(4.0 * combined.rescale.factor)

    def test_same_seed_same_noise(self):
        df = make_data()
        stage = LinearStage("y", {"x": 1.0}, noise_sd=3.0, interval=(0, 1))
        a = LinearCombiner(stage).apply(df, np.random.default_rng(9)).values
        b = LinearCombiner(stage).apply(df, np.random.default_rng(9)).values
        assert np.array_equal(a, b)

    def test_missing_predictor_raises(self):
        stage = LinearStage("y", {"w": 1.0}, noise_sd=0.0, interval=(0, 1))
        with pytest.raises(InvalidConfiguration, match="have not been generated"):
            LinearCombiner(stage).apply(make_data(), np.random.default_rng(0))

    def test_constant_score_is_degenerate(self):
        df = pd.DataFrame({"x": [1.0, 1.0, 1.0]})
        stage = LinearStage("y", {"x": 1.0}, noise_sd=0.0, interval=(0, 1))
        with pytest.raises(DegenerateDistribution):
            LinearCombiner(stage).apply(df, np.random.default_rng(0))
