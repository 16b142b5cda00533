import numpy as np
import pytest
import statsmodels.formula.api as smf

from synthcohort import (
    CohortConfig,
    DegenerateDistribution,
    SyntheticCohortGenerator,
    generate_cohort,
)


@pytest.fixture(scope="module")
def cohort():
    """The reference scenario: 2,500 units, seed 4660, default coefficients."""
    return SyntheticCohortGenerator(CohortConfig(n=2500, seed=4660)).generate()


class TestSchema:
    def test_columns(self, cohort):
        assert list(cohort.data.columns) == [
            "id", "gpa", "gre", "treatment_probability", "treatment", "outcome",
        ]

    def test_ids_are_one_to_n(self, cohort):
        assert cohort.data["id"].tolist() == list(range(1, 2501))
        assert len(cohort) == cohort.n == 2500

    def test_bounds(self, cohort):
        df = cohort.data
        assert df["gpa"].between(1.5, 4.0).all()
        assert df["gre"].between(130, 170).all()
        assert df["gre"].dtype.kind == "i"
        assert df["treatment_probability"].between(0.0, 1.0).all()
        assert set(df["treatment"].unique()) == {0, 1}
        assert df["outcome"].between(0.0, 100.0).all()
        assert np.allclose(df["outcome"] * 10, np.round(df["outcome"] * 10))

    def test_rescales_hit_interval_endpoints(self, cohort):
        df = cohort.data
        assert df["gre"].min() == 130 and df["gre"].max() == 170
        assert df["treatment_probability"].min() == 0.0
        assert df["treatment_probability"].max() == 1.0
        assert df["outcome"].min() == 0.0 and df["outcome"].max() == 100.0
        assert set(cohort.rescales) == {"gre", "treatment_probability", "outcome"}

    def test_data_is_a_copy(self, cohort):
        cohort.data.drop(columns=["gpa"], inplace=True)
        assert "gpa" in cohort.data.columns


class TestDeterminism:
    def test_same_seed_same_cohort(self):
        a = generate_cohort(n=300, seed=11).data
        b = generate_cohort(n=300, seed=11).data
        assert a.equals(b)

    def test_different_seed_different_cohort(self):
        a = generate_cohort(n=300, seed=11).data
        b = generate_cohort(n=300, seed=12).data
        assert not a.equals(b)

    def test_repeated_generate_is_independent(self):
        gen = SyntheticCohortGenerator(CohortConfig(n=300, seed=5))
        assert gen.generate().data.equals(gen.generate().data)


class TestBoundaries:
    def test_single_unit_is_degenerate(self):
        with pytest.raises(DegenerateDistribution):
            generate_cohort(n=1, seed=4660)

    def test_single_unit_fails_the_same_way_every_time(self):
        for _ in range(2):
            with pytest.raises(DegenerateDistribution, match="zero variance"):
                generate_cohort(n=1, seed=4660)

    def test_small_cohort_runs(self):
        assert generate_cohort(n=10, seed=1).n == 10


class TestCausalStructure:
    def test_gre_rises_with_gpa(self, cohort):
        fit = smf.ols("gre ~ gpa", data=cohort.data).fit()
        assert fit.params["gpa"] > 0
        assert fit.pvalues["gpa"] < 0.001

    def test_confounders_lower_treatment_probability(self, cohort):
        fit = smf.ols("treatment_probability ~ gpa + gre", data=cohort.data).fit()
        assert fit.params["gpa"] < 0
        assert fit.params["gre"] < 0

    def test_treated_units_have_lower_confounders(self, cohort):
        df = cohort.data
        treated, control = df[df["treatment"] == 1], df[df["treatment"] == 0]
        assert treated["gpa"].mean() < control["gpa"].mean()
        assert treated["gre"].mean() < control["gre"].mean()

    def test_adjusted_estimate_near_injected_effect(self, cohort):
        result = cohort.estimate()
        assert result.adjustment_set == {"gpa", "gre"}
        assert 8.0 < result.effect < 13.0
        assert abs(result.effect - cohort.realized_effect) < 4 * result.std_err

    def test_naive_estimate_is_biased_downward(self, cohort):
        result = cohort.estimate()
        assert result.unadjusted_effect < result.effect
        assert result.bias < -0.5

    def test_realized_effect_is_scaled_nominal(self, cohort):
        assert cohort.nominal_effect == 10.0
        assert 0.5 * cohort.nominal_effect < cohort.realized_effect < 1.5 * cohort.nominal_effect
        assert cohort.realized_effect == pytest.approx(10.0 * cohort.rescales["outcome"].factor)


class TestEpsilon:
    def test_epsilon_keeps_probabilities_inside(self):
        cohort = generate_cohort(n=500, seed=3, probability_epsilon=0.01)
        p = cohort.data["treatment_probability"]
        assert p.min() == pytest.approx(0.01)
        assert p.max() == pytest.approx(0.99)
