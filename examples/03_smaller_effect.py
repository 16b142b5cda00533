"""
Change the injected effect and the cohort size through the configuration.

Halving the effect and shrinking the cohort shows how the confounding bias
stays roughly the same while the estimate gets noisier.
"""

import dataclasses

from synthcohort import CohortConfig, SyntheticCohortGenerator

base = CohortConfig()
outcome = dataclasses.replace(
    base.outcome,
    coefficients={**base.outcome.coefficients, "treatment": 5.0},
)

for n in (500, 2_500, 10_000):
    cohort = SyntheticCohortGenerator(base.replace(n=n, outcome=outcome)).generate()
    result = cohort.estimate()
    print(
        f"n={n:>6}  realised={cohort.realized_effect:6.3f}  "
        f"adjusted={result.effect:6.3f} ± {result.std_err:.3f}  "
        f"naive={result.unadjusted_effect:6.3f}"
    )
