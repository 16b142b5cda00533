"""
Generate the reference cohort and write it to CSV.

DAG:
    gpa → gre
    gpa → treatment ← gre
    gpa → outcome   ← gre
    treatment → outcome

Higher GPA and GRE make a student less likely to take the treatment and
more likely to do well, so they confound the treatment effect.
The nominal injected effect of treatment on outcome is 10 points.
"""

from synthcohort import CohortConfig, SyntheticCohortGenerator

generator = SyntheticCohortGenerator(CohortConfig(n=2_500, seed=4660))
print(generator.dag)
print()

cohort = generator.generate()
print(cohort)
print(cohort.data.head())
print()

path = cohort.to_csv("cohort.csv")
print(f"Wrote {cohort.n} units to {path}")
