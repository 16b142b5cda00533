"""Column names shared by the generator stages, the exporter and the estimator."""

ID = "id"
GPA = "gpa"
GRE = "gre"
TREATMENT = "treatment"
TREATMENT_PROBABILITY = "treatment_probability"
OUTCOME = "outcome"

# Stage 1 baselines, dropped before the cohort is returned
GRE_RAW = "gre_raw"
OUTCOME_RAW = "outcome_raw"
TREATMENT_RAW = "treatment_raw"

COHORT_COLUMNS = (ID, GPA, GRE, TREATMENT_PROBABILITY, TREATMENT, OUTCOME)
