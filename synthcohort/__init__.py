from .dag import DAG, cohort_dag
from .config import CohortConfig, LinearStage, ScaledBeta, TruncatedNormal
from .cohort import Cohort, SyntheticCohortGenerator, generate_cohort
from .export import EXPORT_COLUMNS, Exporter
from .estimators.ols import OLSObservational, OLSResult
from .generators import CovariateSampler, LinearCombiner, OutcomeGenerator, Rescale, TreatmentAssigner, rescale
from ._exceptions import DegenerateDistribution, GraphError, IdentificationError, InvalidConfiguration

__all__ = [
    "DAG", "cohort_dag",
    "CohortConfig", "LinearStage", "ScaledBeta", "TruncatedNormal",
    "Cohort", "SyntheticCohortGenerator", "generate_cohort",
    "EXPORT_COLUMNS", "Exporter",
    "OLSObservational", "OLSResult",
    "CovariateSampler", "LinearCombiner", "OutcomeGenerator", "Rescale", "TreatmentAssigner", "rescale",
    "DegenerateDistribution", "GraphError", "IdentificationError", "InvalidConfiguration",
]
