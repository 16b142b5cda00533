from .combine import CombinedColumn, LinearCombiner, Rescale, rescale
from .covariates import CovariateSampler
from .outcome import OutcomeGenerator
from .treatment import TreatmentAssigner, TreatmentAssignment

__all__ = [
    "CombinedColumn", "LinearCombiner", "Rescale", "rescale",
    "CovariateSampler",
    "OutcomeGenerator",
    "TreatmentAssigner", "TreatmentAssignment",
]
