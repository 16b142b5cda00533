from __future__ import annotations

import logging

import numpy as np
import pandas as pd

from ..columns import TREATMENT
from ..config import LinearStage
from .combine import CombinedColumn, LinearCombiner

logger = logging.getLogger(__name__)


class OutcomeGenerator:
    """
    Builds the final outcome from the confounders, the realised treatment
    and the baseline outcome.

    The treatment coefficient is the injected causal effect. Like every
    other coefficient it passes through the population rescale, so the
    effect that actually lives in the data is ``nominal_effect`` times the
    outcome's ``Rescale.factor``. An adjusted regression of outcome on
    treatment, gpa and gre recovers that realised value (up to sampling
    noise and rounding), which is close to but generally not equal to the
    nominal one. That gap is expected behaviour, not a bug.
    """

    def __init__(self, stage: LinearStage) -> None:
        self._combiner = LinearCombiner(stage)

    @property
    def nominal_effect(self) -> float:
        return float(self._combiner.stage.coefficients[TREATMENT])

    def generate(self, data: pd.DataFrame, rng: np.random.Generator) -> CombinedColumn:
        combined = self._combiner.apply(data, rng)
        logger.info(
            "Derived outcome: nominal treatment effect %.3f, realised %.3f after rescale",
            self.nominal_effect, self.realized_effect(combined),
        )
        return combined

    def realized_effect(self, combined: CombinedColumn) -> float:
        return self.nominal_effect * combined.rescale.factor
