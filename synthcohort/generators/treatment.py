from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd

from ..config import LinearStage
from .combine import CombinedColumn, LinearCombiner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TreatmentAssignment:
    probability: CombinedColumn
    treatment: np.ndarray

    @property
    def probabilities(self) -> np.ndarray:
        return self.probability.values


class TreatmentAssigner:
    """
    Turns the confounders into a propensity and the propensity into a
    realised binary treatment.

    The propensity score combines ``gpa`` and ``gre`` with negative
    coefficients plus noise, and is rescaled onto ``[0, 1]``. Each unit then
    takes the treatment with its own probability: a Bernoulli draw, not a
    threshold, so some low-propensity units are treated and some
    high-propensity units are not.

    ``epsilon > 0`` clamps probabilities into ``[epsilon, 1 - epsilon]``
    before the draw. With the default of 0 the lowest and highest scoring
    units get probabilities of exactly 0 and 1.
    """

    def __init__(self, stage: LinearStage, epsilon: float = 0.0) -> None:
        self._combiner = LinearCombiner(stage)
        self._epsilon = epsilon

    def assign(self, data: pd.DataFrame, rng: np.random.Generator) -> TreatmentAssignment:
        combined = self._combiner.apply(data, rng)
        if self._epsilon > 0:
            clamped = np.clip(combined.values, self._epsilon, 1.0 - self._epsilon)
            combined = CombinedColumn(
                column=combined.column,
                score=combined.score,
                values=clamped,
                rescale=combined.rescale,
            )

        treatment = rng.binomial(1, combined.values).astype(np.int64)
        logger.info(
            "Assigned treatment to %d of %d units (mean propensity %.3f)",
            int(treatment.sum()), len(treatment), float(np.mean(combined.values)),
        )
        return TreatmentAssignment(probability=combined, treatment=treatment)
