from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd

from .._exceptions import DegenerateDistribution, InvalidConfiguration
from ..config import Interval, LinearStage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Rescale:
    """
    A population min-max rescale: the score range ``[score_min, score_max]``
    mapped linearly onto ``[low, high]``.
    """

    low: float
    high: float
    score_min: float
    score_max: float

    @property
    def factor(self) -> float:
        """
        Target units per score unit.

        Every natural-unit coefficient in the score is multiplied by this
        factor, so an injected effect of 10 points comes out of the rescale
        as ``10 * factor`` points.
        """
        return (self.high - self.low) / (self.score_max - self.score_min)

    def __call__(self, values: np.ndarray) -> np.ndarray:
        span = self.score_max - self.score_min
        scaled = self.low + (values - self.score_min) / span * (self.high - self.low)
        # the endpoints can overshoot by one ulp
        return np.clip(scaled, self.low, self.high)


def rescale(values, interval: Interval) -> tuple[np.ndarray, Rescale]:
    """
    Map ``values`` linearly so their minimum lands on ``interval[0]`` and
    their maximum on ``interval[1]``.

    The transform is a whole-column statistic, so ``values`` must be the
    complete column. Raises ``DegenerateDistribution`` when the column has
    zero variance (a single unit always does).
    """
    values = np.asarray(values, dtype=float)
    if values.size == 0:
        raise DegenerateDistribution("Cannot rescale an empty column.")
    if not np.all(np.isfinite(values)):
        raise DegenerateDistribution("Cannot rescale a column containing NaN or infinite values.")

    score_min, score_max = float(values.min()), float(values.max())
    if score_max == score_min:
        raise DegenerateDistribution(
            f"Cannot rescale a column with zero variance: all {values.size} value(s) "
            f"equal {score_min}. A min-max rescale needs at least two distinct values."
        )

    low, high = interval
    transform = Rescale(low=float(low), high=float(high), score_min=score_min, score_max=score_max)
    return transform(values), transform


def round_to(values: np.ndarray, decimals) -> np.ndarray:
    """Round to ``decimals`` places; ``0`` gives integers and ``None`` leaves values alone."""
    if decimals is None:
        return values
    if decimals == 0:
        return np.round(values).astype(np.int64)
    return np.round(values, decimals)


@dataclass(frozen=True)
class CombinedColumn:
    """The output of one combine-then-rescale stage."""

    column: str
    score: np.ndarray
    values: np.ndarray
    rescale: Rescale


class LinearCombiner:
    """
    Derive a column from already defined columns, in three fixed steps:

      1. ``score = Σ coefficient_i · predictor_i + baseline + noise`` where the
         noise is ``N(0, noise_sd)``, drawn once per unit.
      2. Rescale the whole score column onto the stage's target interval.
      3. Round to the stage's precision.

    Because step 2 rescales the entire distribution, the effect of each
    predictor on the final column is its coefficient times
    ``Rescale.factor``, not the coefficient itself.

    Usage
    -----
        stage = LinearStage("gre", {"gpa": 10.0}, noise_sd=3.0,
                            interval=(130, 170), decimals=0, baseline="gre_raw")
        combined = LinearCombiner(stage).apply(df, rng)
        df["gre"] = combined.values
    """

    def __init__(self, stage: LinearStage) -> None:
        self._stage = stage

    @property
    def stage(self) -> LinearStage:
        return self._stage

    def score(self, data: pd.DataFrame, rng: np.random.Generator) -> np.ndarray:
        """Step 1 only: the linear combination plus noise, in natural units."""
        stage = self._stage
        required = sorted(stage.coefficients)
        if stage.baseline is not None:
            required.append(stage.baseline)
        missing = [c for c in required if c not in data.columns]
        if missing:
            raise InvalidConfiguration(
                f"Stage '{stage.column}' needs columns {missing}, which have not been generated yet. "
                f"Available columns: {list(data.columns)}"
            )

        n = len(data)
        score = np.zeros(n, dtype=float)
        # sorted so the sum is independent of mapping order
        for name in sorted(stage.coefficients):
            score += stage.coefficients[name] * data[name].to_numpy(dtype=float)
        if stage.baseline is not None:
            score += data[stage.baseline].to_numpy(dtype=float)
        score += rng.normal(loc=0.0, scale=stage.noise_sd, size=n)
        return score

    def apply(self, data: pd.DataFrame, rng: np.random.Generator) -> CombinedColumn:
        """Run all three steps and return the finished column with its score and rescale."""
        stage = self._stage
        score = self.score(data, rng)
        scaled, transform = rescale(score, stage.interval)
        logger.debug(
            "%s: score range [%.4f, %.4f] rescaled onto [%g, %g] (factor %.4f)",
            stage.column, transform.score_min, transform.score_max,
            transform.low, transform.high, transform.factor,
        )
        return CombinedColumn(
            column=stage.column,
            score=score,
            values=round_to(scaled, stage.decimals),
            rescale=transform,
        )
