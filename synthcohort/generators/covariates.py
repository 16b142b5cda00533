from __future__ import annotations

import logging

import numpy as np
import pandas as pd
from scipy import stats

from ..columns import GPA, GRE_RAW, ID, OUTCOME_RAW, TREATMENT_RAW
from ..config import CohortConfig, ScaledBeta, TruncatedNormal
from .combine import round_to

logger = logging.getLogger(__name__)


def sample_truncated_normal(dist: TruncatedNormal, size: int, rng: np.random.Generator) -> np.ndarray:
    """Draw from ``N(mean, sd)`` truncated to ``[low, high]``, then round."""
    a = (dist.low - dist.mean) / dist.sd
    b = (dist.high - dist.mean) / dist.sd
    samples = stats.truncnorm.rvs(
        a, b, loc=dist.mean, scale=dist.sd,
        size=size, random_state=rng,
    )
    return round_to(np.asarray(samples, dtype=float), dist.decimals)


def sample_scaled_beta(dist: ScaledBeta, size: int, rng: np.random.Generator) -> np.ndarray:
    """Draw from ``Beta(a, b)``, multiply by ``scale``, then round."""
    return round_to(rng.beta(dist.a, dist.b, size=size) * dist.scale, dist.decimals)


class CovariateSampler:
    """
    Draws the independent stage-one columns of a cohort.

    ``gpa`` is final once drawn. ``gre_raw``, ``outcome_raw`` and
    ``treatment_raw`` are baselines that the later stages overwrite; they are
    drawn here, mutually independent, so that all dependence in the finished
    cohort comes from the derivation stages.

    Columns are drawn from ``rng`` in a fixed order: gpa, gre_raw,
    outcome_raw, treatment_raw.
    """

    def __init__(self, config: CohortConfig) -> None:
        self._config = config

    def sample(self, rng: np.random.Generator) -> pd.DataFrame:
        cfg = self._config
        n = cfg.n

        gpa = sample_truncated_normal(cfg.gpa, n, rng)
        gre_raw = sample_truncated_normal(cfg.gre_raw, n, rng)
        outcome_raw = sample_scaled_beta(cfg.outcome_raw, n, rng)
        treatment_raw = rng.binomial(1, cfg.treatment_raw_p, size=n).astype(np.int64)

        logger.info("Drew baseline covariates for %d units", n)
        return pd.DataFrame({
            ID: np.arange(1, n + 1, dtype=np.int64),
            GPA: gpa,
            GRE_RAW: gre_raw,
            OUTCOME_RAW: outcome_raw,
            TREATMENT_RAW: treatment_raw,
        })
