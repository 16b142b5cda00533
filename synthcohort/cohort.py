from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional, Union

import numpy as np
import pandas as pd

from .columns import COHORT_COLUMNS, OUTCOME, TREATMENT, TREATMENT_PROBABILITY
from .config import CohortConfig
from .dag import DAG, cohort_dag
from .estimators.ols import OLSObservational, OLSResult
from .export import Exporter
from .generators.combine import LinearCombiner, Rescale
from .generators.covariates import CovariateSampler
from .generators.outcome import OutcomeGenerator
from .generators.treatment import TreatmentAssigner

logger = logging.getLogger(__name__)


class Cohort:
    """
    A finished synthetic cohort.

    ``data`` holds one row per unit with the columns ``id, gpa, gre,
    treatment_probability, treatment, outcome``; the stage-one baselines
    and intermediate scores are gone. ``rescales`` records the population
    rescale applied to each derived column, keyed by column name.
    """

    def __init__(
        self,
        data: pd.DataFrame,
        config: CohortConfig,
        dag: DAG,
        rescales: dict[str, Rescale],
    ) -> None:
        self._data = data
        self._config = config
        self._dag = dag
        self._rescales = rescales

    @property
    def data(self) -> pd.DataFrame:
        """A copy of the cohort table."""
        return self._data.copy()

    @property
    def config(self) -> CohortConfig:
        return self._config

    @property
    def dag(self) -> DAG:
        return self._dag

    @property
    def rescales(self) -> dict[str, Rescale]:
        return dict(self._rescales)

    @property
    def n(self) -> int:
        return len(self._data)

    @property
    def nominal_effect(self) -> float:
        """The treatment coefficient injected into the outcome score."""
        return self._config.nominal_effect

    @property
    def realized_effect(self) -> float:
        """
        The injected effect in final outcome units: the nominal effect times
        the outcome rescale factor. This is what an adjusted regression
        estimates, not ``nominal_effect``.
        """
        return self.nominal_effect * self._rescales[OUTCOME].factor

    def estimate(self) -> OLSResult:
        """Fit the adjusted and naive regressions of outcome on treatment."""
        return OLSObservational(self._dag, treatment=TREATMENT, outcome=OUTCOME).fit(self._data)

    def to_csv(self, path: Union[str, Path], include_outcome: bool = False) -> Path:
        return Exporter(include_outcome=include_outcome).write(self._data, path)

    def __len__(self) -> int:
        return self.n

    def __repr__(self) -> str:
        return (
            f"Cohort(n={self.n}, seed={self._config.seed}, "
            f"nominal_effect={self.nominal_effect:g}, realized_effect={self.realized_effect:.4f})"
        )


class SyntheticCohortGenerator:
    """
    Simulates an observational cohort whose causal structure is known by
    construction.

    The configuration is validated against the DAG when the generator is
    created, so a bad parameter fails before any sampling. ``generate()``
    then:

      1. Draws the independent baseline columns (``CovariateSampler``).
      2. Walks the DAG in topological order and derives each non-root node
         from its parents: ``gre`` from ``gpa``, the treatment from ``gpa``
         and ``gre`` (``TreatmentAssigner``), the outcome from all three
         (``OutcomeGenerator``).
      3. Drops the baseline columns and returns a ``Cohort``.

    A single ``numpy.random.Generator`` seeded from ``config.seed`` feeds
    every stage in order and is never re-seeded, so the same configuration
    always reproduces the same cohort, or the same failure.

    Usage
    -----
        cohort = SyntheticCohortGenerator(CohortConfig(n=2500, seed=4660)).generate()
        print(cohort.estimate().summary())
        cohort.to_csv("cohort.csv")
    """

    def __init__(self, config: Optional[CohortConfig] = None, dag: Optional[DAG] = None) -> None:
        self._config = config if config is not None else CohortConfig()
        self._dag = dag if dag is not None else cohort_dag()
        self._config.validate(self._dag)

    @property
    def config(self) -> CohortConfig:
        return self._config

    @property
    def dag(self) -> DAG:
        return self._dag

    def generate(self) -> Cohort:
        cfg = self._config
        rng = np.random.default_rng(cfg.seed)
        logger.info("Generating cohort of %d units (seed=%d)", cfg.n, cfg.seed)

        data = CovariateSampler(cfg).sample(rng)
        rescales: dict[str, Rescale] = {}

        roots = self._dag.roots()
        for node in self._dag.topological_order():
            if node in roots:
                continue
            data = self._derive(node, data, rng, rescales)

        data = data.loc[:, list(COHORT_COLUMNS)].reset_index(drop=True)
        return Cohort(data, cfg, self._dag, rescales)

    # ── Stages ────────────────────────────────────────────────────────────────

    def _derive(
        self,
        node: str,
        data: pd.DataFrame,
        rng: np.random.Generator,
        rescales: dict[str, Rescale],
    ) -> pd.DataFrame:
        stage = self._config.stage(node)

        if node == TREATMENT:
            assignment = TreatmentAssigner(stage, epsilon=self._config.probability_epsilon).assign(data, rng)
            rescales[TREATMENT_PROBABILITY] = assignment.probability.rescale
            return data.assign(**{
                TREATMENT_PROBABILITY: assignment.probabilities,
                TREATMENT: assignment.treatment,
            })

        if node == OUTCOME:
            combined = OutcomeGenerator(stage).generate(data, rng)
        else:
            combined = LinearCombiner(stage).apply(data, rng)
            logger.info("Derived %s from %s", node, ", ".join(sorted(stage.coefficients)))

        rescales[combined.column] = combined.rescale
        return data.assign(**{combined.column: combined.values})


def generate_cohort(n: int = 2500, seed: int = 4660, **overrides: Any) -> Cohort:
    """
    Generate a cohort with the default configuration, overriding ``n``,
    ``seed`` and any other ``CohortConfig`` field by keyword.
    """
    config = CohortConfig().replace(n=n, seed=seed, **overrides)
    return SyntheticCohortGenerator(config).generate()
