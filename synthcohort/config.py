"""
Run configuration for the synthetic cohort generator.

Every knob the pipeline reads lives in a frozen dataclass so a configuration
can be shared between runs without being mutated. ``CohortConfig.validate``
rejects anything that cannot describe a valid cohort before a single random
draw is made.
"""
from __future__ import annotations

import dataclasses
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional, Union

import yaml

from ._exceptions import InvalidConfiguration
from .columns import GPA, GRE, GRE_RAW, OUTCOME, OUTCOME_RAW, TREATMENT, TREATMENT_PROBABILITY
from .dag import DAG

logger = logging.getLogger(__name__)

Interval = tuple[float, float]


@dataclass(frozen=True)
class TruncatedNormal:
    """A normal distribution cut off at ``[low, high]``, rounded to ``decimals``."""

    mean: float
    sd: float
    low: float
    high: float
    decimals: Optional[int] = None


@dataclass(frozen=True)
class ScaledBeta:
    """A ``Beta(a, b)`` draw multiplied by ``scale``, rounded to ``decimals``."""

    a: float
    b: float
    scale: float = 1.0
    decimals: Optional[int] = None


@dataclass(frozen=True)
class LinearStage:
    """
    One combine-then-rescale step.

    ``coefficients`` are in natural units of the predictors. ``baseline``
    names an already drawn column added to the score with weight one.
    ``decimals=0`` yields integer values, ``None`` leaves them unrounded.
    """

    column: str
    coefficients: Mapping[str, float]
    noise_sd: float
    interval: Interval
    decimals: Optional[int] = None
    baseline: Optional[str] = None

    def __post_init__(self) -> None:
        # copy the mapping so later edits to the caller's dict do not leak in
        object.__setattr__(self, "coefficients", dict(self.coefficients))
        object.__setattr__(self, "interval", tuple(float(v) for v in self.interval))


def _default_gre_stage() -> LinearStage:
    return LinearStage(
        column=GRE,
        coefficients={GPA: 10.0},
        noise_sd=3.0,
        interval=(130.0, 170.0),
        decimals=0,
        baseline=GRE_RAW,
    )


def _default_treatment_stage() -> LinearStage:
    return LinearStage(
        column=TREATMENT_PROBABILITY,
        coefficients={GPA: -5.0, GRE: -0.5},
        noise_sd=3.0,
        interval=(0.0, 1.0),
        decimals=None,
    )


def _default_outcome_stage() -> LinearStage:
    return LinearStage(
        column=OUTCOME,
        coefficients={GPA: 10.0, GRE: 0.5, TREATMENT: 10.0},
        noise_sd=5.0,
        interval=(0.0, 100.0),
        decimals=1,
        baseline=OUTCOME_RAW,
    )


@dataclass(frozen=True)
class CohortConfig:
    """
    Everything needed to reproduce a cohort: its size, the seed, the baseline
    distributions and the three derivation stages.

    The defaults give a cohort of 2,500 students in which a treatment
    (think of a pre-semester math camp) raises the final outcome by a nominal
    10 points, while higher GPA and GRE both lower the chance of taking the
    treatment and raise the outcome.

    ``probability_epsilon`` clamps treatment probabilities into
    ``[eps, 1 - eps]`` before the Bernoulli draw. It is 0 by default, so the
    rescaled extremes stay at exactly 0 and 1 and those two units have a
    certain treatment status.
    """

    n: int = 2500
    seed: int = 4660
    gpa: TruncatedNormal = TruncatedNormal(mean=3.5, sd=0.5, low=1.5, high=4.0, decimals=2)
    gre_raw: TruncatedNormal = TruncatedNormal(mean=150.0, sd=5.0, low=130.0, high=170.0, decimals=0)
    outcome_raw: ScaledBeta = ScaledBeta(a=7.0, b=4.0, scale=100.0, decimals=1)
    treatment_raw_p: float = 0.5
    gre: LinearStage = field(default_factory=_default_gre_stage)
    treatment: LinearStage = field(default_factory=_default_treatment_stage)
    outcome: LinearStage = field(default_factory=_default_outcome_stage)
    probability_epsilon: float = 0.0

    # ── Accessors ─────────────────────────────────────────────────────────────

    def stage(self, node: str) -> LinearStage:
        """The derivation stage that realises ``node`` of the DAG."""
        stages = {GRE: self.gre, TREATMENT: self.treatment, OUTCOME: self.outcome}
        try:
            return stages[node]
        except KeyError:
            raise InvalidConfiguration(
                f"No derivation stage is configured for DAG node '{node}'. "
                f"Configured stages: {sorted(stages)}"
            ) from None

    @property
    def nominal_effect(self) -> float:
        """The injected treatment coefficient, in outcome points before rescaling."""
        return float(self.outcome.coefficients[TREATMENT])

    def replace(self, **changes: Any) -> CohortConfig:
        """Return a copy with ``changes`` applied. The copy is not validated."""
        return dataclasses.replace(self, **changes)

    # ── Validation ────────────────────────────────────────────────────────────

    def validate(self, dag: DAG) -> None:
        """
        Raise ``InvalidConfiguration`` unless this configuration can produce a
        cohort under ``dag``.

        Besides range checks on every parameter, the DAG must consist of
        exactly gpa, gre, treatment and outcome with treatment causing outcome,
        each stage's predictors must be exactly its node's parents, and every
        treatment coefficient must be negative: higher GPA and GRE have to
        lower the treatment probability by construction.
        """
        if isinstance(self.n, bool) or not isinstance(self.n, int) or self.n <= 0:
            raise InvalidConfiguration(f"Cohort size must be a positive integer, got {self.n!r}")

        if isinstance(self.seed, bool) or not isinstance(self.seed, int) or self.seed < 0:
            raise InvalidConfiguration(f"Seed must be a non-negative integer, got {self.seed!r}")

        _check_truncated_normal("gpa", self.gpa)
        _check_truncated_normal("gre_raw", self.gre_raw)
        _check_decimals("outcome_raw", self.outcome_raw.decimals)
        if self.outcome_raw.a <= 0 or self.outcome_raw.b <= 0:
            raise InvalidConfiguration(
                f"Beta shape parameters must be positive, got a={self.outcome_raw.a}, b={self.outcome_raw.b}"
            )
        if not 0.0 <= self.treatment_raw_p <= 1.0:
            raise InvalidConfiguration(
                f"treatment_raw_p must lie in [0, 1], got {self.treatment_raw_p}"
            )
        if not 0.0 <= self.probability_epsilon < 0.5:
            raise InvalidConfiguration(
                f"probability_epsilon must lie in [0, 0.5), got {self.probability_epsilon}"
            )

        expected = {GPA, GRE, TREATMENT, OUTCOME}
        if dag.nodes != expected:
            raise InvalidConfiguration(
                f"The DAG must have exactly the nodes {sorted(expected)}, got {sorted(dag.nodes)}"
            )
        roots = dag.roots()
        if roots != [GPA]:
            raise InvalidConfiguration(
                f"The DAG must have '{GPA}' as its only root, the one drawn covariate; got {roots}"
            )
        if TREATMENT not in dag.parents(OUTCOME):
            raise InvalidConfiguration(
                f"The DAG must assert '{TREATMENT}' → '{OUTCOME}'; the injected effect has nowhere to go"
            )
        for node in dag.topological_order():
            if node in roots:
                continue
            stage = self.stage(node)
            _check_stage(node, stage)
            parents = dag.parents(node)
            if set(stage.coefficients) != parents:
                raise InvalidConfiguration(
                    f"Stage '{stage.column}' combines {sorted(stage.coefficients)}, but the DAG "
                    f"says '{node}' is caused by {sorted(parents)}. Each derived column must be "
                    f"built from exactly its parents."
                )

        lo, hi = self.treatment.interval
        if lo < 0.0 or hi > 1.0:
            raise InvalidConfiguration(
                f"Treatment probabilities must be rescaled into a sub-interval of [0, 1], got [{lo}, {hi}]"
            )
        for confounder, coef in sorted(self.treatment.coefficients.items()):
            if not coef < 0:
                raise InvalidConfiguration(
                    f"The treatment coefficient on '{confounder}' must be negative, got {coef}. "
                    f"Higher {confounder} has to lower the treatment probability."
                )

    # ── Loading ───────────────────────────────────────────────────────────────

    @classmethod
    def from_dict(cls, values: Mapping[str, Any]) -> CohortConfig:
        """
        Build a configuration from nested plain data, e.g. parsed YAML::

            n: 5000
            seed: 1
            outcome:
              coefficients: {gpa: 10, gre: 0.5, treatment: 5}

        Missing keys keep their defaults; nested stage mappings are merged
        over the default stage. Unknown keys raise ``InvalidConfiguration``.
        """
        base = cls()
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise InvalidConfiguration(
                f"Unknown configuration keys: {sorted(unknown)}. Known keys: {sorted(known)}"
            )

        changes: dict[str, Any] = {}
        for key, value in values.items():
            current = getattr(base, key)
            if dataclasses.is_dataclass(current):
                if not isinstance(value, Mapping):
                    raise InvalidConfiguration(f"'{key}' must be a mapping, got {value!r}")
                changes[key] = _merge(current, key, value)
            else:
                changes[key] = value
        return dataclasses.replace(base, **changes)

    @classmethod
    def from_yaml(cls, path: Union[str, Path]) -> CohortConfig:
        """Load a configuration from a YAML file. See ``from_dict`` for the layout."""
        path = Path(path)
        with open(path, "r", encoding="utf-8") as fh:
            values = yaml.safe_load(fh) or {}
        if not isinstance(values, Mapping):
            raise InvalidConfiguration(f"{path} must contain a mapping at the top level")
        logger.info("Loaded cohort configuration from %s", path)
        return cls.from_dict(values)


def _merge(current: Any, key: str, values: Mapping[str, Any]) -> Any:
    known = {f.name for f in dataclasses.fields(current)}
    unknown = set(values) - known
    if unknown:
        raise InvalidConfiguration(
            f"Unknown keys for '{key}': {sorted(unknown)}. Known keys: {sorted(known)}"
        )
    try:
        return dataclasses.replace(current, **values)
    except (TypeError, ValueError) as exc:
        raise InvalidConfiguration(f"Invalid values for '{key}': {exc}") from exc


def _check_interval(label: str, interval: Interval) -> None:
    lo, hi = interval
    if not (math.isfinite(lo) and math.isfinite(hi)) or lo >= hi:
        raise InvalidConfiguration(
            f"{label}: target interval must satisfy lo < hi, got [{lo}, {hi}]"
        )


def _check_truncated_normal(label: str, dist: TruncatedNormal) -> None:
    if not dist.sd > 0:
        raise InvalidConfiguration(f"{label}: standard deviation must be positive, got {dist.sd}")
    _check_interval(label, (dist.low, dist.high))
    _check_decimals(label, dist.decimals)


def _check_decimals(label: str, decimals: Any) -> None:
    if decimals is None:
        return
    if isinstance(decimals, bool) or not isinstance(decimals, int) or decimals < 0:
        raise InvalidConfiguration(
            f"{label}: decimals must be a non-negative integer or None, got {decimals!r}"
        )


def _check_stage(node: str, stage: LinearStage) -> None:
    if stage.noise_sd < 0:
        raise InvalidConfiguration(
            f"Stage '{stage.column}': noise standard deviation must be non-negative, got {stage.noise_sd}"
        )
    _check_interval(f"Stage '{stage.column}'", stage.interval)
    _check_decimals(f"Stage '{stage.column}'", stage.decimals)
    if node == TREATMENT and stage.baseline is not None:
        raise InvalidConfiguration(
            f"The treatment stage takes no baseline column, got '{stage.baseline}'"
        )
