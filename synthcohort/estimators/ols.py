from __future__ import annotations

import pandas as pd
import statsmodels.formula.api as smf

from .._exceptions import IdentificationError
from ..dag import DAG


class OLSResult:
    """
    Adjusted and naive OLS estimates of the treatment effect in one cohort.

    The adjusted model controls for the confounders the DAG identifies; the
    unadjusted model regresses outcome on treatment alone. Their difference
    is the confounding bias built into the cohort.
    """

    def __init__(
        self,
        adjusted_result,
        unadjusted_result,
        treatment: str,
        outcome: str,
        adjustment_set: set[str],
    ) -> None:
        self._adjusted = adjusted_result
        self._unadjusted = unadjusted_result
        self._treatment = treatment
        self._outcome = outcome
        self._adjustment_set = adjustment_set

    @property
    def effect(self) -> float:
        """Adjusted point estimate of the treatment effect."""
        return float(self._adjusted.params[self._treatment])

    @property
    def unadjusted_effect(self) -> float:
        """Naive point estimate from ``outcome ~ treatment``."""
        return float(self._unadjusted.params[self._treatment])

    @property
    def bias(self) -> float:
        """Naive minus adjusted estimate."""
        return self.unadjusted_effect - self.effect

    @property
    def std_err(self) -> float:
        return float(self._adjusted.bse[self._treatment])

    @property
    def conf_int(self) -> tuple[float, float]:
        """95% confidence interval for the adjusted estimate."""
        ci = self._adjusted.conf_int()
        return (float(ci.loc[self._treatment, 0]), float(ci.loc[self._treatment, 1]))

    @property
    def pvalue(self) -> float:
        return float(self._adjusted.pvalues[self._treatment])

    @property
    def adjustment_set(self) -> set[str]:
        """Variables controlled for to satisfy the backdoor criterion."""
        return self._adjustment_set

    @property
    def statsmodels_result(self):
        """The underlying adjusted statsmodels result, for full diagnostics."""
        return self._adjusted

    @property
    def statsmodels_unadjusted_result(self):
        """The underlying unadjusted statsmodels result, for full diagnostics."""
        return self._unadjusted

    def summary(self) -> str:
        lo, hi = self.conf_int
        adj = sorted(self._adjustment_set)

        lines = [
            "",
            f"OLS Treatment Effect: {self._treatment} → {self._outcome}",
            "─" * 50,
        ]
        if adj:
            lines += [
                f"  Adjusted estimate    : {self.effect:>10.4f}  (controlling for: {', '.join(adj)})",
                f"  Unadjusted estimate  : {self.unadjusted_effect:>10.4f}  (no controls)",
                f"  Confounding bias     : {self.bias:>+10.4f}",
            ]
        else:
            lines += [
                f"  Estimate             : {self.effect:>10.4f}  (no confounders in DAG)",
            ]
        lines += [
            "",
            f"  Std. error           : {self.std_err:>10.4f}",
            f"  95% CI               : [{lo:.4f}, {hi:.4f}]",
            f"  p-value              : {self.pvalue:>10.4f}",
            "",
        ]
        return "\n".join(lines)

    def __repr__(self) -> str:
        return self.summary()


class OLSObservational:
    """
    OLS estimator that reads its controls off the DAG.

    Given a DAG, this estimator:
      1. Finds the adjustment set with the backdoor criterion: common
         ancestors of treatment and outcome that are not descendants of the
         treatment.
      2. Raises ``IdentificationError`` if any of them is missing from the data.
      3. Fits ``outcome ~ treatment + <adjustment set>`` and, for comparison,
         ``outcome ~ treatment``.

    Usage
    -----
        cohort = SyntheticCohortGenerator().generate()
        result = OLSObservational(cohort.dag, "treatment", "outcome").fit(cohort.data)
        print(result.summary())
    """

    def __init__(self, dag: DAG, treatment: str, outcome: str) -> None:
        self._dag = dag
        self._treatment = treatment
        self._outcome = outcome
        self._validate_inputs()

    def _validate_inputs(self) -> None:
        nodes = self._dag.nodes
        for label, var in [("Treatment", self._treatment), ("Outcome", self._outcome)]:
            if var not in nodes:
                raise ValueError(
                    f"{label} '{var}' is not a node in the DAG. "
                    f"Known nodes: {sorted(nodes)}"
                )
        if self._treatment == self._outcome:
            raise ValueError("Treatment and outcome must be different variables.")

    def _identify(self, data_columns: set[str]) -> tuple[set[str], set[str]]:
        """Return (observed_adjustment_set, unobserved_confounders)."""
        dag = self._dag
        T, Y = self._treatment, self._outcome

        confounders = (dag.ancestors(T) & dag.ancestors(Y)) - dag.descendants(T)
        observed = {c for c in confounders if c in data_columns}
        unobserved = confounders - observed
        return observed, unobserved

    def fit(self, data: pd.DataFrame) -> OLSResult:
        """
        Identify the adjustment set, then fit the adjusted and naive models.

        Raises
        ------
        IdentificationError
            If a confounder in the DAG has no column in ``data``.
        ValueError
            If the treatment or outcome column is missing.
        """
        data_columns = set(data.columns)
        for label, var in [("Treatment", self._treatment), ("Outcome", self._outcome)]:
            if var not in data_columns:
                raise ValueError(f"{label} column '{var}' not found in dataframe.")

        adjustment_set, unobserved = self._identify(data_columns)
        if unobserved:
            raise IdentificationError(
                f"\nUnobserved confounders detected: {sorted(unobserved)}\n\n"
                f"These variables influence both '{self._treatment}' and '{self._outcome}'\n"
                f"but are not in the dataframe and cannot be controlled for."
            )

        rhs = " + ".join([self._treatment] + sorted(adjustment_set))
        adjusted_result = smf.ols(f"{self._outcome} ~ {rhs}", data=data).fit()
        unadjusted_result = smf.ols(f"{self._outcome} ~ {self._treatment}", data=data).fit()

        return OLSResult(
            adjusted_result,
            unadjusted_result,
            self._treatment,
            self._outcome,
            adjustment_set,
        )
