from __future__ import annotations

from ._exceptions import GraphError
from .columns import GPA, GRE, OUTCOME, TREATMENT


class _Node:
    """
    A node proxy returned by ``DAG.assume()``. Use ``.causes()`` to assert edges::

        dag.assume("gpa").causes("gre", "treatment", "outcome")
    """

    def __init__(self, name: str, dag: DAG) -> None:
        self._name = name
        self._dag = dag

    def causes(self, *effects: str) -> _Node:
        """Assert that this node causes each of ``effects``. Returns self for chaining."""
        for effect in effects:
            self._dag._assert_edge(self._name, effect)
        return self


class DAG:
    """
    A directed acyclic graph of the causal assumptions a synthetic cohort is
    built from.

    The graph does double duty. The generator walks it in topological order
    to decide which column is derived next and which columns it may draw on,
    and the OLS estimator reads it to work out which variables must be
    controlled for when recovering the injected effect.

    Example::

        dag = DAG()
        dag.assume("gpa").causes("gre", "treatment", "outcome")
        dag.assume("gre").causes("treatment", "outcome")
        dag.assume("treatment").causes("outcome")
    """

    def __init__(self) -> None:
        self._edges: list[tuple[str, str]] = []

    # ── Building the graph ────────────────────────────────────────────────────

    def assume(self, node: str) -> _Node:
        """Name a node and return it so you can assert what it causes."""
        return _Node(node, self)

    def _assert_edge(self, cause: str, effect: str) -> None:
        if cause == effect:
            raise GraphError(f"Self-loops are not allowed: '{cause}'")
        if (cause, effect) in self._edges:
            raise GraphError(f"'{cause}' → '{effect}' already asserted")
        self._edges.append((cause, effect))
        if self._has_cycle():
            self._edges.pop()
            raise GraphError(
                f"Asserting '{cause}' → '{effect}' would create a cycle. "
                f"Causal graphs must be acyclic (DAGs)."
            )

    # ── Graph properties ──────────────────────────────────────────────────────

    @property
    def nodes(self) -> set[str]:
        """All nodes in the graph."""
        result: set[str] = set()
        for cause, effect in self._edges:
            result.add(cause)
            result.add(effect)
        return result

    @property
    def edges(self) -> list[tuple[str, str]]:
        """All directed edges as (cause, effect) pairs, in assertion order."""
        return list(self._edges)

    def parents(self, node: str) -> set[str]:
        """Direct causes of node."""
        return {cause for cause, effect in self._edges if effect == node}

    def children(self, node: str) -> set[str]:
        """Direct effects of node."""
        return {effect for cause, effect in self._edges if cause == node}

    def ancestors(self, node: str) -> set[str]:
        """All nodes with a directed path leading to node."""
        result: set[str] = set()
        queue = list(self.parents(node))
        while queue:
            current = queue.pop()
            if current not in result:
                result.add(current)
                queue.extend(self.parents(current))
        return result

    def descendants(self, node: str) -> set[str]:
        """All nodes reachable from node via directed paths."""
        result: set[str] = set()
        queue = list(self.children(node))
        while queue:
            current = queue.pop()
            if current not in result:
                result.add(current)
                queue.extend(self.children(current))
        return result

    def roots(self) -> list[str]:
        """Nodes without parents, sorted by name. These are drawn, never derived."""
        return sorted(n for n in self.nodes if not self.parents(n))

    def topological_order(self) -> list[str]:
        """
        Every node after all of its causes.

        Ties are broken alphabetically so the same graph always yields the
        same order, which keeps the sequence of random draws reproducible.
        """
        in_degree = self._in_degree()
        ready = sorted(n for n, deg in in_degree.items() if deg == 0)
        order: list[str] = []
        while ready:
            node = ready.pop(0)
            order.append(node)
            for child in sorted(self.children(node)):
                in_degree[child] -= 1
                if in_degree[child] == 0:
                    ready.append(child)
            ready.sort()
        return order

    # ── Internal helpers ──────────────────────────────────────────────────────

    def _in_degree(self) -> dict[str, int]:
        in_degree: dict[str, int] = {n: 0 for n in self.nodes}
        for _, effect in self._edges:
            in_degree[effect] += 1
        return in_degree

    def _has_cycle(self) -> bool:
        """Kahn's algorithm: returns True if the current edge list contains a cycle."""
        in_degree = self._in_degree()
        queue = [n for n, deg in in_degree.items() if deg == 0]
        visited = 0
        while queue:
            node = queue.pop()
            visited += 1
            for child in self.children(node):
                in_degree[child] -= 1
                if in_degree[child] == 0:
                    queue.append(child)

        return visited != len(self.nodes)

    # ── Display ───────────────────────────────────────────────────────────────

    def __repr__(self) -> str:
        if not self._edges:
            return "DAG (empty)"
        lines = ["DAG:"]
        for cause, effect in self._edges:
            lines.append(f"  {cause} → {effect}")
        return "\n".join(lines)


def cohort_dag() -> DAG:
    """
    The causal structure every synthetic cohort is generated from::

        gpa → gre
        gpa → treatment ← gre
        gpa → outcome   ← gre
        treatment → outcome

    GPA and GRE are confounders: both push units away from treatment and
    towards a better outcome.
    """
    dag = DAG()
    dag.assume(GPA).causes(GRE, TREATMENT, OUTCOME)
    dag.assume(GRE).causes(TREATMENT, OUTCOME)
    dag.assume(TREATMENT).causes(OUTCOME)
    return dag
