import pytest

from synthcohort import DAG, GraphError, cohort_dag


class TestDAG:
    def test_basic_edges(self):
        dag = DAG()
        dag.assume("A").causes("B")
        dag.assume("B").causes("C")
        assert dag.parents("B") == {"A"}
        assert dag.children("B") == {"C"}
        assert dag.ancestors("C") == {"A", "B"}
        assert dag.descendants("A") == {"B", "C"}

    def test_multiple_effects_in_one_call(self):
        dag = DAG()
        dag.assume("A").causes("B", "C")
        assert dag.children("A") == {"B", "C"}

    def test_cycle_detection(self):
        dag = DAG()
        dag.assume("A").causes("B")
        dag.assume("B").causes("C")
        with pytest.raises(GraphError, match="cycle"):
            dag.assume("C").causes("A")
        assert ("C", "A") not in dag.edges

    def test_self_loop_and_duplicate_rejected(self):
        dag = DAG()
        with pytest.raises(GraphError, match="Self-loops"):
            dag.assume("A").causes("A")
        dag.assume("A").causes("B")
        with pytest.raises(GraphError, match="already asserted"):
            dag.assume("A").causes("B")

    def test_topological_order_is_deterministic(self):
        dag = DAG()
        dag.assume("b").causes("d")
        dag.assume("a").causes("d", "c")
        assert dag.topological_order() == ["a", "b", "c", "d"]
        assert dag.roots() == ["a", "b"]


class TestCohortDAG:
    def test_stage_order(self):
        assert cohort_dag().topological_order() == ["gpa", "gre", "treatment", "outcome"]

    def test_confounders_of_treatment(self):
        dag = cohort_dag()
        assert dag.parents("treatment") == {"gpa", "gre"}
        assert dag.parents("outcome") == {"gpa", "gre", "treatment"}
        assert dag.roots() == ["gpa"]

    def test_repr_lists_edges(self):
        assert "treatment → outcome" in repr(cohort_dag())
