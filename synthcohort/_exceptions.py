class IdentificationError(Exception):
    """
    Raised when a confounder declared in the DAG is absent from the dataframe.

    Note: this only checks confounders the user explicitly modelled. The
    cohorts generated here have no hidden causes, but a hand-edited frame
    may have had a confounder column dropped.
    """
    pass


class GraphError(Exception):
    """Raised when the DAG is structurally invalid."""
    pass


class InvalidConfiguration(ValueError):
    """
    Raised when generator parameters cannot describe a valid cohort: a
    non-positive cohort size, an empty or inverted target interval, a
    negative noise standard deviation, and so on.

    Always raised before any random draw is made.
    """
    pass


class DegenerateDistribution(ArithmeticError):
    """
    Raised when a population rescale meets a score column with zero
    variance. A min-max rescale of a constant column is undefined, so the
    run cannot produce a meaningful cohort.
    """
    pass
