from .ols import OLSObservational, OLSResult

__all__ = ["OLSObservational", "OLSResult"]
