"""
Error taxonomy for the solution engine.

Two channels are kept apart:
- FatalDecompositionError: the numerical decomposition itself broke down.
- ResolutionFailure: the decomposition worked but the model has no unique
  stable solution. Samplers catch this and treat the draw as infeasible.
"""

from typing import Optional


class SolverError(Exception):
    """Base class. Carries the regime the failure belongs to, if known."""

    def __init__(self, msg: str = "Error in solver", regime: Optional[int] = None):
        self.msg = msg
        self.regime = regime
        super().__init__(self.__str__())

    def __str__(self):
        if self.regime is None:
            return self.msg
        return f"{self.msg}, Regime {self.regime}"


class FatalDecompositionError(SolverError):
    """QZ / LAPACK failure. Never retried."""

    def __init__(self, msg: str = "Decomposition failed", regime: Optional[int] = None):
        super().__init__(msg, regime)


class ResolutionFailure(SolverError):
    """
    Existence or uniqueness of a stable solution is violated.

    Can be raised or returned as a value (see `dsgesolve.solve.try_solve`).
    """

    def __init__(self, certificate, regime: Optional[int] = None, msg: Optional[str] = None):
        self.certificate = certificate
        if msg is None:
            msg = f"No unique stable solution ({certificate.status.value})"
        super().__init__(msg, regime)

    @property
    def existence(self) -> bool:
        return self.certificate.existence

    @property
    def uniqueness(self) -> bool:
        return self.certificate.uniqueness


class ConfigurationError(SolverError, ValueError):
    """Malformed input, detected before any numerical work."""

    def __init__(self, msg: str = "Invalid configuration", regime: Optional[int] = None):
        super().__init__(msg, regime)


class UnsupportedMethodError(SolverError, NotImplementedError):
    """Regime switching requested with a method that cannot do it."""

    def __init__(self, method: str):
        self.method = method
        super().__init__(f"Regime switching has not been implemented for solution method '{method}'")
