"""
Single-regime solution methods.

Each method maps (StructuralSystem, regime) -> TransitionLaw and raises
ResolutionFailure when no unique stable solution exists.
"""

from dataclasses import dataclass
from typing import Callable, Dict

from ..errors import ConfigurationError, UnsupportedMethodError
from ..system import StructuralSystem, TransitionLaw
from .doubling import doubling, solve_doubling
from .gensys import STABILITY_CUTOFF, gensys, solve_regime


@dataclass(frozen=True)
class SolutionMethod:
    name: str
    solve: Callable[[StructuralSystem, int], TransitionLaw]
    regime_switching: bool


SOLUTION_METHODS: Dict[str, SolutionMethod] = {
    "gensys": SolutionMethod("gensys", solve_regime, regime_switching=True),
    "doubling": SolutionMethod("doubling", solve_doubling, regime_switching=False),
}


def get_method(name: str, regime_switching: bool = False) -> SolutionMethod:
    """
    Look up a solution method by name.

    Raises:
        ConfigurationError: unknown method.
        UnsupportedMethodError: regime switching requested from a method
            that only handles one regime.
    """
    method = SOLUTION_METHODS.get(name)
    if method is None:
        raise ConfigurationError(
            f"Unknown solution method '{name}'. Available: {sorted(SOLUTION_METHODS)}")
    if regime_switching and not method.regime_switching:
        raise UnsupportedMethodError(name)
    return method


__all__ = [
    "STABILITY_CUTOFF",
    "SOLUTION_METHODS",
    "SolutionMethod",
    "doubling",
    "gensys",
    "get_method",
    "solve_doubling",
    "solve_regime",
]
