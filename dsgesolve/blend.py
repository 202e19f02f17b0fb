"""
Policy-uncertainty blending.

Agents put probability w_i on candidate policy i holding from next period
on. Their expectations use the weighted average of the candidate laws,
while today's structural equations are still the true current system.
"""

from typing import List, Optional, Sequence, Union

import numpy as np

from .errors import ConfigurationError
from .splice import _regime_labels
from .system import StructuralSystem, TransitionLaw

WEIGHT_TOL = 1e-8


def validate_weights(weights, n_candidates: int, regime: Optional[int] = None) -> np.ndarray:
    """
    Check a weight vector against the candidates it weighs.

    Raises:
        ConfigurationError: wrong length, negative entries, or a sum
            further than 1e-8 from one.
    """
    w = np.asarray(weights, dtype=np.float64).reshape(-1)
    if w.shape[0] != n_candidates:
        raise ConfigurationError(
            f"Got {w.shape[0]} weights for {n_candidates} candidate policies", regime)
    if not np.all(np.isfinite(w)) or np.any(w < 0.0):
        raise ConfigurationError(f"Weights must be non-negative, got {w.tolist()}", regime)
    if abs(w.sum() - 1.0) > WEIGHT_TOL:
        raise ConfigurationError(f"Weights must sum to 1, got {w.sum():.10g}", regime)
    return w


def blend_policies(candidates: Sequence[TransitionLaw], weights, system: StructuralSystem,
                   regime: Optional[int] = None) -> TransitionLaw:
    """
    One-period law under uncertainty about the continuation policy.

    Args:
        candidates: continuation laws, possibly augmented
        weights: probability on each candidate
        system: current-period structural system

    Returns:
        Law on the system's (non-augmented) states.
    """
    if len(candidates) == 0:
        raise ConfigurationError("Need at least one candidate policy to blend", regime)
    w = validate_weights(weights, len(candidates), regime)

    n = system.n_states
    expected = TransitionLaw.weighted([c.restrict(n) for c in candidates], w)
    return system.predictable_form().step(expected, regime=regime)


def _window_weights(weights, n_periods: int, n_candidates: int,
                    labels: List[Optional[int]]) -> List[np.ndarray]:
    w = np.asarray(weights, dtype=np.float64)
    if w.ndim == 1:
        checked = validate_weights(w, n_candidates)
        return [checked] * n_periods
    if w.ndim != 2 or w.shape[0] != n_periods:
        raise ConfigurationError(
            f"Window weights must be one vector or one per period ({n_periods}), got shape {w.shape}")
    return [validate_weights(row, n_candidates, regime) for row, regime in zip(w, labels)]


def blend_temporary_window(systems: Sequence[StructuralSystem], terminal: TransitionLaw,
                           alternatives: Sequence[TransitionLaw],
                           weights: Union[Sequence[float], Sequence[Sequence[float]]],
                           regimes: Optional[Sequence[int]] = None) -> List[TransitionLaw]:
    """
    Temporary window where agents doubt the window rule will carry on.

    Walking backward from the terminal law, each period's continuation is

        w_t[0] * L_{t+1} + sum_i w_t[i] * alternatives[i-1]

    where L_{t+1} is the law just computed for the following period.

    Args:
        systems: structural systems of the window regimes, in time order
        terminal: non-augmented law of the regime after the window
        alternatives: permanent laws agents think they may switch to
        weights: one vector of length 1 + len(alternatives), or one such
            vector per window period
        regimes: regime numbers of `systems`, used to label errors

    Returns:
        [L_1, ..., L_k, terminal], as `splice_temporary_window`.
    """
    labels = _regime_labels(len(systems), regimes)
    period_weights = _window_weights(weights, len(systems), 1 + len(alternatives), labels)

    laws: List[TransitionLaw] = [terminal]
    for system, w, regime in zip(reversed(systems), reversed(period_weights), reversed(labels)):
        laws.append(blend_policies([laws[-1], *alternatives], w, system, regime=regime))

    laws.reverse()
    return laws
