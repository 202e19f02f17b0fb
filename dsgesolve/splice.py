"""
Temporary-policy splicing.

A rule that holds only for a known number of periods before the economy
reverts to a terminal rule has no time-invariant solution. Each window
period is solved backward from the terminal law: today's law is the one
implied by today's structural equations given that next period's law is
already known.
"""

from typing import List, Optional, Sequence

from .errors import ConfigurationError
from .system import StructuralSystem, TransitionLaw


def _regime_labels(n: int, regimes: Optional[Sequence[int]]) -> List[Optional[int]]:
    if regimes is None:
        return [None] * n
    regimes = list(regimes)
    if len(regimes) != n:
        raise ConfigurationError(f"Got {len(regimes)} regime labels for {n} window periods")
    return regimes


def splice_temporary_window(systems: Sequence[StructuralSystem], terminal: TransitionLaw,
                            regimes: Optional[Sequence[int]] = None) -> List[TransitionLaw]:
    """
    Solve a temporary-policy window backward from its terminal law.

    Args:
        systems: structural systems of the window regimes, in time order
        terminal: non-augmented law of the regime after the window
        regimes: regime numbers of `systems`, used to label errors

    Returns:
        [L_1, ..., L_k, terminal] with L_i = step(systems[i], L_{i+1}).
        An empty window returns [terminal].

    Raises:
        FatalDecompositionError: a step hit a singular system.
    """
    labels = _regime_labels(len(systems), regimes)
    laws: List[TransitionLaw] = [terminal]

    for system, regime in zip(reversed(systems), reversed(labels)):
        if system.n_states > terminal.n_states:
            raise ConfigurationError(
                f"Terminal law has {terminal.n_states} states, system needs {system.n_states}",
                regime)
        laws.append(system.predictable_form().step(laws[-1], regime=regime))

    laws.reverse()
    return laws
