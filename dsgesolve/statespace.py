"""
Utilities on solved transition laws.
"""

from typing import Iterable, List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from .errors import ConfigurationError, FatalDecompositionError
from .system import TransitionLaw


def spectral_radius(T) -> float:
    T = np.asarray(T)
    if T.size == 0:
        return 0.0
    return float(np.max(np.abs(np.linalg.eigvals(T))))


def expected_average_transition(T, horizon: int = 40) -> np.ndarray:
    """
    (1/h) * sum_{j=1..h} T^j, the average transition over the next h
    periods.

    Built by binary doubling of partial sums, so it stays well defined
    when T has a unit root.
    """
    if horizon < 1:
        raise ConfigurationError(f"horizon must be at least 1, got {horizon}")
    T = np.asarray(T, dtype=np.float64)
    n = T.shape[0]

    # S = sum_{j=1..m} T^j, P = T^m
    S = np.zeros((n, n))
    P = np.eye(n)
    for bit in bin(horizon)[2:]:
        S = S + P @ S
        P = P @ P
        if bit == "1":
            P = P @ T
            S = S + P
    return S / horizon


def unconditional_mean(law: TransitionLaw) -> np.ndarray:
    """(I - T)^{-1} C. Undefined at a unit root."""
    n = law.n_states
    try:
        return np.linalg.solve(np.eye(n) - law.T, law.C)
    except np.linalg.LinAlgError as e:
        raise FatalDecompositionError(f"Unit root: no unconditional mean ({e})")


def _as_law_list(laws) -> List[TransitionLaw]:
    if isinstance(laws, TransitionLaw):
        return [laws]
    laws = list(laws)
    if not laws:
        raise ConfigurationError("Need at least one transition law")
    return laws


def impulse_response(laws: Union[TransitionLaw, Iterable[TransitionLaw]], shock: Union[int, str],
                     horizon: int = 20, size: float = 1.0,
                     state_names: Optional[Sequence[str]] = None,
                     shock_names: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """
    Response of every state to a one-time shock in period 0.

    Period t uses laws[t]; once the sequence runs out the last law
    persists. The constant is left out, so responses are deviations.

    Args:
        laws: one law or a sequence of per-period laws (e.g. a Solution)
        shock: shock index or name (names need `shock_names`)
        horizon: number of periods
        size: shock size
        state_names: column labels, defaults to s0, s1, ...

    Returns:
        DataFrame indexed by period t = 0..horizon-1.
    """
    laws = _as_law_list(laws)
    n = laws[0].n_states

    if isinstance(shock, str):
        if shock_names is None or shock not in shock_names:
            raise ConfigurationError(f"Unknown shock '{shock}'")
        shock = list(shock_names).index(shock)
    if not 0 <= shock < laws[0].n_shocks:
        raise ConfigurationError(f"Shock index {shock} outside 0..{laws[0].n_shocks - 1}")

    if state_names is None:
        state_names = [f"s{i}" for i in range(n)]
    else:
        # augmented states get generic labels
        state_names = list(state_names) + [f"aug{i}" for i in range(n - len(state_names))]

    path = np.zeros((horizon, n))
    s = np.zeros(n)
    for t in range(horizon):
        law = laws[min(t, len(laws) - 1)]
        if t == 0:
            s = law.R[:, shock] * size
        else:
            s = law.T @ s
        path[t] = s

    df = pd.DataFrame(path, columns=list(state_names)[:n])
    df.index.name = "t"
    return df
