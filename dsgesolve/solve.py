"""
Public entry points: `solve` and `try_solve`.
"""

import hashlib
from typing import Dict, Iterator, List, Optional, Union

import numpy as np
import pandas as pd

from .config import PolicyConfig, RegimeConfig
from .errors import ResolutionFailure
from .sequencer import Augmentor, solve_all_regimes
from .system import TransitionLaw


class Solution:
    """
    Transition laws for every solved regime.

    Indexed by regime number, starting at 1: `sol[1]` is regime 1.
    """

    def __init__(self, laws: List[TransitionLaw], policies: List[str], segments: List[str],
                 n_model_states: int):
        self.laws = list(laws)
        self.policies = list(policies)
        self.segments = list(segments)
        self.n_model_states = n_model_states

    @property
    def n_regimes(self) -> int:
        return len(self.laws)

    def __getitem__(self, regime: int) -> TransitionLaw:
        if not isinstance(regime, (int, np.integer)) or not 1 <= regime <= len(self.laws):
            raise IndexError(f"Regime {regime} outside 1..{len(self.laws)}")
        return self.laws[regime - 1]

    def __len__(self) -> int:
        return len(self.laws)

    def __iter__(self) -> Iterator[TransitionLaw]:
        return iter(self.laws)

    def to_dataframe(self) -> pd.DataFrame:
        """One row per regime: policy, segment, sizes and spectral radius."""
        rows = []
        for regime, (law, pol, seg) in enumerate(zip(self.laws, self.policies, self.segments), start=1):
            rows.append({
                "regime": regime,
                "policy": pol,
                "segment": seg,
                "n_states": law.n_states,
                "n_shocks": law.n_shocks,
                "spectral_radius": law.spectral_radius(self.n_model_states),
            })
        return pd.DataFrame(rows).set_index("regime")

    def fingerprint(self) -> str:
        """SHA-256 over all matrices, for reproducibility checks."""
        h = hashlib.sha256()
        for law in self.laws:
            for arr in (law.T, law.R, law.C):
                h.update(np.ascontiguousarray(arr).tobytes())
        return h.hexdigest()

    def __repr__(self):
        return f"Solution(n_regimes={self.n_regimes}, n_states={self.laws[0].n_states})"


def _memoised(provider):
    systems: Dict[int, object] = {}

    def fetch(regime: int):
        if regime not in systems:
            systems[regime] = provider(regime)
        return systems[regime]
    return fetch


def _segment(regime: int, regime_config: RegimeConfig) -> str:
    if regime in regime_config.recursion_regimes:
        return "window"
    if regime in regime_config.conditional_regimes:
        return "conditional"
    if regime == regime_config.terminal_regime:
        return "terminal"
    return "permanent"


def solve(provider, regime_config: Optional[RegimeConfig] = None,
          policy_config: Optional[PolicyConfig] = None,
          augment: Optional[Augmentor] = None, verbose: bool = False) -> Solution:
    """
    Solve a (possibly regime-switching) linear rational-expectations model.

    Args:
        provider: callable regime -> StructuralSystem
        regime_config: regime layout, one regime by default
        policy_config: governing policies, default rule everywhere by default
        augment: callable (law, regime) -> law
        verbose: print progress

    Raises:
        ResolutionFailure: some regime has no unique stable solution.
        FatalDecompositionError: a decomposition broke down.
        ConfigurationError / UnsupportedMethodError: malformed input.
    """
    regime_config = regime_config if regime_config is not None else RegimeConfig()
    policy_config = policy_config if policy_config is not None else PolicyConfig()
    fetch = _memoised(provider)

    if verbose:
        n = regime_config.n_regimes if policy_config.regime_switching else 1
        print(f"[dsgesolve] Solving {n} regime(s) with {policy_config.solution_method}...")
        if policy_config.regime_switching and regime_config.has_window:
            window = regime_config.recursion_regimes
            print(f"[dsgesolve] Temporary window {window[0]}..{window[-1]}, "
                  f"terminal regime {regime_config.terminal_regime}")

    laws = solve_all_regimes(fetch, regime_config, policy_config, augment=augment)

    regimes = list(range(1, len(laws) + 1))
    sol = Solution(
        laws,
        policies=[policy_config.ref_for(r).label for r in regimes],
        segments=[_segment(r, regime_config) for r in regimes],
        n_model_states=fetch(1).n_states,
    )

    if verbose:
        for r, law in enumerate(sol, start=1):
            print(f"   Regime {r:>3} [{sol.segments[r - 1]:<11}] policy={sol.policies[r - 1]:<12} "
                  f"rho(T)={law.spectral_radius(sol.n_model_states):.4f}")
        print("[dsgesolve] Done.")

    return sol


def try_solve(provider, regime_config: Optional[RegimeConfig] = None,
              policy_config: Optional[PolicyConfig] = None,
              augment: Optional[Augmentor] = None,
              verbose: bool = False) -> Union[Solution, ResolutionFailure]:
    """
    Like `solve`, but a model without a unique stable solution comes back
    as a `ResolutionFailure` value instead of raising. Other errors still
    raise.
    """
    try:
        return solve(provider, regime_config, policy_config, augment=augment, verbose=verbose)
    except ResolutionFailure as failure:
        if verbose:
            print(f"[dsgesolve] {failure}")
        return failure
