"""
Regime sequencer: one transition law per regime.

Order of work:
    1. the terminal regime, before any window regime
    2. window regimes past the uncertain stretch, each solved on its own
    3. the temporary window, backward from the law that follows it
    4. the remaining regimes, each solved on its own (credibility blend if any)
Regimes before the forecast start are history and never blend.
Every stored law is passed through the augmentor exactly once.
"""

from typing import Callable, Dict, List, Optional, Tuple

import numpy as np

from .augment import identity_augmentor
from .blend import blend_policies, blend_temporary_window
from .config import PolicyConfig, RegimeConfig
from .errors import ConfigurationError
from .policy import Policy
from .splice import splice_temporary_window
from .system import StructuralSystem, TransitionLaw

Augmentor = Callable[[TransitionLaw, int], TransitionLaw]


class _RegimeCache:
    """Per-call memo of structural systems and permanent policy laws."""

    def __init__(self, provider, method: str):
        self._provider = provider
        self.method = method
        self._systems: Dict[int, StructuralSystem] = {}
        self._laws: Dict[Tuple[str, str, int], TransitionLaw] = {}

    def system(self, regime: int) -> StructuralSystem:
        if regime not in self._systems:
            system = self._provider(regime)
            if not isinstance(system, StructuralSystem):
                raise ConfigurationError(
                    f"Provider returned {type(system).__name__}, expected StructuralSystem", regime)
            self._systems[regime] = system
        return self._systems[regime]

    def policy_law(self, pol: Policy, regime: int) -> TransitionLaw:
        key = (pol.kind.value, pol.key, regime)
        if key not in self._laws:
            self._laws[key] = pol.solve(self.system, regime, self.method)
        return self._laws[key]


def _forward_law(cache: _RegimeCache, policy_config: PolicyConfig, regime: int,
                 forecast_start: Optional[int] = None) -> TransitionLaw:
    """Non-augmented law of a regime solved on its own."""
    pol = policy_config.policy_for(regime)
    law = cache.policy_law(pol, regime)

    cred = policy_config.credibility
    if cred is not None and cred.applies_to(regime, forecast_start):
        system = pol.system(cache.system, regime)
        candidates = [law] + [cache.policy_law(policy_config.policies.get(key), regime)
                              for key in cred.candidates]
        law = blend_policies(candidates, cred.weights_for(regime), system, regime=regime)

    return law.restrict(cache.system(regime).n_states)


def _window_weights(policy_config: PolicyConfig, regime: int, forecast_start: Optional[int]) -> np.ndarray:
    cred = policy_config.credibility
    if cred.applies_to(regime, forecast_start):
        return cred.weights_for(regime)
    # no doubt here: all weight on the window path
    w = np.zeros(1 + len(cred.candidates))
    w[0] = 1.0
    return w


def solve_all_regimes(provider, regime_config: RegimeConfig, policy_config: PolicyConfig,
                      augment: Optional[Augmentor] = None) -> List[TransitionLaw]:
    """
    Solve every regime of a regime-switching model.

    Args:
        provider: callable regime -> StructuralSystem
        regime_config: regime layout
        policy_config: governing policies and credibility
        augment: callable (law, regime) -> law, identity by default

    Returns:
        Laws for regimes 1..n_regimes, in order. With regime switching
        inactive only regime 1 is solved.

    Raises:
        ConfigurationError: before any numerical work, on malformed input.
        ResolutionFailure / FatalDecompositionError: from the regime that
            failed.
    """
    augment = augment or identity_augmentor
    policy_config.validate(regime_config)
    cache = _RegimeCache(provider, policy_config.solution_method)

    start = regime_config.forecast_start

    if not policy_config.regime_switching:
        return [augment(_forward_law(cache, policy_config, 1, start), 1)]

    # fetch everything first so a bad provider fails before any solve
    for regime in regime_config.regimes:
        cache.system(regime)

    raw: Dict[int, TransitionLaw] = {}

    if regime_config.has_window:
        terminal_regime = regime_config.terminal_regime
        terminal = _forward_law(cache, policy_config, terminal_regime, start)
        raw[terminal_regime] = terminal

        window = regime_config.recursion_regimes

        if policy_config.uncertain_window:
            uncertain = policy_config.uncertain_regimes(regime_config)
            for regime in window[len(uncertain):]:
                raw[regime] = _forward_law(cache, policy_config, regime, start)
            after = window[len(uncertain)] if len(uncertain) < len(window) else terminal_regime

            cred = policy_config.credibility
            alternatives = [cache.policy_law(policy_config.policies.get(key), terminal_regime)
                            for key in cred.candidates]
            weights = [_window_weights(policy_config, r, start) for r in uncertain]
            recursed = uncertain
            laws = blend_temporary_window([cache.system(r) for r in recursed], raw[after],
                                          alternatives, weights, regimes=recursed)
        else:
            recursed = window
            laws = splice_temporary_window([cache.system(r) for r in recursed], terminal, regimes=recursed)

        for regime, law in zip(recursed, laws[:-1]):
            raw[regime] = law

    for regime in regime_config.forward_regimes:
        if regime not in raw:
            raw[regime] = _forward_law(cache, policy_config, regime, start)

    return [augment(raw[regime], regime) for regime in regime_config.regimes]
