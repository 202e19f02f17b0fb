"""
State augmentation.

An augmentor is any callable `augment(law, regime) -> TransitionLaw` that
expands a law on the model's own states to the full observation state
space. It must be a pure function of its inputs.
"""

from typing import Optional, Sequence

import numpy as np

from .errors import ConfigurationError
from .system import TransitionLaw


def identity_augmentor(law: TransitionLaw, regime: Optional[int] = None) -> TransitionLaw:
    return law


class StateAugmentation:
    """
    Append lagged copies and running sums of selected states.

    Augmented order: model states, then one lag per entry of `lags`, then
    one running sum per entry of `cumulative`.

        lag_t = s_{i,t-1}
        sum_t = sum_{t-1} + s_{i,t}
    """

    def __init__(self, lags: Sequence[int] = (), cumulative: Sequence[int] = ()):
        self.lags = [int(i) for i in lags]
        self.cumulative = [int(i) for i in cumulative]

    @property
    def n_extra(self) -> int:
        return len(self.lags) + len(self.cumulative)

    def __call__(self, law: TransitionLaw, regime: Optional[int] = None) -> TransitionLaw:
        n = law.n_states
        k = law.n_shocks
        bad = [i for i in self.lags + self.cumulative if not 0 <= i < n]
        if bad:
            raise ConfigurationError(f"Cannot augment states {bad} of a {n}-state law", regime)

        m = n + self.n_extra
        T = np.zeros((m, m))
        R = np.zeros((m, k))
        C = np.zeros(m)
        T[:n, :n] = law.T
        R[:n, :] = law.R
        C[:n] = law.C

        row = n
        for i in self.lags:
            T[row, i] = 1.0
            row += 1
        for i in self.cumulative:
            T[row, :n] = law.T[i, :]
            T[row, row] = 1.0
            R[row, :] = law.R[i, :]
            C[row] = law.C[i]
            row += 1

        return TransitionLaw(T, R, C)

    def __repr__(self):
        return f"StateAugmentation(lags={self.lags}, cumulative={self.cumulative})"
