"""
Core data model: structural systems, transition laws and the
existence/uniqueness certificate.

Structural form:
    G0 @ s_t = G1 @ s_{t-1} + C + Psi @ eps_t + Pi @ eta_t
Reduced form:
    s_t = T @ s_{t-1} + C + R @ eps_t
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

import numpy as np

from .errors import ConfigurationError, FatalDecompositionError


def _frozen(a, ndim: int, name: str) -> np.ndarray:
    arr = np.array(a, copy=True)
    if not np.iscomplexobj(arr):
        arr = arr.astype(np.float64)
    if ndim == 1:
        arr = arr.reshape(-1)
    elif arr.ndim == 1:
        # a single column given as a flat vector
        arr = arr.reshape(-1, 1)
    if arr.ndim != ndim:
        raise ConfigurationError(f"{name} must be {ndim}-dimensional, got shape {arr.shape}")
    arr.setflags(write=False)
    return arr


class DeterminacyStatus(str, Enum):
    UNIQUE = "unique"
    INDETERMINATE = "indeterminate"
    NONEXISTENT = "nonexistent"


@dataclass(frozen=True)
class ExistenceCertificate:
    """Existence / uniqueness flags returned by a single-regime solve."""
    existence: bool
    uniqueness: bool
    n_unstable: int = 0
    n_expectational: int = 0

    @property
    def ok(self) -> bool:
        return bool(self.existence and self.uniqueness)

    @property
    def status(self) -> DeterminacyStatus:
        if not self.existence:
            return DeterminacyStatus.NONEXISTENT
        if not self.uniqueness:
            return DeterminacyStatus.INDETERMINATE
        return DeterminacyStatus.UNIQUE

    def as_tuple(self):
        return (int(self.existence), int(self.uniqueness))


@dataclass(frozen=True, eq=False)
class TransitionLaw:
    """One period's reduced-form dynamics s_t = T s_{t-1} + C + R eps_t."""
    T: np.ndarray
    R: np.ndarray
    C: np.ndarray

    def __post_init__(self):
        T = _frozen(self.T, 2, "T")
        R = _frozen(self.R, 2, "R")
        C = _frozen(self.C, 1, "C")
        n = T.shape[0]
        if T.shape != (n, n):
            raise ConfigurationError(f"T must be square, got {T.shape}")
        if R.shape[0] != n or C.shape[0] != n:
            raise ConfigurationError(
                f"Dim mismatch: T is {T.shape}, R is {R.shape}, C has length {C.shape[0]}")
        object.__setattr__(self, "T", T)
        object.__setattr__(self, "R", R)
        object.__setattr__(self, "C", C)

    @property
    def n_states(self) -> int:
        return self.T.shape[0]

    @property
    def n_shocks(self) -> int:
        return self.R.shape[1]

    def restrict(self, n: int) -> "TransitionLaw":
        """Law on the first `n` states (drops augmented states)."""
        if n > self.n_states:
            raise ConfigurationError(f"Cannot restrict a {self.n_states}-state law to {n} states")
        if n == self.n_states:
            return self
        return TransitionLaw(self.T[:n, :n], self.R[:n, :], self.C[:n])

    def real(self) -> "TransitionLaw":
        return TransitionLaw(np.real(self.T), np.real(self.R), np.real(self.C))

    def spectral_radius(self, n: Optional[int] = None) -> float:
        T = self.T if n is None else self.T[:n, :n]
        if T.size == 0:
            return 0.0
        return float(np.max(np.abs(np.linalg.eigvals(T))))

    def allclose(self, other: "TransitionLaw", atol: float = 1e-8, rtol: float = 1e-6) -> bool:
        return (self.T.shape == other.T.shape and self.R.shape == other.R.shape
                and np.allclose(self.T, other.T, atol=atol, rtol=rtol)
                and np.allclose(self.R, other.R, atol=atol, rtol=rtol)
                and np.allclose(self.C, other.C, atol=atol, rtol=rtol))

    @classmethod
    def weighted(cls, laws: Sequence["TransitionLaw"], weights: Sequence[float]) -> "TransitionLaw":
        """Probability-weighted average of several laws of equal size."""
        if len(laws) != len(weights):
            raise ConfigurationError(
                f"Got {len(weights)} weights for {len(laws)} candidate policies")
        shapes = {(law.T.shape, law.R.shape) for law in laws}
        if len(shapes) != 1:
            raise ConfigurationError(f"Cannot average laws of different sizes: {sorted(shapes)}")

        T = sum(w * law.T for w, law in zip(weights, laws))
        R = sum(w * law.R for w, law in zip(weights, laws))
        C = sum(w * law.C for w, law in zip(weights, laws))
        return cls(T, R, C)


@dataclass(frozen=True, eq=False)
class PredictableForm:
    """
    G0 s_t = G1 s_{t-1} + G2 E_t[s_{t+1}] + C + Psi eps_t

    The expectational errors are gone: once next period's law is known
    the system pins down today's law without any eigenvalue split.
    """
    G0: np.ndarray
    G1: np.ndarray
    G2: np.ndarray
    C: np.ndarray
    Psi: np.ndarray

    @property
    def n_states(self) -> int:
        return self.G0.shape[0]

    def step(self, continuation: TransitionLaw, regime: Optional[int] = None) -> TransitionLaw:
        """
        Today's law given the law expected to hold next period.

        E_t[s_{t+1}] = T' s_t + C' turns the system into
            (G0 - G2 T') s_t = G1 s_{t-1} + (C + G2 C') + Psi eps_t
        """
        n = self.n_states
        cont = continuation.restrict(n)

        A = self.G0 - self.G2 @ cont.T
        rhs = np.hstack([self.G1, self.Psi, (self.C + self.G2 @ cont.C).reshape(-1, 1)])
        try:
            sol = np.linalg.solve(A, rhs)
        except np.linalg.LinAlgError as e:
            raise FatalDecompositionError(f"Singular system in backward step ({e})", regime)

        k = self.Psi.shape[1]
        return TransitionLaw(sol[:, :n], sol[:, n:n + k], sol[:, n + k])


@dataclass(frozen=True, eq=False)
class StructuralSystem:
    """
    Linear rational-expectations system for one regime.

    G0, G1: (n, n); C: (n,); Psi: (n, k); Pi: (n, m).
    Immutable once built.
    """
    G0: np.ndarray
    G1: np.ndarray
    C: np.ndarray
    Psi: np.ndarray
    Pi: np.ndarray

    def __post_init__(self):
        G0 = _frozen(self.G0, 2, "G0")
        G1 = _frozen(self.G1, 2, "G1")
        C = _frozen(self.C, 1, "C")
        Psi = _frozen(self.Psi, 2, "Psi")
        Pi = _frozen(self.Pi, 2, "Pi")

        n = G0.shape[0]
        if G0.shape != (n, n) or G1.shape != (n, n):
            raise ConfigurationError(f"G0 and G1 must be ({n}, {n}), got {G0.shape} and {G1.shape}")
        if C.shape[0] != n or Psi.shape[0] != n or Pi.shape[0] != n:
            raise ConfigurationError(
                f"C, Psi and Pi must have {n} rows, got {C.shape[0]}, {Psi.shape[0]}, {Pi.shape[0]}")

        for name, arr in (("G0", G0), ("G1", G1), ("C", C), ("Psi", Psi), ("Pi", Pi)):
            object.__setattr__(self, name, arr)

    @property
    def n_states(self) -> int:
        return self.G0.shape[0]

    @property
    def n_shocks(self) -> int:
        return self.Psi.shape[1]

    @property
    def n_expectational(self) -> int:
        return self.Pi.shape[1]

    def expectational_rows(self) -> np.ndarray:
        return np.flatnonzero(np.any(self.Pi != 0.0, axis=1))

    def predictable_form(self) -> PredictableForm:
        """
        Replace each equation carrying an expectational error by its
        one-step-ahead conditional expectation.

        Row j:  G0[j] s_{t+1} = G1[j] s_t + C[j] + Psi[j] eps_{t+1} + Pi[j] eta_{t+1}
        E_t ->  G1[j] s_t = G0[j] E_t[s_{t+1}] - C[j]

        Assumes each expectational error enters a single equation.
        """
        n = self.n_states
        G0 = self.G0.copy()
        G1 = self.G1.copy()
        G2 = np.zeros((n, n))
        C = self.C.copy()
        Psi = self.Psi.copy()

        rows = self.expectational_rows()
        G0[rows, :] = self.G1[rows, :]
        G2[rows, :] = self.G0[rows, :]
        G1[rows, :] = 0.0
        C[rows] = -self.C[rows]
        Psi[rows, :] = 0.0

        for arr in (G0, G1, G2, C, Psi):
            arr.setflags(write=False)
        return PredictableForm(G0, G1, G2, C, Psi)
