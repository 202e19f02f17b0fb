"""
Structure-preserving doubling (SDA) on the predictable form.

With the expectational rows replaced by their conditional expectations,
a time-invariant law s_t = T s_{t-1} + ... must satisfy

    G2 T^2 - G0 T + G1 = 0

SDA converges to the minimal solvent of A X^2 + B X + C = 0, which is the
stable law when one exists. Single regime only.
"""

from typing import Tuple

import numpy as np
from scipy.linalg import lu_factor, lu_solve, norm

from ..errors import FatalDecompositionError, ResolutionFailure
from ..system import ExistenceCertificate, StructuralSystem, TransitionLaw
from .gensys import STABILITY_CUTOFF


def _factor(M: np.ndarray, what: str, regime):
    lu, piv = lu_factor(M, check_finite=False)
    if not np.all(np.isfinite(lu)) or np.any(np.diag(lu) == 0.0):
        raise FatalDecompositionError(f"Singular {what} in doubling", regime)
    return lu, piv


def solve_quadratic_matrix_equation(A, B, C, tol: float = 1e-12, max_iter: int = 100,
                                    regime=None) -> Tuple[np.ndarray, int, bool]:
    """
    Solve A X^2 + B X + C = 0 for the minimal solvent X.

    Returns:
        X, iterations used, converged flag.
    """
    n = A.shape[0]
    if A.shape != (n, n) or B.shape != (n, n) or C.shape != (n, n):
        raise ValueError("Input matrices A, B, C must be square and conformable.")

    lu_B = _factor(B, "matrix B", regime)
    E = -lu_solve(lu_B, C)
    F = -lu_solve(lu_B, A)
    X, Y = E.copy(), F.copy()

    I = np.eye(n)
    for i in range(1, max_iter + 1):
        lu_1 = _factor(I - Y @ X, "(I - YX)", regime)
        lu_2 = _factor(I - X @ Y, "(I - XY)", regime)

        E_new = E @ lu_solve(lu_1, E)
        F_new = F @ lu_solve(lu_2, F)
        X_new = X + F @ lu_solve(lu_2, X @ E)
        Y_new = Y + E @ lu_solve(lu_1, Y @ F)

        rel = norm(X_new - X, ord="fro") / (norm(X_new, ord="fro") + 1e-12)
        X, Y, E, F = X_new, Y_new, E_new, F_new
        if not np.all(np.isfinite(X)):
            return X, i, False
        if rel < tol:
            return X, i, True

    return X, max_iter, False


def doubling(system: StructuralSystem, tol: float = 1e-12, max_iter: int = 100,
             div: float = STABILITY_CUTOFF, regime=None):
    """
    Same contract as `gensys`: returns T, C, R, certificate.

    Existence holds when the iteration converges to a solvent with a small
    residual and spectral radius below `div`. Uniqueness is not checked
    separately and is reported equal to existence.
    """
    pf = system.predictable_form()
    n = system.n_states

    X, _, converged = solve_quadratic_matrix_equation(pf.G2, -pf.G0, pf.G1,
                                                      tol=tol, max_iter=max_iter,
                                                      regime=regime)
    ok = False
    if converged:
        residual = norm(pf.G2 @ X @ X - pf.G0 @ X + pf.G1, ord="fro")
        scale = 1.0 + norm(pf.G0, ord="fro")
        radius = np.max(np.abs(np.linalg.eigvals(X))) if n else 0.0
        ok = bool(residual <= 1e-8 * scale and radius < div)

    cert = ExistenceCertificate(ok, ok, n_unstable=0, n_expectational=system.n_expectational)
    if not ok:
        k = system.n_shocks
        return np.full((n, n), np.nan), np.full(n, np.nan), np.full((n, k), np.nan), cert

    try:
        A = pf.G0 - pf.G2 @ X
        R = np.linalg.solve(A, pf.Psi)
        if np.any(pf.C != 0.0):
            # steady state of s = X s + c with E s' = s
            C = np.linalg.solve(A - pf.G2, pf.C)
        else:
            C = np.zeros(n)
    except np.linalg.LinAlgError as e:
        raise FatalDecompositionError(f"Singular system after doubling ({e})", regime)

    return X, C, R, cert


def solve_doubling(system: StructuralSystem, regime: int = 1,
                   div: float = STABILITY_CUTOFF) -> TransitionLaw:
    T, C, R, cert = doubling(system, div=div, regime=regime)
    if not cert.ok:
        raise ResolutionFailure(cert, regime)
    return TransitionLaw(T, R, C)
