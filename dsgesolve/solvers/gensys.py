"""
Gensys: Sims (2002) QZ solution of linear rational-expectations models.

    G0 @ s_t = G1 @ s_{t-1} + C + Psi @ eps_t + Pi @ eta_t
        ->  s_t = T @ s_{t-1} + C + R @ eps_t
"""

from typing import Optional, Tuple

import numpy as np
import scipy.linalg

from ..errors import FatalDecompositionError, ResolutionFailure
from ..system import ExistenceCertificate, StructuralSystem, TransitionLaw

# Roots up to this modulus count as stable, so unit roots perturbed by
# rounding stay on the stable side.
STABILITY_CUTOFF = 1.0 + 1e-6
REALSMALL = 1e-6


def _svd_keep(x: np.ndarray, realsmall: float):
    """SVD of `x`, keeping only singular values above `realsmall`."""
    if x.size == 0:
        return (np.zeros((x.shape[0], 0), dtype=complex),
                np.zeros(0),
                np.zeros((x.shape[1], 0), dtype=complex))
    u, d, vh = scipy.linalg.svd(x, full_matrices=False)
    keep = d > realsmall
    return u[:, keep], d[keep], vh.conj().T[:, keep]


def gensys(G0, G1, C, Psi, Pi, div: float = STABILITY_CUTOFF,
           realsmall: float = REALSMALL,
           regime: Optional[int] = None) -> Tuple[np.ndarray, np.ndarray, np.ndarray, ExistenceCertificate]:
    """
    Solve one structural system by the generalized Schur (QZ) method.

    Args:
        G0, G1: (n, n) coefficient matrices on s_t and s_{t-1}
        C: (n,) constant
        Psi: (n, k) shock loadings
        Pi: (n, m) expectational-error loadings
        div: stability cutoff on |b_ii / a_ii|
        realsmall: tolerance for zero singular values / diagonal entries
        regime: only used to label errors

    Returns:
        T, C, R, certificate. Matrices are real. If the certificate fails
        the matrices are not a valid solution.

    Raises:
        FatalDecompositionError: the QZ decomposition or a normalising
            inversion broke down.
    """
    G0 = np.asarray(G0, dtype=np.float64)
    G1 = np.asarray(G1, dtype=np.float64)
    C = np.asarray(C, dtype=np.float64).reshape(-1)
    Psi = np.asarray(Psi, dtype=np.float64)
    Pi = np.asarray(Pi, dtype=np.float64)

    n = G0.shape[0]
    k = Psi.shape[1]
    neta = Pi.shape[1]

    def _stable(alpha, beta):
        return np.abs(beta) <= div * np.abs(alpha)

    # 1. Ordered QZ: A = Q a Z^H, stable roots first
    try:
        a, b, _, _, q, z = scipy.linalg.ordqz(G0, G1, sort=_stable, output="complex")
    except (np.linalg.LinAlgError, ValueError) as e:
        raise FatalDecompositionError(f"QZ decomposition failed ({e})", regime)

    qt = q.conj().T
    diag_a = np.diag(a)
    diag_b = np.diag(b)

    # Coincident zeros: the pencil is singular, no solution can be read off
    if np.any((np.abs(diag_a) < realsmall) & (np.abs(diag_b) < realsmall)):
        cert = ExistenceCertificate(False, False, n_unstable=0, n_expectational=neta)
        return np.full((n, n), np.nan), np.full(n, np.nan), np.full((n, k), np.nan), cert

    nunstab = int(n - np.sum(_stable(diag_a, diag_b)))
    nstab = n - nunstab

    # 2. Existence / uniqueness from the rotated Pi
    qt1 = qt[:nstab, :]
    qt2 = qt[nstab:, :]
    try:
        ueta, deta, veta = _svd_keep(qt2 @ Pi, realsmall)
        ueta1, deta1, veta1 = _svd_keep(qt1 @ Pi, realsmall)
    except np.linalg.LinAlgError as e:
        raise FatalDecompositionError(f"SVD did not converge ({e})", regime)

    existence = deta.size >= nunstab

    if veta1.shape[1] == 0:
        uniqueness = True
    else:
        loose = veta1 - veta @ (veta.conj().T @ veta1)
        try:
            dl = scipy.linalg.svdvals(loose)
        except np.linalg.LinAlgError as e:
            raise FatalDecompositionError(f"SVD did not converge ({e})", regime)
        uniqueness = int(np.sum(np.abs(dl) > realsmall * n)) == 0

    cert = ExistenceCertificate(bool(existence), bool(uniqueness),
                                n_unstable=nunstab, n_expectational=neta)

    # 3. Eliminate the unstable block
    if nunstab == 0 or deta.size == 0:
        right = np.zeros((nstab, nunstab), dtype=complex)
    else:
        M = (ueta @ np.diag(1.0 / deta) @ veta.conj().T
             @ veta1 @ np.diag(deta1) @ ueta1.conj().T)
        right = -M.conj().T
    tmat = np.hstack([np.eye(nstab), right])

    G0t = np.vstack([tmat @ a,
                     np.hstack([np.zeros((nunstab, nstab)), np.eye(nunstab)])])
    G1t = np.vstack([tmat @ b, np.zeros((nunstab, n))])

    try:
        G0I = np.linalg.inv(G0t)
    except np.linalg.LinAlgError as e:
        raise FatalDecompositionError(f"Singular normalisation in gensys ({e})", regime)

    G1t = G0I @ G1t

    # 4. Constant: unstable block solved at its steady state
    if nunstab > 0 and np.any(C != 0.0):
        usix = slice(nstab, n)
        try:
            c_unstab = np.linalg.solve(a[usix, usix] - b[usix, usix], qt2 @ C)
        except np.linalg.LinAlgError as e:
            raise FatalDecompositionError(f"Unit root in the constant term ({e})", regime)
    else:
        c_unstab = np.zeros(nunstab, dtype=complex)
    Ct = G0I @ np.concatenate([tmat @ (qt @ C), c_unstab])

    impact = G0I @ np.vstack([tmat @ (qt @ Psi), np.zeros((nunstab, k))])

    # 5. Rotate back; drop the imaginary residue
    T_out = np.real(z @ G1t @ z.conj().T)
    C_out = np.real(z @ Ct)
    R_out = np.real(z @ impact)

    return T_out, C_out, R_out, cert


def solve_regime(system: StructuralSystem, regime: int = 1,
                 div: float = STABILITY_CUTOFF) -> TransitionLaw:
    """
    Solve one regime's structural system.

    Raises:
        ResolutionFailure: existence or uniqueness fails.
        FatalDecompositionError: the decomposition failed.
    """
    T, C, R, cert = gensys(system.G0, system.G1, system.C, system.Psi, system.Pi,
                           div=div, regime=regime)
    if not cert.ok:
        raise ResolutionFailure(cert, regime)
    return TransitionLaw(T, R, C)
