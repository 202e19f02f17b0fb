"""Shared pytest fixtures: small structural systems with known solutions."""

from __future__ import annotations

import sys
from pathlib import Path

import matplotlib

matplotlib.use("Agg")


def _insert_repo_root() -> None:
    """Make the repository root importable without an install."""

    repo_root = Path(__file__).resolve().parents[1]
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))


_insert_repo_root()

import numpy as np  # noqa: E402
import pytest  # noqa: E402

from dsgesolve import StructuralSystem, TransitionLaw  # noqa: E402

PRESET_DIR = Path(__file__).resolve().parents[1] / "dsgesolve" / "presets"

# NK state order, as produced by LinearModel for the preset equations
NK_STATES = ["x", "pi", "i", "u", "E_x", "E_pi"]


def pc_system(beta: float = 0.99, kappa: float = 0.1, rho: float = 0.8, c: float = 0.0) -> StructuralSystem:
    """
    Forward-looking Phillips curve driven by an AR(1) output gap.

        pi_t = beta * E_t pi_{t+1} + kappa * x_t
        x_t  = rho * x_{t-1} + c + eps_t

    States [pi, x, E_pi].
    """

    G0 = np.array([[1.0, -kappa, -beta], [0.0, 1.0, 0.0], [1.0, 0.0, 0.0]])
    G1 = np.array([[0.0, 0.0, 0.0], [0.0, rho, 0.0], [0.0, 0.0, 1.0]])
    C = np.array([0.0, c, 0.0])
    Psi = np.array([[0.0], [1.0], [0.0]])
    Pi = np.array([[0.0], [0.0], [1.0]])
    return StructuralSystem(G0, G1, C, Psi, Pi)


def pc_closed_form(beta: float = 0.99, kappa: float = 0.1, rho: float = 0.8) -> TransitionLaw:
    a = kappa / (1.0 - beta * rho)
    T = np.array([[0.0, a * rho, 0.0], [0.0, rho, 0.0], [0.0, a * rho**2, 0.0]])
    R = np.array([[a], [1.0], [a * rho]])
    return TransitionLaw(T, R, np.zeros(3))


def nk_system(
    phi_pi: float = 1.5,
    peg: bool = False,
    beta: float = 0.99,
    sigma: float = 1.0,
    kappa: float = 0.1,
    rho: float = 0.8,
) -> StructuralSystem:
    """
    Three-equation NK model with a demand shock.

        x  = E x' - (i - E pi') / sigma + u
        pi = beta E pi' + kappa x
        i  = phi_pi pi        (or i = 0 under a peg)
        u  = rho u(-1) + eps

    States [x, pi, i, u, E_x, E_pi].
    """

    n = 6
    G0 = np.zeros((n, n))
    G1 = np.zeros((n, n))
    Psi = np.zeros((n, 1))
    Pi = np.zeros((n, 2))

    G0[0] = [1.0, 0.0, 1.0 / sigma, -1.0, -1.0, -1.0 / sigma]
    G0[1] = [-kappa, 1.0, 0.0, 0.0, 0.0, -beta]
    G0[2] = [0.0, 0.0, 1.0, 0.0, 0.0, 0.0] if peg else [0.0, -phi_pi, 1.0, 0.0, 0.0, 0.0]
    G0[3, 3] = 1.0
    G1[3, 3] = rho
    Psi[3, 0] = 1.0

    G0[4, 0] = 1.0
    G1[4, 4] = 1.0
    Pi[4, 0] = 1.0
    G0[5, 1] = 1.0
    G1[5, 5] = 1.0
    Pi[5, 1] = 1.0

    return StructuralSystem(G0, G1, np.zeros(n), Psi, Pi)


def explosive_system(root: float = 1.5) -> StructuralSystem:
    """Purely backward x_t = root * x_{t-1} + eps_t, no expectational error."""

    return StructuralSystem([[1.0]], [[root]], [0.0], [[1.0]], np.zeros((1, 0)))


NK_YAML = """
name: nk_test
variables: [x, pi, i, u]
shocks: [eps_u]
parameters:
  beta: 0.99
  sigma: 1.0
  kappa: 0.1
  phi_pi: {value: 1.5, regimes: {4: 3.0}}
  rho_u: 0.8
equations:
  is_curve: "x = x(+1) - (i - pi(+1)) / sigma + u"
  phillips: "pi = beta * pi(+1) + kappa * x"
  policy_rule: "i = phi_pi * pi"
  demand: "u = rho_u * u(-1) + eps_u"
regime_equations:
  "2-3":
    policy_rule: "i = 0"
policies:
  hawk:
    equations:
      policy_rule: "i = 3.0 * pi"
"""


@pytest.fixture
def pc() -> StructuralSystem:
    return pc_system()


@pytest.fixture
def taylor() -> StructuralSystem:
    return nk_system(phi_pi=1.5)


@pytest.fixture
def hawk() -> StructuralSystem:
    return nk_system(phi_pi=3.0)


@pytest.fixture
def peg() -> StructuralSystem:
    return nk_system(peg=True)


@pytest.fixture
def zlb_provider():
    """Peg in regimes 2..5, Taylor rule everywhere else."""

    systems = {"taylor": nk_system(phi_pi=1.5), "peg": nk_system(peg=True)}

    def provider(regime: int) -> StructuralSystem:
        return systems["peg"] if 2 <= regime <= 5 else systems["taylor"]

    return provider


@pytest.fixture
def nk_yaml() -> str:
    return NK_YAML
