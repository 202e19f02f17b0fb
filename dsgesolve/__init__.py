"""
dsgesolve: solution engine for regime-switching linear rational-expectations models
===================================================================================

- Gensys (QZ) solution of a single regime, with existence/uniqueness check
- Regime sequencing with temporary policy windows
- Blending of continuation policies under imperfect credibility

Quick Start:
    from dsgesolve import LinearModel, LinearModelSpec, RegimeConfig, solve
    model = LinearModel(LinearModelSpec.from_yaml(open("model.yaml").read()))
    sol = solve(model, RegimeConfig(n_regimes=6, temporary_window=(2, 3, 4, 5)))
    sol[2].T
"""

__version__ = "0.3.0"

# Core data model
from .system import (DeterminacyStatus, ExistenceCertificate, PredictableForm,
                     StructuralSystem, TransitionLaw)
from .errors import (ConfigurationError, FatalDecompositionError, ResolutionFailure,
                     SolverError, UnsupportedMethodError)

# Solvers
from .solvers import STABILITY_CUTOFF, doubling, get_method, gensys, solve_regime
from .splice import splice_temporary_window
from .blend import blend_policies, blend_temporary_window, validate_weights

# Policies and configuration
from .policy import AltPolicy, DefaultPolicy, Policy, PolicyKind, PolicyRef, PolicyRegistry
from .config import Credibility, PolicyConfig, RegimeConfig
from .augment import StateAugmentation, identity_augmentor

# Orchestration
from .sequencer import solve_all_regimes
from .solve import Solution, solve, try_solve

# Model building and utilities
from .modeling import LinearModel, LinearModelSpec, ParameterSet
from .statespace import (expected_average_transition, impulse_response, spectral_radius,
                         unconditional_mean)
from .preset import Scenario, load_preset

__all__ = [
    "AltPolicy",
    "ConfigurationError",
    "Credibility",
    "DefaultPolicy",
    "DeterminacyStatus",
    "ExistenceCertificate",
    "FatalDecompositionError",
    "LinearModel",
    "LinearModelSpec",
    "ParameterSet",
    "Policy",
    "PolicyConfig",
    "PolicyKind",
    "PolicyRef",
    "PolicyRegistry",
    "PredictableForm",
    "RegimeConfig",
    "ResolutionFailure",
    "STABILITY_CUTOFF",
    "Scenario",
    "Solution",
    "SolverError",
    "StateAugmentation",
    "StructuralSystem",
    "TransitionLaw",
    "UnsupportedMethodError",
    "blend_policies",
    "blend_temporary_window",
    "doubling",
    "expected_average_transition",
    "gensys",
    "get_method",
    "identity_augmentor",
    "impulse_response",
    "load_preset",
    "solve",
    "solve_all_regimes",
    "solve_regime",
    "spectral_radius",
    "splice_temporary_window",
    "try_solve",
    "unconditional_mean",
    "validate_weights",
]
