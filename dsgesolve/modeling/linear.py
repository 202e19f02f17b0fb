import dataclasses
import re
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np
import sympy

from ..errors import ConfigurationError
from ..policy import AltPolicy, PolicyRegistry
from ..system import StructuralSystem
from .schema import LinearModelSpec, ParameterSet

# name(+1), name(-1), name(0)
_TIMING = re.compile(r"\b([A-Za-z_]\w*)\(\s*([+-]?\d+)\s*\)")

_LAG_SUFFIX = "__lag"
_EXP_PREFIX = "E_"


class LinearModel:
    """
    Compiles a LinearModelSpec into structural systems, one per regime.

    Every variable that appears with a lead gets an expectation state
    E_x (with E_x in place of x(+1)) and an expectational error:

        x_t = E_x_{t-1} + eta_t

    Instances are providers: `model(regime) -> StructuralSystem`.
    """

    def __init__(self, spec: LinearModelSpec, params: Optional[ParameterSet] = None,
                 verbose: bool = False):
        self.spec = spec
        self.params = params if params is not None else spec.parameter_set()
        self.verbose = verbose
        self.variables = list(spec.variables)
        self.shock_names = list(spec.shocks)
        self.forward = self._forward_variables()
        self._compiled: Dict[Tuple[str, ...], Callable] = {}

        clash = sorted(set(self.expectation_names) & set(self.variables + self.shock_names))
        if clash:
            raise ConfigurationError(f"Expectation states {clash} clash with declared names")

    @property
    def expectation_names(self) -> List[str]:
        return [_EXP_PREFIX + v for v in self.forward]

    @property
    def state_names(self) -> List[str]:
        return self.variables + self.expectation_names

    @property
    def n_states(self) -> int:
        return len(self.state_names)

    def _all_equation_texts(self) -> List[str]:
        texts = list(self.spec.equations.values())
        for eqs in self.spec.regime_equations.values():
            texts.extend(eqs.values())
        for pol in self.spec.policies.values():
            texts.extend(pol.equations.values())
        return texts

    def _forward_variables(self) -> List[str]:
        # Scan every variant so the state vector is the same in all regimes
        found = set()
        for text in self._all_equation_texts():
            for name, shift in _TIMING.findall(text):
                if name in self.spec.variables and int(shift) == 1:
                    found.add(name)
        return [v for v in self.spec.variables if v in found]

    def _rewrite(self, text: str) -> str:
        def repl(m):
            name, shift = m.group(1), int(m.group(2))
            if name not in self.variables:
                return m.group(0)
            if shift == 1:
                return _EXP_PREFIX + name
            if shift == -1:
                return name + _LAG_SUFFIX
            if shift == 0:
                return name
            raise ConfigurationError(
                f"Only one-period leads and lags are supported, got '{m.group(0)}' in '{text}'")
        return _TIMING.sub(repl, text)

    def equations_for(self, regime: int = 1, policy: Optional[str] = None) -> List[str]:
        """Equation strings in force, in declaration order."""
        eqs = dict(self.spec.equations)
        eqs.update(self.spec.regime_equations.get(regime, {}))
        if policy is not None:
            if policy not in self.spec.policies:
                raise ConfigurationError(
                    f"Unknown policy '{policy}'. Defined: {sorted(self.spec.policies)}")
            eqs.update(self.spec.policies[policy].equations)
        return list(eqs.values())

    def _compile(self, texts: Tuple[str, ...]) -> Callable:
        """Compile equations into f(*params) -> [f0, J_current, J_lag(, J_shock)]."""
        if texts in self._compiled:
            return self._compiled[texts]
        if self.verbose:
            print(f"[dsgesolve] Compiling {self.spec.name} ({len(texts)} equations)...")

        # 1. Symbols
        cur = [sympy.Symbol(s) for s in self.state_names]
        lag = [sympy.Symbol(v + _LAG_SUFFIX) for v in self.variables]
        shocks = [sympy.Symbol(e) for e in self.shock_names]
        pars = [sympy.Symbol(p) for p in self.params.names]
        local = {s.name: s for s in cur + lag + shocks + pars}
        known = set(local.values())

        # 2. Parse "lhs = rhs" into lhs - rhs
        exprs = []
        for text in texts:
            sides = self._rewrite(text).split("=")
            if len(sides) > 2:
                raise ConfigurationError(f"Failed to parse equation: '{text}'")
            try:
                expr = sympy.parse_expr(sides[0], local_dict=local)
                if len(sides) == 2:
                    expr = expr - sympy.parse_expr(sides[1], local_dict=local)
            except (SyntaxError, TypeError, sympy.SympifyError) as e:
                raise ConfigurationError(f"Failed to parse equation: '{text}'. Error: {e}") from e

            unknown = sorted(str(s) for s in expr.free_symbols - known)
            if unknown:
                raise ConfigurationError(f"Unknown names {unknown} in equation '{text}'")
            exprs.append(expr)

        # 3. Jacobians; linear means no state left in the derivatives
        F = sympy.Matrix(exprs)
        jacobians = [F.jacobian(cur), F.jacobian(lag)]
        if shocks:
            jacobians.append(F.jacobian(shocks))
        f0 = F.subs({s: 0 for s in cur + lag + shocks})

        for row, text in enumerate(texts):
            leftover = set()
            for M in jacobians:
                leftover |= M.row(row).free_symbols
            if leftover - set(pars):
                raise ConfigurationError(f"Equation is not linear in the model variables: '{text}'")

        fn = sympy.lambdify(pars, [f0] + jacobians, modules="numpy")
        self._compiled[texts] = fn
        return fn

    def system(self, regime: int = 1, policy: Optional[str] = None) -> StructuralSystem:
        texts = tuple(self.equations_for(regime, policy))
        fn = self._compile(texts)
        values = self.params.snapshot(regime)
        f0, J0, J1, *rest = fn(*[values[p] for p in self.params.names])

        nv = len(self.variables)
        n = self.n_states
        k = len(self.shock_names)
        G0 = np.zeros((n, n))
        G1 = np.zeros((n, n))
        C = np.zeros(n)
        Psi = np.zeros((n, k))
        Pi = np.zeros((n, len(self.forward)))

        G0[:nv, :] = np.asarray(J0, dtype=np.float64).reshape(nv, n)
        G1[:nv, :nv] = -np.asarray(J1, dtype=np.float64).reshape(nv, nv)
        if k:
            Psi[:nv, :] = -np.asarray(rest[0], dtype=np.float64).reshape(nv, k)
        C[:nv] = -np.asarray(f0, dtype=np.float64).reshape(nv)

        for j, v in enumerate(self.forward):
            row = nv + j
            G0[row, self.variables.index(v)] = 1.0
            G1[row, row] = 1.0
            Pi[row, j] = 1.0

        return StructuralSystem(G0, G1, C, Psi, Pi)

    def __call__(self, regime: int = 1) -> StructuralSystem:
        return self.system(regime)

    def provider(self, policy: Optional[str] = None) -> Callable[[int], StructuralSystem]:
        """Provider for the model under a named alternative policy."""
        if policy is None:
            return self.system
        if policy not in self.spec.policies:
            raise ConfigurationError(f"Unknown policy '{policy}'. Defined: {sorted(self.spec.policies)}")
        return lambda regime: self.system(regime, policy)

    def policies(self) -> PolicyRegistry:
        """Registry holding one alternative policy per PolicySpec."""
        registry = PolicyRegistry()
        for key in self.spec.policies:
            registry.register(AltPolicy.from_provider(key, self.provider(key)))
        return registry

    def with_equations(self, **overrides: str) -> "LinearModel":
        unknown = sorted(set(overrides) - set(self.spec.equations))
        if unknown:
            raise ConfigurationError(f"Unknown equations {unknown}")
        spec = dataclasses.replace(self.spec, equations={**self.spec.equations, **overrides})
        return LinearModel(spec, self.params, verbose=self.verbose)

    def with_parameters(self, **values: float) -> "LinearModel":
        return LinearModel(self.spec, self.params.with_values(**values), verbose=self.verbose)

    def __repr__(self):
        return f"LinearModel('{self.spec.name}', states={self.state_names}, shocks={self.shock_names})"
