from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

import yaml

from ..errors import ConfigurationError


def _regime_keys(key) -> List[int]:
    """3 -> [3]; "2-5" -> [2, 3, 4, 5]."""
    if isinstance(key, str) and "-" in key:
        lo, hi = (int(part) for part in key.split("-", 1))
        if hi < lo:
            raise ConfigurationError(f"Empty regime range '{key}'")
        return list(range(lo, hi + 1))
    return [int(key)]


@dataclass
class ParameterSpec:
    name: str
    value: float
    description: str = ""
    regime_values: Dict[int, float] = field(default_factory=dict)


@dataclass
class PolicySpec:
    """Alternative rule: named equations it replaces."""
    name: str
    equations: Dict[str, str]
    description: str = ""


class ParameterSet:
    """
    Parameter values with optional per-regime overrides.

    `snapshot(regime)` returns a read-only view of the values in force in
    that regime, so nothing is ever toggled in place.
    """

    def __init__(self, values: Mapping[str, float],
                 regime_values: Optional[Mapping[str, Mapping[int, float]]] = None):
        self._values = {k: float(v) for k, v in values.items()}
        self._regime_values = {
            name: {int(r): float(v) for r, v in by_regime.items()}
            for name, by_regime in (regime_values or {}).items()
        }
        unknown = sorted(set(self._regime_values) - set(self._values))
        if unknown:
            raise ConfigurationError(f"Regime values given for undeclared parameters {unknown}")

    @property
    def names(self) -> List[str]:
        return list(self._values)

    def snapshot(self, regime: Optional[int] = None) -> Mapping[str, float]:
        values = dict(self._values)
        if regime is not None:
            for name, by_regime in self._regime_values.items():
                if regime in by_regime:
                    values[name] = by_regime[regime]
        return MappingProxyType(values)

    def with_values(self, **kwargs) -> "ParameterSet":
        unknown = sorted(set(kwargs) - set(self._values))
        if unknown:
            raise ConfigurationError(f"Unknown parameters {unknown}")
        values = {**self._values, **kwargs}
        return ParameterSet(values, self._regime_values)


@dataclass
class LinearModelSpec:
    """
    Linear model written as equation strings.

    `x(-1)` is last period's x and `x(+1)` is the expectation of next
    period's x. Equations are named so that regimes and alternative
    policies can replace them one at a time.
    """
    name: str
    variables: List[str]
    shocks: List[str]
    parameters: Dict[str, ParameterSpec]
    equations: Dict[str, str]
    description: str = ""
    regime_equations: Dict[int, Dict[str, str]] = field(default_factory=dict)
    policies: Dict[str, PolicySpec] = field(default_factory=dict)

    def __post_init__(self):
        if len(self.equations) != len(self.variables):
            raise ConfigurationError(
                f"Dim mismatch: {len(self.equations)} equations for {len(self.variables)} variables.")
        names = list(self.variables) + list(self.shocks) + list(self.parameters)
        dupes = sorted({n for n in names if names.count(n) > 1})
        if dupes:
            raise ConfigurationError(f"Names used more than once: {dupes}")
        for reg, eqs in self.regime_equations.items():
            self._check_replacements(eqs, f"regime {reg}")
        for pol in self.policies.values():
            self._check_replacements(pol.equations, f"policy '{pol.name}'")

    def _check_replacements(self, eqs: Dict[str, str], where: str):
        unknown = sorted(set(eqs) - set(self.equations))
        if unknown:
            raise ConfigurationError(f"{where} replaces unknown equations {unknown}")

    def parameter_set(self) -> ParameterSet:
        return ParameterSet(
            {k: p.value for k, p in self.parameters.items()},
            {k: p.regime_values for k, p in self.parameters.items() if p.regime_values},
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        params = {}
        for k, v in data.get('parameters', {}).items():
            # "beta: 0.99" or "beta: {value: 0.99, regimes: {3: 0.98}}"
            if isinstance(v, (int, float)):
                params[k] = ParameterSpec(k, float(v))
            else:
                params[k] = ParameterSpec(
                    k, float(v['value']), v.get('description', ''),
                    {reg: float(x) for r, x in (v.get('regimes') or {}).items()
                     for reg in _regime_keys(r)})

        raw_eqs = data.get('equations', {})
        if isinstance(raw_eqs, list):
            equations = {f"eq{i + 1}": eq for i, eq in enumerate(raw_eqs)}
        else:
            equations = dict(raw_eqs)

        regime_eqs: Dict[int, Dict[str, str]] = {}
        for r, eqs in (data.get('regime_equations') or {}).items():
            for reg in _regime_keys(r):
                regime_eqs.setdefault(reg, {}).update(eqs)

        policies = {}
        for k, v in (data.get('policies') or {}).items():
            if isinstance(v, dict) and 'equations' in v:
                policies[k] = PolicySpec(k, dict(v['equations']), v.get('description', ''))
            else:
                policies[k] = PolicySpec(k, dict(v))

        return cls(
            name=data.get('name', 'Untitled'),
            variables=list(data.get('variables', [])),
            shocks=list(data.get('shocks', [])),
            parameters=params,
            equations=equations,
            description=data.get('description', ''),
            regime_equations=regime_eqs,
            policies=policies,
        )

    @classmethod
    def from_yaml(cls, yaml_str: str):
        data = yaml.safe_load(yaml_str)
        return cls.from_dict(data)
