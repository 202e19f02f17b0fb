"""
Regime and policy configuration.

Both configs can be built in code, from a dict, or from YAML, and are
validated on construction so that malformed input fails before any
numerical work starts.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
import yaml

from .blend import validate_weights
from .errors import ConfigurationError
from .policy import Policy, PolicyRef, PolicyRegistry
from .solvers import get_method


def _load_yaml(source: str) -> Dict[str, Any]:
    """Accepts a YAML string or a path to a YAML file."""
    if "\n" not in source and source.endswith((".yaml", ".yml")):
        with open(source, "r") as f:
            return yaml.safe_load(f) or {}
    return yaml.safe_load(source) or {}


@dataclass
class RegimeConfig:
    """
    Regime layout.

    Regimes are numbered 1..n_regimes. `temporary_window` lists the
    contiguous regimes under a temporary rule; the regime right after it
    is the terminal regime. The first `n_conditional` window regimes are
    conditional-forecast periods solved like ordinary regimes.
    """
    n_regimes: int = 1
    forecast_start: Optional[int] = None
    temporary_window: Tuple[int, ...] = ()
    n_conditional: int = 0

    def __post_init__(self):
        self.temporary_window = tuple(int(r) for r in self.temporary_window)

        if self.n_regimes < 1:
            raise ConfigurationError(f"n_regimes must be at least 1, got {self.n_regimes}")

        if self.forecast_start is not None and not 1 <= self.forecast_start <= self.n_regimes:
            raise ConfigurationError(
                f"forecast_start {self.forecast_start} outside regimes 1..{self.n_regimes}")

        window = self.temporary_window
        if window:
            if list(window) != list(range(window[0], window[0] + len(window))):
                raise ConfigurationError(f"Temporary window must be contiguous, got {list(window)}")
            if window[0] < 1 or window[-1] >= self.n_regimes:
                raise ConfigurationError(
                    f"Temporary window {list(window)} must lie in 1..{self.n_regimes - 1} "
                    f"so that a terminal regime follows it")
            if self.forecast_start is not None and window[0] < self.forecast_start:
                raise ConfigurationError(
                    f"Temporary window starts at {window[0]}, before forecast_start {self.forecast_start}")
            if not 0 <= self.n_conditional < len(window):
                raise ConfigurationError(
                    f"n_conditional must be in 0..{len(window) - 1}, got {self.n_conditional}")
        elif self.n_conditional != 0:
            raise ConfigurationError("n_conditional needs a temporary window")

    @property
    def regimes(self) -> List[int]:
        return list(range(1, self.n_regimes + 1))

    @property
    def has_window(self) -> bool:
        return bool(self.temporary_window)

    @property
    def terminal_regime(self) -> Optional[int]:
        if not self.temporary_window:
            return None
        return self.temporary_window[-1] + 1

    @property
    def conditional_regimes(self) -> List[int]:
        return list(self.temporary_window[:self.n_conditional])

    @property
    def recursion_regimes(self) -> List[int]:
        """Window regimes solved backward from the terminal law."""
        return list(self.temporary_window[self.n_conditional:])

    @property
    def forward_regimes(self) -> List[int]:
        """Regimes solved on their own (terminal regime included)."""
        recursion = set(self.recursion_regimes)
        return [r for r in self.regimes if r not in recursion]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        window = data.get("temporary_window", ())
        # "temporary_window: {start: 3, length: 4}" as a shorthand
        if isinstance(window, dict):
            window = range(int(window["start"]), int(window["start"]) + int(window["length"]))
        return cls(
            n_regimes=int(data.get("n_regimes", 1)),
            forecast_start=data.get("forecast_start"),
            temporary_window=tuple(window),
            n_conditional=int(data.get("n_conditional", 0)),
        )

    @classmethod
    def from_yaml(cls, yaml_str: str):
        return cls.from_dict(_load_yaml(yaml_str))


@dataclass
class Credibility:
    """
    Imperfect credibility of the governing policy.

    Weight 0 is the probability on the governing policy's own law; weight
    i >= 1 is the probability on `candidates[i-1]`. Either one fixed
    vector (`weights`) or one vector per regime (`varying_weights`).
    `regimes` restricts where the blend applies; by default it applies
    wherever weights are available, from the forecast start on.
    """
    candidates: List[str]
    weights: Optional[List[float]] = None
    varying_weights: Optional[Dict[int, List[float]]] = None
    regimes: Optional[List[int]] = None

    def __post_init__(self):
        self.candidates = list(self.candidates)
        if not self.candidates:
            raise ConfigurationError("Credibility needs at least one candidate policy")
        if self.weights is None and not self.varying_weights:
            raise ConfigurationError("Credibility needs weights or varying_weights")

        n = 1 + len(self.candidates)
        if self.weights is not None:
            self.weights = validate_weights(self.weights, n).tolist()
        if self.varying_weights:
            self.varying_weights = {
                int(reg): validate_weights(w, n, int(reg)).tolist()
                for reg, w in self.varying_weights.items()
            }
        if self.regimes is not None:
            self.regimes = [int(r) for r in self.regimes]
            if self.weights is None:
                missing = [r for r in self.regimes if r not in self.varying_weights]
                if missing:
                    raise ConfigurationError(f"No credibility weights for regimes {missing}")

    def has_weights(self, regime: int) -> bool:
        return self.weights is not None or bool(self.varying_weights and regime in self.varying_weights)

    def applies_to(self, regime: int, forecast_start: Optional[int] = None) -> bool:
        """Regimes before `forecast_start` are history and never blend."""
        if self.regimes is not None:
            return regime in self.regimes
        if forecast_start is not None and regime < forecast_start:
            return False
        return self.has_weights(regime)

    def weights_for(self, regime: int) -> np.ndarray:
        if self.varying_weights and regime in self.varying_weights:
            return np.asarray(self.varying_weights[regime])
        if self.weights is None:
            raise ConfigurationError("No credibility weights", regime)
        return np.asarray(self.weights)

    def regimes_with_weights(self) -> List[int]:
        return sorted(self.varying_weights or {})

    @classmethod
    def from_path(cls, candidates: Sequence[str], path: Sequence[float], start_regime: int,
                  regimes: Optional[List[int]] = None) -> "Credibility":
        """
        Time-varying credibility from a path of probabilities on the
        governing policy, starting at `start_regime`. The remaining mass
        goes to the single candidate.
        """
        candidates = list(candidates)
        if len(candidates) != 1:
            raise ConfigurationError(
                f"A credibility path needs exactly one candidate policy, got {len(candidates)}")
        varying = {start_regime + i: [float(p), 1.0 - float(p)] for i, p in enumerate(path)}
        return cls(candidates, varying_weights=varying, regimes=regimes)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        candidates = data.get("candidates", [])
        if isinstance(candidates, str):
            candidates = [candidates]
        if "path" in data:
            return cls.from_path(candidates, data["path"], int(data.get("start_regime", 1)),
                                 regimes=data.get("regimes"))
        return cls(
            candidates=candidates,
            weights=data.get("weights"),
            varying_weights=data.get("varying_weights"),
            regimes=data.get("regimes"),
        )


@dataclass
class PolicyConfig:
    """
    Which policy governs each regime, and how uncertain agents are about it.

    Regimes missing from `governing` follow the default rule. With
    `uncertain_window`, only the first `uncertain_length` window regimes
    (all of them by default) are solved backward under doubt about the
    continuation; the later ones are solved on their own.
    """
    governing: Dict[int, Any] = field(default_factory=dict)
    policies: PolicyRegistry = field(default_factory=PolicyRegistry)
    credibility: Optional[Credibility] = None
    uncertain_window: bool = False
    uncertain_length: Optional[int] = None
    regime_switching: bool = True
    solution_method: str = "gensys"

    def __post_init__(self):
        self.governing = {int(reg): PolicyRef.parse(ref) for reg, ref in self.governing.items()}

        get_method(self.solution_method, regime_switching=self.regime_switching)

        for ref in self.governing.values():
            self.policies.resolve(ref)
        if self.credibility is not None:
            for key in self.credibility.candidates:
                self.policies.get(key)
        if self.uncertain_window and self.credibility is None:
            raise ConfigurationError("uncertain_window needs a credibility specification")
        if self.uncertain_length is not None:
            if not self.uncertain_window:
                raise ConfigurationError("uncertain_length needs uncertain_window")
            if self.uncertain_length < 1:
                raise ConfigurationError(f"uncertain_length must be at least 1, got {self.uncertain_length}")

    def policy_for(self, regime: int) -> Policy:
        return self.policies.resolve(self.governing.get(regime, PolicyRef.default()))

    def ref_for(self, regime: int) -> PolicyRef:
        return self.governing.get(regime, PolicyRef.default())

    def uncertain_regimes(self, regime_config: RegimeConfig) -> List[int]:
        """Window regimes solved backward under doubt about the continuation."""
        if not self.uncertain_window:
            return []
        window = regime_config.recursion_regimes
        if self.uncertain_length is None:
            return window
        return window[:self.uncertain_length]

    def validate(self, regime_config: RegimeConfig):
        """Cross-check against the regime layout."""
        n = regime_config.n_regimes
        bad = [r for r in self.governing if not 1 <= r <= n]
        if bad:
            raise ConfigurationError(f"Governing policy given for regimes {bad} outside 1..{n}")
        if self.credibility is not None:
            listed = set(self.credibility.regimes or []) | set(self.credibility.regimes_with_weights())
            bad = sorted(r for r in listed if not 1 <= r <= n)
            if bad:
                raise ConfigurationError(f"Credibility given for regimes {bad} outside 1..{n}")
            start = regime_config.forecast_start
            early = sorted(r for r in listed if start is not None and r < start)
            if early:
                raise ConfigurationError(
                    f"Credibility given for regimes {early} before forecast_start {start}")
        if self.uncertain_window:
            if not regime_config.has_window:
                raise ConfigurationError("uncertain_window needs a temporary window")
            window = regime_config.recursion_regimes
            if self.uncertain_length is not None and self.uncertain_length > len(window):
                raise ConfigurationError(
                    f"uncertain_length {self.uncertain_length} exceeds the {len(window)}-regime window")
            cred = self.credibility
            missing = [r for r in self.uncertain_regimes(regime_config)
                       if (cred.regimes is None or r in cred.regimes) and not cred.has_weights(r)]
            if missing:
                raise ConfigurationError(f"No credibility weights for window regimes {missing}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any], policies: Optional[PolicyRegistry] = None):
        cred = data.get("credibility")
        length = data.get("uncertain_length")
        return cls(
            governing=data.get("governing", {}) or {},
            policies=policies if policies is not None else PolicyRegistry(),
            credibility=Credibility.from_dict(cred) if cred else None,
            uncertain_window=bool(data.get("uncertain_window", False)),
            uncertain_length=int(length) if length is not None else None,
            regime_switching=bool(data.get("regime_switching", True)),
            solution_method=data.get("solution_method", "gensys"),
        )

    @classmethod
    def from_yaml(cls, yaml_str: str, policies: Optional[PolicyRegistry] = None):
        return cls.from_dict(_load_yaml(yaml_str), policies=policies)
