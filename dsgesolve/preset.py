"""
Preset files: one YAML holding a model, its regime layout and its policy
configuration.

    model:    LinearModelSpec fields
    regimes:  RegimeConfig fields
    policy:   PolicyConfig fields (alternative policies come from the model)
    augment:  {lags: [state names], cumulative: [state names]}
"""

import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

import yaml

from .augment import StateAugmentation
from .config import PolicyConfig, RegimeConfig
from .errors import ConfigurationError
from .modeling import LinearModel, LinearModelSpec
from .solve import Solution, solve

PRESET_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "presets")


def load_preset(name: str) -> Dict[str, Any]:
    """Find and parse a preset by path, under ./presets, or among the bundled presets."""
    candidates = [
        name,
        f"presets/{name}",
        f"presets/{name}.yaml",
        os.path.join(PRESET_DIR, name),
        os.path.join(PRESET_DIR, f"{name}.yaml"),
    ]
    for path in candidates:
        if os.path.isfile(path):
            with open(path, "r") as f:
                return yaml.safe_load(f) or {}
    raise ConfigurationError(f"Preset '{name}' not found")


@dataclass
class Scenario:
    name: str
    model: LinearModel
    regime_config: RegimeConfig
    policy_config: PolicyConfig
    augment: Optional[StateAugmentation] = None

    @property
    def state_names(self):
        names = list(self.model.state_names)
        if self.augment is not None:
            names += [f"{self.model.state_names[i]}_lag" for i in self.augment.lags]
            names += [f"{self.model.state_names[i]}_cum" for i in self.augment.cumulative]
        return names

    def solve(self, verbose: bool = False) -> Solution:
        return solve(self.model, self.regime_config, self.policy_config,
                     augment=self.augment, verbose=verbose)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], verbose: bool = False) -> "Scenario":
        if "model" not in data:
            raise ConfigurationError("Preset has no 'model' section")
        spec = LinearModelSpec.from_dict(data["model"])
        model = LinearModel(spec, verbose=verbose)

        augment = None
        aug = data.get("augment")
        if aug:
            names = model.state_names
            try:
                augment = StateAugmentation(
                    lags=[names.index(v) for v in aug.get("lags", [])],
                    cumulative=[names.index(v) for v in aug.get("cumulative", [])],
                )
            except ValueError as e:
                raise ConfigurationError(f"Unknown state in 'augment': {e}") from e

        return cls(
            name=spec.name,
            model=model,
            regime_config=RegimeConfig.from_dict(data.get("regimes") or {}),
            policy_config=PolicyConfig.from_dict(data.get("policy") or {}, policies=model.policies()),
            augment=augment,
        )

    @classmethod
    def from_preset(cls, name: str, verbose: bool = False) -> "Scenario":
        data = load_preset(name)
        if verbose:
            print(f"[dsgesolve] Loaded preset: {name}")
        return cls.from_dict(data, verbose=verbose)
