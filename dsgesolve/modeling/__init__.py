from .linear import LinearModel
from .schema import LinearModelSpec, ParameterSet, ParameterSpec, PolicySpec

__all__ = ["LinearModel", "LinearModelSpec", "ParameterSet", "ParameterSpec", "PolicySpec"]
