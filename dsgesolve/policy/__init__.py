from .core import AltPolicy, DefaultPolicy, Policy, PolicyKind, PolicyRef, SystemProvider
from .rules import PolicyRegistry

__all__ = [
    "AltPolicy",
    "DefaultPolicy",
    "Policy",
    "PolicyKind",
    "PolicyRef",
    "PolicyRegistry",
    "SystemProvider",
]
