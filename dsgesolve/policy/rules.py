from typing import Dict, Iterator, Optional

from ..errors import ConfigurationError
from .core import AltPolicy, DefaultPolicy, Policy, PolicyKind, PolicyRef, SystemProvider


class PolicyRegistry:
    """
    Keyed collection of alternative policies.

    The default rule is always present. Each configuration owns its own
    registry, so separate solves never share registrations.
    """

    def __init__(self, policies: Optional[Dict[str, Policy]] = None):
        self._default = DefaultPolicy()
        self._policies: Dict[str, Policy] = {}
        for key, pol in (policies or {}).items():
            if pol.key != key:
                raise ConfigurationError(f"Policy registered as '{key}' has key '{pol.key}'")
            self.register(pol)

    def register(self, pol: Policy) -> Policy:
        if pol.kind != PolicyKind.NAMED_ALT:
            raise ConfigurationError("Only alternative policies can be registered")
        if pol.key in self._policies:
            raise ConfigurationError(f"Policy '{pol.key}' is already registered")
        self._policies[pol.key] = pol
        return pol

    def register_provider(self, key: str, alt_provider: SystemProvider) -> Policy:
        return self.register(AltPolicy.from_provider(key, alt_provider))

    def policy(self, key: Optional[str] = None, system: Optional[SystemProvider] = None):
        """
        Decorator to register a solve routine as an alternative policy.

            @registry.policy("peg", system=peg_systems)
            def peg(provider, regime, method):
                ...
                return law

        `system` maps a regime to the structural system under this rule and
        is what a credibility blend steps back through in regimes the rule
        governs. Without it the blend uses the model's own systems.
        """
        def decorator(func):
            self.register(AltPolicy(key or func.__name__, func, alt_provider=system))
            return func
        return decorator

    @property
    def default(self) -> Policy:
        return self._default

    def get(self, key: str) -> Policy:
        if key == PolicyKind.DEFAULT.value:
            return self._default
        try:
            return self._policies[key]
        except KeyError:
            raise ConfigurationError(
                f"Unknown policy '{key}'. Registered: {sorted(self._policies)}") from None

    def resolve(self, ref) -> Policy:
        ref = PolicyRef.parse(ref)
        if ref.kind == PolicyKind.DEFAULT:
            return self._default
        return self.get(ref.key)

    def keys(self):
        return list(self._policies)

    def __contains__(self, key) -> bool:
        return key == PolicyKind.DEFAULT.value or key in self._policies

    def __iter__(self) -> Iterator[Policy]:
        return iter(self._policies.values())

    def __len__(self) -> int:
        return len(self._policies)
