from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from ..errors import ConfigurationError
from ..solvers import get_method
from ..system import StructuralSystem, TransitionLaw

# provider(regime) -> StructuralSystem
SystemProvider = Callable[[int], StructuralSystem]
# solve_fn(provider, regime, method) -> TransitionLaw
PolicySolveFn = Callable[[SystemProvider, int, str], TransitionLaw]


class PolicyKind(str, Enum):
    DEFAULT = "default"
    NAMED_ALT = "named_alt"


@dataclass(frozen=True)
class PolicyRef:
    """Tagged reference to a policy, as carried in configuration."""
    kind: PolicyKind
    key: Optional[str] = None

    def __post_init__(self):
        if self.kind == PolicyKind.NAMED_ALT and not self.key:
            raise ConfigurationError("A named alternative policy needs a key")

    @classmethod
    def default(cls) -> "PolicyRef":
        return cls(PolicyKind.DEFAULT)

    @classmethod
    def named(cls, key: str) -> "PolicyRef":
        return cls(PolicyKind.NAMED_ALT, key)

    @classmethod
    def parse(cls, value) -> "PolicyRef":
        """Accepts a PolicyRef, None / "default", or an alternative key."""
        if isinstance(value, PolicyRef):
            return value
        if value is None or value == PolicyKind.DEFAULT.value:
            return cls.default()
        if isinstance(value, str):
            return cls.named(value)
        raise ConfigurationError(f"Cannot interpret {value!r} as a policy reference")

    @property
    def label(self) -> str:
        return self.key if self.kind == PolicyKind.NAMED_ALT else PolicyKind.DEFAULT.value


class Policy:
    """
    A monetary/fiscal rule the economy can be solved under.

    Subclasses implement `solve`, returning the law that holds if the rule
    is expected to be in place permanently.
    """
    kind: PolicyKind = PolicyKind.DEFAULT

    def __init__(self, key: str):
        self.key = key

    @property
    def ref(self) -> PolicyRef:
        if self.kind == PolicyKind.DEFAULT:
            return PolicyRef.default()
        return PolicyRef.named(self.key)

    def solve(self, provider: SystemProvider, regime: int, method: str = "gensys") -> TransitionLaw:
        raise NotImplementedError

    def system(self, provider: SystemProvider, regime: int) -> StructuralSystem:
        """Structural system in force in `regime` under this rule."""
        return provider(regime)

    def __repr__(self):
        return f"{self.__class__.__name__}('{self.key}')"


class DefaultPolicy(Policy):
    """The rule built into the model's own structural systems."""
    kind = PolicyKind.DEFAULT

    def __init__(self):
        super().__init__(PolicyKind.DEFAULT.value)

    def solve(self, provider: SystemProvider, regime: int, method: str = "gensys") -> TransitionLaw:
        return get_method(method).solve(provider(regime), regime)


class AltPolicy(Policy):
    """An alternative rule identified by key, with its own solve routine."""
    kind = PolicyKind.NAMED_ALT

    def __init__(self, key: str, solve_fn: PolicySolveFn,
                 alt_provider: Optional[SystemProvider] = None):
        if not key or key == PolicyKind.DEFAULT.value:
            raise ConfigurationError(f"Invalid alternative policy key {key!r}")
        super().__init__(key)
        self.solve_fn = solve_fn
        self.alt_provider = alt_provider

    @classmethod
    def from_provider(cls, key: str, alt_provider: SystemProvider) -> "AltPolicy":
        """
        Rule given by a second set of structural systems, solved as a
        permanent regime with the requested method.
        """
        def _solve(provider, regime, method):
            return get_method(method).solve(alt_provider(regime), regime)
        return cls(key, _solve, alt_provider=alt_provider)

    def solve(self, provider: SystemProvider, regime: int, method: str = "gensys") -> TransitionLaw:
        return self.solve_fn(provider, regime, method)

    def system(self, provider: SystemProvider, regime: int) -> StructuralSystem:
        if self.alt_provider is not None:
            return self.alt_provider(regime)
        return provider(regime)
