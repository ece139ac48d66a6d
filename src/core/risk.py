"""
Monolith Update - Risk Classification
Maps package names to risk tiers with ordered, first-match-wins pattern rules.
"""

from enum import Enum
from typing import Iterable, Optional, Sequence


class RiskTier(Enum):
    """Risk tiers, most severe first."""
    CRITICAL = "critical"
    HIGH = "high"
    SAFE = "safe"


class UpdateScope(Enum):
    """What an apply call targets: one tier, or everything."""
    CRITICAL = "critical"
    HIGH = "high"
    SAFE = "safe"
    ALL = "all"

    @property
    def tier(self) -> Optional[RiskTier]:
        """The tier this scope filters to, or None for ALL."""
        if self is UpdateScope.ALL:
            return None
        return RiskTier(self.value)


SCOPE_ALIASES = {
    "safe": UpdateScope.SAFE,
    "low": UpdateScope.SAFE,
    "high": UpdateScope.HIGH,
    "system": UpdateScope.HIGH,
    "critical": UpdateScope.CRITICAL,
    "security": UpdateScope.CRITICAL,
    "all": UpdateScope.ALL,
}


def parse_scope(keyword: str) -> UpdateScope:
    """
    Resolve a command keyword (including aliases) to an UpdateScope.

    Raises:
        ValueError: if the keyword is not a known scope.
    """
    try:
        return SCOPE_ALIASES[keyword.strip().lower()]
    except KeyError:
        raise ValueError(f"Unknown update scope: {keyword!r}") from None


# Evaluated in order; the first tier with a matching pattern wins.
DEFAULT_RULES: tuple[tuple[RiskTier, tuple[str, ...]], ...] = (
    (RiskTier.CRITICAL, ("security", "openssh", "openssl")),
    (RiskTier.HIGH, ("systemd", "kernel", "linux-image", "linux-libc")),
)


class RiskClassifier:
    """
    Classifies package names by case-insensitive substring rules.

    The classification is total: a name matching no rule is SAFE.
    """

    def __init__(self, rules: Sequence[tuple[RiskTier, Sequence[str]]] = DEFAULT_RULES):
        self.rules = tuple(
            (tier, tuple(p.lower() for p in patterns)) for tier, patterns in rules
        )

    def classify(self, name: str) -> RiskTier:
        lowered = name.lower()
        for tier, patterns in self.rules:
            if any(p in lowered for p in patterns):
                return tier
        return RiskTier.SAFE

    def classify_batch(self, names: Iterable[str]) -> dict[str, RiskTier]:
        return {name: self.classify(name) for name in names}

    def tier_counts(self, names: Iterable[str]) -> dict[RiskTier, int]:
        """Number of names per tier; every tier is present."""
        counts = {tier: 0 for tier in RiskTier}
        for tier in self.classify_batch(names).values():
            counts[tier] += 1
        return counts


_default = RiskClassifier()


def classify(name: str) -> RiskTier:
    """Classify one package name with the default rules."""
    return _default.classify(name)


def classify_batch(names: Iterable[str]) -> dict[str, RiskTier]:
    """Classify several names with the default rules."""
    return _default.classify_batch(names)
