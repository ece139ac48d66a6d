"""
Monolith Update - Core Package
"""

from core.orchestrator import UpdateOrchestrator, SessionResult, build_orchestrator
from core.risk import RiskTier, UpdateScope, classify, classify_batch

__all__ = [
    "UpdateOrchestrator",
    "SessionResult",
    "build_orchestrator",
    "RiskTier",
    "UpdateScope",
    "classify",
    "classify_batch",
]
