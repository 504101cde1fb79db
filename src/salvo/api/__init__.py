"""Public contracts between the core and its callers."""

from .contracts import AttackTarget, Attacker

__all__ = ["AttackTarget", "Attacker"]
