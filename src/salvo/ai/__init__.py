"""Scripted opponent strategies."""

from .attacker import AttackMode, AttackerMemory, HuntTargetAttacker

__all__ = ["AttackMode", "AttackerMemory", "HuntTargetAttacker"]
