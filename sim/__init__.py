"""Scenario simulator."""

from .sim import ISim, Sim, build_scenario

__all__ = ["ISim", "Sim", "build_scenario"]
