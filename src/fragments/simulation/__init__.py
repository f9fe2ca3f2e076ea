"""Rebase schedule simulation."""

from .runner import LedgerSnapshot, RebaseSimulation, SimulationResult

__all__ = ["LedgerSnapshot", "RebaseSimulation", "SimulationResult"]
