"""Synthetic studies with known ground truth."""

from .hoppin import SimulatedStudy, SimulationConfig, simulate_study

__all__ = ["SimulatedStudy", "SimulationConfig", "simulate_study"]
