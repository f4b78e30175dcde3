"""Static configuration for observation inputs and analysis outputs."""

from __future__ import annotations

from pathlib import Path
from typing import Tuple

# Default directory used by the Typer CLI; callers may override it.
DEFAULT_RESULTS_ROOT = Path("data/results")

# File suffixes accepted by `load_observations`.
CSV_SUFFIXES: Tuple[str, ...] = (".csv", ".tsv")
NUMPY_SUFFIXES: Tuple[str, ...] = (".npy",)

POOLED_SAMPLES_NAME = "pooled_samples.csv"
SUMMARY_NAME = "summary.csv"
COMPARISONS_NAME = "comparisons.csv"
OBSERVATIONS_NAME = "observations.csv"
GOLD_STANDARD_NAME = "gold_standard.csv"


__all__ = [
    "COMPARISONS_NAME",
    "CSV_SUFFIXES",
    "DEFAULT_RESULTS_ROOT",
    "GOLD_STANDARD_NAME",
    "NUMPY_SUFFIXES",
    "OBSERVATIONS_NAME",
    "POOLED_SAMPLES_NAME",
    "SUMMARY_NAME",
]
