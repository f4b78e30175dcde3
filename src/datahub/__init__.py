from .config import (
    COMPARISONS_NAME,
    DEFAULT_RESULTS_ROOT,
    GOLD_STANDARD_NAME,
    OBSERVATIONS_NAME,
    POOLED_SAMPLES_NAME,
    SUMMARY_NAME,
)
from .io import write_comparisons, write_observations, write_pooled_samples, write_summaries
from .loader import ObservationTable, load_observations

__all__ = [
    "COMPARISONS_NAME",
    "DEFAULT_RESULTS_ROOT",
    "GOLD_STANDARD_NAME",
    "OBSERVATIONS_NAME",
    "POOLED_SAMPLES_NAME",
    "SUMMARY_NAME",
    "ObservationTable",
    "load_observations",
    "write_comparisons",
    "write_observations",
    "write_pooled_samples",
    "write_summaries",
]
