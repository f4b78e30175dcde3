"""Writers for observation matrices and analysis artefacts."""

from __future__ import annotations

from dataclasses import asdict
from pathlib import Path
from typing import Iterable, Optional, Sequence

import numpy as np
import pandas as pd

from src.inference.comparison import PooledSamples
from src.inference.records import ComparisonRecord, ParameterSummary


def write_observations(
    path: Path,
    observations: np.ndarray,
    modality_labels: Optional[Sequence[str]] = None,
) -> Path:
    """Persist an observation matrix as CSV with one column per modality."""
    values = np.asarray(observations, dtype=float)
    labels = list(modality_labels) if modality_labels else [str(idx) for idx in range(1, values.shape[1] + 1)]
    path.parent.mkdir(parents=True, exist_ok=True)
    pd.DataFrame(values, columns=labels).to_csv(path, index=False)
    return path


def write_pooled_samples(path: Path, pooled: PooledSamples) -> Path:
    """Persist pooled draws as CSV with ``a[label]``-style columns."""
    path.parent.mkdir(parents=True, exist_ok=True)
    pooled.to_frame().to_csv(path, index=False)
    return path


def write_summaries(path: Path, summaries: Iterable[ParameterSummary]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    pd.DataFrame([asdict(summary) for summary in summaries]).to_csv(path, index=False)
    return path


def write_comparisons(path: Path, comparisons: Iterable[ComparisonRecord]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    pd.DataFrame([asdict(record) for record in comparisons]).to_csv(path, index=False)
    return path
