from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from .config import CSV_SUFFIXES, NUMPY_SUFFIXES


@dataclass(frozen=True)
class ObservationTable:
    """Observation matrix loaded from disk, rows = subjects, columns = modalities."""

    values: np.ndarray
    modality_labels: Optional[Tuple[str, ...]]


def load_observations(path: Path, columns: Optional[Sequence[str]] = None) -> ObservationTable:
    """Read an observation matrix from CSV/TSV (header row = modality labels) or ``.npy``."""
    suffix = path.suffix.lower()
    if suffix in NUMPY_SUFFIXES:
        if columns:
            raise ValueError("Column selection is only supported for CSV/TSV inputs.")
        values = np.load(path, allow_pickle=False)
        return ObservationTable(values=np.asarray(values, dtype=float), modality_labels=None)

    if suffix not in CSV_SUFFIXES:
        raise ValueError(f"Unsupported observation file '{path.name}'. Expected one of {CSV_SUFFIXES + NUMPY_SUFFIXES}.")

    sep = "\t" if suffix == ".tsv" else ","
    frame = pd.read_csv(path, sep=sep)
    if columns:
        missing = [col for col in columns if col not in frame.columns]
        if missing:
            raise ValueError(f"Columns not found in {path.name}: {', '.join(missing)}")
        frame = frame[list(columns)]

    non_numeric = [str(col) for col in frame.columns if not pd.api.types.is_numeric_dtype(frame[col])]
    if non_numeric:
        raise ValueError(f"Observation columns must be numeric; offending columns: {', '.join(non_numeric)}")

    labels = tuple(str(col) for col in frame.columns)
    return ObservationTable(values=frame.to_numpy(dtype=float), modality_labels=labels)
