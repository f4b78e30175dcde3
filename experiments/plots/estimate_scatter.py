"""Scatter of gold-standard values against each modality's estimates."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence

import numpy as np
import pandas as pd
import plotly.express as px

from .save_config import PlotSaveDestinations, show_or_save


def plot_estimates_vs_gold(
    gold_standard: np.ndarray,
    observations: np.ndarray,
    modality_labels: Optional[Sequence[str]] = None,
    save_to: Optional[PlotSaveDestinations] = None,
) -> List[Path]:
    """One panel per modality; only meaningful for simulated data where the gold standard is known."""
    values = np.asarray(observations, dtype=float)
    if values.size == 0:
        return []
    labels = list(modality_labels) if modality_labels else [str(idx) for idx in range(1, values.shape[1] + 1)]

    frames = [
        pd.DataFrame({"gold_standard": gold_standard, "estimate": values[:, idx], "modality": label})
        for idx, label in enumerate(labels)
    ]
    df = pd.concat(frames, ignore_index=True)

    fig = px.scatter(
        df,
        x="gold_standard",
        y="estimate",
        facet_col="modality",
        title="Gold standard vs. modality estimates",
        labels={"gold_standard": "Gold standard", "estimate": "Estimate", "modality": "Modality"},
    )
    return show_or_save(fig, save_to)
