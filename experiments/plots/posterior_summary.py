"""Error-bar chart of posterior means and credible intervals per modality."""

from __future__ import annotations

from pathlib import Path
from typing import List, Mapping, Optional, Sequence

import pandas as pd
import plotly.express as px

from src.inference.records import ParameterSummary
from .save_config import PlotSaveDestinations, show_or_save

PARAMETER_LABELS = {"a": "Slope a", "b": "Intercept b", "s": "Residual SD s"}


def plot_posterior_summaries(
    summaries: Sequence[ParameterSummary],
    truth: Optional[Mapping[str, Sequence[float]]] = None,
    save_to: Optional[PlotSaveDestinations] = None,
) -> List[Path]:
    """Visualize posterior means with their credible intervals; overlay generating values when known."""
    if not summaries:
        return []

    df = pd.DataFrame(
        {
            "parameter": [PARAMETER_LABELS.get(s.parameter, s.parameter) for s in summaries],
            "modality": [s.modality for s in summaries],
            "mean": [s.mean for s in summaries],
            "lower": [s.lower for s in summaries],
            "upper": [s.upper for s in summaries],
        }
    )

    facet_order = list(df["parameter"].unique())
    fig = px.scatter(
        df,
        x="modality",
        y="mean",
        facet_col="parameter",
        category_orders={"parameter": facet_order},
        error_y=df["upper"] - df["mean"],
        error_y_minus=df["mean"] - df["lower"],
        title="Posterior estimates per modality",
        labels={"mean": "Posterior mean", "modality": "Modality"},
    )
    fig.update_yaxes(matches=None, showticklabels=True)

    if truth:
        for variable, label in PARAMETER_LABELS.items():
            values = truth.get(variable)
            if not values or label not in facet_order:
                continue
            modalities = [s.modality for s in summaries if s.parameter == variable]
            fig.add_scatter(
                x=modalities,
                y=list(values)[: len(modalities)],
                mode="markers",
                marker=dict(symbol="x", size=10, color="black"),
                name=f"true {label}",
                row=1,
                col=facet_order.index(label) + 1,
            )

    return show_or_save(fig, save_to)
