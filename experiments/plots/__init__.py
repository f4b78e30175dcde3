"""Plotting utilities for experiment results."""

from .estimate_scatter import plot_estimates_vs_gold
from .posterior_summary import plot_posterior_summaries
from .save_config import PlotSaveConfig, PlotSaveDestinations, show_or_save

__all__ = [
    "plot_estimates_vs_gold",
    "plot_posterior_summaries",
    "PlotSaveConfig",
    "PlotSaveDestinations",
    "show_or_save",
]
