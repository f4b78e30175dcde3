"""Where replication figures go: one folder per run, PNG and/or HTML per figure."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import plotly.graph_objects as go


@dataclass(frozen=True)
class PlotSaveDestinations:
    """Output files for one figure, named after its slug inside the run folder."""

    directory: Path
    slug: str
    save_static: bool
    save_html: bool

    @property
    def png_path(self) -> Path:
        return self.directory / f"{self.slug}.png"

    @property
    def html_path(self) -> Path:
        return self.directory / f"{self.slug}.html"

    def targets(self) -> List[Path]:
        paths = []
        if self.save_static:
            paths.append(self.png_path)
        if self.save_html:
            paths.append(self.html_path)
        return paths


@dataclass(frozen=True)
class PlotSaveConfig:
    """Figures of a run land in ``base_dir/run_tag/<slug>.{png,html}``."""

    base_dir: Path
    run_tag: str
    save_static: bool = True
    save_html: bool = True

    @classmethod
    def for_experiment(
        cls,
        plots_root: Path,
        experiment: str,
        run_tag: Optional[str] = None,
        save_static: bool = True,
        save_html: bool = True,
    ) -> "PlotSaveConfig":
        """Group runs by experiment name; untagged runs are named by UTC timestamp."""
        if not (save_static or save_html):
            raise ValueError("Enable at least one of PNG or HTML output when saving plots.")
        tag = run_tag or datetime.utcnow().strftime("%Y%m%d-%H%M%S")
        return cls(base_dir=plots_root / experiment, run_tag=tag, save_static=save_static, save_html=save_html)

    @property
    def run_dir(self) -> Path:
        return self.base_dir / self.run_tag

    def for_plot(self, slug: str) -> PlotSaveDestinations:
        return PlotSaveDestinations(
            directory=self.run_dir,
            slug=slug,
            save_static=self.save_static,
            save_html=self.save_html,
        )


def show_or_save(fig: go.Figure, save_to: Optional[PlotSaveDestinations]) -> List[Path]:
    """Write the figure to its destinations and return the written paths; open it interactively when unsaved."""
    if save_to is None:
        fig.show()
        return []
    save_to.directory.mkdir(parents=True, exist_ok=True)
    if save_to.save_static:
        fig.write_image(str(save_to.png_path), engine="kaleido")
    if save_to.save_html:
        fig.write_html(str(save_to.html_path), include_plotlyjs="cdn", full_html=True)
    return save_to.targets()


__all__ = ["PlotSaveConfig", "PlotSaveDestinations", "show_or_save"]
