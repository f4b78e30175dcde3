"""Synthetic gold-standard study used to check the method against known parameters.

Defaults reproduce experiment A of Hoppin et al. (IEEE TMI 21(5), 2002): a
Beta(1.5, 2.0) distributed quantity measured by three linear modalities with
normal residuals.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np


@dataclass(frozen=True)
class SimulationConfig:
    """Generating parameters; one entry per modality in each tuple."""

    n_obs: int = 100
    alpha: float = 1.5
    beta: float = 2.0
    slopes: Tuple[float, ...] = (0.6, 0.7, 0.8)
    intercepts: Tuple[float, ...] = (-0.1, 0.0, 0.1)
    noise_sds: Tuple[float, ...] = (0.05, 0.03, 0.08)
    seed: int = 1234

    @property
    def n_modalities(self) -> int:
        return len(self.slopes)

    def validate(self) -> None:
        if self.n_obs <= 0:
            raise ValueError("n_obs must be positive.")
        if self.alpha <= 0 or self.beta <= 0:
            raise ValueError("Beta shape parameters must be strictly positive.")
        if not self.slopes:
            raise ValueError("At least one modality is required.")
        if not len(self.slopes) == len(self.intercepts) == len(self.noise_sds):
            raise ValueError("slopes, intercepts and noise_sds must have one entry per modality.")
        if any(sd < 0 for sd in self.noise_sds):
            raise ValueError("Noise standard deviations cannot be negative.")


@dataclass(frozen=True)
class SimulatedStudy:
    """Simulated observations; ``gold_standard`` must never reach the sampler."""

    gold_standard: np.ndarray
    observations: np.ndarray
    config: SimulationConfig


def simulate_study(config: SimulationConfig | None = None) -> SimulatedStudy:
    """Draw gold-standard values and each modality's noisy linear estimate of them."""
    cfg = config or SimulationConfig()
    cfg.validate()
    rng = np.random.default_rng(cfg.seed)

    gold = rng.beta(cfg.alpha, cfg.beta, size=cfg.n_obs)
    slopes = np.asarray(cfg.slopes, dtype=float)
    intercepts = np.asarray(cfg.intercepts, dtype=float)
    noise_sds = np.asarray(cfg.noise_sds, dtype=float)

    # Column m is modality m: a[m] * gold + b[m] + Normal(0, s[m]).
    noise = rng.normal(0.0, 1.0, size=(cfg.n_obs, cfg.n_modalities)) * noise_sds[None, :]
    observations = gold[:, None] * slopes[None, :] + intercepts[None, :] + noise
    return SimulatedStudy(gold_standard=gold, observations=observations, config=cfg)
