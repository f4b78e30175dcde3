"""Public entry point: fit the model, pool the chains, compare every modality pair."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from .builders import ArrayLike
from .comparison import PooledSamples, compare_all
from .priors import LinearModelPriors, PopulationPrior
from .records import ComparisonRecord, ParameterSummary
from .sampler import PosteriorSampler, PosteriorSamples, SamplerConfig


@dataclass(frozen=True)
class ModalityAssessment:
    """Everything a single analysis run produces."""

    samples: PosteriorSamples
    pooled: PooledSamples
    summaries: Sequence[ParameterSummary]
    comparisons: Sequence[ComparisonRecord]


def assess_modalities(
    observations: ArrayLike,
    modality_labels: Optional[Sequence[str]] = None,
    population: Optional[PopulationPrior] = None,
    priors: Optional[LinearModelPriors] = None,
    config: Optional[SamplerConfig] = None,
    parameters: Iterable[str] = ("slope", "intercept", "std_dev"),
) -> ModalityAssessment:
    """Fit the latent-true-value model and return summaries plus pairwise comparisons in one call."""
    sampler = PosteriorSampler(population=population, priors=priors, config=config)
    samples = sampler.fit(observations, modality_labels=modality_labels)
    pooled = samples.pooled()
    return ModalityAssessment(
        samples=samples,
        pooled=pooled,
        summaries=samples.summaries(),
        comparisons=compare_all(pooled, parameters=parameters),
    )
