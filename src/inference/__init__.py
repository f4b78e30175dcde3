"""Accuracy and precision of measurement modalities estimated without gold-standard data."""

from .builders import ObservationDataset, build_dataset, build_model
from .comparison import PooledSamples, compare, compare_all, tie_fraction
from .errors import (
    ConvergenceFailure,
    ConvergenceWarning,
    DimensionMismatch,
    InsufficientSamples,
    InvalidConfiguration,
    InvalidParameterRequest,
    ModalityComparisonError,
    SamplingCancelled,
)
from .pooling import ModalityAssessment, assess_modalities
from .priors import (
    BetaPopulationPrior,
    LinearModelPriors,
    NormalPopulationPrior,
    PopulationPrior,
    UniformPopulationPrior,
    precision_to_std,
    std_to_precision,
)
from .records import ComparisonRecord, ParameterSummary
from .sampler import ChainInit, PosteriorSampler, PosteriorSamples, SamplerConfig

__all__ = [
    "BetaPopulationPrior",
    "ChainInit",
    "ComparisonRecord",
    "ConvergenceFailure",
    "ConvergenceWarning",
    "DimensionMismatch",
    "InsufficientSamples",
    "InvalidConfiguration",
    "InvalidParameterRequest",
    "LinearModelPriors",
    "ModalityAssessment",
    "ModalityComparisonError",
    "NormalPopulationPrior",
    "ObservationDataset",
    "ParameterSummary",
    "PooledSamples",
    "PopulationPrior",
    "PosteriorSampler",
    "PosteriorSamples",
    "SamplerConfig",
    "SamplingCancelled",
    "UniformPopulationPrior",
    "assess_modalities",
    "build_dataset",
    "build_model",
    "compare",
    "compare_all",
    "precision_to_std",
    "std_to_precision",
    "tie_fraction",
]
