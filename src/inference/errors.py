"""Exception types raised while fitting and comparing measurement modalities."""

from __future__ import annotations


class ModalityComparisonError(Exception):
    """Base class for every error raised by the inference package."""


class InvalidConfiguration(ModalityComparisonError, ValueError):
    """Malformed priors, sampler settings, or observation values."""


class DimensionMismatch(ModalityComparisonError, ValueError):
    """Observation matrix shape disagrees with the declared modalities."""


class ConvergenceFailure(ModalityComparisonError, RuntimeError):
    """Chains did not mix well enough to trust the pooled posterior."""


class SamplingCancelled(ConvergenceFailure):
    """Sampling stopped before every chain produced its requested draws."""


class ConvergenceWarning(UserWarning):
    """Non-fatal counterpart of `ConvergenceFailure`."""


class InsufficientSamples(ModalityComparisonError, ValueError):
    """Comparator invoked on an empty pooled sample set."""


class InvalidParameterRequest(ModalityComparisonError, ValueError):
    """Comparator given an unknown parameter kind or bad modality index."""


__all__ = [
    "ConvergenceFailure",
    "ConvergenceWarning",
    "DimensionMismatch",
    "InsufficientSamples",
    "InvalidConfiguration",
    "InvalidParameterRequest",
    "ModalityComparisonError",
    "SamplingCancelled",
]
