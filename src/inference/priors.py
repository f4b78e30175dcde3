"""Prior definitions for the latent true values and the per-modality linear model.

The observation likelihood is written in terms of precision (``tau = 1 / s**2``)
to keep the Gamma prior on ``tau`` conjugate-shaped; ``s`` is recovered as a
deterministic node. `precision_to_std` and `std_to_precision` expose the same
mapping for callers working outside PyMC.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence, Union

import numpy as np
import pymc as pm
import pytensor.tensor as pt

from .errors import InvalidConfiguration

ArrayOrFloat = Union[float, np.ndarray]


class PopulationPrior(Protocol):
    """Distribution shared by every subject's latent true value."""

    def build(self, name: str, dims: Union[str, Sequence[str]]) -> pt.TensorVariable:
        """Register the latent variable on the active PyMC model and return it."""
        ...


def _require_finite(label: str, *values: float) -> None:
    if not all(np.isfinite(value) for value in values):
        raise InvalidConfiguration(f"{label} parameters must be finite, got {values}.")


@dataclass(frozen=True)
class BetaPopulationPrior:
    """Beta(alpha, beta) over the true values; suited to fractions such as ejection fraction."""

    alpha: float = 1.5
    beta: float = 2.0

    def __post_init__(self) -> None:
        _require_finite("Beta population prior", self.alpha, self.beta)
        if self.alpha <= 0 or self.beta <= 0:
            raise InvalidConfiguration("Beta population prior needs alpha > 0 and beta > 0.")

    def build(self, name: str, dims: Union[str, Sequence[str]]) -> pt.TensorVariable:
        return pm.Beta(name, alpha=self.alpha, beta=self.beta, dims=dims)


@dataclass(frozen=True)
class NormalPopulationPrior:
    """Normal(mu, sigma) over the true values."""

    mu: float = 0.0
    sigma: float = 1.0

    def __post_init__(self) -> None:
        _require_finite("Normal population prior", self.mu, self.sigma)
        if self.sigma <= 0:
            raise InvalidConfiguration("Normal population prior needs sigma > 0.")

    def build(self, name: str, dims: Union[str, Sequence[str]]) -> pt.TensorVariable:
        return pm.Normal(name, mu=self.mu, sigma=self.sigma, dims=dims)


@dataclass(frozen=True)
class UniformPopulationPrior:
    """Uniform(lower, upper) over the true values."""

    lower: float = 0.0
    upper: float = 1.0

    def __post_init__(self) -> None:
        _require_finite("Uniform population prior", self.lower, self.upper)
        if self.lower >= self.upper:
            raise InvalidConfiguration("Uniform population prior needs lower < upper.")

    def build(self, name: str, dims: Union[str, Sequence[str]]) -> pt.TensorVariable:
        return pm.Uniform(name, lower=self.lower, upper=self.upper, dims=dims)


@dataclass(frozen=True)
class LinearModelPriors:
    """Priors over slope ``a``, intercept ``b`` and precision ``tau`` of each modality.

    Slope and intercept priors are centred on their ideal values (1 and 0). Normal
    priors are given by mean and precision.
    """

    tau_shape: float = 0.001
    tau_rate: float = 0.001
    slope_mean: float = 1.0
    slope_precision: float = 1.0 / 100.0
    intercept_mean: float = 0.0
    intercept_precision: float = 1.0 / 100.0

    def validate(self) -> None:
        _require_finite(
            "Linear model prior",
            self.tau_shape,
            self.tau_rate,
            self.slope_mean,
            self.slope_precision,
            self.intercept_mean,
            self.intercept_precision,
        )
        positive = {
            "tau_shape": self.tau_shape,
            "tau_rate": self.tau_rate,
            "slope_precision": self.slope_precision,
            "intercept_precision": self.intercept_precision,
        }
        bad = [name for name, value in positive.items() if value <= 0]
        if bad:
            raise InvalidConfiguration(f"Prior hyper-parameters must be strictly positive: {', '.join(bad)}.")


def precision_to_std(tau: ArrayOrFloat) -> ArrayOrFloat:
    """Return ``s = sqrt(1 / tau)``."""
    arr = np.asarray(tau, dtype=float)
    if np.any(arr <= 0):
        raise InvalidConfiguration("Precision must be strictly positive.")
    result = np.sqrt(1.0 / arr)
    return float(result) if result.ndim == 0 else result


def std_to_precision(s: ArrayOrFloat) -> ArrayOrFloat:
    """Return ``tau = 1 / s**2``."""
    arr = np.asarray(s, dtype=float)
    if np.any(arr <= 0):
        raise InvalidConfiguration("Standard deviation must be strictly positive.")
    result = 1.0 / np.square(arr)
    return float(result) if result.ndim == 0 else result
