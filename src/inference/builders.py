"""Observation dataset builder and PyMC model construction."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, Union

import numpy as np
import pymc as pm

from .errors import DimensionMismatch, InvalidConfiguration
from .priors import BetaPopulationPrior, LinearModelPriors, PopulationPrior

ArrayLike = Union[np.ndarray, Sequence[Sequence[float]]]


@dataclass(frozen=True)
class ObservationDataset:
    """Read-only observation matrix (subjects × modalities) plus modality labels."""

    values: np.ndarray
    modality_labels: Sequence[str]

    @property
    def n_obs(self) -> int:
        return int(self.values.shape[0])

    @property
    def n_modalities(self) -> int:
        return int(self.values.shape[1])


def default_modality_labels(n_modalities: int) -> tuple[str, ...]:
    """Labels ``"1" .. "M"`` so parameters read as ``a[1]``, ``a[2]``, ..."""
    return tuple(str(idx) for idx in range(1, n_modalities + 1))


def build_dataset(
    observations: ArrayLike,
    modality_labels: Optional[Sequence[str]] = None,
    n_modalities: Optional[int] = None,
) -> ObservationDataset:
    """Validate the observation matrix and freeze it for sampling."""
    try:
        values = np.array(observations, dtype=float)
    except ValueError as exc:
        raise DimensionMismatch(f"Observations must form a rectangular subjects × modalities matrix: {exc}") from exc
    if values.ndim != 2:
        raise DimensionMismatch(f"Observations must be 2-D (subjects × modalities), got shape {values.shape}.")
    if values.shape[0] == 0 or values.shape[1] == 0:
        raise DimensionMismatch(f"Observations must contain at least one subject and one modality, got {values.shape}.")

    if n_modalities is not None and values.shape[1] != n_modalities:
        raise DimensionMismatch(
            f"Observations have {values.shape[1]} modality columns but {n_modalities} modalities were declared."
        )

    if modality_labels is None:
        labels = default_modality_labels(values.shape[1])
    else:
        labels = tuple(str(label) for label in modality_labels)
        if len(labels) != values.shape[1]:
            raise DimensionMismatch(
                f"Observations have {values.shape[1]} modality columns but {len(labels)} labels were given."
            )
        if len(set(labels)) != len(labels):
            raise InvalidConfiguration(f"Modality labels must be unique, got {list(labels)}.")

    bad = np.argwhere(~np.isfinite(values))
    if bad.size:
        row, col = (int(v) for v in bad[0])
        raise InvalidConfiguration(
            f"Observations contain {len(bad)} non-finite entries; first at subject {row + 1}, "
            f"modality {labels[col]}."
        )

    values.setflags(write=False)
    return ObservationDataset(values=values, modality_labels=labels)


def build_model(
    dataset: ObservationDataset,
    population: Optional[PopulationPrior] = None,
    priors: Optional[LinearModelPriors] = None,
) -> pm.Model:
    """Create the PyMC model relating latent true values to every modality's estimates.

    For subject ``i`` and modality ``m``::

        true_value[i]   ~ population
        observations[i, m] ~ Normal(a[m] * true_value[i] + b[m], precision=tau[m])
        s[m] = sqrt(1 / tau[m])
    """
    population = population or BetaPopulationPrior()
    priors = priors or LinearModelPriors()
    priors.validate()

    coords = {
        "subject": np.arange(1, dataset.n_obs + 1),
        "modality": list(dataset.modality_labels),
    }
    with pm.Model(coords=coords) as model:
        true_value = population.build("true_value", dims="subject")

        tau = pm.Gamma("tau", alpha=priors.tau_shape, beta=priors.tau_rate, dims="modality")
        a = pm.Normal("a", mu=priors.slope_mean, tau=priors.slope_precision, dims="modality")
        b = pm.Normal("b", mu=priors.intercept_mean, tau=priors.intercept_precision, dims="modality")
        pm.Deterministic("s", pm.math.sqrt(1.0 / tau), dims="modality")

        mu = a[None, :] * true_value[:, None] + b[None, :]
        pm.Normal(
            "observations",
            mu=mu,
            tau=tau[None, :],
            observed=np.array(dataset.values),
            dims=("subject", "modality"),
        )
    return model
