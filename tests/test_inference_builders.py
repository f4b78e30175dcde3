"""Tests for priors, the observation dataset builder, and the PyMC model."""

from __future__ import annotations

from pathlib import Path
import sys
from typing import Sequence, Union

import numpy as np
import pymc as pm
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.inference.builders import ObservationDataset, build_dataset, build_model, default_modality_labels
from src.inference.errors import DimensionMismatch, InvalidConfiguration
from src.inference.priors import (
    BetaPopulationPrior,
    LinearModelPriors,
    NormalPopulationPrior,
    UniformPopulationPrior,
    precision_to_std,
    std_to_precision,
)


# ---------------------------------------------------------------------------
# Prior tests


def test_linear_model_priors_defaults_are_centred_on_ideal_values() -> None:
    priors = LinearModelPriors()
    priors.validate()
    assert priors.slope_mean == 1.0
    assert priors.intercept_mean == 0.0
    assert priors.slope_precision == pytest.approx(0.01)
    assert priors.tau_shape == pytest.approx(0.001)
    assert priors.tau_rate == pytest.approx(0.001)


@pytest.mark.parametrize(
    "overrides",
    [
        {"tau_shape": 0.0},
        {"tau_rate": -1.0},
        {"slope_precision": 0.0},
        {"intercept_precision": -0.5},
        {"slope_mean": float("inf")},
    ],
)
def test_linear_model_priors_reject_degenerate_values(overrides: dict) -> None:
    with pytest.raises(InvalidConfiguration):
        LinearModelPriors(**overrides).validate()


def test_population_priors_validate_parameters() -> None:
    with pytest.raises(InvalidConfiguration):
        BetaPopulationPrior(alpha=0.0, beta=2.0)
    with pytest.raises(InvalidConfiguration):
        NormalPopulationPrior(mu=0.0, sigma=-1.0)
    with pytest.raises(InvalidConfiguration):
        UniformPopulationPrior(lower=1.0, upper=1.0)
    with pytest.raises(InvalidConfiguration):
        BetaPopulationPrior(alpha=float("nan"))


@pytest.mark.parametrize("tau", [1e-6, 0.25, 1.0, 400.0, 1e8])
def test_precision_std_round_trip(tau: float) -> None:
    s = precision_to_std(tau)
    assert s == pytest.approx(np.sqrt(1.0 / tau))
    assert std_to_precision(s) == pytest.approx(tau, rel=1e-12)


def test_precision_conversion_handles_arrays_and_rejects_non_positive() -> None:
    tau = np.array([1.0, 4.0, 100.0])
    assert np.allclose(precision_to_std(tau), [1.0, 0.5, 0.1])
    with pytest.raises(InvalidConfiguration):
        precision_to_std(0.0)
    with pytest.raises(InvalidConfiguration):
        std_to_precision(np.array([0.1, -0.1]))


# ---------------------------------------------------------------------------
# Dataset builder tests


def _observations(n_obs: int = 6, n_modalities: int = 3) -> np.ndarray:
    rng = np.random.default_rng(3)
    truth = rng.beta(1.5, 2.0, size=n_obs)
    return truth[:, None] * np.linspace(0.6, 0.8, n_modalities)[None, :] + rng.normal(0, 0.01, (n_obs, n_modalities))


def test_build_dataset_basic() -> None:
    dataset = build_dataset(_observations())
    assert isinstance(dataset, ObservationDataset)
    assert dataset.n_obs == 6
    assert dataset.n_modalities == 3
    assert list(dataset.modality_labels) == ["1", "2", "3"]
    assert default_modality_labels(2) == ("1", "2")


def test_build_dataset_is_read_only_copy() -> None:
    raw = _observations()
    dataset = build_dataset(raw)
    raw[0, 0] = 99.0
    assert dataset.values[0, 0] != 99.0
    with pytest.raises(ValueError):
        dataset.values[0, 0] = 1.0


def test_build_dataset_keeps_custom_labels() -> None:
    dataset = build_dataset(_observations(n_modalities=2), modality_labels=["echo", "mri"])
    assert list(dataset.modality_labels) == ["echo", "mri"]


@pytest.mark.parametrize(
    "values",
    [np.zeros(5), np.zeros((2, 2, 2)), np.zeros((0, 3)), np.zeros((4, 0))],
)
def test_build_dataset_rejects_bad_shapes(values: np.ndarray) -> None:
    with pytest.raises(DimensionMismatch):
        build_dataset(values)


def test_build_dataset_rejects_ragged_rows() -> None:
    with pytest.raises(DimensionMismatch, match="rectangular"):
        build_dataset([[0.1, 0.2, 0.3], [0.1, 0.2]])


def test_build_dataset_checks_declared_modalities() -> None:
    with pytest.raises(DimensionMismatch):
        build_dataset(_observations(n_modalities=3), n_modalities=2)
    with pytest.raises(DimensionMismatch):
        build_dataset(_observations(n_modalities=3), modality_labels=["x", "y"])


def test_build_dataset_rejects_duplicate_labels() -> None:
    with pytest.raises(InvalidConfiguration):
        build_dataset(_observations(n_modalities=2), modality_labels=["x", "x"])


def test_build_dataset_reports_non_finite_location() -> None:
    values = _observations()
    values[2, 1] = np.nan
    with pytest.raises(InvalidConfiguration, match="subject 3, modality 2"):
        build_dataset(values)


# ---------------------------------------------------------------------------
# Model construction tests


def test_build_model_declares_linear_observation_model() -> None:
    dataset = build_dataset(_observations())
    model = build_model(dataset)
    assert {"true_value", "tau", "a", "b", "s", "observations"}.issubset(model.named_vars)
    assert [rv.name for rv in model.deterministics] == ["s"]
    assert [rv.name for rv in model.observed_RVs] == ["observations"]
    assert list(model.coords["modality"]) == ["1", "2", "3"]
    assert len(model.coords["subject"]) == 6


def test_build_model_derives_std_from_precision() -> None:
    model = build_model(build_dataset(_observations()))
    ip = model.initial_point()
    # tau is sampled on the log scale.
    tau = np.exp(ip["tau_log__"])
    s_fn = model.compile_fn(model["s"])
    assert np.allclose(s_fn(ip), np.sqrt(1.0 / tau))


def test_build_model_evaluates_finite_log_probability() -> None:
    model = build_model(build_dataset(_observations()))
    logp = model.compile_logp()(model.initial_point())
    assert np.isfinite(logp)


def test_build_model_uses_custom_population_prior() -> None:
    class RecordingPrior:
        def __init__(self) -> None:
            self.calls: list[tuple[str, object]] = []

        def build(self, name: str, dims: Union[str, Sequence[str]]):
            self.calls.append((name, dims))
            return pm.Normal(name, mu=50.0, sigma=10.0, dims=dims)

    prior = RecordingPrior()
    model = build_model(build_dataset(_observations() * 100), population=prior)
    assert prior.calls == [("true_value", "subject")]
    assert "true_value" in model.named_vars


def test_build_model_validates_priors() -> None:
    with pytest.raises(InvalidConfiguration):
        build_model(build_dataset(_observations()), priors=LinearModelPriors(tau_rate=0.0))
