"""Tests for pooled-sample comparisons between modalities."""

from __future__ import annotations

from pathlib import Path
import sys

import numpy as np
import pandas as pd
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.inference.comparison import PooledSamples, compare, compare_all, resolve_parameter, tie_fraction
from src.inference.errors import InsufficientSamples, InvalidParameterRequest
from src.inference.records import ComparisonRecord


# ---------------------------------------------------------------------------
# Helpers


def _pooled(
    slope: np.ndarray,
    intercept: np.ndarray | None = None,
    std_dev: np.ndarray | None = None,
) -> PooledSamples:
    slope = np.asarray(slope, dtype=float)
    zeros = np.zeros_like(slope)
    return PooledSamples(
        slope=slope,
        intercept=zeros if intercept is None else intercept,
        std_dev=np.full_like(slope, 0.1) if std_dev is None else std_dev,
        modality_labels=[str(idx) for idx in range(1, slope.shape[1] + 1)],
    )


def _random_pooled(seed: int = 7, n_samples: int = 1000, n_modalities: int = 3) -> PooledSamples:
    rng = np.random.default_rng(seed)
    return PooledSamples(
        slope=rng.normal(0.8, 0.2, size=(n_samples, n_modalities)),
        intercept=rng.normal(0.0, 0.05, size=(n_samples, n_modalities)),
        std_dev=rng.gamma(2.0, 0.02, size=(n_samples, n_modalities)),
        modality_labels=[str(idx) for idx in range(1, n_modalities + 1)],
    )


# ---------------------------------------------------------------------------
# Core probability estimates


def test_compare_is_one_when_left_always_closer() -> None:
    rng = np.random.default_rng(0)
    right = rng.uniform(0.2, 0.8, size=500)
    # Modality 1 is always exactly 0.1 closer to the ideal slope of 1.
    left = right + 0.1
    pooled = _pooled(np.column_stack([left, right]))
    assert compare(pooled, "slope", 1, 2, 1.0) == 1.0
    assert compare(pooled, "slope", 2, 1, 1.0) == 0.0


def test_compare_prefers_slope_centred_on_ideal() -> None:
    rng = np.random.default_rng(42)
    slopes = np.column_stack([rng.normal(1.0, 0.05, size=1000), rng.normal(2.0, 0.05, size=1000)])
    pooled = _pooled(slopes)
    assert compare(pooled, "slope", 1, 2, 1.0) > 0.95


def test_compare_counts_strictly_closer_samples() -> None:
    slopes = np.array([[0.75, 0.5], [0.5, 0.875], [0.75, 1.25], [1.0, 1.0]])
    pooled = _pooled(slopes)
    # Sample 3 is a tie (both 0.25 away) and sample 4 is an exact tie at the ideal.
    assert compare(pooled, "slope", 1, 2) == pytest.approx(0.25)
    assert compare(pooled, "slope", 2, 1) == pytest.approx(0.25)
    assert tie_fraction(pooled, "slope", 1, 2) == pytest.approx(0.5)


@pytest.mark.parametrize("parameter", ["slope", "intercept", "std_dev"])
def test_pairwise_probabilities_and_ties_sum_to_one(parameter: str) -> None:
    pooled = _random_pooled()
    for i, j in [(1, 2), (1, 3), (2, 3)]:
        forward = compare(pooled, parameter, i, j)
        backward = compare(pooled, parameter, j, i)
        ties = tie_fraction(pooled, parameter, i, j)
        assert 0.0 <= forward <= 1.0
        assert ties >= 0.0
        assert forward + backward + ties == pytest.approx(1.0)
        assert forward == pytest.approx(1.0 - backward - ties)


def test_std_dev_comparison_uses_zero_as_ideal() -> None:
    std_dev = np.column_stack([np.full(10, 0.02), np.full(10, 0.08)])
    pooled = _pooled(np.ones((10, 2)), std_dev=std_dev)
    assert compare(pooled, "std_dev", 1, 2) == 1.0
    assert compare(pooled, "s", 1, 2) == 1.0


def test_intercept_comparison_uses_absolute_distance() -> None:
    intercept = np.column_stack([np.full(4, -0.05), np.full(4, 0.1)])
    pooled = _pooled(np.ones((4, 2)), intercept=intercept)
    assert compare(pooled, "intercept", 1, 2) == 1.0
    # A custom omega flips the preference.
    assert compare(pooled, "intercept", 1, 2, omega=0.1) == 0.0


def test_parameter_aliases_resolve() -> None:
    assert resolve_parameter("a") == "slope"
    assert resolve_parameter("b") == "intercept"
    assert resolve_parameter("s") == "std_dev"
    assert resolve_parameter("slope") == "slope"


# ---------------------------------------------------------------------------
# Error handling


def test_compare_rejects_same_modality() -> None:
    pooled = _random_pooled()
    with pytest.raises(InvalidParameterRequest):
        compare(pooled, "slope", 2, 2)


@pytest.mark.parametrize("i, j", [(0, 1), (1, 4), (-1, 2), (1.0, 2), (True, 2)])
def test_compare_rejects_invalid_indices(i: object, j: object) -> None:
    pooled = _random_pooled()
    with pytest.raises(InvalidParameterRequest):
        compare(pooled, "slope", i, j)  # type: ignore[arg-type]


def test_compare_rejects_unknown_parameter() -> None:
    pooled = _random_pooled()
    with pytest.raises(InvalidParameterRequest):
        compare(pooled, "tau", 1, 2)


def test_compare_rejects_non_finite_omega() -> None:
    pooled = _random_pooled()
    with pytest.raises(InvalidParameterRequest):
        compare(pooled, "slope", 1, 2, omega=float("nan"))


def test_compare_raises_on_empty_sample_set() -> None:
    pooled = _pooled(np.empty((0, 2)))
    assert pooled.n_samples == 0
    with pytest.raises(InsufficientSamples):
        compare(pooled, "slope", 1, 2)
    with pytest.raises(InsufficientSamples):
        tie_fraction(pooled, "slope", 1, 2)


def test_pooled_samples_validates_shapes() -> None:
    with pytest.raises(InvalidParameterRequest):
        PooledSamples(
            slope=np.zeros((5, 2)),
            intercept=np.zeros((5, 3)),
            std_dev=np.zeros((5, 2)),
            modality_labels=["1", "2"],
        )
    with pytest.raises(InvalidParameterRequest):
        PooledSamples(
            slope=np.zeros((5, 2)),
            intercept=np.zeros((5, 2)),
            std_dev=np.zeros((5, 2)),
            modality_labels=["1"],
        )


def test_pooled_samples_are_read_only() -> None:
    source = np.zeros((3, 2))
    pooled = _pooled(source)
    source[0, 0] = 5.0
    assert pooled.slope[0, 0] == 0.0
    with pytest.raises(ValueError):
        pooled.slope[0, 0] = 1.0


# ---------------------------------------------------------------------------
# Pooling and bulk comparisons


def test_from_chains_concatenates_in_chain_order() -> None:
    chain_0 = pd.DataFrame({"a[1]": [0.1, 0.2], "a[2]": [1.1, 1.2], "b[1]": [0.0, 0.0], "b[2]": [0.0, 0.0],
                            "s[1]": [0.1, 0.1], "s[2]": [0.2, 0.2]})
    chain_1 = pd.DataFrame({"a[1]": [0.3], "a[2]": [1.3], "b[1]": [0.0], "b[2]": [0.0],
                            "s[1]": [0.1], "s[2]": [0.2]})
    pooled = PooledSamples.from_chains({1: chain_1, 0: chain_0})
    assert pooled.n_samples == 3
    assert list(pooled.modality_labels) == ["1", "2"]
    assert np.allclose(pooled.slope[:, 0], [0.1, 0.2, 0.3])
    assert np.allclose(pooled.slope[:, 1], [1.1, 1.2, 1.3])


def test_from_chains_reports_missing_columns() -> None:
    chain = pd.DataFrame({"a[1]": [0.1], "a[2]": [0.2], "b[1]": [0.0], "b[2]": [0.0], "s[1]": [0.1]})
    with pytest.raises(InvalidParameterRequest, match=r"s\[2\]"):
        PooledSamples.from_chains({0: chain})


def test_to_frame_round_trips_through_from_chains() -> None:
    pooled = _random_pooled(n_samples=20)
    frame = pooled.to_frame()
    assert list(frame.columns[:3]) == ["a[1]", "a[2]", "a[3]"]
    restored = PooledSamples.from_chains({0: frame})
    assert np.allclose(restored.std_dev, pooled.std_dev)


def test_compare_all_covers_every_pair() -> None:
    pooled = _random_pooled()
    records = compare_all(pooled)
    assert len(records) == 9
    assert all(isinstance(record, ComparisonRecord) for record in records)
    assert [(r.parameter, r.left, r.right) for r in records[:3]] == [("a", "1", "2"), ("a", "1", "3"), ("a", "2", "3")]
    assert records[0].omega == 1.0
    assert records[3].omega == 0.0
    assert records[0].probability == pytest.approx(compare(pooled, "slope", 1, 2))


def test_comparison_record_renders_probability() -> None:
    record = ComparisonRecord(parameter="a", left="1", right="2", omega=1.0, probability=0.532)
    assert str(record) == "P(|a[1] - 1| < |a[2] - 1|) = 0.5320"
