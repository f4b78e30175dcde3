"""Posterior comparison of modalities against the ideal linear-model parameters.

Each probability is the Monte Carlo estimate of ``P(|x_i - omega| < |x_j - omega|)``
over a pooled sample set, where ``x`` is the slope, intercept, or residual standard
deviation and ``omega`` its ideal value. Ties count toward neither modality, so
``compare(i, j) + compare(j, i) + tie_fraction(i, j) == 1``.

Pooling simply concatenates chains; it is only meaningful once the chains have
converged, which this module does not check.
"""

from __future__ import annotations

from dataclasses import dataclass
from itertools import combinations
from typing import Dict, Iterable, List, Literal, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from .errors import InsufficientSamples, InvalidParameterRequest
from .records import ComparisonRecord

ParameterKind = Literal["slope", "intercept", "std_dev"]

# Parameter kind -> model variable name.
PARAMETER_VARIABLES: Dict[ParameterKind, str] = {"slope": "a", "intercept": "b", "std_dev": "s"}
IDEAL_VALUES: Dict[ParameterKind, float] = {"slope": 1.0, "intercept": 0.0, "std_dev": 0.0}
_ALIASES: Dict[str, ParameterKind] = {var: kind for kind, var in PARAMETER_VARIABLES.items()}


def resolve_parameter(parameter: str) -> ParameterKind:
    """Normalise ``slope``/``a``, ``intercept``/``b``, ``std_dev``/``s``."""
    if parameter in PARAMETER_VARIABLES:
        return parameter  # type: ignore[return-value]
    if parameter in _ALIASES:
        return _ALIASES[parameter]
    raise InvalidParameterRequest(
        f"Unknown parameter kind '{parameter}'. Expected one of {sorted(PARAMETER_VARIABLES)} "
        f"or {sorted(_ALIASES)}."
    )


def _column_name(variable: str, label: str) -> str:
    return f"{variable}[{label}]"


@dataclass(frozen=True)
class PooledSamples:
    """Draws from every chain stacked into ``(n_samples, n_modalities)`` arrays."""

    slope: np.ndarray
    intercept: np.ndarray
    std_dev: np.ndarray
    modality_labels: Sequence[str]

    def __post_init__(self) -> None:
        arrays = {}
        for kind in PARAMETER_VARIABLES:
            arr = np.array(getattr(self, kind), dtype=float)
            if arr.ndim != 2:
                raise InvalidParameterRequest(f"{kind} samples must be 2-D (samples × modalities), got {arr.shape}.")
            arr.setflags(write=False)
            arrays[kind] = arr
        shapes = {arr.shape for arr in arrays.values()}
        if len(shapes) != 1:
            raise InvalidParameterRequest(f"Slope, intercept and std_dev samples disagree in shape: {sorted(shapes)}.")
        labels = tuple(str(label) for label in self.modality_labels)
        if len(labels) != arrays["slope"].shape[1]:
            raise InvalidParameterRequest(
                f"{len(labels)} modality labels given for {arrays['slope'].shape[1]} sampled modalities."
            )
        for kind, arr in arrays.items():
            object.__setattr__(self, kind, arr)
        object.__setattr__(self, "modality_labels", labels)

    @property
    def n_samples(self) -> int:
        return int(self.slope.shape[0])

    @property
    def n_modalities(self) -> int:
        return int(self.slope.shape[1])

    def values(self, parameter: str) -> np.ndarray:
        """All pooled draws of one parameter kind, shape ``(n_samples, n_modalities)``."""
        return getattr(self, resolve_parameter(parameter))

    def to_frame(self) -> pd.DataFrame:
        """Wide frame with one ``a[label]``-style column per parameter and modality."""
        columns: Dict[str, np.ndarray] = {}
        for kind, variable in PARAMETER_VARIABLES.items():
            arr = getattr(self, kind)
            for idx, label in enumerate(self.modality_labels):
                columns[_column_name(variable, label)] = arr[:, idx]
        return pd.DataFrame(columns)

    @classmethod
    def from_chains(
        cls,
        chains: Mapping[int, pd.DataFrame],
        modality_labels: Optional[Sequence[str]] = None,
    ) -> "PooledSamples":
        """Concatenate per-chain frames (columns ``a[1]``, ``b[1]``, ``s[1]``, ...) in chain order."""
        if not chains:
            raise InsufficientSamples("No chains supplied for pooling.")
        frames = [chains[key] for key in sorted(chains)]
        combined = pd.concat(frames, axis=0, ignore_index=True)

        if modality_labels is None:
            prefix = "a["
            modality_labels = [col[len(prefix) : -1] for col in combined.columns if col.startswith(prefix)]
        labels = [str(label) for label in modality_labels]

        arrays: Dict[str, np.ndarray] = {}
        for kind, variable in PARAMETER_VARIABLES.items():
            names = [_column_name(variable, label) for label in labels]
            missing = [name for name in names if name not in combined.columns]
            if missing:
                raise InvalidParameterRequest(f"Chains are missing sampled columns: {', '.join(missing)}.")
            arrays[kind] = combined[names].to_numpy(dtype=float).reshape(len(combined), len(labels))
        return cls(
            slope=arrays["slope"],
            intercept=arrays["intercept"],
            std_dev=arrays["std_dev"],
            modality_labels=labels,
        )


def _validate_index(pooled: PooledSamples, index: int, name: str) -> int:
    if isinstance(index, bool) or not isinstance(index, (int, np.integer)):
        raise InvalidParameterRequest(f"{name} must be an integer modality index, got {index!r}.")
    if not 1 <= index <= pooled.n_modalities:
        raise InvalidParameterRequest(
            f"{name}={index} is outside the valid modality range [1, {pooled.n_modalities}]."
        )
    return int(index) - 1


def _distances(
    pooled: PooledSamples,
    parameter: str,
    i: int,
    j: int,
    omega: Optional[float],
) -> Tuple[np.ndarray, np.ndarray]:
    kind = resolve_parameter(parameter)
    left = _validate_index(pooled, i, "modality_i")
    right = _validate_index(pooled, j, "modality_j")
    if left == right:
        raise InvalidParameterRequest(f"Cannot compare modality {i} with itself.")
    target = IDEAL_VALUES[kind] if omega is None else omega
    if not np.isfinite(target):
        raise InvalidParameterRequest(f"Ideal value omega must be finite, got {target!r}.")
    if pooled.n_samples == 0:
        raise InsufficientSamples(f"Pooled sample set is empty; cannot compare {kind} of modalities {i} and {j}.")

    samples = pooled.values(kind)
    return np.abs(samples[:, left] - target), np.abs(samples[:, right] - target)


def compare(
    pooled: PooledSamples,
    parameter: str,
    i: int,
    j: int,
    omega: Optional[float] = None,
) -> float:
    """Probability that modality ``i`` is strictly closer to ``omega`` than modality ``j``.

    Args:
        pooled: Pooled posterior draws.
        parameter: ``"slope"``, ``"intercept"`` or ``"std_dev"`` (or ``a``/``b``/``s``).
        i: 1-based index of the left-hand modality.
        j: 1-based index of the right-hand modality; must differ from ``i``.
        omega: Ideal value; defaults to 1 for slope and 0 otherwise.

    Returns:
        Fraction of pooled samples with ``|x_i - omega| < |x_j - omega|``.
    """
    left, right = _distances(pooled, parameter, i, j, omega)
    return float(np.count_nonzero(left < right)) / left.shape[0]


def tie_fraction(
    pooled: PooledSamples,
    parameter: str,
    i: int,
    j: int,
    omega: Optional[float] = None,
) -> float:
    """Fraction of pooled samples where both modalities are equally far from ``omega``."""
    left, right = _distances(pooled, parameter, i, j, omega)
    return float(np.count_nonzero(left == right)) / left.shape[0]


def compare_all(
    pooled: PooledSamples,
    parameters: Iterable[str] = ("slope", "intercept", "std_dev"),
    omegas: Optional[Mapping[str, float]] = None,
) -> List[ComparisonRecord]:
    """Compare every modality pair ``i < j`` for each requested parameter kind."""
    overrides = {resolve_parameter(key): value for key, value in (omegas or {}).items()}
    records: List[ComparisonRecord] = []
    for parameter in parameters:
        kind = resolve_parameter(parameter)
        omega = overrides.get(kind, IDEAL_VALUES[kind])
        for i, j in combinations(range(1, pooled.n_modalities + 1), 2):
            records.append(
                ComparisonRecord(
                    parameter=PARAMETER_VARIABLES[kind],
                    left=pooled.modality_labels[i - 1],
                    right=pooled.modality_labels[j - 1],
                    omega=float(omega),
                    probability=compare(pooled, kind, i, j, omega),
                )
            )
    return records


__all__ = [
    "IDEAL_VALUES",
    "PARAMETER_VARIABLES",
    "ParameterKind",
    "PooledSamples",
    "compare",
    "compare_all",
    "resolve_parameter",
    "tie_fraction",
]
