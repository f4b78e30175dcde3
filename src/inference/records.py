"""Shared result records for modality inference."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ParameterSummary:
    """Posterior summary for one linear-model parameter of one modality."""

    parameter: str
    modality: str
    mean: float
    sd: float
    lower: float
    upper: float
    r_hat: Optional[float] = None

    @property
    def name(self) -> str:
        return f"{self.parameter}[{self.modality}]"


@dataclass(frozen=True)
class ComparisonRecord:
    """Posterior probability that `left` is closer to `omega` than `right`."""

    parameter: str
    left: str
    right: str
    omega: float
    probability: float

    def __str__(self) -> str:
        return (
            f"P(|{self.parameter}[{self.left}] - {self.omega:g}| < "
            f"|{self.parameter}[{self.right}] - {self.omega:g}|) = {self.probability:.4f}"
        )
