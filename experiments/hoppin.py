from __future__ import annotations

from typing import Dict, Iterable, Optional, Sequence

from src.inference import (
    ComparisonRecord,
    ModalityAssessment,
    ParameterSummary,
    SamplerConfig,
    assess_modalities,
)
from src.simulation import SimulatedStudy, SimulationConfig, simulate_study

PARAMETER_TITLES = {"a": "slope", "b": "intercept", "s": "standard deviation"}


def true_parameters(config: SimulationConfig) -> Dict[str, Sequence[float]]:
    """Generating values keyed by model variable name."""
    return {"a": config.slopes, "b": config.intercepts, "s": config.noise_sds}


def print_summaries(summaries: Iterable[ParameterSummary], truth: Optional[Dict[str, Sequence[float]]] = None) -> None:
    header = f"{'parameter':<10} {'mean':>9} {'sd':>9} {'lower':>9} {'upper':>9} {'r_hat':>7}"
    if truth:
        header += f" {'true':>8}"
    print(header)
    for summary in summaries:
        r_hat = f"{summary.r_hat:7.3f}" if summary.r_hat is not None else f"{'-':>7}"
        line = (
            f"{summary.name:<10} {summary.mean:9.4f} {summary.sd:9.4f} "
            f"{summary.lower:9.4f} {summary.upper:9.4f} {r_hat}"
        )
        if truth:
            modality_idx = int(summary.modality) - 1 if summary.modality.isdigit() else None
            values = truth.get(summary.parameter, ())
            if modality_idx is not None and 0 <= modality_idx < len(values):
                line += f" {values[modality_idx]:8.4f}"
        print(line)


def print_comparisons(comparisons: Iterable[ComparisonRecord]) -> None:
    current: Optional[str] = None
    for record in comparisons:
        if record.parameter != current:
            current = record.parameter
            print(f"Posterior inferences for the {PARAMETER_TITLES.get(current, current)} parameter:")
        print(f"  {record}")


def run_hoppin_replication(
    simulation: Optional[SimulationConfig] = None,
    sampler: Optional[SamplerConfig] = None,
) -> tuple[SimulatedStudy, ModalityAssessment]:
    """Simulate a gold-standard study, fit it blind to the gold standard, and report."""
    sim_cfg = simulation or SimulationConfig()
    print(f"[hoppin] Simulating {sim_cfg.n_obs} subjects measured by {sim_cfg.n_modalities} modalities (seed={sim_cfg.seed}).")
    study = simulate_study(sim_cfg)

    sampler_cfg = sampler or SamplerConfig()
    print(
        f"[hoppin] Sampling {sampler_cfg.chains} chains: {sampler_cfg.tune} tune + {sampler_cfg.draws} draws, "
        f"thin={sampler_cfg.thin}."
    )
    assessment = assess_modalities(study.observations, config=sampler_cfg)
    print(f"[hoppin] Pooled {assessment.pooled.n_samples} posterior samples.")

    print_summaries(assessment.summaries, truth=true_parameters(sim_cfg))
    print_comparisons(assessment.comparisons)
    return study, assessment

