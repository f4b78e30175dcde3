import logging
from pathlib import Path
from typing import List, Optional, Tuple

import typer

from experiments.hoppin import print_comparisons, print_summaries, run_hoppin_replication, true_parameters
from experiments.plots import PlotSaveConfig, plot_estimates_vs_gold, plot_posterior_summaries
from src.datahub import (
    COMPARISONS_NAME,
    DEFAULT_RESULTS_ROOT,
    GOLD_STANDARD_NAME,
    OBSERVATIONS_NAME,
    POOLED_SAMPLES_NAME,
    SUMMARY_NAME,
    load_observations,
    write_comparisons,
    write_observations,
    write_pooled_samples,
    write_summaries,
)
from src.inference import (
    BetaPopulationPrior,
    ChainInit,
    ConvergenceFailure,
    InvalidConfiguration,
    ModalityAssessment,
    ModalityComparisonError,
    NormalPopulationPrior,
    SamplerConfig,
    UniformPopulationPrior,
    assess_modalities,
)
from src.inference.priors import PopulationPrior
from src.simulation import SimulationConfig

app = typer.Typer()


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
    if not verbose:
        logging.getLogger("pymc").setLevel(logging.WARNING)
        logging.getLogger("pytensor").setLevel(logging.WARNING)


def parse_inits(values: List[str]) -> tuple[ChainInit, ...]:
    """Turn ``RNG:SEED`` strings into chain initializations."""
    inits = []
    for raw in values:
        rng, sep, seed = raw.partition(":")
        if not sep or not seed.strip().isdigit():
            raise typer.BadParameter(f"Chain init '{raw}' must look like RNG:SEED (e.g. PCG64:12345).")
        inits.append(ChainInit(rng=rng.strip(), seed=int(seed)))
    return tuple(inits)


def build_population_prior(family: str, first: float, second: float) -> PopulationPrior:
    if family == "beta":
        return BetaPopulationPrior(alpha=first, beta=second)
    if family == "normal":
        return NormalPopulationPrior(mu=first, sigma=second)
    if family == "uniform":
        return UniformPopulationPrior(lower=first, upper=second)
    raise typer.BadParameter(f"Unknown population prior family '{family}' (beta, normal, uniform).")


def write_assessment(output_dir: Path, assessment: ModalityAssessment) -> None:
    write_summaries(output_dir / SUMMARY_NAME, assessment.summaries)
    write_comparisons(output_dir / COMPARISONS_NAME, assessment.comparisons)
    write_pooled_samples(output_dir / POOLED_SAMPLES_NAME, assessment.pooled)


@app.command()
def simulate(
    n_obs: int = typer.Option(100, "--n-obs", help="Number of simulated subjects."),
    seed: int = typer.Option(1234, "--seed", help="Seed for the simulated study."),
    draws: int = typer.Option(2000, "--draws", help="Posterior draws per chain before thinning."),
    tune: int = typer.Option(1000, "--tune", help="Tuning steps per chain."),
    thin: int = typer.Option(2, "--thin", help="Keep every k-th draw."),
    chain_init: List[str] = typer.Option(
        ["PCG64:12345", "MT19937:67890"],
        "--chain-init",
        help="RNG:SEED per chain; the count sets the number of chains.",
        show_default=True,
    ),
    cores: Optional[int] = typer.Option(None, "--cores", help="Parallel chain processes."),
    plots_root: Optional[Path] = typer.Option(
        None,
        "--plots-root",
        help="Directory where plots should be saved (subfolders are created automatically).",
    ),
    plots_tag: Optional[str] = typer.Option(
        None,
        "--plots-tag",
        help="Folder suffix for this run (defaults to timestamp).",
    ),
    show_plots: bool = typer.Option(False, "--show-plots", help="Open figures interactively when not saving."),
    save_static: bool = typer.Option(True, help="Write static PNG snapshots when saving plots."),
    save_html: bool = typer.Option(True, help="Write interactive HTML plots when saving."),
    output_dir: Optional[Path] = typer.Option(
        None,
        "--output-dir",
        file_okay=False,
        dir_okay=True,
        writable=True,
        help="Write the simulated matrix, gold standard and analysis results here.",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log sampler progress."),
) -> None:
    """
    Replicate experiment A of Hoppin et al. on simulated data and compare the three modalities.
    """
    setup_logging(verbose)
    try:
        sampler_cfg = SamplerConfig(draws=draws, tune=tune, thin=thin, inits=parse_inits(chain_init), cores=cores)
        sampler_cfg.validate()
    except InvalidConfiguration as exc:
        raise typer.BadParameter(str(exc)) from exc

    simulation = SimulationConfig(n_obs=n_obs, seed=seed)
    study, assessment = run_hoppin_replication(simulation, sampler_cfg)

    if output_dir:
        write_observations(output_dir / OBSERVATIONS_NAME, study.observations, assessment.pooled.modality_labels)
        write_observations(output_dir / GOLD_STANDARD_NAME, study.gold_standard[:, None], ["gold_standard"])
        write_assessment(output_dir, assessment)
        print(f"[hoppin] Wrote simulated data and results under {output_dir}")

    save_config: Optional[PlotSaveConfig] = None
    if plots_root:
        try:
            save_config = PlotSaveConfig.for_experiment(
                plots_root, "hoppin", run_tag=plots_tag, save_static=save_static, save_html=save_html
            )
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from exc
        print(f"[plots] Saving figures under {save_config.run_dir}")
    elif not show_plots:
        return

    plot_estimates_vs_gold(
        study.gold_standard,
        study.observations,
        save_to=save_config.for_plot("estimates_vs_gold") if save_config else None,
    )
    plot_posterior_summaries(
        assessment.summaries,
        truth=true_parameters(simulation),
        save_to=save_config.for_plot("posterior_summary") if save_config else None,
    )


@app.command()
def analyze(
    observations: Path = typer.Argument(..., exists=True, dir_okay=False, help="CSV/TSV (header = modalities) or .npy."),
    columns: List[str] = typer.Option([], "--column", help="Restrict to these CSV columns (repeatable)."),
    prior: str = typer.Option("beta", "--prior", help="Population prior family: beta, normal, uniform."),
    prior_params: Tuple[float, float] = typer.Option((1.5, 2.0), "--prior-params", help="Two prior parameters."),
    draws: int = typer.Option(2000, "--draws", help="Posterior draws per chain before thinning."),
    tune: int = typer.Option(1000, "--tune", help="Tuning steps per chain."),
    thin: int = typer.Option(2, "--thin", help="Keep every k-th draw."),
    chain_init: List[str] = typer.Option(
        ["PCG64:12345", "MT19937:67890"],
        "--chain-init",
        help="RNG:SEED per chain; the count sets the number of chains.",
        show_default=True,
    ),
    cores: Optional[int] = typer.Option(None, "--cores", help="Parallel chain processes."),
    strict: bool = typer.Option(False, "--strict", help="Fail instead of warning when chains do not mix."),
    output_dir: Optional[Path] = typer.Option(
        None,
        "--output-dir",
        file_okay=False,
        dir_okay=True,
        writable=True,
        help=f"Write summaries, comparisons and pooled samples here (e.g. {DEFAULT_RESULTS_ROOT}).",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log sampler progress."),
) -> None:
    """
    Estimate slope, intercept and residual SD of each modality in an observation matrix.
    """
    setup_logging(verbose)
    try:
        table = load_observations(observations, columns=columns or None)
        population = build_population_prior(prior, *prior_params)
        sampler_cfg = SamplerConfig(
            draws=draws,
            tune=tune,
            thin=thin,
            inits=parse_inits(chain_init),
            cores=cores,
            on_convergence_failure="raise" if strict else "warn",
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    print(f"[analyze] Loaded {table.values.shape[0]} subjects × {table.values.shape[1]} modalities from {observations}.")
    try:
        assessment = assess_modalities(
            table.values,
            modality_labels=table.modality_labels,
            population=population,
            config=sampler_cfg,
        )
    except ConvergenceFailure as exc:
        print(f"[analyze] {exc}")
        raise typer.Exit(code=2) from exc
    except ModalityComparisonError as exc:
        raise typer.BadParameter(str(exc)) from exc

    print_summaries(assessment.summaries)
    print_comparisons(assessment.comparisons)

    if output_dir:
        write_assessment(output_dir, assessment)
        print(f"[analyze] Wrote results under {output_dir}")


if __name__ == "__main__":
    app()
