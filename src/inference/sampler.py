"""PyMC-backed posterior sampling for the modality observation model."""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Literal, Optional, Sequence, Tuple, cast

import arviz as az
import numpy as np
import pandas as pd
import pymc as pm
import xarray as xr
from arviz import InferenceData

from .builders import ArrayLike, build_dataset, build_model
from .comparison import PARAMETER_VARIABLES, PooledSamples
from .errors import ConvergenceFailure, ConvergenceWarning, InvalidConfiguration, SamplingCancelled
from .priors import LinearModelPriors, PopulationPrior
from .records import ParameterSummary

logger = logging.getLogger(__name__)

MONITORED: Tuple[str, ...] = ("a", "b", "s")
ConvergencePolicy = Literal["warn", "raise", "ignore"]

RNG_BIT_GENERATORS = {
    "PCG64": np.random.PCG64,
    "MT19937": np.random.MT19937,
    "Philox": np.random.Philox,
    "SFC64": np.random.SFC64,
}


@dataclass(frozen=True)
class ChainInit:
    """Pseudo-random generator choice and seed for one chain."""

    rng: str = "PCG64"
    seed: int = 0

    def sampler_seed(self) -> int:
        """Integer seed handed to PyMC, derived deterministically from ``rng`` and ``seed``."""
        bit_generator = RNG_BIT_GENERATORS[self.rng](self.seed)
        return int(np.random.Generator(bit_generator).integers(0, 2**31 - 1))


DEFAULT_INITS: Tuple[ChainInit, ...] = (
    ChainInit(rng="PCG64", seed=12345),
    ChainInit(rng="MT19937", seed=67890),
)


@dataclass(frozen=True)
class SamplerConfig:
    """Settings forwarded to ``pm.sample`` plus post-processing options.

    The number of chains is the number of ``inits``. ``nuts_sampler`` selects the
    NUTS backend (``pymc``, ``numpyro``, ``nutpie`` or ``blackjax``). ``monitor``
    names the model variables kept in the posterior and must include ``a``,
    ``b`` and ``s``.
    """

    draws: int = 2000
    tune: int = 1000
    thin: int = 2
    monitor: Tuple[str, ...] = MONITORED
    inits: Tuple[ChainInit, ...] = DEFAULT_INITS
    target_accept: float = 0.9
    cores: Optional[int] = None
    init: str = "jitter+adapt_diag"
    nuts_sampler: str = "pymc"
    credible_interval: float = 0.95
    rhat_threshold: float = 1.05
    on_convergence_failure: ConvergencePolicy = "warn"

    @property
    def chains(self) -> int:
        return len(self.inits)

    def validate(self) -> None:
        if self.thin <= 0:
            raise InvalidConfiguration(f"Thinning interval must be positive, got {self.thin}.")
        if self.draws <= 0:
            raise InvalidConfiguration(f"draws must be positive, got {self.draws}.")
        if self.tune < 0:
            raise InvalidConfiguration(f"tune cannot be negative, got {self.tune}.")
        if self.draws < self.thin:
            raise InvalidConfiguration(f"draws ({self.draws}) must be at least the thinning interval ({self.thin}).")
        if not self.inits:
            raise InvalidConfiguration("At least one chain initialization is required.")
        if self.cores is not None and self.cores <= 0:
            raise InvalidConfiguration(f"cores must be positive when given, got {self.cores}.")
        if not 0 < self.target_accept < 1:
            raise InvalidConfiguration("target_accept must fall within (0, 1).")
        if not 0 < self.credible_interval < 1:
            raise InvalidConfiguration("credible_interval must fall within (0, 1).")
        if not self.rhat_threshold > 1:
            raise InvalidConfiguration("rhat_threshold must be greater than 1.")
        if self.on_convergence_failure not in ("warn", "raise", "ignore"):
            raise InvalidConfiguration(f"Unknown convergence policy '{self.on_convergence_failure}'.")
        missing = [name for name in MONITORED if name not in self.monitor]
        if missing:
            raise InvalidConfiguration(f"monitor must include {list(MONITORED)}; missing {missing}.")
        if len(set(self.monitor)) != len(self.monitor):
            raise InvalidConfiguration(f"monitor lists a variable more than once: {list(self.monitor)}.")

        seen: Dict[Tuple[str, int], int] = {}
        for chain, chain_init in enumerate(self.inits):
            if chain_init.rng not in RNG_BIT_GENERATORS:
                raise InvalidConfiguration(
                    f"Chain {chain} requests unknown RNG '{chain_init.rng}'. Available: {list(RNG_BIT_GENERATORS)}"
                )
            if isinstance(chain_init.seed, bool) or not isinstance(chain_init.seed, (int, np.integer)) or chain_init.seed < 0:
                raise InvalidConfiguration(f"Chain {chain} seed must be a non-negative integer, got {chain_init.seed!r}.")
            key = (chain_init.rng, int(chain_init.seed))
            if key in seen:
                raise InvalidConfiguration(
                    f"Chains {seen[key]} and {chain} share RNG {key[0]} with seed {key[1]}; seeds must be distinct."
                )
            seen[key] = chain

        seeds = [chain_init.sampler_seed() for chain_init in self.inits]
        if len(set(seeds)) != len(seeds):
            raise InvalidConfiguration("Chain initializations map to colliding sampler seeds; choose different seeds.")

    def chain_seeds(self) -> List[int]:
        return [chain_init.sampler_seed() for chain_init in self.inits]


class PosteriorSamples:
    """Retained (post-thinning) draws of ``a``, ``b`` and ``s`` for every chain."""

    def __init__(
        self,
        posterior: xr.Dataset,
        modality_labels: Sequence[str],
        credible_interval: float = 0.95,
        idata: Optional[InferenceData] = None,
    ) -> None:
        missing = [var for var in MONITORED if var not in posterior]
        if missing:
            raise RuntimeError(f"Posterior does not contain the expected variables: {', '.join(missing)}.")
        self.posterior = posterior
        self.modality_labels = tuple(str(label) for label in modality_labels)
        self.credible_interval = credible_interval
        self.idata = idata

    @property
    def n_chains(self) -> int:
        return int(self.posterior.sizes["chain"])

    @property
    def n_draws(self) -> int:
        return int(self.posterior.sizes["draw"])

    def _matrix(self, variable: str, **isel: int) -> np.ndarray:
        data = self.posterior[variable].isel(**isel) if isel else self.posterior[variable]
        if "chain" in data.dims:
            data = data.stack(sample=("chain", "draw")).transpose("sample", "modality")
        else:
            data = data.transpose("draw", "modality")
        return np.asarray(data, dtype=float)

    def by_chain(self) -> Dict[int, pd.DataFrame]:
        """Per-chain frames in draw order with columns ``a[label]``, ``b[label]``, ``s[label]``."""
        frames: Dict[int, pd.DataFrame] = {}
        for chain in range(self.n_chains):
            columns: Dict[str, np.ndarray] = {}
            for variable in MONITORED:
                values = self._matrix(variable, chain=chain)
                for idx, label in enumerate(self.modality_labels):
                    columns[f"{variable}[{label}]"] = values[:, idx]
            frames[chain] = pd.DataFrame(columns)
        return frames

    def pooled(self) -> PooledSamples:
        """Concatenate all chains, chain 0 first, into one sample set."""
        arrays = {kind: self._matrix(variable) for kind, variable in PARAMETER_VARIABLES.items()}
        return PooledSamples(
            slope=arrays["slope"],
            intercept=arrays["intercept"],
            std_dev=arrays["std_dev"],
            modality_labels=self.modality_labels,
        )

    def rhat(self) -> Dict[str, float]:
        """Potential scale reduction per monitored parameter, keyed ``a[label]``."""
        if self.n_chains < 2:
            return {}
        rhat = cast(xr.Dataset, az.rhat(self.posterior[list(MONITORED)]))
        result: Dict[str, float] = {}
        for variable in MONITORED:
            values = np.asarray(rhat[variable], dtype=float)
            for idx, label in enumerate(self.modality_labels):
                result[f"{variable}[{label}]"] = float(values[idx])
        return result

    def summaries(self) -> List[ParameterSummary]:
        """Posterior mean, sd and highest-density interval per parameter and modality."""
        monitored = self.posterior[list(MONITORED)]
        hdi = az.hdi(monitored, hdi_prob=self.credible_interval)
        hdi_ds = cast(xr.Dataset, hdi)
        means = monitored.mean(dim=("chain", "draw"))
        sds = monitored.std(dim=("chain", "draw"))
        rhat = self.rhat()

        results: List[ParameterSummary] = []
        for variable in MONITORED:
            mean_arr = np.asarray(means[variable], dtype=float)
            sd_arr = np.asarray(sds[variable], dtype=float)
            lower = np.asarray(hdi_ds[variable].sel(hdi="lower"), dtype=float)
            upper = np.asarray(hdi_ds[variable].sel(hdi="higher"), dtype=float)
            if mean_arr.shape != (len(self.modality_labels),):
                raise RuntimeError(f"Unexpected posterior shape {mean_arr.shape} when summarising '{variable}'.")
            for idx, label in enumerate(self.modality_labels):
                results.append(
                    ParameterSummary(
                        parameter=variable,
                        modality=label,
                        mean=float(mean_arr[idx]),
                        sd=float(sd_arr[idx]),
                        lower=float(lower[idx]),
                        upper=float(upper[idx]),
                        r_hat=rhat.get(f"{variable}[{label}]"),
                    )
                )
        return results


class PosteriorSampler:
    """Fits the latent-true-value model and returns thinned posterior samples."""

    def __init__(
        self,
        population: Optional[PopulationPrior] = None,
        priors: Optional[LinearModelPriors] = None,
        config: Optional[SamplerConfig] = None,
    ) -> None:
        self.population = population
        self.priors = priors or LinearModelPriors()
        self.config = config or SamplerConfig()
        self._samples: Optional[PosteriorSamples] = None

    def fit(
        self,
        observations: ArrayLike,
        modality_labels: Optional[Sequence[str]] = None,
        n_modalities: Optional[int] = None,
        callback: Optional[Callable[..., Any]] = None,
    ) -> PosteriorSamples:
        """Sample the posterior for an ``n_obs × n_modalities`` observation matrix.

        ``callback`` is forwarded to ``pm.sample`` and runs after every draw. PyMC
        stops all chains when it raises ``KeyboardInterrupt``; the truncated run is
        reported as ``SamplingCancelled`` instead of being returned.
        """
        cfg = self.config
        cfg.validate()
        self.priors.validate()
        dataset = build_dataset(observations, modality_labels=modality_labels, n_modalities=n_modalities)
        model = build_model(dataset, self.population, self.priors)
        sampled = {rv.name for rv in model.free_RVs} | {rv.name for rv in model.deterministics}
        unknown = [name for name in cfg.monitor if name not in sampled]
        if unknown:
            raise InvalidConfiguration(f"Cannot monitor {unknown}; model variables are {sorted(sampled)}.")
        seeds = cfg.chain_seeds()

        logger.info(
            "Sampling %d chains (%d tune + %d draws, thin=%d) for %d subjects × %d modalities",
            cfg.chains,
            cfg.tune,
            cfg.draws,
            cfg.thin,
            dataset.n_obs,
            dataset.n_modalities,
        )
        logger.debug("Per-chain sampler seeds: %s", seeds)
        with model:
            idata = pm.sample(
                draws=cfg.draws,
                tune=cfg.tune,
                chains=cfg.chains,
                cores=cfg.cores,
                random_seed=seeds,
                target_accept=cfg.target_accept,
                init=cfg.init,
                nuts_sampler=cfg.nuts_sampler,
                return_inferencedata=True,
                progressbar=False,
                compute_convergence_checks=False,
                callback=callback,
            )

        posterior_group = getattr(idata, "posterior", None)
        if posterior_group is None:
            raise RuntimeError("Sampler returned no posterior group.")
        raw = cast(xr.Dataset, posterior_group)
        self._check_complete(raw)
        posterior = raw[list(cfg.monitor)].isel(draw=slice(None, None, cfg.thin))
        samples = PosteriorSamples(
            posterior,
            modality_labels=dataset.modality_labels,
            credible_interval=cfg.credible_interval,
            idata=idata,
        )
        logger.info("Retained %d draws per chain after thinning", samples.n_draws)

        self._check_convergence(samples)
        self._samples = samples
        return samples

    def _check_complete(self, posterior: xr.Dataset) -> None:
        cfg = self.config
        n_chains = int(posterior.sizes.get("chain", 0))
        n_draws = int(posterior.sizes.get("draw", 0))
        if n_chains == cfg.chains and n_draws == cfg.draws:
            return
        message = (
            f"Sampling stopped early: got {n_chains} of {cfg.chains} chains with {n_draws} of {cfg.draws} draws"
        )
        if n_chains < cfg.chains:
            message += f"; {cfg.chains - n_chains} chain(s) never finished"
        logger.warning(message)
        raise SamplingCancelled(message + ".")

    def _check_convergence(self, samples: PosteriorSamples) -> None:
        policy = self.config.on_convergence_failure
        if policy == "ignore":
            return
        if samples.n_chains < 2:
            logger.info("Skipping R-hat check with a single chain")
            return

        threshold = self.config.rhat_threshold
        flagged = {
            name: value for name, value in samples.rhat().items() if not np.isfinite(value) or value > threshold
        }
        if not flagged:
            return
        detail = ", ".join(f"{name} (r_hat={value:.3f})" for name, value in flagged.items())
        message = f"Chains did not mix (r_hat > {threshold}) for {detail}."
        if policy == "raise":
            raise ConvergenceFailure(message)
        warnings.warn(message, ConvergenceWarning, stacklevel=3)

    @property
    def samples(self) -> PosteriorSamples:
        if self._samples is None:
            raise RuntimeError("PosteriorSampler.fit() must be called before accessing samples.")
        return self._samples

    def summaries(self) -> List[ParameterSummary]:
        """Posterior summaries from the most recent fit."""
        return self.samples.summaries()


__all__ = [
    "DEFAULT_INITS",
    "MONITORED",
    "ChainInit",
    "ConvergencePolicy",
    "PosteriorSampler",
    "PosteriorSamples",
    "RNG_BIT_GENERATORS",
    "SamplerConfig",
]
