# -----------------------------------------------------------------------------
# Copyright 2025 Down Syndrome Education International and contributors
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#   http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# -----------------------------------------------------------------------------

"""
Thin wrappers around PyMC's samplers.

The models in this package only declare priors and likelihoods; these
helpers hand a built model to NUTS (or to forward sampling) and return
`arviz.InferenceData`. No sampler logic lives here.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Sequence

import arviz as az
import numpy as np
import pymc as pm

from bayesmodels.errors import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SamplerConfig:
    """
    NUTS settings passed through to `pm.sample`.

    `target_accept` defaults above PyMC's 0.8 for the GP length-scale
    posteriors.
    """

    draws: int = 1000
    tune: int = 1000
    chains: int = 4
    cores: int | None = None
    target_accept: float = 0.9
    random_seed: int | None = None
    progressbar: bool = False

    def __post_init__(self):
        if self.draws < 1 or self.chains < 1 or self.tune < 0:
            raise ConfigurationError(
                f"draws and chains must be >= 1 and tune >= 0; got draws={self.draws}, "
                f"chains={self.chains}, tune={self.tune}."
            )
        if not 0.0 < self.target_accept < 1.0:
            raise ConfigurationError(
                f"target_accept must lie in (0, 1); got {self.target_accept}."
            )


def sample_posterior(
    model: pm.Model, config: SamplerConfig | None = None
) -> az.InferenceData:
    """
    Draw posterior samples with NUTS.

    Proposals the model rejects (for example a covariance matrix that cannot
    be factored) have log-density -inf and are reported by PyMC as
    divergences; their count is logged here.

    Parameters
    ----------
    model : pm.Model
        A model returned by one of the `build_model` functions.
    config : SamplerConfig, optional
        Sampler settings.

    Returns
    -------
    az.InferenceData
        Posterior draws and sample stats.
    """
    cfg = config or SamplerConfig()

    logger.info(
        f"Sampling: {cfg.draws} draws, {cfg.tune} tune, {cfg.chains} chains, "
        f"target_accept={cfg.target_accept}, seed={cfg.random_seed}"
    )
    t0 = time.time()
    with model:
        idata = pm.sample(
            draws=cfg.draws,
            tune=cfg.tune,
            chains=cfg.chains,
            cores=cfg.cores,
            target_accept=cfg.target_accept,
            random_seed=cfg.random_seed,
            progressbar=cfg.progressbar,
        )
    logger.info(f"Sampling complete in {time.time() - t0:.1f}s")

    n_divergent = count_divergences(idata)
    if n_divergent:
        logger.warning(
            f"{n_divergent} divergent or rejected transition(s); "
            "consider a higher target_accept."
        )
    return idata


def sample_prior(
    model: pm.Model,
    draws: int = 500,
    var_names: Sequence[str] | None = None,
    random_seed: int | None = None,
) -> az.InferenceData:
    """
    Forward-sample the model's prior (and prior predictive).
    """
    logger.info(f"Drawing {draws} prior sample(s)")
    with model:
        return pm.sample_prior_predictive(
            draws=draws,
            var_names=None if var_names is None else list(var_names),
            random_seed=random_seed,
        )


def sample_predictive(
    model: pm.Model,
    idata: az.InferenceData,
    var_names: Sequence[str],
    random_seed: int | None = None,
) -> az.InferenceData:
    """
    Draw `var_names` from the posterior predictive given posterior draws in `idata`.
    """
    logger.info(f"Drawing posterior predictive for {', '.join(var_names)}")
    with model:
        return pm.sample_posterior_predictive(
            idata,
            var_names=list(var_names),
            random_seed=random_seed,
            progressbar=False,
        )


def count_divergences(idata: az.InferenceData) -> int:
    """Number of divergent transitions recorded in `idata.sample_stats`."""
    if "sample_stats" not in idata.groups():
        return 0
    stats = idata.sample_stats
    if "diverging" not in stats:
        return 0
    return int(np.asarray(stats["diverging"]).sum())
