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
GP fit
======

Latent-variable Gaussian process regression on one-dimensional inputs:

    ρ ~ Gamma(4, 4)            length-scale
    α ~ HalfNormal(1)          amplitude
    σ ~ HalfNormal(1)          observation noise
    η ~ Normal(0, 1)           one per input location
    K = SE(x; ρ, α) + δ I,  L = chol(K)
    f = L η                    (non-centred)
    y ~ Normal(f, σ)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict

import numpy as np
import pymc as pm

from bayesmodels import stats_utils
from bayesmodels.errors import ConfigurationError, DataValidationError
from bayesmodels.gp.kernel import (
    DEFAULT_JITTER,
    cholesky_or_reject,
    squared_exponential_graph,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelConfig:
    """
    Prior hyperparameters.

    `rho_shape`/`rho_rate` put most prior mass on length-scales between
    about 0.3 and 2 input units; rescale the inputs if they live on a very
    different scale.
    """

    rho_shape: float = 4.0
    rho_rate: float = 4.0
    alpha_sd: float = 1.0
    sigma_sd: float = 1.0
    jitter: float = DEFAULT_JITTER

    def __post_init__(self):
        for name in ("rho_shape", "rho_rate", "alpha_sd", "sigma_sd"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(
                    f"{name} must be positive; got {getattr(self, name)}."
                )
        if self.jitter < 0:
            raise ConfigurationError(f"jitter must be non-negative; got {self.jitter}.")


class ModelSpecification:
    """
    Training inputs and observations.

    Attributes
    ----------
    x : (N,) float
        Input locations.
    y : (N,) float
        Observations at `x`.
    """

    def __init__(
        self,
        x: list | np.ndarray,
        y: list | np.ndarray,
    ):
        """
        Parameters
        ----------
        x : (N,) float
            Input locations, fully observed.
        y : (N,) float
            Observations aligned 1:1 with `x`, fully observed.
        """
        self.x = stats_utils.to_finite_float64_array(x, "x")
        self.y = stats_utils.to_finite_float64_array(y, "y")

        if self.x.size < 1:
            raise DataValidationError("x must contain at least one location.")
        if self.x.shape != self.y.shape:
            raise DataValidationError(
                f"x and y must have the same length; got {self.x.size} and {self.y.size}."
            )

    @property
    def N(self) -> int:
        return self.x.size


@dataclass
class PreparedData:
    """Arrays and coordinates consumed by `build_model`."""

    N: int
    x: np.ndarray
    y: np.ndarray
    coords: Dict[str, np.ndarray]


def prepare_data(spec: ModelSpecification) -> PreparedData:
    return PreparedData(
        N=spec.N,
        x=spec.x,
        y=spec.y,
        coords={"obs": np.arange(spec.N)},
    )


def build_model(
    spec: ModelSpecification, config: ModelConfig | None = None
) -> pm.Model:
    """
    Build the GP regression model.

    Parameters
    ----------
    spec : ModelSpecification
        Validated inputs and observations.
    config : ModelConfig, optional
        Prior hyperparameters.

    Returns
    -------
    model : pm.Model
        Free variables `rho`, `alpha`, `sigma`, `eta`; deterministic `f`;
        observed `y`.
    """
    cfg = config or ModelConfig()
    prep = prepare_data(spec)
    logger.debug(f"Building GP fit model with N={prep.N}")

    with pm.Model(coords=prep.coords) as model:
        x = pm.Data("x", prep.x, dims="obs")

        rho = pm.Gamma("rho", alpha=cfg.rho_shape, beta=cfg.rho_rate)
        alpha = pm.HalfNormal("alpha", sigma=cfg.alpha_sd)
        sigma = pm.HalfNormal("sigma", sigma=cfg.sigma_sd)
        eta = pm.Normal("eta", 0.0, 1.0, dims="obs")

        cov = squared_exponential_graph(x, rho, alpha, cfg.jitter)
        chol = cholesky_or_reject(cov)
        f = pm.Deterministic("f", chol @ eta, dims="obs")

        pm.Normal("y", mu=f, sigma=sigma, observed=prep.y, dims="obs")

    return model
