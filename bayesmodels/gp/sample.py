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
GP sample
=========

Prior-only draws of GP sample paths with fixed hyperparameters:

    y ~ MvNormal(0, SE(x; ρ=1, α=1) + 0.1 I)

No priors and no data; the model is sampled forward with
`pm.sample_prior_predictive` (see `draw_samples`).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import arviz as az
import numpy as np
import pymc as pm
import pytensor.tensor as pt
from pytensor.tensor.slinalg import cholesky

from bayesmodels import sampling, stats_utils
from bayesmodels.errors import ConfigurationError, DataValidationError
from bayesmodels.gp.kernel import squared_exponential_graph

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ModelConfig:
    """
    Fixed hyperparameters. `noise_variance` is added to the diagonal and
    also makes the covariance comfortably positive-definite.
    """

    amplitude: float = 1.0
    length_scale: float = 1.0
    noise_variance: float = 0.1

    def __post_init__(self):
        if self.amplitude <= 0 or self.length_scale <= 0 or self.noise_variance <= 0:
            raise ConfigurationError(
                "amplitude, length_scale and noise_variance must all be positive; "
                f"got {self.amplitude}, {self.length_scale}, {self.noise_variance}."
            )


class ModelSpecification:
    """
    Attributes
    ----------
    x : (N,) float
        Locations at which to draw sample paths.
    """

    def __init__(self, x: list | np.ndarray):
        self.x = stats_utils.to_finite_float64_array(x, "x")
        if self.x.size < 1:
            raise DataValidationError("x must contain at least one location.")

    @property
    def N(self) -> int:
        return self.x.size


def build_model(
    spec: ModelSpecification, config: ModelConfig | None = None
) -> pm.Model:
    """
    Build the fixed-hyperparameter GP prior.

    Returns
    -------
    model : pm.Model
        A single variable `y` (dims `obs`).
    """
    cfg = config or ModelConfig()
    logger.debug(f"Building GP sample model with N={spec.N}")

    with pm.Model(coords={"obs": np.arange(spec.N)}) as model:
        x = pm.Data("x", spec.x, dims="obs")
        cov = squared_exponential_graph(
            x, cfg.length_scale, cfg.amplitude, jitter=cfg.noise_variance
        )
        pm.MvNormal("y", mu=pt.zeros(spec.N), chol=cholesky(cov, lower=True), dims="obs")

    return model


def draw_samples(
    spec: ModelSpecification,
    draws: int = 10,
    config: ModelConfig | None = None,
    random_seed: int | None = None,
) -> az.InferenceData:
    """
    Draw `draws` sample paths at `spec.x`.

    Returns
    -------
    az.InferenceData
        With `y` in the `prior` group, dims (chain, draw, obs).
    """
    model = build_model(spec, config)
    return sampling.sample_prior(model, draws=draws, var_names=["y"], random_seed=random_seed)
