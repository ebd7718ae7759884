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
GP predict
==========

Joint model over training locations x1 (N1) and query locations x2 (N2):

    x = [x1, x2]                     (N = N1 + N2)
    f = L η,  L = chol(SE(x; ρ, α) + δ I)
    y1 ~ Normal(f[:N1], σ)           likelihood on the training slice only
    f_pred = f[N1:]
    y2 ~ Normal(f_pred, σ)           drawn after sampling, see `draw_predictions`

Priors are those of `bayesmodels.gp.fit`. Predictions come from the joint
posterior over the full latent vector, not from a closed-form conditional.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict

import arviz as az
import numpy as np
import pymc as pm

from bayesmodels import sampling, stats_utils
from bayesmodels.errors import DataValidationError
from bayesmodels.gp.fit import ModelConfig
from bayesmodels.gp.kernel import cholesky_or_reject, squared_exponential_graph

logger = logging.getLogger(__name__)

__all__ = [
    "ModelConfig",
    "ModelSpecification",
    "PreparedData",
    "prepare_data",
    "build_model",
    "draw_predictions",
]


class ModelSpecification:
    """
    Training data and query locations.

    Attributes
    ----------
    x1 : (N1,) float
        Training input locations.
    y1 : (N1,) float
        Observations at `x1`.
    x2 : (N2,) float
        Query locations (no observations).
    """

    def __init__(
        self,
        x1: list | np.ndarray,
        y1: list | np.ndarray,
        x2: list | np.ndarray,
    ):
        self.x1 = stats_utils.to_finite_float64_array(x1, "x1")
        self.y1 = stats_utils.to_finite_float64_array(y1, "y1")
        self.x2 = stats_utils.to_finite_float64_array(x2, "x2")

        if self.x1.size < 1:
            raise DataValidationError("x1 must contain at least one training location.")
        if self.x2.size < 1:
            raise DataValidationError("x2 must contain at least one query location.")
        if self.x1.shape != self.y1.shape:
            raise DataValidationError(
                f"x1 and y1 must have the same length; got {self.x1.size} and {self.y1.size}."
            )

    @property
    def N1(self) -> int:
        return self.x1.size

    @property
    def N2(self) -> int:
        return self.x2.size


@dataclass
class PreparedData:
    """Concatenated locations and coordinates consumed by `build_model`."""

    N1: int
    N2: int
    x: np.ndarray  # (N1 + N2,) training locations first
    y1: np.ndarray
    coords: Dict[str, np.ndarray]


def prepare_data(spec: ModelSpecification) -> PreparedData:
    N1, N2 = spec.N1, spec.N2
    return PreparedData(
        N1=N1,
        N2=N2,
        x=np.concatenate([spec.x1, spec.x2]),
        y1=spec.y1,
        coords={
            "location": np.arange(N1 + N2),
            "train": np.arange(N1),
            "query": np.arange(N2),
        },
    )


def build_model(
    spec: ModelSpecification, config: ModelConfig | None = None
) -> pm.Model:
    """
    Build the joint GP model over training and query locations.

    Returns
    -------
    model : pm.Model
        Free variables `rho`, `alpha`, `sigma`, `eta`; deterministics `f`
        (all locations) and `f_pred` (query slice); observed `y1`.
        The predictive `y2` is not part of the model until
        `draw_predictions` adds it, so sample the posterior first.
    """
    cfg = config or ModelConfig()
    prep = prepare_data(spec)
    logger.debug(f"Building GP predict model with N1={prep.N1}, N2={prep.N2}")

    with pm.Model(coords=prep.coords) as model:
        x = pm.Data("x", prep.x, dims="location")

        rho = pm.Gamma("rho", alpha=cfg.rho_shape, beta=cfg.rho_rate)
        alpha = pm.HalfNormal("alpha", sigma=cfg.alpha_sd)
        sigma = pm.HalfNormal("sigma", sigma=cfg.sigma_sd)
        eta = pm.Normal("eta", 0.0, 1.0, dims="location")

        cov = squared_exponential_graph(x, rho, alpha, cfg.jitter)
        chol = cholesky_or_reject(cov)
        f = pm.Deterministic("f", chol @ eta, dims="location")

        pm.Normal("y1", mu=f[: prep.N1], sigma=sigma, observed=prep.y1, dims="train")
        pm.Deterministic("f_pred", f[prep.N1 :], dims="query")

    return model


def draw_predictions(
    model: pm.Model,
    idata: az.InferenceData,
    random_seed: int | None = None,
) -> az.InferenceData:
    """
    Draw y2 ~ Normal(f_pred, σ) for every posterior draw in `idata`.

    Adds the predictive variable `y2` to `model` on first use; `model` is
    modified in place, so later `pm.sample` calls on it would also sample
    `y2`.

    Parameters
    ----------
    model : pm.Model
        A model returned by `build_model`.
    idata : az.InferenceData
        Posterior draws of `model` (must include `f_pred` and `sigma`).

    Returns
    -------
    az.InferenceData
        With a `posterior_predictive` group holding `y2` (dims `query`).
    """
    if "y2" not in model.named_vars:
        with model:
            pm.Normal("y2", mu=model["f_pred"], sigma=model["sigma"], dims="query")
    return sampling.sample_predictive(model, idata, ["y2"], random_seed=random_seed)
