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
Partial credit model (PCM) with latent regression
=================================================

    β_free ~ Normal(0, 5)                      free step difficulties
    β = constrain(β_free)                      sum-to-zero per item (default)
    λ_adj ~ StudentT(3, 0, 1)                  per covariate (adjusted scale)
    σ ~ Exponential(0.1)                       ability scale
    z_j ~ Normal(0, 1)
    θ_j = W_adj[j] · λ_adj + σ z_j
    y_n ~ PCM(θ[person[n]], β[item[n], 1..m_item])

Reported: β (item, step), θ (person), λ on the original covariate scale.
With an intercept-only design λ is the ability mean.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import pymc as pm
import pytensor.tensor as pt

from bayesmodels.errors import ConfigurationError
from bayesmodels.irt.data import ResponseSpecification, prepare_responses
from bayesmodels.irt.likelihood import (
    DifficultyConstraint,
    constrain_difficulties,
    ordinal_log_probs,
)

logger = logging.getLogger(__name__)

ModelSpecification = ResponseSpecification


@dataclass(frozen=True)
class ModelConfig:
    """
    Prior hyperparameters and identification choice.

    `difficulty_constraint` picks which difficulties are summed to zero:
    "item" (each item separately) or "total" (all difficulties together).
    """

    difficulty_sd: float = 5.0
    ability_scale_rate: float = 0.1
    regression_nu: float = 3.0
    regression_sd: float = 1.0
    difficulty_constraint: DifficultyConstraint = "item"

    def __post_init__(self):
        for name in ("difficulty_sd", "ability_scale_rate", "regression_nu", "regression_sd"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(
                    f"{name} must be positive; got {getattr(self, name)}."
                )
        if self.difficulty_constraint not in ("item", "total"):
            raise ConfigurationError(
                f"difficulty_constraint must be 'item' or 'total'; got {self.difficulty_constraint!r}."
            )


def build_model(
    spec: ResponseSpecification, config: ModelConfig | None = None
) -> pm.Model:
    """
    Build the PyMC partial credit model.

    Parameters
    ----------
    spec : ResponseSpecification
        Validated responses and covariates.
    config : ModelConfig, optional
        Prior hyperparameters.

    Returns
    -------
    model : pm.Model
    """
    cfg = config or ModelConfig()
    prep = prepare_responses(spec, cfg.difficulty_constraint)
    layout = prep.layout
    logger.debug(f"Building PCM with {prep.N} responses")

    with pm.Model(coords=prep.coords) as model:
        W_adj = pm.Data("W_adj", prep.W_adj, dims=("person", "covariate"))

        # -----------------------------------------------------------------
        # Item step difficulties
        # -----------------------------------------------------------------
        if layout.n_free > 0:
            beta_free = pm.Normal(
                "beta_free", 0.0, cfg.difficulty_sd, dims="free_difficulty"
            )
        else:
            # every item dichotomous under the per-item constraint
            beta_free = pt.zeros(0)
        beta = pm.Deterministic(
            "beta", constrain_difficulties(beta_free, layout), dims=("item", "step")
        )

        # -----------------------------------------------------------------
        # Abilities with latent regression
        # -----------------------------------------------------------------
        lambda_adj = pm.StudentT(
            "lambda_adj",
            nu=cfg.regression_nu,
            mu=0.0,
            sigma=cfg.regression_sd,
            dims="covariate",
        )
        sigma = pm.Exponential("sigma", lam=cfg.ability_scale_rate)
        theta_z = pm.Normal("theta_z", 0.0, 1.0, dims="person")
        theta = pm.Deterministic(
            "theta", pm.math.dot(W_adj, lambda_adj) + sigma * theta_z, dims="person"
        )
        pm.Deterministic(
            "lambda", prep.scaling.to_original_scale(lambda_adj), dims="covariate"
        )

        # -----------------------------------------------------------------
        # Likelihood
        # -----------------------------------------------------------------
        log_p = ordinal_log_probs(
            theta[prep.person],
            1.0,
            beta[prep.item],
            layout.step_mask[prep.item],
        )
        pm.Categorical("y", logit_p=log_p, observed=prep.score, dims="response")

    return model
