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
Simulated response data with known item and person parameters.

Every person answers every item. Parameters are drawn on the same
(constrained) scale the models estimate, so posterior draws can be compared
directly with the values in `SimulatedResponses`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd

from bayesmodels import stats_utils
from bayesmodels.errors import DataValidationError
from bayesmodels.irt import covariates
from bayesmodels.irt.data import ResponseSpecification
from bayesmodels.irt.likelihood import (
    DifficultyConstraint,
    difficulty_layout,
    ordinal_log_probs,
)

logger = logging.getLogger(__name__)


@dataclass
class SimulatedResponses:
    """Simulated data plus the true parameter values that generated it."""

    spec: ResponseSpecification
    beta_free: np.ndarray  # (n_free,)
    beta: np.ndarray  # (I, M), padded steps 0
    alpha: np.ndarray  # (I,)
    theta: np.ndarray  # (J,)
    lambda_: np.ndarray  # (K,) original covariate scale
    ability_sd: float


def simulate_responses(
    max_scores: list | np.ndarray,
    n_persons: int,
    rng: np.random.Generator | None = None,
    W: pd.DataFrame | np.ndarray | None = None,
    lambda_: list | np.ndarray | None = None,
    ability_sd: float = 1.0,
    discrimination: bool = False,
    difficulty_sd: float = 1.0,
    constraint: DifficultyConstraint = "item",
) -> SimulatedResponses:
    """
    Simulate a complete item-by-person response matrix.

    Parameters
    ----------
    max_scores : (I,) int
        Maximum score of each item.
    n_persons : int
        J.
    rng : np.random.Generator, optional
        Source of randomness.
    W : (J, K), optional
        Covariates with intercept first; intercept-only if omitted.
    lambda_ : (K,), optional
        Regression coefficients on the original covariate scale; zeros if omitted.
    ability_sd : float
        Residual ability standard deviation.
    discrimination : bool
        Draw item discriminations from LogNormal(0, 0.25) (GPCM data) instead
        of fixing them at 1 (PCM data).
    difficulty_sd : float
        Standard deviation of the free step difficulties.
    constraint : {"item", "total"}
        Sum-to-zero constraint applied to the difficulties.

    Returns
    -------
    SimulatedResponses
    """
    rng = rng if rng is not None else np.random.default_rng()
    max_scores = stats_utils.to_int64_array(max_scores, "max_scores")
    if n_persons < 1:
        raise DataValidationError(f"n_persons must be >= 1; got {n_persons}.")

    layout = difficulty_layout(max_scores, constraint)
    I, J = layout.n_items, n_persons

    W = covariates.as_covariate_frame(
        covariates.intercept_only(J) if W is None else W
    )
    if W.shape[0] != J:
        raise DataValidationError(f"W: expected {J} rows, got {W.shape[0]}.")
    lambda_ = (
        np.zeros(W.shape[1])
        if lambda_ is None
        else stats_utils.to_finite_float64_array(lambda_, "lambda_")
    )
    if lambda_.size != W.shape[1]:
        raise DataValidationError(
            f"lambda_ has {lambda_.size} entries; W has {W.shape[1]} columns."
        )

    beta_free = rng.normal(0.0, difficulty_sd, size=layout.n_free)
    beta = layout.expand(beta_free)
    alpha = rng.lognormal(0.0, 0.25, size=I) if discrimination else np.ones(I)
    theta = W.to_numpy() @ lambda_ + ability_sd * rng.standard_normal(J)

    # long format, person-major
    person = np.repeat(np.arange(J), I)
    item = np.tile(np.arange(I), J)

    log_p = ordinal_log_probs(
        theta[person], alpha[item], beta[item], layout.step_mask[item]
    ).eval()
    probs = np.exp(log_p)
    cumulative = np.cumsum(probs, axis=1)
    u = rng.uniform(size=(item.size, 1))
    score = np.minimum((u > cumulative).sum(axis=1), max_scores[item])

    logger.debug(f"Simulated {item.size} responses for I={I}, J={J}")

    spec = ResponseSpecification(
        item=item,
        person=person,
        score=score,
        n_items=I,
        n_persons=J,
        max_scores=max_scores,
        W=W,
    )
    return SimulatedResponses(
        spec=spec,
        beta_free=beta_free,
        beta=beta,
        alpha=alpha,
        theta=theta,
        lambda_=lambda_,
        ability_sd=ability_sd,
    )
