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
Simulated GP data for checking that the fit and predict models recover
known hyperparameters.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from bayesmodels import stats_utils
from bayesmodels.gp.kernel import (
    DEFAULT_JITTER,
    cholesky_factor,
    squared_exponential_cov,
)


@dataclass
class SimulatedGP:
    """Locations, latent function values and noisy observations."""

    x: np.ndarray
    f: np.ndarray
    y: np.ndarray
    length_scale: float
    amplitude: float
    noise_sd: float


def simulate_observations(
    x: list | np.ndarray,
    length_scale: float,
    amplitude: float,
    noise_sd: float,
    rng: np.random.Generator | None = None,
    jitter: float = DEFAULT_JITTER,
) -> SimulatedGP:
    """
    Draw f = L η and y = f + σ ε using the same non-centred construction as
    the fit model.

    Parameters
    ----------
    x : (N,) float
        Input locations.
    length_scale, amplitude, noise_sd : float
        True ρ, α and σ.
    rng : np.random.Generator, optional
        Source of randomness; a fresh default generator if omitted.

    Returns
    -------
    SimulatedGP
    """
    rng = rng if rng is not None else np.random.default_rng()
    x = stats_utils.to_finite_float64_array(x, "x")

    chol = cholesky_factor(squared_exponential_cov(x, length_scale, amplitude, jitter))
    f = chol @ rng.standard_normal(x.size)
    y = f + noise_sd * rng.standard_normal(x.size)

    return SimulatedGP(
        x=x,
        f=f,
        y=y,
        length_scale=length_scale,
        amplitude=amplitude,
        noise_sd=noise_sd,
    )
