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
Squared-exponential covariance and Cholesky factorisation
=========================================================

    K[p, q] = α² exp(-0.5 (x[p] - x[q])² / ρ²) + δ 1[p = q]
    K = L Lᵀ,  L lower-triangular

ρ (length_scale) and α (amplitude) are strictly positive; δ (jitter) is a
small constant keeping K numerically positive-definite.

Each piece exists twice: a NumPy version used for simulation and checks, and
a PyTensor version used inside PyMC graphs (and so differentiable).
"""

from __future__ import annotations

import numpy as np
import pymc as pm
import pytensor.tensor as pt
import scipy.linalg
from pytensor.tensor.slinalg import cholesky

from bayesmodels.errors import InvalidProposalError

DEFAULT_JITTER = 1e-9


# ---------------------------------------------------------------------
# (1) NumPy
# ---------------------------------------------------------------------


def squared_exponential_cov(
    x: np.ndarray,
    length_scale: float,
    amplitude: float,
    jitter: float = DEFAULT_JITTER,
) -> np.ndarray:
    """
    Squared-exponential covariance matrix of one-dimensional inputs.

    Parameters
    ----------
    x : (N,) float
        Input locations.
    length_scale : float
        ρ > 0.
    amplitude : float
        α > 0 (marginal standard deviation).
    jitter : float
        Added to every diagonal entry.

    Returns
    -------
    (N, N) float
    """
    x = np.asarray(x, dtype=np.float64)
    sq_dist = np.subtract.outer(x, x) ** 2
    cov = amplitude**2 * np.exp(-0.5 * sq_dist / length_scale**2)
    cov[np.diag_indices_from(cov)] += jitter
    return cov


def cholesky_factor(cov: np.ndarray) -> np.ndarray:
    """
    Lower Cholesky factor of a covariance matrix.

    Raises
    ------
    InvalidProposalError
        If `cov` is not positive-definite or the factor is not finite.
    """
    try:
        chol = scipy.linalg.cholesky(cov, lower=True, check_finite=True)
    except (np.linalg.LinAlgError, ValueError) as err:
        raise InvalidProposalError(
            f"covariance matrix of shape {np.shape(cov)} is not positive-definite: {err}"
        ) from err
    if not np.isfinite(chol).all():
        raise InvalidProposalError("Cholesky factor contains non-finite entries.")
    return chol


# ---------------------------------------------------------------------
# (2) PyTensor
# ---------------------------------------------------------------------


def squared_exponential_graph(x, length_scale, amplitude, jitter=DEFAULT_JITTER):
    """
    Same kernel as `squared_exponential_cov`, as a PyTensor expression.
    """
    x = pt.as_tensor_variable(x)
    sq_dist = pt.square(x.dimshuffle(0, "x") - x.dimshuffle("x", 0))
    cov = pt.square(amplitude) * pt.exp(-0.5 * sq_dist / pt.square(length_scale))
    return cov + jitter * pt.eye(x.shape[0])


def cholesky_or_reject(cov, name: str = "cholesky_valid"):
    """
    Cholesky factor inside a model, rejecting proposals where it fails.

    Must be called inside a `pm.Model` context. If the factorisation fails,
    a `pm.Potential` named `name` contributes -inf to the model log-density,
    so NUTS rejects the proposal. The returned factor is then replaced by
    the identity so that no NaN reaches downstream terms (NaN + -inf is NaN,
    which PyMC would not treat as a clean rejection).

    Returns
    -------
    TensorVariable
        Lower-triangular factor (identity when rejected).
    """
    chol = cholesky(cov, lower=True, on_error="nan")
    # a failed factor is all NaN
    is_valid = ~pt.any(pt.isnan(chol) | pt.isinf(chol))
    pm.Potential(name, pt.switch(is_valid, 0.0, -np.inf))
    return pt.switch(is_valid, chol, pt.eye(cov.shape[0]))
