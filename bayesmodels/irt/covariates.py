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
Latent regression covariates
============================

Person covariates W (J×K, column 0 the constant-1 intercept) are rescaled
before estimation so that one weak prior, λ_adj ~ StudentT(3, 0, 1), means
the same thing for every coefficient:

    binary 0/1 column k:   W_adj[:, k] = (W[:, k] - mean) / (max - min)
    continuous column k:   W_adj[:, k] = (W[:, k] - mean) / (2 sd)
    intercept:             W_adj[:, 0] = 1

Because W λ = W_adj λ_adj, the coefficients on the original scale are

    λ_k = λ_adj_k / s_k                       (k >= 1)
    λ_0 = λ_adj_0 - Σ_{k>=1} λ_adj_k c_k / s_k

with c the centres and s the scales.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

import numpy as np
import pandas as pd

from bayesmodels import stats_utils
from bayesmodels.errors import ConfigurationError, DataValidationError


@dataclass(frozen=True)
class CovariateScaling:
    """
    Centres and scales of each covariate column (intercept: centre 0, scale 1).
    """

    names: List[str]
    center: np.ndarray  # (K,)
    scale: np.ndarray  # (K,)
    is_binary: np.ndarray  # (K,) bool

    @property
    def K(self) -> int:
        return self.center.size

    def back_transform_matrix(self) -> np.ndarray:
        """A with λ = A λ_adj."""
        A = np.diag(1.0 / self.scale)
        A[0, 1:] = -self.center[1:] / self.scale[1:]
        return A

    def forward_transform_matrix(self) -> np.ndarray:
        """B = A⁻¹, with λ_adj = B λ."""
        B = np.diag(self.scale.astype(np.float64))
        B[0, 1:] = self.center[1:]
        return B

    def to_original_scale(self, lambda_adj):
        """
        Coefficients on the original covariate scale.

        Works on NumPy arrays and PyTensor tensors; the last axis indexes
        covariates, so posterior draws of shape (..., K) can be passed as-is.
        """
        return lambda_adj @ self.back_transform_matrix().T

    def to_adjusted_scale(self, lambda_):
        """Inverse of `to_original_scale`."""
        return lambda_ @ self.forward_transform_matrix().T


def intercept_only(n_persons: int) -> pd.DataFrame:
    """The J×1 design for a model without covariates."""
    return pd.DataFrame({"intercept": np.ones(n_persons)})


def as_covariate_frame(W: pd.DataFrame | np.ndarray) -> pd.DataFrame:
    """
    Covariates as a float DataFrame with string column names.

    Arrays get names "intercept", "w1", "w2", ...
    """
    if isinstance(W, pd.DataFrame):
        frame = W.astype("float64")
        frame.columns = [str(c) for c in frame.columns]
    else:
        values = np.asarray(W, dtype=np.float64)
        if values.ndim != 2:
            raise DataValidationError(f"W: expected shape (J, K), got {values.shape}.")
        names = ["intercept"] + [f"w{k}" for k in range(1, values.shape[1])]
        frame = pd.DataFrame(values, columns=names)

    if frame.shape[1] < 1:
        raise DataValidationError("W must have at least the intercept column.")
    if not np.isfinite(frame.to_numpy()).all():
        raise DataValidationError("W must be fully observed and finite.")
    return frame.reset_index(drop=True)


def obtain_scaling(W: pd.DataFrame | np.ndarray) -> CovariateScaling:
    """
    Centres and scales for each covariate column.

    Raises
    ------
    ConfigurationError
        If column 0 is not the constant-1 intercept, or another column is
        constant (its scale would be zero).
    """
    frame = as_covariate_frame(W)
    names = list(frame.columns)
    values = frame.to_numpy()

    if not np.all(values[:, 0] == 1.0):
        raise ConfigurationError(
            f"first covariate column ({names[0]!r}) must be the constant-1 intercept."
        )
    if values.shape[0] < 2 and values.shape[1] > 1:
        raise ConfigurationError("at least two persons are needed to scale covariates.")

    K = values.shape[1]
    center = np.zeros(K)
    scale = np.ones(K)
    binary = np.zeros(K, dtype=bool)

    for k in range(1, K):
        column = values[:, k]
        if np.ptp(column) == 0:
            kind = "intercept-like constant" if column[0] == 1.0 else "constant"
            raise ConfigurationError(
                f"covariate column {names[k]!r} is {kind} (value {column[0]}); only "
                "column 0 may be constant. Drop it or make it the intercept."
            )
        center[k] = column.mean()
        if stats_utils.is_binary(column):
            binary[k] = True
            scale[k] = column.max() - column.min()
        else:
            scale[k] = 2.0 * stats_utils.sample_sd(column)

    return CovariateScaling(names=names, center=center, scale=scale, is_binary=binary)


def adjust_covariates(
    W: pd.DataFrame | np.ndarray, scaling: CovariateScaling
) -> np.ndarray:
    """
    W_adj = (W - centre) / scale column-wise; the intercept stays 1.
    """
    values = as_covariate_frame(W).to_numpy()
    if values.shape[1] != scaling.K:
        raise DataValidationError(
            f"W has {values.shape[1]} columns; scaling was obtained for {scaling.K}."
        )
    return (values - scaling.center) / scaling.scale
