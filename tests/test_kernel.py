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
"""Tests for the squared-exponential kernel and Cholesky helpers."""

import numpy as np
import pymc as pm
import pytensor.tensor as pt
import pytest

from bayesmodels.errors import InvalidProposalError
from bayesmodels.gp.kernel import (
    cholesky_factor,
    cholesky_or_reject,
    squared_exponential_cov,
    squared_exponential_graph,
)


class TestSquaredExponentialCov:
    """Tests for the NumPy kernel."""

    def test_three_point_values(self):
        """x = [0, 1, 2], ρ = α = 1, δ = 1e-9 gives the kernel's exact values."""
        cov = squared_exponential_cov([0.0, 1.0, 2.0], length_scale=1.0, amplitude=1.0)

        expected = np.array(
            [
                [1.0 + 1e-9, np.exp(-0.5), np.exp(-2.0)],
                [np.exp(-0.5), 1.0 + 1e-9, np.exp(-0.5)],
                [np.exp(-2.0), np.exp(-0.5), 1.0 + 1e-9],
            ]
        )
        np.testing.assert_allclose(cov, expected, rtol=0, atol=1e-15)
        assert cov[0, 0] == pytest.approx(1.000000001, abs=1e-15)

    def test_amplitude_and_length_scale(self):
        cov = squared_exponential_cov([0.0, 3.0], length_scale=2.0, amplitude=1.5, jitter=0.0)
        assert cov[0, 0] == pytest.approx(2.25)
        assert cov[0, 1] == pytest.approx(2.25 * np.exp(-0.5 * 9.0 / 4.0))

    @pytest.mark.parametrize("seed", range(5))
    def test_symmetric_and_factorable(self, seed):
        """Random positive hyperparameters give a symmetric matrix that factors at the default jitter."""
        rng = np.random.default_rng(seed)
        x = np.sort(rng.uniform(0.0, 10.0, size=25))
        rho, alpha = rng.uniform(0.1, 3.0, size=2)

        cov = squared_exponential_cov(x, rho, alpha)
        np.testing.assert_array_equal(cov, cov.T)
        cholesky_factor(cov)

    def test_cholesky_round_trip(self, rng):
        x = rng.uniform(-2.0, 2.0, size=12)
        cov = squared_exponential_cov(x, 0.7, 1.3)
        chol = cholesky_factor(cov)

        np.testing.assert_allclose(chol @ chol.T, cov, atol=1e-6)
        np.testing.assert_array_equal(chol, np.tril(chol))


class TestCholeskyFactor:
    """Tests for failure handling of the NumPy factorisation."""

    def test_not_positive_definite_raises(self):
        with pytest.raises(InvalidProposalError, match="not positive-definite"):
            cholesky_factor(np.array([[1.0, 2.0], [2.0, 1.0]]))

    def test_nan_raises(self):
        with pytest.raises(InvalidProposalError):
            cholesky_factor(np.array([[1.0, np.nan], [np.nan, 1.0]]))


class TestGraphKernel:
    """Tests for the PyTensor kernel and guarded factorisation."""

    def test_graph_matches_numpy(self, rng):
        x = rng.normal(size=8)
        graph = squared_exponential_graph(x, 0.9, 1.7, 1e-9).eval()
        np.testing.assert_allclose(graph, squared_exponential_cov(x, 0.9, 1.7), rtol=1e-12)

    def test_valid_factor_has_zero_potential(self):
        cov = squared_exponential_cov([0.0, 1.0, 2.0], 1.0, 1.0)
        with pm.Model() as model:
            chol = cholesky_or_reject(pt.as_tensor_variable(cov))

        np.testing.assert_allclose(chol.eval(), np.linalg.cholesky(cov), atol=1e-12)
        assert float(model["cholesky_valid"].eval()) == 0.0

    def test_failed_factor_rejects_without_nan(self):
        bad = np.array([[1.0, 2.0], [2.0, 1.0]])
        with pm.Model() as model:
            chol = cholesky_or_reject(pt.as_tensor_variable(bad))

        potential = float(model["cholesky_valid"].eval())
        assert potential == -np.inf
        np.testing.assert_array_equal(chol.eval(), np.eye(2))
