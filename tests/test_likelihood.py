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
"""Tests for the partial-credit likelihood and difficulty constraint."""

import numpy as np
import pytest
from scipy.special import expit, logsumexp

from bayesmodels.errors import ConfigurationError, DataValidationError
from bayesmodels.irt.likelihood import (
    constrain_difficulties,
    difficulty_layout,
    ordinal_log_probs,
)


def _reference_log_probs(theta, discrimination, steps):
    """Category log-probabilities for one item straight from the definition."""
    numerators = np.concatenate([[0.0], np.cumsum(discrimination * theta - np.asarray(steps))])
    return numerators - logsumexp(numerators)


def _single_item(theta, discrimination, steps):
    steps = np.atleast_1d(np.asarray(steps, dtype=float))
    return ordinal_log_probs(
        np.array([theta]),
        np.array([discrimination]),
        steps[None, :],
        np.ones((1, steps.size), dtype=bool),
    ).eval()[0]


class TestOrdinalLogProbs:
    """Tests for `ordinal_log_probs`."""

    def test_dichotomous_item_at_zero_is_one_half(self):
        """One dichotomous item, β = 0, θ = 0: Pr(Y = 1) = 0.5."""
        log_p = _single_item(0.0, 1.0, [0.0])
        assert np.exp(log_p[1]) == pytest.approx(0.5, abs=1e-15)
        assert np.exp(log_p[0]) == pytest.approx(0.5, abs=1e-15)

    @pytest.mark.parametrize("theta", [-3.0, -0.4, 0.0, 1.1, 4.0])
    @pytest.mark.parametrize("discrimination", [0.3, 1.0, 2.5])
    @pytest.mark.parametrize("beta", [-1.5, 0.0, 0.8])
    def test_dichotomous_matches_two_parameter_logistic(self, theta, discrimination, beta):
        log_p = _single_item(theta, discrimination, [beta])
        p1 = expit(discrimination * theta - beta)
        assert log_p[1] == pytest.approx(np.log(p1), rel=1e-10)
        assert log_p[0] == pytest.approx(np.log1p(-p1), rel=1e-10)

    def test_matches_definition_for_several_steps(self):
        steps = [-1.0, 0.3, 0.9, -0.2]
        log_p = _single_item(0.7, 1.4, steps)
        np.testing.assert_allclose(log_p, _reference_log_probs(0.7, 1.4, steps), rtol=1e-12)

    def test_masked_categories_and_normalisation(self):
        # item 0 has one step, item 1 three
        difficulties = np.array([[0.5, 0.0, 0.0], [-0.5, 0.1, 0.4]])
        mask = np.array([[True, False, False], [True, True, True]])
        log_p = ordinal_log_probs(
            np.array([0.2, -0.3]), 1.0, difficulties, mask
        ).eval()

        assert log_p.shape == (2, 4)
        assert np.all(np.isneginf(log_p[0, 2:]))
        np.testing.assert_allclose(np.exp(log_p).sum(axis=1), 1.0, rtol=1e-12)
        np.testing.assert_allclose(log_p[0, :2], _reference_log_probs(0.2, 1.0, [0.5]))
        np.testing.assert_allclose(
            log_p[1], _reference_log_probs(-0.3, 1.0, [-0.5, 0.1, 0.4]), rtol=1e-12
        )

    def test_extreme_ability_does_not_overflow(self):
        log_p = _single_item(800.0, 3.0, [0.1, -0.2, 0.3, 0.0, -0.2])
        assert np.all(np.isfinite(log_p))
        assert log_p[-1] == pytest.approx(0.0, abs=1e-12)

    def test_higher_ability_never_lowers_upper_categories(self):
        """Pr(Y >= k) is non-decreasing in θ for every k."""
        steps = np.array([0.8, -0.6, 1.2])
        thetas = np.linspace(-4.0, 4.0, 41)
        log_p = ordinal_log_probs(
            thetas,
            1.3,
            np.tile(steps, (thetas.size, 1)),
            np.ones((thetas.size, 3), dtype=bool),
        ).eval()

        upper = np.cumsum(np.exp(log_p)[:, ::-1], axis=1)[:, ::-1]
        assert np.all(np.diff(upper, axis=0) >= -1e-12)


class TestDifficultyLayout:
    """Tests for the sum-to-zero difficulty bookkeeping."""

    def test_item_constraint_counts(self):
        layout = difficulty_layout([1, 2, 3])
        assert layout.n_free == 3  # 0 + 1 + 2
        assert layout.n_groups == 3
        assert layout.max_steps == 3
        np.testing.assert_array_equal(
            layout.step_mask,
            [[True, False, False], [True, True, False], [True, True, True]],
        )

    @pytest.mark.parametrize("seed", range(4))
    def test_item_constraint_sums_to_zero(self, seed):
        rng = np.random.default_rng(seed)
        layout = difficulty_layout([2, 4, 1, 3])
        beta = layout.expand(rng.normal(size=layout.n_free))

        np.testing.assert_allclose(beta.sum(axis=1), 0.0, atol=1e-12)
        assert np.all(beta[~layout.step_mask] == 0.0)

    def test_dichotomous_item_is_fixed_at_zero(self):
        layout = difficulty_layout([1, 2])
        beta = layout.expand(np.array([0.7]))
        np.testing.assert_array_equal(beta, [[0.0, 0.0], [0.7, -0.7]])

    def test_total_constraint(self, rng):
        layout = difficulty_layout([1, 2, 3], constraint="total")
        assert layout.n_free == 5
        beta_free = rng.normal(size=5)
        beta = layout.expand(beta_free)

        assert beta.sum() == pytest.approx(0.0, abs=1e-12)
        assert beta[2, 2] == pytest.approx(-beta_free.sum())
        assert beta[0, 0] == beta_free[0]

    @pytest.mark.parametrize("constraint", ["item", "total"])
    def test_graph_matches_numpy(self, rng, constraint):
        layout = difficulty_layout([3, 1, 2, 2], constraint=constraint)
        beta_free = rng.normal(size=layout.n_free)

        graph = constrain_difficulties(beta_free, layout).eval()
        np.testing.assert_allclose(graph, layout.expand(beta_free), rtol=1e-12)

    def test_wrong_number_of_free_values(self):
        layout = difficulty_layout([2, 2])
        with pytest.raises(DataValidationError, match="expected 2"):
            layout.expand(np.zeros(3))

    def test_item_without_steps(self):
        with pytest.raises(DataValidationError, match="maximum score >= 1"):
            difficulty_layout([2, 0])

    def test_unknown_constraint(self):
        with pytest.raises(ConfigurationError):
            difficulty_layout([2], constraint="first")
