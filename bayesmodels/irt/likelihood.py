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
Partial-credit ("step") likelihood
==================================

For an item with maximum score m, discrimination a and step difficulties
β_1..β_m, and a person with ability θ:

    log num(k) = Σ_{s=1}^{k} (a θ - β_s),   log num(0) = 0
    log Pr(Y = k) = log num(k) - logsumexp_{c=0..m} log num(c)

a = 1 gives the partial credit model; m = 1 reduces to the two-parameter
logistic model without a separate code path.

Items with different m share one (I, M) difficulty matrix, M = max m.
Steps beyond an item's m are masked out and the matching categories get
log-probability -inf.

Difficulties are identified by a sum-to-zero constraint: within each group
(each item, or all difficulties together) the last difficulty is minus the
sum of the others, so only the free ones are sampled.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

import numpy as np
import pytensor.tensor as pt

from bayesmodels.errors import ConfigurationError, DataValidationError

DifficultyConstraint = Literal["item", "total"]


# ---------------------------------------------------------------------
# (1) Difficulty layout and constraint
# ---------------------------------------------------------------------


@dataclass(frozen=True)
class DifficultyLayout:
    """
    Where free and derived step difficulties live in the flattened (I, M) matrix.

    Attributes
    ----------
    max_scores : (I,) int
        Maximum score m_i of each item.
    step_mask : (I, M) bool
        True for steps 1..m_i of item i.
    free_slots : (n_free,) int
        Flat indices of sampled difficulties, in row-major order.
    free_group : (n_free,) int
        Constraint group of each free difficulty.
    derived_slots : (n_groups,) int
        Flat index of the derived (last) difficulty of each group.
    """

    constraint: DifficultyConstraint
    max_scores: np.ndarray
    step_mask: np.ndarray
    free_slots: np.ndarray
    free_group: np.ndarray
    derived_slots: np.ndarray

    @property
    def n_items(self) -> int:
        return self.max_scores.size

    @property
    def max_steps(self) -> int:
        return self.step_mask.shape[1]

    @property
    def n_free(self) -> int:
        return self.free_slots.size

    @property
    def n_groups(self) -> int:
        return self.derived_slots.size

    def expand(self, beta_free: np.ndarray) -> np.ndarray:
        """
        NumPy version of `constrain_difficulties`.

        Returns
        -------
        (I, M) float
            Full difficulties; padded steps are 0.
        """
        beta_free = np.asarray(beta_free, dtype=np.float64)
        if beta_free.shape != (self.n_free,):
            raise DataValidationError(
                f"expected {self.n_free} free difficulties; got shape {beta_free.shape}."
            )
        flat = np.zeros(self.n_items * self.max_steps)
        flat[self.free_slots] = beta_free
        group_sums = np.bincount(self.free_group, weights=beta_free, minlength=self.n_groups)
        flat[self.derived_slots] = -group_sums
        return flat.reshape(self.n_items, self.max_steps)


def difficulty_layout(
    max_scores: np.ndarray, constraint: DifficultyConstraint = "item"
) -> DifficultyLayout:
    """
    Build the difficulty layout for items with the given maximum scores.

    Parameters
    ----------
    max_scores : (I,) int
        Maximum score of each item; all must be >= 1.
    constraint : {"item", "total"}
        "item": each item's step difficulties sum to zero (its last step is
        derived). "total": all difficulties together sum to zero (the last
        step of the last item is derived).
    """
    max_scores = np.asarray(max_scores, dtype=np.int64)
    if max_scores.ndim != 1 or max_scores.size < 1:
        raise DataValidationError("max_scores must be a non-empty one-dimensional array.")
    if (max_scores < 1).any():
        bad = np.flatnonzero(max_scores < 1)
        raise DataValidationError(
            f"every item needs a maximum score >= 1; items {bad.tolist()} do not."
        )
    if constraint not in ("item", "total"):
        raise ConfigurationError(
            f"difficulty constraint must be 'item' or 'total'; got {constraint!r}."
        )

    I = max_scores.size
    M = int(max_scores.max())
    step_mask = np.arange(M)[None, :] < max_scores[:, None]
    valid_slots = np.flatnonzero(step_mask.ravel())  # row-major

    if constraint == "item":
        last_slots = np.arange(I) * M + max_scores - 1
        is_derived = np.isin(valid_slots, last_slots)
        free_slots = valid_slots[~is_derived]
        free_group = free_slots // M
        derived_slots = last_slots
    else:
        free_slots = valid_slots[:-1]
        free_group = np.zeros(free_slots.size, dtype=np.int64)
        derived_slots = valid_slots[-1:]

    return DifficultyLayout(
        constraint=constraint,
        max_scores=max_scores,
        step_mask=step_mask,
        free_slots=free_slots.astype(np.int64),
        free_group=free_group.astype(np.int64),
        derived_slots=derived_slots.astype(np.int64),
    )


def constrain_difficulties(beta_free, layout: DifficultyLayout):
    """
    Full (I, M) difficulty matrix from the free difficulties, as a PyTensor expression.
    """
    beta_free = pt.as_tensor_variable(beta_free)
    flat = pt.zeros(layout.n_items * layout.max_steps)
    flat = pt.set_subtensor(flat[layout.free_slots], beta_free)
    group_sums = pt.zeros(layout.n_groups)
    group_sums = pt.inc_subtensor(group_sums[layout.free_group], beta_free)
    flat = pt.set_subtensor(flat[layout.derived_slots], -group_sums)
    return flat.reshape((layout.n_items, layout.max_steps))


# ---------------------------------------------------------------------
# (2) Category log-probabilities
# ---------------------------------------------------------------------


def ordinal_log_probs(theta, discrimination, difficulties, step_mask):
    """
    Log-probability of every score category, per response.

    Parameters
    ----------
    theta : (N,)
        Ability of the responding person.
    discrimination : (N,) or scalar
        Discrimination of the item answered (1 for the partial credit model).
    difficulties : (N, M)
        Step difficulties of the item answered; masked steps are ignored.
    step_mask : (N, M) bool
        True for the item's real steps.

    Returns
    -------
    TensorVariable (N, M + 1)
        log Pr(Y = k) for k = 0..M; -inf for categories above the item's
        maximum score. Each row log-sum-exps to 0.
    """
    theta = pt.as_tensor_variable(theta)
    discrimination = pt.as_tensor_variable(discrimination)
    difficulties = pt.as_tensor_variable(difficulties)
    step_mask = np.asarray(step_mask, dtype=bool)

    if discrimination.ndim == 1:
        discrimination = discrimination.dimshuffle(0, "x")

    steps = discrimination * theta.dimshuffle(0, "x") - difficulties
    steps = pt.where(step_mask, steps, 0.0)
    partial_sums = pt.cumsum(steps, axis=1)
    # category 0 has the empty sum
    partial_sums = pt.concatenate([pt.zeros_like(partial_sums[:, :1]), partial_sums], axis=1)

    category_mask = np.concatenate(
        [np.ones((step_mask.shape[0], 1), dtype=bool), step_mask], axis=1
    )
    partial_sums = pt.where(category_mask, partial_sums, -np.inf)

    # log-sum-exp shifted by the row maximum (finite: category 0 is always 0)
    row_max = pt.max(partial_sums, axis=1, keepdims=True)
    log_norm = row_max + pt.log(pt.sum(pt.exp(partial_sums - row_max), axis=1, keepdims=True))
    return partial_sums - log_norm
