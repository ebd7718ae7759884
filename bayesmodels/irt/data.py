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
Response data shared by the partial credit models.

Responses come in long format: one (item, person, score) record per
observed response, with 0-based item and person indices. Unobserved
item/person pairs are simply absent.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict

import numpy as np
import pandas as pd

from bayesmodels import stats_utils
from bayesmodels.errors import DataValidationError
from bayesmodels.irt import covariates
from bayesmodels.irt.covariates import CovariateScaling
from bayesmodels.irt.likelihood import (
    DifficultyConstraint,
    DifficultyLayout,
    difficulty_layout,
)

logger = logging.getLogger(__name__)


class ResponseSpecification:
    """
    Validated response records and person covariates.

    Attributes
    ----------
    item : (N,) int
        Item index of each response, in [0, I).
    person : (N,) int
        Person index of each response, in [0, J).
    score : (N,) int
        Observed score, in [0, max_scores[item]].
    n_items : int
        I.
    n_persons : int
        J.
    max_scores : (I,) int
        Maximum score of each item.
    W : pd.DataFrame (J, K)
        Person covariates; column 0 is the intercept.
    """

    def __init__(
        self,
        item: list | pd.Series | np.ndarray,
        person: list | pd.Series | np.ndarray,
        score: list | pd.Series | np.ndarray,
        n_items: int | None = None,
        n_persons: int | None = None,
        max_scores: list | np.ndarray | None = None,
        W: pd.DataFrame | np.ndarray | None = None,
    ):
        """
        Parameters
        ----------
        item, person, score : (N,) int
            Response records.
        n_items, n_persons : int, optional
            I and J; default to one more than the largest index seen.
        max_scores : (I,) int, optional
            Maximum score per item. Defaults to the largest observed score
            of each item; give it explicitly when an item's top category
            may be unobserved.
        W : (J, K), optional
            Person covariates with the intercept first. Defaults to an
            intercept-only design.
        """
        item = stats_utils.to_int64_array(item, "item")
        person = stats_utils.to_int64_array(person, "person")
        score = stats_utils.to_int64_array(score, "score")

        N = item.size
        if N < 1:
            raise DataValidationError("at least one response is required.")
        for name, arr in [("person", person), ("score", score)]:
            if arr.size != N:
                raise DataValidationError(
                    f"All inputs must share the same N; {name} has N={arr.size}, expected {N}."
                )

        if (item < 0).any() or (person < 0).any():
            raise DataValidationError("item and person indices must be non-negative.")
        n_items = int(item.max()) + 1 if n_items is None else int(n_items)
        n_persons = int(person.max()) + 1 if n_persons is None else int(n_persons)
        if item.max() >= n_items:
            raise DataValidationError(
                f"item index {item.max()} out of range for n_items={n_items}."
            )
        if person.max() >= n_persons:
            raise DataValidationError(
                f"person index {person.max()} out of range for n_persons={n_persons}."
            )

        if (score < 0).any():
            n_bad = int(np.count_nonzero(score < 0))
            raise DataValidationError(f"Found {n_bad} negative score(s); scores start at 0.")

        if max_scores is None:
            if np.unique(item).size != n_items:
                missing = np.setdiff1d(np.arange(n_items), item)
                raise DataValidationError(
                    f"items {missing.tolist()} have no responses; pass max_scores explicitly."
                )
            max_scores = np.zeros(n_items, dtype=np.int64)
            np.maximum.at(max_scores, item, score)
        else:
            max_scores = stats_utils.to_int64_array(max_scores, "max_scores")
            if max_scores.size != n_items:
                raise DataValidationError(
                    f"max_scores: expected {n_items} entries, got {max_scores.size}."
                )

        if (max_scores < 1).any():
            bad = np.flatnonzero(max_scores < 1)
            raise DataValidationError(
                f"items {bad.tolist()} have maximum score 0; every item needs at least two categories."
            )

        out_of_range = score > max_scores[item]
        if out_of_range.any():
            i = int(np.flatnonzero(out_of_range)[0])
            raise DataValidationError(
                f"Found {int(out_of_range.sum())} score(s) outside [0, m_i]. Example: "
                f"response {i} has score {score[i]} for item {item[i]} with maximum {max_scores[item[i]]}."
            )

        if W is None:
            W = covariates.intercept_only(n_persons)
        W = covariates.as_covariate_frame(W)
        if W.shape[0] != n_persons:
            raise DataValidationError(
                f"W: expected {n_persons} rows (one per person), got {W.shape[0]}."
            )

        self.item = item
        self.person = person
        self.score = score
        self.n_items = n_items
        self.n_persons = n_persons
        self.max_scores = max_scores
        self.W = W

    @property
    def N(self) -> int:
        return self.item.size


@dataclass
class PreparedResponses:
    """Arrays, layout and coordinates consumed by the IRT `build_model` functions."""

    N: int
    I: int
    J: int
    item: np.ndarray  # (N,)
    person: np.ndarray  # (N,)
    score: np.ndarray  # (N,)
    layout: DifficultyLayout
    W_adj: np.ndarray  # (J, K)
    scaling: CovariateScaling
    coords: Dict[str, np.ndarray]


def prepare_responses(
    spec: ResponseSpecification, constraint: DifficultyConstraint = "item"
) -> PreparedResponses:
    """
    Build the difficulty layout, rescale covariates and define coords.
    """
    layout = difficulty_layout(spec.max_scores, constraint)
    scaling = covariates.obtain_scaling(spec.W)
    W_adj = covariates.adjust_covariates(spec.W, scaling)

    coords = dict(
        response=np.arange(spec.N),
        item=np.arange(spec.n_items),
        person=np.arange(spec.n_persons),
        step=np.arange(1, layout.max_steps + 1),
        free_difficulty=np.arange(layout.n_free),
        covariate=np.array(scaling.names, dtype=str),
    )

    logger.debug(
        f"Prepared {spec.N} responses: I={spec.n_items}, J={spec.n_persons}, "
        f"K={scaling.K}, {layout.n_free} free difficulties ({constraint} constraint)"
    )

    return PreparedResponses(
        N=spec.N,
        I=spec.n_items,
        J=spec.n_persons,
        item=spec.item,
        person=spec.person,
        score=spec.score,
        layout=layout,
        W_adj=W_adj,
        scaling=scaling,
        coords=coords,
    )
