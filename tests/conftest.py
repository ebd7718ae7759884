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
"""Shared fixtures for model tests."""

import numpy as np
import pandas as pd
import pytest


@pytest.fixture
def rng() -> np.random.Generator:
    """Seeded random generator."""
    return np.random.default_rng(20250117)


@pytest.fixture
def small_responses() -> dict:
    """
    Three items (max scores 1, 2, 3), four persons, every pair observed.
    """
    max_scores = np.array([1, 2, 3])
    person = np.repeat(np.arange(4), 3)
    item = np.tile(np.arange(3), 4)
    score = np.array([0, 1, 2, 1, 2, 3, 1, 0, 0, 0, 2, 1])
    return {"item": item, "person": person, "score": score, "max_scores": max_scores}


@pytest.fixture
def person_covariates() -> pd.DataFrame:
    """Intercept, a continuous covariate and a binary one for four persons."""
    return pd.DataFrame(
        {
            "intercept": [1.0, 1.0, 1.0, 1.0],
            "age": [7.5, 9.0, 10.5, 12.0],
            "female": [0.0, 1.0, 1.0, 0.0],
        }
    )
