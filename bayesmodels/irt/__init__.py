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
Ordinal item-response models: partial credit (`pcm`) and generalized
partial credit (`gpcm`), both with latent regression.
"""

from bayesmodels.irt.covariates import (
    CovariateScaling,
    adjust_covariates,
    obtain_scaling,
)
from bayesmodels.irt.data import ResponseSpecification, prepare_responses
from bayesmodels.irt.likelihood import (
    DifficultyLayout,
    constrain_difficulties,
    difficulty_layout,
    ordinal_log_probs,
)

__all__ = [
    "CovariateScaling",
    "DifficultyLayout",
    "ResponseSpecification",
    "adjust_covariates",
    "constrain_difficulties",
    "difficulty_layout",
    "obtain_scaling",
    "ordinal_log_probs",
    "prepare_responses",
]
