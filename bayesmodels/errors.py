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
Exceptions raised while validating model inputs and evaluating model pieces.
"""


class DataValidationError(ValueError):
    """
    Input data break the model's data contract (shapes, missing values,
    indices or scores out of range).
    """


class ConfigurationError(ValueError):
    """
    A model configuration or covariate design cannot be used as given.
    """


class InvalidProposalError(ArithmeticError):
    """
    A parameter value produced a matrix that cannot be Cholesky factored.
    """
