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
import numpy as np
import pandas as pd

from bayesmodels.errors import DataValidationError

ArrayLike = list | tuple | pd.Series | np.ndarray


def to_float64_array(x: ArrayLike | None) -> np.ndarray:
    """
    Convert input to a one-dimensional NumPy array of float64, with None as np.nan.

    Parameters
    ----------
    x : list | tuple | pd.Series | np.ndarray | None
        Input data to be converted.

    Returns
    -------
    np.ndarray
        Converted array of type float64, with None values as np.nan.
    """
    return (
        pd.Series(x, dtype="float64")
        .convert_dtypes()
        .to_numpy(dtype="float64", na_value=np.nan, copy=True)
    )


def to_finite_float64_array(x: ArrayLike, name: str) -> np.ndarray:
    """
    Convert input to float64 and require every value to be observed and finite.

    Parameters
    ----------
    x : list | tuple | pd.Series | np.ndarray
        Input data to be converted.
    name : str
        Name used in error messages.

    Returns
    -------
    np.ndarray
        Converted array of type float64.

    Raises
    ------
    DataValidationError
        If any value is missing, NaN or infinite.
    """
    values = to_float64_array(x)
    if not np.isfinite(values).all():
        raise DataValidationError(
            f"{name} must be fully observed and finite; "
            f"found {np.count_nonzero(~np.isfinite(values))} invalid value(s)."
        )
    return values


def to_int64_array(x: ArrayLike, name: str) -> np.ndarray:
    """
    Convert input to a NumPy array of int64.

    Whole-number floats (e.g. 2.0) are accepted; missing or fractional
    values are not.

    Parameters
    ----------
    x : list | tuple | pd.Series | np.ndarray
        Input data to be converted.
    name : str
        Name used in error messages.

    Returns
    -------
    np.ndarray
        Converted array of type int64.

    Raises
    ------
    DataValidationError
        If any value is missing or not a whole number.
    """
    values = to_finite_float64_array(x, name)
    if not np.array_equal(values, np.round(values)):
        raise DataValidationError(f"{name} must contain whole numbers only.")
    return values.astype(np.int64)


def sample_sd(x: np.ndarray, axis: int = 0) -> np.ndarray:
    """
    Sample standard deviation (ddof=1), matching the usual statistical convention.
    """
    return np.std(np.asarray(x, float), axis=axis, ddof=1)


def is_binary(x: np.ndarray) -> bool:
    """
    True if every value is 0 or 1.
    """
    return bool(np.isin(np.asarray(x), [0.0, 1.0]).all())
