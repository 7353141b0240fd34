"""
Boundary checks for regression inputs.

Design construction runs every array through these before anything
numerical happens. Each check either returns quietly or raises a
ValidationError subclass naming the offending argument and the values
that failed, so the estimator itself never has to re-check its inputs.
"""

import numpy as np
from numpy.typing import ArrayLike, NDArray
from typing import Any

from pylm.core.exceptions import (
    ValidationError,
    DimensionError,
    DimensionMismatchError,
    InsufficientDegreesOfFreedomError,
)


def check_array(array: ArrayLike, name: str) -> NDArray[np.floating[Any]]:
    """
    Convert ``array`` to float64, refusing anything that is not plain numbers.

    Integer, float and bool input is promoted; object, string and complex
    dtypes are rejected.

    Raises:
        ValidationError: If the input is not real-valued numeric data
    """
    try:
        arr = np.asarray(array)
    except (ValueError, TypeError) as e:
        raise ValidationError(f"{name}: cannot convert to array: {e}") from e

    kind = arr.dtype
    if kind == object:
        raise ValidationError(
            f"{name}: got object dtype; mixed or non-numeric values cannot be fitted"
        )
    if np.issubdtype(kind, np.complexfloating):
        raise ValidationError(f"{name}: complex dtype {kind} is not supported")
    # bool is not np.number; accept it as 0/1 indicator data
    if not (np.issubdtype(kind, np.number) or kind == np.bool_):
        raise ValidationError(f"{name}: non-numeric dtype {kind}")

    return arr.astype(np.float64, copy=False)


def check_finite(array: NDArray[np.floating[Any]], name: str) -> None:
    """Raise ValidationError if ``array`` holds NaN or Inf."""
    finite = np.isfinite(array)
    if finite.all():
        return
    n_nan = int(np.isnan(array).sum())
    n_inf = int(array.size - finite.sum()) - n_nan
    raise ValidationError(
        f"{name}: contains non-finite values ({n_nan} NaN, {n_inf} Inf)"
    )


def check_ndim(array: NDArray[np.floating[Any]], ndim: int, name: str) -> None:
    if array.ndim != ndim:
        raise DimensionError(
            f"{name}: expected {ndim}D array, got {array.ndim}D with shape {array.shape}"
        )


def check_1d(array: NDArray[np.floating[Any]], name: str) -> None:
    check_ndim(array, 1, name)


def check_2d(array: NDArray[np.floating[Any]], name: str) -> None:
    check_ndim(array, 2, name)


def check_consistent_length(
    X: NDArray[np.floating[Any]],
    y: NDArray[np.floating[Any]],
    names: tuple[str, str] = ('X', 'y'),
) -> None:
    """
    Verify the design matrix and response have the same number of rows.

    Raises:
        DimensionMismatchError: If row counts differ; carries both counts
    """
    n_X, n_y = X.shape[0], y.shape[0]
    if n_X != n_y:
        raise DimensionMismatchError(
            f"Inconsistent lengths: {names[0]} has {n_X} rows, {names[1]} has {n_y}",
            n_rows_X=n_X,
            n_rows_y=n_y,
        )


def check_degrees_of_freedom(X: NDArray[np.floating[Any]], name: str) -> None:
    """
    Require at least one residual degree of freedom (n > p).

    Raises:
        InsufficientDegreesOfFreedomError: If n <= p
    """
    n_obs, n_params = X.shape
    if n_obs <= n_params:
        raise InsufficientDegreesOfFreedomError(
            f"{name}: {n_obs} observations for {n_params} parameters leaves "
            f"{n_obs - n_params} residual degrees of freedom; need n > p",
            n_observations=n_obs,
            n_parameters=n_params,
        )
