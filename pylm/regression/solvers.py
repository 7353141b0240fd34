"""
Solver dispatch for regression.

This module provides the fit() function (public API) and backend selection.
"""

from __future__ import annotations

from typing import Any, Literal
import logging

from numpy.typing import ArrayLike

from pylm.core.compute.tolerances import DEFAULT_RANK_TOL
from pylm.core.exceptions import ValidationError
from pylm.core.protocols import Backend
from pylm.regression.design import Design
from pylm.regression.solution import FitResult, LinearParams
from pylm.regression.backends.cpu import CPUQRBackend

logger = logging.getLogger(__name__)

# Type alias for backend selection
BackendChoice = Literal['cpu', 'cpu_qr']


def fit(
    X: ArrayLike | Design | str,
    y: ArrayLike | None = None,
    *,
    data: Any = None,
    tol: float | None = None,
    backend: BackendChoice = 'cpu',
) -> FitResult:
    """
    Fit a linear regression model by ordinary least squares.

    Solves:
        min_β ||y - Xβ||²

    using a column-pivoted QR decomposition of X; X'X is never formed.

    The model can be given three ways, resolved here into a single Design
    before the estimator runs:
        fit(X, y)                        # design matrix and response
        fit('mpg ~ disp', data=df)       # numeric formula + named columns
        fit(design)                      # prebuilt Design

    Args:
        X: Design matrix (n x p), a formula string, or a Design
        y: Response vector (n,). Required with a matrix, forbidden otherwise.
        data: DataFrame, DataSource or mapping; required with a formula
        tol: Relative rank tolerance (default DEFAULT_RANK_TOL = 1e-12).
            X is rejected as rank-deficient when a diagonal entry of the
            pivoted R factor is at most tol times the largest one.
        backend: Computational backend ('cpu' or 'cpu_qr', both the QR
            reference implementation)

    Returns:
        FitResult with coefficients, covariance, σ̂, df, fitted values
        and residuals

    Raises:
        ValidationError: If inputs are invalid or the call is ambiguous
        DimensionMismatchError: If X and y have different numbers of rows
        InsufficientDegreesOfFreedomError: If n <= p
        RankDeficiencyError: If X is (near-)rank-deficient

    Example:
        >>> import numpy as np
        >>> from pylm.regression import fit
        >>>
        >>> X = np.column_stack([np.ones(100), np.random.randn(100, 2)])
        >>> y = X @ [1, 2, 3] + np.random.randn(100) * 0.1
        >>>
        >>> result = fit(X, y)
        >>> result.coefficients
    """
    # === Construct Design ===
    # This is the boundary - validate here, trust everywhere else
    design = _resolve_design(X, y, data)

    # === Select Backend ===
    backend_impl = _get_backend(backend, DEFAULT_RANK_TOL if tol is None else tol)

    # === Solve ===
    logger.debug("fit(%s) with backend %s", design.describe(), backend_impl.name)
    result = backend_impl.solve(design)

    # === Wrap and Return ===
    return FitResult(
        _result=result,
        _names=design.names,
        _n_observations=design.n,
        _call=f"fit({design.describe()})",
    )


def _resolve_design(X: Any, y: Any, data: Any) -> Design:
    """Turn the accepted input shapes into one validated Design."""
    if isinstance(X, Design):
        if y is not None or data is not None:
            raise ValidationError("y and data must not be given together with a Design")
        return X

    if isinstance(X, str):
        if data is None:
            raise ValidationError("data required when fitting from a formula")
        if y is not None:
            raise ValidationError("y must not be given with a formula; name the response in it")
        return Design.from_formula(X, data)

    if data is not None:
        raise ValidationError("data is only used with a formula")
    if y is None:
        raise ValidationError(
            "y required when X is a matrix; pass a design matrix and response, "
            "a formula with data, or a Design"
        )
    return Design.from_arrays(X, y)


def _get_backend(choice: BackendChoice, tol: float) -> Backend[Design, LinearParams]:
    """
    Select and instantiate the appropriate backend.

    Raises:
        ValueError: If unknown backend specified
    """
    if choice in ('cpu', 'cpu_qr'):
        return CPUQRBackend(tol=tol)
    raise ValueError(f"Unknown backend: {choice!r}")
