"""
CPU reference backend for linear regression.

Uses a column-pivoted QR decomposition via LAPACK (through SciPy) for
both the coefficients and the covariance matrix, replicating R's
qr()/solve.qr()/chol2inv() route through lm().
"""

from typing import Any
import logging
import warnings

import numpy as np

from pylm.core.result import Result
from pylm.core.compute.timing import Timer
from pylm.core.compute.tolerances import DEFAULT_RANK_TOL, CONDITION_WARNING_THRESHOLD
from pylm.core.compute.linalg.qr import (
    qr_cpu,
    qr_solve,
    qr_unscaled_covariance,
    require_full_rank,
)
from pylm.regression.design import Design
from pylm.regression.solution import LinearParams

logger = logging.getLogger(__name__)


def _readonly(arr: np.ndarray) -> np.ndarray:
    arr.flags.writeable = False
    return arr


def _has_intercept(X: np.ndarray) -> bool:
    """True if some column is a non-zero constant."""
    constant = np.all(X == X[0], axis=0) & (X[0] != 0)
    return bool(np.any(constant))


class CPUQRBackend:
    """
    CPU backend using a rank-revealing QR decomposition.

    Implements the Backend protocol for Design -> LinearParams.

    Args:
        tol: Relative rank tolerance. A design whose pivoted R factor has
             |R_kk| <= tol * |R_00| for some k is rejected with
             RankDeficiencyError.
    """

    def __init__(self, tol: float = DEFAULT_RANK_TOL):
        if not tol >= 0:
            raise ValueError(f"tol must be non-negative, got {tol!r}")
        self._tol = float(tol)

    @property
    def name(self) -> str:
        return 'cpu_qr'

    @property
    def tol(self) -> float:
        return self._tol

    def solve(self, design: Design) -> Result[LinearParams]:
        """
        Solve OLS via QR decomposition.

        Algorithm:
            1. Pivoted QR: X P = QR; reject if numerically rank-deficient
            2. Solve R b = Q'y by back substitution, β = P b
            3. Fitted values Xβ, residuals y - Xβ
            4. df = n - p, σ̂² = RSS / df
            5. (X'X)⁻¹ = P R⁻¹R⁻ᵀ Pᵀ, covariance = σ̂² (X'X)⁻¹

        Args:
            design: Validated regression design (n > p)

        Returns:
            Result containing LinearParams

        Raises:
            RankDeficiencyError: If X is (near-)rank-deficient
        """
        timer = Timer()
        timer.start()

        X = design.X
        y = design.y
        n, p = design.n, design.p
        warnings_list: list[str] = []

        logger.debug("Fitting OLS: n=%d, p=%d, tol=%g", n, p, self._tol)

        # === QR Decomposition ===
        with timer.section('qr_decomposition'):
            qr_result = qr_cpu(X, tol=self._tol)
            require_full_rank(qr_result)

        condition = qr_result.condition_estimate()
        if condition > CONDITION_WARNING_THRESHOLD:
            msg = (
                f"design matrix is ill-conditioned (condition estimate {condition:.3g}); "
                f"standard errors may be inaccurate"
            )
            warnings_list.append(msg)
            warnings.warn(msg, RuntimeWarning, stacklevel=3)

        # === Solve ===
        with timer.section('solve'):
            coefficients = qr_solve(qr_result, y)

        # === Residuals and Fitted Values ===
        with timer.section('residuals'):
            fitted_values = X @ coefficients
            residuals = y - fitted_values

        # === Variance and Covariance ===
        with timer.section('covariance'):
            df_residual = n - p
            rss = float(residuals @ residuals)
            sigma_sq = rss / df_residual
            covariance = sigma_sq * qr_unscaled_covariance(qr_result)

        has_intercept = _has_intercept(X)
        if has_intercept:
            tss = float(np.sum((y - np.mean(y)) ** 2))
        else:
            tss = float(y @ y)

        timer.stop()

        logger.debug(
            "OLS fit complete: rank=%d, df=%d, sigma=%g, condition=%g",
            qr_result.rank, df_residual, np.sqrt(sigma_sq), condition,
        )

        params = LinearParams(
            coefficients=_readonly(coefficients),
            covariance=_readonly(covariance),
            residuals=_readonly(residuals),
            fitted_values=_readonly(fitted_values),
            sigma=float(np.sqrt(sigma_sq)),
            rss=rss,
            tss=tss,
            rank=qr_result.rank,
            df_residual=df_residual,
            has_intercept=has_intercept,
        )

        info: dict[str, Any] = {
            'method': 'qr',
            'rank': qr_result.rank,
            'pivot': tuple(int(j) for j in qr_result.pivot),
            'tol': self._tol,
            'condition_number': condition,
        }

        return Result(
            params=params,
            info=info,
            timing=timer.result(),
            backend_name=self.name,
            warnings=tuple(warnings_list),
        )
