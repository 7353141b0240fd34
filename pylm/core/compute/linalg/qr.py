"""
QR decomposition kernels for least squares.

All routines work from a single column-pivoted Householder QR
factorization (LAPACK geqp3 via SciPy):

    X[:, pivot] = Q R

with Q (n x p) having orthonormal columns and R (p x p) upper triangular
with non-increasing |diag(R)|. Everything the estimator needs (the
solution, the numerical rank and the unscaled covariance (X'X)^-1) is
derived from Q and R. X'X is never formed: doing so squares the
condition number of X.
"""

from dataclasses import dataclass
from typing import Any
import logging

import numpy as np
from numpy.typing import NDArray
from scipy.linalg import qr, solve_triangular

from pylm.core.compute.tolerances import DEFAULT_RANK_TOL
from pylm.core.exceptions import RankDeficiencyError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class QRResult:
    """
    Result of a column-pivoted QR decomposition.

    Attributes:
        Q: Orthonormal columns (n x k, k = min(n, p))
        R: Upper triangular factor (k x p)
        pivot: Column permutation, X[:, pivot] = Q @ R
        rank: Numerical rank determined from the R diagonal
        tol: Relative tolerance used for the rank decision
    """
    Q: NDArray[np.floating[Any]]
    R: NDArray[np.floating[Any]]
    pivot: NDArray[np.intp]
    rank: int
    tol: float

    @property
    def n_columns(self) -> int:
        return self.R.shape[1]

    @property
    def is_full_rank(self) -> bool:
        return self.rank == self.n_columns

    @property
    def aliased(self) -> tuple[int, ...]:
        """Original indices of the columns beyond the numerical rank."""
        return tuple(sorted(int(j) for j in self.pivot[self.rank:]))

    def condition_estimate(self) -> float:
        """
        Cheap condition number estimate |R_00| / |R_kk| over the leading
        rank x rank block. Returns inf for a rank-0 matrix.
        """
        if self.rank == 0:
            return float('inf')
        diag_R = np.abs(np.diag(self.R))
        return float(diag_R[0] / diag_R[self.rank - 1])


def _numerical_rank(R: NDArray[np.floating[Any]], tol: float) -> int:
    """Count diagonal entries of R above tol relative to the largest."""
    diag_R = np.abs(np.diag(R))
    if len(diag_R) == 0 or diag_R[0] == 0:
        return 0
    return int(np.sum(diag_R > tol * diag_R[0]))


def qr_cpu(
    X: NDArray[np.floating[Any]],
    tol: float = DEFAULT_RANK_TOL,
) -> QRResult:
    """
    Rank-revealing QR decomposition using LAPACK (via SciPy).

    Args:
        X: Matrix to decompose (n x p)
        tol: Relative rank tolerance; column k (in pivot order) counts
             toward the rank when |R_kk| > tol * |R_00|

    Returns:
        QRResult with economy-size Q and R, pivot and numerical rank
    """
    if not tol >= 0:
        raise ValueError(f"tol must be non-negative, got {tol!r}")

    Q, R, pivot = qr(X, mode='economic', pivoting=True)
    rank = _numerical_rank(R, tol)

    logger.debug("QR of %s matrix: rank=%d, tol=%g", X.shape, rank, tol)

    return QRResult(Q=Q, R=R, pivot=pivot, rank=rank, tol=tol)


def require_full_rank(qr_result: QRResult) -> None:
    """
    Raise RankDeficiencyError unless the decomposition has full column rank.
    """
    if qr_result.is_full_rank:
        return

    p = qr_result.n_columns
    aliased = qr_result.aliased
    raise RankDeficiencyError(
        f"Design matrix is rank-deficient: rank={qr_result.rank}, expected={p}. "
        f"Columns {list(aliased)} are (near-)linear combinations of the others "
        f"(relative tolerance {qr_result.tol:g}); drop them and refit.",
        rank=qr_result.rank,
        expected_rank=p,
        aliased=aliased,
        tolerance=qr_result.tol,
        condition_number=qr_result.condition_estimate(),
    )


def qr_solve(
    qr_result: QRResult,
    y: NDArray[np.floating[Any]],
) -> NDArray[np.floating[Any]]:
    """
    Least squares solution from a full-rank QR decomposition.

    Solves R b = Q'y by back substitution and undoes the column pivoting,
    so the returned coefficients are in the original column order.

    Args:
        qr_result: Decomposition of X (must be full rank)
        y: Response vector (n,)

    Returns:
        Coefficient vector β (p,)
    """
    require_full_rank(qr_result)

    p = qr_result.n_columns
    Qty = qr_result.Q.T @ y
    beta_pivoted = solve_triangular(qr_result.R[:p, :p], Qty[:p], lower=False)

    beta = np.empty(p, dtype=np.float64)
    beta[qr_result.pivot] = beta_pivoted
    return beta


def qr_unscaled_covariance(qr_result: QRResult) -> NDArray[np.floating[Any]]:
    """
    (X'X)^-1 from the triangular factor.

    With X P = Q R, X'X = P R'R P', so (X'X)^-1 = P R^-1 R^-T P'.
    R^-1 comes from a triangular solve against the identity; the result
    is explicitly symmetrized to remove rounding asymmetry.

    Args:
        qr_result: Decomposition of X (must be full rank)

    Returns:
        Symmetric (p x p) matrix in the original column order
    """
    require_full_rank(qr_result)

    p = qr_result.n_columns
    R_inv = solve_triangular(qr_result.R[:p, :p], np.eye(p), lower=False)
    pivoted = R_inv @ R_inv.T

    unscaled = np.empty((p, p), dtype=np.float64)
    unscaled[np.ix_(qr_result.pivot, qr_result.pivot)] = pivoted
    return (unscaled + unscaled.T) / 2.0
