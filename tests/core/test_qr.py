"""
Tests for the pivoted QR kernels.

Each kernel is checked against an independent reference (normal
equations / explicit inverse on well-conditioned matrices), never
against another QR-based path.
"""

import numpy as np
import pytest

from pylm.core.compute.linalg.qr import (
    qr_cpu,
    qr_solve,
    qr_unscaled_covariance,
    require_full_rank,
)
from pylm.core.compute.tolerances import CPU_FP64, DEFAULT_RANK_TOL
from pylm.core.exceptions import RankDeficiencyError


@pytest.fixture
def well_conditioned(rng):
    n = 50
    X = np.column_stack([np.ones(n), rng.standard_normal((n, 3))])
    y = rng.standard_normal(n)
    return X, y


class TestQRDecomposition:

    def test_reconstructs_pivoted_matrix(self, well_conditioned):
        X, _ = well_conditioned
        qr_result = qr_cpu(X)
        np.testing.assert_allclose(
            qr_result.Q @ qr_result.R, X[:, qr_result.pivot], atol=1e-12
        )

    def test_economy_shapes(self, well_conditioned):
        X, _ = well_conditioned
        qr_result = qr_cpu(X)
        assert qr_result.Q.shape == (50, 4)
        assert qr_result.R.shape == (4, 4)

    def test_q_has_orthonormal_columns(self, well_conditioned):
        X, _ = well_conditioned
        Q = qr_cpu(X).Q
        np.testing.assert_allclose(Q.T @ Q, np.eye(4), atol=1e-12)

    def test_r_diagonal_non_increasing(self, well_conditioned):
        X, _ = well_conditioned
        diag_R = np.abs(np.diag(qr_cpu(X).R))
        assert np.all(np.diff(diag_R) <= 1e-12 * diag_R[0])

    def test_full_rank(self, well_conditioned):
        X, _ = well_conditioned
        qr_result = qr_cpu(X)
        assert qr_result.rank == 4
        assert qr_result.is_full_rank
        assert qr_result.aliased == ()
        assert qr_result.tol == DEFAULT_RANK_TOL

    def test_duplicate_column_detected(self, well_conditioned):
        X, _ = well_conditioned
        X_dup = np.column_stack([X, X[:, 1]])
        qr_result = qr_cpu(X_dup)
        assert qr_result.rank == 4
        assert not qr_result.is_full_rank
        assert len(qr_result.aliased) == 1
        assert qr_result.aliased[0] in (1, 4)

    def test_zero_matrix_rank_zero(self):
        qr_result = qr_cpu(np.zeros((5, 2)))
        assert qr_result.rank == 0
        assert qr_result.condition_estimate() == float('inf')

    def test_negative_tol_rejected(self, well_conditioned):
        X, _ = well_conditioned
        with pytest.raises(ValueError, match="non-negative"):
            qr_cpu(X, tol=-1.0)

    def test_condition_estimate_of_orthonormal_is_one(self, rng):
        Q, _ = np.linalg.qr(rng.standard_normal((20, 3)))
        assert qr_cpu(Q).condition_estimate() == pytest.approx(1.0)


class TestRequireFullRank:

    def test_passes_on_full_rank(self, well_conditioned):
        X, _ = well_conditioned
        require_full_rank(qr_cpu(X))

    def test_raises_with_diagnostics(self, well_conditioned):
        X, _ = well_conditioned
        X_dup = np.column_stack([X, 2.0 * X[:, 2]])
        with pytest.raises(RankDeficiencyError, match="rank-deficient") as exc_info:
            require_full_rank(qr_cpu(X_dup))
        err = exc_info.value
        assert err.rank == 4
        assert err.expected_rank == 5
        assert err.tolerance == DEFAULT_RANK_TOL
        assert err.aliased[0] in (2, 4)


class TestQRSolve:

    def test_matches_normal_equations(self, well_conditioned):
        X, y = well_conditioned
        beta = qr_solve(qr_cpu(X), y)
        reference = np.linalg.solve(X.T @ X, X.T @ y)
        np.testing.assert_allclose(beta, reference, rtol=CPU_FP64.rtol, atol=CPU_FP64.atol)

    def test_coefficients_in_original_column_order(self, rng):
        n = 40
        # Column scales chosen so pivoting reorders the columns
        X = np.column_stack([
            0.01 * rng.standard_normal(n),
            np.ones(n),
            100.0 * rng.standard_normal(n),
        ])
        beta_true = np.array([3.0, -1.0, 0.25])
        y = X @ beta_true
        qr_result = qr_cpu(X)
        assert list(qr_result.pivot) != [0, 1, 2]
        np.testing.assert_allclose(qr_solve(qr_result, y), beta_true, rtol=1e-10)

    def test_rank_deficient_rejected(self, well_conditioned):
        X, y = well_conditioned
        X_dup = np.column_stack([X, X[:, 3]])
        with pytest.raises(RankDeficiencyError):
            qr_solve(qr_cpu(X_dup), y)


class TestUnscaledCovariance:

    def test_matches_explicit_inverse(self, well_conditioned):
        X, _ = well_conditioned
        unscaled = qr_unscaled_covariance(qr_cpu(X))
        reference = np.linalg.inv(X.T @ X)
        np.testing.assert_allclose(unscaled, reference, rtol=1e-9, atol=1e-12)

    def test_symmetric(self, well_conditioned):
        X, _ = well_conditioned
        unscaled = qr_unscaled_covariance(qr_cpu(X))
        np.testing.assert_array_equal(unscaled, unscaled.T)

    def test_positive_diagonal(self, well_conditioned):
        X, _ = well_conditioned
        assert np.all(np.diag(qr_unscaled_covariance(qr_cpu(X))) > 0)

    def test_pivoted_order_restored(self, rng):
        n = 40
        X = np.column_stack([
            0.01 * rng.standard_normal(n),
            np.ones(n),
            100.0 * rng.standard_normal(n),
        ])
        unscaled = qr_unscaled_covariance(qr_cpu(X))
        reference = np.linalg.inv(X.T @ X)
        np.testing.assert_allclose(unscaled, reference, rtol=1e-8)
