"""
Linear algebra kernels for pylm.

Conventions:
    - CPU functions use NumPy/SciPy (LAPACK under the hood)
    - Each decomposition returns a structured result dataclass
    - Errors are raised immediately with clear messages
"""

from pylm.core.compute.linalg.qr import (
    QRResult,
    qr_cpu,
    qr_solve,
    qr_unscaled_covariance,
    require_full_rank,
)

__all__ = [
    "QRResult",
    "qr_cpu",
    "qr_solve",
    "qr_unscaled_covariance",
    "require_full_rank",
]
