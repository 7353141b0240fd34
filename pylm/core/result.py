"""
Generic result container for pylm computations.

The Result class provides a standardized envelope around the numeric
payload a backend produces. It carries timing, diagnostics and
provenance next to the parameters so that a fit can be audited and
reproduced.

The payload type P is a backend-specific frozen dataclass (LinearParams
for regression); info holds the method-level diagnostics such as rank,
pivot order and condition estimate. timing may be None for results
built by hand in tests.
"""

from dataclasses import dataclass, field
from typing import TypeVar, Generic, Any

P = TypeVar('P')  # Parameter payload type


def _default_provenance() -> dict[str, str]:
    """Library versions that produced a result."""
    import numpy as np
    import scipy

    from pylm import __version__

    return {
        'pylm_version': __version__,
        'numpy_version': np.__version__,
        'scipy_version': scipy.__version__,
    }


@dataclass(frozen=True)
class Result(Generic[P]):
    """
    What a backend returns: the payload plus how it was obtained.

    Type Parameters:
        P: The domain-specific parameter payload type

    Attributes:
        params: Domain-specific parameters (coefficients, covariance, etc.)
        info: Structured metadata (method, rank, pivot, diagnostics)
        timing: Execution timing breakdown, or None if not measured
        backend_name: Identifier of the backend that produced this result
        warnings: Non-fatal issues encountered during computation
        provenance: Library versions used for the computation

    Examples:
        >>> Result(
        ...     params=LinearParams(...),
        ...     info={'method': 'qr', 'rank': 2},
        ...     timing={'total_seconds': 0.01},
        ...     backend_name='cpu_qr'
        ... )
    """
    params: P
    info: dict[str, Any]
    timing: dict[str, float] | None
    backend_name: str
    warnings: tuple[str, ...] = field(default_factory=tuple)
    provenance: dict[str, str] = field(default_factory=_default_provenance)

    def has_warning(self, substring: str) -> bool:
        """Check if any warning contains the given substring."""
        return any(substring in w for w in self.warnings)
