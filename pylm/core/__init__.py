"""
Core infrastructure for pylm.

Shared abstractions used by the regression module.

Key components:
    protocols: Backend protocol
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
    datasource: Named-column data container
    compute: Timing, tolerances, linear algebra kernels
"""

from pylm.core.protocols import Backend
from pylm.core.result import Result
from pylm.core.datasource import DataSource
from pylm.core.exceptions import (
    PyLMError,
    ValidationError,
    DimensionError,
    DimensionMismatchError,
    InsufficientDegreesOfFreedomError,
    NumericalError,
    SingularMatrixError,
    RankDeficiencyError,
    DegenerateStandardError,
)

__all__ = [
    # Protocols
    "Backend",
    # Result
    "Result",
    # Data
    "DataSource",
    # Exceptions
    "PyLMError",
    "ValidationError",
    "DimensionError",
    "DimensionMismatchError",
    "InsufficientDegreesOfFreedomError",
    "NumericalError",
    "SingularMatrixError",
    "RankDeficiencyError",
    "DegenerateStandardError",
]
