"""
Shared numeric infrastructure for pylm.

This is NOT where domain-specific backends live; those go in
{domain}/backends/.

Submodules:
    timing: Execution timing utilities
    tolerances: Rank tolerance default and comparison tiers
    linalg: Linear algebra kernels (pivoted QR)
"""

from pylm.core.compute.timing import Timer, timed
from pylm.core.compute.tolerances import DEFAULT_RANK_TOL, ToleranceTier

__all__ = [
    "Timer",
    "timed",
    "DEFAULT_RANK_TOL",
    "ToleranceTier",
]
