"""
Ordinary least squares linear models.

Public API:
    fit(X, y, ...) -> FitResult
    summarize(FitResult) -> InferenceResult

fit() is the estimation entry point. It handles:
    - Input validation and design construction (matrix or formula)
    - Backend selection
    - Result wrapping

Example:
    >>> from pylm.regression import fit, summarize
    >>> result = fit('mpg ~ disp', data=mtcars)
    >>> result.coefficients
    >>> summarize(result).to_frame()
"""

from pylm.regression.design import Design, Formula, parse_formula
from pylm.regression.solution import FitResult, LinearParams
from pylm.regression.solvers import fit
from pylm.regression.inference import InferenceResult, summarize

__all__ = [
    "fit",
    "summarize",
    "Design",
    "Formula",
    "parse_formula",
    "FitResult",
    "LinearParams",
    "InferenceResult",
]
