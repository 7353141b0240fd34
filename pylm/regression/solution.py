"""
Regression solution types.

Contains the parameter payload produced by backends and the
user-facing FitResult wrapper.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, TYPE_CHECKING
import numpy as np
import pandas as pd
from numpy.typing import NDArray

from pylm.core.result import Result

if TYPE_CHECKING:
    from pylm.regression.inference import InferenceResult


@dataclass(frozen=True, eq=False)
class LinearParams:
    """
    Parameter payload for linear regression.

    This is the immutable data computed by backends. Arrays are
    read-only.
    """
    coefficients: NDArray[np.floating[Any]]
    covariance: NDArray[np.floating[Any]]
    residuals: NDArray[np.floating[Any]]
    fitted_values: NDArray[np.floating[Any]]
    sigma: float
    rss: float
    tss: float
    rank: int
    df_residual: int
    has_intercept: bool


@dataclass(frozen=True, eq=False)
class FitResult:
    """
    Result of an OLS fit.

    Wraps the backend Result and exposes the fitted quantities under
    their statistical names. Created once by fit() and never mutated.

    Attributes exposed as properties:
        coefficients: β̂ (p,)
        covariance: Cov(β̂) = σ̂² (X'X)⁻¹ (p x p)
        residual_std_dev: σ̂
        degrees_of_freedom: n - p
        fitted_values: Xβ̂ (n,)
        residuals: y - Xβ̂ (n,)
        names: parameter labels, in design column order
        call: description of the originating call (informational)
    """
    _result: Result[LinearParams]
    _names: tuple[str, ...]
    _n_observations: int
    _call: str

    # === Core quantities ===

    @property
    def coefficients(self) -> NDArray[np.floating[Any]]:
        return self._result.params.coefficients

    @property
    def covariance(self) -> NDArray[np.floating[Any]]:
        return self._result.params.covariance

    @property
    def residual_std_dev(self) -> float:
        return self._result.params.sigma

    @property
    def degrees_of_freedom(self) -> int:
        return self._result.params.df_residual

    @property
    def fitted_values(self) -> NDArray[np.floating[Any]]:
        return self._result.params.fitted_values

    @property
    def residuals(self) -> NDArray[np.floating[Any]]:
        return self._result.params.residuals

    @property
    def names(self) -> tuple[str, ...]:
        return self._names

    @property
    def call(self) -> str:
        return self._call

    @property
    def n_observations(self) -> int:
        return self._n_observations

    @property
    def n_parameters(self) -> int:
        return len(self._names)

    @property
    def rank(self) -> int:
        return self._result.params.rank

    # === Labelled views ===

    @property
    def coef(self) -> pd.Series:
        """Coefficients as a Series indexed by parameter name."""
        return pd.Series(self.coefficients, index=list(self._names), name='Estimate')

    @property
    def vcov(self) -> pd.DataFrame:
        """Covariance matrix with rows and columns labelled by parameter name."""
        labels = list(self._names)
        return pd.DataFrame(self.covariance, index=labels, columns=labels)

    # === Fit quality ===

    @property
    def rss(self) -> float:
        return self._result.params.rss

    @property
    def tss(self) -> float:
        """Total sum of squares; centered when the design has an intercept."""
        return self._result.params.tss

    @property
    def r_squared(self) -> float:
        if self.tss == 0:
            return 1.0 if self.rss == 0 else 0.0
        return 1.0 - (self.rss / self.tss)

    @property
    def adjusted_r_squared(self) -> float:
        n = self._n_observations
        df = self.degrees_of_freedom
        if self.tss == 0:
            return self.r_squared
        df_total = n - 1 if self._result.params.has_intercept else n
        return 1.0 - (1.0 - self.r_squared) * df_total / df

    # === Envelope metadata ===

    @property
    def info(self) -> dict[str, Any]:
        return dict(self._result.info)

    @property
    def timing(self) -> dict[str, float] | None:
        timing = self._result.timing
        return None if timing is None else dict(timing)

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    @property
    def provenance(self) -> dict[str, str]:
        return dict(self._result.provenance)

    def summarize(self) -> 'InferenceResult':
        """Standard errors, t-statistics and p-values for this fit."""
        from pylm.regression.inference import summarize
        return summarize(self)

    def __repr__(self) -> str:
        return (
            f"FitResult(call={self._call!r}, n={self._n_observations}, "
            f"p={self.n_parameters}, df={self.degrees_of_freedom}, "
            f"sigma={self.residual_std_dev:.4g})"
        )
