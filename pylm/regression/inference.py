"""
Coefficient inference for a fitted linear model.

summarize() turns a FitResult into the classic coefficient table:
estimate, standard error, t value and two-sided p-value, using the
Student-t distribution with the fit's residual degrees of freedom.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
import logging

import numpy as np
import pandas as pd
from numpy.typing import NDArray
from scipy import stats as sp_stats

from pylm.core.exceptions import DegenerateStandardError, ValidationError
from pylm.regression.solution import FitResult

logger = logging.getLogger(__name__)

COLUMNS = ('Estimate', 'Std. Error', 't value', 'Pr(>|t|)')


def _readonly(arr: NDArray[np.floating[Any]]) -> NDArray[np.floating[Any]]:
    arr.flags.writeable = False
    return arr


@dataclass(frozen=True, eq=False)
class InferenceResult:
    """
    Per-parameter inference table.

    Rows follow the coefficient order of the originating FitResult.

    Attributes:
        names: Parameter labels
        estimate: β̂
        standard_error: sqrt(diag(Cov(β̂)))
        t_statistic: estimate / standard_error
        p_value: Two-sided Student-t tail probability
        degrees_of_freedom: Residual degrees of freedom of the fit
        call: Description of the originating fit call (informational)
    """
    names: tuple[str, ...]
    estimate: NDArray[np.floating[Any]]
    standard_error: NDArray[np.floating[Any]]
    t_statistic: NDArray[np.floating[Any]]
    p_value: NDArray[np.floating[Any]]
    degrees_of_freedom: int
    call: str

    def __len__(self) -> int:
        return len(self.names)

    def to_frame(self) -> pd.DataFrame:
        """Coefficient table as a DataFrame indexed by parameter name."""
        return pd.DataFrame(
            {
                COLUMNS[0]: self.estimate,
                COLUMNS[1]: self.standard_error,
                COLUMNS[2]: self.t_statistic,
                COLUMNS[3]: self.p_value,
            },
            index=list(self.names),
        )

    def conf_int(self, level: float = 0.95) -> pd.DataFrame:
        """
        Student-t confidence intervals for the coefficients.

        Args:
            level: Confidence level in (0, 1)

        Returns:
            DataFrame with 'lower' and 'upper' columns indexed by name
        """
        if not 0.0 < level < 1.0:
            raise ValidationError(f"level must be in (0, 1), got {level!r}")
        t_crit = sp_stats.t.ppf(0.5 + level / 2.0, self.degrees_of_freedom)
        half_width = t_crit * self.standard_error
        return pd.DataFrame(
            {
                'lower': self.estimate - half_width,
                'upper': self.estimate + half_width,
            },
            index=list(self.names),
        )


def summarize(fit: FitResult) -> InferenceResult:
    """
    Standard errors, t-statistics and two-sided p-values for a fit.

    For each parameter i:
        se_i = sqrt(Cov(β̂)_ii)
        t_i  = β̂_i / se_i
        p_i  = 2 · P(T_df > |t_i|)

    The tail probability uses the Student-t survival function, which
    keeps precision for large |t| where 1 - cdf would cancel to zero.

    Args:
        fit: Result of pylm.regression.fit()

    Returns:
        InferenceResult in coefficient order

    Raises:
        DegenerateStandardError: If a standard error is zero or not finite.
            The FitResult itself is unaffected.
    """
    if not isinstance(fit, FitResult):
        raise ValidationError(
            f"summarize() expects a FitResult, got {type(fit).__name__}"
        )

    estimate = fit.coefficients
    with np.errstate(invalid='ignore'):
        standard_error = np.sqrt(np.diag(fit.covariance))

    for i, se in enumerate(standard_error):
        if not np.isfinite(se) or se == 0.0:
            name = fit.names[i]
            raise DegenerateStandardError(
                f"standard error of parameter {i} ({name!r}) is {se!r}; "
                f"t-statistic is undefined",
                index=i,
                name=name,
                value=float(se),
            )

    df = fit.degrees_of_freedom
    t_statistic = estimate / standard_error
    p_value = np.minimum(2.0 * sp_stats.t.sf(np.abs(t_statistic), df), 1.0)

    logger.debug("Summarized %d parameters on %d df", len(estimate), df)

    return InferenceResult(
        names=fit.names,
        estimate=estimate,
        standard_error=_readonly(standard_error),
        t_statistic=_readonly(t_statistic),
        p_value=_readonly(p_value),
        degrees_of_freedom=df,
        call=fit.call,
    )
