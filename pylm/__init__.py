"""
pylm: ordinary least squares with R-compatible numerics.

Fits linear models through a rank-revealing QR decomposition and
reports coefficient inference (standard errors, t-statistics,
p-values) the way R's lm()/summary.lm() do.

Submodules:
    regression: fit() and summarize()
    core: exceptions, validation, data sources, numeric kernels
"""

import logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

from pylm.core.datasource import DataSource
from pylm import regression
from pylm.regression import fit, summarize

__all__ = [
    "__version__",
    "DataSource",
    "regression",
    "fit",
    "summarize",
]
