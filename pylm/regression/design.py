"""
Regression Design.

Design is the single place where the different ways of describing a
model (a matrix plus a response vector, named DataSource columns, or a
numeric formula such as ``"mpg ~ disp"``) are resolved into one
validated (X, y) pair with parameter names. The estimator only ever
sees a Design.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence
import re

import numpy as np
import pandas as pd
from numpy.typing import ArrayLike, NDArray

from pylm.core.datasource import DataSource
from pylm.core.exceptions import DimensionError, DimensionMismatchError, ValidationError
from pylm.core.validation import (
    check_array,
    check_finite,
    check_2d,
    check_1d,
    check_consistent_length,
    check_degrees_of_freedom,
)

INTERCEPT_NAME = '(Intercept)'

_TERM_SPLIT = re.compile(r'\s*([+-])\s*')
_UNSUPPORTED_TERM = re.compile(r'[*:^()/|%~]')


@dataclass(frozen=True)
class Formula:
    """A parsed numeric model formula: response ~ terms."""
    response: str
    terms: tuple[str, ...]
    intercept: bool

    @property
    def names(self) -> tuple[str, ...]:
        """Parameter names in design-matrix column order."""
        if self.intercept:
            return (INTERCEPT_NAME,) + self.terms
        return self.terms


def parse_formula(formula: str) -> Formula:
    """
    Parse ``response ~ a + b`` into its parts.

    The intercept is included unless the right-hand side contains
    ``- 1``, ``+ 0`` or a leading ``0``. ``1`` keeps it explicitly and
    ``- term`` drops a term listed earlier. Only bare column names are
    supported: interactions, transformations and factors are not.

    Raises:
        ValidationError: On malformed or unsupported formulas
    """
    if not isinstance(formula, str):
        raise ValidationError(f"formula must be a string, got {type(formula).__name__}")

    parts = formula.split('~')
    if len(parts) != 2:
        raise ValidationError(
            f"formula must contain exactly one '~', got {formula!r}"
        )
    lhs, rhs = parts[0].strip(), parts[1].strip()
    if not lhs:
        raise ValidationError(f"formula has no response: {formula!r}")
    if not rhs:
        raise ValidationError(f"formula has no right-hand side: {formula!r}")

    tokens = _TERM_SPLIT.split(rhs)
    # re.split with a capture group alternates term, sign, term, ...
    signed: list[tuple[str, str]] = []
    if tokens[0]:
        signed.append(('+', tokens[0]))
    elif len(tokens) == 1:
        raise ValidationError(f"formula has no right-hand side: {formula!r}")
    for i in range(1, len(tokens), 2):
        term = tokens[i + 1].strip()
        if not term:
            raise ValidationError(f"dangling '{tokens[i]}' in formula {formula!r}")
        signed.append((tokens[i], term))

    intercept = True
    terms: list[str] = []
    for sign, term in signed:
        if term == '1':
            intercept = sign == '+'
        elif term == '0':
            intercept = sign == '-'
        elif _UNSUPPORTED_TERM.search(term):
            raise ValidationError(
                f"unsupported formula term {term!r}: only numeric column names are allowed"
            )
        elif sign == '+':
            if term not in terms:
                terms.append(term)
        elif term in terms:
            terms.remove(term)

    if not terms and not intercept:
        raise ValidationError(f"formula {formula!r} describes a model with no parameters")

    return Formula(response=lhs, terms=tuple(terms), intercept=intercept)


def _as_datasource(data: Any, needed: Sequence[str]) -> DataSource:
    """Wrap ``data`` as a DataSource holding only the ``needed`` columns."""
    if isinstance(data, DataSource):
        return data
    if isinstance(data, (pd.DataFrame, Mapping)):
        available = [str(c) for c in data.keys()]
        for name in needed:
            if name not in available:
                raise ValidationError(
                    f"unknown column {name!r}; available: {sorted(available)}"
                )
        # Unused columns may be text (e.g. row labels) and are never converted
        if isinstance(data, pd.DataFrame):
            return DataSource.from_dataframe(data[list(needed)])
        return DataSource.from_mapping({name: data[name] for name in needed})
    raise ValidationError(
        f"data must be a DataSource, pandas DataFrame or mapping of columns, "
        f"got {type(data).__name__}"
    )


def _column(source: DataSource, name: str) -> NDArray[np.floating[Any]]:
    if name not in source:
        raise ValidationError(
            f"unknown column {name!r}; available: {sorted(source.keys())}"
        )
    return check_array(source[name], name)


@dataclass(frozen=True, eq=False)
class Design:
    """
    Regression design: validated X, y and parameter names.

    Immutable after construction; X and y are private read-only copies,
    so later changes to the caller's arrays cannot affect a fit.

    Construction:
        Design.from_arrays(X, y)                          # matrix interface
        Design.from_formula('mpg ~ disp', data=df)        # formula interface
        Design.from_datasource(ds, x=['a', 'b'], y='c')   # named columns
    """
    _X: NDArray[np.floating[Any]]
    _y: NDArray[np.floating[Any]]
    _names: tuple[str, ...]
    _response_name: str
    _formula: Formula | None = None

    @classmethod
    def from_arrays(
        cls,
        X: ArrayLike,
        y: ArrayLike,
        *,
        names: Sequence[str] | None = None,
        response_name: str = 'y',
    ) -> Design:
        """Build Design directly from array-likes."""
        X_arr = check_array(X, 'X')
        y_arr = check_array(y, 'y')
        return cls._build(X_arr, y_arr, names=names, response_name=response_name)

    @classmethod
    def from_formula(cls, formula: str, data: Any) -> Design:
        """
        Build Design from a numeric formula evaluated against named columns.

        Args:
            formula: e.g. ``'mpg ~ disp + wt'``
            data: DataSource, pandas DataFrame or mapping of column arrays
        """
        parsed = parse_formula(formula)
        needed = list(dict.fromkeys((parsed.response,) + parsed.terms))
        source = _as_datasource(data, needed)

        y_arr = _column(source, parsed.response)
        columns = [_column(source, term) for term in parsed.terms]
        if parsed.intercept:
            columns.insert(0, np.ones(len(y_arr), dtype=np.float64))
        for name, col in zip(parsed.names, columns):
            if col.ndim != 1:
                raise DimensionError(
                    f"column {name!r}: expected 1D array, got shape {col.shape}"
                )
            if col.shape[0] != y_arr.shape[0]:
                raise DimensionMismatchError(
                    f"Inconsistent lengths: {name!r} has {col.shape[0]} rows, "
                    f"{parsed.response!r} has {y_arr.shape[0]}",
                    n_rows_X=col.shape[0],
                    n_rows_y=y_arr.shape[0],
                )
        X_arr = np.column_stack(columns)

        return cls._build(
            X_arr, y_arr,
            names=parsed.names,
            response_name=parsed.response,
            formula=parsed,
        )

    @classmethod
    def from_datasource(
        cls,
        source: DataSource,
        *,
        x: str | list[str] | None = None,
        y: str | None = None,
        add_intercept: bool = False,
    ) -> Design:
        """
        Build Design from DataSource columns.

        Args:
            source: The DataSource
            x: Predictor column(s). If None and source has 'X', uses that.
               If None and y is specified, uses all columns except y.
            y: Response column. If None, uses 'y' from source.
            add_intercept: Prepend a column of ones named '(Intercept)'
        """
        y_name = y if y is not None else 'y'
        y_arr = _column(source, y_name)

        if x is None and 'X' in source:
            X_arr = check_array(source['X'], 'X')
            if X_arr.ndim == 1:
                X_arr = X_arr.reshape(-1, 1)
            names = [f'x{i}' for i in range(X_arr.shape[1])] if X_arr.ndim == 2 else None
        else:
            if x is None:
                x_cols = sorted(k for k in source.keys() if k != y_name)
                if not x_cols:
                    raise ValidationError("No predictor columns available")
            elif isinstance(x, str):
                x_cols = [x]
            else:
                x_cols = list(x)
            X_arr = np.column_stack([_column(source, c) for c in x_cols])
            names = x_cols

        if add_intercept:
            X_arr = np.column_stack([np.ones(X_arr.shape[0]), X_arr])
            if names is not None:
                names = [INTERCEPT_NAME] + list(names)

        return cls._build(X_arr, y_arr, names=names, response_name=y_name)

    @classmethod
    def _build(
        cls,
        X: NDArray,
        y: NDArray,
        *,
        names: Sequence[str] | None,
        response_name: str,
        formula: Formula | None = None,
    ) -> Design:
        """Internal builder with validation."""
        if X.ndim == 1:
            X = X.reshape(-1, 1)
        if y.ndim == 2 and y.shape[1] == 1:
            y = y.ravel()

        check_2d(X, 'X')
        check_1d(y, 'y')
        check_consistent_length(X, y, names=('X', 'y'))

        n, p = X.shape
        if p == 0:
            raise DimensionError("X: design matrix has no columns")

        check_finite(X, 'X')
        check_finite(y, 'y')
        check_degrees_of_freedom(X, 'X')

        if names is None:
            names = tuple(f'x{i}' for i in range(p))
        else:
            names = tuple(str(nm) for nm in names)
            if len(names) != p:
                raise DimensionError(
                    f"names: got {len(names)} names for {p} design columns"
                )

        X = np.array(X, dtype=np.float64, copy=True)
        y = np.array(y, dtype=np.float64, copy=True)
        X.flags.writeable = False
        y.flags.writeable = False

        return cls(
            _X=X,
            _y=y,
            _names=names,
            _response_name=str(response_name),
            _formula=formula,
        )

    # === Properties ===

    @property
    def X(self) -> NDArray[np.floating[Any]]:
        """Design matrix (n x p), read-only."""
        return self._X

    @property
    def y(self) -> NDArray[np.floating[Any]]:
        """Response vector (n,), read-only."""
        return self._y

    @property
    def n(self) -> int:
        """Number of observations."""
        return self._X.shape[0]

    @property
    def p(self) -> int:
        """Number of parameters (design columns)."""
        return self._X.shape[1]

    @property
    def names(self) -> tuple[str, ...]:
        """Parameter names, one per design column."""
        return self._names

    @property
    def response_name(self) -> str:
        return self._response_name

    @property
    def formula(self) -> Formula | None:
        """Parsed formula, if the design was built from one."""
        return self._formula

    def describe(self) -> str:
        """Short description of how the design was specified."""
        if self._formula is not None:
            rhs = ' + '.join(self._formula.terms) or '1'
            if not self._formula.intercept:
                rhs += ' - 1'
            return f"{self._formula.response} ~ {rhs}"
        return f"X[{self.n}x{self.p}], {self._response_name}[{self.n}]"

    def __repr__(self) -> str:
        return f"Design({self.describe()})"
