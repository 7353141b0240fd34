"""
Exception hierarchy for pylm.

All exceptions inherit from PyLMError to allow catching any
library-specific error. The four failure kinds of a least-squares fit
(dimension mismatch, insufficient degrees of freedom, rank deficiency,
degenerate standard error) are concrete subclasses of the generic
validation / numerical bases.

Each exception stores the numbers behind its message (row counts,
rank, offending parameter) as attributes so callers can react to them
programmatically.
"""


class PyLMError(Exception):
    """Base exception for all pylm errors."""
    pass


class ValidationError(PyLMError):
    """
    Inputs rejected at the Design boundary, before any computation.
    """
    pass


class DimensionError(ValidationError):
    """
    An array has the wrong number of dimensions or columns.
    """
    pass


class DimensionMismatchError(DimensionError):
    """
    Design matrix and response vector disagree on the number of rows.

    Attributes:
        n_rows_X: Rows in the design matrix
        n_rows_y: Length of the response vector
    """

    def __init__(self, message: str, n_rows_X: int | None = None, n_rows_y: int | None = None):
        super().__init__(message)
        self.n_rows_X = n_rows_X
        self.n_rows_y = n_rows_y


class InsufficientDegreesOfFreedomError(ValidationError):
    """
    Residual degrees of freedom n - p would be zero or negative.

    The regression is exactly determined or underdetermined, so the
    residual variance (and everything derived from it) is undefined.

    Attributes:
        n_observations: Number of rows n
        n_parameters: Number of columns p
    """

    def __init__(self, message: str, n_observations: int, n_parameters: int):
        super().__init__(message)
        self.n_observations = n_observations
        self.n_parameters = n_parameters

    @property
    def degrees_of_freedom(self) -> int:
        return self.n_observations - self.n_parameters


class NumericalError(PyLMError):
    """
    The inputs were valid but the least-squares problem cannot be solved
    (or summarized) reliably in floating point.
    """
    pass


class SingularMatrixError(NumericalError):
    """
    A matrix that has to be inverted (or triangularly solved) is not
    numerically invertible.

    Attributes:
        matrix_name: Which matrix, e.g. 'X'
        condition_number: Condition estimate when one was computed
        rank: Numerical rank found
        expected_rank: Rank a full-rank matrix would have
    """

    def __init__(
        self,
        message: str,
        matrix_name: str | None = None,
        condition_number: float | None = None,
        rank: int | None = None,
        expected_rank: int | None = None
    ):
        super().__init__(message)
        self.matrix_name = matrix_name
        self.condition_number = condition_number
        self.rank = rank
        self.expected_rank = expected_rank


class RankDeficiencyError(SingularMatrixError):
    """
    The design matrix has (near-)linearly dependent columns.

    Detected from the pivoted QR factor: a diagonal entry of R that is
    small relative to the largest one.

    Attributes:
        aliased: Original column indices judged linearly dependent
        tolerance: Relative tolerance that was applied
    """

    def __init__(
        self,
        message: str,
        rank: int,
        expected_rank: int,
        aliased: tuple[int, ...] = (),
        tolerance: float | None = None,
        condition_number: float | None = None,
    ):
        super().__init__(
            message,
            matrix_name='X',
            condition_number=condition_number,
            rank=rank,
            expected_rank=expected_rank,
        )
        self.aliased = aliased
        self.tolerance = tolerance


class DegenerateStandardError(NumericalError):
    """
    A parameter's standard error is zero or not finite.

    Raised by summarize(); the fit it was computed from stays valid.

    Attributes:
        index: Position of the offending parameter
        name: Label of the offending parameter
        value: The standard error that was rejected
    """

    def __init__(
        self,
        message: str,
        index: int,
        name: str | None = None,
        value: float | None = None,
    ):
        super().__init__(message)
        self.index = index
        self.name = name
        self.value = value
