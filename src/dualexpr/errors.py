"""
###################################
Exceptions (:mod:`dualexpr.errors`)
###################################

.. currentmodule:: dualexpr.errors

.. autosummary::
    :toctree: generated/

    DimensionMismatch
    DomainError
    IndexOutOfRange

"""


class IndexOutOfRange(IndexError):
    """Error raised when a derivative index lies outside ``[0, dimension)``."""

    def __init__(self, index: int, dimension: int | None):
        self.index = index
        self.dimension = dimension

        if dimension is None:
            super().__init__(f"derivative index {index} is negative")
        else:
            super().__init__(
                f"derivative index {index} is out of range for dimension {dimension}"
            )


class DimensionMismatch(ValueError):
    """Error raised when operands with derivative vectors of different lengths are
    combined."""

    def __init__(self, lhs: int | None, rhs: int | None):
        self.lhs = lhs
        self.rhs = rhs
        super().__init__(f"dimension mismatch: {lhs} != {rhs}")


class DomainError(ValueError):
    """Error raised in strict mode when a function is evaluated outside its domain.

    See Also
    --------
    dualexpr.context.Context
    """
