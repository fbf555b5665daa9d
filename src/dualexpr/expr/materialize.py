import logging
import math

import numpy as np
import numpy.typing as npt

from dualexpr.autodiff.dual import Dual
from dualexpr.context import getcontext
from dualexpr.errors import DimensionMismatch
from dualexpr.expr.nodes import Node, _evaluation_pass, _operand, size
from dualexpr.logger import dualexpr_logger
from dualexpr.typing import Scalar


def _resolve(node: Node, n: int | None) -> int:
    if n is None:
        if node.dimension is None:
            raise ValueError("dimension of an expression without leaves must be given")

        return node.dimension

    if n < 1:
        raise ValueError("dimension must be positive")

    if node.dimension is not None and node.dimension != n:
        raise DimensionMismatch(node.dimension, n)

    return n


def _run(
    expr: Node | Dual | Scalar, n: int | None, memoize: bool | None, withvalue: bool
) -> tuple[float | None, npt.NDArray[np.float64]]:
    node = _operand(expr)
    n = _resolve(node, n)

    if memoize is None:
        memoize = getcontext().memoize

    if dualexpr_logger.isEnabledFor(logging.DEBUG):
        dualexpr_logger.debug(
            "materializing %d nodes, dimension %d, memoize=%s", size(node), n, memoize
        )

    grad = np.empty(n)

    with _evaluation_pass(memoize):
        value = node.value() if withvalue else None

        for i in range(n):
            grad[i] = node._derivative(i)

    if not (np.isfinite(grad).all() and (value is None or math.isfinite(value))):
        dualexpr_logger.warning(
            "materialized result is not finite: value=%r, gradient=%r",
            value,
            grad.tolist(),
        )

    return value, grad


def materialize(
    expr: Node | Dual | Scalar, n: int | None = None, *, memoize: bool | None = None
) -> Dual:
    """Evaluate an expression into a new dual number.

    The value is evaluated once and every component of the derivative vector once.
    This is the only point at which the derivative vector of a lazy expression is
    stored.

    Parameters
    ----------
    expr : Node | Dual | float
        Expression to evaluate. A dual number is copied, a real number becomes a
        constant.
    n : int, optional
        Dimension of the result. Required if `expr` contains no leaf; otherwise it
        must agree with ``expr.dimension``.
    memoize : bool, optional
        Cache node values for the duration of this pass. If not specified, the setting
        of the current context is used.

    Raises
    ------
    DimensionMismatch
        If `n` disagrees with the dimension of `expr`.

    Examples
    --------
    >>> from dualexpr import Dual, lazy
    >>> a, _, c = Dual.variable(1.0, 2.0, 3.0)
    >>> materialize(lazy(a) / c)
    Dual(value=0.3333333333333333, gradient=[0.3333333333333333, 0.0, -0.1111111111111111])
    """
    value, grad = _run(expr, n, memoize, True)
    return Dual._fromparts(value, grad)  # type: ignore


def gradient(
    expr: Node | Dual | Scalar, n: int | None = None, *, memoize: bool | None = None
) -> npt.NDArray[np.float64]:
    """Evaluate only the derivative vector of an expression.

    See Also
    --------
    materialize
    """
    return _run(expr, n, memoize, False)[1]


def evaluate(expr: Node | Dual | Scalar, *, memoize: bool | None = None) -> float:
    """Evaluate only the value of an expression."""
    node = _operand(expr)

    if memoize is None:
        memoize = getcontext().memoize

    with _evaluation_pass(memoize):
        return node.value()
