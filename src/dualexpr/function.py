"""
#################################################
Mathematical functions (:mod:`dualexpr.function`)
#################################################

.. currentmodule:: dualexpr.function

This module provides mathematical functions. Each of them accepts real numbers,
:class:`~dualexpr.autodiff.Dual` numbers (evaluated eagerly), and expression nodes
(which build a new node without evaluating anything).

Power, exponents, and logarithmic functions
===========================================

.. autosummary::
    :toctree: generated/

    exp
    log
    pow
    sqrt

"""

from typing import Any, overload

from dualexpr import _numeric
from dualexpr.autodiff.autodiff import _defderiv, _primitive
from dualexpr.autodiff.dual import Dual
from dualexpr.typing import isscalar

_exp: Any = None
_log: Any = None
_pow: Any = None
_sqrt: Any = None


@overload
def exp(x: Dual, /) -> Dual: ...


@overload
def exp(x: float | int, /) -> float: ...


@overload
def exp(x: Any, /) -> Any: ...


@_primitive
def exp(x, /):
    """Exponential.

    Examples
    --------
    >>> print(format(exp(2), ".6f"))
    7.389056
    >>> _, c = Dual.variable(2.0, 3.0)
    >>> print(format(exp(c).derivative(1), ".6f"))
    20.085537
    """
    if fun := getattr(type(x), "_dualexpr_overload_", None):
        if (res := fun(x, _exp, x)) is not NotImplemented:
            return res

        raise TypeError

    if isscalar(x):
        return _numeric.exp(x)

    raise TypeError(f"unsupported operand type: {type(x).__name__}")


@overload
def log(x: Dual, /) -> Dual: ...


@overload
def log(x: float | int, /) -> float: ...


@overload
def log(x: Any, /) -> Any: ...


@_primitive
def log(x, /):
    """Natural logarithm.

    A non-positive argument yields ``-inf`` or NaN unless the current context is
    strict, in which case :class:`~dualexpr.errors.DomainError` is raised.

    Examples
    --------
    >>> print(format(log(5), ".6f"))
    1.609438
    >>> log(0.0)
    -inf
    """
    if fun := getattr(type(x), "_dualexpr_overload_", None):
        if (res := fun(x, _log, x)) is not NotImplemented:
            return res

        raise TypeError

    if isscalar(x):
        return _numeric.log(x)

    raise TypeError(f"unsupported operand type: {type(x).__name__}")


@overload
def pow(x: Dual, y: Dual | float | int, /) -> Dual: ...


@overload
def pow(x: float | int, y: Dual, /) -> Dual: ...


@overload
def pow(x: float | int, y: float | int, /) -> float: ...


@overload
def pow(x: Any, y: Any, /) -> Any: ...


@_primitive
def pow(x, y, /):
    """`x` raised to the power `y`.

    The logarithm of `x` enters the derivative only through the components in which
    `y` varies, so a variable raised to a constant power is differentiable for any
    base.

    Examples
    --------
    >>> print(format(pow(3.25, 1.25), ".6f"))
    4.363693
    >>> x, = Dual.variable(-2.0)
    >>> pow(x, 3)
    Dual(value=-8.0, gradient=[12.0])
    """
    for z in (x, y):
        if fun := getattr(type(z), "_dualexpr_overload_", None):
            if (res := fun(z, _pow, x, y)) is not NotImplemented:
                return res

            raise TypeError

    if isscalar(x) and isscalar(y):
        return _numeric.pow(x, y)

    raise TypeError(
        f"unsupported operand types: {type(x).__name__}, {type(y).__name__}"
    )


@overload
def sqrt(x: Dual, /) -> Dual: ...


@overload
def sqrt(x: float | int, /) -> float: ...


@overload
def sqrt(x: Any, /) -> Any: ...


@_primitive
def sqrt(x, /):
    """Square root.

    Examples
    --------
    >>> print(format(sqrt(2.0), ".6f"))
    1.414214
    """
    if fun := getattr(type(x), "_dualexpr_overload_", None):
        if (res := fun(x, _sqrt, x)) is not NotImplemented:
            return res

        raise TypeError

    if isscalar(x):
        return _numeric.pow(x, 0.5)

    raise TypeError(f"unsupported operand type: {type(x).__name__}")


_exp = exp
_log = log
_pow = pow
_sqrt = sqrt

_defderiv(exp, exp)
_defderiv(log, lambda x: _numeric.div(1.0, x))
_defderiv(pow, lambda x, y: y * pow(x, y - 1), argnum=0)
_defderiv(
    pow, lambda x, y: _numeric.log(x, _numeric.POWLOG_DOMAIN) * pow(x, y), argnum=1
)
_defderiv(sqrt, lambda x: _numeric.div(0.5, sqrt(x)))
