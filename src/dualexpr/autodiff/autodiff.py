import functools
from collections.abc import Callable
from typing import Any, ParamSpec, TypeVar

import numpy as np

from dualexpr import _numeric
from dualexpr.autodiff.dual import Dual
from dualexpr.errors import DimensionMismatch

P = ParamSpec("P")
T = TypeVar("T")


def _variables(args: tuple, lazy: bool) -> tuple:
    result = Dual.variable(*args)

    if not lazy:
        return result

    from dualexpr.expr.nodes import Leaf

    return tuple(Leaf(x) for x in result)


def _bind(result: Any, n: int) -> Dual:
    if isinstance(result, Dual):
        if result.dimension != n:
            raise DimensionMismatch(n, result.dimension)

        return result

    from dualexpr.expr.materialize import materialize

    return materialize(result, n)


def deriv(fun: Callable[P, Any], *, lazy: bool = False) -> Callable[P, float]:
    """Return a function that evaluates the derivative of the univariate scalar-valued
    function.

    Parameters
    ----------
    fun : Callable
        Differentiated function.
    lazy : bool, default=False
        If ``True``, `fun` receives :class:`~dualexpr.expr.Leaf` nodes and its result
        is materialized once instead of being computed eagerly.

    Returns
    -------
    Callable
        Derivative of `fun`.

    Warnings
    --------
    `fun` must not contain conditional branches on its argument.

    Examples
    --------
    >>> from dualexpr import function as dxf
    >>> f = lambda x: x**2 + dxf.sqrt(x + 3)
    >>> df = deriv(f)
    >>> print(format(df(1.2), ".6g"))
    2.64398
    """

    def result(*args, **kwargs):
        tmp = fun(*_variables(args, lazy), **kwargs)
        return _bind(tmp, len(args)).derivative(0)

    return result


def grad(
    fun: Callable[P, Any], *, lazy: bool = False
) -> Callable[P, tuple[float, ...]]:
    """Return a function that evaluates the gradient of the multivariate scalar-valued
    function.

    Parameters
    ----------
    fun : Callable
        Differentiated function.
    lazy : bool, default=False
        If ``True``, `fun` receives :class:`~dualexpr.expr.Leaf` nodes and its result
        is materialized once instead of being computed eagerly.

    Returns
    -------
    Callable
        Gradient of `fun`.

    Examples
    --------
    >>> from dualexpr import function as dxf
    >>> f = lambda x, y: dxf.sqrt(x * y + 3)
    >>> df = grad(f, lazy=True)
    >>> c = df(0.5, 1.0)
    >>> print(format(c[0], ".6g"), format(c[1], ".6g"))
    0.267261 0.133631
    """

    def result(*args, **kwargs):
        tmp = fun(*_variables(args, lazy), **kwargs)
        return tuple(_bind(tmp, len(args)).gradient.tolist())

    return result


def value_and_grad(
    fun: Callable[P, Any], *, lazy: bool = False
) -> Callable[P, tuple[float, tuple[float, ...]]]:
    """Return a function that evaluates both the multivariate scalar-valued function and
    its gradient.

    See Also
    --------
    grad
    """

    def result(*args, **kwargs):
        tmp = _bind(fun(*_variables(args, lazy), **kwargs), len(args))
        return tmp.value(), tuple(tmp.gradient.tolist())

    return result


def jacobian(
    fun: Callable[P, tuple], *, lazy: bool = False
) -> Callable[P, tuple[tuple[float, ...], ...]]:
    """Return a function that evaluates the Jacobian matrix of the multivariate
    vector-valued function.

    Parameters
    ----------
    fun : Callable
        Differentiated function returning a tuple.
    lazy : bool, default=False
        If ``True``, `fun` receives :class:`~dualexpr.expr.Leaf` nodes and each
        component of its result is materialized once.

    Returns
    -------
    Callable
        Fréchet derivative of `fun`.
    """

    def result(*args, **kwargs):
        tmp = fun(*_variables(args, lazy), **kwargs)
        return tuple(tuple(_bind(x, len(args)).gradient.tolist()) for x in tmp)

    return result


def _defderiv(
    fun: Callable[P, Any], deriv: Callable[P, Any], *, argnum: int = 0
) -> None:
    if "_dualexpr_is_primitive" not in fun.__dict__:
        raise ValueError

    fun.__dict__["_dualexpr_derivs"][argnum] = deriv


def _isoverloaded(value: object) -> bool:
    return getattr(type(value), "_dualexpr_overload_", None) is not None


def _primitive(fun: Callable[P, T]) -> Callable[P, T]:
    derivs: dict[int, Callable] = {}

    @functools.wraps(fun)
    def wrapper(*args, **kwargs):
        duals = [x for x in args if isinstance(x, Dual)]

        if not duals or any(_isoverloaded(x) for x in args):
            return fun(*args, **kwargs)

        n = duals[0].dimension

        for x in duals[1:]:
            if x.dimension != n:
                raise DimensionMismatch(n, x.dimension)

        args_real = [x.value() if isinstance(x, Dual) else x for x in args]
        grad = np.zeros(n)

        for argnum, arg in enumerate(args):
            if not isinstance(arg, Dual):
                continue

            # a zero tangent contributes nothing, even where the partial derivative
            # itself is undefined
            tangent = arg.gradient
            mask = tangent != 0

            if not mask.any():
                continue

            tmp = derivs[argnum](*args_real, **kwargs)

            with _numeric.ieee():
                grad[mask] += tmp * tangent[mask]

        return Dual._fromparts(wrapper(*args_real, **kwargs), grad)

    wrapper.__dict__["_dualexpr_is_primitive"] = True
    wrapper.__dict__["_dualexpr_derivs"] = derivs
    return wrapper  # type: ignore
