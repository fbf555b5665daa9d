from collections.abc import Iterable
from typing import Any, Self, final

import numpy as np
import numpy.typing as npt

from dualexpr import _numeric
from dualexpr.errors import DimensionMismatch, IndexOutOfRange
from dualexpr.typing import Scalar, isscalar


@final
class Dual:
    r"""Dual number with a derivative vector of fixed length.

    Parameters
    ----------
    value : float
    gradient : Iterable[float]
        Partial derivatives of `value` with respect to each independent variable.

    Warnings
    --------
    Users cannot define classes derived from this.

    See Also
    --------
    dualexpr.expr.Leaf

    Notes
    -----
    Instances of this class behave like elements of the dual number ring

    .. math::

        \mathbb{R}[x_1,x_2,\dotsc,x_n]/(x_ix_j\mid i,j\in\{1,2,\dotsc,n\}),

    where :math:`n` is the length of `gradient`. Every arithmetic operation returns a
    new instance whose gradient is computed immediately; compose
    :mod:`dualexpr.expr` nodes instead to defer the work.

    Examples
    --------
    >>> a, b = Dual.variable(2.0, 3.0)
    >>> c = a * b
    >>> c
    Dual(value=6.0, gradient=[3.0, 2.0])
    >>> c += a
    >>> c.derivative(0)
    4.0
    """

    __slots__ = ("_value", "_grad")
    __array_ufunc__ = None
    _value: float
    _grad: npt.NDArray[np.float64]

    def __init__(self, value: Scalar, gradient: Iterable[Scalar]):
        if not isscalar(value):
            raise TypeError(f"value must be a real number, not {type(value).__name__}")

        if not isinstance(gradient, np.ndarray):
            gradient = list(gradient)

        grad = np.array(gradient, dtype=np.float64)

        if grad.ndim != 1 or grad.size == 0:
            raise ValueError("gradient must be a non-empty one-dimensional sequence")

        self._value = float(value)
        self._grad = grad

    @classmethod
    def _fromparts(cls, value: float, grad: npt.NDArray[np.float64]) -> Self:
        result = object.__new__(cls)
        result._value = value
        result._grad = grad
        return result

    @classmethod
    def constant(cls, value: Scalar, n: int) -> Self:
        """Return a dual number whose gradient is the zero vector of length `n`."""
        if not isscalar(value):
            raise TypeError(f"value must be a real number, not {type(value).__name__}")

        if n < 1:
            raise ValueError("dimension must be positive")

        return cls._fromparts(float(value), np.zeros(n))

    @classmethod
    def variable(cls, *args: Scalar) -> tuple[Self, ...]:
        """Return independent variables, the k-th of which is seeded at index k.

        Examples
        --------
        >>> x, y = Dual.variable(1.0, 2.0)
        >>> y
        Dual(value=2.0, gradient=[0.0, 1.0])
        """
        if len(args) == 0:
            raise ValueError("at least one variable is required")

        return tuple(cls.constant(arg, len(args)).diff(i) for i, arg in enumerate(args))

    @property
    def dimension(self) -> int:
        """Length of the derivative vector."""
        return self._grad.shape[0]

    @property
    def gradient(self) -> npt.NDArray[np.float64]:
        """Read-only view of the derivative vector."""
        view = self._grad.view()
        view.flags.writeable = False
        return view

    def diff(self, index: int) -> Self:
        """Declare the dual number as the `index`-th independent variable.

        The gradient is reset to the unit vector at `index` regardless of its previous
        contents.

        Raises
        ------
        IndexOutOfRange
            If `index` is not in ``range(dimension)``.
        """
        self._checkindex(index)
        self._grad[:] = 0.0
        self._grad[index] = 1.0
        return self

    def value(self) -> float:
        return self._value

    def set_value(self, value: Scalar) -> None:
        if not isscalar(value):
            raise TypeError(f"value must be a real number, not {type(value).__name__}")

        self._value = float(value)

    def derivative(self, index: int) -> float:
        """Return the partial derivative with respect to the `index`-th variable.

        Raises
        ------
        IndexOutOfRange
            If `index` is not in ``range(dimension)``.
        """
        self._checkindex(index)
        return float(self._grad[index])

    def set_derivative(self, index: int, value: Scalar) -> None:
        self._checkindex(index)

        if not isscalar(value):
            raise TypeError(f"value must be a real number, not {type(value).__name__}")

        self._grad[index] = value

    def assign(self, expr: Any) -> Self:
        """Materialize `expr` into the dual number in place.

        `expr` may be an expression node, a dual number of the same dimension, or a
        real number (which leaves a zero gradient).

        See Also
        --------
        dualexpr.expr.materialize
        """
        from dualexpr.expr.materialize import materialize

        result = materialize(expr, self.dimension)
        self._value = result._value
        self._grad[:] = result._grad
        return self

    def copy(self) -> Self:
        return self._fromparts(self._value, self._grad.copy())

    def _checkindex(self, index: int) -> None:
        if not isinstance(index, int | np.integer) or isinstance(index, bool):
            raise TypeError(f"index must be an integer, not {type(index).__name__}")

        if not 0 <= index < self._grad.shape[0]:
            raise IndexOutOfRange(int(index), self._grad.shape[0])

    def _operand(self, other: object) -> "Dual | float | None":
        if isinstance(other, Dual):
            if other._grad.shape != self._grad.shape:
                raise DimensionMismatch(self.dimension, other.dimension)

            return other

        if isscalar(other):
            return float(other)  # type: ignore

        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}(value={self._value!r}, gradient={self._grad.tolist()!r})"

    def __str__(self) -> str:
        grad = (", ").join(str(x) for x in self._grad.tolist())
        return f"{self._value} [{grad}]"

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented

        return bool(
            other._value == self._value and np.array_equal(other._grad, self._grad)  # type: ignore
        )

    def __copy__(self) -> Self:
        return self.copy()

    def __add__(self, rhs: Self | Scalar) -> Self:
        if (rhs := self._operand(rhs)) is None:
            return NotImplemented

        if not isinstance(rhs, Dual):
            return self._fromparts(self._value + rhs, self._grad.copy())

        with _numeric.ieee():
            grad = self._grad + rhs._grad

        return self._fromparts(self._value + rhs._value, grad)

    def __sub__(self, rhs: Self | Scalar) -> Self:
        if (rhs := self._operand(rhs)) is None:
            return NotImplemented

        if not isinstance(rhs, Dual):
            return self._fromparts(self._value - rhs, self._grad.copy())

        with _numeric.ieee():
            grad = self._grad - rhs._grad

        return self._fromparts(self._value - rhs._value, grad)

    def __mul__(self, rhs: Self | Scalar) -> Self:
        if (rhs := self._operand(rhs)) is None:
            return NotImplemented

        with _numeric.ieee():
            if not isinstance(rhs, Dual):
                return self._fromparts(self._value * rhs, self._grad * rhs)

            grad = self._grad * rhs._value + self._value * rhs._grad

        return self._fromparts(self._value * rhs._value, grad)

    def __truediv__(self, rhs: Self | Scalar) -> Self:
        if (rhs := self._operand(rhs)) is None:
            return NotImplemented

        with _numeric.ieee():
            if not isinstance(rhs, Dual):
                return self._fromparts(_numeric.div(self._value, rhs), self._grad / rhs)

            s = rhs._value * rhs._value
            grad = (self._grad * rhs._value - self._value * rhs._grad) / s

        return self._fromparts(_numeric.div(self._value, rhs._value), grad)

    def __pow__(self, rhs: Self | Scalar) -> Self:
        from dualexpr import function as dxf

        if self._operand(rhs) is None:
            return NotImplemented

        return dxf.pow(self, rhs)

    def __neg__(self) -> Self:
        return self._fromparts(-self._value, -self._grad)

    def __pos__(self) -> Self:
        return self.copy()

    def __radd__(self, lhs: Scalar) -> Self:
        return self.__add__(lhs)

    def __rsub__(self, lhs: Scalar) -> Self:
        if (lhs := self._operand(lhs)) is None:
            return NotImplemented

        return self._fromparts(lhs - self._value, -self._grad)  # type: ignore

    def __rmul__(self, lhs: Scalar) -> Self:
        return self.__mul__(lhs)

    def __rtruediv__(self, lhs: Scalar) -> Self:
        if (lhs := self._operand(lhs)) is None:
            return NotImplemented

        with _numeric.ieee():
            s = self._value * self._value
            grad = -lhs * self._grad / s  # type: ignore

        return self._fromparts(_numeric.div(lhs, self._value), grad)  # type: ignore

    def __rpow__(self, lhs: Scalar) -> Self:
        from dualexpr import function as dxf

        if self._operand(lhs) is None:
            return NotImplemented

        return dxf.pow(lhs, self)

    def __iadd__(self, rhs: Self | Scalar) -> Self:
        if (rhs := self._operand(rhs)) is None:
            return NotImplemented

        if isinstance(rhs, Dual):
            with _numeric.ieee():
                self._grad += rhs._grad

            self._value += rhs._value
        else:
            self._value += rhs

        return self

    def __isub__(self, rhs: Self | Scalar) -> Self:
        if (rhs := self._operand(rhs)) is None:
            return NotImplemented

        if isinstance(rhs, Dual):
            with _numeric.ieee():
                self._grad -= rhs._grad

            self._value -= rhs._value
        else:
            self._value -= rhs

        return self

    def __imul__(self, rhs: Self | Scalar) -> Self:
        if (rhs := self._operand(rhs)) is None:
            return NotImplemented

        # the product rule needs the value from before the update
        with _numeric.ieee():
            if isinstance(rhs, Dual):
                self._grad[:] = self._grad * rhs._value + self._value * rhs._grad
                self._value *= rhs._value
            else:
                self._grad *= rhs
                self._value *= rhs

        return self

    def __itruediv__(self, rhs: Self | Scalar) -> Self:
        if (rhs := self._operand(rhs)) is None:
            return NotImplemented

        with _numeric.ieee():
            if isinstance(rhs, Dual):
                s = rhs._value * rhs._value
                self._grad[:] = (self._grad * rhs._value - self._value * rhs._grad) / s
                self._value = _numeric.div(self._value, rhs._value)
            else:
                self._grad /= rhs
                self._value = _numeric.div(self._value, rhs)

        return self

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        raise RuntimeError("subclassing is forbidden")
