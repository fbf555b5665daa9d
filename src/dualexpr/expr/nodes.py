import contextlib
import contextvars
from abc import ABC, abstractmethod
from typing import Any, Final

import numpy as np

from dualexpr import _numeric
from dualexpr import function as dxf
from dualexpr.autodiff.dual import Dual
from dualexpr.errors import DimensionMismatch, IndexOutOfRange
from dualexpr.typing import Scalar, isscalar

_cache: contextvars.ContextVar[dict[int, float] | None] = contextvars.ContextVar(
    "dualexpr.expr.cache", default=None
)


@contextlib.contextmanager
def _evaluation_pass(memoize: bool):
    """Scope one evaluation pass; with `memoize`, node values are cached by identity
    until the pass ends."""
    token = _cache.set({} if memoize else None)

    try:
        yield
    finally:
        _cache.reset(token)


def _joindim(lhs: int | None, rhs: int | None) -> int | None:
    if lhs is None:
        return rhs

    if rhs is not None and lhs != rhs:
        raise DimensionMismatch(lhs, rhs)

    return lhs


def _checkindex(index: int, dimension: int | None) -> None:
    if not isinstance(index, int | np.integer) or isinstance(index, bool):
        raise TypeError(f"index must be an integer, not {type(index).__name__}")

    if index < 0 or (dimension is not None and index >= dimension):
        raise IndexOutOfRange(int(index), dimension)


class Node(ABC):
    """Abstract base class for nodes of an expression tree.

    A node computes its value and the components of its derivative vector on demand
    from its operands. Composing nodes with arithmetic operators or the functions of
    :mod:`dualexpr.function` builds a larger tree without evaluating anything.

    Attributes
    ----------
    dimension : int | None
        Length of the derivative vector, or ``None`` if the tree contains no
        :class:`Leaf`.
    operands : tuple[Node, ...]

    Warnings
    --------
    Users cannot define classes derived from this.

    Notes
    -----
    A :class:`Leaf` refers to its dual number, it does not copy it. Evaluating a tree
    always reads the current contents of its leaves, so a tree kept after one of its
    dual numbers has been reseeded or reassigned yields values for the new contents.
    """

    __slots__ = ()
    __IS_SEALED: Final = True
    __array_ufunc__ = None

    @property
    @abstractmethod
    def dimension(self) -> int | None:
        raise NotImplementedError

    @property
    @abstractmethod
    def operands(self) -> tuple["Node", ...]:
        raise NotImplementedError

    @abstractmethod
    def _value(self) -> float:
        raise NotImplementedError

    @abstractmethod
    def _derivative(self, index: int) -> float:
        raise NotImplementedError

    def value(self) -> float:
        if (cache := _cache.get()) is None:
            return self._value()

        key = id(self)

        if (result := cache.get(key)) is None:
            result = cache[key] = self._value()

        return result

    def derivative(self, index: int) -> float:
        """Return the partial derivative with respect to the `index`-th variable.

        Raises
        ------
        IndexOutOfRange
            If `index` is negative or not less than :attr:`dimension`.
        """
        _checkindex(index, self.dimension)
        return self._derivative(int(index))

    def _dualexpr_overload_(self, fun, *args):
        if (operands := _tonodes(args)) is None:
            return NotImplemented

        match fun:
            case dxf.exp:
                return Exp(*operands)

            case dxf.log:
                return Log(*operands)

            case dxf.pow:
                return Pow(*operands)

            case dxf.sqrt:
                return Pow(operands[0], Constant(0.5))

        return NotImplemented

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, name: str) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __add__(self, rhs: "Node | Dual | Scalar") -> "Node":
        if (rhs := _tonode(rhs)) is None:
            return NotImplemented

        return Add(self, rhs)

    def __sub__(self, rhs: "Node | Dual | Scalar") -> "Node":
        if (rhs := _tonode(rhs)) is None:
            return NotImplemented

        return Sub(self, rhs)

    def __mul__(self, rhs: "Node | Dual | Scalar") -> "Node":
        if (rhs := _tonode(rhs)) is None:
            return NotImplemented

        return Mul(self, rhs)

    def __truediv__(self, rhs: "Node | Dual | Scalar") -> "Node":
        if (rhs := _tonode(rhs)) is None:
            return NotImplemented

        return Div(self, rhs)

    def __pow__(self, rhs: "Node | Dual | Scalar") -> "Node":
        if (rhs := _tonode(rhs)) is None:
            return NotImplemented

        return Pow(self, rhs)

    def __neg__(self) -> "Node":
        return Sub(Constant(0.0), self)

    def __pos__(self) -> "Node":
        return self

    def __radd__(self, lhs: "Dual | Scalar") -> "Node":
        if (lhs := _tonode(lhs)) is None:
            return NotImplemented

        return Add(lhs, self)

    def __rsub__(self, lhs: "Dual | Scalar") -> "Node":
        if (lhs := _tonode(lhs)) is None:
            return NotImplemented

        return Sub(lhs, self)

    def __rmul__(self, lhs: "Dual | Scalar") -> "Node":
        if (lhs := _tonode(lhs)) is None:
            return NotImplemented

        return Mul(lhs, self)

    def __rtruediv__(self, lhs: "Dual | Scalar") -> "Node":
        if (lhs := _tonode(lhs)) is None:
            return NotImplemented

        return Div(lhs, self)

    def __rpow__(self, lhs: "Dual | Scalar") -> "Node":
        if (lhs := _tonode(lhs)) is None:
            return NotImplemented

        return Pow(lhs, self)

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)

        if cls.__IS_SEALED:
            raise RuntimeError("subclassing is forbidden")


def _tonode(value: object) -> Node | None:
    if isinstance(value, Node):
        return value

    if isinstance(value, Dual):
        return Leaf(value)

    if isscalar(value):
        return Constant(value)  # type: ignore

    return None


def _tonodes(values: tuple) -> tuple[Node, ...] | None:
    result = tuple(_tonode(x) for x in values)
    return None if any(x is None for x in result) else result  # type: ignore


def _operand(value: object) -> Node:
    if (result := _tonode(value)) is None:
        raise TypeError(f"unsupported operand type: {type(value).__name__}")

    return result


Node._Node__IS_SEALED = False  # type: ignore


class Constant(Node):
    """Real number inside an expression tree; every derivative is zero.

    Parameters
    ----------
    value : float
    """

    __slots__ = ("_constant",)
    _constant: float

    def __init__(self, value: Scalar):
        if not isscalar(value):
            raise TypeError(f"value must be a real number, not {type(value).__name__}")

        object.__setattr__(self, "_constant", float(value))

    @property
    def dimension(self) -> None:
        return None

    @property
    def operands(self) -> tuple[Node, ...]:
        return ()

    def value(self) -> float:
        return self._constant

    def _value(self) -> float:
        return self._constant

    def _derivative(self, index: int) -> float:
        return 0.0

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._constant!r})"


class Leaf(Node):
    """Reference to a :class:`~dualexpr.autodiff.Dual` inside an expression tree.

    Parameters
    ----------
    dual : Dual
    """

    __slots__ = ("_dual",)
    _dual: Dual

    def __init__(self, dual: Dual):
        if not isinstance(dual, Dual):
            raise TypeError(f"expected Dual, not {type(dual).__name__}")

        object.__setattr__(self, "_dual", dual)

    @property
    def dual(self) -> Dual:
        return self._dual

    @property
    def dimension(self) -> int:
        return self._dual.dimension

    @property
    def operands(self) -> tuple[Node, ...]:
        return ()

    def value(self) -> float:
        return self._dual._value

    def _value(self) -> float:
        return self._dual._value

    def _derivative(self, index: int) -> float:
        return float(self._dual._grad[index])

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._dual!r})"


class _Unary(Node):
    __slots__ = ("_arg", "_dimension")
    _arg: Node
    _dimension: int | None

    def __init__(self, arg: Any):
        arg = _operand(arg)
        object.__setattr__(self, "_arg", arg)
        object.__setattr__(self, "_dimension", arg.dimension)

    @property
    def dimension(self) -> int | None:
        return self._dimension

    @property
    def operands(self) -> tuple[Node, ...]:
        return (self._arg,)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._arg!r})"


class _Binary(Node):
    __slots__ = ("_lhs", "_rhs", "_dimension")
    _lhs: Node
    _rhs: Node
    _dimension: int | None

    def __init__(self, lhs: Any, rhs: Any):
        lhs = _operand(lhs)
        rhs = _operand(rhs)
        object.__setattr__(self, "_dimension", _joindim(lhs.dimension, rhs.dimension))
        object.__setattr__(self, "_lhs", lhs)
        object.__setattr__(self, "_rhs", rhs)

    @property
    def dimension(self) -> int | None:
        return self._dimension

    @property
    def operands(self) -> tuple[Node, ...]:
        return (self._lhs, self._rhs)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._lhs!r}, {self._rhs!r})"


class Add(_Binary):
    """Sum of two nodes."""

    __slots__ = ()

    def _value(self) -> float:
        return self._lhs.value() + self._rhs.value()

    def _derivative(self, index: int) -> float:
        return self._lhs._derivative(index) + self._rhs._derivative(index)


class Sub(_Binary):
    """Difference of two nodes."""

    __slots__ = ()

    def _value(self) -> float:
        return self._lhs.value() - self._rhs.value()

    def _derivative(self, index: int) -> float:
        return self._lhs._derivative(index) - self._rhs._derivative(index)


class Mul(_Binary):
    """Product of two nodes.

    A leaf-free operand is a scalar factor: its derivative term is dropped, as in
    ``Dual * float``.

    Notes
    -----
    Each call of :meth:`derivative` evaluates the values of both operands again.
    Materialize with ``memoize=True`` to evaluate every value once per pass.
    """

    __slots__ = ()

    def _value(self) -> float:
        return self._lhs.value() * self._rhs.value()

    def _derivative(self, index: int) -> float:
        lhs = self._lhs
        rhs = self._rhs

        match (lhs.dimension, rhs.dimension):
            case (None, None):
                return 0.0
            case (_, None):
                return lhs._derivative(index) * rhs.value()
            case (None, _):
                return rhs._derivative(index) * lhs.value()

        tmp = lhs._derivative(index) * rhs.value()
        return tmp + lhs.value() * rhs._derivative(index)


class Div(_Binary):
    """Quotient of two nodes.

    A leaf-free operand is treated as a scalar, as in ``Dual / float`` and
    ``float / Dual``.
    """

    __slots__ = ()

    def _value(self) -> float:
        return _numeric.div(self._lhs.value(), self._rhs.value())

    def _derivative(self, index: int) -> float:
        lhs = self._lhs
        rhs = self._rhs

        match (lhs.dimension, rhs.dimension):
            case (None, None):
                return 0.0
            case (_, None):
                return _numeric.div(lhs._derivative(index), rhs.value())
            case (None, _):
                r = rhs.value()
                return _numeric.div(-lhs.value() * rhs._derivative(index), r * r)

        r = rhs.value()
        tmp = lhs._derivative(index) * r - lhs.value() * rhs._derivative(index)
        return _numeric.div(tmp, r * r)


class Exp(_Unary):
    """Exponential of a node."""

    __slots__ = ()

    def _value(self) -> float:
        return _numeric.exp(self._arg.value())

    def _derivative(self, index: int) -> float:
        if (tmp := self._arg._derivative(index)) == 0:
            return 0.0

        return _numeric.exp(self._arg.value()) * tmp


class Log(_Unary):
    """Natural logarithm of a node."""

    __slots__ = ()

    def _value(self) -> float:
        return _numeric.log(self._arg.value())

    def _derivative(self, index: int) -> float:
        x = self._arg.value()
        _numeric.checklog(x)

        if (tmp := self._arg._derivative(index)) == 0:
            return 0.0

        return _numeric.div(1.0, x) * tmp


class Pow(_Binary):
    """Power of two nodes.

    The term containing the logarithm of the base is evaluated only for the
    components in which the exponent has a non-zero derivative.
    """

    __slots__ = ()

    def _value(self) -> float:
        return _numeric.pow(self._lhs.value(), self._rhs.value())

    def _derivative(self, index: int) -> float:
        base = self._lhs.value()
        exponent = self._rhs.value()
        _numeric.checkpow(base, exponent)
        result = 0.0

        if (tmp := self._lhs._derivative(index)) != 0:
            result += exponent * _numeric.pow(base, exponent - 1) * tmp

        if (tmp := self._rhs._derivative(index)) != 0:
            powlog = _numeric.log(base, _numeric.POWLOG_DOMAIN)
            result += powlog * _numeric.pow(base, exponent) * tmp

        return result


Node._Node__IS_SEALED = True  # type: ignore


def lazy(value: Node | Dual | Scalar) -> Node:
    """Return `value` as an expression node.

    A :class:`~dualexpr.autodiff.Dual` is wrapped in a :class:`Leaf`, a real number
    in a :class:`Constant`, and a node is returned unchanged.

    Examples
    --------
    >>> from dualexpr import Dual, exp
    >>> _, b, c = Dual.variable(1.0, 2.0, 3.0)
    >>> f = lazy(b) * exp(lazy(c))
    >>> f
    Mul(Leaf(Dual(value=2.0, gradient=[0.0, 1.0, 0.0])), Exp(Leaf(Dual(value=3.0, gradient=[0.0, 0.0, 1.0]))))
    >>> print(format(f.derivative(2), ".6f"))
    40.171074
    """
    return _operand(value)


def constant(value: Scalar) -> Constant:
    return Constant(value)


def size(node: Node) -> int:
    """Return the number of nodes in the tree, counting a shared node once for every
    occurrence."""
    result = 0
    stack = [node]

    while stack:
        result += 1
        stack.extend(stack.pop().operands)

    return result
