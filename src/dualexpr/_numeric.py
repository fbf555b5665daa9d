"""Scalar kernels with the library's floating-point edge-case policy.

Outside strict mode every kernel follows IEEE 754: overflow yields an infinity,
division by zero yields an infinity or NaN, and a logarithm of a non-positive value
yields ``-inf`` or NaN. No warning is emitted. In strict mode the logarithm and power
kernels raise :class:`~dualexpr.errors.DomainError` instead. The same checks are
available on their own as :func:`checklog` and :func:`checkpow` for derivative
formulas that never evaluate the kernel itself.
"""

import numpy as np

from dualexpr.context import getcontext
from dualexpr.errors import DomainError


def ieee():
    """Return a context manager that silences numpy floating-point warnings."""
    return np.errstate(all="ignore")


def div(lhs: float, rhs: float) -> float:
    with np.errstate(all="ignore"):
        return float(np.divide(lhs, rhs))


def exp(x: float) -> float:
    with np.errstate(all="ignore"):
        return float(np.exp(x))


LOG_DOMAIN = "log of non-positive value {!r}"
POWLOG_DOMAIN = "pow with varying exponent of non-positive base {!r}"


def checklog(x: float, message: str = LOG_DOMAIN) -> None:
    """Raise :class:`~dualexpr.errors.DomainError` in strict mode if `x` is not
    positive."""
    if x <= 0 and getcontext().strict:
        raise DomainError(message.format(x))


def log(x: float, message: str = LOG_DOMAIN) -> float:
    checklog(x, message)

    with np.errstate(all="ignore"):
        return float(np.log(x))


def checkpow(x: float, y: float) -> None:
    if x < 0 and not float(y).is_integer() and getcontext().strict:
        raise DomainError(f"pow of negative base {x!r} to non-integral power {y!r}")


def pow(x: float, y: float) -> float:
    checkpow(x, y)

    with np.errstate(all="ignore"):
        return float(np.power(float(x), float(y)))
