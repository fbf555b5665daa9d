"""
############################################
Evaluation context (:mod:`dualexpr.context`)
############################################

.. currentmodule:: dualexpr.context

This module provides the settings that govern how values and derivatives are
evaluated.

.. autosummary::
    :toctree: generated/

    Context
    getcontext
    localcontext
    setcontext

"""

import contextlib
import contextvars
from typing import Self


class Context:
    """Create a new context.

    Parameters
    ----------
    memoize : bool, default=False
        If ``True``, values of expression nodes are cached for the duration of one
        materialization pass. Results do not change, only the amount of redundant
        work.
    strict : bool, default=False
        If ``True``, evaluating a function outside its domain raises
        :class:`~dualexpr.errors.DomainError`. Otherwise NaN and infinities propagate
        as in IEEE 754 arithmetic.
    """

    __slots__ = ("_memoize", "_strict")
    _memoize: bool
    _strict: bool

    def __init__(self, memoize: bool = False, strict: bool = False):
        self._memoize = bool(memoize)
        self._strict = bool(strict)

    @property
    def memoize(self) -> bool:
        return self._memoize

    @property
    def strict(self) -> bool:
        return self._strict

    def copy(self) -> Self:
        return self.__class__(self._memoize, self._strict)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(memoize={self._memoize}, strict={self._strict})"

    def __copy__(self) -> Self:
        return self.copy()


_var: contextvars.ContextVar[Context] = contextvars.ContextVar("dualexpr")


def getcontext() -> Context:
    """Return the current context for the active thread."""
    if context := _var.get(None):
        return context

    context = Context()
    _var.set(context)
    return context


def setcontext(ctx: Context) -> None:
    """Set the current context for the active thread to `ctx`."""
    if not isinstance(ctx, Context):
        raise TypeError

    _var.set(ctx)


@contextlib.contextmanager
def localcontext(
    ctx: Context | None = None,
    *,
    memoize: bool | None = None,
    strict: bool | None = None,
):
    """Return a context manager that will set the current context for the active thread
    to a copy of `ctx` on entry to the with-statement and restore the previous context
    when exiting the with-statement.

    Examples
    --------
    >>> from dualexpr import log
    >>> with localcontext(strict=True):
    ...     log(-1.0)
    Traceback (most recent call last):
        ...
    dualexpr.errors.DomainError: log of non-positive value -1.0
    """
    if ctx is None:
        ctx = getcontext()

    if memoize is None:
        memoize = ctx._memoize

    if strict is None:
        strict = ctx._strict

    ctx = Context(memoize, strict)
    token = _var.set(ctx)

    try:
        yield ctx
    finally:
        _var.reset(token)
