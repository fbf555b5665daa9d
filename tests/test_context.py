import contextvars
import threading

import pytest

from dualexpr import (
    Context,
    DomainError,
    Dual,
    getcontext,
    localcontext,
    log,
    pow,
    setcontext,
)


def test_localcontext_restores():
    before = getcontext()

    with localcontext(strict=True) as ctx:
        assert getcontext() is ctx
        assert ctx.strict
        assert ctx.memoize == before.memoize

        with localcontext(memoize=True) as inner:
            assert inner.strict and inner.memoize

        assert getcontext() is ctx

    assert getcontext() is before


def test_setcontext():
    def run():
        setcontext(Context(memoize=True))
        return getcontext().memoize

    assert contextvars.copy_context().run(run)

    with pytest.raises(TypeError):
        setcontext("strict")  # type: ignore


def test_copy():
    ctx = Context(memoize=True, strict=True)
    tmp = ctx.copy()
    assert tmp is not ctx
    assert tmp.memoize and tmp.strict
    assert repr(tmp) == "Context(memoize=True, strict=True)"


def test_strict_log():
    with localcontext(strict=True):
        with pytest.raises(DomainError):
            log(0.0)

        with pytest.raises(DomainError):
            log(Dual.constant(-1.0, 1))

        assert log(1.0) == 0.0


def test_strict_pow():
    with localcontext(strict=True):
        with pytest.raises(DomainError):
            pow(-8.0, 1 / 3)

        assert pow(-2.0, 3) == -8.0

        x, y = Dual.variable(-2.0, 2.0)

        with pytest.raises(DomainError):
            pow(x, y)


def test_domain_error_is_value_error():
    assert issubclass(DomainError, ValueError)


def test_threads_have_own_context():
    result = []

    def run():
        with localcontext(strict=True):
            result.append(getcontext().strict)

    before = getcontext()
    thread = threading.Thread(target=run)
    thread.start()
    thread.join()

    assert result == [True]
    assert getcontext() is before
    assert not before.strict
