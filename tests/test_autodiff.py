import math

import pytest

from dualexpr import function as dxf
from dualexpr.autodiff import autodiff


@pytest.mark.parametrize("lazy", [False, True])
def test_deriv(lazy):
    deriv = autodiff.deriv(lambda x: (x + dxf.exp(x**2)) / x, lazy=lazy)
    expected = math.exp(1.96) * (2 * 1.96 - 1) / 1.96
    assert pytest.approx(deriv(1.4), 1e-9) == expected


@pytest.mark.parametrize("lazy", [False, True])
def test_grad(lazy):
    grad = autodiff.grad(dxf.pow, lazy=lazy)
    assert pytest.approx(grad(4.5, -2.2), 1e-5) == (-0.0178707, 0.0549797)

    grad = autodiff.grad(lambda x, y: dxf.exp(y / x) + 2, lazy=lazy)
    assert pytest.approx(grad(1.2, 3.5), 1e-5) == (-44.9157, 15.3997)


@pytest.mark.parametrize("lazy", [False, True])
def test_value_and_grad(lazy):
    fun = autodiff.value_and_grad(lambda a, b, c: a * b * c, lazy=lazy)
    value, grad = fun(1.0, 2.0, 3.0)
    assert value == 6.0
    assert grad == (6.0, 3.0, 2.0)


@pytest.mark.parametrize("lazy", [False, True])
def test_jacobian(lazy):
    jacobian = autodiff.jacobian(
        lambda x, y: (dxf.exp(x * y), x**2 - dxf.log(y)), lazy=lazy
    )
    matrix = jacobian(2.0, 3.0)
    assert pytest.approx(matrix[0], 1e-9) == (3 * math.exp(6), 2 * math.exp(6))
    assert pytest.approx(matrix[1], 1e-9) == (4.0, -1 / 3)


def test_constant_function():
    assert autodiff.grad(lambda x, y: 5.0)(1.0, 2.0) == (0.0, 0.0)
    assert autodiff.grad(lambda x, y: 5.0, lazy=True)(1.0, 2.0) == (0.0, 0.0)


@pytest.mark.parametrize("lazy", [False, True])
def test_grad_through_quotient_and_logarithm(lazy):
    grad = autodiff.grad(lambda x, y: dxf.log(x / y) * y, lazy=lazy)
    dx, dy = grad(6.0, 2.0)
    assert dx == pytest.approx(1 / 3)
    assert dy == pytest.approx(math.log(3.0) - 1.0)

    grad = autodiff.grad(lambda x, y: 1.0 / (x * x + dxf.sqrt(y)), lazy=lazy)
    dx, dy = grad(1.0, 4.0)
    assert dx == pytest.approx(-2 / 9)
    assert dy == pytest.approx(-1 / 36)
