import copy
import math
import operator

import numpy as np
import pytest

from dualexpr import DimensionMismatch, Dual, IndexOutOfRange


def test_constant():
    x = Dual.constant(2.5, 3)
    assert x.value() == 2.5
    assert x.dimension == 3
    assert x.gradient.tolist() == [0.0, 0.0, 0.0]


def test_diff_resets_gradient():
    x = Dual(4.0, [2.0, -3.0, 7.0])
    assert x.diff(1) is x
    assert x.gradient.tolist() == [0.0, 1.0, 0.0]

    x.diff(2)
    assert x.gradient.tolist() == [0.0, 0.0, 1.0]


def test_index_out_of_range():
    x = Dual.constant(1.0, 3)

    with pytest.raises(IndexOutOfRange):
        x.diff(3)

    with pytest.raises(IndexOutOfRange):
        x.diff(-1)

    with pytest.raises(IndexOutOfRange):
        x.derivative(3)

    with pytest.raises(IndexOutOfRange):
        x.set_derivative(-1, 1.0)

    with pytest.raises(TypeError):
        x.derivative(1.0)  # type: ignore


def test_accessors():
    x = Dual.constant(1.0, 2)
    x.set_value(3.0)
    x.set_derivative(1, 5.0)
    assert x.value() == 3.0
    assert x.derivative(0) == 0.0
    assert x.derivative(1) == 5.0

    with pytest.raises(ValueError):
        x.gradient[0] = 1.0


def test_copy_is_independent():
    x, _ = Dual.variable(1.0, 2.0)
    y = copy.copy(x)
    y.diff(1)
    assert x.gradient.tolist() == [1.0, 0.0]
    assert y == Dual(1.0, [0.0, 1.0])


def test_linearity():
    a, b = Dual.variable(1.5, -2.0)
    a.set_derivative(1, 0.25)

    for i in range(2):
        assert (a + b).derivative(i) == a.derivative(i) + b.derivative(i)
        assert (a - b).derivative(i) == a.derivative(i) - b.derivative(i)


def test_product_rule():
    a = Dual.constant(2.0, 2).diff(0)
    b = Dual.constant(3.0, 2).diff(1)
    c = a * b
    assert c.value() == 6.0
    assert c.derivative(0) == 3.0
    assert c.derivative(1) == 2.0


def test_quotient_rule():
    a, _, c = Dual.variable(1.0, 2.0, 3.0)
    h = a / c
    assert h.value() == pytest.approx(1 / 3)
    assert h.derivative(0) == pytest.approx(1 / 3)
    assert h.derivative(1) == 0.0
    assert h.derivative(2) == pytest.approx(-1 / 9)


def test_negation():
    a, b, c = Dual.variable(1.0, 2.0, 3.0)
    g = -a - b - c
    assert g.value() == -6.0
    assert g.gradient.tolist() == [-1.0, -1.0, -1.0]
    assert (+a) == a and (+a) is not a


def test_scalar_operands():
    (x,) = Dual.variable(2.0)
    assert (x + 1).value() == 3.0
    assert (1 + x).derivative(0) == 1.0
    assert (x - 5).derivative(0) == 1.0
    assert (5 - x).value() == 3.0
    assert (5 - x).derivative(0) == -1.0
    assert (3 * x).derivative(0) == 3.0
    assert (x * np.float64(3.0)).value() == 6.0
    assert (x / 4).derivative(0) == 0.25
    assert (4 / x).value() == 2.0
    assert (4 / x).derivative(0) == -1.0


def test_scaled_expression():
    a, b, c = Dual.variable(1.0, 2.0, 3.0)
    j = 2.0 * (a + b - c) / 4.0
    assert j.value() == 0.0
    assert j.gradient.tolist() == [0.5, 0.5, -0.5]


def test_pow_operator():
    (x,) = Dual.variable(2.0)
    y = x**3
    assert y.value() == 8.0
    assert y.derivative(0) == pytest.approx(12.0)

    z = 2**x
    assert z.value() == pytest.approx(4.0)
    assert z.derivative(0) == pytest.approx(4.0 * math.log(2.0))


def test_compound_assignment_returns_receiver():
    a, b = Dual.variable(2.0, 3.0)
    x = a.copy()

    for op, rhs in [
        (x.__iadd__, b),
        (x.__isub__, b),
        (x.__imul__, b),
        (x.__itruediv__, b),
        (x.__iadd__, 1.0),
        (x.__isub__, 1.0),
        (x.__imul__, 2.0),
        (x.__itruediv__, 2.0),
    ]:
        assert op(rhs) is x


def test_inplace_multiply_uses_previous_value():
    a, b = Dual.variable(2.0, 3.0)
    ref = a
    a *= b
    assert a is ref
    assert a.value() == 6.0
    assert a.gradient.tolist() == [3.0, 2.0]

    a /= b
    assert a.value() == pytest.approx(2.0)
    assert a.gradient.tolist() == pytest.approx([1.0, 0.0])


def test_inplace_with_itself():
    (x,) = Dual.variable(3.0)
    x *= x
    assert x.value() == 9.0
    assert x.derivative(0) == 6.0

    x /= x
    assert x.value() == 1.0
    assert x.derivative(0) == 0.0


def test_inplace_scalar():
    (x,) = Dual.variable(3.0)
    x += 1.0
    x *= 2.0
    x -= 3.0
    x /= 5.0
    assert x.value() == 1.0
    assert x.derivative(0) == pytest.approx(0.4)


@pytest.mark.parametrize(
    "op",
    [
        operator.add,
        operator.sub,
        operator.mul,
        operator.truediv,
        operator.iadd,
        operator.isub,
        operator.imul,
        operator.itruediv,
    ],
)
def test_dimension_mismatch(op):
    with pytest.raises(DimensionMismatch):
        op(Dual.constant(1.0, 2), Dual.constant(1.0, 3))


def test_invalid_construction():
    with pytest.raises(ValueError):
        Dual(1.0, [])

    with pytest.raises(ValueError):
        Dual(1.0, [[1.0]])

    with pytest.raises(TypeError):
        Dual("1.0", [0.0])  # type: ignore

    with pytest.raises(ValueError):
        Dual.constant(1.0, 0)

    with pytest.raises(ValueError):
        Dual.variable()


def test_unsupported_operand():
    x = Dual.constant(1.0, 1)

    with pytest.raises(TypeError):
        x + "a"  # type: ignore

    with pytest.raises(TypeError):
        hash(x)


def test_division_by_zero_follows_ieee():
    (x,) = Dual.variable(1.0)
    y = x / 0.0
    assert y.value() == math.inf
    assert y.derivative(0) == math.inf

    z = 1.0 / (x - 1.0)
    assert z.value() == math.inf
    assert z.derivative(0) == -math.inf


def test_subclassing_forbidden():
    with pytest.raises(RuntimeError):

        class _Derived(Dual):  # type: ignore
            pass


def test_repr():
    x = Dual(1.0, [0.0, 1.0])
    assert repr(x) == "Dual(value=1.0, gradient=[0.0, 1.0])"
    assert str(x) == "1.0 [0.0, 1.0]"
