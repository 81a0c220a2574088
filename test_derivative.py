"""
Derivative operator: algebraic laws, containers, selectors and the
perturbation-confusion regressions.
"""

import math
from collections import namedtuple

import numpy as np
import pytest
from hypothesis import given, settings, strategies as st

from diffalg import (D, InvalidSelector, add, derivative, exp, mul, partial, sin, cos)

finite = st.floats(min_value=-5.0, max_value=5.0, allow_nan=False, allow_infinity=False)


@settings(max_examples=50, deadline=None)
@given(x=finite, a=finite, b=finite)
def test_linearity(x, a, b):
    got = D(lambda v: a * sin(v) + b * exp(v))(x)
    assert got == pytest.approx(a * math.cos(x) + b * math.exp(x), abs=1e-9)


@settings(max_examples=50, deadline=None)
@given(x=finite)
def test_product_rule(x):
    got = D(lambda v: v * sin(v))(x)
    assert got == pytest.approx(sin(x) + x * cos(x), abs=1e-9)


@settings(max_examples=50, deadline=None)
@given(x=finite)
def test_chain_rule(x):
    got = D(lambda v: sin(exp(v)))(x)
    assert got == pytest.approx(math.cos(math.exp(x)) * math.exp(x), rel=1e-9, abs=1e-9)


def test_constant_has_structural_zero_derivative():
    assert D(lambda x: 5.0)(2.0) == 0
    np.testing.assert_array_equal(D(lambda x: np.ones(3))(1.0), np.zeros(3))
    assert D(lambda x: [1, (2, 3)])(0.0) == [0, (0, 0)]
    assert D(lambda *xs: 0)(1.0) == 0


def test_mixed_partials_commute():
    def f(x, y):
        return x * x * y + sin(x * y)

    dxy = partial(0)(partial(1)(f))(0.7, 1.3)
    dyx = partial(1)(partial(0)(f))(0.7, 1.3)
    assert dxy == pytest.approx(dyx)
    expected = 2 * 0.7 + math.cos(0.91) - 0.91 * math.sin(0.91)
    assert dxy == pytest.approx(expected)


def test_multiple_arguments_give_tuple_of_partials():
    assert D(lambda x, y: x * y)(2.0, 3.0) == (3.0, 2.0)


def test_second_derivative_of_several_arguments_is_nested():
    def f(x, y, z):
        return x * x * y + y * y * z + z * z * x

    H = (D ** 2)(f)(1.0, 2.0, 3.0)
    assert H == ((4.0, 2.0, 6.0), (2.0, 6.0, 4.0), (6.0, 4.0, 2.0))


def test_container_argument_gives_same_shaped_partials():
    assert D(lambda v: v[0] * v[1])([2.0, 3.0]) == [3.0, 2.0]
    assert D(lambda d: d["a"] * d["b"])({"a": 2.0, "b": 5.0}) == {"a": 5.0, "b": 2.0}
    Point = namedtuple("Point", "x y")
    g = D(lambda p: p.x * p.x + p.y)(Point(3.0, 1.0))
    assert g == Point(6.0, 1) and isinstance(g, Point)
    np.testing.assert_allclose(D(lambda v: np.sum(v * v))(np.array([1.0, 2.0])), [2.0, 4.0])


def test_container_result_gives_jacobian_rows():
    J = D(lambda v: [v[0] * v[1], v[0] + v[1]])([2.0, 3.0])
    assert J == [[3.0, 1.0], [2.0, 1.0]]


def test_partial_selectors():
    def f(xs, ys):
        return xs[0] * ys[1] + xs[1]

    args = ([2.0, 3.0], [5.0, 7.0])
    assert partial(0, 0)(f)(*args) == 7.0
    assert partial(0, 1)(f)(*args) == 1.0
    assert partial(1, 1)(f)(*args) == 2.0
    assert partial(1)(f)(*args) == [0, 2.0]
    assert derivative(f, 1, 0)(*args) == 0


@pytest.mark.parametrize("selectors", [(0, 5), (2,), (0, 0, 0), (1, "k")])
def test_invalid_selector(selectors):
    def f(xs, ys):
        return xs[0] * ys[1]

    with pytest.raises(InvalidSelector):
        partial(*selectors)(f)([2.0, 3.0], [5.0, 7.0])
    with pytest.raises(ValueError):
        partial(*selectors)(f)([2.0, 3.0], [5.0, 7.0])


def test_errors_from_f_surface_on_application():
    df = D(lambda x, y: x * y)
    with pytest.raises(TypeError):
        df(1.0)


# ---------------- perturbation confusion ---------------- #
def shift(offset):
    return lambda g: lambda a: g(a + offset)


def test_shift_single_nesting():
    f_hat = D(shift)(3)
    assert f_hat(exp)(5) == pytest.approx(np.exp(8))
    assert D(shift)(3.0)(exp)(5) == pytest.approx(2980.957987, abs=1e-6)


def test_shift_double_nesting():
    f_hat = D(shift)(3)
    assert f_hat(f_hat(exp))(5) == pytest.approx(np.exp(11))


def test_function_pair_extraction_versus_continuation():
    def f(x):
        return (lambda y: x * y, lambda g: g(x))

    e1, e2 = D(f)(3.0)
    assert e1(10.0) == 10.0
    assert e2(sin) == pytest.approx(math.cos(3.0))
    # combining after extraction
    assert e2(e1) == 1
    # combining inside the differentiated function
    assert D(lambda x: f(x)[1](f(x)[0]))(3.0) == pytest.approx(6.0)


def test_function_valued_derivative():
    assert D(lambda x: lambda y: x * y)(3.0)(5.0) == 5.0
    assert D(lambda x: lambda y: sin(x * y))(0.5)(2.0) == pytest.approx(2.0 * math.cos(1.0))


def test_variation_of_a_path_functional():
    def q(t):
        return t * t

    def eta(t):
        return 1.0 + t

    def F(path):
        return lambda t: sin(path(t))

    def variation(functional):
        return lambda path: D(lambda eps: functional(add(path, mul(eps, eta))))(0)

    dFq = variation(F)(q)
    assert dFq(0.5) == pytest.approx(eta(0.5) * math.cos(q(0.5)))
    assert variation(lambda path: path)(q)(0.5) == pytest.approx(eta(0.5))


# ---------------- function-valued results built by generic arithmetic ---------------- #
def test_differential_times_closure_is_extracted_as_a_function():
    df = D(lambda x: mul(x, lambda y: x * y))(3.0)
    assert callable(df)
    assert df(5.0) == pytest.approx(30.0)


def test_differential_plus_primitive_is_extracted_as_a_function():
    df = D(lambda x: add(x, sin))(3.0)
    assert callable(df)
    assert df(0.5) == 1


def test_second_derivative_of_function_valued_results():
    assert D(D(lambda x: mul(x, lambda y: x * y)))(3.0)(5.0) == pytest.approx(10.0)
    assert D(D(lambda x: add(x, sin)))(3.0)(0.5) == 0
    assert D(D(lambda x: mul(x, lambda y: sin(x * y))))(0.0)(2.0) == pytest.approx(4.0)


# ---------------- keyword arguments ---------------- #
def test_keyword_arguments_reach_f_undifferentiated():
    assert D(lambda x, scale=1.0: x * x * scale)(3.0, scale=2.0) == pytest.approx(12.0)


def test_keyword_arguments_reach_function_valued_results():
    df = D(lambda x: (lambda y, scale=1: x * y * scale))(3.0)
    assert df(5.0, scale=2) == pytest.approx(10.0)
    assert df(5.0) == pytest.approx(5.0)
