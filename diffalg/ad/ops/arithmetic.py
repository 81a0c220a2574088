# ad/ops/arithmetic.py
import builtins
import operator
from functools import reduce

import numpy as np
import sympy

from ..core.differential import (Differential, collapse, d_add, d_mul, d_neg,
                                 is_zero, primal_part)
from ..core.primitive import Primitive, defjvp, defjvp_rule, register_ufunc

add = Primitive("add", operator.add)
sub = Primitive("sub", operator.sub)
mul = Primitive("mul", operator.mul)
div = Primitive("div", operator.truediv)
neg = Primitive("neg", operator.neg)
pow = Primitive("pow", operator.pow)
invert = Primitive("invert", lambda x: 1 / x)
square = Primitive("square", lambda x: x * x)
cube = Primitive("cube", lambda x: x * x * x)
abs = Primitive("abs", np.abs, builtins.abs)


def _negated(x):
    return d_neg(x) if isinstance(x, Differential) else neg(x)


# Linear operations act on all tags at once through the term algebra.
defjvp_rule(add, lambda a, b: collapse(d_add(a, b)))
defjvp_rule(sub, lambda a, b: collapse(d_add(a, _negated(b))))
defjvp_rule(mul, lambda a, b: collapse(d_mul(a, b)))
defjvp_rule(neg, lambda a: collapse(d_neg(a)))
defjvp_rule(square, lambda x: mul(x, x))
defjvp_rule(cube, lambda x: mul(x, mul(x, x)))

# d(x/y) = dx/y - x dy/y^2
defjvp(div,
       lambda x, y: invert(y),
       lambda x, y: neg(div(x, square(y))))

defjvp(invert, lambda x: neg(invert(square(x))))


def _dpow_dx(x, y):
    # y * x^(y-1); exponent 0 contributes nothing (and avoids 0**-1)
    if is_zero(y):
        return 0
    return mul(y, pow(x, sub(y, 1)))


def _dpow_dy(x, y):
    from .transcendental import log
    return mul(log(x), pow(x, y))


defjvp(pow, _dpow_dx, _dpow_dy)


def _sign(x):
    p = primal_part(x)
    if isinstance(p, np.ndarray):
        return np.sign(p)
    if isinstance(p, sympy.Basic):
        return sympy.sign(p)
    return (p > 0) - (p < 0)


# |x| is not differentiable at 0; the subgradient 0 is used there.
defjvp(abs, _sign)


def _bin_add(a, b):
    if _is_exact_zero(a):
        return b
    if _is_exact_zero(b):
        return a
    return add(a, b)


def _bin_mul(a, b):
    if _is_exact_one(a):
        return b
    if _is_exact_one(b):
        return a
    return mul(a, b)


def add_n(*xs):
    """Variadic sum; an exact 0 is skipped so functions and arrays keep their type."""
    return reduce(_bin_add, xs, 0)


def mul_n(*xs):
    """Variadic product with 1 as identity."""
    return reduce(_bin_mul, xs, 1)


def _is_exact_zero(x):
    return isinstance(x, int) and not isinstance(x, bool) and x == 0


def _is_exact_one(x):
    return isinstance(x, int) and not isinstance(x, bool) and x == 1


for _ufunc, _prim in [(np.add, add), (np.subtract, sub), (np.multiply, mul),
                      (np.true_divide, div), (np.negative, neg), (np.power, pow),
                      (np.reciprocal, invert), (np.square, square), (np.absolute, abs)]:
    register_ufunc(_ufunc, _prim)

# Comparisons look only at primal parts
for _ufunc, _cmp in [(np.less, operator.lt), (np.less_equal, operator.le),
                     (np.greater, operator.gt), (np.greater_equal, operator.ge),
                     (np.equal, operator.eq), (np.not_equal, operator.ne)]:
    register_ufunc(_ufunc, lambda a, b, _cmp=_cmp: _cmp(primal_part(a), primal_part(b)))
