# ad/ops/transcendental.py
from fractions import Fraction

import numpy as np
import sympy

from ..core.primitive import Primitive, defjvp, register_ufunc
from .arithmetic import add, div, invert, mul, neg, square, sub


def _numeric(np_fn):
    """numpy implementation; Fractions (from exact Taylor coefficients) go through float."""
    def impl(*xs):
        return np_fn(*[float(x) if isinstance(x, Fraction) else x for x in xs])
    impl.__name__ = np_fn.__name__
    return impl


exp = Primitive("exp", _numeric(np.exp), sympy.exp)
log = Primitive("log", _numeric(np.log), sympy.log)
sqrt = Primitive("sqrt", _numeric(np.sqrt), sympy.sqrt)
sin = Primitive("sin", _numeric(np.sin), sympy.sin)
cos = Primitive("cos", _numeric(np.cos), sympy.cos)
tan = Primitive("tan", _numeric(np.tan), sympy.tan)
asin = Primitive("asin", _numeric(np.arcsin), sympy.asin)
acos = Primitive("acos", _numeric(np.arccos), sympy.acos)
sinh = Primitive("sinh", _numeric(np.sinh), sympy.sinh)
cosh = Primitive("cosh", _numeric(np.cosh), sympy.cosh)
tanh = Primitive("tanh", _numeric(np.tanh), sympy.tanh)


def _atan_impl(y, x=None):
    if x is None:
        return np.arctan(float(y) if isinstance(y, Fraction) else y)
    return np.arctan2(*[float(v) if isinstance(v, Fraction) else v for v in (y, x)])


def _atan_symbolic(y, x=None):
    return sympy.atan(y) if x is None else sympy.atan2(y, x)


# atan(y) or atan(y, x) = angle of the point (x, y)
atan = Primitive("atan", _atan_impl, _atan_symbolic)

defjvp(exp, lambda x: exp(x))
defjvp(log, lambda x: invert(x))
defjvp(sqrt, lambda x: invert(mul(2, sqrt(x))))
defjvp(sin, lambda x: cos(x))
defjvp(cos, lambda x: neg(sin(x)))
defjvp(tan, lambda x: invert(square(cos(x))))
defjvp(asin, lambda x: invert(sqrt(sub(1, square(x)))))
defjvp(acos, lambda x: neg(invert(sqrt(sub(1, square(x))))))
defjvp(sinh, lambda x: cosh(x))
defjvp(cosh, lambda x: sinh(x))
defjvp(tanh, lambda x: sub(1, square(tanh(x))))


def _datan_dy(y, x=None):
    if x is None:
        return invert(add(1, square(y)))
    return div(x, add(square(x), square(y)))


def _datan_dx(y, x):
    return neg(div(y, add(square(x), square(y))))


defjvp(atan, _datan_dy, _datan_dx)

for _ufunc, _prim in [(np.exp, exp), (np.log, log), (np.sqrt, sqrt), (np.sin, sin),
                      (np.cos, cos), (np.tan, tan), (np.arcsin, asin), (np.arccos, acos),
                      (np.arctan, atan), (np.arctan2, atan), (np.sinh, sinh),
                      (np.cosh, cosh), (np.tanh, tanh)]:
    register_ufunc(_ufunc, _prim)
