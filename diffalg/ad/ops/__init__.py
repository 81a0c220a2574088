# ad/ops/__init__.py

# Importing the modules registers the derivative rules and numpy ufunc routes
from . import arithmetic
from . import transcendental
from . import special

# Convenience re-exports so users can do: from diffalg.ad.ops import mul, exp, ...
from .arithmetic import (add, sub, mul, div, neg, pow, invert, square, cube, abs,
                         add_n, mul_n)
from .transcendental import (exp, log, sqrt, sin, cos, tan, asin, acos, atan,
                             sinh, cosh, tanh)
from .special import erf, norm_pdf, norm_cdf

__all__ = [
    "add", "sub", "mul", "div", "neg", "pow", "invert", "square", "cube", "abs",
    "add_n", "mul_n",
    "exp", "log", "sqrt", "sin", "cos", "tan", "asin", "acos", "atan",
    "sinh", "cosh", "tanh",
    "erf", "norm_pdf", "norm_cdf",
]
