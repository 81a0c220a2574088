# ad/operator.py
"""
Operators: functions from functions to functions, with an algebra.

    (D + D)(f)     = D(f) + D(f)
    (c * D)(f)     = c * D(f)
    (D * D)(f)     = D(D(f))          composition
    (D * g)(f)     = D(g * f)
    (g * D)(f)     = g * D(f)
    (D + c)(f)     = D(f) + c * f
    (D ** n)(f)    = D(D(...D(f)))
    exp(op)(f)     = Σ_k op^k(f) / k!, truncated (see ADConfig.operator_exp_order)

Sums and products of functions are pointwise, through the generic operations.
"""
import math
from fractions import Fraction
from typing import Callable, Optional

from .config import get_config
from .core.derivative import derivative
from .ops import arithmetic, transcendental
from .ops.arithmetic import add, add_n, mul, neg, sub


class Operator:
    """
    A named function-to-function map.

    Attributes
    ----------
    fn : Callable
        Applied to the operand function.
    name : str
        Shown in repr and in the names of composed operators.
    """

    # numpy scalars defer to our reflected methods
    __array_ufunc__ = None

    def __init__(self, fn: Callable, name: Optional[str] = None):
        self.fn = fn
        self.name = name or getattr(fn, "__name__", "op")
        self.__name__ = self.name

    def __call__(self, f):
        return self.fn(f)

    def __repr__(self):
        return f"Operator({self.name})"

    # ---------------- sums ---------------- #
    def __add__(self, other):
        other = _as_operator(other)
        return Operator(lambda f: add(self(f), other(f)), f"({self.name} + {other.name})")

    def __radd__(self, other):
        return _as_operator(other) + self

    def __sub__(self, other):
        other = _as_operator(other)
        return Operator(lambda f: sub(self(f), other(f)), f"({self.name} - {other.name})")

    def __rsub__(self, other):
        return _as_operator(other) - self

    def __neg__(self):
        return Operator(lambda f: neg(self(f)), f"-{self.name}")

    # ---------------- products ---------------- #
    def __mul__(self, other):
        if isinstance(other, Operator):
            return Operator(lambda f: self(other(f)), f"{self.name}*{other.name}")
        return Operator(lambda f: self(mul(other, f)), f"{self.name}*{_name(other)}")

    def __rmul__(self, other):
        return Operator(lambda f: mul(other, self(f)), f"{_name(other)}*{self.name}")

    def __pow__(self, n):
        if not isinstance(n, int) or isinstance(n, bool):
            return NotImplemented
        if n < 0:
            raise ValueError(f"operator power must be >= 0, got {n}")
        if n == 0:
            return identity
        out = self
        for _ in range(n - 1):
            out = out * self
        return Operator(out.fn, f"{self.name}**{n}")

    def exp(self, order: Optional[int] = None) -> "Operator":
        """
        Truncated exponential series ``Σ_{k < order} self^k / k!``.

        Args:
            order: Number of series terms (defaults to
                ``get_config().operator_exp_order``)
        """
        if order is None:
            order = get_config().operator_exp_order
        powers = [self ** k for k in range(order)]

        def apply(f):
            return add_n(*[mul(Fraction(1, math.factorial(k)), p(f))
                           for k, p in enumerate(powers)])
        return Operator(apply, f"exp({self.name})")


def _name(x) -> str:
    return getattr(x, "__name__", repr(x))


def _as_operator(x) -> Operator:
    """Operators pass through; anything else c becomes c times the identity."""
    if isinstance(x, Operator):
        return x
    return Operator(lambda f: mul(x, f), repr(x))


identity = Operator(lambda f: f, "I")
D = Operator(derivative, "D")


def partial(*selectors) -> Operator:
    """
    Partial derivative operator. ``partial(1)(f)(x, y)`` is ∂f/∂y; further
    selectors index into the chosen argument, ``partial(0, "a")(f)(d)`` is
    ∂f/∂d["a"].
    """
    if not selectors:
        raise ValueError("partial() needs at least one selector")
    return Operator(lambda f: derivative(f, *selectors),
                    f"partial({', '.join(map(repr, selectors))})")


# Generic operations on operators use the operator algebra, not pointwise lifting
arithmetic.add.def_type_impl(Operator)(lambda a, b: _as_operator(a) + b)
arithmetic.sub.def_type_impl(Operator)(lambda a, b: _as_operator(a) - b)
arithmetic.neg.def_type_impl(Operator)(lambda a: -a)
transcendental.exp.def_type_impl(Operator)(lambda op: op.exp())


@arithmetic.mul.def_type_impl(Operator)
def _mul_operator(a, b):
    if isinstance(a, Operator):
        return a * b
    return b.__rmul__(a)


@arithmetic.pow.def_type_impl(Operator)
def _pow_operator(a, n):
    return a ** n
