# ad/core/primitive.py
"""
Generic operations with pluggable derivative rules.

A ``Primitive`` is a callable generic function. Applied to ordinary values it
runs its implementation (numpy for numbers and arrays, sympy for symbolic
expressions, pointwise for callables). Applied to anything containing a
Differential it runs the derivative rule registered with ``defjvp`` or
``defjvp_rule``; a Differential reaching a primitive without a rule is a
configuration error and raises ``NoDifferentiationRule`` immediately.

Callables are lifted first: ``mul(x, g)`` with `x` a Differential is the
function ``y -> x * g(y)``, so a derivative returning it extracts a function.
"""
from __future__ import annotations
import logging
import numpy as np
import sympy
from typing import Any, Callable, Dict, Optional

from ..errors import NoDifferentiationRule
from .differential import (Differential, bundle, finite_part, is_zero,
                           max_order_tag, tangent_part)

logger = logging.getLogger(__name__)

# numpy ufunc -> generic callable, consulted by Differential.__array_ufunc__
ufunc_primitives: Dict[np.ufunc, Callable] = {}


def is_function(x: Any) -> bool:
    """Callables that behave as functions of values (not classes, not sympy atoms)."""
    return (callable(x)
            and not isinstance(x, (Differential, type, sympy.Basic)))


class Primitive:
    """
    A named generic operation.

    Attributes
    ----------
    name : str
        Operation name, used in error messages.
    impl : Callable
        Numeric implementation (numbers, numpy arrays).
    symbolic : Optional[Callable]
        Implementation used when any argument is a sympy expression. When
        None, `impl` is used (Python operators already handle sympy).
    jvp : Optional[Callable]
        Derivative rule applied when any argument is a Differential.
    """

    def __init__(self, name: str, impl: Callable, symbolic: Optional[Callable] = None):
        self.name = name
        self.__name__ = name
        self.impl = impl
        self.symbolic = symbolic
        self.jvp: Optional[Callable] = None
        self._type_impls: Dict[type, Callable] = {}

    def __repr__(self):
        return f"Primitive({self.name})"

    def def_impl(self, impl: Callable) -> Callable:
        self.impl = impl
        return impl

    def def_type_impl(self, type_: type):
        """
        Register an implementation used when an argument is an instance of
        `type_` (checked in argument order, most specific class first).
        """
        def register(impl: Callable) -> Callable:
            self._type_impls[type_] = impl
            return impl
        return register

    def _type_impl(self, args) -> Optional[Callable]:
        if not self._type_impls:
            return None
        for a in args:
            for cls in type(a).__mro__:
                impl = self._type_impls.get(cls)
                if impl is not None:
                    return impl
        return None

    def __call__(self, *args):
        impl = self._type_impl(args)
        if any(is_function(a) for a in args):
            # a Differential next to a callable stays a constant of the lifted function
            return impl(*args) if impl is not None else _pointwise(self, args)
        if any(isinstance(a, Differential) for a in args):
            if self.jvp is None:
                raise NoDifferentiationRule(self.name)
            return self.jvp(*args)
        if impl is not None:
            return impl(*args)
        if any(isinstance(a, np.ndarray) and a.dtype == object for a in args):
            return np.frompyfunc(self, len(args), 1)(*args)
        if self.symbolic is not None and any(isinstance(a, sympy.Basic) for a in args):
            return self.symbolic(*args)
        return self.impl(*args)


def _pointwise(prim: Primitive, args) -> Callable:
    """Lift `prim` over callables: ``(f op g)(x) = f(x) op g(x)``; constants pass through."""
    def fn(*xs, **kwargs):
        return prim(*[a(*xs, **kwargs) if is_function(a) else a for a in args])
    fn.__name__ = f"{prim.name}({', '.join(getattr(a, '__name__', repr(a)) for a in args)})"
    return fn


# ---------------- derivative rules ---------------- #
def defjvp(prim: Primitive, *partials: Optional[Callable]):
    """
    Register the standard chain rule for `prim`.

    ``partials[i](*primals)`` must return ∂prim/∂arg_i evaluated at the
    primals, written with generic operations (it may itself receive
    Differentials carrying other tags). ``None`` marks an argument the
    primitive does not depend on.

    Rule: split every argument on the highest tag t present,
    ``x_i = a_i + b_i ε_t``, then
    ``prim(x) = prim(a) + (Σ_i ∂_i prim(a) · b_i) ε_t``.
    """
    def rule(*args):
        from ..ops.arithmetic import add, mul
        tag = max_order_tag(*args)
        primals = [finite_part(a, tag) for a in args]
        out = prim(*primals)
        dx = None
        for partial, arg in zip(partials, args):
            t = tangent_part(arg, tag)
            if partial is None or is_zero(t):
                continue
            contrib = mul(partial(*primals), t)
            dx = contrib if dx is None else add(dx, contrib)
        if dx is None:
            return out
        return bundle(out, dx, tag)

    rule.__name__ = f"{prim.name}_jvp"
    prim.jvp = rule
    logger.debug("registered chain-rule jvp for %s", prim.name)
    return rule


def defjvp_rule(prim: Primitive, rule: Callable):
    """Register a custom rule receiving the raw (possibly Differential) arguments."""
    prim.jvp = rule
    logger.debug("registered custom jvp for %s", prim.name)
    return rule


def register_ufunc(ufunc: np.ufunc, fn: Callable):
    """Route `ufunc` applied to a Differential to the generic `fn`."""
    ufunc_primitives[ufunc] = fn
    return fn
