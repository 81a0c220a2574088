# ad/core/seeds.py

#-----------------------------------------------------------------------------
# We "plant" a seed (dx/dx = 1) on one input at a time and read the tangent
# off the output; every input gets its own tag.
#-----------------------------------------------------------------------------
from __future__ import annotations
from typing import Any, Callable, Dict, Iterable, List
import numpy as np

from .differential import Differential, primal_part
from .derivative import derivative


def value(x: Any) -> Any:
    """Return the primal value of `x`; containers are mapped, plain values pass through."""
    if isinstance(x, Differential):
        return primal_part(x)
    if isinstance(x, list):
        return [value(v) for v in x]
    if isinstance(x, tuple):
        items = [value(v) for v in x]
        return type(x)._make(items) if hasattr(x, "_fields") else tuple(items)
    if isinstance(x, dict):
        return {k: value(v) for k, v in x.items()}
    if isinstance(x, np.ndarray) and x.dtype == object:
        out = np.empty(x.shape, dtype=object)
        for idx in np.ndindex(x.shape):
            out[idx] = value(x[idx])
        return out
    return x


# ----------------------------- single-input grad ----------------------------- #
def grad(f: Callable, x0: Any) -> Any:
    """
    Derivative of y=f(x) at x0 (single input). For an array or container x0 the
    result has the same shape, one forward pass per entry.
    """
    return derivative(f)(x0)


# ----------------------------- multi-input grads ----------------------------- #
def grads(f: Callable[[Dict[str, Any]], Any], inputs: Dict[str, Any]) -> Dict[str, Any]:
    """
    Gradient of y=f(vars) w.r.t. ALL inputs (dict form).

    Parameters
    ----------
    f       : function taking a dict {name: value} and returning a scalar
    inputs  : dict {name: numeric}

    Returns
    -------
    dict {name: numeric}  # gradients in the same key order as `inputs`
    """
    return derivative(f)(dict(inputs))


def grads_list(f: Callable[[List[Any]], Any], x0_list: Iterable[Any]) -> List[Any]:
    """
    Same as grads(), but the inputs are provided as a list and the result is a list
    of partials in the same order.

    Example
    -------
    f = lambda xs: xs[0]*xs[0] + 3*xs[1]
    grads_list(f, [2.0, 4.0]) -> [4.0, 3.0]
    """
    return derivative(f)(list(x0_list))


def hvp(f: Callable[[Dict[str, Any]], Any], inputs: Dict[str, Any], v: Dict[str, Any]) -> np.ndarray:
    """
    Hessian-vector product (H·v) for a scalar-output function y = f(vars).

    The gradient is differentiated along `v`: ``d/dt grads(f, inputs + t·v)``
    at t = 0, one derivative nested in another.

    Returns
    -------
    np.ndarray with components of H·v in the order of `inputs.keys()`.
    """
    from ..ops.arithmetic import add, mul
    keys = list(inputs.keys())

    def grad_along(t):
        shifted = {k: add(inputs[k], mul(t, v.get(k, 0))) for k in keys}
        return grads(f, shifted)

    hv = derivative(grad_along)(0)
    return np.array([hv[k] for k in keys])
