# ad/taylor.py
# Taylor coefficients and Hessians from nested forward derivatives

import math
import numpy as np
from typing import Any, Callable, Dict, List, Tuple

from .core.derivative import derivative
from .core.seeds import grads, value
from .ops.arithmetic import add, div, mul


def _shift(x, dx, t):
    """x + t·dx, entrywise for containers."""
    if isinstance(x, dict):
        return {k: _shift(x[k], dx.get(k, 0), t) for k in x}
    if isinstance(x, (list, tuple)):
        items = [_shift(a, b, t) for a, b in zip(x, dx)]
        if isinstance(x, list):
            return items
        return type(x)._make(items) if hasattr(x, "_fields") else tuple(items)
    return add(x, mul(t, dx))


def taylor_series_terms(f: Callable, x: Any, dx: Any, n: int) -> List[Any]:
    """
    First `n` Taylor terms of f along direction dx:
    g(t) = f(x + t·dx) = Σ_k g_k t^k,  g_k = g^(k)(0) / k!

    Args:
        f: Function of one argument (scalar, list/tuple/named tuple or dict)
        x: Expansion point
        dx: Direction, same shape as x
        n: Number of terms

    Returns:
        [g_0, g_1, ..., g_{n-1}]
    """
    def g(t):
        return f(_shift(x, dx, t))

    terms = []
    gk = g
    for k in range(n):
        terms.append(div(gk(0), math.factorial(k)))
        gk = derivative(gk)
    return terms


# ----- Main Hessian routine -----
def grad_hessian(f: Callable[[Dict[str, Any]], Any],
                 inputs: Dict[str, float]) -> Tuple[Dict[str, Any], np.ndarray, Any]:
    """
    Gradient and Hessian of a scalar function of named inputs.

    The Hessian is the derivative of the gradient dict taken over the same
    dict, so H[i, j] = ∂/∂k_i (∂f/∂k_j) is an exact mixed partial: one nested
    pass per (i, j) pair, no finite differences and no polarization.

    Returns:
        (grad_dict, H, f0) with H of shape (n, n) in the order of `inputs`
    """
    keys = list(inputs.keys())
    f0 = value(f(dict(inputs)))
    grad_dict = grads(f, inputs)
    rows = derivative(lambda v: grads(f, v))(dict(inputs))
    H = np.array([[rows[ki][kj] for kj in keys] for ki in keys], dtype=float)
    return grad_dict, H, f0


def hessian(f: Callable[[Dict[str, Any]], Any],
            inputs: Dict[str, float]) -> np.ndarray:
    """Hessian only (see grad_hessian)."""
    _, H, _ = grad_hessian(f, inputs)
    return H
