# ad/core/derivative.py
"""
Forward-mode derivatives by tagged perturbation.

``derivative(f)`` returns a function computing the derivative of `f`. Each
application mints a fresh tag, adds ``1·ε_tag`` to the argument being
differentiated, calls `f`, and pulls the ε_tag coefficient out of the result
with ``extract_tangent``. Nested derivatives mint later (larger) tags, so an
inner derivative never confuses its perturbation with an outer one.
"""
from __future__ import annotations
import logging
import numpy as np
from typing import Any, Callable, Sequence, Tuple

from ..errors import InvalidSelector
from .differential import bundle
from .perturbed import extract_tangent, rebuild_array
from .tags import fresh_tag

logger = logging.getLogger(__name__)


def derivative(f: Callable, *selectors) -> Callable:
    """
    Derivative of `f`, optionally with respect to one (nested) argument.

    Args:
        f: Function of one or more arguments
        *selectors: Empty for the full derivative. Otherwise the first
            selector is an argument index and later ones index into that
            argument (list/tuple position, dict key or array index)

    Returns:
        A function of the same arguments as `f`. With no selectors it returns
        the derivative for a single scalar argument, a same-shaped container
        of partials for a single container argument, and a tuple of partials
        (one per argument) for several arguments. Keyword arguments are
        passed to `f` unchanged and are not differentiated.

    Example:
        >>> derivative(lambda x: x * x * x)(2)
        12
        >>> derivative(lambda x, y: x * y, 1)(2, 5)
        2
    """
    def df(*args, **kwargs):
        if selectors:
            return _partials(f, args, tuple(selectors), kwargs)
        if len(args) == 1:
            return _partials(f, args, (0,), kwargs)
        return tuple(_partials(f, args, (i,), kwargs) for i in range(len(args)))

    df.__name__ = f"D({getattr(f, '__name__', 'f')})"
    return df


def nth_derivative(f: Callable, n: int) -> Callable:
    """The `n`-th derivative of a function of one argument (n = 0 gives `f`)."""
    if n < 0:
        raise ValueError(f"derivative order must be >= 0, got {n}")
    for _ in range(n):
        f = derivative(f)
    return f


# ---------------- internals ---------------- #
def _partials(f: Callable, args: tuple, path: Tuple, kwargs: dict) -> Any:
    """Partials of `f` w.r.t. the value at `path`, one per leaf if it is a container."""
    x = _get_path(args, path)
    if isinstance(x, (tuple, list)):
        items = [_partials(f, args, path + (i,), kwargs) for i in range(len(x))]
        if isinstance(x, list):
            return items
        return type(x)._make(items) if hasattr(x, "_fields") else tuple(items)
    if isinstance(x, dict):
        return {k: _partials(f, args, path + (k,), kwargs) for k in x}
    if isinstance(x, np.ndarray):
        return rebuild_array((_partials(f, args, path + (idx,), kwargs) for idx in np.ndindex(x.shape)),
                             x.shape)
    return _derivative_at(f, args, path, kwargs)


def _derivative_at(f: Callable, args: tuple, path: Tuple, kwargs: dict) -> Any:
    tag = fresh_tag()
    logger.debug("differentiating %s at %r with tag %d",
                 getattr(f, "__name__", f), path, tag)
    seeded = _update_path(args, path, lambda x: bundle(x, 1, tag))
    return extract_tangent(f(*seeded, **kwargs), tag)


def _get_in(x: Any, key: Any) -> Any:
    if isinstance(x, (tuple, list, dict, np.ndarray)):
        try:
            return x[key]
        except (IndexError, KeyError, TypeError) as e:
            raise InvalidSelector(f"selector {key!r} does not index {type(x).__name__}") from e
    raise InvalidSelector(f"selector {key!r} cannot index a {type(x).__name__} leaf")


def _get_path(x: Any, path: Sequence) -> Any:
    for key in path:
        x = _get_in(x, key)
    return x


def _update_path(x: Any, path: Sequence, fn: Callable) -> Any:
    """Copy of `x` with the value at `path` replaced by ``fn(value)``."""
    if not path:
        return fn(x)
    key, rest = path[0], path[1:]
    child = _update_path(_get_in(x, key), rest, fn)
    if isinstance(x, tuple):
        items = list(x)
        items[key] = child
        return type(x)._make(items) if hasattr(x, "_fields") else tuple(items)
    if isinstance(x, list):
        items = list(x)
        items[key] = child
        return items
    if isinstance(x, dict):
        out = dict(x)
        out[key] = child
        return out
    out = x.astype(object)
    out[key] = child
    return out
