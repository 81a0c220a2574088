# ad/core/perturbed.py
"""
How derivative information moves through values other than Differentials.

Four generic functions make up the protocol:

    perturbed(v, tag)          does `v` carry `tag` anywhere
    insert_tag(v, tag)         `v` with a zero tangent at `tag` (no-op for leaves)
    replace_tag(v, old, new)   rename `old` to `new` throughout `v`
    extract_tangent(v, tag)    the part of `v` multiplied by ε_tag, same shape

Containers (tuples and named tuples, lists, dicts, numpy arrays) are rebuilt
with the same shape. Callables are wrapped so the operation happens on their
results, with the tag renamed in their arguments to keep an enclosing
derivative's perturbation apart from the one being extracted.

User types join by subclassing ``Perturbed`` or by registering with each
function, e.g. ``extract_tangent.register(MyType)``.
"""
from __future__ import annotations
import abc
import functools
import logging
import numbers
import numpy as np
from typing import Any, Iterable, Tuple

from .differential import Differential, bundle, has_tag, rename_tag, tangent_part
from .primitive import is_function
from .tags import fresh_tag

logger = logging.getLogger(__name__)


class Perturbed(abc.ABC):
    """Base class for user values that hold Differentials internally."""

    @abc.abstractmethod
    def perturbed(self, tag: int) -> bool:
        ...

    @abc.abstractmethod
    def replace_tag(self, old: int, new: int) -> "Perturbed":
        ...

    @abc.abstractmethod
    def extract_tangent(self, tag: int) -> Any:
        ...

    def insert_tag(self, tag: int) -> "Perturbed":
        return self


def _rebuild_tuple(v: tuple, items: Iterable) -> tuple:
    if hasattr(v, "_fields"):
        return type(v)._make(items)
    return tuple(items)


def rebuild_array(values: Iterable, shape: Tuple[int, ...]) -> np.ndarray:
    """
    Pack per-element results back into an array of `shape`.

    Numbers give a numeric array. Numeric arrays of one shape are stacked, so
    the result has shape ``shape + element.shape``. Anything else (sympy
    expressions, Differentials, callables) lands in an object array.
    """
    values = list(values)
    if all(isinstance(v, (numbers.Number, np.generic)) for v in values):
        return np.array(values).reshape(shape)
    if all(isinstance(v, np.ndarray) and v.dtype != object for v in values) \
            and len({v.shape for v in values}) == 1:
        return np.stack(values).reshape(shape + values[0].shape)
    out = np.empty(len(values), dtype=object)
    for i, v in enumerate(values):
        out[i] = v
    return out.reshape(shape)


# ---------------- perturbed ---------------- #
@functools.singledispatch
def perturbed(v: Any, tag: int) -> bool:
    """Whether `tag` occurs in `v`. Leaves and callables report False."""
    return False


@perturbed.register
def _(v: Differential, tag: int) -> bool:
    return has_tag(v, tag)


@perturbed.register(tuple)
@perturbed.register(list)
def _(v, tag: int) -> bool:
    return any(perturbed(x, tag) for x in v)


@perturbed.register
def _(v: dict, tag: int) -> bool:
    return any(perturbed(x, tag) for x in v.values())


@perturbed.register
def _(v: np.ndarray, tag: int) -> bool:
    return v.dtype == object and any(perturbed(x, tag) for x in v.flat)


@perturbed.register
def _(v: Perturbed, tag: int) -> bool:
    return v.perturbed(tag)


# ---------------- insert_tag ---------------- #
@functools.singledispatch
def insert_tag(v: Any, tag: int) -> Any:
    """
    Attach a zero tangent at `tag`; for leaves this is the leaf itself.

    Callables are wrapped so their results get the tag inserted, with the
    caller's `tag` renamed away from the arguments as in ``replace_tag``.
    """
    if is_function(v):
        return _insert_tag_fn(v, tag)
    return bundle(v, 0, tag)


@insert_tag.register
def _(v: tuple, tag: int) -> tuple:
    return _rebuild_tuple(v, (insert_tag(x, tag) for x in v))


@insert_tag.register
def _(v: list, tag: int) -> list:
    return [insert_tag(x, tag) for x in v]


@insert_tag.register
def _(v: dict, tag: int) -> dict:
    return {k: insert_tag(x, tag) for k, x in v.items()}


@insert_tag.register
def _(v: np.ndarray, tag: int) -> np.ndarray:
    if v.dtype != object:
        return v
    return rebuild_array((insert_tag(x, tag) for x in v.flat), v.shape)


@insert_tag.register
def _(v: Perturbed, tag: int):
    return v.insert_tag(tag)


# ---------------- replace_tag ---------------- #
@functools.singledispatch
def replace_tag(v: Any, old: int, new: int) -> Any:
    """Rename tag `old` to `new` throughout `v`; callables are wrapped."""
    if is_function(v):
        return _replace_tag_fn(v, old, new)
    return v


@replace_tag.register
def _(v: Differential, old: int, new: int):
    return rename_tag(v, old, new)


@replace_tag.register
def _(v: tuple, old: int, new: int) -> tuple:
    return _rebuild_tuple(v, (replace_tag(x, old, new) for x in v))


@replace_tag.register
def _(v: list, old: int, new: int) -> list:
    return [replace_tag(x, old, new) for x in v]


@replace_tag.register
def _(v: dict, old: int, new: int) -> dict:
    return {k: replace_tag(x, old, new) for k, x in v.items()}


@replace_tag.register
def _(v: np.ndarray, old: int, new: int) -> np.ndarray:
    if v.dtype != object:
        return v
    return rebuild_array((replace_tag(x, old, new) for x in v.flat), v.shape)


@replace_tag.register
def _(v: Perturbed, old: int, new: int):
    return v.replace_tag(old, new)


# ---------------- extract_tangent ---------------- #
@functools.singledispatch
def extract_tangent(v: Any, tag: int) -> Any:
    """
    Coefficient of ε_tag in `v`, with the shape of `v`.

    A leaf without the tag gives 0. A callable gives a callable computing the
    tangent of its result.
    """
    if is_function(v):
        return _extract_tangent_fn(v, tag)
    return 0


@extract_tangent.register
def _(v: Differential, tag: int):
    return tangent_part(v, tag)


@extract_tangent.register
def _(v: tuple, tag: int) -> tuple:
    return _rebuild_tuple(v, (extract_tangent(x, tag) for x in v))


@extract_tangent.register
def _(v: list, tag: int) -> list:
    return [extract_tangent(x, tag) for x in v]


@extract_tangent.register
def _(v: dict, tag: int) -> dict:
    return {k: extract_tangent(x, tag) for k, x in v.items()}


@extract_tangent.register
def _(v: np.ndarray, tag: int) -> np.ndarray:
    if v.dtype != object:
        return np.zeros_like(v)
    return rebuild_array((extract_tangent(x, tag) for x in v.flat), v.shape)


@extract_tangent.register
def _(v: Perturbed, tag: int):
    return v.extract_tangent(tag)


# ---------------- function-valued results ---------------- #
def _extract_tangent_fn(f, tag: int):
    """
    Tangent of a function-valued result, as a function.

    Each call mints a fresh tag and renames `tag` to it in the arguments, so a
    perturbation carried in by the caller under the same tag is not mistaken
    for the one being extracted; afterwards the fresh tag is renamed back.
    """
    @functools.wraps(f)
    def extracted(*args, **kwargs):
        fresh = fresh_tag()
        logger.debug("extracting tag %d from %s (guard tag %d)", tag,
                     getattr(f, "__name__", f), fresh)
        args = [replace_tag(a, tag, fresh) for a in args]
        kwargs = {k: replace_tag(a, tag, fresh) for k, a in kwargs.items()}
        out = extract_tangent(f(*args, **kwargs), tag)
        return replace_tag(out, fresh, tag)
    return extracted


def _replace_tag_fn(f, old: int, new: int):
    """`f` with `old` renamed to `new` in its results, guarding the caller's `old`."""
    @functools.wraps(f)
    def replaced(*args, **kwargs):
        fresh = fresh_tag()
        args = [replace_tag(a, old, fresh) for a in args]
        kwargs = {k: replace_tag(a, old, fresh) for k, a in kwargs.items()}
        out = replace_tag(f(*args, **kwargs), old, new)
        return replace_tag(out, fresh, old)
    return replaced


def _insert_tag_fn(f, tag: int):
    """`f` with a zero tangent at `tag` inserted into its results."""
    @functools.wraps(f)
    def inserted(*args, **kwargs):
        fresh = fresh_tag()
        args = [replace_tag(a, tag, fresh) for a in args]
        kwargs = {k: replace_tag(a, tag, fresh) for k, a in kwargs.items()}
        out = insert_tag(f(*args, **kwargs), tag)
        return replace_tag(out, fresh, tag)
    return inserted
