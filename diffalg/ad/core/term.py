# ad/core/term.py
from dataclasses import dataclass
from typing import Any, Iterable, Optional, Tuple

Tags = Tuple[int, ...]


@dataclass(frozen=True, eq=False)
class Term:
    """
    One monomial of a Differential: ``coefficient * ε_t1 * ε_t2 * ...``.

    Attributes
    ----------
    tags : Tuple[int, ...]
        Sorted, duplicate-free tuple of tags. The empty tuple marks the primal
        term.
    coefficient : Any
        Number, numpy array, sympy expression or callable. Never a
        Differential (construction flattens those) and never zero.
    """
    tags: Tags                         # canonical (sorted) tag tuple
    coefficient: Any                   # flexible type, see above


def canonical_tags(tags: Iterable[int]) -> Optional[Tags]:
    """Sort `tags`; None if a tag repeats (the monomial is zero since ε² = 0)."""
    out = tuple(sorted(tags))
    if any(a == b for a, b in zip(out, out[1:])):
        return None
    return out


def tag_union(a: Tags, b: Tags) -> Optional[Tags]:
    """Tags of the product of two monomials; None when they share a tag."""
    if not a:
        return b
    if not b:
        return a
    if set(a).intersection(b):
        return None
    return tuple(sorted(a + b))


def tag_remove(tags: Tags, tag: int) -> Tags:
    return tuple(t for t in tags if t != tag)


def tag_replace(tags: Tags, old: int, new: int) -> Optional[Tags]:
    """Rename `old` to `new`; None if `new` is already present."""
    if old not in tags:
        return tags
    return canonical_tags(new if t == old else t for t in tags)
