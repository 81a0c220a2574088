# ad/core/differential.py
from __future__ import annotations
import numbers
import numpy as np
import sympy
from typing import Any, Dict, Iterable, Optional, Tuple

from .term import Term, Tags, canonical_tags, tag_union, tag_remove, tag_replace


def is_zero(x: Any) -> bool:
    """
    Structural zero test used to drop terms.

    Only values that are certainly zero count: numbers equal to 0, numeric
    arrays with no nonzero entry, sympy expressions that compare equal to 0,
    and Differentials without terms. Callables are never zero.
    """
    if isinstance(x, Differential):
        return not x.terms
    if isinstance(x, np.ndarray):
        if x.dtype == object:
            return all(is_zero(v) for v in x.flat)
        return not np.any(x)
    if isinstance(x, (numbers.Number, np.generic)):
        return x == 0
    if isinstance(x, sympy.Basic):
        return x == 0
    return False


class Differential:
    """
    Generalized dual number: a finite sum of terms ``c * ε_t1 * ... * ε_tk``.

    Attributes
    ----------
    terms : Tuple[Term, ...]
        Canonical term tuple, sorted by tag tuple. The term with empty tags is
        the primal part; every other term carries derivative information for
        its tags. No zero coefficients, no repeated tag tuples, no
        Differential-valued coefficients.

    Ordering comparisons and ``==`` look only at the primal part, so host
    code can branch on a Differential. Use ``equiv`` to compare every term.
    """

    __slots__ = ("terms",)
    __array_priority__ = 1000  # ensures NumPy prefers Differential.__array_ufunc__

    def __init__(self, terms: Tuple[Term, ...] = ()):
        # Callers must pass canonical terms; use from_terms() otherwise.
        object.__setattr__(self, "terms", tuple(terms))

    def __setattr__(self, name, value):
        raise AttributeError("Differential is immutable")

    @classmethod
    def from_terms(cls, terms: Iterable) -> "Differential":
        """
        Build a canonical Differential from ``Term``s, ``(tags, coefficient)``
        pairs or a ``{tags: coefficient}`` mapping. Tags may be in any order;
        Differential coefficients are flattened into the result.
        """
        if isinstance(terms, dict):
            terms = terms.items()
        acc: Dict[Tags, Any] = {}
        for item in terms:
            tags, coef = (item.tags, item.coefficient) if isinstance(item, Term) else item
            _accumulate(acc, canonical_tags(tags), coef)
        return _from_acc(acc)

    @classmethod
    def monomial(cls, tag: int, coefficient: Any = 1) -> "Differential":
        """The single-term Differential ``coefficient * ε_tag``."""
        return cls.from_terms([((tag,), coefficient)])

    # ---------------- introspection ---------------- #
    @property
    def tags(self) -> Tags:
        """All tags appearing in any term, sorted."""
        seen = set()
        for term in self.terms:
            seen.update(term.tags)
        return tuple(sorted(seen))

    def coefficient(self, *tags: int) -> Any:
        """Coefficient of the monomial with exactly `tags` (0 when absent)."""
        key = canonical_tags(tags)
        for term in self.terms:
            if term.tags == key:
                return term.coefficient
        return 0

    def equiv(self, other: Any) -> bool:
        return equiv(self, other)

    def __repr__(self):
        if not self.terms:
            return "Differential(0)"
        parts = []
        for term in self.terms:
            eps = "*".join(f"ε{t}" for t in term.tags)
            parts.append(f"{term.coefficient!r}*{eps}" if eps else repr(term.coefficient))
        return f"Differential({' + '.join(parts)})"

    # ---------------- application ---------------- #
    def __call__(self, *args, **kwargs):
        """Apply callable coefficients: ``Σ c(*args) * ε...``; other coefficients are constants."""
        acc: Dict[Tags, Any] = {}
        for term in self.terms:
            coef = term.coefficient
            _accumulate(acc, term.tags, coef(*args, **kwargs) if callable(coef) else coef)
        return collapse(_from_acc(acc))

    # ---------------- control-flow comparisons (primal only) ---------------- #
    def __eq__(self, other):
        return primal_part(self) == primal_part(other)

    def __ne__(self, other):
        return primal_part(self) != primal_part(other)

    def __lt__(self, other):
        return primal_part(self) < primal_part(other)

    def __le__(self, other):
        return primal_part(self) <= primal_part(other)

    def __gt__(self, other):
        return primal_part(self) > primal_part(other)

    def __ge__(self, other):
        return primal_part(self) >= primal_part(other)

    def __bool__(self):
        return bool(primal_part(self))

    __hash__ = None

    # ---------------- operator overloading ---------------- #
    def __add__(self, other):
        from ..ops.arithmetic import add
        return add(self, other)

    def __radd__(self, other):
        from ..ops.arithmetic import add
        return add(other, self)

    def __sub__(self, other):
        from ..ops.arithmetic import sub
        return sub(self, other)

    def __rsub__(self, other):
        from ..ops.arithmetic import sub
        return sub(other, self)

    def __mul__(self, other):
        from ..ops.arithmetic import mul
        return mul(self, other)

    def __rmul__(self, other):
        from ..ops.arithmetic import mul
        return mul(other, self)

    def __truediv__(self, other):
        from ..ops.arithmetic import div
        return div(self, other)

    def __rtruediv__(self, other):
        from ..ops.arithmetic import div
        return div(other, self)

    def __neg__(self):
        from ..ops.arithmetic import neg
        return neg(self)

    def __pos__(self):
        return self

    def __pow__(self, other):
        from ..ops.arithmetic import pow
        return pow(self, other)

    def __rpow__(self, other):
        from ..ops.arithmetic import pow
        return pow(other, self)

    def __abs__(self):
        from ..ops.arithmetic import abs
        return abs(self)

    # NumPy calls these methods on elements of object arrays (np.sin(arr) -> x.sin())
    def exp(self):
        from ..ops.transcendental import exp
        return exp(self)

    def log(self):
        from ..ops.transcendental import log
        return log(self)

    def sqrt(self):
        from ..ops.transcendental import sqrt
        return sqrt(self)

    def sin(self):
        from ..ops.transcendental import sin
        return sin(self)

    def cos(self):
        from ..ops.transcendental import cos
        return cos(self)

    def tan(self):
        from ..ops.transcendental import tan
        return tan(self)

    def arcsin(self):
        from ..ops.transcendental import asin
        return asin(self)

    def arccos(self):
        from ..ops.transcendental import acos
        return acos(self)

    def arctan(self):
        from ..ops.transcendental import atan
        return atan(self)

    def sinh(self):
        from ..ops.transcendental import sinh
        return sinh(self)

    def cosh(self):
        from ..ops.transcendental import cosh
        return cosh(self)

    def tanh(self):
        from ..ops.transcendental import tanh
        return tanh(self)

    def __array_ufunc__(self, ufunc, method, *inputs, **kwargs):
        from .primitive import ufunc_primitives
        fn = ufunc_primitives.get(ufunc)
        if method != "__call__" or kwargs or fn is None:
            return NotImplemented
        return fn(*inputs)


# ---------------- canonical construction ---------------- #
def _terms_of(x: Any) -> Tuple[Term, ...]:
    """View any value as a term tuple (a bare value is a primal-only term)."""
    if isinstance(x, Differential):
        return x.terms
    if is_zero(x):
        return ()
    return (Term((), x),)


def _accumulate(acc: Dict[Tags, Any], tags: Optional[Tags], coef: Any):
    """Add ``coef * ε^tags`` into `acc`, flattening Differential coefficients."""
    if tags is None:
        return
    if isinstance(coef, Differential):
        for term in coef.terms:
            _accumulate(acc, tag_union(tags, term.tags), term.coefficient)
        return
    if tags in acc:
        from ..ops.arithmetic import add
        acc[tags] = add(acc[tags], coef)
    else:
        acc[tags] = coef


def _from_acc(acc: Dict[Tags, Any]) -> Differential:
    terms = tuple(Term(tags, coef) for tags, coef in sorted(acc.items(), key=lambda kv: kv[0])
                  if not is_zero(coef))
    return Differential(terms)


def collapse(x: Any) -> Any:
    """Reduce a Differential with no tagged terms to its bare primal value."""
    if not isinstance(x, Differential):
        return x
    if not x.terms:
        return 0
    if len(x.terms) == 1 and not x.terms[0].tags:
        return x.terms[0].coefficient
    return x


# ---------------- term algebra ---------------- #
def d_add(a: Any, b: Any) -> Differential:
    """Sum of terms; equal tag tuples combine with the generic add."""
    acc: Dict[Tags, Any] = {}
    for term in _terms_of(a) + _terms_of(b):
        _accumulate(acc, term.tags, term.coefficient)
    return _from_acc(acc)


def d_mul(a: Any, b: Any) -> Differential:
    """
    Product of term sums. Pairs of terms sharing a tag vanish (ε² = 0);
    coefficients multiply with the generic mul, left operand first.
    """
    from ..ops.arithmetic import mul
    acc: Dict[Tags, Any] = {}
    for ta in _terms_of(a):
        for tb in _terms_of(b):
            tags = tag_union(ta.tags, tb.tags)
            if tags is None:
                continue
            _accumulate(acc, tags, mul(ta.coefficient, tb.coefficient))
    return _from_acc(acc)


def d_neg(a: Any) -> Differential:
    from ..ops.arithmetic import neg
    return _from_acc({term.tags: neg(term.coefficient) for term in _terms_of(a)})


def bundle(primal: Any, tangent: Any, tag: int) -> Any:
    """
    ``primal + tangent * ε_tag``, flattened. A zero tangent gives back
    `primal` unchanged.
    """
    if is_zero(tangent):
        return primal
    return collapse(d_add(primal, d_mul(tangent, Differential.monomial(tag))))


# ---------------- primal / tangent access ---------------- #
def max_order_tag(*xs: Any) -> Optional[int]:
    """Largest tag carried by any Differential among `xs` (None if none)."""
    best = None
    for x in xs:
        if isinstance(x, Differential):
            for term in x.terms:
                if term.tags and (best is None or term.tags[-1] > best):
                    best = term.tags[-1]
    return best


def has_tag(x: Any, tag: int) -> bool:
    return isinstance(x, Differential) and any(tag in term.tags for term in x.terms)


def primal_part(x: Any) -> Any:
    """Strip every infinitesimal: the coefficient of the empty tag tuple."""
    if isinstance(x, Differential):
        return x.coefficient()
    return x


def finite_part(x: Any, tag: int) -> Any:
    """Everything in `x` not multiplied by ε_tag (may still carry other tags)."""
    if not isinstance(x, Differential):
        return x
    return collapse(Differential(tuple(t for t in x.terms if tag not in t.tags)))


def tangent_part(x: Any, tag: int) -> Any:
    """Coefficient of ε_tag in `x`, with ε_tag divided out (0 if absent)."""
    if not isinstance(x, Differential):
        return 0
    acc: Dict[Tags, Any] = {}
    for term in x.terms:
        if tag in term.tags:
            _accumulate(acc, tag_remove(term.tags, tag), term.coefficient)
    return collapse(_from_acc(acc))


def extract(x: Any, tag: int) -> Tuple[Any, Any]:
    """Split `x` into (primal w.r.t. `tag`, tangent w.r.t. `tag`)."""
    return finite_part(x, tag), tangent_part(x, tag)


def rename_tag(x: Any, old: int, new: int) -> Any:
    """Rename tag `old` to `new` in every term of `x`."""
    if not has_tag(x, old):
        return x
    acc: Dict[Tags, Any] = {}
    for term in x.terms:
        _accumulate(acc, tag_replace(term.tags, old, new), term.coefficient)
    return collapse(_from_acc(acc))


def equiv(a: Any, b: Any) -> bool:
    """Strict equality over all terms (tags and coefficients)."""
    ta, tb = _terms_of(a), _terms_of(b)
    if len(ta) != len(tb):
        return False
    return all(x.tags == y.tags and _coef_equal(x.coefficient, y.coefficient)
               for x, y in zip(ta, tb))


def _coef_equal(a, b) -> bool:
    if isinstance(a, np.ndarray) or isinstance(b, np.ndarray):
        return np.array_equal(a, b)
    return bool(a == b)
