# ad/core/__init__.py

"""
Core public API for the differentiation package.

Exports:
    Differential     : Generalized dual number, a sum of tagged terms.
    Term             : One monomial (tags, coefficient) of a Differential.
    TagAllocator     : Source of fresh tags; `use_allocator` swaps the active one.
    Primitive        : Generic operation with pluggable derivative rules.
    defjvp           : Register a chain-rule derivative from partials.
    Perturbed        : Base class for user types carrying Differentials.
    derivative       : Derivative of a function (see also `diffalg.ad.D`).
    grad, grads      : Forward-mode gradients (single input / dict of inputs).
    value            : Primal value(s), derivative parts stripped.
"""

from .term import Term
from .tags import TagAllocator, fresh_tag, use_allocator
from .differential import Differential, bundle, equiv, extract, primal_part, tangent_part
from .primitive import Primitive, defjvp, defjvp_rule
from .perturbed import Perturbed, extract_tangent, insert_tag, perturbed, replace_tag
from .derivative import derivative, nth_derivative
from .seeds import grad, grads, grads_list, hvp, value

__all__ = [
    "Term", "Differential",
    "TagAllocator", "fresh_tag", "use_allocator",
    "bundle", "equiv", "extract", "primal_part", "tangent_part",
    "Primitive", "defjvp", "defjvp_rule",
    "Perturbed", "perturbed", "insert_tag", "replace_tag", "extract_tangent",
    "derivative", "nth_derivative",
    "grad", "grads", "grads_list", "hvp", "value",
]
