"""
Differential algebra: canonical terms, ε² = 0, primal-only comparisons.
"""

import numpy as np
import pytest

from diffalg.ad.core.differential import (Differential, bundle, equiv, extract,
                                          max_order_tag, primal_part, rename_tag,
                                          tangent_part)


def test_sum_of_two_infinitesimals():
    dx = Differential.monomial(1)
    dy = Differential.monomial(2)
    s = dx + dy
    assert s.coefficient(1) == 1
    assert s.coefficient(2) == 1
    assert primal_part(s) == 0
    assert s.tags == (1, 2)


def test_product_keeps_mixed_term_and_drops_squares():
    dx = Differential.monomial(1)
    dy = Differential.monomial(2)
    assert (dx * dy).coefficient(1, 2) == 1
    assert equiv(dx * dx, 0)


def test_from_terms_canonicalizes():
    d = Differential.from_terms([((2, 1), 3), ((1, 2), 4), ((1, 1), 5), ((), 2), ((3,), 0)])
    assert [t.tags for t in d.terms] == [(), (1, 2)]
    assert d.coefficient(2, 1) == 7
    assert d.coefficient() == 2


def test_from_terms_flattens_differential_coefficients():
    inner = Differential.from_terms({(): 2, (1,): 3})
    d = Differential.from_terms({(2,): inner})
    assert d.coefficient(2) == 2
    assert d.coefficient(1, 2) == 3


def test_bundle_with_zero_tangent_is_the_primal():
    assert bundle(4.0, 0, 3) == 4.0
    assert not isinstance(bundle(4.0, 0, 3), Differential)


def test_comparisons_use_the_primal_only():
    x = bundle(3, 1, 5)
    assert x == 3
    assert x != 4
    assert x < 4 and x <= 3 and x > 2 and x >= 3
    assert not bool(bundle(0, 1, 5))
    assert not equiv(x, 3)
    assert equiv(x, bundle(3, 1, 5))


def test_extract_splits_on_one_tag():
    x = Differential.from_terms({(): 2, (1,): 3, (2,): 5, (1, 2): 7})
    finite, tangent = extract(x, 2)
    assert equiv(finite, Differential.from_terms({(): 2, (1,): 3}))
    assert equiv(tangent, Differential.from_terms({(): 5, (1,): 7}))
    assert tangent_part(x, 9) == 0
    assert max_order_tag(x, 7, bundle(1, 1, 0)) == 2


def test_rename_tag():
    x = Differential.from_terms({(): 2, (1,): 3, (2,): 5, (1, 2): 7})
    assert rename_tag(x, 2, 9).coefficient(1, 9) == 7
    merged = rename_tag(x, 2, 1)
    assert merged.coefficient(1) == 8
    assert merged.coefficient(1, 2) == 0


def test_array_coefficients():
    d = bundle(np.array([1.0, 2.0]), np.array([3.0, 4.0]), 1)
    np.testing.assert_allclose(primal_part(d), [1.0, 2.0])
    np.testing.assert_allclose(tangent_part(d, 1), [3.0, 4.0])
    np.testing.assert_allclose(tangent_part(d * 2.0, 1), [6.0, 8.0])


def test_numpy_ufunc_dispatch():
    y = np.sin(bundle(0.0, 1, 1))
    assert isinstance(y, Differential)
    assert primal_part(y) == pytest.approx(0.0)
    assert y.coefficient(1) == pytest.approx(1.0)
    z = np.float64(2.0) * bundle(1.0, 1, 1)
    assert z.coefficient(1) == pytest.approx(2.0)


def test_calling_function_coefficients():
    d = Differential.from_terms({(): lambda t: t * t, (1,): lambda t: 3 * t})
    out = d(2.0)
    assert primal_part(out) == 4.0
    assert out.coefficient(1) == 6.0


def test_immutable_and_unhashable():
    d = Differential.monomial(1)
    with pytest.raises(AttributeError):
        d.terms = ()
    with pytest.raises(TypeError):
        hash(d)


def test_repr():
    assert repr(Differential.from_terms({(): 1, (2,): 3})) == "Differential(1 + 3*ε2)"
    assert repr(Differential()) == "Differential(0)"
