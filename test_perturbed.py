"""
Perturbation protocol over containers, arrays, callables and user types.
"""

from collections import namedtuple

import numpy as np

from diffalg import D, Perturbed
from diffalg.ad.core.differential import Differential, bundle, equiv
from diffalg.ad.core.perturbed import (extract_tangent, insert_tag, perturbed,
                                       rebuild_array, replace_tag)


def test_extract_tangent_keeps_container_shape():
    v = {"a": [bundle(1.0, 2.0, 5), 3.0], "b": (bundle(0.0, 4.0, 5),)}
    assert extract_tangent(v, 5) == {"a": [2.0, 0], "b": (4.0,)}


def test_extract_tangent_of_named_tuple():
    Pair = namedtuple("Pair", "lo hi")
    out = extract_tangent(Pair(bundle(1.0, 2.0, 1), 7.0), 1)
    assert isinstance(out, Pair)
    assert out == Pair(2.0, 0)


def test_zero_extraction_is_shape_preserving_and_idempotent():
    arr = np.ones((2, 3))
    once = extract_tangent(arr, 4)
    assert once.shape == (2, 3) and not once.any()
    twice = extract_tangent(once, 4)
    np.testing.assert_array_equal(once, twice)
    nested = [1.0, (2.0, {"k": 3.0})]
    assert extract_tangent(nested, 4) == [0, (0, {"k": 0})]
    assert extract_tangent(extract_tangent(nested, 4), 4) == [0, (0, {"k": 0})]


def test_object_array_extraction():
    arr = np.empty(2, dtype=object)
    arr[0] = bundle(1.0, 2.0, 1)
    arr[1] = bundle(3.0, 5.0, 1)
    out = extract_tangent(arr, 1)
    assert out.dtype == float
    np.testing.assert_allclose(out, [2.0, 5.0])


def test_rebuild_array_stacks_numeric_elements():
    out = rebuild_array([np.array([1.0, 2.0]), np.array([3.0, 4.0])], (2,))
    assert out.shape == (2, 2)
    mixed = rebuild_array([1.0, "x"], (2,))
    assert mixed.dtype == object


def test_perturbed_reports_tags():
    v = [1.0, (bundle(1.0, 1, 3),)]
    assert perturbed(v, 3)
    assert not perturbed(v, 4)
    assert not perturbed(np.sin, 3)
    assert not perturbed(np.ones(2), 3)


def test_insert_and_replace_tag():
    assert insert_tag([1.0, {"a": 2.0}], 3) == [1.0, {"a": 2.0}]
    v = {"x": bundle(1.0, 2.0, 3)}
    renamed = replace_tag(v, 3, 8)
    assert equiv(renamed["x"], bundle(1.0, 2.0, 8))
    assert replace_tag(4.0, 3, 8) == 4.0


def test_replace_tag_wraps_functions():
    def f(y):
        return y * bundle(2.0, 1.0, 3)

    g = replace_tag(f, 3, 8)
    out = g(5.0)
    assert isinstance(out, Differential)
    assert out.coefficient(8) == 5.0
    assert out.coefficient(3) == 0


def test_extracted_function_keeps_name():
    def velocity(t):
        return t

    wrapped = extract_tangent(velocity, 1)
    assert wrapped.__name__ == "velocity"


class Interval(Perturbed):
    def __init__(self, lo, hi):
        self.lo, self.hi = lo, hi

    def perturbed(self, tag):
        return perturbed([self.lo, self.hi], tag)

    def replace_tag(self, old, new):
        return Interval(replace_tag(self.lo, old, new), replace_tag(self.hi, old, new))

    def extract_tangent(self, tag):
        return Interval(extract_tangent(self.lo, tag), extract_tangent(self.hi, tag))


def test_user_type_joins_protocol():
    out = D(lambda x: Interval(x * x, 3 * x))(2.0)
    assert isinstance(out, Interval)
    assert (out.lo, out.hi) == (4.0, 3)
    assert insert_tag(out, 1) is out
    assert perturbed(Interval(bundle(1.0, 1, 2), 0.0), 2)


def test_function_wrappers_forward_keyword_arguments():
    def f(y, scale=1.0):
        return y * scale * bundle(2.0, 1.0, 3)

    g = replace_tag(f, 3, 8)
    out = g(5.0, scale=bundle(1.0, 1.0, 3))
    assert out.coefficient(8) == 5.0
    assert out.coefficient(3) == 10.0
    assert out.coefficient(3, 8) == 5.0


def test_insert_tag_wraps_functions():
    def area(r):
        return r * r

    wrapped = insert_tag(area, 3)
    assert wrapped is not area
    assert wrapped.__name__ == "area"
    assert wrapped(2.0) == 4.0
    assert wrapped(bundle(2.0, 1.0, 3)).coefficient(3) == 4.0
