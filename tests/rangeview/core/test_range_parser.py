import numpy as np
import pytest

from rangeview.core.exceptions import RangeSyntaxError
from rangeview.core.range import Range, Range1D, RangeElem
from rangeview.core.range_parser import parse


def test_all_sentinels():
    assert parse(None).is_all
    assert parse(...).is_all
    assert parse("") == Range.all()
    assert parse(":").is_all
    assert parse(":,:").ndim == 2


def test_range_passes_through_unchanged():
    r = parse([1, 2])
    assert parse(r) is r


def test_range1d_becomes_one_dim_range():
    assert parse(Range1D.single(2)) == Range((Range1D.single(2),))


def test_python_selections():
    assert parse(3).dim(0).indices(10) == [3]
    assert parse(slice(2, 8, 3)).dim(0).indices(10) == [2, 5]
    assert parse(range(4)).dim(0).indices() == [0, 1, 2, 3]
    assert parse(np.array([4, 1])).dim(0).indices() == [4, 1]

    r = parse((slice(None), [0, 2]))
    assert r.dim(0).is_all
    assert r.dim(1).indices() == [0, 2]


def test_string_with_spaces():
    r = parse(" 1:3 , ( 0 , 4 ) ")
    assert r.dim(0).indices() == [1, 2]
    assert r.dim(1).indices() == [0, 4]


def test_string_with_step_and_open_bounds():
    r = parse("::2,-1")
    assert r.dim(0) == Range1D((RangeElem(None, None, 2),))
    assert r.dim(1).indices(5) == [4]


@pytest.mark.parametrize("text", ["(1,(2))", "(1,2", "1)", "1:2:3:4", "a", "1:x", "()1"])
def test_malformed_strings_raise(text):
    with pytest.raises(RangeSyntaxError):
        parse(text)


def test_zero_step_raises():
    with pytest.raises(RangeSyntaxError):
        parse("::0")


def test_booleans_are_not_indices():
    with pytest.raises(RangeSyntaxError):
        parse(True)
    with pytest.raises(RangeSyntaxError):
        parse([1, False])


def test_two_dim_range_is_not_a_selection():
    with pytest.raises(RangeSyntaxError):
        parse((parse(([1], [2])), 0))
