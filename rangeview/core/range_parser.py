from __future__ import annotations

from typing import Any, List, Optional, Union

import numpy as np

from .exceptions import RangeSyntaxError
from .range import Range, Range1D, RangeElem, all_range

RangeLike = Union[None, str, int, slice, list, tuple, np.ndarray, Range1D, Range]


def parse(range_like: RangeLike = None) -> Range:
    """
    Convert a range-like input into a canonical Range.

    Accepted inputs:
    - None, ``...`` or "" -> the all Range
    - Range -> returned as is
    - Range1D -> one-dimensional Range
    - str -> canonical string format (see rangeview.core.range)
    - int / slice / list / numpy array -> selection along dim 0
    - tuple -> one selection per dimension (numpy convention)

    :raises RangeSyntaxError: if the input cannot be interpreted
    """
    if range_like is None or range_like is Ellipsis:
        return all_range()
    if isinstance(range_like, Range):
        return range_like
    if isinstance(range_like, Range1D):
        return Range((range_like,))
    if isinstance(range_like, str):
        return parse_string(range_like)
    if isinstance(range_like, tuple):
        return Range(tuple(_parse_selection(sel) for sel in range_like))
    return Range((_parse_selection(range_like),))


def parse_string(text: str) -> Range:
    text = text.strip()
    if not text:
        return all_range()
    return Range(tuple(_parse_dim(token) for token in _split_top_level(text)))


# -------------------------------------------------------------------------
# String format helpers
# -------------------------------------------------------------------------
def _split_top_level(text: str) -> List[str]:
    tokens: List[str] = []
    depth = 0
    current: List[str] = []
    for ch in text:
        if ch == "(":
            depth += 1
            if depth > 1:
                raise RangeSyntaxError(f"Nested parentheses are not allowed: '{text}'")
        elif ch == ")":
            depth -= 1
            if depth < 0:
                raise RangeSyntaxError(f"Unbalanced parentheses: '{text}'")
        elif ch == "," and depth == 0:
            tokens.append("".join(current))
            current = []
            continue
        current.append(ch)
    if depth != 0:
        raise RangeSyntaxError(f"Unbalanced parentheses: '{text}'")
    tokens.append("".join(current))
    return tokens


def _parse_dim(token: str) -> Range1D:
    token = token.strip()
    # "" is accepted as a lenient spelling of ":"
    if token in ("", ":"):
        return Range1D.all()
    if token.startswith("(") and token.endswith(")"):
        inner = token[1:-1].strip()
        if not inner:
            return Range1D(())
        return Range1D(tuple(_parse_elem(part) for part in inner.split(",")))
    if "(" in token or ")" in token:
        raise RangeSyntaxError(f"Malformed dimension: '{token}'")
    return Range1D((_parse_elem(token),))


def _parse_int(text: str) -> Optional[int]:
    text = text.strip()
    if not text:
        return None
    try:
        return int(text)
    except ValueError:
        raise RangeSyntaxError(f"Not an integer: '{text}'") from None


def _parse_elem(token: str) -> RangeElem:
    parts = token.strip().split(":")
    if len(parts) == 1:
        index = _parse_int(parts[0])
        if index is None:
            raise RangeSyntaxError("Empty range element")
        return RangeElem.single(index)
    if len(parts) > 3:
        raise RangeSyntaxError(f"Malformed range element: '{token}'")
    step = _parse_int(parts[2]) if len(parts) == 3 else None
    return RangeElem(_parse_int(parts[0]), _parse_int(parts[1]), 1 if step is None else step)


# -------------------------------------------------------------------------
# Python selection helpers
# -------------------------------------------------------------------------
def _as_int(value: Any) -> int:
    if isinstance(value, (bool, np.bool_)):
        raise RangeSyntaxError("Booleans are not valid indices")
    if isinstance(value, (int, np.integer)):
        return int(value)
    raise RangeSyntaxError(f"Not an integer index: {value!r}")


def _parse_selection(sel: Any) -> Range1D:
    if sel is None or sel is Ellipsis:
        return Range1D.all()
    if isinstance(sel, Range1D):
        return sel
    if isinstance(sel, Range):
        if sel.ndim > 1:
            raise RangeSyntaxError(f"Expected a one-dimensional selection, got '{sel}'")
        return sel.dim(0)
    if isinstance(sel, str):
        return _parse_selection(parse_string(sel))
    if isinstance(sel, slice):
        return Range1D((
            RangeElem(
                None if sel.start is None else _as_int(sel.start),
                None if sel.stop is None else _as_int(sel.stop),
                1 if sel.step is None else _as_int(sel.step),
            ),
        ))
    if isinstance(sel, np.ndarray):
        sel = sel.ravel().tolist()
    if isinstance(sel, (list, range)):
        return Range1D.from_indices(_as_int(v) for v in sel)
    return Range1D.single(_as_int(sel))
