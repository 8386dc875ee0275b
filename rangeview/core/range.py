"""
Range algebra: per-dimension selections and their composition operators.

A Range never references a dataset. Anything that needs extents (size,
invert, pre_multiply, resolve) takes the target shape explicitly, so the
same Range can be applied to any dataset of matching rank.

Canonical string format (stable, used for saved sessions):

- dims are joined by ","; a zero-dim Range is the empty string
- an "all" dim is ":"
- a dim with a single elem is that elem, otherwise "(e1,e2,...)"
- an elem is "i" for one index, else "start:stop" or "start:stop:step"
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Tuple

from .exceptions import (
    DimensionMismatch,
    IndexOutOfRange,
    RangeSyntaxError,
    UnboundedRange,
)

Shape = Sequence[int]


def _wrap(index: int, extent: int) -> int:
    return index + extent if index < 0 else index


@dataclass(frozen=True)
class RangeElem:
    """
    Slice-like interval. start/stop may be None (open ended) or negative
    (counted from the end of the extent), step is a non-zero int.
    """

    start: Optional[int] = None
    stop: Optional[int] = None
    step: int = 1

    def __post_init__(self) -> None:
        if self.step == 0:
            raise RangeSyntaxError("RangeElem step must not be zero")

    @classmethod
    def single(cls, index: int) -> RangeElem:
        stop = index + 1
        return cls(index, None if stop == 0 else stop, 1)

    @property
    def is_single(self) -> bool:
        if self.step != 1 or self.start is None:
            return False
        if self.stop is None:
            return self.start == -1
        return self.stop == self.start + 1 and self.stop != 0

    @property
    def is_bounded(self) -> bool:
        """True if the elem can be enumerated without knowing the extent."""
        if self.step > 0:
            return (self.start is None or self.start >= 0) and self.stop is not None and self.stop >= 0
        return self.start is not None and self.start >= 0 and (self.stop is None or self.stop >= 0)

    def indices(self, extent: Optional[int] = None) -> range:
        """
        Resolve to concrete indices.

        Raises:
            UnboundedRange: extent is None but the elem is open ended or negative
            IndexOutOfRange: the elem reaches outside [0, extent)
        """
        if extent is None:
            if not self.is_bounded:
                raise UnboundedRange(f"'{self}' needs an extent to be resolved")
            if self.step > 0:
                return range(self.start or 0, self.stop, self.step)
            return range(self.start, -1 if self.stop is None else self.stop, self.step)

        if self.step > 0:
            lo = 0 if self.start is None else _wrap(self.start, extent)
            hi = extent if self.stop is None else _wrap(self.stop, extent)
            ok = 0 <= lo <= extent and 0 <= hi <= extent
        else:
            lo = extent - 1 if self.start is None else _wrap(self.start, extent)
            hi = -1 if self.stop is None else _wrap(self.stop, extent)
            ok = -1 <= lo < extent and -1 <= hi < extent

        if not ok:
            raise IndexOutOfRange(f"'{self}' is out of range for extent {extent}")
        return range(lo, hi, self.step)

    def __str__(self) -> str:
        if self.is_single:
            return str(self.start)
        start = "" if self.start is None else str(self.start)
        stop = "" if self.stop is None else str(self.stop)
        if self.step != 1:
            return f"{start}:{stop}:{self.step}"
        return f"{start}:{stop}"


_FULL = RangeElem(None, None, 1)


@dataclass(frozen=True)
class Range1D:
    """
    Selection along one dimension.

    elems is None for the identity ("all") selection; otherwise an ordered
    tuple of elems, duplicates and reordering allowed. A sole ":" elem is
    normalised to "all".
    """

    elems: Optional[Tuple[RangeElem, ...]] = None

    def __post_init__(self) -> None:
        if self.elems is None:
            return
        elems = tuple(self.elems)
        if len(elems) == 1 and elems[0] == _FULL:
            object.__setattr__(self, "elems", None)
        else:
            object.__setattr__(self, "elems", elems)

    @classmethod
    def all(cls) -> Range1D:
        return cls(None)

    @classmethod
    def single(cls, index: int) -> Range1D:
        return cls((RangeElem.single(index),))

    @classmethod
    def from_indices(cls, indices: Iterable[int]) -> Range1D:
        """
        Build the canonical Range1D for an explicit index sequence.

        Ascending runs with step 1 (length >= 2) or a constant larger step
        (length >= 3) collapse into interval elems, everything else stays a
        single index. Equal sequences always give equal Range1D values.
        """
        values = [int(i) for i in indices]
        elems: List[RangeElem] = []
        i, n = 0, len(values)
        while i < n:
            start = values[i]
            j = i + 1
            if start >= 0 and j < n and values[j] > start:
                step = values[j] - start
                while j + 1 < n and values[j + 1] - values[j] == step:
                    j += 1
                if step == 1 or j - i + 1 >= 3:
                    elems.append(RangeElem(start, values[j] + step, step))
                    i = j + 1
                    continue
            elems.append(RangeElem.single(start))
            i += 1
        return cls(tuple(elems))

    @property
    def is_all(self) -> bool:
        return self.elems is None

    def size(self, extent: Optional[int] = None) -> int:
        if self.elems is None:
            if extent is None:
                raise UnboundedRange("an 'all' selection needs an extent to be sized")
            return extent
        return sum(len(e.indices(extent)) for e in self.elems)

    def indices(self, extent: Optional[int] = None) -> List[int]:
        if self.elems is None:
            if extent is None:
                raise UnboundedRange("an 'all' selection needs an extent to be resolved")
            return list(range(extent))
        out: List[int] = []
        for e in self.elems:
            out.extend(e.indices(extent))
        return out

    def at(self, position: int, extent: Optional[int] = None) -> int:
        """Positional lookup: the index selected at `position` (no value search)."""
        if self.elems is None:
            if position < 0 or (extent is not None and position >= extent):
                raise IndexOutOfRange(f"position {position} is out of range for extent {extent}")
            return position
        if position < 0:
            raise IndexOutOfRange(f"position {position} is negative")
        remaining = position
        for e in self.elems:
            r = e.indices(extent)
            if remaining < len(r):
                return r[remaining]
            remaining -= len(r)
        raise IndexOutOfRange(
            f"position {position} exceeds selection of size {position - remaining}"
        )

    def pre_multiply(self, inner: Range1D, extent: Optional[int] = None) -> Range1D:
        if self.elems is None:
            return inner
        if inner.elems is None:
            return self
        base = self.indices(extent)
        return Range1D.from_indices(base[k] for k in inner.indices(len(base)))

    def index_of(self, ids: Range1D, extent: Optional[int] = None) -> Range1D:
        """
        Positions of `ids` among this selection's elements, in the order of
        `ids`. Ids not contained in this selection are skipped; for an "all"
        selection that means ids outside [0, extent) when an extent is given.
        """
        if ids.elems is None:
            return Range1D.all()
        wanted = ids.indices()
        if self.elems is None:
            if extent is None:
                return ids
            return Range1D.from_indices(i for i in wanted if 0 <= i < extent)
        positions = {}
        for pos, value in enumerate(self.indices(extent)):
            positions.setdefault(value, pos)
        return Range1D.from_indices(positions[i] for i in wanted if i in positions)

    def __str__(self) -> str:
        if self.elems is None:
            return ":"
        if len(self.elems) == 1:
            return str(self.elems[0])
        return "(" + ",".join(str(e) for e in self.elems) + ")"


_ALL_1D = Range1D.all()


@dataclass(frozen=True)
class Range:
    """
    Ordered sequence of per-dimension selections. dim(d) beyond ndim is "all".
    """

    dims: Tuple[Range1D, ...] = ()

    def __post_init__(self) -> None:
        dims = tuple(self.dims)
        for d in dims:
            if not isinstance(d, Range1D):
                raise RangeSyntaxError(f"Range dims must be Range1D, got {type(d).__name__}")
        object.__setattr__(self, "dims", dims)

    @classmethod
    def all(cls) -> Range:
        return cls(())

    @property
    def ndim(self) -> int:
        return len(self.dims)

    @property
    def is_all(self) -> bool:
        return all(d.is_all for d in self.dims)

    def dim(self, d: int) -> Range1D:
        return self.dims[d] if d < len(self.dims) else _ALL_1D

    def pad(self, ndim: int) -> Range:
        """Return this range with "all" dims appended up to `ndim`."""
        if self.ndim >= ndim:
            return self
        return Range(self.dims + (_ALL_1D,) * (ndim - self.ndim))

    def _check_rank(self, shape: Shape, ndim: Optional[int] = None) -> None:
        ndim = self.ndim if ndim is None else ndim
        if ndim > len(shape):
            raise DimensionMismatch(
                f"range with {ndim} dimension(s) cannot be applied to shape {list(shape)}"
            )

    def size(self, shape: Shape) -> List[int]:
        self._check_rank(shape)
        return [self.dim(d).size(extent) for d, extent in enumerate(shape)]

    def resolve(self, shape: Shape) -> List[List[int]]:
        """Explicit index lists per dimension of `shape`."""
        self._check_rank(shape)
        return [self.dim(d).indices(extent) for d, extent in enumerate(shape)]

    def invert(self, coord: Sequence[int], shape: Shape) -> List[int]:
        """Translate a coordinate in view index space back to root index space."""
        self._check_rank(shape, max(self.ndim, len(coord)))
        return [self.dim(d).at(int(c), shape[d]) for d, c in enumerate(coord)]

    def swap(self) -> Range:
        return Range(tuple(reversed(self.dims)))

    def pre_multiply(self, inner: Range, shape: Shape) -> Range:
        """
        Compose `inner`, expressed in the index space of the view this range
        produces over `shape`, into one range against the same root.
        """
        if self.is_all:
            return inner
        if inner.is_all:
            return self
        ndim = max(self.ndim, inner.ndim)
        self._check_rank(shape, ndim)
        return Range(
            tuple(self.dim(d).pre_multiply(inner.dim(d), shape[d]) for d in range(ndim))
        )

    def index_of(self, id_range: Range, shape: Optional[Shape] = None) -> Range:
        """Convert an ID-space range into the positional range selecting those ids."""
        ndim = max(self.ndim, id_range.ndim)
        if shape is not None:
            self._check_rank(shape, ndim)
        return Range(
            tuple(
                self.dim(d).index_of(id_range.dim(d), None if shape is None else shape[d])
                for d in range(ndim)
            )
        )

    def __str__(self) -> str:
        return ",".join(str(d) for d in self.dims)


def all_range() -> Range:
    """The identity Range, applicable to any shape."""
    return Range.all()
