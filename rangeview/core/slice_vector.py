"""
One column (or row) of a table exposed as a one-dimensional dataset.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Awaitable, Dict, List, Optional

import numpy as np

from .base_dataset import BaseDataset
from .exceptions import IndexOutOfRange
from .idtype import IDType
from .range import Range, Range1D
from .range_parser import RangeLike, parse
from .stats import IDTYPE_ROW, compute_hist, compute_stats

if TYPE_CHECKING:
    from .table import Table

AXIS_ROWS = 0
AXIS_COLS = 1


class SliceVector(BaseDataset):
    """
    Values along one root axis at a fixed index of the other one.

    - axis 0: runs over the root rows, `index` is a root column
    - axis 1: runs over the root columns, `index` is a root row

    The vector keeps its own 1-D range in root coordinates, so view()
    gives a new vector over the same root instead of nesting wrappers.
    """

    def __init__(self, root: "Table", index: int, axis: int = AXIS_ROWS, range_: RangeLike = None) -> None:
        if axis not in (AXIS_ROWS, AXIS_COLS):
            raise ValueError(f"axis must be {AXIS_ROWS} or {AXIS_COLS}, got {axis}")

        self.root = getattr(root, "root", root)
        self.axis = axis

        fixed_extent = self.root.dim[1 - axis]
        if not 0 <= index < fixed_extent:
            kind = "column" if axis == AXIS_ROWS else "row"
            raise IndexOutOfRange(f"{kind} {index} is out of range for {fixed_extent} {kind}s")
        self.index = index

        self.range = parse(range_)
        self.range.size([self._extent])

    def __repr__(self) -> str:
        return f"SliceVector({self.root.persist()!r}, {self.index}, axis={self.axis}, '{self.range}')"

    @property
    def _extent(self) -> int:
        return self.root.dim[self.axis]

    def _compose(self, range_: RangeLike) -> Range:
        composed = self.range.pre_multiply(parse(range_), [self._extent])
        composed.size([self._extent])
        return composed

    def _cells(self, selection: Range1D) -> Range:
        fixed = Range1D.single(self.index)
        if self.axis == AXIS_ROWS:
            return Range((selection, fixed))
        return Range((fixed, selection))

    # -------------------------------------------------------------------------
    # Properties & getters
    # -------------------------------------------------------------------------
    @property
    def desc(self):
        return self.root.desc

    @property
    def valuetype(self) -> str:
        return self.root.desc.value_type

    @property
    def idtype(self) -> IDType:
        return self.root.rowtype if self.axis == AXIS_ROWS else self.root.coltype

    @property
    def idtypes(self) -> List[IDType]:
        return [self.idtype]

    def size(self) -> List[int]:
        return self.range.size([self._extent])

    # -------------------------------------------------------------------------
    # Dataset contract
    # -------------------------------------------------------------------------
    def view(self, range_: RangeLike = None) -> SliceVector:
        r = parse(range_)
        if r.is_all:
            return self
        return SliceVector(self.root, self.index, self.axis, self._compose(r))

    def at(self, i: int) -> Awaitable[Any]:
        (pos,) = self.range.invert([i], [self._extent])
        if self.axis == AXIS_ROWS:
            return self.root.at(pos, self.index)
        return self.root.at(self.index, pos)

    def data(self, range_: RangeLike = None) -> Awaitable[List[Any]]:
        selection = self._compose(range_).dim(0)
        return self._flatten(self.root.data(self._cells(selection)))

    async def _flatten(self, pending: Awaitable[List[List[Any]]]) -> List[Any]:
        block = await pending
        if self.axis == AXIS_ROWS:
            return [row[0] for row in block]
        return list(block[0]) if block else []

    def names(self, range_: RangeLike = None) -> Awaitable[List[str]]:
        composed = self._compose(range_)
        return self.root.rows(composed) if self.axis == AXIS_ROWS else self.root.cols(composed)

    def ids(self, range_: RangeLike = None) -> Awaitable[Range]:
        composed = self._compose(range_)
        return self.root.row_ids(composed) if self.axis == AXIS_ROWS else self.root.col_ids(composed)

    def stats(self, range_: RangeLike = None):
        return self._stats(self.data(range_))

    async def _stats(self, pending):
        return compute_stats(np.asarray(await pending, dtype=float))

    def hist(self, bins: Optional[int] = None, range_: RangeLike = None, contained_ids: int = IDTYPE_ROW):
        return self._hist(bins, self.data(range_), self.ids(range_))

    async def _hist(self, bins, pending_values, pending_ids):
        values = await pending_values
        ids = await pending_ids
        return compute_hist(np.asarray(values, dtype=float), bins, row_ids=ids.dim(0).indices())

    def persist(self) -> Dict[str, Any]:
        persisted: Dict[str, Any] = {"root": self.root.persist(), "slice": self.index}
        if self.axis == AXIS_COLS:
            persisted["axis"] = AXIS_COLS
        if not self.range.is_all:
            persisted["range"] = str(self.range)
        return persisted


def restore_slice(root: "Table", persisted: Dict[str, Any]) -> SliceVector:
    """Rebuild a vector from the descriptor SliceVector.persist() produced."""
    vector = SliceVector(root, int(persisted["slice"]), int(persisted.get("axis", AXIS_ROWS)))
    if persisted.get("range") is not None:
        vector = vector.view(parse(persisted["range"]))
    return vector
