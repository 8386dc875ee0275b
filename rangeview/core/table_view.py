from __future__ import annotations

from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, List, Optional, Union

from .base_dataset import BaseDataset
from .exceptions import CapabilityNotImplemented
from .idtype import IDType
from .range import Range, Range1D
from .range_parser import RangeLike, parse
from .reduction import ReductionProjection
from .slice_vector import SliceVector
from .stats import IDTYPE_COLUMN, IDTYPE_ROW

if TYPE_CHECKING:
    from .table import Table, TableDesc


class TableView(BaseDataset):
    """
    Lazy, zero-copy view over a root Table.

    State is always the flattened pair (root, range): `range` is expressed in
    root coordinates (dim 0 = rows, dim 1 = cols) no matter how many views were
    stacked to build it. `transposed` swaps the view's axes on top of that range.
    """

    def __init__(self, root: Union["Table", TableView], range_: RangeLike = None, transposed: bool = False):
        if isinstance(root, TableView):
            range_ = root._compose(range_)
            transposed = root.transposed != transposed
            root = root.root

        self.root: "Table" = root
        self.transposed = transposed
        self.range = parse(range_).pad(2)
        # validate against the root before anything resolves
        self.range.size(self.root.dim)

    def __repr__(self) -> str:
        flag = ", transposed" if self.transposed else ""
        return f"TableView({self.root.persist()!r}, '{self.range}'{flag})"

    # -------------------------------------------------------------------------
    # Internal: range translation
    # -------------------------------------------------------------------------
    def _compose(self, range_: RangeLike) -> Range:
        """Translate a range in this view's index space into root coordinates."""
        sub = parse(range_)
        if self.transposed:
            sub = sub.pad(2).swap()
        composed = self.range.pre_multiply(sub, self.root.dim)
        composed.size(self.root.dim)
        return composed

    def _root_axis(self, axis: int) -> int:
        return 1 - axis if self.transposed else axis

    def _axis_range(self, axis: int, range_: RangeLike) -> Range:
        """
        Root range for a one-dimensional selection along one of this view's axes.

        The result's dim 0 selects along the root axis the view axis maps to,
        which is the convention of Table.rows/row_ids (axis 0) and
        Table.cols/col_ids (axis 1).
        """
        sub = Range((parse(range_).dim(0),))
        dim = self.root.dim
        if self._root_axis(axis) == 0:
            composed = self.range.pre_multiply(sub, dim)
            composed.size(dim)
            return composed
        composed = self.range.swap().pre_multiply(sub, dim[::-1])
        composed.size(dim[::-1])
        return composed

    def _axis_call(self, axis: int, range_: RangeLike, on_rows: Callable, on_cols: Callable) -> Awaitable:
        r = self._axis_range(axis, range_)
        return on_rows(r) if self._root_axis(axis) == 0 else on_cols(r)

    # -------------------------------------------------------------------------
    # Properties & getters
    # -------------------------------------------------------------------------
    @property
    def desc(self) -> "TableDesc":
        return self.root.desc

    @property
    def nrow(self) -> int:
        return self.size()[0]

    @property
    def ncol(self) -> int:
        return self.size()[1]

    @property
    def rowtype(self) -> IDType:
        return self.root.coltype if self.transposed else self.root.rowtype

    @property
    def coltype(self) -> IDType:
        return self.root.rowtype if self.transposed else self.root.coltype

    @property
    def valuetype(self) -> str:
        return self.root.desc.value_type

    @property
    def idtype(self) -> IDType:
        return self.rowtype

    @property
    def idtypes(self) -> List[IDType]:
        return [self.idtype]

    @property
    def t(self) -> TableView:
        return TableView(self.root, self.range, transposed=not self.transposed)

    def size(self) -> List[int]:
        shape = self.range.size(self.root.dim)
        return shape[::-1] if self.transposed else shape

    # -------------------------------------------------------------------------
    # Composition
    # -------------------------------------------------------------------------
    def view(self, range_: RangeLike = None) -> TableView:
        sub = parse(range_)
        if sub.is_all:
            return self
        return TableView(self.root, self._compose(sub), transposed=self.transposed)

    def reduce(
        self,
        f: Union[Callable[..., Any], str],
        this_arg: Any = None,
        valuetype: Any = None,
        idtype: Union[IDType, str, None] = None,
        **params: Any,
    ) -> ReductionProjection:
        """Reduction over the rows of the unrestricted root."""
        return self.root.reduce(f, this_arg=this_arg, valuetype=valuetype, idtype=idtype, **params)

    def col(self, j: int) -> SliceVector:
        """Column j of this view, as a vector over the view's rows."""
        root_axis = self._root_axis(1)
        fixed = self.range.dim(root_axis).at(j, self.root.dim[root_axis])
        runs = 1 - root_axis
        return SliceVector(self.root, fixed, axis=runs, range_=Range((self.range.dim(runs),)))

    def slice(self, j: int) -> SliceVector:
        return self.col(j)

    def persist(self) -> Dict[str, Any]:
        persisted: Dict[str, Any] = {"root": self.root.persist(), "range": str(self.range)}
        if self.transposed:
            persisted["transposed"] = True
        return persisted

    def restore(self, persisted: Any) -> BaseDataset:
        if isinstance(persisted, dict):
            # reductions and slices are stored in root coordinates
            if persisted.get("f") or persisted.get("slice") is not None:
                return self.root.restore(persisted)
            if persisted.get("range") is not None and persisted.get("transposed"):
                return super().restore(persisted).t
        return super().restore(persisted)

    # -------------------------------------------------------------------------
    # Resolving accessors
    # -------------------------------------------------------------------------
    def at(self, i: int, j: int) -> Awaitable[Any]:
        coord = [j, i] if self.transposed else [i, j]
        row, col = self.range.invert(coord, self.root.dim)
        return self.root.at(row, col)

    def row_at(self, i: int) -> Awaitable[List[Any]]:
        return self._first(self.data(Range((Range1D.single(i),))))

    @staticmethod
    async def _first(pending: Awaitable[List[List[Any]]]) -> List[Any]:
        return (await pending)[0]

    def data(self, range_: RangeLike = None) -> Awaitable[List[List[Any]]]:
        pending = self.root.data(self._compose(range_))
        return self._transposed(pending) if self.transposed else pending

    @staticmethod
    async def _transposed(pending: Awaitable[List[List[Any]]]) -> List[List[Any]]:
        return [list(col) for col in zip(*(await pending))]

    def rows(self, range_: RangeLike = None) -> Awaitable[List[str]]:
        return self._axis_call(0, range_, self.root.rows, self.root.cols)

    def names(self, range_: RangeLike = None) -> Awaitable[List[str]]:
        return self.rows(range_)

    def cols(self, range_: RangeLike = None) -> Awaitable[List[str]]:
        return self._axis_call(1, range_, self.root.rows, self.root.cols)

    def row_ids(self, range_: RangeLike = None) -> Awaitable[Range]:
        return self._axis_call(0, range_, self.root.row_ids, self.root.col_ids)

    def col_ids(self, range_: RangeLike = None) -> Awaitable[Range]:
        return self._axis_call(1, range_, self.root.row_ids, self.root.col_ids)

    def ids(self, range_: RangeLike = None) -> Awaitable[Range]:
        return self.row_ids(range_)

    def col_data(self, column: str, range_: RangeLike = None) -> Awaitable[List[Any]]:
        if self.transposed:
            raise CapabilityNotImplemented("col_data is not available on a transposed view")
        return self.root.col_data(column, self._axis_range(0, range_))

    def objects(self, range_: RangeLike = None) -> Awaitable[List[Dict[str, Any]]]:
        if self.transposed:
            raise CapabilityNotImplemented("objects are not available on a transposed view")
        return self.root.objects(self._compose(range_))

    def stats(self, range_: RangeLike = None):
        return self.root.stats(self._compose(range_))

    def hist(self, bins: Optional[int] = None, range_: RangeLike = None, contained_ids: int = IDTYPE_ROW):
        if self.transposed and contained_ids in (IDTYPE_ROW, IDTYPE_COLUMN):
            contained_ids = IDTYPE_COLUMN if contained_ids == IDTYPE_ROW else IDTYPE_ROW
        return self.root.hist(bins, self._compose(range_), contained_ids)
