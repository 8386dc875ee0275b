from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, List, Optional, TypeVar, Union

from .base_dataset import BaseDataset
from .exceptions import IndexOutOfRange, RangeViewError, ProviderFailure
from .idtype import IDType, IDTypeRegistry, get_registry
from .range import Range, Range1D
from .range_parser import RangeLike, parse
from .reduction import ReducerRegistry, ReductionProjection, restore_reduction
from .slice_vector import SliceVector, restore_slice
from .table_view import TableView
from .stats import IDTYPE_ROW, Histogram, Statistics

if TYPE_CHECKING:
    from rangeview.providers.base_provider import DataProvider

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class TableDesc:
    """
    Static description of a root table.

    - id: stable key, also what Table.persist() returns
    - rowtype / coltype: IDType ids of the row and column entities
    - value_type: value type of the cells ("real", "int", "categorical", ...)
    """

    id: str
    name: str
    rowtype: str = "_rows"
    coltype: str = "_cols"
    value_type: str = "real"


class Table(BaseDataset):
    """
    Root dataset: a DataProvider plus its description.

    Every range is validated against `dim` before the provider is called;
    provider exceptions surface as ProviderFailure.
    """

    def __init__(
        self,
        provider: DataProvider,
        desc: TableDesc,
        *,
        idtype_registry: Optional[IDTypeRegistry] = None,
        reducers: Optional[ReducerRegistry] = None,
    ) -> None:
        self.provider = provider
        self.desc = desc
        self.idtype_registry = idtype_registry if idtype_registry is not None else get_registry()
        self.reducers = reducers

    # -------------------------------------------------------------------------
    # Properties & getters
    # -------------------------------------------------------------------------
    @property
    def root(self) -> Table:
        return self

    @property
    def nrow(self) -> int:
        return self.provider.dim[0]

    @property
    def ncol(self) -> int:
        return self.provider.dim[1]

    @property
    def rowtype(self) -> IDType:
        return self.idtype_registry.resolve(self.desc.rowtype)

    @property
    def coltype(self) -> IDType:
        return self.idtype_registry.resolve(self.desc.coltype)

    @property
    def valuetype(self) -> str:
        return self.desc.value_type

    @property
    def idtype(self) -> IDType:
        return self.rowtype

    @property
    def idtypes(self) -> List[IDType]:
        return [self.idtype]

    @property
    def t(self) -> TableView:
        return TableView(self, Range.all(), transposed=True)

    def size(self) -> List[int]:
        return list(self.provider.dim)

    # -------------------------------------------------------------------------
    # Internal: validation and provider calls
    # -------------------------------------------------------------------------
    def _checked(self, range_: RangeLike, shape: Optional[List[int]] = None) -> Range:
        r = parse(range_)
        r.size(self.size() if shape is None else shape)
        return r

    def _check_row(self, i: int) -> None:
        if not 0 <= i < self.nrow:
            raise IndexOutOfRange(f"row {i} is out of range for {self.nrow} rows")

    async def _resolve(self, op: str, call: Callable[[], Awaitable[T]]) -> T:
        try:
            return await call()
        except RangeViewError:
            raise
        except Exception as exc:
            logger.exception(
                "Provider call failed",
                extra={"table": self.desc.id, "op": op},
            )
            raise ProviderFailure(f"{op} failed for table '{self.desc.id}'") from exc

    # -------------------------------------------------------------------------
    # Composition
    # -------------------------------------------------------------------------
    def view(self, range_: RangeLike = None) -> TableView:
        return TableView(self, self._checked(range_))

    def reduce(
        self,
        f: Union[Callable[..., Any], str],
        this_arg: Any = None,
        valuetype: Any = None,
        idtype: Union[IDType, str, None] = None,
        **params: Any,
    ) -> ReductionProjection:
        return ReductionProjection(
            self,
            f,
            this_arg=this_arg,
            valuetype=valuetype,
            idtype=idtype,
            params=params,
            reducers=self.reducers,
        )

    def col(self, j: int) -> SliceVector:
        """Column j as a one-dimensional dataset over all rows."""
        return SliceVector(self, j)

    def slice(self, j: int) -> SliceVector:
        return self.col(j)

    def restore(self, persisted: Any) -> BaseDataset:
        if isinstance(persisted, dict):
            if persisted.get("f"):
                projection = restore_reduction(self, persisted, self.reducers)
                return projection if projection is not None else self
            if persisted.get("slice") is not None:
                return restore_slice(self, persisted)
            if persisted.get("range") is not None and persisted.get("transposed"):
                return super().restore(persisted).t
        return super().restore(persisted)

    def persist(self) -> Any:
        return self.desc.id

    # -------------------------------------------------------------------------
    # Resolving accessors
    # -------------------------------------------------------------------------
    def at(self, i: int, j: int) -> Awaitable[Any]:
        self._check_row(i)
        if not 0 <= j < self.ncol:
            raise IndexOutOfRange(f"column {j} is out of range for {self.ncol} columns")
        return self._resolve("at", lambda: self.provider.at(i, j))

    def row_at(self, i: int) -> Awaitable[List[Any]]:
        self._check_row(i)
        r = Range((Range1D.single(i),))
        return self._resolve("row_at", lambda: self._first_row(r))

    async def _first_row(self, r: Range) -> List[Any]:
        return (await self.provider.data(r))[0]

    def data(self, range_: RangeLike = None) -> Awaitable[List[List[Any]]]:
        r = self._checked(range_)
        return self._resolve("data", lambda: self.provider.data(r))

    def rows(self, range_: RangeLike = None) -> Awaitable[List[str]]:
        r = self._checked(range_)
        return self._resolve("rows", lambda: self.provider.rows(r))

    def names(self, range_: RangeLike = None) -> Awaitable[List[str]]:
        return self.rows(range_)

    def cols(self, range_: RangeLike = None) -> Awaitable[List[str]]:
        """Column names; dim 0 of `range_` selects columns."""
        r = self._checked(range_, self.size()[::-1])
        return self._resolve("cols", lambda: self.provider.cols(r))

    def row_ids(self, range_: RangeLike = None) -> Awaitable[Range]:
        r = self._checked(range_)
        return self._resolve("row_ids", lambda: self.provider.row_ids(r))

    def col_ids(self, range_: RangeLike = None) -> Awaitable[Range]:
        """Column ids; dim 0 of `range_` selects columns."""
        r = self._checked(range_, self.size()[::-1])
        return self._resolve("col_ids", lambda: self.provider.col_ids(r))

    def ids(self, range_: RangeLike = None) -> Awaitable[Range]:
        return self.row_ids(range_)

    def col_data(self, column: str, range_: RangeLike = None) -> Awaitable[List[Any]]:
        r = self._checked(range_)
        return self._resolve("col_data", lambda: self.provider.col_data(column, r))

    def objects(self, range_: RangeLike = None) -> Awaitable[List[Dict[str, Any]]]:
        r = self._checked(range_)
        return self._resolve("objects", lambda: self.provider.objects(r))

    def stats(self, range_: RangeLike = None) -> Awaitable[Statistics]:
        r = self._checked(range_)
        return self._resolve("stats", lambda: self.provider.stats(r))

    def hist(
        self,
        bins: Optional[int] = None,
        range_: RangeLike = None,
        contained_ids: int = IDTYPE_ROW,
    ) -> Awaitable[Histogram]:
        r = self._checked(range_)
        return self._resolve("hist", lambda: self.provider.hist(bins, r, contained_ids))
