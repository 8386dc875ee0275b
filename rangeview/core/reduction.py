"""
Row reductions of a table exposed as one-dimensional datasets.

Reducers are persisted by name through a ReducerRegistry: a saved
projection stores {"f": name, "params": {...}, "valuetype", "idtype"} and
restoring it looks the name up again. Source code is never stored.
"""

from __future__ import annotations

import logging
import types
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, List, Optional, Union

import numpy as np

from .base_dataset import BaseDataset
from .exceptions import ReducerNotRegistered
from .idtype import IDType
from .range import Range
from .range_parser import RangeLike, parse
from .stats import IDTYPE_ROW, compute_hist, compute_stats

if TYPE_CHECKING:
    from .table import Table

logger = logging.getLogger(__name__)

Reducer = Callable[..., Any]


class ReducerRegistry:
    """
    Registry of named row reducers.

    - a reducer is called as reducer(row_values, **params)
    - each name is unique; registering the same function twice under one name is a no-op
    """

    def __init__(self):
        self._reducers: Dict[str, Reducer] = {}

    def register(self, name: str, fn: Optional[Reducer] = None):
        """
        Register `fn` under `name`. Usable as a decorator when fn is omitted.

        :raises ValueError: if the name is taken by a different function
        """
        if fn is None:
            def decorator(f: Reducer) -> Reducer:
                self.register(name, f)
                return f
            return decorator

        existing = self._reducers.get(name)
        if existing is not None and existing is not fn:
            raise ValueError(f"Reducer '{name}' already registered")
        self._reducers[name] = fn
        return fn

    def get(self, name: str) -> Reducer:
        try:
            return self._reducers[name]
        except KeyError:
            raise ReducerNotRegistered(f"Reducer '{name}' not registered") from None

    def name_of(self, fn: Reducer) -> Optional[str]:
        for name, registered in self._reducers.items():
            if registered is fn:
                return name
        return None

    def names(self) -> List[str]:
        return list(self._reducers)


default_reducers = ReducerRegistry()


@default_reducers.register("sum")
def row_sum(row: List[Any]) -> float:
    return float(np.nansum(np.asarray(row, dtype=float)))


@default_reducers.register("mean")
def row_mean(row: List[Any]) -> float:
    values = np.asarray(row, dtype=float)
    return float(np.nanmean(values)) if values.size else float("nan")


@default_reducers.register("min")
def row_min(row: List[Any]) -> float:
    return float(np.nanmin(np.asarray(row, dtype=float)))


@default_reducers.register("max")
def row_max(row: List[Any]) -> float:
    return float(np.nanmax(np.asarray(row, dtype=float)))


@default_reducers.register("count_nonzero")
def row_count_nonzero(row: List[Any]) -> int:
    return int(np.count_nonzero(np.asarray(row)))


class ReductionProjection(BaseDataset):
    """
    One-dimensional dataset whose i-th element is reducer(row i of the root).

    The projection carries its own row range, so view() composes into a new
    projection over the same root instead of nesting wrappers.
    """

    def __init__(
        self,
        root: "Table",
        reducer: Union[Reducer, str],
        *,
        this_arg: Any = None,
        valuetype: Any = None,
        idtype: Union[IDType, str, None] = None,
        params: Optional[Dict[str, Any]] = None,
        range_: RangeLike = None,
        reducers: Optional[ReducerRegistry] = None,
    ) -> None:
        self.root = getattr(root, "root", root)
        self.reducers = reducers if reducers is not None else default_reducers
        self._reducer = self.reducers.get(reducer) if isinstance(reducer, str) else reducer
        self.this_arg = this_arg
        self._fn = types.MethodType(self._reducer, this_arg) if this_arg is not None else self._reducer
        self.params: Dict[str, Any] = dict(params or {})
        self.valuetype = valuetype if valuetype is not None else self.root.desc.value_type
        self.idtype = (
            self.root.idtype_registry.resolve(idtype) if idtype is not None else self.root.rowtype
        )
        self.range = parse(range_)
        # validate against the root rows
        self.range.size([self.root.nrow])

    def _reduce(self, row: List[Any]) -> Any:
        return self._fn(row, **self.params)

    def _compose(self, range_: RangeLike) -> Range:
        return self.range.pre_multiply(parse(range_), [self.root.nrow])

    def _derive(self, range_: Range) -> ReductionProjection:
        return ReductionProjection(
            self.root,
            self._reducer,
            this_arg=self.this_arg,
            valuetype=self.valuetype,
            idtype=self.idtype,
            params=self.params,
            range_=range_,
            reducers=self.reducers,
        )

    # -------------------------------------------------------------------------
    # Dataset contract
    # -------------------------------------------------------------------------
    def size(self) -> List[int]:
        return self.range.size([self.root.nrow])

    def view(self, range_: RangeLike = None) -> ReductionProjection:
        r = parse(range_)
        if r.is_all:
            return self
        return self._derive(self.range.pre_multiply(r, [self.root.nrow]))

    def at(self, i: int) -> Awaitable[Any]:
        (row,) = self.range.invert([i], [self.root.nrow])
        return self._reduce_row(self.root.row_at(row))

    async def _reduce_row(self, pending: Awaitable[List[Any]]) -> Any:
        return self._reduce(await pending)

    def data(self, range_: RangeLike = None) -> Awaitable[List[Any]]:
        return self._reduce_rows(self.root.data(self._compose(range_)))

    async def _reduce_rows(self, pending: Awaitable[List[List[Any]]]) -> List[Any]:
        return [self._reduce(row) for row in await pending]

    def names(self, range_: RangeLike = None) -> Awaitable[List[str]]:
        return self.root.rows(self._compose(range_))

    def ids(self, range_: RangeLike = None) -> Awaitable[Range]:
        return self.root.row_ids(self._compose(range_))

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
        """
        :raises ReducerNotRegistered: if the reducer has no registered name
        """
        name = self.reducers.name_of(self._reducer)
        if name is None:
            raise ReducerNotRegistered(
                f"Reducer {getattr(self._reducer, '__name__', self._reducer)!r} has no registered name"
            )
        persisted: Dict[str, Any] = {
            "f": name,
            "params": dict(self.params),
            "valuetype": self.valuetype,
            "idtype": self.idtype.id,
        }
        if not self.range.is_all:
            persisted["range"] = str(self.range)
        return persisted


def restore_reduction(
    root: "Table",
    persisted: Dict[str, Any],
    reducers: Optional[ReducerRegistry] = None,
) -> Optional[ReductionProjection]:
    """
    Rebuild a projection from its persisted descriptor.
    Returns None (and logs) if the reducer name is unknown.
    """
    reducers = reducers if reducers is not None else default_reducers
    name = persisted.get("f")
    try:
        fn = reducers.get(name)
    except ReducerNotRegistered:
        logger.warning("Unknown reducer in descriptor, skipping restore", extra={"reducer": name})
        return None

    projection = ReductionProjection(
        root,
        fn,
        valuetype=persisted.get("valuetype"),
        idtype=persisted.get("idtype"),
        params=persisted.get("params") or {},
        reducers=reducers,
    )
    if persisted.get("range") is not None:
        projection = projection.view(parse(persisted["range"]))
    return projection
