from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Awaitable, List, Optional

from .exceptions import CapabilityNotImplemented
from .range import Range
from .range_parser import RangeLike, parse

if TYPE_CHECKING:
    from .table import Table

logger = logging.getLogger(__name__)


class BaseDataset(ABC):
    """
    Capability interface shared by every dataset variant:
    the root Table, TableView and ReductionProjection.

    Contract:
    - composing (view, size) is synchronous and never touches the provider
    - resolving accessors (at, data, ids, names, stats, hist) validate and
      translate their range synchronously, then return an awaitable; range
      errors are raised by the call itself, before any provider work
    - 'root' is the true root Table; datasets never mutate it
    """

    root: "Table"

    @abstractmethod
    def size(self) -> List[int]:
        raise NotImplementedError()

    @abstractmethod
    def view(self, range_: RangeLike = None) -> "BaseDataset":
        raise NotImplementedError()

    @abstractmethod
    def at(self, *coord: int) -> Awaitable[Any]:
        raise NotImplementedError()

    @abstractmethod
    def data(self, range_: RangeLike = None) -> Awaitable[list]:
        raise NotImplementedError()

    @abstractmethod
    def names(self, range_: RangeLike = None) -> Awaitable[List[str]]:
        raise NotImplementedError()

    @abstractmethod
    def ids(self, range_: RangeLike = None) -> Awaitable[Range]:
        raise NotImplementedError()

    @abstractmethod
    def stats(self, range_: RangeLike = None) -> Awaitable[Any]:
        raise NotImplementedError()

    @abstractmethod
    def hist(self, bins: Optional[int] = None, range_: RangeLike = None, contained_ids: int = 0) -> Awaitable[Any]:
        raise NotImplementedError()

    @abstractmethod
    def persist(self) -> Any:
        raise NotImplementedError()

    # ------------------------------------------------------------------
    # Common helpers for all datasets
    # ------------------------------------------------------------------
    @property
    def dim(self) -> List[int]:
        return self.size()

    @property
    def length(self) -> int:
        n = 1
        for extent in self.dim:
            n *= extent
        return n

    async def id_view(self, id_range: RangeLike = None) -> "BaseDataset":
        """
        View selecting the given ids (not positions), in the order of `id_range`.
        Needs one provider round trip to resolve the current ids.
        """
        ids = await self.ids()
        return self.view(ids.index_of(parse(id_range)))

    def restore(self, persisted: Any) -> "BaseDataset":
        """
        Best-effort restore of a persisted descriptor onto this dataset.

        - {"range": "..."} -> view of it; other keys are left to subclasses
        - anything else -> self, unchanged
        """
        if isinstance(persisted, dict) and persisted.get("range") is not None:
            return self.view(parse(persisted["range"]))
        logger.debug(
            "Unknown descriptor, restore is a no-op",
            extra={"dataset": type(self).__name__, "descriptor_type": type(persisted).__name__},
        )
        return self

    def query_view(self, name: str, args: Any = None) -> "BaseDataset":
        raise CapabilityNotImplemented(
            f"query view '{name}' is not provided by {type(self).__name__}"
        )
