from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from rangeview.core.range import Range
from rangeview.core.stats import IDTYPE_ROW, Histogram, Statistics


class DataProvider(ABC):
    """
    Abstract interface for whatever actually resolves cell values, names and ids
    (in-memory AnnData, a REST backend, a database, ...).

    Contract:
    - every range is expressed in root coordinates (dim 0 = rows, dim 1 = cols)
      and has already been validated against `dim` by the owning Table
    - `cols` and `col_ids` receive a range whose dim 0 selects columns
    - all resolving methods are coroutines; `dim` and `persist` are synchronous
    """

    @property
    @abstractmethod
    def dim(self) -> Tuple[int, int]:
        pass

    @abstractmethod
    async def at(self, i: int, j: int) -> Any:
        pass

    @abstractmethod
    async def data(self, range_: Range) -> List[List[Any]]:
        pass

    @abstractmethod
    async def rows(self, range_: Range) -> List[str]:
        pass

    @abstractmethod
    async def cols(self, range_: Range) -> List[str]:
        pass

    @abstractmethod
    async def row_ids(self, range_: Range) -> Range:
        pass

    @abstractmethod
    async def col_ids(self, range_: Range) -> Range:
        pass

    @abstractmethod
    async def col_data(self, column: str, range_: Range) -> List[Any]:
        pass

    @abstractmethod
    async def objects(self, range_: Range) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    async def stats(self, range_: Range) -> Statistics:
        pass

    @abstractmethod
    async def hist(
        self,
        bins: Optional[int],
        range_: Range,
        contained_ids: int = IDTYPE_ROW,
    ) -> Histogram:
        pass

    @abstractmethod
    def persist(self) -> Any:
        """Opaque descriptor; stored verbatim by the core."""
        pass
