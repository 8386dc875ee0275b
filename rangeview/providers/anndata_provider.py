from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import anndata as ad
import numpy as np
import scipy.sparse

from rangeview.core.range import Range, Range1D
from rangeview.core.stats import IDTYPE_ROW, Histogram, Statistics, compute_hist, compute_stats

from .base_provider import DataProvider

logger = logging.getLogger(__name__)


class AnnDataProvider(DataProvider):
    """
    In-memory provider backed by an AnnData object.

    - rows are observations (obs_names), columns are variables (var_names)
    - values come from .X (dense or scipy-sparse; sparse blocks are densified per request)
    - row / column ids come from an integer .obs / .var column if configured,
      otherwise ids are the positions
    """

    def __init__(
        self,
        adata: ad.AnnData,
        *,
        name: str,
        row_id_column: Optional[str] = None,
        col_id_column: Optional[str] = None,
    ) -> None:
        self.adata = adata
        self.name = name
        self.row_id_column = row_id_column
        self.col_id_column = col_id_column

        self._row_ids = self._id_array(adata.obs, row_id_column, adata.n_obs)
        self._col_ids = self._id_array(adata.var, col_id_column, adata.n_vars)

        logger.debug(
            "AnnData provider ready",
            extra={"provider": name, "n_obs": adata.n_obs, "n_vars": adata.n_vars},
        )

    @staticmethod
    def _id_array(frame, column: Optional[str], n: int) -> np.ndarray:
        if column is None:
            return np.arange(n)
        return frame[column].to_numpy(dtype=int)

    # -------------------------------------------------------------------------
    # Internal: block extraction
    # -------------------------------------------------------------------------
    def _block(self, rows: Sequence[int], cols: Sequence[int]) -> np.ndarray:
        """Return the dense rows × cols block of .X (in request order)."""
        X = self.adata.X
        if scipy.sparse.issparse(X):
            return np.asarray(X[list(rows), :][:, list(cols)].toarray())
        return np.asarray(X)[np.ix_(list(rows), list(cols))]

    def _resolve(self, range_: Range) -> Tuple[List[int], List[int]]:
        rows, cols = range_.resolve(self.dim)
        return rows, cols

    # -------------------------------------------------------------------------
    # DataProvider
    # -------------------------------------------------------------------------
    @property
    def dim(self) -> Tuple[int, int]:
        return self.adata.n_obs, self.adata.n_vars

    async def at(self, i: int, j: int) -> Any:
        return self._block([i], [j])[0, 0].item()

    async def data(self, range_: Range) -> List[List[Any]]:
        rows, cols = self._resolve(range_)
        return self._block(rows, cols).tolist()

    async def rows(self, range_: Range) -> List[str]:
        idx = range_.dim(0).indices(self.adata.n_obs)
        return [str(n) for n in self.adata.obs_names[idx]]

    async def cols(self, range_: Range) -> List[str]:
        idx = range_.dim(0).indices(self.adata.n_vars)
        return [str(n) for n in self.adata.var_names[idx]]

    async def row_ids(self, range_: Range) -> Range:
        idx = range_.dim(0).indices(self.adata.n_obs)
        return Range((Range1D.from_indices(self._row_ids[idx].tolist()),))

    async def col_ids(self, range_: Range) -> Range:
        idx = range_.dim(0).indices(self.adata.n_vars)
        return Range((Range1D.from_indices(self._col_ids[idx].tolist()),))

    async def col_data(self, column: str, range_: Range) -> List[Any]:
        """
        Values of one column for the selected rows. `column` may name an .obs
        annotation or a variable (column of .X).

        :raises KeyError: if the column is neither
        """
        idx = range_.dim(0).indices(self.adata.n_obs)
        if column in self.adata.obs.columns:
            return self.adata.obs[column].iloc[idx].tolist()
        if column in self.adata.var_names:
            j = int(self.adata.var_names.get_loc(column))
            return self._block(idx, [j])[:, 0].tolist()
        raise KeyError(f"Column '{column}' not found in .obs or var_names")

    async def objects(self, range_: Range) -> List[Dict[str, Any]]:
        rows, cols = self._resolve(range_)
        block = self._block(rows, cols)
        names = self.adata.var_names[cols]
        out: List[Dict[str, Any]] = []
        for k, i in enumerate(rows):
            obj: Dict[str, Any] = {
                "_id": int(self._row_ids[i]),
                "_name": str(self.adata.obs_names[i]),
            }
            obj.update({str(n): v for n, v in zip(names, block[k].tolist())})
            out.append(obj)
        return out

    async def stats(self, range_: Range) -> Statistics:
        rows, cols = self._resolve(range_)
        return compute_stats(self._block(rows, cols))

    async def hist(
        self,
        bins: Optional[int],
        range_: Range,
        contained_ids: int = IDTYPE_ROW,
    ) -> Histogram:
        rows, cols = self._resolve(range_)
        return compute_hist(
            self._block(rows, cols),
            bins,
            row_ids=self._row_ids[rows].tolist(),
            col_ids=self._col_ids[cols].tolist(),
            contained_ids=contained_ids,
        )

    def persist(self) -> Any:
        return self.name
