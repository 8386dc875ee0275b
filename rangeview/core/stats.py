from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np

from .range import Range1D

IDTYPE_ROW = 0
IDTYPE_COLUMN = 1
IDTYPE_CELL = 2


@dataclass(frozen=True)
class Statistics:
    """
    Summary statistics over the finite values of a selection.
    NaN and infinite values are counted in `nans` and excluded from everything else.
    """

    min: float
    max: float
    sum: float
    mean: float
    var: float
    sd: float
    n: int
    nans: int


@dataclass(frozen=True)
class Histogram:
    """
    Equal-width histogram.

    - counts[k] is the number of values in bin k
    - edges has len(counts) + 1 entries
    - contained[k] holds the ids (row, column or flat cell index depending on
      contained_ids) of the values in bin k
    """

    counts: List[int]
    edges: List[float]
    value_range: Tuple[float, float]
    contained: List[Range1D] = field(default_factory=list)

    @property
    def bins(self) -> int:
        return len(self.counts)

    @property
    def largest_frequency(self) -> int:
        return max(self.counts) if self.counts else 0


def _finite(values: np.ndarray) -> Tuple[np.ndarray, int]:
    flat = np.asarray(values, dtype=float).ravel()
    mask = np.isfinite(flat)
    return flat[mask], int((~mask).sum())


def compute_stats(values: np.ndarray) -> Statistics:
    finite, nans = _finite(values)
    if finite.size == 0:
        nan = float("nan")
        return Statistics(min=nan, max=nan, sum=0.0, mean=nan, var=nan, sd=nan, n=0, nans=nans)
    return Statistics(
        min=float(finite.min()),
        max=float(finite.max()),
        sum=float(finite.sum()),
        mean=float(finite.mean()),
        var=float(finite.var()),
        sd=float(finite.std()),
        n=int(finite.size),
        nans=nans,
    )


def compute_hist(
    values: np.ndarray,
    bins: Optional[int] = None,
    *,
    value_range: Optional[Tuple[float, float]] = None,
    row_ids: Optional[Sequence[int]] = None,
    col_ids: Optional[Sequence[int]] = None,
    contained_ids: int = IDTYPE_ROW,
) -> Histogram:
    """
    Histogram of a 1-D or 2-D value block.

    Bins default to Sturges' rule. For 1-D input the values are treated as a
    single column, so row ids apply to each element.
    """
    block = np.asarray(values, dtype=float)
    if block.ndim == 1:
        block = block.reshape(-1, 1)

    finite, _ = _finite(block)
    if bins is None:
        bins = max(1, int(np.ceil(np.log2(max(finite.size, 1)) + 1)))
    if value_range is None:
        value_range = (float(finite.min()), float(finite.max())) if finite.size else (0.0, 1.0)

    counts, edges = np.histogram(finite, bins=bins, range=value_range)

    n_rows, n_cols = block.shape
    if contained_ids == IDTYPE_ROW:
        ids = np.repeat(np.asarray(row_ids if row_ids is not None else range(n_rows)), n_cols)
    elif contained_ids == IDTYPE_COLUMN:
        ids = np.tile(np.asarray(col_ids if col_ids is not None else range(n_cols)), n_rows)
    else:
        ids = np.arange(n_rows * n_cols)

    flat = block.ravel()
    valid = np.isfinite(flat)
    positions = np.digitize(flat[valid], edges[1:-1], right=False)
    inside = (flat[valid] >= value_range[0]) & (flat[valid] <= value_range[1])
    valid_ids = ids.ravel()[valid]

    contained = [
        Range1D.from_indices(sorted(set(valid_ids[inside & (positions == k)].tolist())))
        for k in range(len(counts))
    ]

    return Histogram(
        counts=[int(c) for c in counts],
        edges=[float(e) for e in edges],
        value_range=(float(value_range[0]), float(value_range[1])),
        contained=contained,
    )
