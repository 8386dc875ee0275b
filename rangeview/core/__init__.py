"""
Core domain layer: the Range algebra, range parsing, id types, and the
dataset variants (root Table, TableView, ReductionProjection, SliceVector)
"""

from .exceptions import (
    CapabilityNotImplemented,
    DimensionMismatch,
    IndexOutOfRange,
    ProviderFailure,
    RangeSyntaxError,
    RangeViewError,
    ReducerNotRegistered,
)
from .range import Range, Range1D, RangeElem, all_range
from .range_parser import parse
from .idtype import IDType, IDTypeRegistry, get_registry, init_registry
from .base_dataset import BaseDataset
from .reduction import ReducerRegistry, ReductionProjection, default_reducers
from .slice_vector import SliceVector
from .table_view import TableView
from .table import Table, TableDesc

__all__ = [
    "BaseDataset",
    "CapabilityNotImplemented",
    "DimensionMismatch",
    "IDType",
    "IDTypeRegistry",
    "IndexOutOfRange",
    "ProviderFailure",
    "Range",
    "Range1D",
    "RangeElem",
    "RangeSyntaxError",
    "RangeViewError",
    "ReducerNotRegistered",
    "ReducerRegistry",
    "ReductionProjection",
    "SliceVector",
    "Table",
    "TableDesc",
    "TableView",
    "all_range",
    "default_reducers",
    "get_registry",
    "init_registry",
    "parse",
]
