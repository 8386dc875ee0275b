import asyncio

import anndata as ad
import numpy as np
import pandas as pd
import pytest

from rangeview.core.exceptions import IndexOutOfRange
from rangeview.core.idtype import IDTypeRegistry
from rangeview.core.range_parser import parse
from rangeview.core.slice_vector import SliceVector
from rangeview.core.table import Table, TableDesc
from rangeview.providers.anndata_provider import AnnDataProvider


def _make_table(value_type: str = "real") -> Table:
    """10 x 5 table, value at (i, j) is 5 * i + j."""
    X = np.arange(50, dtype=float).reshape(10, 5)
    obs = pd.DataFrame(index=pd.Index([f"r{i}" for i in range(10)]))
    var = pd.DataFrame(index=pd.Index([f"c{j}" for j in range(5)]))
    provider = AnnDataProvider(ad.AnnData(X=X, obs=obs, var=var), name="tiny")
    desc = TableDesc(id="tiny", name="Tiny", rowtype="row", coltype="col", value_type=value_type)
    return Table(provider, desc, idtype_registry=IDTypeRegistry())


def test_table_column_as_vector():
    table = _make_table()
    column = table.col(2)

    assert isinstance(column, SliceVector)
    assert column.size() == [10]
    assert asyncio.run(column.at(3)) == 17.0
    assert asyncio.run(column.data()) == [5.0 * i + 2 for i in range(10)]
    assert asyncio.run(column.names(parse([0, 9]))) == ["r0", "r9"]
    assert column.idtype.id == "row"
    assert table.slice(2).persist() == column.persist() == {"root": "tiny", "slice": 2}


def test_view_column_follows_view_range():
    table = _make_table()
    view = table.view(parse(([1, 3, 5], [0, 4])))

    column = view.col(1)

    assert column.root is table
    assert column.size() == [3]
    assert asyncio.run(column.data()) == [9.0, 19.0, 29.0]
    assert asyncio.run(column.names()) == ["r1", "r3", "r5"]


def test_transposed_view_column_runs_over_root_columns():
    table = _make_table()
    view = table.view(parse(([1, 3, 5], [0, 4]))).t

    column = view.col(2)

    assert view.size() == [2, 3]
    assert asyncio.run(column.data()) == [25.0, 29.0]
    assert asyncio.run(column.data()) == [row[2] for row in asyncio.run(view.data())]
    assert asyncio.run(column.names()) == ["c0", "c4"]
    assert asyncio.run(column.at(1)) == 29.0
    assert column.idtype.id == "col"
    assert column.persist() == {"root": "tiny", "slice": 5, "axis": 1, "range": "(0,4)"}


def test_vector_view_composes_and_restores():
    table = _make_table()
    sub = table.col(2).view(parse([4, 1]))

    assert isinstance(sub, SliceVector)
    assert asyncio.run(sub.data()) == [22.0, 7.0]
    assert sub.view(None) is sub

    persisted = sub.persist()
    assert persisted == {"root": "tiny", "slice": 2, "range": "(4,1)"}

    restored = table.restore(persisted)
    assert isinstance(restored, SliceVector)
    assert asyncio.run(restored.data()) == [22.0, 7.0]

    # restoring through a view resolves against the root as well
    through_view = table.view(parse([0])).restore(persisted)
    assert asyncio.run(through_view.data()) == [22.0, 7.0]

    transposed = table.view(parse(([1, 3, 5], [0, 4]))).t.col(0)
    assert asyncio.run(table.restore(transposed.persist()).data()) == [5.0, 9.0]


def test_vector_stats_and_hist():
    column = _make_table().col(0)

    stats = asyncio.run(column.stats())
    assert stats.n == 10
    assert stats.sum == 225.0

    hist = asyncio.run(column.hist(2))
    assert hist.counts == [5, 5]
    assert hist.contained[0].indices() == [0, 1, 2, 3, 4]


def test_column_out_of_range_raises():
    table = _make_table()

    with pytest.raises(IndexOutOfRange):
        table.col(5)
    with pytest.raises(IndexOutOfRange):
        table.view(parse(([1, 3, 5], [0, 4]))).t.col(3)
    with pytest.raises(IndexOutOfRange):
        table.view(parse(([1, 3, 5], [0, 4]))).col(2)


def test_valuetype_is_shared_by_all_variants():
    table = _make_table("int")
    view = table.view(parse([1, 2]))

    assert table.valuetype == "int"
    assert view.valuetype == "int"
    assert view.t.valuetype == "int"
    assert view.col(0).valuetype == "int"
    assert view.t.col(0).valuetype == "int"
