import asyncio
import logging

import anndata as ad
import numpy as np
import pandas as pd
import pytest

from rangeview.core.exceptions import IndexOutOfRange, ProviderFailure
from rangeview.core.idtype import IDTypeRegistry
from rangeview.core.range_parser import parse
from rangeview.core.table import Table, TableDesc
from rangeview.providers.anndata_provider import AnnDataProvider


class _BrokenProvider(AnnDataProvider):
    async def data(self, range_):
        raise RuntimeError("backend down")


def _make_adata() -> ad.AnnData:
    X = np.arange(12, dtype=float).reshape(4, 3)
    obs = pd.DataFrame(index=pd.Index(["a", "b", "c", "d"]))
    var = pd.DataFrame(index=pd.Index(["x", "y", "z"]))
    return ad.AnnData(X=X, obs=obs, var=var)


def _make_table(provider_cls=AnnDataProvider, registry=None) -> Table:
    provider = provider_cls(_make_adata(), name="small")
    return Table(provider, TableDesc(id="small", name="Small"), idtype_registry=registry or IDTypeRegistry())


def test_root_shape_and_defaults():
    table = _make_table()

    assert table.size() == [4, 3]
    assert table.dim == [4, 3]
    assert table.nrow == 4
    assert table.ncol == 3
    assert table.root is table
    assert table.persist() == "small"
    assert table.rowtype.id == "_rows"
    assert table.rowtype.internal
    assert table.coltype.id == "_cols"


def test_root_accessors():
    table = _make_table()

    assert asyncio.run(table.at(1, 2)) == 5.0
    assert asyncio.run(table.rows(parse([3, 0]))) == ["d", "a"]
    assert asyncio.run(table.cols(parse([2]))) == ["z"]
    assert asyncio.run(table.row_at(2)) == [6.0, 7.0, 8.0]
    assert asyncio.run(table.data(parse(([0], [1, 2])))) == [[1.0, 2.0]]


def test_root_validates_before_provider():
    table = _make_table()

    with pytest.raises(IndexOutOfRange):
        table.at(4, 0)
    with pytest.raises(IndexOutOfRange):
        table.at(0, 3)
    with pytest.raises(IndexOutOfRange):
        table.rows(parse([9]))
    # column selections are checked against the column extent
    with pytest.raises(IndexOutOfRange):
        table.cols(parse([3]))


def test_provider_errors_become_provider_failure(caplog):
    table = _make_table(_BrokenProvider)

    with caplog.at_level(logging.ERROR):
        with pytest.raises(ProviderFailure) as excinfo:
            asyncio.run(table.data())

    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert "Provider call failed" in caplog.text


def test_view_of_root_is_a_new_view_each_time():
    table = _make_table()
    assert table.view() is not table.view()
    assert table.view().size() == [4, 3]


def test_injected_idtype_registry_is_used():
    registry = IDTypeRegistry()
    table = _make_table(registry=registry)

    assert table.idtypes == [table.rowtype]
    assert registry.get("_rows") is table.rowtype
