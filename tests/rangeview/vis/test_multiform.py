import asyncio

import anndata as ad
import numpy as np
import pandas as pd
import pytest

from rangeview.core.idtype import IDTypeRegistry
from rangeview.core.table import Table, TableDesc
from rangeview.providers.anndata_provider import AnnDataProvider
from rangeview.vis.base_vis import BaseVis
from rangeview.vis.multiform import MultiForm
from rangeview.vis.vis_registry import VisRegistry


class _SlowVis(BaseVis):
    id = "slow"
    label = "Slow"

    async def compute_data(self):
        await asyncio.sleep(0.05)
        return "slow"

    def render_figure(self, computed):
        return self.empty_figure(computed)


class _FastVis(BaseVis):
    id = "fast"
    label = "Fast"

    async def compute_data(self):
        return "fast"

    def render_figure(self, computed):
        return self.empty_figure(computed)


class _FailingVis(BaseVis):
    id = "failing"
    label = "Failing"

    async def compute_data(self):
        await asyncio.sleep(0.01)
        raise RuntimeError("backend went away")

    def render_figure(self, computed):
        return self.empty_figure(computed)


class _TwoDimOnlyVis(_FastVis):
    id = "two-dim"

    @classmethod
    def accepts(cls, data):
        return len(data.dim) == 2


def _make_table() -> Table:
    X = np.ones((2, 2))
    provider = AnnDataProvider(
        ad.AnnData(X=X, obs=pd.DataFrame(index=pd.Index(["a", "b"])), var=pd.DataFrame(index=pd.Index(["x", "y"]))),
        name="mf",
    )
    return Table(provider, TableDesc(id="mf", name="MF"), idtype_registry=IDTypeRegistry())


def _registry() -> VisRegistry:
    registry = VisRegistry()
    registry.register(_SlowVis)
    registry.register(_FastVis)
    registry.register(_TwoDimOnlyVis)
    return registry


def test_create_switches_to_initial_vis():
    async def scenario():
        return await MultiForm(_make_table(), _registry(), initial_vis="fast").create()

    multiform = asyncio.run(scenario())

    assert multiform.act is _FastVis
    assert isinstance(multiform.act_vis, _FastVis)
    assert multiform.figure.layout.title.text == "fast"


def test_stale_switch_result_is_discarded():
    events = []

    async def scenario():
        multiform = MultiForm(_make_table(), _registry())
        multiform.on("change", lambda new, old: events.append(("change", new.id)))
        multiform.on("changed", lambda new, old: events.append(("changed", new.id)))

        slow = multiform.switch_to("slow")
        fast = multiform.switch_to("fast")
        return multiform, await slow, await fast

    multiform, slow_vis, fast_vis = asyncio.run(scenario())

    assert slow_vis is None
    assert isinstance(fast_vis, _FastVis)
    assert multiform.act is _FastVis
    assert multiform.act_vis is fast_vis
    assert multiform.figure.layout.title.text == "fast"
    assert events == [("change", "slow"), ("change", "fast"), ("changed", "fast")]


def test_failure_of_superseded_load_is_discarded(caplog):
    async def scenario():
        registry = _registry()
        registry.register(_FailingVis)
        multiform = MultiForm(_make_table(), registry)

        failing = multiform.switch_to("failing")
        fast = multiform.switch_to("fast")
        await asyncio.sleep(0.05)
        return multiform, failing, await fast

    multiform, failing, fast_vis = asyncio.run(scenario())

    assert failing.done()
    assert failing.result() is None
    assert isinstance(fast_vis, _FastVis)
    assert multiform.act is _FastVis
    assert "Superseded vis load failed" in caplog.text


def test_failure_of_current_load_propagates():
    async def scenario():
        registry = _registry()
        registry.register(_FailingVis)
        multiform = MultiForm(_make_table(), registry)
        await multiform.switch_to("failing")

    with pytest.raises(RuntimeError, match="backend went away"):
        asyncio.run(scenario())


def test_switch_to_active_vis_reuses_loader():
    async def scenario():
        multiform = MultiForm(_make_table(), _registry())
        first = await multiform.switch_to(1)
        second = await multiform.switch_to(_FastVis)
        return first, second

    first, second = asyncio.run(scenario())

    assert first is second


def test_switch_to_unknown_vis_raises():
    multiform = MultiForm(_make_table().reduce("sum"), _registry())

    assert _TwoDimOnlyVis not in multiform.visses
    with pytest.raises(ValueError):
        multiform.switch_to("two-dim")
    with pytest.raises(ValueError):
        multiform.switch_to(10)


def test_options_are_merged_and_persisted():
    async def scenario():
        multiform = MultiForm(
            _make_table(),
            _registry(),
            initial_vis="fast",
            options={"all": {"a": 1}, "fast": {"b": 2}},
        )
        await multiform.create()
        return multiform

    multiform = asyncio.run(scenario())

    assert multiform.persist() == {"id": "fast", "content": {"a": 1, "b": 2}}


def test_restore_switches_and_restores_content():
    async def scenario():
        multiform = MultiForm(_make_table(), _registry())
        await multiform.restore({"id": "fast", "content": {"b": 3}})
        return multiform

    multiform = asyncio.run(scenario())

    assert multiform.act is _FastVis
    assert multiform.act_vis.options == {"b": 3}


def test_restore_of_unknown_vis_is_noop():
    async def scenario():
        multiform = MultiForm(_make_table(), _registry())
        await multiform.restore({"id": "gone", "content": None})
        await multiform.restore(None)
        return multiform

    multiform = asyncio.run(scenario())

    assert multiform.act is None
    assert multiform.persist() == {"id": None, "content": None}
