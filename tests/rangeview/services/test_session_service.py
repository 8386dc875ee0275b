from __future__ import annotations

import anndata as ad
import numpy as np
import pandas as pd
import pytest

from rangeview.core.idtype import IDTypeRegistry
from rangeview.core.range_parser import parse
from rangeview.core.reduction import ReductionProjection
from rangeview.core.table import Table, TableDesc
from rangeview.core.table_view import TableView
from rangeview.providers.anndata_provider import AnnDataProvider
from rangeview.services.session_model import new_session_metadata, session_from_dict, session_to_dict
from rangeview.services.session_service import SessionService
from rangeview.services.session_store import InMemorySessionStore, LocalSessionStore
from rangeview.validation.errors import ValidationError
from rangeview.validation.session_validation import validate_session_dict


def _make_table() -> Table:
    X = np.arange(20, dtype=float).reshape(5, 4)
    obs = pd.DataFrame(index=pd.Index([f"r{i}" for i in range(5)]))
    var = pd.DataFrame(index=pd.Index([f"c{j}" for j in range(4)]))
    provider = AnnDataProvider(ad.AnnData(X=X, obs=obs, var=var), name="t1")
    return Table(provider, TableDesc(id="t1", name="T1"), idtype_registry=IDTypeRegistry())


def _service(tmp_path) -> SessionService:
    return SessionService(LocalSessionStore(tmp_path / "sessions"))


def _new_session(session_id: str = "s1"):
    return new_session_metadata(session_id=session_id, app_version="test", tables_config_hash="hash")


def test_save_view_creates_new_entry(tmp_path):
    service = _service(tmp_path)
    table = _make_table()
    session = _new_session()

    session, view_id, is_overwrite = service.save_view(session, table.view(parse([1, 2])), label="  Rows 1-2 ")

    assert is_overwrite is False
    assert view_id.startswith("view-")
    assert len(session.views) == 1
    saved = session.views[0]
    assert saved.table_key == "t1"
    assert saved.descriptor == {"root": "t1", "range": "1:3,:"}
    assert saved.label == "Rows 1-2"


def test_save_view_overwrites_existing_id(tmp_path):
    service = _service(tmp_path)
    table = _make_table()
    session = _new_session()

    session, view_id, _ = service.save_view(session, table.view(parse([1])))
    session, view_id2, is_overwrite = service.save_view(session, table.view(parse([2])), view_id=view_id)

    assert is_overwrite is True
    assert view_id2 == view_id
    assert len(session.views) == 1
    assert session.views[0].descriptor["range"] == "2,:"


def test_session_round_trips_through_store(tmp_path):
    service = _service(tmp_path)
    table = _make_table()

    session = service.ensure_session(None, session_id="s1")
    service.save_view(session, table.view(parse(([0, 1], [3]))).t, vis={"id": "heatmap", "content": {}})
    service.save_view(session, table.reduce("sum"))

    loaded = service.load_session("s1")

    assert loaded is not None
    assert session_to_dict(loaded) == session_to_dict(session)

    view = service.restore_view(loaded.views[0], {"t1": table})
    assert isinstance(view, TableView)
    assert view.transposed
    assert view.size() == [1, 2]

    projection = service.restore_view(loaded.views[1], {"t1": table})
    assert isinstance(projection, ReductionProjection)
    assert projection.size() == [5]


def test_ensure_session_prefers_existing(tmp_path):
    service = _service(tmp_path)
    session = _new_session()

    assert service.ensure_session(session, session_id="other") is session

    created = service.ensure_session(None, session_id="fresh")
    assert created.session_id == "fresh"
    assert service.load_session("fresh") is not None


def test_delete_view_and_session(tmp_path):
    service = _service(tmp_path)
    table = _make_table()
    session = service.ensure_session(None, session_id="s1")

    session, view_id, _ = service.save_view(session, table.view(parse([0])))
    session = service.delete_view(session, view_id=view_id)
    assert session.views == []
    assert service.load_session("s1").views == []

    service.delete_session("s1")
    assert service.load_session("s1") is None


def test_unreadable_session_loads_as_none(tmp_path):
    service = _service(tmp_path)
    broken = tmp_path / "sessions" / "broken"
    broken.mkdir()
    (broken / "metadata.json").write_text("{not json")

    assert service.load_session("broken") is None


def test_restore_view_for_unknown_table_raises(tmp_path):
    service = _service(tmp_path)
    session, _, _ = service.save_view(_new_session(), _make_table().view(parse([0])))

    with pytest.raises(KeyError):
        service.restore_view(session.views[0], {})


def test_store_rejects_unsafe_session_ids(tmp_path):
    store = LocalSessionStore(tmp_path / "root")

    for bad in ("../outside", "a/b", "", ".hidden"):
        with pytest.raises(ValueError):
            store.read(bad)
    with pytest.raises(ValueError):
        InMemorySessionStore().write("../x", {})


def test_local_store_lists_and_deletes_sessions(tmp_path):
    store = LocalSessionStore(tmp_path)
    store.write("s2", {"session_id": "s2"})
    store.write("s1", {"session_id": "s1"})
    (tmp_path / "stray").mkdir()

    assert store.session_ids() == ["s1", "s2"]
    assert store.read("s1") == {"session_id": "s1"}
    assert not list(tmp_path.glob("s1/*.tmp"))

    store.delete("s1")
    store.delete("never-written")
    assert store.session_ids() == ["s2"]
    assert not (tmp_path / "s1").exists()
    with pytest.raises(KeyError):
        store.read("s1")


def test_service_works_on_in_memory_store():
    service = SessionService(InMemorySessionStore())
    table = _make_table()

    session = service.ensure_session(None, session_id="mem")
    service.save_view(session, table.col(1).view(parse([0, 2])))

    assert service.list_sessions() == ["mem"]
    loaded = service.load_session("mem")
    assert loaded.views[0].descriptor == {"root": "t1", "slice": 1, "range": "(0,2)"}
    restored = service.restore_view(loaded.views[0], {"t1": table})
    assert restored.size() == [2]


def test_unserialisable_descriptor_fails_on_save():
    service = SessionService(InMemorySessionStore())
    session = _new_session()

    class _Opaque:
        root = _make_table()

        def persist(self):
            return {"range": object()}

    with pytest.raises(TypeError):
        service.save_view(session, _Opaque())


def test_session_from_dict_none():
    assert session_from_dict(None) is None


def test_validation_flags_bad_entries():
    raw = {
        "session_id": "s1",
        "views": [
            {"id": "v1", "table_key": "t1", "descriptor": {"range": "(1,"}},
            {"id": "v2"},
            "not-an-object",
        ],
    }

    with pytest.raises(ValidationError) as excinfo:
        validate_session_dict(raw)

    codes = [issue.code for issue in excinfo.value.issues]
    assert codes == ["VIEW_RANGE", "VIEW_TABLE_KEY", "VIEW_TYPE"]


def test_validation_accepts_unknown_descriptors():
    validate_session_dict(
        {"session_id": "s1", "views": [{"id": "v1", "table_key": "t1", "descriptor": {"future": True}}]}
    )
