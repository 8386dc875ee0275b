import importlib.util
import logging
from pathlib import Path

from pythonjsonlogger import jsonlogger

SCRIPT = Path(__file__).resolve().parents[2] / "scripts" / "make_demo_table.py"


def _load_script():
    spec = importlib.util.spec_from_file_location("make_demo_table", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_demo_config_loads_back(tmp_path, monkeypatch):
    monkeypatch.delenv("RANGEVIEW_DATA_ROOT", raising=False)
    monkeypatch.delenv("RANGEVIEW_LOG_FORMAT", raising=False)
    script = _load_script()

    root = logging.getLogger()
    saved = (list(root.handlers), root.level)
    try:
        tables = script.main(tmp_path)

        assert isinstance(root.handlers[0].formatter, jsonlogger.JsonFormatter)
    finally:
        root.handlers[:] = saved[0]
        root.setLevel(saved[1])

    assert (tmp_path / "data" / "demo.h5ad").is_file()
    assert [t.desc.id for t in tables] == ["demo"]
    table = tables[0]
    assert table.size() == [200, 40]
    assert table.rowtype.id == "demo_row"
