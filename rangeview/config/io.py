from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List, Tuple

from rangeview.config.model import GlobalConfig, TableConfig
from rangeview.config.table_loader import from_config
from rangeview.core.exceptions import ConfigError
from rangeview.core.table import Table

logger = logging.getLogger(__name__)


def load_global_config(root: Path) -> GlobalConfig:
    """
    Load configuration from a directory using the multi-file layout.

    Expected structure:

        root/
            global.json
            tables/
                table_1.json
                table_2.json
                ...

    - title: defaults to 'rangeview'
    - default_bins: histogram bins used by consumers when none is requested
    - data_root: absolute, or resolved relative to 'root'
    - tables: one TableConfig per file in 'tables/', sorted by file name

    :raises FileNotFoundError: if global.json does not exist
    :raises ConfigError: if a file is not valid JSON
    """
    root = Path(root)
    logger.info("Loading global config", extra={"config_root": str(root)})

    global_path = root / "global.json"
    if not global_path.is_file():
        raise FileNotFoundError(f"File not found at {global_path}")

    raw_global = _read_json(global_path)

    tables_dir = root / "tables"
    tables: List[TableConfig] = []
    if tables_dir.is_dir():
        for idx, config_file in enumerate(sorted(tables_dir.glob("*.json"))):
            tables.append(
                TableConfig.from_raw(_read_json(config_file), source_path=config_file, index=idx)
            )

    data_root_raw = raw_global.get("data_root")
    if data_root_raw is None:
        data_root = None
    else:
        data_root_path = Path(data_root_raw)
        data_root = data_root_path if data_root_path.is_absolute() else (root / data_root_path).resolve()

    return GlobalConfig(
        title=raw_global.get("title", "rangeview"),
        default_bins=raw_global.get("default_bins"),
        data_root=data_root,
        tables=tables,
    )


def _read_json(path: Path) -> dict:
    try:
        with path.open() as f:
            raw = json.load(f)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"Expected a JSON object in {path}")
    return raw


def load_tables(path: Path) -> Tuple[GlobalConfig, List[Table]]:
    """
    Load the global configuration and materialise every configured Table.

    A relative table path is resolved against RANGEVIEW_DATA_ROOT first, then
    against the config's data_root.
    """
    global_config = load_global_config(path)

    tables = [from_config(cfg, data_root=global_config.data_root) for cfg in global_config.tables]

    logger.info(
        "Tables loaded from config root",
        extra={
            "config_root": str(path),
            "n_tables": len(tables),
            "table_keys": [t.desc.id for t in tables],
        },
    )
    return global_config, tables
