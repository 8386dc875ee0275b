from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

import anndata as ad
import pandas as pd

from rangeview.config.model import TableConfig
from rangeview.core.exceptions import TableConfigError
from rangeview.core.idtype import IDTypeRegistry
from rangeview.core.table import Table, TableDesc
from rangeview.providers.anndata_provider import AnnDataProvider

logger = logging.getLogger(__name__)


def _resolve_path(cfg: TableConfig, data_root: Optional[Path]) -> Path:
    path = cfg.path
    if path.is_absolute():
        return path

    env_root = os.environ.get("RANGEVIEW_DATA_ROOT")
    if env_root:
        return Path(env_root) / path
    if data_root is not None:
        return Path(data_root) / path
    return path


def _ensure_unique_names(adata: ad.AnnData, cfg: TableConfig, path: Path) -> ad.AnnData:
    """
    Ensure obs_names and var_names are unique, logging what we do.
    """
    if not adata.obs_names.is_unique:
        logger.warning(
            "Row names are not unique for table '%s' (%s); calling .obs_names_make_unique()",
            cfg.name,
            path,
        )
        adata.obs_names_make_unique()

    if not adata.var_names.is_unique:
        logger.warning(
            "Column names are not unique for table '%s' (%s); calling .var_names_make_unique()",
            cfg.name,
            path,
        )
        adata.var_names_make_unique()

    return adata


def _validate_id_column(frame: pd.DataFrame, column: Optional[str], axis: str, cfg: TableConfig, path: Path) -> None:
    """
    An id column is optional, but if configured it must exist and hold integers.
    """
    if column is None:
        return
    if column not in frame.columns:
        msg = f"Table '{cfg.name}': {axis}_id_column='{column}' not found in .{'obs' if axis == 'row' else 'var'}"
        logger.error(msg, extra={"table": cfg.name, "path": str(path), "column": column})
        raise TableConfigError(msg)
    if not pd.api.types.is_integer_dtype(frame[column]):
        msg = f"Table '{cfg.name}': {axis}_id_column='{column}' must hold integer ids"
        logger.error(msg, extra={"table": cfg.name, "path": str(path), "column": column})
        raise TableConfigError(msg)


def from_config(
    cfg: TableConfig,
    *,
    data_root: Optional[Path] = None,
    idtype_registry: Optional[IDTypeRegistry] = None,
) -> Table:
    """
    Materialise an AnnData-backed root Table from a TableConfig.

    :raises TableConfigError: if the file is missing or an id column is invalid
    """
    path = _resolve_path(cfg, data_root)
    if not path.is_file():
        raise TableConfigError(f"AnnData file not found at {path}.")

    adata = ad.read_h5ad(path)
    adata = _ensure_unique_names(adata, cfg, path)

    _validate_id_column(adata.obs, cfg.row_id_column, "row", cfg, path)
    _validate_id_column(adata.var, cfg.col_id_column, "col", cfg, path)

    provider = AnnDataProvider(
        adata,
        name=cfg.key,
        row_id_column=cfg.row_id_column,
        col_id_column=cfg.col_id_column,
    )
    desc = TableDesc(
        id=cfg.key,
        name=cfg.name,
        rowtype=cfg.row_idtype,
        coltype=cfg.col_idtype,
        value_type=cfg.value_type,
    )

    logger.info(
        "Loaded table",
        extra={"table": cfg.key, "path": str(path), "n_rows": adata.n_obs, "n_cols": adata.n_vars},
    )
    return Table(provider, desc, idtype_registry=idtype_registry)
