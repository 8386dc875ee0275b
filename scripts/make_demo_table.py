# scripts/make_demo_table.py

import json
import logging
from pathlib import Path
from typing import Optional

import numpy as np
import pandas as pd
import anndata as ad

from rangeview.config.io import load_tables
from rangeview.logging_config import configure_logging

logger = logging.getLogger("rangeview.scripts.make_demo_table")


def write_demo(root: Path, n_rows: int = 200, n_cols: int = 40) -> Path:
    """
    Write data/demo.h5ad and a matching config/demo/ directory under root.
    Returns the config directory.
    """
    data_dir = root / "data"
    config_dir = root / "config" / "demo"
    data_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / "tables").mkdir(parents=True, exist_ok=True)

    rng = np.random.default_rng(42)

    # ---- values (rows x cols) ----
    X = rng.poisson(lam=2.0, size=(n_rows, n_cols)).astype("float32")

    # ---- obs: row annotations, with stable integer ids ----
    obs = pd.DataFrame(
        {
            "row_id": np.arange(1000, 1000 + n_rows),
            "group": rng.choice(["A", "B", "C"], size=n_rows),
        },
        index=[f"row_{i}" for i in range(n_rows)],
    )

    # ---- var: column annotations ----
    var = pd.DataFrame(
        {"col_id": np.arange(n_cols)},
        index=[f"col_{j}" for j in range(n_cols)],
    )

    adata = ad.AnnData(X=X, obs=obs, var=var)
    out_path = data_dir / "demo.h5ad"
    adata.write_h5ad(out_path)

    (config_dir / "global.json").write_text(
        json.dumps({"title": "rangeview demo", "data_root": "../../data", "default_bins": 20}, indent=2)
    )
    (config_dir / "tables" / "demo.json").write_text(
        json.dumps(
            {
                "name": "Demo",
                "key": "demo",
                "path": "demo.h5ad",
                "row_idtype": "demo_row",
                "col_idtype": "demo_col",
                "row_id_column": "row_id",
                "col_id_column": "col_id",
            },
            indent=2,
        )
    )

    logger.info("Wrote demo table", extra={"path": str(out_path), "shape": list(adata.shape)})
    return config_dir


def main(root: Optional[Path] = None):
    configure_logging()

    # project root = parent of this file's directory
    root = root or Path(__file__).resolve().parent.parent
    config_dir = write_demo(root)

    # load it back the way consumers do, so a broken config fails here
    _, tables = load_tables(config_dir)
    for table in tables:
        logger.info("Demo table ready", extra={"table": table.desc.id, "size": table.size()})
    return tables


if __name__ == "__main__":
    main()
