from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass
class TableConfig:
    """
    Parsed config entry for a single root table.

    Raw keys: name, path, key, row_idtype, col_idtype, row_id_column,
    col_id_column, value_type. Only 'path' is required.
    """
    raw: Dict[str, Any]
    source_path: Path
    index: int

    @property
    def name(self) -> str:
        return self.raw.get("name", f"Table {self.index}")

    @property
    def key(self) -> str:
        """Stable key stored in persisted descriptors."""
        return self.raw.get("key") or self.name

    @property
    def path(self) -> Path:
        return Path(self.raw["path"])

    @property
    def row_idtype(self) -> str:
        return self.raw.get("row_idtype", "_rows")

    @property
    def col_idtype(self) -> str:
        return self.raw.get("col_idtype", "_cols")

    @property
    def row_id_column(self) -> Optional[str]:
        return self.raw.get("row_id_column")

    @property
    def col_id_column(self) -> Optional[str]:
        return self.raw.get("col_id_column")

    @property
    def value_type(self) -> str:
        return self.raw.get("value_type", "real")

    @classmethod
    def from_raw(cls, raw: Dict[str, Any], source_path: Path, index: int) -> TableConfig:
        return cls(raw=raw, source_path=source_path, index=index)


@dataclass
class GlobalConfig:
    title: str
    default_bins: Optional[int] = None
    data_root: Optional[Path] = None
    tables: List[TableConfig] = field(default_factory=list)
