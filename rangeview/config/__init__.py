"""
Config package for rangeview.

Responsible for:
- config models (GlobalConfig, TableConfig)
- config I/O helpers (load_global_config / load_tables)
"""

from .model import GlobalConfig, TableConfig
from .io import load_global_config, load_tables

__all__ = ["GlobalConfig", "TableConfig", "load_global_config", "load_tables"]
