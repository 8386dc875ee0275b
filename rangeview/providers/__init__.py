"""
Data providers: whatever resolves concrete values, names and ids for a root table.
"""

from .base_provider import DataProvider
from .anndata_provider import AnnDataProvider

__all__ = ["AnnDataProvider", "DataProvider"]
