"""Catalog storage adapters.

The JSON-file store is the system of record; the abstract base keeps the
HTTP layer independent of how entries are persisted.
"""

from algo_catalog.adapters.storage.base import AbstractCatalogStore
from algo_catalog.adapters.storage.json_file import JsonFileCatalogStore

__all__ = ["AbstractCatalogStore", "JsonFileCatalogStore"]
