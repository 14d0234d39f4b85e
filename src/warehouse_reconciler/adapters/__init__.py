"""Catalog adapters package.

Provides the ``CatalogClient`` Protocol and the SQLAlchemy-backed
``SnowflakeCatalogClient`` implementation.

Usage:
    from warehouse_reconciler.adapters import CatalogClient, SnowflakeCatalogClient
"""

from warehouse_reconciler.adapters.base import CatalogClient
from warehouse_reconciler.adapters.snowflake import SnowflakeCatalogClient

__all__ = [
    "CatalogClient",
    "SnowflakeCatalogClient",
]
