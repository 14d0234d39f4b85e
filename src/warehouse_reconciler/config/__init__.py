"""Configuration: warehouse.toml models and loader.

Usage:
    from warehouse_reconciler.config import load_config

    config = load_config()
    profile = config.profiles["prod"]
"""

from warehouse_reconciler.config.loader import load_config
from warehouse_reconciler.config.models import ConnectionProfile, PoolSettings, WarehouseConfig

__all__ = [
    "ConnectionProfile",
    "PoolSettings",
    "WarehouseConfig",
    "load_config",
]
