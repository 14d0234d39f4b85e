"""Pydantic models for connection configuration."""

from pydantic import BaseModel, Field


# ============================================================================
# Configuration Models
# ============================================================================


class ConnectionProfile(BaseModel):
    """Connection profile from warehouse.toml."""

    url: str
    description: str = ""
    password: str | None = None  # For [YOUR-PASSWORD] placeholder substitution


class PoolSettings(BaseModel):
    """Connection pool bounds passed to the SQLAlchemy engine."""

    size: int = Field(default=2, ge=1)
    max_overflow: int = Field(default=0, ge=0)
    pre_ping: bool = True

    def engine_kwargs(self) -> dict[str, int | bool]:
        return {
            "pool_size": self.size,
            "max_overflow": self.max_overflow,
            "pool_pre_ping": self.pre_ping,
        }


class WarehouseConfig(BaseModel):
    """Complete configuration from warehouse.toml."""

    profiles: dict[str, ConnectionProfile] = Field(default_factory=dict)
    pool: PoolSettings = Field(default_factory=PoolSettings)
