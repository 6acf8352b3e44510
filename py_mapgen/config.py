"""Configuration management."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings pulled from environment variables (MAPGEN_*)."""

    model_config = SettingsConfigDict(
        env_prefix="MAPGEN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (plain or json)")

    # Map Generation Configuration
    default_map_width: int = Field(default=100, ge=1, description="Default map width in cells")
    default_map_height: int = Field(default=100, ge=1, description="Default map height in cells")
    max_map_width: int = Field(default=1000, ge=1, description="Max allowed map width")
    max_map_height: int = Field(default=1000, ge=1, description="Max allowed map height")
    default_seed: str = Field(default="default", description="Seed used when none is given")

    # Engine constants
    near_boundary_margin: float = Field(
        default=0.45, gt=0, le=0.5,
        description="Offset from the grid center, as a fraction of the extent, beyond which a cell is near the boundary",
    )
    fill_epsilon: float = Field(
        default=1e-5, gt=0, description="Minimum drop per step after depression filling"
    )


settings = Settings()
