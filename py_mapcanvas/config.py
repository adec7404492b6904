"""Configuration management."""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings pulled from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="MAPCANVAS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="console", description="Logging format (console or json)")

    # Map Generation Configuration
    default_width: int = Field(default=800, description="Default map width")
    default_height: int = Field(default=600, description="Default map height")
    min_map_size: int = Field(default=50, description="Smallest accepted width or height")
    max_map_width: int = Field(default=4000, description="Max allowed map width")
    max_map_height: int = Field(default=4000, description="Max allowed map height")
    point_count: int = Field(default=3000, description="Number of terrain sample points")
    render_mode: str = Field(default="pixel", description="Initial render mode (pixel, voronoi, smooth)")
    seed: Optional[int] = Field(default=None, description="Fixed seed for reproducible maps")


# Instantiate singleton settings object
settings = Settings()
