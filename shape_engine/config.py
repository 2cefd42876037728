"""
Engine settings.

Settings are explicit values passed to the components that need them.
from_env() reads SHAPE_ENGINE_* environment variables, e.g.:

    SHAPE_ENGINE_LOG_LEVEL=DEBUG
    SHAPE_ENGINE_FAIL_FAST=1
    SHAPE_ENGINE_LIBRARY_PATH=/srv/shapes
"""

import os
from typing import Optional

from pydantic import BaseModel, Field

ENV_PREFIX = "SHAPE_ENGINE_"

_TRUE_VALUES = {"1", "true", "yes", "on"}


class EngineSettings(BaseModel):
    """Tunables for the registry, loader and service."""
    log_level: str = "INFO"
    log_dir: Optional[str] = None
    fail_fast: bool = False  # Re-raise load failures instead of recording them
    grid_size: int = Field(default=10, gt=0)
    port_snap_distance: float = Field(default=20.0, gt=0)
    handle_hit_threshold: float = Field(default=6.0, gt=0)
    library_path: Optional[str] = None  # Extra directory of shape configs
    host: str = "127.0.0.1"
    port: int = 8765

    @classmethod
    def from_env(cls, environ: Optional[dict[str, str]] = None) -> "EngineSettings":
        """Build settings from SHAPE_ENGINE_* environment variables."""
        env = os.environ if environ is None else environ
        values: dict = {}
        for name, field in cls.model_fields.items():
            raw = env.get(f"{ENV_PREFIX}{name.upper()}")
            if raw is None:
                continue
            if field.annotation is bool:
                values[name] = raw.strip().lower() in _TRUE_VALUES
            else:
                values[name] = raw
        return cls(**values)
