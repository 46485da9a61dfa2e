"""Game configuration."""

from __future__ import annotations

import os
from typing import Any, Dict

from pydantic import BaseModel, Field, model_validator

_ENV_FIELDS = {
    "grid_size": "SEABATTLE_GRID_SIZE",
    "max_ship_size": "SEABATTLE_MAX_SHIP_SIZE",
    "placement_retries": "SEABATTLE_PLACEMENT_RETRIES",
    "seed": "SEABATTLE_SEED",
}


class GameConfig(BaseModel):
    """Board and fleet settings for one match."""

    grid_size: int = Field(default=8, ge=4)
    max_ship_size: int = Field(default=4, ge=1)
    placement_retries: int = Field(default=30, ge=1)
    seed: int | None = None

    @model_validator(mode="after")
    def _fleet_fits(self) -> "GameConfig":
        if self.max_ship_size > self.grid_size:
            raise ValueError("max_ship_size cannot exceed grid_size.")
        return self

    @classmethod
    def from_env(cls, **overrides: Any) -> "GameConfig":
        """Read ``SEABATTLE_*`` variables; keyword overrides win."""
        data: Dict[str, Any] = {}
        for field, name in _ENV_FIELDS.items():
            value = os.getenv(name)
            if value is not None and value.strip():
                data[field] = value.strip()
        data.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**data)
