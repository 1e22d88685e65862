# config.py
"""
Runtime-tunable simulation parameters.

SimulationConfig holds the values an outside controller (a settings panel,
a script, the config file) may change while the simulation runs. The core
reads it once at the start of every tick and never writes to it.
"""
import dataclasses
import enum
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from constants import (
    DEFAULT_BASE_SPEED, DEFAULT_GRAVITY_STRENGTH, DEFAULT_LIFETIME,
    DEFAULT_SPAWN_COUNT, DEFAULT_SPAWN_INTERVAL
)


class Model(enum.Enum):
    """Selects how particles influence each other."""
    COLLISION = "collision"
    FLOCKING = "flocking"

    @classmethod
    def parse(cls, value) -> "Model":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            names = ", ".join(m.value for m in cls)
            msg = f"Configuration error: unknown model '{value}'. Expected one of: {names}."
            logging.critical(msg)
            raise ValueError(msg) from None


@dataclass
class SimulationConfig:
    """
    Parameters of a running simulation.

    Ranges are advisory only; no field is validated against another.
    """
    spawn_interval: float = DEFAULT_SPAWN_INTERVAL
    spawn_count: int = DEFAULT_SPAWN_COUNT
    base_speed: float = DEFAULT_BASE_SPEED
    lifetime: float = DEFAULT_LIFETIME
    gravity_strength: float = DEFAULT_GRAVITY_STRENGTH
    boundary_enabled: bool = True
    model: Model = Model.COLLISION
    seed: Optional[int] = None

    @classmethod
    def from_params(cls, params: Dict[str, Any]) -> "SimulationConfig":
        """Builds a config from the "simulation_parameters" config section."""
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(params) - known)
        if unknown:
            logging.warning(f"Ignoring unknown simulation parameters: {unknown}")

        config = cls(**{k: v for k, v in params.items() if k in known})
        config.model = Model.parse(config.model)
        return config

    def replace(self, **changes) -> "SimulationConfig":
        """Returns a copy with some fields changed."""
        known = {f.name for f in dataclasses.fields(self)}
        unknown = sorted(set(changes) - known)
        if unknown:
            msg = f"Configuration error: unknown simulation parameters {unknown}."
            logging.critical(msg)
            raise ValueError(msg)
        if "model" in changes:
            changes["model"] = Model.parse(changes["model"])
        return dataclasses.replace(self, **changes)
