"""
Configuration Schemas
---------------------
Dataclasses describing the YAML configuration, plus the loader.
Acts as the single source of truth for acceleration, data and output settings.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from numbers import Real
from typing import Any
from pathlib import Path
import yaml

from .errors import InvalidConfig
from .validator import validate_keys


@dataclass
class AccelerationConfig:
    """Acceleration factor start/increment (`step`) and ceiling (`max`)."""

    step: float = 0.02
    max: float = 0.2

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        for name in ("step", "max"):
            v = getattr(self, name)
            if isinstance(v, bool) or not isinstance(v, Real):
                raise InvalidConfig(f"acceleration {name} must be a number, got {v!r}")
        if self.step <= 0:
            raise InvalidConfig("acceleration factor must be > 0")
        if self.max <= self.step:
            raise InvalidConfig(
                "maximum acceleration must be greater than acceleration factor"
            )


@dataclass
class DataCfg:
    """Where the high/low series come from and how bars are shaped."""

    tz: str = "America/New_York"
    high_col: str = "high"
    low_col: str = "low"
    resample: str | None = None


@dataclass
class OutputCfg:
    """Output column naming and which state columns to keep."""

    column: str = "sar"
    include_state: bool = True


@dataclass
class Config:
    """Root configuration object."""

    acceleration: AccelerationConfig = field(default_factory=AccelerationConfig)
    data: DataCfg = field(default_factory=DataCfg)
    output: OutputCfg = field(default_factory=OutputCfg)


def _merge_dc(obj: Any, patch: dict[str, Any]) -> Any:
    """Recursively merges a dictionary into a dataclass."""
    if not isinstance(patch, dict):
        return obj
    for k, v in patch.items():
        if not hasattr(obj, k):
            continue
        cur = getattr(obj, k)

        if hasattr(cur, "__dataclass_fields__"):
            # an empty YAML section parses as None; keep the defaults
            if isinstance(v, dict):
                _merge_dc(cur, v)
            elif v is not None:
                raise InvalidConfig(f"Config section '{k}' must be a mapping, got {v!r}")
        else:
            setattr(obj, k, v)
    return obj


def load_config(path: str | Path) -> Config:
    """
    Loads configuration from a YAML file.
    Unknown keys are rejected before merging; the acceleration block is
    re-validated afterwards since setattr bypasses __post_init__.
    """
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(p, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if not isinstance(data, dict):
        raise InvalidConfig(f"Config root must be a mapping, got {type(data).__name__}")

    validate_keys(data, Config)

    cfg = Config()
    _merge_dc(cfg, data)
    cfg.acceleration.validate()

    return cfg
